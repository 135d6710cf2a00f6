import importlib


def test_wiring_runs_before_first_request(app):
    app_pkg = importlib.import_module("dentwise_app")
    assert app_pkg.create_app is not None
    with app.test_request_context("/"):
        app.preprocess_request()
    assert "appointment_store" in app.extensions
    assert {"booking", "booking_api"} <= set(app.blueprints)


def test_config_reads_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("DENTWISE_DB_PATH", str(tmp_path / "env.db"))
    monkeypatch.setenv("DENTWISE_AUTO_MIGRATE", "0")
    monkeypatch.setenv("DENTWISE_SEARCH_HORIZON_DAYS", "14")
    monkeypatch.setenv("DENTWISE_BOOKING_DAYS", "not-a-number")
    from dentwise_app import create_app

    app = create_app()
    assert app.config["SEARCH_HORIZON_DAYS"] == 14
    assert app.config["BOOKING_DAYS"] == 5
    assert app.config["SQLALCHEMY_DATABASE_URI"].endswith("env.db")
    assert (tmp_path / "logs").is_dir()
