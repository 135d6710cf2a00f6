from datetime import date, datetime, timedelta

from dentwise_app.services.slots import (
    format_clock_label,
    format_day_label,
    generate_daily_slots,
    is_weekend,
    next_booking_days,
)

from conftest import MONDAY, SATURDAY, SUNDAY


def test_weekend_days_have_no_slots():
    assert generate_daily_slots(SATURDAY) == []
    assert generate_daily_slots(SUNDAY) == []
    assert is_weekend(SATURDAY) and is_weekend(SUNDAY)


def test_every_weekday_has_sixteen_half_hour_slots():
    expected = [f"{h:02d}:{m:02d}" for h in range(9, 17) for m in (0, 30)]
    for offset in range(5):
        day = MONDAY + timedelta(days=offset)
        slots = generate_daily_slots(day)
        assert slots == expected
        assert len(slots) == 16
        assert slots == sorted(slots)
    assert expected[0] == "09:00"
    assert expected[-1] == "16:30"


def test_datetime_input_ignores_time_component():
    assert generate_daily_slots(datetime(2025, 1, 6, 23, 59)) == generate_daily_slots(MONDAY)
    assert generate_daily_slots(datetime(2025, 1, 4, 8, 0)) == []


def test_clock_label_uses_twelve_hour_wrap():
    assert format_clock_label("00:00") == "12:00 AM"
    assert format_clock_label("09:00") == "9:00 AM"
    assert format_clock_label("11:30") == "11:30 AM"
    assert format_clock_label("12:00") == "12:00 PM"
    assert format_clock_label("13:30") == "1:30 PM"
    assert format_clock_label("23:05") == "11:05 PM"


def test_day_label_is_short_weekday_month_day():
    assert format_day_label(date(2025, 1, 7)) == "Tue, Jan 7"
    assert format_day_label(datetime(2025, 11, 21, 15, 0)) == "Fri, Nov 21"


def test_next_booking_days_start_tomorrow():
    assert next_booking_days(date(2025, 1, 30), count=3) == ["2025-01-31", "2025-02-01", "2025-02-02"]
    assert len(next_booking_days(MONDAY)) == 5
