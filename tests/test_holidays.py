from datetime import datetime, timedelta

import pytest

from groupbot.holidays import (
    CLOSING,
    GREETING,
    Holiday,
    daily_message,
    format_holiday,
    parse_holiday,
    weekend_message,
)

CASES_2023 = [
    ("元旦", 1, 2023, 1, 1),
    ("春节", 7, 2023, 1, 21),
    ("清明节", 1, 2023, 4, 5),
    ("劳动节", 1, 2023, 5, 1),
    ("端午节", 1, 2023, 6, 22),
    ("中秋节", 1, 2023, 9, 29),
    ("国庆节", 7, 2023, 10, 1),
]


@pytest.mark.parametrize("name,dur,year,month,day", CASES_2023)
def test_format_and_parse_round_trip(name, dur, year, month, day):
    key, record = format_holiday(name, dur, year, month, day)
    assert key == "holiday/" + name
    assert record == f"{dur}_{year}_{month}_{day}"
    holiday = parse_holiday(name, record)
    assert holiday.name == name
    assert holiday.date == datetime(year, month, day)
    assert holiday.duration == timedelta(days=dur)


def test_describe_before_during_after():
    holiday = parse_holiday("元旦", "1_2023_1_1")
    assert holiday.describe(datetime(2022, 12, 30)) == "距离元旦还有: 2.00天！"
    assert holiday.describe(datetime(2023, 1, 1, 12)) == "好好享受 元旦 假期吧!"
    assert holiday.describe(datetime(2023, 1, 3)) == "今年 元旦 假期已过"


def test_unreadable_record_is_past():
    holiday = parse_holiday("春节", "garbage")
    assert holiday.duration == timedelta(0)
    assert holiday.describe(datetime(2023, 1, 1)) == "今年 春节 假期已过"


def test_weekend_message():
    assert weekend_message(datetime(2023, 1, 7)) == "好好享受周末吧！"
    assert weekend_message(datetime(2023, 1, 1)) == "好好享受周末吧！"
    assert weekend_message(datetime(2023, 1, 2)) == "距离周末还有:4天！"


def test_daily_message_layout():
    today = datetime(2023, 1, 2)
    holidays = [Holiday("元旦", datetime(2023, 1, 1), timedelta(days=1))]
    text = daily_message(today, holidays)
    assert text.startswith("2023-01-02" + GREETING)
    assert text.endswith("\n" + CLOSING)
    assert "\n" + holidays[0].describe(today) + "\n" in text