import pytest

from groupbot.timerbits import (
    Timer,
    chinese_char_to_int,
    chinese_num_to_int,
    filled_cron_timer,
    filled_timer,
)


def _strs(month="12", day_week="-1", hour="12", minute="0", url="", alert="test"):
    return ["", month, day_week, hour, minute, url, alert]


@pytest.mark.parametrize("value", [0, 1, 5, 11, 12, -1])
def test_month_round_trip(value):
    t = Timer()
    t.set_month(value)
    assert t.month() == value


@pytest.mark.parametrize(
    "setter,getter,value",
    [
        ("set_day", "day", 31),
        ("set_day", "day", -1),
        ("set_week", "week", 6),
        ("set_week", "week", -1),
        ("set_hour", "hour", 23),
        ("set_hour", "hour", -1),
        ("set_minute", "minute", 59),
        ("set_minute", "minute", -1),
    ],
)
def test_fields_round_trip(setter, getter, value):
    t = Timer()
    getattr(t, setter)(value)
    assert getattr(t, getter)() == value


def test_fields_are_independent():
    t = Timer()
    t.set_month(3)
    t.set_day(17)
    t.set_week(2)
    t.set_hour(9)
    t.set_minute(45)
    t.set_enabled(True)
    assert (t.month(), t.day(), t.week(), t.hour(), t.minute()) == (3, 17, 2, 9, 45)
    assert t.enabled()
    t.set_enabled(False)
    assert not t.enabled()
    assert (t.month(), t.day(), t.week(), t.hour(), t.minute()) == (3, 17, 2, 9, 45)


def test_info_for_cron_timer():
    t = filled_cron_timer("0 8 * * *", "wake", "", 1, 42)
    assert t.info() == "[42]0 8 * * *"


def test_timer_id_depends_only_on_info():
    a = filled_cron_timer("0 8 * * *", "one", "", 1, 42)
    b = filled_cron_timer("0 8 * * *", "two", "http://a", 2, 42)
    c = filled_cron_timer("0 8 * * *", "one", "", 1, 43)
    assert a.timer_id() == b.timer_id()
    assert a.timer_id() != c.timer_id()
    assert 0 <= a.timer_id() < 2**32


def test_chinese_char_digits_map_to_their_index():
    for index, char in enumerate("零一二三四五六七八九十"):
        assert chinese_char_to_int(char) == index


def test_chinese_char_sunday_and_unknown():
    assert chinese_char_to_int("日") == chinese_char_to_int("天") == 7
    assert chinese_char_to_int("周") == 0


def test_chinese_num_every():
    assert chinese_num_to_int("每") == -1
    assert chinese_num_to_int("每二") == -2


@pytest.mark.parametrize("n", range(0, 100, 7))
def test_chinese_num_arabic_round_trip(n):
    assert chinese_num_to_int(str(n)) == n


def test_chinese_num_single_char_matches_char_mapping():
    assert chinese_num_to_int("五") == chinese_char_to_int("五")


def test_chinese_num_empty_raises():
    with pytest.raises(ValueError):
        chinese_num_to_int("")


def test_filled_timer_valid():
    t = filled_timer(_strs(), 99, 7, False)
    assert t.month() == 12
    assert t.hour() == 12
    assert t.minute() == 0
    assert t.alert == "test"
    assert t.enabled()
    assert (t.self_id, t.group_id) == (99, 7)


def test_filled_timer_match_only_is_not_enabled():
    t = filled_timer(_strs(), 99, 7, True)
    assert not t.enabled()
    assert t.alert == ""
    assert t.group_id == 7
    assert t.info() == filled_timer(_strs(), 99, 7, False).info()


def test_filled_timer_illegal_month():
    t = filled_timer(_strs(month="十三"), 0, 0, False)
    assert t.alert == "月份非法！"
    assert not t.enabled()


def test_filled_timer_illegal_week():
    t = filled_timer(_strs(day_week="周八"), 0, 0, False)
    assert t.alert == "星期非法！"


def test_filled_timer_illegal_hour_and_minute():
    assert filled_timer(_strs(hour="24"), 0, 0, False).alert == "小时非法！"
    assert filled_timer(_strs(minute="60"), 0, 0, False).alert == "分钟非法！"


def test_filled_timer_every_week():
    t = filled_timer(_strs(day_week="每周"), 0, 0, False)
    assert t.week() == -1
    assert t.enabled()


def test_filled_timer_chinese_day_matches_arabic():
    chinese = filled_timer(_strs(day_week="二十三日"), 0, 0, False)
    arabic = filled_timer(_strs(day_week="23日"), 0, 0, False)
    assert chinese.day() == arabic.day() == 23


def test_filled_timer_chinese_hour_matches_arabic():
    chinese = filled_timer(_strs(hour="二十三"), 0, 0, False)
    arabic = filled_timer(_strs(hour="23"), 0, 0, False)
    assert chinese.hour() == arabic.hour() == 23


def test_filled_timer_url():
    t = filled_timer(_strs(url="用http://img.example.com/a.png"), 0, 0, False)
    assert t.url == "http://img.example.com/a.png"
    assert t.enabled()


def test_filled_timer_bad_url():
    t = filled_timer(_strs(url="用ftp://x"), 0, 0, False)
    assert t.url == "illegal"
    assert not t.enabled()


def test_filled_cron_timer_fields():
    t = filled_cron_timer("*/5 * * * *", "hello", "http://x", 3, 4)
    assert (t.cron, t.alert, t.url, t.self_id, t.group_id) == ("*/5 * * * *", "hello", "http://x", 3, 4)
    assert not t.enabled()