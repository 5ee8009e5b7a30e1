from datetime import datetime

import pytest

from groupbot.clock import Clock, CronSchedule, alert_message
from groupbot.timerbits import filled_cron_timer, filled_timer

SOURCE_DATE = ["", "12", "-1", "12", "0", "", "test"]


@pytest.fixture
def clock(tmp_path):
    c = Clock(tmp_path / "timer.db", None)
    yield c
    c.close()


def test_timer_added_to_db_is_listed_after_reload(tmp_path):
    path = tmp_path / "test.db"
    first = Clock(path, None)
    try:
        first.add_timer_to_db(filled_timer(SOURCE_DATE, 0, 0, False))
        assert first.list_timers(0) == []
    finally:
        first.close()
    second = Clock(path, None)
    try:
        assert second.list_timers(0) == ["12月1周12:0\n"]
    finally:
        second.close()


def test_register_cron_timer_list_and_cancel(clock):
    t = filled_cron_timer("0 8 * * *", "早安", "", 1, 5)
    assert clock.register_timer(t, True)
    assert t.id == t.timer_id()
    assert clock.get_timer(t.id) is t
    assert clock.list_timers(5) == ["0 8 * * *\n"]
    assert clock.list_timers(6) == []
    assert clock.cancel_timer(t.id)
    assert clock.get_timer(t.id) is None
    assert not clock.cancel_timer(t.id)


def test_register_invalid_cron(clock):
    t = filled_cron_timer("61 * * * *", "bad", "", 1, 7)
    assert not clock.register_timer(t, True)
    assert "61" in t.alert
    assert clock.list_timers(7) == []


def test_register_duplicate_replaces(clock):
    a = filled_cron_timer("0 8 * * *", "a", "", 1, 5)
    b = filled_cron_timer("0 8 * * *", "b", "", 1, 5)
    assert clock.register_timer(a, True)
    assert clock.register_timer(b, True)
    assert clock.get_timer(b.id) is b
    assert len(clock.list_timers(5)) == 1


def test_calendar_timer_register_and_cancel(clock):
    t = filled_timer(SOURCE_DATE, 0, 3, False)
    assert clock.register_timer(t, True)
    assert clock.get_timer(t.id) is t
    key = filled_timer(SOURCE_DATE, 0, 3, True).timer_id()
    assert key == t.id
    assert clock.cancel_timer(key)
    assert not t.enabled()


def test_cron_timer_persists(tmp_path):
    path = tmp_path / "persist.db"
    t = filled_cron_timer("30 9 * * 1", "周会", "http://img.example.com/a.png", 2, 8)
    with Clock(path, None) as first:
        assert first.register_timer(t, True)
    with Clock(path, None) as second:
        loaded = second.get_timer(t.id)
        assert loaded.cron == "30 9 * * 1"
        assert loaded.url == "http://img.example.com/a.png"
        assert loaded.group_id == 8


def test_alert_message_without_url():
    t = filled_cron_timer("0 8 * * *", "hello", "", 0, 1)
    assert alert_message(t) == [
        {"type": "at", "data": {"qq": "all"}},
        {"type": "text", "data": {"text": "hello"}},
    ]


def test_alert_message_with_url():
    t = filled_cron_timer("0 8 * * *", "hello", "http://img.example.com/a.png", 0, 1)
    assert alert_message(t)[-1] == {
        "type": "image",
        "data": {"file": "http://img.example.com/a.png", "cache": "0"},
    }


def test_cron_next_after_daily():
    s = CronSchedule.parse("0 8 * * *")
    assert s.next_after(datetime(2022, 11, 9, 10, 0)) == datetime(2022, 11, 10, 8, 0)
    assert s.next_after(datetime(2022, 11, 9, 7, 59, 30)) == datetime(2022, 11, 9, 8, 0)


def test_cron_step_matches():
    s = CronSchedule.parse("*/15 * * * *")
    assert s.matches(datetime(2022, 11, 9, 10, 30))
    assert not s.matches(datetime(2022, 11, 9, 10, 31))


def test_cron_day_of_month_or_weekday():
    s = CronSchedule.parse("0 0 13 * fri")
    assert s.matches(datetime(2022, 11, 11, 0, 0))
    assert s.matches(datetime(2022, 11, 13, 0, 0))
    assert not s.matches(datetime(2022, 11, 12, 0, 0))


def test_cron_descriptor():
    assert CronSchedule.parse("@daily") == CronSchedule.parse("0 0 * * *")


@pytest.mark.parametrize("expr", ["61 * * * *", "* * *", "* * 0 * *", "*/0 * * * *", "@sometimes", "5-1 * * * *"])
def test_cron_invalid(expr):
    with pytest.raises(ValueError):
        CronSchedule.parse(expr)


def test_cron_next_after_impossible_date_is_none():
    assert CronSchedule.parse("0 0 31 2 *").next_after(datetime(2022, 1, 1)) is None