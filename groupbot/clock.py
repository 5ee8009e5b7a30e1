"""Keeps group reminder timers, stores them in SQLite and sends alerts when they fire."""

from __future__ import annotations

import contextlib
import logging
import sqlite3
import threading
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from groupbot.schedule import next_wake_time, should_fire
from groupbot.timerbits import Timer

log = logging.getLogger(__name__)

Sender = Callable[[int, int, list], None]

_MONTH_NAMES = {
    name: index
    for index, name in enumerate(
        ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"],
        start=1,
    )
}
_DAY_NAMES = {name: index for index, name in enumerate(["sun", "mon", "tue", "wed", "thu", "fri", "sat"])}
_DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}
_SEARCH_DAYS = 366 * 8


def _number(token: str, names: dict, field: str) -> int:
    lowered = token.lower()
    if lowered in names:
        return names[lowered]
    if not token.isascii() or not token.isdigit():
        raise ValueError(f"failed to parse {token!r} in {field!r}")
    return int(token)


def _parse_field(field: str, low: int, high: int, names: dict) -> tuple[frozenset, bool]:
    values: set[int] = set()
    star = False
    for part in field.split(","):
        if not part:
            raise ValueError(f"empty entry in {field!r}")
        range_part, slash, step_part = part.partition("/")
        step = _number(step_part, {}, field) if slash else 1
        if step <= 0:
            raise ValueError(f"step must be positive in {field!r}")
        if range_part in ("*", "?"):
            start, end = low, high
            star = star or step == 1
        else:
            first, dash, last = range_part.partition("-")
            start = _number(first, names, field)
            if dash:
                end = _number(last, names, field)
            else:
                end = high if slash else start
        if start < low or end > high:
            raise ValueError(f"value out of range ({low}-{high}) in {field!r}")
        if start > end:
            raise ValueError(f"beginning of range after end in {field!r}")
        values.update(range(start, end + 1, step))
    return frozenset(values), star


@dataclass(frozen=True)
class CronSchedule:
    """A standard five-field cron schedule: minute, hour, day of month, month, weekday."""

    minutes: frozenset
    hours: frozenset
    days: frozenset
    months: frozenset
    weekdays: frozenset
    day_star: bool
    weekday_star: bool

    @classmethod
    def parse(cls, expr: str) -> "CronSchedule":
        text = expr.strip()
        if text.startswith("@"):
            try:
                text = _DESCRIPTORS[text.lower()]
            except KeyError:
                raise ValueError(f"unrecognized descriptor: {expr!r}") from None
        fields = text.split()
        if len(fields) != 5:
            raise ValueError(f"expected exactly 5 fields, found {len(fields)}: {expr!r}")
        minutes, _ = _parse_field(fields[0], 0, 59, {})
        hours, _ = _parse_field(fields[1], 0, 23, {})
        days, day_star = _parse_field(fields[2], 1, 31, {})
        months, _ = _parse_field(fields[3], 1, 12, _MONTH_NAMES)
        weekdays, weekday_star = _parse_field(fields[4], 0, 6, _DAY_NAMES)
        return cls(minutes, hours, days, months, weekdays, day_star, weekday_star)

    def _day_matches(self, day: date) -> bool:
        in_month = day.day in self.days
        in_week = (day.weekday() + 1) % 7 in self.weekdays
        if self.day_star or self.weekday_star:
            return in_month and in_week
        return in_month or in_week

    def matches(self, when: datetime) -> bool:
        return (
            when.minute in self.minutes
            and when.hour in self.hours
            and when.month in self.months
            and self._day_matches(when.date())
        )

    def next_after(self, when: datetime) -> Optional[datetime]:
        """Return the first matching minute strictly after ``when``, or None if there is none."""
        start = when.replace(second=0, microsecond=0) + timedelta(minutes=1)
        hours = sorted(self.hours)
        minutes = sorted(self.minutes)
        for offset in range(_SEARCH_DAYS):
            day = start.date() + timedelta(days=offset)
            if day.month not in self.months or not self._day_matches(day):
                continue
            for hour in hours:
                for minute in minutes:
                    candidate = datetime(day.year, day.month, day.day, hour, minute, tzinfo=when.tzinfo)
                    if candidate >= start:
                        return candidate
        return None


def alert_message(timer: Timer) -> list:
    """Build the message segments sent when ``timer`` fires: @all, the text and the image."""
    segments = [
        {"type": "at", "data": {"qq": "all"}},
        {"type": "text", "data": {"text": timer.alert}},
    ]
    if timer.url:
        segments.append({"type": "image", "data": {"file": timer.url, "cache": "0"}})
    return segments


_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS timer ("
    "id INTEGER PRIMARY KEY NOT NULL, emdwhm INTEGER NOT NULL, sid INTEGER NOT NULL, "
    "gid INTEGER NOT NULL, alert TEXT NOT NULL, cron TEXT NOT NULL, url TEXT NOT NULL)"
)


class Clock:
    """Runs every registered timer on a background thread and keeps them in SQLite."""

    def __init__(self, db_path, sender: Optional[Sender] = None):
        self._sender = sender
        self._lock = threading.RLock()
        self._timers: dict[int, Timer] = {}
        self._stops: dict[int, threading.Event] = {}
        self._threads: dict[int, threading.Thread] = {}
        self._db = sqlite3.connect(db_path, check_same_thread=False)
        with self._lock:
            self._db.execute(_SCHEMA)
            self._db.commit()
            rows = self._db.execute(
                "SELECT id, emdwhm, sid, gid, alert, cron, url FROM timer"
            ).fetchall()
        for row in rows:
            self.register_timer(Timer(*row), save=False)

    def __enter__(self) -> "Clock":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _send(self, timer: Timer) -> None:
        if self._sender is None:
            return
        try:
            self._sender(timer.self_id, timer.group_id, alert_message(timer))
        except Exception:
            log.exception("[群管]计时器%08x发送失败", timer.id)

    def _stop(self, key: int) -> None:
        event = self._stops.pop(key, None)
        if event is not None:
            event.set()
        self._threads.pop(key, None)

    def _start(self, key: int, target, *args) -> None:
        with self._lock:
            self._stop(key)
            stop = threading.Event()
            thread = threading.Thread(target=target, args=(*args, stop), daemon=True)
            self._stops[key] = stop
            self._threads[key] = thread
        thread.start()

    def _run_cron(self, timer: Timer, schedule: CronSchedule, stop: threading.Event) -> None:
        while not stop.is_set():
            now = datetime.now()
            wake = schedule.next_after(now)
            if wake is None:
                return
            if stop.wait((wake - now).total_seconds()):
                return
            self._send(timer)

    def _run_calendar(self, timer: Timer, stop: threading.Event) -> None:
        while timer.enabled() and not stop.is_set():
            wake = next_wake_time(timer, datetime.now())
            delay = max(0.0, (wake - datetime.now()).total_seconds())
            log.info("[群管]计时器%08x将睡眠%ds", timer.id, int(delay))
            if stop.wait(delay):
                return
            if timer.enabled() and should_fire(timer, datetime.now()):
                self._send(timer)

    def register_timer(self, timer: Timer, save: bool = True) -> bool:
        """Start ``timer``; with ``save`` its ID is computed and it is written to the database.

        Returns False when the cron expression is invalid (the reason goes to ``alert``),
        when storing fails, or when a calendar timer is not enabled.
        """
        if save:
            timer.id = timer.timer_id()
        key = timer.id
        with self._lock:
            existing = self._timers.get(key)
            if existing is not None and existing is not timer:
                existing.set_enabled(False)
                self._stop(key)
        log.info("[群管]注册计时器 %d", key)

        if timer.cron:
            try:
                schedule = CronSchedule.parse(timer.cron)
            except ValueError as exc:
                timer.alert = str(exc)
                return False
            try:
                if save:
                    self.add_timer_to_db(timer)
            except sqlite3.Error:
                log.exception("[群管]计时器保存失败")
                return False
            self.add_timer_to_map(timer)
            self._start(key, self._run_cron, timer, schedule)
            return True

        if save:
            with contextlib.suppress(sqlite3.Error):
                self.add_timer_to_db(timer)
        self.add_timer_to_map(timer)
        if not timer.enabled():
            return False
        self._start(key, self._run_calendar, timer)
        return True

    def cancel_timer(self, key: int) -> bool:
        """Stop and forget the timer with ``key``; False if there is none."""
        with self._lock:
            timer = self._timers.pop(key, None)
            if timer is None:
                return False
            if not timer.cron:
                timer.set_enabled(False)
            self._stop(key)
            try:
                self._db.execute("DELETE FROM timer WHERE id = ?", (key,))
                self._db.commit()
            except sqlite3.Error:
                return False
            return True

    def list_timers(self, group_id: int) -> list:
        """Describe every timer of one group in a readable form, one line each."""
        lines = []
        with self._lock:
            timers = list(self._timers.values())
        for timer in timers:
            if timer.group_id != group_id:
                continue
            info = timer.info()
            text = info[info.index("]") + 1 :] + "\n"
            text = text.replace("-1", "每")
            text = text.replace("月0日0周", "月周天")
            text = text.replace("月0日", "月")
            text = text.replace("日0周", "日")
            lines.append(text)
        return lines

    def get_timer(self, key: int) -> Optional[Timer]:
        with self._lock:
            return self._timers.get(key)

    def add_timer_to_db(self, timer: Timer) -> None:
        with self._lock:
            self._db.execute(
                "INSERT OR REPLACE INTO timer (id, emdwhm, sid, gid, alert, cron, url) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    timer.id,
                    timer.packed,
                    timer.self_id,
                    timer.group_id,
                    timer.alert,
                    timer.cron,
                    timer.url,
                ),
            )
            self._db.commit()

    def add_timer_to_map(self, timer: Timer) -> None:
        with self._lock:
            self._timers[timer.id] = timer

    def close(self) -> None:
        """Stop every timer thread and close the database."""
        with self._lock:
            threads = list(self._threads.values())
            for key in list(self._stops):
                self._stop(key)
        for thread in threads:
            thread.join(timeout=1.0)
        with self._lock:
            self._db.close()