"""When a calendar timer should wake up next and whether it fires at a given moment."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from groupbot.timerbits import Timer

log = logging.getLogger(__name__)


def _weekday(moment) -> int:
    """Weekday counted from Sunday = 0."""
    return (moment.weekday() + 1) % 7


def _normalized(year, month, day, hour, minute, second, microsecond, tzinfo) -> datetime:
    """Build a datetime, carrying out-of-range fields over as calendar arithmetic does."""
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    base = datetime(year, month, 1, tzinfo=tzinfo)
    return base + timedelta(
        days=day - 1, hours=hour, minutes=minute, seconds=second, microseconds=microsecond
    )


def _add_date(moment: datetime, years: int = 0, months: int = 0, days: int = 0) -> datetime:
    return _normalized(
        moment.year + years,
        moment.month + months,
        moment.day + days,
        moment.hour,
        moment.minute,
        moment.second,
        moment.microsecond,
        moment.tzinfo,
    )


def first_weekday(date: datetime, week: int) -> datetime:
    """Return the first day of ``date``'s month falling on ``week`` (Sunday = 0)."""
    if not 0 <= week <= 6:
        raise ValueError(f"weekday out of range: {week}")
    day = _add_date(date, days=1 - date.day)
    while _weekday(day) != week:
        day = _add_date(day, days=1)
    return day


def next_wake_time(timer: Timer, now: datetime | None = None) -> datetime:
    """Return the moment after ``now`` at which ``timer`` should next be checked."""
    if now is None:
        now = datetime.now()
    month, day, hour, minute, week = (
        timer.month(),
        timer.day(),
        timer.hour(),
        timer.minute(),
        timer.week(),
    )

    unit = timedelta(0)
    if minute >= 0:
        if hour < 0:
            unit = timedelta(hours=1)
        elif day < 0 or week < 0:
            unit = timedelta(days=1)
        elif day == 0:
            delta = timedelta(days=week - _weekday(now))
            if delta < timedelta(0):
                delta = timedelta(days=7)
            unit += delta
        elif month < 0:
            unit = timedelta(microseconds=-1)
    else:
        unit = timedelta(minutes=1)
    log.debug("[timer] unit: %s", unit)

    stable = 0
    if minute < 0:
        minute = now.minute
    if hour < 0:
        hour = now.hour
    else:
        stable |= 0x8
    if day < 0:
        day = now.day
    elif day > 0:
        stable |= 0x4
    else:
        day = now.day
        if week >= 0:
            stable |= 0x2
    if month < 0:
        month = now.month
    else:
        stable |= 0x1

    if stable == 0b0101:
        if timer.day() != now.day or timer.month() != now.month:
            hour = 0
    elif stable == 0b1001:
        if timer.month() != now.month:
            day = 0
    elif stable == 0b0001:
        if timer.month() != now.month:
            day = 0
            hour = 0
    log.debug("[timer] stable: %d m: %d d: %d h: %d mn: %d w: %d", stable, month, day, hour, minute, week)

    date = _normalized(now.year, month, day, hour, minute, now.second, now.microsecond, now.tzinfo)
    if unit > timedelta(0):
        date += unit

    if date <= now:
        if timer.month() < 0:
            if timer.day() > 0 or (timer.day() == 0 and timer.week() >= 0):
                date = _add_date(date, months=1)
            elif timer.day() < 0 or timer.week() < 0:
                if timer.hour() > 0:
                    date = _add_date(date, days=1)
                elif timer.minute() > 0:
                    date += timedelta(hours=1)
        else:
            date = _add_date(date, years=1)

    if stable & 0x8 and date.hour != hour:
        if stable & 0x4 == 0:
            date = _add_date(date, days=1) - timedelta(hours=1)
        elif stable & 0x2 == 0:
            date = _add_date(date, days=7) - timedelta(hours=1)
        else:
            date = _add_date(date, years=1) - timedelta(hours=1)

    if stable & 0x4 and date.day != day:
        date = _add_date(date, years=1, days=-1)

    if stable & 0x2 and _weekday(date) != week:
        date = first_weekday(_add_date(date, years=1), week)

    log.debug("[timer] date: %s", date)
    if date <= now:
        date = now + timedelta(minutes=1)
    return date


def should_fire(timer: Timer, now: datetime | None = None) -> bool:
    """Tell whether ``timer`` matches the calendar moment ``now``."""
    if now is None:
        now = datetime.now()
    if timer.month() >= 0 and timer.month() != now.month:
        return False
    if timer.day() > 0 and timer.day() != now.day:
        return False
    if timer.day() == 0 and timer.week() >= 0 and timer.week() != _weekday(now):
        return False
    if timer.hour() >= 0 and timer.hour() != now.hour:
        return False
    return timer.minute() < 0 or timer.minute() == now.minute