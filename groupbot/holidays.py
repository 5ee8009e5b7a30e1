"""Countdowns to public holidays and the weekend for the daily slacker reminder."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

HOLIDAY_NAMES = ("元旦", "春节", "清明节", "劳动节", "端午节", "中秋节", "国庆节")
GREETING = (
    "上午好，摸鱼人！\n工作再累，一定不要忘记摸鱼哦！有事没事起身去茶水间，去厕所，"
    "去廊道走走别老在工位上坐着，钱是老板的,但命是自己的。\n"
)
CLOSING = "上班是帮老板赚钱，摸鱼是赚老板的钱！最后，祝愿天下所有摸鱼人，都能愉快的渡过每一天…"
KEY_PREFIX = "holiday/"

_RECORD = re.compile(
    r"\s*([+-]?\d+)(?:_\s*([+-]?\d+)(?:_\s*([+-]?\d+)(?:_\s*([+-]?\d+))?)?)?"
)


@dataclass(frozen=True)
class Holiday:
    """A holiday starting at ``date`` and lasting ``duration``."""

    name: str
    date: datetime
    duration: timedelta = timedelta(0)

    def describe(self, now: Optional[datetime] = None) -> str:
        """Say how long until the holiday, that it is on, or that it is over."""
        if now is None:
            now = datetime.now()
        left = self.date - now
        if left >= timedelta(0):
            return f"距离{self.name}还有: {left.total_seconds() / 86400:.2f}天！"
        if left + self.duration >= timedelta(0):
            return f"好好享受 {self.name} 假期吧!"
        return f"今年 {self.name} 假期已过"


def _make_date(year: int, month: int, day: int) -> datetime:
    """Build a date, carrying out-of-range months and days over; clamped to what datetime holds."""
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    if year < 1:
        return datetime.min
    if year > 9999:
        return datetime.max
    try:
        return datetime(year, month, 1) + timedelta(days=day - 1)
    except OverflowError:
        return datetime.min if day < 1 else datetime.max


def parse_holiday(name: str, record: str) -> Holiday:
    """Read a "dur_year_month_day" record; fields that cannot be read count as 0."""
    match = _RECORD.match(record or "")
    fields = [int(g) if g else 0 for g in match.groups()] if match else [0, 0, 0, 0]
    dur, year, month, day = fields
    return Holiday(name, _make_date(year, month, day), timedelta(days=dur))


def format_holiday(name: str, dur: int, year: int, month: int, day: int) -> tuple[str, str]:
    """Return the registry key and the "dur_year_month_day" record for a holiday."""
    return KEY_PREFIX + name, f"{dur}_{year}_{month}_{day}"


def weekend_message(today: Optional[datetime] = None) -> str:
    if today is None:
        today = datetime.now()
    weekday = (today.weekday() + 1) % 7
    if weekday in (0, 6):
        return "好好享受周末吧！"
    return f"距离周末还有:{5 - weekday}天！"


def daily_message(today: Optional[datetime], holidays: Iterable[Holiday]) -> str:
    """Compose the daily reminder with the weekend and every holiday countdown."""
    if today is None:
        today = datetime.now()
    parts = [today.strftime("%Y-%m-%d"), GREETING, weekend_message(today)]
    for holiday in holidays:
        parts += ["\n", holiday.describe(today)]
    parts += ["\n", CLOSING]
    return "".join(parts)