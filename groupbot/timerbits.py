"""Group reminder timers with month, day, week, hour and minute packed into one integer."""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass

log = logging.getLogger(__name__)

_ENABLED = 0x800000
_ALL_FIELDS = 0xFFFFFF
_MONTH = (0x780000, 19, 0b1111)
_DAY = (0x07C000, 14, 0b11111)
_WEEK = (0x003800, 11, 0b111)
_HOUR = (0x0007C0, 6, 0b11111)
_MINUTE = (0x00003F, 0, 0b111111)

_CHINESE_DIGITS = "零一二三四五六七八九十"
_EVERY = "每"
_ASCII_INT = re.compile(r"[+-]?[0-9]+")


@dataclass(eq=False)
class Timer:
    """A reminder for one group, either calendar based or driven by a cron expression.

    A calendar field holding -1 means "every".
    Weekdays count from Sunday = 0.
    """

    id: int = 0
    packed: int = 0
    self_id: int = 0
    group_id: int = 0
    alert: str = ""
    cron: str = ""
    url: str = ""

    def _field(self, spec: tuple[int, int, int]) -> int:
        mask, shift, every = spec
        value = (self.packed & mask) >> shift
        return -1 if value == every else value

    def _store(self, spec: tuple[int, int, int], value: int) -> None:
        mask, shift, _ = spec
        self.packed = ((value << shift) & mask) | (self.packed & (_ALL_FIELDS & ~mask))

    def enabled(self) -> bool:
        return self.packed & _ENABLED != 0

    def month(self) -> int:
        return self._field(_MONTH)

    def day(self) -> int:
        return self._field(_DAY)

    def week(self) -> int:
        return self._field(_WEEK)

    def hour(self) -> int:
        return self._field(_HOUR)

    def minute(self) -> int:
        return self._field(_MINUTE)

    def set_enabled(self, enabled: bool) -> None:
        if enabled:
            self.packed |= _ENABLED
        else:
            self.packed &= 0x7FFFFF

    def set_month(self, month: int) -> None:
        self._store(_MONTH, month)

    def set_day(self, day: int) -> None:
        self._store(_DAY, day)

    def set_week(self, week: int) -> None:
        self._store(_WEEK, week)

    def set_hour(self, hour: int) -> None:
        self._store(_HOUR, hour)

    def set_minute(self, minute: int) -> None:
        self._store(_MINUTE, minute)

    def info(self) -> str:
        """Return the normalised description the timer ID is derived from."""
        if self.cron:
            return f"[{self.group_id}]{self.cron}"
        return (
            f"[{self.group_id}]{self.month()}月{self.day()}日"
            f"{self.week()}周{self.hour()}:{self.minute()}"
        )

    def timer_id(self) -> int:
        """Return the first four bytes of the MD5 of :meth:`info`, little endian."""
        digest = hashlib.md5(self.info().encode("utf-8")).digest()
        return int.from_bytes(digest[:4], "little")


def filled_cron_timer(cron: str, alert: str, url: str, bot_id: int, group_id: int) -> Timer:
    """Build a timer driven by a cron expression."""
    return Timer(self_id=bot_id, group_id=group_id, alert=alert, cron=cron, url=url)


def _drop_middle_ten(text: str) -> str:
    return text[0] + text[2]


def filled_timer(date_strs, bot_id: int, group_id: int, match_date_only: bool) -> Timer:
    """Build a calendar timer from regex groups (month, day/week, hour, minute, url, alert).

    An invalid field leaves the timer disabled with the reason in ``alert``.
    """
    month_str, day_week, hour_str, minute_str = date_strs[1:5]
    timer = Timer()

    month = chinese_num_to_int(month_str)
    if (month != -1 and month <= 0) or month > 12:
        timer.alert = "月份非法！"
        return timer
    timer.set_month(month)

    if len(day_week) == 4:
        day = chinese_num_to_int(_drop_middle_ten(day_week))
        if (day != -1 and day <= 0) or day > 31:
            timer.alert = "日期非法1！"
            return timer
        timer.set_day(day)
    elif day_week[-1] == "日":
        day = chinese_num_to_int(day_week[:-1])
        if (day != -1 and day <= 0) or day > 31:
            timer.alert = "日期非法2！"
            return timer
        timer.set_day(day)
    elif day_week[0] == _EVERY:
        timer.set_week(-1)
    else:
        week = chinese_num_to_int(day_week[1:])
        if week == 7:
            week = 0
        if not 0 <= week <= 6:
            timer.alert = "星期非法！"
            return timer
        timer.set_week(week)

    if len(hour_str) == 3:
        hour_str = _drop_middle_ten(hour_str)
    hour = chinese_num_to_int(hour_str)
    if hour < -1 or hour > 23:
        timer.alert = "小时非法！"
        return timer
    timer.set_hour(hour)

    if len(minute_str) == 3:
        minute_str = _drop_middle_ten(minute_str)
    minute = chinese_num_to_int(minute_str)
    if minute < -1 or minute > 59:
        timer.alert = "分钟非法！"
        return timer
    timer.set_minute(minute)

    if not match_date_only:
        url_str = date_strs[5]
        if url_str:
            # the group starts with the three-byte "用"
            timer.url = url_str.encode("utf-8")[3:].decode("utf-8", errors="replace")
            log.debug("[群管]%s", timer.url)
            if not timer.url.startswith("http"):
                timer.url = "illegal"
                log.debug("[群管]url非法！")
                return timer
        timer.alert = date_strs[6]
        timer.set_enabled(True)

    timer.self_id = bot_id
    timer.group_id = group_id
    return timer


def chinese_num_to_int(text: str) -> int:
    """Convert a number of at most two Chinese or Arabic digits.

    "每" alone means -1 and "每二" means -2, and so on.
    """
    if not text:
        raise ValueError("empty number")
    first = text[0]
    if first.isdecimal():
        return int(text) if _ASCII_INT.fullmatch(text) else 0
    if first == _EVERY:
        return -chinese_char_to_int(text[1]) if len(text) == 2 else -1
    if len(text) == 1:
        return chinese_char_to_int(first)
    tens = chinese_char_to_int(first)
    if tens != 10:
        tens *= 10
    units = chinese_char_to_int(text[1])
    if units == 10:
        units = 0
    return tens + units


def chinese_char_to_int(char: str) -> int:
    """Map one Chinese digit to 0..10; 日 and 天 (Sunday) map to 7, anything else to 0."""
    if char in ("日", "天"):
        return 7
    index = _CHINESE_DIGITS.find(char)
    return index if index >= 0 and len(char) == 1 else 0