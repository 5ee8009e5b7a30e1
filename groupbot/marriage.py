"""Daily group marriage register: couples, favorability between members and skill cooldowns."""

from __future__ import annotations

import sqlite3
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

DEFAULT_COOLDOWN_HOURS = 12.0
MODE_FREE_LOVE = "自由恋爱"
MODE_NTR = "牛头人"

_UPDATEINFO = "updateinfo"
_FAVORABILITY = "favorability"
_CDSHEET = "cdsheet"
_GROUP_PREFIX = "group"


class Status(Enum):
    """A member's marital status for the day."""

    SINGLE = "单"
    HUSBAND = "攻"
    WIFE = "受"


@dataclass(frozen=True)
class Couple:
    """One marriage certificate: ``user`` married ``target`` at ``updatetime``."""

    user: int
    target: int
    username: str
    targetname: str
    updatetime: str


def _today() -> str:
    return datetime.now().strftime("%Y/%m/%d")


def _group_table(gid: int) -> str:
    return f'"{_GROUP_PREFIX}{int(gid)}"'


class Registry:
    """The register office, kept in one SQLite database."""

    def __init__(self, db_path):
        self._lock = threading.RLock()
        self._db = sqlite3.connect(db_path, check_same_thread=False)
        with self._lock, self._db:
            self._create_shared_tables()

    def __enter__(self) -> "Registry":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _create_shared_tables(self) -> None:
        self._db.execute(
            f"CREATE TABLE IF NOT EXISTS {_UPDATEINFO} ("
            "gid INTEGER PRIMARY KEY NOT NULL, updatetime TEXT NOT NULL, "
            "canmatch INTEGER NOT NULL, canntr INTEGER NOT NULL, cdtime REAL NOT NULL)"
        )
        self._db.execute(
            f"CREATE TABLE IF NOT EXISTS {_FAVORABILITY} ("
            "userinfo TEXT PRIMARY KEY NOT NULL, favor INTEGER NOT NULL)"
        )
        self._db.execute(
            f"CREATE TABLE IF NOT EXISTS {_CDSHEET} ("
            "time INTEGER NOT NULL, groupid INTEGER NOT NULL, "
            "userid INTEGER NOT NULL, modeid INTEGER NOT NULL)"
        )

    def _ensure_group(self, gid: int) -> str:
        table = _group_table(gid)
        self._db.execute(
            f"CREATE TABLE IF NOT EXISTS {table} ("
            "user INTEGER PRIMARY KEY NOT NULL, target INTEGER NOT NULL, "
            "username TEXT NOT NULL, targetname TEXT NOT NULL, updatetime TEXT NOT NULL)"
        )
        return table

    def _info(self, gid: int):
        self._create_shared_tables()
        return self._db.execute(
            f"SELECT updatetime, canmatch, canntr, cdtime FROM {_UPDATEINFO} WHERE gid = ?",
            (gid,),
        ).fetchone()

    def _insert_info(self, gid: int, updatetime: str, canmatch: int, canntr: int, cdtime: float) -> None:
        self._db.execute(
            f"INSERT OR REPLACE INTO {_UPDATEINFO} (gid, updatetime, canmatch, canntr, cdtime) "
            "VALUES (?, ?, ?, ?, ?)",
            (gid, updatetime, canmatch, canntr, cdtime),
        )

    def open_day(self, gid: int) -> bool:
        """Start a new day for the group if needed; True when the roster was (re)opened."""
        today = _today()
        with self._lock, self._db:
            row = self._info(gid)
            if row is None:
                self._insert_info(gid, today, 1, 1, DEFAULT_COOLDOWN_HOURS)
                return True
            if row[0] == today:
                return False
            self._db.execute(f"DROP TABLE IF EXISTS {_group_table(gid)}")
            self._db.execute(
                f"UPDATE {_UPDATEINFO} SET updatetime = ? WHERE gid = ?", (today, gid)
            )
            return True

    def modes(self, gid: int) -> tuple[bool, bool]:
        """Return whether free love and NTR are allowed in the group."""
        with self._lock, self._db:
            row = self._info(gid)
            if row is None:
                self._insert_info(gid, "", 1, 1, DEFAULT_COOLDOWN_HOURS)
                return True, True
            return bool(row[1]), bool(row[2])

    def set_mode(self, gid: int, mode: str, enabled: bool) -> None:
        """Allow or forbid ``mode`` (free love or NTR) in the group."""
        if mode not in (MODE_FREE_LOVE, MODE_NTR):
            raise ValueError("错误:修改内容不匹配！")
        flag = 1 if enabled else 0
        column = "canmatch" if mode == MODE_FREE_LOVE else "canntr"
        with self._lock, self._db:
            row = self._info(gid)
            if row is None:
                canmatch = flag if mode == MODE_FREE_LOVE else 1
                canntr = flag if mode == MODE_NTR else 1
                self._insert_info(gid, "", canmatch, canntr, DEFAULT_COOLDOWN_HOURS)
                return
            self._db.execute(f"UPDATE {_UPDATEINFO} SET {column} = ? WHERE gid = ?", (flag, gid))

    def _tables(self) -> list[str]:
        rows = self._db.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
        return [name for (name,) in rows]

    def reset_rosters(self, gid) -> None:
        """Drop one group's roster, or every table but favorability when ``gid`` is "0"."""
        key = str(gid).strip()
        if key != "0" and not key.lstrip("-").isdigit():
            raise ValueError(f"invalid group id: {gid!r}")
        today = _today()
        with self._lock, self._db:
            tables = self._tables()
            if key != "0":
                name = _GROUP_PREFIX + key
                tables = [name] if name in tables else []
            others = [t for t in tables if not t.startswith(_GROUP_PREFIX) and t != _FAVORABILITY]
            groups = [t for t in tables if t.startswith(_GROUP_PREFIX)]
            for table in others:
                self._db.execute(f'DROP TABLE IF EXISTS "{table}"')
            self._create_shared_tables()
            for table in groups:
                self._db.execute(f'DROP TABLE IF EXISTS "{table}"')
                suffix = table[len(_GROUP_PREFIX):]
                group_id = int(suffix) if suffix.lstrip("-").isdigit() else 0
                self._insert_info(group_id, today, 1, 1, DEFAULT_COOLDOWN_HOURS)

    def lookup(self, gid: int, uid: int) -> tuple[Optional[Couple], Status]:
        """Return the member's certificate and whether they married (攻) or were married (受)."""
        with self._lock, self._db:
            table = self._ensure_group(gid)
            columns = "user, target, username, targetname, updatetime"
            row = self._db.execute(f"SELECT {columns} FROM {table} WHERE user = ?", (uid,)).fetchone()
            if row is not None:
                return Couple(*row), Status.HUSBAND
            row = self._db.execute(f"SELECT {columns} FROM {table} WHERE target = ?", (uid,)).fetchone()
            if row is not None:
                return Couple(*row), Status.WIFE
            return None, Status.SINGLE

    def register(self, gid: int, uid: int, target: int, username: str, targetname: str) -> None:
        """Record that ``uid`` married ``target`` today; a target of 0 means a proud single."""
        with self._lock, self._db:
            table = self._ensure_group(gid)
            self._db.execute(
                f"INSERT OR REPLACE INTO {table} (user, target, username, targetname, updatetime) "
                "VALUES (?, ?, ?, ?, ?)",
                (uid, target, username, targetname, datetime.now().strftime("%H:%M:%S")),
            )

    def divorce_wife(self, gid: int, wife: int) -> None:
        with self._lock, self._db:
            table = self._ensure_group(gid)
            self._db.execute(f"DELETE FROM {table} WHERE target = ?", (wife,))

    def divorce_husband(self, gid: int, husband: int) -> None:
        with self._lock, self._db:
            table = self._ensure_group(gid)
            self._db.execute(f"DELETE FROM {table} WHERE user = ?", (husband,))

    def roster(self, gid: int) -> list[tuple[str, str, str, str]]:
        """List today's couples as (username, user, targetname, target), singles left out."""
        with self._lock, self._db:
            table = self._ensure_group(gid)
            rows = self._db.execute(
                f"SELECT username, user, targetname, target FROM {table} GROUP BY user"
            ).fetchall()
        return [
            (username, str(user), targetname, str(target))
            for username, user, targetname, target in rows
            if target != 0
        ]

    def _find_favor(self, uid: int, target: int):
        return self._db.execute(
            f"SELECT userinfo, favor FROM {_FAVORABILITY} WHERE userinfo GLOB ? LIMIT 1",
            (f"*{uid}+{target}*",),
        ).fetchone()

    def _insert_favor(self, uid: int, target: int, favor: int) -> None:
        self._db.execute(
            f"INSERT OR REPLACE INTO {_FAVORABILITY} (userinfo, favor) VALUES (?, ?)",
            (f"{uid}+{target}+{uid}", favor),
        )

    def favorability(self, uid: int, target: int) -> int:
        """Return the favorability between two members, either way round."""
        with self._lock, self._db:
            self._create_shared_tables()
            row = self._find_favor(uid, target)
            if row is None:
                self._insert_favor(uid, target, 0)
                return 0
            return row[1]

    def add_favorability(self, uid: int, target: int, score: int) -> int:
        """Add ``score`` to the favorability, kept within 0..100, and return the new value."""
        with self._lock, self._db:
            self._create_shared_tables()
            row = self._find_favor(uid, target)
            if row is None:
                self._insert_favor(uid, target, score)
                return score
            key, favor = row
            favor = min(100, max(0, favor + score))
            self._db.execute(
                f"UPDATE {_FAVORABILITY} SET favor = ? WHERE userinfo = ?", (favor, key)
            )
            return favor

    def cooldown(self, gid: int) -> float:
        """Return the group's skill cooldown in hours."""
        with self._lock, self._db:
            row = self._info(gid)
            if row is None:
                self._insert_info(gid, "", 1, 1, DEFAULT_COOLDOWN_HOURS)
                return DEFAULT_COOLDOWN_HOURS
            return float(row[3])

    def set_cooldown(self, gid: int, hours: float) -> None:
        with self._lock, self._db:
            row = self._info(gid)
            if row is None:
                self._insert_info(gid, "", 1, 1, hours)
                return
            self._db.execute(f"UPDATE {_UPDATEINFO} SET cdtime = ? WHERE gid = ?", (hours, gid))

    def record_skill(self, gid: int, uid: int, mode: int) -> None:
        """Note that ``uid`` used skill ``mode`` just now."""
        with self._lock, self._db:
            self._create_shared_tables()
            self._db.execute(
                f"INSERT INTO {_CDSHEET} (time, groupid, userid, modeid) VALUES (?, ?, ?, ?)",
                (int(time.time()), gid, uid, mode),
            )

    def skill_ready(self, gid: int, uid: int, mode: int, hours: float) -> bool:
        """Tell whether skill ``mode`` has cooled down; expired records are removed."""
        where = "WHERE groupid = ? AND userid = ? AND modeid = ?"
        params = (gid, uid, mode)
        with self._lock, self._db:
            self._create_shared_tables()
            row = self._db.execute(
                f"SELECT time FROM {_CDSHEET} {where} ORDER BY time LIMIT 1", params
            ).fetchone()
            if row is None:
                return True
            if (time.time() - row[0]) / 3600 > hours:
                self._db.execute(f"DELETE FROM {_CDSHEET} {where}", params)
                return True
            return False

    def close(self) -> None:
        with self._lock:
            self._db.close()