"""Automatic approval of join requests proved by a timestamp in a GitHub gist."""

from __future__ import annotations

import hashlib
import re
import sqlite3
import threading
import time
from typing import Callable, Optional

import requests

GIST_RAW = "https://gist.githubusercontent.com/{user}/{hash}/raw/{file}"
MAX_SKEW_SECONDS = 600
_TIMEOUT = 30
_INTEGER = re.compile(r"[+-]?[0-9]+")


class MemberStore:
    """Remembers which GitHub user joined as which QQ account."""

    def __init__(self, db_path):
        self._lock = threading.Lock()
        self._db = sqlite3.connect(db_path, check_same_thread=False)
        with self._lock, self._db:
            self._db.execute(
                "CREATE TABLE IF NOT EXISTS member ("
                "qq INTEGER PRIMARY KEY NOT NULL, ghun TEXT NOT NULL)"
            )

    def __enter__(self) -> "MemberStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def has_github_user(self, username: str) -> bool:
        with self._lock:
            row = self._db.execute(
                "SELECT 1 FROM member WHERE ghun = ? LIMIT 1", (username,)
            ).fetchone()
        return row is not None

    def add_member(self, qq: int, username: str) -> None:
        with self._lock, self._db:
            self._db.execute(
                "INSERT OR REPLACE INTO member (qq, ghun) VALUES (?, ?)", (qq, username)
            )

    def close(self) -> None:
        with self._lock:
            self._db.close()


def gist_url(username: str, gist_hash: str, gid: int) -> str:
    """Return the raw gist file URL; the file is named by the MD5 of the group number."""
    file_name = hashlib.md5(str(gid).encode("ascii")).hexdigest()
    return GIST_RAW.format(user=username, hash=gist_hash, file=file_name)


def _http_get(url: str) -> bytes:
    response = requests.get(url, timeout=_TIMEOUT)
    response.raise_for_status()
    return response.content


def verify_gist(
    store: MemberStore,
    qq: int,
    gid: int,
    username: str,
    gist_hash: str,
    fetch: Optional[Callable[[str], bytes]] = None,
    now: Optional[float] = None,
) -> tuple[bool, str]:
    """Check the gist proof of a join request and record the member when it holds.

    Returns ``(True, "")`` on success, else ``(False, reason)``.
    """
    if store.has_github_user(username):
        return False, "该github用户已入群"
    fetch = fetch or _http_get
    url = gist_url(username, gist_hash, gid)
    try:
        data = fetch(url)
    except (requests.RequestException, OSError) as exc:
        return False, "无法连接到gist: " + str(exc)
    text = data.decode("utf-8", errors="replace")
    if not _INTEGER.fullmatch(text):
        return False, "时间戳格式错误: " + text
    stamp = int(text)
    current = int(time.time() if now is None else now)
    if abs(current - stamp) < MAX_SKEW_SECONDS:
        store.add_member(qq, username)
        return True, ""
    return False, "时间戳超时"