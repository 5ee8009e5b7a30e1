"""Read-only lookups in the study databases: Japanese grammar, listening material and temple lots."""

from __future__ import annotations

import sqlite3
import threading
from dataclasses import dataclass
from typing import Optional


class _Store:
    """One SQLite database holding a single table."""

    _schema = ""

    def __init__(self, db_path):
        self._lock = threading.Lock()
        self._db = sqlite3.connect(db_path, check_same_thread=False)
        with self._lock, self._db:
            self._db.execute(self._schema)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _fetch_one(self, sql: str, params: tuple):
        with self._lock:
            return self._db.execute(sql, params).fetchone()

    def close(self) -> None:
        with self._lock:
            self._db.close()


@dataclass(frozen=True)
class Grammar:
    """One Japanese grammar point."""

    id: int = 0
    tag: str = ""
    name: str = ""
    pronunciation: str = ""
    usage: str = ""
    meaning: str = ""
    explanation: str = ""
    example: str = ""
    grammar_url: str = ""

    def render(self) -> str:
        """Lay the grammar point out as labelled paragraphs."""
        return (
            f"ID:\n{self.id}\n\n标签:\n{self.tag}\n\n语法名:\n{self.name}\n\n"
            f"发音:\n{self.pronunciation}\n\n用法:\n{self.usage}\n\n意思:\n{self.meaning}\n\n"
            f"解说:\n{self.explanation}\n\n示例:\n{self.example}"
        )


_GRAMMAR_COLUMNS = "id, tag, name, pronunciation, usage, meaning, explanation, example, grammar_url"


class GrammarStore(_Store):
    """The grammar table."""

    _schema = (
        "CREATE TABLE IF NOT EXISTS grammar ("
        "id INTEGER PRIMARY KEY NOT NULL, tag TEXT NOT NULL DEFAULT '', "
        "name TEXT NOT NULL DEFAULT '', pronunciation TEXT NOT NULL DEFAULT '', "
        "usage TEXT NOT NULL DEFAULT '', meaning TEXT NOT NULL DEFAULT '', "
        "explanation TEXT NOT NULL DEFAULT '', example TEXT NOT NULL DEFAULT '', "
        "grammar_url TEXT NOT NULL DEFAULT '')"
    )

    def __init__(self, db_path):
        super().__init__(db_path)

    def random_by_tag(self, tag: str) -> Optional[Grammar]:
        """Pick a random grammar point whose tag contains ``tag``, or None."""
        row = self._fetch_one(
            f"SELECT {_GRAMMAR_COLUMNS} FROM grammar WHERE tag LIKE ? ORDER BY RANDOM() LIMIT 1",
            (f"%{tag}%",),
        )
        return Grammar(*row) if row else None

    def random_by_keyword(self, keyword: str) -> Optional[Grammar]:
        """Pick a random grammar point whose name or pronunciation contains ``keyword``, or None."""
        pattern = f"%{keyword}%"
        row = self._fetch_one(
            f"SELECT {_GRAMMAR_COLUMNS} FROM grammar "
            "WHERE (name LIKE ? OR pronunciation LIKE ?) ORDER BY RANDOM() LIMIT 1",
            (pattern, pattern),
        )
        return Grammar(*row) if row else None


@dataclass(frozen=True)
class ListeningItem:
    """One piece of Japanese listening material or a song."""

    id: int = 0
    title: str = ""
    page_url: str = ""
    category: str = ""
    intro: str = ""
    audio_url: str = ""
    content: str = ""
    datetime: str = ""


_ITEM_COLUMNS = "id, title, page_url, category, intro, audio_url, content, datetime"


class ListeningStore(_Store):
    """The item table; categories are "tingli" (listening) and "gequ" (songs)."""

    _schema = (
        "CREATE TABLE IF NOT EXISTS item ("
        "id INTEGER PRIMARY KEY NOT NULL, title TEXT NOT NULL DEFAULT '', "
        "page_url TEXT NOT NULL DEFAULT '', category TEXT NOT NULL DEFAULT '', "
        "intro TEXT NOT NULL DEFAULT '', audio_url TEXT NOT NULL DEFAULT '', "
        "content TEXT NOT NULL DEFAULT '', datetime TEXT NOT NULL DEFAULT '')"
    )

    def __init__(self, db_path):
        super().__init__(db_path)

    def random_by_category(self, category: str) -> Optional[ListeningItem]:
        row = self._fetch_one(
            f"SELECT {_ITEM_COLUMNS} FROM item WHERE category = ? ORDER BY RANDOM() LIMIT 1",
            (category,),
        )
        return ListeningItem(*row) if row else None

    def random_by_category_and_keyword(self, category: str, keyword: str) -> Optional[ListeningItem]:
        """Pick a random item of ``category`` whose title or content contains ``keyword``."""
        pattern = f"%{keyword}%"
        row = self._fetch_one(
            f"SELECT {_ITEM_COLUMNS} FROM item WHERE category = ? "
            "AND (title LIKE ? OR content LIKE ?) ORDER BY RANDOM() LIMIT 1",
            (category, pattern, pattern),
        )
        return ListeningItem(*row) if row else None


class KujiStore(_Store):
    """The explanations of the numbered temple lots."""

    _schema = "CREATE TABLE IF NOT EXISTS kuji (id INTEGER PRIMARY KEY NOT NULL, text TEXT NOT NULL DEFAULT '')"

    def __init__(self, db_path):
        super().__init__(db_path)

    def text(self, number: int) -> str:
        """Return the explanation of lot ``number``; KeyError if there is none."""
        row = self._fetch_one("SELECT text FROM kuji WHERE id = ?", (number,))
        if row is None:
            raise KeyError(f"no lot numbered {number}")
        return row[0]