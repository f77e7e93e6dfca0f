"""Entry storage used by the route resolver.

The resolver only needs keyed lookups. ``MemoryEntryStore`` serves tests and
the static build; ``SqliteEntryStore`` is the database-backed store. Any
failure to reach the backing database is raised as ``StoreUnavailable`` so
callers can tell it apart from a missing entry.
"""

from __future__ import annotations

import datetime as dt
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Optional, Protocol

from .content import extract_title, parse_front_matter, slugify
from .models import EPOCH, Entry
from .utils import parse_bool, parse_datetime, parse_int

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS entries (
    id INTEGER PRIMARY KEY,
    slug TEXT NOT NULL UNIQUE,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    content TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    modified_at TEXT NOT NULL,
    published INTEGER NOT NULL DEFAULT 1,
    tags TEXT NOT NULL DEFAULT ''
)
"""

COLUMNS = "id, slug, title, description, content, created_at, modified_at, published, tags"


class StoreUnavailable(Exception):
    """The backing store could not complete a lookup."""


class EntryStore(Protocol):
    def find_entry_by_id(self, entry_id: int) -> Optional[Entry]:
        ...

    def find_entry_by_slug(self, slug: str) -> Optional[Entry]:
        ...

    def list_entries(self) -> list[Entry]:
        ...


class MemoryEntryStore:
    def __init__(self, entries: Iterable[Entry] = (), include_unpublished: bool = False):
        self.include_unpublished = include_unpublished
        self._by_id = {entry.id: entry for entry in entries}
        self._by_slug = {entry.slug: entry for entry in self._by_id.values() if entry.slug}

    def _visible(self, entry: Optional[Entry]) -> Optional[Entry]:
        if entry is None:
            return None
        if not entry.published and not self.include_unpublished:
            return None
        return entry

    def find_entry_by_id(self, entry_id: int) -> Optional[Entry]:
        return self._visible(self._by_id.get(entry_id))

    def find_entry_by_slug(self, slug: str) -> Optional[Entry]:
        return self._visible(self._by_slug.get(slug))

    def list_entries(self) -> list[Entry]:
        entries = [entry for entry in self._by_id.values() if self._visible(entry)]
        return sorted(entries, key=lambda e: e.created_at, reverse=True)


class SqliteEntryStore:
    def __init__(self, db_path: str | Path, timeout: float = 5.0, include_unpublished: bool = False):
        self.db_path = str(db_path)
        self.timeout = timeout
        self.include_unpublished = include_unpublished

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """One connection per call; sqlite connections are not shared between threads."""
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Database connection failed: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Database query failed: {e}") from e
        finally:
            conn.close()

    def init_schema(self) -> None:
        with self.get_connection() as conn:
            conn.execute(SCHEMA)
            conn.commit()
        logger.info("Entries table ready in %s", self.db_path)

    def save(self, entry: Entry) -> None:
        with self.get_connection() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO entries ({COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    entry.id,
                    entry.slug or str(entry.id),
                    entry.title,
                    entry.description,
                    entry.content,
                    entry.created_at.isoformat(),
                    entry.modified_at.isoformat(),
                    int(entry.published),
                    ",".join(entry.tags),
                ),
            )
            conn.commit()

    def save_all(self, entries: Iterable[Entry]) -> int:
        count = 0
        for entry in entries:
            self.save(entry)
            count += 1
        return count

    def _query_one(self, where: str, value: object) -> Optional[Entry]:
        sql = f"SELECT {COLUMNS} FROM entries WHERE {where} = ?"
        if not self.include_unpublished:
            sql += " AND published = 1"
        with self.get_connection() as conn:
            row = conn.execute(sql, (value,)).fetchone()
        return Entry.from_row(dict(row)) if row else None

    def find_entry_by_id(self, entry_id: int) -> Optional[Entry]:
        return self._query_one("id", entry_id)

    def find_entry_by_slug(self, slug: str) -> Optional[Entry]:
        return self._query_one("slug", slug)

    def list_entries(self) -> list[Entry]:
        sql = f"SELECT {COLUMNS} FROM entries"
        if not self.include_unpublished:
            sql += " WHERE published = 1"
        sql += " ORDER BY created_at DESC"
        with self.get_connection() as conn:
            rows = conn.execute(sql).fetchall()
        return [Entry.from_row(dict(row)) for row in rows]


def parse_entry_file(md_file: Path) -> dict:
    raw_text = md_file.read_text(encoding="utf-8")
    meta, body = parse_front_matter(raw_text)
    title, body = extract_title(meta, body)
    fallback = dt.datetime.fromtimestamp(md_file.stat().st_mtime).replace(microsecond=0)
    created_at = parse_datetime(meta.get("date"), fallback)
    tags = meta.get("tags") or meta.get("categories") or []
    return {
        "id": parse_int(meta.get("id"), 0),
        "title": title,
        "description": meta.get("description") or meta.get("summary") or "",
        "content": body,
        "slug": slugify(meta.get("slug") or md_file.stem),
        "created_at": created_at,
        "modified_at": parse_datetime(meta.get("updated"), created_at),
        "published": not parse_bool(meta.get("draft")),
        "tags": tuple(tags),
    }


def load_entries(posts_dir: Path) -> list[Entry]:
    """Read every Markdown file under ``posts_dir`` into entries.

    Files without an ``id`` in their front matter get the next free id, in
    order of their date. A file repeating an id already taken by an earlier
    file gets a new one, with a warning. Duplicate slugs get a numeric suffix.
    """
    post_files = sorted(posts_dir.rglob("*.md"), key=lambda p: p.as_posix())
    parsed = [(path, parse_entry_file(path)) for path in post_files]
    parsed.sort(key=lambda item: (item[1]["created_at"] or EPOCH, item[1]["slug"]))

    used_ids = {info["id"] for _, info in parsed if info["id"] > 0}
    claimed_ids: set[int] = set()
    used_slugs: set[str] = set()
    next_id = 1
    entries = []
    for path, info in parsed:
        if info["id"] in claimed_ids:
            logger.warning("%s reuses entry id %d, assigning a new id", path, info["id"])
            info["id"] = 0
        if info["id"] <= 0:
            while next_id in used_ids:
                next_id += 1
            info["id"] = next_id
            used_ids.add(next_id)
        claimed_ids.add(info["id"])
        slug = info["slug"]
        if slug in used_slugs:
            counter = 2
            while f"{slug}-{counter}" in used_slugs:
                counter += 1
            slug = f"{slug}-{counter}"
        used_slugs.add(slug)
        info["slug"] = slug
        entries.append(Entry(**info))
    return entries
