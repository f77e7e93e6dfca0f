import datetime as dt

import pytest

from blogcore.models import Entry
from blogcore.store import MemoryEntryStore, SqliteEntryStore, StoreUnavailable, load_entries


def test_memory_store_hides_unpublished(entries):
    store = MemoryEntryStore(entries)
    assert store.find_entry_by_id(3) is None
    assert store.find_entry_by_slug("draft") is None
    assert [entry.id for entry in store.list_entries()] == [2, 1]


def test_memory_store_can_include_unpublished(entries):
    store = MemoryEntryStore(entries, include_unpublished=True)
    assert store.find_entry_by_id(3).title == "Draft"


def test_sqlite_round_trip(sqlite_store, hello_entry):
    found = sqlite_store.find_entry_by_id(1)
    assert found == hello_entry
    assert sqlite_store.find_entry_by_slug("hello") == hello_entry


def test_sqlite_missing_and_unpublished(sqlite_store):
    assert sqlite_store.find_entry_by_id(999) is None
    assert sqlite_store.find_entry_by_id(3) is None
    assert [entry.id for entry in sqlite_store.list_entries()] == [2, 1]


def test_sqlite_include_unpublished(sqlite_store):
    store = SqliteEntryStore(sqlite_store.db_path, include_unpublished=True)
    assert store.find_entry_by_id(3).published is False


def test_sqlite_save_replaces(sqlite_store, hello_entry):
    sqlite_store.save(Entry(id=1, title="Changed", slug="hello", created_at=hello_entry.created_at))
    assert sqlite_store.find_entry_by_id(1).title == "Changed"


def test_sqlite_without_schema_is_unavailable(tmp_path):
    store = SqliteEntryStore(tmp_path / "empty.db")
    with pytest.raises(StoreUnavailable):
        store.find_entry_by_id(1)


def test_sqlite_bad_path_is_unavailable(tmp_path):
    store = SqliteEntryStore(tmp_path / "missing" / "dir" / "blog.db")
    with pytest.raises(StoreUnavailable):
        store.find_entry_by_id(1)


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_load_entries(tmp_path):
    posts = tmp_path / "posts"
    write(posts / "first.md", "---\ndate: 2014-01-01\ndescription: One\ntags: a, b\n---\n# First\n\nBody")
    write(posts / "second.md", "---\ntitle: Second\ndate: 2014-02-01\ndraft: true\n---\nText")
    write(posts / "nested" / "pinned.md", "---\nid: 10\ntitle: Pinned\nslug: First\ndate: 2013-01-01\n---\nX")

    entries = {entry.title: entry for entry in load_entries(posts)}
    assert set(entries) == {"First", "Second", "Pinned"}

    first = entries["First"]
    assert first.id == 1
    assert first.slug == "first-2"
    assert first.description == "One"
    assert first.tags == ("a", "b")
    assert first.content == "Body"
    assert first.created_at == dt.datetime(2014, 1, 1)

    assert entries["Second"].id == 2
    assert entries["Second"].published is False
    assert entries["Pinned"].id == 10
    assert entries["Pinned"].slug == "first"


def test_load_entries_reassigns_duplicate_ids(tmp_path, caplog):
    posts = tmp_path / "posts"
    write(posts / "a.md", "---\nid: 5\ntitle: A\ndate: 2014-01-01\n---\nA")
    write(posts / "b.md", "---\nid: 5\ntitle: B\ndate: 2014-02-01\n---\nB")

    with caplog.at_level("WARNING", logger="blogcore.store"):
        entries = {entry.title: entry for entry in load_entries(posts)}

    assert entries["A"].id == 5
    assert entries["B"].id == 1
    assert "reuses entry id 5" in caplog.text
    assert len(MemoryEntryStore(entries.values()).list_entries()) == 2
