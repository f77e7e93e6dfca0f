import datetime as dt

import pytest

from blogcore.models import Entry
from blogcore.pages import StaticPage, StaticPages
from blogcore.render import NavLink, RenderContext
from blogcore.store import MemoryEntryStore, SqliteEntryStore


@pytest.fixture
def hello_entry():
    return Entry(
        id=1,
        title="Hello",
        description="First post",
        content="# Hi\n\nSome *text*.",
        slug="hello",
        created_at=dt.datetime(2014, 3, 1, 12, 0),
        tags=("intro",),
    )


@pytest.fixture
def entries(hello_entry):
    return [
        hello_entry,
        Entry(
            id=2,
            title="Second <b>post</b>",
            description="More & more",
            content="Some `code` here.",
            slug="second",
            created_at=dt.datetime(2014, 4, 1),
        ),
        Entry(id=3, title="Draft", content="not yet", slug="draft", published=False),
    ]


@pytest.fixture
def store(entries):
    return MemoryEntryStore(entries)


@pytest.fixture
def pages():
    return StaticPages([StaticPage("about", "About", "About this blog", "I write *things*.")])


@pytest.fixture
def context():
    return RenderContext(
        site_name="My Blog",
        site_description="Notes",
        base_url="https://blog.example.com",
        nav_links=(NavLink("Home", "/"), NavLink("About", "/about")),
        year=2014,
    )


@pytest.fixture
def sqlite_store(tmp_path, entries):
    store = SqliteEntryStore(tmp_path / "blog.db")
    store.init_schema()
    store.save_all(entries)
    return store
