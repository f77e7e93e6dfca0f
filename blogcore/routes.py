"""Map logical routes to a view plus page metadata.

``resolve`` never raises for an unknown route or a storage outage: both come
back as a ``Failure`` so every caller has to deal with them. Entry routes do
exactly one store lookup; static routes never touch the store.
"""

from __future__ import annotations

import logging
from typing import Optional

from .models import (
    EntryRoute,
    ErrorKind,
    Failure,
    PageMetadata,
    PageType,
    RouteRequest,
    RouteResult,
    StaticRoute,
    Success,
)
from .pages import StaticPages
from .store import EntryStore, StoreUnavailable
from .views import EntryView, StaticView

logger = logging.getLogger(__name__)

ENTRY_PREFIX = "entry"


def is_numeric_key(key: str) -> bool:
    return key.isascii() and key.isdigit()


def lookup_entry(store: EntryStore, key: int | str):
    if isinstance(key, int):
        return store.find_entry_by_id(key)
    if is_numeric_key(key):
        return store.find_entry_by_id(int(key))
    return store.find_entry_by_slug(key)


def resolve_entry(route: EntryRoute, store: EntryStore) -> RouteResult:
    try:
        entry = lookup_entry(store, route.key)
    except (StoreUnavailable, TimeoutError) as e:
        logger.warning("Entry lookup for %r failed: %s", route.key, e)
        return Failure(ErrorKind.UNAVAILABLE, str(e))
    if entry is None:
        logger.debug("No entry for %r", route.key)
        return Failure(ErrorKind.NOT_FOUND, f"entry {route.key}")
    metadata = PageMetadata(entry.title, entry.description, PageType.ENTRY)
    return Success(EntryView(entry), metadata)


def resolve_static(route: StaticRoute, pages: StaticPages) -> RouteResult:
    page = pages.get(route.name)
    if page is None:
        logger.debug("No static page named %r", route.name)
        return Failure(ErrorKind.NOT_FOUND, f"page {route.name}")
    metadata = PageMetadata(page.title, page.description, PageType.STATIC)
    return Success(StaticView(page), metadata)


def resolve(route: RouteRequest, store: EntryStore, pages: StaticPages) -> RouteResult:
    if isinstance(route, EntryRoute):
        return resolve_entry(route, store)
    if isinstance(route, StaticRoute):
        return resolve_static(route, pages)
    raise TypeError(f"Unknown route type: {type(route).__name__}")


def parse_route(path: str) -> Optional[RouteRequest]:
    """``/entry/12`` and ``/entry/my-post`` are entry routes, ``/about`` is static."""
    path = path.split("?", 1)[0].split("#", 1)[0]
    parts = [part for part in path.strip().strip("/").split("/") if part]
    if not parts:
        return None
    last = parts[-1]
    if last.endswith(".html"):
        parts[-1] = last[: -len(".html")]
    if len(parts) == 2 and parts[0] == ENTRY_PREFIX and parts[1]:
        key = parts[1]
        return EntryRoute(int(key) if is_numeric_key(key) else key)
    if len(parts) == 1 and parts[0] and parts[0] != ENTRY_PREFIX:
        return StaticRoute(parts[0])
    return None


def route_path(route: RouteRequest) -> str:
    if isinstance(route, EntryRoute):
        return f"/{ENTRY_PREFIX}/{route.key}"
    return f"/{route.name}"


def resolve_path(path: str, store: EntryStore, pages: StaticPages) -> RouteResult:
    route = parse_route(path)
    if route is None:
        return Failure(ErrorKind.NOT_FOUND, f"path {path}")
    return resolve(route, store, pages)
