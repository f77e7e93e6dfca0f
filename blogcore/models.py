from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Mapping, Union

from .utils import parse_bool, parse_datetime

if TYPE_CHECKING:
    from .views import View

EPOCH = dt.datetime(1970, 1, 1)


@dataclass(frozen=True)
class Entry:
    """One blog post. Read-only once built."""

    id: int
    title: str
    description: str = ""
    content: str = ""
    slug: str = ""
    created_at: dt.datetime = EPOCH
    modified_at: dt.datetime = EPOCH
    published: bool = True
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.content is None:
            object.__setattr__(self, "content", "")
        if self.description is None:
            object.__setattr__(self, "description", "")
        object.__setattr__(self, "tags", tuple(self.tags))

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> "Entry":
        created_at = parse_datetime(row.get("created_at"), EPOCH)
        tags_value = row.get("tags") or ""
        if isinstance(tags_value, str):
            tags = tuple(tag.strip() for tag in tags_value.split(",") if tag.strip())
        else:
            tags = tuple(str(tag) for tag in tags_value)
        return cls(
            id=int(row["id"]),
            title=str(row.get("title") or ""),
            description=str(row.get("description") or ""),
            content=str(row.get("content") or ""),
            slug=str(row.get("slug") or ""),
            created_at=created_at,
            modified_at=parse_datetime(row.get("modified_at"), created_at),
            published=parse_bool(row.get("published", True)),
            tags=tags,
        )


class PageType(enum.Enum):
    ENTRY = "entry"
    STATIC = "static"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class PageMetadata:
    page_title: str
    page_description: str
    page_type: PageType


NOT_FOUND_METADATA = PageMetadata("Not found", "The page you requested does not exist.", PageType.NOT_FOUND)


@dataclass(frozen=True)
class EntryRoute:
    key: Union[int, str]


@dataclass(frozen=True)
class StaticRoute:
    name: str


RouteRequest = Union[EntryRoute, StaticRoute]


class ErrorKind(enum.Enum):
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class Success:
    view: "View"
    metadata: PageMetadata

    ok = True


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    detail: str = field(default="", compare=False)

    ok = False


RouteResult = Union[Success, Failure]
