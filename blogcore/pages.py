from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .content import extract_title, parse_front_matter, slugify

DEFAULT_ABOUT = "This is a personal blog. Entries are written in Markdown."


@dataclass(frozen=True)
class StaticPage:
    name: str
    title: str
    description: str = ""
    content: str = ""


class StaticPages:
    """Read-only registry of the site's fixed pages, keyed by route name."""

    def __init__(self, pages: Iterable[StaticPage] = ()):
        self._pages = {slugify(page.name): page for page in pages}

    def get(self, name: str) -> Optional[StaticPage]:
        if not name:
            return None
        return self._pages.get(slugify(name))

    def names(self) -> list[str]:
        return sorted(self._pages)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __iter__(self) -> Iterator[StaticPage]:
        return iter(self._pages[name] for name in self.names())

    def __len__(self) -> int:
        return len(self._pages)


def about_page(text: str = "", site_name: str = "") -> StaticPage:
    description = f"About {site_name}" if site_name else "About this site"
    return StaticPage("about", "About", description, text or DEFAULT_ABOUT)


def load_page(path: Path, name: str = "") -> StaticPage:
    raw_text = path.read_text(encoding="utf-8")
    meta, body = parse_front_matter(raw_text)
    title, body = extract_title(meta, body)
    description = meta.get("description") or meta.get("summary") or ""
    return StaticPage(name or slugify(meta.get("slug") or path.stem), title, description, body)


def default_pages(about_text: str = "", about_file: Optional[Path] = None, site_name: str = "") -> StaticPages:
    if about_file is not None and about_file.exists():
        page = load_page(about_file, name="about")
    else:
        page = about_page(about_text, site_name)
    return StaticPages([page])
