from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from .content import render_markdown
from .markup import PlainText, TrustedHtml, concat, element, escape
from .models import Entry
from .render import RenderContext

if TYPE_CHECKING:
    from .pages import StaticPage

DATE_FMT = "%Y-%m-%d"

RenderedDocument = TrustedHtml


class View(Protocol):
    def render(self, context: RenderContext) -> RenderedDocument:
        ...


def extension_blocks() -> TrustedHtml:
    """Empty footer and post-entry containers other features may fill later."""
    return element("footer") + element("div", css_class="post-entry")


class EntryView:
    def __init__(self, entry: Entry):
        self.entry = entry

    def __repr__(self) -> str:
        return f"EntryView(id={self.entry.id!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, EntryView) and other.entry == self.entry

    def __hash__(self) -> int:
        return hash(("entry", self.entry.id))

    def meta_line(self) -> TrustedHtml:
        entry = self.entry
        parts = [element("span", PlainText(entry.created_at.strftime(DATE_FMT)), css_class="post-date")]
        if entry.tags:
            tags = concat(*(element("span", PlainText(tag), css_class="chip") for tag in entry.tags))
            parts.append(element("span", tags, css_class="post-tags"))
        return element("p", *parts, css_class="post-meta")

    def render(self, context: RenderContext) -> RenderedDocument:
        entry = self.entry
        header = element(
            "header",
            element("h1", PlainText(entry.title)),
            element("h4", PlainText(entry.description)),
            self.meta_line(),
        )
        body = render_markdown(entry.content, link_root=context.base_url)
        return element(
            "article",
            header,
            element("div", body, css_class="main-content"),
            extension_blocks(),
            css_class="entry",
        )


class StaticView:
    def __init__(self, page: "StaticPage"):
        self.page = page

    def __repr__(self) -> str:
        return f"StaticView(name={self.page.name!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, StaticView) and other.page == self.page

    def __hash__(self) -> int:
        return hash(("static", self.page.name))

    def render(self, context: RenderContext) -> RenderedDocument:
        page = self.page
        body = render_markdown(page.content, link_root=context.base_url)
        return element(
            "article",
            element("header", element("h1", PlainText(page.title))),
            element("div", body, css_class="main-content"),
            extension_blocks(),
            css_class=f"static static-{page.name}",
        )


class NotFoundView:
    def __repr__(self) -> str:
        return "NotFoundView()"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NotFoundView)

    def __hash__(self) -> int:
        return hash("not_found")

    def render(self, context: RenderContext) -> RenderedDocument:
        home = escape(context.url("/")).value
        return element(
            "article",
            element("header", element("h1", PlainText("404"))),
            element(
                "div",
                element("p", PlainText("The page you requested does not exist.")),
                TrustedHtml(f'<a class="post-more" href="{home}">Back to home</a>'),
                css_class="main-content",
            ),
            css_class="not-found",
        )
