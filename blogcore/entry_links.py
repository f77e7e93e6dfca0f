from __future__ import annotations

import xml.etree.ElementTree as etree

from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor

from .utils import join_url

RE_ENTRY_LINK = r"\[(?P<text>[^\]]+)\]\(entry:(?P<target>[^)\s]+)\)"


class EntryLinkProcessor(InlineProcessor):
    def __init__(self, pattern, md, link_root: str):
        super().__init__(pattern, md)
        self.link_root = link_root

    def handleMatch(self, m, data):
        target = m.group("target").strip().strip("/")
        el = etree.Element("a")
        el.set("href", join_url(self.link_root, f"entry/{target}") if self.link_root else f"/entry/{target}")
        el.set("class", "entry-link")
        el.text = m.group("text")
        return el, m.start(0), m.end(0)


class EntryLinkExtension(Extension):
    """Turns ``[text](entry:slug)`` into a link to another entry's page."""

    def __init__(self, link_root: str = "", **kwargs):
        super().__init__(**kwargs)
        self.link_root = link_root

    def extendMarkdown(self, md):
        # Must run before the stock link pattern (160) claims the brackets.
        md.inlinePatterns.register(
            EntryLinkProcessor(RE_ENTRY_LINK, md, self.link_root),
            "entry_link",
            175,
        )
