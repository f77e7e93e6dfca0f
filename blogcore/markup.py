"""Markup values that keep escaped text and trusted HTML apart.

``PlainText`` is anything that came from a data field and must be escaped
before it reaches a document. ``TrustedHtml`` is markup that is already safe
to embed verbatim (rendered Markdown, or text that went through ``escape``).
Views build documents only out of ``TrustedHtml`` parts; the one way to turn
``PlainText`` into ``TrustedHtml`` is ``escape``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from markupsafe import escape as markup_escape


@dataclass(frozen=True)
class PlainText:
    value: str = ""

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TrustedHtml:
    value: str = ""

    def __str__(self) -> str:
        return self.value

    def __html__(self) -> str:
        return self.value

    def __add__(self, other: object) -> "TrustedHtml":
        if not isinstance(other, TrustedHtml):
            return NotImplemented
        return TrustedHtml(self.value + other.value)

    def __bool__(self) -> bool:
        return bool(self.value)


Fragment = Union[PlainText, TrustedHtml]


def escape(text: Union[PlainText, str]) -> TrustedHtml:
    if isinstance(text, PlainText):
        text = text.value
    return TrustedHtml(str(markup_escape(text)))


def as_html(part: Fragment) -> TrustedHtml:
    if isinstance(part, TrustedHtml):
        return part
    return escape(part)


def concat(*parts: Fragment) -> TrustedHtml:
    return TrustedHtml("".join(as_html(part).value for part in parts))


def element(tag: str, *children: Fragment, css_class: str = "") -> TrustedHtml:
    attrs = f' class="{markup_escape(css_class)}"' if css_class else ""
    return TrustedHtml(f"<{tag}{attrs}>{concat(*children).value}</{tag}>")

