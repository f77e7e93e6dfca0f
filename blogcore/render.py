from __future__ import annotations

import datetime as dt
import html
import re
from dataclasses import dataclass, field
from pathlib import Path

from .markup import TrustedHtml
from .models import PageMetadata
from .utils import join_url

IMG_SRC_RE = re.compile(r'<img([^>]*?)src="([^"]+)"', re.IGNORECASE)
PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")

BASE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{title}}</title>
<meta name="description" content="{{description}}">
<link rel="stylesheet" href="{{root}}/highlight.css">
</head>
<body class="page-{{page_type}}">
<header class="site-header">
<a class="site-name" href="{{root}}/">{{site_name}}</a>
<p class="site-description">{{site_description}}</p>
<nav class="site-nav">{{nav}}</nav>
</header>
<main>{{content}}</main>
<footer class="site-footer">&copy; {{year}} {{site_name}}</footer>
</body>
</html>
"""


@dataclass(frozen=True)
class NavLink:
    title: str
    url: str


@dataclass(frozen=True)
class RenderContext:
    """Site-wide values every view may read."""

    site_name: str = "Blog"
    site_description: str = ""
    base_url: str = ""
    nav_links: tuple[NavLink, ...] = ()
    year: int = field(default_factory=lambda: dt.datetime.now().year)

    def url(self, path: str) -> str:
        if not path.strip("/"):
            return self.base_url.rstrip("/") + "/"
        if not self.base_url:
            return "/" + path.lstrip("/")
        return join_url(self.base_url, path)


def fix_relative_img_src(html_text: str, root: str) -> str:
    def repl(match: re.Match) -> str:
        attrs = match.group(1)
        src = match.group(2)
        if src.startswith(("http://", "https://", "data:", "#", "/", "./", "../")):
            return match.group(0)
        src = src.lstrip("/")
        return f'<img{attrs}src="{root}/{src}"'

    return IMG_SRC_RE.sub(repl, html_text)


def render_template(template: str, **context: str) -> str:
    """Fill `{{key}}` placeholders in one pass; substituted values are never rescanned."""
    return PLACEHOLDER_RE.sub(lambda m: context.get(m.group(1), m.group(0)), template)


def build_nav(context: RenderContext) -> str:
    items = [
        f'<a href="{html.escape(link.url)}">{html.escape(link.title)}</a>'
        for link in context.nav_links
    ]
    return " ".join(items)


def wrap_document(
    document: TrustedHtml,
    metadata: PageMetadata,
    context: RenderContext,
    template: str = BASE_TEMPLATE,
) -> str:
    if metadata.page_title and metadata.page_title != context.site_name:
        title = f"{metadata.page_title} | {context.site_name}"
    else:
        title = context.site_name
    root = context.base_url.rstrip("/")
    content = fix_relative_img_src(document.value, root or ".")
    return render_template(
        template,
        title=html.escape(title),
        description=html.escape(metadata.page_description),
        page_type=metadata.page_type.value,
        root=root,
        site_name=html.escape(context.site_name),
        site_description=html.escape(context.site_description),
        nav=build_nav(context),
        year=str(context.year),
        content=content,
    )


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
