import re

import pytest

from blogcore.markup import TrustedHtml
from blogcore.models import Entry
from blogcore.pages import StaticPage
from blogcore.views import EntryView, NotFoundView, StaticView


def block(html, pattern):
    match = re.search(pattern, html, re.S)
    assert match, f"{pattern!r} not in {html!r}"
    return match.group(1)


def test_entry_document_blocks(hello_entry, context):
    html = EntryView(hello_entry).render(context).value
    header = block(html, r"<header>(.*?)</header>")
    main = block(html, r'<div class="main-content">(.*?)</div>\s*<footer>')
    assert "Hello" in header
    assert "First post" in header
    assert "<h1>Hi</h1>" in main
    assert "<em>text</em>" in main


def test_entry_block_order(hello_entry, context):
    html = EntryView(hello_entry).render(context).value
    assert re.search(r"<article class=\"entry\"><header>.*?</header><div class=\"main-content\">", html, re.S)
    positions = [html.index(tag) for tag in ("<header>", 'class="main-content"', "<footer></footer>")]
    assert positions == sorted(positions)
    assert '<div class="post-entry"></div>' in html


@pytest.mark.parametrize(
    "title,description",
    [
        ("<script>alert(1)</script>", "<b>bold</b>"),
        ("a < b", "x > y & z"),
        ("", ""),
        ('"quoted"', "it's"),
    ],
)
def test_title_and_description_are_escaped(context, title, description):
    entry = Entry(id=7, title=title, description=description, content="body")
    html = EntryView(entry).render(context).value
    for field in (block(html, r"<h1>(.*?)</h1>"), block(html, r"<h4>(.*?)</h4>")):
        assert "<" not in field
        assert ">" not in field


def test_empty_entry_renders(context):
    html = EntryView(Entry(id=1, title="", content="")).render(context).value
    assert '<div class="main-content"></div>' in html


def test_none_content_is_empty(context):
    entry = Entry(id=1, title="x", content=None)
    assert entry.content == ""
    assert isinstance(EntryView(entry).render(context), TrustedHtml)


def test_entry_meta_line(hello_entry, context):
    html = EntryView(hello_entry).render(context).value
    header = block(html, r"<header>(.*?)</header>")
    assert header.index("</h4>") < header.index('class="post-meta"')
    assert '<span class="post-date">2014-03-01</span>' in html
    assert '<span class="chip">intro</span>' in html


def test_entry_links_rooted_at_base_url(context):
    entry = Entry(id=1, title="x", content="[next](entry:second)")
    html = EntryView(entry).render(context).value
    assert 'href="https://blog.example.com/entry/second"' in html


def test_render_does_not_mutate_entry(hello_entry, context):
    before = hello_entry
    EntryView(hello_entry).render(context)
    assert hello_entry == before


def test_static_view(context):
    page = StaticPage("about", "About <me>", "desc", "I *write*.")
    html = StaticView(page).render(context).value
    assert "<h1>About &lt;me&gt;</h1>" in html
    assert "<em>write</em>" in html
    assert "<h4>" not in html
    assert "<footer></footer>" in html


def test_not_found_view(context):
    html = NotFoundView().render(context).value
    assert "404" in html
    assert 'href="https://blog.example.com/"' in html


def test_views_share_render_interface(hello_entry, context):
    views = [EntryView(hello_entry), StaticView(StaticPage("about", "About")), NotFoundView()]
    for view in views:
        assert isinstance(view.render(context), TrustedHtml)
