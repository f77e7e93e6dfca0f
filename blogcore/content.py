from __future__ import annotations

import logging
import re

import markdown
from pygments.formatters import HtmlFormatter

from .entry_links import EntryLinkExtension
from .markup import TrustedHtml, escape

logger = logging.getLogger(__name__)

LIST_MARKER_RE = re.compile(r"^(?P<indent>[ \t]*)(?:[-+*]|\d+[.)])\s+")
FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")
DOUBLE_QUOTE_RE = re.compile(r"^(?P<indent>[ \t]*)>>(?!>)(?P<rest>.*)$")

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "codehilite", "sane_lists"]
MARKDOWN_CONFIGS = {"codehilite": {"guess_lang": False, "css_class": "codehilite"}}


def slugify(text: str) -> str:
    text = text.lower()
    text = re.sub(r"[^\w]+", "-", text, flags=re.UNICODE)
    text = text.strip("-_").replace("_", "-")
    return text or "post"


def parse_list(value: str) -> list[str]:
    value = value.strip()
    if value.startswith("[") and value.endswith("]"):
        inner = value[1:-1]
        items = [item.strip().strip("'\"") for item in inner.split(",")]
    else:
        items = [item.strip() for item in value.split(",")]
    return [item for item in items if item]


def parse_front_matter(text: str) -> tuple[dict, str]:
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            end = i
            break
    if end is None:
        return {}, clean_text

    meta = {}
    for line in lines[1:end]:
        line = line.strip()
        if not line or line.startswith("#") or ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip().lower()
        value = value.strip()
        if key in {"tags", "categories"}:
            meta[key] = parse_list(value)
        else:
            meta[key] = value
    body = "\n".join(lines[end + 1 :])
    return meta, body


def extract_title(meta: dict, body: str) -> tuple[str, str]:
    if meta.get("title"):
        return meta["title"], body
    lines = body.splitlines()
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith("# "):
            title = stripped[2:].strip() or "Untitled"
            new_body = "\n".join(lines[i + 1 :]).lstrip()
            return title, new_body
        if stripped:
            break
    return "Untitled", body


def normalize_list_spacing(text: str) -> str:
    lines = text.splitlines()
    out: list[str] = []
    in_fence = False
    fence_marker = ""
    for line in lines:
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(2)
            if not in_fence:
                in_fence = True
                fence_marker = marker
            elif marker == fence_marker:
                in_fence = False
                fence_marker = ""
            out.append(line)
            continue
        if in_fence:
            out.append(line)
            continue
        quote_match = DOUBLE_QUOTE_RE.match(line)
        if quote_match:
            rest = quote_match.group("rest").lstrip()
            if rest:
                line = f'{quote_match.group("indent")}> {rest}'
            else:
                line = f'{quote_match.group("indent")}>'
        list_match = LIST_MARKER_RE.match(line)
        if list_match:
            if not list_match.group("indent"):
                if out and out[-1].strip() and not LIST_MARKER_RE.match(out[-1]):
                    out.append("")
        out.append(line)
    return "\n".join(out)


def render_markdown(raw: str, link_root: str = "") -> TrustedHtml:
    """Convert Markdown source to an HTML fragment that is safe to embed as-is.

    Never raises on malformed input: constructs the parser does not recognise
    come out as literal text. Each call builds its own ``markdown.Markdown``
    so calls can run concurrently.
    """
    if not raw or not raw.strip():
        return TrustedHtml("")
    md = markdown.Markdown(
        extensions=MARKDOWN_EXTENSIONS + [EntryLinkExtension(link_root=link_root)],
        extension_configs=MARKDOWN_CONFIGS,
        output_format="html",
    )
    try:
        return TrustedHtml(md.convert(normalize_list_spacing(raw)))
    except Exception:
        logger.warning("Markdown conversion failed, rendering source as text", exc_info=True)
        return TrustedHtml(f"<pre>{escape(raw).value}</pre>")


def highlight_css(style: str = "default") -> str:
    return HtmlFormatter(style=style).get_style_defs(".codehilite")

