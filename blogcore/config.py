from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

import yaml

from .render import NavLink, RenderContext
from .utils import parse_bool, parse_float

DEFAULT_NAV = (NavLink("Home", "/"), NavLink("About", "/about"))


@dataclass(frozen=True)
class Settings:
    database: Path = Path("blog.db")
    posts: Path = Path("posts")
    output: Path = Path("dist")
    about_file: Optional[Path] = None
    about_text: str = ""
    include_drafts: bool = False
    lookup_timeout: float = 5.0


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            print(f"Invalid TOML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        return data
    if suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            print(f"Invalid YAML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        if data is None:
            return {}
        if not isinstance(data, dict):
            print(f"YAML config must be a mapping: {path}", file=sys.stderr)
            sys.exit(1)
        return data
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        print(f"Invalid JSON in config file {path}: {exc}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, dict):
        print(f"JSON config must be an object: {path}", file=sys.stderr)
        sys.exit(1)
    return data


def parse_nav(value: object) -> tuple[NavLink, ...]:
    if not isinstance(value, list):
        return DEFAULT_NAV
    links = []
    for item in value:
        if isinstance(item, dict) and item.get("title") and item.get("url"):
            links.append(NavLink(str(item["title"]), str(item["url"])))
    return tuple(links)


def build_context(config: dict) -> RenderContext:
    return RenderContext(
        site_name=str(config.get("site_name") or "Blog"),
        site_description=str(config.get("site_description") or ""),
        base_url=str(config.get("base_url") or "").rstrip("/"),
        nav_links=parse_nav(config.get("nav")),
    )


def build_settings(config: dict, base_dir: Path = Path(".")) -> Settings:
    def cfg_path(key: str, default: str) -> Path:
        path = Path(str(config.get(key) or default))
        return path if path.is_absolute() else base_dir / path

    about_value = str(config.get("about_file") or "").strip()
    return Settings(
        database=cfg_path("database", "blog.db"),
        posts=cfg_path("posts", "posts"),
        output=cfg_path("output", "dist"),
        about_file=cfg_path("about_file", about_value) if about_value else None,
        about_text=str(config.get("about_text") or ""),
        include_drafts=parse_bool(config.get("include_drafts")),
        lookup_timeout=parse_float(config.get("lookup_timeout"), 5.0),
    )
