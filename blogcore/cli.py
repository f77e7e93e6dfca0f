from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path

from .config import Settings, build_context, build_settings, load_config
from .content import highlight_css
from .models import NOT_FOUND_METADATA, EntryRoute, ErrorKind, Failure, StaticRoute
from .pages import StaticPages, default_pages
from .render import RenderContext, wrap_document, write_text
from .routes import is_numeric_key, resolve, resolve_path
from .store import MemoryEntryStore, SqliteEntryStore, StoreUnavailable, load_entries
from .views import NotFoundView

logger = logging.getLogger(__name__)

EXIT_NOT_FOUND = 1
EXIT_UNAVAILABLE = 2


def open_store(settings: Settings) -> SqliteEntryStore:
    return SqliteEntryStore(
        settings.database,
        timeout=settings.lookup_timeout,
        include_unpublished=settings.include_drafts,
    )


def site_pages(settings: Settings, context: RenderContext) -> StaticPages:
    return default_pages(settings.about_text, settings.about_file, context.site_name)


def command_import(args: argparse.Namespace, settings: Settings, context: RenderContext) -> int:
    posts_dir = Path(args.posts) if args.posts else settings.posts
    if not posts_dir.exists():
        print(f"Posts directory not found: {posts_dir}", file=sys.stderr)
        return EXIT_NOT_FOUND
    entries = load_entries(posts_dir)
    store = open_store(settings)
    try:
        store.init_schema()
        count = store.save_all(entries)
    except StoreUnavailable as exc:
        print(f"Database unavailable: {exc}", file=sys.stderr)
        return EXIT_UNAVAILABLE
    print(f"Imported {count} entries into {settings.database}")
    return 0


def command_render(args: argparse.Namespace, settings: Settings, context: RenderContext) -> int:
    result = resolve_path(args.path, open_store(settings), site_pages(settings, context))
    if isinstance(result, Failure):
        if result.kind is ErrorKind.UNAVAILABLE:
            print(f"Database unavailable: {result.detail}", file=sys.stderr)
            return EXIT_UNAVAILABLE
        print(f"Not found: {args.path}", file=sys.stderr)
        if args.show_404:
            print(wrap_document(NotFoundView().render(context), NOT_FOUND_METADATA, context))
        return EXIT_NOT_FOUND
    print(wrap_document(result.view.render(context), result.metadata, context))
    return 0


def command_build(args: argparse.Namespace, settings: Settings, context: RenderContext) -> int:
    output_dir = Path(args.output) if args.output else settings.output
    pages = site_pages(settings, context)
    if args.posts:
        store = MemoryEntryStore(load_entries(Path(args.posts)), include_unpublished=settings.include_drafts)
    else:
        store = open_store(settings)
    try:
        entries = store.list_entries()
    except StoreUnavailable as exc:
        print(f"Database unavailable: {exc}", file=sys.stderr)
        return EXIT_UNAVAILABLE

    routes = [EntryRoute(entry.slug if entry.slug and not is_numeric_key(entry.slug) else entry.id) for entry in entries]
    routes.extend(StaticRoute(page.name) for page in pages)

    def render_route(route) -> str:
        result = resolve(route, store, pages)
        if isinstance(result, Failure):
            logger.warning("Skipping %r: %s", route, result.kind.value)
            return ""
        if isinstance(route, EntryRoute):
            target = output_dir / "entry" / f"{route.key}.html"
        else:
            target = output_dir / f"{route.name}.html"
        write_text(target, wrap_document(result.view.render(context), result.metadata, context))
        return target.as_posix()

    workers = args.build_workers if args.build_workers > 0 else (os.cpu_count() or 1)
    workers = max(1, min(workers, 32, len(routes) or 1))
    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            written = list(executor.map(render_route, routes))
    else:
        written = [render_route(route) for route in routes]

    write_text(output_dir / "404.html", wrap_document(NotFoundView().render(context), NOT_FOUND_METADATA, context))
    write_text(output_dir / "highlight.css", highlight_css(args.pygments_style))
    built = len([path for path in written if path])
    print(f"Rendered {built} of {len(routes)} pages.")
    return 0 if built == len(routes) else EXIT_UNAVAILABLE


def build_parser(config: dict, config_path: str) -> argparse.ArgumentParser:
    def cfg_str(key: str, default: str) -> str:
        value = config.get(key)
        return default if value is None else str(value)

    parser = argparse.ArgumentParser(description="Render blog entries and pages.")
    parser.add_argument("--config", default=config_path, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument("--database", default="", help="SQLite database of entries (overrides the config file).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Load Markdown posts into the database.")
    import_parser.add_argument("--posts", default="", help="Directory containing Markdown posts.")
    import_parser.set_defaults(handler=command_import)

    render_parser = subparsers.add_parser("render", help="Render one route to stdout.")
    render_parser.add_argument("path", help="Route path, e.g. /entry/1 or /about.")
    render_parser.add_argument(
        "--show-404",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Print the 404 page when the route does not resolve.",
    )
    render_parser.set_defaults(handler=command_render)

    build_parser_ = subparsers.add_parser("build", help="Write every entry and page as HTML files.")
    build_parser_.add_argument("--output", default="", help="Output directory for the site.")
    build_parser_.add_argument(
        "--posts",
        default="",
        help="Render straight from a Markdown directory instead of the database.",
    )
    build_parser_.add_argument(
        "--build-workers",
        default=0,
        type=int,
        help="Number of worker threads for rendering (0 = auto).",
    )
    build_parser_.add_argument(
        "--pygments-style",
        default=cfg_str("pygments_style", "default"),
        help="Pygments style used for highlight.css.",
    )
    build_parser_.set_defaults(handler=command_build)
    return parser


def main(argv: list[str] | None = None) -> int:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    config_path = Path(pre_args.config)
    config = load_config(config_path)

    args = build_parser(config, pre_args.config).parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = build_settings(config, config_path.parent if config_path.exists() else Path("."))
    if args.database:
        settings = replace(settings, database=Path(args.database))
    context = build_context(config)

    start = time.perf_counter()
    code = args.handler(args, settings, context)
    elapsed = time.perf_counter() - start
    logger.debug("%s finished in %.2fs", args.command, elapsed)
    return code
