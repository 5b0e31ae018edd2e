"""Command line access to the gallery source.

Examples:
  hitomi-source popular --page 2
  hitomi-source search "female:maid -female:tsundere language:english"
  hitomi-source details https://hitomi.la/manga/some-title-123.html
  hitomi-source pages https://hitomi.la/manga/some-title-123.html
  hitomi-source image-url https://hitomi.la/manga/some-title-123.html --index 0
"""

# ruff: noqa: T201  # CLI intentionally prints results

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
import dataclasses
import sys
import textwrap
from typing import Any

import orjson

from .config import Settings
from .domain.errors import HitomiSourceError
from .observability.logging import configure_logging
from .observability.tracing import init_tracing
from .source import HitomiSource


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hitomi-source",
        description="Query the hitomi.la gallery index",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent(__doc__.split("Examples:", 1)[1]).strip(),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (("popular", "List popular galleries"), ("latest", "List latest galleries")):
        listing = subparsers.add_parser(name, help=help_text)
        listing.add_argument("--page", type=int, default=1, help="1-based result page (default: 1)")

    search = subparsers.add_parser("search", help="Resolve a tag query or a pasted gallery URL")
    search.add_argument("query", help='Space separated terms; prefix a term with "-" to exclude it')
    search.add_argument("--page", type=int, default=1, help="1-based result page (default: 1)")

    details = subparsers.add_parser("details", help="Show gallery metadata")
    details.add_argument("url")

    pages = subparsers.add_parser("pages", help="List gallery pages")
    pages.add_argument("url")

    image = subparsers.add_parser("image-url", help="Resolve the image URL of one gallery page")
    image.add_argument("url")
    image.add_argument("--index", type=int, default=0, help="0-based page index (default: 0)")

    parser.add_argument("--log-level", help="Override LOG_LEVEL for this run")
    return parser


def _to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, list):
        return [_to_jsonable(item) for item in value]
    return value


async def run_command(source: HitomiSource, args: argparse.Namespace) -> Any:
    if args.command == "popular":
        return await source.popular(args.page)
    if args.command == "latest":
        return await source.latest(args.page)
    if args.command == "search":
        return await source.search(args.query, args.page)
    if args.command == "details":
        return await source.gallery_details(args.url)
    if args.command == "pages":
        return await source.page_list(args.url)
    if args.command == "image-url":
        pages = await source.page_list(args.url)
        if not 0 <= args.index < len(pages):
            raise SystemExit(f"Gallery has {len(pages)} pages; index {args.index} is out of range")
        return await source.resolve_page(pages[args.index])
    raise SystemExit(f"Unknown command {args.command!r}")


async def _run(settings: Settings, args: argparse.Namespace) -> Any:
    async with HitomiSource(settings) as source:
        return await run_command(source, args)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_argument_parser().parse_args(argv)
    settings = Settings()  # type: ignore[call-arg]
    configure_logging(args.log_level or settings.log_level, settings.log_json)
    init_tracing()

    try:
        result = asyncio.run(_run(settings, args))
    except HitomiSourceError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(orjson.dumps(_to_jsonable(result), option=orjson.OPT_INDENT_2).decode("utf-8"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
