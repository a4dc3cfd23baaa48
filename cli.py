import argparse
import asyncio
import json
import sys

import httpx
from rich.console import Console
from rich.markdown import Markdown

from hn_fetch import stories
from hn_fetch.config import get_settings
from hn_fetch.errors import HNFetchError
from hn_fetch.items import ItemStore
from hn_fetch.logging_config import configure_logging
from hn_fetch.models import FetchRequest
from hn_fetch.retriever import ContentRetriever

console = Console()


def print_json(data) -> None:
    console.print_json(json.dumps(data, ensure_ascii=False))


async def main(args) -> int:
    settings = get_settings()

    async with httpx.AsyncClient(timeout=settings.timeout) as client:
        store = ItemStore(client, base_url=settings.base_url, timeout=settings.timeout)
        retriever = ContentRetriever(
            client, user_agent=settings.user_agent, timeout=settings.fetch_timeout
        )

        try:
            if args.command == "top":
                print_json(
                    await stories.get_top_stories(store, args.count, args.include_text)
                )
            elif args.command == "story":
                print_json(
                    await stories.get_story_details(
                        store,
                        retriever,
                        args.story_id,
                        include_comments=args.comments,
                        include_markdown=args.markdown,
                    )
                )
            elif args.command == "comments":
                report = await stories.get_story_comments(
                    store,
                    args.story_id,
                    min_score=args.min_score,
                    max_depth=args.max_depth,
                    limit=args.limit,
                )
                console.print(report, markup=False, highlight=False)
            elif args.command == "search":
                print_json(
                    await stories.search_stories(
                        store, args.query, args.limit, args.hours
                    )
                )
            elif args.command == "fetch":
                fetch = getattr(retriever, f"fetch_{args.mode}")
                result = await fetch(
                    FetchRequest(
                        url=args.url,
                        headers=dict(args.header or []),
                        max_length=args.max_length,
                        start_index=args.start_index,
                    )
                )
                if result.is_error:
                    console.print(f"[red]Error: {result.content}[/]", highlight=False)
                    return 1
                if args.mode == "markdown" and args.render:
                    console.print(Markdown(result.content))
                else:
                    console.print(result.content, markup=False, highlight=False)
        except HNFetchError as e:
            console.print(f"[red]Error: {e}[/]", highlight=False)
            return 1
    return 0


def _header(value: str) -> tuple[str, str]:
    name, sep, val = value.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"Expected 'Name: value', got {value!r}")
    return name.strip(), val.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Hacker News reader and page fetcher")
    parser.add_argument(
        "--log-level", default="WARNING", help="Log level (default: WARNING)"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    top = sub.add_parser("top", help="Show the current top stories")
    top.add_argument(
        "--count", type=int, default=30, help="Number of stories (1-100, default: 30)"
    )
    top.add_argument(
        "--include-text", action="store_true", help="Include story text content"
    )

    story = sub.add_parser("story", help="Show details for one story")
    story.add_argument("story_id", type=int)
    story.add_argument("--comments", action="store_true", help="Include comments")
    story.add_argument(
        "--markdown", action="store_true", help="Include linked page as markdown"
    )

    comments = sub.add_parser("comments", help="Show a story's comment threads")
    comments.add_argument("story_id", type=int)
    comments.add_argument(
        "--min-score", type=int, default=0, help="Minimum comment score (default: 0)"
    )
    comments.add_argument(
        "--max-depth", type=int, default=3, help="Thread depth (1-10, default: 3)"
    )
    comments.add_argument(
        "--limit", type=int, default=20, help="Top-level threads (default: 20)"
    )

    search = sub.add_parser("search", help="Search recent top stories")
    search.add_argument("query")
    search.add_argument(
        "--limit", type=int, default=20, help="Max results (1-50, default: 20)"
    )
    search.add_argument(
        "--hours", type=int, default=24, help="Hours to look back (1-168, default: 24)"
    )

    fetch = sub.add_parser("fetch", help="Fetch a web page")
    fetch.add_argument("url")
    fetch.add_argument(
        "--mode",
        choices=("html", "json", "text", "markdown"),
        default="markdown",
        help="Output format (default: markdown)",
    )
    fetch.add_argument(
        "--header",
        type=_header,
        action="append",
        help="Extra request header as 'Name: value' (repeatable)",
    )
    fetch.add_argument("--max-length", type=int, default=5000)
    fetch.add_argument("--start-index", type=int, default=0)
    fetch.add_argument(
        "--render", action="store_true", help="Pretty-print markdown output"
    )
    return parser


def run() -> None:
    args = build_parser().parse_args()
    configure_logging(args.log_level)
    sys.exit(asyncio.run(main(args)))


if __name__ == "__main__":
    run()
