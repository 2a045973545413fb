"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from sitecrawler.core import CrawlConfig, CrawlStats, Crawler, PageRecord
from sitecrawler.errors import CrawlConfigError
from sitecrawler.fetcher import DEFAULT_USER_AGENT
from sitecrawler.scraper import Scraper


@dataclass(slots=True)
class PageSummary:
    """What the CLI records for each crawled page."""
    url: str
    title: str
    h1: str
    canonical: str
    description: str


class SummarySink:
    """Page sink that keeps a short summary of every page it receives."""

    def __init__(self) -> None:
        self.pages: List[PageSummary] = []

    def __call__(self, page: PageRecord) -> None:
        scraper = Scraper(page.document)
        self.pages.append(PageSummary(
            url=page.url,
            title=scraper.text("title"),
            h1=scraper.text("h1"),
            canonical=scraper.attr("link[rel='canonical']", "href"),
            description=scraper.attr("meta[name='description']", "content"),
        ))


def print_summary(stats: CrawlStats) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Fetches:                {stats.fetches}\n")
    sys.stderr.write(f"Pages parsed:           {stats.pages}\n")
    sys.stderr.write(f"Fetch failures:         {stats.fetch_failures}\n")
    sys.stderr.write(f"Parse failures:         {stats.parse_failures}\n")
    sys.stderr.write(f"URLs discovered:        {stats.discovered}\n")
    sys.stderr.write(f"URLs indexed:           {stats.visited}\n")
    sys.stderr.write("\n")


def write_results(pages: List[PageSummary], out: Optional[str], start_url: str, pretty: bool) -> Optional[Path]:
    """
    Serialise page summaries as JSON.

    out of "-" prints to stdout and returns None. Without out, the file
    goes to crawls/<host>_<timestamp>.json. Returns the path written.
    """
    json_text = json.dumps([asdict(p) for p in pages], ensure_ascii=False, indent=2 if pretty else None)

    if out == "-":
        print(json_text)
        return None

    if out:
        path = Path(out)
    else:
        host = (urlparse(start_url).hostname or "unknown").replace(".", "_")
        path = Path("crawls") / f"{host}_{datetime.now():%Y%m%d_%H%M%S}.json"

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json_text, encoding="utf-8")
    return path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Crawl same-origin links from a URL until a fetch budget is spent."
    )
    parser.add_argument("start_url", help="Start URL (e.g. https://example.com/)")
    parser.add_argument("--max-fetches", type=int, default=100, help="Maximum pages to fetch (default: 100)")
    parser.add_argument("--delay-ms", type=int, default=0, help="Pause before every request in ms (default: 0)")
    parser.add_argument(
        "--ignore-query-params",
        action="store_true",
        help="Drop query strings from discovered links",
    )
    parser.add_argument(
        "--skip-invalid-links",
        action="store_true",
        help="Skip unparsable links instead of aborting the crawl",
    )
    parser.add_argument("--timeout", type=float, default=15.0, help="Request timeout in seconds (default: 15)")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--out", help="Output file path, or '-' for stdout (default: auto-generated in crawls/)")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--verbose", action="store_true", help="Show progress and summary")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    sink = SummarySink()
    try:
        config = CrawlConfig(
            start_url=args.start_url,
            max_fetches=args.max_fetches,
            delay_s=args.delay_ms / 1000.0,
            ignore_query_params=args.ignore_query_params,
            timeout_s=args.timeout,
            user_agent=args.user_agent,
            skip_invalid_links=args.skip_invalid_links,
        )
        with Crawler(config, on_page=sink) as crawler:
            stats = crawler.begin()
    except CrawlConfigError as e:
        sys.stderr.write(f"error: {e}\n")
        return 2

    if args.verbose:
        print_summary(stats)

    path = write_results(sink.pages, args.out, args.start_url, args.pretty)
    if path is not None and args.verbose:
        sys.stderr.write(f"Results written to: {path}\n")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
