from __future__ import annotations

from types import SimpleNamespace
from typing import Dict, List

import pytest

from sitecrawler.core import CrawlConfig, Crawler, PageRecord


class FakeFetcher:
    """Serves canned bodies by URL and records every fetch."""

    def __init__(self, pages: Dict[str, str]):
        self.pages = pages
        self.calls: List[str] = []
        self.closed = False

    def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        return self.pages.get(url, "").encode("utf-8")

    def close(self) -> None:
        self.closed = True


def _page(*hrefs: str, head: str = "") -> str:
    anchors = "".join(f'<a href="{h}">{h}</a>' for h in hrefs)
    return f"<html><head>{head}</head><body>{anchors}</body></html>"


@pytest.fixture
def page():
    """Build an HTML page whose body links to each href given."""
    return _page


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


@pytest.fixture
def make_crawler():
    def _make(pages, start_url="https://x.com/", **options):
        fetcher = FakeFetcher(pages)
        seen: List[PageRecord] = []
        sleeps: List[float] = []
        config = CrawlConfig(start_url=start_url, **options)
        crawler = Crawler(config, on_page=seen.append, fetcher=fetcher, sleep=sleeps.append)
        return SimpleNamespace(crawler=crawler, fetcher=fetcher, seen=seen, sleeps=sleeps)
    return _make
