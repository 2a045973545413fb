"""
Core crawling logic and data structures.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Iterator, List, Optional, Set

from bs4 import BeautifulSoup

from sitecrawler.errors import CrawlConfigError
from sitecrawler.fetcher import DEFAULT_USER_AGENT, Fetcher
from sitecrawler.links import extract_links, origin_of, parse_document, resolve_canonical

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CrawlConfig:
    """Immutable crawl inputs."""
    start_url: str
    max_fetches: int = 100
    delay_s: float = 0.0
    ignore_query_params: bool = False
    timeout_s: float = 15.0
    user_agent: str = DEFAULT_USER_AGENT
    skip_invalid_links: bool = False

    def __post_init__(self) -> None:
        if not self.start_url:
            raise CrawlConfigError("start_url is required")
        if self.max_fetches < 1:
            raise CrawlConfigError("max_fetches must be at least 1")
        if self.delay_s < 0:
            raise CrawlConfigError("delay_s must be non-negative")
        if self.timeout_s <= 0:
            raise CrawlConfigError("timeout_s must be positive")

    def with_overrides(self, **kwargs) -> "CrawlConfig":
        """Return a copy with specific fields overridden."""
        return replace(self, **kwargs)


@dataclass(slots=True)
class PageRecord:
    """A fetched and parsed page, handed to the page sink."""
    url: str
    document: BeautifulSoup


@dataclass(slots=True)
class CrawlStats:
    """Counters collected during a crawl."""
    fetches: int = 0
    pages: int = 0
    fetch_failures: int = 0
    parse_failures: int = 0
    discovered: int = 0
    visited: int = 0


class Frontier:
    """
    Insertion-ordered set of discovered URLs.

    Positional access lets the crawler walk the set while it keeps growing.
    Entries are never removed.
    """

    def __init__(self) -> None:
        self._urls: List[str] = []
        self._seen: Set[str] = set()

    def add(self, url: str) -> None:
        if url not in self._seen:
            self._seen.add(url)
            self._urls.append(url)

    def __contains__(self, url: object) -> bool:
        return url in self._seen

    def __len__(self) -> int:
        return len(self._urls)

    def __getitem__(self, index: int) -> str:
        return self._urls[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self._urls)


@dataclass(slots=True)
class CrawlState:
    """Mutable state for one crawl. Visited only ever grows."""
    fetch_count: int = 0
    origin: Optional[str] = None
    host: Optional[str] = None
    frontier: Frontier = field(default_factory=Frontier)
    visited: Set[str] = field(default_factory=set)


PageSink = Callable[[PageRecord], None]


class Crawler:
    """
    Same-origin crawler bounded by a global fetch budget.

    Traversal is depth-first over the live frontier: after each page whose
    links were extracted, every URL currently in the frontier is visited in
    turn, each of those doing the same. The budget caps the total number of
    fetches, not the link distance from the start page.
    """

    def __init__(
        self,
        config: CrawlConfig,
        on_page: Optional[PageSink] = None,
        fetcher: Optional[Fetcher] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.on_page = on_page
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher if fetcher is not None else Fetcher(config.timeout_s, config.user_agent)
        self._sleep = sleep
        self._state = CrawlState()
        self._stats = CrawlStats()

    @property
    def state(self) -> CrawlState:
        return self._state

    @property
    def stats(self) -> CrawlStats:
        self._stats.discovered = len(self._state.frontier)
        self._stats.visited = len(self._state.visited)
        return self._stats

    def begin(self) -> CrawlStats:
        """Run a crawl from config.start_url with fresh state and return its stats."""
        self._state = CrawlState()
        self._stats = CrawlStats()
        self.start(self.config.start_url)
        return self.stats

    def start(self, url: str) -> None:
        """
        Visit url, then keep visiting the frontier until it is exhausted or
        the fetch budget is spent.

        Raises:
            CrawlConfigError: the first URL has no usable origin, or a
                discovered link cannot be parsed.
        """
        # One cursor into the frontier per page still walking its links.
        cursors: List[int] = []
        if self._visit(url):
            cursors.append(0)

        while cursors and not self._budget_spent():
            pos = cursors[-1]
            if pos >= len(self._state.frontier):
                cursors.pop()
                continue
            cursors[-1] = pos + 1
            if self._visit(self._state.frontier[pos]):
                cursors.append(0)

    def was_indexed(self, url: str) -> bool:
        """True once url has been fetched or claimed as a page's canonical URL."""
        return url in self._state.visited

    def close(self) -> None:
        if self._owns_fetcher:
            self.fetcher.close()

    def __enter__(self) -> "Crawler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _budget_spent(self) -> bool:
        return self._state.fetch_count >= self.config.max_fetches

    def _visit(self, url: str) -> bool:
        """
        Fetch and index one URL.

        Returns True when the page's links were added to the frontier and
        budget remains, meaning the caller should walk the frontier from it.
        """
        state = self._state

        if self._budget_spent():
            return False
        if url in state.visited:
            return False

        if state.origin is None:
            state.origin, state.host = origin_of(url)

        state.fetch_count += 1
        self._stats.fetches += 1
        logger.info("(%d of %d) Fetching for: %s", state.fetch_count, self.config.max_fetches, url)

        if self.config.delay_s > 0:
            self._sleep(self.config.delay_s)

        content = self.fetcher.fetch(url)
        if not content:
            logger.warning("empty response for %s", url)
            self._stats.fetch_failures += 1
            state.visited.add(url)
            return False

        document = parse_document(content)
        if document is None:
            self._stats.parse_failures += 1
            state.visited.add(url)
            return False

        self._stats.pages += 1
        if self.on_page is not None:
            try:
                self.on_page(PageRecord(url=url, document=document))
            except Exception:
                logger.exception("page sink failed for %s", url)

        canonical = resolve_canonical(document, url, state.origin)
        state.visited.add(url)
        state.visited.add(canonical)

        for link in extract_links(
            document,
            state.origin,
            state.host,
            self.config.ignore_query_params,
            self.config.skip_invalid_links,
        ):
            state.frontier.add(link)

        del document

        if self._budget_spent():
            logger.info("Number of urls reachable for indexing: %d", len(state.frontier))
            return False
        return True


def crawl(
    start_url: str,
    max_fetches: int = 100,
    delay_s: float = 0.0,
    ignore_query_params: bool = False,
    on_page: Optional[PageSink] = None,
    **options,
) -> CrawlStats:
    """
    Crawl same-origin pages reachable from start_url.

    Args:
        start_url: Absolute URL the crawl starts from; its scheme and host
                   define the crawl's scope.
        max_fetches: Maximum number of fetches across the whole crawl.
        delay_s: Pause before every fetch, in seconds.
        ignore_query_params: Strip query strings from discovered links.
        on_page: Called with a PageRecord for each parsed page, in fetch order.
        **options: Other CrawlConfig fields (timeout_s, user_agent, ...).

    Returns:
        Crawl statistics.
    """
    config = CrawlConfig(
        start_url=start_url,
        max_fetches=max_fetches,
        delay_s=delay_s,
        ignore_query_params=ignore_query_params,
        **options,
    )
    with Crawler(config, on_page=on_page) as crawler:
        return crawler.begin()
