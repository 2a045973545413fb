"""
Same-origin web crawler bounded by a global fetch budget.
Notifies a caller-supplied sink with every fetched and parsed page.
"""
from sitecrawler.core import (
    CrawlConfig,
    CrawlState,
    CrawlStats,
    Crawler,
    Frontier,
    PageRecord,
    crawl,
)
from sitecrawler.errors import CrawlConfigError, CrawlError
from sitecrawler.fetcher import Fetcher
from sitecrawler.scraper import Scraper

__version__ = "1.0.0"
__all__ = [
    "crawl",
    "Crawler",
    "CrawlConfig",
    "CrawlState",
    "CrawlStats",
    "Frontier",
    "PageRecord",
    "Fetcher",
    "Scraper",
    "CrawlError",
    "CrawlConfigError",
]
