"""
Exceptions raised by the crawler.
"""
from __future__ import annotations


class CrawlError(Exception):
    """Base class for crawler errors."""


class CrawlConfigError(CrawlError, ValueError):
    """Input the crawl cannot proceed with (bad start URL, unparsable link)."""
