"""
Link and canonical resolution for a parsed page.

Everything here is a pure function of the document, the crawl origin and
the crawl options; the controller owns all state.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple
from urllib.parse import ParseResult, urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from sitecrawler.errors import CrawlConfigError

logger = logging.getLogger(__name__)

CANONICAL_SELECTOR = "link[rel='canonical']"


def parse_document(content: bytes) -> Optional[BeautifulSoup]:
    """Parse raw page bytes with lxml. Returns None if the markup is rejected."""
    try:
        return BeautifulSoup(content, "lxml")
    except ParserRejectedMarkup as e:
        logger.warning("could not parse document: %s", e)
        return None


def host_of(parsed: ParseResult) -> str:
    """
    Return "host[:port]" for a parsed URL, without any user:password@ part.

    Raises ValueError for an out-of-range or non-numeric port.
    """
    host = parsed.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    port = parsed.port
    return f"{host}:{port}" if port is not None else host


def origin_of(url: str) -> Tuple[str, str]:
    """
    Return (origin, host) for url, where origin is "scheme://host[:port]".

    Raises CrawlConfigError when the URL cannot be parsed or has no
    scheme or host, since no crawl scope can be derived from it.
    """
    try:
        parsed = urlparse(url)
        host = host_of(parsed)
    except ValueError as e:
        raise CrawlConfigError(f"Invalid start URL: {url}") from e

    if not parsed.scheme or not host:
        raise CrawlConfigError(f"Invalid start URL: {url}")

    return f"{parsed.scheme}://{host}", host


def resolve_canonical(document: BeautifulSoup, url: str, origin: str) -> str:
    """
    Return the page's canonical URL, falling back to the URL it was fetched from.

    Root-relative hrefs are appended to the origin, absolute http(s) hrefs
    are taken as-is, and any other relative href is joined against url.
    """
    element = document.select_one(CANONICAL_SELECTOR)
    if element is None:
        return url

    href = element.get("href")
    if href is None:
        return url

    if href.startswith("/"):
        return origin + href
    if href.startswith(("http://", "https://")):
        return href
    return urljoin(url, href)


def resolve_link(href: str, origin: str) -> Optional[str]:
    """
    Make an anchor href absolute, or return None to discard it.

    - "/path" becomes origin + "/path"
    - anything not starting with "http" is dropped (relative paths,
      fragments, mailto:, javascript:, ...)
    """
    if href.startswith("/"):
        return origin + href
    if not href.startswith("http"):
        return None
    return href


def extract_links(
    document: BeautifulSoup,
    origin: str,
    host: str,
    ignore_query_params: bool,
    skip_invalid_links: bool = False,
) -> List[str]:
    """
    Collect same-host link targets from every <a href> in document order.

    With ignore_query_params, the query string is removed so URLs that only
    differ by query collapse to one entry. An href that fails to parse
    raises CrawlConfigError unless skip_invalid_links is set.
    """
    links: List[str] = []

    for anchor in document.find_all("a", href=True):
        href = resolve_link(anchor["href"], origin)
        if href is None:
            continue

        try:
            parsed = urlparse(href)
            link_host = host_of(parsed)
        except ValueError as e:
            if skip_invalid_links:
                logger.warning("skipping unparsable link %r: %s", href, e)
                continue
            raise CrawlConfigError(f"Unparsable link: {href}") from e

        if link_host != host:
            continue

        if ignore_query_params:
            links.append(parsed._replace(query="").geturl())
        else:
            links.append(href)

    return links
