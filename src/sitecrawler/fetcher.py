"""
HTTP fetching. One GET per URL, raw bytes back, never raises.
"""
from __future__ import annotations

import logging
import warnings
from typing import Optional

import requests
from urllib3.exceptions import InsecureRequestWarning

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "SiteCrawler/1.0"


class Fetcher:
    """
    Fetches pages over a requests Session that accepts invalid certificates.

    Target sites are not under the crawl operator's control, so self-signed
    and expired certificates are accepted. Failures are logged and reported
    as an empty body.
    """

    def __init__(
        self,
        timeout_s: float = 15.0,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout_s = timeout_s
        self.session = session if session is not None else requests.Session()
        self.session.headers["User-Agent"] = user_agent
        self.session.verify = False

    def fetch(self, url: str) -> bytes:
        """Return the response body for url, or b"" on any request error."""
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", InsecureRequestWarning)
                resp = self.session.get(url, timeout=self.timeout_s, allow_redirects=True)
                content = resp.content
        except requests.RequestException as e:
            logger.warning("fetch failed for %s: %s", url, e)
            return b""

        if resp.status_code >= 400:
            logger.info("HTTP %s for %s", resp.status_code, url)
        return content

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
