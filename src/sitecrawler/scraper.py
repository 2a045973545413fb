"""
Read-only CSS selector queries over a parsed page.

Every query returns a zero value ("", 0, 0.0, False) when nothing matches.
"""
from __future__ import annotations

import logging
import re
from typing import List

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

logger = logging.getLogger(__name__)

# Whole units with optional two-digit cents, after thousands separators are removed
FLOAT_RE = re.compile(r"\d+(\.\d{2})?")
INT_RE = re.compile(r"\d+")


class Scraper:
    """Helpers for pulling text, markup, attributes and numbers out of a document."""

    def __init__(self, document: BeautifulSoup) -> None:
        self.document = document

    def _select(self, selector: str) -> List[Tag]:
        try:
            return self.document.select(selector)
        except SelectorSyntaxError as e:
            logger.debug("invalid selector %r: %s", selector, e)
            return []

    def exists(self, selector: str) -> bool:
        return bool(self._select(selector))

    def text(self, selector: str) -> str:
        """Combined text of all matching elements, trimmed."""
        matches = self._select(selector)
        return "".join(el.get_text() for el in matches).strip()

    def html(self, selector: str) -> str:
        """Inner HTML of the first matching element."""
        matches = self._select(selector)
        if not matches:
            return ""
        return matches[0].decode_contents()

    def attr(self, selector: str, name: str) -> str:
        matches = self._select(selector)
        if not matches:
            return ""
        value = matches[0].get(name)
        if value is None:
            return ""
        # Multi-valued attributes such as class come back as lists
        if isinstance(value, list):
            return " ".join(value)
        return value

    def to_float(self, value: str) -> float:
        """Parse the first number in value, e.g. "$1,299.99" -> 1299.99."""
        match = FLOAT_RE.search(value.replace(",", ""))
        if match is None:
            return 0.0
        return float(match.group(0))

    def float_value(self, selector: str) -> float:
        matches = self._select(selector)
        if not matches:
            return 0.0
        return self.to_float("".join(el.get_text() for el in matches))

    def int_value(self, selector: str) -> int:
        matches = self._select(selector)
        if not matches:
            return 0
        text = "".join(el.get_text() for el in matches).replace(",", "")
        match = INT_RE.search(text)
        if match is None:
            return 0
        return int(match.group(0))
