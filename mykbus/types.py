"""
Shared type definitions.
"""

from typing import Protocol
import logging
import dataclasses


class HtmlProvider(Protocol):
    """
    Anything that can turn a URL into the page's (rendered) HTML.
    """

    def fetch(self, url: str) -> str:
        ...


@dataclasses.dataclass
class ScrapeContext:
    """
    Scraping Context.
    """

    logger: logging.Logger
    provider: HtmlProvider | None = None
