"""
Fetch the timetable page's HTML.

The timetable page fills its accordions client-side, so the default
provider renders the page in headless Chromium and waits for the page
builder to settle. A plain HTTP provider is kept for pages (and tests)
that don't need rendering.
"""

import time
import logging

import requests
from playwright.sync_api import Error as PlaywrightError, sync_playwright

from mykbus.types import HtmlProvider
from mykbus.const import USER_AGENT
from mykbus.config import Config
from mykbus.scrape.error import UpstreamUnavailable

PANEL_SELECTOR = "div.vc_tta-panel"


class PlaywrightProvider:
    """
    Render a page in headless Chromium and return its final HTML.

    A browser is launched per fetch; the sync API binds it to the calling
    thread and passes run on whichever worker thread picks them up.
    """

    def __init__(
        self,
        logger: logging.Logger,
        timeout: float = 60.0,
        settle_delay: float = 20.0,
        user_agent: str = USER_AGENT,
        headless: bool = True,
    ) -> None:
        self.logger = logger
        self.timeout = timeout
        self.settle_delay = settle_delay
        self.user_agent = user_agent
        self.headless = headless

    def fetch(self, url: str) -> str:
        timeout_ms = int(self.timeout * 1000)

        try:
            with sync_playwright() as p:
                browser = p.chromium.launch(headless=self.headless)
                try:
                    page = browser.new_page(user_agent=self.user_agent)
                    page.set_default_timeout(timeout_ms)

                    self.logger.info("rendering %s", url)
                    page.goto(url, wait_until="networkidle", timeout=timeout_ms)

                    try:
                        page.wait_for_selector(PANEL_SELECTOR, state="attached")
                    except PlaywrightError:
                        self.logger.warning("no accordion panels appeared on %s", url)

                    if self.settle_delay > 0:
                        page.wait_for_timeout(self.settle_delay * 1000)

                    return page.content()
                finally:
                    browser.close()
        except PlaywrightError as exc:
            raise UpstreamUnavailable(f"rendering {url} failed: {exc}") from exc


class RequestsProvider:
    """
    Fetch a page's HTML as served, without running any scripts.
    """

    def __init__(
        self,
        logger: logging.Logger,
        session: requests.Session | None = None,
        timeout: float = 60.0,
        user_agent: str = USER_AGENT,
    ) -> None:
        self.logger = logger
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"User-Agent": user_agent})
        self.timeout = timeout

    def fetch(self, url: str) -> str:
        started = time.monotonic()

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise UpstreamUnavailable(f"GET {url} failed: {exc}") from exc

        self.logger.info(
            "GET %s -> %d in %.1fs",
            url,
            response.status_code,
            time.monotonic() - started,
        )
        return response.text


class StaticProvider:
    """
    Serve HTML that was saved earlier, regardless of the URL.
    """

    def __init__(self, html: str) -> None:
        self.html = html

    def fetch(self, url: str) -> str:  # pylint: disable=unused-argument
        return self.html


def make_provider(config: Config, logger: logging.Logger) -> HtmlProvider:
    """
    The provider named by the configuration.
    """

    if config.html_provider == "requests":
        return RequestsProvider(
            logger, timeout=config.render_timeout, user_agent=config.user_agent
        )

    return PlaywrightProvider(
        logger,
        timeout=config.render_timeout,
        settle_delay=config.settle_delay,
        user_agent=config.user_agent,
    )
