"""
Locate route panels on the rendered timetable page.

The page is built with a visual page builder; every route lives in its own
accordion panel, roughly:

```html
<div class="vc_tta-panel" id="EXTERNAL_ID">
    <div class="vc_tta-panel-heading">
        <h4><a><span class="vc_tta-title-text">ROUTE NAME</span></a></h4>
    </div>
    <div class="vc_tta-panel-body">
        <table class="aligncenter">...</table>
    </div>
</div>
```
"""

from typing import Iterator, cast
import re

import lxml.etree
import lxml.html

from mykbus.types import ScrapeContext
from mykbus.catalog import RouteCatalog
from mykbus.scrape.error import UpstreamUnavailable
from mykbus.scrape.types import TimetablePanel

WHITESPACE_RE = re.compile(r"\s+")


def _has_class_xpath(tag: str, class_name: str) -> str:
    return (
        f"{tag}[contains(concat(' ', normalize-space(@class), ' '), ' {class_name} ')]"
    )


PANEL_XPATH = "//" + _has_class_xpath("div", "vc_tta-panel")
TITLE_XPATH = ".//" + _has_class_xpath("span", "vc_tta-title-text")


def collapse_whitespace(text: str) -> str:
    return WHITESPACE_RE.sub(" ", text).strip()


def _panel_title(panel_el: lxml.html.HtmlElement) -> str:
    query = panel_el.xpath(TITLE_XPATH)
    if not query:
        return ""

    title_el = cast(lxml.html.HtmlElement, query[0])
    return collapse_whitespace(title_el.text_content()).lower()


class PanelScan:
    """
    The known-route panels of one page, in document order.

    Iterating walks the parsed page again each time, so a scan can be
    consumed more than once.
    """

    def __init__(
        self, ctx: ScrapeContext, root: lxml.html.HtmlElement, catalog: RouteCatalog
    ) -> None:
        self._ctx = ctx
        self._root = root
        self._catalog = catalog

    def __iter__(self) -> Iterator[TimetablePanel]:
        query = self._root.xpath(PANEL_XPATH)
        assert isinstance(query, list)

        for panel_el in cast(list[lxml.html.HtmlElement], query):
            external_id = (panel_el.get("id") or "").strip()
            if not external_id:
                self._ctx.logger.info(
                    "skipping panel without an id at line %s", panel_el.sourceline
                )
                continue

            route = self._catalog.by_external_id(external_id)
            if route is None:
                self._ctx.logger.info("no route for panel '%s'; skipping", external_id)
                continue

            title = _panel_title(panel_el)
            if title and title != route.canonical_name:
                self._ctx.logger.debug(
                    "panel '%s' titled '%s' on the page; mapped to '%s'",
                    external_id,
                    title,
                    route.canonical_name,
                )

            yield TimetablePanel(external_id, route, title, panel_el)


def locate(ctx: ScrapeContext, rendered_html: str, catalog: RouteCatalog) -> PanelScan:
    """
    Find the accordion panels of known routes in a rendered page.
    """

    if not rendered_html.strip():
        raise UpstreamUnavailable("timetable page is empty")

    try:
        root: lxml.html.HtmlElement = lxml.html.fromstring(rendered_html)
    except (lxml.etree.ParserError, ValueError) as exc:
        raise UpstreamUnavailable(f"could not parse timetable page: {exc}") from exc

    return PanelScan(ctx, root, catalog)
