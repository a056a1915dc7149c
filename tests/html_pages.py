"""
Builders for timetable page markup shaped like the live page.
"""

from typing import Sequence

import lxml.html

from mykbus.catalog import Route
from mykbus.scrape.types import TimetablePanel

AIRPORT_ID = "1559047590770-061945df-35ac"


def table(headers: Sequence[str] | None, rows: Sequence[Sequence[str]]) -> str:
    """
    A page-builder table; cells are inserted as raw markup.
    """

    head = ""
    if headers is not None:
        ths = "".join(f"<th>{h}</th>" for h in headers)
        head = f"<thead><tr>{ths}</tr></thead>"

    body = "".join(
        "<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in rows
    )
    return f'<table class="aligncenter">{head}<tbody>{body}</tbody></table>'


def panel(external_id: str | None, title: str, body: str) -> str:
    id_attr = f' id="{external_id}"' if external_id is not None else ""
    return (
        f'<div class="vc_tta-panel"{id_attr} data-vc-content=".vc_tta-panel-body">'
        '<div class="vc_tta-panel-heading"><h4 class="vc_tta-panel-title">'
        f'<a href="#"><span class="vc_tta-title-text">{title}</span></a></h4></div>'
        f'<div class="vc_tta-panel-body">{body}</div>'
        "</div>"
    )


def page(*panels: str) -> str:
    return (
        "<!DOCTYPE html><html><head><title>Bus Timetables</title></head><body>"
        '<div class="vc_tta-container"><div class="vc_tta-panels">'
        + "".join(panels)
        + "</div></div></body></html>"
    )


def airport_page() -> str:
    return page(
        panel(
            AIRPORT_ID,
            "Fabrika (Mykonos Town) -\n Airport",
            table(
                ["Fabrika", "Airport"],
                [["09:00", "09:15"], ["10:00", "10:15"]],
            ),
        )
    )


def make_panel(route: Route, body: str) -> TimetablePanel:
    element = lxml.html.fromstring(panel(route.external_id, route.canonical_name, body))
    return TimetablePanel(route.external_id, route, route.canonical_name, element)
