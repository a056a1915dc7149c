import logging

import pytest
import serde

from mykbus.catalog import CATALOG
from mykbus.const import NO_SERVICE_MESSAGE
from mykbus.render import StaticProvider
from mykbus.schedules import RouteSchedule, assemble, scrape_schedules, to_json
from mykbus.scrape.error import UpstreamUnavailable
from mykbus.scrape.panels import locate
from mykbus.scrape.timetables import extract_timetable
from mykbus.scrape.types import NotFound
from mykbus.types import ScrapeContext

from html_pages import AIRPORT_ID, airport_page, make_panel, page, panel, table

AIRPORT_NAME = "fabrika (mykonos town) - airport"


def test_every_route_is_present_without_panels(ctx):
    schedule_set = assemble(ctx, CATALOG, [])
    payload = schedule_set.to_payload()

    assert list(payload) == [route.canonical_name for route in CATALOG]
    for route in CATALOG:
        assert payload[route.canonical_name] == {
            "lineId": route.external_id,
            "headerImage": route.header_image,
            "message": NO_SERVICE_MESSAGE,
        }


def test_end_to_end_airport_page(ctx):
    schedule_set = assemble(ctx, CATALOG, locate(ctx, airport_page(), CATALOG))
    payload = schedule_set.to_payload()

    assert payload[AIRPORT_NAME] == {
        "lineId": AIRPORT_ID,
        "headerImage": "https://mykonosbusmap.com/images/stops_fabrika-airport_01.svg",
        "oldPort": ["Fabrika", "09:00", "10:00"],
        "newPort": ["Airport", "09:15", "10:15"],
        "hasMiddleStop": False,
    }

    assert len(payload) == len(CATALOG)
    for name, schedule in payload.items():
        if name == AIRPORT_NAME:
            continue
        assert schedule["message"] == NO_SERVICE_MESSAGE
        assert "oldPort" not in schedule
        assert "newPort" not in schedule
        assert "midPort" not in schedule
        assert "hasMiddleStop" not in schedule


def test_three_stop_route_payload(ctx):
    route = CATALOG.by_name("old port (mykonos town) - agios stefanos - new port")
    assert route is not None
    body = table(["Old Port", "Agios Stefanos", "New Port"], [["08:00", "08:10", "08:20"]])

    payload = assemble(ctx, CATALOG, [make_panel(route, body)]).to_payload()

    assert payload[route.canonical_name] == {
        "lineId": route.external_id,
        "headerImage": route.header_image,
        "oldPort": ["Old Port", "08:00"],
        "newPort": ["New Port", "08:20"],
        "midPort": ["Agios Stefanos", "08:10"],
        "hasMiddleStop": True,
    }


def test_assemble_is_idempotent(ctx):
    html = airport_page()

    first = to_json(assemble(ctx, CATALOG, locate(ctx, html, CATALOG)))
    second = to_json(assemble(ctx, CATALOG, locate(ctx, html, CATALOG)))

    assert first == second


def test_failing_extractor_only_affects_its_route(ctx, caplog):
    caplog.set_level(logging.ERROR)
    elia = CATALOG.by_name("old port (mykonos town) - elia")
    assert elia is not None
    html = page(
        panel(AIRPORT_ID, "Airport", table(["A", "B"], [["09:00", "09:15"]])),
        panel(elia.external_id, "Elia", table(["A", "B"], [["10:00", "10:15"]])),
    )

    def extract(ctx, located):
        if located.route is elia:
            raise RuntimeError("boom")
        return extract_timetable(ctx, located)

    payload = assemble(ctx, CATALOG, locate(ctx, html, CATALOG), extract).to_payload()

    assert payload[AIRPORT_NAME]["oldPort"] == ["A", "09:00"]
    assert payload[elia.canonical_name]["message"] == NO_SERVICE_MESSAGE
    assert "extracting 'old port (mykonos town) - elia' failed" in caplog.text


def test_not_found_keeps_no_service_message(ctx):
    route = CATALOG.routes[0]

    schedule_set = assemble(
        ctx, CATALOG, [make_panel(route, "")], lambda ctx, located: NotFound("empty")
    )

    assert schedule_set.routes[route.canonical_name].message == NO_SERVICE_MESSAGE


def test_first_good_panel_wins(ctx, caplog):
    caplog.set_level(logging.WARNING)
    route = CATALOG.routes[0]
    panels = [
        make_panel(route, "<p>closed</p>"),
        make_panel(route, table(["A", "B"], [["09:00", "09:15"]])),
        make_panel(route, table(["A", "B"], [["11:00", "11:15"]])),
    ]

    schedule = assemble(ctx, CATALOG, panels).routes[route.canonical_name]

    assert schedule.old_port == ["A", "09:00"]
    assert "already has a timetable" in caplog.text


def test_route_schedule_round_trips():
    route = CATALOG.routes[0]
    schedules = [
        RouteSchedule.no_service(route),
        RouteSchedule(
            line_id=route.external_id,
            header_image=route.header_image,
            old_port=["A", "09:00"],
            new_port=["B", "09:15"],
            mid_port=["C", "09:10"],
            has_middle_stop=True,
        ),
    ]

    for schedule in schedules:
        assert serde.from_dict(RouteSchedule, serde.to_dict(schedule)) == schedule


def test_scrape_schedules_uses_provider(logger):
    ctx = ScrapeContext(logger, StaticProvider(airport_page()))

    schedule_set = scrape_schedules(ctx, "https://example.invalid/", CATALOG)

    assert schedule_set.routes[AIRPORT_NAME].has_service


def test_scrape_schedules_provider_failure_propagates(logger):
    class Broken:
        def fetch(self, url):
            raise UpstreamUnavailable(f"GET {url} failed")

    with pytest.raises(UpstreamUnavailable):
        scrape_schedules(ScrapeContext(logger, Broken()), "https://x.invalid/", CATALOG)

    with pytest.raises(UpstreamUnavailable):
        scrape_schedules(ScrapeContext(logger), "https://x.invalid/", CATALOG)
