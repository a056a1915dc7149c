"""
Assemble per-route schedules from located panels.
"""

from typing import Any, Callable, Iterable, TypeAlias
import dataclasses

import serde
import serde.json

from mykbus.types import ScrapeContext
from mykbus.const import NO_SERVICE_MESSAGE
from mykbus.catalog import Route, RouteCatalog
from mykbus.scrape.error import UpstreamUnavailable
from mykbus.scrape.panels import locate
from mykbus.scrape.timetables import extract_timetable
from mykbus.scrape.types import (
    ExtractedTimetable,
    ExtractionResult,
    NotFound,
    TimetablePanel,
)


@serde.serde(rename_all="camelcase")
@dataclasses.dataclass(frozen=True)
class RouteSchedule:
    """
    The published schedule of one route: either the times of each stop
    (header label first) or a no-service message.
    """

    line_id: str
    header_image: str
    old_port: list[str] | None = serde.field(default=None, skip_if_default=True)
    new_port: list[str] | None = serde.field(default=None, skip_if_default=True)
    mid_port: list[str] | None = serde.field(default=None, skip_if_default=True)
    has_middle_stop: bool | None = serde.field(default=None, skip_if_default=True)
    message: str | None = serde.field(default=None, skip_if_default=True)

    @classmethod
    def no_service(cls, route: Route) -> "RouteSchedule":
        return cls(
            line_id=route.external_id,
            header_image=route.header_image,
            message=NO_SERVICE_MESSAGE,
        )

    @classmethod
    def from_timetable(
        cls, route: Route, timetable: ExtractedTimetable
    ) -> "RouteSchedule":
        return cls(
            line_id=route.external_id,
            header_image=route.header_image,
            old_port=list(timetable.old_port),
            new_port=list(timetable.new_port),
            mid_port=(
                list(timetable.mid_port) if timetable.mid_port is not None else None
            ),
            has_middle_stop=timetable.has_middle_stop,
        )

    @property
    def has_service(self) -> bool:
        return self.message is None


@serde.serde(rename_all="camelcase")
@dataclasses.dataclass(frozen=True)
class ScheduleSet:
    """
    Every catalog route's schedule from one scrape, in catalog order.
    """

    routes: dict[str, RouteSchedule]
    fetched_at: float = 0.0

    def to_payload(self) -> dict[str, dict[str, Any]]:
        """
        The API body: route name -> schedule.
        """

        return {name: serde.to_dict(schedule) for name, schedule in self.routes.items()}


Extractor: TypeAlias = Callable[[ScrapeContext, TimetablePanel], ExtractionResult]


def assemble(
    ctx: ScrapeContext,
    catalog: RouteCatalog,
    panels: Iterable[TimetablePanel],
    extract: Extractor = extract_timetable,
) -> ScheduleSet:
    """
    Build a schedule for every route in the catalog; routes without a
    usable panel are marked as having no service.
    """

    schedules = {route.canonical_name: RouteSchedule.no_service(route) for route in catalog}

    for panel in panels:
        name = panel.route.canonical_name
        if name not in schedules:
            ctx.logger.info("panel '%s' is for a route outside the catalog", name)
            continue

        if schedules[name].has_service:
            ctx.logger.warning(
                "'%s' already has a timetable; ignoring panel '%s'",
                name,
                panel.external_id,
            )
            continue

        try:
            result = extract(ctx, panel)
        except Exception:  # pylint: disable=broad-exception-caught
            ctx.logger.exception("extracting '%s' failed", name)
            continue

        if isinstance(result, NotFound):
            continue

        schedules[name] = RouteSchedule.from_timetable(panel.route, result)

    found = sum(1 for schedule in schedules.values() if schedule.has_service)
    ctx.logger.info("assembled %d route(s), %d with timetables", len(schedules), found)

    return ScheduleSet(schedules)


def scrape_schedules(ctx: ScrapeContext, url: str, catalog: RouteCatalog) -> ScheduleSet:
    """
    One full pass: fetch the page, locate panels, assemble schedules.
    """

    if ctx.provider is None:
        raise UpstreamUnavailable("no html provider configured")

    ctx.logger.info(f"GET {url}")
    rendered_html = ctx.provider.fetch(url)

    return assemble(ctx, catalog, locate(ctx, rendered_html, catalog))


def to_json(schedule_set: ScheduleSet, indent: int | None = None) -> str:
    return serde.json.to_json(schedule_set.to_payload(), indent=indent)
