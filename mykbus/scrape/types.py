"""
Scraping Types.
"""

from typing import TypeAlias, Sequence
import dataclasses

import lxml.html

from mykbus.catalog import Route


@dataclasses.dataclass(frozen=True)
class TimetablePanel:
    """
    An accordion panel of the timetable page that belongs to a known Route.
    """

    external_id: str
    route: Route
    title: str
    element: lxml.html.HtmlElement = dataclasses.field(compare=False, repr=False)

    @property
    def markup(self) -> str:
        return lxml.html.tostring(self.element, encoding="unicode")


ScrapedStop: TypeAlias = str

# header label followed by the column's times
ScrapedColumn: TypeAlias = Sequence[str]


@dataclasses.dataclass(frozen=True)
class ColumnSet:
    """
    Header labels and raw per-column times of one table, before validation.
    """

    headers: Sequence[ScrapedStop]
    columns: Sequence[Sequence[str]]


@dataclasses.dataclass(frozen=True)
class ExtractedTimetable:
    """
    A validated table; each column starts with its header label.
    """

    old_port: ScrapedColumn
    new_port: ScrapedColumn
    mid_port: ScrapedColumn | None = None

    @property
    def has_middle_stop(self) -> bool:
        return self.mid_port is not None


@dataclasses.dataclass(frozen=True)
class NotFound:
    """
    No usable timetable in a panel.
    """

    reason: str


ExtractionResult: TypeAlias = ExtractedTimetable | NotFound
