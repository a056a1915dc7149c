"""
Scrape Timetable information from route panels.

Tables come in two shapes: two-stop routes (origin, destination) and
three-stop routes (origin, intermediate, destination). The first row
carries the stop names; every later row holds departure times, often
wrapped in paragraphs or bold text along with notes and icons.
"""

from typing import Callable, Sequence, TypeAlias, cast

import lxml.html

from mykbus.types import ScrapeContext
from mykbus.times import dedupe_and_sort, tokens_from_text
from mykbus.scrape.error import MalformedSection
from mykbus.scrape.panels import collapse_whitespace
from mykbus.scrape.types import (
    ColumnSet,
    ExtractedTimetable,
    ExtractionResult,
    NotFound,
    TimetablePanel,
)

TABLE_XPATHS = (
    ".//table[contains(concat(' ', normalize-space(@class), ' '), ' aligncenter ')]",
    ".//table",
)
ROW_XPATH = "./tr | ./thead/tr | ./tbody/tr | ./tfoot/tr"
CELL_XPATH = "./th | ./td"

CellStrategy: TypeAlias = Callable[[lxml.html.HtmlElement], list[str]]


def _text(el: lxml.html.HtmlElement) -> str:
    # itertext keeps <br> separated lines apart, text_content() would not
    return " ".join(el.itertext())


def _paragraph_times(cell_el: lxml.html.HtmlElement) -> list[str]:
    times = []
    for p_el in cell_el.iter("p"):
        times.extend(tokens_from_text(_text(p_el)))
    return times


def _strong_times(cell_el: lxml.html.HtmlElement) -> list[str]:
    times = []
    for strong_el in cell_el.iter("strong", "b"):
        times.extend(tokens_from_text(_text(strong_el)))
    return times


def _plain_times(cell_el: lxml.html.HtmlElement) -> list[str]:
    return tokens_from_text(_text(cell_el))


# tried in order; the first one to find any time wins
CELL_STRATEGIES: Sequence[tuple[str, CellStrategy]] = (
    ("paragraph", _paragraph_times),
    ("strong", _strong_times),
    ("plain", _plain_times),
)


def read_cell(ctx: ScrapeContext, cell_el: lxml.html.HtmlElement) -> list[str]:
    """
    Read the times from one table cell.
    """

    for name, strategy in CELL_STRATEGIES:
        times = strategy(cell_el)
        if times:
            ctx.logger.debug("cell read with %s strategy: %s", name, times)
            return times

    return []


def _rows(table_el: lxml.html.HtmlElement) -> list[lxml.html.HtmlElement]:
    return cast(list[lxml.html.HtmlElement], table_el.xpath(ROW_XPATH))


def _cells(row_el: lxml.html.HtmlElement) -> list[lxml.html.HtmlElement]:
    return cast(list[lxml.html.HtmlElement], row_el.xpath(CELL_XPATH))


def find_table(panel_el: lxml.html.HtmlElement) -> lxml.html.HtmlElement | None:
    """
    The first table in a panel that has any rows.
    """

    for xpath in TABLE_XPATHS:
        for table_el in cast(list[lxml.html.HtmlElement], panel_el.xpath(xpath)):
            if _rows(table_el):
                return table_el

    return None


def _is_header_row(
    ctx: ScrapeContext, cell_els: list[lxml.html.HtmlElement]
) -> bool:
    if any(cell_el.tag == "th" for cell_el in cell_els):
        return True
    return not any(read_cell(ctx, cell_el) for cell_el in cell_els)


def _header_labels(cell_els: list[lxml.html.HtmlElement], is_header: bool) -> list[str]:
    labels = []
    for i, cell_el in enumerate(cell_els):
        label = collapse_whitespace(cell_el.text_content()) if is_header else ""
        labels.append(label or f"Column {i}")
    return labels


def _column_indexes(
    ctx: ScrapeContext, panel: TimetablePanel, labels: list[str]
) -> list[int]:
    """
    Table column positions for origin, (intermediate,) destination.
    """

    if len(labels) < 2:
        raise MalformedSection(f"table has {len(labels)} column(s)")

    if len(labels) == 2:
        return [0, 1]

    if len(labels) > 3:
        ctx.logger.warning(
            "'%s' has %d columns %s; reading %s -> %s -> %s",
            panel.route.canonical_name,
            len(labels),
            labels,
            labels[0],
            labels[1],
            labels[-1],
        )

    return [0, 1, len(labels) - 1]


def scrape_column_set(ctx: ScrapeContext, panel: TimetablePanel) -> ColumnSet:
    """
    Read the stop names and raw times of a panel's table.
    """

    table_el = find_table(panel.element)
    if table_el is None:
        raise MalformedSection("no timetable in panel")

    row_els = _rows(table_el)
    first_cell_els = _cells(row_els[0])

    is_header = _is_header_row(ctx, first_cell_els)
    labels = _header_labels(first_cell_els, is_header)
    indexes = _column_indexes(ctx, panel, labels)

    columns: list[list[str]] = [[] for _ in indexes]
    data_row_els = row_els[1:] if is_header else row_els

    for row_el in data_row_els:
        cell_els = _cells(row_el)

        for column, idx in zip(columns, indexes):
            if idx >= len(cell_els):
                continue
            column.extend(read_cell(ctx, cell_els[idx]))

    return ColumnSet([labels[idx] for idx in indexes], columns)


def reconcile_columns(
    ctx: ScrapeContext, name: str, origin: list[str], destination: list[str]
) -> tuple[list[str], list[str]]:
    """
    Cut a two-stop table down to the rows both columns have.
    """

    if len(origin) == len(destination):
        return (origin, destination)

    size = min(len(origin), len(destination))
    ctx.logger.warning(
        "'%s' has %d origin and %d destination times; keeping the first %d",
        name,
        len(origin),
        len(destination),
        size,
    )

    return (origin[:size], destination[:size])


def extract_timetable(ctx: ScrapeContext, panel: TimetablePanel) -> ExtractionResult:
    """
    Extract a route's timetable from its panel, or NotFound when the panel
    has no complete table.
    """

    name = panel.route.canonical_name

    try:
        column_set = scrape_column_set(ctx, panel)

        columns = [dedupe_and_sort(column) for column in column_set.columns]
        for label, column in zip(column_set.headers, columns):
            if not column:
                raise MalformedSection(f"no times under '{label}'")
    except MalformedSection as exc:
        ctx.logger.info("no timetable for '%s': %s", name, exc)
        return NotFound(str(exc))

    headers = column_set.headers

    if len(columns) == 2:
        origin, destination = reconcile_columns(ctx, name, columns[0], columns[1])
        return ExtractedTimetable(
            old_port=[headers[0], *origin],
            new_port=[headers[1], *destination],
        )

    return ExtractedTimetable(
        old_port=[headers[0], *columns[0]],
        mid_port=[headers[1], *columns[1]],
        new_port=[headers[2], *columns[2]],
    )
