"""
The fixed set of bus routes served by the API.
"""

from typing import Iterable, Iterator, Sequence
import dataclasses

from mykbus.const import IMAGE_BASE_URL, PLACEHOLDER_IMAGE


class CatalogError(ValueError):
    """
    The catalog has a duplicate route name or external id.
    """


@dataclasses.dataclass(frozen=True)
class Route:
    """
    A Route (e.g. "fabrika (mykonos town) - airport").

    `external_id` is the id attribute of the route's accordion panel on the
    timetable page.
    """

    canonical_name: str
    external_id: str
    image_asset: str | None = None

    @property
    def header_image(self) -> str:
        return IMAGE_BASE_URL + (self.image_asset or PLACEHOLDER_IMAGE)


class RouteCatalog:
    """
    Immutable registry of routes, addressable by name or panel id.
    """

    _routes: tuple[Route, ...]
    _by_name: dict[str, Route]
    _by_external_id: dict[str, Route]

    def __init__(self, routes: Iterable[Route]) -> None:
        self._routes = tuple(routes)
        self._by_name = {}
        self._by_external_id = {}

        for route in self._routes:
            if route.canonical_name in self._by_name:
                raise CatalogError(f"duplicate route name: {route.canonical_name!r}")
            if route.external_id in self._by_external_id:
                raise CatalogError(f"duplicate external id: {route.external_id!r}")

            self._by_name[route.canonical_name] = route
            self._by_external_id[route.external_id] = route

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    @property
    def routes(self) -> Sequence[Route]:
        return self._routes

    def by_name(self, name: str) -> Route | None:
        return self._by_name.get(name)

    def by_external_id(self, external_id: str) -> Route | None:
        return self._by_external_id.get(external_id)


CATALOG = RouteCatalog(
    [
        Route(
            "fabrika (mykonos town) - airport",
            "1559047590770-061945df-35ac",
            "stops_fabrika-airport_01.svg",
        ),
        Route(
            "airport - new port",
            "1559047898109-40e76be5-801f",
            "stops_airport-newport_01.svg",
        ),
        Route(
            "fabrika (mykonos town) - new port",
            "1559047739472-642fcb84-9720",
            "stops_fabrika-newport_01.svg",
        ),
        Route(
            "old port (mykonos town) - new port",
            "1555955289108-dff46428-1b66",
            "stops_oldport-newport_01.svg",
        ),
        Route(
            "fabrika (mykonos town) - platis gialos",
            "1555958487476-d80d7cc8-d066",
            "stops_fabrika-platis_01.svg",
        ),
        Route(
            "fabrika (mykonos town) - paradise",
            "1555958831438-01ea3ba0-76f7",
            "stops_fabrika-paradise_01.svg",
        ),
        Route(
            "fabrika (mykonos town) - super paradise",
            "1555959036342-cf638a7d-ae31",
            "stops_fabrika-super_01.svg",
        ),
        Route(
            "fabrika (mykonos town) - paraga",
            "1555958067687-34a62bad-9d2a",
            "stops_fabrika-paraga_01.svg",
        ),
        Route(
            "old port (mykonos town) - elia",
            "1555957001095-b4b0a91c-695a",
            "stops_oldport-elia_01.svg",
        ),
        Route(
            "old port (mykonos town) - ano mera",
            "1555955564212-f820a83b-d513",
            "stops_oldport-anomera_01.svg",
        ),
        # NOTE: the page's kalo livadi stop map is published as "paradise"
        Route(
            "old port (mykonos town) - kalo livadi",
            "1555957517174-c6496040-c68b",
            "stops_oldport-paradise_01.svg",
        ),
        Route(
            "old port (mykonos town) - kalafatis",
            "1555955724133-aa71677d-efab",
            "stops_oldport-kalafatis_01.svg",
        ),
        Route(
            "fabrika (mykonos town) - ornos - agios ioannis",
            "1555953369529-535afd32-cab3",
            "stops_fabrika-ornos-agios_01.svg",
        ),
        Route(
            "old port (mykonos town) - agios stefanos - new port",
            "1555953369558-22c24d44-888a",
            "stops_oldport-agios-newport_01.svg",
        ),
        Route(
            "old port (mykonos town) - panormos",
            "1557747887993-356701dd-5541",
            "stops_oldport-panormos_01.svg",
        ),
        Route(
            "fabrika (mykonos town) - kalo livadi",
            "1720281530535-d5be00b4-2271",
            "stops_fabrika-kalolivadi_01.svg",
        ),
    ]
)
