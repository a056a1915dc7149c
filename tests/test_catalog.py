import pytest

from mykbus.catalog import CATALOG, CatalogError, Route, RouteCatalog


def test_catalog_has_unique_names_and_ids():
    names = [route.canonical_name for route in CATALOG]
    ids = [route.external_id for route in CATALOG]

    assert len(CATALOG) == 16
    assert len(set(names)) == len(names)
    assert len(set(ids)) == len(ids)


def test_lookup_by_name_and_external_id():
    route = CATALOG.by_external_id("1559047590770-061945df-35ac")

    assert route is not None
    assert route.canonical_name == "fabrika (mykonos town) - airport"
    assert CATALOG.by_name("fabrika (mykonos town) - airport") is route
    assert CATALOG.by_external_id("nope") is None


def test_header_image_urls():
    route = CATALOG.by_name("fabrika (mykonos town) - airport")
    assert route is not None
    assert route.header_image == (
        "https://mykonosbusmap.com/images/stops_fabrika-airport_01.svg"
    )

    assert Route("x", "y").header_image == (
        "https://mykonosbusmap.com/images/placeholder_01.svg"
    )


def test_duplicates_are_rejected():
    with pytest.raises(CatalogError):
        RouteCatalog([Route("a", "1"), Route("a", "2")])

    with pytest.raises(CatalogError):
        RouteCatalog([Route("a", "1"), Route("b", "1")])
