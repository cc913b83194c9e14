from __future__ import annotations

import pytest

from routepager.exceptions import PagerConfigError
from routepager.keys import KeyRegistry, parse_int, to_canonical


def test_default_registry_tracks_pagination_keys() -> None:
    registry = KeyRegistry()

    assert [key.canonical for key in registry] == ["page", "per_page"]
    assert registry.page.is_pagination
    assert registry.per_page.is_pagination
    assert registry.filter_keys == ()


def test_display_and_canonical_names_map_one_to_one() -> None:
    registry = KeyRegistry("page", "perPage", ["searchText", "sortBy", "status"])

    for key in registry:
        assert key.canonical == to_canonical(key.display)
        assert registry.canonical(key.display) == key.canonical
        assert registry.display(key.canonical) == key.display
    assert len({key.canonical for key in registry}) == len(registry)
    assert [key.canonical for key in registry] == ["page", "per_page", "search_text", "sort_by", "status"]


def test_colliding_canonical_names_are_rejected() -> None:
    with pytest.raises(PagerConfigError):
        KeyRegistry(filters=["sortBy", "sort_by"])


def test_repeated_display_names_collapse() -> None:
    registry = KeyRegistry(filters=["page", "status", "status"])

    assert [key.canonical for key in registry] == ["page", "per_page", "status"]


@pytest.mark.parametrize("raw", [None, "", 0])
def test_absent_or_falsy_pagination_values_use_defaults(raw: object) -> None:
    registry = KeyRegistry()

    assert registry.coerce("page", raw) == 1
    assert registry.coerce("per_page", raw) == 20


def test_page_coerces_to_integer() -> None:
    registry = KeyRegistry()

    assert registry.coerce("page", "5") == 5
    assert registry.coerce("per_page", "50") == 50
    assert registry.coerce("page", "7abc") == 7
    assert registry.coerce("page", "abc") == 1


def test_parse_int_leading_integer() -> None:
    assert parse_int(" 12 ", 1) == 12
    assert parse_int("-3", 1) == -3
    assert parse_int(4.9, 1) == 4
    assert parse_int(True, 1) == 1


def test_extra_keys_use_identity_or_supplied_coercion() -> None:
    registry = KeyRegistry(
        filters=["status", "minTotal"],
        coercions={"minTotal": lambda raw: float(raw) if raw else None},
    )

    params = registry.coerce_query({"page": "2", "status": "open", "min_total": "9.5"})

    assert params == {"page": 2, "per_page": 20, "status": "open", "min_total": 9.5}
    assert registry.coerce_query({}) == {"page": 1, "per_page": 20, "status": None, "min_total": None}


def test_pagination_coercion_is_fixed() -> None:
    with pytest.raises(PagerConfigError):
        KeyRegistry(coercions={"page": str})


def test_sort_keys_are_detected_by_canonical_name() -> None:
    registry = KeyRegistry(filters=["status", "sort_name", "sortDate"])

    assert [key.display for key in registry.sort_keys] == ["sort_name", "sortDate"]


def test_resolve_accepts_display_or_canonical_name() -> None:
    registry = KeyRegistry(filters=["searchText"])

    assert registry.resolve("searchText") is registry.resolve("search_text")
    assert "search_text" in registry
    assert "searchText" in registry
    with pytest.raises(KeyError):
        registry.resolve("missing")


@pytest.mark.parametrize(
    ("display", "canonical"),
    [
        ("address2", "address2"),
        ("created-at", "created-at"),
        ("sort_name", "sort_name"),
        ("address2Line", "address2_line"),
        ("perPage", "per_page"),
    ],
)
def test_canonical_name_only_changes_casing(display: str, canonical: str) -> None:
    assert to_canonical(display) == canonical
    assert KeyRegistry(filters=[display]).canonical(display) == canonical
