"""Tracked state keys and their coercion rules.

Every dimension a list view keeps in the route query (page, page size,
filters, sort columns) is a :class:`FilterKey`. A key has a *display* name,
used by the working filter state, and a *canonical* snake_case name used on
the wire and in the URL. The registry guarantees the mapping between the two
is one-to-one.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from routepager._constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_KEY,
    DEFAULT_PER_PAGE,
    DEFAULT_PER_PAGE_KEY,
    SORT_KEY_MARKER,
)
from routepager.exceptions import PagerConfigError

if TYPE_CHECKING:
    from routepager.config import PagerConfig

Coercion = Callable[[Any], Any]

_LEADING_INT = re.compile(r"\s*([-+]?\d+)")
_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def to_canonical(name: str) -> str:
    """Return the canonical (snake_case) form of a display key.

    Only letter casing changes: an underscore goes before each uppercase
    letter that follows a lowercase letter or digit, then the name is
    lowercased. Digits and hyphens are kept as they are.
    """
    return _WORD_BOUNDARY.sub(r"_\1", name).lower()


def parse_int(raw: Any, default: int) -> int:
    """Parse the leading integer of *raw*, or return *default*.

    Falsy values (``None``, ``""``, ``0``) and values without a leading
    integer resolve to *default*.
    """
    if not raw:
        return default
    if isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw)
    match = _LEADING_INT.match(str(raw))
    if match is None:
        return default
    return int(match.group(1))


def _identity(raw: Any) -> Any:
    return raw


def _int_with_default(default: int) -> Coercion:
    def _coerce(raw: Any) -> int:
        return parse_int(raw, default)

    return _coerce


@dataclass(frozen=True, slots=True)
class FilterKey:
    """One tracked state dimension."""

    display: str
    canonical: str
    coerce: Coercion = _identity
    is_pagination: bool = False

    @property
    def is_sortable(self) -> bool:
        return SORT_KEY_MARKER in self.canonical


class KeyRegistry:
    """The set of tracked keys for one list view.

    The page and page-size keys are always present and always coerce to
    integers with the defaults ``1`` and ``20``. Extra keys coerce with the
    caller-supplied rule, or pass raw values through unchanged.
    """

    def __init__(
        self,
        page_key: str = DEFAULT_PAGE_KEY,
        per_page_key: str = DEFAULT_PER_PAGE_KEY,
        filters: Iterable[str] = (),
        *,
        coercions: Mapping[str, Coercion] | None = None,
    ) -> None:
        coercions = dict(coercions or {})

        self.page = FilterKey(page_key, to_canonical(page_key), _int_with_default(DEFAULT_PAGE), True)
        self.per_page = FilterKey(
            per_page_key,
            to_canonical(per_page_key),
            _int_with_default(DEFAULT_PER_PAGE),
            True,
        )
        for pagination_key in (self.page, self.per_page):
            if pagination_key.display in coercions or pagination_key.canonical in coercions:
                raise PagerConfigError(f"coercion of pagination key {pagination_key.display!r} is fixed")

        keys: list[FilterKey] = [self.page, self.per_page]
        seen_display = {self.page.display, self.per_page.display}
        for display in filters:
            if display in seen_display:
                continue
            seen_display.add(display)
            canonical = to_canonical(display)
            coerce = coercions.get(display) or coercions.get(canonical) or _identity
            keys.append(FilterKey(display, canonical, coerce))

        self._by_canonical: dict[str, FilterKey] = {}
        self._by_display: dict[str, FilterKey] = {}
        for key in keys:
            clash = self._by_canonical.get(key.canonical)
            if clash is not None:
                raise PagerConfigError(
                    f"keys {clash.display!r} and {key.display!r} share canonical name {key.canonical!r}"
                )
            self._by_canonical[key.canonical] = key
            self._by_display[key.display] = key
        self._keys = tuple(keys)

    @classmethod
    def from_config(cls, config: PagerConfig, *, coercions: Mapping[str, Coercion] | None = None) -> KeyRegistry:
        return cls(config.page_key, config.per_page_key, config.filters, coercions=coercions)

    def __iter__(self) -> Iterator[FilterKey]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, name: object) -> bool:
        return name in self._by_display or name in self._by_canonical

    @property
    def filter_keys(self) -> tuple[FilterKey, ...]:
        """Tracked keys other than page and page size."""
        return tuple(key for key in self._keys if not key.is_pagination)

    @property
    def sort_keys(self) -> tuple[FilterKey, ...]:
        return tuple(key for key in self._keys if key.is_sortable)

    def resolve(self, name: str) -> FilterKey:
        """Look a key up by display or canonical name."""
        key = self._by_display.get(name) or self._by_canonical.get(name)
        if key is None:
            raise KeyError(name)
        return key

    def canonical(self, display: str) -> str:
        return self._by_display[display].canonical

    def display(self, canonical: str) -> str:
        return self._by_canonical[canonical].display

    def coerce(self, canonical: str, raw: Any) -> Any:
        return self._by_canonical[canonical].coerce(raw)

    def coerce_query(self, query: Mapping[str, Any]) -> dict[str, Any]:
        """Coerce a raw route query into one typed value per tracked key."""
        return {key.canonical: key.coerce(query.get(key.canonical)) for key in self._keys}
