"""Derived pagination values."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from routepager.keys import KeyRegistry


@dataclass(frozen=True, slots=True)
class DataMeta:
    """The "showing X to Y of Z" range of the current page."""

    from_: int
    to: int
    of: int


@dataclass(frozen=True, slots=True)
class PaginationView:
    page: int
    per_page: int
    total_rows: int

    @classmethod
    def from_state(cls, registry: KeyRegistry, query_state: Mapping[str, Any], total_rows: int) -> PaginationView:
        page = registry.page
        per_page = registry.per_page
        return cls(
            page=page.coerce(query_state[page.canonical]),
            per_page=per_page.coerce(query_state[per_page.canonical]),
            total_rows=total_rows,
        )

    @property
    def can_show_load_more(self) -> bool:
        return self.page * self.per_page < self.total_rows

    @property
    def can_show_pagination(self) -> bool:
        return self.per_page < self.total_rows

    @property
    def can_show_bottom_navigation(self) -> bool:
        return self.can_show_load_more or self.can_show_pagination

    @property
    def data_meta(self) -> DataMeta:
        if self.total_rows <= 0:
            return DataMeta(from_=0, to=0, of=0)
        first = (self.page - 1) * self.per_page + 1
        last = min(self.page * self.per_page, self.total_rows)
        return DataMeta(from_=min(first, self.total_rows), to=last, of=self.total_rows)


def has_active_filter(registry: KeyRegistry, filter_state: Mapping[str, Any]) -> bool:
    """True when any non-pagination key has a truthy working value."""
    return any(filter_state[key.display] for key in registry.filter_keys)
