"""State enums."""

from __future__ import annotations

from enum import StrEnum


class FetchMode(StrEnum):
    """How a fetch merges its rows into the current items."""

    REPLACE = "replace"
    APPEND = "append"


class SortDirection(StrEnum):
    """Tri-state column sort direction.

    Values match the ``aria-sort`` attribute a UI would render. The short
    code (``asc``/``desc``/``None``) is what lives in filter and route state.
    """

    NONE = "none"
    ASCENDING = "ascending"
    DESCENDING = "descending"

    @property
    def code(self) -> str | None:
        return _CODES.get(self)

    @classmethod
    def from_code(cls, code: object) -> SortDirection:
        """Map a stored short code back to a direction; unknown codes are NONE."""
        for direction, direction_code in _CODES.items():
            if code == direction_code:
                return direction
        return cls.NONE

    def next(self) -> SortDirection:
        """none -> ascending -> descending -> none."""
        return _CYCLE[self]


_CODES: dict[SortDirection, str] = {
    SortDirection.ASCENDING: "asc",
    SortDirection.DESCENDING: "desc",
}

_CYCLE: dict[SortDirection, SortDirection] = {
    SortDirection.NONE: SortDirection.ASCENDING,
    SortDirection.ASCENDING: SortDirection.DESCENDING,
    SortDirection.DESCENDING: SortDirection.NONE,
}
