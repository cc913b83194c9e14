"""Per-column tri-state sort toggling.

Sort state lives in the filter state as short codes (``asc``/``desc``, or
``None`` for unsorted). Rendering sort indicators is left to the UI, which
registers a callback receiving ``(display_key, direction)`` whenever a
sortable column's value changes, whatever changed it: a toggle, a cleared
filter set, or a route navigation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from routepager.keys import KeyRegistry
from routepager.models.enums import SortDirection
from routepager.state.values import StateMap

_logger = logging.getLogger(__name__)

SortListener = Callable[[str, SortDirection], None]


class SortToggle:
    def __init__(
        self,
        registry: KeyRegistry,
        filter_state: StateMap,
        *,
        on_change: SortListener | None = None,
    ) -> None:
        self._registry = registry
        self._filters = filter_state
        self._on_change = on_change
        self._unsubscribe: Callable[[], None] | None = None
        if on_change is not None:
            self._unsubscribe = filter_state.subscribe(self._on_filters_changed)

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(key.display for key in self._registry.sort_keys)

    def _sort_key(self, name: str) -> str:
        key = self._registry.resolve(name)
        if not key.is_sortable:
            raise KeyError(f"{name!r} is not a sortable key")
        return key.display

    def direction(self, name: str) -> SortDirection:
        return SortDirection.from_code(self._filters[self._sort_key(name)])

    def set(self, name: str, direction: SortDirection) -> None:
        """Write *direction* into the filter state (does not commit)."""
        self._filters[self._sort_key(name)] = direction.code

    def toggle(self, name: str) -> SortDirection:
        """Advance the column to its next direction (does not commit)."""
        direction = self.direction(name).next()
        self.set(name, direction)
        _logger.debug("Sort %s -> %s", name, direction)
        return direction

    def publish(self) -> None:
        """Report the current direction of every sortable column."""
        for display in self.keys:
            self._notify(display, self.direction(display))

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_filters_changed(self, changed: Mapping[str, Any]) -> None:
        for display in self.keys:
            if display in changed:
                self._notify(display, SortDirection.from_code(changed[display]))

    def _notify(self, display: str, direction: SortDirection) -> None:
        if self._on_change is not None:
            self._on_change(display, direction)
