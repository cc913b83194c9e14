"""Bidirectional sync between the route query and the list view's state.

Two mappings are kept:

* the *filter state* (keyed by display name) holds the working values a
  user edits before committing them;
* the *query state* (keyed by canonical name) mirrors the route query.

Route changes are copied into both mappings with outbound sync suppressed,
so that ingesting a route never bounces back into a navigation. Query state
changes made while outbound sync is enabled are pushed to the route with a
replace navigation. When the coerced route parameters change, the
``on_route_params_changed`` callback fires; the pager uses it to fetch.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from typing import Any

from routepager._constants import DEFAULT_PAGE, DEFAULT_PER_PAGE
from routepager.keys import KeyRegistry
from routepager.models.route import Route
from routepager.routing import Router
from routepager.state.guard import SyncGuard
from routepager.state.values import StateMap

_logger = logging.getLogger(__name__)

RouteParamsListener = Callable[[Mapping[str, Any]], None]


_NUMERIC = re.compile(r"\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?\s*")


def _as_number(value: Any) -> float | None:
    if isinstance(value, int | float):
        return float(value)
    text = str(value)
    if not text.strip():
        return 0.0
    if _NUMERIC.fullmatch(text) is None:
        return None
    return float(text)


def _loosely_equal(left: Any, right: Any) -> bool:
    """Compare a state value with a route value; the route stores strings.

    When either side is a number the other is compared numerically, so
    ``1`` matches ``"01"`` and ``2.0`` matches ``"2"``.
    """
    if left is None or right is None:
        return left is None and right is None
    if left == right:
        return True
    if isinstance(left, int | float) or isinstance(right, int | float):
        left_number, right_number = _as_number(left), _as_number(right)
        return left_number is not None and left_number == right_number
    return str(left) == str(right)


def query_changed(query: Mapping[str, Any], route_query: Mapping[str, Any]) -> bool:
    """Whether *query* differs from the route's query by key count or value."""
    if len(query) != len(route_query):
        return True
    return any(not _loosely_equal(value, route_query.get(key)) for key, value in query.items())


class RouteQuerySync:
    """Keep filter state, query state and the route query consistent."""

    def __init__(
        self,
        registry: KeyRegistry,
        router: Router,
        *,
        guard: SyncGuard | None = None,
        on_route_params_changed: RouteParamsListener | None = None,
    ) -> None:
        self.registry = registry
        self.router = router
        self.guard = guard or SyncGuard()
        self.on_route_params_changed = on_route_params_changed

        params = self.route_params
        self.query_state = StateMap(
            (key.canonical for key in registry),
            {key.canonical: params[key.canonical] for key in registry},
        )
        self.filter_state = StateMap(
            (key.display for key in registry),
            {key.display: params[key.canonical] for key in registry},
        )
        self._last_params = params
        self._unsubscribe_query: Callable[[], None] | None = self.query_state.subscribe(self._on_query_state_changed)
        self._unsubscribe_route: Callable[[], None] | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start listening for route changes."""
        if self._unsubscribe_route is None:
            self._unsubscribe_route = self.router.subscribe(self.ingest_route)

    def close(self) -> None:
        """Release the route and query-state subscriptions."""
        if self._unsubscribe_route is not None:
            self._unsubscribe_route()
            self._unsubscribe_route = None
        if self._unsubscribe_query is not None:
            self._unsubscribe_query()
            self._unsubscribe_query = None

    # ------------------------------------------------------------------
    # Route -> state
    # ------------------------------------------------------------------

    @property
    def route_params(self) -> dict[str, Any]:
        """Coerced view of the current route query, one entry per key."""
        return self.registry.coerce_query(self.router.current_route.query)

    def ingest_route(self, route: Route) -> None:
        """Copy the raw route query into query and filter state.

        This is a full snapshot: keys missing from the route become ``None``.
        """
        with self.guard.suppressed():
            query = route.query
            self.query_state.assign({key.canonical: query.get(key.canonical) for key in self.registry})
            self.filter_state.assign({key.display: query.get(key.canonical) for key in self.registry})

        params = self.route_params
        if params == self._last_params:
            return
        self._last_params = params
        _logger.debug("Route params changed: %s", params)
        if self.on_route_params_changed is not None:
            self.on_route_params_changed(params)

    # ------------------------------------------------------------------
    # State -> route
    # ------------------------------------------------------------------

    def _on_query_state_changed(self, changed: Mapping[str, Any]) -> None:
        if self.guard.enabled:
            self.update_route_query()

    def build_query(self) -> dict[str, Any]:
        """Query built from the truthy query-state entries."""
        return {key: value for key, value in self.query_state.items() if value}

    def update_route_query(self) -> bool:
        """Replace the route query if it differs from the query state.

        Returns whether a navigation was requested.
        """
        query = self.build_query()
        route = self.router.current_route
        if not query_changed(query, route.query):
            return False
        _logger.debug("Replacing route %s query with %s", route.name, query)
        self.router.replace(route.name, query)
        return True

    # ------------------------------------------------------------------
    # Filter commit cycle
    # ------------------------------------------------------------------

    def clear_pagination(self) -> None:
        self.query_state.assign(
            {
                self.registry.page.canonical: DEFAULT_PAGE,
                self.registry.per_page.canonical: DEFAULT_PER_PAGE,
            }
        )

    def apply_filters(self) -> None:
        """Commit the working filter values to the query state and route.

        Pagination always resets on commit. The route is updated once, after
        all values are in place. A commit made while outbound sync is already
        suppressed (from inside a route ingest) leaves the route alone.
        """
        with self.guard.suppressed():
            self.query_state.assign(
                {self.registry.canonical(display): value for display, value in self.filter_state.items()}
            )
            self.clear_pagination()
        if not self.guard.enabled:
            _logger.debug("Filter commit during suppressed sync; route left unchanged")
            return
        self.update_route_query()

    def clear_filters(self) -> None:
        self.filter_state.assign({display: None for display in self.filter_state})
        self.apply_filters()
