"""High-level route-synchronized pager for one list view."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from routepager.actions import ActionStore
from routepager.config import PagerConfig
from routepager.fetch import FetchOrchestrator
from routepager.keys import Coercion, KeyRegistry
from routepager.models.enums import FetchMode, SortDirection
from routepager.pagination import DataMeta, PaginationView, has_active_filter
from routepager.routing import Router
from routepager.sorting import SortListener, SortToggle
from routepager.state.guard import SyncGuard
from routepager.state.values import StateMap
from routepager.sync import RouteQuerySync

_logger = logging.getLogger(__name__)


class RoutePager:
    """Pagination, filter and sort state of a list view, kept in the route.

    Usage::

        async with RoutePager(store, router, PagerConfig(filters=("search",))) as pager:
            pager.filters["search"] = "invoice"
            pager.apply_filters()
            await pager.settle()
            rows = pager.items

    The pager owns its state; it must not be shared between views.
    """

    def __init__(
        self,
        store: ActionStore,
        router: Router,
        config: PagerConfig | None = None,
        *,
        coercions: Mapping[str, Coercion] | None = None,
        on_sort_change: SortListener | None = None,
    ) -> None:
        self._config = config or PagerConfig()
        self.registry = KeyRegistry.from_config(self._config, coercions=coercions)
        self._sync = RouteQuerySync(self.registry, router, guard=SyncGuard())
        self._fetcher = FetchOrchestrator(
            store,
            self._sync,
            action_name=self._config.action_name,
            fence_stale_fetches=self._config.fence_stale_fetches,
        )
        self._sync.on_route_params_changed = self._fetcher.on_route_params_changed
        self._sort = SortToggle(self.registry, self._sync.filter_state, on_change=on_sort_change)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RoutePager:
        self.start()
        if self._config.fetch_on_start:
            try:
                await self.fetch_items()
            except BaseException:
                await self.close()
                raise
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    def start(self) -> None:
        """Subscribe to route changes and publish the initial sort indicators."""
        self._sync.start()
        self._sort.publish()
        _logger.debug("Pager started with keys %s", [key.canonical for key in self.registry])

    async def close(self) -> None:
        """Release subscriptions and cancel fetches still pending."""
        self._sync.close()
        self._sort.close()
        await self._fetcher.cancel_pending()

    async def settle(self) -> None:
        """Wait until every issued fetch, and any fetch it led to, completed."""
        await self._fetcher.settle()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def fetch_items(self) -> None:
        """Fetch the current route params in the current mode."""
        await self._fetcher.schedule()

    def load_more(self, release_focus: Callable[[], None] | None = None) -> None:
        """Advance one page and append its rows to the current items.

        The fetch itself follows from the route change; await :meth:`settle`
        to wait for it.
        """
        if release_focus is not None:
            release_focus()
        self._fetcher.set_append_mode()
        self.current_page = self.current_page + 1

    def update_route_query(self) -> bool:
        return self._sync.update_route_query()

    def apply_filters(self) -> None:
        self._sync.apply_filters()

    def clear_filters(self) -> None:
        self._sync.clear_filters()

    def toggle_sort(self, key: str) -> SortDirection:
        """Cycle a sortable column and commit the result."""
        direction = self._sort.toggle(key)
        self._sync.apply_filters()
        return direction

    def sort_direction(self, key: str) -> SortDirection:
        return self._sort.direction(key)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def config(self) -> PagerConfig:
        return self._config

    @property
    def filters(self) -> StateMap:
        """Working filter values, keyed by display name."""
        return self._sync.filter_state

    @property
    def query(self) -> StateMap:
        """Values mirrored to the route query, keyed by canonical name."""
        return self._sync.query_state

    @property
    def route_params(self) -> dict[str, Any]:
        return self._sync.route_params

    @property
    def items(self) -> list[Any]:
        return list(self._fetcher.items)

    @property
    def total_rows(self) -> int:
        return self._fetcher.total_rows

    @property
    def mode(self) -> FetchMode:
        return self._fetcher.mode

    @property
    def current_page(self) -> int:
        return self.registry.page.coerce(self.query[self.registry.page.canonical])

    @current_page.setter
    def current_page(self, value: int) -> None:
        self.query[self.registry.page.canonical] = value

    @property
    def per_page(self) -> int:
        return self.registry.per_page.coerce(self.query[self.registry.per_page.canonical])

    @per_page.setter
    def per_page(self, value: int) -> None:
        self.query[self.registry.per_page.canonical] = value

    @property
    def pagination(self) -> PaginationView:
        return PaginationView.from_state(self.registry, self.query, self.total_rows)

    @property
    def can_show_load_more(self) -> bool:
        return self.pagination.can_show_load_more

    @property
    def can_show_pagination(self) -> bool:
        return self.pagination.can_show_pagination

    @property
    def can_show_bottom_navigation(self) -> bool:
        return self.pagination.can_show_bottom_navigation

    @property
    def data_meta(self) -> DataMeta:
        return self.pagination.data_meta

    @property
    def has_active_filter(self) -> bool:
        return has_active_filter(self.registry, self.filters)
