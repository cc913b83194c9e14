"""Fetch orchestration: one backend call per qualifying state change.

A fetch runs in one of two merge modes. ``REPLACE`` swaps the current items
for the fetched rows; ``APPEND`` adds them to the end ("load more"). The
mode returns to ``REPLACE`` after each successful fetch, so load-more only
affects the next fetch.

Two recoveries apply after a fetch:

* a non-empty total with no items left (the user is stranded on a page past
  the end of the new result set) resets pagination to its defaults;
* a failed fetch clears every filter and commits the cleared state, which
  re-fetches the default view. That retry is not recovered again.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from routepager.actions import ActionStore
from routepager.exceptions import PagerConfigError, PagerResponseError
from routepager.models.enums import FetchMode
from routepager.models.response import ListResponse
from routepager.sync import RouteQuerySync

_logger = logging.getLogger(__name__)


def parse_response(raw: Any) -> ListResponse:
    try:
        return ListResponse.model_validate(raw)
    except ValidationError as exc:
        raise PagerResponseError(f"Invalid list response: {exc}") from exc


class FetchOrchestrator:
    """Issue fetches through the action store and merge their results."""

    def __init__(
        self,
        store: ActionStore,
        sync: RouteQuerySync,
        *,
        action_name: str,
        fence_stale_fetches: bool = True,
    ) -> None:
        self._store = store
        self._sync = sync
        self._action_name = action_name
        self._fence = fence_stale_fetches
        self._generation = 0
        self._recovering = False
        self._tasks: set[asyncio.Task[None]] = set()

        self.items: list[Any] = []
        self.total_rows: int = 0
        self.mode: FetchMode = FetchMode.REPLACE

    @property
    def generation(self) -> int:
        """Number of fetches issued so far."""
        return self._generation

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def set_append_mode(self) -> None:
        self.mode = FetchMode.APPEND

    def set_replace_mode(self) -> None:
        self.mode = FetchMode.REPLACE

    def build_payload(self) -> dict[str, Any]:
        """Canonical-keyed payload built from the current route params."""
        params = self._sync.route_params
        return {key: params[key] for key in self._sync.query_state}

    def _require_action(self) -> None:
        if not self._store.has_action(self._action_name):
            raise PagerConfigError(f'action "{self._action_name}" not found in store')

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def schedule(self, mode: FetchMode | None = None, *, recovery: bool = False) -> asyncio.Task[None]:
        """Issue a fetch on the running loop and return its task.

        The merge mode and the payload are captured now. Raises
        :class:`PagerConfigError` immediately if the action is unknown.
        """
        self._require_action()
        self._generation += 1
        generation = self._generation
        mode = mode or self.mode
        payload = self.build_payload()
        _logger.debug("Fetch #%d issued mode=%s payload=%s", generation, mode, payload)

        task = asyncio.get_running_loop().create_task(self._run(generation, mode, payload, recovery))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def on_route_params_changed(self, params: Mapping[str, Any]) -> None:
        self.schedule(recovery=self._recovering)

    async def settle(self) -> None:
        """Wait until no fetch is pending, including follow-up fetches."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def cancel_pending(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    def _is_stale(self, generation: int) -> bool:
        return self._fence and generation != self._generation

    async def _run(self, generation: int, mode: FetchMode, payload: dict[str, Any], recovery: bool) -> None:
        try:
            response = parse_response(await self._store.dispatch(self._action_name, payload))
        except Exception:
            if self._is_stale(generation):
                _logger.debug("Fetch #%d failed after being superseded; ignored", generation, exc_info=True)
                return
            _logger.warning("Fetch #%d failed", generation, exc_info=True)
            self._recover_from_failure(recovery)
            return

        if self._is_stale(generation):
            _logger.debug("Fetch #%d superseded by #%d; response discarded", generation, self._generation)
            return

        self.total_rows = response.total
        if mode is FetchMode.APPEND:
            self.items = [*self.items, *response.data]
        else:
            self.items = list(response.data)
        _logger.debug("Fetch #%d complete: %d rows of %d", generation, len(response.data), response.total)

        self.set_replace_mode()
        if response.total > 0 and not self.items:
            _logger.debug("Page past the end of %d rows; resetting pagination", response.total)
            self._sync.clear_pagination()

    def _recover_from_failure(self, recovery: bool) -> None:
        if recovery:
            _logger.warning("Recovery fetch failed; view left as is")
            return

        generation = self._generation
        self.set_replace_mode()
        self._recovering = True
        try:
            self._sync.clear_filters()
        finally:
            self._recovering = False

        # The cleared view may already match the route, in which case no
        # route change (and so no fetch) resulted from the commit.
        if self._generation == generation:
            self.schedule(recovery=True)
