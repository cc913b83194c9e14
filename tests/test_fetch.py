from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

import pytest

from routepager.actions import ActionRegistry
from routepager.exceptions import PagerConfigError
from routepager.fetch import FetchOrchestrator
from routepager.keys import KeyRegistry
from routepager.models.enums import FetchMode
from routepager.routing import MemoryRouter
from routepager.sync import RouteQuerySync


def _wire(
    action: Any,
    query: dict[str, Any] | None = None,
    *,
    filters: tuple[str, ...] = (),
    fence: bool = True,
) -> tuple[FetchOrchestrator, RouteQuerySync, MemoryRouter]:
    router = MemoryRouter("orders", query)
    sync = RouteQuerySync(KeyRegistry(filters=filters), router)
    fetcher = FetchOrchestrator(
        ActionRegistry({"fetchList": action}),
        sync,
        action_name="fetchList",
        fence_stale_fetches=fence,
    )
    sync.on_route_params_changed = fetcher.on_route_params_changed
    sync.start()
    return fetcher, sync, router


@pytest.mark.asyncio
async def test_payload_is_the_coerced_route_params(scripted) -> None:
    fetcher, _, _ = _wire(scripted, {"page": "3", "status": "open"}, filters=("status",))

    await fetcher.schedule()

    assert scripted.payloads == [{"page": 3, "per_page": 20, "status": "open"}]


@pytest.mark.asyncio
async def test_append_mode_extends_items(scripted) -> None:
    fetcher, _, _ = _wire(scripted)
    fetcher.items = ["a", "b"]
    scripted.results.append({"data": ["c", "d"], "total": 4})

    await fetcher.schedule(FetchMode.APPEND)

    assert fetcher.items == ["a", "b", "c", "d"]
    assert fetcher.total_rows == 4
    assert fetcher.mode is FetchMode.REPLACE


@pytest.mark.asyncio
async def test_replace_mode_swaps_items(scripted) -> None:
    fetcher, _, _ = _wire(scripted)
    fetcher.items = ["a", "b"]
    scripted.results.append({"data": ["c", "d"], "total": 4})

    await fetcher.schedule(FetchMode.REPLACE)

    assert fetcher.items == ["c", "d"]


@pytest.mark.asyncio
async def test_append_mode_applies_to_the_next_fetch_only(scripted) -> None:
    fetcher, _, _ = _wire(scripted)
    scripted.results.extend(
        [
            {"data": ["a"], "total": 3},
            {"data": ["b"], "total": 3},
            {"data": ["c"], "total": 3},
        ]
    )

    await fetcher.schedule()
    fetcher.set_append_mode()
    await fetcher.schedule()
    await fetcher.schedule()

    assert fetcher.items == ["c"]


@pytest.mark.asyncio
async def test_empty_page_with_rows_resets_pagination(scripted) -> None:
    fetcher, sync, router = _wire(scripted, {"page": "5"})
    scripted.results.extend([{"data": [], "total": 10}, {"data": ["r1"], "total": 10}])

    await fetcher.schedule()
    await fetcher.settle()

    assert router.current_route.query == {"page": "1", "per_page": "20"}
    assert sync.registry.page.coerce(sync.query_state["page"]) == 1
    assert sync.registry.per_page.coerce(sync.query_state["per_page"]) == 20
    assert scripted.payloads == [{"page": 5, "per_page": 20}, {"page": 1, "per_page": 20}]
    assert fetcher.items == ["r1"]


@pytest.mark.asyncio
async def test_empty_result_set_keeps_pagination(scripted) -> None:
    fetcher, _, router = _wire(scripted, {"page": "5"})
    scripted.results.append({"data": [], "total": 0})

    await fetcher.schedule()
    await fetcher.settle()

    assert router.current_route.query == {"page": "5"}
    assert len(scripted.payloads) == 1


@pytest.mark.asyncio
async def test_failure_clears_filters_and_refetches_once(scripted) -> None:
    fetcher, sync, router = _wire(scripted, {"page": "3", "status": "open"}, filters=("status",))
    scripted.results.extend([RuntimeError("backend down"), {"data": ["x"], "total": 1}])

    await fetcher.schedule()
    await fetcher.settle()

    assert scripted.payloads == [
        {"page": 3, "per_page": 20, "status": "open"},
        {"page": 1, "per_page": 20, "status": None},
    ]
    assert sync.filter_state["status"] is None
    assert router.current_route.query == {"page": "1", "per_page": "20"}
    assert fetcher.items == ["x"]


@pytest.mark.asyncio
async def test_failure_on_default_view_still_refetches_once(scripted) -> None:
    fetcher, sync, _ = _wire(scripted, {}, filters=("status",))
    scripted.results.extend([RuntimeError("backend down"), {"data": ["x"], "total": 1}])

    await fetcher.schedule()
    await fetcher.settle()

    assert scripted.payloads == [
        {"page": 1, "per_page": 20, "status": None},
        {"page": 1, "per_page": 20, "status": None},
    ]
    assert all(sync.filter_state[key] is None for key in ("status",))


@pytest.mark.asyncio
async def test_failed_recovery_is_not_retried(scripted) -> None:
    fetcher, _, _ = _wire(scripted, {"status": "open"}, filters=("status",))
    scripted.results.extend([RuntimeError("one"), RuntimeError("two"), {"data": ["x"], "total": 1}])

    await fetcher.schedule()
    await fetcher.settle()

    assert len(scripted.payloads) == 2
    assert fetcher.items == []


@pytest.mark.asyncio
async def test_malformed_response_is_a_fetch_failure(scripted) -> None:
    fetcher, _, _ = _wire(scripted, {"status": "open"}, filters=("status",))
    scripted.results.extend([{"data": "not-a-list", "total": 1}, {"data": ["x"], "total": 1}])

    await fetcher.schedule()
    await fetcher.settle()

    assert len(scripted.payloads) == 2
    assert fetcher.items == ["x"]


@pytest.mark.asyncio
async def test_failure_after_load_more_recovers_in_replace_mode(scripted) -> None:
    fetcher, _, _ = _wire(scripted, {"status": "open"}, filters=("status",))
    fetcher.items = ["a"]
    scripted.results.extend([RuntimeError("boom"), {"data": ["x"], "total": 1}])

    await fetcher.schedule(FetchMode.APPEND)
    await fetcher.settle()

    assert fetcher.items == ["x"]


def test_unknown_action_is_a_configuration_error() -> None:
    router = MemoryRouter("orders")
    sync = RouteQuerySync(KeyRegistry(), router)
    fetcher = FetchOrchestrator(ActionRegistry(), sync, action_name="fetchList")

    with pytest.raises(PagerConfigError, match="fetchList"):
        fetcher.schedule()
    assert fetcher.generation == 0


class _GatedAction:
    """First call waits for ``release``; later calls return immediately."""

    def __init__(self, first: Any, later: Any) -> None:
        self.release = asyncio.Event()
        self.calls = 0
        self._first = first
        self._later = later

    async def __call__(self, payload: Mapping[str, Any]) -> Any:
        self.calls += 1
        if self.calls == 1:
            await self.release.wait()
            if isinstance(self._first, Exception):
                raise self._first
            return self._first
        return self._later


@pytest.mark.asyncio
async def test_superseded_response_is_discarded() -> None:
    action = _GatedAction({"data": ["old"], "total": 1}, {"data": ["new"], "total": 1})
    fetcher, _, _ = _wire(action)

    first = fetcher.schedule()
    await asyncio.sleep(0)
    await fetcher.schedule()
    action.release.set()
    await first

    assert fetcher.items == ["new"]


@pytest.mark.asyncio
async def test_without_fencing_last_writer_wins() -> None:
    action = _GatedAction({"data": ["old"], "total": 1}, {"data": ["new"], "total": 1})
    fetcher, _, _ = _wire(action, fence=False)

    first = fetcher.schedule()
    await asyncio.sleep(0)
    await fetcher.schedule()
    action.release.set()
    await first

    assert fetcher.items == ["old"]


@pytest.mark.asyncio
async def test_superseded_failure_does_not_recover() -> None:
    action = _GatedAction(RuntimeError("late"), {"data": ["new"], "total": 1})
    fetcher, sync, _ = _wire(action, {"status": "open"}, filters=("status",))

    first = fetcher.schedule()
    await asyncio.sleep(0)
    await fetcher.schedule()
    action.release.set()
    await first
    await fetcher.settle()

    assert action.calls == 2
    assert sync.filter_state["status"] == "open"
    assert fetcher.items == ["new"]


@pytest.mark.asyncio
async def test_cancel_pending_stops_in_flight_fetches() -> None:
    action = _GatedAction({"data": ["old"], "total": 1}, {"data": ["new"], "total": 1})
    fetcher, _, _ = _wire(action)

    fetcher.schedule()
    await asyncio.sleep(0)
    await fetcher.cancel_pending()

    assert fetcher.pending == 0
    assert fetcher.items == []
