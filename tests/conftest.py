from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest


@dataclass
class ScriptedBackend:
    """Action returning (or raising) queued results in order."""

    results: list[Any] = field(default_factory=list)
    payloads: list[dict[str, Any]] = field(default_factory=list)

    async def __call__(self, payload: Mapping[str, Any]) -> Any:
        self.payloads.append(dict(payload))
        result = self.results.pop(0) if self.results else {"data": [], "total": 0}
        if isinstance(result, Exception):
            raise result
        return result


@dataclass
class PagedBackend:
    """Action slicing a fixed row set by the page and page-size in the payload."""

    rows: list[Any]
    payloads: list[dict[str, Any]] = field(default_factory=list)

    async def __call__(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        self.payloads.append(dict(payload))
        page = payload["page"]
        per_page = payload["per_page"]
        start = (page - 1) * per_page
        return {"data": self.rows[start : start + per_page], "total": len(self.rows)}


@pytest.fixture
def scripted() -> ScriptedBackend:
    return ScriptedBackend()


@pytest.fixture
def paged() -> PagedBackend:
    return PagedBackend(rows=[f"r{i}" for i in range(1, 46)])
