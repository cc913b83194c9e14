"""Backend actions that fetch one page of rows.

An action is an async callable taking a flat mapping of canonical key to
value and resolving to ``{"data": [...], "total": n}``. Actions are looked up
by name in an :class:`ActionStore`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol

import aiohttp

from routepager._constants import USER_AGENT
from routepager.exceptions import PagerConfigError, PagerTransportError

_logger = logging.getLogger(__name__)

ListAction = Callable[[Mapping[str, Any]], Awaitable[Any]]


class ActionStore(Protocol):
    """Structural store interface used by the fetch orchestrator.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`ActionRegistry`) concrete.
    """

    def has_action(self, name: str) -> bool:
        ...

    async def dispatch(self, name: str, payload: Mapping[str, Any]) -> Any:
        ...


class ActionRegistry:
    """Named async actions."""

    def __init__(self, actions: Mapping[str, ListAction] | None = None) -> None:
        self._actions: dict[str, ListAction] = dict(actions or {})

    def register(self, name: str, action: ListAction) -> ListAction:
        self._actions[name] = action
        return action

    def has_action(self, name: str) -> bool:
        return name in self._actions

    async def dispatch(self, name: str, payload: Mapping[str, Any]) -> Any:
        action = self._actions.get(name)
        if action is None:
            raise PagerConfigError(f'action "{name}" not found in store')
        return await action(dict(payload))


def _query_params(payload: Mapping[str, Any]) -> dict[str, str]:
    return {key: str(value) for key, value in payload.items() if value is not None}


class HttpListAction:
    """Fetch rows from a JSON HTTP endpoint.

    ``GET`` sends the payload as query parameters (``None`` values are
    dropped); ``POST`` sends it as a JSON body. The decoded JSON body is
    returned as-is; shape validation happens in the orchestrator.
    """

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self._http = http_session
        self._url = url
        self._method = method.upper()
        self._headers: dict[str, str] = {"accept": "application/json", "user-agent": USER_AGENT}
        self._headers.update(headers or {})

    async def __call__(self, payload: Mapping[str, Any]) -> Any:
        kwargs: dict[str, Any] = {"headers": self._headers}
        if self._method == "GET":
            kwargs["params"] = _query_params(payload)
        else:
            kwargs["json"] = dict(payload)

        _logger.debug("%s %s", self._method, self._url)

        try:
            async with self._http.request(self._method, self._url, **kwargs) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise PagerTransportError(
                        f"HTTP {resp.status} from {self._url}: {text[:200]}",
                        status_code=resp.status,
                        url=self._url,
                    )
        except PagerTransportError:
            raise
        except aiohttp.ClientError as exc:
            raise PagerTransportError(
                f"Request to {self._url} failed: {exc}",
                url=self._url,
            ) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise PagerTransportError(
                f"Invalid JSON from {self._url}: {text[:200]}",
                url=self._url,
            ) from exc
