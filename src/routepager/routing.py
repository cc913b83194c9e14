"""Route contract and an in-memory router.

The engine never reaches for a global router: the route and its navigation
primitive are injected into the pager. Anything satisfying :class:`Router`
works; :class:`MemoryRouter` is the in-process implementation used by tests,
scripts and headless consumers.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from routepager.models.route import Route

_logger = logging.getLogger(__name__)

RouteListener = Callable[[Route], None]


class Router(Protocol):
    """Structural route interface used by the sync engine.

    ``replace`` performs a same-entry navigation (no new history entry).
    Listeners registered with ``subscribe`` must be called after every
    route change, with the new route.
    """

    @property
    def current_route(self) -> Route:
        ...

    def replace(self, name: str | None, query: Mapping[str, Any]) -> None:
        ...

    def subscribe(self, listener: RouteListener) -> Callable[[], None]:
        ...


class MemoryRouter:
    """Router that keeps the current route in memory.

    Listeners are notified synchronously, and only when the route actually
    changed. Every :meth:`replace` that changed the route is recorded in
    :attr:`replacements`.
    """

    def __init__(self, name: str | None = None, query: Mapping[str, Any] | None = None, *, path: str = "/") -> None:
        self._route = Route(name=name, query=dict(query or {}))
        self._path = path
        self._listeners: list[RouteListener] = []
        self.replacements: list[Route] = []

    @classmethod
    def from_url(cls, url: str, *, name: str | None = None) -> MemoryRouter:
        """Build a router whose current route is parsed from *url*."""
        parts = urlsplit(url)
        query = dict(parse_qsl(parts.query, keep_blank_values=True))
        path = urlunsplit((parts.scheme, parts.netloc, parts.path or "/", "", ""))
        return cls(name, query, path=path)

    @property
    def current_route(self) -> Route:
        return self._route

    @property
    def url(self) -> str:
        query = urlencode(self._route.query)
        return f"{self._path}?{query}" if query else self._path

    def subscribe(self, listener: RouteListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def replace(self, name: str | None, query: Mapping[str, Any]) -> None:
        route = Route(name=name, query=dict(query))
        if route != self._route:
            self.replacements.append(route)
        self._navigate(route)

    def push(self, query: Mapping[str, Any], *, name: str | None = None) -> None:
        """Navigate from outside the engine (typed URL, back button, link)."""
        self._navigate(Route(name=name if name is not None else self._route.name, query=dict(query)))

    def _navigate(self, route: Route) -> None:
        if route == self._route:
            _logger.debug("Navigation to identical route %s ignored", self.url)
            return
        self._route = route
        _logger.debug("Route changed to %s", self.url)
        for listener in list(self._listeners):
            listener(route)
