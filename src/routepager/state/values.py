"""Observable key/value state."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

ChangeListener = Callable[[Mapping[str, Any]], None]


def _same(old: Any, new: Any) -> bool:
    # "1" and 1 are different values: the route layer hands back strings.
    return old is new or (type(old) is type(new) and old == new)


class StateMap(Mapping[str, Any]):
    """A fixed set of keys whose values notify listeners when they change.

    Writes go through :meth:`assign` (or item assignment, which is a one-key
    assign). One assign notifies each listener at most once, with the subset
    of keys whose value actually changed.
    """

    def __init__(self, keys: Iterable[str], initial: Mapping[str, Any] | None = None) -> None:
        initial = initial or {}
        self._values: dict[str, Any] = {key: initial.get(key) for key in keys}
        self._listeners: list[ChangeListener] = []

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.assign({key: value})

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"StateMap({self._values!r})"

    def assign(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Write several values, then notify once. Returns the changed keys."""
        unknown = set(values) - set(self._values)
        if unknown:
            raise KeyError(f"untracked keys: {sorted(unknown)}")

        changed: dict[str, Any] = {}
        for key, value in values.items():
            if not _same(self._values[key], value):
                self._values[key] = value
                changed[key] = value

        if changed:
            for listener in list(self._listeners):
                listener(changed)
        return changed

    def snapshot(self) -> dict[str, Any]:
        return dict(self._values)

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register *listener*; the returned callable unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe
