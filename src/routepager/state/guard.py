"""Outbound-sync suppression."""

from __future__ import annotations

import contextlib
from collections.abc import Iterator


class SyncGuard:
    """Single shared switch gating state-to-route propagation.

    While the guard is suppressed, changes to the query state are not pushed
    to the route. Suppressed changes are not queued or replayed.
    """

    def __init__(self) -> None:
        self._enabled = True

    @property
    def enabled(self) -> bool:
        return self._enabled

    def disable(self) -> None:
        self._enabled = False

    def enable(self) -> None:
        self._enabled = True

    @contextlib.contextmanager
    def suppressed(self) -> Iterator[None]:
        """Suppress outbound sync for the duration of the block.

        The previous state is restored on exit, so nested blocks do not
        re-enable sync early.
        """
        previous = self._enabled
        self._enabled = False
        try:
            yield
        finally:
            self._enabled = previous

    def __repr__(self) -> str:
        return f"SyncGuard(enabled={self._enabled})"
