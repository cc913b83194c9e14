"""Custom exception hierarchy for routepager."""

from __future__ import annotations


class PagerError(Exception):
    """Base exception for all routepager errors."""


class PagerConfigError(PagerError):
    """Invalid configuration: unknown action, bad key setup, key collisions.

    Configuration errors are fatal. They are raised synchronously from the
    operation that detected them and are never converted into a state reset.
    """


class PagerTransportError(PagerError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class PagerResponseError(PagerError):
    """An action resolved to something other than ``{data: [...], total: int}``."""
