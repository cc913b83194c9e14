"""Pager configuration for routepager."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from routepager._constants import DEFAULT_ACTION_NAME, DEFAULT_PAGE_KEY, DEFAULT_PER_PAGE_KEY
from routepager.exceptions import PagerConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_list(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclasses.dataclass(frozen=True)
class PagerConfig:
    """Construction-time options for a :class:`~routepager.pager.RoutePager`.

    Parameters
    ----------
    action_name : str
        Name of the backend action dispatched for every fetch.
    page_key : str
        Display name of the current-page key.
    per_page_key : str
        Display name of the page-size key.
    filters : tuple of str
        Extra tracked keys (filters and sort columns). Any iterable is
        accepted and stored as a tuple.
    fetch_on_start : bool
        Issue the initial fetch when the pager's async context is entered.
    fence_stale_fetches : bool
        Discard responses of fetches that were superseded by a newer one.
        When disabled, every completed fetch applies (last writer wins).
    """

    action_name: str = DEFAULT_ACTION_NAME
    page_key: str = DEFAULT_PAGE_KEY
    per_page_key: str = DEFAULT_PER_PAGE_KEY
    filters: tuple[str, ...] = ()
    fetch_on_start: bool = True
    fence_stale_fetches: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.filters, tuple):
            object.__setattr__(self, "filters", tuple(self.filters))
        for field_name in ("action_name", "page_key", "per_page_key"):
            if not getattr(self, field_name):
                raise PagerConfigError(f"{field_name} must be a non-empty string")
        if self.page_key == self.per_page_key:
            raise PagerConfigError("page_key and per_page_key must differ")

    @classmethod
    def from_env(cls, **overrides: Any) -> PagerConfig:
        """Create configuration from environment variables.

        Reads the optional ``ROUTEPAGER_*`` variables. Explicit keyword
        arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "ROUTEPAGER_ACTION_NAME": "action_name",
            "ROUTEPAGER_PAGE_KEY": "page_key",
            "ROUTEPAGER_PER_PAGE_KEY": "per_page_key",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        filters_env = env.get("ROUTEPAGER_FILTERS")
        if filters_env is not None:
            config_kwargs["filters"] = _env_list(filters_env)

        if "fetch_on_start" not in overrides:
            config_kwargs["fetch_on_start"] = _env_bool(env.get("ROUTEPAGER_FETCH_ON_START"), True)

        if "fence_stale_fetches" not in overrides:
            config_kwargs["fence_stale_fetches"] = _env_bool(
                env.get("ROUTEPAGER_FENCE_STALE_FETCHES"),
                True,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
