"""Route snapshot model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Route(BaseModel):
    """The current route: a name plus its query string as a mapping.

    The route layer stores every query value as a string. ``None`` values
    are dropped (they mean "unset").
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str | None = None
    query: dict[str, str] = Field(default_factory=dict)

    @field_validator("query", mode="before")
    @classmethod
    def _stringify_query(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {str(key): str(item) for key, item in value.items() if item is not None}
