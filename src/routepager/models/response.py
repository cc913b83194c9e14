"""List fetch response model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ListResponse(BaseModel):
    """One page of rows plus the total row count reported by the backend.

    Accepts the bare ``{"data": [...], "total": n}`` shape as well as an
    HTTP-client style wrapper whose ``data`` holds that body.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    data: list[Any] = Field(default_factory=list)
    total: int = 0

    @model_validator(mode="before")
    @classmethod
    def _unwrap_body(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        inner = values.get("data")
        if isinstance(inner, dict) and "data" in inner:
            return inner
        return values
