"""Data models crossing the routepager boundary."""

from routepager.models.enums import FetchMode, SortDirection
from routepager.models.response import ListResponse
from routepager.models.route import Route

__all__ = [
    "FetchMode",
    "ListResponse",
    "Route",
    "SortDirection",
]
