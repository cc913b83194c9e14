"""routepager - keep a list view's pagination, filters and sort in the route query."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("routepager")
except PackageNotFoundError:
    __version__ = "0+local"
from routepager._constants import DEFAULT_PAGE, DEFAULT_PER_PAGE
from routepager.actions import ActionRegistry, ActionStore, HttpListAction
from routepager.config import PagerConfig
from routepager.exceptions import (
    PagerConfigError,
    PagerError,
    PagerResponseError,
    PagerTransportError,
)
from routepager.fetch import FetchOrchestrator
from routepager.keys import FilterKey, KeyRegistry
from routepager.models import FetchMode, ListResponse, Route, SortDirection
from routepager.pager import RoutePager
from routepager.pagination import DataMeta, PaginationView
from routepager.routing import MemoryRouter, Router
from routepager.sorting import SortToggle
from routepager.state import StateMap, SyncGuard
from routepager.sync import RouteQuerySync

__all__ = [
    "__version__",
    "DEFAULT_PAGE",
    "DEFAULT_PER_PAGE",
    "ActionRegistry",
    "ActionStore",
    "DataMeta",
    "FetchMode",
    "FetchOrchestrator",
    "FilterKey",
    "HttpListAction",
    "KeyRegistry",
    "ListResponse",
    "MemoryRouter",
    "PagerConfig",
    "PagerConfigError",
    "PagerError",
    "PagerResponseError",
    "PagerTransportError",
    "PaginationView",
    "Route",
    "RoutePager",
    "RouteQuerySync",
    "Router",
    "SortDirection",
    "SortToggle",
    "StateMap",
    "SyncGuard",
]
