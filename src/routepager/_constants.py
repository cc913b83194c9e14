"""Constants shared across routepager modules."""

from __future__ import annotations

#: Page number used when the route carries no (or a falsy) page value.
DEFAULT_PAGE: int = 1

#: Page size used when the route carries no (or a falsy) page-size value.
DEFAULT_PER_PAGE: int = 20

DEFAULT_ACTION_NAME = "fetchList"
DEFAULT_PAGE_KEY = "page"
DEFAULT_PER_PAGE_KEY = "per_page"

#: Keys whose canonical name contains this marker are sortable columns.
SORT_KEY_MARKER = "sort_"

USER_AGENT = "routepager/0.1"
