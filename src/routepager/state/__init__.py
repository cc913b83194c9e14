"""State layer.

Holds the primitives the sync engine is built on: the observable mappings
for working filter values and mirrored query values, and the guard that
decides whether changes to the latter may propagate to the route.
"""

from routepager.state.guard import SyncGuard
from routepager.state.values import StateMap

__all__ = ["StateMap", "SyncGuard"]
