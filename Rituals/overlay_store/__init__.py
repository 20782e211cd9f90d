"""
Persistent overlay store for ritual items.

Merges a read-only catalog with user overrides, custom items, deletions and
ordering, and keeps day-scoped progress counters, favorites and pins, all on
top of a local key-value substrate.
"""

from Rituals.overlay_store.catalog import Catalog
from Rituals.overlay_store.errors import (
    InvalidArgumentError,
    NotFoundError,
    OverlayStoreError,
    PersistenceFailure,
)
from Rituals.overlay_store.kv import KVStore, get_kv
from Rituals.overlay_store.ledger import Ledger
from Rituals.overlay_store.models import (
    CustomCategory,
    Direction,
    EffectiveItem,
    Item,
    ItemOrigin,
    LedgerEntry,
)
from Rituals.overlay_store.overlay import (
    OverlayStore,
    apply_order,
    custom_category_key,
    parse_custom_category_key,
)
from Rituals.overlay_store.progress import (
    SKIPPED,
    ProgressStats,
    ProgressStore,
    is_completed,
    is_remaining,
    is_skipped,
)

__all__ = [
    "Catalog",
    "CustomCategory",
    "Direction",
    "EffectiveItem",
    "InvalidArgumentError",
    "Item",
    "ItemOrigin",
    "KVStore",
    "Ledger",
    "LedgerEntry",
    "NotFoundError",
    "OverlayStore",
    "OverlayStoreError",
    "PersistenceFailure",
    "ProgressStats",
    "ProgressStore",
    "SKIPPED",
    "apply_order",
    "custom_category_key",
    "get_kv",
    "is_completed",
    "is_remaining",
    "is_skipped",
    "parse_custom_category_key",
]
