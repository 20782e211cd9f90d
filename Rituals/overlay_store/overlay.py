#!/usr/bin/env python3
"""
Overlay store: merges the read-only catalog with user edits.

Four overlay collections shadow the catalog:
    overrides         user edits of catalog items, keyed by catalog id
    custom items      user-created items with ids above the catalog's range
    deleted defaults  tombstoned catalog ids
    order lists       per-category partial id orderings

effective_items() resolves each visible id once, in this precedence:
tombstone (hidden) > override > catalog item > custom item. The result is
the catalog-derived items in catalog order followed by custom items in
creation order, stably re-sorted so ids in the category's order list come
first in listed order.

Usage:
    from Rituals.overlay_store import Catalog, KVStore, OverlayStore

    overlay = OverlayStore(KVStore(db_path), Catalog.from_json(catalog_path))
    for item in overlay.effective_items("morning"):
        print(item.id, item.text)
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

from Rituals.error_logger import log_warning
from Rituals.overlay_store import codec
from Rituals.overlay_store.catalog import Catalog
from Rituals.overlay_store.errors import InvalidArgumentError
from Rituals.overlay_store.kv import KVStore
from Rituals.overlay_store.models import (
    CustomCategory,
    Direction,
    EffectiveItem,
    Item,
    ItemOrigin,
)

logger = logging.getLogger(__name__)

CUSTOM_CATEGORY_PREFIX = codec.CUSTOM_CATEGORY_PREFIX

T = TypeVar("T")


def custom_category_key(category_id: str) -> str:
    """Order-list / view key for a user-defined category."""
    return f"{CUSTOM_CATEGORY_PREFIX}{category_id}"


def parse_custom_category_key(category_key: str) -> Optional[str]:
    """Return the custom category id for a custom key, else None."""
    if category_key.startswith(CUSTOM_CATEGORY_PREFIX):
        return category_key[len(CUSTOM_CATEGORY_PREFIX):]
    return None


def apply_order(items: Sequence[T], order: Sequence[int],
                key: Callable[[T], int] = lambda item: item.id) -> List[T]:
    """Stable partial reorder.

    Items whose id appears in order come first, in order-list sequence.
    The rest follow in their original relative order.
    """
    rank: Dict[int, int] = {}
    for index, item_id in enumerate(order):
        rank.setdefault(item_id, index)

    def sort_key(pair):
        position, item = pair
        item_id = key(item)
        if item_id in rank:
            return (0, rank[item_id])
        return (1, position)

    return [item for _, item in sorted(enumerate(items), key=sort_key)]


class OverlayStore:
    """Catalog + overlays projected into ordered per-category views."""

    def __init__(self, kv: KVStore, catalog: Catalog,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            kv: Persistence handle
            catalog: Immutable default items
            clock: Source of "now" for custom ids; defaults to datetime.now
        """
        self.kv = kv
        self.catalog = catalog
        self._clock = clock or datetime.now

    # =========================================================================
    # MERGED VIEW
    # =========================================================================

    def effective_items(self, category_key: str) -> List[EffectiveItem]:
        """Ordered effective items for a standard or custom category key."""
        custom_category_id = parse_custom_category_key(category_key)
        deleted = set(self.get_deleted_defaults())
        overrides = self.get_overrides()

        merged: List[EffectiveItem] = []
        if custom_category_id is None:
            for item in self.catalog.items_in(category_key):
                if item.id in deleted:
                    continue
                override = overrides.get(item.id)
                if override is not None:
                    merged.append(EffectiveItem.resolve(override, ItemOrigin.OVERRIDDEN))
                else:
                    merged.append(EffectiveItem.resolve(item, ItemOrigin.DEFAULT))

        for item in self.get_custom_items():
            if self.catalog.contains(item.id):
                continue
            if custom_category_id is not None:
                if item.custom_category_id != custom_category_id:
                    continue
            elif item.custom_category_id is not None or item.category != category_key:
                continue
            merged.append(EffectiveItem.resolve(item, ItemOrigin.CUSTOM))

        return apply_order(merged, self.get_order(category_key))

    def effective_item(self, item_id: int) -> Optional[EffectiveItem]:
        """Resolve a single id regardless of category; None if hidden or unknown."""
        catalog_item = self.catalog.get(item_id)
        if catalog_item is not None:
            if item_id in set(self.get_deleted_defaults()):
                return None
            override = self.get_overrides().get(item_id)
            if override is not None:
                return EffectiveItem.resolve(override, ItemOrigin.OVERRIDDEN)
            return EffectiveItem.resolve(catalog_item, ItemOrigin.DEFAULT)

        for item in self.get_custom_items():
            if item.id == item_id:
                return EffectiveItem.resolve(item, ItemOrigin.CUSTOM)
        return None

    # =========================================================================
    # OVERRIDES
    # =========================================================================

    def get_overrides(self) -> Dict[int, Item]:
        raw = codec.decode_id_map(self.kv.get_json(codec.OVERRIDES_KEY), codec.OVERRIDES_KEY)
        overrides = {}
        for item_id, data in raw.items():
            try:
                item = Item.from_dict(data)
            except (InvalidArgumentError, KeyError, TypeError) as e:
                log_warning("overlay", f"Dropping malformed override {item_id}: {e}")
                continue
            if item.id != item_id:
                log_warning("overlay", f"Override keyed {item_id} carries id {item.id}; ignoring")
                continue
            overrides[item_id] = item
        return overrides

    def _save_overrides(self, overrides: Dict[int, Item]) -> None:
        self.kv.put_json(
            codec.OVERRIDES_KEY,
            codec.encode_id_map({k: v.to_dict() for k, v in overrides.items()}),
        )

    def upsert_override(self, item: Item) -> bool:
        """Store a user edit of a catalog item.

        Tombstoned ids are accepted: restoring the item later shows the
        edited content. Category membership stays with the catalog entry.

        Returns:
            False (nothing written) if item.id is not a catalog id.
        """
        catalog_item = self.catalog.get(item.id)
        if catalog_item is None:
            log_warning("overlay", f"upsert_override: {item.id} is not a catalog id")
            return False

        if item.category != catalog_item.category or item.custom_category_id is not None:
            item = Item(
                id=item.id,
                category=catalog_item.category,
                text=item.text,
                count=item.count,
                source=item.source,
                benefit=item.benefit,
            )

        overrides = self.get_overrides()
        overrides[item.id] = item
        self._save_overrides(overrides)
        logger.debug("override saved for %s", item.id)
        return True

    def revert_override(self, item_id: int) -> bool:
        """Drop a user edit. Missing overrides are a no-op."""
        overrides = self.get_overrides()
        if overrides.pop(item_id, None) is None:
            return False
        self._save_overrides(overrides)
        logger.debug("override reverted for %s", item_id)
        return True

    # =========================================================================
    # TOMBSTONES
    # =========================================================================

    def get_deleted_defaults(self) -> List[int]:
        return codec.decode_id_list(
            self.kv.get_json(codec.DELETED_DEFAULTS_KEY), codec.DELETED_DEFAULTS_KEY
        )

    def is_deleted(self, item_id: int) -> bool:
        return item_id in self.get_deleted_defaults()

    def delete_default(self, item_id: int) -> bool:
        """Hide a catalog item and drop any edit of it.

        The tombstone is written before the override is dropped.

        Returns:
            False for non-catalog ids (nothing written), else True.
        """
        if not self.catalog.contains(item_id):
            log_warning("overlay", f"delete_default: {item_id} is not a catalog id")
            return False

        deleted = self.get_deleted_defaults()
        if item_id not in deleted:
            deleted.append(item_id)
            self.kv.put_json(codec.DELETED_DEFAULTS_KEY, codec.encode_id_list(deleted))
        self.revert_override(item_id)
        logger.debug("default %s deleted", item_id)
        return True

    def restore_default(self, item_id: int) -> bool:
        """Remove a tombstone. Returns False if the id was not deleted."""
        deleted = self.get_deleted_defaults()
        if item_id not in deleted:
            return False
        deleted.remove(item_id)
        self.kv.put_json(codec.DELETED_DEFAULTS_KEY, codec.encode_id_list(deleted))
        logger.debug("default %s restored", item_id)
        return True

    # =========================================================================
    # CUSTOM ITEMS
    # =========================================================================

    def get_custom_items(self) -> List[Item]:
        """Custom items in creation order."""
        raw = self.kv.get_json(codec.CUSTOM_ITEMS_KEY, [])
        if not isinstance(raw, list):
            log_warning("overlay", f"Record '{codec.CUSTOM_ITEMS_KEY}' is not a list; ignoring")
            return []
        items = []
        seen = set()
        for data in raw:
            try:
                item = Item.from_dict(data)
            except (InvalidArgumentError, KeyError, TypeError) as e:
                log_warning("overlay", f"Dropping malformed custom item: {e}")
                continue
            if item.id in seen:
                continue
            seen.add(item.id)
            items.append(item)
        return items

    def _save_custom_items(self, items: List[Item]) -> None:
        self.kv.put_json(codec.CUSTOM_ITEMS_KEY, [item.to_dict() for item in items])

    def new_custom_id(self) -> int:
        """Timestamp-derived id above every catalog and existing custom id."""
        candidate = int(self._clock().timestamp() * 1000)
        floor = max(
            [self.catalog.max_id()] + [item.id for item in self.get_custom_items()]
        ) + 1
        return max(candidate, floor)

    def add_custom_item(self, category: str, text: str, count: int = 1,
                        source: Optional[str] = None, benefit: Optional[str] = None,
                        custom_category_id: Optional[str] = None) -> Item:
        """Create a custom item with a fresh id and append it."""
        if not text or not text.strip():
            raise InvalidArgumentError("Custom item text must not be empty")
        item = Item(
            id=self.new_custom_id(),
            category=category,
            text=text.strip(),
            count=count,
            source=source,
            benefit=benefit,
            custom_category_id=custom_category_id,
        )
        self.upsert_custom_item(item)
        return item

    def upsert_custom_item(self, item: Item) -> Item:
        """Insert or replace a custom item; new items go to the end."""
        if self.catalog.contains(item.id):
            raise InvalidArgumentError(
                f"Custom item id {item.id} collides with a catalog id; use upsert_override"
            )
        items = self.get_custom_items()
        for index, existing in enumerate(items):
            if existing.id == item.id:
                items[index] = item
                break
        else:
            items.append(item)
        self._save_custom_items(items)
        logger.debug("custom item %s saved", item.id)
        return item

    def delete_custom_item(self, item_id: int) -> bool:
        """Remove a custom item. Unknown ids are a silent no-op."""
        items = self.get_custom_items()
        remaining = [item for item in items if item.id != item_id]
        if len(remaining) == len(items):
            return False
        self._save_custom_items(remaining)
        logger.debug("custom item %s deleted", item_id)
        return True

    # =========================================================================
    # ORDER LISTS
    # =========================================================================

    def get_order(self, category_key: str) -> List[int]:
        key = codec.order_key(category_key)
        return codec.decode_id_list(self.kv.get_json(key), key)

    def set_order(self, category_key: str, ids: Sequence[int]) -> List[int]:
        """Persist an id ordering for a category key (duplicates dropped)."""
        order = codec.encode_id_list(ids)
        self.kv.put_json(codec.order_key(category_key), order)
        logger.debug("order for %s set to %s", category_key, order)
        return order

    def clear_order(self, category_key: str) -> bool:
        return self.kv.delete(codec.order_key(category_key))

    def move_adjacent(self, category_key: str, item_id: int, direction) -> bool:
        """Swap an item with its neighbour in the current merged order.

        The full resulting sequence becomes the category's order list.
        Moving the first item up, the last item down, or an id that is not
        in the view changes nothing.
        """
        direction = Direction.parse(direction)
        ids = [item.id for item in self.effective_items(category_key)]
        if item_id not in ids:
            return False

        index = ids.index(item_id)
        target = index - 1 if direction == Direction.UP else index + 1
        if target < 0 or target >= len(ids):
            return False

        ids[index], ids[target] = ids[target], ids[index]
        self.set_order(category_key, ids)
        return True

    # =========================================================================
    # CUSTOM CATEGORIES
    # =========================================================================

    def list_custom_categories(self) -> List[CustomCategory]:
        raw = self.kv.get_json(codec.CUSTOM_CATEGORIES_KEY, [])
        if not isinstance(raw, list):
            return []
        categories = []
        for data in raw:
            try:
                categories.append(CustomCategory.from_dict(data))
            except (KeyError, TypeError) as e:
                log_warning("overlay", f"Dropping malformed custom category: {e}")
        return categories

    def get_custom_category(self, category_id: str) -> Optional[CustomCategory]:
        for category in self.list_custom_categories():
            if category.id == category_id:
                return category
        return None

    def save_custom_category(self, category: CustomCategory) -> CustomCategory:
        """Insert or replace a custom category."""
        if not category.title.strip():
            raise InvalidArgumentError("Category title must not be empty")
        if category.created_at is None:
            category.created_at = int(self._clock().timestamp() * 1000)
        categories = self.list_custom_categories()
        for index, existing in enumerate(categories):
            if existing.id == category.id:
                categories[index] = category
                break
        else:
            categories.append(category)
        self.kv.put_json(codec.CUSTOM_CATEGORIES_KEY, [c.to_dict() for c in categories])
        return category

    def create_custom_category(self, title: str) -> CustomCategory:
        now_ms = int(self._clock().timestamp() * 1000)
        existing = {c.id for c in self.list_custom_categories()}
        category_id = str(now_ms)
        while category_id in existing:
            now_ms += 1
            category_id = str(now_ms)
        return self.save_custom_category(
            CustomCategory(id=category_id, title=title.strip(), created_at=now_ms)
        )

    def delete_custom_category(self, category_id: str) -> bool:
        """Remove the category record only; its items and order list stay."""
        categories = self.list_custom_categories()
        remaining = [c for c in categories if c.id != category_id]
        if len(remaining) == len(categories):
            return False
        self.kv.put_json(codec.CUSTOM_CATEGORIES_KEY, [c.to_dict() for c in remaining])
        return True
