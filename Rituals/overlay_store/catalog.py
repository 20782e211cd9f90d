"""
Read-only catalog of default ritual items.

The catalog is loaded once and never mutated; user edits live in the
overlay store and only shadow catalog entries.
"""

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from Rituals.overlay_store.codec import CUSTOM_CATEGORY_PREFIX
from Rituals.overlay_store.errors import InvalidArgumentError
from Rituals.overlay_store.models import Item


class Catalog:
    """Immutable collection of catalog items keyed by id."""

    def __init__(self, items: Iterable[Item]):
        ordered: List[Item] = []
        by_id: Dict[int, Item] = {}
        for item in items:
            if item.id in by_id:
                raise InvalidArgumentError(f"Duplicate catalog id {item.id}")
            if item.category.startswith(CUSTOM_CATEGORY_PREFIX):
                raise InvalidArgumentError(
                    f"Catalog item {item.id}: category '{item.category}' uses the reserved "
                    f"prefix '{CUSTOM_CATEGORY_PREFIX}'"
                )
            by_id[item.id] = item
            ordered.append(item)
        self._items: Tuple[Item, ...] = tuple(ordered)
        self._by_id = by_id

    @classmethod
    def from_dicts(cls, rows: Iterable[dict]) -> "Catalog":
        return cls(Item.from_dict(row) for row in rows)

    @classmethod
    def from_json(cls, path: Path) -> "Catalog":
        """Load a catalog file: a JSON list of items, or {"items": [...]}."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get("items", [])
        if not isinstance(data, list):
            raise InvalidArgumentError(f"Catalog {path} must contain a list of items")
        return cls.from_dicts(data)

    def list_items(self) -> Tuple[Item, ...]:
        """All items in catalog order."""
        return self._items

    def items_in(self, category: str) -> List[Item]:
        return [item for item in self._items if item.category == category]

    def get(self, item_id: int) -> Optional[Item]:
        return self._by_id.get(item_id)

    def contains(self, item_id: int) -> bool:
        return item_id in self._by_id

    def max_id(self) -> int:
        return max(self._by_id, default=0)

    def categories(self) -> List[str]:
        """Category ids in order of first appearance."""
        seen: List[str] = []
        for item in self._items:
            if item.category not in seen:
                seen.append(item.category)
        return seen

    def __len__(self) -> int:
        return len(self._items)
