#!/usr/bin/env python3
"""
Category view controller.

Composes the overlay, progress and ledger stores into what a category screen
needs: the merged items, today's counters, and which items are still left.
Loading a category that is fully completed for today resets its counters so
the category can be worked through again the same day.

Composite mutations write the overlay collections first and rebuild the
snapshot afterwards, so a snapshot never lists an item the overlays do not
hold.

Usage:
    from Rituals.category_view import CategoryView

    view = CategoryView(overlay, progress, ledger)
    snapshot = view.load("morning")
    for item in snapshot.remaining_items():
        print(item.text, snapshot.counts.get(item.id, 0), "/", snapshot.targets[item.id])
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from Rituals.overlay_store import (
    EffectiveItem,
    Item,
    Ledger,
    LedgerEntry,
    NotFoundError,
    OverlayStore,
    ProgressStore,
    custom_category_key,
    is_completed,
    is_remaining,
    is_skipped,
    parse_custom_category_key,
)

logger = logging.getLogger(__name__)


@dataclass
class CategorySnapshot:
    """Everything a category screen renders, computed in one pass."""
    category_key: str
    day: str
    items: List[EffectiveItem]
    counts: Dict[int, int]
    targets: Dict[int, int]
    favorites: List[int] = field(default_factory=list)
    rolled_over: bool = False

    @property
    def remaining_ids(self) -> List[int]:
        return [item.id for item in self.items
                if is_remaining(self.counts.get(item.id, 0), self.targets[item.id])]

    def remaining_items(self) -> List[EffectiveItem]:
        remaining = set(self.remaining_ids)
        return [item for item in self.items if item.id in remaining]

    @property
    def completed_count(self) -> int:
        return sum(1 for item in self.items
                   if is_completed(self.counts.get(item.id, 0), self.targets[item.id]))

    @property
    def skipped_count(self) -> int:
        return sum(1 for item in self.items if is_skipped(self.counts.get(item.id, 0)))

    @property
    def percentage(self) -> float:
        if not self.items:
            return 0.0
        done = len(self.items) - len(self.remaining_ids)
        return done / len(self.items) * 100

    @property
    def total_repetitions(self) -> int:
        return sum(self.targets[item.id] for item in self.items)


class CategoryView:
    """Presentation-facing operations over the three stores."""

    def __init__(self, overlay: OverlayStore, progress: ProgressStore, ledger: Ledger):
        self.overlay = overlay
        self.progress = progress
        self.ledger = ledger

    def _snapshot(self, category_key: str, rolled_over: bool = False) -> CategorySnapshot:
        items = self.overlay.effective_items(category_key)
        targets_override = self.progress.get_targets()
        return CategorySnapshot(
            category_key=category_key,
            day=self.progress.today(),
            items=items,
            counts=self.progress.get_today(),
            targets={item.id: self.progress.effective_target(item.id, item.count, targets_override)
                     for item in items},
            favorites=self.ledger.get_favorites(),
            rolled_over=rolled_over,
        )

    def load(self, category_key: str) -> CategorySnapshot:
        """Snapshot a category, rolling it over first if it is fully done."""
        snapshot = self._snapshot(category_key)
        if self.progress.rollover_due(snapshot.items, snapshot.counts, snapshot.targets):
            self.progress.reset_today(item.id for item in snapshot.items)
            logger.info("category %s rolled over for %s", category_key, snapshot.day)
            snapshot = self._snapshot(category_key, rolled_over=True)
        return snapshot

    def open(self, category_key: str) -> CategorySnapshot:
        """Load a category and record it in the recently viewed list."""
        snapshot = self.load(category_key)
        if snapshot.items:
            custom_id = parse_custom_category_key(category_key)
            category = self.overlay.get_custom_category(custom_id) if custom_id else None
            self.ledger.add_recent(LedgerEntry(
                id=category_key,
                type="category",
                title=category.title if category else category_key,
                path=f"/category/{category_key}",
            ))
        return snapshot

    def _require(self, item_id: int) -> EffectiveItem:
        item = self.overlay.effective_item(item_id)
        if item is None:
            raise NotFoundError("items", item_id)
        return item

    def tap(self, item_id: int) -> int:
        """Count one repetition of a visible item; returns the new counter."""
        self._require(item_id)
        return self.progress.increment(item_id)

    def skip(self, item_id: int) -> None:
        self._require(item_id)
        self.progress.mark_skipped(item_id)

    def toggle_favorite(self, item_id: int) -> bool:
        """Returns the new membership."""
        return item_id in self.ledger.toggle_favorite(item_id)

    def favorite_items(self) -> List[EffectiveItem]:
        """Favorited items that are still visible, in favoriting order."""
        items = []
        for item_id in self.ledger.get_favorites():
            item = self.overlay.effective_item(item_id)
            if item is not None:
                items.append(item)
        return items

    def add_custom_item(self, category_key: str, text: str, count: int = 1,
                        source: Optional[str] = None,
                        benefit: Optional[str] = None) -> CategorySnapshot:
        """Create an item in a standard or custom category and reload the view."""
        custom_category_id = parse_custom_category_key(category_key)
        self.overlay.add_custom_item(
            category="custom" if custom_category_id else category_key,
            text=text,
            count=count,
            source=source,
            benefit=benefit,
            custom_category_id=custom_category_id,
        )
        return self.load(category_key)

    def edit_item(self, item: Item) -> bool:
        """Route an edit to the override or custom-item collection by id space."""
        if self.overlay.catalog.contains(item.id):
            return self.overlay.upsert_override(item)
        self.overlay.upsert_custom_item(item)
        return True

    def delete_item(self, item_id: int) -> bool:
        """Delete a catalog item (tombstone) or a custom item."""
        if self.overlay.catalog.contains(item_id):
            return self.overlay.delete_default(item_id)
        return self.overlay.delete_custom_item(item_id)

    def delete_custom_category(self, category_id: str) -> int:
        """Delete a custom category together with its items and order list.

        Returns:
            Number of items removed.
        """
        removed = 0
        for item in self.overlay.get_custom_items():
            if item.custom_category_id == category_id:
                removed += int(self.overlay.delete_custom_item(item.id))
        self.overlay.clear_order(custom_category_key(category_id))
        self.overlay.delete_custom_category(category_id)
        logger.info("custom category %s deleted with %d items", category_id, removed)
        return removed
