"""
Favorites, pinned shortcuts and recently viewed pages.

Toggles are symmetric: toggling the same id twice restores the previous
membership. The recent list keeps one entry per id, newest first, and is cut
to its limit after every insert.
"""

import logging
from typing import List, Set

from Rituals.error_logger import log_warning
from Rituals.overlay_store import codec
from Rituals.overlay_store.kv import KVStore
from Rituals.overlay_store.models import LedgerEntry

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 10


class Ledger:
    """Small user-owned sets that sit beside the overlays."""

    def __init__(self, kv: KVStore, recent_limit: int = DEFAULT_RECENT_LIMIT):
        self.kv = kv
        self.recent_limit = max(1, recent_limit)

    # -- favorites ----------------------------------------------------------

    def get_favorites(self) -> List[int]:
        """Favorite ids in the order they were added."""
        return codec.decode_id_list(self.kv.get_json(codec.FAVORITES_KEY), codec.FAVORITES_KEY)

    def is_favorite(self, item_id: int) -> bool:
        return item_id in self.get_favorites()

    def toggle_favorite(self, item_id: int) -> Set[int]:
        favorites = self.get_favorites()
        if item_id in favorites:
            favorites.remove(item_id)
        else:
            favorites.append(item_id)
        self.kv.put_json(codec.FAVORITES_KEY, codec.encode_id_list(favorites))
        logger.debug("favorite %s toggled", item_id)
        return set(favorites)

    # -- pins ---------------------------------------------------------------

    def _load_entries(self, key: str) -> List[LedgerEntry]:
        raw = self.kv.get_json(key, [])
        if not isinstance(raw, list):
            return []
        entries = []
        seen = set()
        for data in raw:
            try:
                entry = LedgerEntry.from_dict(data)
            except (KeyError, TypeError) as e:
                log_warning("ledger", f"Dropping malformed entry in '{key}': {e}")
                continue
            if entry.id in seen:
                continue
            seen.add(entry.id)
            entries.append(entry)
        return entries

    def _save_entries(self, key: str, entries: List[LedgerEntry]) -> None:
        self.kv.put_json(key, [entry.to_dict() for entry in entries])

    def get_pins(self) -> List[LedgerEntry]:
        return self._load_entries(codec.PINNED_KEY)

    def is_pinned(self, entry_id: str) -> bool:
        return any(entry.id == str(entry_id) for entry in self.get_pins())

    def toggle_pin(self, entry: LedgerEntry) -> List[LedgerEntry]:
        """Unpin if an entry with this id is pinned, else pin it at the end."""
        pins = self.get_pins()
        remaining = [pin for pin in pins if pin.id != entry.id]
        if len(remaining) == len(pins):
            remaining.append(entry)
        self._save_entries(codec.PINNED_KEY, remaining)
        return remaining

    # -- recent -------------------------------------------------------------

    def get_recent(self) -> List[LedgerEntry]:
        return self._load_entries(codec.RECENT_KEY)[:self.recent_limit]

    def add_recent(self, entry: LedgerEntry) -> List[LedgerEntry]:
        recent = [e for e in self.get_recent() if e.id != entry.id]
        recent.insert(0, entry)
        recent = recent[:self.recent_limit]
        self._save_entries(codec.RECENT_KEY, recent)
        return recent

    def clear_recent(self) -> None:
        self.kv.delete(codec.RECENT_KEY)
