"""
Value types for the overlay store.

Catalog items, overrides and custom items share one shape (Item). The merge
resolves each visible id once into an EffectiveItem tagged with where its
content came from.
"""

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional

from Rituals.overlay_store.errors import InvalidArgumentError


class ItemOrigin(str, Enum):
    """Which layer an effective item's content came from."""
    DEFAULT = "default"
    OVERRIDDEN = "overridden"
    CUSTOM = "custom"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"

    @classmethod
    def parse(cls, value) -> "Direction":
        try:
            return cls(value)
        except ValueError:
            raise InvalidArgumentError(f"Unknown direction {value!r}; expected 'up' or 'down'")


@dataclass(frozen=True)
class Item:
    """A ritual item: a catalog entry, a user edit of one, or a custom entry."""
    id: int
    category: str
    text: str
    count: int = 1  # default target
    source: Optional[str] = None
    benefit: Optional[str] = None
    custom_category_id: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.id, bool) or not isinstance(self.id, int):
            raise InvalidArgumentError(f"Item id must be an integer, got {self.id!r}")
        if isinstance(self.count, bool) or not isinstance(self.count, int) or self.count < 1:
            raise InvalidArgumentError(f"Item {self.id}: count must be a positive integer")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Item":
        """Create from a stored or catalog dictionary; unknown keys are ignored."""
        if not isinstance(data, dict):
            raise TypeError(f"Item record must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        # Accept camelCase from exported catalogs
        if "customCategoryId" in data and "custom_category_id" not in values:
            values["custom_category_id"] = data["customCategoryId"]
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class EffectiveItem:
    """An item as it appears in a merged category view."""
    id: int
    category: str
    text: str
    count: int
    origin: ItemOrigin
    source: Optional[str] = None
    benefit: Optional[str] = None
    custom_category_id: Optional[str] = None

    @classmethod
    def resolve(cls, item: Item, origin: ItemOrigin) -> "EffectiveItem":
        return cls(
            id=item.id,
            category=item.category,
            text=item.text,
            count=item.count,
            origin=origin,
            source=item.source,
            benefit=item.benefit,
            custom_category_id=item.custom_category_id,
        )

    @property
    def is_custom(self) -> bool:
        return self.origin == ItemOrigin.CUSTOM


@dataclass
class CustomCategory:
    """A user-defined category."""
    id: str
    title: str
    created_at: Optional[int] = None  # epoch milliseconds

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CustomCategory":
        if not isinstance(data, dict):
            raise TypeError(f"Category record must be a mapping, got {type(data).__name__}")
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            created_at=data.get("created_at", data.get("createdAt")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class LedgerEntry:
    """A pinned shortcut or a recently viewed page."""
    id: str
    type: str
    title: str
    path: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerEntry":
        if not isinstance(data, dict):
            raise TypeError(f"Ledger entry must be a mapping, got {type(data).__name__}")
        return cls(
            id=str(data["id"]),
            type=str(data.get("type", "")),
            title=str(data.get("title", "")),
            path=str(data.get("path", "")),
            metadata=dict(data.get("metadata") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
