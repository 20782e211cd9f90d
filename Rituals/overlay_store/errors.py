"""
Exception hierarchy for the overlay store.

Only PersistenceFailure is expected to reach callers during normal use.
Missing ids are handled as silent no-ops by the stores, and malformed
arguments raise InvalidArgumentError before any record is touched.
"""

from typing import Optional


class OverlayStoreError(Exception):
    """Base class for all overlay/progress store errors."""


class NotFoundError(OverlayStoreError):
    """An id is absent from the overlay it was looked up in."""

    def __init__(self, collection: str, item_id):
        self.collection = collection
        self.item_id = item_id
        super().__init__(f"{collection}: id {item_id!r} not found")


class InvalidArgumentError(OverlayStoreError, ValueError):
    """An argument is outside the domain an operation accepts."""


class PersistenceFailure(OverlayStoreError):
    """The key-value substrate rejected a read or write."""

    def __init__(self, key: Optional[str], cause: Exception):
        self.key = key
        self.cause = cause
        where = f" for record '{key}'" if key else ""
        super().__init__(f"Persistence failure{where}: {cause}")
