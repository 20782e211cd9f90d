"""
Record names and id codecs for persisted collections.

Layout (all values JSON):
    overrides_v1              {"<id>": item}
    custom_items_v1           [item, ...]            creation order
    deleted_defaults_v1       [id, ...]
    order_v1:<category_key>   [id, ...]
    custom_categories_v1      [category, ...]
    progress_v1:<day>         {"<id>": count}
    history_v1:<day>          {"<id>": total}
    skips_v1:<day>            [id, ...]
    custom_targets_v1         {"<id>": target}
    favorites_v1              [id, ...]
    pinned_v1                 [entry, ...]
    recent_v1                 [entry, ...]

Ids are written as JSON integers in lists and as decimal strings when they
are map keys.
"""

from typing import Any, Dict, Iterable, List, Optional

from Rituals.error_logger import log_warning

OVERRIDES_KEY = "overrides_v1"
CUSTOM_ITEMS_KEY = "custom_items_v1"
DELETED_DEFAULTS_KEY = "deleted_defaults_v1"
CUSTOM_CATEGORIES_KEY = "custom_categories_v1"
CUSTOM_TARGETS_KEY = "custom_targets_v1"
FAVORITES_KEY = "favorites_v1"
PINNED_KEY = "pinned_v1"
RECENT_KEY = "recent_v1"

ORDER_PREFIX = "order_v1:"
PROGRESS_PREFIX = "progress_v1:"
HISTORY_PREFIX = "history_v1:"
SKIPS_PREFIX = "skips_v1:"

# View-key prefix for user-defined categories, reserved in the catalog
CUSTOM_CATEGORY_PREFIX = "custom_"


def order_key(category_key: str) -> str:
    return ORDER_PREFIX + category_key


def progress_key(day: str) -> str:
    return PROGRESS_PREFIX + day


def history_key(day: str) -> str:
    return HISTORY_PREFIX + day


def skips_key(day: str) -> str:
    return SKIPS_PREFIX + day


def parse_id(value: Any) -> Optional[int]:
    """Convert a stored id (int or decimal string) to int, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def encode_id_list(ids: Iterable[int]) -> List[int]:
    """Dedupe while keeping first occurrence order."""
    seen = set()
    out = []
    for item_id in ids:
        if item_id not in seen:
            seen.add(item_id)
            out.append(int(item_id))
    return out


def decode_id_list(raw: Any, record: str = "") -> List[int]:
    if not isinstance(raw, list):
        if raw is not None:
            log_warning("codec", f"Record '{record}' is not a list; ignoring")
        return []
    ids = []
    for value in raw:
        item_id = parse_id(value)
        if item_id is None:
            log_warning("codec", f"Dropping malformed id {value!r} in '{record}'")
            continue
        ids.append(item_id)
    return encode_id_list(ids)


def encode_id_map(values: Dict[int, Any]) -> Dict[str, Any]:
    return {str(item_id): value for item_id, value in values.items()}


def decode_id_map(raw: Any, record: str = "") -> Dict[int, Any]:
    if not isinstance(raw, dict):
        if raw is not None:
            log_warning("codec", f"Record '{record}' is not a mapping; ignoring")
        return {}
    out = {}
    for key, value in raw.items():
        item_id = parse_id(key)
        if item_id is None:
            log_warning("codec", f"Dropping malformed key {key!r} in '{record}'")
            continue
        out[item_id] = value
    return out


def decode_count_map(raw: Any, record: str = "") -> Dict[int, int]:
    """Id map whose values must be integers (counters, targets)."""
    out = {}
    for item_id, value in decode_id_map(raw, record).items():
        if isinstance(value, bool) or not isinstance(value, int):
            log_warning("codec", f"Dropping non-integer value {value!r} for id {item_id} in '{record}'")
            continue
        out[item_id] = value
    return out
