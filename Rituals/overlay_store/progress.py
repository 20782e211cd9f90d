#!/usr/bin/env python3
"""
Day-scoped progress counters for ritual items.

Counters live in one record per local calendar day. A counter n for an item
means:
    0 <= n < target   in progress
    n >= target       completed
    n == -1           skipped (terminal, distinct from completed)

Only the current day's record feeds the "what is left today" views. Every
increment also lands in a permanent per-day history tally that rollover
never resets, and skips are logged separately, so statistics can tell
completed work from skipped work.

Usage:
    from Rituals.overlay_store import KVStore, ProgressStore

    progress = ProgressStore(KVStore(db_path))
    progress.increment(42)
    progress.get_today()   # {42: 1}
"""

import logging
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from Rituals.overlay_store import codec
from Rituals.overlay_store.errors import InvalidArgumentError
from Rituals.overlay_store.kv import KVStore

logger = logging.getLogger(__name__)

SKIPPED = -1
STREAK_LOOKBACK_DAYS = 365
WEEK_DAYS = 7


def is_skipped(count: int) -> bool:
    return count == SKIPPED


def is_completed(count: int, target: int) -> bool:
    return count >= target


def is_remaining(count: int, target: int) -> bool:
    return count != SKIPPED and count < target


def day_key(moment: datetime) -> str:
    """Calendar date of a moment as YYYY-MM-DD."""
    return moment.date().isoformat()


@dataclass
class ProgressStats:
    """Aggregates over the history ledger."""
    total_completed: int = 0
    today_count: int = 0
    weekly_count: int = 0
    current_streak: int = 0
    best_streak: int = 0
    skipped_today: int = 0
    skipped_total: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class ProgressStore:
    """Per-day counters, skip markers and target overrides."""

    def __init__(self, kv: KVStore, clock: Optional[Callable[[], datetime]] = None,
                 tz: Optional[tzinfo] = None):
        """
        Args:
            kv: Persistence handle
            clock: Source of "now"; defaults to the current time in tz
            tz: Timezone for day keys; None means system local
        """
        self.kv = kv
        self.tz = tz
        self._clock = clock or (lambda: datetime.now(tz))

    def today(self) -> str:
        """Day key for the current local date, resolved at call time."""
        now = self._clock()
        if self.tz is not None and now.tzinfo is not None:
            now = now.astimezone(self.tz)
        return day_key(now)

    # =========================================================================
    # COUNTERS
    # =========================================================================

    def get_day(self, day: str) -> Dict[int, int]:
        key = codec.progress_key(day)
        return codec.decode_count_map(self.kv.get_json(key), key)

    def get_today(self) -> Dict[int, int]:
        return self.get_day(self.today())

    def _save_day(self, day: str, counts: Dict[int, int]) -> None:
        self.kv.put_json(codec.progress_key(day), codec.encode_id_map(counts))

    def count(self, item_id: int, day: Optional[str] = None) -> int:
        return self.get_day(day or self.today()).get(item_id, 0)

    def increment(self, item_id: int, day: Optional[str] = None) -> int:
        """Add one to an item's counter for the day and return the new value.

        A skipped item restarts from zero and leaves the day's skip list.
        There is no upper clamp; callers stop tapping once the item is
        complete.
        """
        day = day or self.today()
        counts = self.get_day(day)
        previous = counts.get(item_id, 0)
        if is_skipped(previous):
            self._unrecord_skip(day, item_id)
        new_count = max(previous, 0) + 1
        counts[item_id] = new_count
        self._save_day(day, counts)
        self._add_history(day, item_id, 1)
        logger.debug("progress %s[%s] = %s", day, item_id, new_count)
        return new_count

    def set_count(self, item_id: int, count: int, day: Optional[str] = None) -> int:
        """Overwrite a counter (e.g. a manual reset to zero)."""
        if isinstance(count, bool) or not isinstance(count, int) or count < SKIPPED:
            raise InvalidArgumentError(f"Counter for {item_id} must be an integer >= -1")
        day = day or self.today()
        if is_skipped(count):
            self.mark_skipped(item_id, day)
            return count
        counts = self.get_day(day)
        if is_skipped(counts.get(item_id, 0)):
            self._unrecord_skip(day, item_id)
        counts[item_id] = count
        self._save_day(day, counts)
        return count

    def mark_skipped(self, item_id: int, day: Optional[str] = None) -> None:
        """Set the skip sentinel, replacing any count."""
        day = day or self.today()
        counts = self.get_day(day)
        if counts.get(item_id) == SKIPPED:
            return
        counts[item_id] = SKIPPED
        self._save_day(day, counts)

        key = codec.skips_key(day)
        skips = codec.decode_id_list(self.kv.get_json(key), key)
        if item_id not in skips:
            skips.append(item_id)
            self.kv.put_json(key, skips)
        logger.debug("progress %s[%s] skipped", day, item_id)

    def _unrecord_skip(self, day: str, item_id: int) -> None:
        key = codec.skips_key(day)
        skips = codec.decode_id_list(self.kv.get_json(key), key)
        if item_id in skips:
            skips.remove(item_id)
            self.kv.put_json(key, skips)

    def reset_today(self, ids: Optional[Iterable[int]] = None) -> List[int]:
        """Zero today's counters.

        Args:
            ids: Items to reset. None drops today's whole record,
                 including its skip list.

        Returns:
            The ids whose counters were reset.
        """
        day = self.today()
        counts = self.get_day(day)

        if ids is None:
            self.kv.delete(codec.progress_key(day))
            self.kv.delete(codec.skips_key(day))
            logger.info("progress for %s cleared", day)
            return sorted(counts)

        reset = []
        for item_id in ids:
            if is_skipped(counts.get(item_id, 0)):
                self._unrecord_skip(day, item_id)
            counts[item_id] = 0
            reset.append(item_id)
        if reset:
            self._save_day(day, counts)
            logger.info("progress for %s reset for %d items", day, len(reset))
        return reset

    # =========================================================================
    # TARGETS
    # =========================================================================

    def get_targets(self) -> Dict[int, int]:
        return codec.decode_count_map(
            self.kv.get_json(codec.CUSTOM_TARGETS_KEY), codec.CUSTOM_TARGETS_KEY
        )

    def set_target(self, item_id: int, target: int) -> None:
        if isinstance(target, bool) or not isinstance(target, int) or target < 1:
            raise InvalidArgumentError(f"Target for {item_id} must be a positive integer")
        targets = self.get_targets()
        targets[item_id] = target
        self.kv.put_json(codec.CUSTOM_TARGETS_KEY, codec.encode_id_map(targets))

    def clear_target(self, item_id: int) -> bool:
        targets = self.get_targets()
        if targets.pop(item_id, None) is None:
            return False
        self.kv.put_json(codec.CUSTOM_TARGETS_KEY, codec.encode_id_map(targets))
        return True

    def effective_target(self, item_id: int, fallback: int,
                         targets: Optional[Dict[int, int]] = None) -> int:
        """Custom target if one is set, else the item's own count."""
        if targets is None:
            targets = self.get_targets()
        return targets.get(item_id, fallback)

    # =========================================================================
    # ROLLOVER
    # =========================================================================

    def rollover_due(self, items: Sequence, counts: Optional[Dict[int, int]] = None,
                     targets: Optional[Dict[int, int]] = None) -> bool:
        """True when a non-empty scope is fully completed today with no skips.

        items need `id` and `count` attributes (e.g. EffectiveItem).
        """
        if not items:
            return False
        counts = self.get_today() if counts is None else counts
        targets = self.get_targets() if targets is None else targets
        for item in items:
            current = counts.get(item.id, 0)
            if is_skipped(current):
                return False
            if not is_completed(current, self.effective_target(item.id, item.count, targets)):
                return False
        return True

    def rollover(self, items: Sequence) -> bool:
        """Reset a fully completed scope so it can be worked through again."""
        if not self.rollover_due(items):
            return False
        self.reset_today(item.id for item in items)
        return True

    # =========================================================================
    # HISTORY & STATS
    # =========================================================================

    def _add_history(self, day: str, item_id: int, amount: int) -> None:
        key = codec.history_key(day)
        tally = codec.decode_count_map(self.kv.get_json(key), key)
        tally[item_id] = tally.get(item_id, 0) + amount
        self.kv.put_json(key, codec.encode_id_map(tally))

    def get_history(self, day: str) -> Dict[int, int]:
        key = codec.history_key(day)
        return codec.decode_count_map(self.kv.get_json(key), key)

    def get_skips(self, day: str) -> List[int]:
        key = codec.skips_key(day)
        return codec.decode_id_list(self.kv.get_json(key), key)

    def history_days(self) -> List[str]:
        prefix = codec.HISTORY_PREFIX
        return [key[len(prefix):] for key in self.kv.keys(prefix)]

    def get_heatmap(self) -> Dict[str, int]:
        """Total repetitions per day, for days with any activity."""
        heatmap = {}
        for day in self.history_days():
            total = sum(v for v in self.get_history(day).values() if v > 0)
            if total > 0:
                heatmap[day] = total
        return heatmap

    def get_stats(self) -> ProgressStats:
        heatmap = self.get_heatmap()
        today = date.fromisoformat(self.today())
        stats = ProgressStats()

        week_start = today - timedelta(days=WEEK_DAYS - 1)
        for day, total in heatmap.items():
            stats.total_completed += total
            try:
                day_date = date.fromisoformat(day)
            except ValueError:
                continue
            if day_date == today:
                stats.today_count = total
            if week_start <= day_date <= today:
                stats.weekly_count += total

        # An empty today does not break a streak that ran through yesterday
        for offset in range(STREAK_LOOKBACK_DAYS):
            key = (today - timedelta(days=offset)).isoformat()
            if key in heatmap:
                stats.current_streak += 1
            elif offset == 0:
                continue
            else:
                break

        run = 0
        previous = None
        for day in sorted(heatmap):
            try:
                day_date = date.fromisoformat(day)
            except ValueError:
                continue
            run = run + 1 if previous and day_date - previous == timedelta(days=1) else 1
            stats.best_streak = max(stats.best_streak, run)
            previous = day_date

        stats.skipped_today = len(self.get_skips(today.isoformat()))
        prefix = codec.SKIPS_PREFIX
        stats.skipped_total = sum(
            len(self.get_skips(key[len(prefix):])) for key in self.kv.keys(prefix)
        )
        return stats
