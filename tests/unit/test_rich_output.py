#!/usr/bin/env python3
"""
Unit tests for Rituals/rich_output.py
"""

from Rituals.overlay_store import ProgressStats
from Rituals.rich_output import category_table, get_progress_style, stats_panel


class TestProgressStyle:

    def test_thresholds(self):
        assert get_progress_style(100) == "green"
        assert get_progress_style(50) == "yellow"
        assert get_progress_style(10) == "red"


class TestCategoryTable:
    """Rendering of category snapshots."""

    def test_renders_items_and_states(self, view):
        view.tap(2)
        view.skip(3)
        view.toggle_favorite(1)
        output = category_table(view.load("morning"), return_string=True)

        assert "morning" in output
        assert "Morning praise" in output
        assert "1/1" in output
        assert "skipped" in output
        assert "0/3" in output

    def test_marks_custom_and_edited(self, view):
        from Rituals.overlay_store import Item

        view.edit_item(Item(id=5, category="evening", text="Edited text"))
        view.add_custom_item("evening", "Mine")
        output = category_table(view.load("evening"), return_string=True)

        assert "edited" in output
        assert "custom" in output

    def test_prints_when_not_returning(self, view, capsys):
        assert category_table(view.load("sleep")) is None
        assert "Before sleep" in capsys.readouterr().out


class TestStatsPanel:

    def test_renders_counts(self):
        stats = ProgressStats(total_completed=42, today_count=5, weekly_count=20,
                              current_streak=3, best_streak=9, skipped_today=1)
        output = stats_panel(stats, return_string=True)

        assert "Statistics" in output
        assert "42" in output
        assert "9 days" in output
