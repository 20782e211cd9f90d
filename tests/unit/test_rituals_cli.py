#!/usr/bin/env python3
"""
Unit tests for the rituals_cli.py CLI.
"""

import json

import pytest

import rituals_cli
from Rituals.overlay_store import KVStore, Ledger, ProgressStore


@pytest.fixture
def cli_paths(tmp_path):
    catalog_file = tmp_path / "catalog.json"
    catalog_file.write_text(json.dumps({"items": [
        {"id": 1, "category": "morning", "text": "First", "count": 2},
        {"id": 2, "category": "morning", "text": "Second", "count": 1},
    ]}))
    return ["--db", str(tmp_path / "cli.db"), "--catalog", str(catalog_file)], tmp_path / "cli.db"


def run_cli(cli_paths, *args):
    base, _ = cli_paths
    return rituals_cli.main(base + list(args))


class TestRitualsCli:
    """End-to-end CLI commands against a temporary database."""

    def test_tap_persists(self, cli_paths):
        assert run_cli(cli_paths, "tap", "1", "--times", "2") == 0

        progress = ProgressStore(KVStore(cli_paths[1]))
        assert progress.get_today() == {1: 2}

    def test_skip(self, cli_paths):
        assert run_cli(cli_paths, "skip", "2") == 0
        assert ProgressStore(KVStore(cli_paths[1])).get_today() == {2: -1}

    def test_unknown_item_fails(self, cli_paths, capsys):
        assert run_cli(cli_paths, "tap", "99") == 1
        assert "not found" in capsys.readouterr().out

    def test_list_records_recent(self, cli_paths):
        assert run_cli(cli_paths, "list", "morning") == 0
        recent = Ledger(KVStore(cli_paths[1])).get_recent()
        assert [entry.id for entry in recent] == ["morning"]

    def test_list_empty_category(self, cli_paths):
        assert run_cli(cli_paths, "list", "nowhere") == 1

    def test_fav_toggle(self, cli_paths):
        assert run_cli(cli_paths, "fav", "2") == 0
        assert Ledger(KVStore(cli_paths[1])).get_favorites() == [2]

    def test_move(self, cli_paths):
        from Rituals.overlay_store import Catalog, OverlayStore

        assert run_cli(cli_paths, "move", "morning", "2", "up") == 0
        catalog = Catalog.from_json(cli_paths[0][3])
        overlay = OverlayStore(KVStore(cli_paths[1]), catalog)
        assert [item.id for item in overlay.effective_items("morning")] == [2, 1]

    def test_reset_and_stats(self, cli_paths, capsys):
        run_cli(cli_paths, "tap", "1")
        assert run_cli(cli_paths, "reset") == 0
        assert ProgressStore(KVStore(cli_paths[1])).get_today() == {}

        assert run_cli(cli_paths, "stats") == 0
        assert "Statistics" in capsys.readouterr().out
