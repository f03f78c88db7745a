"""Tests for the selection repair rule."""

from __future__ import annotations

from songledger.models import Workspace
from songledger.service import mutations
from songledger.service.selection import Selection, repair_selection


class TestRepairSelection:
    def test_valid_selection_is_kept(self, ledger: tuple[Workspace, dict[str, str]]) -> None:
        ws, names = ledger
        selection = Selection(names["project"], names["song_x"], names["version"])
        assert repair_selection(ws, selection) is selection

    def test_empty_selection_picks_first_children(
        self, ledger: tuple[Workspace, dict[str, str]]
    ) -> None:
        ws, names = ledger
        assert repair_selection(ws, Selection()) == Selection(
            names["project"], names["song_x"], names["version"]
        )

    def test_deleted_song_falls_back_to_first_remaining(
        self, ledger: tuple[Workspace, dict[str, str]]
    ) -> None:
        ws, names = ledger
        ws = mutations.remove_song(ws, names["project"], names["song_x"])
        selection = Selection(names["project"], names["song_x"], names["version"])
        repaired = repair_selection(ws, selection)
        assert repaired == Selection(names["project"], names["song_y"], None)

    def test_everything_deleted_clears_selection(
        self, ledger: tuple[Workspace, dict[str, str]]
    ) -> None:
        ws, names = ledger
        ws = mutations.remove_project(ws, names["project"])
        assert repair_selection(ws, Selection(names["project"])) == Selection()

    def test_song_from_other_project_is_replaced(
        self, ledger: tuple[Workspace, dict[str, str]]
    ) -> None:
        ws, names = ledger
        repaired = repair_selection(ws, Selection(names["project"], "elsewhere", None))
        assert repaired.song_id == names["song_x"]
        assert repaired.version_id == names["version"]
