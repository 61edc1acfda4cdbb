"""Unit tests for per-side missing-player selections."""

import pytest

from nbainsights.api.schema import RosterEntry, Side
from nbainsights.interactive.selection import SelectionState, filter_roster


class TestSelectionState:

    def test_starts_empty(self):
        state = SelectionState()
        assert state.is_empty()
        assert state.selected(Side.HOME) == ()
        assert state.selected(Side.AWAY) == ()

    def test_add_then_remove_restores_prior_state(self):
        state = SelectionState()
        state.add(Side.HOME, 2544)
        before = (state.selected(Side.HOME), state.selected(Side.AWAY))

        state.add(Side.HOME, 201939)
        state.remove(Side.HOME, 201939)

        assert (state.selected(Side.HOME), state.selected(Side.AWAY)) == before

    def test_add_is_idempotent(self):
        state = SelectionState()
        assert state.add(Side.HOME, 201939) is True
        assert state.add(Side.HOME, 201939) is False
        assert state.add(Side.HOME, "201939") is False
        assert state.selected(Side.HOME) == (201939,)

    def test_remove_missing_is_noop(self):
        state = SelectionState()
        assert state.remove(Side.AWAY, 1628369) is False
        assert state.is_empty()

    def test_sides_are_independent(self):
        state = SelectionState()
        state.add(Side.HOME, 2544)
        state.add(Side.AWAY, 2544)
        state.remove(Side.HOME, 2544)

        assert state.selected(Side.HOME) == ()
        assert state.selected(Side.AWAY) == (2544,)

    def test_insertion_order_is_kept(self):
        state = SelectionState()
        for player_id in (203076, 2544, 201939):
            state.add("home", player_id)
        assert state.selected(Side.HOME) == (203076, 2544, 201939)

    def test_toggle(self):
        state = SelectionState()
        assert state.toggle(Side.HOME, 2544) is True
        assert state.contains(Side.HOME, 2544)
        assert state.toggle(Side.HOME, 2544) is False
        assert not state.contains(Side.HOME, 2544)

    def test_clear_resets_both_sides(self):
        state = SelectionState()
        state.add(Side.HOME, 2544)
        state.add(Side.AWAY, 1628369)
        state.clear()
        assert state.is_empty()

    def test_derive_ids_drops_unknown(self):
        state = SelectionState()
        for player_id in (201939, 999, 2544):
            state.add(Side.HOME, player_id)

        assert state.derive_ids(Side.HOME, {2544, 201939, 203076}) == [201939, 2544]
        assert state.derive_ids(Side.HOME, set()) == []

    def test_unknown_side_rejected(self):
        state = SelectionState()
        with pytest.raises(ValueError):
            state.add("bench", 2544)


class TestFilterRoster:

    def test_case_insensitive_substring(self, lakers_roster):
        assert [e.player_id for e in filter_roster(lakers_roster, "DAVIS")] == [203076]
        assert [e.player_id for e in filter_roster(lakers_roster, "  ja ")] == [2544]

    def test_blank_query_returns_all(self, lakers_roster):
        assert filter_roster(lakers_roster, "") == lakers_roster
        assert filter_roster(lakers_roster, None) == lakers_roster

    def test_no_match(self, lakers_roster):
        assert filter_roster(lakers_roster, "jordan") == []

    def test_empty_roster(self):
        assert filter_roster([], "curry") == []

    def test_roster_entry_parses_alternate_keys(self):
        entry = RosterEntry.from_dict({"PLAYER_ID": "2544", "PLAYER": "LeBron James"}, team="LAL")
        assert entry.player_id == 2544
        assert entry.name == "LeBron James"
        assert entry.team == "LAL"
