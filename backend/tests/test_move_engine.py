"""
Tests for the manual move/swap engine.

Boards are built in memory; every rejected move must leave the input
board exactly as it was.
"""

import pytest

from courtside.errors import CourtFull, CourtNotFound, InvalidSlot, SlotOccupied
from courtside.utils.court_model import RoundBoard
from courtside.utils.move_engine import move_player

A, B, C, D = 101, 102, 103, 104


def _board(occupied=None, capacities=None, courts=4) -> RoundBoard:
    return RoundBoard.from_slots(1, range(1, courts + 1), occupied or {}, capacities)


class TestBench:
    def test_unassign(self):
        board = _board({3: {1: A, 2: B}})
        outcome = move_player(board, A)

        assert outcome.board.court(3).slots == {2: B}
        assert outcome.changed_court_idxs == {3}
        assert not outcome.noop

    def test_unassign_benched_player_is_noop(self):
        board = _board({3: {1: A, 2: B}})
        outcome = move_player(board, C)

        assert outcome.noop
        assert outcome.board == board

    def test_last_player_leaving_deletes_match(self):
        board = _board({2: {1: A}})
        outcome = move_player(board, A)
        assert outcome.board.court(2) is None


class TestMove:
    def test_benched_player_to_free_slot(self):
        board = _board({3: {1: A, 2: B}})
        outcome = move_player(board, C, to_court_idx=3, to_slot=0)

        assert outcome.board.court(3).slots == {0: C, 1: A, 2: B}
        assert outcome.changed_court_idxs == {3}

    def test_move_to_empty_court_creates_match(self):
        board = _board({3: {1: A, 2: B}})
        outcome = move_player(board, A, to_court_idx=1, to_slot=0)

        assert outcome.board.court(1).slots == {0: A}
        assert outcome.board.court(3).slots == {2: B}
        assert outcome.changed_court_idxs == {1, 3}

    def test_move_within_same_court(self):
        board = _board({3: {0: A, 1: B, 2: C}})
        outcome = move_player(board, A, to_court_idx=3, to_slot=3)

        assert outcome.board.court(3).slots == {1: B, 2: C, 3: A}
        assert outcome.changed_court_idxs == {3}

    def test_move_onto_own_slot_is_noop(self):
        board = _board({3: {1: A, 2: B}})
        outcome = move_player(board, A, to_court_idx=3, to_slot=1)
        assert outcome.noop


class TestSwap:
    def test_occupied_slot_without_swap(self):
        board = _board({3: {1: A, 2: B}})
        with pytest.raises(SlotOccupied):
            move_player(board, C, to_court_idx=3, to_slot=1)
        assert board.court(3).slots == {1: A, 2: B}

    def test_swap_with_wrong_player_rejected(self):
        board = _board({3: {1: A, 2: B}})
        with pytest.raises(SlotOccupied):
            move_player(board, C, to_court_idx=3, to_slot=1, swap_with_player_id=B)

    def test_swap_from_bench_benches_occupant(self):
        board = _board({3: {1: A, 2: B}})
        outcome = move_player(board, C, to_court_idx=3, to_slot=1, swap_with_player_id=A)

        assert outcome.board.court(3).slots == {1: C, 2: B}
        assert outcome.board.locate(A) is None
        assert outcome.displaced_player_id == A
        assert outcome.changed_court_idxs == {3}

    def test_swap_across_courts(self):
        board = _board({1: {1: A, 2: B}, 2: {1: C, 2: D}})
        outcome = move_player(board, A, to_court_idx=2, to_slot=2, swap_with_player_id=D)

        assert outcome.board.court(1).slots == {1: D, 2: B}
        assert outcome.board.court(2).slots == {1: C, 2: A}
        assert outcome.changed_court_idxs == {1, 2}

    def test_swap_within_same_court(self):
        board = _board({1: {0: A, 1: B, 2: C, 3: D}})
        outcome = move_player(board, A, to_court_idx=1, to_slot=3, swap_with_player_id=D)

        assert outcome.board.court(1).slots == {0: D, 1: B, 2: C, 3: A}
        assert outcome.changed_court_idxs == {1}


class TestValidation:
    def test_unknown_court(self):
        board = _board({3: {1: A, 2: B}})
        with pytest.raises(CourtNotFound):
            move_player(board, C, to_court_idx=99, to_slot=0)

    def test_missing_slot(self):
        with pytest.raises(InvalidSlot):
            move_player(_board(), A, to_court_idx=1)

    @pytest.mark.parametrize("slot", [-1, 4])
    def test_slot_outside_standard_court(self, slot):
        with pytest.raises(InvalidSlot):
            move_player(_board(), A, to_court_idx=1, to_slot=slot)

    def test_declared_extended_capacity(self):
        board = _board({1: {0: A, 1: B, 2: C, 3: D}}, capacities={1: 6})
        outcome = move_player(board, 105, to_court_idx=1, to_slot=5)
        assert outcome.board.court(1).slots[5] == 105

        with pytest.raises(InvalidSlot):
            move_player(board, 105, to_court_idx=1, to_slot=6)

    def test_existing_extended_slot_allows_up_to_eight(self):
        board = _board({1: {0: A, 4: B}})
        outcome = move_player(board, C, to_court_idx=1, to_slot=7)
        assert outcome.board.court(1).slots[7] == C

    def test_court_full(self):
        # Capacity lowered to 4 after four players landed on extended slots
        board = _board({1: {4: A, 5: B, 6: C, 7: D}}, capacities={1: 4})
        with pytest.raises(CourtFull):
            move_player(board, 105, to_court_idx=1, to_slot=0)

    def test_moving_within_full_court_is_allowed(self):
        board = _board({1: {4: A, 5: B, 6: C, 7: D}}, capacities={1: 4})
        outcome = move_player(board, A, to_court_idx=1, to_slot=0)
        assert outcome.board.court(1).slots == {0: A, 5: B, 6: C, 7: D}

    def test_rejected_move_leaves_board_untouched(self):
        board = _board({1: {1: A, 2: B}, 2: {1: C, 2: D}})
        snapshot = board.copy()
        for kwargs in (
            {"to_court_idx": 9, "to_slot": 0},
            {"to_court_idx": 2, "to_slot": 1},
            {"to_court_idx": 2, "to_slot": 8},
        ):
            with pytest.raises((CourtNotFound, SlotOccupied, InvalidSlot)):
                move_player(board, A, **kwargs)
        assert board == snapshot
