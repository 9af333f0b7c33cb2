"""
Manual Move/Swap Engine: user-driven edits to one round's board.

Per player and round the state is either Benched or Assigned(court, slot).
move_player() validates the whole request first and only then mutates a
copy of the board, so a rejected move never leaves a half-applied change.

Capacity here follows the manual path: an explicitly declared court
capacity, else 4 unless the court already holds a slot >= 4 (then 8).
Auto-arrange never produces more than four players per court.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Set

from courtside.errors import CourtFull, CourtNotFound, InvalidSlot, SlotOccupied
from courtside.utils.court_model import RoundBoard

logger = logging.getLogger(__name__)


@dataclass
class MoveOutcome:
    board: RoundBoard
    changed_court_idxs: Set[int] = field(default_factory=set)
    displaced_player_id: Optional[int] = None
    noop: bool = False


def _validate_target(board: RoundBoard, to_court_idx: int, to_slot: Optional[int]) -> None:
    if not board.has_court(to_court_idx):
        raise CourtNotFound(f"Court {to_court_idx} not found")
    if to_slot is None:
        raise InvalidSlot("to_slot is required when to_court_idx is set")
    capacity = board.capacity_for(to_court_idx)
    if to_slot < 0 or to_slot >= capacity:
        raise InvalidSlot(f"Slot {to_slot} is outside court {to_court_idx} (capacity {capacity})")


def move_player(
    board: RoundBoard,
    player_id: int,
    to_court_idx: Optional[int] = None,
    to_slot: Optional[int] = None,
    swap_with_player_id: Optional[int] = None,
) -> MoveOutcome:
    """
    Move a player to (court, slot), to the bench, or swap with an occupant.

    Args:
        board: Current board of the round (left untouched)
        player_id: Player being moved
        to_court_idx: Target court; None sends the player to the bench
        to_slot: Target slot, required with to_court_idx
        swap_with_player_id: Occupant of the target slot to trade places with

    Returns:
        MoveOutcome with the new board and the courts that changed

    Raises:
        CourtNotFound, InvalidSlot, SlotOccupied, CourtFull
    """
    source = board.locate(player_id)

    if to_court_idx is None:
        new_board = board.copy()
        removed = new_board.remove(player_id)
        if removed is None:
            return MoveOutcome(board=new_board, noop=True)
        return MoveOutcome(board=new_board, changed_court_idxs={removed[0]})

    _validate_target(board, to_court_idx, to_slot)

    target = board.court(to_court_idx)
    occupant = target.slots.get(to_slot) if target else None

    if occupant is not None and occupant != player_id:
        if swap_with_player_id is None or swap_with_player_id != occupant:
            raise SlotOccupied(f"Slot {to_slot} on court {to_court_idx} is occupied by player {occupant}")
        return _swap(board, player_id, occupant, source, to_court_idx, to_slot)

    if occupant == player_id:
        return MoveOutcome(board=board.copy(), noop=True)

    # Free target slot: the mover only frees a place when already on this court
    current_count = len(target.slots) if target else 0
    if source is not None and source[0] == to_court_idx:
        current_count -= 1
    capacity = board.capacity_for(to_court_idx)
    if current_count >= capacity:
        raise CourtFull(f"Court {to_court_idx} is full ({capacity} players)")

    new_board = board.copy()
    changed = {to_court_idx}
    if source is not None:
        new_board.remove(player_id)
        changed.add(source[0])
    new_board.place(to_court_idx, to_slot, player_id)
    return MoveOutcome(board=new_board, changed_court_idxs=changed)


def _swap(board, player_id, occupant, source, to_court_idx, to_slot) -> MoveOutcome:
    """Trade places: the occupant takes the mover's old spot (or the bench)."""
    new_board = board.copy()
    changed = {to_court_idx}

    new_board.remove(occupant)
    if source is not None:
        source_court, source_slot = source
        new_board.remove(player_id)
        new_board.place(source_court, source_slot, occupant)
        changed.add(source_court)
    new_board.place(to_court_idx, to_slot, player_id)

    logger.debug(
        "Swapped player %s into court %s slot %s; player %s -> %s",
        player_id, to_court_idx, to_slot, occupant, source or "bench",
    )
    return MoveOutcome(board=new_board, changed_court_idxs=changed, displaced_player_id=occupant)
