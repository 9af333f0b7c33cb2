"""
Court/Slot Model: the in-memory shape of one round's assignments.

A RoundBoard maps court index -> {slot: player_id} for one (session, round).
It is the structure both the auto-arrange algorithm and the manual move
engine read and produce; the match service translates it to and from
Match/MatchPlayer rows, and the local projection keeps one in memory.

Slot layout by player count:
  2 players   -> slots {1, 2}   (opposite sides of the net)
  3 players   -> slots {0, 1, 2}
  4 players   -> slots {0, 1, 2, 3}
  5-8 players -> slots 0..k-1   (extended-capacity court)
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

DEFAULT_COURT_CAPACITY = 4
MAX_EXTENDED_CAPACITY = 8


def slot_layout(player_count: int) -> List[int]:
    """Slots used for a match of *player_count* players."""
    if player_count < 2 or player_count > MAX_EXTENDED_CAPACITY:
        raise ValueError(f"Match size must be 2..{MAX_EXTENDED_CAPACITY}, got {player_count}")
    if player_count == 2:
        return [1, 2]
    return list(range(player_count))


def derive_teams(slots: Dict[int, int]) -> Tuple[List[int], List[int]]:
    """
    Split a court's players into two sides by slot order.

    2 players: pure opposition, one player per side.
    Otherwise: first ceil(k/2) players by slot vs the remainder.
    """
    ordered = [slots[s] for s in sorted(slots)]
    if len(ordered) == 2:
        return [ordered[0]], [ordered[1]]
    cut = (len(ordered) + 1) // 2
    return ordered[:cut], ordered[cut:]


@dataclass
class CourtSlots:
    court_idx: int
    slots: Dict[int, int] = field(default_factory=dict)

    @property
    def player_ids(self) -> List[int]:
        return [self.slots[s] for s in sorted(self.slots)]

    def slot_of(self, player_id: int) -> Optional[int]:
        for slot, pid in self.slots.items():
            if pid == player_id:
                return slot
        return None

    def has_extended_slot(self) -> bool:
        return any(s >= DEFAULT_COURT_CAPACITY for s in self.slots)

    def is_empty(self) -> bool:
        return not self.slots


@dataclass
class CourtAssignment:
    """A complete match produced by auto-arrange: players in slot order."""
    court_idx: int
    player_ids: List[int]

    def as_slots(self) -> Dict[int, int]:
        return dict(zip(slot_layout(len(self.player_ids)), self.player_ids))


@dataclass
class RoundBoard:
    """
    All matches of one round, keyed by court index.

    court_idxs lists every known court (occupied or not). capacities holds
    the caller-declared per-round capacity for extended courts.
    """
    round_number: int
    court_idxs: List[int]
    courts: Dict[int, CourtSlots] = field(default_factory=dict)
    capacities: Dict[int, int] = field(default_factory=dict)

    @classmethod
    def from_slots(
        cls,
        round_number: int,
        court_idxs: Iterable[int],
        occupied: Optional[Dict[int, Dict[int, int]]] = None,
        capacities: Optional[Dict[int, int]] = None,
    ) -> "RoundBoard":
        board = cls(round_number=round_number, court_idxs=sorted(court_idxs), capacities=dict(capacities or {}))
        for court_idx, slots in (occupied or {}).items():
            if slots:
                board.courts[court_idx] = CourtSlots(court_idx=court_idx, slots=dict(slots))
        return board

    def copy(self) -> "RoundBoard":
        return copy.deepcopy(self)

    def has_court(self, court_idx: int) -> bool:
        return court_idx in self.court_idxs

    def court(self, court_idx: int) -> Optional[CourtSlots]:
        return self.courts.get(court_idx)

    def players_on(self, court_idx: int) -> List[int]:
        court = self.courts.get(court_idx)
        return court.player_ids if court else []

    def occupied_court_idxs(self) -> Set[int]:
        return {idx for idx, court in self.courts.items() if not court.is_empty()}

    def assigned_player_ids(self) -> Set[int]:
        return {pid for court in self.courts.values() for pid in court.slots.values()}

    def locate(self, player_id: int) -> Optional[Tuple[int, int]]:
        """Return (court_idx, slot) for *player_id*, or None when benched."""
        for court_idx, court in self.courts.items():
            slot = court.slot_of(player_id)
            if slot is not None:
                return court_idx, slot
        return None

    def capacity_for(self, court_idx: int) -> int:
        """
        Effective capacity used by manual moves.

        An explicitly declared capacity wins. Without one, a court that
        already holds a slot >= 4 is treated as extended (legacy rows).
        """
        declared = self.capacities.get(court_idx)
        if declared:
            return declared
        court = self.courts.get(court_idx)
        if court and court.has_extended_slot():
            return MAX_EXTENDED_CAPACITY
        return DEFAULT_COURT_CAPACITY

    def place(self, court_idx: int, slot: int, player_id: int) -> None:
        court = self.courts.setdefault(court_idx, CourtSlots(court_idx=court_idx))
        court.slots[slot] = player_id

    def remove(self, player_id: int) -> Optional[Tuple[int, int]]:
        """Unassign *player_id*; drop the court's match when it empties."""
        location = self.locate(player_id)
        if location is None:
            return None
        court_idx, slot = location
        court = self.courts[court_idx]
        del court.slots[slot]
        if court.is_empty():
            del self.courts[court_idx]
        return location

    def clear_court(self, court_idx: int) -> List[int]:
        court = self.courts.pop(court_idx, None)
        return court.player_ids if court else []

    def assign(self, assignment: CourtAssignment) -> None:
        self.courts[assignment.court_idx] = CourtSlots(
            court_idx=assignment.court_idx, slots=assignment.as_slots()
        )

    def changed_court_idxs(self, other: "RoundBoard") -> Set[int]:
        """Court indices whose slot maps differ between self and *other*."""
        idxs = set(self.courts) | set(other.courts)
        return {
            idx for idx in idxs
            if (self.courts.get(idx).slots if idx in self.courts else {})
            != (other.courts.get(idx).slots if idx in other.courts else {})
        }

    def validate(self) -> List[str]:
        """Invariant violations as messages; empty when the board is consistent."""
        errors: List[str] = []
        seen: Dict[int, int] = {}
        for court_idx, court in self.courts.items():
            if court_idx not in self.court_idxs:
                errors.append(f"Court {court_idx} does not exist")
            if court.is_empty():
                errors.append(f"Court {court_idx} has an empty match")
            for pid in court.slots.values():
                if pid in seen:
                    errors.append(f"Player {pid} on courts {seen[pid]} and {court_idx}")
                seen[pid] = court_idx
        return errors
