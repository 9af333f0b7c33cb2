"""
Local Projection: optimistic, storage-free copy of one round.

Runs the same auto-arrange and move engine as the match service, but over
an in-memory snapshot so a client can show the result immediately. The
authoritative store stays the ground truth: after its round-trip the
caller hands the stored board to reconcile(), which adopts it and reports
which courts the optimistic view had wrong.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set

from courtside.errors import NotCheckedIn
from courtside.utils.auto_arrange import ArrangeOptions, ArrangeResult, RosterPlayer, arrange_round
from courtside.utils.court_model import RoundBoard, derive_teams
from courtside.utils.move_engine import MoveOutcome, move_player
from courtside.utils.scoring import PairHistory, new_rng

logger = logging.getLogger(__name__)


@dataclass
class ProjectedCourt:
    court_idx: int
    slots: Dict[int, int]
    team1: List[int]
    team2: List[int]


class LocalProjection:
    def __init__(
        self,
        roster: Sequence[RosterPlayer],
        board: RoundBoard,
        history: Optional[PairHistory] = None,
        locked_court_idxs: Iterable[int] = (),
    ):
        self.roster = list(roster)
        self.board = board.copy()
        self.history = history or PairHistory()
        self.locked_court_idxs: Set[int] = set(locked_court_idxs)

    @property
    def checked_in_ids(self) -> Set[int]:
        return {p.player_id for p in self.roster}

    def auto_match(
        self,
        reshuffle: bool = False,
        unavailable_player_ids: Iterable[int] = (),
        reactivated_player_ids: Iterable[int] = (),
        rng: Optional[random.Random] = None,
    ) -> ArrangeResult:
        options = ArrangeOptions(
            round_number=self.board.round_number,
            locked_court_idxs=set(self.locked_court_idxs),
            reshuffle=reshuffle,
            unavailable_player_ids=set(unavailable_player_ids),
            reactivated_player_ids=set(reactivated_player_ids),
        )
        result = arrange_round(self.roster, self.board, options, self.history, rng or new_rng())
        self.board = result.board.copy()
        return result

    def move(
        self,
        player_id: int,
        to_court_idx: Optional[int] = None,
        to_slot: Optional[int] = None,
        swap_with_player_id: Optional[int] = None,
    ) -> MoveOutcome:
        if player_id not in self.checked_in_ids:
            raise NotCheckedIn(f"Player {player_id} is not checked in")
        outcome = move_player(self.board, player_id, to_court_idx, to_slot, swap_with_player_id)
        self.board = outcome.board.copy()
        return outcome

    def court_views(self) -> List[ProjectedCourt]:
        """Every court of the round, empty ones included, slots in order."""
        views = []
        for court_idx in sorted(self.board.court_idxs):
            court = self.board.court(court_idx)
            slots = dict(sorted(court.slots.items())) if court else {}
            team1, team2 = derive_teams(slots) if slots else ([], [])
            views.append(ProjectedCourt(court_idx=court_idx, slots=slots, team1=team1, team2=team2))
        return views

    def reconcile(self, authoritative: RoundBoard) -> Set[int]:
        """Adopt the stored board; return the courts where the projection diverged."""
        diverged = self.board.changed_court_idxs(authoritative)
        if diverged:
            logger.info("Local projection diverged on courts %s; adopting stored board", sorted(diverged))
        self.board = authoritative.copy()
        return diverged
