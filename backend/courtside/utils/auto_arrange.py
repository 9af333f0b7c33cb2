"""
Auto-Arrange: fill a round's free courts with balanced matches.

The algorithm is a bounded-time heuristic, not an exact solver. It works
on plain data (roster records + a RoundBoard) and never touches storage,
so the match service and the local projection run the exact same code.

Order of play:
1. **Odd-total pre-pass**: one 3-player match when eligible + locked-court
   players is odd (same gender preferred, singles-eligible only)
2. **Strategy chain**, repeated until nothing applies:
   - double_priority: 4-player match built around double-only players
   - bulk_doubles: 4-player match, split chosen from the top-3 scores
   - stranded_double_rescue: pull singles players out of a match made in
     this call so leftover double-only players still get a 4-player match
   - singles_fallback: 1-vs-1 between singles-eligible players

Each strategy returns a Candidate or None; the first Candidate that passes
the consistency check is committed and consumes the next free court.
Double-only players are never put in a 2- or 3-player match.

Auto-arrange never raises: the worst case is zero filled courts with every
eligible player benched.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Set

from courtside.models.player import Gender, PlayerCategory
from courtside.utils.court_model import CourtAssignment, RoundBoard
from courtside.utils.scoring import PairHistory, best_split, pair_score, pick_from_top

logger = logging.getLogger(__name__)

# Level noise when picking four players for bulk doubles
SELECTION_JITTER = 1.5


@dataclass
class RosterPlayer:
    """Read-only check-in view of a player, as the algorithm sees it."""
    player_id: int
    name: str = ""
    level: Optional[int] = None
    gender: Optional[str] = None
    primary_category: Optional[str] = None
    max_rounds: Optional[int] = None

    @property
    def effective_level(self) -> int:
        return self.level if self.level is not None else 0

    @property
    def is_double_only(self) -> bool:
        return self.primary_category == PlayerCategory.double


def is_round_eligible(player: RosterPlayer, round_number: int, reactivated_ids: Set[int]) -> bool:
    """Round cap: a player capped at N rounds sits out later rounds unless reactivated."""
    if player.max_rounds is None or round_number <= player.max_rounds:
        return True
    return player.player_id in reactivated_ids


@dataclass
class ArrangeOptions:
    round_number: int = 1
    locked_court_idxs: Set[int] = field(default_factory=set)
    reshuffle: bool = False
    unavailable_player_ids: Set[int] = field(default_factory=set)
    reactivated_player_ids: Set[int] = field(default_factory=set)


@dataclass
class ArrangeResult:
    filled_courts: int
    benched: int
    board: RoundBoard
    assignments: List[CourtAssignment] = field(default_factory=list)
    benched_player_ids: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, int]:
        return {"filled_courts": self.filled_courts, "benched": self.benched}


@dataclass
class Candidate:
    """
    A proposed match, players in slot order.

    donor_court_idx names a match made earlier in this call that gives up
    players to the candidate (stranded-double rescue only).
    """
    player_ids: List[int]
    donor_court_idx: Optional[int] = None


class _ArrangeContext:
    """Mutable state for one auto-arrange invocation."""

    def __init__(
        self,
        pool: List[RosterPlayer],
        free_courts: List[int],
        history: PairHistory,
        rng: random.Random,
        round_number: int,
    ):
        self.pool = pool
        self.free_courts = free_courts
        self.history = history
        self.rng = rng
        self.round_number = round_number
        self.assignments: Dict[int, CourtAssignment] = {}
        self.by_id: Dict[int, RosterPlayer] = {p.player_id: p for p in pool}
        self.levels: Dict[int, int] = {p.player_id: p.effective_level for p in pool}
        self._cursor = 0

    def has_free_court(self) -> bool:
        return self._cursor < len(self.free_courts)

    def next_court(self) -> int:
        court_idx = self.free_courts[self._cursor]
        self._cursor += 1
        return court_idx

    def pool_ids(self) -> Set[int]:
        return {p.player_id for p in self.pool}

    def singles_eligible(self) -> List[RosterPlayer]:
        return [p for p in self.pool if not p.is_double_only]

    def doubles_only(self) -> List[RosterPlayer]:
        return [p for p in self.pool if p.is_double_only]

    def take(self, player_ids: Sequence[int]) -> None:
        taken = set(player_ids)
        self.pool = [p for p in self.pool if p.player_id not in taken]

    def split(self, four: Sequence[int]) -> List[int]:
        return best_split(four, self.levels, self.history, self.rng, self.round_number)


Strategy = Callable[[_ArrangeContext], Optional[Candidate]]


# ============================================================================
# Strategies
# ============================================================================


def odd_total_prepass(ctx: _ArrangeContext) -> Optional[Candidate]:
    """
    Three singles-eligible players on one court, same gender when possible.

    Skipped when carving out three would strand double-only players with
    fewer than four players left.
    """
    singles = ctx.singles_eligible()
    if len(singles) < 3 or not ctx.has_free_court():
        return None
    if ctx.doubles_only() and len(ctx.pool) - 3 < 4:
        return None

    by_gender: Dict[Gender, List[RosterPlayer]] = {}
    for p in singles:
        if p.gender in (Gender.male, Gender.female):
            by_gender.setdefault(Gender(p.gender), []).append(p)

    group_source = singles
    for gender in (Gender.male, Gender.female):
        if len(by_gender.get(gender, [])) >= 3:
            group_source = by_gender[gender]
            break

    return Candidate(player_ids=_tightest_window(group_source, 3, ctx))


def double_priority(ctx: _ArrangeContext) -> Optional[Candidate]:
    doubles = ctx.doubles_only()
    if not doubles or len(ctx.pool) < 4 or not ctx.has_free_court():
        return None

    group = doubles[:4]
    needed = 4 - len(group)
    if needed:
        mean = sum(p.effective_level for p in group) / len(group)
        backfill = sorted(
            ctx.singles_eligible(),
            key=lambda p: abs(p.effective_level - mean) + ctx.rng.random() * SELECTION_JITTER,
        )
        group = group + backfill[:needed]
    if len(group) < 4:
        return None
    return Candidate(player_ids=ctx.split([p.player_id for p in group]))


def bulk_doubles(ctx: _ArrangeContext) -> Optional[Candidate]:
    if len(ctx.pool) < 4 or not ctx.has_free_court():
        return None
    ordered = sorted(ctx.pool, key=lambda p: p.effective_level + ctx.rng.random() * SELECTION_JITTER)
    return Candidate(player_ids=ctx.split([p.player_id for p in ordered[:4]]))


def stranded_double_rescue(ctx: _ArrangeContext) -> Optional[Candidate]:
    """
    Leftover double-only players (< 4 in the pool) join singles players
    taken from a 2- or 3-player match made in this call.

    An exact merge keeps the donor's court; a partial one leaves at least
    two donors behind and needs a free court for the new match.
    """
    if not ctx.doubles_only() or len(ctx.pool) >= 4:
        return None
    stranded = list(ctx.pool)
    needed = 4 - len(stranded)
    mean = sum(p.effective_level for p in stranded) / len(stranded)

    donors = []
    for court_idx, assignment in ctx.assignments.items():
        players = [ctx.by_id[pid] for pid in assignment.player_ids]
        if len(players) not in (2, 3) or any(p.is_double_only for p in players):
            continue
        leftover = len(players) - needed
        if leftover == 0 or (leftover >= 2 and ctx.has_free_court()):
            donors.append((leftover, court_idx, players))
    if not donors:
        return None

    # Exact merges first, they need no extra court
    donors.sort(key=lambda d: (d[0], d[1]))
    _, court_idx, players = donors[0]
    pulled = sorted(players, key=lambda p: abs(p.effective_level - mean))[:needed]
    four = [p.player_id for p in stranded + pulled]
    return Candidate(player_ids=ctx.split(four), donor_court_idx=court_idx)


def singles_fallback(ctx: _ArrangeContext) -> Optional[Candidate]:
    singles = ctx.singles_eligible()
    if len(singles) < 2 or not ctx.has_free_court():
        return None
    anchor = singles[0]
    scored = [
        (
            pair_score(
                anchor.effective_level,
                other.effective_level,
                False,
                ctx.history.repeated(anchor.player_id, other.player_id),
                ctx.rng,
                ctx.round_number,
            ),
            other.player_id,
        )
        for other in singles[1:]
    ]
    return Candidate(player_ids=[anchor.player_id, pick_from_top(scored, ctx.rng)])


STRATEGY_CHAIN: List[Strategy] = [
    double_priority,
    bulk_doubles,
    stranded_double_rescue,
    singles_fallback,
]


def _tightest_window(players: List[RosterPlayer], size: int, ctx: _ArrangeContext) -> List[int]:
    """The *size* consecutive players (by level) with the smallest level spread."""
    ordered = sorted(players, key=lambda p: p.effective_level)
    windows = []
    for start in range(len(ordered) - size + 1):
        window = ordered[start:start + size]
        spread = window[-1].effective_level - window[0].effective_level
        windows.append((spread + ctx.rng.random() * SELECTION_JITTER, [p.player_id for p in window]))
    return min(windows, key=lambda w: w[0])[1]


# ============================================================================
# Commit
# ============================================================================


def _commit(ctx: _ArrangeContext, candidate: Candidate) -> bool:
    """
    Apply *candidate* if it is internally consistent.

    On failure nothing moves: the players stay in the pool (and donors
    stay on their court).
    """
    ids = candidate.player_ids
    if len(ids) < 2 or len(ids) > 4 or len(set(ids)) != len(ids):
        logger.warning("Discarding malformed candidate %s", ids)
        return False

    pool_ids = ctx.pool_ids()
    donor: Optional[CourtAssignment] = None
    if candidate.donor_court_idx is not None:
        donor = ctx.assignments.get(candidate.donor_court_idx)
        if donor is None:
            logger.warning("Donor court %s has no match in this call", candidate.donor_court_idx)
            return False
    donor_ids = set(donor.player_ids) if donor else set()

    if any(pid not in pool_ids and pid not in donor_ids for pid in ids):
        logger.warning("Candidate %s references players outside the pool", ids)
        return False
    if len(ids) < 4 and any(ctx.by_id[pid].is_double_only for pid in ids):
        logger.warning("Candidate %s would put a double-only player in a %d-player match", ids, len(ids))
        return False

    remaining_donors = [pid for pid in (donor.player_ids if donor else []) if pid not in ids]
    if donor is not None and not remaining_donors:
        court_idx = donor.court_idx
    else:
        if not ctx.has_free_court():
            return False
        if donor is not None and len(remaining_donors) < 2:
            return False
        court_idx = ctx.next_court()

    if donor is not None and remaining_donors:
        ctx.assignments[donor.court_idx] = CourtAssignment(court_idx=donor.court_idx, player_ids=remaining_donors)
    ctx.assignments[court_idx] = CourtAssignment(court_idx=court_idx, player_ids=list(ids))
    ctx.take(ids)
    return True


# ============================================================================
# Entry point
# ============================================================================


def arrange_round(
    roster: Sequence[RosterPlayer],
    board: RoundBoard,
    options: ArrangeOptions,
    history: PairHistory,
    rng: random.Random,
) -> ArrangeResult:
    """
    Plan the free courts of one round.

    Args:
        roster: Checked-in players, in check-in order
        board: Current assignments of the round (left untouched)
        options: Round number, locks, reshuffle flag, availability overrides
        history: Pairs that already met in earlier rounds of the session
        rng: Random source for this call only

    Returns:
        ArrangeResult with the new board. When no match can be formed the
        original board is returned as-is.
    """
    locked = set(options.locked_court_idxs)
    assigned = board.assigned_player_ids()
    on_locked = {pid for idx in locked for pid in board.players_on(idx)}

    eligible: List[RosterPlayer] = []
    seen: Set[int] = set()
    for player in roster:
        pid = player.player_id
        if pid in seen:
            continue
        seen.add(pid)
        if options.reshuffle:
            if pid in on_locked:
                continue
        elif pid in assigned:
            continue
        if pid in options.unavailable_player_ids:
            continue
        if not is_round_eligible(player, options.round_number, options.reactivated_player_ids):
            continue
        eligible.append(player)

    if not eligible:
        return ArrangeResult(filled_courts=0, benched=0, board=board.copy())

    occupied = board.occupied_court_idxs()
    free_courts = [
        idx for idx in sorted(board.court_idxs)
        if idx not in locked and (options.reshuffle or idx not in occupied)
    ]
    if not free_courts:
        return ArrangeResult(
            filled_courts=0,
            benched=len(eligible),
            board=board.copy(),
            benched_player_ids=[p.player_id for p in eligible],
        )

    pool = sorted(eligible, key=lambda p: p.effective_level)
    ctx = _ArrangeContext(pool, free_courts, history, rng, options.round_number)

    if (len(eligible) + len(on_locked)) % 2 == 1:
        candidate = odd_total_prepass(ctx)
        if candidate is not None:
            _commit(ctx, candidate)

    # A lone double-only player can still join a match made earlier in this call
    while len(ctx.pool) >= 2 or (ctx.doubles_only() and ctx.assignments):
        committed = False
        for strategy in STRATEGY_CHAIN:
            candidate = strategy(ctx)
            if candidate is not None and _commit(ctx, candidate):
                committed = True
                break
        if not committed:
            break

    if not ctx.assignments:
        return ArrangeResult(
            filled_courts=0,
            benched=len(eligible),
            board=board.copy(),
            benched_player_ids=[p.player_id for p in eligible],
        )

    result_board = board.copy()
    if options.reshuffle:
        for idx in occupied - locked:
            result_board.clear_court(idx)
    assignments = sorted(ctx.assignments.values(), key=lambda a: a.court_idx)
    for assignment in assignments:
        result_board.assign(assignment)

    problems = result_board.validate()
    if problems:
        logger.warning("Auto-arrange produced an inconsistent board: %s", "; ".join(problems))

    benched_ids = [p.player_id for p in ctx.pool]
    logger.info(
        "Auto-arrange round %d: filled %d courts, benched %d of %d eligible",
        options.round_number,
        len(assignments),
        len(benched_ids),
        len(eligible),
    )
    return ArrangeResult(
        filled_courts=len(assignments),
        benched=len(benched_ids),
        board=result_board,
        assignments=assignments,
        benched_player_ids=benched_ids,
    )
