"""
Match service: the storage side of the court assignment engine.

Loads one round's Match/MatchPlayer rows into a RoundBoard, runs the pure
algorithm or move engine over it, and writes back only the courts whose
slot map changed. All reads are scoped to (active session, round); a match
without a round number counts as round 1.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy import or_
from sqlmodel import Session, select

from courtside.errors import CourtNotFound, NotCheckedIn
from courtside.models.court import Court
from courtside.models.court_round_state import CourtRoundState
from courtside.models.match import Match
from courtside.models.match_player import MatchPlayer
from courtside.models.player import Player
from courtside.services.checkin_service import find_check_in
from courtside.services.roster import load_roster
from courtside.services.session_service import get_active_session, require_active_session
from courtside.utils.auto_arrange import ArrangeOptions, ArrangeResult, arrange_round
from courtside.utils.court_model import RoundBoard, derive_teams
from courtside.utils.move_engine import MoveOutcome, move_player
from courtside.utils.scoring import PairHistory, new_rng

logger = logging.getLogger(__name__)


@dataclass
class SlotView:
    slot: int
    player: Player


@dataclass
class CourtView:
    court_idx: int
    slots: List[SlotView] = field(default_factory=list)
    team1: List[int] = field(default_factory=list)
    team2: List[int] = field(default_factory=list)
    is_locked: bool = False
    capacity: Optional[int] = None


# ============================================================================
# Loading
# ============================================================================


def _round_filter(round_number: int):
    if round_number == 1:
        return or_(Match.round_number == 1, Match.round_number.is_(None))
    return Match.round_number == round_number


def load_courts(session: Session) -> List[Court]:
    return list(session.exec(select(Court).order_by(Court.idx)).all())


def load_round_matches(session: Session, training_session_id: int, round_number: int) -> List[Match]:
    return list(
        session.exec(
            select(Match).where(Match.session_id == training_session_id, _round_filter(round_number))
        ).all()
    )


def load_court_round_states(
    session: Session, training_session_id: int, round_number: int
) -> Dict[int, CourtRoundState]:
    states = session.exec(
        select(CourtRoundState).where(
            CourtRoundState.session_id == training_session_id,
            CourtRoundState.round_number == round_number,
        )
    ).all()
    return {state.court_idx: state for state in states}


def load_round_board(
    session: Session, training_session_id: int, round_number: int
) -> Tuple[RoundBoard, Dict[int, List[Match]]]:
    """
    Build the RoundBoard of one round.

    Legacy data can hold more than one match for a court in a round; their
    players are merged onto that court (colliding slots move to the lowest
    free slot) and the extra matches are dropped on the court's next write.

    Returns:
        (board, matches keyed by court idx, oldest first)
    """
    courts = load_courts(session)
    idx_by_court_id = {court.id: court.idx for court in courts}
    states = load_court_round_states(session, training_session_id, round_number)

    matches_by_court: Dict[int, List[Match]] = {}
    occupied: Dict[int, Dict[int, int]] = {}
    matches = sorted(load_round_matches(session, training_session_id, round_number), key=lambda m: m.id)
    for match in matches:
        court_idx = idx_by_court_id.get(match.court_id)
        if court_idx is None:
            continue
        rows = session.exec(select(MatchPlayer).where(MatchPlayer.match_id == match.id)).all()
        slots = occupied.setdefault(court_idx, {})
        if court_idx in matches_by_court:
            logger.warning(
                "Court %d has several matches in round %d (ids %s, %d); merging their players",
                court_idx, round_number, [m.id for m in matches_by_court[court_idx]], match.id,
            )
        matches_by_court.setdefault(court_idx, []).append(match)
        for row in sorted(rows, key=lambda r: r.slot):
            if row.player_id in slots.values():
                continue
            slot = row.slot
            if slot in slots:
                slot = min(s for s in range(len(slots) + 1) if s not in slots)
            slots[slot] = row.player_id

    board = RoundBoard.from_slots(
        round_number=round_number,
        court_idxs=idx_by_court_id.values(),
        occupied=occupied,
        capacities={idx: s.capacity for idx, s in states.items() if s.capacity},
    )
    return board, matches_by_court


def load_pair_history(session: Session, training_session_id: int, before_round: int) -> PairHistory:
    """Every pair that shared a match in rounds strictly before *before_round*."""
    history = PairHistory()
    if before_round <= 1:
        return history

    matches = session.exec(select(Match).where(Match.session_id == training_session_id)).all()
    for match in matches:
        if (match.round_number or 1) >= before_round:
            continue
        rows = session.exec(select(MatchPlayer).where(MatchPlayer.match_id == match.id)).all()
        history.record([row.player_id for row in rows])
    return history


def list_round_courts(session: Session, round_number: int = 1) -> List[CourtView]:
    """Every court with its sorted slots for one round; empty courts when no session is active."""
    courts = load_courts(session)
    active = get_active_session(session)
    if active is None:
        return [CourtView(court_idx=court.idx) for court in courts]

    board, _ = load_round_board(session, active.id, round_number)
    states = load_court_round_states(session, active.id, round_number)
    players = {p.id: p for p in session.exec(select(Player).where(Player.id.in_(board.assigned_player_ids()))).all()}

    views: List[CourtView] = []
    for court in courts:
        state = states.get(court.idx)
        view = CourtView(
            court_idx=court.idx,
            is_locked=bool(state and state.is_locked),
            capacity=state.capacity if state else None,
        )
        court_slots = board.court(court.idx)
        if court_slots:
            view.slots = [
                SlotView(slot=slot, player=players[pid])
                for slot, pid in sorted(court_slots.slots.items())
                if pid in players
            ]
            view.team1, view.team2 = derive_teams(court_slots.slots)
        views.append(view)
    return views


# ============================================================================
# Writing
# ============================================================================


def persist_board(
    session: Session,
    training_session_id: int,
    before: RoundBoard,
    after: RoundBoard,
    matches_by_court: Dict[int, List[Match]],
    court_idxs: Optional[Iterable[int]] = None,
) -> None:
    """
    Write the difference between two boards of the same round.

    Changed courts get their MatchPlayer rows rewritten; a court left with
    no players loses its Match, a newly occupied court gets one. Extra
    matches merged onto a court by load_round_board are deleted.
    Deletes are flushed before inserts so (match, slot) stays unique.
    """
    changed = set(court_idxs) if court_idxs is not None else before.changed_court_idxs(after)
    if not changed:
        return

    court_ids = {court.idx: court.id for court in load_courts(session)}

    for court_idx in changed:
        for match in matches_by_court.get(court_idx, []):
            for row in session.exec(select(MatchPlayer).where(MatchPlayer.match_id == match.id)).all():
                session.delete(row)
    session.flush()

    for court_idx in sorted(changed):
        matches = matches_by_court.get(court_idx, [])
        match = matches[0] if matches else None
        for extra in matches[1:]:
            session.delete(extra)
        court_slots = after.court(court_idx)

        if court_slots is None or court_slots.is_empty():
            if match is not None:
                session.delete(match)
            matches_by_court.pop(court_idx, None)
            continue

        if match is None:
            match = Match(
                session_id=training_session_id,
                court_id=court_ids[court_idx],
                round_number=after.round_number,
                started_at=datetime.utcnow(),
            )
            session.add(match)
            session.flush()
        matches_by_court[court_idx] = [match]

        for slot, player_id in sorted(court_slots.slots.items()):
            session.add(MatchPlayer(match_id=match.id, player_id=player_id, slot=slot))
    session.flush()


def auto_arrange_round(
    session: Session,
    round_number: int = 1,
    locked_court_idxs: Iterable[int] = (),
    reshuffle: bool = False,
    unavailable_player_ids: Iterable[int] = (),
    reactivated_player_ids: Iterable[int] = (),
    seed: Optional[int] = None,
) -> ArrangeResult:
    """
    Run auto-arrange for one round of the active session and persist it.

    Stored court locks for the round are merged with *locked_court_idxs*.
    Nothing is written when no match could be formed.

    Raises:
        NoActiveSession
    """
    active = require_active_session(session)
    roster = load_roster(session, active.id)
    board, matches_by_court = load_round_board(session, active.id, round_number)

    if not roster:
        return ArrangeResult(filled_courts=0, benched=0, board=board)

    states = load_court_round_states(session, active.id, round_number)
    locked: Set[int] = set(locked_court_idxs) | {idx for idx, s in states.items() if s.is_locked}

    options = ArrangeOptions(
        round_number=round_number,
        locked_court_idxs=locked,
        reshuffle=reshuffle,
        unavailable_player_ids=set(unavailable_player_ids),
        reactivated_player_ids=set(reactivated_player_ids),
    )
    history = load_pair_history(session, active.id, round_number)
    result = arrange_round(roster, board, options, history, new_rng(seed))

    if result.filled_courts:
        persist_board(session, active.id, board, result.board, matches_by_court)
        session.commit()
    return result


def move_player_in_round(
    session: Session,
    player_id: int,
    to_court_idx: Optional[int] = None,
    to_slot: Optional[int] = None,
    swap_with_player_id: Optional[int] = None,
    round_number: int = 1,
) -> MoveOutcome:
    """
    Apply one manual move/swap to the active session's round.

    Raises:
        NoActiveSession, NotCheckedIn, CourtNotFound, InvalidSlot,
        SlotOccupied, CourtFull
    """
    active = require_active_session(session)
    if find_check_in(session, active.id, player_id) is None:
        raise NotCheckedIn(f"Player {player_id} is not checked in")

    board, matches_by_court = load_round_board(session, active.id, round_number)
    outcome = move_player(board, player_id, to_court_idx, to_slot, swap_with_player_id)

    if not outcome.noop:
        persist_board(session, active.id, board, outcome.board, matches_by_court, outcome.changed_court_idxs)
        session.commit()
        logger.info(
            "Moved player %d to %s (round %d)",
            player_id,
            f"court {to_court_idx} slot {to_slot}" if to_court_idx is not None else "bench",
            round_number,
        )
    return outcome


def reset_matches(session: Session, round_number: Optional[int] = None) -> int:
    """Delete the active session's matches (one round, or all). Returns the count."""
    active = require_active_session(session)
    query = select(Match).where(Match.session_id == active.id)
    if round_number is not None:
        query = query.where(_round_filter(round_number))
    matches = session.exec(query).all()

    for match in matches:
        for row in session.exec(select(MatchPlayer).where(MatchPlayer.match_id == match.id)).all():
            session.delete(row)
    session.flush()
    for match in matches:
        session.delete(match)
    session.commit()
    return len(matches)


def set_court_round_state(
    session: Session,
    court_idx: int,
    round_number: int = 1,
    is_locked: Optional[bool] = None,
    capacity: Optional[int] = None,
    note: Optional[str] = None,
) -> CourtRoundState:
    """Create or update the lock/capacity annotation of one court for one round."""
    active = require_active_session(session)
    if session.exec(select(Court).where(Court.idx == court_idx)).first() is None:
        raise CourtNotFound(f"Court {court_idx} not found")

    state = load_court_round_states(session, active.id, round_number).get(court_idx)
    if state is None:
        state = CourtRoundState(session_id=active.id, round_number=round_number, court_idx=court_idx)
    if is_locked is not None:
        state.is_locked = is_locked
    if capacity is not None:
        state.capacity = capacity
    if note is not None:
        state.note = note
    state.updated_at = datetime.utcnow()

    session.add(state)
    session.commit()
    session.refresh(state)
    return state
