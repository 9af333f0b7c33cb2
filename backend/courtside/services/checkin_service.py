"""
Check-ins for the active training session.
"""

import logging
from typing import List, Optional

from sqlmodel import Session, select

from courtside.errors import CheckInError, NotCheckedIn, PlayerNotFound
from courtside.models.check_in import CheckIn
from courtside.models.player import Player
from courtside.services.session_service import require_active_session

logger = logging.getLogger(__name__)


def find_check_in(session: Session, training_session_id: int, player_id: int) -> Optional[CheckIn]:
    return session.exec(
        select(CheckIn).where(CheckIn.session_id == training_session_id, CheckIn.player_id == player_id)
    ).first()


def require_checked_in(session: Session, training_session_id: int, player_id: int) -> CheckIn:
    check_in = find_check_in(session, training_session_id, player_id)
    if check_in is None:
        raise NotCheckedIn(f"Player {player_id} is not checked in")
    return check_in


def add_check_in(session: Session, player_id: int, max_rounds: Optional[int] = None) -> CheckIn:
    """
    Check a player in to the active session.

    Raises:
        NoActiveSession, PlayerNotFound, CheckInError (inactive or duplicate)
    """
    active = require_active_session(session)

    player = session.get(Player, player_id)
    if player is None:
        raise PlayerNotFound(f"Player {player_id} not found")
    if not player.active:
        raise CheckInError(f"Player {player_id} is inactive")
    if find_check_in(session, active.id, player_id) is not None:
        raise CheckInError(f"Player {player_id} is already checked in")

    check_in = CheckIn(session_id=active.id, player_id=player_id, max_rounds=max_rounds)
    session.add(check_in)
    session.commit()
    session.refresh(check_in)
    logger.info("Checked in player %d to session %d", player_id, active.id)
    return check_in


def remove_check_in(session: Session, player_id: int) -> None:
    active = require_active_session(session)
    check_in = require_checked_in(session, active.id, player_id)
    session.delete(check_in)
    session.commit()


def list_active_check_ins(session: Session) -> List[CheckIn]:
    active = require_active_session(session)
    return list(
        session.exec(
            select(CheckIn).where(CheckIn.session_id == active.id).order_by(CheckIn.created_at, CheckIn.id)
        ).all()
    )
