"""
Training session lifecycle: at most one active session at a time.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlmodel import Session, select

from courtside.errors import NoActiveSession
from courtside.models.match import Match
from courtside.models.training_session import TrainingSession

logger = logging.getLogger(__name__)


def get_active_session(session: Session) -> Optional[TrainingSession]:
    """Most recently created active session, or None."""
    return session.exec(
        select(TrainingSession)
        .where(TrainingSession.status == "active")
        .order_by(TrainingSession.created_at.desc(), TrainingSession.id.desc())
    ).first()


def require_active_session(session: Session) -> TrainingSession:
    """
    Round operations need an active session.

    Raises:
        NoActiveSession if none is running
    """
    active = get_active_session(session)
    if active is None:
        raise NoActiveSession("No active training session")
    return active


def start_or_get_active_session(session: Session) -> TrainingSession:
    active = get_active_session(session)
    if active is not None:
        return active

    now = datetime.utcnow()
    training_session = TrainingSession(date=now, status="active", created_at=now)
    session.add(training_session)
    session.commit()
    session.refresh(training_session)
    logger.info("Started training session %d", training_session.id)
    return training_session


def end_active_session(session: Session) -> TrainingSession:
    """Mark the active session ended and stamp ended_at on all of its matches."""
    active = require_active_session(session)
    ended_at = datetime.utcnow()

    active.status = "ended"
    active.ended_at = ended_at
    session.add(active)

    matches = session.exec(select(Match).where(Match.session_id == active.id)).all()
    for match in matches:
        match.ended_at = ended_at
        session.add(match)

    session.commit()
    session.refresh(active)
    logger.info("Ended training session %d (%d matches)", active.id, len(matches))
    return active
