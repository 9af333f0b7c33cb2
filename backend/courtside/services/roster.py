"""
Roster Snapshot: read-only view of the active session's check-ins.
"""

from typing import List

from sqlmodel import Session, select

from courtside.models.check_in import CheckIn
from courtside.models.player import Player
from courtside.utils.auto_arrange import RosterPlayer


def load_roster(session: Session, training_session_id: int) -> List[RosterPlayer]:
    """Checked-in players of a session, in check-in order."""
    rows = session.exec(
        select(CheckIn, Player)
        .join(Player, CheckIn.player_id == Player.id)
        .where(CheckIn.session_id == training_session_id)
        .order_by(CheckIn.created_at, CheckIn.id)
    ).all()

    return [
        RosterPlayer(
            player_id=player.id,
            name=player.name,
            level=player.level,
            gender=player.gender,
            primary_category=player.primary_category,
            max_rounds=check_in.max_rounds,
        )
        for check_in, player in rows
    ]
