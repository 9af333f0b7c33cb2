"""
Player registry: list, create, update.
"""

from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from courtside.errors import PlayerNotFound
from courtside.models.player import Player


def list_players(session: Session, q: Optional[str] = None, active: Optional[bool] = None) -> List[Player]:
    """Players filtered by active flag and name/alias substring, sorted by name."""
    query = select(Player)
    if active is not None:
        query = query.where(Player.active == active)
    players = session.exec(query).all()

    term = q.strip().lower() if q else ""
    if term:
        players = [
            p for p in players
            if term in p.name.lower() or term in (p.alias or "").lower()
        ]
    return sorted(players, key=lambda p: p.name.lower())


def create_player(session: Session, data: Dict[str, Any]) -> Player:
    player = Player(**data)
    session.add(player)
    session.commit()
    session.refresh(player)
    return player


def update_player(session: Session, player_id: int, patch: Dict[str, Any]) -> Player:
    player = session.get(Player, player_id)
    if player is None:
        raise PlayerNotFound(f"Player {player_id} not found")
    for key, value in patch.items():
        setattr(player, key, value)
    session.add(player)
    session.commit()
    session.refresh(player)
    return player
