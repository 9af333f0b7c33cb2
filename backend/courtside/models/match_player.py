from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from courtside.models.match import Match


class MatchPlayer(SQLModel, table=True):
    __tablename__ = "matchplayer"
    __table_args__ = (
        SAUniqueConstraint("match_id", "slot", name="uq_matchplayer_match_slot"),
        SAUniqueConstraint("match_id", "player_id", name="uq_matchplayer_match_player"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: int = Field(foreign_key="match.id", index=True)
    player_id: int = Field(foreign_key="player.id")
    slot: int

    # Relationships
    match: "Match" = Relationship(back_populates="players")
