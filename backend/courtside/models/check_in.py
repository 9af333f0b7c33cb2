from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from courtside.models.player import Player
    from courtside.models.training_session import TrainingSession


class CheckIn(SQLModel, table=True):
    __tablename__ = "checkin"
    __table_args__ = (SAUniqueConstraint("session_id", "player_id", name="uq_checkin_session_player"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="trainingsession.id", index=True)
    player_id: int = Field(foreign_key="player.id")
    max_rounds: Optional[int] = Field(default=None)  # 1 = "one round only"; None = no cap
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    training_session: "TrainingSession" = Relationship(back_populates="check_ins")
    player: "Player" = Relationship()
