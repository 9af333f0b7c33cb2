from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from courtside.models.court import Court
    from courtside.models.match_player import MatchPlayer
    from courtside.models.training_session import TrainingSession


class Match(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="trainingsession.id", index=True)
    court_id: int = Field(foreign_key="court.id")
    round_number: Optional[int] = Field(default=None)  # None is read as round 1 (legacy rows)
    started_at: datetime = Field(default_factory=datetime.utcnow)
    ended_at: Optional[datetime] = Field(default=None)

    # Relationships
    training_session: "TrainingSession" = Relationship(back_populates="matches")
    court: "Court" = Relationship()
    players: List["MatchPlayer"] = Relationship(back_populates="match")
