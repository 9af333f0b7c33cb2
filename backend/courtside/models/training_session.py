from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from courtside.models.check_in import CheckIn
    from courtside.models.match import Match


class TrainingSession(SQLModel, table=True):
    __tablename__ = "trainingsession"

    id: Optional[int] = Field(default=None, primary_key=True)
    date: datetime = Field(default_factory=datetime.utcnow)
    status: str = Field(default="active", index=True)  # "active" | "ended"
    created_at: datetime = Field(default_factory=datetime.utcnow)
    ended_at: Optional[datetime] = Field(default=None)

    # Relationships
    check_ins: List["CheckIn"] = Relationship(back_populates="training_session")
    matches: List["Match"] = Relationship(back_populates="training_session")
