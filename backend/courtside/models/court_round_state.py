from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class CourtRoundState(SQLModel, table=True):
    """Per-round court annotations: lock flag and explicit extended capacity."""

    __tablename__ = "courtroundstate"
    __table_args__ = (
        SAUniqueConstraint("session_id", "round_number", "court_idx", name="uq_courtroundstate_session_round_court"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="trainingsession.id", index=True)
    round_number: int
    court_idx: int
    is_locked: bool = Field(default=False)
    capacity: Optional[int] = Field(default=None)  # 4..8; None = standard court
    note: Optional[str] = Field(default=None)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
