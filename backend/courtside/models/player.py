from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import String
from sqlmodel import Column, Field, SQLModel


class Gender(str, Enum):
    male = "male"
    female = "female"


class PlayerCategory(str, Enum):
    single = "single"
    double = "double"
    both = "both"


class Player(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    alias: Optional[str] = None
    level: Optional[int] = Field(default=None)  # Lower = stronger; opaque ordinal for balancing
    gender: Optional[Gender] = Field(default=None, sa_column=Column(String, nullable=True))
    primary_category: Optional[PlayerCategory] = Field(default=None, sa_column=Column(String, nullable=True))
    active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
