from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator, model_validator
from sqlmodel import Session

from courtside.database import get_session
from courtside.errors import PlayerNotFound
from courtside.models.player import Gender, PlayerCategory
from courtside.services.player_service import create_player, list_players, update_player
from courtside.utils.http_errors import to_http_exception

router = APIRouter()


class PlayerCreate(BaseModel):
    name: str
    alias: Optional[str] = None
    level: Optional[int] = None
    gender: Optional[Gender] = None
    primary_category: Optional[PlayerCategory] = None
    active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name cannot be empty")
        return v.strip()

    @field_validator("alias")
    @classmethod
    def validate_alias(cls, v):
        return v.strip() if v else None


class PlayerUpdate(BaseModel):
    name: Optional[str] = None
    alias: Optional[str] = None
    level: Optional[int] = None
    gender: Optional[Gender] = None
    primary_category: Optional[PlayerCategory] = None
    active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("name cannot be empty")
        return v.strip() if v else v

    @model_validator(mode="after")
    def validate_not_empty(self):
        if not self.model_fields_set:
            raise ValueError("patch must update at least one field")
        return self


class PlayerResponse(BaseModel):
    id: int
    name: str
    alias: Optional[str]
    level: Optional[int]
    gender: Optional[Gender]
    primary_category: Optional[PlayerCategory]
    active: bool
    created_at: datetime

    class Config:
        from_attributes = True


@router.get("/players", response_model=List[PlayerResponse])
def get_players(q: Optional[str] = None, active: Optional[bool] = None, session: Session = Depends(get_session)):
    """List players, optionally filtered by name/alias and active flag"""
    return list_players(session, q=q, active=active)


@router.post("/players", response_model=PlayerResponse, status_code=201)
def post_player(payload: PlayerCreate, session: Session = Depends(get_session)):
    return create_player(session, payload.model_dump(mode="json"))


@router.patch("/players/{player_id}", response_model=PlayerResponse)
def patch_player(player_id: int, payload: PlayerUpdate, session: Session = Depends(get_session)):
    try:
        return update_player(session, player_id, payload.model_dump(mode="json", exclude_unset=True))
    except PlayerNotFound as e:
        raise to_http_exception(e)
