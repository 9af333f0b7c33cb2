from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from sqlmodel import Session

from courtside.database import get_session
from courtside.errors import CourtAssignmentError
from courtside.models.player import Player
from courtside.services.checkin_service import add_check_in, list_active_check_ins, remove_check_in
from courtside.services.session_service import (
    end_active_session,
    get_active_session,
    start_or_get_active_session,
)
from courtside.utils.http_errors import to_http_exception

router = APIRouter()


class TrainingSessionResponse(BaseModel):
    id: int
    date: datetime
    status: str
    created_at: datetime
    ended_at: Optional[datetime]

    class Config:
        from_attributes = True


class CheckInCreate(BaseModel):
    player_id: int
    max_rounds: Optional[int] = None

    @field_validator("max_rounds")
    @classmethod
    def validate_max_rounds(cls, v):
        if v is not None and v < 1:
            raise ValueError("max_rounds must be >= 1")
        return v


class CheckInResponse(BaseModel):
    id: int
    session_id: int
    player_id: int
    max_rounds: Optional[int]
    created_at: datetime

    class Config:
        from_attributes = True


class CheckedInPlayerResponse(BaseModel):
    player_id: int
    name: str
    level: Optional[int]
    gender: Optional[str]
    primary_category: Optional[str]
    max_rounds: Optional[int]
    check_in_at: datetime


@router.post("/session/start", response_model=TrainingSessionResponse)
def start_session(session: Session = Depends(get_session)):
    """Start a training session, or return the one already running"""
    return start_or_get_active_session(session)


@router.get("/session/active", response_model=Optional[TrainingSessionResponse])
def get_active(session: Session = Depends(get_session)):
    return get_active_session(session)


@router.post("/session/end", response_model=TrainingSessionResponse)
def end_session(session: Session = Depends(get_session)):
    try:
        return end_active_session(session)
    except CourtAssignmentError as e:
        raise to_http_exception(e)


@router.get("/session/check-ins", response_model=List[CheckedInPlayerResponse])
def get_check_ins(session: Session = Depends(get_session)):
    """Checked-in players of the active session, in check-in order"""
    try:
        check_ins = list_active_check_ins(session)
    except CourtAssignmentError as e:
        raise to_http_exception(e)

    result = []
    for check_in in check_ins:
        player = session.get(Player, check_in.player_id)
        if player is None:
            continue
        result.append(
            CheckedInPlayerResponse(
                player_id=player.id,
                name=player.name,
                level=player.level,
                gender=player.gender,
                primary_category=player.primary_category,
                max_rounds=check_in.max_rounds,
                check_in_at=check_in.created_at,
            )
        )
    return result


@router.post("/session/check-ins", response_model=CheckInResponse, status_code=201)
def post_check_in(payload: CheckInCreate, session: Session = Depends(get_session)):
    try:
        return add_check_in(session, payload.player_id, payload.max_rounds)
    except CourtAssignmentError as e:
        raise to_http_exception(e)


@router.delete("/session/check-ins/{player_id}", status_code=204)
def delete_check_in(player_id: int, session: Session = Depends(get_session)):
    try:
        remove_check_in(session, player_id)
    except CourtAssignmentError as e:
        raise to_http_exception(e)
