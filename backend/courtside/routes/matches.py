from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, field_validator, model_validator
from sqlmodel import Session

from courtside.database import get_session
from courtside.errors import CourtAssignmentError
from courtside.services.match_service import (
    auto_arrange_round,
    list_round_courts,
    move_player_in_round,
    reset_matches,
    set_court_round_state,
)
from courtside.utils.court_model import MAX_EXTENDED_CAPACITY
from courtside.utils.http_errors import to_http_exception

router = APIRouter()


class SlotPlayerResponse(BaseModel):
    slot: int
    player_id: int
    name: str
    level: Optional[int]


class CourtResponse(BaseModel):
    court_idx: int
    slots: List[SlotPlayerResponse]
    team1: List[int]
    team2: List[int]
    is_locked: bool
    capacity: Optional[int]


class AutoArrangeRequest(BaseModel):
    round: int = Field(default=1, ge=1)
    locked_court_idxs: List[int] = []
    reshuffle: bool = False
    unavailable_player_ids: List[int] = []
    reactivated_player_ids: List[int] = []
    seed: Optional[int] = None


class AutoArrangeResponse(BaseModel):
    filled_courts: int
    benched: int
    benched_player_ids: List[int]


class MoveRequest(BaseModel):
    player_id: int
    to_court_idx: Optional[int] = None
    to_slot: Optional[int] = None
    swap_with_player_id: Optional[int] = None
    round: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def validate_slot(self):
        if self.to_court_idx is not None and self.to_slot is None:
            raise ValueError("to_slot is required when to_court_idx is set")
        return self


class CourtStateUpdate(BaseModel):
    is_locked: Optional[bool] = None
    capacity: Optional[int] = None
    note: Optional[str] = None

    @field_validator("capacity")
    @classmethod
    def validate_capacity(cls, v):
        if v is not None and not 4 <= v <= MAX_EXTENDED_CAPACITY:
            raise ValueError(f"capacity must be between 4 and {MAX_EXTENDED_CAPACITY}")
        return v


class CourtStateResponse(BaseModel):
    court_idx: int
    round_number: int
    is_locked: bool
    capacity: Optional[int]
    note: Optional[str]

    class Config:
        from_attributes = True


def _court_responses(session: Session, round_number: int) -> List[CourtResponse]:
    return [
        CourtResponse(
            court_idx=view.court_idx,
            slots=[
                SlotPlayerResponse(slot=s.slot, player_id=s.player.id, name=s.player.name, level=s.player.level)
                for s in view.slots
            ],
            team1=view.team1,
            team2=view.team2,
            is_locked=view.is_locked,
            capacity=view.capacity,
        )
        for view in list_round_courts(session, round_number)
    ]


@router.get("/matches", response_model=List[CourtResponse])
def get_matches(round: int = Query(default=1, ge=1), session: Session = Depends(get_session)):
    """All courts of a round with their slots; empty courts included"""
    return _court_responses(session, round)


@router.post("/matches/auto-arrange", response_model=AutoArrangeResponse)
def post_auto_arrange(payload: AutoArrangeRequest, session: Session = Depends(get_session)):
    try:
        result = auto_arrange_round(
            session,
            round_number=payload.round,
            locked_court_idxs=payload.locked_court_idxs,
            reshuffle=payload.reshuffle,
            unavailable_player_ids=payload.unavailable_player_ids,
            reactivated_player_ids=payload.reactivated_player_ids,
            seed=payload.seed,
        )
    except CourtAssignmentError as e:
        raise to_http_exception(e)
    return AutoArrangeResponse(
        filled_courts=result.filled_courts,
        benched=result.benched,
        benched_player_ids=result.benched_player_ids,
    )


@router.post("/matches/move", response_model=List[CourtResponse])
def post_move(payload: MoveRequest, session: Session = Depends(get_session)):
    """Move a player to a court slot, to the bench, or swap with the slot's occupant"""
    try:
        move_player_in_round(
            session,
            player_id=payload.player_id,
            to_court_idx=payload.to_court_idx,
            to_slot=payload.to_slot,
            swap_with_player_id=payload.swap_with_player_id,
            round_number=payload.round,
        )
    except CourtAssignmentError as e:
        raise to_http_exception(e)
    return _court_responses(session, payload.round)


@router.delete("/matches")
def delete_matches(round: Optional[int] = Query(default=None, ge=1), session: Session = Depends(get_session)):
    """Reset one round, or every round of the active session"""
    try:
        deleted = reset_matches(session, round_number=round)
    except CourtAssignmentError as e:
        raise to_http_exception(e)
    return {"deleted_matches": deleted}


@router.put("/matches/courts/{court_idx}/state", response_model=CourtStateResponse)
def put_court_state(
    court_idx: int,
    payload: CourtStateUpdate,
    round: int = Query(default=1, ge=1),
    session: Session = Depends(get_session),
):
    """Lock a court for a round or declare its extended capacity"""
    try:
        return set_court_round_state(
            session,
            court_idx,
            round_number=round,
            is_locked=payload.is_locked,
            capacity=payload.capacity,
            note=payload.note,
        )
    except CourtAssignmentError as e:
        raise to_http_exception(e)
