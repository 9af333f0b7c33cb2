"""
Translate court assignment errors into HTTP responses.
"""

from fastapi import HTTPException

from courtside.errors import (
    CheckInError,
    CourtAssignmentError,
    CourtFull,
    CourtNotFound,
    InvalidSlot,
    NoActiveSession,
    NotCheckedIn,
    PlayerNotFound,
    SlotOccupied,
)

STATUS_BY_ERROR = {
    CourtNotFound: 404,
    PlayerNotFound: 404,
    NotCheckedIn: 400,
    InvalidSlot: 422,
    SlotOccupied: 409,
    CourtFull: 409,
    NoActiveSession: 409,
    CheckInError: 409,
}


def to_http_exception(error: CourtAssignmentError) -> HTTPException:
    status_code = STATUS_BY_ERROR.get(type(error), 400)
    return HTTPException(
        status_code=status_code,
        detail={"code": type(error).__name__, "message": str(error)},
    )
