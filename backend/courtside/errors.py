"""
Error taxonomy for court assignment operations.

Every error is a local validation failure raised before any mutation,
so callers never observe a partially applied move.
"""


class CourtAssignmentError(Exception):
    """Base exception for court assignment errors"""
    pass


class NoActiveSession(CourtAssignmentError):
    """Round operations require an active training session"""
    pass


class NotCheckedIn(CourtAssignmentError):
    """Player is not checked in to the active session"""
    pass


class CourtNotFound(CourtAssignmentError):
    """Target court index does not exist"""
    pass


class InvalidSlot(CourtAssignmentError):
    """Target slot missing or outside the court's capacity"""
    pass


class SlotOccupied(CourtAssignmentError):
    """Target slot holds another player and no matching swap was requested"""
    pass


class CourtFull(CourtAssignmentError):
    """Insertion would exceed the court's capacity"""
    pass


class PlayerNotFound(CourtAssignmentError):
    pass


class CheckInError(CourtAssignmentError):
    """Check-in rejected (inactive player, duplicate check-in)"""
    pass
