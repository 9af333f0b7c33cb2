from courtside.models.check_in import CheckIn
from courtside.models.court import Court
from courtside.models.court_round_state import CourtRoundState
from courtside.models.match import Match
from courtside.models.match_player import MatchPlayer
from courtside.models.player import Gender, Player, PlayerCategory
from courtside.models.training_session import TrainingSession

__all__ = [
    "Player",
    "Gender",
    "PlayerCategory",
    "TrainingSession",
    "CheckIn",
    "Court",
    "CourtRoundState",
    "Match",
    "MatchPlayer",
]
