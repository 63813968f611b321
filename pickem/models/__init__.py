from .week import Game, GameOdds, GameScore, OddsFragment, ScoreFragment, Week, WeekInfo
from .pick import Pick, PickOutcome
from .submission import Submission, SubmissionCreate
from .user import UserProfile
from .leaderboard import Leaderboard, LeaderboardEntry

__all__ = [
    "Game",
    "GameOdds",
    "GameScore",
    "OddsFragment",
    "ScoreFragment",
    "Week",
    "WeekInfo",
    "Pick",
    "PickOutcome",
    "Submission",
    "SubmissionCreate",
    "UserProfile",
    "Leaderboard",
    "LeaderboardEntry",
]
