from .week_repository import WeekRepository
from .submission_repository import SubmissionRepository
from .profile_repository import ProfileRepository
from .leaderboard_repository import LeaderboardRepository

__all__ = [
    "WeekRepository",
    "SubmissionRepository",
    "ProfileRepository",
    "LeaderboardRepository",
]
