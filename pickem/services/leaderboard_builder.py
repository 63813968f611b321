"""
Leaderboard builder - ranks the settled entries of a finished week.

Sort order:
1. total_correct_picks (descending)
2. total_winner_bucks_won (descending)
3. |tie_breaker_points - actual tie-breaker total| (ascending)
Anything still tied keeps its input order (stable sort).
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pickem.models.leaderboard import Leaderboard, LeaderboardEntry
from pickem.models.submission import Submission
from pickem.models.week import Week


class LeaderboardBuilderError(Exception):
    """Base exception for leaderboard builder errors."""
    pass


class LeaderboardNotReadyError(LeaderboardBuilderError):
    """Raised when the week is not finished yet."""
    pass


@dataclass(frozen=True)
class RankedSubmission:
    submission: Submission
    username: str


def not_ready_reason(week: Week) -> Optional[str]:
    """Why the week cannot be ranked yet, or None when it can."""
    if not week.games:
        return "week has no games"
    if not week.all_games_completed:
        pending = sum(1 for g in week.games if not g.is_final)
        return f"{pending} game(s) not completed"
    if week.tie_breaker_game_id is None:
        return "tie-breaker game not chosen"
    if week.get_game(week.tie_breaker_game_id) is None:
        return f"tie-breaker game {week.tie_breaker_game_id} missing from game list"
    if week.actual_tie_breaker_total_points is None:
        return "tie-breaker total not recorded"
    return None


def sort_key(submission: Submission, actual_total: int) -> tuple:
    return (
        -submission.total_correct_picks,
        -submission.total_winner_bucks_won,
        abs(submission.tie_breaker_points - actual_total),
    )


def build_leaderboard(
    week: Week,
    ranked: list[RankedSubmission],
    now: Optional[datetime] = None,
) -> Leaderboard:
    reason = not_ready_reason(week)
    if reason is not None:
        raise LeaderboardNotReadyError(f"Leaderboard for {week.week_id} not ready: {reason}")

    actual_total = week.actual_tie_breaker_total_points
    settled = [r for r in ranked if r.submission.is_settled]
    settled.sort(key=lambda r: sort_key(r.submission, actual_total))

    entries = [
        LeaderboardEntry(
            rank=position,
            user_id=r.submission.user_id,
            username=r.username,
            entry_number=r.submission.entry_number,
            total_correct_picks=r.submission.total_correct_picks,
            total_winner_bucks_won=r.submission.total_winner_bucks_won,
            tie_breaker_points=r.submission.tie_breaker_points,
        )
        for position, r in enumerate(settled, start=1)
    ]

    return Leaderboard(
        _id=week.id,
        app_id=week.app_id,
        week_id=week.week_id,
        entries=entries,
        actual_tie_breaker_total_points=actual_total,
        last_updated=now,
    )
