"""
SubmissionService - Business logic for weekly entries.

Handles validation, the entry cost debit and the weekly entry cap.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from pickem.core.config import Settings
from pickem.models.pick import Pick, PickOutcome
from pickem.models.submission import Submission, SubmissionCreate
from pickem.models.user import UserProfile
from pickem.models.week import Week
from pickem.repositories.profile_repository import ProfileRepository
from pickem.repositories.submission_repository import SubmissionRepository, submission_doc_id
from pickem.repositories.week_repository import WeekRepository
from pickem.services.profile_service import ProfileService
from pickem.services.week_clock import get_week_info

logger = logging.getLogger(__name__)


class SubmissionError(Exception):
    """Base exception for submission errors."""
    pass


class WeekNotAvailableError(SubmissionError):
    """Raised when the current week has no game data yet."""
    pass


class BettingWindowClosedError(SubmissionError):
    pass


class EntryLimitReachedError(SubmissionError):
    pass


class IncompletePicksError(SubmissionError):
    """Raised when a game has no pick or a pick names an unknown game."""
    pass


class InvalidPickError(SubmissionError):
    """Raised when a pick is not one of the game's two teams."""
    pass


class TieBreakerGameMissingError(SubmissionError):
    pass


class InvalidTieBreakerError(SubmissionError):
    pass


class InvalidTierError(SubmissionError):
    pass


class InsufficientBalanceError(SubmissionError):
    pass


class DuplicateEntryError(SubmissionError):
    """Raised when the entry number is already taken by a stored entry."""
    pass


class SubmissionService:
    def __init__(self, db: AsyncIOMotorDatabase, settings: Settings):
        self.settings = settings
        self.week_repo = WeekRepository(db)
        self.submission_repo = SubmissionRepository(db)
        self.profile_repo = ProfileRepository(db)
        self.profile_service = ProfileService(db, settings)

    async def submit(
        self,
        app_id: str,
        data: SubmissionCreate,
        now: Optional[datetime] = None
    ) -> Submission:
        """
        Create a weekly entry for the current week.

        Validates, in order:
        - the week has been loaded
        - betting window is open
        - weekly entry cap not reached
        - one pick per game, each naming one of the game's teams
        - tie-breaker game exists and the guess is in range
        - tier is valid and affordable

        Nothing is written unless every check passes.
        """
        now = now or datetime.now(timezone.utc)
        week_id = get_week_info(now, self.settings.week_timezone).week_id

        week = await self.week_repo.get(app_id, week_id)
        if not week or not week.games:
            raise WeekNotAvailableError(f"No games loaded for {week_id} yet")

        if not week.is_betting_open(now):
            raise BettingWindowClosedError("Betting is currently closed for this week")

        profile = (
            await self.profile_repo.get(app_id, data.user_id)
            or self.profile_service.new_profile(app_id, data.user_id)
        )
        max_entries = self.settings.max_entries_per_week
        if profile.entries_for_week(week_id) >= max_entries:
            raise EntryLimitReachedError(
                f"You have reached the maximum of {max_entries} entries for this week"
            )

        self._validate_picks(week, data.picks)
        self._validate_tie_breaker(week, data.tie_breaker_points)
        self._validate_tier(data.tier, profile)

        await self.profile_service.get_or_create(app_id, data.user_id)
        reserved = await self.profile_repo.reserve_entry(
            app_id, data.user_id, week_id, cost=data.tier, max_entries=max_entries
        )
        if reserved is None:
            # Lost a race with another submission by the same user
            await self._raise_reservation_failure(app_id, data, week_id)

        entry_number = reserved.last_entry_number(week_id)
        submission = Submission(
            _id=submission_doc_id(app_id, data.user_id, week_id, entry_number),
            app_id=app_id,
            user_id=data.user_id,
            week_id=week_id,
            entry_number=entry_number,
            picks={
                game.id: Pick(
                    game_id=game.id,
                    pick=data.picks[game.id],
                    tier=data.tier,
                    outcome=PickOutcome.PENDING,
                    winnings=0.0,
                )
                for game in week.games
            },
            tie_breaker_points=data.tie_breaker_points,
            tier=data.tier,
            submitted_at=now,
        )

        try:
            await self.submission_repo.create(submission)
        except ValueError as e:
            logger.error(f"Entry {submission.id} already stored, refunding")
            await self.profile_repo.release_entry(app_id, data.user_id, week_id, data.tier)
            raise DuplicateEntryError("This entry was already submitted, please try again") from e
        except PyMongoError:
            logger.exception(f"Failed to store entry {submission.id}, refunding")
            await self.profile_repo.release_entry(app_id, data.user_id, week_id, data.tier)
            raise

        logger.info(f"Entry {submission.id} submitted (tier {data.tier})")
        return submission

    async def get_user_submissions(self, app_id: str, user_id: str, week_id: str) -> list[Submission]:
        return await self.submission_repo.get_user_submissions_for_week(app_id, user_id, week_id)

    def _validate_picks(self, week: Week, picks: dict[str, str]) -> None:
        unknown = set(picks) - {game.id for game in week.games}
        if unknown:
            raise IncompletePicksError(f"Picks reference unknown games: {', '.join(sorted(unknown))}")

        for game in week.games:
            team = picks.get(game.id)
            if not team:
                raise IncompletePicksError(f"Missing pick for {game.home_team} vs {game.away_team}")
            if team not in (game.home_team, game.away_team):
                raise InvalidPickError(
                    f"{team} is not playing in {game.home_team} vs {game.away_team}"
                )

    def _validate_tie_breaker(self, week: Week, points: Optional[int]) -> None:
        game = week.get_game(week.tie_breaker_game_id) if week.tie_breaker_game_id else None
        if game is None:
            raise TieBreakerGameMissingError(
                "Tie-breaker game not found for this week. Cannot submit picks."
            )

        max_points = self.settings.tie_breaker_max_points
        if points is None or not 0 <= points <= max_points:
            raise InvalidTieBreakerError(
                f"Please enter a total score between 0 and {max_points} for the tie-breaker "
                f"game ({game.home_team} vs {game.away_team})"
            )

    def _validate_tier(self, tier: int, profile: UserProfile) -> None:
        if tier not in self.settings.payout_multipliers:
            tiers = ", ".join(str(t) for t in self.settings.betting_tiers)
            raise InvalidTierError(f"Tier must be one of {tiers}")

        if profile.predictor_points < tier:
            raise InsufficientBalanceError(
                f"Not enough Predictor Points! You need {tier} to submit this entry."
            )

    async def _raise_reservation_failure(self, app_id: str, data: SubmissionCreate, week_id: str):
        profile = await self.profile_repo.get(app_id, data.user_id)
        if profile and profile.entries_for_week(week_id) >= self.settings.max_entries_per_week:
            raise EntryLimitReachedError(
                f"You have reached the maximum of {self.settings.max_entries_per_week} entries for this week"
            )
        raise InsufficientBalanceError(
            f"Not enough Predictor Points! You need {data.tier} to submit this entry."
        )
