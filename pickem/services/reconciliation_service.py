"""
ReconciliationService - one settlement pass for the current week.

Three ordered phases:
1. fetch odds + scores, merge them into the week's games, persist the week
2. settle every unsettled entry, one entry at a time, then credit each
   profile whatever part of its entries' Winner Bucks it has not received yet
3. once every game is final, rebuild the week's leaderboard

Every write is conditional, so overlapping or abandoned passes are safe to
repeat: the next pass re-reads the store and carries on from there.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo.errors import PyMongoError

from pickem.core.config import Settings
from pickem.models.submission import Submission
from pickem.models.user import default_username
from pickem.models.week import Week
from pickem.repositories.leaderboard_repository import LeaderboardRepository
from pickem.repositories.profile_repository import ProfileRepository
from pickem.repositories.submission_repository import SubmissionRepository
from pickem.services.leaderboard_builder import RankedSubmission, build_leaderboard, not_ready_reason
from pickem.services.odds_client import OddsApiClient, OddsProviderError
from pickem.services.odds_normalizer import (
    OddsPayloadError,
    normalize_odds_batch,
    normalize_scores_batch,
)
from pickem.services.profile_service import ProfileService
from pickem.services.settlement_engine import SettlementEngine, SettlementError
from pickem.services.week_service import WeekService

logger = logging.getLogger(__name__)


class ReconciliationReport(BaseModel):
    app_id: str
    week_id: str

    games_added: int = 0
    games_updated: int = 0

    submissions_processed: int = 0
    submissions_settled: int = 0
    submissions_failed: int = 0
    winner_bucks_credited: float = 0.0

    leaderboard_built: bool = False
    leaderboard_skipped_reason: Optional[str] = None

    aborted: bool = False
    abort_reason: Optional[str] = None


class ReconciliationService:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        odds_client: OddsApiClient,
        settings: Settings,
    ):
        self.settings = settings
        self.odds_client = odds_client
        self.week_service = WeekService(db, settings.week_timezone)
        self.submission_repo = SubmissionRepository(db)
        self.profile_repo = ProfileRepository(db)
        self.profile_service = ProfileService(db, settings)
        self.leaderboard_repo = LeaderboardRepository(db)
        self.engine = SettlementEngine(settings.payout_multipliers)

    async def run_pass(
        self,
        app_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> ReconciliationReport:
        """
        Run one reconciliation pass against wall-clock `now`.

        Raises OddsConfigurationError when the provider key is missing.
        Provider failures abort the pass without writing anything.
        """
        self.odds_client.ensure_configured()

        app_id = app_id or self.settings.default_app_id
        now = now or datetime.now(timezone.utc)
        week_info = self.week_service.current_week_info(now)
        report = ReconciliationReport(app_id=app_id, week_id=week_info.week_id)

        # Phase 1: games
        try:
            raw_odds, raw_scores = await asyncio.gather(
                self.odds_client.get_odds(),
                self.odds_client.get_scores(),
            )
            odds = normalize_odds_batch(raw_odds)
            scores = normalize_scores_batch(raw_scores)
        except (OddsProviderError, OddsPayloadError) as e:
            logger.error(f"Reconciliation for {week_info.week_id} aborted: {e}")
            report.aborted = True
            report.abort_reason = str(e)
            return report

        week = await self.week_service.get_or_create_current_week(app_id, now)
        update = await self.week_service.apply_provider_data(week, odds, scores)
        week = update.week
        report.games_added = len(update.merge.added)
        report.games_updated = len(update.merge.updated)
        logger.info(
            f"Week {week.week_id}: {report.games_added} games added, "
            f"{report.games_updated} updated"
        )

        # Phase 2: settlement
        all_settled_cleanly = await self._settle_week(week, report)

        # Phase 3: leaderboard
        if not all_settled_cleanly:
            report.leaderboard_skipped_reason = "settlement incomplete for some entries"
        else:
            await self._build_leaderboard(week, report, now)

        logger.info(f"Reconciliation pass finished: {report.model_dump()}")
        return report

    async def _settle_week(self, week: Week, report: ReconciliationReport) -> bool:
        submissions = await self.submission_repo.get_unsettled_for_week(week.app_id, week.week_id)

        ok = True
        for submission in submissions:
            report.submissions_processed += 1
            try:
                await self.settle_submission(submission, week, report)
            except (PyMongoError, SettlementError) as e:
                # Skip this entry, keep settling the rest
                logger.error(f"Settlement of {submission.id} failed: {e}")
                report.submissions_failed += 1
                ok = False

        # Also picks up credits a previous pass settled but never applied
        pending = await self.submission_repo.get_pending_credits(week.app_id, week.week_id)
        for submission in pending:
            try:
                await self.credit_submission(submission, report)
            except PyMongoError as e:
                logger.error(f"Winner Bucks credit for {submission.id} failed: {e}")
                report.submissions_failed += 1
                ok = False
        return ok

    async def settle_submission(
        self,
        submission: Submission,
        week: Week,
        report: ReconciliationReport
    ) -> None:
        result = self.engine.settle(submission, week.games)
        if not result.changed:
            return

        stored = await self.submission_repo.apply_settlement(
            submission,
            picks=result.picks,
            total_correct_picks=result.total_correct_picks,
            total_winner_bucks_won=result.total_winner_bucks_won,
            is_settled=result.is_settled,
            credit_pending=result.winner_bucks_delta > 0,
        )
        if stored is None:
            logger.warning(f"Submission {submission.id} changed concurrently, skipping this pass")
            return

        if result.is_settled:
            report.submissions_settled += 1
            logger.info(
                f"Submission {submission.id} settled: {result.total_correct_picks} correct, "
                f"{result.total_winner_bucks_won} Winner Bucks"
            )

    async def credit_submission(self, submission: Submission, report: ReconciliationReport) -> None:
        """
        Bring the user's Winner Bucks up to the submission's settled total.

        The profile keeps what it already received per submission, so a
        repeated credit only adds the difference.
        """
        profile = await self.profile_service.get_or_create(submission.app_id, submission.user_id)
        amount = await self.profile_repo.apply_credit(
            profile, submission.id, submission.total_winner_bucks_won
        )
        if amount is None:
            logger.warning(f"Credit for {submission.id} raced another pass, retrying next pass")
            return

        report.winner_bucks_credited = round(report.winner_bucks_credited + amount, 2)
        await self.submission_repo.clear_credit_pending(submission)

    async def _build_leaderboard(
        self,
        week: Week,
        report: ReconciliationReport,
        now: datetime
    ) -> None:
        reason = not_ready_reason(week)
        if reason is not None:
            report.leaderboard_skipped_reason = reason
            if week.all_games_completed and week.games:
                # Every game is final but the tie-breaker data is off
                logger.warning(f"Leaderboard for {week.week_id} skipped: {reason}")
            return

        settled = await self.submission_repo.get_settled_for_week(week.app_id, week.week_id)
        usernames = await self.profile_repo.get_usernames(
            week.app_id, list({s.user_id for s in settled})
        )
        ranked = [
            RankedSubmission(
                submission=s,
                username=usernames.get(s.user_id) or default_username(s.user_id),
            )
            for s in settled
        ]

        leaderboard = build_leaderboard(week, ranked, now=now)
        await self.leaderboard_repo.replace(leaderboard)

        report.leaderboard_built = True
        logger.info(f"Leaderboard for {week.week_id} updated with {len(leaderboard.entries)} entries")
