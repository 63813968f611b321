"""
Settlement engine - resolves one weekly entry against the week's games.

Scoring:
- picked team won: outcome "win", winnings = tier * multiplier[tier]
- picked team lost, or the game ended tied: outcome "loss", winnings 0
- game not completed, or completed without scores: pick stays "pending"

Decided picks are never recomputed, only re-summed, so running settlement
again on the same data gives the same totals.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from pickem.models.pick import Pick, PickOutcome
from pickem.models.submission import Submission
from pickem.models.week import Game

logger = logging.getLogger(__name__)


class SettlementError(Exception):
    """Base exception for settlement errors."""
    pass


class SubmissionAlreadySettledError(SettlementError):
    """Raised when a settled submission is handed back to the engine."""
    pass


class UnknownTierError(SettlementError):
    """Raised when a pick's tier has no payout multiplier."""
    pass


@dataclass(frozen=True)
class SettlementResult:
    picks: dict[str, Pick]
    total_correct_picks: int
    total_winner_bucks_won: float
    is_settled: bool

    previous_correct_picks: int
    previous_winner_bucks_won: float
    picks_resolved: int  # pending -> win/loss this round

    @property
    def winner_bucks_delta(self) -> float:
        """Amount to credit the profile with (never the full total)."""
        return round(self.total_winner_bucks_won - self.previous_winner_bucks_won, 2)

    @property
    def changed(self) -> bool:
        return (
            self.picks_resolved > 0
            or self.is_settled
            or self.total_correct_picks != self.previous_correct_picks
            or self.total_winner_bucks_won != self.previous_winner_bucks_won
        )


class SettlementEngine:
    def __init__(self, payout_multipliers: dict[int, float]):
        self.payout_multipliers = payout_multipliers

    def payout_for(self, tier: int) -> float:
        try:
            return round(tier * self.payout_multipliers[tier], 2)
        except KeyError:
            raise UnknownTierError(f"No payout multiplier for tier {tier}")

    @staticmethod
    def determine_winner(game: Game) -> Optional[str]:
        """Winning team name, or None for a tie."""
        home, away = game.score.home, game.score.away
        if home > away:
            return game.home_team
        if away > home:
            return game.away_team
        return None

    def settle_pick(self, pick: Pick, game: Game) -> Pick:
        """Resolve a pending pick against a completed game."""
        winner = self.determine_winner(game)

        if winner is not None and pick.pick == winner:
            return Pick(
                game_id=pick.game_id,
                pick=pick.pick,
                tier=pick.tier,
                outcome=PickOutcome.WIN,
                winnings=self.payout_for(pick.tier),
            )

        return Pick(
            game_id=pick.game_id,
            pick=pick.pick,
            tier=pick.tier,
            outcome=PickOutcome.LOSS,
            winnings=0.0,
        )

    def settle(self, submission: Submission, games: list[Game]) -> SettlementResult:
        if submission.is_settled:
            raise SubmissionAlreadySettledError(f"Submission {submission.id} is already settled")

        games_by_id = {game.id: game for game in games}

        picks = {}
        all_completed = True
        resolved = 0

        for game_id, pick in submission.picks.items():
            game = games_by_id.get(game_id)

            if game is not None and game.completed and not game.is_final:
                logger.warning(f"Game {game_id} is completed without scores, leaving picks pending")

            if game is None or not game.is_final:
                all_completed = False
                picks[game_id] = pick
                continue

            if pick.is_decided:
                picks[game_id] = pick
            else:
                picks[game_id] = self.settle_pick(pick, game)
                resolved += 1

        winners = [p for p in picks.values() if p.outcome == PickOutcome.WIN]

        return SettlementResult(
            picks=picks,
            total_correct_picks=len(winners),
            total_winner_bucks_won=round(sum(p.winnings for p in winners), 2),
            is_settled=all_completed,
            previous_correct_picks=submission.total_correct_picks,
            previous_winner_bucks_won=submission.total_winner_bucks_won,
            picks_resolved=resolved,
        )
