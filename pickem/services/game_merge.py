"""
Game merge - folds fresh provider fragments into a week's stored games.

Rules:
- existing games keep their position, new fixtures from the odds feed are
  appended, so the list only grows;
- an odds fragment carrying a moneyline market replaces the stored moneyline;
- a score fragment overwrites score/completed, except that a completed game
  never goes back to not completed (such fragments are ignored).

Merging the same batch twice gives the same games as merging it once.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from pickem.models.week import Game, GameOdds, GameScore, OddsFragment, ScoreFragment

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    games: list[Game]
    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.updated)


def _game_from_odds(fragment: OddsFragment) -> Game:
    return Game(
        id=fragment.id,
        home_team=fragment.home_team,
        away_team=fragment.away_team,
        commence_time=fragment.commence_time,
        odds=GameOdds(moneyline=dict(fragment.moneyline)),
        score=GameScore(),
        completed=False,
    )


def apply_odds(game: Game, fragment: OddsFragment) -> Game:
    if not fragment.moneyline or fragment.moneyline == game.odds.moneyline:
        return game
    return game.model_copy(update={"odds": GameOdds(moneyline=dict(fragment.moneyline))})


def apply_score(game: Game, fragment: ScoreFragment) -> Game:
    if game.completed and not fragment.completed:
        logger.warning(f"Ignoring score regression for completed game {game.id}")
        return game

    # Not started yet: provider sends no scores
    if fragment.home_score is None and not fragment.completed:
        return game

    score = GameScore(home=fragment.home_score, away=fragment.away_score)
    if score == game.score and fragment.completed == game.completed:
        return game

    return game.model_copy(update={"score": score, "completed": fragment.completed})


def merge_games(
    existing: list[Game],
    odds: list[OddsFragment],
    scores: list[ScoreFragment],
) -> MergeResult:
    odds_by_id = {fragment.id: fragment for fragment in odds}
    scores_by_id = {fragment.id: fragment for fragment in scores}

    games = list(existing)
    known_ids = {game.id for game in games}
    result = MergeResult(games=games)

    for fragment in odds:
        if fragment.id not in known_ids:
            games.append(_game_from_odds(fragment))
            known_ids.add(fragment.id)
            result.added.append(fragment.id)

    for index, game in enumerate(games):
        merged = game
        if game.id in odds_by_id:
            merged = apply_odds(merged, odds_by_id[game.id])
        if game.id in scores_by_id:
            merged = apply_score(merged, scores_by_id[game.id])

        if merged is not game:
            games[index] = merged
            if game.id not in result.added:
                result.updated.append(game.id)

    return result


def select_tie_breaker_game(games: list[Game]) -> Optional[str]:
    """Id of the chronologically last game; the later-inserted one wins a tie."""
    if not games:
        return None

    last = games[0]
    for game in games[1:]:
        if game.commence_time >= last.commence_time:
            last = game
    return last.id


def resolve_tie_breaker_total(
    games: list[Game],
    tie_breaker_game_id: Optional[str],
    current: Optional[int],
) -> Optional[int]:
    """
    Total points of the tie-breaker game once it completes.

    First completion wins: a value already recorded is returned untouched.
    """
    if current is not None or tie_breaker_game_id is None:
        return current

    game = next((g for g in games if g.id == tie_breaker_game_id), None)
    if game is None or not game.completed:
        return None
    return game.total_points
