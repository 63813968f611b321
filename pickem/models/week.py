from datetime import datetime, timezone
from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel, Field


def _as_utc(value: datetime) -> datetime:
    # Mongo hands back naive UTC datetimes unless the client is tz_aware
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDateTime = Annotated[datetime, AfterValidator(_as_utc)]


class GameScore(BaseModel):
    home: Optional[int] = None
    away: Optional[int] = None


class GameOdds(BaseModel):
    moneyline: dict[str, int] = {}  # team name -> american price


class Game(BaseModel):
    """Un partido de la semana, identificado por el id del proveedor"""

    id: str
    home_team: str
    away_team: str
    commence_time: UtcDateTime

    odds: GameOdds = Field(default_factory=GameOdds)
    score: GameScore = Field(default_factory=GameScore)

    completed: bool = False  # only ever goes false -> true

    class Config:
        populate_by_name = True

    @property
    def total_points(self) -> Optional[int]:
        if self.score.home is None or self.score.away is None:
            return None
        return self.score.home + self.score.away

    @property
    def is_final(self) -> bool:
        """Completed and carrying both scores."""
        return self.completed and self.total_points is not None


class OddsFragment(BaseModel):
    """Normalized odds record for one fixture"""

    id: str
    home_team: str
    away_team: str
    commence_time: UtcDateTime
    moneyline: dict[str, int] = {}


class ScoreFragment(BaseModel):
    """Normalized score record for one fixture"""

    id: str
    home_team: str
    away_team: str
    commence_time: Optional[UtcDateTime] = None

    home_score: Optional[int] = None
    away_score: Optional[int] = None
    completed: bool = False


class WeekInfo(BaseModel):
    """Temporal fields of a betting week, derived from a reference instant"""

    week_id: str  # week-2026-10-20
    betting_window_start: UtcDateTime  # Tuesday 00:01
    betting_window_end: UtcDateTime  # Thursday 17:00
    picks_reveal_time: UtcDateTime  # Friday 12:00
    week_end: UtcDateTime  # next Tuesday 00:01


class Week(BaseModel):
    """Semana de apuestas con su lista de partidos"""

    id: str = Field(..., alias="_id")  # app_id:week_id
    app_id: str
    week_id: str

    betting_window_start: UtcDateTime
    betting_window_end: UtcDateTime
    picks_reveal_time: UtcDateTime

    tie_breaker_game_id: Optional[str] = None  # set once
    actual_tie_breaker_total_points: Optional[int] = None  # set once

    games: list[Game] = []

    version: int = 0  # bumped on every games write
    last_updated: Optional[UtcDateTime] = None

    class Config:
        populate_by_name = True

    def get_game(self, game_id: str) -> Optional[Game]:
        for game in self.games:
            if game.id == game_id:
                return game
        return None

    @property
    def all_games_completed(self) -> bool:
        return all(game.is_final for game in self.games)

    def is_betting_open(self, now: datetime) -> bool:
        return self.betting_window_start <= now <= self.betting_window_end
