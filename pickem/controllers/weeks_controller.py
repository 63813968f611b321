"""
Weeks controller - current week data and the fetch-odds trigger
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from pickem.core.dependencies import AppId, AppSettings, Database, OddsClient
from pickem.models.week import Game, Week
from pickem.services.odds_client import OddsConfigurationError, OddsProviderError
from pickem.services.odds_normalizer import OddsPayloadError
from pickem.services.odds_service import OddsService
from pickem.services.week_service import WeekNotFoundError, WeekService


router = APIRouter(prefix="/weeks", tags=["weeks"])


class WeekResponse(BaseModel):
    week_id: str
    betting_window_start: datetime
    betting_window_end: datetime
    picks_reveal_time: datetime
    tie_breaker_game_id: Optional[str] = None
    actual_tie_breaker_total_points: Optional[int] = None
    games: list[Game]
    last_updated: Optional[datetime] = None

    @classmethod
    def from_week(cls, week: Week) -> "WeekResponse":
        return cls(**week.model_dump(exclude={"id", "app_id", "version"}))


class FetchOddsResponse(BaseModel):
    success: bool
    message: str
    week_id: str
    games: list[Game]


@router.get("/current", response_model=WeekResponse)
async def get_current_week(db: Database, settings: AppSettings, app_id: AppId):
    """
    Get the current week with its games.
    """
    week_service = WeekService(db, settings.week_timezone)
    week_id = week_service.current_week_info(datetime.now(timezone.utc)).week_id

    try:
        week = await week_service.get_week(app_id, week_id)
    except WeekNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return WeekResponse.from_week(week)


@router.post("/current/odds", response_model=FetchOddsResponse)
async def fetch_current_odds(
    db: Database,
    settings: AppSettings,
    odds_client: OddsClient,
    app_id: AppId
):
    """
    Pull the latest odds from the provider into the current week.
    """
    odds_service = OddsService(db, odds_client, settings.week_timezone)

    try:
        result = await odds_service.fetch_current_odds(app_id)
    except OddsConfigurationError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )
    except (OddsProviderError, OddsPayloadError) as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to fetch odds: {e}"
        )

    return FetchOddsResponse(**result)
