"""
Client for The Odds API v4 (odds and scores feeds).

The provider is unreliable: every transport error, non-2xx status or
non-list body comes out as OddsProviderError so callers can abort the pass.
"""

import logging
from typing import Any, Optional

import httpx

from pickem.core.config import Settings

logger = logging.getLogger(__name__)


class OddsClientError(Exception):
    """Base exception for odds provider errors."""
    pass


class OddsConfigurationError(OddsClientError):
    """Raised when the provider API key is not configured."""
    pass


class OddsProviderError(OddsClientError):
    """Raised when the provider call fails or returns garbage."""
    pass


class OddsApiClient:
    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.odds_api_key)

    def ensure_configured(self) -> None:
        if not self.is_configured:
            logger.error("Odds API key not configured")
            raise OddsConfigurationError("Odds API key missing")

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.settings.odds_api_base_url,
                timeout=self.settings.http_timeout_seconds,
            )
        return self._http_client

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _get(self, path: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        self.ensure_configured()
        params = {"apiKey": self.settings.odds_api_key, **params}

        try:
            response = await self._client().get(path, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Odds API {path} returned {e.response.status_code}: {e.response.text[:500]}"
            )
            raise OddsProviderError(
                f"Odds API {path} failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Odds API {path} request failed: {e}")
            raise OddsProviderError(f"Odds API {path} request failed: {e}") from e
        except ValueError as e:
            raise OddsProviderError(f"Odds API {path} returned invalid JSON") from e

        if not isinstance(data, list):
            raise OddsProviderError(f"Odds API {path} returned {type(data).__name__}, expected list")

        return data

    async def get_odds(self) -> list[dict[str, Any]]:
        """Upcoming fixtures with moneyline prices."""
        return await self._get(
            f"/sports/{self.settings.odds_sport_key}/odds",
            {
                "regions": self.settings.odds_regions,
                "markets": self.settings.odds_markets,
                "oddsFormat": self.settings.odds_format,
            },
        )

    async def get_scores(self) -> list[dict[str, Any]]:
        """Live and recently completed fixtures."""
        return await self._get(
            f"/sports/{self.settings.odds_sport_key}/scores",
            {"daysFrom": self.settings.scores_days_from},
        )
