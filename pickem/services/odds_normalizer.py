"""
Maps raw The Odds API records into internal game fragments.

Odds record:
    {"id", "commence_time", "home_team", "away_team",
     "bookmakers": [{"key", "markets": [{"key": "h2h",
                                         "outcomes": [{"name", "price"}]}]}]}

Score record:
    {"id", "commence_time", "completed", "home_team", "away_team",
     "scores": [{"name", "score": "24"}] | None}
"""

from typing import Any, Optional

from pydantic import ValidationError

from pickem.models.week import OddsFragment, ScoreFragment

MONEYLINE_MARKET = "h2h"


class OddsPayloadError(Exception):
    """Raised when a provider record is missing identity fields or is malformed."""
    pass


def _require(record: dict[str, Any], *keys: str) -> None:
    missing = [key for key in keys if not record.get(key)]
    if missing:
        raise OddsPayloadError(
            f"Provider record {record.get('id', '?')} missing fields: {', '.join(missing)}"
        )


def extract_moneyline(record: dict[str, Any]) -> dict[str, int]:
    """
    Moneyline prices from the first bookmaker offering an h2h market.

    No bookmakers, no h2h market or unpriced outcomes give an empty mapping.
    """
    for bookmaker in record.get("bookmakers") or []:
        market = next(
            (m for m in bookmaker.get("markets") or [] if m.get("key") == MONEYLINE_MARKET),
            None,
        )
        if market is None:
            continue

        moneyline = {}
        for outcome in market.get("outcomes") or []:
            name = outcome.get("name")
            price = outcome.get("price")
            if name is None or price is None:
                continue
            moneyline[name] = int(price)
        return moneyline

    return {}


def normalize_odds(record: dict[str, Any]) -> OddsFragment:
    _require(record, "id", "home_team", "away_team", "commence_time")

    try:
        return OddsFragment(
            id=record["id"],
            home_team=record["home_team"],
            away_team=record["away_team"],
            commence_time=record["commence_time"],
            moneyline=extract_moneyline(record),
        )
    except (ValidationError, TypeError, ValueError) as e:
        raise OddsPayloadError(f"Malformed odds record {record['id']}: {e}") from e


def _team_score(scores: list[dict[str, Any]], team: str) -> int:
    # A team missing from the payload scores 0
    entry = next((s for s in scores if s.get("name") == team), None)
    if entry is None or entry.get("score") in (None, ""):
        return 0
    try:
        return int(entry["score"])
    except (TypeError, ValueError) as e:
        raise OddsPayloadError(f"Invalid score {entry['score']!r} for {team}") from e


def normalize_scores(record: dict[str, Any]) -> ScoreFragment:
    _require(record, "id", "home_team", "away_team")

    home_team = record["home_team"]
    away_team = record["away_team"]
    completed = bool(record.get("completed"))
    scores: Optional[list] = record.get("scores")

    home_score = away_score = None
    if scores is not None or completed:
        home_score = _team_score(scores or [], home_team)
        away_score = _team_score(scores or [], away_team)

    try:
        return ScoreFragment(
            id=record["id"],
            home_team=home_team,
            away_team=away_team,
            commence_time=record.get("commence_time"),
            home_score=home_score,
            away_score=away_score,
            completed=completed,
        )
    except ValidationError as e:
        raise OddsPayloadError(f"Malformed score record {record['id']}: {e}") from e


def normalize_odds_batch(records: list[dict[str, Any]]) -> list[OddsFragment]:
    return [normalize_odds(record) for record in records]


def normalize_scores_batch(records: list[dict[str, Any]]) -> list[ScoreFragment]:
    return [normalize_scores(record) for record in records]
