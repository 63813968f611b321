"""
Unit tests for the provider record normalizer
"""

from datetime import datetime, timezone

import pytest

from factories import BILLS, CHIEFS, score_record
from pickem.services.odds_normalizer import (
    OddsPayloadError,
    extract_moneyline,
    normalize_odds,
    normalize_odds_batch,
    normalize_scores,
)


class TestNormalizeOdds:
    """Odds records -> OddsFragment."""

    def test_maps_identity_and_moneyline(self, sample_odds_records):
        fragment = normalize_odds(sample_odds_records[0])

        assert fragment.id == "game1"
        assert fragment.home_team == CHIEFS
        assert fragment.away_team == BILLS
        assert fragment.commence_time == datetime(2026, 10, 25, 17, 0, tzinfo=timezone.utc)
        assert fragment.moneyline == {CHIEFS: -150, BILLS: 130}

    def test_first_bookmaker_with_h2h_wins(self, sample_odds_records):
        record = sample_odds_records[0]
        record["bookmakers"] = [
            {"key": "spreads_only", "markets": [{"key": "spreads", "outcomes": []}]},
            {"key": "book_a", "markets": [{"key": "h2h", "outcomes": [
                {"name": CHIEFS, "price": -200}, {"name": BILLS, "price": 170}]}]},
            {"key": "book_b", "markets": [{"key": "h2h", "outcomes": [
                {"name": CHIEFS, "price": -110}, {"name": BILLS, "price": -110}]}]},
        ]

        assert extract_moneyline(record) == {CHIEFS: -200, BILLS: 170}

    def test_no_bookmakers_gives_empty_moneyline(self, sample_odds_records):
        record = sample_odds_records[0]
        record["bookmakers"] = []

        assert normalize_odds(record).moneyline == {}

    def test_unpriced_outcomes_are_skipped(self, sample_odds_records):
        record = sample_odds_records[0]
        record["bookmakers"][0]["markets"][0]["outcomes"] = [
            {"name": CHIEFS, "price": -150},
            {"name": BILLS},
        ]

        assert extract_moneyline(record) == {CHIEFS: -150}

    @pytest.mark.parametrize("field", ["id", "home_team", "away_team", "commence_time"])
    def test_missing_identity_field_raises(self, sample_odds_records, field):
        record = sample_odds_records[0]
        del record[field]

        with pytest.raises(OddsPayloadError):
            normalize_odds(record)

    def test_bad_commence_time_raises(self, sample_odds_records):
        record = sample_odds_records[0]
        record["commence_time"] = "next sunday"

        with pytest.raises(OddsPayloadError):
            normalize_odds(record)

    def test_batch_keeps_order(self, sample_odds_records):
        fragments = normalize_odds_batch(sample_odds_records)

        assert [f.id for f in fragments] == ["game1", "game2"]


class TestNormalizeScores:
    """Score records -> ScoreFragment."""

    def test_completed_game(self):
        fragment = normalize_scores(score_record("game1", CHIEFS, BILLS, 27, 24, completed=True))

        assert fragment.home_score == 27
        assert fragment.away_score == 24
        assert fragment.completed is True

    def test_not_started_game_has_no_scores(self):
        fragment = normalize_scores(score_record("game1", CHIEFS, BILLS))

        assert fragment.home_score is None
        assert fragment.away_score is None
        assert fragment.completed is False

    def test_in_progress_game_keeps_scores(self):
        fragment = normalize_scores(score_record("game1", CHIEFS, BILLS, 7, 3))

        assert fragment.home_score == 7
        assert fragment.away_score == 3
        assert fragment.completed is False

    def test_team_missing_from_scores_counts_as_zero(self):
        record = score_record("game1", CHIEFS, BILLS, 21, 0, completed=True)
        record["scores"] = [{"name": CHIEFS, "score": "21"}]

        fragment = normalize_scores(record)

        assert fragment.home_score == 21
        assert fragment.away_score == 0

    def test_completed_without_scores_is_zero_zero(self):
        fragment = normalize_scores(score_record("game1", CHIEFS, BILLS, completed=True))

        assert fragment.home_score == 0
        assert fragment.away_score == 0

    def test_non_numeric_score_raises(self):
        record = score_record("game1", CHIEFS, BILLS, 21, 14, completed=True)
        record["scores"][0]["score"] = "twenty-one"

        with pytest.raises(OddsPayloadError):
            normalize_scores(record)

    def test_missing_id_raises(self):
        record = score_record("game1", CHIEFS, BILLS)
        record["id"] = None

        with pytest.raises(OddsPayloadError):
            normalize_scores(record)
