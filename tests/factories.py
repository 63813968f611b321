"""
Test data builders shared by unit and integration tests.
"""

from datetime import datetime, timezone

from pickem.models.pick import Pick
from pickem.models.submission import Submission
from pickem.models.week import Game, GameScore, Week
from pickem.repositories.submission_repository import submission_doc_id
from pickem.repositories.week_repository import week_doc_id

TEST_DB_NAME = "pickem_test"
TEST_APP_ID = "test-app"

# Wednesday of the week that opens on Tuesday 2026-10-20 (America/New_York)
NOW = datetime(2026, 10, 21, 15, 0, tzinfo=timezone.utc)
WEEK_ID = "week-2026-10-20"
BETTING_START = datetime(2026, 10, 20, 4, 1, tzinfo=timezone.utc)
BETTING_END = datetime(2026, 10, 22, 21, 0, tzinfo=timezone.utc)
PICKS_REVEAL = datetime(2026, 10, 23, 16, 0, tzinfo=timezone.utc)
# Monday night, all games of the week are over
AFTER_GAMES = datetime(2026, 10, 27, 2, 0, tzinfo=timezone.utc)

GAME1_KICKOFF = datetime(2026, 10, 25, 17, 0, tzinfo=timezone.utc)
GAME2_KICKOFF = datetime(2026, 10, 26, 0, 20, tzinfo=timezone.utc)

CHIEFS = "Kansas City Chiefs"
BILLS = "Buffalo Bills"
COWBOYS = "Dallas Cowboys"
EAGLES = "Philadelphia Eagles"


def odds_record(game_id, home, away, commence, home_price=-110, away_price=-110):
    """Raw odds feed record."""
    return {
        "id": game_id,
        "sport_key": "americanfootball_nfl",
        "commence_time": commence,
        "home_team": home,
        "away_team": away,
        "bookmakers": [
            {
                "key": "draftkings",
                "markets": [
                    {
                        "key": "h2h",
                        "outcomes": [
                            {"name": home, "price": home_price},
                            {"name": away, "price": away_price},
                        ],
                    }
                ],
            }
        ],
    }


def score_record(game_id, home, away, home_score=None, away_score=None, completed=False):
    """Raw scores feed record."""
    scores = None
    if home_score is not None:
        scores = [
            {"name": home, "score": str(home_score)},
            {"name": away, "score": str(away_score)},
        ]
    return {
        "id": game_id,
        "sport_key": "americanfootball_nfl",
        "commence_time": "2026-10-25T17:00:00Z",
        "completed": completed,
        "home_team": home,
        "away_team": away,
        "scores": scores,
    }


def make_game(game_id, home, away, commence, home_score=None, away_score=None, completed=False):
    return Game(
        id=game_id,
        home_team=home,
        away_team=away,
        commence_time=commence,
        score=GameScore(home=home_score, away=away_score),
        completed=completed,
    )


def make_week(games, tie_breaker_game_id=None, actual_total=None, version=0):
    return Week(
        _id=week_doc_id(TEST_APP_ID, WEEK_ID),
        app_id=TEST_APP_ID,
        week_id=WEEK_ID,
        betting_window_start=BETTING_START,
        betting_window_end=BETTING_END,
        picks_reveal_time=PICKS_REVEAL,
        tie_breaker_game_id=tie_breaker_game_id,
        actual_tie_breaker_total_points=actual_total,
        games=games,
        version=version,
    )


def make_submission(user_id, picks, tier=25, tie_breaker_points=45, entry_number=1, **fields):
    """picks: {game_id: team}"""
    return Submission(
        _id=submission_doc_id(TEST_APP_ID, user_id, WEEK_ID, entry_number),
        app_id=TEST_APP_ID,
        user_id=user_id,
        week_id=WEEK_ID,
        entry_number=entry_number,
        picks={
            game_id: Pick(game_id=game_id, pick=team, tier=tier)
            for game_id, team in picks.items()
        },
        tie_breaker_points=tie_breaker_points,
        tier=tier,
        submitted_at=NOW,
        **fields,
    )


async def insert_week(db, week: Week):
    await db["weeks"].insert_one(week.model_dump(by_alias=True))


async def insert_submission(db, submission: Submission):
    await db["submissions"].insert_one(submission.model_dump(by_alias=True))


async def insert_profile(db, user_id, predictor_points=5000, winner_bucks=1.0,
                         weekly_entries=None, username=None):
    await db["profiles"].insert_one({
        "_id": f"{TEST_APP_ID}:{user_id}",
        "app_id": TEST_APP_ID,
        "user_id": user_id,
        "username": username or f"User_{user_id[:4]}",
        "predictor_points": predictor_points,
        "winner_bucks": winner_bucks,
        "weekly_entries": weekly_entries or {},
        "created_at": NOW,
    })
