"""
Submissions controller - create and list weekly entries
"""

from fastapi import APIRouter, HTTPException, Query, status

from pickem.core.dependencies import AppId, AppSettings, Database
from pickem.models.submission import SubmissionCreate, SubmissionResponse
from pickem.services.submission_service import (
    BettingWindowClosedError,
    DuplicateEntryError,
    EntryLimitReachedError,
    IncompletePicksError,
    InsufficientBalanceError,
    InvalidPickError,
    InvalidTieBreakerError,
    InvalidTierError,
    SubmissionService,
    TieBreakerGameMissingError,
    WeekNotAvailableError,
)


router = APIRouter(prefix="/submissions", tags=["submissions"])


@router.post("", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def create_submission(
    data: SubmissionCreate,
    db: Database,
    settings: AppSettings,
    app_id: AppId
):
    """
    Submit an entry for the current week.

    Costs `tier` Predictor Points; at most `max_entries_per_week` per user.
    """
    submission_service = SubmissionService(db, settings)

    try:
        submission = await submission_service.submit(app_id, data)
    except (WeekNotAvailableError, TieBreakerGameMissingError, DuplicateEntryError) as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    except BettingWindowClosedError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e)
        )
    except EntryLimitReachedError as e:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=str(e)
        )
    except InsufficientBalanceError as e:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail=str(e)
        )
    except (IncompletePicksError, InvalidPickError, InvalidTieBreakerError, InvalidTierError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return SubmissionResponse.from_submission(submission)


@router.get("/{user_id}", response_model=list[SubmissionResponse])
async def get_user_submissions(
    user_id: str,
    db: Database,
    settings: AppSettings,
    app_id: AppId,
    week_id: str = Query(..., description="Week to list entries for")
):
    """
    Get a user's entries for a week.
    """
    submission_service = SubmissionService(db, settings)
    submissions = await submission_service.get_user_submissions(app_id, user_id, week_id)

    return [SubmissionResponse.from_submission(s) for s in submissions]
