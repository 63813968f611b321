"""
Admin controller - manual reconciliation trigger
"""

from fastapi import APIRouter, HTTPException, status

from pickem.core.dependencies import AppId, AppSettings, Database, OddsClient
from pickem.services.odds_client import OddsConfigurationError
from pickem.services.reconciliation_service import ReconciliationReport, ReconciliationService


router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/reconcile", response_model=ReconciliationReport)
async def reconcile_now(
    db: Database,
    settings: AppSettings,
    odds_client: OddsClient,
    app_id: AppId
):
    """
    Run one reconciliation pass right away (same as a scheduler tick).
    """
    service = ReconciliationService(db, odds_client, settings)

    try:
        return await service.run_pass(app_id)
    except OddsConfigurationError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )
