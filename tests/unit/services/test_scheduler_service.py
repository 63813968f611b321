"""
Unit tests for SchedulerService
"""

import asyncio

import httpx
import pytest

from pickem.services.odds_client import OddsApiClient
from pickem.services.reconciliation_service import ReconciliationReport, ReconciliationService
from pickem.services.scheduler_service import RECONCILE_JOB_ID, SchedulerService


@pytest.fixture
def odds_client(settings, sample_odds_records):
    def handler(request):
        if request.url.path.endswith("/odds"):
            return httpx.Response(200, json=sample_odds_records)
        return httpx.Response(200, json=[])

    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url=settings.odds_api_base_url,
    )
    return OddsApiClient(settings, http_client=http_client)


class TestSchedulerService:
    """Scheduled reconciliation ticks."""

    @pytest.mark.asyncio
    async def test_run_once_success(self, test_db, settings, odds_client):
        scheduler = SchedulerService(settings, lambda: test_db, odds_client)

        report = await scheduler.run_once()

        assert isinstance(report, ReconciliationReport)
        assert report.games_added == 2
        assert scheduler.stats["total_runs"] == 1
        assert scheduler.stats["successful_runs"] == 1
        assert scheduler.stats["last_run"] is not None

    @pytest.mark.asyncio
    async def test_run_once_provider_down(self, test_db, settings):
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda r: httpx.Response(500)),
            base_url=settings.odds_api_base_url,
        )
        scheduler = SchedulerService(settings, lambda: test_db, OddsApiClient(settings, http_client))

        report = await scheduler.run_once()

        assert report.aborted is True
        assert scheduler.stats["failed_runs"] == 1
        assert scheduler.stats["last_error"]

    @pytest.mark.asyncio
    async def test_run_once_without_api_key(self, test_db, settings):
        settings.odds_api_key = None
        scheduler = SchedulerService(settings, lambda: test_db)

        assert await scheduler.run_once() is None
        assert scheduler.stats["failed_runs"] == 1

    @pytest.mark.asyncio
    async def test_run_once_timeout(self, test_db, settings, odds_client, monkeypatch):
        async def slow_pass(self, app_id=None, now=None):
            await asyncio.sleep(1)

        monkeypatch.setattr(ReconciliationService, "run_pass", slow_pass)
        settings.reconcile_timeout_seconds = 0.01
        scheduler = SchedulerService(settings, lambda: test_db, odds_client)

        assert await scheduler.run_once() is None
        assert "exceeded" in scheduler.stats["last_error"]

    @pytest.mark.asyncio
    async def test_run_once_unexpected_error(self, test_db, settings, odds_client, monkeypatch):
        async def broken_pass(self, app_id=None, now=None):
            raise RuntimeError("boom")

        monkeypatch.setattr(ReconciliationService, "run_pass", broken_pass)
        scheduler = SchedulerService(settings, lambda: test_db, odds_client)

        assert await scheduler.run_once() is None
        assert scheduler.stats["last_error"] == "boom"

    @pytest.mark.asyncio
    async def test_start_and_shutdown(self, test_db, settings, odds_client):
        scheduler = SchedulerService(settings, lambda: test_db, odds_client)

        scheduler.start()
        job = scheduler.scheduler.get_job(RECONCILE_JOB_ID)

        assert scheduler.is_running is True
        assert job.max_instances == 1
        assert job.coalesce is True

        await scheduler.shutdown()
        assert scheduler.is_running is False
