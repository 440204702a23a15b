"""Tests for workshop lookups routed through the optimizer."""

import asyncio

import pytest

from carbot.errors import BatchError, QueryExecutionError
from carbot.services.workshop.queries import WorkshopQueries, leads_cache_key
from tests.conftest import FakeDatabaseClient

LEADS = [
    {"id": "l1", "status": "new", "workshop_id": "w1", "name": "Anna"},
    {"id": "l2", "status": "contacted", "workshop_id": "w1", "name": "Ben"},
]

WORKSHOPS = [{"id": "w1", "name": "Autohaus Müller", "slug": "autohaus-mueller", "city": "Köln"}]


@pytest.fixture
def db():
    return FakeDatabaseClient(tables={"leads": LEADS, "workshops": WORKSHOPS}, delay=0.01)


@pytest.fixture
def workshop(optimizer, db):
    return WorkshopQueries(optimizer=optimizer, db=db)


class TestLeadsCacheKey:
    def test_status_filter(self):
        assert leads_cache_key({"status": "new"}) == 'leads:{"status":"new"}'

    def test_no_filters(self):
        assert leads_cache_key() == "leads:{}"

    def test_order_independent(self):
        assert leads_cache_key({"a": 1, "b": 2}) == leads_cache_key({"b": 2, "a": 1})


class TestGetLeads:
    @pytest.mark.asyncio
    async def test_concurrent_handlers_share_one_db_call(self, workshop, db, monitor):
        first, second = await asyncio.gather(
            workshop.get_leads({"status": "new"}),
            workshop.get_leads({"status": "new"}),
        )

        assert len(db.calls) == 1
        assert first == second
        assert first["data"] == [LEADS[0]]
        assert monitor.query_stat('leads:{"status":"new"}').count == 1

    @pytest.mark.asyncio
    async def test_cached_for_two_minutes(self, workshop, db, clock):
        await workshop.get_leads({"status": "new"})
        clock.advance(119)
        await workshop.get_leads({"status": "new"})
        assert len(db.calls) == 1

        clock.advance(1)
        await workshop.get_leads({"status": "new"})
        assert len(db.calls) == 2

    @pytest.mark.asyncio
    async def test_filters_passed_to_client(self, workshop, db):
        await workshop.get_leads(
            {"priority": "high", "workshop_id": "w1", "date_from": "2026-01-01", "offset": 100}
        )

        call = db.calls[0]
        assert call["table"] == "leads"
        assert call["eq"] == {"priority": "high", "workshop_id": "w1"}
        assert call["gte"] == {"timestamp": "2026-01-01"}
        assert call["lte"] is None
        assert call["order_by"] == "timestamp"
        assert call["descending"] is True
        assert call["limit"] == 50
        assert call["offset"] == 100

    @pytest.mark.asyncio
    async def test_error_result_not_cached(self, optimizer):
        db = FakeDatabaseClient(error="JWT expired")
        workshop = WorkshopQueries(optimizer=optimizer, db=db)

        result = await workshop.get_leads()
        await workshop.get_leads()

        assert result["error"] == "JWT expired"
        assert len(db.calls) == 2


class TestGetAnalytics:
    @pytest.mark.asyncio
    async def test_batches_three_queries(self, workshop, db):
        result = await workshop.get_analytics("autohaus-mueller", "30d")

        assert set(result) == {"chat_stats", "lead_stats", "performance_stats"}
        assert sorted(c["table"] for c in db.calls) == ["ai_usage_logs", "chat_messages", "leads"]
        leads_call = next(c for c in db.calls if c["table"] == "leads")
        assert leads_call["eq"] == {"kunde_id": "autohaus-mueller"}
        window = leads_call["lte"]["timestamp"] - leads_call["gte"]["timestamp"]
        assert window.days == 30

    @pytest.mark.asyncio
    async def test_unknown_range_falls_back_to_7_days(self, workshop, db):
        await workshop.get_analytics("slug", "1y")
        call = db.calls[0]
        window = call["lte"][next(iter(call["lte"]))] - call["gte"][next(iter(call["gte"]))]
        assert window.days == 7

    @pytest.mark.asyncio
    async def test_customers_do_not_share_entries(self, workshop, db, optimizer):
        await workshop.get_analytics("a")
        await workshop.get_analytics("b")

        assert len(db.calls) == 6
        assert "analytics:a:7d:chat_stats" in optimizer.cache
        assert "analytics:b:7d:chat_stats" in optimizer.cache

    @pytest.mark.asyncio
    async def test_cached_outer_result(self, workshop, db):
        await workshop.get_analytics("a")
        await workshop.get_analytics("a")
        assert len(db.calls) == 3

    @pytest.mark.asyncio
    async def test_failed_inner_query_fails_batch(self, optimizer):
        class FlakyClient(FakeDatabaseClient):
            async def select(self, table, columns=None, **kwargs):
                if table == "ai_usage_logs":
                    raise ConnectionError("pool exhausted")
                return await super().select(table, columns, **kwargs)

        workshop = WorkshopQueries(optimizer=optimizer, db=FlakyClient())

        with pytest.raises(BatchError) as exc_info:
            await workshop.get_analytics("a")
        assert exc_info.value.key == "analytics:a:7d:performance_stats"
        assert "analytics:a:7d" not in optimizer.cache


class TestGetWorkshopContext:
    @pytest.mark.asyncio
    async def test_returns_row(self, workshop, db):
        context = await workshop.get_workshop_context("w1")
        assert context["name"] == "Autohaus Müller"
        assert db.calls[0]["single"] is True

    @pytest.mark.asyncio
    async def test_missing_workshop_raises(self, workshop, monitor):
        with pytest.raises(QueryExecutionError) as exc_info:
            await workshop.get_workshop_context("unknown")

        assert exc_info.value.key == "workshop_context:unknown"
        assert monitor.query_stat("workshop_context:unknown").error_count == 1
