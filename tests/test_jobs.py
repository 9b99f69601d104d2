"""
Background jobs.

Covers:
- Daily cycle count job schedules counts, and skips on an empty catalog
- Stuck order report
- Scheduler registration
"""
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import pytest

from warehouse_engine.jobs import inventory_jobs, scheduler as scheduler_module
from warehouse_engine.models.order import OrderStatus
from warehouse_engine.schemas.order import OrderLineCreate
from warehouse_engine.services.order_service import OrderService


@pytest.fixture
def job_sessions(monkeypatch, session_factory):
    @asynccontextmanager
    async def session_scope():
        async with session_factory() as session:
            yield session
            await session.commit()

    monkeypatch.setattr(inventory_jobs, "get_db_session", session_scope)


class TestInventoryJobs:
    async def test_cycle_count_job(self, job_sessions, product_factory):
        await product_factory()
        await product_factory()

        result = await inventory_jobs.generate_daily_cycle_counts()

        assert result["status"] == "success"
        assert result["scheduled"] == 2

    async def test_cycle_count_job_skips_empty_catalog(self, job_sessions):
        result = await inventory_jobs.generate_daily_cycle_counts()

        assert result["status"] == "skipped"

    async def test_stuck_order_report(self, db, job_sessions, customer, product):
        order = (await OrderService(db).create_order(
            customer.id, [OrderLineCreate(product_id=product.id, quantity=1)]
        )).order
        order.status = OrderStatus.CONFIRMED.value
        order.created_at = datetime.now(timezone.utc) - timedelta(days=3)
        await db.commit()

        result = await inventory_jobs.report_stuck_orders()

        assert result["stuck_orders"] == [order.order_number]


class TestScheduler:
    async def test_jobs_registered(self):
        scheduler_module.start_scheduler()
        try:
            jobs = {job["id"]: job for job in scheduler_module.get_job_status()}
            assert set(jobs) == {"generate_daily_cycle_counts", "report_stuck_orders"}
            assert jobs["generate_daily_cycle_counts"]["next_run_time"] is not None
        finally:
            scheduler_module.shutdown_scheduler()
