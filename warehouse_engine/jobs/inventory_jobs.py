"""
Inventory Jobs

Background jobs run by the scheduler:
- Daily cycle count generation
- Stuck order report
"""

import logging
from typing import Dict, Any
from datetime import datetime, timezone

from warehouse_engine.core.exceptions import WarehouseError
from warehouse_engine.database import get_db_session
from warehouse_engine.services.cycle_count_service import CycleCountService
from warehouse_engine.services.order_service import OrderService

logger = logging.getLogger(__name__)


async def generate_daily_cycle_counts() -> Dict[str, Any]:
    """Schedule today's cycle counts."""
    logger.info("Starting daily cycle count generation...")
    start_time = datetime.now(timezone.utc)

    try:
        async with get_db_session() as session:
            counts = await CycleCountService(session).generate_daily_cycle_counts()
    except WarehouseError as e:
        logger.warning(f"Cycle count generation skipped: {e.message}")
        return {"status": "skipped", "reason": e.message}

    duration = (datetime.now(timezone.utc) - start_time).total_seconds()
    logger.info(f"Cycle count generation completed: {len(counts)} counts in {duration:.2f}s")
    return {"status": "success", "scheduled": len(counts), "duration_seconds": duration}


async def report_stuck_orders() -> Dict[str, Any]:
    """Log CONFIRMED/PREPARING orders that have not moved within the threshold."""
    async with get_db_session() as session:
        orders = await OrderService(session).find_stuck_orders()

    for order in orders:
        logger.warning(
            f"Order {order.order_number} stuck in {order.status} since {order.created_at.isoformat()}"
        )
    logger.info(f"Stuck order report: {len(orders)} orders")
    return {"status": "success", "stuck_orders": [o.order_number for o in orders]}
