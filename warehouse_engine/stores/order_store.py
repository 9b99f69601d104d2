"""Persistence access for outbound orders."""
import uuid
from datetime import datetime, timezone, timedelta
from typing import Optional, List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_engine.models.order import Order, OrderStatus


class OrderStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_order(self, order_id: uuid.UUID) -> Optional[Order]:
        return await self.db.get(Order, order_id)

    async def add_order(self, order: Order) -> Order:
        self.db.add(order)
        await self.db.flush()
        return order

    async def list_orders(
        self,
        status: Optional[str] = None,
        customer_id: Optional[uuid.UUID] = None,
    ) -> List[Order]:
        stmt = select(Order)
        if status:
            stmt = stmt.where(Order.status == status)
        if customer_id:
            stmt = stmt.where(Order.customer_id == customer_id)
        result = await self.db.execute(stmt.order_by(Order.created_at.desc()))
        return list(result.scalars().all())

    async def find_stuck_orders(self, threshold_hours: int) -> List[Order]:
        """
        Orders still CONFIRMED or PREPARING after ``threshold_hours``.

        Oldest first.
        """
        cutoff = datetime.now(timezone.utc) - timedelta(hours=threshold_hours)
        result = await self.db.execute(
            select(Order)
            .where(
                Order.status.in_([
                    OrderStatus.CONFIRMED.value,
                    OrderStatus.PREPARING.value,
                ]),
                Order.created_at < cutoff,
            )
            .order_by(Order.created_at.asc())
        )
        return list(result.scalars().all())

    async def transition_status(self, order_id: uuid.UUID, from_status: str, to_status: str) -> bool:
        """Conditional status change. False if the order is no longer in ``from_status``."""
        result = await self.db.execute(
            update(Order)
            .where(
                Order.id == order_id,
                Order.status == from_status,
            )
            .values(status=to_status, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
