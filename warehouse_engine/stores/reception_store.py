"""Persistence access for reception orders, lines and discrepancies."""
import uuid
from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_engine.models.reception import (
    ReceptionOrder, ReceptionLine, ReceptionDiscrepancy,
)


class ReceptionStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_order(self, order_id: uuid.UUID) -> Optional[ReceptionOrder]:
        return await self.db.get(ReceptionOrder, order_id)

    async def add_order(self, order: ReceptionOrder) -> ReceptionOrder:
        """Insert the order together with its lines in one flush."""
        self.db.add(order)
        await self.db.flush()
        return order

    async def list_orders(self, status: Optional[str] = None) -> List[ReceptionOrder]:
        stmt = select(ReceptionOrder)
        if status:
            stmt = stmt.where(ReceptionOrder.status == status)
        result = await self.db.execute(stmt.order_by(ReceptionOrder.created_at.desc()))
        return list(result.scalars().all())

    async def get_line(self, line_id: uuid.UUID) -> Optional[ReceptionLine]:
        return await self.db.get(ReceptionLine, line_id)

    async def get_discrepancy(self, discrepancy_id: uuid.UUID) -> Optional[ReceptionDiscrepancy]:
        return await self.db.get(ReceptionDiscrepancy, discrepancy_id)

    async def get_discrepancy_by_line(self, line_id: uuid.UUID) -> Optional[ReceptionDiscrepancy]:
        result = await self.db.execute(
            select(ReceptionDiscrepancy).where(ReceptionDiscrepancy.reception_line_id == line_id)
        )
        return result.scalar_one_or_none()

    async def add_discrepancy(self, discrepancy: ReceptionDiscrepancy) -> ReceptionDiscrepancy:
        self.db.add(discrepancy)
        await self.db.flush()
        return discrepancy

    async def list_discrepancies(self, order_id: uuid.UUID) -> List[ReceptionDiscrepancy]:
        result = await self.db.execute(
            select(ReceptionDiscrepancy)
            .where(ReceptionDiscrepancy.reception_order_id == order_id)
            .order_by(ReceptionDiscrepancy.created_at)
        )
        return list(result.scalars().all())
