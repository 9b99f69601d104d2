"""Persistence access for lots, movements and cycle counts."""
import uuid
from datetime import date, datetime, timezone
from typing import Optional, List

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_engine.models.inventory import (
    Lot, LotStatus, InventoryMovement, CycleCount, CycleCountStatus,
)


class InventoryStore:
    """Ledger queries. Never commits; the calling service owns the transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Lots
    # ------------------------------------------------------------------

    async def get_lot(self, lot_id: uuid.UUID) -> Optional[Lot]:
        return await self.db.get(Lot, lot_id)

    async def add_lot(self, lot: Lot) -> Lot:
        self.db.add(lot)
        await self.db.flush()
        return lot

    async def find_lots_by_product(self, product_id: uuid.UUID) -> List[Lot]:
        """All lots of a product in insertion order."""
        result = await self.db.execute(
            select(Lot)
            .where(Lot.product_id == product_id)
            .order_by(Lot.created_at, Lot.id)
        )
        return list(result.scalars().all())

    async def find_lots_fefo(self, product_id: uuid.UUID) -> List[Lot]:
        """
        Allocatable lots of a product, First-Expired-First-Out.

        Only AVAILABLE lots with stock. Earliest expiration first, lots
        without an expiration date last, then oldest lot, then id.
        """
        result = await self.db.execute(
            select(Lot)
            .where(
                Lot.product_id == product_id,
                Lot.status == LotStatus.AVAILABLE.value,
                Lot.quantity > 0,
            )
            .order_by(
                Lot.expiration_date.asc().nulls_last(),
                Lot.created_at.asc(),
                Lot.id.asc(),
            )
        )
        return list(result.scalars().all())

    async def get_aggregate_stock(self, product_id: uuid.UUID) -> int:
        """Sum of quantities over AVAILABLE lots."""
        result = await self.db.execute(
            select(func.coalesce(func.sum(Lot.quantity), 0))
            .where(
                Lot.product_id == product_id,
                Lot.status == LotStatus.AVAILABLE.value,
            )
        )
        return int(result.scalar_one() or 0)

    async def find_lots_for_products(self, product_ids: List[uuid.UUID]) -> List[Lot]:
        if not product_ids:
            return []
        result = await self.db.execute(
            select(Lot)
            .where(Lot.product_id.in_(product_ids))
            .order_by(Lot.created_at, Lot.id)
        )
        return list(result.scalars().all())

    async def apply_quantity_delta(self, lot_id: uuid.UUID, delta: int) -> bool:
        """
        Atomically add ``delta`` to a lot's quantity.

        The row is only touched if the result stays non-negative. Returns
        False when no row matched (unknown lot or a concurrent decrement won).
        """
        result = await self.db.execute(
            update(Lot)
            .where(
                Lot.id == lot_id,
                Lot.quantity + delta >= 0,
            )
            .values(
                quantity=Lot.quantity + delta,
                last_movement_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # ------------------------------------------------------------------
    # Movements
    # ------------------------------------------------------------------

    async def add_movement(self, movement: InventoryMovement) -> InventoryMovement:
        self.db.add(movement)
        await self.db.flush()
        return movement

    async def list_movements(
        self,
        lot_id: Optional[uuid.UUID] = None,
        reference_id: Optional[uuid.UUID] = None,
    ) -> List[InventoryMovement]:
        stmt = select(InventoryMovement)
        if lot_id:
            stmt = stmt.where(InventoryMovement.lot_id == lot_id)
        if reference_id:
            stmt = stmt.where(InventoryMovement.reference_id == reference_id)
        result = await self.db.execute(
            stmt.order_by(InventoryMovement.created_at, InventoryMovement.id)
        )
        return list(result.scalars().all())

    async def sum_movements(self, lot_id: uuid.UUID) -> int:
        result = await self.db.execute(
            select(func.coalesce(func.sum(InventoryMovement.quantity), 0))
            .where(InventoryMovement.lot_id == lot_id)
        )
        return int(result.scalar_one() or 0)

    # ------------------------------------------------------------------
    # Cycle counts
    # ------------------------------------------------------------------

    async def get_cycle_count(self, count_id: uuid.UUID) -> Optional[CycleCount]:
        return await self.db.get(CycleCount, count_id)

    async def add_cycle_counts(self, counts: List[CycleCount]) -> List[CycleCount]:
        self.db.add_all(counts)
        await self.db.flush()
        return counts

    async def list_pending_cycle_counts(
        self,
        scheduled_for: Optional[date] = None,
    ) -> List[CycleCount]:
        stmt = select(CycleCount).where(CycleCount.status == CycleCountStatus.PENDING.value)
        if scheduled_for:
            stmt = stmt.where(CycleCount.scheduled_date == scheduled_for)
        result = await self.db.execute(
            stmt.order_by(CycleCount.scheduled_date, CycleCount.created_at)
        )
        return list(result.scalars().all())

