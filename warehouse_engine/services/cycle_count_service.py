"""
Cycle Count Service.

Each day a random sample of active products is scheduled for a physical
count. The recorded stock is snapshotted as the expected quantity; when
the count is performed any variance is booked as an ADJUST movement.

Counts are per product, not per lot. The variance is booked on AVAILABLE
lots in insertion order: a surplus on the first one, a shortage on the
first lot that can absorb it, or spread across lots when none can alone.
"""
import logging
import random
import uuid
from datetime import date, datetime, timezone
from typing import Optional, List

from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_engine.config import settings
from warehouse_engine.core.exceptions import (
    NotFoundError, ValidationError, ConflictError, InsufficientStockError,
)
from warehouse_engine.models.inventory import (
    CycleCount, CycleCountStatus, LotStatus, MovementType, ReferenceType,
)
from warehouse_engine.services.audit_service import AuditService
from warehouse_engine.services.inventory_service import InventoryService
from warehouse_engine.stores.catalog_store import CatalogStore
from warehouse_engine.stores.inventory_store import InventoryStore


logger = logging.getLogger(__name__)


class CycleCountService:

    def __init__(
        self,
        db: AsyncSession,
        audit: Optional[AuditService] = None,
        inventory: Optional[InventoryService] = None,
    ):
        self.db = db
        self.store = InventoryStore(db)
        self.catalog = CatalogStore(db)
        self.audit = audit or AuditService(db)
        self.inventory = inventory or InventoryService(db, audit=self.audit)

    async def generate_daily_cycle_counts(
        self,
        rng: Optional[random.Random] = None,
        scheduled_for: Optional[date] = None,
    ) -> List[CycleCount]:
        """
        Schedule PENDING counts for ``min(CYCLE_COUNT_DAILY_SAMPLE, n)`` active products.

        Args:
            rng: Random source for the sample. A fresh time-seeded generator
                is used when omitted, so pass one for reproducible picks.
            scheduled_for: Count date, today by default.

        Raises:
            ValidationError: the catalog has no active products
        """
        products = await self.catalog.list_active_products()
        if not products:
            raise ValidationError("No active products available for cycle counting")

        rng = rng or random.Random()
        sample_size = min(settings.CYCLE_COUNT_DAILY_SAMPLE, len(products))
        selected = rng.sample(products, sample_size)
        scheduled_for = scheduled_for or date.today()

        counts = []
        for product in selected:
            expected = await self.store.get_aggregate_stock(product.id)
            lots = await self.store.find_lots_by_product(product.id)
            location = next((lot.location for lot in lots if lot.location), None)
            counts.append(CycleCount(
                scheduled_date=scheduled_for,
                location=location,
                product_id=product.id,
                expected_quantity=expected,
                status=CycleCountStatus.PENDING.value,
            ))

        await self.store.add_cycle_counts(counts)
        await self.db.commit()
        logger.info(f"Scheduled {len(counts)} cycle counts for {scheduled_for.isoformat()}")
        return counts

    async def list_pending_cycle_counts(self, scheduled_for: Optional[date] = None) -> List[CycleCount]:
        return await self.store.list_pending_cycle_counts(scheduled_for)

    async def get_cycle_count(self, count_id: uuid.UUID) -> CycleCount:
        count = await self.store.get_cycle_count(count_id)
        if not count:
            raise NotFoundError(f"Cycle count {count_id} not found")
        return count

    async def perform_cycle_count(
        self,
        count_id: uuid.UUID,
        counted_qty: int,
        user_id: Optional[uuid.UUID] = None,
    ) -> CycleCount:
        """
        Record a physical count and book the variance.

        Raises:
            NotFoundError: unknown count
            ConflictError: count already performed
            ValidationError: negative count
            InsufficientStockError: the shortage exceeds available stock
        """
        count = await self.get_cycle_count(count_id)
        if count.status != CycleCountStatus.PENDING.value:
            raise ConflictError(f"Cycle count {count_id} was already performed")
        if counted_qty < 0:
            raise ValidationError("Counted quantity cannot be negative")

        variance = counted_qty - count.expected_quantity
        plan = await self._plan_adjustment(count.product_id, variance) if variance else []

        count.counted_quantity = counted_qty
        count.variance = variance
        count.counted_by = user_id
        count.counted_at = datetime.now(timezone.utc)
        count.status = CycleCountStatus.COMPLETED.value

        for lot, delta in plan:
            await self.inventory.apply_movement(
                lot,
                delta,
                MovementType.ADJUST,
                user_id=user_id,
                reference_type=ReferenceType.CYCLE_COUNT.value,
                reference_id=count.id,
                reason="Cycle count adjustment",
            )
        if plan:
            count.adjusted_lot_id = plan[0][0].id

        await self.audit.record(
            user_id, "CYCLE_COUNT", "CYCLE_COUNT", count.id,
            new_values={
                "expected": count.expected_quantity,
                "counted": counted_qty,
                "variance": variance,
                "adjusted_lot_id": count.adjusted_lot_id,
            },
        )
        await self.db.commit()
        logger.info(f"Cycle count {count.id} completed with variance {variance}")
        return count

    async def _plan_adjustment(self, product_id: uuid.UUID, variance: int) -> List[tuple]:
        """
        Pick the AVAILABLE lots that absorb a variance, as ``(lot, delta)`` pairs.

        A surplus goes to the first lot. A shortage goes to the first lot that
        can take it whole, otherwise it is drawn from lots in insertion order.
        """
        lots = [
            lot for lot in await self.store.find_lots_by_product(product_id)
            if lot.status == LotStatus.AVAILABLE.value
        ]
        if not lots:
            if variance < 0:
                raise InsufficientStockError(
                    f"No available lot of product {product_id} can absorb variance {variance}"
                )
            return []

        if variance > 0:
            return [(lots[0], variance)]

        for lot in lots:
            if lot.quantity + variance >= 0:
                return [(lot, variance)]

        shortage = -variance
        if sum(lot.quantity for lot in lots) < shortage:
            raise InsufficientStockError(
                f"Variance {variance} exceeds available stock of product {product_id}"
            )
        plan = []
        for lot in lots:
            if shortage == 0:
                break
            take = min(lot.quantity, shortage)
            if take:
                plan.append((lot, -take))
                shortage -= take
        return plan
