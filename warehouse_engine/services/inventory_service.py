"""
Inventory Ledger Service.

Every change to a lot's quantity goes through ``apply_movement``: the lot
row is updated with a conditional UPDATE (quantity never drops below zero,
even under concurrent decrements) and an append-only movement row records
the signed delta. The sum of a lot's movement deltas therefore always
equals its quantity.

Allocation is First-Expired-First-Out over AVAILABLE lots.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional, List

from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_engine.config import settings
from warehouse_engine.core.exceptions import (
    NotFoundError, ValidationError, InsufficientStockError,
)
from warehouse_engine.models.inventory import (
    Lot, LotStatus, InventoryMovement, MovementType, ReferenceType,
)
from warehouse_engine.services.audit_service import AuditService
from warehouse_engine.stores.catalog_store import CatalogStore
from warehouse_engine.stores.inventory_store import InventoryStore


logger = logging.getLogger(__name__)


EXPIRED_ALERT = "EXPIRED PRODUCT"
RED_ALERT = "RED ALERT: expires in less than 30 days"
CAUTION_ALERT = "Caution: expiration approaching"


@dataclass
class FefoLot:
    """A lot in FEFO order with its expiry alert."""
    lot: Lot
    days_until_expiration: Optional[int] = None
    alert: Optional[str] = None


@dataclass
class StockItem:
    """Stock monitor row for one product.

    ``reserved_stock`` only counts lots held whole in RESERVED status. Order
    reservations take units out of their lot with an OUT movement, so those
    units already left ``total_stock``.
    """
    product_id: uuid.UUID
    sku: str
    product_name: str
    brand: str
    category: str
    total_stock: int = 0
    available_stock: int = 0
    reserved_stock: int = 0
    low_stock_alert: bool = False
    expiration_warning: bool = False
    lots: List[Lot] = field(default_factory=list)


@dataclass
class ReturnResult:
    """Outcome of a customer return."""
    product_id: uuid.UUID
    quantity: int
    condition: str
    action: str  # QUARANTINE or DISPOSED
    lot_id: Optional[uuid.UUID] = None
    movement_id: Optional[uuid.UUID] = None


def days_until(expiration_date: Optional[date], today: Optional[date] = None) -> Optional[int]:
    if expiration_date is None:
        return None
    return (expiration_date - (today or date.today())).days


def expiration_alert(days: Optional[int]) -> Optional[str]:
    """
    Alert text for a lot expiring in ``days`` days.

    Examples:
        >>> expiration_alert(-1)
        'EXPIRED PRODUCT'
        >>> expiration_alert(29)
        'RED ALERT: expires in less than 30 days'
        >>> expiration_alert(60) is None
        True
    """
    if days is None:
        return None
    if days < 0:
        return EXPIRED_ALERT
    if days < settings.EXPIRY_WARNING_DAYS:
        return RED_ALERT
    if days < settings.EXPIRY_CAUTION_DAYS:
        return CAUTION_ALERT
    return None


class InventoryService:
    """Lot bookkeeping, FEFO allocation, damages and returns."""

    def __init__(self, db: AsyncSession, audit: Optional[AuditService] = None):
        self.db = db
        self.store = InventoryStore(db)
        self.catalog = CatalogStore(db)
        self.audit = audit or AuditService(db)

    # ==================== MOVEMENTS ====================

    async def apply_movement(
        self,
        lot: Lot,
        delta: int,
        movement_type: MovementType,
        user_id: Optional[uuid.UUID] = None,
        reference_type: Optional[str] = None,
        reference_id: Optional[uuid.UUID] = None,
        reason: Optional[str] = None,
        evidence_ref: Optional[str] = None,
    ) -> InventoryMovement:
        """
        Add ``delta`` units to ``lot`` and append the matching movement.

        Does not commit.

        Raises:
            ValidationError: delta is zero
            InsufficientStockError: the lot would go negative
        """
        if delta == 0:
            raise ValidationError("Movement quantity cannot be zero")
        if lot.quantity + delta < 0:
            raise InsufficientStockError(
                f"Lot {lot.lot_number} has {lot.quantity} units, cannot apply {delta}"
            )

        # Pending attribute changes must reach the row before it is re-read
        await self.db.flush()

        if not await self.store.apply_quantity_delta(lot.id, delta):
            raise InsufficientStockError(
                f"Lot {lot.lot_number} changed concurrently, cannot apply {delta}"
            )
        await self.db.refresh(lot)

        new_quantity = lot.quantity
        movement = InventoryMovement(
            lot_id=lot.id,
            movement_type=movement_type.value,
            quantity=delta,
            previous_quantity=new_quantity - delta,
            new_quantity=new_quantity,
            reference_type=reference_type,
            reference_id=reference_id,
            reason=reason,
            evidence_ref=evidence_ref,
            performed_by=user_id,
        )
        await self.store.add_movement(movement)
        return movement

    async def get_lot(self, lot_id: uuid.UUID) -> Lot:
        lot = await self.store.get_lot(lot_id)
        if not lot:
            raise NotFoundError(f"Lot {lot_id} not found")
        return lot

    async def list_movements(self, lot_id: uuid.UUID) -> List[InventoryMovement]:
        await self.get_lot(lot_id)
        return await self.store.list_movements(lot_id=lot_id)

    # ==================== FEFO ====================

    async def get_fefo_lots(self, product_id: uuid.UUID) -> List[FefoLot]:
        """Allocatable lots of a product in FEFO order, each with its expiry alert."""
        lots = await self.store.find_lots_fefo(product_id)
        today = date.today()
        result = []
        for lot in lots:
            days = days_until(lot.expiration_date, today)
            result.append(FefoLot(lot=lot, days_until_expiration=days, alert=expiration_alert(days)))
        return result

    async def reserve_first_fit(
        self,
        product_id: uuid.UUID,
        quantity: int,
        order_id: Optional[uuid.UUID] = None,
        user_id: Optional[uuid.UUID] = None,
    ) -> Optional[Lot]:
        """
        Take ``quantity`` units from the first FEFO lot that holds them all.

        Writes an OUT movement against that lot and returns it. Returns None
        when no single lot is large enough; lots are never split. Does not
        commit.
        """
        for lot in await self.store.find_lots_fefo(product_id):
            if lot.quantity < quantity:
                continue
            try:
                await self.apply_movement(
                    lot,
                    -quantity,
                    MovementType.OUT,
                    user_id=user_id,
                    reference_type=ReferenceType.ORDER.value,
                    reference_id=order_id,
                    reason="Order reservation",
                )
            except InsufficientStockError:
                logger.info(f"Lot {lot.lot_number} drained concurrently, trying next FEFO lot")
                continue
            return lot
        return None

    async def release_reservation(
        self,
        lot_id: uuid.UUID,
        quantity: int,
        order_id: Optional[uuid.UUID] = None,
        user_id: Optional[uuid.UUID] = None,
    ) -> InventoryMovement:
        """Put reserved units back on their lot with a RETURN movement. Does not commit."""
        lot = await self.get_lot(lot_id)
        return await self.apply_movement(
            lot,
            quantity,
            MovementType.RETURN,
            user_id=user_id,
            reference_type=ReferenceType.ORDER.value,
            reference_id=order_id,
            reason="Reservation released",
        )

    # ==================== DAMAGE ====================

    async def register_damage(
        self,
        lot_id: uuid.UUID,
        quantity: int,
        reason: str,
        evidence_ref: Optional[str],
        user_id: Optional[uuid.UUID] = None,
    ) -> InventoryMovement:
        """
        Write off damaged units from a lot.

        Evidence is mandatory and checked before the lot is even read.
        """
        if not evidence_ref or not evidence_ref.strip():
            raise ValidationError("Evidence is required to register damaged stock")
        if quantity <= 0:
            raise ValidationError("Damaged quantity must be greater than zero")

        lot = await self.get_lot(lot_id)
        if lot.quantity < quantity:
            raise InsufficientStockError(
                f"Lot {lot.lot_number} has {lot.quantity} units, cannot write off {quantity}"
            )

        movement = await self.apply_movement(
            lot,
            -quantity,
            MovementType.DAMAGE,
            user_id=user_id,
            reason=reason,
            evidence_ref=evidence_ref,
        )

        await self.audit.record(
            user_id, "REGISTER_DAMAGE", "LOT", lot.id,
            old_values={"quantity": movement.previous_quantity},
            new_values={
                "quantity": movement.new_quantity,
                "damaged": quantity,
                "reason": reason,
                "evidence_ref": evidence_ref,
            },
        )
        await self.db.commit()
        logger.info(f"Registered {quantity} damaged units on lot {lot.lot_number}")
        return movement

    # ==================== RETURNS ====================

    async def process_return(
        self,
        product_id: uuid.UUID,
        quantity: int,
        condition: str,
        reason: str,
        user_id: Optional[uuid.UUID] = None,
        evidence_ref: Optional[str] = None,
        location: Optional[str] = None,
    ) -> ReturnResult:
        """
        Customer return.

        FIT goods come back as a new QUARANTINE lot; SCRAP goods are
        disposed of without touching stock.
        """
        if quantity <= 0:
            raise ValidationError("Returned quantity must be greater than zero")
        condition = (condition or "").strip().upper()
        if condition not in ("FIT", "SCRAP"):
            raise ValidationError("Return condition must be FIT or SCRAP")

        product = await self.catalog.get_product(product_id)
        if not product:
            raise NotFoundError(f"Product {product_id} not found")

        if condition == "SCRAP":
            result = ReturnResult(
                product_id=product.id,
                quantity=quantity,
                condition=condition,
                action="DISPOSED",
            )
        else:
            now = datetime.now(timezone.utc)
            lot = await self.store.add_lot(Lot(
                product_id=product.id,
                lot_number=f"RET-{now.strftime('%Y%m%d')}-{uuid.uuid4().hex[:6].upper()}",
                quantity=0,
                status=LotStatus.QUARANTINE.value,
                location=location or "QUARANTINE",
            ))
            movement = await self.apply_movement(
                lot,
                quantity,
                MovementType.RETURN,
                user_id=user_id,
                reference_type=ReferenceType.CUSTOMER_RETURN.value,
                reason=reason,
                evidence_ref=evidence_ref,
            )
            result = ReturnResult(
                product_id=product.id,
                quantity=quantity,
                condition=condition,
                action="QUARANTINE",
                lot_id=lot.id,
                movement_id=movement.id,
            )

        await self.audit.record(
            user_id, "PROCESS_RETURN", "PRODUCT", product.id,
            new_values={
                "quantity": quantity,
                "condition": condition,
                "action": result.action,
                "lot_id": result.lot_id,
                "reason": reason,
            },
        )
        await self.db.commit()
        logger.info(f"Processed return of {quantity} x {product.sku}: {result.action}")
        return result

    # ==================== STOCK MONITOR ====================

    async def get_aggregate_stock(self, product_id: uuid.UUID) -> int:
        return await self.store.get_aggregate_stock(product_id)

    async def get_stock(
        self,
        brand: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[StockItem]:
        """Per-product stock with low-stock and expiration flags."""
        products = await self.catalog.list_products(brand=brand, category=category, is_active=True)
        lots = await self.store.find_lots_for_products([p.id for p in products])

        items = {
            p.id: StockItem(
                product_id=p.id,
                sku=p.sku,
                product_name=p.name,
                brand=p.brand,
                category=p.category,
            )
            for p in products
        }
        today = date.today()
        for lot in lots:
            item = items[lot.product_id]
            item.lots.append(lot)
            item.total_stock += lot.quantity
            if lot.status == LotStatus.AVAILABLE.value:
                item.available_stock += lot.quantity
            elif lot.status == LotStatus.RESERVED.value:
                item.reserved_stock += lot.quantity

            days = days_until(lot.expiration_date, today)
            if lot.quantity > 0 and days is not None and days < settings.EXPIRY_WARNING_DAYS:
                item.expiration_warning = True

        for item in items.values():
            item.low_stock_alert = 0 < item.available_stock < settings.LOW_STOCK_THRESHOLD

        return list(items.values())
