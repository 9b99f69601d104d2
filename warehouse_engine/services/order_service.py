"""
Order Fulfillment Planner.

Creating an order computes its load-planning figures and tries to reserve
every line from a single FEFO lot. Lines that cannot be served from one
lot stay UNRESERVED; the order records whether it is fully, partially or
not reserved.
"""
import logging
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, List

from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_engine.config import settings
from warehouse_engine.core.exceptions import NotFoundError, ValidationError, ConflictError
from warehouse_engine.models.document_sequence import DocumentType
from warehouse_engine.models.order import (
    Order, OrderLine, OrderStatus, ReservationStatus, LineReservationStatus,
)
from warehouse_engine.schemas.order import OrderLineCreate
from warehouse_engine.services import load_planning
from warehouse_engine.services.audit_service import AuditService
from warehouse_engine.services.document_sequence_service import DocumentSequenceService
from warehouse_engine.services.inventory_service import InventoryService
from warehouse_engine.stores.catalog_store import CatalogStore
from warehouse_engine.stores.order_store import OrderStore


logger = logging.getLogger(__name__)


# Manual status changes; IN_TRANSIT and DELIVERED belong to routes
ORDER_TRANSITIONS = {
    OrderStatus.DRAFT.value: {OrderStatus.CONFIRMED.value},
    OrderStatus.CONFIRMED.value: {OrderStatus.PREPARING.value},
    OrderStatus.PREPARING.value: {OrderStatus.READY.value},
}

CANCELLABLE_STATUSES = {
    OrderStatus.DRAFT.value,
    OrderStatus.CONFIRMED.value,
    OrderStatus.PREPARING.value,
    OrderStatus.READY.value,
}


@dataclass
class OrderCreationResult:
    """Created order plus the planning figures shown to the dispatcher."""
    order: Order
    suggested_vehicle_type: str
    loading_alert: Optional[str]
    loading_efficiency: float
    brands: List[str] = field(default_factory=list)
    reservation_status: str = ReservationStatus.UNRESERVED.value

    @property
    def lines(self) -> List[OrderLine]:
        return self.order.lines

    @property
    def is_multi_brand(self) -> bool:
        return len(self.brands) > 1


def reservation_outcome(reserved: int, total: int) -> str:
    if total and reserved == total:
        return ReservationStatus.FULLY_RESERVED.value
    if reserved:
        return ReservationStatus.PARTIALLY_RESERVED.value
    return ReservationStatus.UNRESERVED.value


class OrderService:

    def __init__(
        self,
        db: AsyncSession,
        audit: Optional[AuditService] = None,
        inventory: Optional[InventoryService] = None,
    ):
        self.db = db
        self.store = OrderStore(db)
        self.catalog = CatalogStore(db)
        self.audit = audit or AuditService(db)
        self.inventory = inventory or InventoryService(db, audit=self.audit)
        self.sequences = DocumentSequenceService(db)

    async def get_order(self, order_id: uuid.UUID) -> Order:
        order = await self.store.get_order(order_id)
        if not order:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    async def list_orders(
        self,
        status: Optional[str] = None,
        customer_id: Optional[uuid.UUID] = None,
    ) -> List[Order]:
        return await self.store.list_orders(status=status, customer_id=customer_id)

    async def create_order(
        self,
        customer_id: uuid.UUID,
        lines: List[OrderLineCreate],
        user_id: Optional[uuid.UUID] = None,
    ) -> OrderCreationResult:
        """
        Create a DRAFT order, plan its load and reserve stock FEFO.

        Raises:
            NotFoundError: unknown customer or product
            ValidationError: inactive customer, no lines, non-positive quantity
        """
        customer = await self.catalog.get_customer(customer_id)
        if not customer:
            raise NotFoundError(f"Customer {customer_id} not found")
        if not customer.is_active:
            raise ValidationError(f"Customer {customer.name} is inactive")
        if not lines:
            raise ValidationError("An order needs at least one line")

        products = []
        for line in lines:
            if line.quantity <= 0:
                raise ValidationError("Line quantity must be greater than zero")
            product = await self.catalog.get_product(line.product_id)
            if not product:
                raise NotFoundError(f"Product {line.product_id} not found")
            products.append(product)

        heavy_threshold = Decimal(str(settings.HEAVY_ITEM_THRESHOLD_KG))
        total_weight = Decimal("0")
        total_volume = Decimal("0")
        total_amount = Decimal("0")
        has_fragile = False
        has_heavy = False
        brands: List[str] = []

        order_id = uuid.uuid4()
        order_lines = []
        reserved_count = 0

        for index, (line, product) in enumerate(zip(lines, products), start=1):
            quantity = Decimal(line.quantity)
            unit_price = Decimal(product.unit_price or 0)
            subtotal = unit_price * quantity

            total_weight += Decimal(product.weight_kg or 0) * quantity
            total_volume += product.volume_m3 * quantity
            total_amount += subtotal
            has_fragile = has_fragile or bool(product.is_fragile)
            has_heavy = has_heavy or Decimal(product.weight_kg or 0) > heavy_threshold
            if product.brand not in brands:
                brands.append(product.brand)

            lot = await self.inventory.reserve_first_fit(
                product.id, line.quantity, order_id=order_id, user_id=user_id
            )
            if lot is not None:
                reserved_count += 1

            order_lines.append(OrderLine(
                line_number=index,
                product_id=product.id,
                lot_id=lot.id if lot else None,
                quantity=line.quantity,
                unit_price=unit_price,
                subtotal=subtotal,
                reservation_status=(
                    LineReservationStatus.RESERVED.value if lot
                    else LineReservationStatus.UNRESERVED.value
                ),
            ))

        suggested = load_planning.suggest_vehicle(total_volume)
        alert = load_planning.loading_alert(has_fragile, has_heavy)
        efficiency = load_planning.loading_efficiency(total_volume, suggested)
        reservation_status = reservation_outcome(reserved_count, len(order_lines))

        order_number = await self.sequences.get_next_number(DocumentType.ORDER.value)
        order = Order(
            id=order_id,
            order_number=order_number,
            customer_id=customer.id,
            status=OrderStatus.DRAFT.value,
            total_weight_kg=total_weight,
            total_volume_m3=total_volume,
            total_amount=total_amount,
            suggested_vehicle_type=suggested,
            has_fragile_items=has_fragile,
            has_heavy_items=has_heavy,
            loading_alert=alert,
            reservation_status=reservation_status,
            created_by=user_id,
            lines=order_lines,
        )
        await self.store.add_order(order)

        await self.audit.record(
            user_id, "CREATE_ORDER", "ORDER", order.id,
            new_values={
                "order_number": order.order_number,
                "total_weight_kg": total_weight,
                "total_volume_m3": total_volume,
                "suggested_vehicle": suggested,
                "loading_efficiency": efficiency,
                "reservation_status": reservation_status,
            },
        )
        await self.db.commit()
        logger.info(
            f"Created order {order.order_number}: {len(order_lines)} lines, {reservation_status}"
        )
        return OrderCreationResult(
            order=order,
            suggested_vehicle_type=suggested,
            loading_alert=alert,
            loading_efficiency=efficiency,
            brands=brands,
            reservation_status=reservation_status,
        )

    async def update_order_status(
        self,
        order_id: uuid.UUID,
        status: OrderStatus,
        user_id: Optional[uuid.UUID] = None,
    ) -> Order:
        """Move an order one step forward: DRAFT -> CONFIRMED -> PREPARING -> READY."""
        order = await self.get_order(order_id)
        new_status = status.value if isinstance(status, OrderStatus) else str(status).upper()
        old_status = order.status
        if new_status not in ORDER_TRANSITIONS.get(old_status, set()):
            raise ConflictError(f"Cannot move order {order.order_number} from {old_status} to {new_status}")

        order.status = new_status
        await self.audit.record(
            user_id, "UPDATE_ORDER_STATUS", "ORDER", order.id,
            old_values={"status": old_status},
            new_values={"status": new_status},
        )
        await self.db.commit()
        logger.info(f"Order {order.order_number}: {old_status} -> {new_status}")
        return order

    async def cancel_order(self, order_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> Order:
        """Cancel an order that has not left the warehouse and give back its reserved stock."""
        order = await self.get_order(order_id)
        if order.status not in CANCELLABLE_STATUSES:
            raise ConflictError(f"Order {order.order_number} is {order.status} and cannot be cancelled")

        released = 0
        for line in order.lines:
            if line.reservation_status != LineReservationStatus.RESERVED.value or not line.lot_id:
                continue
            await self.inventory.release_reservation(
                line.lot_id, line.quantity, order_id=order.id, user_id=user_id
            )
            line.reservation_status = LineReservationStatus.UNRESERVED.value
            released += 1

        old_status = order.status
        order.status = OrderStatus.CANCELLED.value
        order.reservation_status = ReservationStatus.UNRESERVED.value

        await self.audit.record(
            user_id, "CANCEL_ORDER", "ORDER", order.id,
            old_values={"status": old_status},
            new_values={"status": order.status, "lines_released": released},
        )
        await self.db.commit()
        logger.info(f"Cancelled order {order.order_number}, released {released} reservations")
        return order

    async def find_stuck_orders(self, threshold_hours: Optional[int] = None) -> List[Order]:
        """CONFIRMED/PREPARING orders older than the threshold, oldest first."""
        if threshold_hours is None:
            threshold_hours = settings.STUCK_ORDER_THRESHOLD_HOURS
        return await self.store.find_stuck_orders(threshold_hours)
