"""
Reception Service - blind-count inbound workflow.

Flow:
1. create_reception_order() - supplier delivery announced with expected quantities
2. get_counting_sheet()     - counter sees products and lots, never the expected quantities
3. blind_count()            - counts recorded; mismatches raise discrepancies
4. review_discrepancy()     - supervisor resolves or accepts each discrepancy
5. validate_reception_order() - counted goods become lots with IN movements
6. complete_reception_order()
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional, List

from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_engine.core.exceptions import (
    NotFoundError, ValidationError, ConflictError, OwnershipError,
)
from warehouse_engine.models.document_sequence import DocumentType
from warehouse_engine.models.inventory import Lot, LotStatus, MovementType, ReferenceType
from warehouse_engine.models.reception import (
    ReceptionOrder, ReceptionLine, ReceptionDiscrepancy,
    ReceptionStatus, ProductCondition, DiscrepancyStatus,
)
from warehouse_engine.schemas.reception import ReceptionLineCreate, LineCount
from warehouse_engine.services.audit_service import AuditService
from warehouse_engine.services.document_sequence_service import DocumentSequenceService
from warehouse_engine.services.inventory_service import InventoryService
from warehouse_engine.stores.catalog_store import CatalogStore
from warehouse_engine.stores.inventory_store import InventoryStore
from warehouse_engine.stores.reception_store import ReceptionStore


logger = logging.getLogger(__name__)


# Allowed discrepancy review transitions
DISCREPANCY_TRANSITIONS = {
    DiscrepancyStatus.DETECTED.value: {
        DiscrepancyStatus.IN_REVIEW.value,
        DiscrepancyStatus.RESOLVED.value,
        DiscrepancyStatus.ACCEPTED.value,
    },
    DiscrepancyStatus.IN_REVIEW.value: {
        DiscrepancyStatus.RESOLVED.value,
        DiscrepancyStatus.ACCEPTED.value,
    },
}

CLOSED_DISCREPANCY_STATUSES = {
    DiscrepancyStatus.RESOLVED.value,
    DiscrepancyStatus.ACCEPTED.value,
}


@dataclass
class CountingSheetLine:
    line_id: uuid.UUID
    product_id: uuid.UUID
    sku: str
    product_name: str
    lot_number: str
    expiration_date: Optional[date] = None


@dataclass
class CountingSheet:
    reception_order_id: uuid.UUID
    order_number: str
    status: str
    lines: List[CountingSheetLine] = field(default_factory=list)


@dataclass
class BlindCountResult:
    reception_order_id: uuid.UUID
    status: str
    discrepancies: List[ReceptionDiscrepancy] = field(default_factory=list)

    @property
    def discrepancies_found(self) -> int:
        return len(self.discrepancies)


class ReceptionService:

    def __init__(
        self,
        db: AsyncSession,
        audit: Optional[AuditService] = None,
        inventory: Optional[InventoryService] = None,
    ):
        self.db = db
        self.store = ReceptionStore(db)
        self.catalog = CatalogStore(db)
        self.inventory_store = InventoryStore(db)
        self.audit = audit or AuditService(db)
        self.inventory = inventory or InventoryService(db, audit=self.audit)
        self.sequences = DocumentSequenceService(db)

    async def get_reception_order(self, order_id: uuid.UUID) -> ReceptionOrder:
        order = await self.store.get_order(order_id)
        if not order:
            raise NotFoundError(f"Reception order {order_id} not found")
        return order

    async def list_reception_orders(self, status: Optional[str] = None) -> List[ReceptionOrder]:
        return await self.store.list_orders(status)

    async def list_discrepancies(self, order_id: uuid.UUID) -> List[ReceptionDiscrepancy]:
        await self.get_reception_order(order_id)
        return await self.store.list_discrepancies(order_id)

    # ==================== CREATE ====================

    async def create_reception_order(
        self,
        supplier_id: uuid.UUID,
        invoice_ref: Optional[str],
        lines: List[ReceptionLineCreate],
        user_id: Optional[uuid.UUID] = None,
        notes: Optional[str] = None,
    ) -> ReceptionOrder:
        """
        Register an inbound delivery.

        Raises:
            NotFoundError: unknown supplier or product
            ValidationError: no lines, or a non-positive expected quantity
        """
        supplier = await self.catalog.get_supplier(supplier_id)
        if not supplier:
            raise NotFoundError(f"Supplier {supplier_id} not found")
        if not lines:
            raise ValidationError("A reception order needs at least one line")

        for line in lines:
            if not await self.catalog.get_product(line.product_id):
                raise NotFoundError(f"Product {line.product_id} not found")
            if line.expected_quantity <= 0:
                raise ValidationError(
                    f"Expected quantity for lot {line.lot_number} must be greater than zero"
                )

        order_number = await self.sequences.get_next_number(DocumentType.RECEPTION_ORDER.value)
        order = ReceptionOrder(
            order_number=order_number,
            supplier_id=supplier.id,
            brand=supplier.brand,
            invoice_ref=invoice_ref,
            status=ReceptionStatus.PENDING.value,
            notes=notes,
            created_by=user_id,
            lines=[
                ReceptionLine(
                    line_number=index,
                    product_id=line.product_id,
                    expected_quantity=line.expected_quantity,
                    condition=ProductCondition.FIT.value,
                    lot_number=line.lot_number,
                    expiration_date=line.expiration_date,
                )
                for index, line in enumerate(lines, start=1)
            ],
        )
        await self.store.add_order(order)

        await self.audit.record(
            user_id, "CREATE_RECEPTION_ORDER", "RECEPTION_ORDER", order.id,
            new_values={
                "order_number": order.order_number,
                "supplier_id": supplier.id,
                "lines": len(lines),
            },
        )
        await self.db.commit()
        logger.info(f"Created reception order {order.order_number} with {len(lines)} lines")
        return order

    # ==================== COUNT ====================

    async def get_counting_sheet(self, order_id: uuid.UUID) -> CountingSheet:
        """Lines as the counter sees them, without expected quantities."""
        order = await self.get_reception_order(order_id)
        sheet = CountingSheet(
            reception_order_id=order.id,
            order_number=order.order_number,
            status=order.status,
        )
        for line in order.lines:
            product = await self.catalog.get_product(line.product_id)
            sheet.lines.append(CountingSheetLine(
                line_id=line.id,
                product_id=line.product_id,
                sku=product.sku if product else "",
                product_name=product.name if product else "",
                lot_number=line.lot_number,
                expiration_date=line.expiration_date,
            ))
        return sheet

    async def blind_count(
        self,
        order_id: uuid.UUID,
        line_counts: List[LineCount],
        user_id: Optional[uuid.UUID] = None,
    ) -> BlindCountResult:
        """
        Record counted quantities for a PENDING reception order.

        The count must cover every line of the order exactly once; a partial
        count would leave the order past PENDING with lines that can no
        longer be counted.

        One discrepancy (difference = counted - expected) is raised per line
        whose count does not match.

        Raises:
            NotFoundError: unknown order or line
            ConflictError: order is not PENDING
            OwnershipError: a line belongs to another order
            ValidationError: negative quantity, duplicate or missing lines
        """
        order = await self.get_reception_order(order_id)
        if order.status != ReceptionStatus.PENDING.value:
            raise ConflictError(
                f"Reception order {order.order_number} is {order.status}, expected PENDING"
            )

        # Resolve every line before writing anything
        counted_lines = []
        seen = set()
        for line_count in line_counts:
            if line_count.line_id in seen:
                raise ValidationError(f"Reception line {line_count.line_id} counted twice")
            seen.add(line_count.line_id)
            line = await self.store.get_line(line_count.line_id)
            if not line:
                raise NotFoundError(f"Reception line {line_count.line_id} not found")
            if line.reception_order_id != order.id:
                raise OwnershipError(
                    f"Line {line.id} does not belong to reception order {order.order_number}"
                )
            if line_count.counted_quantity < 0:
                raise ValidationError("Counted quantity cannot be negative")
            counted_lines.append((line, line_count))

        missing = [line.line_number for line in order.lines if line.id not in seen]
        if missing:
            raise ValidationError(
                f"Blind count of {order.order_number} is missing lines {missing}"
            )

        now = datetime.now(timezone.utc)
        discrepancies = []
        for line, line_count in counted_lines:
            line.counted_quantity = line_count.counted_quantity
            if line_count.condition:
                line.condition = line_count.condition.value
            line.counted_by = user_id
            line.counted_at = now

            if line.counted_quantity != line.expected_quantity:
                discrepancy = await self.store.get_discrepancy_by_line(line.id)
                if discrepancy is None:
                    discrepancy = ReceptionDiscrepancy(
                        reception_order_id=order.id,
                        reception_line_id=line.id,
                        expected_quantity=line.expected_quantity,
                        counted_quantity=line.counted_quantity,
                        difference=line.counted_quantity - line.expected_quantity,
                        status=DiscrepancyStatus.DETECTED.value,
                    )
                    await self.store.add_discrepancy(discrepancy)
                discrepancies.append(discrepancy)

        order.status = (
            ReceptionStatus.HAS_DISCREPANCY.value if discrepancies
            else ReceptionStatus.COUNTING.value
        )
        order.received_by = user_id
        order.received_at = now

        await self.audit.record(
            user_id, "BLIND_COUNT", "RECEPTION_ORDER", order.id,
            old_values={"status": ReceptionStatus.PENDING.value},
            new_values={
                "status": order.status,
                "lines_counted": len(counted_lines),
                "discrepancies": len(discrepancies),
            },
        )
        await self.db.commit()
        logger.info(
            f"Blind count on {order.order_number}: {len(discrepancies)} discrepancies, status {order.status}"
        )
        return BlindCountResult(
            reception_order_id=order.id,
            status=order.status,
            discrepancies=discrepancies,
        )

    # ==================== REVIEW ====================

    async def review_discrepancy(
        self,
        discrepancy_id: uuid.UUID,
        status: DiscrepancyStatus,
        notes: Optional[str] = None,
        user_id: Optional[uuid.UUID] = None,
    ) -> ReceptionDiscrepancy:
        discrepancy = await self.store.get_discrepancy(discrepancy_id)
        if not discrepancy:
            raise NotFoundError(f"Discrepancy {discrepancy_id} not found")

        new_status = status.value if isinstance(status, DiscrepancyStatus) else str(status).upper()
        old_status = discrepancy.status
        if new_status not in DISCREPANCY_TRANSITIONS.get(old_status, set()):
            raise ConflictError(f"Cannot move discrepancy from {old_status} to {new_status}")

        discrepancy.status = new_status
        if notes:
            discrepancy.resolution_notes = notes
        if new_status in CLOSED_DISCREPANCY_STATUSES:
            discrepancy.resolved_by = user_id
            discrepancy.resolved_at = datetime.now(timezone.utc)

        await self.audit.record(
            user_id, "REVIEW_DISCREPANCY", "RECEPTION_DISCREPANCY", discrepancy.id,
            old_values={"status": old_status},
            new_values={"status": new_status, "notes": notes},
        )
        await self.db.commit()
        return discrepancy

    # ==================== VALIDATE / COMPLETE ====================

    async def validate_reception_order(
        self,
        order_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
        location: Optional[str] = None,
    ) -> ReceptionOrder:
        """
        Put counted goods into stock.

        FIT lines become AVAILABLE lots, QUARANTINE lines QUARANTINE lots,
        SCRAP lines create nothing. Each lot starts empty and receives one
        IN movement of the counted quantity.
        """
        order = await self.get_reception_order(order_id)

        if order.status == ReceptionStatus.HAS_DISCREPANCY.value:
            open_items = [
                d for d in await self.store.list_discrepancies(order.id)
                if d.status not in CLOSED_DISCREPANCY_STATUSES
            ]
            if open_items:
                raise ConflictError(
                    f"Reception order {order.order_number} has {len(open_items)} unresolved discrepancies"
                )
        elif order.status != ReceptionStatus.COUNTING.value:
            raise ConflictError(
                f"Reception order {order.order_number} is {order.status}, it cannot be validated"
            )

        uncounted = [line for line in order.lines if line.counted_quantity is None]
        if uncounted:
            raise ConflictError(
                f"Reception order {order.order_number} has {len(uncounted)} uncounted lines"
            )

        lots_created = 0
        for line in order.lines:
            if line.counted_quantity <= 0 or line.condition == ProductCondition.SCRAP.value:
                continue

            lot_status = (
                LotStatus.QUARANTINE.value
                if line.condition == ProductCondition.QUARANTINE.value
                else LotStatus.AVAILABLE.value
            )
            lot = await self.inventory_store.add_lot(Lot(
                product_id=line.product_id,
                lot_number=line.lot_number,
                expiration_date=line.expiration_date,
                quantity=0,
                status=lot_status,
                location=location,
            ))
            await self.inventory.apply_movement(
                lot,
                line.counted_quantity,
                MovementType.IN,
                user_id=user_id,
                reference_type=ReferenceType.RECEPTION_ORDER.value,
                reference_id=order.id,
                reason=f"Reception {order.order_number}",
            )
            line.lot_id = lot.id
            lots_created += 1

        old_status = order.status
        order.status = ReceptionStatus.VALIDATED.value
        order.validated_by = user_id
        order.validated_at = datetime.now(timezone.utc)

        await self.audit.record(
            user_id, "VALIDATE_RECEPTION_ORDER", "RECEPTION_ORDER", order.id,
            old_values={"status": old_status},
            new_values={"status": order.status, "lots_created": lots_created},
        )
        await self.db.commit()
        logger.info(f"Validated reception order {order.order_number}: {lots_created} lots created")
        return order

    async def complete_reception_order(
        self,
        order_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
    ) -> ReceptionOrder:
        order = await self.get_reception_order(order_id)
        if order.status != ReceptionStatus.VALIDATED.value:
            raise ConflictError(
                f"Reception order {order.order_number} is {order.status}, expected VALIDATED"
            )

        order.status = ReceptionStatus.COMPLETED.value
        await self.audit.record(
            user_id, "COMPLETE_RECEPTION_ORDER", "RECEPTION_ORDER", order.id,
            old_values={"status": ReceptionStatus.VALIDATED.value},
            new_values={"status": order.status},
        )
        await self.db.commit()
        return order
