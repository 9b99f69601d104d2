"""
Reception workflow.

Covers:
- Reception order creation and numbering
- Counting sheet hides expected quantities
- Blind count discrepancy detection
- Discrepancy review transitions
- Validation into lots with IN movements
"""
import uuid
from datetime import date, timedelta

import pytest

from warehouse_engine.core.exceptions import (
    NotFoundError, ValidationError, ConflictError, OwnershipError,
)
from warehouse_engine.models.inventory import LotStatus, MovementType
from warehouse_engine.models.reception import DiscrepancyStatus
from warehouse_engine.schemas.reception import ReceptionLineCreate, LineCount
from warehouse_engine.services.inventory_service import InventoryService
from warehouse_engine.services.reception_service import ReceptionService


def _line(product, expected=50, lot_number="LOT-A", expiration_date=None):
    return ReceptionLineCreate(
        product_id=product.id,
        expected_quantity=expected,
        lot_number=lot_number,
        expiration_date=expiration_date,
    )


@pytest.fixture
async def reception_order(db, supplier, product, user_id):
    return await ReceptionService(db).create_reception_order(
        supplier.id, "FAC-1001", [_line(product, 50)], user_id
    )


class TestCreateReceptionOrder:
    async def test_creates_pending_order(self, db, supplier, product, user_id):
        order = await ReceptionService(db).create_reception_order(
            supplier.id, "FAC-1001", [_line(product, 50), _line(product, 20, "LOT-B")], user_id
        )

        assert order.order_number.startswith("REC-")
        assert order.order_number.endswith("-0001")
        assert order.status == "PENDING"
        assert order.brand == supplier.brand
        assert [line.line_number for line in order.lines] == [1, 2]
        assert all(line.counted_quantity is None for line in order.lines)

    async def test_unknown_supplier(self, db, product):
        with pytest.raises(NotFoundError):
            await ReceptionService(db).create_reception_order(uuid.uuid4(), None, [_line(product)])

    async def test_requires_lines(self, db, supplier):
        with pytest.raises(ValidationError):
            await ReceptionService(db).create_reception_order(supplier.id, None, [])

    async def test_expected_quantity_must_be_positive(self, db, supplier, product):
        with pytest.raises(ValidationError):
            await ReceptionService(db).create_reception_order(supplier.id, None, [_line(product, 0)])

    async def test_unknown_product(self, db, supplier, product):
        line = ReceptionLineCreate(product_id=uuid.uuid4(), expected_quantity=5, lot_number="X")
        with pytest.raises(NotFoundError):
            await ReceptionService(db).create_reception_order(supplier.id, None, [line])


class TestCountingSheet:
    async def test_sheet_has_no_expected_quantities(self, db, reception_order, product):
        sheet = await ReceptionService(db).get_counting_sheet(reception_order.id)

        assert sheet.order_number == reception_order.order_number
        assert len(sheet.lines) == 1
        assert sheet.lines[0].sku == product.sku
        assert not hasattr(sheet.lines[0], "expected_quantity")


class TestBlindCount:
    async def test_short_count_raises_discrepancy(self, db, reception_order, user_id):
        line = reception_order.lines[0]
        result = await ReceptionService(db).blind_count(
            reception_order.id, [LineCount(line_id=line.id, counted_quantity=45)], user_id
        )

        assert result.status == "HAS_DISCREPANCY"
        assert result.discrepancies_found == 1
        discrepancy = result.discrepancies[0]
        assert discrepancy.difference == -5
        assert discrepancy.expected_quantity == 50
        assert discrepancy.counted_quantity == 45
        assert discrepancy.status == "DETECTED"
        assert line.counted_by == user_id

    async def test_matching_count_moves_to_counting(self, db, reception_order):
        line = reception_order.lines[0]
        result = await ReceptionService(db).blind_count(
            reception_order.id, [LineCount(line_id=line.id, counted_quantity=50)]
        )

        assert result.status == "COUNTING"
        assert result.discrepancies_found == 0

    async def test_only_pending_orders_can_be_counted(self, db, reception_order):
        service = ReceptionService(db)
        line = reception_order.lines[0]
        await service.blind_count(reception_order.id, [LineCount(line_id=line.id, counted_quantity=50)])

        with pytest.raises(ConflictError):
            await service.blind_count(reception_order.id, [LineCount(line_id=line.id, counted_quantity=50)])

    async def test_line_from_another_order(self, db, supplier, product, reception_order):
        service = ReceptionService(db)
        other = await service.create_reception_order(supplier.id, None, [_line(product, 10, "LOT-Z")])

        with pytest.raises(OwnershipError):
            await service.blind_count(
                reception_order.id, [LineCount(line_id=other.lines[0].id, counted_quantity=10)]
            )
        assert reception_order.status == "PENDING"

    async def test_partial_count_rejected(self, db, supplier, product):
        service = ReceptionService(db)
        order = await service.create_reception_order(
            supplier.id, None, [_line(product, 10, "LOT-A"), _line(product, 20, "LOT-B")]
        )
        first, second = order.lines

        with pytest.raises(ValidationError):
            await service.blind_count(order.id, [LineCount(line_id=first.id, counted_quantity=10)])
        assert order.status == "PENDING"
        assert first.counted_quantity is None

        result = await service.blind_count(order.id, [
            LineCount(line_id=first.id, counted_quantity=10),
            LineCount(line_id=second.id, counted_quantity=20),
        ])
        assert result.status == "COUNTING"
        validated = await service.validate_reception_order(order.id)
        assert validated.status == "VALIDATED"

    async def test_duplicate_line_rejected(self, db, reception_order):
        line = reception_order.lines[0]

        with pytest.raises(ValidationError):
            await ReceptionService(db).blind_count(reception_order.id, [
                LineCount(line_id=line.id, counted_quantity=45),
                LineCount(line_id=line.id, counted_quantity=50),
            ])
        assert reception_order.status == "PENDING"
        assert line.counted_quantity is None

    async def test_unknown_line(self, db, reception_order):
        with pytest.raises(NotFoundError):
            await ReceptionService(db).blind_count(
                reception_order.id, [LineCount(line_id=uuid.uuid4(), counted_quantity=1)]
            )


class TestReviewDiscrepancy:
    async def test_resolve_stamps_resolver(self, db, reception_order, user_id):
        service = ReceptionService(db)
        line = reception_order.lines[0]
        result = await service.blind_count(reception_order.id, [LineCount(line_id=line.id, counted_quantity=45)])
        discrepancy = result.discrepancies[0]

        reviewed = await service.review_discrepancy(discrepancy.id, DiscrepancyStatus.IN_REVIEW)
        assert reviewed.status == "IN_REVIEW"
        assert reviewed.resolved_at is None

        resolved = await service.review_discrepancy(
            discrepancy.id, DiscrepancyStatus.RESOLVED, "Supplier credit note", user_id
        )
        assert resolved.status == "RESOLVED"
        assert resolved.resolved_by == user_id
        assert resolved.resolution_notes == "Supplier credit note"

    async def test_closed_discrepancy_cannot_reopen(self, db, reception_order):
        service = ReceptionService(db)
        line = reception_order.lines[0]
        result = await service.blind_count(reception_order.id, [LineCount(line_id=line.id, counted_quantity=45)])
        discrepancy = result.discrepancies[0]
        await service.review_discrepancy(discrepancy.id, DiscrepancyStatus.ACCEPTED)

        with pytest.raises(ConflictError):
            await service.review_discrepancy(discrepancy.id, DiscrepancyStatus.IN_REVIEW)


class TestValidateReception:
    async def test_validate_creates_lots_with_ledger(self, db, supplier, product, user_id):
        service = ReceptionService(db)
        expires = date.today() + timedelta(days=200)
        order = await service.create_reception_order(
            supplier.id, None,
            [_line(product, 50, "LOT-A", expires), _line(product, 10, "LOT-B"), _line(product, 5, "LOT-C")],
        )
        fit, quarantined, scrapped = order.lines
        await service.blind_count(order.id, [
            LineCount(line_id=fit.id, counted_quantity=50),
            LineCount(line_id=quarantined.id, counted_quantity=10, condition="quarantine"),
            LineCount(line_id=scrapped.id, counted_quantity=5, condition="SCRAP"),
        ])

        validated = await service.validate_reception_order(order.id, user_id, location="B-02")

        assert validated.status == "VALIDATED"
        assert validated.validated_by == user_id
        assert scrapped.lot_id is None

        inventory = InventoryService(db)
        fit_lot = await inventory.get_lot(fit.lot_id)
        assert fit_lot.quantity == 50
        assert fit_lot.status == LotStatus.AVAILABLE.value
        assert fit_lot.expiration_date == expires
        assert fit_lot.location == "B-02"

        quarantine_lot = await inventory.get_lot(quarantined.lot_id)
        assert quarantine_lot.status == LotStatus.QUARANTINE.value

        movements = await inventory.list_movements(fit_lot.id)
        assert [(m.movement_type, m.quantity) for m in movements] == [(MovementType.IN.value, 50)]
        assert movements[0].reference_id == order.id

    async def test_open_discrepancy_blocks_validation(self, db, reception_order):
        service = ReceptionService(db)
        line = reception_order.lines[0]
        await service.blind_count(reception_order.id, [LineCount(line_id=line.id, counted_quantity=45)])

        with pytest.raises(ConflictError):
            await service.validate_reception_order(reception_order.id)

    async def test_accepted_discrepancy_allows_validation(self, db, reception_order):
        service = ReceptionService(db)
        line = reception_order.lines[0]
        result = await service.blind_count(reception_order.id, [LineCount(line_id=line.id, counted_quantity=45)])
        await service.review_discrepancy(result.discrepancies[0].id, DiscrepancyStatus.ACCEPTED)

        order = await service.validate_reception_order(reception_order.id)

        assert order.status == "VALIDATED"
        lot = await InventoryService(db).get_lot(line.lot_id)
        assert lot.quantity == 45

    async def test_pending_order_cannot_be_validated(self, db, reception_order):
        with pytest.raises(ConflictError):
            await ReceptionService(db).validate_reception_order(reception_order.id)

    async def test_complete_after_validation(self, db, reception_order):
        service = ReceptionService(db)
        line = reception_order.lines[0]
        await service.blind_count(reception_order.id, [LineCount(line_id=line.id, counted_quantity=50)])

        with pytest.raises(ConflictError):
            await service.complete_reception_order(reception_order.id)

        await service.validate_reception_order(reception_order.id)
        completed = await service.complete_reception_order(reception_order.id)

        assert completed.status == "COMPLETED"
