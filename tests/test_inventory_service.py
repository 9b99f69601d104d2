"""
Inventory ledger.

Covers:
- Movement bookkeeping: the sum of a lot's deltas equals its quantity
- Non-negative lots
- FEFO ordering, creation-order ties and expiry alerts
- Damage write-offs require evidence
- Customer returns (FIT to quarantine, SCRAP disposed)
- Stock monitor flags and reserved stock
"""
import uuid
from datetime import date, timedelta

import pytest

from warehouse_engine.core.exceptions import (
    NotFoundError, ValidationError, InsufficientStockError,
)
from warehouse_engine.models.inventory import LotStatus, MovementType
from warehouse_engine.services.inventory_service import (
    InventoryService, expiration_alert, EXPIRED_ALERT, RED_ALERT, CAUTION_ALERT,
)
from warehouse_engine.stores.inventory_store import InventoryStore


class TestApplyMovement:
    async def test_ledger_matches_quantity(self, db, product, lot_factory, user_id):
        lot = await lot_factory(product, quantity=100)
        service = InventoryService(db)

        await service.apply_movement(lot, -30, MovementType.OUT, user_id=user_id)
        await service.apply_movement(lot, 5, MovementType.RETURN, user_id=user_id)
        await service.apply_movement(lot, -2, MovementType.ADJUST, user_id=user_id)
        await db.commit()

        assert lot.quantity == 73
        assert await InventoryStore(db).sum_movements(lot.id) == 73

        movements = {m.quantity: m for m in await service.list_movements(lot.id)}
        assert sorted(movements) == [-30, -2, 5, 100]
        adjust = movements[-2]
        assert adjust.movement_type == MovementType.ADJUST.value
        assert (adjust.previous_quantity, adjust.new_quantity) == (75, 73)

    async def test_cannot_go_negative(self, db, product, lot_factory):
        lot = await lot_factory(product, quantity=10)

        with pytest.raises(InsufficientStockError):
            await InventoryService(db).apply_movement(lot, -11, MovementType.OUT)

        assert lot.quantity == 10
        assert await InventoryStore(db).sum_movements(lot.id) == 10

    async def test_zero_delta_rejected(self, db, product, lot_factory):
        lot = await lot_factory(product, quantity=10)

        with pytest.raises(ValidationError):
            await InventoryService(db).apply_movement(lot, 0, MovementType.ADJUST)

    async def test_stale_lot_loses_conditional_update(self, db, product, lot_factory):
        lot = await lot_factory(product, quantity=10)
        service = InventoryService(db)
        store = InventoryStore(db)

        # Another writer drains the row behind the ORM object's back
        assert await store.apply_quantity_delta(lot.id, -8)

        with pytest.raises(InsufficientStockError):
            await service.apply_movement(lot, -5, MovementType.OUT)


class TestFefo:
    async def test_earliest_expiration_first(self, db, product, lot_factory):
        today = date.today()
        late = await lot_factory(product, 10, today + timedelta(days=90))
        undated = await lot_factory(product, 10, None)
        early = await lot_factory(product, 10, today + timedelta(days=10))
        await lot_factory(product, 10, today + timedelta(days=5), status=LotStatus.QUARANTINE.value)
        await lot_factory(product, 0, today + timedelta(days=1))

        fefo = await InventoryService(db).get_fefo_lots(product.id)

        assert [item.lot.id for item in fefo] == [early.id, late.id, undated.id]
        assert fefo[0].days_until_expiration == 10
        assert fefo[0].alert == RED_ALERT
        assert fefo[1].alert is None
        assert fefo[2].days_until_expiration is None

    async def test_ties_broken_by_creation_order(self, db, product, lot_factory):
        shared = date.today() + timedelta(days=40)
        first_undated = await lot_factory(product, 10, None)
        first_dated = await lot_factory(product, 10, shared)
        second_undated = await lot_factory(product, 10, None)
        second_dated = await lot_factory(product, 10, shared)

        fefo = await InventoryService(db).get_fefo_lots(product.id)

        assert [item.lot.id for item in fefo] == [
            first_dated.id, second_dated.id, first_undated.id, second_undated.id,
        ]

    @pytest.mark.parametrize(
        "days, expected",
        [(-1, EXPIRED_ALERT), (0, RED_ALERT), (29, RED_ALERT), (30, CAUTION_ALERT), (59, CAUTION_ALERT), (60, None)],
    )
    def test_expiration_alert_windows(self, days, expected):
        assert expiration_alert(days) == expected

    async def test_reserve_first_fit_takes_whole_quantity_from_one_lot(self, db, product, lot_factory):
        today = date.today()
        small = await lot_factory(product, 5, today + timedelta(days=10))
        big = await lot_factory(product, 50, today + timedelta(days=20))
        order_id = uuid.uuid4()

        lot = await InventoryService(db).reserve_first_fit(product.id, 8, order_id=order_id)
        await db.commit()

        assert lot.id == big.id
        assert big.quantity == 42
        assert small.quantity == 5
        out = [m for m in await InventoryService(db).list_movements(big.id) if m.quantity < 0]
        assert len(out) == 1
        assert out[0].movement_type == MovementType.OUT.value
        assert out[0].reference_id == order_id

    async def test_reserve_first_fit_never_splits(self, db, product, lot_factory):
        await lot_factory(product, 5)
        await lot_factory(product, 5)

        assert await InventoryService(db).reserve_first_fit(product.id, 8) is None


class TestDamage:
    async def test_missing_evidence_fails_before_touching_stock(self, db, product, lot_factory):
        lot = await lot_factory(product, quantity=20)

        with pytest.raises(ValidationError):
            await InventoryService(db).register_damage(lot.id, 3, "Crushed cans", None)
        with pytest.raises(ValidationError):
            await InventoryService(db).register_damage(lot.id, 3, "Crushed cans", "   ")

        assert lot.quantity == 20
        assert len(await InventoryService(db).list_movements(lot.id)) == 1

    async def test_evidence_checked_before_lot_lookup(self, db):
        with pytest.raises(ValidationError):
            await InventoryService(db).register_damage(uuid.uuid4(), 3, "Crushed", "")

    async def test_register_damage(self, db, product, lot_factory, user_id):
        lot = await lot_factory(product, quantity=20)

        movement = await InventoryService(db).register_damage(
            lot.id, 3, "Crushed cans", "photos/dmg-001.jpg", user_id
        )

        assert movement.movement_type == MovementType.DAMAGE.value
        assert movement.quantity == -3
        assert movement.evidence_ref == "photos/dmg-001.jpg"
        assert lot.quantity == 17

    async def test_damage_more_than_stock(self, db, product, lot_factory):
        lot = await lot_factory(product, quantity=2)

        with pytest.raises(InsufficientStockError):
            await InventoryService(db).register_damage(lot.id, 3, "Crushed", "photo.jpg")

    async def test_damage_unknown_lot(self, db):
        with pytest.raises(NotFoundError):
            await InventoryService(db).register_damage(uuid.uuid4(), 1, "Crushed", "photo.jpg")


class TestReturns:
    async def test_fit_return_creates_quarantine_lot(self, db, product, user_id):
        service = InventoryService(db)
        result = await service.process_return(product.id, 6, "fit", "Customer refused", user_id)

        assert result.action == "QUARANTINE"
        lot = await service.get_lot(result.lot_id)
        assert lot.status == LotStatus.QUARANTINE.value
        assert lot.quantity == 6
        assert lot.lot_number.startswith("RET-")
        assert await InventoryStore(db).sum_movements(lot.id) == 6
        # Quarantined goods are not allocatable
        assert await service.get_fefo_lots(product.id) == []

    async def test_scrap_return_is_disposed(self, db, product):
        result = await InventoryService(db).process_return(product.id, 2, "SCRAP", "Leaking")

        assert result.action == "DISPOSED"
        assert result.lot_id is None

    async def test_invalid_condition(self, db, product):
        with pytest.raises(ValidationError):
            await InventoryService(db).process_return(product.id, 2, "MAYBE", "?")


class TestStockMonitor:
    async def test_flags(self, db, product_factory, lot_factory):
        low = await product_factory(sku="LOW-1")
        plenty = await product_factory(sku="OK-1")
        await lot_factory(low, 4, date.today() + timedelta(days=10))
        await lot_factory(plenty, 200, date.today() + timedelta(days=300))
        # An empty expiring lot does not raise the warning
        await lot_factory(plenty, 0, date.today() + timedelta(days=2))

        items = {item.sku: item for item in await InventoryService(db).get_stock()}

        assert items["LOW-1"].available_stock == 4
        assert items["LOW-1"].low_stock_alert is True
        assert items["LOW-1"].expiration_warning is True
        assert items["OK-1"].total_stock == 200
        assert items["OK-1"].low_stock_alert is False
        assert items["OK-1"].expiration_warning is False

    async def test_reservation_leaves_the_lot(self, db, product, lot_factory):
        await lot_factory(product, 50)
        await lot_factory(product, 7, status=LotStatus.RESERVED.value)
        service = InventoryService(db)

        await service.reserve_first_fit(product.id, 20, order_id=uuid.uuid4())
        await db.commit()

        item = (await service.get_stock())[0]
        assert item.available_stock == 30
        # Only the lot held in RESERVED status shows up as reserved
        assert item.reserved_stock == 7
        assert item.total_stock == 37
