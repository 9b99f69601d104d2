"""
Order fulfillment planning.

Covers:
- Totals, suggested vehicle, loading alert and efficiency
- Multi-brand orders
- Per-line FEFO reservation and the order-level outcome
- Manual status transitions and cancellation
- Stuck order detection
"""
import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from warehouse_engine.core.exceptions import NotFoundError, ValidationError, ConflictError
from warehouse_engine.models.catalog import Brand
from warehouse_engine.models.order import OrderStatus, ReservationStatus, LineReservationStatus
from warehouse_engine.schemas.order import OrderLineCreate
from warehouse_engine.services import load_planning
from warehouse_engine.services.order_service import OrderService, reservation_outcome
from warehouse_engine.stores.inventory_store import InventoryStore


def line(product, quantity):
    return OrderLineCreate(product_id=product.id, quantity=quantity)


class TestCreateOrder:
    async def test_totals_and_planning(self, db, customer, product_factory, lot_factory, user_id):
        crate = await product_factory(
            weight_kg=Decimal("12.5"), length_cm=Decimal("100"),
            width_cm=Decimal("100"), height_cm=Decimal("100"), unit_price=Decimal("80.00"),
        )
        glass = await product_factory(is_fragile=True, unit_price=Decimal("15.50"))
        await lot_factory(crate, 20)
        await lot_factory(glass, 20)

        result = await OrderService(db).create_order(
            customer.id, [line(crate, 12), line(glass, 4)], user_id
        )
        order = result.order

        assert order.order_number.startswith("ORD-")
        assert order.status == OrderStatus.DRAFT.value
        assert order.total_weight_kg == Decimal("154.000")
        assert order.total_volume_m3 == Decimal("12.004")
        assert order.total_amount == Decimal("1022.00")
        assert result.suggested_vehicle_type == "TRUCK_3_5T"
        assert order.has_fragile_items and order.has_heavy_items
        assert result.loading_alert == load_planning.STOW_WARNING
        assert result.loading_efficiency == pytest.approx(60.02)
        assert [l.line_number for l in result.lines] == [1, 2]
        assert result.lines[1].subtotal == Decimal("62.00")

    async def test_fragile_only_caution(self, db, customer, product_factory):
        glass = await product_factory(is_fragile=True)

        result = await OrderService(db).create_order(customer.id, [line(glass, 1)])

        assert result.suggested_vehicle_type == "VAN"
        assert result.loading_alert == load_planning.FRAGILE_CAUTION

    async def test_multi_brand(self, db, customer, product_factory):
        beans = await product_factory(brand=Brand.COSTENA.value)
        juice = await product_factory(brand=Brand.JUMEX.value)

        result = await OrderService(db).create_order(
            customer.id, [line(beans, 1), line(juice, 1), line(beans, 2)]
        )

        assert result.brands == [Brand.COSTENA.value, Brand.JUMEX.value]
        assert result.is_multi_brand

    async def test_fully_reserved_from_fefo_head(self, db, customer, product, lot_factory):
        late = await lot_factory(product, 50, date.today() + timedelta(days=100))
        early = await lot_factory(product, 50, date.today() + timedelta(days=20))

        result = await OrderService(db).create_order(customer.id, [line(product, 30)])

        assert result.reservation_status == ReservationStatus.FULLY_RESERVED.value
        assert result.lines[0].lot_id == early.id
        assert result.lines[0].reservation_status == LineReservationStatus.RESERVED.value
        await db.refresh(early)
        await db.refresh(late)
        assert (early.quantity, late.quantity) == (20, 50)

    async def test_partially_reserved(self, db, customer, product_factory, lot_factory):
        stocked = await product_factory()
        scarce = await product_factory()
        await lot_factory(stocked, 10)
        # Two lots of 6 cannot serve 8 units: lots are never split
        await lot_factory(scarce, 6)
        await lot_factory(scarce, 6)

        result = await OrderService(db).create_order(
            customer.id, [line(stocked, 5), line(scarce, 8)]
        )

        assert result.reservation_status == ReservationStatus.PARTIALLY_RESERVED.value
        assert result.lines[1].lot_id is None
        assert result.lines[1].reservation_status == LineReservationStatus.UNRESERVED.value
        assert await InventoryStore(db).get_aggregate_stock(scarce.id) == 12

    async def test_unreserved(self, db, customer, product):
        result = await OrderService(db).create_order(customer.id, [line(product, 1)])

        assert result.reservation_status == ReservationStatus.UNRESERVED.value

    async def test_validation(self, db, customer, product):
        service = OrderService(db)

        with pytest.raises(ValidationError):
            await service.create_order(customer.id, [])
        with pytest.raises(ValidationError):
            await service.create_order(customer.id, [line(product, 0)])
        with pytest.raises(NotFoundError):
            await service.create_order(uuid.uuid4(), [line(product, 1)])
        with pytest.raises(NotFoundError):
            await service.create_order(
                customer.id, [OrderLineCreate(product_id=uuid.uuid4(), quantity=1)]
            )

    async def test_inactive_customer(self, db, customer, product):
        customer.is_active = False
        await db.commit()

        with pytest.raises(ValidationError):
            await OrderService(db).create_order(customer.id, [line(product, 1)])


@pytest.mark.parametrize(
    "reserved, total, expected",
    [
        (2, 2, ReservationStatus.FULLY_RESERVED.value),
        (1, 2, ReservationStatus.PARTIALLY_RESERVED.value),
        (0, 2, ReservationStatus.UNRESERVED.value),
    ],
)
def test_reservation_outcome(reserved, total, expected):
    assert reservation_outcome(reserved, total) == expected


class TestLifecycle:
    @pytest.fixture
    async def order(self, db, customer, product, lot_factory):
        await lot_factory(product, 40)
        result = await OrderService(db).create_order(customer.id, [line(product, 15)])
        return result.order

    async def test_forward_transitions(self, db, order, user_id):
        service = OrderService(db)

        for status in (OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.READY):
            updated = await service.update_order_status(order.id, status, user_id)
            assert updated.status == status.value

    async def test_skipping_a_step(self, db, order):
        with pytest.raises(ConflictError):
            await OrderService(db).update_order_status(order.id, OrderStatus.READY)

    async def test_routes_own_in_transit(self, db, order):
        with pytest.raises(ConflictError):
            await OrderService(db).update_order_status(order.id, OrderStatus.IN_TRANSIT)

    async def test_cancel_releases_reservations(self, db, order, product):
        service = OrderService(db)
        lot_id = order.lines[0].lot_id

        cancelled = await service.cancel_order(order.id)

        assert cancelled.status == OrderStatus.CANCELLED.value
        assert cancelled.reservation_status == ReservationStatus.UNRESERVED.value
        assert cancelled.lines[0].reservation_status == LineReservationStatus.UNRESERVED.value
        assert await InventoryStore(db).get_aggregate_stock(product.id) == 40
        assert await InventoryStore(db).sum_movements(lot_id) == 40

        with pytest.raises(ConflictError):
            await service.cancel_order(order.id)


class TestStuckOrders:
    async def test_old_confirmed_and_preparing_only(self, db, customer, product):
        service = OrderService(db)
        now = datetime.now(timezone.utc)
        created = []
        for status, age_hours in [
            (OrderStatus.CONFIRMED, 30),
            (OrderStatus.PREPARING, 48),
            (OrderStatus.CONFIRMED, 2),
            (OrderStatus.READY, 72),
        ]:
            order = (await service.create_order(customer.id, [line(product, 1)])).order
            order.status = status.value
            order.created_at = now - timedelta(hours=age_hours)
            created.append(order)
        await db.commit()

        stuck = await service.find_stuck_orders()

        assert [o.id for o in stuck] == [created[1].id, created[0].id]
        recent = await service.find_stuck_orders(threshold_hours=1)
        assert [o.id for o in recent] == [created[1].id, created[0].id, created[2].id]
