"""
Fleet registry, maintenance and the pre-departure gate.

Covers:
- Vehicle/driver registration and duplicates
- Maintenance puts the vehicle in the shop and schedules the next service
- Pre-departure checks: fuel minimum, tires, lights; nothing stored on failure
"""
import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest
from dateutil.relativedelta import relativedelta
from pydantic import ValidationError as PydanticValidationError

from warehouse_engine.core.exceptions import NotFoundError, ConflictError, SafetyViolationError
from warehouse_engine.models.fleet import VehicleStatus, DriverStatus
from warehouse_engine.schemas.fleet import (
    VehicleCreate, DriverCreate, MaintenanceCreate, PreDepartureCheckRequest,
)
from warehouse_engine.schemas.order import OrderLineCreate
from warehouse_engine.services.fleet_service import FleetService
from warehouse_engine.services.order_service import OrderService
from warehouse_engine.services.route_service import RouteService
from warehouse_engine.stores.fleet_store import FleetStore


def check(**overrides):
    values = dict(tire_condition="good", fuel_level=80, oil_level="ok", lights_ok=True)
    values.update(overrides)
    return PreDepartureCheckRequest(**values)


class TestRegistry:
    async def test_create_vehicle(self, db, user_id):
        vehicle = await FleetService(db).create_vehicle(
            VehicleCreate(plate_number="PUE-777", vehicle_type="torton", capacity_kg=Decimal("15000")),
            user_id,
        )

        assert vehicle.vehicle_type == "TORTON"
        assert vehicle.status == VehicleStatus.AVAILABLE.value

    async def test_duplicate_plate(self, db):
        service = FleetService(db)
        await service.create_vehicle(VehicleCreate(plate_number="PUE-777", vehicle_type="VAN"))

        with pytest.raises(ConflictError):
            await service.create_vehicle(VehicleCreate(plate_number="PUE-777", vehicle_type="VAN"))

    def test_unknown_vehicle_type(self):
        with pytest.raises(PydanticValidationError):
            VehicleCreate(plate_number="PUE-1", vehicle_type="BICYCLE")

    async def test_create_driver(self, db):
        service = FleetService(db)
        data = DriverCreate(
            name="Juan Perez", license_number="LIC-9",
            license_expiry=date.today() + timedelta(days=100),
        )
        driver = await service.create_driver(data)

        assert driver.status == DriverStatus.AVAILABLE.value
        with pytest.raises(ConflictError):
            await service.create_driver(data)


class TestMaintenance:
    async def test_vehicle_goes_to_shop(self, db, vehicle_factory, user_id):
        vehicle = await vehicle_factory()
        service = FleetService(db)

        maintenance = await service.register_maintenance(
            vehicle.id,
            MaintenanceCreate(maintenance_type="preventive", cost=Decimal("1500.00"), performed_by="Taller Norte"),
            user_id,
        )

        assert maintenance.maintenance_type == "PREVENTIVE"
        assert vehicle.status == VehicleStatus.IN_SHOP.value
        assert vehicle.last_maintenance_date == maintenance.start_date
        assert vehicle.next_maintenance_date == vehicle.last_maintenance_date + relativedelta(months=3)
        assert [m.id for m in await service.list_maintenance(vehicle.id)] == [maintenance.id]

    async def test_vehicle_in_shop_cannot_be_routed(self, db, vehicle_factory):
        vehicle = await vehicle_factory()
        await FleetService(db).register_maintenance(vehicle.id, MaintenanceCreate(maintenance_type="TIRES"))

        assert await FleetStore(db).list_available_vehicles() == []

    async def test_unknown_vehicle(self, db):
        with pytest.raises(NotFoundError):
            await FleetService(db).register_maintenance(uuid.uuid4(), MaintenanceCreate(maintenance_type="TIRES"))


class TestPreDeparture:
    @pytest.fixture
    async def route(self, db, customer, product, vehicle_factory, driver_factory):
        await vehicle_factory()
        await driver_factory()
        order = (await OrderService(db).create_order(
            customer.id, [OrderLineCreate(product_id=product.id, quantity=1)]
        )).order
        return (await RouteService(db).assign_route(order.id)).route

    async def test_passes_at_minimum_fuel(self, db, route, user_id):
        checklist = await FleetService(db).perform_pre_departure_check(route.id, check(fuel_level=25), user_id)

        assert checklist.route_id == route.id
        assert checklist.driver_id == route.driver_id
        assert checklist.tire_condition == "GOOD"
        assert checklist.checked_by == user_id

    async def test_low_fuel_stores_nothing(self, db, route):
        with pytest.raises(SafetyViolationError):
            await FleetService(db).perform_pre_departure_check(route.id, check(fuel_level=24))

        with pytest.raises(NotFoundError):
            await FleetService(db).get_pre_departure_check(route.id)

    async def test_bad_tires(self, db, route):
        with pytest.raises(SafetyViolationError):
            await FleetService(db).perform_pre_departure_check(route.id, check(tire_condition="BAD"))

    async def test_fair_tires_pass(self, db, route):
        checklist = await FleetService(db).perform_pre_departure_check(route.id, check(tire_condition="FAIR"))

        assert checklist.tire_condition == "FAIR"

    async def test_lights(self, db, route):
        with pytest.raises(SafetyViolationError):
            await FleetService(db).perform_pre_departure_check(route.id, check(lights_ok=False))

    async def test_unknown_route(self, db):
        with pytest.raises(NotFoundError):
            await FleetService(db).perform_pre_departure_check(uuid.uuid4(), check())

    async def test_latest_checklist_is_returned(self, db, route):
        service = FleetService(db)
        await service.perform_pre_departure_check(route.id, check(fuel_level=40))
        latest = await service.perform_pre_departure_check(route.id, check(fuel_level=90))

        assert (await service.get_pre_departure_check(route.id)).id == latest.id

    async def test_checklist_of_unknown_route(self, db):
        with pytest.raises(NotFoundError):
            await FleetService(db).get_pre_departure_check(uuid.uuid4())
