"""
Fleet Service.

Vehicle and driver registry, maintenance intake and the pre-departure
safety gate. Route assignment itself lives in route_service.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, List

from dateutil.relativedelta import relativedelta
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_engine.config import settings
from warehouse_engine.core.exceptions import NotFoundError, ConflictError, SafetyViolationError
from warehouse_engine.models.fleet import (
    Vehicle, VehicleStatus, Driver, DriverStatus, VehicleMaintenance,
    PreDepartureChecklist, TireCondition,
)
from warehouse_engine.schemas.fleet import (
    VehicleCreate, DriverCreate, MaintenanceCreate, PreDepartureCheckRequest,
)
from warehouse_engine.services.audit_service import AuditService
from warehouse_engine.stores.fleet_store import FleetStore


logger = logging.getLogger(__name__)


class FleetService:

    def __init__(self, db: AsyncSession, audit: Optional[AuditService] = None):
        self.db = db
        self.store = FleetStore(db)
        self.audit = audit or AuditService(db)

    # ==================== VEHICLES ====================

    async def create_vehicle(self, data: VehicleCreate, user_id: Optional[uuid.UUID] = None) -> Vehicle:
        if await self.store.get_vehicle_by_plate(data.plate_number):
            raise ConflictError(f"Vehicle with plate {data.plate_number} already exists")

        vehicle_data = data.model_dump()
        vehicle_data["vehicle_type"] = data.vehicle_type.value
        vehicle = await self.store.add(Vehicle(status=VehicleStatus.AVAILABLE.value, **vehicle_data))

        await self.audit.record(
            user_id, "CREATE_VEHICLE", "VEHICLE", vehicle.id,
            new_values={"plate_number": vehicle.plate_number, "vehicle_type": vehicle.vehicle_type},
        )
        await self.db.commit()
        logger.info(f"Registered vehicle {vehicle.plate_number} ({vehicle.vehicle_type})")
        return vehicle

    async def get_vehicle(self, vehicle_id: uuid.UUID) -> Vehicle:
        vehicle = await self.store.get_vehicle(vehicle_id)
        if not vehicle:
            raise NotFoundError(f"Vehicle {vehicle_id} not found")
        return vehicle

    async def list_vehicles(self, status: Optional[str] = None) -> List[Vehicle]:
        return await self.store.list_vehicles(status)

    # ==================== DRIVERS ====================

    async def create_driver(self, data: DriverCreate, user_id: Optional[uuid.UUID] = None) -> Driver:
        if await self.store.get_driver_by_license(data.license_number):
            raise ConflictError(f"Driver with license {data.license_number} already exists")

        driver = await self.store.add(Driver(status=DriverStatus.AVAILABLE.value, **data.model_dump()))

        await self.audit.record(
            user_id, "CREATE_DRIVER", "DRIVER", driver.id,
            new_values={"name": driver.name, "license_number": driver.license_number},
        )
        await self.db.commit()
        logger.info(f"Registered driver {driver.name}")
        return driver

    async def get_driver(self, driver_id: uuid.UUID) -> Driver:
        driver = await self.store.get_driver(driver_id)
        if not driver:
            raise NotFoundError(f"Driver {driver_id} not found")
        return driver

    async def list_drivers(self, status: Optional[str] = None) -> List[Driver]:
        return await self.store.list_drivers(status)

    # ==================== MAINTENANCE ====================

    async def register_maintenance(
        self,
        vehicle_id: uuid.UUID,
        data: MaintenanceCreate,
        user_id: Optional[uuid.UUID] = None,
    ) -> VehicleMaintenance:
        """
        Send a vehicle to the shop.

        The vehicle goes IN_SHOP and its next service is scheduled
        MAINTENANCE_INTERVAL_MONTHS calendar months from now.
        """
        vehicle = await self.get_vehicle(vehicle_id)
        now = datetime.now(timezone.utc)

        maintenance = await self.store.add(VehicleMaintenance(
            vehicle_id=vehicle.id,
            maintenance_type=data.maintenance_type.value,
            description=data.description,
            cost=data.cost,
            start_date=now,
            performed_by=data.performed_by,
        ))

        old_status = vehicle.status
        vehicle.status = VehicleStatus.IN_SHOP.value
        vehicle.last_maintenance_date = now
        vehicle.next_maintenance_date = now + relativedelta(months=settings.MAINTENANCE_INTERVAL_MONTHS)

        await self.audit.record(
            user_id, "REGISTER_MAINTENANCE", "VEHICLE", vehicle.id,
            old_values={"status": old_status},
            new_values={
                "status": vehicle.status,
                "maintenance_type": maintenance.maintenance_type,
                "cost": maintenance.cost,
                "next_maintenance_date": vehicle.next_maintenance_date,
            },
        )
        await self.db.commit()
        logger.info(f"Vehicle {vehicle.plate_number} in shop for {maintenance.maintenance_type}")
        return maintenance

    async def list_maintenance(self, vehicle_id: uuid.UUID) -> List[VehicleMaintenance]:
        await self.get_vehicle(vehicle_id)
        return await self.store.list_maintenance(vehicle_id)

    # ==================== PRE-DEPARTURE ====================

    async def perform_pre_departure_check(
        self,
        route_id: uuid.UUID,
        data: PreDepartureCheckRequest,
        user_id: Optional[uuid.UUID] = None,
    ) -> PreDepartureChecklist:
        """
        Safety gate before a route leaves.

        Raises:
            NotFoundError: unknown route
            SafetyViolationError: low fuel, bad tires or faulty lights.
                Nothing is stored in that case.
        """
        route = await self.store.get_route(route_id)
        if not route:
            raise NotFoundError(f"Route {route_id} not found")

        if data.fuel_level < settings.MIN_DEPARTURE_FUEL_LEVEL:
            raise SafetyViolationError(
                f"Fuel level {data.fuel_level}% is below the "
                f"{settings.MIN_DEPARTURE_FUEL_LEVEL}% departure minimum"
            )
        if data.tire_condition == TireCondition.BAD:
            raise SafetyViolationError("Tires in BAD condition, vehicle cannot depart")
        if not data.lights_ok:
            raise SafetyViolationError("Lights are not working, vehicle cannot depart")

        checklist = await self.store.add(PreDepartureChecklist(
            route_id=route.id,
            driver_id=route.driver_id,
            tire_condition=data.tire_condition.value,
            fuel_level=data.fuel_level,
            oil_level=data.oil_level.value,
            lights_ok=data.lights_ok,
            damage_evidence_ref=data.damage_evidence_ref,
            notes=data.notes,
            checked_by=user_id,
        ))

        await self.audit.record(
            user_id, "PRE_DEPARTURE_CHECK", "ROUTE", route.id,
            new_values={
                "tire_condition": checklist.tire_condition,
                "fuel_level": checklist.fuel_level,
                "oil_level": checklist.oil_level,
                "lights_ok": checklist.lights_ok,
            },
        )
        await self.db.commit()
        logger.info(f"Pre-departure check passed for route {route.route_number}")
        return checklist

    async def get_pre_departure_check(self, route_id: uuid.UUID) -> PreDepartureChecklist:
        """Latest passed checklist of a route."""
        route = await self.store.get_route(route_id)
        if not route:
            raise NotFoundError(f"Route {route_id} not found")
        checklist = await self.store.get_checklist_by_route(route.id)
        if not checklist:
            raise NotFoundError(f"Route {route.route_number} has no pre-departure check")
        return checklist
