"""
Persistence access for vehicles, drivers and routes.

Claims and releases are conditional single-row UPDATEs: two callers racing
for the same vehicle can never both see a matched row.
"""
import uuid
from datetime import date
from typing import Optional, List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_engine.models.fleet import (
    Vehicle, VehicleStatus, Driver, DriverStatus, Route,
    VehicleMaintenance, PreDepartureChecklist,
)


class FleetStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, entity):
        self.db.add(entity)
        await self.db.flush()
        return entity

    # ------------------------------------------------------------------
    # Vehicles
    # ------------------------------------------------------------------

    async def get_vehicle(self, vehicle_id: uuid.UUID) -> Optional[Vehicle]:
        return await self.db.get(Vehicle, vehicle_id)

    async def get_vehicle_by_plate(self, plate_number: str) -> Optional[Vehicle]:
        result = await self.db.execute(select(Vehicle).where(Vehicle.plate_number == plate_number))
        return result.scalar_one_or_none()

    async def list_vehicles(self, status: Optional[str] = None) -> List[Vehicle]:
        stmt = select(Vehicle)
        if status:
            stmt = stmt.where(Vehicle.status == status)
        result = await self.db.execute(stmt.order_by(Vehicle.plate_number))
        return list(result.scalars().all())

    async def list_available_vehicles(self) -> List[Vehicle]:
        result = await self.db.execute(
            select(Vehicle)
            .where(
                Vehicle.status == VehicleStatus.AVAILABLE.value,
                Vehicle.is_active == True,
            )
            .order_by(Vehicle.created_at, Vehicle.id)
        )
        return list(result.scalars().all())

    async def claim_vehicle(self, vehicle_id: uuid.UUID) -> bool:
        """AVAILABLE -> ON_ROUTE. False if someone else got there first."""
        result = await self.db.execute(
            update(Vehicle)
            .where(
                Vehicle.id == vehicle_id,
                Vehicle.status == VehicleStatus.AVAILABLE.value,
                Vehicle.is_active == True,
            )
            .values(status=VehicleStatus.ON_ROUTE.value)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def release_vehicle(self, vehicle_id: uuid.UUID) -> bool:
        """ON_ROUTE -> AVAILABLE."""
        result = await self.db.execute(
            update(Vehicle)
            .where(
                Vehicle.id == vehicle_id,
                Vehicle.status == VehicleStatus.ON_ROUTE.value,
            )
            .values(status=VehicleStatus.AVAILABLE.value)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # ------------------------------------------------------------------
    # Drivers
    # ------------------------------------------------------------------

    async def get_driver(self, driver_id: uuid.UUID) -> Optional[Driver]:
        return await self.db.get(Driver, driver_id)

    async def get_driver_by_license(self, license_number: str) -> Optional[Driver]:
        result = await self.db.execute(select(Driver).where(Driver.license_number == license_number))
        return result.scalar_one_or_none()

    async def list_drivers(self, status: Optional[str] = None) -> List[Driver]:
        stmt = select(Driver)
        if status:
            stmt = stmt.where(Driver.status == status)
        result = await self.db.execute(stmt.order_by(Driver.name))
        return list(result.scalars().all())

    async def list_available_drivers(self, today: date) -> List[Driver]:
        """Drivers free to take a route: AVAILABLE, active, license valid past today."""
        result = await self.db.execute(
            select(Driver)
            .where(
                Driver.status == DriverStatus.AVAILABLE.value,
                Driver.is_active == True,
                Driver.license_expiry > today,
            )
            .order_by(Driver.created_at, Driver.id)
        )
        return list(result.scalars().all())

    async def claim_driver(self, driver_id: uuid.UUID, today: date) -> bool:
        result = await self.db.execute(
            update(Driver)
            .where(
                Driver.id == driver_id,
                Driver.status == DriverStatus.AVAILABLE.value,
                Driver.is_active == True,
                Driver.license_expiry > today,
            )
            .values(status=DriverStatus.ON_ROUTE.value)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def release_driver(self, driver_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            update(Driver)
            .where(
                Driver.id == driver_id,
                Driver.status == DriverStatus.ON_ROUTE.value,
            )
            .values(status=DriverStatus.AVAILABLE.value)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # ------------------------------------------------------------------
    # Routes, maintenance, checklists
    # ------------------------------------------------------------------

    async def get_route(self, route_id: uuid.UUID) -> Optional[Route]:
        return await self.db.get(Route, route_id)

    async def list_routes(self, status: Optional[str] = None) -> List[Route]:
        stmt = select(Route)
        if status:
            stmt = stmt.where(Route.status == status)
        result = await self.db.execute(stmt.order_by(Route.created_at.desc()))
        return list(result.scalars().all())

    async def list_maintenance(self, vehicle_id: uuid.UUID) -> List[VehicleMaintenance]:
        result = await self.db.execute(
            select(VehicleMaintenance)
            .where(VehicleMaintenance.vehicle_id == vehicle_id)
            .order_by(VehicleMaintenance.start_date.desc())
        )
        return list(result.scalars().all())

    async def get_checklist_by_route(self, route_id: uuid.UUID) -> Optional[PreDepartureChecklist]:
        result = await self.db.execute(
            select(PreDepartureChecklist)
            .where(PreDepartureChecklist.route_id == route_id)
            .order_by(PreDepartureChecklist.checked_at.desc())
        )
        return result.scalars().first()
