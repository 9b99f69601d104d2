"""
Fleet API Endpoints.

Vehicles, drivers, maintenance, route assignment and the pre-departure
safety check.
"""
from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, status

from warehouse_engine.api.deps import DB, CurrentUserId
from warehouse_engine.schemas.fleet import (
    VehicleCreate, VehicleResponse,
    DriverCreate, DriverResponse,
    RouteAssignRequest, RouteResponse, RouteAssignmentResponse, SagaStepResponse,
    InvoiceReferenceResponse,
    MaintenanceCreate, MaintenanceResponse,
    PreDepartureCheckRequest, ChecklistResponse,
)
from warehouse_engine.services.fleet_service import FleetService
from warehouse_engine.services.route_service import RouteService

router = APIRouter()


# ============================================================================
# VEHICLES
# ============================================================================

@router.post(
    "/vehicles",
    response_model=VehicleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register Vehicle"
)
async def create_vehicle(data: VehicleCreate, db: DB, user_id: CurrentUserId):
    service = FleetService(db)
    return await service.create_vehicle(data, user_id)


@router.get(
    "/vehicles",
    response_model=List[VehicleResponse],
    summary="List Vehicles"
)
async def list_vehicles(db: DB, status: Optional[str] = None):
    service = FleetService(db)
    return await service.list_vehicles(status.upper() if status else None)


@router.post(
    "/vehicles/{vehicle_id}/maintenance",
    response_model=MaintenanceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register Maintenance"
)
async def register_maintenance(vehicle_id: UUID, data: MaintenanceCreate, db: DB, user_id: CurrentUserId):
    """Sends the vehicle to the shop and schedules its next service."""
    service = FleetService(db)
    return await service.register_maintenance(vehicle_id, data, user_id)


@router.get(
    "/vehicles/{vehicle_id}/maintenance",
    response_model=List[MaintenanceResponse],
    summary="Maintenance History"
)
async def list_maintenance(vehicle_id: UUID, db: DB):
    service = FleetService(db)
    return await service.list_maintenance(vehicle_id)


# ============================================================================
# DRIVERS
# ============================================================================

@router.post(
    "/drivers",
    response_model=DriverResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register Driver"
)
async def create_driver(data: DriverCreate, db: DB, user_id: CurrentUserId):
    service = FleetService(db)
    return await service.create_driver(data, user_id)


@router.get(
    "/drivers",
    response_model=List[DriverResponse],
    summary="List Drivers"
)
async def list_drivers(db: DB, status: Optional[str] = None):
    service = FleetService(db)
    return await service.list_drivers(status.upper() if status else None)


# ============================================================================
# ROUTES
# ============================================================================

@router.post(
    "/routes",
    response_model=RouteAssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign Route"
)
async def assign_route(data: RouteAssignRequest, db: DB, user_id: CurrentUserId):
    """Vehicle and driver are picked automatically when omitted."""
    service = RouteService(db)
    result = await service.assign_route(
        order_id=data.order_id,
        vehicle_id=data.vehicle_id,
        driver_id=data.driver_id,
        route_type=data.route_type,
        departure_date=data.departure_date,
        estimated_arrival=data.estimated_arrival,
        user_id=user_id,
    )
    return RouteAssignmentResponse(
        route=RouteResponse.model_validate(result.route),
        auto_assigned_vehicle=result.auto_assigned_vehicle,
        auto_assigned_driver=result.auto_assigned_driver,
        auto_assigned=result.auto_assigned,
        steps=[SagaStepResponse.model_validate(step) for step in result.steps],
    )


@router.get(
    "/routes",
    response_model=List[RouteResponse],
    summary="List Routes"
)
async def list_routes(db: DB, status: Optional[str] = None):
    service = RouteService(db)
    return await service.list_routes(status.upper() if status else None)


@router.get(
    "/routes/{route_id}",
    response_model=RouteResponse,
    summary="Get Route"
)
async def get_route(route_id: UUID, db: DB):
    service = RouteService(db)
    return await service.get_route(route_id)


@router.post(
    "/routes/{route_id}/complete",
    response_model=RouteResponse,
    summary="Complete Route"
)
async def complete_route(route_id: UUID, db: DB, user_id: CurrentUserId):
    service = RouteService(db)
    return await service.complete_route(route_id, user_id)


@router.post(
    "/routes/{route_id}/cancel",
    response_model=RouteResponse,
    summary="Cancel Route"
)
async def cancel_route(route_id: UUID, db: DB, user_id: CurrentUserId):
    service = RouteService(db)
    return await service.cancel_route(route_id, user_id)


@router.post(
    "/routes/{route_id}/invoice",
    response_model=InvoiceReferenceResponse,
    summary="Generate Invoice Reference"
)
async def generate_invoice_reference(route_id: UUID, db: DB, user_id: CurrentUserId):
    service = RouteService(db)
    return await service.generate_invoice_reference(route_id, user_id)


@router.post(
    "/routes/{route_id}/pre-departure-check",
    response_model=ChecklistResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Pre-Departure Safety Check"
)
async def perform_pre_departure_check(
    route_id: UUID,
    data: PreDepartureCheckRequest,
    db: DB,
    user_id: CurrentUserId,
):
    """Rejected with 422 on low fuel, bad tires or faulty lights."""
    service = FleetService(db)
    return await service.perform_pre_departure_check(route_id, data, user_id)


@router.get(
    "/routes/{route_id}/pre-departure-check",
    response_model=ChecklistResponse,
    summary="Get Pre-Departure Check"
)
async def get_pre_departure_check(route_id: UUID, db: DB):
    service = FleetService(db)
    return await service.get_pre_departure_check(route_id)
