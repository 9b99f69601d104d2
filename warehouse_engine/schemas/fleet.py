"""Pydantic schemas for vehicles, drivers, routes and fleet safety."""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
import uuid

from pydantic import Field

from warehouse_engine.core.enum_utils import create_uppercase_validator, enum_values
from warehouse_engine.models.fleet import (
    VehicleType, RouteType, MaintenanceType, TireCondition, OilLevel,
)
from warehouse_engine.schemas.base import BaseResponseSchema, BaseCreateSchema


VALID_VEHICLE_TYPES = set(enum_values(VehicleType))
VALID_ROUTE_TYPES = set(enum_values(RouteType))
VALID_MAINTENANCE_TYPES = set(enum_values(MaintenanceType))
VALID_TIRE_CONDITIONS = set(enum_values(TireCondition))
VALID_OIL_LEVELS = set(enum_values(OilLevel))


# ==================== VEHICLE SCHEMAS ====================

class VehicleCreate(BaseCreateSchema):
    plate_number: str = Field(..., min_length=1, max_length=20)
    vehicle_type: VehicleType
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    capacity_kg: Decimal = Field(Decimal("0"), ge=0)
    capacity_m3: Decimal = Field(Decimal("0"), ge=0)

    normalize_type = create_uppercase_validator('vehicle_type', VALID_VEHICLE_TYPES)


class VehicleResponse(BaseResponseSchema):
    id: uuid.UUID
    plate_number: str
    vehicle_type: str
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    capacity_kg: Decimal
    capacity_m3: Decimal
    status: str
    last_maintenance_date: Optional[datetime] = None
    next_maintenance_date: Optional[datetime] = None
    is_active: bool


# ==================== DRIVER SCHEMAS ====================

class DriverCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=200)
    license_number: str = Field(..., min_length=1, max_length=50)
    license_expiry: date
    phone: Optional[str] = None


class DriverResponse(BaseResponseSchema):
    id: uuid.UUID
    name: str
    license_number: str
    license_expiry: date
    phone: Optional[str] = None
    status: str
    is_active: bool


# ==================== ROUTE SCHEMAS ====================

class RouteAssignRequest(BaseCreateSchema):
    """Omit vehicle_id / driver_id to let the engine pick them."""
    order_id: uuid.UUID
    vehicle_id: Optional[uuid.UUID] = None
    driver_id: Optional[uuid.UUID] = None
    route_type: RouteType = RouteType.LOCAL
    departure_date: Optional[datetime] = None
    estimated_arrival: Optional[datetime] = None

    normalize_route_type = create_uppercase_validator('route_type', VALID_ROUTE_TYPES)


class RouteResponse(BaseResponseSchema):
    id: uuid.UUID
    route_number: str
    order_id: uuid.UUID
    vehicle_id: uuid.UUID
    driver_id: uuid.UUID
    route_type: str
    departure_date: Optional[datetime] = None
    estimated_arrival: Optional[datetime] = None
    actual_arrival: Optional[datetime] = None
    status: str
    invoice_ref: Optional[str] = None
    assigned_by: Optional[uuid.UUID] = None
    created_at: datetime


class SagaStepResponse(BaseResponseSchema):
    name: str
    status: str
    detail: Optional[str] = None


class RouteAssignmentResponse(BaseResponseSchema):
    route: RouteResponse
    auto_assigned_vehicle: bool
    auto_assigned_driver: bool
    auto_assigned: bool
    steps: List[SagaStepResponse] = []


class InvoiceReferenceResponse(BaseResponseSchema):
    route_id: uuid.UUID
    route_number: str
    order_number: str
    customer_name: str
    line_count: int
    invoice_ref: str


# ==================== MAINTENANCE / CHECKLIST ====================

class MaintenanceCreate(BaseCreateSchema):
    maintenance_type: MaintenanceType
    description: Optional[str] = None
    cost: Decimal = Field(Decimal("0"), ge=0)
    performed_by: Optional[str] = None

    normalize_type = create_uppercase_validator('maintenance_type', VALID_MAINTENANCE_TYPES)


class MaintenanceResponse(BaseResponseSchema):
    id: uuid.UUID
    vehicle_id: uuid.UUID
    maintenance_type: str
    description: Optional[str] = None
    cost: Decimal
    start_date: datetime
    end_date: Optional[datetime] = None
    performed_by: Optional[str] = None


class PreDepartureCheckRequest(BaseCreateSchema):
    """Gate checks (fuel, tires, lights) are enforced by the service."""
    tire_condition: TireCondition
    fuel_level: int = Field(..., ge=0, le=100)
    oil_level: OilLevel
    lights_ok: bool
    damage_evidence_ref: Optional[str] = None
    notes: Optional[str] = None

    normalize_tires = create_uppercase_validator('tire_condition', VALID_TIRE_CONDITIONS)
    normalize_oil = create_uppercase_validator('oil_level', VALID_OIL_LEVELS)


class ChecklistResponse(BaseResponseSchema):
    id: uuid.UUID
    route_id: uuid.UUID
    driver_id: uuid.UUID
    tire_condition: str
    fuel_level: int
    oil_level: str
    lights_ok: bool
    damage_evidence_ref: Optional[str] = None
    notes: Optional[str] = None
    checked_by: Optional[uuid.UUID] = None
    checked_at: datetime
