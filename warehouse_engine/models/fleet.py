"""
Fleet & Route Models.

Vehicles and drivers are claimed by routes; a route keeps them ON_ROUTE
until it is delivered or cancelled.
"""
from datetime import datetime, date, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    String, Integer, DateTime, ForeignKey, Numeric, Boolean, Date, Text, Index
)
from sqlalchemy.orm import Mapped, mapped_column

from warehouse_engine.database import Base
from warehouse_engine.db_types import UUIDType


# ============================================================================
# ENUMS
# ============================================================================

class VehicleType(str, Enum):
    VAN = "VAN"
    PICKUP = "PICKUP"
    TRUCK_3_5T = "TRUCK_3_5T"
    TORTON = "TORTON"


class VehicleStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    ON_ROUTE = "ON_ROUTE"
    IN_SHOP = "IN_SHOP"
    OUT_OF_SERVICE = "OUT_OF_SERVICE"


class DriverStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    ON_ROUTE = "ON_ROUTE"
    REST = "REST"
    ON_LEAVE = "ON_LEAVE"


class RouteType(str, Enum):
    LOCAL = "LOCAL"
    REGIONAL = "REGIONAL"


class RouteStatus(str, Enum):
    """Route lifecycle, using the order delivery vocabulary."""
    CONFIRMED = "CONFIRMED"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class MaintenanceType(str, Enum):
    PREVENTIVE = "PREVENTIVE"
    CORRECTIVE = "CORRECTIVE"
    TIRES = "TIRES"


class TireCondition(str, Enum):
    GOOD = "GOOD"
    FAIR = "FAIR"
    BAD = "BAD"


class OilLevel(str, Enum):
    OK = "OK"
    LOW = "LOW"


# ============================================================================
# MODELS
# ============================================================================

class Vehicle(Base):
    """Delivery vehicle."""
    __tablename__ = "vehicles"
    __table_args__ = (
        Index("idx_vehicles_status", "status", "is_active"),
    )

    id: Mapped[UUID] = mapped_column(UUIDType, primary_key=True, default=uuid4)
    plate_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    vehicle_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="VAN, PICKUP, TRUCK_3_5T, TORTON"
    )
    make: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    capacity_kg: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    capacity_m3: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    status: Mapped[str] = mapped_column(
        String(50),
        default="AVAILABLE",
        nullable=False,
        comment="AVAILABLE, ON_ROUTE, IN_SHOP, OUT_OF_SERVICE"
    )
    last_maintenance_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )
    next_maintenance_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Vehicle(plate='{self.plate_number}', type='{self.vehicle_type}', status='{self.status}')>"


class Driver(Base):
    """Licensed driver. Only drivers with an unexpired license may take a route."""
    __tablename__ = "drivers"

    id: Mapped[UUID] = mapped_column(UUIDType, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    license_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    license_expiry: Mapped[date] = mapped_column(Date, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    status: Mapped[str] = mapped_column(
        String(50),
        default="AVAILABLE",
        nullable=False,
        comment="AVAILABLE, ON_ROUTE, REST, ON_LEAVE"
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Driver(name='{self.name}', status='{self.status}')>"


class Route(Base):
    """Delivery trip of one order with one vehicle and one driver."""
    __tablename__ = "routes"

    id: Mapped[UUID] = mapped_column(UUIDType, primary_key=True, default=uuid4)
    route_number: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    order_id: Mapped[UUID] = mapped_column(
        UUIDType,
        ForeignKey("orders.id"),
        nullable=False,
        index=True
    )
    vehicle_id: Mapped[UUID] = mapped_column(
        UUIDType,
        ForeignKey("vehicles.id"),
        nullable=False
    )
    driver_id: Mapped[UUID] = mapped_column(
        UUIDType,
        ForeignKey("drivers.id"),
        nullable=False
    )
    route_type: Mapped[str] = mapped_column(
        String(50),
        default="LOCAL",
        nullable=False,
        comment="LOCAL, REGIONAL"
    )
    departure_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    estimated_arrival: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    actual_arrival: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(
        String(50),
        default="CONFIRMED",
        nullable=False,
        comment="CONFIRMED, IN_TRANSIT, DELIVERED, CANCELLED"
    )
    invoice_ref: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    assigned_by: Mapped[Optional[UUID]] = mapped_column(UUIDType, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Route(route_number='{self.route_number}', status='{self.status}')>"


class VehicleMaintenance(Base):
    __tablename__ = "vehicle_maintenance"

    id: Mapped[UUID] = mapped_column(UUIDType, primary_key=True, default=uuid4)
    vehicle_id: Mapped[UUID] = mapped_column(
        UUIDType,
        ForeignKey("vehicles.id"),
        nullable=False,
        index=True
    )
    maintenance_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="PREVENTIVE, CORRECTIVE, TIRES"
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    performed_by: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )


class PreDepartureChecklist(Base):
    """Safety checklist stored only when every gate passed."""
    __tablename__ = "pre_departure_checklists"

    id: Mapped[UUID] = mapped_column(UUIDType, primary_key=True, default=uuid4)
    route_id: Mapped[UUID] = mapped_column(
        UUIDType,
        ForeignKey("routes.id"),
        nullable=False,
        index=True
    )
    driver_id: Mapped[UUID] = mapped_column(UUIDType, nullable=False)
    tire_condition: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="GOOD, FAIR, BAD"
    )
    fuel_level: Mapped[int] = mapped_column(Integer, nullable=False)
    oil_level: Mapped[str] = mapped_column(String(50), nullable=False, comment="OK, LOW")
    lights_ok: Mapped[bool] = mapped_column(Boolean, nullable=False)
    damage_evidence_ref: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    checked_by: Mapped[Optional[UUID]] = mapped_column(UUIDType, nullable=True)
    checked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
