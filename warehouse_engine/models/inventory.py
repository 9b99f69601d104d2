"""
Inventory Ledger Models.

Models for lot-level stock bookkeeping including:
- Lots with expiration dates (FEFO allocation)
- Append-only inventory movements
- Daily cycle counts
"""
from datetime import datetime, date, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    String, Integer, DateTime, ForeignKey, Index, Text, Date, CheckConstraint
)
from sqlalchemy.orm import Mapped, mapped_column

from warehouse_engine.database import Base
from warehouse_engine.db_types import UUIDType


# ============================================================================
# ENUMS
# ============================================================================

class LotStatus(str, Enum):
    """Status of a lot."""
    AVAILABLE = "AVAILABLE"
    RESERVED = "RESERVED"
    BLOCKED = "BLOCKED"
    QUARANTINE = "QUARANTINE"
    EXPIRED = "EXPIRED"


class MovementType(str, Enum):
    """Kind of stock movement."""
    IN = "IN"
    OUT = "OUT"
    ADJUST = "ADJUST"
    DAMAGE = "DAMAGE"
    RETURN = "RETURN"
    TRANSFER = "TRANSFER"


class ReferenceType(str, Enum):
    """Document a movement points back to."""
    RECEPTION_ORDER = "RECEPTION_ORDER"
    ORDER = "ORDER"
    CYCLE_COUNT = "CYCLE_COUNT"
    CUSTOMER_RETURN = "CUSTOMER_RETURN"


class CycleCountStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


# ============================================================================
# MODELS
# ============================================================================

class Lot(Base):
    """
    A batch of one product with a shared expiration date.

    Quantity only changes through inventory movements. Lots are never
    deleted, a consumed lot stays at zero.
    """
    __tablename__ = "lots"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_lots_quantity_non_negative"),
        Index("idx_lots_product_status", "product_id", "status"),
        Index("idx_lots_expiration", "expiration_date"),
    )

    id: Mapped[UUID] = mapped_column(UUIDType, primary_key=True, default=uuid4)
    product_id: Mapped[UUID] = mapped_column(
        UUIDType,
        ForeignKey("products.id"),
        nullable=False
    )
    lot_number: Mapped[str] = mapped_column(String(50), nullable=False)
    expiration_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str] = mapped_column(
        String(50),
        default="AVAILABLE",
        nullable=False,
        comment="AVAILABLE, RESERVED, BLOCKED, QUARANTINE, EXPIRED"
    )
    location: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    last_movement_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Lot(lot_number='{self.lot_number}', quantity={self.quantity}, status='{self.status}')>"


class InventoryMovement(Base):
    """
    Append-only stock movement.

    ``quantity`` is the signed delta; for every lot the deltas add up to
    the lot's current quantity.
    """
    __tablename__ = "inventory_movements"
    __table_args__ = (
        Index("idx_movements_lot", "lot_id", "created_at"),
        Index("idx_movements_reference", "reference_type", "reference_id"),
    )

    id: Mapped[UUID] = mapped_column(UUIDType, primary_key=True, default=uuid4)
    lot_id: Mapped[UUID] = mapped_column(
        UUIDType,
        ForeignKey("lots.id"),
        nullable=False
    )
    movement_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="IN, OUT, ADJUST, DAMAGE, RETURN, TRANSFER"
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    previous_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    new_quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    reference_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    reference_id: Mapped[Optional[UUID]] = mapped_column(UUIDType, nullable=True)

    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    evidence_ref: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    performed_by: Mapped[Optional[UUID]] = mapped_column(UUIDType, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<InventoryMovement(type='{self.movement_type}', quantity={self.quantity})>"


class CycleCount(Base):
    """Scheduled physical count of one product, compared against recorded stock."""
    __tablename__ = "cycle_counts"
    __table_args__ = (
        Index("idx_cycle_counts_status_date", "status", "scheduled_date"),
    )

    id: Mapped[UUID] = mapped_column(UUIDType, primary_key=True, default=uuid4)
    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    product_id: Mapped[UUID] = mapped_column(
        UUIDType,
        ForeignKey("products.id"),
        nullable=False
    )

    expected_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    counted_quantity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    variance: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    status: Mapped[str] = mapped_column(
        String(50),
        default="PENDING",
        nullable=False,
        comment="PENDING, COMPLETED"
    )
    counted_by: Mapped[Optional[UUID]] = mapped_column(UUIDType, nullable=True)
    counted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    adjusted_lot_id: Mapped[Optional[UUID]] = mapped_column(UUIDType, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<CycleCount(product_id='{self.product_id}', status='{self.status}')>"
