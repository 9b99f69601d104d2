"""
Inbound Reception Models.

Reception orders are counted blind: the counter never sees expected
quantities, and every mismatch becomes a discrepancy that must be reviewed
before the stock is put away.
"""
from datetime import datetime, date, timezone
from enum import Enum
from typing import Optional, List
from uuid import UUID, uuid4

from sqlalchemy import String, Integer, DateTime, ForeignKey, Text, Date, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from warehouse_engine.database import Base
from warehouse_engine.db_types import UUIDType


class ReceptionStatus(str, Enum):
    """Status of a reception order."""
    PENDING = "PENDING"
    COUNTING = "COUNTING"
    VALIDATED = "VALIDATED"
    HAS_DISCREPANCY = "HAS_DISCREPANCY"
    COMPLETED = "COMPLETED"


class ProductCondition(str, Enum):
    """Physical condition of received or returned goods."""
    FIT = "FIT"
    SCRAP = "SCRAP"
    QUARANTINE = "QUARANTINE"


class DiscrepancyStatus(str, Enum):
    DETECTED = "DETECTED"
    IN_REVIEW = "IN_REVIEW"
    RESOLVED = "RESOLVED"
    ACCEPTED = "ACCEPTED"


class ReceptionOrder(Base):
    """Inbound delivery from one supplier."""
    __tablename__ = "reception_orders"
    __table_args__ = (
        Index("idx_reception_orders_status", "status"),
    )

    id: Mapped[UUID] = mapped_column(UUIDType, primary_key=True, default=uuid4)
    order_number: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    supplier_id: Mapped[UUID] = mapped_column(
        UUIDType,
        ForeignKey("suppliers.id"),
        nullable=False
    )
    brand: Mapped[str] = mapped_column(String(50), nullable=False)
    invoice_ref: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(
        String(50),
        default="PENDING",
        nullable=False,
        comment="PENDING, COUNTING, VALIDATED, HAS_DISCREPANCY, COMPLETED"
    )

    received_by: Mapped[Optional[UUID]] = mapped_column(UUIDType, nullable=True)
    received_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    validated_by: Mapped[Optional[UUID]] = mapped_column(UUIDType, nullable=True)
    validated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[UUID]] = mapped_column(UUIDType, nullable=True)

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

    # Relationships
    lines: Mapped[List["ReceptionLine"]] = relationship(
        "ReceptionLine",
        cascade="all, delete-orphan",
        order_by="ReceptionLine.line_number",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<ReceptionOrder(order_number='{self.order_number}', status='{self.status}')>"


class ReceptionLine(Base):
    """Expected vs. counted quantity for one product in a reception order."""
    __tablename__ = "reception_lines"

    id: Mapped[UUID] = mapped_column(UUIDType, primary_key=True, default=uuid4)
    reception_order_id: Mapped[UUID] = mapped_column(
        UUIDType,
        ForeignKey("reception_orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    line_number: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    product_id: Mapped[UUID] = mapped_column(
        UUIDType,
        ForeignKey("products.id"),
        nullable=False
    )

    expected_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    counted_quantity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    condition: Mapped[str] = mapped_column(
        String(50),
        default="FIT",
        nullable=False,
        comment="FIT, SCRAP, QUARANTINE"
    )
    lot_number: Mapped[str] = mapped_column(String(50), nullable=False)
    expiration_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    counted_by: Mapped[Optional[UUID]] = mapped_column(UUIDType, nullable=True)
    counted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    lot_id: Mapped[Optional[UUID]] = mapped_column(UUIDType, nullable=True)

    def __repr__(self) -> str:
        return f"<ReceptionLine(lot_number='{self.lot_number}', expected={self.expected_quantity})>"


class ReceptionDiscrepancy(Base):
    """Mismatch between expected and counted quantity on a line. At most one per line."""
    __tablename__ = "reception_discrepancies"

    id: Mapped[UUID] = mapped_column(UUIDType, primary_key=True, default=uuid4)
    reception_order_id: Mapped[UUID] = mapped_column(
        UUIDType,
        ForeignKey("reception_orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    reception_line_id: Mapped[UUID] = mapped_column(
        UUIDType,
        ForeignKey("reception_lines.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )

    expected_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    counted_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    difference: Mapped[int] = mapped_column(Integer, nullable=False)  # counted - expected

    status: Mapped[str] = mapped_column(
        String(50),
        default="DETECTED",
        nullable=False,
        comment="DETECTED, IN_REVIEW, RESOLVED, ACCEPTED"
    )
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resolved_by: Mapped[Optional[UUID]] = mapped_column(UUIDType, nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<ReceptionDiscrepancy(difference={self.difference}, status='{self.status}')>"
