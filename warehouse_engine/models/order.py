"""
Outbound Order Models.

Orders carry the load-planning figures computed at creation (weight,
volume, suggested vehicle, loading alert) and the outcome of the FEFO
reservation for each line.
"""
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, List
from uuid import UUID, uuid4

from sqlalchemy import String, Integer, DateTime, ForeignKey, Numeric, Boolean, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from warehouse_engine.database import Base
from warehouse_engine.db_types import UUIDType


class OrderStatus(str, Enum):
    """Order lifecycle. IN_TRANSIT and DELIVERED are driven by routes."""
    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    READY = "READY"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class ReservationStatus(str, Enum):
    """Order-level outcome of the stock reservation."""
    FULLY_RESERVED = "FULLY_RESERVED"
    PARTIALLY_RESERVED = "PARTIALLY_RESERVED"
    UNRESERVED = "UNRESERVED"


class LineReservationStatus(str, Enum):
    RESERVED = "RESERVED"
    UNRESERVED = "UNRESERVED"


class Order(Base):
    """Customer order."""
    __tablename__ = "orders"
    __table_args__ = (
        Index("idx_orders_status_created", "status", "created_at"),
    )

    id: Mapped[UUID] = mapped_column(UUIDType, primary_key=True, default=uuid4)
    order_number: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    customer_id: Mapped[UUID] = mapped_column(
        UUIDType,
        ForeignKey("customers.id"),
        nullable=False,
        index=True
    )
    status: Mapped[str] = mapped_column(
        String(50),
        default="DRAFT",
        nullable=False,
        comment="DRAFT, CONFIRMED, PREPARING, READY, IN_TRANSIT, DELIVERED, CANCELLED"
    )

    # Load planning
    total_weight_kg: Mapped[Decimal] = mapped_column(Numeric(12, 3), default=Decimal("0"))
    total_volume_m3: Mapped[Decimal] = mapped_column(Numeric(12, 6), default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"))
    suggested_vehicle_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    has_fragile_items: Mapped[bool] = mapped_column(Boolean, default=False)
    has_heavy_items: Mapped[bool] = mapped_column(Boolean, default=False)
    loading_alert: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    reservation_status: Mapped[str] = mapped_column(
        String(50),
        default="UNRESERVED",
        nullable=False,
        comment="FULLY_RESERVED, PARTIALLY_RESERVED, UNRESERVED"
    )

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
    lines: Mapped[List["OrderLine"]] = relationship(
        "OrderLine",
        cascade="all, delete-orphan",
        order_by="OrderLine.line_number",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Order(order_number='{self.order_number}', status='{self.status}')>"


class OrderLine(Base):
    """One product on an order. ``lot_id`` is set only when a lot was reserved."""
    __tablename__ = "order_lines"

    id: Mapped[UUID] = mapped_column(UUIDType, primary_key=True, default=uuid4)
    order_id: Mapped[UUID] = mapped_column(
        UUIDType,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    line_number: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    product_id: Mapped[UUID] = mapped_column(
        UUIDType,
        ForeignKey("products.id"),
        nullable=False
    )
    lot_id: Mapped[Optional[UUID]] = mapped_column(UUIDType, nullable=True)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    subtotal: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"))
    reservation_status: Mapped[str] = mapped_column(
        String(50),
        default="UNRESERVED",
        nullable=False,
        comment="RESERVED, UNRESERVED"
    )

    def __repr__(self) -> str:
        return f"<OrderLine(product_id='{self.product_id}', quantity={self.quantity})>"
