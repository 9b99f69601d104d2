"""
Catalog & party registry models.

Products, suppliers and customers are static reference data that the
reception, inventory and order workflows look up by id.
"""
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import String, Boolean, DateTime, Numeric, Index
from sqlalchemy.orm import Mapped, mapped_column

from warehouse_engine.database import Base
from warehouse_engine.db_types import UUIDType


class Brand(str, Enum):
    """Brands handled by the warehouse."""
    COSTENA = "COSTENA"
    JUMEX = "JUMEX"
    PRONTO = "PRONTO"
    LA_COSTENA = "LA_COSTENA"
    OTHER = "OTHER"


class Product(Base):
    """
    Product master.

    Physical dimensions drive load planning: volume in cubic metres is
    derived from the centimetre dimensions.
    """
    __tablename__ = "products"
    __table_args__ = (
        Index("idx_products_brand", "brand"),
        Index("idx_products_category", "category"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    sku: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    brand: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="COSTENA, JUMEX, PRONTO, LA_COSTENA, OTHER"
    )
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    barcode: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Physical attributes
    weight_kg: Mapped[Decimal] = mapped_column(Numeric(10, 3), default=Decimal("0"))
    length_cm: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    width_cm: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    height_cm: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    is_fragile: Mapped[bool] = mapped_column(Boolean, default=False)

    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
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

    @property
    def volume_m3(self) -> Decimal:
        """Unit volume in cubic metres (L x W x H / 1,000,000)."""
        return (
            Decimal(self.length_cm or 0)
            * Decimal(self.width_cm or 0)
            * Decimal(self.height_cm or 0)
        ) / Decimal(1_000_000)

    def __repr__(self) -> str:
        return f"<Product(sku='{self.sku}', brand='{self.brand}')>"


class Supplier(Base):
    """Supplier of inbound goods. Each supplier ships a single brand."""
    __tablename__ = "suppliers"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    brand: Mapped[str] = mapped_column(String(50), nullable=False)
    tax_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    contact_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Supplier(name='{self.name}', brand='{self.brand}')>"


class Customer(Base):
    """Customer receiving outbound orders."""
    __tablename__ = "customers"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    tax_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    postal_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    credit_limit: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Customer(name='{self.name}')>"
