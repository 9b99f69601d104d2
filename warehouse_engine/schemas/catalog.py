"""Pydantic schemas for products, suppliers and customers."""
from datetime import datetime
from decimal import Decimal
from typing import Optional
import uuid

from pydantic import Field

from warehouse_engine.core.enum_utils import create_uppercase_validator, enum_values
from warehouse_engine.models.catalog import Brand
from warehouse_engine.schemas.base import BaseResponseSchema, BaseCreateSchema


VALID_BRANDS = set(enum_values(Brand))


# ==================== PRODUCT SCHEMAS ====================

class ProductCreate(BaseCreateSchema):
    """Product creation schema."""
    sku: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    brand: Brand
    category: str = Field(..., min_length=1, max_length=100)
    barcode: Optional[str] = Field(None, max_length=50)

    weight_kg: Decimal = Field(Decimal("0"), ge=0)
    length_cm: Decimal = Field(Decimal("0"), ge=0)
    width_cm: Decimal = Field(Decimal("0"), ge=0)
    height_cm: Decimal = Field(Decimal("0"), ge=0)
    is_fragile: bool = False
    unit_price: Decimal = Field(Decimal("0"), ge=0)

    normalize_brand = create_uppercase_validator('brand', VALID_BRANDS)


class ProductActiveUpdate(BaseCreateSchema):
    is_active: bool


class ProductResponse(BaseResponseSchema):
    id: uuid.UUID
    sku: str
    name: str
    brand: str
    category: str
    barcode: Optional[str] = None
    weight_kg: Decimal
    length_cm: Decimal
    width_cm: Decimal
    height_cm: Decimal
    volume_m3: Decimal
    is_fragile: bool
    unit_price: Decimal
    is_active: bool
    created_at: datetime


# ==================== SUPPLIER SCHEMAS ====================

class SupplierCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=200)
    brand: Brand
    tax_id: Optional[str] = Field(None, max_length=20)
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    normalize_brand = create_uppercase_validator('brand', VALID_BRANDS)


class SupplierResponse(BaseResponseSchema):
    id: uuid.UUID
    name: str
    brand: str
    tax_id: Optional[str] = None
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: bool


# ==================== CUSTOMER SCHEMAS ====================

class CustomerCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=200)
    tax_id: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = Field(None, max_length=10)
    phone: Optional[str] = None
    email: Optional[str] = None
    credit_limit: Decimal = Field(Decimal("0"), ge=0)
    is_active: bool = True


class CustomerResponse(BaseResponseSchema):
    id: uuid.UUID
    name: str
    tax_id: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    credit_limit: Decimal
    is_active: bool
