"""Pydantic schemas for lots, movements, stock and cycle counts."""
from datetime import date, datetime
from typing import Optional, List
import uuid

from pydantic import Field

from warehouse_engine.core.enum_utils import create_uppercase_validator
from warehouse_engine.schemas.base import BaseResponseSchema, BaseCreateSchema


RETURN_CONDITIONS = {"FIT", "SCRAP"}


class LotResponse(BaseResponseSchema):
    id: uuid.UUID
    product_id: uuid.UUID
    lot_number: str
    expiration_date: Optional[date] = None
    quantity: int
    status: str
    location: Optional[str] = None
    last_movement_at: Optional[datetime] = None
    created_at: datetime


class MovementResponse(BaseResponseSchema):
    id: uuid.UUID
    lot_id: uuid.UUID
    movement_type: str
    quantity: int
    previous_quantity: int
    new_quantity: int
    reference_type: Optional[str] = None
    reference_id: Optional[uuid.UUID] = None
    reason: Optional[str] = None
    evidence_ref: Optional[str] = None
    performed_by: Optional[uuid.UUID] = None
    created_at: datetime


class FefoLotResponse(BaseResponseSchema):
    """Lot in FEFO order with its expiry alert."""
    lot: LotResponse
    days_until_expiration: Optional[int] = None
    alert: Optional[str] = None


class StockItemResponse(BaseResponseSchema):
    product_id: uuid.UUID
    sku: str
    product_name: str
    brand: str
    category: str
    total_stock: int
    available_stock: int
    reserved_stock: int
    low_stock_alert: bool
    expiration_warning: bool
    lots: List[LotResponse] = []


# ==================== DAMAGE / RETURNS ====================

class DamageRequest(BaseCreateSchema):
    """Evidence is checked by the service before any lot is read."""
    lot_id: uuid.UUID
    quantity: int
    reason: str = Field(..., min_length=1)
    evidence_ref: Optional[str] = None


class ReturnRequest(BaseCreateSchema):
    product_id: uuid.UUID
    quantity: int = Field(..., gt=0)
    condition: str
    reason: str = Field(..., min_length=1)
    evidence_ref: Optional[str] = None
    location: Optional[str] = Field(None, max_length=50)

    normalize_condition = create_uppercase_validator('condition', RETURN_CONDITIONS)


class ReturnResponse(BaseResponseSchema):
    product_id: uuid.UUID
    quantity: int
    condition: str
    action: str
    lot_id: Optional[uuid.UUID] = None
    movement_id: Optional[uuid.UUID] = None


# ==================== CYCLE COUNTS ====================

class CycleCountResponse(BaseResponseSchema):
    id: uuid.UUID
    scheduled_date: date
    location: Optional[str] = None
    product_id: uuid.UUID
    expected_quantity: int
    counted_quantity: Optional[int] = None
    variance: Optional[int] = None
    status: str
    counted_by: Optional[uuid.UUID] = None
    counted_at: Optional[datetime] = None
    adjusted_lot_id: Optional[uuid.UUID] = None


class CycleCountPerform(BaseCreateSchema):
    """Negative counts are rejected by the service."""
    counted_quantity: int
