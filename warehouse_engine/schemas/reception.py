"""Pydantic schemas for the blind-count reception workflow."""
from datetime import date, datetime
from typing import Optional, List
import uuid

from pydantic import Field

from warehouse_engine.core.enum_utils import create_uppercase_validator, enum_values
from warehouse_engine.models.reception import ProductCondition, DiscrepancyStatus
from warehouse_engine.schemas.base import BaseResponseSchema, BaseCreateSchema


VALID_CONDITIONS = set(enum_values(ProductCondition))
VALID_DISCREPANCY_STATUSES = set(enum_values(DiscrepancyStatus))


# ==================== CREATE ====================

class ReceptionLineCreate(BaseCreateSchema):
    product_id: uuid.UUID
    expected_quantity: int
    lot_number: str = Field(..., min_length=1, max_length=50)
    expiration_date: Optional[date] = None


class ReceptionOrderCreate(BaseCreateSchema):
    """Lines are checked by the service so an empty list gets a domain error."""
    supplier_id: uuid.UUID
    invoice_ref: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    lines: List[ReceptionLineCreate] = []


class ReceptionLineResponse(BaseResponseSchema):
    id: uuid.UUID
    line_number: int
    product_id: uuid.UUID
    expected_quantity: int
    counted_quantity: Optional[int] = None
    condition: str
    lot_number: str
    expiration_date: Optional[date] = None
    counted_by: Optional[uuid.UUID] = None
    counted_at: Optional[datetime] = None
    lot_id: Optional[uuid.UUID] = None


class ReceptionOrderResponse(BaseResponseSchema):
    id: uuid.UUID
    order_number: str
    supplier_id: uuid.UUID
    brand: str
    invoice_ref: Optional[str] = None
    status: str
    received_by: Optional[uuid.UUID] = None
    received_at: Optional[datetime] = None
    validated_by: Optional[uuid.UUID] = None
    validated_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    lines: List[ReceptionLineResponse] = []


# ==================== COUNTING ====================

class CountingSheetLine(BaseResponseSchema):
    """A line as shown to the counter. Never carries the expected quantity."""
    line_id: uuid.UUID
    product_id: uuid.UUID
    sku: str
    product_name: str
    lot_number: str
    expiration_date: Optional[date] = None


class CountingSheetResponse(BaseResponseSchema):
    reception_order_id: uuid.UUID
    order_number: str
    status: str
    lines: List[CountingSheetLine] = []


class LineCount(BaseCreateSchema):
    line_id: uuid.UUID
    counted_quantity: int = Field(..., ge=0)
    condition: Optional[ProductCondition] = None

    normalize_condition = create_uppercase_validator('condition', VALID_CONDITIONS)


class BlindCountRequest(BaseCreateSchema):
    line_counts: List[LineCount] = []


class DiscrepancyResponse(BaseResponseSchema):
    id: uuid.UUID
    reception_order_id: uuid.UUID
    reception_line_id: uuid.UUID
    expected_quantity: int
    counted_quantity: int
    difference: int
    status: str
    resolution_notes: Optional[str] = None
    resolved_by: Optional[uuid.UUID] = None
    resolved_at: Optional[datetime] = None


class BlindCountResponse(BaseResponseSchema):
    reception_order_id: uuid.UUID
    status: str
    discrepancies_found: int
    discrepancies: List[DiscrepancyResponse] = []


class DiscrepancyReview(BaseCreateSchema):
    status: DiscrepancyStatus
    notes: Optional[str] = None

    normalize_status = create_uppercase_validator('status', VALID_DISCREPANCY_STATUSES)


class ValidateReceptionRequest(BaseCreateSchema):
    location: Optional[str] = Field(None, max_length=50)
