"""Pydantic schemas for outbound orders and load planning."""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
import uuid

from warehouse_engine.core.enum_utils import create_uppercase_validator, enum_values
from warehouse_engine.models.order import OrderStatus
from warehouse_engine.schemas.base import BaseResponseSchema, BaseCreateSchema


VALID_ORDER_STATUSES = set(enum_values(OrderStatus))


class OrderLineCreate(BaseCreateSchema):
    product_id: uuid.UUID
    quantity: int


class OrderCreate(BaseCreateSchema):
    customer_id: uuid.UUID
    lines: List[OrderLineCreate] = []


class OrderStatusUpdate(BaseCreateSchema):
    status: OrderStatus

    normalize_status = create_uppercase_validator('status', VALID_ORDER_STATUSES)


class OrderLineResponse(BaseResponseSchema):
    id: uuid.UUID
    line_number: int
    product_id: uuid.UUID
    lot_id: Optional[uuid.UUID] = None
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    reservation_status: str


class OrderResponse(BaseResponseSchema):
    id: uuid.UUID
    order_number: str
    customer_id: uuid.UUID
    status: str
    total_weight_kg: Decimal
    total_volume_m3: Decimal
    total_amount: Decimal
    suggested_vehicle_type: Optional[str] = None
    has_fragile_items: bool
    has_heavy_items: bool
    loading_alert: Optional[str] = None
    reservation_status: str
    created_by: Optional[uuid.UUID] = None
    created_at: datetime
    lines: List[OrderLineResponse] = []


class OrderCreateResponse(BaseResponseSchema):
    """Order plus the load-planning figures computed at creation."""
    order: OrderResponse
    suggested_vehicle_type: str
    loading_alert: Optional[str] = None
    loading_efficiency: float
    brands: List[str] = []
    is_multi_brand: bool
    reservation_status: str
