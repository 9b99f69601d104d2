"""
Orders API Endpoints.

Order creation with load planning and FEFO reservation, status changes
and cancellation.
"""
from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, Query, status

from warehouse_engine.api.deps import DB, CurrentUserId
from warehouse_engine.schemas.order import (
    OrderCreate, OrderStatusUpdate, OrderResponse, OrderCreateResponse,
)
from warehouse_engine.services.order_service import OrderService

router = APIRouter()


@router.post(
    "",
    response_model=OrderCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Order"
)
async def create_order(data: OrderCreate, db: DB, user_id: CurrentUserId):
    service = OrderService(db)
    result = await service.create_order(data.customer_id, data.lines, user_id)
    return OrderCreateResponse(
        order=OrderResponse.model_validate(result.order),
        suggested_vehicle_type=result.suggested_vehicle_type,
        loading_alert=result.loading_alert,
        loading_efficiency=result.loading_efficiency,
        brands=result.brands,
        is_multi_brand=result.is_multi_brand,
        reservation_status=result.reservation_status,
    )


@router.get(
    "",
    response_model=List[OrderResponse],
    summary="List Orders"
)
async def list_orders(
    db: DB,
    status: Optional[str] = None,
    customer_id: Optional[UUID] = None,
):
    service = OrderService(db)
    return await service.list_orders(status=status.upper() if status else None, customer_id=customer_id)


@router.get(
    "/stuck",
    response_model=List[OrderResponse],
    summary="Stuck Orders"
)
async def find_stuck_orders(db: DB, threshold_hours: Optional[int] = Query(None, ge=1)):
    """CONFIRMED or PREPARING orders older than the threshold."""
    service = OrderService(db)
    return await service.find_stuck_orders(threshold_hours)


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get Order"
)
async def get_order(order_id: UUID, db: DB):
    service = OrderService(db)
    return await service.get_order(order_id)


@router.patch(
    "/{order_id}/status",
    response_model=OrderResponse,
    summary="Update Order Status"
)
async def update_order_status(order_id: UUID, data: OrderStatusUpdate, db: DB, user_id: CurrentUserId):
    service = OrderService(db)
    return await service.update_order_status(order_id, data.status, user_id)


@router.post(
    "/{order_id}/cancel",
    response_model=OrderResponse,
    summary="Cancel Order"
)
async def cancel_order(order_id: UUID, db: DB, user_id: CurrentUserId):
    service = OrderService(db)
    return await service.cancel_order(order_id, user_id)
