"""
Reception API Endpoints.

Blind-count workflow for inbound deliveries:
- Register a reception order with expected quantities
- Hand out a counting sheet without them
- Record counts, review discrepancies, validate into stock
"""
from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, status

from warehouse_engine.api.deps import DB, CurrentUserId
from warehouse_engine.schemas.reception import (
    ReceptionOrderCreate, ReceptionOrderResponse,
    CountingSheetResponse,
    BlindCountRequest, BlindCountResponse,
    DiscrepancyResponse, DiscrepancyReview,
    ValidateReceptionRequest,
)
from warehouse_engine.services.reception_service import ReceptionService

router = APIRouter()


@router.post(
    "/orders",
    response_model=ReceptionOrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Reception Order"
)
async def create_reception_order(data: ReceptionOrderCreate, db: DB, user_id: CurrentUserId):
    service = ReceptionService(db)
    return await service.create_reception_order(
        supplier_id=data.supplier_id,
        invoice_ref=data.invoice_ref,
        lines=data.lines,
        user_id=user_id,
        notes=data.notes,
    )


@router.get(
    "/orders",
    response_model=List[ReceptionOrderResponse],
    summary="List Reception Orders"
)
async def list_reception_orders(db: DB, status: Optional[str] = None):
    service = ReceptionService(db)
    return await service.list_reception_orders(status.upper() if status else None)


@router.get(
    "/orders/{order_id}",
    response_model=ReceptionOrderResponse,
    summary="Get Reception Order"
)
async def get_reception_order(order_id: UUID, db: DB):
    service = ReceptionService(db)
    return await service.get_reception_order(order_id)


@router.get(
    "/orders/{order_id}/counting-sheet",
    response_model=CountingSheetResponse,
    summary="Get Counting Sheet"
)
async def get_counting_sheet(order_id: UUID, db: DB):
    """Lines to count. Expected quantities are deliberately left out."""
    service = ReceptionService(db)
    return await service.get_counting_sheet(order_id)


@router.post(
    "/orders/{order_id}/count",
    response_model=BlindCountResponse,
    summary="Submit Blind Count"
)
async def blind_count(order_id: UUID, data: BlindCountRequest, db: DB, user_id: CurrentUserId):
    service = ReceptionService(db)
    result = await service.blind_count(order_id, data.line_counts, user_id)
    return BlindCountResponse(
        reception_order_id=result.reception_order_id,
        status=result.status,
        discrepancies_found=result.discrepancies_found,
        discrepancies=[DiscrepancyResponse.model_validate(d) for d in result.discrepancies],
    )


@router.get(
    "/orders/{order_id}/discrepancies",
    response_model=List[DiscrepancyResponse],
    summary="List Discrepancies"
)
async def list_discrepancies(order_id: UUID, db: DB):
    service = ReceptionService(db)
    return await service.list_discrepancies(order_id)


@router.patch(
    "/discrepancies/{discrepancy_id}",
    response_model=DiscrepancyResponse,
    summary="Review Discrepancy"
)
async def review_discrepancy(discrepancy_id: UUID, data: DiscrepancyReview, db: DB, user_id: CurrentUserId):
    service = ReceptionService(db)
    return await service.review_discrepancy(discrepancy_id, data.status, data.notes, user_id)


@router.post(
    "/orders/{order_id}/validate",
    response_model=ReceptionOrderResponse,
    summary="Validate Reception Order"
)
async def validate_reception_order(
    order_id: UUID,
    db: DB,
    user_id: CurrentUserId,
    data: Optional[ValidateReceptionRequest] = None,
):
    service = ReceptionService(db)
    return await service.validate_reception_order(
        order_id, user_id, location=data.location if data else None
    )


@router.post(
    "/orders/{order_id}/complete",
    response_model=ReceptionOrderResponse,
    summary="Complete Reception Order"
)
async def complete_reception_order(order_id: UUID, db: DB, user_id: CurrentUserId):
    service = ReceptionService(db)
    return await service.complete_reception_order(order_id, user_id)
