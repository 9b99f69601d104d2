"""
Inventory API Endpoints.

Lots, the movement ledger, FEFO views, the stock monitor, damages,
customer returns and cycle counts.
"""
from datetime import date
from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, status

from warehouse_engine.api.deps import DB, CurrentUserId
from warehouse_engine.schemas.inventory import (
    LotResponse, MovementResponse, FefoLotResponse, StockItemResponse,
    DamageRequest, ReturnRequest, ReturnResponse,
    CycleCountResponse, CycleCountPerform,
)
from warehouse_engine.services.cycle_count_service import CycleCountService
from warehouse_engine.services.inventory_service import InventoryService

router = APIRouter()


# ============================================================================
# LOTS & STOCK
# ============================================================================

@router.get(
    "/lots/{lot_id}",
    response_model=LotResponse,
    summary="Get Lot"
)
async def get_lot(lot_id: UUID, db: DB):
    service = InventoryService(db)
    return await service.get_lot(lot_id)


@router.get(
    "/lots/{lot_id}/movements",
    response_model=List[MovementResponse],
    summary="List Lot Movements"
)
async def list_lot_movements(lot_id: UUID, db: DB):
    service = InventoryService(db)
    return await service.list_movements(lot_id)


@router.get(
    "/products/{product_id}/fefo",
    response_model=List[FefoLotResponse],
    summary="FEFO Lots for Product"
)
async def get_fefo_lots(product_id: UUID, db: DB):
    """Allocatable lots, earliest expiry first, with expiry alerts."""
    service = InventoryService(db)
    lots = await service.get_fefo_lots(product_id)
    return [
        FefoLotResponse(
            lot=LotResponse.model_validate(item.lot),
            days_until_expiration=item.days_until_expiration,
            alert=item.alert,
        )
        for item in lots
    ]


@router.get(
    "/stock",
    response_model=List[StockItemResponse],
    summary="Stock Monitor"
)
async def get_stock(db: DB, brand: Optional[str] = None, category: Optional[str] = None):
    service = InventoryService(db)
    items = await service.get_stock(brand=brand.upper() if brand else None, category=category)
    return [
        StockItemResponse(
            product_id=item.product_id,
            sku=item.sku,
            product_name=item.product_name,
            brand=item.brand,
            category=item.category,
            total_stock=item.total_stock,
            available_stock=item.available_stock,
            reserved_stock=item.reserved_stock,
            low_stock_alert=item.low_stock_alert,
            expiration_warning=item.expiration_warning,
            lots=[LotResponse.model_validate(lot) for lot in item.lots],
        )
        for item in items
    ]


# ============================================================================
# DAMAGE & RETURNS
# ============================================================================

@router.post(
    "/damage",
    response_model=MovementResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register Damaged Stock"
)
async def register_damage(data: DamageRequest, db: DB, user_id: CurrentUserId):
    service = InventoryService(db)
    return await service.register_damage(
        data.lot_id, data.quantity, data.reason, data.evidence_ref, user_id
    )


@router.post(
    "/returns",
    response_model=ReturnResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Process Customer Return"
)
async def process_return(data: ReturnRequest, db: DB, user_id: CurrentUserId):
    service = InventoryService(db)
    return await service.process_return(
        product_id=data.product_id,
        quantity=data.quantity,
        condition=data.condition,
        reason=data.reason,
        user_id=user_id,
        evidence_ref=data.evidence_ref,
        location=data.location,
    )


# ============================================================================
# CYCLE COUNTS
# ============================================================================

@router.post(
    "/cycle-counts/generate",
    response_model=List[CycleCountResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Generate Daily Cycle Counts"
)
async def generate_cycle_counts(db: DB):
    service = CycleCountService(db)
    return await service.generate_daily_cycle_counts()


@router.get(
    "/cycle-counts",
    response_model=List[CycleCountResponse],
    summary="List Pending Cycle Counts"
)
async def list_pending_cycle_counts(db: DB, scheduled_for: Optional[date] = None):
    service = CycleCountService(db)
    return await service.list_pending_cycle_counts(scheduled_for)


@router.get(
    "/cycle-counts/{count_id}",
    response_model=CycleCountResponse,
    summary="Get Cycle Count"
)
async def get_cycle_count(count_id: UUID, db: DB):
    service = CycleCountService(db)
    return await service.get_cycle_count(count_id)


@router.post(
    "/cycle-counts/{count_id}/perform",
    response_model=CycleCountResponse,
    summary="Perform Cycle Count"
)
async def perform_cycle_count(count_id: UUID, data: CycleCountPerform, db: DB, user_id: CurrentUserId):
    service = CycleCountService(db)
    return await service.perform_cycle_count(count_id, data.counted_quantity, user_id)
