from fastapi import APIRouter

from warehouse_engine.api.v1.endpoints import (
    catalog,
    reception,
    inventory,
    orders,
    fleet,
)


api_router = APIRouter()

# ==================== Catalog ====================
api_router.include_router(
    catalog.router,
    tags=["Catalog"]
)

# ==================== Reception ====================
api_router.include_router(
    reception.router,
    prefix="/reception",
    tags=["Reception"]
)

# ==================== Inventory ====================
api_router.include_router(
    inventory.router,
    prefix="/inventory",
    tags=["Inventory"]
)

# ==================== Orders ====================
api_router.include_router(
    orders.router,
    prefix="/orders",
    tags=["Orders"]
)

# ==================== Fleet & Routes ====================
api_router.include_router(
    fleet.router,
    prefix="/fleet",
    tags=["Fleet"]
)
