"""
Catalog API Endpoints.

Products, suppliers and customers.
"""
from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, status

from warehouse_engine.api.deps import DB, CurrentUserId
from warehouse_engine.schemas.catalog import (
    ProductCreate, ProductActiveUpdate, ProductResponse,
    SupplierCreate, SupplierResponse,
    CustomerCreate, CustomerResponse,
)
from warehouse_engine.services.catalog_service import CatalogService

router = APIRouter()


# ============================================================================
# PRODUCTS
# ============================================================================

@router.post(
    "/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Product"
)
async def create_product(data: ProductCreate, db: DB, user_id: CurrentUserId):
    service = CatalogService(db)
    return await service.create_product(data, user_id)


@router.get(
    "/products",
    response_model=List[ProductResponse],
    summary="List Products"
)
async def list_products(
    db: DB,
    brand: Optional[str] = None,
    category: Optional[str] = None,
    is_active: Optional[bool] = None,
):
    service = CatalogService(db)
    return await service.list_products(
        brand=brand.upper() if brand else None,
        category=category,
        is_active=is_active,
    )


@router.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    summary="Get Product"
)
async def get_product(product_id: UUID, db: DB):
    service = CatalogService(db)
    return await service.get_product(product_id)


@router.patch(
    "/products/{product_id}/active",
    response_model=ProductResponse,
    summary="Activate or Deactivate Product"
)
async def set_product_active(product_id: UUID, data: ProductActiveUpdate, db: DB, user_id: CurrentUserId):
    """Products are never edited or deleted once created, only switched off."""
    service = CatalogService(db)
    return await service.set_product_active(product_id, data.is_active, user_id)


# ============================================================================
# SUPPLIERS
# ============================================================================

@router.post(
    "/suppliers",
    response_model=SupplierResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Supplier"
)
async def create_supplier(data: SupplierCreate, db: DB, user_id: CurrentUserId):
    service = CatalogService(db)
    return await service.create_supplier(data, user_id)


@router.get(
    "/suppliers",
    response_model=List[SupplierResponse],
    summary="List Suppliers"
)
async def list_suppliers(db: DB):
    service = CatalogService(db)
    return await service.list_suppliers()


@router.get(
    "/suppliers/{supplier_id}",
    response_model=SupplierResponse,
    summary="Get Supplier"
)
async def get_supplier(supplier_id: UUID, db: DB):
    service = CatalogService(db)
    return await service.get_supplier(supplier_id)


# ============================================================================
# CUSTOMERS
# ============================================================================

@router.post(
    "/customers",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Customer"
)
async def create_customer(data: CustomerCreate, db: DB, user_id: CurrentUserId):
    service = CatalogService(db)
    return await service.create_customer(data, user_id)


@router.get(
    "/customers",
    response_model=List[CustomerResponse],
    summary="List Customers"
)
async def list_customers(db: DB, is_active: Optional[bool] = None):
    service = CatalogService(db)
    return await service.list_customers(is_active=is_active)


@router.get(
    "/customers/{customer_id}",
    response_model=CustomerResponse,
    summary="Get Customer"
)
async def get_customer(customer_id: UUID, db: DB):
    service = CatalogService(db)
    return await service.get_customer(customer_id)
