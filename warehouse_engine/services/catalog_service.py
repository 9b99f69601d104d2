"""Catalog & party registry: products, suppliers, customers."""
import logging
import uuid
from typing import Optional, List

from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_engine.core.exceptions import NotFoundError, ConflictError
from warehouse_engine.models.catalog import Product, Supplier, Customer
from warehouse_engine.schemas.catalog import ProductCreate, SupplierCreate, CustomerCreate
from warehouse_engine.services.audit_service import AuditService
from warehouse_engine.stores.catalog_store import CatalogStore


logger = logging.getLogger(__name__)


class CatalogService:

    def __init__(self, db: AsyncSession, audit: Optional[AuditService] = None):
        self.db = db
        self.store = CatalogStore(db)
        self.audit = audit or AuditService(db)

    # ==================== PRODUCTS ====================

    async def create_product(self, data: ProductCreate, user_id: Optional[uuid.UUID] = None) -> Product:
        if await self.store.get_product_by_sku(data.sku):
            raise ConflictError(f"Product with SKU {data.sku} already exists")

        product_data = data.model_dump()
        product_data["brand"] = data.brand.value
        product = await self.store.add(Product(**product_data))

        await self.audit.record(
            user_id, "CREATE_PRODUCT", "PRODUCT", product.id,
            new_values={"sku": product.sku, "brand": product.brand},
        )
        await self.db.commit()
        logger.info(f"Created product {product.sku}")
        return product

    async def get_product(self, product_id: uuid.UUID) -> Product:
        product = await self.store.get_product(product_id)
        if not product:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    async def list_products(
        self,
        brand: Optional[str] = None,
        category: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[Product]:
        return await self.store.list_products(brand=brand, category=category, is_active=is_active)

    async def set_product_active(
        self,
        product_id: uuid.UUID,
        is_active: bool,
        user_id: Optional[uuid.UUID] = None,
    ) -> Product:
        """The only change allowed on a product once orders reference it."""
        product = await self.get_product(product_id)
        old_value = product.is_active
        product.is_active = is_active

        await self.audit.record(
            user_id, "SET_PRODUCT_ACTIVE", "PRODUCT", product.id,
            old_values={"is_active": old_value},
            new_values={"is_active": is_active},
        )
        await self.db.commit()
        return product

    # ==================== SUPPLIERS ====================

    async def create_supplier(self, data: SupplierCreate, user_id: Optional[uuid.UUID] = None) -> Supplier:
        supplier_data = data.model_dump()
        supplier_data["brand"] = data.brand.value
        supplier = await self.store.add(Supplier(**supplier_data))

        await self.audit.record(
            user_id, "CREATE_SUPPLIER", "SUPPLIER", supplier.id,
            new_values={"name": supplier.name, "brand": supplier.brand},
        )
        await self.db.commit()
        return supplier

    async def get_supplier(self, supplier_id: uuid.UUID) -> Supplier:
        supplier = await self.store.get_supplier(supplier_id)
        if not supplier:
            raise NotFoundError(f"Supplier {supplier_id} not found")
        return supplier

    async def list_suppliers(self) -> List[Supplier]:
        return await self.store.list_suppliers()

    # ==================== CUSTOMERS ====================

    async def create_customer(self, data: CustomerCreate, user_id: Optional[uuid.UUID] = None) -> Customer:
        customer = await self.store.add(Customer(**data.model_dump()))

        await self.audit.record(
            user_id, "CREATE_CUSTOMER", "CUSTOMER", customer.id,
            new_values={"name": customer.name},
        )
        await self.db.commit()
        return customer

    async def get_customer(self, customer_id: uuid.UUID) -> Customer:
        customer = await self.store.get_customer(customer_id)
        if not customer:
            raise NotFoundError(f"Customer {customer_id} not found")
        return customer

    async def list_customers(self, is_active: Optional[bool] = None) -> List[Customer]:
        return await self.store.list_customers(is_active=is_active)
