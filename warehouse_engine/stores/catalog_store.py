"""Persistence access for products, suppliers and customers."""
import uuid
from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_engine.models.catalog import Product, Supplier, Customer


class CatalogStore:
    """Reads and writes catalog rows. Never commits; the calling service owns the transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_product(self, product_id: uuid.UUID) -> Optional[Product]:
        return await self.db.get(Product, product_id)

    async def get_supplier(self, supplier_id: uuid.UUID) -> Optional[Supplier]:
        return await self.db.get(Supplier, supplier_id)

    async def get_customer(self, customer_id: uuid.UUID) -> Optional[Customer]:
        return await self.db.get(Customer, customer_id)

    async def get_product_by_sku(self, sku: str) -> Optional[Product]:
        result = await self.db.execute(select(Product).where(Product.sku == sku))
        return result.scalar_one_or_none()

    async def list_products(
        self,
        brand: Optional[str] = None,
        category: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[Product]:
        stmt = select(Product)
        if brand:
            stmt = stmt.where(Product.brand == brand)
        if category:
            stmt = stmt.where(Product.category == category)
        if is_active is not None:
            stmt = stmt.where(Product.is_active == is_active)
        result = await self.db.execute(stmt.order_by(Product.sku))
        return list(result.scalars().all())

    async def list_active_products(self) -> List[Product]:
        """Active products in a stable order (by SKU) so sampling is reproducible."""
        return await self.list_products(is_active=True)

    async def list_suppliers(self) -> List[Supplier]:
        result = await self.db.execute(select(Supplier).order_by(Supplier.name))
        return list(result.scalars().all())

    async def list_customers(self, is_active: Optional[bool] = None) -> List[Customer]:
        stmt = select(Customer)
        if is_active is not None:
            stmt = stmt.where(Customer.is_active == is_active)
        result = await self.db.execute(stmt.order_by(Customer.name))
        return list(result.scalars().all())

    async def add(self, entity):
        """Add a catalog entity and flush so its id is usable."""
        self.db.add(entity)
        await self.db.flush()
        return entity
