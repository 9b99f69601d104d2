"""
Catalog service.

Covers:
- Product creation with brand normalisation and unique SKUs
- Activation toggle as the only product change
- Supplier and customer registry lookups
"""
import uuid
from decimal import Decimal

import pytest
from sqlalchemy import select

from warehouse_engine.core.exceptions import NotFoundError, ConflictError
from warehouse_engine.models.audit_log import AuditLog
from warehouse_engine.schemas.catalog import ProductCreate, SupplierCreate, CustomerCreate
from warehouse_engine.services.catalog_service import CatalogService


class TestProducts:
    async def test_create_product_normalises_brand(self, db, user_id):
        service = CatalogService(db)
        product = await service.create_product(
            ProductCreate(
                sku="CHIP-220",
                name="Chiles chipotles 220g",
                brand="costena",
                category="Canned",
                weight_kg=Decimal("0.250"),
                length_cm=Decimal("8"),
                width_cm=Decimal("8"),
                height_cm=Decimal("10"),
                unit_price=Decimal("32.50"),
            ),
            user_id,
        )

        assert product.brand == "COSTENA"
        assert product.is_active is True
        assert product.volume_m3 == Decimal("0.00064")

        audit = (await db.execute(select(AuditLog).where(AuditLog.action == "CREATE_PRODUCT"))).scalar_one()
        assert audit.entity_id == product.id
        assert audit.user_id == user_id

    async def test_duplicate_sku_conflicts(self, db, product):
        service = CatalogService(db)
        with pytest.raises(ConflictError):
            await service.create_product(
                ProductCreate(sku=product.sku, name="Copy", brand="JUMEX", category="Juice")
            )

    async def test_unknown_brand_is_rejected_by_schema(self):
        with pytest.raises(ValueError):
            ProductCreate(sku="X-1", name="Mystery", brand="acme", category="Misc")

    async def test_set_product_active(self, db, product, user_id):
        service = CatalogService(db)
        updated = await service.set_product_active(product.id, False, user_id)

        assert updated.is_active is False
        assert await service.list_products(is_active=True) == []
        assert [p.id for p in await service.list_products(is_active=False)] == [product.id]

    async def test_list_products_filters_by_brand(self, db, product_factory):
        await product_factory(brand="COSTENA")
        jumex = await product_factory(brand="JUMEX", category="Juice")

        products = await CatalogService(db).list_products(brand="JUMEX")

        assert [p.id for p in products] == [jumex.id]

    async def test_get_missing_product(self, db):
        with pytest.raises(NotFoundError):
            await CatalogService(db).get_product(uuid.uuid4())


class TestParties:
    async def test_supplier_roundtrip(self, db):
        service = CatalogService(db)
        supplier = await service.create_supplier(SupplierCreate(name="Jugos del Valle", brand="jumex"))

        assert supplier.brand == "JUMEX"
        assert (await service.get_supplier(supplier.id)).name == "Jugos del Valle"

    async def test_customer_listing_by_activity(self, db):
        service = CatalogService(db)
        active = await service.create_customer(CustomerCreate(name="Tienda Uno"))
        await service.create_customer(CustomerCreate(name="Tienda Dos", is_active=False))

        customers = await service.list_customers(is_active=True)

        assert [c.id for c in customers] == [active.id]

    async def test_missing_customer(self, db):
        with pytest.raises(NotFoundError):
            await CatalogService(db).get_customer(uuid.uuid4())
