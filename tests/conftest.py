import itertools
import os
import uuid
from datetime import date, timedelta
from decimal import Decimal

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from warehouse_engine.database import build_engine, get_db, init_db
from warehouse_engine.models.catalog import Brand, Product, Supplier, Customer
from warehouse_engine.models.fleet import Vehicle, VehicleType, VehicleStatus, Driver, DriverStatus
from warehouse_engine.models.inventory import Lot, LotStatus, MovementType
from warehouse_engine.services.inventory_service import InventoryService


@pytest.fixture
async def engine():
    """Fresh in-memory schema per test. StaticPool keeps every session on one connection."""
    engine = build_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def user_id():
    return uuid.uuid4()


# ==================== catalog factories ====================

@pytest.fixture
def product_factory(db):
    counter = itertools.count(1)

    async def create(**overrides) -> Product:
        n = next(counter)
        values = dict(
            sku=f"SKU-{n:04d}",
            name=f"Product {n}",
            brand=Brand.COSTENA.value,
            category="Canned",
            weight_kg=Decimal("1.000"),
            length_cm=Decimal("10"),
            width_cm=Decimal("10"),
            height_cm=Decimal("10"),
            is_fragile=False,
            unit_price=Decimal("25.00"),
            is_active=True,
        )
        values.update(overrides)
        product = Product(**values)
        db.add(product)
        await db.commit()
        return product

    return create


@pytest.fixture
async def product(product_factory):
    return await product_factory()


@pytest.fixture
async def supplier(db):
    supplier = Supplier(name="La Costena Distribution", brand=Brand.COSTENA.value, is_active=True)
    db.add(supplier)
    await db.commit()
    return supplier


@pytest.fixture
async def customer(db):
    customer = Customer(name="Abarrotes Lupita", city="Puebla", credit_limit=Decimal("50000"), is_active=True)
    db.add(customer)
    await db.commit()
    return customer


@pytest.fixture
def lot_factory(db):
    """Lots are stocked through an IN movement so the ledger always matches the quantity."""
    counter = itertools.count(1)

    async def create(product, quantity=100, expiration_date=None, status=LotStatus.AVAILABLE.value, location="A-01"):
        lot = Lot(
            product_id=product.id,
            lot_number=f"L-{next(counter):04d}",
            expiration_date=expiration_date,
            quantity=0,
            status=status,
            location=location,
        )
        db.add(lot)
        await db.flush()
        if quantity:
            await InventoryService(db).apply_movement(lot, quantity, MovementType.IN, reason="Opening stock")
        await db.commit()
        return lot

    return create


# ==================== fleet factories ====================

@pytest.fixture
def vehicle_factory(db):
    counter = itertools.count(1)

    async def create(vehicle_type=VehicleType.VAN.value, status=VehicleStatus.AVAILABLE.value, is_active=True):
        vehicle = Vehicle(
            plate_number=f"PUE-{next(counter):03d}",
            vehicle_type=vehicle_type,
            status=status,
            is_active=is_active,
        )
        db.add(vehicle)
        await db.commit()
        return vehicle

    return create


@pytest.fixture
def driver_factory(db):
    counter = itertools.count(1)

    async def create(status=DriverStatus.AVAILABLE.value, license_expiry=None, is_active=True):
        n = next(counter)
        driver = Driver(
            name=f"Driver {n}",
            license_number=f"LIC-{n:05d}",
            license_expiry=license_expiry or date.today() + timedelta(days=365),
            status=status,
            is_active=is_active,
        )
        db.add(driver)
        await db.commit()
        return driver

    return create


# ==================== HTTP ====================

@pytest.fixture
async def client(session_factory):
    from warehouse_engine.main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
