from warehouse_engine.stores.catalog_store import CatalogStore
from warehouse_engine.stores.inventory_store import InventoryStore
from warehouse_engine.stores.reception_store import ReceptionStore
from warehouse_engine.stores.order_store import OrderStore
from warehouse_engine.stores.fleet_store import FleetStore

__all__ = [
    "CatalogStore",
    "InventoryStore",
    "ReceptionStore",
    "OrderStore",
    "FleetStore",
]
