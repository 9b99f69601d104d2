from warehouse_engine.models.catalog import Brand, Product, Supplier, Customer
from warehouse_engine.models.inventory import (
    LotStatus,
    MovementType,
    ReferenceType,
    CycleCountStatus,
    Lot,
    InventoryMovement,
    CycleCount,
)
from warehouse_engine.models.reception import (
    ReceptionStatus,
    ProductCondition,
    DiscrepancyStatus,
    ReceptionOrder,
    ReceptionLine,
    ReceptionDiscrepancy,
)
from warehouse_engine.models.order import (
    OrderStatus,
    ReservationStatus,
    LineReservationStatus,
    Order,
    OrderLine,
)
from warehouse_engine.models.fleet import (
    VehicleType,
    VehicleStatus,
    DriverStatus,
    RouteType,
    RouteStatus,
    MaintenanceType,
    TireCondition,
    OilLevel,
    Vehicle,
    Driver,
    Route,
    VehicleMaintenance,
    PreDepartureChecklist,
)
from warehouse_engine.models.audit_log import AuditLog
from warehouse_engine.models.document_sequence import DocumentType, DocumentSequence

__all__ = [
    # Catalog
    "Brand",
    "Product",
    "Supplier",
    "Customer",
    # Inventory
    "LotStatus",
    "MovementType",
    "ReferenceType",
    "CycleCountStatus",
    "Lot",
    "InventoryMovement",
    "CycleCount",
    # Reception
    "ReceptionStatus",
    "ProductCondition",
    "DiscrepancyStatus",
    "ReceptionOrder",
    "ReceptionLine",
    "ReceptionDiscrepancy",
    # Orders
    "OrderStatus",
    "ReservationStatus",
    "LineReservationStatus",
    "Order",
    "OrderLine",
    # Fleet
    "VehicleType",
    "VehicleStatus",
    "DriverStatus",
    "RouteType",
    "RouteStatus",
    "MaintenanceType",
    "TireCondition",
    "OilLevel",
    "Vehicle",
    "Driver",
    "Route",
    "VehicleMaintenance",
    "PreDepartureChecklist",
    # Audit / numbering
    "AuditLog",
    "DocumentType",
    "DocumentSequence",
]
