"""
Route Assignment Service.

Assigning a route touches four rows (vehicle, driver, route, order). The
writes run as a saga: each step in its own savepoint, and when a step
fails the completed ones are undone in reverse order. The step log is
returned with the result, and carried by PartialAssignmentError when an
undo itself fails.

All lookups and availability checks run before the first write, so a
request that cannot be served leaves nothing behind.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional, List, Callable, Awaitable, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_engine.core.exceptions import (
    NotFoundError, ConflictError, ResourceUnavailableError, PartialAssignmentError,
)
from warehouse_engine.models.document_sequence import DocumentType
from warehouse_engine.models.fleet import (
    Route, RouteStatus, RouteType, Vehicle, VehicleStatus, Driver, DriverStatus,
)
from warehouse_engine.models.order import Order, OrderStatus
from warehouse_engine.services.audit_service import AuditService
from warehouse_engine.services.document_sequence_service import DocumentSequenceService
from warehouse_engine.stores.catalog_store import CatalogStore
from warehouse_engine.stores.fleet_store import FleetStore
from warehouse_engine.stores.order_store import OrderStore


logger = logging.getLogger(__name__)


ASSIGNABLE_ORDER_STATUSES = {
    OrderStatus.DRAFT.value,
    OrderStatus.CONFIRMED.value,
    OrderStatus.PREPARING.value,
    OrderStatus.READY.value,
}

OPEN_ROUTE_STATUSES = {
    RouteStatus.CONFIRMED.value,
    RouteStatus.IN_TRANSIT.value,
}


class StepStatus(str, Enum):
    DONE = "DONE"
    FAILED = "FAILED"
    COMPENSATED = "COMPENSATED"
    COMPENSATION_FAILED = "COMPENSATION_FAILED"


@dataclass
class SagaStep:
    name: str
    status: str
    detail: Optional[str] = None


@dataclass
class RouteAssignmentResult:
    route: Optional[Route]
    auto_assigned_vehicle: bool = False
    auto_assigned_driver: bool = False
    steps: List[SagaStep] = field(default_factory=list)

    @property
    def auto_assigned(self) -> bool:
        return self.auto_assigned_vehicle or self.auto_assigned_driver


@dataclass
class InvoiceReference:
    route_id: uuid.UUID
    route_number: str
    order_number: str
    customer_name: str
    line_count: int
    invoice_ref: str


class AssignmentSaga:
    """Runs steps in savepoints and undoes completed ones on failure."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.steps: List[SagaStep] = []
        self._compensations: List[Tuple[SagaStep, Callable[[Any], Awaitable[None]], Any]] = []

    async def run(
        self,
        name: str,
        action: Callable[[], Awaitable],
        compensation: Optional[Callable[[Any], Awaitable[None]]] = None,
    ):
        try:
            async with self.db.begin_nested():
                result = await action()
        except Exception as e:
            self.steps.append(SagaStep(name, StepStatus.FAILED.value, str(e)))
            raise
        step = SagaStep(name, StepStatus.DONE.value)
        self.steps.append(step)
        if compensation is not None:
            self._compensations.append((step, compensation, result))
        return result

    async def compensate(self) -> bool:
        """Undo completed steps, newest first. False if any undo failed."""
        all_undone = True
        for step, compensation, result in reversed(self._compensations):
            try:
                async with self.db.begin_nested():
                    await compensation(result)
            except Exception as e:
                logger.error(f"Compensation for step {step.name} failed: {e}")
                step.status = StepStatus.COMPENSATION_FAILED.value
                step.detail = str(e)
                all_undone = False
            else:
                step.status = StepStatus.COMPENSATED.value
        self._compensations.clear()
        return all_undone


class RouteService:

    def __init__(self, db: AsyncSession, audit: Optional[AuditService] = None):
        self.db = db
        self.fleet = FleetStore(db)
        self.orders = OrderStore(db)
        self.catalog = CatalogStore(db)
        self.audit = audit or AuditService(db)
        self.sequences = DocumentSequenceService(db)

    async def get_route(self, route_id: uuid.UUID) -> Route:
        route = await self.fleet.get_route(route_id)
        if not route:
            raise NotFoundError(f"Route {route_id} not found")
        return route

    async def list_routes(self, status: Optional[str] = None) -> List[Route]:
        return await self.fleet.list_routes(status)

    # ==================== SELECTION ====================

    async def _select_vehicle(self, order: Order, vehicle_id: Optional[uuid.UUID]) -> Vehicle:
        if vehicle_id:
            vehicle = await self.fleet.get_vehicle(vehicle_id)
            if not vehicle:
                raise NotFoundError(f"Vehicle {vehicle_id} not found")
            if vehicle.status != VehicleStatus.AVAILABLE.value or not vehicle.is_active:
                raise ResourceUnavailableError(
                    f"Vehicle {vehicle.plate_number} is {vehicle.status}, not available for a route"
                )
            return vehicle

        available = await self.fleet.list_available_vehicles()
        if not available:
            raise ResourceUnavailableError("No vehicles available")
        for vehicle in available:
            if vehicle.vehicle_type == order.suggested_vehicle_type:
                return vehicle
        return available[0]

    async def _select_driver(self, driver_id: Optional[uuid.UUID], today: date) -> Driver:
        if driver_id:
            driver = await self.fleet.get_driver(driver_id)
            if not driver:
                raise NotFoundError(f"Driver {driver_id} not found")
            if (
                driver.status != DriverStatus.AVAILABLE.value
                or not driver.is_active
                or driver.license_expiry <= today
            ):
                raise ResourceUnavailableError(f"Driver {driver.name} is not available for a route")
            return driver

        available = await self.fleet.list_available_drivers(today)
        if not available:
            raise ResourceUnavailableError("No drivers available")
        return available[0]

    # ==================== SAGA STEPS ====================

    async def _claim_vehicle(self, vehicle_id: uuid.UUID) -> None:
        if not await self.fleet.claim_vehicle(vehicle_id):
            raise ResourceUnavailableError(f"Vehicle {vehicle_id} was taken by another assignment")

    async def _release_vehicle(self, vehicle_id: uuid.UUID) -> None:
        if not await self.fleet.release_vehicle(vehicle_id):
            raise ConflictError(f"Vehicle {vehicle_id} is no longer ON_ROUTE")

    async def _claim_driver(self, driver_id: uuid.UUID, today: date) -> None:
        if not await self.fleet.claim_driver(driver_id, today):
            raise ResourceUnavailableError(f"Driver {driver_id} was taken by another assignment")

    async def _release_driver(self, driver_id: uuid.UUID) -> None:
        if not await self.fleet.release_driver(driver_id):
            raise ConflictError(f"Driver {driver_id} is no longer ON_ROUTE")

    async def _create_route(self, **values) -> Route:
        route_number = await self.sequences.get_next_number(DocumentType.ROUTE.value)
        return await self.fleet.add(Route(route_number=route_number, **values))

    async def _cancel_route(self, route: Route) -> None:
        route.status = RouteStatus.CANCELLED.value
        await self.db.flush()

    async def _dispatch_order(self, order_id: uuid.UUID, from_status: str) -> None:
        if not await self.orders.transition_status(order_id, from_status, OrderStatus.IN_TRANSIT.value):
            raise ConflictError(f"Order {order_id} changed status during route assignment")

    async def _restore_order(self, order_id: uuid.UUID, to_status: str) -> None:
        if not await self.orders.transition_status(order_id, OrderStatus.IN_TRANSIT.value, to_status):
            raise ConflictError(f"Order {order_id} is no longer IN_TRANSIT")

    # ==================== ASSIGN ====================

    async def assign_route(
        self,
        order_id: uuid.UUID,
        vehicle_id: Optional[uuid.UUID] = None,
        driver_id: Optional[uuid.UUID] = None,
        route_type: RouteType = RouteType.LOCAL,
        departure_date: Optional[datetime] = None,
        estimated_arrival: Optional[datetime] = None,
        user_id: Optional[uuid.UUID] = None,
    ) -> RouteAssignmentResult:
        """
        Assign a vehicle and a driver to an order and open its route.

        Omitted vehicle/driver are picked automatically: the first
        available vehicle of the order's suggested type (else the first
        available one) and the first available driver with a valid license.

        Raises:
            NotFoundError: unknown order, vehicle or driver
            ConflictError: order is not in an assignable status
            ResourceUnavailableError: no vehicle/driver, or a claim race was lost
            PartialAssignmentError: a step failed and could not be fully undone
        """
        order = await self.orders.get_order(order_id)
        if not order:
            raise NotFoundError(f"Order {order_id} not found")
        if order.status not in ASSIGNABLE_ORDER_STATUSES:
            raise ConflictError(f"Order {order.order_number} is {order.status}, it cannot be routed")

        today = date.today()
        vehicle = await self._select_vehicle(order, vehicle_id)
        driver = await self._select_driver(driver_id, today)

        # Plain ids for the compensations; ORM objects go stale after the UPDATEs
        chosen_vehicle_id = vehicle.id
        chosen_driver_id = driver.id
        order_status = order.status
        route_kind = route_type.value if isinstance(route_type, RouteType) else str(route_type).upper()

        result = RouteAssignmentResult(
            route=None,
            auto_assigned_vehicle=vehicle_id is None,
            auto_assigned_driver=driver_id is None,
        )
        saga = AssignmentSaga(self.db)
        result.steps = saga.steps

        try:
            await saga.run(
                "claim_vehicle",
                lambda: self._claim_vehicle(chosen_vehicle_id),
                lambda _: self._release_vehicle(chosen_vehicle_id),
            )
            await saga.run(
                "claim_driver",
                lambda: self._claim_driver(chosen_driver_id, today),
                lambda _: self._release_driver(chosen_driver_id),
            )
            route = await saga.run(
                "create_route",
                lambda: self._create_route(
                    order_id=order.id,
                    vehicle_id=chosen_vehicle_id,
                    driver_id=chosen_driver_id,
                    route_type=route_kind,
                    departure_date=departure_date,
                    estimated_arrival=estimated_arrival,
                    status=RouteStatus.CONFIRMED.value,
                    assigned_by=user_id,
                ),
                self._cancel_route,
            )
            await saga.run(
                "dispatch_order",
                lambda: self._dispatch_order(order.id, order_status),
                lambda _: self._restore_order(order.id, order_status),
            )
        except Exception as e:
            undone = await saga.compensate()
            if not undone:
                await self.db.commit()
                logger.error(f"Route assignment for order {order_id} left partial state: {result.steps}")
                raise PartialAssignmentError(
                    f"Route assignment for order {order_id} failed and could not be fully undone",
                    result=result,
                ) from e
            await self.db.commit()
            logger.warning(f"Route assignment for order {order_id} rolled back: {e}")
            raise

        result.route = route
        for entity in (order, vehicle, driver):
            await self.db.refresh(entity)

        await self.audit.record(
            user_id, "ASSIGN_ROUTE", "ROUTE", route.id,
            new_values={
                "route_number": route.route_number,
                "order_id": order.id,
                "vehicle_id": chosen_vehicle_id,
                "driver_id": chosen_driver_id,
                "auto_assigned": result.auto_assigned,
            },
        )
        await self.db.commit()
        logger.info(
            f"Route {route.route_number}: order {order.order_number}, "
            f"vehicle {vehicle.plate_number}, driver {driver.name}"
        )
        return result

    # ==================== CLOSE ====================

    async def _release_resources(self, route: Route) -> None:
        if not await self.fleet.release_vehicle(route.vehicle_id):
            logger.warning(f"Vehicle {route.vehicle_id} of route {route.route_number} was not ON_ROUTE")
        if not await self.fleet.release_driver(route.driver_id):
            logger.warning(f"Driver {route.driver_id} of route {route.route_number} was not ON_ROUTE")

    async def complete_route(self, route_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> Route:
        """Delivery done: route and order DELIVERED, vehicle and driver free again."""
        route = await self.get_route(route_id)
        if route.status not in OPEN_ROUTE_STATUSES:
            raise ConflictError(f"Route {route.route_number} is {route.status}, it cannot be completed")

        old_status = route.status
        route.status = RouteStatus.DELIVERED.value
        route.actual_arrival = datetime.now(timezone.utc)

        order = await self.orders.get_order(route.order_id)
        if order:
            order.status = OrderStatus.DELIVERED.value
        await self.db.flush()
        await self._release_resources(route)

        await self.audit.record(
            user_id, "COMPLETE_ROUTE", "ROUTE", route.id,
            old_values={"status": old_status},
            new_values={"status": route.status},
        )
        await self.db.commit()
        logger.info(f"Route {route.route_number} delivered")
        return route

    async def cancel_route(self, route_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> Route:
        """Abort a route: vehicle and driver free again, order back to READY."""
        route = await self.get_route(route_id)
        if route.status not in OPEN_ROUTE_STATUSES:
            raise ConflictError(f"Route {route.route_number} is {route.status}, it cannot be cancelled")

        old_status = route.status
        route.status = RouteStatus.CANCELLED.value

        order = await self.orders.get_order(route.order_id)
        if order and order.status == OrderStatus.IN_TRANSIT.value:
            order.status = OrderStatus.READY.value
        await self.db.flush()
        await self._release_resources(route)

        await self.audit.record(
            user_id, "CANCEL_ROUTE", "ROUTE", route.id,
            old_values={"status": old_status},
            new_values={"status": route.status},
        )
        await self.db.commit()
        logger.info(f"Route {route.route_number} cancelled")
        return route

    # ==================== INVOICE ====================

    async def generate_invoice_reference(
        self,
        route_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
    ) -> InvoiceReference:
        """
        Attach an invoice document reference to the route.

        Only the reference is produced; the PDF itself is rendered elsewhere.
        """
        route = await self.get_route(route_id)
        order = await self.orders.get_order(route.order_id)
        if not order:
            raise NotFoundError(f"Order {route.order_id} not found")
        customer = await self.catalog.get_customer(order.customer_id)
        if not customer:
            raise NotFoundError(f"Customer {order.customer_id} not found")

        stamp = datetime.now(timezone.utc).strftime("%Y%m%d")
        route.invoice_ref = f"/invoices/invoice_{route.route_number}_{stamp}.pdf"

        await self.audit.record(
            user_id, "GENERATE_INVOICE", "ROUTE", route.id,
            new_values={"invoice_ref": route.invoice_ref, "order_number": order.order_number},
        )
        await self.db.commit()
        return InvoiceReference(
            route_id=route.id,
            route_number=route.route_number,
            order_number=order.order_number,
            customer_name=customer.name,
            line_count=len(order.lines),
            invoice_ref=route.invoice_ref,
        )
