"""
HTTP surface.

Covers:
- Health endpoint
- X-User-ID header handling
- Domain errors mapped to {"detail", "code"} with their HTTP status
- Receiving to delivery through the API
"""
import uuid
from datetime import date, timedelta

import pytest


USER = str(uuid.uuid4())
HEADERS = {"X-User-ID": USER}


async def create_supplier(client, brand="COSTENA"):
    response = await client.post(
        "/api/v1/suppliers", json={"name": f"{brand} Distribution", "brand": brand.lower()}
    )
    assert response.status_code == 201, response.text
    return response.json()


async def create_product(client, sku="CST-001", **overrides):
    payload = {
        "sku": sku,
        "name": "Chiles jalapenos 220g",
        "brand": "costena",
        "category": "Canned",
        "weight_kg": "0.25",
        "length_cm": "8",
        "width_cm": "8",
        "height_cm": "11",
        "unit_price": "18.50",
    }
    payload.update(overrides)
    response = await client.post("/api/v1/products", json=payload, headers=HEADERS)
    assert response.status_code == 201, response.text
    return response.json()


class TestPlumbing:
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"]["database"] == "connected"

    async def test_invalid_user_header(self, client):
        response = await client.get("/api/v1/products", headers={"X-User-ID": "not-a-uuid"})

        assert response.status_code == 400

    async def test_not_found_mapping(self, client):
        response = await client.get(f"/api/v1/orders/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    async def test_conflict_mapping(self, client):
        await create_product(client)
        response = await client.post(
            "/api/v1/products",
            json={"sku": "CST-001", "name": "Dup", "brand": "COSTENA", "category": "Canned"},
        )

        assert response.status_code == 409
        assert response.json() == {"detail": response.json()["detail"], "code": "CONFLICT"}

    async def test_damage_without_evidence(self, client):
        response = await client.post(
            "/api/v1/inventory/damage",
            json={"lot_id": str(uuid.uuid4()), "quantity": 1, "reason": "Broken"},
        )

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_no_vehicles(self, client):
        customer = (await client.post("/api/v1/customers", json={"name": "Tienda Sol"})).json()
        product = await create_product(client)
        order = (await client.post("/api/v1/orders", json={
            "customer_id": customer["id"],
            "lines": [{"product_id": product["id"], "quantity": 1}],
        })).json()["order"]

        response = await client.post("/api/v1/fleet/routes", json={"order_id": order["id"]})

        assert response.status_code == 409
        assert response.json()["code"] == "RESOURCE_UNAVAILABLE"


class TestWarehouseFlow:
    @pytest.fixture
    async def stocked(self, client):
        supplier = await create_supplier(client)
        product = await create_product(client)

        response = await client.post("/api/v1/reception/orders", headers=HEADERS, json={
            "supplier_id": supplier["id"],
            "invoice_ref": "FAC-1001",
            "lines": [{
                "product_id": product["id"],
                "expected_quantity": 120,
                "lot_number": "JAL-2401",
                "expiration_date": (date.today() + timedelta(days=45)).isoformat(),
            }],
        })
        assert response.status_code == 201, response.text
        reception = response.json()
        return supplier, product, reception

    async def test_counting_sheet_hides_expected_quantities(self, client, stocked):
        _, _, reception = stocked

        response = await client.get(f"/api/v1/reception/orders/{reception['id']}/counting-sheet")

        assert response.status_code == 200
        line = response.json()["lines"][0]
        assert "expected_quantity" not in line
        assert line["sku"] == "CST-001"

    async def test_receive_to_delivery(self, client, stocked):
        _, product, reception = stocked
        line_id = reception["lines"][0]["id"]

        # Blind count with a shortage
        response = await client.post(
            f"/api/v1/reception/orders/{reception['id']}/count",
            headers=HEADERS,
            json={"line_counts": [{"line_id": line_id, "counted_quantity": 118}]},
        )
        assert response.status_code == 200, response.text
        counted = response.json()
        assert counted["status"] == "HAS_DISCREPANCY"
        assert counted["discrepancies"][0]["difference"] == -2

        response = await client.post(f"/api/v1/reception/orders/{reception['id']}/validate")
        assert response.status_code == 409

        discrepancy_id = counted["discrepancies"][0]["id"]
        response = await client.patch(
            f"/api/v1/reception/discrepancies/{discrepancy_id}",
            headers=HEADERS,
            json={"status": "accepted", "notes": "Supplier credit note"},
        )
        assert response.status_code == 200
        assert response.json()["resolved_by"] == USER

        response = await client.post(
            f"/api/v1/reception/orders/{reception['id']}/validate",
            headers=HEADERS,
            json={"location": "B-03"},
        )
        assert response.status_code == 200, response.text
        assert response.json()["status"] == "VALIDATED"

        response = await client.get(f"/api/v1/inventory/products/{product['id']}/fefo")
        fefo = response.json()
        assert len(fefo) == 1
        assert fefo[0]["lot"]["quantity"] == 118
        assert fefo[0]["lot"]["location"] == "B-03"

        # Order
        customer = (await client.post("/api/v1/customers", json={"name": "Abarrotes Lupita"})).json()
        response = await client.post("/api/v1/orders", headers=HEADERS, json={
            "customer_id": customer["id"],
            "lines": [{"product_id": product["id"], "quantity": 40}],
        })
        assert response.status_code == 201, response.text
        created = response.json()
        assert created["reservation_status"] == "FULLY_RESERVED"
        assert created["suggested_vehicle_type"] == "VAN"
        assert created["is_multi_brand"] is False
        order_id = created["order"]["id"]

        # Fleet
        response = await client.post("/api/v1/fleet/vehicles", headers=HEADERS, json={
            "plate_number": "PUE-4411", "vehicle_type": "van",
        })
        assert response.status_code == 201, response.text
        response = await client.post("/api/v1/fleet/drivers", headers=HEADERS, json={
            "name": "Maria Lopez",
            "license_number": "PUE-LIC-77",
            "license_expiry": (date.today() + timedelta(days=400)).isoformat(),
        })
        assert response.status_code == 201, response.text

        response = await client.post("/api/v1/fleet/routes", headers=HEADERS, json={"order_id": order_id})
        assert response.status_code == 201, response.text
        assignment = response.json()
        assert assignment["auto_assigned"] is True
        assert [s["name"] for s in assignment["steps"]] == [
            "claim_vehicle", "claim_driver", "create_route", "dispatch_order",
        ]
        route = assignment["route"]
        assert route["status"] == "CONFIRMED"

        response = await client.post(
            f"/api/v1/fleet/routes/{route['id']}/pre-departure-check",
            json={"tire_condition": "good", "fuel_level": 10, "oil_level": "ok", "lights_ok": True},
        )
        assert response.status_code == 422
        assert response.json()["code"] == "SAFETY_VIOLATION"

        response = await client.post(
            f"/api/v1/fleet/routes/{route['id']}/pre-departure-check",
            headers=HEADERS,
            json={"tire_condition": "good", "fuel_level": 60, "oil_level": "ok", "lights_ok": True},
        )
        assert response.status_code == 201, response.text

        response = await client.get(f"/api/v1/fleet/routes/{route['id']}/pre-departure-check")
        assert response.status_code == 200
        assert response.json()["fuel_level"] == 60

        response = await client.post(f"/api/v1/fleet/routes/{route['id']}/invoice")
        assert response.status_code == 200
        assert response.json()["invoice_ref"].startswith(f"/invoices/invoice_{route['route_number']}_")

        response = await client.post(f"/api/v1/fleet/routes/{route['id']}/complete", headers=HEADERS)
        assert response.status_code == 200
        assert response.json()["status"] == "DELIVERED"

        order = (await client.get(f"/api/v1/orders/{order_id}")).json()
        assert order["status"] == "DELIVERED"
        vehicles = (await client.get("/api/v1/fleet/vehicles", params={"status": "AVAILABLE"})).json()
        assert [v["plate_number"] for v in vehicles] == ["PUE-4411"]

        stock = (await client.get("/api/v1/inventory/stock")).json()
        assert stock[0]["available_stock"] == 78
