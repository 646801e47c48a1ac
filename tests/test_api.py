"""Integration tests for the storefront API via TestClient."""

import asyncio
import os
import tempfile
import unittest
from unittest import mock

from fastapi.testclient import TestClient

from api.app import create_app
from db import crud
from db import database as db_database
from utils.config import Settings

FRONTEND = "http://localhost:5173"


def order_payload(**overrides) -> dict:
    payload = {
        "customer": {
            "name": "Jane Doe",
            "email": "jane@example.com",
            "address": "1 Main St",
            "city": "Springfield",
            "zipCode": "12345",
        },
        "items": [{"id": 1, "quantity": 2, "price": 5.00}],
        "total": 10.00,
        "payment_method": "card",
    }
    payload.update(overrides)
    return payload


async def _scalar(sql: str, params=()):
    async with db_database.connect() as conn:
        cur = await conn.execute(sql, params)
        row = await cur.fetchone()
        await cur.close()
    return row[0] if row else None


def scalar(sql: str, params=()):
    return asyncio.run(_scalar(sql, params))


async def _execute(sql: str):
    async with db_database.connect() as conn:
        await conn.execute(sql)
        await conn.commit()


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        db_database.DB_PATH = os.path.join(self.temp_dir.name, "test.sqlite")
        db_database._initialized = False
        self.client = TestClient(create_app(Settings(allowed_origin=FRONTEND)))

    def tearDown(self):
        self.temp_dir.cleanup()

    # ---------- Catalog ----------

    def test_list_medicines(self):
        response = self.client.get("/api/medicines")
        self.assertEqual(response.status_code, 200)

        medicines = response.json()
        self.assertEqual(
            medicines[0],
            {
                "id": 1,
                "name": "Aspirin",
                "description": "Pain reliever and fever reducer, 100 tablets of 325 mg.",
                "price": 5.0,
                "image": "images/aspirin.jpg",
            },
        )
        self.assertNotIn(6, [m["id"] for m in medicines])

    def test_legacy_listing_path(self):
        response = self.client.get("/api/get_medicines")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), self.client.get("/api/medicines").json())

    def test_listing_failure_returns_error_object(self):
        asyncio.run(_execute("DROP TABLE order_items;"))
        asyncio.run(_execute("DROP TABLE medicines;"))

        response = self.client.get("/api/medicines")
        self.assertEqual(response.status_code, 500)
        self.assertIn("no such table", response.json()["error"])

    # ---------- Orders ----------

    def test_create_order(self):
        response = self.client.post("/api/orders", json=order_payload())

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Order placed successfully")
        order_id = body["order_id"]

        self.assertEqual(scalar("SELECT COUNT(*) FROM orders;"), 1)
        self.assertEqual(
            scalar("SELECT COUNT(*) FROM order_items WHERE order_id = ?;", (order_id,)), 1
        )
        self.assertEqual(scalar("SELECT stock FROM medicines WHERE id = 1;"), 118)

        detail = self.client.get(f"/api/orders/{order_id}").json()
        self.assertEqual(detail["customer_name"], "Jane Doe")
        self.assertEqual(detail["zip_code"], "12345")
        self.assertEqual(detail["total"], 10.0)
        self.assertEqual(
            detail["items"], [{"medicine_id": 1, "quantity": 2, "price": 5.0}]
        )

    def test_payment_method_defaults_to_card(self):
        payload = order_payload()
        del payload["payment_method"]
        order_id = self.client.post("/api/orders", json=payload).json()["order_id"]
        self.assertEqual(
            scalar("SELECT payment_method FROM orders WHERE id = ?;", (order_id,)), "card"
        )

    def test_extra_cart_fields_are_ignored(self):
        items = [{"id": 1, "name": "Aspirin", "image": "x.jpg", "quantity": 1, "price": 5}]
        response = self.client.post(
            "/api/submit_order", json=order_payload(items=items, total=5)
        )
        self.assertEqual(response.status_code, 201)

    def test_storage_fault_rolls_back(self):
        asyncio.run(
            _execute(
                """
                CREATE TRIGGER fail_items BEFORE INSERT ON order_items
                BEGIN
                    SELECT RAISE(ABORT, 'disk on fire');
                END;
                """
            )
        )

        response = self.client.post("/api/orders", json=order_payload())

        self.assertEqual(response.status_code, 500)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["message"], "Database error: disk on fire")
        self.assertEqual(scalar("SELECT COUNT(*) FROM orders;"), 0)
        self.assertEqual(scalar("SELECT COUNT(*) FROM order_items;"), 0)
        self.assertEqual(scalar("SELECT stock FROM medicines WHERE id = 1;"), 120)

    def test_unopenable_database_is_storage_fault(self):
        # a directory cannot be opened as a database file
        db_database.DB_PATH = self.temp_dir.name

        response = self.client.post("/api/orders", json=order_payload())

        self.assertEqual(response.status_code, 500)
        self.assertTrue(response.headers["content-type"].startswith("application/json"))
        body = response.json()
        self.assertFalse(body["success"])
        self.assertTrue(body["message"].startswith("Database error: "))

    def test_out_of_range_item_numbers_rejected_before_storage(self):
        for item in (
            {"id": 10**30, "quantity": 1, "price": 5.00},
            {"id": 1, "quantity": 10**30, "price": 5.00},
        ):
            with self.subTest(item=item):
                with mock.patch.object(crud, "create_order") as create_order:
                    response = self.client.post(
                        "/api/orders", json=order_payload(items=[item])
                    )

                self.assertEqual(response.status_code, 400)
                self.assertFalse(response.json()["success"])
                create_order.assert_not_called()

    def test_missing_items_rejected_before_storage(self):
        payload = order_payload()
        del payload["items"]

        with mock.patch.object(crud, "create_order") as create_order:
            response = self.client.post("/api/orders", json=payload)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json(), {"success": False, "message": "Missing required fields"}
        )
        create_order.assert_not_called()

    def test_invalid_json_rejected(self):
        with mock.patch.object(crud, "create_order") as create_order:
            response = self.client.post(
                "/api/orders",
                content="{not json",
                headers={"Content-Type": "application/json"},
            )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Invalid JSON data")
        create_order.assert_not_called()

    def test_blank_customer_field_rejected(self):
        payload = order_payload()
        payload["customer"]["city"] = ""
        response = self.client.post("/api/orders", json=payload)
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])
        self.assertEqual(scalar("SELECT COUNT(*) FROM orders;"), 0)

    def test_oversell_is_conflict(self):
        items = [{"id": 5, "quantity": 31, "price": 8.25}]
        response = self.client.post(
            "/api/orders", json=order_payload(items=items, total=255.75)
        )
        self.assertEqual(response.status_code, 409)
        self.assertFalse(response.json()["success"])
        self.assertIn("Insufficient stock", response.json()["message"])
        self.assertEqual(scalar("SELECT stock FROM medicines WHERE id = 5;"), 30)

    def test_tampered_total_is_conflict(self):
        response = self.client.post("/api/orders", json=order_payload(total=0.5))
        self.assertEqual(response.status_code, 409)
        self.assertEqual(scalar("SELECT COUNT(*) FROM orders;"), 0)

    def test_unknown_order(self):
        response = self.client.get("/api/orders/9999")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.json(), {"success": False, "message": "Order not found"}
        )

    # ---------- CORS ----------

    def test_preflight_from_frontend_origin(self):
        response = self.client.options(
            "/api/orders",
            headers={
                "Origin": FRONTEND,
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["access-control-allow-origin"], FRONTEND)

    def test_preflight_from_other_origin_is_refused(self):
        response = self.client.options(
            "/api/orders",
            headers={
                "Origin": "http://evil.example",
                "Access-Control-Request-Method": "POST",
            },
        )
        self.assertEqual(response.status_code, 400)
        self.assertNotIn("access-control-allow-origin", response.headers)
