# src/db/crud.py
from __future__ import annotations

import sqlite3
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

import aiosqlite

from db import models
from db.database import connect
from db.models import to_price
from utils.logger import get_logger

_logger = get_logger(__name__)


class OrderRejected(Exception):
    """The order breaks a business rule; nothing was persisted."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class OrderFailed(Exception):
    """Storage fault while writing the order; the transaction was rolled back."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def _to_datetime(val) -> Optional[datetime]:
    if val is None:
        return None
    try:
        return datetime.fromisoformat(str(val))
    except ValueError:
        return None


# ---------------------------
# Catalog
# ---------------------------


async def list_in_stock_medicines() -> List[models.Medicine]:
    """All medicines with stock strictly greater than zero, ordered by id."""
    async with connect() as conn:
        cur = await conn.execute(
            """
            SELECT id, name, description, price, image
            FROM medicines
            WHERE stock > 0
            ORDER BY id;
            """
        )
        rows = await cur.fetchall()
        await cur.close()
    return [
        models.Medicine(
            id=int(row[0]),
            name=row[1],
            description=row[2] or "",
            price=to_price(row[3]),
            image=row[4] or "",
        )
        for row in rows
    ]


async def medicine_stock(medicine_id: int) -> Optional[int]:
    async with connect() as conn:
        cur = await conn.execute(
            "SELECT stock FROM medicines WHERE id = ?;", (medicine_id,)
        )
        row = await cur.fetchone()
        await cur.close()
        return int(row[0]) if row else None


# ---------------------------
# Orders
# ---------------------------


async def _insert_order(conn: aiosqlite.Connection, order: models.OrderRequest) -> int:
    c = order.customer
    cur = await conn.execute(
        """
        INSERT INTO orders
            (customer_name, email, address, city, zip_code, total, payment_method)
        VALUES (?, ?, ?, ?, ?, ?, ?);
        """,
        (
            c.name,
            c.email,
            c.address,
            c.city,
            c.zip_code,
            to_price(order.total),
            order.payment_method,
        ),
    )
    order_id = cur.lastrowid
    await cur.close()
    return order_id


async def _catalog_price(conn: aiosqlite.Connection, medicine_id: int) -> Decimal:
    cur = await conn.execute(
        "SELECT price FROM medicines WHERE id = ?;", (medicine_id,)
    )
    row = await cur.fetchone()
    await cur.close()
    if row is None:
        raise OrderRejected(f"Unknown medicine id {medicine_id}.")
    return to_price(row[0])


async def _insert_order_item(
    conn: aiosqlite.Connection, order_id: int, item: models.OrderItem
) -> None:
    await conn.execute(
        """
        INSERT INTO order_items (order_id, medicine_id, quantity, price)
        VALUES (?, ?, ?, ?);
        """,
        (order_id, item.id, item.quantity, to_price(item.price)),
    )


async def _decrement_stock(
    conn: aiosqlite.Connection, medicine_id: int, qty: int
) -> None:
    # conditional update: never let stock drop below zero
    cur = await conn.execute(
        "UPDATE medicines SET stock = stock - ? WHERE id = ? AND stock >= ?;",
        (qty, medicine_id, qty),
    )
    changed = cur.rowcount
    await cur.close()
    if changed != 1:
        raise OrderRejected(f"Insufficient stock for medicine id {medicine_id}.")


async def create_order(order: models.OrderRequest) -> int:
    """
    Persist an order, its items and the stock decrements in one transaction.

    Each line is re-priced from the catalog and the total recomputed; a
    mismatch, an unknown medicine or insufficient stock raises OrderRejected.
    Any sqlite error raises OrderFailed. Both roll back everything.
    Returns the new order id.
    """
    if not order.items:
        raise OrderRejected("Order has no items.")

    try:
        async with connect() as conn:
            try:
                # IMMEDIATE takes the write lock up front, so concurrent orders
                # see each other's stock decrements
                await conn.execute("BEGIN IMMEDIATE;")
                order_id = await _insert_order(conn, order)

                total = Decimal("0.00")
                for item in order.items:
                    price = await _catalog_price(conn, item.id)
                    if to_price(item.price) != price:
                        raise OrderRejected(
                            f"Price of medicine id {item.id} changed to {price}."
                        )
                    await _insert_order_item(conn, order_id, item)
                    await _decrement_stock(conn, item.id, item.quantity)
                    total += price * item.quantity

                if to_price(order.total) != to_price(total):
                    raise OrderRejected(
                        f"Order total {to_price(order.total)} does not match {to_price(total)}."
                    )

                await conn.commit()
            except OrderRejected as e:
                await conn.rollback()
                _logger.warning(f"Order rejected: {e.message}")
                raise
            except sqlite3.Error as e:
                await conn.rollback()
                _logger.error(f"Order rolled back: {e}")
                raise OrderFailed(str(e)) from e
    except sqlite3.Error as e:
        # the connection itself could not be opened or set up
        _logger.error(f"Order not stored: {e}")
        raise OrderFailed(str(e)) from e

    _logger.info(f"Order {order_id} placed, total {to_price(total)}.")
    return order_id


async def get_order(
    order_id: int,
) -> Tuple[Optional[models.OrderRecord], List[models.OrderItemRecord]]:
    """
    Return (order, items) for a specific order, or (None, []) if absent.
    """
    async with connect() as conn:
        cur = await conn.execute(
            """
            SELECT id, customer_name, email, address, city, zip_code,
                   total, payment_method, created_at
            FROM orders
            WHERE id = ?;
            """,
            (order_id,),
        )
        order_row = await cur.fetchone()
        await cur.close()
        if not order_row:
            return None, []
        cur = await conn.execute(
            """
            SELECT order_id, medicine_id, quantity, price
            FROM order_items
            WHERE order_id = ?
            ORDER BY id;
            """,
            (order_id,),
        )
        item_rows = await cur.fetchall()
        await cur.close()
    order = models.OrderRecord(
        id=order_row[0],
        customer_name=order_row[1],
        email=order_row[2],
        address=order_row[3],
        city=order_row[4],
        zip_code=order_row[5],
        total=to_price(order_row[6]),
        payment_method=order_row[7],
        created_at=_to_datetime(order_row[8]),
    )
    items = [
        models.OrderItemRecord(
            order_id=row[0],
            medicine_id=row[1],
            quantity=row[2],
            price=to_price(row[3]),
        )
        for row in item_rows
    ]
    return order, items
