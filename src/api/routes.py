"""FastAPI routes for the storefront: catalog listing and order submission."""

import sqlite3

from fastapi import APIRouter
from fastapi.responses import JSONResponse

import db.crud as crud
from api.schemas import (
    CreateOrderRequest,
    FailureResponse,
    MedicineSchema,
    OrderCreatedResponse,
    OrderDetailResponse,
)
from utils.logger import get_logger

_logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["store"])


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
@router.get("/medicines", response_model=list[MedicineSchema])
@router.get("/get_medicines", response_model=list[MedicineSchema], include_in_schema=False)
async def list_medicines():
    try:
        medicines = await crud.list_in_stock_medicines()
    except sqlite3.Error as e:
        _logger.error(f"Catalog query failed: {e}")
        return JSONResponse(status_code=500, content={"error": f"Query failed: {e}"})
    return [MedicineSchema.from_model(m) for m in medicines]


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@router.post("/orders", status_code=201, response_model=OrderCreatedResponse)
@router.post(
    "/submit_order",
    status_code=201,
    response_model=OrderCreatedResponse,
    include_in_schema=False,
)
async def create_order(body: CreateOrderRequest) -> OrderCreatedResponse:
    # OrderRejected / OrderFailed are turned into responses by the app handlers
    order_id = await crud.create_order(body.to_order())
    return OrderCreatedResponse(order_id=order_id)


@router.get(
    "/orders/{order_id}",
    response_model=OrderDetailResponse,
    responses={404: {"model": FailureResponse}},
)
async def get_order(order_id: int):
    order, items = await crud.get_order(order_id)
    if order is None:
        return JSONResponse(
            status_code=404,
            content=FailureResponse(message="Order not found").model_dump(),
        )
    return OrderDetailResponse.from_records(order, items)
