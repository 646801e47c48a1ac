"""MediShop FastAPI application.

Usage:
    uvicorn server:app --app-dir src --port 8000
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import router
from api.schemas import FailureResponse
from db.crud import OrderFailed, OrderRejected
from db.database import connect
from utils.config import Settings, get_settings
from utils.logger import get_logger

_logger = get_logger(__name__)


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=FailureResponse(message=message).model_dump()
    )


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    types = {e.get("type") for e in errors}
    if "json_invalid" in types:
        return "Invalid JSON data"
    if "missing" in types:
        return "Missing required fields"
    first = errors[0] if errors else {}
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return f"Invalid order data: {loc} {first.get('msg', '')}".strip()


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    message = _validation_message(exc)
    _logger.info(f"{request.method} {request.url.path} rejected: {message}")
    return _failure(400, message)


async def handle_order_rejected(request: Request, exc: OrderRejected) -> JSONResponse:
    return _failure(409, exc.message)


async def handle_order_failed(request: Request, exc: OrderFailed) -> JSONResponse:
    return _failure(500, f"Database error: {exc.message}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # creates tables and seed data before the first request
    async with connect():
        pass
    _logger.info("MediShop API ready.")
    yield


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="MediShop API",
        description="Online pharmacy storefront: catalog and orders",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.allowed_origin],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(OrderRejected, handle_order_rejected)
    app.add_exception_handler(OrderFailed, handle_order_failed)

    app.include_router(router)
    return app
