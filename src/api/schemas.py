"""Pydantic request/response schemas for the storefront API.

These are the wire contracts; they convert into the dataclasses in
db.models before anything reaches the database layer.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from db import models

# sqlite INTEGER is a signed 64-bit value
MAX_ROW_ID = 2**63 - 1
MAX_LINE_QUANTITY = 10_000


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
class MedicineSchema(BaseModel):
    id: int
    name: str
    description: str
    price: float
    image: str

    @classmethod
    def from_model(cls, medicine: models.Medicine) -> "MedicineSchema":
        return cls(**medicine.to_dict())


# ---------------------------------------------------------------------------
# Order request
# ---------------------------------------------------------------------------
class CustomerSchema(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    zip_code: str = Field(min_length=1, alias="zipCode")

    model_config = {"populate_by_name": True}


class OrderItemSchema(BaseModel):
    # extra cart fields (name, image, ...) sent by clients are ignored
    id: int = Field(gt=0, le=MAX_ROW_ID)
    quantity: int = Field(ge=1, le=MAX_LINE_QUANTITY)
    price: Decimal = Field(ge=0)


class CreateOrderRequest(BaseModel):
    customer: CustomerSchema
    items: list[OrderItemSchema] = Field(min_length=1)
    total: Decimal = Field(ge=0)
    payment_method: str = "card"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer": {
                        "name": "Jane Doe",
                        "email": "jane@example.com",
                        "address": "1 Main St",
                        "city": "Springfield",
                        "zipCode": "12345",
                    },
                    "items": [{"id": 1, "quantity": 2, "price": 5.0}],
                    "total": 10.0,
                    "payment_method": "card",
                }
            ]
        }
    }

    def to_order(self) -> models.OrderRequest:
        c = self.customer
        return models.OrderRequest(
            customer=models.ShippingInfo(
                name=c.name,
                email=c.email,
                address=c.address,
                city=c.city,
                zip_code=c.zip_code,
            ),
            items=[
                models.OrderItem(id=i.id, quantity=i.quantity, price=i.price)
                for i in self.items
            ],
            total=self.total,
            payment_method=self.payment_method or "card",
        )


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------
class OrderCreatedResponse(BaseModel):
    success: bool = True
    order_id: int
    message: str = "Order placed successfully"


class FailureResponse(BaseModel):
    success: bool = False
    message: str


class OrderItemResponse(BaseModel):
    medicine_id: int
    quantity: int
    price: float


class OrderDetailResponse(BaseModel):
    id: int
    customer_name: str
    email: str
    address: str
    city: str
    zip_code: str
    total: float
    payment_method: str
    created_at: datetime | None
    items: list[OrderItemResponse]

    @classmethod
    def from_records(
        cls, order: models.OrderRecord, items: list[models.OrderItemRecord]
    ) -> "OrderDetailResponse":
        return cls(
            id=order.id,
            customer_name=order.customer_name,
            email=order.email,
            address=order.address,
            city=order.city,
            zip_code=order.zip_code,
            total=float(order.total),
            payment_method=order.payment_method,
            created_at=order.created_at,
            items=[
                OrderItemResponse(
                    medicine_id=i.medicine_id,
                    quantity=i.quantity,
                    price=float(i.price),
                )
                for i in items
            ],
        )
