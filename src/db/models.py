# provide dataclass models

from dataclasses import dataclass, fields
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

CENTS = Decimal("0.01")


def to_price(val) -> Decimal:
    """Coerce int, float, str or Decimal into a Decimal rounded to cents."""
    if isinstance(val, Decimal):
        price = val
    else:
        try:
            price = Decimal(str(val))
        except InvalidOperation as e:
            raise ValueError(f"Not a price: {val!r}") from e
    if not price.is_finite():
        raise ValueError(f"Not a price: {val!r}")
    return price.quantize(CENTS)


@dataclass(frozen=True)
class Medicine:
    id: int
    name: str
    description: str
    price: Decimal
    image: str

    @classmethod
    def from_dict(cls, data: dict) -> "Medicine":
        return cls(
            id=int(data["id"]),
            name=str(data["name"]),
            description=str(data.get("description") or ""),
            price=to_price(data["price"]),
            image=str(data.get("image") or ""),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": float(self.price),
            "image": self.image,
        }


@dataclass(frozen=True)
class CartLine:
    medicine: Medicine
    quantity: int

    @property
    def id(self) -> int:
        return self.medicine.id

    @property
    def subtotal(self) -> Decimal:
        return self.medicine.price * self.quantity


@dataclass(frozen=True)
class ShippingInfo:
    name: str = ""
    email: str = ""
    address: str = ""
    city: str = ""
    zip_code: str = ""

    def missing_fields(self) -> List[str]:
        return [f.name for f in fields(self) if not getattr(self, f.name).strip()]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "address": self.address,
            "city": self.city,
            "zipCode": self.zip_code,
        }


@dataclass(frozen=True)
class PaymentDetails:
    # collected for the form only, never sent anywhere
    cardholder: str = ""
    card_number: str = ""
    expiry: str = ""
    cvv: str = ""

    def missing_fields(self) -> List[str]:
        return [f.name for f in fields(self) if not getattr(self, f.name).strip()]


@dataclass(frozen=True)
class OrderItem:
    id: int
    quantity: int
    price: Decimal


@dataclass(frozen=True)
class OrderRequest:
    customer: ShippingInfo
    items: List[OrderItem]
    total: Decimal
    payment_method: str = "card"

    def to_dict(self) -> dict:
        return {
            "customer": self.customer.to_dict(),
            "items": [
                {"id": i.id, "quantity": i.quantity, "price": float(i.price)}
                for i in self.items
            ],
            "total": float(self.total),
            "payment_method": self.payment_method,
        }


@dataclass(frozen=True)
class OrderRecord:
    id: int
    customer_name: str
    email: str
    address: str
    city: str
    zip_code: str
    total: Decimal
    payment_method: str
    created_at: Optional[datetime]


@dataclass(frozen=True)
class OrderItemRecord:
    order_id: int
    medicine_id: int
    quantity: int
    price: Decimal  # unit price at time of order
