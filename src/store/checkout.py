from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from db.models import PaymentDetails, ShippingInfo
from store.cart import Cart
from store.client import OrderConfirmation, StoreClient
from store.errors import SubmissionFailed
from utils.logger import get_logger

_logger = get_logger(__name__)


class CheckoutStep(Enum):
    CART = "cart"
    SHIPPING = "shipping"
    PAYMENT = "payment"
    CONFIRMATION = "confirmation"


_PREVIOUS: Dict[CheckoutStep, CheckoutStep] = {
    CheckoutStep.SHIPPING: CheckoutStep.CART,
    CheckoutStep.PAYMENT: CheckoutStep.SHIPPING,
}


class CheckoutMachine:
    """
    Linear checkout wizard: cart -> shipping -> payment -> confirmation.

    Every forward move is guarded; a refused move leaves the step unchanged.
    Back moves one step at a time, and not out of confirmation.
    The cart is only emptied by close() after a confirmed order.
    """

    def __init__(
        self, cart: Cart, client: StoreClient, payment_method: str = "card"
    ) -> None:
        self.cart = cart
        self.client = client
        self.payment_method = payment_method

        self.step = CheckoutStep.CART
        self.shipping = ShippingInfo()
        self.confirmation: Optional[OrderConfirmation] = None
        self.last_error: Optional[str] = None
        # set while an order is in flight; the step is frozen on payment
        self.submitting = False

    def _move(self, step: CheckoutStep) -> None:
        _logger.debug(f"Checkout {self.step.value} -> {step.value}")
        self.step = step

    def proceed_to_shipping(self) -> bool:
        if self.step is not CheckoutStep.CART or self.cart.is_empty:
            return False
        self._move(CheckoutStep.SHIPPING)
        return True

    def submit_shipping(self, info: ShippingInfo) -> Optional[List[str]]:
        """
        Store the shipping form and move to payment.
        Returns the names of blank required fields; empty list means accepted.
        Returns None outside the shipping step.
        """
        if self.step is not CheckoutStep.SHIPPING:
            return None
        self.shipping = info
        missing = info.missing_fields()
        if not missing:
            self._move(CheckoutStep.PAYMENT)
        return missing

    async def place_order(self, payment: PaymentDetails) -> Optional[OrderConfirmation]:
        """
        Submit the order from the payment step.

        Returns None when refused (wrong step, blank payment field or empty
        cart). Raises SubmissionFailed when the server does not accept the
        order; the machine then stays on payment with the cart untouched.
        """
        if self.step is not CheckoutStep.PAYMENT or self.submitting:
            return None
        if payment.missing_fields() or self.cart.is_empty:
            return None

        self.last_error = None
        self.submitting = True
        try:
            confirmation = await self.client.submit_order(
                self.shipping, self.cart, self.payment_method
            )
        except SubmissionFailed as e:
            self.last_error = e.message
            raise
        finally:
            self.submitting = False

        self.confirmation = confirmation
        self._move(CheckoutStep.CONFIRMATION)
        return confirmation

    def back(self) -> bool:
        previous = _PREVIOUS.get(self.step)
        if previous is None or self.submitting:
            return False
        self._move(previous)
        return True

    def cancel(self) -> bool:
        """Leave the wizard before an order was placed; cart and form are kept."""
        if self.step is CheckoutStep.CONFIRMATION or self.submitting:
            return False
        self._move(CheckoutStep.CART)
        return True

    def close(self) -> bool:
        if self.step is not CheckoutStep.CONFIRMATION:
            return False
        self.cart.clear()
        self.confirmation = None
        self.last_error = None
        self._move(CheckoutStep.CART)
        return True
