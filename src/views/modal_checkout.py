from typing import Dict, List

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, ContentSwitcher, Input, Label, Markdown

from db.models import PaymentDetails, ShippingInfo
from store.checkout import CheckoutStep
from store.errors import SubmissionFailed
from utils.messages import OrderPlacedMessage
from utils.pure import order_summary_markdown

SHIPPING_INPUTS: Dict[str, str] = {
    "name": "input-name",
    "email": "input-email",
    "address": "input-address",
    "city": "input-city",
    "zip_code": "input-zip",
}

PAYMENT_INPUTS: Dict[str, str] = {
    "cardholder": "input-cardholder",
    "card_number": "input-card-number",
    "expiry": "input-expiry",
    "cvv": "input-cvv",
}

STEP_PANES: Dict[CheckoutStep, str] = {
    CheckoutStep.SHIPPING: "pane-shipping",
    CheckoutStep.PAYMENT: "pane-payment",
    CheckoutStep.CONFIRMATION: "pane-confirmation",
}


class CheckoutModal(ModalScreen[bool]):
    """
    The checkout wizard: shipping form, payment form, confirmation.
    Every button goes through the app's CheckoutMachine; this screen only
    shows whichever step the machine is in.
    Return True if an order was placed, False if the user backed out.
    """

    def compose(self) -> ComposeResult:
        shipping = self.app.state.checkout.shipping
        with Vertical(id="div-checkout"):
            yield Markdown("", id="md-order-summary")
            with ContentSwitcher(initial="pane-shipping", id="switcher-checkout"):
                with Vertical(id="pane-shipping"):
                    yield Label("Shipping Information", classes="title")
                    yield Input(shipping.name, placeholder="Full Name", id="input-name")
                    yield Input(
                        shipping.email, placeholder="Email Address", id="input-email"
                    )
                    yield Input(
                        shipping.address, placeholder="Address", id="input-address"
                    )
                    yield Input(shipping.city, placeholder="City", id="input-city")
                    yield Input(
                        shipping.zip_code, placeholder="Zip Code", id="input-zip"
                    )
                    with Horizontal():
                        yield Button("Back", id="btn-ship-back")
                        yield Button(
                            "Continue to Payment", id="btn-ship-next", variant="primary"
                        )
                with Vertical(id="pane-payment"):
                    yield Label("Payment Information", classes="title")
                    yield Input(placeholder="Cardholder Name", id="input-cardholder")
                    yield Input(placeholder="Card Number", id="input-card-number")
                    with Horizontal():
                        yield Input(placeholder="Expiry MM/YY", id="input-expiry")
                        yield Input(placeholder="CVV", password=True, id="input-cvv")
                    with Horizontal():
                        yield Button("Back", id="btn-pay-back")
                        yield Button(
                            "Confirm Payment", id="btn-pay-submit", variant="primary"
                        )
                with Vertical(id="pane-confirmation"):
                    yield Label("Thank you for your purchase!", classes="title")
                    yield Label("", id="label-confirmation")
                    yield Button("Close", id="btn-close", variant="primary")

    async def on_mount(self):
        cart = self.app.state.cart
        await self.query_one("#md-order-summary", Markdown).update(
            order_summary_markdown(cart.lines(), cart.total())
        )
        self.show_step()

    def show_step(self) -> None:
        checkout = self.app.state.checkout
        pane = STEP_PANES.get(checkout.step)
        if pane is None:  # back at the cart
            self.dismiss(False)
            return
        self.query_one(ContentSwitcher).current = pane

        if checkout.step is CheckoutStep.SHIPPING:
            self.query_one("#input-name").focus()
        elif checkout.step is CheckoutStep.PAYMENT:
            self.query_one("#input-cardholder").focus()
        else:
            self.query_one("#label-confirmation", Label).update(
                f"Your order number is {checkout.confirmation.order_id}. "
                "It will be delivered soon."
            )
            self.query_one("#btn-close").focus()

    def _mark_invalid(self, inputs: Dict[str, str], missing: List[str]) -> None:
        for field_name, input_id in inputs.items():
            widget = self.query_one(f"#{input_id}", Input)
            widget.set_class(field_name in missing, "-invalid")
        if missing:
            self.query_one(f"#{inputs[missing[0]]}").focus()

    def _value(self, input_id: str) -> str:
        return self.query_one(f"#{input_id}", Input).value

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            checkout = self.app.state.checkout
            if checkout.step is CheckoutStep.CONFIRMATION:
                self.handle_close()
            elif checkout.cancel():
                self.dismiss(False)
            else:
                self.notify("Your order is being placed, please wait.")

    @on(Button.Pressed, "#btn-ship-back")
    @on(Button.Pressed, "#btn-pay-back")
    def handle_back(self):
        if self.app.state.checkout.back():
            self.show_step()

    @on(Button.Pressed, "#btn-ship-next")
    def handle_shipping_submit(self):
        info = ShippingInfo(
            **{name: self._value(input_id) for name, input_id in SHIPPING_INPUTS.items()}
        )
        missing = self.app.state.checkout.submit_shipping(info)
        if missing is None:
            return
        self._mark_invalid(SHIPPING_INPUTS, missing)
        if missing:
            self.notify("Please fill in all shipping fields.", severity="error")
            return
        self.show_step()

    @on(Button.Pressed, "#btn-pay-submit")
    @work(exclusive=True)
    async def handle_payment_submit(self):
        payment = PaymentDetails(
            **{name: self._value(input_id) for name, input_id in PAYMENT_INPUTS.items()}
        )
        missing = payment.missing_fields()
        self._mark_invalid(PAYMENT_INPUTS, missing)
        if missing:
            self.notify("Please fill in all payment fields.", severity="error")
            return

        submit_btn = self.query_one("#btn-pay-submit", Button)
        submit_btn.disabled = True
        back_btn = self.query_one("#btn-pay-back", Button)
        back_btn.disabled = True
        submit_btn.label = "Placing order..."
        try:
            confirmation = await self.app.state.checkout.place_order(payment)
        except SubmissionFailed as e:
            # stay on payment, cart untouched, the user may try again
            self.notify(e.message, title="Order failed", severity="error", timeout=8)
            return
        finally:
            submit_btn.disabled = False
            back_btn.disabled = False
            submit_btn.label = "Confirm Payment"

        if confirmation is None:
            return
        self.app.post_message(OrderPlacedMessage(confirmation.order_id))
        self.show_step()

    @on(Button.Pressed, "#btn-close")
    def handle_close(self):
        self.app.state.checkout.close()
        self.dismiss(True)
