from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, HorizontalGroup, VerticalScroll
from textual.events import ScreenResume
from textual.message import Message
from textual.widgets import Button, Label, Rule

from db.models import CartLine
from utils.messages import CartChangedMessage, ModeSwitchedMessage
from utils.pure import format_price
from views.base_screen import BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_dialog import DialogModal


class CartLineAdjustMessage(Message):
    bubble = True

    def __init__(self, delta: int) -> None:
        super().__init__()
        self.delta = delta


class CartLineRemoveMessage(Message):
    bubble = True


class CartLineActionLabel(Label):
    def action_adjust(self, delta: int):
        self.post_message(CartLineAdjustMessage(delta))

    def action_remove(self):
        self.post_message(CartLineRemoveMessage())


class CartLineWidget(HorizontalGroup):
    def __init__(self, line: CartLine):
        super().__init__()
        self.line = line

    def compose(self):
        with Container(id="div-cart-item-group"):
            with Container(id="div-item"):
                yield Label(self.line.medicine.name, id="label-item-name")
                yield Label(
                    f"{format_price(self.line.medicine.price)} x {self.line.quantity}",
                    id="label-item-qty",
                )
                yield Label(format_price(self.line.subtotal), id="label-item-price")
            with Container(id="div-actions"):
                yield CartLineActionLabel("[@click=adjust(-1)] - [/]", id="link-item-dec")
                yield CartLineActionLabel("[@click=adjust(1)] + [/]", id="link-item-inc")
                yield CartLineActionLabel(
                    "[@click=remove()]Remove[/]", id="link-item-remove"
                )

    @on(CartLineAdjustMessage)
    def handle_adjust(self, message: CartLineAdjustMessage):
        message.stop()
        # a quantity-1 line decremented by one disappears from the cart
        self.app.state.cart.adjust_quantity(self.line.id, message.delta)
        self.post_message(CartChangedMessage())

    @on(CartLineRemoveMessage)
    @work()
    async def handle_remove_item(self):
        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                f"Remove {self.line.medicine.name} from your cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        )

        if remove_confirmed:
            self.app.state.cart.remove(self.line.id)
            self.post_message(CartChangedMessage())
            self.notify("Item removed from cart.", severity="information")


class CartScreen(BaseScreen):
    """
    cart lines with quantity controls, plus the entry point to checkout
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield VerticalScroll(id="vertscroll-content")
        yield Label("Total: $0.00", id="label-cart-total")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Continue Shopping", id="btn-store")
            yield Button("Checkout", id="btn-checkout", variant="primary")

    async def on_mount(self):
        self.handle_cart_change()

    @on(CartChangedMessage)
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @work(exclusive=True)  # must be exclusive, else two refreshes race and mount duplicates
    async def handle_cart_change(self):
        cart = self.app.state.cart
        lines = cart.lines()

        content = self.query_one("#vertscroll-content")
        shown = [c.line for c in content.children if isinstance(c, CartLineWidget)]
        if shown != lines or not content.children:
            await content.remove_children()
            if lines:
                await content.mount_all([CartLineWidget(line) for line in lines])
                content.remove_class("no-items")
            else:
                await content.mount(Label("Your cart is empty.", id="label-empty"))
                content.add_class("no-items")

        self.query_one("#label-cart-total").update(
            f"Total: {format_price(cart.total())}"
        )
        self.query_one("#btn-checkout").disabled = cart.is_empty

    @on(Button.Pressed, "#btn-store")
    async def handle_continue_shopping(self) -> None:
        self.post_message(ModeSwitchedMessage(self.app.current_mode, "store"))
        await self.app.switch_mode("store")

    @on(Button.Pressed, "#btn-checkout")
    @work()
    async def handle_checkout(self) -> None:
        """
        Open the checkout wizard, refused for an empty cart
        """
        checkout = self.app.state.checkout
        if not checkout.proceed_to_shipping():
            self.app.notify("Cart is empty.", severity="warning")
            return

        await self.app.push_screen_wait(CheckoutModal())
        self.post_message(CartChangedMessage())
