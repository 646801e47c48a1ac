from typing import Optional

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from store.errors import CatalogUnavailable
from utils.logger import get_logger
from utils.messages import ModeSwitchedMessage, OrderPlacedMessage, QuitRequestedMessage
from utils.state import StoreState
from views.scr_cart import CartScreen
from views.scr_error import CatalogErrorScreen
from views.scr_store import StoreScreen

_logger = get_logger(__name__)


class MediShopApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "store": StoreScreen,
        "cart": CartScreen,
    }

    STORE_MODES = {
        "store": "Medicines",
        "cart": "Cart",
    }

    CSS_PATH = "styles/store.tcss"

    state: StoreState

    def __init__(self, state: Optional[StoreState] = None):
        super().__init__()
        self.state = state or StoreState.create()

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.title = "MediShop Online Pharmacy"
        self.load_catalog()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @work(exclusive=True)
    async def load_catalog(self):
        try:
            await self.state.catalog.load()
        except CatalogUnavailable as e:
            _logger.error(f"Catalog unavailable: {e.message}")
            await self.push_screen(CatalogErrorScreen(e.message))
            return

        self.post_message(ModeSwitchedMessage(self.current_mode, "store"))
        await self.switch_mode("store")

    @on(OrderPlacedMessage)
    def handle_order_placed(self, message: OrderPlacedMessage):
        _logger.info(f"Order {message.order_id} confirmed to the customer.")

    @on(QuitRequestedMessage)
    @work
    async def handle_quit(self):
        await self.state.close()
        self.exit()


def run():
    app = MediShopApp()
    app.run()


if __name__ == "__main__":
    run()
