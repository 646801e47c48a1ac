from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import ScreenResume
from textual.screen import Screen
from textual.widgets import Footer, Header, Label, ListItem, ListView, Markdown

from utils.messages import (
    CartChangedMessage,
    ModeSwitchedMessage,
    QuitRequestedMessage,
)
from utils.pure import format_price, generate_markdown_table
from views.modal_dialog import DialogModal


class Sidebar(Container):
    def compose(self) -> ComposeResult:
        yield Label("Your Cart", id="label-info-1")
        yield Markdown("", id="md-cart-summary")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    async def on_mount(self):
        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [
                ListItem(Label(v), id="list-menu-item-" + k)
                for k, v in self.app.STORE_MODES.items()
            ]
        )
        self.highlight_item(self.app.current_mode)
        await self.update_summary()

    async def update_summary(self):
        cart = self.app.state.cart
        table_rows = [
            ["Items", cart.item_count],
            ["Total", format_price(cart.total())],
        ]
        md_table_str = generate_markdown_table(None, table_rows, ["l", "r"])
        await self.query_one(Markdown).update(md_table_str)

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        if self.app.current_mode != selected_mode:
            self.post_message(ModeSwitchedMessage(self.app.current_mode, selected_mode))
            await self.app.switch_mode(selected_mode)

    def highlight_item(self, mode_str: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = item.id == "list-menu-item-" + mode_str


class BaseScreen(Screen):
    """
    Inherited by all store screens, contains common elements like
    headers, footers, the cart sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "MediShop",
        show_sidebar: bool = True,
    ) -> None:
        """
        configure behavior of the base screen
        """
        self.app.title = "MediShop Online Pharmacy"
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if isinstance(self, v) and k in self.app.STORE_MODES:
                self.sub_title = self.app.STORE_MODES[k]

        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    @on(CartChangedMessage)
    @on(ScreenResume)
    async def refresh_sidebar(self) -> None:
        for sidebar in self.query(Sidebar):
            sidebar.highlight_item(self.app.current_mode)
            await sidebar.update_summary()

    @work()
    async def action_quit(self):
        if await self.app.push_screen_wait(
            DialogModal(
                "Leave MediShop? Your cart will be lost.",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
            )
        ):
            self.app.post_message(QuitRequestedMessage())
