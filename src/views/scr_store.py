from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.events import ScreenResume
from textual.reactive import reactive
from textual.widgets import DataTable, Input, Label

from utils.messages import CartChangedMessage
from utils.pure import format_price
from views.base_screen import BaseScreen


class StoreScreen(BaseScreen):
    """
    Browse in-stock medicines, filter by name, add to cart.
    """

    # shown in footer only, the table handles enter itself
    BINDINGS = [
        Binding("enter", "noop", "Add to Cart", show=True, key_display="⏎"),
        Binding("ctrl+f", "focus_search", "Search", show=True),
    ]

    query_str = reactive("", init=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Input(id="input-search", placeholder="Search medicines by name...")
        table = DataTable(id="table-medicines")
        table.add_columns("ID", "Name", "Description", "Price")
        table.add_column("In Cart", key="in_cart")
        yield table
        yield Label("", id="label-result-cnt")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True

        self.update_results()
        self.query_one("#input-search").focus()

    def action_noop(self):
        pass

    def action_focus_search(self):
        self.query_one("#input-search").focus()

    @on(Input.Changed, "#input-search")
    def handle_search(self, message: Input.Changed) -> None:
        self.query_str = message.value

    def watch_query_str(self, _old: str, _new: str) -> None:
        self.update_results()

    @on(ScreenResume)
    def update_results(self) -> None:
        state = self.app.state
        medicines = state.catalog.search(self.query_str)

        table = self.query_one(DataTable)
        table.clear()
        for m in medicines:
            in_cart = state.cart.quantity_of(m.id)
            table.add_row(
                m.id,
                m.name,
                m.description,
                format_price(m.price),
                in_cart or "",
                key=str(m.id),
            )

        if medicines:
            text = f"{len(medicines)} medicine(s)"
        elif self.query_str.strip():
            text = f'No medicines match "{self.query_str.strip()}".'
        else:
            text = "No medicines in stock."
        self.query_one("#label-result-cnt").update(text)

    @on(DataTable.RowSelected, "#table-medicines")
    def handle_add_to_cart(self, event: DataTable.RowSelected) -> None:
        medicine = self.app.state.catalog.get(int(event.row_key.value))
        if medicine is None:
            return
        line = self.app.state.cart.add(medicine)
        self.notify(f"{medicine.name} added to cart ({line.quantity} in cart).")

        self.query_one(DataTable).update_cell(event.row_key, "in_cart", line.quantity)
        self.post_message(CartChangedMessage())
