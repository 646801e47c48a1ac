from textual import on
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label

from utils.messages import QuitRequestedMessage


class CatalogErrorScreen(Screen):
    """
    Replaces the whole storefront when the catalog could not be loaded.
    Nothing else is reachable from here; the user can only quit.
    """

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="div-error"):
            yield Label("The store is unavailable", id="label-error-title")
            yield Label(self.message, id="label-error-message")
            yield Button("Quit", id="btn-quit", variant="error")
        yield Footer(show_command_palette=False)

    def on_mount(self):
        self.sub_title = "Error"
        self.query_one("#btn-quit").focus()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self) -> None:
        self.app.post_message(QuitRequestedMessage())
