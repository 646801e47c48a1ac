from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class CartChangedMessage(Message):
    """
    Fired whenever a cart line is added, removed or has its quantity changed.
    Refreshes the cart screen and the sidebar summary.

    If posted from outside CartScreen, make sure to post at App level
    """

    bubble = True


class OrderPlacedMessage(Message):
    """
    Fired when the api accepted an order, before the confirmation is closed.
    """

    bubble = True

    def __init__(self, order_id: int) -> None:
        super().__init__()
        self.order_id = order_id


class ModeSwitchedMessage(Message):
    """
    fired whenever switch_mode is called
    must be fired from app level
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
