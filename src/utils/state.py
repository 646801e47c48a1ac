from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from store.cart import Cart
from store.catalog import CatalogStore
from store.checkout import CheckoutMachine
from store.client import StoreClient


@dataclass
class StoreState:
    """
    Everything one storefront session owns, handed to the app and its screens.

    Fields:
      - client: http client for the api
      - catalog: in-stock medicines, loaded once at startup
      - cart: the session cart, not persisted
      - checkout: wizard driving the cart through to an order
    """

    client: StoreClient
    catalog: CatalogStore = field(init=False)
    cart: Cart = field(default_factory=Cart)
    checkout: CheckoutMachine = field(init=False)

    def __post_init__(self) -> None:
        self.catalog = CatalogStore(self.client)
        self.checkout = CheckoutMachine(self.cart, self.client)

    @classmethod
    def create(cls, client: Optional[StoreClient] = None) -> "StoreState":
        return cls(client=client or StoreClient())

    async def close(self) -> None:
        await self.client.aclose()
