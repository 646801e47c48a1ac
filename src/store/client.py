"""HTTP client for the MediShop API.

One httpx.AsyncClient per storefront. Every call is a single attempt:
failures surface to the user, who decides whether to try again.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

import httpx

from db.models import OrderRequest, ShippingInfo
from store.cart import Cart
from store.errors import CatalogUnavailable, SubmissionFailed
from utils.config import get_settings
from utils.logger import get_logger

_logger = get_logger(__name__)


@dataclass(frozen=True)
class OrderConfirmation:
    order_id: int
    message: str


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


class StoreClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self.base_url = base_url or settings.api_url
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.api_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "StoreClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_medicines(self) -> List[dict]:
        """Raw medicine rows from the catalog endpoint."""
        try:
            response = await self._client.get("/medicines")
        except httpx.HTTPError as e:
            raise CatalogUnavailable(f"Could not reach the store: {e}") from e

        data = _json_or_none(response)
        if not response.is_success:
            message = "Failed to fetch medicines"
            if isinstance(data, dict) and data.get("error"):
                message = str(data["error"])
            raise CatalogUnavailable(message)
        if not isinstance(data, list):
            raise CatalogUnavailable("Malformed catalog response")
        return data

    async def submit_order(
        self, shipping: ShippingInfo, cart: Cart, payment_method: str = "card"
    ) -> OrderConfirmation:
        order = OrderRequest(
            customer=shipping,
            items=cart.order_items(),
            total=cart.total(),
            payment_method=payment_method,
        )
        try:
            response = await self._client.post("/orders", json=order.to_dict())
        except httpx.HTTPError as e:
            _logger.error(f"Order submission failed: {e}")
            raise SubmissionFailed(f"Order submission failed: {e}") from e

        body = _json_or_none(response)
        if not isinstance(body, dict):
            body = {}
        if not response.is_success or not body.get("success"):
            message = body.get("message") or "Order submission failed"
            _logger.warning(f"Order refused ({response.status_code}): {message}")
            raise SubmissionFailed(str(message))

        try:
            order_id = int(body["order_id"])
        except (KeyError, TypeError, ValueError) as e:
            raise SubmissionFailed("Malformed order response") from e
        _logger.info(f"Order {order_id} accepted.")
        return OrderConfirmation(order_id=order_id, message=body.get("message", ""))
