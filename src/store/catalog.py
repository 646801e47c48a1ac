from typing import List, Optional

from db.models import Medicine
from store.client import StoreClient
from store.errors import CatalogUnavailable
from utils.logger import get_logger

_logger = get_logger(__name__)


class CatalogStore:
    """
    In-memory snapshot of the in-stock medicines.
    Filled by load(); search() filters the snapshot without another request.
    """

    def __init__(self, client: StoreClient) -> None:
        self._client = client
        self._items: List[Medicine] = []

    @property
    def items(self) -> List[Medicine]:
        return list(self._items)

    async def load(self) -> List[Medicine]:
        """
        Replace the snapshot with a fresh copy from the api.
        Raises CatalogUnavailable; the previous snapshot is kept in that case.
        """
        rows = await self._client.fetch_medicines()
        try:
            items = [Medicine.from_dict(row) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogUnavailable(f"Malformed medicine entry: {e}") from e
        self._items = items
        _logger.info(f"Catalog loaded, {len(items)} medicines in stock.")
        return self.items

    def search(self, term: str) -> List[Medicine]:
        needle = term.strip().lower()
        if not needle:
            return self.items
        return [m for m in self._items if needle in m.name.lower()]

    def get(self, medicine_id: int) -> Optional[Medicine]:
        for m in self._items:
            if m.id == medicine_id:
                return m
        return None
