"""
Catalog Source - Read-only access to the public PokeAPI catalog.
"""
import asyncio
import logging
from typing import Union

from .gateway import Gateway
from ..models import Pokemon, BrowsePage
from ..utils import normalize_key

logger = logging.getLogger(__name__)


class CatalogSource:
    """Paginated listing and key lookup against the public catalog."""

    def __init__(self, gateway: Gateway):
        self.gateway = gateway

    async def list(self, limit: int, offset: int) -> BrowsePage:
        """Fetch one page with full item details, in upstream order.

        Upstream listings only carry names, so every entry is resolved
        concurrently before the page is returned.
        """
        data = await self.gateway.get('/pokemon', params={'limit': limit, 'offset': offset})
        results = data.get('results') or []
        items = await asyncio.gather(*(self.get_by_key(entry['name']) for entry in results))
        logger.debug(f'Catalog page offset={offset} limit={limit}: {len(items)} items')
        return BrowsePage(
            items=list(items),
            offset=offset,
            limit=limit,
            has_next=bool(data.get('next')),
            total=data.get('count'),
        )

    async def get_by_key(self, key: Union[str, int]) -> Pokemon:
        """Exact lookup by name or id. Raises NotFoundError on a miss."""
        data = await self.gateway.get(f'/pokemon/{normalize_key(key)}')
        return Pokemon.from_api(data)
