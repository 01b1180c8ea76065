"""
Collection View - The user's captured pokémon with catalog details.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..api import ApiError, CatalogSource
from ..models import CaptureRecord, Pokemon
from .capture_index import CaptureIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectionEntry:
    record: CaptureRecord
    detail: Optional[Pokemon] = None

    @property
    def image(self) -> str:
        """Snapshot image, then catalog image, then computed artwork."""
        if self.record.image:
            return self.record.image
        if self.detail:
            return self.detail.image
        return self.record.image_url

    @property
    def types(self) -> tuple:
        return self.detail.types if self.detail else ()


class CollectionView:
    """Owned records joined with catalog details, released from here."""

    def __init__(self, capture_index: CaptureIndex, source: CatalogSource):
        self.capture_index = capture_index
        self.source = source
        self.details: Dict[int, Pokemon] = {}
        self.loading = False

    @property
    def entries(self) -> List[CollectionEntry]:
        """Current records in server order. Released records drop out at once."""
        return [
            CollectionEntry(record=r, detail=self.details.get(r.pokemon_id))
            for r in self.capture_index.records
        ]

    async def load(self) -> bool:
        """Refresh owned records, then fetch missing catalog details concurrently."""
        self.loading = True
        try:
            if not await self.capture_index.refresh():
                return False
            missing = {r.pokemon_id for r in self.capture_index.records} - set(self.details)
            await asyncio.gather(*(self._fetch_detail(pokemon_id) for pokemon_id in missing))
            return True
        finally:
            self.loading = False

    async def _fetch_detail(self, pokemon_id: int):
        try:
            self.details[pokemon_id] = await self.source.get_by_key(pokemon_id)
        except ApiError as e:
            # Entry still shows with its snapshot image
            logger.warning(f'Details for pokémon {pokemon_id} unavailable: {e}')

    async def release(self, capture_id: str) -> bool:
        return await self.capture_index.release(capture_id) is not None
