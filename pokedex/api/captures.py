"""
Capture Service - Owned-record CRUD on the backend.
"""
from typing import List, Optional

from .gateway import Gateway
from ..models import CaptureRecord


class CaptureService:
    """Backend endpoints for the current user's captured pokémon."""

    def __init__(self, gateway: Gateway):
        self.gateway = gateway

    async def list_mine(self) -> List[CaptureRecord]:
        data = await self.gateway.get('/pokemons')
        return [CaptureRecord.from_api(p) for p in (data or {}).get('pokemons') or []]

    async def catch(self, pokemon_id: int, name: str, image: Optional[str] = None) -> CaptureRecord:
        body = {'pokemonId': pokemon_id, 'name': name}
        if image:
            body['image'] = image
        data = await self.gateway.post('/pokemons/catch', body)
        return CaptureRecord.from_api(data['pokemon'])

    async def release(self, capture_id: str) -> CaptureRecord:
        data = await self.gateway.delete(f'/pokemons/release/{capture_id}')
        return CaptureRecord.from_api(data['pokemon'])
