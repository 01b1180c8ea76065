"""
User Service - Trainers and their captures.

The backend is inconsistent about envelopes: the list may be bare or
wrapped in 'users' / 'data', and a single trainer may come wrapped in
'user'. Both shapes are accepted.
"""
from typing import List, Optional, Any

from .gateway import Gateway
from ..models import Trainer


def normalize_trainers(payload: Any) -> List[dict]:
    """Extract the trainer list from any of the known envelopes."""
    if not payload:
        return []
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ('users', 'data'):
            if isinstance(payload.get(key), list):
                return payload[key]
    return []


class UserService:
    def __init__(self, gateway: Gateway):
        self.gateway = gateway

    async def list_trainers(self) -> List[Trainer]:
        data = await self.gateway.get('/users')
        return [Trainer.from_api(t) for t in normalize_trainers(data) if isinstance(t, dict)]

    async def get_trainer(self, user_id: str) -> Optional[Trainer]:
        data = await self.gateway.get(f'/users/{user_id}/pokemons')
        if not data:
            return None
        if isinstance(data, dict) and isinstance(data.get('user'), dict):
            data = data['user']
        return Trainer.from_api(data)
