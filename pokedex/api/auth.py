"""
Auth Service - Login and registration against the backend.
"""
import logging

from .gateway import Gateway
from ..models import Credential

logger = logging.getLogger(__name__)


class AuthService:
    """Exchanges user credentials for a bearer token."""

    def __init__(self, gateway: Gateway):
        self.gateway = gateway

    async def login(self, email: str, password: str) -> Credential:
        data = await self.gateway.post('/auth/login', {'email': email, 'password': password})
        credential = Credential.from_api(data)
        logger.info(f'Logged in as {credential.user.name}')
        return credential

    async def register(self, email: str, name: str, password: str) -> Credential:
        data = await self.gateway.post(
            '/auth/register',
            {'email': email, 'name': name, 'password': password},
        )
        credential = Credential.from_api(data)
        logger.info(f'Registered {credential.user.name}')
        return credential
