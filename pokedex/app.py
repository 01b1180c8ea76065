"""
Pokedex Application - Wires services, session and views together.
"""
import asyncio
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from .config import API_URL, POKEAPI_URL, CREDENTIALS_PATH, HOME_VIEW, LOGIN_VIEW
from .api import (
    ApiError, AuthenticatedGateway, AuthService, CaptureService,
    CatalogSource, Gateway, UserService,
)
from .controllers import Navigator
from .managers import (
    CaptureIndex, CatalogBrowser, CollectionView, CredentialStore,
    NotificationQueue, SessionGuard, TrainerDirectory,
)
from .models import CaptureRecord, Credential, Pokemon
from .utils import display_name, normalize_key

logger = logging.getLogger(__name__)


class Pokedex:
    """Main application object. One per process; UIs drive it."""

    def __init__(self, api_url: str = API_URL, pokeapi_url: str = POKEAPI_URL,
                 credentials_path: Optional[Path] = CREDENTIALS_PATH):
        # Session
        self.navigator = Navigator(LOGIN_VIEW)
        self.credentials = CredentialStore(credentials_path)
        self.session = SessionGuard(self.credentials, self.navigator)

        # Services
        self.backend = AuthenticatedGateway(api_url, self.session)
        self.auth = AuthService(self.backend)
        self.captures = CaptureService(self.backend)
        self.users = UserService(self.backend)
        self.catalog = CatalogSource(Gateway(pokeapi_url))

        # Views
        self.notifications = NotificationQueue()
        self.capture_index = CaptureIndex(self.captures, self.notifications)
        self.browser = CatalogBrowser(self.catalog, self.capture_index, self.notifications)
        self.collection = CollectionView(self.capture_index, self.catalog)
        self.trainers = TrainerDirectory(self.users, self.notifications)

        self.session.on_invalidate(self._on_session_cleared)

    # ============================================
    # LIFECYCLE
    # ============================================

    async def start(self):
        """Restore a saved session and load the home view if there is one."""
        if self.credentials.load() is None:
            logger.info('No saved session, showing login')
            self.navigator.go(LOGIN_VIEW)
            return
        self.navigator.go(HOME_VIEW)
        await self._load_home()

    async def _load_home(self):
        # Both fetches run concurrently on the loop
        await asyncio.gather(self.capture_index.refresh(), self.browser.load())

    def _on_session_cleared(self):
        self.capture_index.reset()
        self.browser.reset()
        self.trainers.trainers = []
        self.trainers.expanded_id = None
        self.collection.details.clear()

    # ============================================
    # AUTH
    # ============================================

    async def login(self, email: str, password: str) -> bool:
        try:
            credential = await self.auth.login(email, password)
        except ApiError as e:
            logger.warning(f'Login failed: {e}')
            self.notifications.post(e.detail or 'Login failed.', 'error')
            return False
        await self._enter(credential)
        return True

    async def register(self, email: str, name: str, password: str) -> bool:
        try:
            credential = await self.auth.register(email, name, password)
        except ApiError as e:
            logger.warning(f'Registration failed: {e}')
            self.notifications.post(e.detail or 'Registration failed.', 'error')
            return False
        await self._enter(credential)
        return True

    async def _enter(self, credential: Credential):
        self.session.establish(credential)
        self.navigator.go(HOME_VIEW)
        self.notifications.post(f'Welcome, {credential.user.name}!', 'success')
        await self._load_home()

    def logout(self):
        self.session.logout()

    # ============================================
    # ACTIONS
    # ============================================

    async def _resolve(self, key: Union[str, int]) -> Optional[Pokemon]:
        """Catalog item by key: the displayed one if loaded, else a lookup."""
        wanted = normalize_key(key)
        item = next((i for i in self.browser.items if wanted in (i.name, str(i.id))), None)
        if item is not None:
            return item
        try:
            return await self.catalog.get_by_key(key)
        except ApiError as e:
            logger.warning(f'Lookup of {key} failed: {e}')
            self.notifications.post(f'Pokémon "{key}" not found!', 'error')
            return None

    async def detail(self, key: Union[str, int]) -> Optional[Tuple[Pokemon, Optional[CaptureRecord]]]:
        """One catalog item and the user's record for it, if caught.

        The item lookup and the ownership refresh run concurrently.
        """
        item, _ = await asyncio.gather(self._resolve(key), self.capture_index.refresh())
        if item is None:
            return None
        return item, self.capture_index.record_for(item.id)

    async def catch(self, key: Union[str, int]) -> Optional[CaptureRecord]:
        """Capture by catalog key, using the displayed item when it is loaded."""
        item = await self._resolve(key)
        if item is None:
            return None
        if item.id in self.capture_index:
            self.notifications.post(f'{display_name(item.name)} is already in your collection.', 'info')
            return None
        return await self.capture_index.capture(item)

    async def release(self, capture_id: str) -> bool:
        return await self.collection.release(capture_id)

    async def release_item(self, key: Union[str, int]) -> Optional[CaptureRecord]:
        """Release the user's record for a catalog item."""
        item = await self._resolve(key)
        if item is None:
            return None
        if not self.capture_index.loaded:
            await self.capture_index.refresh()
        record = self.capture_index.record_for(item.id)
        if record is None:
            self.notifications.post(f'{display_name(item.name)} is not in your collection.', 'info')
            return None
        return await self.capture_index.release(record.id)
