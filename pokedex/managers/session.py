"""
Session Guard - Single owner of the session credential.

Every component that needs the session holds a reference to one guard.
Only the guard writes the credential store; invalidation from any request
lands here and forces the whole application back to the login view.
"""
import logging
from typing import Callable, List, Optional

from .credentials import CredentialStore
from ..controllers import Navigator
from ..models import Credential, User
from ..config import LOGIN_VIEW

logger = logging.getLogger(__name__)


class SessionGuard:
    """Establishes and invalidates the session."""

    def __init__(self, store: CredentialStore, navigator: Navigator):
        self.store = store
        self.navigator = navigator
        self._listeners: List[Callable[[], None]] = []

    @property
    def token(self) -> Optional[str]:
        return self.store.token

    @property
    def user(self) -> Optional[User]:
        credential = self.store.credential
        return credential.user if credential else None

    @property
    def is_authenticated(self) -> bool:
        return self.store.credential is not None

    def on_invalidate(self, callback: Callable[[], None]):
        """Register a callback run after the session is cleared."""
        self._listeners.append(callback)

    def establish(self, credential: Credential):
        """Make a new credential current. Gateway calls use it immediately."""
        self.store.set(credential)
        logger.info(f'Session established for {credential.user.name}')

    def invalidate(self, token: Optional[str]) -> bool:
        """
        Clear the session after a rejected credential.

        Args:
            token: Token the rejected request was sent with, None if it went
                out unauthenticated. A rejection of anything but the current
                token (an old request finishing after a new login) leaves the
                new session alone.

        Idempotent: a second call while logged out clears nothing and does
        not navigate again once the login view is showing. Returns True if a
        credential was cleared.
        """
        current = self.store.token
        if current is not None and token != current:
            logger.debug('Ignoring rejection of a superseded credential')
            return False
        return self._clear()

    def logout(self) -> bool:
        """Explicit logout by the user. Clears whatever credential is held."""
        logger.info('Logging out')
        return self._clear()

    def _clear(self) -> bool:
        cleared = self.store.clear()
        if cleared:
            logger.warning('Session invalidated, credential cleared')
            for callback in self._listeners:
                try:
                    callback()
                except Exception as e:
                    logger.warning(f'Invalidate listener failed: {e}', exc_info=True)

        if not self.navigator.is_public:
            self.navigator.go(LOGIN_VIEW)
        return cleared
