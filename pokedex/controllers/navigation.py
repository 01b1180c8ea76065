"""
Navigator - Tracks which view the application is showing.

Rendering and routing live outside the core; this controller only records
the current view so the session guard can decide whether a forced return
to the login view is needed.
"""
import logging
from typing import Callable, List, Optional

from ..config import LOGIN_VIEW, PUBLIC_VIEWS

logger = logging.getLogger(__name__)


class Navigator:
    """Current view plus history, with an optional change callback."""

    def __init__(self, initial: str = LOGIN_VIEW, on_navigate: Optional[Callable[[str], None]] = None):
        self.current_view = initial
        self.history: List[str] = [initial]
        self._on_navigate = on_navigate

    @property
    def is_public(self) -> bool:
        """True if the current view is reachable without a session."""
        return self.current_view in PUBLIC_VIEWS

    def go(self, view: str):
        """Switch to a view. Going to the current view is a no-op."""
        if view == self.current_view:
            return
        logger.info(f'Navigate: {self.current_view} -> {view}')
        self.current_view = view
        self.history.append(view)
        if self._on_navigate:
            self._on_navigate(view)
