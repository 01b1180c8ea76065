"""
Pokedex Managers - Session, notifications and synchronized views.
"""
from .credentials import CredentialStore
from .session import SessionGuard
from .notifications import NotificationQueue
from .capture_index import CaptureIndex, decorate
from .browser import CatalogBrowser
from .collection import CollectionView, CollectionEntry
from .trainers import TrainerDirectory

__all__ = [
    'CredentialStore', 'SessionGuard', 'NotificationQueue',
    'CaptureIndex', 'decorate', 'CatalogBrowser',
    'CollectionView', 'CollectionEntry', 'TrainerDirectory',
]
