"""
Trainer Directory - Other users and what they have captured.
"""
import logging
from typing import List, Optional

from ..api import ApiError, UnauthorizedError, UserService
from ..models import Trainer
from .notifications import NotificationQueue

logger = logging.getLogger(__name__)


class TrainerDirectory:
    """Trainer list with one expandable entry."""

    def __init__(self, service: UserService, notifications: NotificationQueue):
        self.service = service
        self.notifications = notifications
        self.trainers: List[Trainer] = []
        self.expanded_id: Optional[str] = None
        self.loading = False
        self.loading_trainer_id: Optional[str] = None

    def get(self, trainer_id: str) -> Optional[Trainer]:
        return next((t for t in self.trainers if t.id == trainer_id), None)

    async def load(self) -> bool:
        self.loading = True
        try:
            self.trainers = await self.service.list_trainers()
            logger.info(f'Loaded {len(self.trainers)} trainers')
            return True
        except UnauthorizedError:
            return False
        except ApiError as e:
            logger.warning(f'Trainer list failed: {e}')
            self.notifications.post('Could not load trainers.', 'error')
            return False
        finally:
            self.loading = False

    async def toggle(self, trainer_id: str) -> Optional[Trainer]:
        """Collapse the expanded trainer, or expand another.

        A trainer listed without captures is re-fetched on expand, since
        the list endpoint may omit them. Returns the expanded trainer.
        """
        if self.expanded_id == trainer_id:
            self.expanded_id = None
            return None

        trainer = self.get(trainer_id)
        if trainer is not None and not trainer.pokemons:
            self.loading_trainer_id = trainer_id
            try:
                fresh = await self.service.get_trainer(trainer_id)
                if fresh is not None:
                    trainer.pokemons = fresh.pokemons
            except UnauthorizedError:
                return None
            except ApiError as e:
                logger.warning(f'Captures of trainer {trainer_id} failed: {e}')
                self.notifications.post("Could not load trainer's pokémon.", 'error')
            finally:
                self.loading_trainer_id = None

        self.expanded_id = trainer_id
        return trainer
