"""
Capture Index - Which catalog ids the current user owns.

The index is a projection of the latest known capture records. refresh()
replaces it wholesale; capture() and release() patch it as soon as the
server confirms them.

A refresh that was already in flight when a write landed would otherwise
overwrite that write with older server data. Writes are journaled while
any refresh is in flight and replayed on top of the refreshed records, so
the most recent write always wins. Overlapping refreshes are resolved by
generation: a refresh never replaces one that started after it.
"""
import logging
from typing import FrozenSet, Iterable, List, Optional, Tuple

from ..api import ApiError, CaptureService, UnauthorizedError
from ..models import CaptureRecord, DecoratedItem, Pokemon
from ..utils import display_name
from .notifications import NotificationQueue

logger = logging.getLogger(__name__)


def decorate(item: Pokemon, owned_ids: Iterable[int]) -> DecoratedItem:
    """Merge a catalog item with ownership. Computed on read, never stored."""
    return DecoratedItem(item=item, owned=item.id in owned_ids)


class CaptureIndex:
    """Owned catalog ids plus the records they were derived from."""

    def __init__(self, service: CaptureService, notifications: NotificationQueue):
        self.service = service
        self.notifications = notifications

        self._records: List[CaptureRecord] = []
        self._ids: FrozenSet[int] = frozenset()
        self.loaded = False

        # Refresh bookkeeping
        self._refresh_generation = 0
        self._applied_generation = 0
        self._refreshes_in_flight = 0

        # Writes since the oldest in-flight refresh: (seq, kind, value)
        self._write_seq = 0
        self._journal: List[Tuple[int, str, object]] = []

        # Bumped by reset() so late responses from an old session are dropped
        self._epoch = 0

    # ============================================
    # READ
    # ============================================

    @property
    def ids(self) -> FrozenSet[int]:
        return self._ids

    @property
    def records(self) -> List[CaptureRecord]:
        return list(self._records)

    def __contains__(self, pokemon_id: int) -> bool:
        return pokemon_id in self._ids

    def __len__(self) -> int:
        return len(self._records)

    def record_for(self, pokemon_id: int) -> Optional[CaptureRecord]:
        """First record owning a catalog id, or None."""
        return next((r for r in self._records if r.pokemon_id == pokemon_id), None)

    def decorate(self, item: Pokemon) -> DecoratedItem:
        return decorate(item, self._ids)

    # ============================================
    # REFRESH
    # ============================================

    async def refresh(self) -> bool:
        """Replace the index with the server's list. Returns True if applied."""
        self._refresh_generation += 1
        generation = self._refresh_generation
        start_seq = self._write_seq
        epoch = self._epoch
        self._refreshes_in_flight += 1

        try:
            records = await self.service.list_mine()
        except UnauthorizedError:
            self._end_refresh()
            logger.debug('Capture refresh rejected, session guard handles it')
            return False
        except ApiError as e:
            self._end_refresh()
            logger.warning(f'Capture refresh failed: {e}')
            if epoch == self._epoch:
                self.notifications.post('Could not load your pokémon.', 'error')
            return False

        applied = False
        if epoch != self._epoch or generation <= self._applied_generation:
            logger.debug(f'Discarding stale capture refresh (generation {generation})')
        else:
            self._set(self._replay(records, start_seq))
            self._applied_generation = generation
            self.loaded = True
            applied = True
            logger.info(f'Capture index refreshed: {len(self._records)} owned')

        self._end_refresh()
        return applied

    def _end_refresh(self):
        self._refreshes_in_flight -= 1
        if self._refreshes_in_flight == 0:
            self._journal.clear()

    def _replay(self, records: List[CaptureRecord], since_seq: int) -> List[CaptureRecord]:
        """Apply journaled writes newer than since_seq on top of fetched records."""
        for seq, kind, value in self._journal:
            if seq > since_seq:
                records = self._patched(records, kind, value)
        return records

    # ============================================
    # WRITES
    # ============================================

    async def capture(self, item: Pokemon) -> Optional[CaptureRecord]:
        """Create a capture record for a catalog item.

        The index only changes after the server confirms. Failures are
        reported as notifications and return None.
        """
        if item.id in self._ids:
            logger.debug(f'{item.name} already owned, sending capture anyway')

        epoch = self._epoch
        name = display_name(item.name)
        try:
            record = await self.service.catch(item.id, item.name, item.image)
        except UnauthorizedError:
            return None
        except ApiError as e:
            logger.warning(f'Capture of {item.name} failed: {e}')
            if epoch == self._epoch:
                self.notifications.post(e.detail or f'Could not capture {name}.', 'error')
            return None

        if epoch == self._epoch:
            self._write('capture', record)
            self.notifications.post(f'{name} captured!', 'success')
        return record

    async def release(self, capture_id: str) -> Optional[CaptureRecord]:
        """Delete a capture record. Nothing changes locally until the server confirms."""
        known = next((r for r in self._records if r.id == capture_id), None)
        epoch = self._epoch
        try:
            released = await self.service.release(capture_id)
        except UnauthorizedError:
            return None
        except ApiError as e:
            logger.warning(f'Release of {capture_id} failed: {e}')
            if epoch == self._epoch:
                self.notifications.post(e.detail or 'Could not release pokémon.', 'error')
            return None

        if epoch == self._epoch:
            self._write('release', capture_id)
            self.notifications.post(f'{display_name((known or released).name)} released.', 'success')
        return released

    def _write(self, kind: str, value):
        self._write_seq += 1
        if self._refreshes_in_flight:
            self._journal.append((self._write_seq, kind, value))
        self._set(self._patched(self._records, kind, value))

    @staticmethod
    def _patched(records: List[CaptureRecord], kind: str, value) -> List[CaptureRecord]:
        """New record list with one write applied."""
        if kind == 'capture':
            if any(r.id == value.id for r in records):
                return records
            return records + [value]
        return [r for r in records if r.id != value]

    def _set(self, records: List[CaptureRecord]):
        # Both fields swap together, readers never see a mix
        self._records = records
        self._ids = frozenset(r.pokemon_id for r in records)

    # ============================================
    # SESSION
    # ============================================

    def reset(self):
        """Forget everything (logout). In-flight responses are discarded."""
        self._epoch += 1
        self._applied_generation = self._refresh_generation
        self._journal.clear()
        self._set([])
        self.loaded = False
