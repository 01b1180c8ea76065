"""
Catalog Browser - Growing, ordered view over the paginated catalog.

Two mutually exclusive modes:
- browse: pages fetched so far, concatenated in upstream order
- search: exactly one item found by exact key lookup

States: IDLE -> LOADING_INITIAL -> READY <-> LOADING_MORE, SEARCHING, ERROR.

There is no cancellation of in-flight requests. Every reset or search bumps
a generation counter; a response is applied only if the generation it was
issued under is still current (latest wins). Concurrent "load more" calls
each reserve the next offset when issued, and finished pages are held back
until every earlier page has been appended, so pages always land in the
order they were requested.
"""
import logging
from typing import Dict, List, Optional

from ..api import ApiError, CatalogSource, NotFoundError, UnauthorizedError
from ..config import PAGE_SIZE
from ..models import BrowsePage, BrowserState, DecoratedItem, Pokemon
from ..utils import display_name, normalize_key
from .capture_index import CaptureIndex, decorate
from .notifications import NotificationQueue

logger = logging.getLogger(__name__)


class CatalogBrowser:
    """State machine behind the catalog list."""

    def __init__(self, source: CatalogSource, capture_index: CaptureIndex,
                 notifications: NotificationQueue, page_size: int = PAGE_SIZE):
        self.source = source
        self.capture_index = capture_index
        self.notifications = notifications
        self.page_size = page_size

        self.state = BrowserState.IDLE
        self.items: List[Pokemon] = []
        self.offset = 0            # Next offset to append (pages applied so far)
        self.has_more = False
        self.search_term = ''
        self.error: Optional[str] = None

        self._generation = 0
        self._next_offset = 0      # Next offset to request (includes in-flight pages)
        self._arrived: Dict[int, BrowsePage] = {}
        self._search_pending = False

    # ============================================
    # VIEW
    # ============================================

    @property
    def mode(self) -> str:
        return 'search' if self.search_term else 'browse'

    @property
    def is_loading(self) -> bool:
        return (self.state in (BrowserState.LOADING_INITIAL, BrowserState.LOADING_MORE)
                or self._search_pending)

    @property
    def can_load_more(self) -> bool:
        return (self.has_more and not self.search_term
                and self.state in (BrowserState.READY, BrowserState.LOADING_MORE))

    def visible(self) -> List[DecoratedItem]:
        """Items as displayed, decorated with live ownership."""
        owned = self.capture_index.ids
        return [decorate(item, owned) for item in self.items]

    # ============================================
    # BROWSE
    # ============================================

    async def load(self) -> bool:
        """(Re)load the default paginated view from offset 0.

        Used for the first load, explicit reset, retry after ERROR and
        leaving search mode. Returns True if the first page was applied.
        """
        generation = self._start_generation()
        self.search_term = ''
        self.items = []
        self.offset = 0
        self.has_more = False
        self.error = None
        self.state = BrowserState.LOADING_INITIAL

        try:
            page = await self.source.list(self.page_size, 0)
        except UnauthorizedError:
            if generation == self._generation:
                self.state = BrowserState.IDLE
            return False
        except ApiError as e:
            if generation != self._generation:
                return False
            logger.error(f'Catalog load failed: {e}')
            self.error = e.message
            self.state = BrowserState.ERROR
            return False

        if generation != self._generation:
            logger.debug('Discarding stale first page')
            return False

        self.items = list(page.items)
        self.offset = self.page_size
        self._next_offset = self.offset
        self.has_more = page.has_next
        self.state = BrowserState.READY
        logger.info(f'Catalog loaded: {len(self.items)} items, more={self.has_more}')
        return True

    async def retry(self) -> bool:
        """ERROR -> LOADING_INITIAL."""
        return await self.load()

    async def load_more(self) -> bool:
        """Append the next page. A no-op (no request) when nothing more can load."""
        if not self.can_load_more:
            return False

        generation = self._generation
        offset = self._next_offset
        self._next_offset += self.page_size
        self.state = BrowserState.LOADING_MORE

        try:
            page = await self.source.list(self.page_size, offset)
        except UnauthorizedError:
            if generation == self._generation:
                self._abandon_pages()
            return False
        except ApiError as e:
            if generation != self._generation:
                return False
            logger.warning(f'Load more at offset {offset} failed: {e}')
            self._abandon_pages()
            self.notifications.post('Could not load more pokémon.', 'error')
            return False

        if generation != self._generation:
            logger.debug(f'Discarding stale page at offset {offset}')
            return False

        self._arrived[offset] = page
        self._append_arrived()
        return True

    def _append_arrived(self):
        """Append every page that is next in line, in offset order."""
        while self.offset in self._arrived:
            page = self._arrived.pop(self.offset)
            self.items.extend(page.items)
            self.offset += self.page_size
            self.has_more = page.has_next
            logger.debug(f'Appended page, {len(self.items)} items, offset={self.offset}')
            if not page.has_next:
                # End of catalog: later pages in flight are empty, drop them
                self._abandon_pages()
                return

        if self._next_offset == self.offset:
            self.state = BrowserState.READY

    def _abandon_pages(self):
        """Discard in-flight and buffered pages; the next load more starts at offset."""
        self._generation += 1
        self._arrived.clear()
        self._next_offset = self.offset
        self.state = BrowserState.READY

    # ============================================
    # SEARCH
    # ============================================

    async def search(self, term: str) -> bool:
        """Exact key lookup against the catalog, replacing the view with one item.

        An empty term leaves search mode and reloads the default view. A
        miss reports an error notification and falls back to the default
        view. Returns True if a match is displayed.
        """
        key = normalize_key(term)
        if not key:
            await self.load()
            return False

        generation = self._start_generation()
        self.search_term = key
        self.has_more = False
        self.state = BrowserState.SEARCHING
        self._search_pending = True

        try:
            item = await self.source.get_by_key(key)
        except UnauthorizedError:
            if generation == self._generation:
                self._search_pending = False
                self.state = BrowserState.IDLE
            return False
        except NotFoundError:
            if generation != self._generation:
                return False
            self._search_pending = False
            self.notifications.post(f'Pokémon "{key}" not found!', 'error')
            await self.load()
            return False
        except ApiError as e:
            if generation != self._generation:
                return False
            self._search_pending = False
            logger.warning(f'Search for {key} failed: {e}')
            self.notifications.post(f'Search failed: {e.message}', 'error')
            await self.load()
            return False

        if generation != self._generation:
            logger.debug(f'Discarding stale search result for {key}')
            return False

        self._search_pending = False
        self.items = [item]
        self.notifications.post(f'Found {display_name(item.name)}!', 'success')
        return True

    async def clear_search(self) -> bool:
        """SEARCHING -> READY with the default view from offset 0."""
        return await self.load()

    # ============================================
    # SESSION
    # ============================================

    def reset(self):
        """Back to IDLE (logout). In-flight responses are discarded."""
        self._start_generation()
        self.state = BrowserState.IDLE
        self.items = []
        self.offset = 0
        self.has_more = False
        self.search_term = ''
        self.error = None

    def _start_generation(self) -> int:
        self._generation += 1
        self._arrived.clear()
        self._next_offset = 0
        self._search_pending = False
        return self._generation
