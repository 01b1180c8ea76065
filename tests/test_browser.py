"""
Tests for CatalogBrowser - pagination, search override, staleness, ordering.
"""
import asyncio

import pytest

from conftest import FakeCatalogSource, make_pokemon
from pokedex.api import ApiError, UnauthorizedError
from pokedex.managers import CatalogBrowser
from pokedex.models import BrowserState


@pytest.fixture
def browser(catalog, capture_index, notifications):
    catalog.add(make_pokemon(25, 'pikachu'))
    return CatalogBrowser(catalog, capture_index, notifications, page_size=20)


def ids(browser):
    return [item.id for item in browser.items]


class TestPagination:
    """Tests for initial load and load more."""

    @pytest.mark.asyncio
    async def test_initial_load(self, browser, catalog):
        """The first page replaces the list and sets the next offset."""
        assert browser.state is BrowserState.IDLE

        assert await browser.load() is True
        assert browser.state is BrowserState.READY
        assert len(browser.items) == 20
        assert browser.offset == 20
        assert browser.has_more is True
        assert catalog.list_calls == [(20, 0)]

    @pytest.mark.asyncio
    async def test_load_more_appends(self, browser, catalog):
        """Load more appends the next page after the current items."""
        await browser.load()
        first_page = list(browser.items)

        assert await browser.load_more() is True
        assert len(browser.items) == 40
        assert browser.items[:20] == first_page
        assert ids(browser) == list(range(1, 41))
        assert browser.offset == 40
        assert catalog.list_calls == [(20, 0), (20, 20)]

    @pytest.mark.asyncio
    async def test_load_more_without_next_is_noop(self, capture_index, notifications):
        """Nothing is requested once the catalog is exhausted."""
        catalog = FakeCatalogSource(total=15)
        browser = CatalogBrowser(catalog, capture_index, notifications, page_size=20)
        await browser.load()
        assert browser.has_more is False

        assert await browser.load_more() is False
        assert catalog.list_calls == [(20, 0)]
        assert browser.state is BrowserState.READY
        assert len(browser.items) == 15

    @pytest.mark.asyncio
    async def test_load_more_before_load_is_noop(self, browser, catalog):
        """Load more needs a loaded first page."""
        assert await browser.load_more() is False
        assert catalog.list_calls == []
        assert browser.state is BrowserState.IDLE

    @pytest.mark.asyncio
    async def test_pages_apply_in_request_order(self, browser, catalog):
        """A slow earlier page is not overtaken by a later one."""
        await browser.load()
        gate = catalog.hold(20)

        slow = asyncio.create_task(browser.load_more())
        await asyncio.sleep(0)
        fast = asyncio.create_task(browser.load_more())
        await fast

        assert browser.state is BrowserState.LOADING_MORE
        assert len(browser.items) == 20  # page at 40 waits for page at 20

        gate.set()
        await slow
        assert ids(browser) == list(range(1, 61))
        assert browser.offset == 60
        assert browser.state is BrowserState.READY

    @pytest.mark.asyncio
    async def test_load_more_failure_notifies_and_stays_ready(self, browser, catalog, notifications):
        """A failed page keeps the list and can be retried."""
        await browser.load()
        catalog.errors[20] = ApiError('HTTP 502', 502)

        assert await browser.load_more() is False
        assert browser.state is BrowserState.READY
        assert len(browser.items) == 20
        assert browser.offset == 20
        assert notifications.items[-1].severity == 'error'

        del catalog.errors[20]
        assert await browser.load_more() is True
        assert catalog.list_calls[-1] == (20, 20)

    @pytest.mark.asyncio
    async def test_duplicates_across_pages_are_kept(self, capture_index, notifications):
        """Overlapping upstream pages are shown as-is."""
        catalog = FakeCatalogSource()
        plain_list = catalog.list

        async def overlapping(limit, offset):
            page = await plain_list(limit, offset)
            if offset == 20:
                page.items[0] = make_pokemon(20)
            return page

        catalog.list = overlapping
        browser = CatalogBrowser(catalog, capture_index, notifications, page_size=20)
        await browser.load()
        await browser.load_more()
        assert ids(browser).count(20) == 2


class TestErrors:
    """Tests for the ERROR state and retry."""

    @pytest.mark.asyncio
    async def test_initial_failure_enters_error(self, browser, catalog):
        """A failed first page enters ERROR until retried."""
        catalog.errors[0] = ApiError('Network error: timeout')

        assert await browser.load() is False
        assert browser.state is BrowserState.ERROR
        assert browser.error == 'Network error: timeout'

        del catalog.errors[0]
        assert await browser.retry() is True
        assert browser.state is BrowserState.READY
        assert browser.error is None

    @pytest.mark.asyncio
    async def test_unauthorized_returns_to_idle(self, browser, catalog, notifications):
        """A 401 leaves the reaction to the session guard."""
        catalog.errors[0] = UnauthorizedError('expired', 401)

        assert await browser.load() is False
        assert browser.state is BrowserState.IDLE
        assert notifications.items == []


class TestSearch:
    """Tests for the search override."""

    @pytest.mark.asyncio
    async def test_search_replaces_list(self, browser, notifications):
        """A hit replaces the list with the single match."""
        await browser.load()
        await browser.load_more()
        assert len(browser.items) == 40

        assert await browser.search('  Pikachu ') is True
        assert ids(browser) == [25]
        assert browser.items[0].name == 'pikachu'
        assert browser.has_more is False
        assert browser.state is BrowserState.SEARCHING
        assert browser.mode == 'search'
        assert notifications.items[-1].severity == 'success'

    @pytest.mark.asyncio
    async def test_search_finds_unloaded_items(self, browser, catalog):
        """Lookups hit the source, not the loaded pages."""
        await browser.load()
        assert await browser.search('99') is True
        assert ids(browser) == [99]

    @pytest.mark.asyncio
    async def test_load_more_disabled_while_searching(self, browser, catalog):
        """Search results are never paginated."""
        await browser.load()
        await browser.search('pikachu')
        calls = len(catalog.list_calls)

        assert await browser.load_more() is False
        assert len(catalog.list_calls) == calls
        assert ids(browser) == [25]

    @pytest.mark.asyncio
    async def test_empty_search_restores_first_page(self, browser, catalog):
        """A blank term reloads the default view."""
        await browser.load()
        await browser.load_more()
        await browser.search('pikachu')

        assert await browser.search('   ') is False
        assert browser.state is BrowserState.READY
        assert browser.mode == 'browse'
        assert ids(browser) == list(range(1, 21))
        assert browser.offset == 20
        assert catalog.list_calls[-1] == (20, 0)

    @pytest.mark.asyncio
    async def test_clear_search(self, browser, catalog):
        """Clearing search returns to browsing."""
        await browser.search('pikachu')
        assert await browser.clear_search() is True
        assert browser.state is BrowserState.READY
        assert len(browser.items) == 20

    @pytest.mark.asyncio
    async def test_not_found_falls_back(self, browser, catalog, notifications):
        """A miss notifies and reloads the default view."""
        await browser.load()
        await browser.load_more()

        assert await browser.search('missingno') is False
        assert notifications.items[-1].severity == 'error'
        assert 'missingno' in notifications.items[-1].message
        assert browser.state is BrowserState.READY
        assert browser.search_term == ''
        assert ids(browser) == list(range(1, 21))
        assert catalog.list_calls[-1] == (20, 0)

    @pytest.mark.asyncio
    async def test_search_discards_inflight_page(self, browser, catalog):
        """A page arriving after search mode was entered is dropped."""
        await browser.load()
        gate = catalog.hold(20)
        pending = asyncio.create_task(browser.load_more())
        await asyncio.sleep(0)

        await browser.search('pikachu')
        gate.set()
        assert await pending is False
        assert ids(browser) == [25]
        assert browser.state is BrowserState.SEARCHING

    @pytest.mark.asyncio
    async def test_search_during_initial_load(self, browser, catalog):
        """An initial page arriving after a search is dropped."""
        gate = catalog.hold(0)
        pending = asyncio.create_task(browser.load())
        await asyncio.sleep(0)
        assert browser.state is BrowserState.LOADING_INITIAL

        await browser.search('pikachu')
        gate.set()
        assert await pending is False
        assert ids(browser) == [25]


class TestMerge:
    """Tests for ownership decoration."""

    @pytest.mark.asyncio
    async def test_capture_flips_visible_item(self, browser, capture_index, catalog):
        """Ownership shows up without refetching the list."""
        await browser.load()
        await browser.search('pikachu')
        assert browser.visible()[0].owned is False
        calls = len(catalog.list_calls)

        await capture_index.capture(browser.items[0])
        assert browser.visible()[0].owned is True
        assert len(catalog.list_calls) == calls

    @pytest.mark.asyncio
    async def test_visible_preserves_order(self, browser, capture_index):
        """Decoration keeps list order."""
        await browser.load()
        await capture_index.capture(browser.items[2])

        visible = browser.visible()
        assert [d.item.id for d in visible] == list(range(1, 21))
        assert [d.owned for d in visible[:4]] == [False, False, True, False]

    @pytest.mark.asyncio
    async def test_reset(self, browser):
        """Reset empties the list and returns to IDLE."""
        await browser.load()
        browser.reset()
        assert browser.state is BrowserState.IDLE
        assert browser.items == []
        assert browser.visible() == []
