"""
Tests for NotificationQueue - ordering, auto-expiry, dismissal races.
"""
import asyncio

import pytest

from pokedex.managers import NotificationQueue


class TestPosting:
    """Tests for creating notifications."""

    @pytest.mark.asyncio
    async def test_creation_order(self, notifications):
        """Items are listed oldest first with unique ids."""
        first = notifications.post('Pikachu captured!', 'success')
        second = notifications.post('Could not release pokémon.', 'error')
        third = notifications.post('Hello')

        assert [n.id for n in notifications.items] == [first.id, second.id, third.id]
        assert third.severity == 'info'
        assert len({first.id, second.id, third.id}) == 3

    @pytest.mark.asyncio
    async def test_unknown_severity_rejected(self, notifications):
        """Only success, error and info are accepted."""
        with pytest.raises(ValueError):
            notifications.post('Oops', 'warning')
        assert len(notifications) == 0


class TestExpiry:
    """Tests for timers and manual dismissal."""

    @pytest.mark.asyncio
    async def test_expires_after_timeout(self):
        """A notification disappears after its timeout."""
        queue = NotificationQueue(timeout=0.02)
        notification = queue.post('Short lived')

        assert notification.id in queue
        await asyncio.sleep(0.05)
        assert notification.id not in queue

    @pytest.mark.asyncio
    async def test_independent_timers(self):
        """Each notification expires on its own schedule."""
        queue = NotificationQueue(timeout=0.05)
        early = queue.post('early')
        await asyncio.sleep(0.03)
        late = queue.post('late')
        await asyncio.sleep(0.03)

        assert early.id not in queue
        assert late.id in queue

    @pytest.mark.asyncio
    async def test_dismiss_then_expiry_is_noop(self):
        """Dismissed once, absent afterwards, no resurrection when the timer is due."""
        queue = NotificationQueue(timeout=0.02)
        kept = queue.post('kept')
        dismissed = queue.post('dismissed')

        assert queue.dismiss(dismissed.id) is True
        assert dismissed.id not in queue
        assert queue.dismiss(dismissed.id) is False

        await asyncio.sleep(0.05)
        assert dismissed.id not in queue
        assert kept.id not in queue

    @pytest.mark.asyncio
    async def test_dismiss_keeps_others_in_order(self, notifications):
        """Dismissing one keeps the rest in order."""
        a = notifications.post('a')
        b = notifications.post('b')
        c = notifications.post('c')

        notifications.dismiss(b.id)
        assert [n.id for n in notifications.items] == [a.id, c.id]

    @pytest.mark.asyncio
    async def test_expiry_after_dismiss_when_timer_already_fired(self):
        """The expiry callback for an unknown id does nothing."""
        queue = NotificationQueue(timeout=10)
        n = queue.post('x')
        queue.dismiss(n.id)
        queue._expire(n.id)
        assert len(queue) == 0

    @pytest.mark.asyncio
    async def test_clear_cancels_timers(self):
        """Clearing drops items and their timers."""
        queue = NotificationQueue(timeout=0.02)
        queue.post('a')
        queue.post('b')
        queue.clear()

        assert queue.items == []
        assert queue._timers == {}
