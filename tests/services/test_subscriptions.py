"""Tests for subscription delivery and cancellation."""

import asyncio
import logging

import pytest

from chainwatch.services.subscriptions import CompositeSubscription, Subscription, poll_forever

from conftest import wait_for


class TestDelivery:
    """Items reach the callback once each, in publish order."""

    @pytest.mark.asyncio
    async def test_publish_order(self):
        received = []
        subscription = Subscription(received.append)

        for item in range(5):
            subscription.publish(item)
        await subscription.flush()

        assert received == [0, 1, 2, 3, 4]
        assert subscription.delivered == 5
        subscription.cancel()

    @pytest.mark.asyncio
    async def test_async_callback_is_awaited_in_order(self):
        received = []

        async def slow(item):
            await asyncio.sleep(0.01 if item == 0 else 0)
            received.append(item)

        subscription = Subscription(slow)
        subscription.publish(0)
        subscription.publish(1)
        await subscription.flush()

        assert received == [0, 1]
        subscription.cancel()

    @pytest.mark.asyncio
    async def test_callback_error_is_logged_and_delivery_continues(self, caplog):
        received = []

        def explode_on_one(item):
            if item == 1:
                raise RuntimeError("boom")
            received.append(item)

        subscription = Subscription(explode_on_one, name="flaky")
        with caplog.at_level(logging.ERROR):
            for item in range(3):
                subscription.publish(item)
            await subscription.flush()

        assert received == [0, 2]
        assert "flaky callback error" in caplog.text
        subscription.cancel()


class TestCancellation:
    """cancel() is idempotent and stops delivery immediately."""

    @pytest.mark.asyncio
    async def test_publish_after_cancel_is_ignored(self):
        received = []
        subscription = Subscription(received.append)
        subscription.cancel()
        subscription.cancel()

        assert subscription.publish("late") is False
        await subscription.flush()
        assert received == []
        assert subscription.cancelled is True

    @pytest.mark.asyncio
    async def test_queued_items_are_dropped(self):
        received = []
        subscription = Subscription(received.append)

        subscription.publish("queued")
        subscription.cancel()
        await asyncio.sleep(0)

        assert received == []

    @pytest.mark.asyncio
    async def test_cancel_stops_producers_and_children(self):
        parent = Subscription(lambda item: None, name="parent")
        child = Subscription(lambda item: None, name="child")
        parent.attach(child)
        producer = parent.spawn(asyncio.sleep(3600))

        await parent.aclose()

        assert producer.cancelled()
        assert child.cancelled

    @pytest.mark.asyncio
    async def test_attach_to_cancelled_parent_cancels_child(self):
        parent = Subscription(lambda item: None)
        parent.cancel()
        child = Subscription(lambda item: None)

        parent.attach(child)

        assert child.cancelled

    @pytest.mark.asyncio
    async def test_composite_flushes_children(self):
        received = []
        first = Subscription(received.append)
        second = Subscription(received.append)
        composite = CompositeSubscription([first, second])

        first.publish("a")
        second.publish("b")
        await composite.flush()

        assert sorted(received) == ["a", "b"]
        composite.cancel()
        assert first.cancelled and second.cancelled


class TestPollForever:
    """Ticks repeat on the interval and survive failures."""

    @pytest.mark.asyncio
    async def test_failed_tick_is_retried(self):
        calls = []

        async def tick():
            calls.append(len(calls))
            if len(calls) == 1:
                raise RuntimeError("first tick fails")

        task = asyncio.ensure_future(poll_forever(tick, 0.01, label="test"))
        try:
            await wait_for(lambda: len(calls) >= 3)
        finally:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

        assert calls[:3] == [0, 1, 2]
