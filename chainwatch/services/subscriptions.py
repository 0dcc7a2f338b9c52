"""
Cancellable delivery channels for watch/monitor registrations.

Producers (polling loops) publish typed messages onto a queue owned by the
subscription; a single consumer task hands them to the caller's callback in
publish order. ``cancel()`` is the only way to stop delivery: once called,
queued items are discarded and later publishes are ignored.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Generic, List, Optional, Set, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

Callback = Callable[[T], Union[None, Awaitable[None]]]


class Subscription(Generic[T]):
    """Handle for a long-lived watch. Cancellation is idempotent."""

    def __init__(self, callback: Callback, *, name: str = "subscription") -> None:
        self.name = name
        self._callback = callback
        self._queue: "asyncio.Queue[T]" = asyncio.Queue()
        self._consumer: Optional[asyncio.Task] = None
        self._producers: Set[asyncio.Task] = set()
        self._children: List["Subscription[Any]"] = []
        self._cancelled = False
        self.delivered = 0

    # ---------------------------
    # Producer side
    # ---------------------------
    def publish(self, item: T) -> bool:
        """Queue an item for delivery. Returns False once cancelled."""
        if self._cancelled:
            return False
        self._ensure_consumer()
        self._queue.put_nowait(item)
        return True

    def spawn(self, coro: Awaitable[None], *, name: Optional[str] = None) -> asyncio.Task:
        """Run a producer coroutine whose lifetime is bound to this subscription."""
        task = asyncio.ensure_future(coro)
        if name:
            task.set_name(name)
        if self._cancelled:
            task.cancel()
            return task
        self._producers.add(task)
        task.add_done_callback(self._on_producer_done)
        return task

    def attach(self, child: "Subscription[Any]") -> None:
        """Cancel ``child`` together with this subscription."""
        if self._cancelled:
            child.cancel()
            return
        self._children.append(child)

    # ---------------------------
    # Lifecycle
    # ---------------------------
    @property
    def active(self) -> bool:
        return not self._cancelled

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True

        for child in self._children:
            child.cancel()
        for task in list(self._producers):
            task.cancel()
        if self._consumer is not None:
            self._consumer.cancel()

        # Pending items are dropped; release anyone waiting in flush()
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()

        logger.debug("Subscription %s cancelled after %d deliveries", self.name, self.delivered)

    async def aclose(self) -> None:
        """Cancel and wait for the background tasks to unwind."""
        self.cancel()
        tasks = list(self._producers)
        if self._consumer is not None:
            tasks.append(self._consumer)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        for child in self._children:
            await child.aclose()

    async def flush(self) -> None:
        """Wait until everything published so far has been delivered, children first."""
        for child in list(self._children):
            await child.flush()
        if self._cancelled or self._consumer is None:
            return
        await self._queue.join()

    # ---------------------------
    # Internals
    # ---------------------------
    def _ensure_consumer(self) -> None:
        if self._consumer is None:
            self._consumer = asyncio.ensure_future(self._drain())
            self._consumer.set_name(f"{self.name}-consumer")

    async def _drain(self) -> None:
        while True:
            item = await self._queue.get()
            try:
                if not self._cancelled:
                    result = self._callback(item)
                    if inspect.isawaitable(result):
                        await result
                    self.delivered += 1
            except Exception as exc:  # noqa: BLE001
                logger.error("Subscription %s callback error: %s", self.name, exc, exc_info=True)
            finally:
                self._queue.task_done()

    def _on_producer_done(self, task: asyncio.Task) -> None:
        self._producers.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Subscription %s producer crashed: %s", self.name, exc, exc_info=exc)


class CompositeSubscription(Subscription[Any]):
    """Groups several subscriptions behind one cancellation handle."""

    def __init__(self, children: List[Subscription[Any]], *, name: str = "composite") -> None:
        super().__init__(lambda _item: None, name=name)
        for child in children:
            self.attach(child)

    @property
    def children(self) -> List[Subscription[Any]]:
        return list(self._children)


async def poll_forever(
    tick: Callable[[], Awaitable[None]],
    interval_seconds: float,
    *,
    label: str,
) -> None:
    """Call ``tick`` every ``interval_seconds``; a failed tick is logged and retried next interval."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await tick()
        except Exception as exc:  # noqa: BLE001
            logger.warning("%s poll failed: %s", label, exc)


__all__ = ["Subscription", "CompositeSubscription", "poll_forever", "Callback"]
