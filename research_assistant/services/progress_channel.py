"""In-process publish/subscribe channel for generation progress events.

One channel instance is shared by the orchestrator (publisher) and the
streaming endpoint (one subscriber per connected client). Delivery is
fire-and-forget: there is no buffering or replay, so a subscriber only
sees events published after it subscribed.

Usage:
    channel = ProgressChannel()

    async with channel.subscribe(project_id) as subscription:
        async for event in subscription:
            ...

    channel.publish(ProgressEvent(projectId=project_id, ...))
"""

import asyncio
import logging
from typing import Optional

from research_assistant.models import GenerationEvent

logger = logging.getLogger(__name__)

_CLOSED = object()


class SubscriptionClosedError(Exception):
    """Raised when reading from a closed subscription."""


class Subscription:
    """A subscriber's private event queue.

    Iterating yields events until the subscription is closed. Closing is
    idempotent and also happens on async context manager exit.
    """

    def __init__(self, channel: "ProgressChannel", project_id: Optional[str]):
        self.project_id = project_id
        self._channel = channel
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _deliver(self, event: GenerationEvent) -> None:
        self._queue.put_nowait(event)

    async def get(self) -> GenerationEvent:
        """Wait for the next event.

        Raises:
            SubscriptionClosedError: If the subscription is (or gets) closed.
        """
        if self._closed and self._queue.empty():
            raise SubscriptionClosedError("Subscription is closed")
        item = await self._queue.get()
        if item is _CLOSED:
            raise SubscriptionClosedError("Subscription is closed")
        return item

    def close(self) -> None:
        """Unsubscribe. Pending readers are woken up."""
        if self._closed:
            return
        self._closed = True
        self._channel._unsubscribe(self)
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> GenerationEvent:
        try:
            return await self.get()
        except SubscriptionClosedError:
            raise StopAsyncIteration from None

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class ProgressChannel:
    """Fan-out of generation events to per-project and wildcard subscribers."""

    def __init__(self):
        # project_id -> subscriptions; None holds the wildcard subscribers
        self._subscribers: dict[Optional[str], list[Subscription]] = {}

    def subscribe(self, project_id: Optional[str] = None) -> Subscription:
        """Register a subscriber.

        Args:
            project_id: Only receive events of this project. None receives
                events of every project.
        """
        subscription = Subscription(self, project_id)
        self._subscribers.setdefault(project_id, []).append(subscription)
        logger.debug(
            "Subscriber added",
            extra={"project_id": project_id, "subscribers": self.subscriber_count(project_id)},
        )
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        subscribers = self._subscribers.get(subscription.project_id)
        if not subscribers:
            return
        if subscription in subscribers:
            subscribers.remove(subscription)
        if not subscribers:
            del self._subscribers[subscription.project_id]
        logger.debug("Subscriber removed", extra={"project_id": subscription.project_id})

    def publish(self, event: GenerationEvent) -> int:
        """Deliver an event to current subscribers.

        Returns:
            Number of subscribers the event was delivered to.
        """
        targets = [
            *self._subscribers.get(event.projectId, []),
            *self._subscribers.get(None, []),
        ]

        for subscription in targets:
            subscription._deliver(event)

        return len(targets)

    def subscriber_count(self, project_id: Optional[str] = None) -> int:
        """Number of subscribers registered for project_id (None: wildcard)."""
        return len(self._subscribers.get(project_id, []))
