import asyncio
import threading
from contextlib import suppress

import structlog

from trichter.infra.realtime.errors import DeliveryError, HubClosedError
from trichter.infra.realtime.events import DomainEvent
from trichter.infra.realtime.subscriber import Subscriber

logger = structlog.get_logger(__name__)


class NotificationHub:
    """In-process broadcast hub for run change notifications.

    Publishers may call ``publish`` from the event loop or from worker threads.
    A single dispatch task drains the ingress queue and starts one delivery
    task per registered subscriber per event, so a slow or broken subscriber
    never holds up the others. The membership lock is only held to mutate or
    snapshot the set, never across a network write.
    """

    def __init__(self) -> None:
        self._subscribers: set[Subscriber] = set()
        self._lock = threading.Lock()
        self._queue: asyncio.Queue[DomainEvent] = asyncio.Queue()
        self._deliveries: set[asyncio.Task[None]] = set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._dispatcher: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def running(self) -> bool:
        return self._dispatcher is not None and not self._closed

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def start(self) -> None:
        if self._dispatcher is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._dispatcher = self._loop.create_task(
            self._dispatch_loop(), name="notification-hub-dispatch"
        )
        logger.info("notification_hub_started")

    async def stop(self, drain: bool = True) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if drain:
                await self.join()
        finally:
            if self._dispatcher is not None:
                self._dispatcher.cancel()
                with suppress(asyncio.CancelledError):
                    await self._dispatcher
            abandoned = list(self._deliveries)
            for task in abandoned:
                task.cancel()
            if abandoned:
                await asyncio.gather(*abandoned, return_exceptions=True)
            logger.info(
                "notification_hub_stopped",
                pending=self._queue.qsize(),
                abandoned=len(abandoned),
            )

    def register(self, subscriber: Subscriber) -> None:
        with self._lock:
            self._subscribers.add(subscriber)
            count = len(self._subscribers)
        logger.debug("subscriber_registered", subscribers=count)

    def unregister(self, subscriber: Subscriber) -> None:
        with self._lock:
            self._subscribers.discard(subscriber)
            count = len(self._subscribers)
        logger.debug("subscriber_unregistered", subscribers=count)

    def is_registered(self, subscriber: Subscriber) -> bool:
        with self._lock:
            return subscriber in self._subscribers

    def publish(self, event: DomainEvent) -> None:
        loop = self._loop
        if loop is None or not self.running:
            raise HubClosedError()

        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None

        if current is loop:
            self._queue.put_nowait(event)
            return

        try:
            loop.call_soon_threadsafe(self._queue.put_nowait, event)
        except RuntimeError as exc:
            # Loop already closed underneath us during shutdown.
            raise HubClosedError() from exc

    async def join(self) -> None:
        """Wait until every published event has been delivered or has failed."""
        # Let hand-offs scheduled from other threads reach the queue first.
        await asyncio.sleep(0)
        await self._queue.join()
        while self._deliveries:
            await asyncio.gather(*self._deliveries)

    async def _dispatch_loop(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                self._fan_out(event)
            except Exception:
                logger.exception("event_dispatch_failed", event_kind=event.kind.value)
            finally:
                self._queue.task_done()

    def _fan_out(self, event: DomainEvent) -> None:
        with self._lock:
            recipients = list(self._subscribers)

        logger.debug(
            "dispatching_event", event_kind=event.kind.value, recipients=len(recipients)
        )
        for subscriber in recipients:
            task = asyncio.create_task(self._deliver(subscriber, event))
            self._deliveries.add(task)
            task.add_done_callback(self._deliveries.discard)

    async def _deliver(self, subscriber: Subscriber, event: DomainEvent) -> None:
        if not self.is_registered(subscriber):
            return
        try:
            await subscriber.deliver(event)
        except DeliveryError as exc:
            logger.warning(
                "event_delivery_failed",
                event_kind=event.kind.value,
                subscriber_id=exc.subscriber_id,
                reason=exc.reason,
            )
        except Exception:
            logger.exception("event_delivery_crashed", event_kind=event.kind.value)
