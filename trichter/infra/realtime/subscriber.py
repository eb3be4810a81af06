import asyncio
import json
from collections.abc import Mapping
from types import TracebackType
from typing import TYPE_CHECKING, Any, Protocol
from uuid import uuid4

import structlog
from starlette.websockets import WebSocketDisconnect

from trichter.domain.enums import SubscriberAction, SubscriberState
from trichter.domain.state_machine import SubscriberLifecycle
from trichter.infra.realtime.errors import DeliveryError, TransportUpgradeError
from trichter.infra.realtime.events import DomainEvent, SystemEvent

if TYPE_CHECKING:
    from trichter.infra.realtime.hub import NotificationHub

logger = structlog.get_logger(__name__)

# Failures a starlette/uvicorn websocket raises once the peer is gone.
TRANSPORT_ERRORS = (RuntimeError, WebSocketDisconnect, OSError)


class Subscriber(Protocol):
    async def deliver(self, event: DomainEvent) -> None: ...


class RealtimeTransport(Protocol):
    async def accept(self) -> None: ...

    async def send_json(self, data: Any) -> None: ...

    async def receive(self) -> Mapping[str, Any]: ...

    async def close(self, code: int = 1000) -> None: ...


class WebSocketSubscriber:
    """One live websocket connection registered with the notification hub.

    Writes are serialized through a per-connection lock so two events are
    never interleaved on the wire. Use ``open`` to build one; it is already
    registered when it is returned, and ``close`` (or leaving the ``async
    with`` block) unregisters it again.
    """

    def __init__(self, hub: "NotificationHub", transport: RealtimeTransport) -> None:
        self.id = uuid4().hex
        self._hub = hub
        self._transport = transport
        self._send_lock = asyncio.Lock()
        self._state = SubscriberState.CREATED

    @classmethod
    async def open(
        cls, hub: "NotificationHub", transport: RealtimeTransport
    ) -> "WebSocketSubscriber":
        try:
            await transport.accept()
        except TRANSPORT_ERRORS as exc:
            raise TransportUpgradeError(str(exc) or type(exc).__name__) from exc

        subscriber = cls(hub, transport)
        hub.register(subscriber)
        subscriber._state = SubscriberLifecycle.transition(
            subscriber._state, SubscriberAction.REGISTER
        )
        logger.info("subscriber_opened", subscriber_id=subscriber.id)
        return subscriber

    @property
    def state(self) -> SubscriberState:
        return self._state

    async def __aenter__(self) -> "WebSocketSubscriber":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def deliver(self, event: DomainEvent) -> None:
        await self._send(event.to_wire())

    async def send_system(
        self, kind: SystemEvent, data: Mapping[str, Any] | None = None
    ) -> None:
        await self._send({"event": kind.value, "data": dict(data or {})})

    async def serve(self) -> None:
        """Read client frames until the connection goes away."""
        while SubscriberLifecycle.accepts_deliveries(self._state):
            try:
                message = await self._transport.receive()
            except WebSocketDisconnect:
                return
            except (RuntimeError, OSError) as exc:
                logger.info("subscriber_read_failed", subscriber_id=self.id, error=str(exc))
                return

            if message.get("type") == "websocket.disconnect":
                return

            try:
                await self._handle_message(message.get("text"))
            except DeliveryError as exc:
                logger.info("subscriber_reply_failed", subscriber_id=self.id, reason=exc.reason)
                return

    async def close(self) -> None:
        if SubscriberLifecycle.is_closing_or_closed(self._state):
            return
        self._state = SubscriberLifecycle.transition(self._state, SubscriberAction.CLOSE)
        self._hub.unregister(self)
        try:
            await self._transport.close()
        except TRANSPORT_ERRORS as exc:
            # Peer already went away; nothing left to release.
            logger.debug("subscriber_transport_already_closed", subscriber_id=self.id, error=str(exc))
        finally:
            self._state = SubscriberLifecycle.transition(self._state, SubscriberAction.RELEASE)
            logger.info("subscriber_closed", subscriber_id=self.id)

    async def _handle_message(self, raw_message: str | None) -> None:
        if raw_message is None:
            await self.send_system(SystemEvent.ERROR, {"detail": "Expected text frame"})
            return

        if raw_message.strip().lower() == "ping":
            await self.send_system(SystemEvent.PONG)
            return

        try:
            message = json.loads(raw_message)
        except json.JSONDecodeError:
            await self.send_system(SystemEvent.ERROR, {"detail": "Expected JSON payload"})
            return

        if isinstance(message, dict) and message.get("action") == "ping":
            await self.send_system(SystemEvent.PONG)
            return

        await self.send_system(SystemEvent.ERROR, {"detail": "Unsupported action"})

    async def _send(self, envelope: dict[str, Any]) -> None:
        async with self._send_lock:
            # Unregister may have landed while this write waited for the lock.
            if not SubscriberLifecycle.accepts_deliveries(self._state):
                return
            if not self._hub.is_registered(self):
                return
            try:
                await self._transport.send_json(envelope)
            except TRANSPORT_ERRORS as exc:
                raise DeliveryError(self.id, str(exc) or type(exc).__name__) from exc
