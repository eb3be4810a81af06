"""Realtime notification fan-out over websockets."""

from trichter.infra.realtime.events import DomainEvent, EventKind
from trichter.infra.realtime.hub import NotificationHub
from trichter.infra.realtime.subscriber import WebSocketSubscriber

__all__ = ["DomainEvent", "EventKind", "NotificationHub", "WebSocketSubscriber"]
