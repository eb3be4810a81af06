from typing import Protocol

from trichter.infra.realtime.events import DomainEvent


class EventPublisher(Protocol):
    def publish(self, event: DomainEvent) -> None: ...


class NoopEventPublisher:
    def publish(self, event: DomainEvent) -> None:
        _ = event
        return None
