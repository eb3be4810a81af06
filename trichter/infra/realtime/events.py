from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any


class EventKind(str, Enum):
    RUN_CREATED = "run-created"
    RUN_UPDATED = "run-updated"
    RUN_DELETED = "run-deleted"


class SystemEvent(str, Enum):
    CONNECTED = "system.connected"
    PONG = "system.pong"
    ERROR = "system.error"


@dataclass(frozen=True, slots=True)
class DomainEvent:
    """A run change notification, fanned out to every live subscriber."""

    kind: EventKind
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Detach from the caller's dict so later mutation cannot leak into delivery.
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    @classmethod
    def run_created(cls, run_id: str) -> "DomainEvent":
        return cls(EventKind.RUN_CREATED, {"id": run_id})

    @classmethod
    def run_updated(cls, run_id: str) -> "DomainEvent":
        return cls(EventKind.RUN_UPDATED, {"id": run_id})

    @classmethod
    def run_deleted(cls, run_id: str) -> "DomainEvent":
        return cls(EventKind.RUN_DELETED, {"id": run_id})

    def to_wire(self) -> dict[str, Any]:
        return {"event": self.kind.value, "data": dict(self.payload)}
