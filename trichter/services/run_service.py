from uuid import UUID

import structlog

from trichter.domain.models import Run, RunData
from trichter.infra.realtime.errors import PublishError
from trichter.infra.realtime.events import DomainEvent
from trichter.infra.realtime.publisher import EventPublisher, NoopEventPublisher
from trichter.infra.repositories import InMemoryRunRepository
from trichter.services.errors import RunNotFoundError

logger = structlog.get_logger(__name__)


class RunService:
    def __init__(
        self,
        runs: InMemoryRunRepository,
        realtime: EventPublisher | None = None,
        placeholder_image: str = "trichter-images/placeholder.jpg",
    ) -> None:
        self.runs = runs
        self.realtime = realtime or NoopEventPublisher()
        self.placeholder_image = placeholder_image

    async def list_runs(self) -> list[Run]:
        return await self.runs.list_all()

    async def create_run(
        self,
        data: RunData,
        image: str | None = None,
        user_id: str | None = None,
    ) -> Run:
        run = await self.runs.create(
            data=data,
            image=image or self.placeholder_image,
            user_id=user_id or None,
        )
        logger.info("run_created", run_id=str(run.id))
        self._safe_publish(DomainEvent.run_created(str(run.id)))
        return run

    async def assign_user(self, run_id: UUID, user_id: str) -> Run:
        run = await self.runs.assign_user(run_id, user_id)
        if run is None:
            raise RunNotFoundError(run_id)
        logger.info("run_user_assigned", run_id=str(run_id), user_id=user_id)
        self._safe_publish(DomainEvent.run_updated(str(run_id)))
        return run

    async def delete_run(self, run_id: UUID) -> None:
        deleted = await self.runs.delete(run_id)
        if not deleted:
            raise RunNotFoundError(run_id)
        logger.info("run_deleted", run_id=str(run_id))
        self._safe_publish(DomainEvent.run_deleted(str(run_id)))

    def _safe_publish(self, event: DomainEvent) -> None:
        try:
            self.realtime.publish(event)
        except PublishError as exc:
            # The mutation is already committed; notifications are best effort.
            logger.warning(
                "run_event_not_published",
                event_kind=event.kind.value,
                run_id=event.payload.get("id"),
                error=str(exc),
            )
