import asyncio
from uuid import UUID

from trichter.domain.models import Run, RunData


class InMemoryRunRepository:
    """Process-local run store; contents are lost on restart."""

    def __init__(self) -> None:
        self._runs: dict[UUID, Run] = {}
        self._lock = asyncio.Lock()

    async def list_all(self) -> list[Run]:
        async with self._lock:
            runs = list(self._runs.values())
        return sorted(runs, key=lambda run: run.created_at, reverse=True)

    async def get(self, run_id: UUID) -> Run | None:
        async with self._lock:
            return self._runs.get(run_id)

    async def create(self, data: RunData, image: str, user_id: str | None = None) -> Run:
        run = Run(data=data, image=image, user_id=user_id)
        async with self._lock:
            self._runs[run.id] = run
        return run

    async def assign_user(self, run_id: UUID, user_id: str) -> Run | None:
        async with self._lock:
            run = self._runs.get(run_id)
            if run is None:
                return None
            run.user_id = user_id
            return run

    async def delete(self, run_id: UUID) -> bool:
        async with self._lock:
            return self._runs.pop(run_id, None) is not None
