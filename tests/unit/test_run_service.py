import logging
from uuid import uuid4

import pytest

from trichter.core.log import configure_logging
from trichter.domain.models import RunData
from trichter.infra.realtime.errors import HubClosedError
from trichter.infra.realtime.events import DomainEvent, EventKind
from trichter.infra.repositories import InMemoryRunRepository
from trichter.services.errors import RunNotFoundError
from trichter.services.run_service import RunService


class FakePublisher:
    def __init__(self) -> None:
        self.events: list[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self.events.append(event)


class ClosedPublisher:
    def publish(self, event: DomainEvent) -> None:
        raise HubClosedError()


def _run_data() -> RunData:
    return RunData(duration=2.5, rate=0.4, volume=1.0)


@pytest.mark.asyncio
async def test_create_run_publishes_created_event() -> None:
    publisher = FakePublisher()
    service = RunService(runs=InMemoryRunRepository(), realtime=publisher)

    run = await service.create_run(_run_data())

    assert run.image == "trichter-images/placeholder.jpg"
    assert run.user_id is None
    assert len(publisher.events) == 1
    assert publisher.events[0].kind == EventKind.RUN_CREATED
    assert publisher.events[0].payload == {"id": str(run.id)}


@pytest.mark.asyncio
async def test_create_run_keeps_explicit_image_and_user() -> None:
    service = RunService(runs=InMemoryRunRepository(), realtime=FakePublisher())

    run = await service.create_run(_run_data(), image="trichter-images/a.jpg", user_id="u-1")

    assert run.image == "trichter-images/a.jpg"
    assert run.user_id == "u-1"


@pytest.mark.asyncio
async def test_assign_user_publishes_updated_event() -> None:
    publisher = FakePublisher()
    service = RunService(runs=InMemoryRunRepository(), realtime=publisher)
    run = await service.create_run(_run_data())

    updated = await service.assign_user(run.id, "u-2")

    assert updated.user_id == "u-2"
    assert [event.kind for event in publisher.events] == [
        EventKind.RUN_CREATED,
        EventKind.RUN_UPDATED,
    ]
    assert publisher.events[-1].payload == {"id": str(run.id)}


@pytest.mark.asyncio
async def test_delete_run_publishes_deleted_event_once() -> None:
    publisher = FakePublisher()
    service = RunService(runs=InMemoryRunRepository(), realtime=publisher)
    run = await service.create_run(_run_data())

    await service.delete_run(run.id)
    with pytest.raises(RunNotFoundError):
        await service.delete_run(run.id)

    assert [event.kind for event in publisher.events] == [
        EventKind.RUN_CREATED,
        EventKind.RUN_DELETED,
    ]
    assert await service.list_runs() == []


@pytest.mark.asyncio
async def test_missing_run_publishes_nothing() -> None:
    publisher = FakePublisher()
    service = RunService(runs=InMemoryRunRepository(), realtime=publisher)

    with pytest.raises(RunNotFoundError):
        await service.assign_user(uuid4(), "u-1")

    assert publisher.events == []


@pytest.mark.asyncio
async def test_publish_failure_does_not_fail_mutation() -> None:
    runs = InMemoryRunRepository()
    service = RunService(runs=runs, realtime=ClosedPublisher())

    run = await service.create_run(_run_data())

    assert await runs.get(run.id) is run


@pytest.mark.asyncio
async def test_unpublished_event_is_logged_as_warning(caplog: pytest.LogCaptureFixture) -> None:
    configure_logging("DEBUG")
    root = logging.getLogger()
    root.addHandler(caplog.handler)
    runs = InMemoryRunRepository()
    service = RunService(runs=runs, realtime=ClosedPublisher())
    try:
        run = await service.create_run(_run_data())
        await service.delete_run(run.id)
    finally:
        root.removeHandler(caplog.handler)

    assert await runs.get(run.id) is None
    warnings = [
        record.msg
        for record in caplog.records
        if record.levelno == logging.WARNING and isinstance(record.msg, dict)
    ]
    assert [entry["event"] for entry in warnings] == [
        "run_event_not_published",
        "run_event_not_published",
    ]
    assert [entry["event_kind"] for entry in warnings] == ["run-created", "run-deleted"]
    assert all(entry["run_id"] == str(run.id) for entry in warnings)


@pytest.mark.asyncio
async def test_list_runs_returns_every_run() -> None:
    service = RunService(runs=InMemoryRunRepository())
    first = await service.create_run(_run_data())
    second = await service.create_run(_run_data())

    runs = await service.list_runs()

    assert len(runs) == 2
    assert {run.id for run in runs} == {first.id, second.id}
