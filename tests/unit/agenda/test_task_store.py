"""Tests for InMemoryTaskStore."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from lessor.agenda.errors import InvalidTransitionError
from lessor.agenda.models import TaskStatus
from lessor.agenda.stores.inmemory import InMemoryTaskStore
from tests.factories import TaskFactory


@pytest.fixture
def store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


class TestGetDueTasks:
    """Tests for due-task selection."""

    @pytest.mark.asyncio
    async def test_returns_oldest_first_up_to_limit(self, store: InMemoryTaskStore) -> None:
        org_id, lead_id = uuid4(), uuid4()
        tasks = [
            TaskFactory.create(organization_id=org_id, subject_id=lead_id, minutes_ago=m)
            for m in (5, 30, 10)
        ]
        for task in tasks:
            await store.save(task)

        due = await store.get_due_tasks(before=datetime.now(UTC), limit=2)

        assert [t.id for t in due] == [tasks[1].id, tasks[2].id]

    @pytest.mark.asyncio
    async def test_excludes_future_and_non_pending(self, store: InMemoryTaskStore) -> None:
        org_id, lead_id = uuid4(), uuid4()
        due_task = TaskFactory.create(organization_id=org_id, subject_id=lead_id)
        future = TaskFactory.create(
            organization_id=org_id,
            subject_id=lead_id,
            scheduled_for=datetime.now(UTC) + timedelta(minutes=10),
        )
        paused = TaskFactory.create(
            organization_id=org_id,
            subject_id=lead_id,
            status=TaskStatus.PAUSED_HUMAN_CONTROL,
        )
        for task in (due_task, future, paused):
            await store.save(task)

        due = await store.get_due_tasks(before=datetime.now(UTC))

        assert [t.id for t in due] == [due_task.id]


class TestCompareAndSetStatus:
    """Tests for the conditional status update."""

    @pytest.mark.asyncio
    async def test_succeeds_when_status_matches(self, store: InMemoryTaskStore) -> None:
        task = TaskFactory.create(organization_id=uuid4(), subject_id=uuid4())
        await store.save(task)
        executed_at = datetime.now(UTC)

        ok = await store.compare_and_set_status(
            task.id,
            TaskStatus.PENDING,
            TaskStatus.IN_PROGRESS,
            executed_at=executed_at,
        )

        stored = await store.get(task.id)
        assert ok is True
        assert stored.status == TaskStatus.IN_PROGRESS
        assert stored.executed_at == executed_at

    @pytest.mark.asyncio
    async def test_second_claim_loses(self, store: InMemoryTaskStore) -> None:
        task = TaskFactory.create(organization_id=uuid4(), subject_id=uuid4())
        await store.save(task)

        first = await store.compare_and_set_status(
            task.id, TaskStatus.PENDING, TaskStatus.IN_PROGRESS
        )
        second = await store.compare_and_set_status(
            task.id, TaskStatus.PENDING, TaskStatus.IN_PROGRESS
        )

        assert first is True
        assert second is False

    @pytest.mark.asyncio
    async def test_missing_task_returns_false(self, store: InMemoryTaskStore) -> None:
        ok = await store.compare_and_set_status(
            uuid4(), TaskStatus.PENDING, TaskStatus.IN_PROGRESS
        )
        assert ok is False

    @pytest.mark.asyncio
    async def test_illegal_edge_raises(self, store: InMemoryTaskStore) -> None:
        task = TaskFactory.create(
            organization_id=uuid4(),
            subject_id=uuid4(),
            status=TaskStatus.COMPLETED,
        )
        await store.save(task)

        with pytest.raises(InvalidTransitionError):
            await store.compare_and_set_status(task.id, TaskStatus.COMPLETED, TaskStatus.PENDING)

    @pytest.mark.asyncio
    async def test_unknown_fields_are_ignored(self, store: InMemoryTaskStore) -> None:
        task = TaskFactory.create(organization_id=uuid4(), subject_id=uuid4())
        await store.save(task)

        await store.compare_and_set_status(
            task.id,
            TaskStatus.PENDING,
            TaskStatus.FAILED,
            last_error="boom",
            agent_key="someone_else",
        )

        stored = await store.get(task.id)
        assert stored.last_error == "boom"
        assert stored.agent_key == task.agent_key

    @pytest.mark.asyncio
    async def test_reads_return_copies(self, store: InMemoryTaskStore) -> None:
        task = TaskFactory.create(organization_id=uuid4(), subject_id=uuid4())
        await store.save(task)

        fetched = await store.get(task.id)
        await store.compare_and_set_status(task.id, TaskStatus.PENDING, TaskStatus.CANCELLED)

        assert fetched.status == TaskStatus.PENDING


class TestListSubjectTasks:
    """Tests for per-lead task listing."""

    @pytest.mark.asyncio
    async def test_filters_by_org_subject_and_status(self, store: InMemoryTaskStore) -> None:
        org_id, lead_id = uuid4(), uuid4()
        mine = TaskFactory.create(organization_id=org_id, subject_id=lead_id)
        done = TaskFactory.create(
            organization_id=org_id, subject_id=lead_id, status=TaskStatus.COMPLETED
        )
        other_lead = TaskFactory.create(organization_id=org_id, subject_id=uuid4())
        other_org = TaskFactory.create(organization_id=uuid4(), subject_id=lead_id)
        for task in (mine, done, other_lead, other_org):
            await store.save(task)

        pending = await store.list_subject_tasks(org_id, lead_id, TaskStatus.PENDING)
        everything = await store.list_subject_tasks(org_id, lead_id)

        assert [t.id for t in pending] == [mine.id]
        assert {t.id for t in everything} == {mine.id, done.id}
