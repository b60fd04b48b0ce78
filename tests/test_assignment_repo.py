import uuid

import pytest

from helpers import utc
from reserves.core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from reserves.models import CompletionStatus
from reserves.repositories.assignment_repo import (
    EquipmentAssignmentRepository,
    EventAssignmentRepository,
    PolicyCompletionRepository,
)


def test_get_for_entity_empty_is_valid(run, make_event):
    event = make_event(utc(2030, 1, 1, 18))

    async def fetch(session):
        return await EventAssignmentRepository(session).get_for_entity(event.id)

    assert run(fetch) == []


def test_create_then_list_for_entity_and_user(run, make_user, make_event):
    user = make_user()
    event = make_event(utc(2030, 1, 1, 18))

    async def create_and_fetch(session):
        repo = EventAssignmentRepository(session)
        created = await repo.create_assignment(entity_id=event.id, user_id=user.id)
        return created, await repo.get_for_entity(event.id), await repo.get_for_user(user.id)

    created, for_entity, for_user = run(create_and_fetch)
    assert created.completion_status == CompletionStatus.PENDING
    assert [a.id for a in for_entity] == [created.id]
    assert [a.id for a in for_user] == [created.id]
    assert for_entity[0].user.email == user.email


def test_create_duplicate_pair_conflicts_and_keeps_one_row(run, make_user, make_event):
    user = make_user()
    event = make_event(utc(2030, 1, 1, 18))

    async def create(session):
        return await EventAssignmentRepository(session).create_assignment(
            entity_id=event.id, user_id=user.id
        )

    run(create)
    with pytest.raises(ConflictError):
        run(create)

    async def fetch(session):
        return await EventAssignmentRepository(session).get_for_entity(event.id)

    assert len(run(fetch)) == 1


def test_create_requires_both_ids(run, make_user):
    user = make_user()

    async def create(session):
        return await EventAssignmentRepository(session).create_assignment(user_id=user.id)

    with pytest.raises(ValidationError):
        run(create)


def test_delete_missing_pair_raises_and_changes_nothing(run, make_user, make_event):
    user, other = make_user(), make_user()
    event = make_event(utc(2030, 1, 1, 18))

    async def setup(session):
        await EventAssignmentRepository(session).create_assignment(entity_id=event.id, user_id=user.id)

    run(setup)

    async def delete_other(session):
        await EventAssignmentRepository(session).delete_assignment(event.id, other.id)

    with pytest.raises(NotFoundError):
        run(delete_other)

    async def fetch(session):
        return await EventAssignmentRepository(session).get_for_entity(event.id)

    assert [a.user_id for a in run(fetch)] == [user.id]


def test_delete_returns_removed_row(run, make_user, make_event):
    user = make_user()
    event = make_event(utc(2030, 1, 1, 18))

    async def create_then_delete(session):
        repo = EventAssignmentRepository(session)
        await repo.create_assignment(entity_id=event.id, user_id=user.id)
        deleted = await repo.delete_assignment(event.id, user.id)
        return deleted, await repo.get(event.id, user.id)

    deleted, remaining = run(create_then_delete)
    assert deleted.user_id == user.id
    assert remaining is None


def test_update_status_pending_to_completed_then_terminal(run, make_user, make_event):
    user = make_user()
    event = make_event(utc(2030, 1, 1, 18))

    async def complete(session):
        repo = EventAssignmentRepository(session)
        await repo.create_assignment(entity_id=event.id, user_id=user.id)
        return await repo.update_status(event.id, user.id, "completed", notes="On time")

    assignment = run(complete)
    assert assignment.completion_status == CompletionStatus.COMPLETED
    assert assignment.completion_notes == "On time"

    async def excuse(session):
        return await EventAssignmentRepository(session).update_status(
            event.id, user.id, CompletionStatus.EXCUSED
        )

    with pytest.raises(InvalidTransitionError):
        run(excuse)


def test_update_status_rejects_unknown_status(run, make_user, make_event):
    user = make_user()
    event = make_event(utc(2030, 1, 1, 18))

    async def update(session):
        repo = EventAssignmentRepository(session)
        await repo.create_assignment(entity_id=event.id, user_id=user.id)
        return await repo.update_status(event.id, user.id, "finished")

    with pytest.raises(ValidationError):
        run(update)


def test_update_status_missing_assignment(run, make_event):
    event = make_event(utc(2030, 1, 1, 18))

    async def update(session):
        return await EventAssignmentRepository(session).update_status(
            event.id, uuid.uuid4(), CompletionStatus.COMPLETED
        )

    with pytest.raises(NotFoundError):
        run(update)


def test_equipment_cannot_be_excused(run, make_user, make_equipment):
    user = make_user()
    item = make_equipment()

    async def excuse(session):
        repo = EquipmentAssignmentRepository(session)
        await repo.create_assignment(
            entity_id=item.id, user_id=user.id, checked_out_at=utc(2030, 1, 1)
        )
        return await repo.update_status(item.id, user.id, CompletionStatus.EXCUSED)

    with pytest.raises(InvalidTransitionError):
        run(excuse)


def test_delete_all_for_entity_counts_rows(run, make_user, make_policy):
    users = [make_user(), make_user()]
    policy = make_policy(utc(2030, 1, 1))

    async def create_then_clear(session):
        repo = PolicyCompletionRepository(session)
        for user in users:
            await repo.create_assignment(entity_id=policy.id, user_id=user.id)
        removed = await repo.delete_all_for_entity(policy.id)
        return removed, await repo.get_for_entity(policy.id)

    removed, remaining = run(create_then_clear)
    assert removed == 2
    assert remaining == []


def test_recreate_refuses_open_row(run, make_user, make_equipment):
    user = make_user()
    item = make_equipment()

    async def checkout_twice(session):
        repo = EquipmentAssignmentRepository(session)
        await repo.create_assignment(
            entity_id=item.id, user_id=user.id, checked_out_at=utc(2030, 1, 1)
        )
        await repo.recreate_assignment(item.id, user.id, checked_out_at=utc(2030, 1, 2))

    with pytest.raises(ConflictError):
        run(checkout_twice)

    async def rows(session):
        return await EquipmentAssignmentRepository(session).get_for_entity(item.id)

    assert len(run(rows)) == 1


def test_recreate_replaces_terminal_row(run, make_user, make_event):
    user = make_user()
    event = make_event(utc(2030, 1, 1, 18))

    async def complete_then_recreate(session):
        repo = EventAssignmentRepository(session)
        await repo.create_assignment(entity_id=event.id, user_id=user.id)
        await repo.update_status(event.id, user.id, CompletionStatus.COMPLETED)
        await repo.recreate_assignment(event.id, user.id)
        return await repo.get_for_entity(event.id)

    rows = run(complete_then_recreate)
    assert [r.completion_status for r in rows] == [CompletionStatus.PENDING]
