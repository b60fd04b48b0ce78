from datetime import timedelta

import pytest
from sqlalchemy import select

from helpers import utc
from reserves.core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from reserves.models import (
    CompletionStatus,
    Equipment,
    EquipmentCondition,
    Notification,
    UserPosition,
    UserRole,
)
from reserves.services.assignment_service import AssignmentService


def _notifications_for(run, user):
    async def fetch(session):
        result = await session.execute(
            select(Notification).where(Notification.user_id == user.id)
        )
        return list(result.scalars().all())

    return run(fetch)


def test_signup_notifies_every_admin_once(run, make_user, make_event):
    admin = make_user(role=UserRole.ADMIN, position=UserPosition.ADMIN)
    other_admin = make_user(role=UserRole.ADMIN, position=UserPosition.ADMIN, first_name="Sam")
    make_user(role=UserRole.ADMIN, position=UserPosition.ADMIN, is_active=False)
    reserve = make_user()
    event = make_event(utc(2030, 5, 1, 18), name="Downtown Patrol")

    async def signup(session):
        return await AssignmentService(session).sign_up_for_event(event.id, reserve)

    assignment = run(signup)
    assert assignment.completion_status == CompletionStatus.PENDING

    for recipient in (admin, other_admin):
        notifications = _notifications_for(run, recipient)
        assert [n.message for n in notifications] == ["Pat Jones signed up for Downtown Patrol"]
        assert notifications[0].type == "event_signup"
        assert notifications[0].url == f"/admin/events/{event.id}"
    assert _notifications_for(run, reserve) == []


def test_duplicate_signup_conflicts(run, make_user, make_event):
    reserve = make_user()
    event = make_event(utc(2030, 5, 1, 18))

    async def signup(session):
        return await AssignmentService(session).sign_up_for_event(event.id, reserve)

    run(signup)
    with pytest.raises(ConflictError):
        run(signup)


def test_signup_for_unknown_training(run, make_user, make_event):
    reserve = make_user()
    event = make_event(utc(2030, 5, 1, 18))

    async def signup(session):
        return await AssignmentService(session).sign_up_for_training(event.id, reserve)

    with pytest.raises(NotFoundError):
        run(signup)


def test_leave_training_sends_general_message(run, make_user, make_training):
    admin = make_user(role=UserRole.ADMIN, position=UserPosition.ADMIN)
    reserve = make_user()
    training = make_training(utc(2030, 5, 2, 9), name="CPR Recertification")

    async def signup_then_leave(session):
        service = AssignmentService(session)
        await service.sign_up_for_training(training.id, reserve)
        await service.leave_training(training.id, reserve)
        return await service.get_training_participants(training.id)

    assert run(signup_then_leave) == []
    messages = sorted(n.message for n in _notifications_for(run, admin))
    assert messages == [
        "Pat Jones has left training: CPR Recertification",
        "Pat Jones signed up for CPR Recertification",
    ]


def test_leave_without_signup_is_not_found(run, make_user, make_event):
    reserve = make_user()
    event = make_event(utc(2030, 5, 1, 18))

    async def leave(session):
        return await AssignmentService(session).leave_event(event.id, reserve)

    with pytest.raises(NotFoundError):
        run(leave)


def test_signup_succeeds_without_admins(run, make_user, make_event):
    reserve = make_user()
    event = make_event(utc(2030, 5, 1, 18))

    async def signup(session):
        service = AssignmentService(session)
        await service.sign_up_for_event(event.id, reserve)
        return await service.get_event_participants(event.id)

    participants = run(signup)
    assert [p.user_id for p in participants] == [reserve.id]


def test_assign_equipment_sets_flags_and_notifies(run, make_user, make_equipment):
    reserve = make_user()
    item = make_equipment(name="Radio #12")
    due = utc(2030, 6, 1)

    async def assign(session):
        return await AssignmentService(session).assign_equipment(
            item.id, reserve.id, expected_return_at=due, notes="Spare battery included"
        )

    assignment = run(assign)
    assert assignment.condition == EquipmentCondition.GOOD
    assert assignment.completion_notes == "Spare battery included"
    assert assignment.checked_in_at is None

    async def reload(session):
        return await session.get(Equipment, item.id)

    stored = run(reload)
    assert stored.is_assigned is True
    assert stored.assigned_to == reserve.id

    notifications = _notifications_for(run, reserve)
    assert [n.message for n in notifications] == ["Equipment assigned: Radio #12"]


def test_assign_equipment_twice_conflicts(run, make_user, make_equipment):
    first, second = make_user(), make_user()
    item = make_equipment()

    async def assign(session, user):
        return await AssignmentService(session).assign_equipment(item.id, user.id)

    run(assign, first)
    with pytest.raises(ConflictError):
        run(assign, second)


def test_assign_obsolete_equipment_is_rejected(run, make_user, make_equipment):
    reserve = make_user()
    item = make_equipment(is_obsolete=True)

    async def assign(session):
        return await AssignmentService(session).assign_equipment(item.id, reserve.id)

    with pytest.raises(ValidationError):
        run(assign)


def test_return_equipment_frees_item_once(run, make_user, make_equipment):
    reserve = make_user()
    item = make_equipment(name="Vest #3")

    async def assign(session):
        return await AssignmentService(session).assign_equipment(item.id, reserve.id)

    async def give_back(session):
        return await AssignmentService(session).return_equipment(
            item.id, reserve.id, EquipmentCondition.FAIR, notes="Strap worn"
        )

    run(assign)
    returned = run(give_back)
    assert returned.completion_status == CompletionStatus.COMPLETED
    assert returned.condition == EquipmentCondition.FAIR
    assert returned.checked_in_at is not None

    async def reload(session):
        return await session.get(Equipment, item.id)

    stored = run(reload)
    assert stored.is_assigned is False
    assert stored.assigned_to is None

    with pytest.raises(InvalidTransitionError):
        run(give_back)

    messages = sorted(n.message for n in _notifications_for(run, reserve))
    assert messages == ["Equipment assigned: Vest #3", "Equipment returned: Vest #3"]


def test_acknowledge_policy_creates_or_completes_row(run, make_user, make_policy):
    assigned, walk_in = make_user(), make_user()
    policy = make_policy(utc(2030, 1, 1))

    async def roll_out(session):
        return await AssignmentService(session).assign_policy_to_reserves(policy.id)

    async def acknowledge(session, user):
        return await AssignmentService(session).acknowledge_policy(policy.id, user)

    assert {c.user_id for c in run(roll_out)} == {assigned.id, walk_in.id}

    completion = run(acknowledge, assigned)
    assert completion.completion_status == CompletionStatus.COMPLETED
    assert completion.acknowledged_at is not None

    with pytest.raises(InvalidTransitionError):
        run(acknowledge, assigned)


def test_acknowledge_without_prior_row(run, make_user, make_policy):
    reserve = make_user()
    policy = make_policy(utc(2030, 1, 1))

    async def acknowledge(session):
        return await AssignmentService(session).acknowledge_policy(policy.id, reserve)

    assert run(acknowledge).completion_status == CompletionStatus.COMPLETED


def test_acknowledge_inactive_policy_is_rejected(run, make_user, make_policy):
    reserve = make_user()
    policy = make_policy(utc(2030, 1, 1), is_active=False)

    async def acknowledge(session):
        return await AssignmentService(session).acknowledge_policy(policy.id, reserve)

    with pytest.raises(ValidationError):
        run(acknowledge)


def test_reset_policy_recreates_pending_rows(run, make_user, make_policy):
    first, second = make_user(), make_user()
    policy = make_policy(utc(2030, 1, 1))

    async def acknowledge_both(session):
        service = AssignmentService(session)
        for user in (first, second):
            await service.acknowledge_policy(policy.id, user)

    async def reset(session, user_id=None):
        return await AssignmentService(session).reset_policy_completion(policy.id, user_id)

    async def statuses(session):
        completions = await AssignmentService(session).get_policy_completions(policy.id)
        return {c.user_id: c.completion_status for c in completions}

    run(acknowledge_both)
    assert run(reset, first.id) == 1
    assert run(statuses) == {
        first.id: CompletionStatus.PENDING,
        second.id: CompletionStatus.COMPLETED,
    }

    assert run(reset) == 2
    assert set(run(statuses).values()) == {CompletionStatus.PENDING}


def test_assign_policy_skips_existing_and_non_reserves(run, make_user, make_policy):
    reserve = make_user()
    already = make_user()
    make_user(position=UserPosition.OFFICER)
    make_user(is_active=False)
    policy = make_policy(utc(2030, 1, 1))

    async def acknowledge(session):
        return await AssignmentService(session).acknowledge_policy(policy.id, already)

    async def roll_out(session):
        return await AssignmentService(session).assign_policy_to_reserves(policy.id)

    run(acknowledge)
    created = run(roll_out)
    assert [c.user_id for c in created] == [reserve.id]
    assert run(roll_out) == []


def test_set_status_and_user_overview(run, make_user, make_event, make_training, make_equipment):
    reserve = make_user()
    event = make_event(utc(2030, 5, 1, 18))
    training = make_training(utc(2030, 5, 2, 9))
    item = make_equipment()

    async def work(session):
        service = AssignmentService(session)
        await service.sign_up_for_event(event.id, reserve)
        await service.sign_up_for_training(training.id, reserve)
        await service.assign_equipment(
            item.id, reserve.id, expected_return_at=utc(2030, 5, 1) + timedelta(days=7)
        )
        await service.set_event_status(event.id, reserve.id, "excused", notes="Shift conflict")
        await service.set_training_status(training.id, reserve.id, CompletionStatus.COMPLETED)
        return await service.get_user_assignments(reserve.id)

    overview = run(work)
    assert overview["events"][0].completion_status == CompletionStatus.EXCUSED
    assert overview["events"][0].completion_notes == "Shift conflict"
    assert overview["training"][0].completion_status == CompletionStatus.COMPLETED
    assert overview["equipment"][0].equipment_id == item.id
    assert overview["policies"] == []


def test_same_user_can_check_out_again_after_return(run, make_user, make_equipment):
    reserve = make_user()
    item = make_equipment(name="Radio #12")

    async def assign(session):
        return await AssignmentService(session).assign_equipment(
            item.id, reserve.id, expected_return_at=utc(2030, 9, 1)
        )

    async def give_back(session):
        return await AssignmentService(session).return_equipment(
            item.id, reserve.id, EquipmentCondition.GOOD
        )

    first = run(assign)
    run(give_back)
    second = run(assign)

    assert second.id != first.id
    assert second.completion_status == CompletionStatus.PENDING
    assert second.checked_in_at is None

    async def history(session):
        return await AssignmentService(session).get_equipment_history(item.id)

    assert [a.id for a in run(history)] == [second.id]

    async def reload(session):
        return await session.get(Equipment, item.id)

    assert run(reload).assigned_to == reserve.id


def test_update_open_checkout(run, make_user, make_equipment):
    reserve = make_user()
    item = make_equipment()
    due = utc(2030, 6, 1)

    async def assign(session):
        return await AssignmentService(session).assign_equipment(
            item.id, reserve.id, expected_return_at=due, notes="Spare battery included"
        )

    async def extend(session):
        return await AssignmentService(session).update_equipment_assignment(
            item.id,
            reserve.id,
            expected_return_at=due + timedelta(days=7),
            condition=EquipmentCondition.FAIR,
        )

    run(assign)
    updated = run(extend)
    assert updated.expected_return_at.replace(tzinfo=None) == (due + timedelta(days=7)).replace(tzinfo=None)
    assert updated.condition == EquipmentCondition.FAIR
    assert updated.completion_notes == "Spare battery included"
    assert updated.completion_status == CompletionStatus.PENDING


def test_update_returned_or_missing_checkout_is_rejected(run, make_user, make_equipment):
    reserve, other = make_user(), make_user()
    item = make_equipment()

    async def assign(session):
        return await AssignmentService(session).assign_equipment(item.id, reserve.id)

    async def give_back(session):
        return await AssignmentService(session).return_equipment(
            item.id, reserve.id, EquipmentCondition.GOOD
        )

    async def add_notes(session, user):
        return await AssignmentService(session).update_equipment_assignment(
            item.id, user.id, notes="Antenna replaced"
        )

    run(assign)
    run(give_back)
    with pytest.raises(InvalidTransitionError):
        run(add_notes, reserve)
    with pytest.raises(NotFoundError):
        run(add_notes, other)
