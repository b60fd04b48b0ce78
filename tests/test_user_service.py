import uuid

import pytest

from reserves.core.exceptions import ConflictError, NotFoundError, ValidationError
from reserves.models import User, UserPosition, UserRole
from reserves.services.user_service import UserService


def test_list_users_pages(run, make_user):
    first = make_user(first_name="Ada")
    second = make_user(first_name="Ben")

    async def list_users(session):
        return await UserService(session).list_users()

    names = [u.first_name for u in run(list_users)]
    assert set(names) == {"Ada", "Ben"}
    assert len(names) == 2

    async def page(session):
        return await UserService(session).list_users(skip=1, limit=1)

    assert [u.id for u in run(page)] in ([first.id], [second.id])


def test_update_role_and_position(run, make_user):
    user = make_user(role=UserRole.GUEST, position=UserPosition.STAFF)

    async def promote(session):
        return await UserService(session).update_user(
            user.id, role=UserRole.MEMBER, position=UserPosition.OFFICER, phone="555-0199"
        )

    updated = run(promote)
    assert updated.role == UserRole.MEMBER
    assert updated.position == UserPosition.OFFICER
    assert updated.phone == "555-0199"


def test_update_rejects_taken_email_and_bad_fields(run, make_user):
    user = make_user()
    other = make_user()

    async def update(session, **fields):
        return await UserService(session).update_user(user.id, **fields)

    with pytest.raises(ConflictError):
        run(update, email=other.email)
    with pytest.raises(ValidationError):
        run(update, is_active=False)
    with pytest.raises(ValidationError):
        run(update, role=None)

    assert run(update, email=user.email).email == user.email


def test_deactivate(run, make_user):
    admin = make_user(role=UserRole.ADMIN, position=UserPosition.ADMIN)
    reserve = make_user()

    async def deactivate(session, target):
        return await UserService(session).deactivate(target.id, admin)

    assert run(deactivate, reserve).is_active is False

    async def reload(session):
        return await session.get(User, reserve.id)

    assert run(reload).is_active is False

    with pytest.raises(ValidationError):
        run(deactivate, admin)

    async def deactivate_missing(session):
        return await UserService(session).deactivate(uuid.uuid4(), admin)

    with pytest.raises(NotFoundError):
        run(deactivate_missing)
