import uuid

from fastapi.testclient import TestClient
from sqlalchemy import select

from helpers import auth_headers, utc
from reserves.core.config import Settings
from reserves.main import create_app
from reserves.models import Notification, UserPosition, UserRole

API = "/api/v1"
CRON = {"Authorization": "Bearer test-cron-secret"}


def _seed_notification(run, user, message="Equipment assigned: Radio #12", is_read=False):
    async def create(session):
        notification = Notification(
            user_id=user.id,
            type="equipment_assigned",
            message=message,
            is_read=is_read,
        )
        session.add(notification)
        await session.commit()
        await session.refresh(notification)
        return notification

    return run(create)


# ============================================================
# Cron trigger
# ============================================================

def test_cron_requires_secret(client):
    response = client.post(f"{API}/cron/reminders")
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}

    response = client.get(f"{API}/cron/reminders", headers={"Authorization": "Bearer wrong"})
    assert response.status_code == 401


def test_cron_runs_reminders(client):
    for method in (client.get, client.post):
        response = method(f"{API}/cron/reminders", headers=CRON)
        assert response.status_code == 200
        assert response.json() == {"success": True}


def test_cron_reports_failed_run(client, monkeypatch):
    async def failed(database, **kwargs):
        return False

    monkeypatch.setattr("reserves.api.v1.endpoints.cron.process_all_reminders", failed)
    response = client.post(f"{API}/cron/reminders", headers=CRON)
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to process reminders"}


def test_cron_hides_internal_errors(client, monkeypatch):
    async def explode(database, **kwargs):
        raise RuntimeError("connection refused to db-primary:5432")

    monkeypatch.setattr("reserves.api.v1.endpoints.cron.process_all_reminders", explode)
    response = client.post(f"{API}/cron/reminders", headers=CRON)
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_cron_uses_app_config(database):
    app = create_app(Settings(CRON_SECRET="rotated-secret"), database=database)
    with TestClient(app) as client:
        assert client.post(f"{API}/cron/reminders", headers=CRON).status_code == 401

        response = client.post(
            f"{API}/cron/reminders", headers={"Authorization": "Bearer rotated-secret"}
        )
        assert response.status_code == 200
        assert response.json() == {"success": True}


# ============================================================
# Auth
# ============================================================

def test_missing_or_bad_token_is_unauthorized(client, make_user):
    assert client.get(f"{API}/notifications").status_code == 401

    response = client.get(f"{API}/notifications", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_inactive_user_is_forbidden(client, make_user):
    user = make_user(is_active=False)
    response = client.get(f"{API}/notifications", headers=auth_headers(user))
    assert response.status_code == 403


# ============================================================
# Events
# ============================================================

def test_member_cannot_create_event(client, make_user):
    member = make_user()
    payload = {
        "name": "Downtown Patrol",
        "event_type": "patrol",
        "location": "Main St",
        "starts_at": "2030-06-01T18:00:00Z",
        "ends_at": "2030-06-01T22:00:00Z",
    }
    response = client.post(f"{API}/events", json=payload, headers=auth_headers(member))
    assert response.status_code == 403


def test_admin_creates_event_and_reserves_are_notified(client, run, make_user):
    admin = make_user(role=UserRole.ADMIN, position=UserPosition.ADMIN)
    reserve = make_user()
    payload = {
        "name": "  Harbor   Festival ",
        "event_type": "community_event",
        "location": "Pier 4",
        "starts_at": "2030-07-04T10:00:00Z",
        "ends_at": "2030-07-04T18:00:00Z",
    }

    response = client.post(f"{API}/events", json=payload, headers=auth_headers(admin))
    assert response.status_code == 201
    assert response.json()["name"] == "Harbor Festival"

    listed = client.get(f"{API}/notifications", headers=auth_headers(reserve)).json()
    assert [n["message"] for n in listed] == ["New event: Harbor Festival"]


def test_event_with_inverted_schedule_is_rejected(client, make_user):
    admin = make_user(role=UserRole.ADMIN, position=UserPosition.ADMIN)
    payload = {
        "name": "Backwards",
        "event_type": "patrol",
        "location": "Main St",
        "starts_at": "2030-06-01T22:00:00Z",
        "ends_at": "2030-06-01T18:00:00Z",
    }
    response = client.post(f"{API}/events", json=payload, headers=auth_headers(admin))
    assert response.status_code == 422


def test_signup_then_duplicate_conflicts(client, make_user, make_event):
    reserve = make_user()
    event = make_event(utc(2030, 6, 1, 18))
    url = f"{API}/events/{event.id}/signup"

    response = client.post(url, headers=auth_headers(reserve))
    assert response.status_code == 201
    body = response.json()
    assert body["event_id"] == str(event.id)
    assert body["completion_status"] == "pending"

    response = client.post(url, headers=auth_headers(reserve))
    assert response.status_code == 409
    assert "detail" in response.json()


def test_signup_unknown_event_is_not_found(client, make_user):
    reserve = make_user()
    response = client.post(f"{API}/events/{uuid.uuid4()}/signup", headers=auth_headers(reserve))
    assert response.status_code == 404


def test_admin_marks_participant_and_terminal_state_holds(client, make_user, make_event):
    admin = make_user(role=UserRole.ADMIN, position=UserPosition.ADMIN)
    reserve = make_user()
    event = make_event(utc(2030, 6, 1, 18))
    client.post(f"{API}/events/{event.id}/signup", headers=auth_headers(reserve))

    participants = client.get(
        f"{API}/events/{event.id}/participants", headers=auth_headers(admin)
    ).json()
    assert [p["user"]["id"] for p in participants] == [str(reserve.id)]

    status_url = f"{API}/events/{event.id}/status"
    payload = {"user_id": str(reserve.id), "status": "completed"}
    response = client.post(status_url, json=payload, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["completion_status"] == "completed"

    payload["status"] = "excused"
    response = client.post(status_url, json=payload, headers=auth_headers(admin))
    assert response.status_code == 422


def test_leave_event(client, make_user, make_event):
    reserve = make_user()
    event = make_event(utc(2030, 6, 1, 18))
    url = f"{API}/events/{event.id}/signup"

    client.post(url, headers=auth_headers(reserve))
    assert client.delete(url, headers=auth_headers(reserve)).status_code == 204
    assert client.delete(url, headers=auth_headers(reserve)).status_code == 404


# ============================================================
# Notifications
# ============================================================

def test_notification_listing_and_read_flags(client, run, make_user):
    user = make_user()
    first = _seed_notification(run, user, "Equipment assigned: Radio #12")
    _seed_notification(run, user, "Equipment assigned: Vest #3")
    _seed_notification(run, user, "Equipment assigned: Baton", is_read=True)
    headers = auth_headers(user)

    assert client.get(f"{API}/notifications/unread-count", headers=headers).json() == {
        "unread_count": 2
    }
    unread = client.get(f"{API}/notifications", params={"is_read": False}, headers=headers).json()
    assert len(unread) == 2

    response = client.post(f"{API}/notifications/{first.id}/read", headers=headers)
    assert response.status_code == 200
    assert response.json()["is_read"] is True
    assert client.get(f"{API}/notifications/unread-count", headers=headers).json() == {
        "unread_count": 1
    }

    response = client.post(f"{API}/notifications/mark-all-read", headers=headers)
    assert response.json()["updated"] == 1
    assert client.get(f"{API}/notifications/unread-count", headers=headers).json() == {
        "unread_count": 0
    }


def test_cannot_read_another_users_notification(client, run, make_user):
    owner, other = make_user(), make_user()
    notification = _seed_notification(run, owner)

    response = client.post(
        f"{API}/notifications/{notification.id}/read", headers=auth_headers(other)
    )
    assert response.status_code == 404

    async def reload(session):
        result = await session.execute(
            select(Notification.is_read).where(Notification.id == notification.id)
        )
        return result.scalar_one()

    assert run(reload) is False


def test_delete_own_notification_only(client, run, make_user):
    owner, other = make_user(), make_user()
    notification = _seed_notification(run, owner)
    url = f"{API}/notifications/{notification.id}"

    assert client.delete(url, headers=auth_headers(other)).status_code == 404
    assert client.delete(url, headers=auth_headers(owner)).status_code == 204
    assert client.delete(url, headers=auth_headers(owner)).status_code == 404
    assert client.get(f"{API}/notifications", headers=auth_headers(owner)).json() == []


# ============================================================
# Equipment and policies
# ============================================================

def test_equipment_checkout_flow(client, make_user, make_equipment):
    admin = make_user(role=UserRole.ADMIN, position=UserPosition.ADMIN)
    reserve = make_user()
    item = make_equipment(name="Radio #12")
    headers = auth_headers(admin)

    response = client.post(
        f"{API}/equipment/{item.id}/assign",
        json={"user_id": str(reserve.id), "expected_return_at": "2030-06-01T00:00:00Z"},
        headers=headers,
    )
    assert response.status_code == 201
    assert response.json()["condition"] == "good"

    response = client.post(
        f"{API}/equipment/{item.id}/assign", json={"user_id": str(admin.id)}, headers=headers
    )
    assert response.status_code == 409

    response = client.post(
        f"{API}/equipment/{item.id}/return",
        json={"user_id": str(reserve.id), "condition": "fair"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["completion_status"] == "completed"

    history = client.get(f"{API}/equipment/{item.id}/history", headers=headers).json()
    assert [h["user_id"] for h in history] == [str(reserve.id)]

    mine = client.get(f"{API}/me/assignments", headers=auth_headers(reserve)).json()
    assert mine["equipment"][0]["checked_in_at"] is not None


def test_policy_acknowledge_and_reset(client, make_user, make_policy):
    admin = make_user(role=UserRole.ADMIN, position=UserPosition.ADMIN)
    reserve = make_user()
    policy = make_policy(utc(2030, 1, 1))

    response = client.post(f"{API}/policies/{policy.id}/acknowledge", headers=auth_headers(reserve))
    assert response.status_code == 200
    assert response.json()["completion_status"] == "completed"

    response = client.post(
        f"{API}/policies/{policy.id}/reset",
        json={"user_id": str(reserve.id)},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    assert response.json() == {"policy_id": str(policy.id), "reset_count": 1}

    completions = client.get(
        f"{API}/policies/{policy.id}/completions", headers=auth_headers(admin)
    ).json()
    assert [c["completion_status"] for c in completions] == ["pending"]


def test_health_and_root(client, monkeypatch):
    async def redis_down(config):
        return False

    monkeypatch.setattr("reserves.main.check_redis_connection", redis_down)
    assert client.get("/").json()["status"] == "running"

    body = client.get("/health").json()
    assert body == {"status": "degraded", "database": "connected", "redis": "disconnected"}


def test_equipment_reassign_and_extend(client, make_user, make_equipment):
    admin = make_user(role=UserRole.ADMIN, position=UserPosition.ADMIN)
    reserve = make_user()
    item = make_equipment(name="Vest #3")
    headers = auth_headers(admin)
    assign_url = f"{API}/equipment/{item.id}/assign"
    assignment_url = f"{API}/equipment/{item.id}/assignment"

    assert client.post(assign_url, json={"user_id": str(reserve.id)}, headers=headers).status_code == 201
    response = client.patch(
        assignment_url,
        json={"user_id": str(reserve.id), "expected_return_at": "2030-07-01T00:00:00Z"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["expected_return_at"].startswith("2030-07-01")

    client.post(
        f"{API}/equipment/{item.id}/return",
        json={"user_id": str(reserve.id), "condition": "good"},
        headers=headers,
    )
    response = client.patch(
        assignment_url, json={"user_id": str(reserve.id), "notes": "late"}, headers=headers
    )
    assert response.status_code == 422

    response = client.post(assign_url, json={"user_id": str(reserve.id)}, headers=headers)
    assert response.status_code == 201
    assert response.json()["completion_status"] == "pending"


# ============================================================
# Users and applications
# ============================================================

def test_admin_manages_users(client, make_user):
    admin = make_user(role=UserRole.ADMIN, position=UserPosition.ADMIN)
    guest = make_user(role=UserRole.GUEST, position=UserPosition.STAFF)
    headers = auth_headers(admin)

    assert client.get(f"{API}/users", headers=auth_headers(guest)).status_code == 403

    listed = client.get(f"{API}/users", headers=headers).json()
    assert {u["id"] for u in listed} == {str(admin.id), str(guest.id)}

    response = client.patch(
        f"{API}/users/{guest.id}",
        json={"role": "member", "position": "reserve"},
        headers=headers,
    )
    assert response.status_code == 200
    assert (response.json()["role"], response.json()["position"]) == ("member", "reserve")

    response = client.patch(
        f"{API}/users/{guest.id}", json={"email": admin.email}, headers=headers
    )
    assert response.status_code == 409

    response = client.post(f"{API}/users/{guest.id}/deactivate", headers=headers)
    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert client.get(f"{API}/me", headers=auth_headers(guest)).status_code == 403

    response = client.post(f"{API}/users/{admin.id}/deactivate", headers=headers)
    assert response.status_code == 422
    assert client.get(f"{API}/me", headers=headers).json()["is_active"] is True


def test_admin_deletes_application(client, make_user):
    admin = make_user(role=UserRole.ADMIN, position=UserPosition.ADMIN)
    guest = make_user(role=UserRole.GUEST, position=UserPosition.STAFF)
    payload = {
        "first_name": "Robin",
        "last_name": "Diaz",
        "email": "robin.diaz@example.com",
        "phone": "555-0100",
        "driver_license": "D1234567",
        "street_address": "12 Elm St",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "prior_experience": "less_than_1_year",
        "availability": "weekends",
    }

    response = client.post(f"{API}/applications", json=payload, headers=auth_headers(guest))
    assert response.status_code == 201
    url = f"{API}/applications/{response.json()['id']}"

    assert client.delete(url, headers=auth_headers(guest)).status_code == 403
    assert client.delete(url, headers=auth_headers(admin)).status_code == 204
    assert client.get(url, headers=auth_headers(admin)).status_code == 404
