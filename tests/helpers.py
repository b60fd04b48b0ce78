from datetime import datetime, timezone

from reserves.core.security import create_access_token
from reserves.models import User


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
