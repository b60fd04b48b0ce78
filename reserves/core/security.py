from datetime import datetime, timezone, timedelta
from typing import Any, Union, Optional, Dict
import hmac
import uuid

from jose import JWTError, jwt

# =====================================================
# Application Settings
# =====================================================
from reserves.core.config import Settings, settings


# =====================================================
# Token Type Constants
# =====================================================
TOKEN_TYPE_ACCESS = "access"


# =====================================================
# JWT Creation
# =====================================================
def create_access_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None,
    config: Settings = settings,
) -> str:
    """
    Create a JWT access token whose ``sub`` is the user id.

    Sign-in itself is handled by the identity provider; this token is
    what the API accepts afterwards.
    """
    now = datetime.now(timezone.utc)

    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "exp": expire,
        "sub": str(subject),
        "type": TOKEN_TYPE_ACCESS,
        "iat": now,
        "jti": str(uuid.uuid4()),
    }

    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


# =====================================================
# Token Verification
# =====================================================
def verify_token(
    token: str,
    token_type: str = TOKEN_TYPE_ACCESS,
    config: Settings = settings,
) -> Optional[Dict[str, Any]]:
    """
    Verify a JWT token and return its payload if valid.
    """
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError:
        return None

    if payload.get("type") != token_type:
        return None

    exp = payload.get("exp")
    if exp and datetime.now(timezone.utc).timestamp() > exp:
        return None

    return payload


def verify_access_token(token: str, config: Settings = settings) -> Optional[str]:
    """
    Verify access token and return the subject.
    """
    payload = verify_token(token, TOKEN_TYPE_ACCESS, config)
    return payload.get("sub") if payload else None


# =====================================================
# Cron trigger secret
# =====================================================
def verify_cron_secret(authorization: Optional[str], config: Settings = settings) -> bool:
    """
    Check the ``Authorization: Bearer <CRON_SECRET>`` header of a scheduler call.

    Always true when no CRON_SECRET is configured.
    """
    if not config.CRON_SECRET:
        return True
    if not authorization:
        return False

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return False
    return hmac.compare_digest(token.strip().encode(), config.CRON_SECRET.encode())
