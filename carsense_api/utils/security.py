from datetime import datetime, timedelta, timezone

from jose import JWTError, ExpiredSignatureError, jwt

from carsense_api.config import Settings
from carsense_api.utils.exceptions import TokenExpiredException, UnauthorizedException


# ─── Session tokens ───────────────────────────────────────────────────────────
def create_access_token(settings: Settings, user_id: str, role: str, expires_minutes: int | None = None) -> str:
    """
    Create a signed session token.
    Payload: sub (user id), role, type, exp
    """
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {
        "sub": str(user_id),
        "role": role,
        "type": "access",
        "exp": expire,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_access_token(settings: Settings, token: str) -> dict:
    """
    Decode and validate a session token.
    Raises 401 if invalid, 401 (TOKEN_EXPIRED) if expired.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        if payload.get("type") != "access":
            raise UnauthorizedException("Invalid token type")
        return payload
    except ExpiredSignatureError:
        raise TokenExpiredException()
    except JWTError:
        raise UnauthorizedException("Invalid or malformed token")
