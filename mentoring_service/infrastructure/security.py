import hmac
import secrets
from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError

from ..config import settings


def create_access_token(user_id: int, role: str, minutes: int = 60) -> str:
    """Токен в формате внешнего auth-сервиса (sub = id пользователя)."""
    exp = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {"sub": str(user_id), "role": role, "exp": exp}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_user_id(token: str) -> int:
    """Возвращает id пользователя из токена или кидает JWTError."""
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    sub = payload.get("sub")
    if sub is None:
        raise JWTError("No subject")
    try:
        return int(sub)
    except (TypeError, ValueError):
        raise JWTError("Malformed subject")


def generate_calendar_token() -> str:
    return secrets.token_urlsafe(settings.CALENDAR_TOKEN_BYTES)


def tokens_match(provided: str | None, expected: str | None) -> bool:
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
