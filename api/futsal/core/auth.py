"""JWT handling for identity-provider tokens.

Sign-in happens at the external identity provider; this service only
verifies the bearer tokens it issues. ``create_access_token`` mints a token
with the same shape for local development and tests.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from futsal.core.config import settings


def create_access_token(subject: str, extra: dict | None = None) -> str:
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {"sub": subject, "exp": expire, "type": "access"}
    if extra:
        payload.update(extra)
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT. Raises JWTError on failure."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise
