from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from pwdlib import PasswordHash

from gagyebu.core.config import get_settings

password_hash = PasswordHash.recommended()
settings = get_settings()


class TokenError(ValueError):
    """Raised when a bearer token cannot be trusted."""


def hash_password(password: str) -> str:
    return password_hash.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> tuple[bool, str | None]:
    """Check a password and return a replacement hash when the stored one is outdated."""
    return password_hash.verify_and_update(plain_password, hashed_password)


def create_access_token(
    subject: str,
    *,
    email: str | None = None,
    name: str | None = None,
) -> str:
    issued_at = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": subject,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.access_token_expire_minutes),
    }
    # Session claims mirror the profile so clients can render without a /me round trip.
    if email:
        payload["email"] = email
    if name:
        payload["name"] = name
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise TokenError("Invalid token") from exc
    if not claims.get("sub"):
        raise TokenError("Token has no subject")
    return claims
