"""JWT token management and password hashing utilities."""

import hashlib
import hmac
import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from discuss_board.config import settings
from discuss_board.models.enums import PrincipalRole

ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    """Hash a password using bcrypt with configured rounds."""
    return bcrypt.hashpw(
        password.encode("utf-8"),
        bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS),
    ).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its bcrypt hash."""
    return bcrypt.checkpw(
        plain_password.encode("utf-8"),
        hashed_password.encode("utf-8"),
    )


def create_token(
    account_id: uuid.UUID,
    role: PrincipalRole,
    *,
    token_use: str,
    jwt_id: str,
    member_id: uuid.UUID | None = None,
    expires_delta: timedelta | None = None,
) -> tuple[str, datetime]:
    """Create a signed JWT. Returns (token, expires_at)."""
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        if token_use == REFRESH:
            expires_delta = timedelta(days=settings.REFRESH_TOKEN_EXPIRY_DAYS)
        else:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRY_MINUTES)
    expire = now + expires_delta
    payload = {
        "sub": str(account_id),
        "type": role.value,
        "use": token_use,
        "iss": settings.JWT_ISSUER,
        "iat": now,
        "exp": expire,
        "jti": jwt_id,
    }
    if member_id is not None:
        payload["mid"] = str(member_id)
    token = jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return token, expire


def decode_token(token: str, expected_use: str) -> dict:
    """Decode and validate a JWT. Raises jwt.PyJWTError on failure."""
    payload = jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
        issuer=settings.JWT_ISSUER,
        options={"require": ["sub", "exp", "jti"]},
    )
    if payload.get("use") != expected_use:
        raise jwt.InvalidTokenError(f"Expected a {expected_use} token.")
    return payload


def hash_token(token: str) -> str:
    """Create a SHA-256 hash of a token for storage."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def token_matches(token: str, stored_hash: str) -> bool:
    return hmac.compare_digest(hash_token(token), stored_hash)
