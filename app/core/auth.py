"""Authentication and authorization utilities."""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import HTTPException, Request

from app.core import config

STAFF_ROLE = "staff"


class InvalidToken(Exception):
    pass


def authenticate(username: Optional[str], password: Optional[str]) -> bool:
    """Check credentials against the single configured staff account."""
    if not isinstance(username, str) or not isinstance(password, str):
        return False
    user_ok = secrets.compare_digest(username.encode("utf-8"), config.ADMIN_USER.encode("utf-8"))
    pass_ok = secrets.compare_digest(password.encode("utf-8"), config.ADMIN_PASS.encode("utf-8"))
    return user_ok and pass_ok


def create_access_token(username: str, now: Optional[datetime] = None) -> str:
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "role": STAFF_ROLE,
        "username": username,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=config.TOKEN_TTL_HOURS),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and expiry; return the claims."""
    try:
        claims = jwt.decode(
            token,
            config.JWT_SECRET,
            algorithms=[config.JWT_ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
    except jwt.PyJWTError as e:
        raise InvalidToken(str(e)) from e

    if claims.get("role") != STAFF_ROLE:
        raise InvalidToken("not a staff token")
    return claims


def get_bearer_token(request: Request) -> str:
    header = request.headers.get("authorization", "")
    if not header.startswith("Bearer "):
        return ""
    return header[len("Bearer "):].strip()


async def require_staff(request: Request) -> dict:
    """Require a valid staff bearer token."""
    token = get_bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Missing token")
    try:
        claims = decode_access_token(token)
    except InvalidToken:
        raise HTTPException(status_code=401, detail="Invalid token")
    request.state.user = claims
    return claims
