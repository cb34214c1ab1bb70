"""
Bearer tokens from the identity collaborator: HS256 JWTs with `sub` (requester id) and `role`.
Token issuing lives with registration/OTP elsewhere; create_access_token exists for scripts and tests.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from courtbook.config import settings
from courtbook.core.constants import ADMIN_ROLE

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL = timedelta(days=7)


@dataclass(frozen=True)
class Requester:
    id: str
    is_admin: bool = False


class InvalidTokenError(Exception):
    pass


def create_access_token(requester_id: str, role: str = "student", ttl: timedelta = DEFAULT_TOKEN_TTL) -> str:
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": requester_id, "role": role, "iat": now, "exp": now + ttl},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    if isinstance(token, bytes):
        token = token.decode("utf-8")
    return token


def decode_access_token(token: str) -> Requester:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        logger.debug("Rejected bearer token: %s", e)
        raise InvalidTokenError(str(e)) from e
    sub = str(payload.get("sub") or "").strip()
    if not sub:
        raise InvalidTokenError("token has no subject")
    return Requester(id=sub, is_admin=payload.get("role") == ADMIN_ROLE)
