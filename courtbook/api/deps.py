"""
Request identity from the identity collaborator's bearer token.
"""
from fastapi import Depends, Header, HTTPException

from courtbook.core.security import InvalidTokenError, Requester, decode_access_token


def get_requester(authorization: str | None = Header(None)) -> Requester:
    header = (authorization or "").strip()
    if not header.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail={"code": "unauthorized", "message": "Please sign in"})
    try:
        return decode_access_token(header[7:].strip())
    except InvalidTokenError:
        raise HTTPException(status_code=401, detail={"code": "invalid_token", "message": "Invalid or expired session"})


def require_admin(requester: Requester = Depends(get_requester)) -> Requester:
    if not requester.is_admin:
        raise HTTPException(status_code=403, detail={"code": "forbidden", "message": "Admin access required"})
    return requester
