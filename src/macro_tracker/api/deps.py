"""Shared FastAPI dependencies."""

from fastapi import Header, HTTPException, status


async def require_user(x_user_id: str | None = Header(default=None)) -> str:
    """Return the caller's user id from the ``X-User-Id`` header.

    Authentication happens upstream; this only rejects anonymous requests.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return x_user_id.strip()
