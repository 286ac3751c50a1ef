"""FastAPI dependency utilities.

Authentication happens upstream; the gateway forwards the authenticated user
and the active organization as headers.
"""

from fastapi import Header, HTTPException, status


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Return the acting user's id from the ``X-User-Id`` header."""

    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return user_id


def get_organization_id(x_organization_id: str | None = Header(default=None)) -> str | None:
    """Return the organization context from ``X-Organization-Id`` if present."""

    organization_id = (x_organization_id or "").strip()
    return organization_id or None
