"""FastAPI dependency injection — bearer-token auth & service lookup."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from hostpanel.schemas.auth import CurrentUser
from hostpanel.services import get_auth_gate
from hostpanel.services.auth_gate import AuthGate, InvalidTokenError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    gate: AuthGate = Depends(get_auth_gate),
) -> CurrentUser:
    """Verify the bearer token and expose its subject to the handler.

    The subject is also stored on ``request.state.user``.
    """
    if not authorization:
        raise _unauthorized("No authentication token provided")
    if not authorization.startswith(BEARER_PREFIX):
        raise _unauthorized("Authorization header must use the Bearer scheme")

    try:
        claims = gate.verify_token(authorization[len(BEARER_PREFIX):])
    except InvalidTokenError as exc:
        logger.debug("Rejected token: %s", exc)
        raise _unauthorized("Invalid or expired token")

    user = CurrentUser(username=claims.subject, expires_at=claims.expires_at)
    request.state.user = user
    return user
