"""Auth routes — password login and token introspection."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from jose import JWTError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hostpanel.api.deps import require_user
from hostpanel.database import get_db
from hostpanel.schemas.auth import CurrentUser, LoginRequest, TokenResponse
from hostpanel.services import get_auth_gate
from hostpanel.services.auth_gate import AuthGate, InvalidCredentialsError
from hostpanel.services.credentials import CredentialRepository

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    gate: AuthGate = Depends(get_auth_gate),
):
    """
    Exchange username/password for a bearer token.

    Unknown user and wrong password produce the same 401.
    """
    try:
        token = await gate.authenticate(CredentialRepository(db), body.username, body.password)
    except InvalidCredentialsError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    except (SQLAlchemyError, JWTError) as exc:
        logger.error("Login failed internally: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error",
        )

    return TokenResponse(token=token, expires_in=gate.expire_seconds)


@router.get("/me", response_model=CurrentUser)
async def me(user: CurrentUser = Depends(require_user)):
    """Subject and expiry of the presented token."""
    return user
