"""Auth gate — password login and stateless signed bearer tokens (JWT)."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

from jose import JWTError, jwt

from hostpanel.services.credentials import CredentialRepository
from hostpanel.utils.hashing import hash_password, verify_password

logger = logging.getLogger(__name__)


class InvalidCredentialsError(Exception):
    """Unknown user or wrong password (deliberately not distinguished)."""


class InvalidTokenError(Exception):
    """Token is malformed, wrongly signed, expired or has no subject."""


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    issued_at: int
    expires_at: int


class AuthGate:
    """Issues and verifies HMAC-signed tokens.

    Holds no session state: a token is valid if its signature checks out
    against ``secret_key`` and its ``exp`` claim lies in the future.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
    ):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_seconds = expire_seconds
        self._clock = clock
        # Verified against for unknown users so both failure paths cost the same
        self._dummy_hash = hash_password("not-a-real-password")

    @property
    def expire_seconds(self) -> int:
        return self._expire_seconds

    async def authenticate(self, repo: CredentialRepository, username: str, password: str) -> str:
        """Check credentials and return a fresh token."""
        credential = await repo.get(username)
        # PBKDF2 is CPU-bound; keep it off the event loop
        if credential is None:
            await asyncio.to_thread(verify_password, password, self._dummy_hash)
            logger.info("Login failed for '%s'", username)
            raise InvalidCredentialsError
        if not await asyncio.to_thread(verify_password, password, credential.password_hash):
            logger.info("Login failed for '%s'", username)
            raise InvalidCredentialsError

        logger.info("Login succeeded for '%s'", username)
        return self.issue_token(username)

    def issue_token(self, subject: str) -> str:
        now = int(self._clock())
        claims = {"sub": subject, "iat": now, "exp": now + self._expire_seconds}
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def verify_token(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require_exp": True, "require_sub": True},
            )
        except JWTError as exc:
            raise InvalidTokenError(str(exc)) from exc

        subject = payload.get("sub")
        if not subject:
            raise InvalidTokenError("Token has no subject claim")
        return TokenClaims(
            subject=subject,
            issued_at=int(payload.get("iat", 0)),
            expires_at=int(payload["exp"]),
        )
