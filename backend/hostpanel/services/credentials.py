"""Credential repository — username → password hash, backed by SQLite."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hostpanel.models.credential import Credential

logger = logging.getLogger(__name__)


class CredentialRepository:
    """Thin async wrapper around the ``credentials`` table."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get(self, username: str) -> Credential | None:
        result = await self._db.execute(
            select(Credential).where(Credential.username == username)
        )
        return result.scalar_one_or_none()

    async def ensure(self, username: str, password_hash: str) -> bool:
        """Create the account if absent. Returns True if a row was inserted.

        Existing accounts are never touched.
        """
        if await self.get(username) is not None:
            return False
        self._db.add(Credential(username=username, password_hash=password_hash))
        await self._db.commit()
        logger.info("Created account '%s'", username)
        return True
