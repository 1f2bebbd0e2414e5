"""Business logic services — singleton registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from hostpanel.config import DEFAULT_ADMIN_PASSWORD, settings

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hostpanel.services.auth_gate import AuthGate
    from hostpanel.services.probe import MetricsProbe
    from hostpanel.services.service_status import ServiceStatusProber
    from hostpanel.services.system_state import SystemStateCache

logger = logging.getLogger(__name__)

_system_state: SystemStateCache | None = None
_auth_gate: AuthGate | None = None
_service_prober: ServiceStatusProber | None = None


async def init_services(db_session: AsyncSession, probe: MetricsProbe | None = None) -> None:
    """Create the service singletons and bootstrap the admin account."""
    global _system_state, _auth_gate, _service_prober

    from hostpanel.services.auth_gate import AuthGate
    from hostpanel.services.credentials import CredentialRepository
    from hostpanel.services.probe import PsutilProbe
    from hostpanel.services.service_status import ServiceStatusProber
    from hostpanel.services.system_state import SystemStateCache
    from hostpanel.utils.hashing import hash_password, verify_password

    probe = probe if probe is not None else PsutilProbe()
    _system_state = SystemStateCache(
        probe,
        timeout=settings.probe_timeout_seconds,
        max_processes=settings.max_processes,
    )
    _auth_gate = AuthGate(
        secret_key=settings.secret_key,
        algorithm=settings.token_algorithm,
        expire_seconds=settings.token_expire_seconds,
    )
    _service_prober = ServiceStatusProber(
        settings.monitored_services,
        timeout=settings.service_probe_timeout_seconds,
    )

    if settings.uses_default_secret:
        logger.warning(
            "Token signing secret is the built-in default; set HOSTPANEL_SECRET_KEY"
        )

    repo = CredentialRepository(db_session)
    await repo.ensure(settings.admin_username, hash_password(settings.admin_password))
    admin = await repo.get(settings.admin_username)
    if admin is not None and verify_password(DEFAULT_ADMIN_PASSWORD, admin.password_hash):
        logger.warning(
            "Account '%s' still uses the default password '%s'. Anyone who can reach "
            "this host can log in. Set HOSTPANEL_ADMIN_PASSWORD before the first start.",
            settings.admin_username,
            DEFAULT_ADMIN_PASSWORD,
        )
    logger.info("Services initialized (probe=%s)", type(probe).__name__)


async def shutdown_services() -> None:
    global _system_state, _auth_gate, _service_prober
    _system_state = None
    _auth_gate = None
    _service_prober = None


def get_system_state() -> SystemStateCache:
    if _system_state is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _system_state


def get_auth_gate() -> AuthGate:
    if _auth_gate is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _auth_gate


def get_service_prober() -> ServiceStatusProber:
    if _service_prober is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _service_prober
