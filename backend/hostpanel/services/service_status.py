"""Service status — ``systemctl`` probes over a fixed allow-list."""

from __future__ import annotations

import asyncio
import logging

from hostpanel.schemas.services import ServiceState, ServiceStatus

logger = logging.getLogger(__name__)


class ServiceProbeError(Exception):
    """systemctl could not be run or did not answer in time."""


class ServiceStatusProber:
    """Asks systemd about each allow-listed unit, all units concurrently."""

    def __init__(self, services: list[str], timeout: float = 3.0):
        self._services = list(services)
        self._timeout = timeout

    @property
    def services(self) -> list[str]:
        return list(self._services)

    async def probe_all(self) -> list[ServiceStatus]:
        return list(await asyncio.gather(*(self.probe(name) for name in self._services)))

    async def probe(self, name: str) -> ServiceStatus:
        try:
            state = await self._systemctl("is-active", name)
            description = await self._systemctl("show", "--property=Description", "--value", name)
        except ServiceProbeError as exc:
            logger.warning("Status probe for %s failed: %s", name, exc)
            return ServiceStatus(name=name, status=ServiceState.UNKNOWN)

        # is-active prints "inactive", "failed", "activating", ... for anything not running
        status = ServiceState.ACTIVE if state == "active" else ServiceState.INACTIVE
        if not state:
            status = ServiceState.UNKNOWN
        return ServiceStatus(name=name, status=status, description=description)

    async def _systemctl(self, *args: str) -> str:
        """Run systemctl and return stripped stdout. Non-zero exit is not an error."""
        try:
            proc = await asyncio.create_subprocess_exec(
                "systemctl", *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as exc:
            raise ServiceProbeError(f"cannot run systemctl: {exc}") from exc

        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise ServiceProbeError(f"systemctl {' '.join(args)} timed out") from None
        return stdout.decode(errors="replace").strip()
