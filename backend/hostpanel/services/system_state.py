"""System state cache — serialized access to the single metrics probe."""

from __future__ import annotations

import asyncio
import logging
import math
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from hostpanel.schemas.system import ProcessEntry, SystemSnapshot
from hostpanel.services.probe import UNKNOWN, MetricsProbe

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProbeTimeoutError(Exception):
    """The probe did not become available or finish within the deadline."""


def usage_percent(used: int, total: int) -> float:
    """used/total as a percentage clamped to [0, 100]; 0 when total is 0."""
    if total <= 0:
        return 0.0
    return min(max(used / total * 100.0, 0.0), 100.0)


def _finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


class SystemStateCache:
    """Owns the one live probe for the process lifetime.

    Every call refreshes the probe; nothing is cached between calls. The lock
    is held for a whole refresh+read cycle so each result reflects a single
    coherent refresh. Waiting for the lock and the async wrappers are both
    bounded by ``timeout`` seconds.
    """

    def __init__(self, probe: MetricsProbe, timeout: float = 5.0, max_processes: int = 20):
        self._probe = probe
        self._lock = threading.Lock()
        self._timeout = timeout
        self._max_processes = max_processes

    # ── Blocking API (runs in a worker thread) ────────────────────

    def get_system_snapshot(self) -> SystemSnapshot:
        with self._acquire():
            self._safely("cpu", self._probe.refresh_cpu)
            self._safely("memory", self._probe.refresh_memory)
            # Mount list first so new volumes are included in the usage pass
            self._safely("disk list", self._probe.refresh_disk_list)
            self._safely("disks", self._probe.refresh_disks)

            cpu = self._read("cpu usage", self._probe.cpu_usage, 0.0)
            total_mem = self._read("total memory", self._probe.total_memory, 0)
            used_mem = self._read("used memory", self._probe.used_memory, 0)
            disks = self._read("disks", self._probe.disks, [])
            os_name = self._read("os name", self._probe.os_name, None) or UNKNOWN
            host_name = self._read("host name", self._probe.host_name, None) or UNKNOWN

        total_disk = sum(d.total_bytes for d in disks)
        used_disk = sum(max(d.total_bytes - d.available_bytes, 0) for d in disks)

        return SystemSnapshot(
            cpu_usage_percent=min(max(_finite_or_zero(cpu), 0.0), 100.0),
            total_memory_bytes=total_mem,
            used_memory_bytes=used_mem,
            memory_usage_percent=usage_percent(used_mem, total_mem),
            total_disk_bytes=total_disk,
            used_disk_bytes=used_disk,
            disk_usage_percent=usage_percent(used_disk, total_disk),
            os_name=os_name,
            host_name=host_name,
        )

    def get_processes(self) -> list[ProcessEntry]:
        with self._acquire():
            self._safely("processes", self._probe.refresh_processes)
            samples = self._read("processes", self._probe.processes, [])

        entries = [
            ProcessEntry(
                pid=s.pid,
                name=s.name,
                cpu_usage_percent=_finite_or_zero(s.cpu_percent),
                memory_bytes=s.memory_bytes,
            )
            for s in samples
        ]
        # sorted() is stable with reverse=True: equal values keep enumeration order
        entries = sorted(entries, key=lambda e: e.cpu_usage_percent, reverse=True)
        return entries[: self._max_processes]

    # ── Async API ─────────────────────────────────────────────────

    async def snapshot(self) -> SystemSnapshot:
        return await self._run_bounded(self.get_system_snapshot)

    async def processes(self) -> list[ProcessEntry]:
        return await self._run_bounded(self.get_processes)

    async def _run_bounded(self, func: Callable[[], T]) -> T:
        """Run ``func`` in a worker thread, giving up after the deadline.

        An overrunning refresh keeps the lock until it finishes on its own;
        its result is discarded.
        """
        try:
            return await asyncio.wait_for(asyncio.to_thread(func), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Metrics probe exceeded %.1fs deadline", self._timeout)
            raise ProbeTimeoutError(f"Probe did not respond within {self._timeout}s") from None

    # ── Helpers ───────────────────────────────────────────────────

    @contextmanager
    def _acquire(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self._timeout):
            logger.warning("Metrics probe busy for more than %.1fs", self._timeout)
            raise ProbeTimeoutError(f"Probe busy for more than {self._timeout}s")
        try:
            yield
        finally:
            self._lock.release()

    @staticmethod
    def _safely(what: str, refresh: Callable[[], None]) -> None:
        try:
            refresh()
        except Exception as exc:
            logger.warning("Failed to refresh %s: %s", what, exc)

    @staticmethod
    def _read(what: str, reader: Callable[[], T], default: T) -> T:
        try:
            return reader()
        except Exception as exc:
            logger.warning("Failed to read %s: %s", what, exc)
            return default

