"""Metrics probe — stateful OS sampler, refreshed before every read."""

from __future__ import annotations

import logging
import platform
import socket
from abc import ABC, abstractmethod
from dataclasses import dataclass

import psutil

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class DiskUsage:
    mountpoint: str
    total_bytes: int
    available_bytes: int


@dataclass(frozen=True)
class ProcessSample:
    pid: int
    name: str
    cpu_percent: float
    memory_bytes: int


class MetricsProbe(ABC):
    """OS-facing sampler.

    Readers return whatever the last matching ``refresh_*`` call captured,
    so callers must refresh first. Instances are not thread-safe; the
    system state cache serializes access to its single probe.
    """

    @abstractmethod
    def refresh_cpu(self) -> None: ...

    @abstractmethod
    def refresh_memory(self) -> None: ...

    @abstractmethod
    def refresh_disk_list(self) -> None:
        """Re-enumerate mounted volumes (picks up mounts/unmounts)."""

    @abstractmethod
    def refresh_disks(self) -> None:
        """Re-read usage of the currently known volumes."""

    @abstractmethod
    def refresh_processes(self) -> None: ...

    @abstractmethod
    def cpu_usage(self) -> float: ...

    @abstractmethod
    def total_memory(self) -> int: ...

    @abstractmethod
    def used_memory(self) -> int: ...

    @abstractmethod
    def disks(self) -> list[DiskUsage]: ...

    @abstractmethod
    def processes(self) -> list[ProcessSample]: ...

    @abstractmethod
    def os_name(self) -> str | None: ...

    @abstractmethod
    def host_name(self) -> str | None: ...


class PsutilProbe(MetricsProbe):
    """psutil-backed probe."""

    def __init__(self) -> None:
        self._cpu = 0.0
        self._mem_total = 0
        self._mem_used = 0
        self._mountpoints: list[str] = []
        self._disks: list[DiskUsage] = []
        self._processes: list[ProcessSample] = []
        # First non-blocking sample only sets the baseline
        psutil.cpu_percent(interval=None)

    def refresh_cpu(self) -> None:
        self._cpu = psutil.cpu_percent(interval=None)

    def refresh_memory(self) -> None:
        mem = psutil.virtual_memory()
        self._mem_total = mem.total
        self._mem_used = mem.total - mem.available

    def refresh_disk_list(self) -> None:
        seen: set[str] = set()
        mountpoints: list[str] = []
        for part in psutil.disk_partitions(all=False):
            # Bind mounts and btrfs subvolumes show up once per mountpoint
            if part.device in seen:
                continue
            seen.add(part.device)
            mountpoints.append(part.mountpoint)
        self._mountpoints = mountpoints

    def refresh_disks(self) -> None:
        disks: list[DiskUsage] = []
        for mountpoint in self._mountpoints:
            try:
                usage = psutil.disk_usage(mountpoint)
            except OSError as exc:
                logger.debug("Skipping unreadable mount %s: %s", mountpoint, exc)
                continue
            disks.append(DiskUsage(mountpoint, usage.total, usage.free))
        self._disks = disks

    def refresh_processes(self) -> None:
        samples: list[ProcessSample] = []
        # process_iter caches Process objects, so cpu_percent is the delta
        # since the previous refresh
        for proc in psutil.process_iter(["pid", "name"]):
            try:
                cpu = proc.cpu_percent(interval=None)
                rss = proc.memory_info().rss
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
            samples.append(
                ProcessSample(
                    pid=proc.info["pid"],
                    name=proc.info["name"] or "",
                    cpu_percent=cpu,
                    memory_bytes=rss,
                )
            )
        self._processes = samples

    def cpu_usage(self) -> float:
        return self._cpu

    def total_memory(self) -> int:
        return self._mem_total

    def used_memory(self) -> int:
        return self._mem_used

    def disks(self) -> list[DiskUsage]:
        return list(self._disks)

    def processes(self) -> list[ProcessSample]:
        return list(self._processes)

    def os_name(self) -> str | None:
        try:
            return platform.freedesktop_os_release().get("NAME") or platform.system() or None
        except OSError:
            return platform.system() or None

    def host_name(self) -> str | None:
        return socket.gethostname() or None
