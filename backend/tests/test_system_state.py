"""Tests for the system state cache — percentages, degradation, ordering, deadlines."""

import math
import threading

import pytest

from hostpanel.services.probe import DiskUsage, ProcessSample
from hostpanel.services.system_state import ProbeTimeoutError, SystemStateCache, usage_percent
from tests.helpers.fakes import GIB, FakeProbe


class TestUsagePercent:
    def test_zero_total_is_zero(self):
        assert usage_percent(0, 0) == 0.0
        assert usage_percent(500, 0) == 0.0

    def test_regular_ratio(self):
        assert usage_percent(25, 100) == 25.0

    def test_clamped_to_hundred(self):
        assert usage_percent(150, 100) == 100.0


class TestSnapshot:
    def test_snapshot_values(self, fake_probe):
        snap = SystemStateCache(fake_probe).get_system_snapshot()

        assert snap.cpu_usage_percent == 12.5
        assert snap.total_memory_bytes == 8 * GIB
        assert snap.used_memory_bytes == 2 * GIB
        assert snap.memory_usage_percent == 25.0
        assert snap.total_disk_bytes == 400 * GIB
        assert snap.used_disk_bytes == 240 * GIB
        assert snap.disk_usage_percent == 60.0
        assert snap.os_name == "TestOS"
        assert snap.host_name == "testhost"

    def test_refresh_order_mount_list_before_usage(self, fake_probe):
        SystemStateCache(fake_probe).get_system_snapshot()
        assert fake_probe.calls == ["cpu", "memory", "disk_list", "disks"]

    def test_every_call_refreshes(self, fake_probe):
        cache = SystemStateCache(fake_probe)
        cache.get_system_snapshot()
        cache.get_system_snapshot()
        assert fake_probe.calls.count("cpu") == 2

    def test_zero_totals_give_zero_percent(self):
        probe = FakeProbe(total_memory=0, used_memory=0, disks=[])
        snap = SystemStateCache(probe).get_system_snapshot()

        assert snap.memory_usage_percent == 0.0
        assert snap.disk_usage_percent == 0.0
        assert snap.total_disk_bytes == 0

    def test_missing_names_fall_back_to_unknown(self):
        probe = FakeProbe(os_name=None, host_name="")
        snap = SystemStateCache(probe).get_system_snapshot()

        assert snap.os_name == "Unknown"
        assert snap.host_name == "Unknown"

    def test_probe_failures_degrade_to_defaults(self, fake_probe):
        def boom():
            raise OSError("no /proc")

        fake_probe.refresh_memory = boom
        fake_probe.total_memory = boom
        fake_probe.disks = boom
        fake_probe.host_name = boom

        snap = SystemStateCache(fake_probe).get_system_snapshot()

        assert snap.total_memory_bytes == 0
        assert snap.memory_usage_percent == 0.0
        assert snap.total_disk_bytes == 0
        assert snap.disk_usage_percent == 0.0
        assert snap.host_name == "Unknown"
        assert snap.cpu_usage_percent == 12.5

    @pytest.mark.parametrize("cpu", [float("nan"), -3.0, 250.0])
    def test_cpu_kept_within_bounds(self, cpu):
        snap = SystemStateCache(FakeProbe(cpu=cpu)).get_system_snapshot()
        assert 0.0 <= snap.cpu_usage_percent <= 100.0

    def test_overfull_disk_never_negative(self):
        probe = FakeProbe(disks=[DiskUsage("/", total_bytes=100, available_bytes=150)])
        snap = SystemStateCache(probe).get_system_snapshot()
        assert snap.used_disk_bytes == 0
        assert snap.disk_usage_percent == 0.0


class TestProcesses:
    def test_sorted_descending_and_truncated(self):
        samples = [
            ProcessSample(pid=i, name=f"p{i}", cpu_percent=float(i % 7), memory_bytes=i)
            for i in range(50)
        ]
        entries = SystemStateCache(FakeProbe(processes=samples)).get_processes()

        assert len(entries) == 20
        cpus = [e.cpu_usage_percent for e in entries]
        assert cpus == sorted(cpus, reverse=True)

    def test_ties_keep_enumeration_order(self):
        samples = [
            ProcessSample(pid=10, name="a", cpu_percent=5.0, memory_bytes=1),
            ProcessSample(pid=11, name="b", cpu_percent=9.0, memory_bytes=1),
            ProcessSample(pid=12, name="c", cpu_percent=5.0, memory_bytes=1),
            ProcessSample(pid=13, name="d", cpu_percent=5.0, memory_bytes=1),
        ]
        entries = SystemStateCache(FakeProbe(processes=samples)).get_processes()
        assert [e.pid for e in entries] == [11, 10, 12, 13]

    def test_nan_cpu_treated_as_zero(self):
        samples = [
            ProcessSample(pid=1, name="weird", cpu_percent=math.nan, memory_bytes=1),
            ProcessSample(pid=2, name="busy", cpu_percent=3.0, memory_bytes=1),
        ]
        entries = SystemStateCache(FakeProbe(processes=samples)).get_processes()

        assert [e.pid for e in entries] == [2, 1]
        assert entries[1].cpu_usage_percent == 0.0

    def test_custom_limit(self, fake_probe):
        entries = SystemStateCache(fake_probe, max_processes=1).get_processes()
        assert len(entries) == 1
        assert entries[0].name == "python"

    def test_refresh_failure_yields_empty_list(self, fake_probe):
        def boom():
            raise RuntimeError("process table unavailable")

        fake_probe.processes = boom
        assert SystemStateCache(fake_probe).get_processes() == []


class _BlockingProbe(FakeProbe):
    """Hangs in refresh_cpu until released."""

    def __init__(self):
        super().__init__()
        self.release = threading.Event()
        self.entered = threading.Event()

    def refresh_cpu(self) -> None:
        self.entered.set()
        self.release.wait(timeout=10)
        super().refresh_cpu()


class TestDeadlines:
    @pytest.mark.asyncio
    async def test_hung_refresh_times_out(self):
        probe = _BlockingProbe()
        cache = SystemStateCache(probe, timeout=0.2)
        try:
            with pytest.raises(ProbeTimeoutError):
                await cache.snapshot()
        finally:
            probe.release.set()

    @pytest.mark.asyncio
    async def test_waiters_give_up_while_lock_is_held(self):
        probe = _BlockingProbe()
        cache = SystemStateCache(probe, timeout=0.2)
        try:
            with pytest.raises(ProbeTimeoutError):
                await cache.snapshot()
            assert probe.entered.is_set()
            # First refresh still holds the lock
            with pytest.raises(ProbeTimeoutError):
                await cache.processes()
        finally:
            probe.release.set()

    def test_blocking_call_fails_fast_when_busy(self):
        probe = _BlockingProbe()
        cache = SystemStateCache(probe, timeout=0.1)
        worker = threading.Thread(target=cache.get_system_snapshot)
        worker.start()
        try:
            assert probe.entered.wait(timeout=5)
            with pytest.raises(ProbeTimeoutError):
                cache.get_processes()
        finally:
            probe.release.set()
            worker.join(timeout=5)

        # Lock is free again once the slow refresh finishes
        assert cache.get_processes()

    @pytest.mark.asyncio
    async def test_async_snapshot(self, fake_probe):
        snap = await SystemStateCache(fake_probe).snapshot()
        assert snap.host_name == "testhost"
