"""System state schemas."""

from pydantic import BaseModel


class SystemSnapshot(BaseModel):
    """One coherent point-in-time read of host metrics."""
    cpu_usage_percent: float
    total_memory_bytes: int
    used_memory_bytes: int
    memory_usage_percent: float
    total_disk_bytes: int
    used_disk_bytes: int
    disk_usage_percent: float
    os_name: str
    host_name: str


class ProcessEntry(BaseModel):
    pid: int
    name: str
    cpu_usage_percent: float
    memory_bytes: int
