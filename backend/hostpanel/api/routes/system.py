"""System state — host metrics and top processes."""

from fastapi import APIRouter, Depends, HTTPException, status

from hostpanel.schemas.system import ProcessEntry, SystemSnapshot
from hostpanel.services import get_system_state
from hostpanel.services.system_state import ProbeTimeoutError, SystemStateCache

router = APIRouter()

RETRY_AFTER_SECONDS = "1"


def _probe_unavailable(exc: ProbeTimeoutError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=str(exc),
        headers={"Retry-After": RETRY_AFTER_SECONDS},
    )


@router.get("/system", response_model=SystemSnapshot)
async def system_snapshot(cache: SystemStateCache = Depends(get_system_state)):
    """CPU, memory and disk usage plus OS/host names."""
    try:
        return await cache.snapshot()
    except ProbeTimeoutError as exc:
        raise _probe_unavailable(exc)


@router.get("/processes", response_model=list[ProcessEntry])
async def processes(cache: SystemStateCache = Depends(get_system_state)):
    """Top processes by CPU usage."""
    try:
        return await cache.processes()
    except ProbeTimeoutError as exc:
        raise _probe_unavailable(exc)
