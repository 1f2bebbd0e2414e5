"""Service status for the configured allow-list."""

from fastapi import APIRouter, Depends

from hostpanel.schemas.services import ServiceStatus
from hostpanel.services import get_service_prober
from hostpanel.services.service_status import ServiceStatusProber

router = APIRouter()


@router.get("/services", response_model=list[ServiceStatus])
async def service_status(prober: ServiceStatusProber = Depends(get_service_prober)):
    return await prober.probe_all()
