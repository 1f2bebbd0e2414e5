"""Service status schemas."""

from enum import Enum

from pydantic import BaseModel


class ServiceState(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    UNKNOWN = "unknown"


class ServiceStatus(BaseModel):
    name: str
    status: ServiceState
    description: str = ""
