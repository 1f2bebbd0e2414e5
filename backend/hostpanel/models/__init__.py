"""SQLAlchemy ORM models for HostPanel."""

from hostpanel.models.base import Base
from hostpanel.models.credential import Credential

__all__ = [
    "Base",
    "Credential",
]
