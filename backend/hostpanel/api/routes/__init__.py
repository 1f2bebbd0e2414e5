"""API route registration."""

from fastapi import APIRouter, Depends

from hostpanel.api.deps import require_user
from hostpanel.api.routes import auth, files, services, system

api_router = APIRouter()

api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(
    system.router, tags=["system"], dependencies=[Depends(require_user)]
)
api_router.include_router(
    services.router, tags=["services"], dependencies=[Depends(require_user)]
)
# Auth is declared per route so the traversal guard runs before it
api_router.include_router(files.router, tags=["files"])
