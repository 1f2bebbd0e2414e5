"""File API routes — single-level directory listing."""

import asyncio

from fastapi import APIRouter, Depends, HTTPException, Query, status

from hostpanel.api.deps import require_user
from hostpanel.config import settings
from hostpanel.schemas.files import FileEntry
from hostpanel.services.file_listing import (
    DirectoryUnreadableError,
    PathTraversalError,
    check_traversal,
    list_directory,
    resolve_within_root,
)

router = APIRouter()


def _forbidden() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Path not allowed")


async def reject_traversal(path: str = Query(".")) -> None:
    """Answer 403 for ``..`` before the token is even looked at."""
    try:
        check_traversal(path)
    except PathTraversalError:
        raise _forbidden()


@router.get(
    "/files",
    response_model=list[FileEntry],
    dependencies=[Depends(reject_traversal), Depends(require_user)],
)
async def list_files(path: str = Query(".")):
    """List a directory: directories first, then names case-insensitively."""
    try:
        target = resolve_within_root(path, settings.files_root)
    except PathTraversalError:
        raise _forbidden()

    try:
        return await asyncio.to_thread(list_directory, target)
    except DirectoryUnreadableError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Directory not readable")
