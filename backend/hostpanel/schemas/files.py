"""File listing schemas."""

from pydantic import BaseModel


class FileEntry(BaseModel):
    """One directory entry."""
    name: str
    is_directory: bool
    size_bytes: int
