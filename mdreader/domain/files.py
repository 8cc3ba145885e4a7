"""File catalog domain models."""

from datetime import datetime
from typing import Literal

from mdreader.domain.base import CamelModel


class FileMetadata(CamelModel):
    size: int
    modified_at: datetime
    created_at: datetime


class FileEntry(CamelModel):
    """Represents one markdown file found under the configured folder.

    Attributes:
        id: POSIX-normalized path relative to the folder, unique within a scan
        name: File name including extension
        absolute_path: Absolute path on disk
        relative_path: Same value as id, kept separately for display
        size: File size in bytes
        modified_at: Last modification time
        created_at: Creation time (birth time where the platform has one)
    """

    id: str
    name: str
    absolute_path: str
    relative_path: str
    size: int
    modified_at: datetime
    created_at: datetime


class FileContent(CamelModel):
    content: str
    metadata: FileMetadata


class ChangeNotification(CamelModel):
    """A file inside the folder was added, modified or deleted."""

    type: Literal["added", "modified", "deleted"]
    file_id: str
