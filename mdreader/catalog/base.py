from pathlib import Path
from typing import Protocol

from mdreader.domain.files import FileContent, FileEntry


class FileCatalog(Protocol):
    def scan(self, root: Path) -> list[FileEntry]:
        """List markdown files under root, sorted by relative path."""
        ...

    def read(self, root: Path, file_id: str) -> FileContent:
        """Read a file by id, refusing ids that escape root."""
        ...

    def matches(self, file_id: str) -> bool:
        """Whether a file id is one the catalog would list."""
        ...
