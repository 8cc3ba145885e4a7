"""Catalog of markdown files in a local folder."""

from datetime import datetime, timezone
from fnmatch import fnmatch
from pathlib import Path, PurePosixPath

from loguru import logger

from mdreader.catalog.base import FileCatalog
from mdreader.domain.files import FileContent, FileEntry, FileMetadata
from mdreader.errors import CatalogIOError, FileNotFoundInFolderError, PathTraversalError


def _timestamp(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def _created_at(stat_result) -> datetime:  # noqa: ANN001
    # st_birthtime only exists on macOS/BSD and recent Windows builds
    return _timestamp(getattr(stat_result, "st_birthtime", stat_result.st_ctime))


class LocalFileCatalog(FileCatalog):
    """Scan and read markdown files below a root folder."""

    def __init__(self, patterns: list[str], excluded_dirs: list[str] | None = None) -> None:
        """Initialize LocalFileCatalog.

        Args:
            patterns: Filename glob patterns matched recursively (e.g. ["*.md"])
            excluded_dirs: Directory names skipped anywhere in the tree (e.g. ["node_modules"])
        """
        self.patterns = patterns
        self.excluded_dirs = set(excluded_dirs or [])

    def scan(self, root: Path) -> list[FileEntry]:
        """List all matching files under root.

        A missing root is not an error: the folder simply has no files yet.

        Returns:
            Entries sorted by relative path
        """
        root = Path(root)
        if not root.is_dir():
            logger.warning(f"Markdown folder does not exist: {root}")
            return []

        entries: dict[str, FileEntry] = {}
        for pattern in self.patterns:
            for path in root.rglob(pattern):
                file_id = PurePosixPath(*path.relative_to(root).parts).as_posix()
                if file_id in entries or not self.matches(file_id) or not path.is_file():
                    continue
                try:
                    stat_result = path.stat()
                except FileNotFoundError:
                    logger.debug(f"File disappeared during scan: {file_id}")
                    continue
                except OSError as e:
                    raise CatalogIOError(f"Could not stat {path}: {e}") from e
                entries[file_id] = FileEntry(
                    id=file_id,
                    name=path.name,
                    absolute_path=str(path.absolute()),
                    relative_path=file_id,
                    size=stat_result.st_size,
                    modified_at=_timestamp(stat_result.st_mtime),
                    created_at=_created_at(stat_result),
                )

        return [entries[file_id] for file_id in sorted(entries)]

    def read(self, root: Path, file_id: str) -> FileContent:
        """Read a file's content and metadata.

        Raises:
            PathTraversalError: file_id resolves outside root
            FileNotFoundInFolderError: nothing readable at file_id
            CatalogIOError: the file exists but could not be read
        """
        path = self.resolve(root, file_id)
        if not path.is_file():
            raise FileNotFoundInFolderError(file_id)

        try:
            content = path.read_text(encoding="utf-8")
            stat_result = path.stat()
        except FileNotFoundError as e:
            raise FileNotFoundInFolderError(file_id) from e
        except (OSError, UnicodeDecodeError) as e:
            raise CatalogIOError(f"Could not read {file_id}: {e}") from e

        return FileContent(
            content=content,
            metadata=FileMetadata(
                size=stat_result.st_size,
                modified_at=_timestamp(stat_result.st_mtime),
                created_at=_created_at(stat_result),
            ),
        )

    def resolve(self, root: Path, file_id: str) -> Path:
        """Resolve a file id to an absolute path that is root or inside it."""
        resolved_root = Path(root).resolve()
        try:
            candidate = (resolved_root / file_id).resolve()
        except (ValueError, OSError) as e:
            # e.g. embedded null bytes or symlink loops
            logger.debug(f"Unresolvable file id {file_id!r}: {e}")
            raise FileNotFoundInFolderError(file_id) from e
        if candidate != resolved_root and resolved_root not in candidate.parents:
            logger.warning(f"Path traversal attempt rejected: {file_id!r} escapes {resolved_root}")
            raise PathTraversalError(file_id)
        return candidate

    def matches(self, file_id: str) -> bool:
        """Check a relative POSIX path against patterns, hidden segments and excluded dirs."""
        parts = PurePosixPath(file_id).parts
        if not parts:
            return False
        if any(part.startswith(".") for part in parts):
            return False
        if any(part in self.excluded_dirs for part in parts[:-1]):
            return False
        return any(fnmatch(parts[-1], pattern) for pattern in self.patterns)
