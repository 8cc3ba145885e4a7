"""Resolution of raw link targets to file ids."""

import posixpath
from urllib.parse import unquote

from loguru import logger

from mdreader.domain.files import FileEntry


class LinkResolver:
    """Resolves link targets against one catalog snapshot."""

    def __init__(self, files: list[FileEntry]):
        """Initialize resolver with a catalog snapshot.

        Args:
            files: Catalog entries, sorted by relative path
        """
        self.file_ids = {file.id for file in files}
        # First entry wins when several files share a name
        self.ids_by_name: dict[str, str] = {}
        for file in files:
            self.ids_by_name.setdefault(file.name, file.id)

    def resolve(self, target: str, from_file_id: str) -> str | None:
        """Resolve a raw link target found in `from_file_id`.

        Precedence for a target ending in `.md`:
        1. Exact file id
        2. File name (last path segment) of any file
        3. Path relative to the linking file's directory

        A target without `.md` is retried once with `.md` appended.

        Returns:
            The file id, or None when the link is dangling
        """
        clean_target = unquote(target).strip()
        if not clean_target.endswith(".md"):
            clean_target = f"{clean_target}.md"

        resolution_strategies = [
            ("exact id", self._resolve_exact),
            ("file name", self._resolve_by_name),
            ("relative to source", self._resolve_relative),
        ]

        for strategy_name, resolver_func in resolution_strategies:
            file_id = resolver_func(clean_target, from_file_id)
            if file_id is not None:
                logger.debug(f"Resolved {target!r} from {from_file_id} by {strategy_name}: {file_id}")
                return file_id

        logger.debug(f"Could not resolve link {target!r} in {from_file_id}")
        return None

    def _resolve_exact(self, target: str, from_file_id: str) -> str | None:  # noqa: ARG002
        return target if target in self.file_ids else None

    def _resolve_by_name(self, target: str, from_file_id: str) -> str | None:  # noqa: ARG002
        return self.ids_by_name.get(target.rsplit("/", 1)[-1])

    def _resolve_relative(self, target: str, from_file_id: str) -> str | None:
        current_dir = posixpath.dirname(from_file_id)
        candidate = posixpath.normpath(posixpath.join(current_dir, target))
        return candidate if candidate in self.file_ids else None
