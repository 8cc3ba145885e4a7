"""Errors raised by the catalog and the indexes."""


class MdReaderError(Exception):
    """Base class for all errors raised by mdreader."""


class FileNotFoundInFolderError(MdReaderError):
    """A file id does not resolve to an existing file."""

    def __init__(self, file_id: str):
        super().__init__(f"File not found: {file_id}")
        self.file_id = file_id


class PathTraversalError(MdReaderError):
    """A file id resolves to a path outside the configured folder."""

    def __init__(self, file_id: str):
        super().__init__(f"Path escapes the markdown folder: {file_id}")
        self.file_id = file_id


class CatalogIOError(MdReaderError):
    """Reading or stat-ing a file failed."""


class IndexUnavailableError(MdReaderError):
    """The first build of an index failed and there is no previous snapshot to serve."""
