"""File watcher that turns filesystem events into change notifications."""

from collections.abc import Callable
from pathlib import Path, PurePosixPath

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from mdreader.catalog import FileCatalog
from mdreader.domain.files import ChangeNotification


class ChangeHandler(FileSystemEventHandler):
    """Report catalog files that were created, modified, deleted or moved."""

    def __init__(
        self,
        folder: Path,
        catalog: FileCatalog,
        callback: Callable[[ChangeNotification], None],
    ):
        super().__init__()
        self._folder = Path(folder).resolve()
        self._catalog = catalog
        self._callback = callback

    def _file_id(self, path: str | bytes) -> str | None:
        if isinstance(path, bytes):
            path = path.decode()
        try:
            relative = Path(path).resolve().relative_to(self._folder)
        except ValueError:
            return None
        file_id = PurePosixPath(*relative.parts).as_posix()
        return file_id if self._catalog.matches(file_id) else None

    def _emit(self, change_type: str, path: str | bytes) -> None:
        file_id = self._file_id(path)
        if file_id is None:
            return
        self._callback(ChangeNotification(type=change_type, file_id=file_id))

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit("added", event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit("modified", event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit("deleted", event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._emit("deleted", event.src_path)
        dest_path = getattr(event, "dest_path", None)
        if dest_path:
            self._emit("added", dest_path)


class FolderWatcher:
    """Watch a markdown folder recursively on a background observer thread."""

    def __init__(
        self,
        folder: Path,
        catalog: FileCatalog,
        callback: Callable[[ChangeNotification], None],
    ):
        self.folder = Path(folder)
        self._handler = ChangeHandler(self.folder, catalog, callback)
        self._observer: Observer | None = None

    def start(self) -> None:
        if self._observer is not None:
            return
        self._observer = Observer()
        self._observer.schedule(self._handler, str(self.folder), recursive=True)
        self._observer.start()
        logger.info(f"Watching files in {self.folder}")

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        logger.info(f"Stopped watching {self.folder}")

    @property
    def running(self) -> bool:
        return self._observer is not None
