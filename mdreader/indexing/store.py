"""Cached indexes for one markdown folder.

Catalog, backlink and search snapshots are built lazily, kept for a fixed
TTL, and dropped on any change notification. Rebuilds are full rebuilds: a
snapshot is only published once every file has been read and indexed.
"""

import asyncio
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, TypeVar

from loguru import logger

from mdreader.catalog import FileCatalog, LocalFileCatalog
from mdreader.config import Settings
from mdreader.domain.files import ChangeNotification, FileContent, FileEntry
from mdreader.domain.links import BacklinkInfo
from mdreader.domain.search import SearchResult
from mdreader.errors import (
    CatalogIOError,
    FileNotFoundInFolderError,
    IndexUnavailableError,
    PathTraversalError,
)

from .backlinks import BacklinkIndex, build_backlink_index
from .search import RapidFuzzScorer, Scorer, SearchIndex
from .watcher import FolderWatcher

T = TypeVar("T")


@dataclass(frozen=True)
class _Snapshot(Generic[T]):
    value: T
    built_at: float
    generation: int


class _Cache(Generic[T]):
    """One cached snapshot plus the lock that serializes its rebuilds."""

    def __init__(self, name: str):
        self.name = name
        self.snapshot: _Snapshot[T] | None = None
        self.builds = 0
        self._lock: asyncio.Lock | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def lock(self) -> asyncio.Lock:
        # Locks belong to an event loop; test clients run each request on a new one
        loop = asyncio.get_running_loop()
        if self._lock is None or self._loop is not loop:
            self._lock = asyncio.Lock()
            self._loop = loop
        return self._lock


class IndexStore:
    """Owns the catalog, backlink and search caches of one folder."""

    def __init__(
        self,
        folder: Path,
        *,
        catalog: FileCatalog,
        scorer: Scorer,
        ttl_seconds: float = 300.0,
        read_batch_size: int = 10,
        max_line_matches: int = 5,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize IndexStore.

        Args:
            folder: Markdown folder this store indexes
            catalog: Catalog used to list and read files
            scorer: Fuzzy scorer used by the search index
            ttl_seconds: How long a snapshot stays valid without notifications
            read_batch_size: Number of file reads in flight during a build
            max_line_matches: Line matches reported per search result
            clock: Monotonic clock, injectable for tests
        """
        self.folder = Path(folder)
        self.catalog = catalog
        self.scorer = scorer
        self.ttl_seconds = ttl_seconds
        self.read_batch_size = max(1, read_batch_size)
        self.max_line_matches = max_line_matches
        self._clock = clock

        self._generation = 0
        self._generation_lock = threading.Lock()
        self._files: _Cache[list[FileEntry]] = _Cache("catalog")
        self._backlinks: _Cache[BacklinkIndex] = _Cache("backlink")
        self._search: _Cache[SearchIndex] = _Cache("search")

    @classmethod
    def from_settings(cls, folder: Path, settings: Settings) -> "IndexStore":
        return cls(
            folder,
            catalog=LocalFileCatalog(settings.file_patterns, settings.excluded_dirs),
            scorer=RapidFuzzScorer(
                threshold=settings.search_threshold,
                name_weight=settings.search_name_weight,
                content_weight=settings.search_content_weight,
                min_match_length=settings.search_min_match_length,
            ),
            ttl_seconds=settings.cache_ttl_seconds,
            read_batch_size=settings.read_batch_size,
            max_line_matches=settings.search_max_line_matches,
        )

    @property
    def generation(self) -> int:
        return self._generation

    def invalidate(self) -> None:
        """Mark every cached snapshot stale; the next query rebuilds."""
        with self._generation_lock:
            self._generation += 1

    def notify(self, change: ChangeNotification) -> None:
        """Handle an added, modified or deleted file reported by a watcher or client."""
        if not self.catalog.matches(change.file_id):
            logger.debug(f"Ignoring {change.type} notification for {change.file_id}")
            return
        logger.info(f"File {change.type}: {change.file_id}, invalidating indexes")
        self.invalidate()

    async def files(self) -> list[FileEntry]:
        """Catalog snapshot, sorted by relative path."""
        return await self._get(self._files, self._scan)

    async def read(self, file_id: str) -> FileContent:
        """Read one file; not cached."""
        return await asyncio.to_thread(self.catalog.read, self.folder, file_id)

    async def backlink_index(self) -> BacklinkIndex:
        return await self._get(self._backlinks, self._build_backlinks)

    async def search_index(self) -> SearchIndex:
        return await self._get(self._search, self._build_search)

    async def get_backlinks(self, file_id: str) -> BacklinkInfo:
        index = await self.backlink_index()
        return index.query(file_id)

    async def search(self, query: str, limit: int = 50) -> list[SearchResult]:
        if not query.strip():
            return []
        index = await self.search_index()
        return index.search(query, limit=limit)

    def _is_fresh(self, snapshot: _Snapshot | None) -> bool:
        return (
            snapshot is not None
            and snapshot.generation == self._generation
            and self._clock() - snapshot.built_at < self.ttl_seconds
        )

    def _is_alive(self, snapshot: _Snapshot | None) -> bool:
        return snapshot is not None and self._clock() - snapshot.built_at < self.ttl_seconds

    async def _get(self, cache: _Cache[T], build: Callable[[], Awaitable[T]]) -> T:
        snapshot = cache.snapshot
        if self._is_fresh(snapshot):
            return snapshot.value

        builds_before = cache.builds
        async with cache.lock:
            snapshot = cache.snapshot
            if self._is_fresh(snapshot):
                return snapshot.value
            # A rebuild finished while we waited: use it even if a notification
            # made it stale, the next query will rebuild once.
            if cache.builds != builds_before and self._is_alive(snapshot):
                return snapshot.value

            generation = self._generation
            started = self._clock()
            try:
                value = await build()
            except Exception as e:
                if snapshot is not None:
                    logger.exception(
                        f"Failed to rebuild {cache.name} index for {self.folder}, "
                        "serving previous snapshot"
                    )
                    return snapshot.value
                logger.error(f"Failed to build {cache.name} index for {self.folder}: {e}")
                raise IndexUnavailableError(
                    f"{cache.name.capitalize()} index unavailable for {self.folder}"
                ) from e

            cache.snapshot = _Snapshot(value=value, built_at=started, generation=generation)
            cache.builds += 1
            logger.info(
                f"Built {cache.name} index for {self.folder} "
                f"in {self._clock() - started:.3f}s (generation {generation})"
            )
            return value

    async def _scan(self) -> list[FileEntry]:
        files = await asyncio.to_thread(self.catalog.scan, self.folder)
        logger.debug(f"Scanned {len(files)} files in {self.folder}")
        return files

    async def _read_contents(self, files: list[FileEntry]) -> dict[str, str]:
        contents: dict[str, str] = {}
        for start in range(0, len(files), self.read_batch_size):
            batch = files[start : start + self.read_batch_size]
            results = await asyncio.gather(
                *(self._read_for_index(file.id) for file in batch)
            )
            for file, content in zip(batch, results):
                if content is not None:
                    contents[file.id] = content
        return contents

    async def _read_for_index(self, file_id: str) -> str | None:
        try:
            return (await self.read(file_id)).content
        except FileNotFoundInFolderError:
            logger.debug(f"File disappeared before indexing: {file_id}")
        except (CatalogIOError, PathTraversalError) as e:
            logger.warning(f"Skipping {file_id} while indexing: {e}")
        return None

    async def _build_backlinks(self) -> BacklinkIndex:
        files = await self.files()
        contents = await self._read_contents(files)
        index = build_backlink_index(files, contents)
        logger.info(f"Backlink index: {len(files)} files, {len(index.edges())} links")
        return index

    async def _build_search(self) -> SearchIndex:
        files = await self.files()
        contents = await self._read_contents(files)
        return SearchIndex.build(
            files, contents, self.scorer, max_line_matches=self.max_line_matches
        )


class Workspace:
    """The currently configured folder and its index store.

    Switching folders swaps in a fresh store, so all caches of the previous
    folder are dropped at once.
    """

    def __init__(
        self,
        folder: Path,
        store_factory: Callable[[Path], IndexStore],
        *,
        watch: bool = False,
    ):
        self._store_factory = store_factory
        self._store = store_factory(Path(folder))
        self._watch = watch
        self._watcher: FolderWatcher | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Workspace":
        return cls(
            settings.markdown_folder,
            lambda folder: IndexStore.from_settings(folder, settings),
            watch=settings.watch_files,
        )

    @property
    def store(self) -> IndexStore:
        return self._store

    @property
    def folder(self) -> Path:
        return self._store.folder

    def switch_folder(self, folder: Path) -> IndexStore:
        folder = Path(folder)
        logger.info(f"Switching markdown folder to {folder}")
        was_watching = self._watcher is not None
        self.stop_watching()
        self._store = self._store_factory(folder)
        if was_watching:
            self.start_watching()
        return self._store

    def notify(self, change: ChangeNotification) -> None:
        self._store.notify(change)

    def start_watching(self) -> None:
        if not self._watch or self._watcher is not None:
            return
        if not self.folder.is_dir():
            logger.warning(f"Not watching missing folder {self.folder}")
            return
        self._watcher = FolderWatcher(self.folder, self._store.catalog, self.notify)
        self._watcher.start()

    def stop_watching(self) -> None:
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher = None
