from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse
from loguru import logger
from pydantic import BaseModel

from mdreader.config import settings
from mdreader.domain.base import CamelModel
from mdreader.domain.files import ChangeNotification, FileContent, FileEntry
from mdreader.domain.graph import WHITEBOARD_PARAMS, GraphData, LayoutRequest, LayoutResponse
from mdreader.domain.links import BacklinkInfo, Heading
from mdreader.domain.search import SearchResult
from mdreader.errors import (
    CatalogIOError,
    FileNotFoundInFolderError,
    IndexUnavailableError,
    MdReaderError,
    PathTraversalError,
)
from mdreader.graph import layout
from mdreader.graph.positions import merge_saved_positions
from mdreader.indexing.store import Workspace
from mdreader.parsing.links import extract_headings


class FolderConfig(CamelModel):
    markdown_folder_path: str


class Status(BaseModel):
    status: str


def _http_error(e: MdReaderError, action: str) -> HTTPException:
    """Map a catalog or index error to the response the client sees."""
    if isinstance(e, FileNotFoundInFolderError):
        return HTTPException(status_code=404, detail="File not found")
    if isinstance(e, PathTraversalError):
        return HTTPException(status_code=403, detail="Access denied")
    if isinstance(e, IndexUnavailableError):
        logger.error(f"Index unavailable while trying to {action}: {e}")
        return HTTPException(status_code=503, detail="Index unavailable")
    logger.error(f"Error while trying to {action}: {e}")
    return HTTPException(status_code=500, detail=f"Failed to {action}")


def _create_file_endpoints(workspace: Workspace):
    """Create the file listing and reading handlers."""

    async def list_files() -> list[FileEntry]:
        try:
            return await workspace.store.files()
        except MdReaderError as e:
            raise _http_error(e, "list files") from e

    async def get_file(file_id: str) -> FileContent:
        try:
            return await workspace.store.read(file_id)
        except MdReaderError as e:
            raise _http_error(e, "read file") from e

    async def get_file_content(file_id: str) -> PlainTextResponse:
        try:
            result = await workspace.store.read(file_id)
        except MdReaderError as e:
            raise _http_error(e, "read file") from e
        return PlainTextResponse(result.content, media_type="text/markdown; charset=utf-8")

    async def get_file_headings(file_id: str) -> list[Heading]:
        try:
            result = await workspace.store.read(file_id)
        except MdReaderError as e:
            raise _http_error(e, "read file") from e
        return extract_headings(result.content)

    return list_files, get_file, get_file_content, get_file_headings


def _create_backlinks_endpoint(workspace: Workspace):
    """Create the backlinks endpoint handler."""

    async def get_backlinks(file_id: str) -> BacklinkInfo:
        try:
            return await workspace.store.get_backlinks(file_id)
        except MdReaderError as e:
            raise _http_error(e, "get backlinks") from e

    return get_backlinks


def _create_search_endpoint(workspace: Workspace):
    """Create the search endpoint handler."""

    async def search(q: str | None = None, limit: int = settings.search_limit) -> list[SearchResult]:
        if not q or not q.strip():
            raise HTTPException(status_code=400, detail="Missing search query")
        try:
            return await workspace.store.search(q, limit=limit)
        except MdReaderError as e:
            raise _http_error(e, "search") from e

    return search


def _create_graph_endpoints(workspace: Workspace):
    """Create the knowledge graph and layout handlers."""

    async def get_graph() -> GraphData:
        try:
            index = await workspace.store.backlink_index()
        except MdReaderError as e:
            raise _http_error(e, "build graph") from e
        return index.graph()

    async def compute_layout(request: LayoutRequest) -> LayoutResponse:
        try:
            index = await workspace.store.backlink_index()
        except MdReaderError as e:
            raise _http_error(e, "compute layout") from e

        edges = [(edge.from_id, edge.to_id) for edge in index.unique_edges(request.node_ids)]
        state = layout.init_layout(
            request.node_ids,
            request.width,
            request.height,
            saved_positions=request.saved_positions,
            params=WHITEBOARD_PARAMS,
        )
        state = layout.set_edges(state, edges)
        if edges:
            iterations = (
                settings.layout_iterations if request.iterations is None else request.iterations
            )
            state = layout.simulate(state, iterations)

        positions = merge_saved_positions(layout.get_positions(state), request.saved_positions)
        return LayoutResponse(positions=positions)

    return get_graph, compute_layout


def _create_config_endpoints(workspace: Workspace):
    """Create the folder configuration handlers."""

    async def get_config() -> FolderConfig:
        return FolderConfig(markdown_folder_path=str(workspace.folder))

    async def set_config(config: FolderConfig) -> FolderConfig:
        folder = Path(config.markdown_folder_path).expanduser()
        if not folder.is_dir():
            raise HTTPException(status_code=400, detail="Folder does not exist")
        workspace.switch_folder(folder.resolve())
        return FolderConfig(markdown_folder_path=str(workspace.folder))

    return get_config, set_config


def _create_notify_endpoint(workspace: Workspace):
    """Create the change notification handler."""

    async def notify(change: ChangeNotification) -> Status:
        workspace.notify(change)
        return Status(status="ok")

    return notify


def get_endpoints_router(*, workspace: Workspace) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    list_files, get_file, get_file_content, get_file_headings = _create_file_endpoints(workspace)
    get_graph, compute_layout = _create_graph_endpoints(workspace)
    get_config, set_config = _create_config_endpoints(workspace)

    router.get("/api/files")(list_files)
    # Suffix routes before the catch-all id route; ids may contain slashes
    router.get("/api/files/{file_id:path}/content")(get_file_content)
    router.get("/api/files/{file_id:path}/headings")(get_file_headings)
    router.get("/api/files/{file_id:path}")(get_file)
    router.get("/api/backlinks/{file_id:path}")(_create_backlinks_endpoint(workspace))
    router.get("/api/search")(_create_search_endpoint(workspace))
    router.get("/api/graph")(get_graph)
    router.post("/api/graph/layout")(compute_layout)
    router.get("/api/config")(get_config)
    router.put("/api/config")(set_config)
    router.post("/api/notify")(_create_notify_endpoint(workspace))

    return router
