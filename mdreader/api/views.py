"""Static assets and the single-page client"""

from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse
from loguru import logger


def get_views_router(static_dir: Path) -> APIRouter:
    router = APIRouter()

    index_file = static_dir / "index.html"
    if not index_file.is_file():
        logger.debug(f"No client build in {static_dir}, serving the API only")
        return router

    @router.get("/{path:path}", include_in_schema=False)
    async def client(path: str) -> FileResponse:
        if path.startswith("api/"):
            raise HTTPException(status_code=404, detail="Not found")

        # Built assets are served as files, every other path gets the client
        candidate = (static_dir / path).resolve()
        if path and candidate.is_file() and static_dir.resolve() in candidate.parents:
            return FileResponse(candidate)
        return FileResponse(index_file)

    return router
