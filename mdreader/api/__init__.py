from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mdreader.api.endpoints import get_endpoints_router
from mdreader.api.views import get_views_router
from mdreader.config import settings
from mdreader.indexing.store import Workspace


def create_app(*, workspace: Workspace, static_dir: Path | None = None) -> FastAPI:
    """Create FastAPI app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):  # noqa: ARG001
        workspace.start_watching()
        yield
        workspace.stop_watching()

    app = FastAPI(lifespan=lifespan)
    app.state.workspace = workspace

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router=get_endpoints_router(workspace=workspace))
    # Views last: the SPA fallback catches every remaining path
    app.include_router(router=get_views_router(static_dir=static_dir or settings.static_dir))

    return app
