import sys

from loguru import logger

from mdreader.api import create_app
from mdreader.config import settings
from mdreader.indexing.store import Workspace

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

logger.info(f"Serving markdown files from {settings.markdown_folder.resolve()}")
workspace = Workspace.from_settings(settings)
app = create_app(workspace=workspace)
