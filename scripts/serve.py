"""CLI for browsing a markdown folder (or the folder of a single markdown file) in the browser"""

import argparse
import sys
from pathlib import Path
from urllib.parse import quote

import uvicorn
from loguru import logger

from mdreader.api import create_app
from mdreader.config import ALL_TEXT_PATTERNS, settings
from mdreader.indexing.store import Workspace


def resolve_target(path: str) -> tuple[Path, str | None]:
    """Split a CLI path into the folder to serve and an optional file to open first."""
    resolved = Path(path).expanduser().resolve()
    if resolved.is_dir():
        return resolved, None
    if resolved.is_file():
        return resolved.parent, resolved.name
    raise FileNotFoundError(f"Path does not exist: {resolved}")


def main(path: str, host: str, port: int, all_text: bool, watch: bool) -> None:
    logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

    try:
        folder, initial_file = resolve_target(path)
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)

    settings.markdown_folder = folder
    settings.watch_files = watch
    if all_text:
        settings.file_patterns = ALL_TEXT_PATTERNS

    app = create_app(workspace=Workspace.from_settings(settings))

    url = f"http://{host}:{port}"
    if initial_file:
        url += f"/?file={quote(initial_file)}"
    logger.info(f"Serving markdown from: {folder}")
    logger.info(f"mdreader is running at {url}")

    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Markdown reader in your browser")
    parser.add_argument(
        "path", type=str, nargs="?", default=".", help="Path to markdown file or folder"
    )
    parser.add_argument("--host", type=str, required=False, default=settings.host)
    parser.add_argument(
        "--port", type=int, required=False, help="Port to run on", default=settings.port
    )
    parser.add_argument(
        "--all-text",
        action="store_true",
        help="Also list .markdown and .txt files",
    )
    parser.add_argument(
        "--no-watch",
        action="store_true",
        help="Don't watch the folder for changes",
    )

    args = parser.parse_args()

    main(
        path=args.path,
        host=args.host,
        port=args.port,
        all_text=args.all_text,
        watch=not args.no_watch,
    )
