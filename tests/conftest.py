from pathlib import Path
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from mdreader.api import create_app
from mdreader.catalog import LocalFileCatalog
from mdreader.indexing.search import RapidFuzzScorer
from mdreader.indexing.store import IndexStore, Workspace
from tests.fakes import FakeClock

FolderFactory = Callable[[dict[str, str]], Path]


@pytest.fixture
def make_folder(tmp_path: Path) -> FolderFactory:
    """Write a dict of relative path -> content into a fresh folder."""
    counter = {"n": 0}

    def _make(files: dict[str, str]) -> Path:
        counter["n"] += 1
        folder = tmp_path / f"notes{counter['n']}"
        folder.mkdir()
        for relative_path, content in files.items():
            path = folder / relative_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return folder

    return _make


@pytest.fixture
def scenario_folder(make_folder: FolderFactory) -> Path:
    return make_folder(
        {
            "welcome.md": "See [[getting-started]] for setup.",
            "getting-started.md": "# Getting Started",
        }
    )


@pytest.fixture
def sample_folder(make_folder: FolderFactory) -> Path:
    """A small knowledge base with nested folders and both link styles."""
    return make_folder(
        {
            "welcome.md": "# Welcome\n\nSee [[getting-started]] for setup.\n",
            "getting-started.md": "# Getting Started\n\n## Install\n\nInstall the tools.\n",
            "notes/topic.md": (
                "# Topic\n\n"
                "Back to [home](../welcome.md) and [setup](getting-started.md#install).\n"
                "Read the [docs](https://example.com/docs).\n"
            ),
            "notes/ideas.md": "# Ideas\n\nSee [[topic]] and [[missing page]].\n",
            "node_modules/pkg/readme.md": "# Ignored",
            ".obsidian/hidden.md": "# Hidden",
        }
    )


@pytest.fixture
def catalog() -> LocalFileCatalog:
    return LocalFileCatalog(patterns=["*.md"], excluded_dirs=["node_modules"])


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def build_store(folder: Path, catalog: LocalFileCatalog, clock: FakeClock | None = None) -> IndexStore:
    return IndexStore(
        folder,
        catalog=catalog,
        scorer=RapidFuzzScorer(),
        ttl_seconds=300.0,
        clock=clock or FakeClock(),
    )


@pytest.fixture
def store(sample_folder: Path, catalog: LocalFileCatalog, clock: FakeClock) -> IndexStore:
    return build_store(sample_folder, catalog, clock)


@pytest.fixture
def workspace(sample_folder: Path, catalog: LocalFileCatalog) -> Workspace:
    return Workspace(sample_folder, lambda folder: build_store(folder, catalog), watch=False)


@pytest.fixture
def test_client(workspace: Workspace, tmp_path: Path) -> TestClient:
    """Create test client over the sample folder, without a client build."""
    app = create_app(workspace=workspace, static_dir=tmp_path / "no-client")
    return TestClient(app)
