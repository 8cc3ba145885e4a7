"""Tests for LinkResolver."""

from datetime import datetime, timezone

import pytest

from mdreader.domain.files import FileEntry
from mdreader.indexing.resolver import LinkResolver


def _entry(file_id: str) -> FileEntry:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return FileEntry(
        id=file_id,
        name=file_id.rsplit("/", 1)[-1],
        absolute_path=f"/notes/{file_id}",
        relative_path=file_id,
        size=0,
        modified_at=now,
        created_at=now,
    )


@pytest.fixture
def resolver() -> LinkResolver:
    files = [
        "a/shared.md",
        "b/shared.md",
        "b/sub/deep.md",
        "My Note.md",
        "docs/guide.md",
        "welcome.md",
    ]
    return LinkResolver([_entry(file_id) for file_id in sorted(files)])


def test_exact_id(resolver: LinkResolver) -> None:
    """Test that a full relative path resolves directly."""
    assert resolver.resolve("docs/guide.md", "welcome.md") == "docs/guide.md"


def test_by_file_name(resolver: LinkResolver) -> None:
    """Test that a bare file name resolves anywhere in the tree."""
    assert resolver.resolve("guide.md", "welcome.md") == "docs/guide.md"
    assert resolver.resolve("../../guide.md", "b/sub/deep.md") == "docs/guide.md"


def test_name_collision_first_file_wins(resolver: LinkResolver) -> None:
    """Test that the first file in path order wins a name collision."""
    assert resolver.resolve("shared.md", "b/sub/deep.md") == "a/shared.md"


def test_relative_to_source(resolver: LinkResolver) -> None:
    """Test resolution relative to the linking file's directory."""
    assert resolver.resolve("sub/deep.md", "b/shared.md") == "b/sub/deep.md"
    assert resolver.resolve("../b/sub/deep.md", "a/shared.md") == "b/sub/deep.md"


def test_md_suffix_is_added(resolver: LinkResolver) -> None:
    """Test that extensionless targets get .md appended."""
    assert resolver.resolve("welcome", "docs/guide.md") == "welcome.md"
    assert resolver.resolve("docs/guide", "welcome.md") == "docs/guide.md"


def test_percent_encoded_target(resolver: LinkResolver) -> None:
    """Test that URL-encoded spaces in targets are decoded."""
    assert resolver.resolve("My%20Note.md", "welcome.md") == "My Note.md"
    assert resolver.resolve("My Note", "welcome.md") == "My Note.md"


def test_dangling_link(resolver: LinkResolver) -> None:
    """Test that unknown targets resolve to None."""
    assert resolver.resolve("missing.md", "welcome.md") is None
    assert resolver.resolve("other/missing", "docs/guide.md") is None
