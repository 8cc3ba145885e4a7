"""Tests for LocalFileCatalog."""

from pathlib import Path

import pytest

from mdreader.catalog import LocalFileCatalog
from mdreader.config import ALL_TEXT_PATTERNS
from mdreader.errors import FileNotFoundInFolderError, PathTraversalError


def test_scan_lists_markdown_sorted_by_relative_path(
    catalog: LocalFileCatalog, sample_folder: Path
) -> None:
    """Test that scan returns POSIX ids sorted lexicographically."""
    files = catalog.scan(sample_folder)

    assert [f.id for f in files] == [
        "getting-started.md",
        "notes/ideas.md",
        "notes/topic.md",
        "welcome.md",
    ]
    assert all(f.id == f.relative_path for f in files)


def test_scan_excludes_node_modules_and_hidden_paths(
    catalog: LocalFileCatalog, sample_folder: Path
) -> None:
    """Test that excluded and dot-prefixed directories are skipped."""
    ids = {f.id for f in catalog.scan(sample_folder)}

    assert "node_modules/pkg/readme.md" not in ids
    assert ".obsidian/hidden.md" not in ids


def test_scan_entry_metadata(catalog: LocalFileCatalog, make_folder) -> None:  # noqa: ANN001
    """Test that entries carry name, absolute path and size."""
    folder = make_folder({"dir/note.md": "hello"})

    (entry,) = catalog.scan(folder)

    assert entry.name == "note.md"
    assert Path(entry.absolute_path) == (folder / "dir" / "note.md").absolute()
    assert entry.size == 5
    assert entry.modified_at.tzinfo is not None


def test_scan_missing_root_returns_empty_list(catalog: LocalFileCatalog, tmp_path: Path) -> None:
    """Test that a missing folder is not an error."""
    assert catalog.scan(tmp_path / "does-not-exist") == []


def test_scan_all_text_patterns(make_folder) -> None:  # noqa: ANN001
    """Test that extra patterns pick up .markdown and .txt files."""
    folder = make_folder({"a.md": "", "b.markdown": "", "c.txt": "", "d.rst": ""})

    ids = [f.id for f in LocalFileCatalog(patterns=ALL_TEXT_PATTERNS).scan(folder)]

    assert ids == ["a.md", "b.markdown", "c.txt"]


def test_read_returns_content_and_metadata(catalog: LocalFileCatalog, sample_folder: Path) -> None:
    """Test reading a nested file by id."""
    result = catalog.read(sample_folder, "notes/ideas.md")

    assert result.content.startswith("# Ideas")
    assert result.metadata.size == len(result.content.encode("utf-8"))


def test_read_missing_file_raises_not_found(catalog: LocalFileCatalog, sample_folder: Path) -> None:
    """Test that unknown ids raise FileNotFoundInFolderError."""
    with pytest.raises(FileNotFoundInFolderError):
        catalog.read(sample_folder, "nope.md")

    with pytest.raises(FileNotFoundInFolderError):
        catalog.read(sample_folder, "notes")


@pytest.mark.parametrize("file_id", ["../../etc/passwd", "/etc/passwd", "notes/../../outside.md"])
def test_read_rejects_path_traversal(
    catalog: LocalFileCatalog, sample_folder: Path, file_id: str
) -> None:
    """Test that ids escaping the folder never return content."""
    (sample_folder.parent / "outside.md").write_text("secret")

    with pytest.raises(PathTraversalError):
        catalog.read(sample_folder, file_id)


def test_read_allows_dot_segments_that_stay_inside(
    catalog: LocalFileCatalog, sample_folder: Path
) -> None:
    """Test that a path with .. that resolves inside the folder is readable."""
    result = catalog.read(sample_folder, "notes/../welcome.md")

    assert result.content.startswith("# Welcome")


def test_matches(catalog: LocalFileCatalog) -> None:
    """Test the id filter used for change notifications."""
    assert catalog.matches("a.md")
    assert catalog.matches("dir/b.md")
    assert not catalog.matches("image.png")
    assert not catalog.matches(".git/x.md")
    assert not catalog.matches("node_modules/pkg/readme.md")
    assert not catalog.matches("")


def test_read_unresolvable_id_is_not_found(catalog: LocalFileCatalog, sample_folder: Path) -> None:
    """Test that an id with a null byte raises a typed error."""
    with pytest.raises(FileNotFoundInFolderError):
        catalog.read(sample_folder, "a\x00.md")


def test_scan_skips_file_deleted_mid_scan(
    catalog: LocalFileCatalog, make_folder, monkeypatch: pytest.MonkeyPatch  # noqa: ANN001
) -> None:
    """Test that a file vanishing between listing and stat is skipped."""
    folder = make_folder({"keep.md": "# Keep", "vanishing.md": "# Gone soon"})
    original_is_file = Path.is_file

    def is_file_then_delete(self: Path) -> bool:
        if self.name == "vanishing.md" and original_is_file(self):
            self.unlink()
            return True
        return original_is_file(self)

    monkeypatch.setattr(Path, "is_file", is_file_then_delete)

    assert [f.id for f in catalog.scan(folder)] == ["keep.md"]
