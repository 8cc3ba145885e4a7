"""Tests for link and heading extraction."""

from mdreader.parsing.links import extract_headings, extract_links, slugify


def test_markdown_link_extraction() -> None:
    """Test that [text](target) links are extracted with line context."""
    content = "# Title\n\n  Read [the guide](guide.md) first.  \n"

    (link,) = extract_links(content)

    assert link.target_raw == "guide.md"
    assert link.text == "the guide"
    assert link.line_number == 3
    assert link.context_line == "Read [the guide](guide.md) first."


def test_wikilink_extraction() -> None:
    """Test that wiki-links get a .md suffix and default display text."""
    content = "This references [[Pensieve]] and [[Another Note|custom text]]."

    links = extract_links(content)

    assert [(link.target_raw, link.text) for link in links] == [
        ("Pensieve.md", "Pensieve"),
        ("Another Note.md", "custom text"),
    ]


def test_anchor_is_stripped() -> None:
    """Test that anchors are removed from markdown and wiki targets."""
    content = "[a](page.md#intro) [b](other#part) [[third#section]]"

    targets = [link.target_raw for link in extract_links(content)]

    assert targets == ["page.md", "other", "third.md"]


def test_external_urls_are_ignored() -> None:
    """Test that links with a URI scheme are not cataloged."""
    content = "[site](https://example.com) [docs](https://example.com/a#b) [doc](docs/page)"

    targets = [link.target_raw for link in extract_links(content)]

    assert targets == ["docs/page"]


def test_remote_markdown_file_is_kept() -> None:
    """Test that a URL ending in .md is still a candidate link."""
    content = "[raw](https://example.com/readme.md)"

    assert [link.target_raw for link in extract_links(content)] == ["https://example.com/readme.md"]


def test_pure_anchor_links_are_dropped() -> None:
    """Test that in-page anchors produce no link."""
    assert extract_links("[top](#top)") == []


def test_links_ordered_by_line_then_position() -> None:
    """Test deterministic ordering across both syntaxes."""
    content = "[[first]] then [second](second.md)\n[third](third.md) and [[fourth]]"

    links = extract_links(content)

    assert [(link.target_raw, link.line_number) for link in links] == [
        ("first.md", 1),
        ("second.md", 1),
        ("third.md", 2),
        ("fourth.md", 2),
    ]


def test_links_in_fenced_code_blocks_are_skipped() -> None:
    """Test that examples inside code fences are not treated as links."""
    content = (
        "Before [[real]]\n"
        "```markdown\n"
        "[[example]] and [x](example.md)\n"
        "```\n"
        "~~~\n"
        "[[tilde]]\n"
        "~~~\n"
        "After [[also-real]]\n"
    )

    targets = [link.target_raw for link in extract_links(content)]

    assert targets == ["real.md", "also-real.md"]


def test_wikilink_with_md_suffix_is_not_doubled() -> None:
    """Test that [[note.md]] targets note.md."""
    (link,) = extract_links("[[note.md]]")

    assert link.target_raw == "note.md"


def test_no_links() -> None:
    """Test that plain text yields nothing."""
    assert extract_links("Just text [not a link] (nope)") == []


def test_extract_headings() -> None:
    """Test heading extraction with levels and unique ids."""
    content = "# Intro\n\ntext\n\n## Setup Steps\n\n```\n# not a heading\n```\n\n## Setup Steps\n#NoSpace\n"

    headings = extract_headings(content)

    assert [(h.id, h.text, h.level) for h in headings] == [
        ("intro", "Intro", 1),
        ("setup-steps", "Setup Steps", 2),
        ("setup-steps-1", "Setup Steps", 2),
    ]


def test_slugify() -> None:
    """Test slug generation for heading ids."""
    assert slugify("Hello, World!") == "hello-world"
    assert slugify("  Multiple   spaces -- here ") == "multiple-spaces-here"
    assert slugify("!!!") == "heading"
