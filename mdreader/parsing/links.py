"""Extraction of links and headings from markdown source.

Both extractors scan line by line and skip fenced code blocks, so a link or
heading shown as an example inside ``` or ~~~ fences is not reported.
"""

import re
from typing import Iterator

from mdreader.domain.links import Heading, LinkReference

# [text](target)
MARKDOWN_LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
# [[target]] or [[target|display text]]
WIKI_LINK_PATTERN = re.compile(r"\[\[([^\]|]+)(?:\|([^\]]+))?\]\]")
HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")
FENCE_PATTERN = re.compile(r"^\s*(```|~~~)")


def _iter_prose_lines(markdown: str) -> Iterator[tuple[int, str]]:
    """Yield (1-based line number, line) for lines outside fenced code blocks."""
    fence: str | None = None
    for index, line in enumerate(markdown.split("\n")):
        match = FENCE_PATTERN.match(line)
        if match:
            marker = match.group(1)
            if fence is None:
                fence = marker
            elif fence == marker:
                fence = None
            continue
        if fence is None:
            yield index + 1, line


def _strip_anchor(target: str) -> str:
    return target.split("#", 1)[0]


def _is_markdown_target(target: str) -> bool:
    """Keep markdown files and relative references, drop external URLs."""
    return target.endswith(".md") or ".md#" in target or "://" not in target


def extract_links(markdown: str) -> list[LinkReference]:
    """Extract markdown-style and wiki-style links from markdown content.

    Standard links `[text](target)` are kept when the target looks like a local
    document; wiki-links `[[target]]`/`[[target|text]]` always get a `.md` suffix.
    Anchors are removed from targets. Links on a line are returned in the order
    they appear, lines in document order.

    Args:
        markdown: Markdown source

    Returns:
        List of unresolved link references
    """
    links = []

    for line_number, line in _iter_prose_lines(markdown):
        context = line.strip()
        found: list[tuple[int, LinkReference]] = []

        for match in MARKDOWN_LINK_PATTERN.finditer(line):
            text, target = match.group(1), match.group(2).strip()
            if not _is_markdown_target(target):
                continue
            target = _strip_anchor(target)
            if not target:
                continue
            found.append(
                (
                    match.start(),
                    LinkReference(
                        target_raw=target, text=text, line_number=line_number, context_line=context
                    ),
                )
            )

        for match in WIKI_LINK_PATTERN.finditer(line):
            target = _strip_anchor(match.group(1).strip()).strip()
            if not target:
                continue
            text = match.group(2) or target
            if not target.endswith(".md"):
                target = f"{target}.md"
            found.append(
                (
                    match.start(),
                    LinkReference(
                        target_raw=target, text=text, line_number=line_number, context_line=context
                    ),
                )
            )

        found.sort(key=lambda item: item[0])
        links.extend(link for _, link in found)

    return links


def slugify(text: str) -> str:
    """Convert heading text to a URL-safe id."""
    slug = text.lower().strip()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^\w\-]+", "", slug)
    slug = re.sub(r"-{2,}", "-", slug)
    slug = slug.strip("-")
    return slug or "heading"


def extract_headings(markdown: str) -> list[Heading]:
    """Extract ATX headings with unique slug ids, for a table of contents."""
    headings = []
    seen: set[str] = set()

    for _, line in _iter_prose_lines(markdown):
        match = HEADING_PATTERN.match(line)
        if not match:
            continue
        text = match.group(2).strip()
        base = slugify(text)
        slug = base
        counter = 1
        while slug in seen:
            slug = f"{base}-{counter}"
            counter += 1
        seen.add(slug)
        headings.append(Heading(id=slug, text=text, level=len(match.group(1))))

    return headings
