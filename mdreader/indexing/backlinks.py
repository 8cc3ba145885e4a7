"""Backlink index built from the links in every file of a catalog snapshot."""

from collections.abc import Iterable

from mdreader.domain.files import FileEntry
from mdreader.domain.graph import GraphData, GraphEdge, GraphNode
from mdreader.domain.links import BacklinkEdge, BacklinkInfo, Reference
from mdreader.parsing.links import extract_links

from .resolver import LinkResolver


class BacklinkIndex:
    """Immutable snapshot of resolved links, keyed by target file id.

    Every edge's target is a file of the snapshot the index was built from;
    dangling links are never stored.
    """

    def __init__(self, edges_by_target: dict[str, list[BacklinkEdge]], files: list[FileEntry]):
        self._edges_by_target = edges_by_target
        self._files = {file.id: file for file in files}

    @property
    def files(self) -> list[FileEntry]:
        return list(self._files.values())

    def edges(self) -> list[BacklinkEdge]:
        """All edges, grouped by target in first-seen order."""
        return [edge for edges in self._edges_by_target.values() for edge in edges]

    def query(self, file_id: str) -> BacklinkInfo:
        """Get the files linking to `file_id` and the files it links to.

        Both lists hold one reference per file; the first link found provides
        the context.
        """
        linked_from = self._unique_references(
            self._edges_by_target.get(file_id, []), key=lambda edge: edge.from_id
        )
        links_to = self._unique_references(
            (edge for edge in self.edges() if edge.from_id == file_id), key=lambda edge: edge.to_id
        )
        return BacklinkInfo(linked_from=linked_from, links_to=links_to)

    def unique_edges(self, node_ids: Iterable[str] | None = None) -> list[BacklinkEdge]:
        """One edge per (from, to) pair, optionally restricted to a node set."""
        allowed = set(node_ids) if node_ids is not None else None
        unique: dict[tuple[str, str], BacklinkEdge] = {}
        for edge in self.edges():
            if allowed is not None and (edge.from_id not in allowed or edge.to_id not in allowed):
                continue
            unique.setdefault((edge.from_id, edge.to_id), edge)
        return list(unique.values())

    def graph(self) -> GraphData:
        """Node and edge lists for the knowledge graph view."""
        nodes = [GraphNode(id=file.id, label=file.name) for file in self._files.values()]
        edges = [
            GraphEdge(
                id=f"{edge.from_id}->{edge.to_id}",
                source=edge.from_id,
                target=edge.to_id,
                label=edge.link_text,
            )
            for edge in self.unique_edges()
        ]
        return GraphData(nodes=nodes, edges=edges)

    def _unique_references(self, edges: Iterable[BacklinkEdge], key) -> list[Reference]:  # noqa: ANN001
        references: dict[str, Reference] = {}
        for edge in edges:
            file_id = key(edge)
            file = self._files.get(file_id)
            if file is None or file_id in references:
                continue
            references[file_id] = Reference(
                file_id=file_id,
                file_name=file.name,
                link_text=edge.link_text,
                line_number=edge.line_number,
                context=edge.context,
            )
        return list(references.values())


def build_backlink_index(files: list[FileEntry], contents: dict[str, str]) -> BacklinkIndex:
    """Build a backlink index from a catalog snapshot.

    Args:
        files: Catalog entries, sorted by relative path
        contents: Mapping of file id to markdown content; files missing here are skipped

    Returns:
        BacklinkIndex with every link that resolves to a file in `files`
    """
    resolver = LinkResolver(files)
    edges_by_target: dict[str, list[BacklinkEdge]] = {}

    for file in files:
        content = contents.get(file.id)
        if content is None:
            continue

        for link in extract_links(content):
            target_id = resolver.resolve(link.target_raw, file.id)
            if target_id is None:
                continue
            edges_by_target.setdefault(target_id, []).append(
                BacklinkEdge(
                    from_id=file.id,
                    to_id=target_id,
                    link_text=link.text,
                    line_number=link.line_number,
                    context=link.context_line,
                )
            )

    return BacklinkIndex(edges_by_target, files)
