from mdreader.graph.layout import (
    ForceDirectedLayout,
    LayoutState,
    get_positions,
    init_layout,
    resize,
    set_edges,
    set_node_position,
    simulate,
    step,
)
from mdreader.graph.positions import (
    dump_saved_positions,
    merge_saved_positions,
    parse_saved_positions,
    storage_key,
)

__all__ = [
    "ForceDirectedLayout",
    "LayoutState",
    "dump_saved_positions",
    "get_positions",
    "init_layout",
    "merge_saved_positions",
    "parse_saved_positions",
    "resize",
    "set_edges",
    "set_node_position",
    "simulate",
    "step",
    "storage_key",
]
