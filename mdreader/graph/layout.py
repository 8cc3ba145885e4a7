"""Force-directed layout of the knowledge graph.

Nodes repel each other, edges act as springs with a rest length, and a weak
gravity pulls everything toward the canvas center. Each step integrates the
summed forces into damped, speed-limited velocities and clamps positions to
the canvas.

The simulation is expressed as pure functions over an immutable `LayoutState`;
`ForceDirectedLayout` wraps them for callers that prefer a mutable object.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace

import numpy as np
from numpy.typing import NDArray

from mdreader.domain.graph import ForceParams, GraphEdge, Position

# Rows of the pairwise repulsion computed at once; bounds memory to chunk x n
REPULSION_CHUNK_ROWS = 256


def _frozen(array: NDArray[np.float64]) -> NDArray[np.float64]:
    array = np.array(array, dtype=np.float64, copy=True)
    array.setflags(write=False)
    return array


def _frozen_edges(edges: NDArray[np.int64]) -> NDArray[np.int64]:
    edges = np.array(edges, dtype=np.int64, copy=True).reshape(-1, 2)
    edges.setflags(write=False)
    return edges


@dataclass(frozen=True, eq=False)
class LayoutState:
    """Positions and velocities of every node on a canvas.

    Attributes:
        node_ids: Node ids, row order of the arrays below
        positions: (n, 2) array of x, y
        velocities: (n, 2) array of vx, vy
        edges: (m, 2) array of row indices (source, target)
        width: Canvas width
        height: Canvas height
        params: Simulation constants
    """

    node_ids: tuple[str, ...]
    positions: NDArray[np.float64]
    velocities: NDArray[np.float64]
    edges: NDArray[np.int64]
    width: float
    height: float
    params: ForceParams

    def index_of(self, node_id: str) -> int | None:
        try:
            return self.node_ids.index(node_id)
        except ValueError:
            return None


def _initial_positions(
    count: int, width: float, height: float, params: ForceParams, rng: np.random.Generator
) -> NDArray[np.float64]:
    if count == 0:
        return np.zeros((0, 2))

    # Degenerate canvases get a deterministic grid
    if width < params.grid_threshold or height < params.grid_threshold:
        columns = math.ceil(math.sqrt(count))
        index = np.arange(count)
        x = (index % columns) * params.grid_cell_width + params.grid_offset
        y = (index // columns) * params.grid_cell_height + params.grid_offset
        return np.column_stack([x, y]).astype(np.float64)

    pad = params.placement_padding
    x = rng.random(count) * (width - 2 * pad) + pad
    y = rng.random(count) * (height - 2 * pad) + pad
    return np.column_stack([x, y])


def init_layout(
    node_ids: Iterable[str],
    width: float,
    height: float,
    saved_positions: Mapping[str, Position] | None = None,
    params: ForceParams | None = None,
    rng: np.random.Generator | int | None = None,
) -> LayoutState:
    """Place nodes on a canvas before any simulation step.

    Nodes get grid positions on canvases smaller than `grid_threshold` and
    uniform random positions inside the placement padding otherwise. A node
    with a saved position keeps it exactly; non-finite saved positions are
    ignored.

    Args:
        node_ids: Node ids; duplicates are ignored
        width: Canvas width
        height: Canvas height
        saved_positions: Previously saved positions by node id
        params: Simulation constants, defaults to ForceParams()
        rng: Random generator or seed for reproducible placement
    """
    params = params or ForceParams()
    rng = rng if isinstance(rng, np.random.Generator) else np.random.default_rng(rng)
    ids = tuple(dict.fromkeys(node_ids))

    positions = _initial_positions(len(ids), width, height, params, rng)
    for index, node_id in enumerate(ids):
        saved = (saved_positions or {}).get(node_id)
        if saved is not None and saved.is_finite:
            positions[index] = (saved.x, saved.y)

    return LayoutState(
        node_ids=ids,
        positions=_frozen(positions),
        velocities=_frozen(np.zeros((len(ids), 2))),
        edges=_frozen_edges(np.zeros((0, 2))),
        width=float(width),
        height=float(height),
        params=params,
    )


def set_edges(state: LayoutState, edges: Iterable[GraphEdge | tuple[str, str]]) -> LayoutState:
    """Replace the edge set; edges touching unknown nodes are ignored."""
    index = {node_id: i for i, node_id in enumerate(state.node_ids)}
    pairs = []
    for edge in edges:
        source, target = (edge.source, edge.target) if isinstance(edge, GraphEdge) else edge
        if source in index and target in index:
            pairs.append((index[source], index[target]))
    return replace(state, edges=_frozen_edges(np.array(pairs, dtype=np.int64)))


def _bounds(dimension: float, padding: float) -> tuple[float, float]:
    # Canvases narrower than twice the padding collapse onto their center line
    return min(padding, dimension / 2), max(dimension - padding, dimension / 2)


def _repulsion(positions: NDArray[np.float64], p: ForceParams) -> NDArray[np.float64]:
    """Sum of repulsive forces on every node from every other node within the cutoff."""
    forces = np.zeros_like(positions)
    cutoff = p.min_distance * 3

    for start in range(0, len(positions), REPULSION_CHUNK_ROWS):
        rows = positions[start : start + REPULSION_CHUNK_ROWS]
        # delta[i, j] = pos[j] - pos[start + i]
        delta = positions[np.newaxis, :, :] - rows[:, np.newaxis, :]
        distance = np.maximum(np.hypot(delta[..., 0], delta[..., 1]), 1.0)
        nearby = distance < cutoff
        nearby[np.arange(len(rows)), np.arange(start, start + len(rows))] = False

        magnitude = np.where(
            nearby,
            p.repulsion_strength / distance**2 * np.minimum(1.0, p.min_distance / distance),
            0.0,
        )
        unit = np.where(nearby[..., np.newaxis], delta / distance[..., np.newaxis], 0.0)
        forces[start : start + len(rows)] = -(unit * magnitude[..., np.newaxis]).sum(axis=1)

    return forces


def step(state: LayoutState) -> LayoutState:
    """Advance the simulation by one step."""
    p = state.params
    positions = state.positions
    if len(positions) == 0:
        return state

    forces = _repulsion(positions, p)

    # Spring attraction along edges toward the rest length
    if len(state.edges):
        sources, targets = state.edges[:, 0], state.edges[:, 1]
        delta = positions[targets] - positions[sources]
        distance = np.maximum(np.hypot(delta[:, 0], delta[:, 1]), 1.0)
        magnitude = p.link_strength * (distance - p.target_distance)
        edge_forces = delta / distance[:, np.newaxis] * magnitude[:, np.newaxis]
        np.add.at(forces, sources, edge_forces)
        np.add.at(forces, targets, -edge_forces)

    # Gravity toward the canvas center
    center = np.array([state.width / 2, state.height / 2])
    forces += (center - positions) * p.center_gravity

    velocities = (state.velocities + forces) * p.damping
    speed = np.hypot(velocities[:, 0], velocities[:, 1])
    too_fast = speed > p.max_velocity
    velocities[too_fast] *= (p.max_velocity / speed[too_fast])[:, np.newaxis]

    new_positions = positions + velocities
    x_min, x_max = _bounds(state.width, p.padding)
    y_min, y_max = _bounds(state.height, p.padding)
    new_positions[:, 0] = np.clip(new_positions[:, 0], x_min, x_max)
    new_positions[:, 1] = np.clip(new_positions[:, 1], y_min, y_max)

    return replace(state, positions=_frozen(new_positions), velocities=_frozen(velocities))


def simulate(state: LayoutState, iterations: int = 50) -> LayoutState:
    """Run a fixed number of steps."""
    for _ in range(max(0, iterations)):
        state = step(state)
    return state


def get_positions(state: LayoutState) -> dict[str, Position]:
    return {
        node_id: Position(x=float(x), y=float(y))
        for node_id, (x, y) in zip(state.node_ids, state.positions)
    }


def set_node_position(state: LayoutState, node_id: str, x: float, y: float) -> LayoutState:
    """Move a node by hand, bypassing physics.

    Unknown ids and non-finite coordinates leave the state unchanged.
    """
    index = state.index_of(node_id)
    if index is None or not (math.isfinite(x) and math.isfinite(y)):
        return state
    positions = np.array(state.positions)
    positions[index] = (x, y)
    return replace(state, positions=_frozen(positions))


def resize(
    state: LayoutState,
    width: float,
    height: float,
    node_ids: Iterable[str] | None = None,
    rng: np.random.Generator | int | None = None,
) -> LayoutState:
    """Rebuild the layout for a new canvas size.

    Existing nodes keep their positions verbatim, velocities are reset, and
    edges are reapplied. Nodes new to `node_ids` are placed as in init_layout.
    """
    ids = tuple(node_ids) if node_ids is not None else state.node_ids
    resized = init_layout(
        ids, width, height, saved_positions=get_positions(state), params=state.params, rng=rng
    )
    edges = [(state.node_ids[a], state.node_ids[b]) for a, b in state.edges]
    return set_edges(resized, edges)


class ForceDirectedLayout:
    """Stateful wrapper around the layout functions."""

    def __init__(
        self,
        node_ids: Iterable[str],
        width: float = 1000,
        height: float = 800,
        saved_positions: Mapping[str, Position] | None = None,
        params: ForceParams | None = None,
        rng: np.random.Generator | int | None = None,
    ):
        self.state = init_layout(node_ids, width, height, saved_positions, params, rng)

    def set_edges(self, edges: Iterable[GraphEdge | tuple[str, str]]) -> None:
        self.state = set_edges(self.state, edges)

    def simulate(self, iterations: int = 50) -> None:
        self.state = simulate(self.state, iterations)

    def get_positions(self) -> dict[str, Position]:
        return get_positions(self.state)

    def set_node_position(self, node_id: str, x: float, y: float) -> None:
        self.state = set_node_position(self.state, node_id, x, y)

    def resize(self, width: float, height: float, node_ids: Iterable[str] | None = None) -> None:
        self.state = resize(self.state, width, height, node_ids)
