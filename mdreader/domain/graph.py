"""Graph and layout domain models."""

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict

from mdreader.domain.base import CamelModel


class Position(CamelModel):
    x: float
    y: float

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


class GraphNode(CamelModel):
    id: str
    label: str
    type: Literal["file"] = "file"


class GraphEdge(CamelModel):
    id: str
    source: str
    target: str
    label: str = ""


class GraphData(CamelModel):
    nodes: list[GraphNode] = []
    edges: list[GraphEdge] = []


class LayoutRequest(CamelModel):
    node_ids: list[str]
    width: float
    height: float
    saved_positions: dict[str, Position] = {}
    iterations: int | None = None


class LayoutResponse(CamelModel):
    positions: dict[str, Position]


class ForceParams(BaseModel):
    """Constants of the force simulation."""

    model_config = ConfigDict(frozen=True)

    link_strength: float = 0.1
    repulsion_strength: float = 400.0
    center_gravity: float = 0.02
    damping: float = 0.8  # velocity multiplier per step, < 1
    max_velocity: float = 5.0
    min_distance: float = 250.0  # repulsion only within 3x this
    target_distance: float = 200.0  # rest length of an edge
    padding: float = 50.0  # positions are clamped to [padding, dimension - padding]
    placement_padding: float = 100.0
    grid_threshold: float = 100.0  # canvases below this use grid placement
    grid_cell_width: float = 320.0  # card width plus gap
    grid_cell_height: float = 200.0
    grid_offset: float = 100.0


# Tuned for the whiteboard's 280x160 cards
WHITEBOARD_PARAMS = ForceParams(
    link_strength=0.08,
    repulsion_strength=400.0,
    center_gravity=0.02,
    damping=0.85,
    max_velocity=4.0,
)
