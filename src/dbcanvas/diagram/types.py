"""Layout configuration and the renderable node/edge types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, TypedDict

if TYPE_CHECKING:
    from dbcanvas.compiler.types import Relationship, Table


@dataclass(frozen=True)
class LayoutConfig:
    """Grid geometry for the layout engine."""

    table_width: float = 250
    table_height: float = 200
    padding: float = 50
    columns_per_row: int = 3
    max_nodes: int | None = None  # Soft ceiling on grid size, unbounded when None

    def __post_init__(self) -> None:
        """Reject geometry the grid formula cannot use."""
        for name in ("columns_per_row", "max_nodes"):
            value = getattr(self, name)
            if value is None or (isinstance(value, int) and not isinstance(value, bool)):
                continue
            msg = f"{name} must be an integer, got {value!r}"
            raise ValueError(msg)
        if self.columns_per_row < 1:
            msg = f"columns_per_row must be at least 1, got {self.columns_per_row}"
            raise ValueError(msg)
        for name in ("table_width", "table_height", "padding"):
            if getattr(self, name) < 0:
                msg = f"{name} must not be negative, got {getattr(self, name)}"
                raise ValueError(msg)
        if self.max_nodes is not None and self.max_nodes < 1:
            msg = f"max_nodes must be at least 1, got {self.max_nodes}"
            raise ValueError(msg)


@dataclass(frozen=True)
class PositionedNode:
    """A table placed on the canvas; ``id`` is the table name."""

    id: str
    x: float
    y: float
    table: Table


@dataclass(frozen=True)
class RenderEdge:
    """A relationship drawn between two nodes."""

    id: str
    source_node_id: str
    target_node_id: str
    label: str
    relationship: Relationship


@dataclass(frozen=True)
class Layout:
    """Derived, disposable output of one layout run."""

    nodes: tuple[PositionedNode, ...] = ()
    edges: tuple[RenderEdge, ...] = ()

    def node(self, node_id: str) -> PositionedNode | None:
        """Look up a node by id."""
        return next((n for n in self.nodes if n.id == node_id), None)


# JSON shapes consumed by node-and-edge diagram renderers


class FlowPosition(TypedDict):
    """Canvas coordinates of a node."""

    x: float
    y: float


class FlowField(TypedDict):
    """Field row shown inside a table node."""

    name: str
    type: str
    isPrimary: bool
    isUnique: bool
    isNotNull: bool
    isForeignKey: bool


class FlowNodeData(TypedDict):
    """Payload of a table node."""

    label: str
    fields: list[FlowField]


class FlowNode(TypedDict):
    """Schema for a positioned table node."""

    id: str
    type: str
    position: FlowPosition
    data: FlowNodeData


class FlowEdgeData(TypedDict):
    """Payload of a relationship edge."""

    label: str
    cardinality: str


class FlowEdge(TypedDict):
    """Schema for a relationship edge."""

    id: str
    source: str
    target: str
    type: str
    data: FlowEdgeData


class FlowDiagram(TypedDict):
    """Root schema for a renderable diagram."""

    nodes: list[FlowNode]
    edges: list[FlowEdge]
