"""Main module for diagram layout."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from dbcanvas.compiler.errors import LayoutConsistencyError
from dbcanvas.diagram.types import (
    FlowDiagram,
    FlowEdge,
    FlowField,
    FlowNode,
    Layout,
    LayoutConfig,
    PositionedNode,
    RenderEdge,
)

if TYPE_CHECKING:
    from dbcanvas.compiler.types import Relationship, SchemaModel, Table

logger = getLogger(__name__)

DEFAULT_CONFIG = LayoutConfig()


def edge_label(relationship: Relationship) -> str:
    """Label an edge with the fields it joins."""
    return f"{relationship.source.field} → {relationship.target.field}"


def _position_node(index: int, table: Table, config: LayoutConfig) -> PositionedNode:
    """Place the index-th table on a row-major grid."""
    row, col = divmod(index, config.columns_per_row)
    return PositionedNode(
        id=table.name,
        x=col * (config.table_width + config.padding) + config.padding,
        y=row * (config.table_height + config.padding) + config.padding,
        table=table,
    )


def _build_edge(
    index: int,
    relationship: Relationship,
    node_ids: set[str],
) -> RenderEdge:
    """Build the index-th edge, asserting both ends were laid out."""
    for table in (relationship.source.table, relationship.target.table):
        if table not in node_ids:
            msg = f"Relationship {index} references table '{table}' with no node"
            raise LayoutConsistencyError(msg)
    return RenderEdge(
        id=f"e-{index}",
        source_node_id=relationship.source.table,
        target_node_id=relationship.target.table,
        label=edge_label(relationship),
        relationship=relationship,
    )


def layout(model: SchemaModel, config: LayoutConfig = DEFAULT_CONFIG) -> Layout:
    """Compute node positions and edges for a schema model.

    Tables are placed in declaration order on a row-major grid and every
    relationship becomes one edge, so identical input always gives identical
    output.

    Raises:
        ValueError: The model has more tables than ``config.max_nodes``.
        LayoutConsistencyError: A relationship names a table the model does
            not contain, which a normalized model never does.

    """
    if config.max_nodes is not None and len(model.tables) > config.max_nodes:
        msg = (
            f"Schema has {len(model.tables)} tables, "
            f"layout limit is {config.max_nodes}"
        )
        raise ValueError(msg)

    nodes = tuple(
        _position_node(index, table, config) for index, table in enumerate(model.tables)
    )
    node_ids = {node.id for node in nodes}
    edges = tuple(
        _build_edge(index, relationship, node_ids)
        for index, relationship in enumerate(model.relationships)
    )

    logger.debug("Laid out %d nodes and %d edges", len(nodes), len(edges))
    return Layout(nodes=nodes, edges=edges)


def _flow_node(node: PositionedNode) -> FlowNode:
    fields: list[FlowField] = [
        {
            "name": f.name,
            "type": f.type,
            "isPrimary": f.is_primary_key,
            "isUnique": f.is_unique,
            "isNotNull": f.is_not_null,
            "isForeignKey": f.is_foreign_key,
        }
        for f in node.table.fields
    ]
    return {
        "id": node.id,
        "type": "table",
        "position": {"x": node.x, "y": node.y},
        "data": {"label": node.table.name, "fields": fields},
    }


def _flow_edge(edge: RenderEdge) -> FlowEdge:
    return {
        "id": edge.id,
        "source": edge.source_node_id,
        "target": edge.target_node_id,
        "type": "custom",
        "data": {
            "label": edge.label,
            "cardinality": str(edge.relationship.cardinality),
        },
    }


def layout_to_flow(diagram: Layout) -> FlowDiagram:
    """Convert a layout into node/edge JSON for a diagram renderer."""
    return {
        "nodes": [_flow_node(node) for node in diagram.nodes],
        "edges": [_flow_edge(edge) for edge in diagram.edges],
    }
