"""HTML export functionality for laid-out diagrams."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from dbcanvas.compiler.errors import LayoutConsistencyError
from dbcanvas.diagram.main import DEFAULT_CONFIG, layout_to_flow

if TYPE_CHECKING:
    from dbcanvas.compiler.types import Field
    from dbcanvas.diagram.types import (
        Layout,
        LayoutConfig,
        PositionedNode,
        RenderEdge,
    )

TEMPLATE_DIR = Path(__file__).parent / "templates"

HEADER_HEIGHT = 28
ROW_HEIGHT = 22
SELF_LOOP_OFFSET = 40

_JINJA_ENV = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(),
    trim_blocks=True,
    lstrip_blocks=True,
)


class FieldRow(NamedTuple):
    """One field line drawn inside a table box."""

    name: str
    type: str
    badges: str
    y: float


class NodeBox(NamedTuple):
    """Geometry of one table box."""

    name: str
    x: float
    y: float
    rows: list[FieldRow]
    hidden: int  # Fields that do not fit in the box


class EdgePath(NamedTuple):
    """Geometry of one relationship line."""

    id: str
    path: str
    label: str
    label_x: float
    label_y: float
    cardinality: str


def field_badges(field: Field) -> str:
    """Short key markers for a field, e.g. ``PK FK``."""
    badges = []
    if field.is_primary_key:
        badges.append("PK")
    if field.is_foreign_key:
        badges.append("FK")
    if field.is_unique and not field.is_primary_key:
        badges.append("U")
    if field.is_not_null and not field.is_primary_key:
        badges.append("!")
    return " ".join(badges)


def _node_box(node: PositionedNode, config: LayoutConfig) -> NodeBox:
    capacity = max(int((config.table_height - HEADER_HEIGHT) // ROW_HEIGHT), 0)
    fields = node.table.fields
    shown = fields if len(fields) <= capacity else fields[: max(capacity - 1, 0)]
    rows = [
        FieldRow(
            f.name,
            f.type,
            field_badges(f),
            node.y + HEADER_HEIGHT + (i + 1) * ROW_HEIGHT - 6,
        )
        for i, f in enumerate(shown)
    ]
    return NodeBox(node.table.name, node.x, node.y, rows, len(fields) - len(shown))


def _edge_path(edge: RenderEdge, diagram: Layout, config: LayoutConfig) -> EdgePath:
    source = diagram.node(edge.source_node_id)
    target = diagram.node(edge.target_node_id)
    if source is None or target is None:
        msg = f"Edge {edge.id} has no node at one of its ends"
        raise LayoutConsistencyError(msg)

    half_w, half_h = config.table_width / 2, config.table_height / 2
    sx, sy = source.x + half_w, source.y + half_h
    tx, ty = target.x + half_w, target.y + half_h

    if source.id == target.id:
        right = source.x + config.table_width
        top, bottom = source.y + half_h / 2, source.y + half_h * 1.5
        loop = right + SELF_LOOP_OFFSET
        path = f"M {right} {top} C {loop} {top}, {loop} {bottom}, {right} {bottom}"
        return EdgePath(
            edge.id,
            path,
            edge.label,
            loop,
            sy,
            str(edge.relationship.cardinality),
        )

    return EdgePath(
        edge.id,
        f"M {sx} {sy} L {tx} {ty}",
        edge.label,
        (sx + tx) / 2,
        (sy + ty) / 2,
        str(edge.relationship.cardinality),
    )


def layout_to_html(
    diagram: Layout,
    config: LayoutConfig = DEFAULT_CONFIG,
    title: str = "ER Diagram",
) -> str:
    """Create a standalone HTML page with an SVG drawing of the layout.

    The node/edge JSON is embedded as well, so a richer renderer can take
    over the page.
    """
    boxes = [_node_box(node, config) for node in diagram.nodes]
    paths = [_edge_path(edge, diagram, config) for edge in diagram.edges]

    width = max((n.x for n in diagram.nodes), default=0) + config.table_width
    height = max((n.y for n in diagram.nodes), default=0) + config.table_height

    template = _JINJA_ENV.get_template("diagram.html")
    return template.render(
        title=title,
        width=width + config.padding + SELF_LOOP_OFFSET,
        height=height + config.padding,
        table_width=config.table_width,
        table_height=config.table_height,
        header_height=HEADER_HEIGHT,
        nodes=boxes,
        edges=paths,
        diagram=layout_to_flow(diagram),
    )
