"""Diagram layout and export package."""

from dbcanvas.diagram.html_export import layout_to_html
from dbcanvas.diagram.main import edge_label, layout, layout_to_flow
from dbcanvas.diagram.types import (
    FlowDiagram,
    Layout,
    LayoutConfig,
    PositionedNode,
    RenderEdge,
)

__all__ = [
    "FlowDiagram",
    "Layout",
    "LayoutConfig",
    "PositionedNode",
    "RenderEdge",
    "edge_label",
    "layout",
    "layout_to_flow",
    "layout_to_html",
]
