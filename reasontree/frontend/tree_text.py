# -*- coding: utf-8 -*-
"""
Terminal rendering of layout cells.

Every grid row is drawn as ``CELL_HEIGHT`` text lines. Connector cells draw
their segments from the cell centre: ``up`` on the first line, the horizontal
run and junction glyph on the middle line, ``down`` on the last line, so
segments of vertically and horizontally adjacent cells join up.

Node cells show the title (falling back to the thought), a tool badge and a
completion indicator: the conclusion when present, a spinner while neither a
conclusion nor a tool result has arrived, and a check mark otherwise.
"""

import json
from typing import Dict, List, Mapping, Optional, Tuple

from rich.text import Text

from ..layout import ConnectorCell, GridCell, NodeCell, TreeGrid
from .tool_registry import ToolBadge, resolve_tool_badge

CELL_HEIGHT = 3
DEFAULT_NODE_WIDTH = 24
DEFAULT_CONNECTOR_WIDTH = 5
SPINNER_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
CHECK_MARK = "✓"
NODE_EDGE = "▌"
RESULT_PREVIEW_LIMIT = 1000
LINE_STYLE = "grey50"

# (up, down, left, right) -> junction glyph
_JUNCTIONS: Dict[Tuple[bool, bool, bool, bool], str] = {
    (True, True, True, True): "┼",
    (True, True, True, False): "┤",
    (True, True, False, True): "├",
    (True, True, False, False): "│",
    (True, False, True, True): "┴",
    (False, True, True, True): "┬",
    (True, False, True, False): "┘",
    (True, False, False, True): "└",
    (False, True, True, False): "┐",
    (False, True, False, True): "┌",
    (False, False, True, True): "─",
    (False, False, True, False): "─",
    (False, False, False, True): "─",
    (True, False, False, False): "│",
    (False, True, False, False): "│",
    (False, False, False, False): " ",
}


def connector_glyph(cell: ConnectorCell) -> str:
    """Junction glyph drawn at the centre of a connector cell."""
    return _JUNCTIONS[(cell.up, cell.down, cell.left, cell.right)]


def render_connector(cell: ConnectorCell, width: int = DEFAULT_CONNECTOR_WIDTH) -> List[Text]:
    centre = width // 2
    tail = width - centre - 1

    def vertical(active: bool) -> Text:
        return Text(" " * centre + ("│" if active else " ") + " " * tail, style=LINE_STYLE)

    middle = ("─" * centre if cell.left else " " * centre) + connector_glyph(cell) + ("─" * tail if cell.right else " " * tail)
    return [vertical(cell.up), Text(middle, style=LINE_STYLE), vertical(cell.down)]


def render_empty(width: int) -> List[Text]:
    return [Text(" " * width) for _ in range(CELL_HEIGHT)]


def completion_indicator(cell: NodeCell, frame: int = 0) -> Text:
    """Conclusion text, a check mark for finished tool calls, or a spinner."""
    if cell.conclusion:
        return Text(cell.conclusion)
    if cell.tool_use is not None and cell.tool_use.tool_result:
        return Text(CHECK_MARK, style="green")
    return Text(SPINNER_FRAMES[frame % len(SPINNER_FRAMES)], style="grey62")


def tool_badge_text(cell: NodeCell, registry: Optional[Mapping[str, ToolBadge]] = None) -> Text:
    if cell.tool_use is None:
        return Text("")
    badge = resolve_tool_badge(cell.tool_use.tool_name, registry)
    if badge is None:
        return Text("")
    return Text(f"{badge.icon} {badge.label}", style=badge.color)


def _fit(text: Text, width: int) -> Text:
    fitted = text.copy()
    fitted.truncate(width, overflow="ellipsis", pad=True)
    return fitted


def render_node(
    cell: NodeCell,
    width: int = DEFAULT_NODE_WIDTH,
    registry: Optional[Mapping[str, ToolBadge]] = None,
    frame: int = 0,
) -> List[Text]:
    body_width = width - 1
    lines = [
        Text(cell.title or cell.thought, style="bold"),
        tool_badge_text(cell, registry),
        completion_indicator(cell, frame),
    ]
    rendered = []
    for line in lines:
        row = Text(NODE_EDGE, style="cyan")
        row.append_text(_fit(line, body_width))
        rendered.append(row)
    return rendered


def render_cell(
    cell: GridCell,
    width: int,
    registry: Optional[Mapping[str, ToolBadge]] = None,
    frame: int = 0,
) -> List[Text]:
    if isinstance(cell, NodeCell):
        return render_node(cell, width, registry, frame)
    if isinstance(cell, ConnectorCell):
        return render_connector(cell, width)
    return render_empty(width)


def column_width(column: int, node_width: int = DEFAULT_NODE_WIDTH, connector_width: int = DEFAULT_CONNECTOR_WIDTH) -> int:
    return connector_width if column % 2 == 0 else node_width


def header_stub(total_columns: int, node_width: int = DEFAULT_NODE_WIDTH, connector_width: int = DEFAULT_CONNECTOR_WIDTH) -> Text:
    """Short trunk above the first row that the spine's ``up`` segment joins."""
    line = render_connector(ConnectorCell(down=True), connector_width)[2].copy()
    for column in range(1, total_columns):
        line.append(" " * column_width(column, node_width, connector_width))
    return line


def render_grid_lines(
    grid: Optional[TreeGrid],
    node_width: int = DEFAULT_NODE_WIDTH,
    connector_width: int = DEFAULT_CONNECTOR_WIDTH,
    registry: Optional[Mapping[str, ToolBadge]] = None,
    frame: int = 0,
) -> List[Text]:
    """Render a whole grid as styled lines; no lines when there is no grid."""
    if grid is None or not grid.rows:
        return []

    lines = [header_stub(grid.total_columns, node_width, connector_width)]
    for row in grid.rows:
        row_lines = [Text() for _ in range(CELL_HEIGHT)]
        for column, cell in enumerate(row):
            width = column_width(column, node_width, connector_width)
            for target, part in zip(row_lines, render_cell(cell, width, registry, frame)):
                target.append_text(part)
        lines.extend(row_lines)
    return lines


def render_grid_text(
    grid: Optional[TreeGrid],
    node_width: int = DEFAULT_NODE_WIDTH,
    connector_width: int = DEFAULT_CONNECTOR_WIDTH,
    registry: Optional[Mapping[str, ToolBadge]] = None,
) -> str:
    """Plain-text rendering of a grid, trailing spaces stripped."""
    lines = render_grid_lines(grid, node_width, connector_width, registry)
    return "\n".join(line.plain.rstrip() for line in lines)


def _pretty_json(value: object, limit: Optional[int] = None) -> str:
    try:
        text = json.dumps(value, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        return f"Error: {e}"
    if limit is not None:
        text = text[:limit]
    return text


def describe_node(cell: NodeCell) -> str:
    """Detail text for a node (shown as the tooltip in the Textual view)."""
    lines = [
        cell.title or "Subtask",
        f"Thought: {cell.thought}",
    ]
    if cell.tool_use is not None:
        lines.append(f"Tool Name: {cell.tool_use.tool_name or ''}")
        if cell.tool_use.parameters:
            lines.append(f"Parameters: {_pretty_json(cell.tool_use.parameters)}")
        lines.append(f"Tool Result Preview: {_pretty_json(cell.tool_use.tool_result, RESULT_PREVIEW_LIMIT)}...")
    lines.append(f"Subtasks: {cell.subtask_count if cell.subtask_count else 'None'}")
    lines.append(f"Conclusion: {'Tool Use' if cell.tool_use is not None else (cell.conclusion or '')}")
    return "\n".join(lines)
