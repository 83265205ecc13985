# -*- coding: utf-8 -*-
"""
Reasoning Tree View widget for the reasontree TUI.

Draws a layout grid as a Textual grid container: one child widget per grid
cell, narrow connector columns alternating with wide node columns. The column
count follows the grid's ``total_columns``; a short header stub above the
first row joins the root spine.

```
  │
  └─ ▌Analyze paper      ─┬─ ▌Read abstract
                          ├─ ▌Search surveys
                          └─ ▌Compare results
```
"""

from __future__ import annotations

from typing import List, Mapping, Optional

from rich.text import Text
from textual.containers import Container
from textual.widget import Widget

from ...layout import ConnectorCell, GridCell, NodeCell, TreeGrid
from ..tool_registry import ToolBadge
from ..tree_text import (
    CELL_HEIGHT,
    SPINNER_FRAMES,
    describe_node,
    render_connector,
    render_empty,
    render_node,
)

CONNECTOR_FR = 1
NODE_FR = 5
HEADER_STUB_HEIGHT = 1


class ConnectorCellWidget(Widget):
    """Line segments of one connector cell."""

    DEFAULT_CSS = """
    ConnectorCellWidget {
        width: 100%;
        height: 100%;
    }
    """

    def __init__(self, cell: ConnectorCell, *, stub: bool = False, classes: Optional[str] = None) -> None:
        super().__init__(classes=classes)
        self.cell = cell
        self._stub = stub

    def render(self) -> Text:
        width = self.size.width or 3
        lines = render_connector(self.cell, width)
        if self._stub:
            return lines[2]
        return Text("\n").join(lines)


class NodeCellWidget(Widget):
    """Task block: title, tool badge and completion indicator."""

    DEFAULT_CSS = """
    NodeCellWidget {
        width: 100%;
        height: 100%;
    }

    NodeCellWidget:hover {
        background: $boost;
    }
    """

    def __init__(
        self,
        cell: NodeCell,
        *,
        registry: Optional[Mapping[str, ToolBadge]] = None,
        classes: Optional[str] = None,
    ) -> None:
        super().__init__(classes=classes)
        self.cell = cell
        self._tool_registry = registry
        self.spinner_frame = 0
        self.tooltip = Text(describe_node(cell))
        if cell.is_complete:
            self.add_class("complete")

    @property
    def is_pending(self) -> bool:
        return not self.cell.is_complete

    def advance_spinner(self) -> None:
        self.spinner_frame = (self.spinner_frame + 1) % len(SPINNER_FRAMES)
        self.refresh()

    def render(self) -> Text:
        width = max(self.size.width, 4)
        return Text("\n").join(render_node(self.cell, width, self._tool_registry, self.spinner_frame))


class EmptyCellWidget(Widget):
    """Blank cell that keeps the row height."""

    DEFAULT_CSS = """
    EmptyCellWidget {
        width: 100%;
        height: 100%;
    }
    """

    def render(self) -> Text:
        return Text("\n").join(render_empty(self.size.width))


def _cell_widget(cell: GridCell, registry: Optional[Mapping[str, ToolBadge]]) -> Widget:
    if isinstance(cell, NodeCell):
        return NodeCellWidget(cell, registry=registry)
    if isinstance(cell, ConnectorCell):
        return ConnectorCellWidget(cell)
    return EmptyCellWidget()


def grid_column_template(total_columns: int) -> str:
    """Relative column widths: connector columns narrow, node columns wide."""
    return " ".join(f"{CONNECTOR_FR if column % 2 == 0 else NODE_FR}fr" for column in range(total_columns))


def grid_row_template(row_count: int) -> str:
    return " ".join([str(HEADER_STUB_HEIGHT)] + [str(CELL_HEIGHT)] * row_count)


class TreeGridBody(Container):
    """Grid container holding the cell widgets of one layout."""

    DEFAULT_CSS = """
    TreeGridBody {
        layout: grid;
        grid-gutter: 0 0;
        width: 100%;
        height: auto;
    }
    """

    def __init__(self, grid: TreeGrid, registry: Optional[Mapping[str, ToolBadge]] = None) -> None:
        super().__init__(*self._build_cells(grid, registry))
        self.styles.grid_size_columns = grid.total_columns
        self.styles.grid_columns = grid_column_template(grid.total_columns)
        self.styles.grid_rows = grid_row_template(grid.row_count)

    @staticmethod
    def _build_cells(grid: TreeGrid, registry: Optional[Mapping[str, ToolBadge]]) -> List[Widget]:
        cells: List[Widget] = [ConnectorCellWidget(ConnectorCell(down=True), stub=True, classes="header-stub")]
        cells.extend(EmptyCellWidget() for _ in range(grid.total_columns - 1))
        for row in grid.rows:
            cells.extend(_cell_widget(cell, registry) for cell in row)
        return cells


class ReasoningTreeView(Container):
    """Hosts the grid of the latest layout and animates pending nodes."""

    DEFAULT_CSS = """
    ReasoningTreeView {
        width: 100%;
        height: auto;
    }

    ReasoningTreeView.empty {
        display: none;
    }
    """

    SPINNER_INTERVAL = 0.12

    def __init__(
        self,
        *,
        registry: Optional[Mapping[str, ToolBadge]] = None,
        id: Optional[str] = None,
        classes: Optional[str] = None,
    ) -> None:
        super().__init__(id=id, classes=classes)
        self._tool_registry = registry
        self._grid: Optional[TreeGrid] = None
        self._spinner_timer = None
        self.add_class("empty")

    @property
    def grid(self) -> Optional[TreeGrid]:
        return self._grid

    def on_mount(self) -> None:
        self._spinner_timer = self.set_interval(self.SPINNER_INTERVAL, self._advance_spinners)

    def on_unmount(self) -> None:
        if self._spinner_timer:
            self._spinner_timer.stop()
            self._spinner_timer = None

    def _advance_spinners(self) -> None:
        for node in self.query(NodeCellWidget):
            if node.is_pending:
                node.advance_spinner()

    async def set_grid(self, grid: Optional[TreeGrid]) -> None:
        """Replace the drawn layout; None shows nothing."""
        self._grid = grid
        await self.remove_children()
        if grid is None or not grid.rows:
            self.add_class("empty")
            return
        self.remove_class("empty")
        await self.mount(TreeGridBody(grid, self._tool_registry))
