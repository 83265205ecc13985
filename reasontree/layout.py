# -*- coding: utf-8 -*-
"""
Grid layout for the reasoning tree.

Turns an ordered forest of tasks into a rectangular grid that a renderer can
draw row by row. Columns alternate between connector columns (even indexes)
and node columns (odd indexes); a task at depth ``d`` sits in column
``d * 2 + 1`` and the connector linking it to its parent in column ``d * 2``.

Example (one root with three children, 6 columns)::

    col:  0    1       2    3
         └─  [root]   ─┬─  [child a]
                       ├─  [child b]
                       └─  [child c]

The layout is recomputed from scratch on every stream tick. Every function
here is pure: rows are always freshly allocated and nothing is cached between
calls.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, ClassVar, List, Optional, Sequence, Union

from .tasks import ModelResponse, Task, ToolUse

MIN_NODE_COLUMNS = 3
MAX_NODE_COLUMNS = 5


@dataclass(frozen=True)
class NodeCell:
    """Projection of a task into a grid cell; subtasks reduced to a count."""

    kind: ClassVar[str] = "node"

    thought: str = ""
    title: str = ""
    tool_use: Optional[ToolUse] = None
    conclusion: Optional[str] = None
    subtask_count: int = 0

    @classmethod
    def from_task(cls, task: Task) -> "NodeCell":
        return cls(
            thought=task.thought or "",
            title=task.display_title,
            tool_use=replace(task.tool_use) if task.tool_use is not None else None,
            conclusion=task.conclusion,
            subtask_count=len(task.subtasks),
        )

    @property
    def is_complete(self) -> bool:
        if self.conclusion:
            return True
        return bool(self.tool_use is not None and self.tool_use.tool_result)


@dataclass(frozen=True)
class ConnectorCell:
    """Line segments drawn from the centre of a cell towards its edges."""

    kind: ClassVar[str] = "connector"

    up: bool = False
    down: bool = False
    left: bool = False
    right: bool = False


GridCell = Optional[Union[NodeCell, ConnectorCell]]
GridRow = List[GridCell]

# Connector shapes
SINGLE_CHILD = ConnectorCell(left=True, right=True)
FIRST_CHILD = ConnectorCell(left=True, right=True, down=True)
MIDDLE_CHILD = ConnectorCell(right=True, up=True, down=True)
LAST_CHILD = ConnectorCell(right=True, up=True)
SPINE_ROOT = ConnectorCell(up=True, down=True, right=True)
SPINE_LAST_ROOT = ConnectorCell(up=True, right=True)
PASS_THROUGH = ConnectorCell(up=True, down=True)


@dataclass
class TreeGrid:
    """Layout result handed to renderers."""

    rows: List[GridRow]
    total_columns: int
    node_columns: int

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def cell(self, row: int, column: int) -> GridCell:
        return self.rows[row][column]


def is_node(cell: Any) -> bool:
    return isinstance(cell, NodeCell)


def is_connector(cell: Any) -> bool:
    return isinstance(cell, ConnectorCell)


def max_depth(tasks: Sequence[Task]) -> int:
    """Deepest subtask nesting in the forest (roots are depth 0, empty forest 0)."""
    deepest = 0
    stack = [(task, 0) for task in tasks]
    while stack:
        task, depth = stack.pop()
        deepest = max(deepest, depth)
        for subtask in task.subtasks:
            stack.append((subtask, depth + 1))
    return deepest


def node_columns_for_depth(depth: int) -> int:
    """Number of node columns used for a forest of the given max depth."""
    if depth <= 2:
        return MIN_NODE_COLUMNS
    if depth == 3:
        return 4
    return MAX_NODE_COLUMNS


def _child_connector(index: int, child_count: int) -> ConnectorCell:
    if child_count == 1:
        return SINGLE_CHILD
    if index == 0:
        return FIRST_CHILD
    if index == child_count - 1:
        return LAST_CHILD
    return MIDDLE_CHILD


class _GridBuilder:
    """Recursive row synthesis for one layout pass."""

    def __init__(self, node_columns: int):
        self.node_columns = node_columns
        self.total_columns = node_columns * 2
        self.max_expanded_depth = node_columns - 1

    def _new_row(self) -> GridRow:
        return [None] * self.total_columns

    def build_rows(self, task: Task, depth: int) -> List[GridRow]:
        col = depth * 2 + 1
        # Tasks in the last node column are leaves regardless of their subtasks
        children = task.subtasks if depth < self.max_expanded_depth else []

        if not children:
            row = self._new_row()
            row[col] = NodeCell.from_task(task)
            return [row]

        rows: List[GridRow] = []
        for index, child in enumerate(children):
            child_rows = self.build_rows(child, depth + 1)
            connector = _child_connector(index, len(children))
            for offset, child_row in enumerate(child_rows):
                row = self._new_row()
                if index == 0 and offset == 0:
                    row[col] = NodeCell.from_task(task)
                # Only connect rows that actually hold the child's node
                if is_node(child_row[col + 2]):
                    row[col + 1] = connector
                row[col + 2 :] = child_row[col + 2 :]
                rows.append(row)
        return rows


def stitch_root_spine(rows: List[GridRow]) -> None:
    """Hang every root task off one vertical trunk in column 0."""
    root_rows = [index for index, row in enumerate(rows) if is_node(row[1])]
    if not root_rows:
        return

    last_root_row = root_rows[-1]
    root_row_set = set(root_rows)
    for index in range(last_root_row + 1):
        if index == last_root_row:
            rows[index][0] = SPINE_LAST_ROOT
        elif index in root_row_set:
            rows[index][0] = SPINE_ROOT
        else:
            rows[index][0] = PASS_THROUGH


def smooth_connectors(rows: List[GridRow], total_columns: int) -> None:
    """Fill vertical gaps in connector columns right of the spine.

    A branch's vertical line has to cross the rows taken by the previous
    sibling's subtree. Those rows have nothing in the connector column, so a
    pass-through segment is added wherever the cell above continues downward
    and nothing sits to the right.
    """
    for col in range(2, total_columns, 2):
        for index in range(1, len(rows) - 1):
            above = rows[index - 1][col]
            if not (is_connector(above) and above.down):
                continue
            if rows[index][col] is None and rows[index][col + 1] is None:
                rows[index][col] = PASS_THROUGH


def build_grid(tasks: Optional[Sequence[Task]]) -> Optional[TreeGrid]:
    """Lay out a forest of tasks.

    Args:
        tasks: Root tasks in reasoning order.

    Returns:
        The grid, or None when there is nothing to render.
    """
    if not tasks:
        return None

    node_columns = node_columns_for_depth(max_depth(tasks))
    builder = _GridBuilder(node_columns)

    rows: List[GridRow] = []
    for task in tasks:
        rows.extend(builder.build_rows(task, 0))

    stitch_root_spine(rows)
    smooth_connectors(rows, builder.total_columns)
    return TreeGrid(rows=rows, total_columns=builder.total_columns, node_columns=node_columns)


def layout_response(response: Optional[ModelResponse]) -> Optional[TreeGrid]:
    """Lay out the reasoning forest of a decoded response."""
    if response is None:
        return None
    return build_grid(response.reasoning)
