# -*- coding: utf-8 -*-
"""Textual widgets for the reasoning tree TUI."""

from .reasoning_tree_view import (
    ConnectorCellWidget,
    EmptyCellWidget,
    NodeCellWidget,
    ReasoningTreeView,
    TreeGridBody,
)

__all__ = [
    "ConnectorCellWidget",
    "EmptyCellWidget",
    "NodeCellWidget",
    "ReasoningTreeView",
    "TreeGridBody",
]
