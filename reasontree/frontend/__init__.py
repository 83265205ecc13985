# -*- coding: utf-8 -*-
"""Terminal frontends for the reasoning tree.

Architecture:
- tool_registry.py: Tool badge lookup table
- tree_text.py: Rendering of grid cells as styled text
- textual_widgets/: Textual widgets (ReasoningTreeView)
- tree_app.py: Textual app replaying a stream into the view
"""

from .tool_registry import DEFAULT_TOOL_BADGES, ToolBadge, build_tool_registry, resolve_tool_badge
from .tree_text import describe_node, render_grid_lines, render_grid_text

__all__ = [
    "DEFAULT_TOOL_BADGES",
    "ToolBadge",
    "build_tool_registry",
    "describe_node",
    "render_grid_lines",
    "render_grid_text",
    "resolve_tool_badge",
]
