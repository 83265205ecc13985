# -*- coding: utf-8 -*-
"""Tool badge definitions and lookup.

Single source of truth for how tool invocations are labelled in the tree view.
Tool names are opaque strings from the model output; only the names listed in
the registry get a dedicated badge, every other non-empty name gets the
generic badge labelled with the raw tool name.

The registry is a plain mapping passed to the renderer so tests and configs
can supply their own entries.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional


@dataclass(frozen=True)
class ToolBadge:
    """Display info for a tool badge."""

    label: str
    icon: str
    color: str
    category: str = "tool"


# Tool name -> badge. Matching is exact and case-sensitive.
DEFAULT_TOOL_BADGES: Dict[str, ToolBadge] = {
    "SearchTool": ToolBadge(label="Search Tool", icon="🌐", color="#6a8db0", category="search"),
    "ReaderTool": ToolBadge(label="Webpage Understanding", icon="📖", color="#5a9d8a", category="reader"),
}

GENERIC_TOOL_ICON = "⚒"
GENERIC_TOOL_COLOR = "#858585"


def build_tool_registry(overrides: Optional[Mapping[str, Mapping[str, str]]] = None) -> Dict[str, ToolBadge]:
    """Return the default registry extended with configured entries.

    Args:
        overrides: Tool name -> ``{label, icon, color, category}``; missing
            keys fall back to the generic badge values.

    Returns:
        A new registry mapping.
    """
    registry = dict(DEFAULT_TOOL_BADGES)
    for tool_name, info in (overrides or {}).items():
        base = registry.get(tool_name)
        registry[tool_name] = ToolBadge(
            label=str(info.get("label", base.label if base else tool_name)),
            icon=str(info.get("icon", base.icon if base else GENERIC_TOOL_ICON)),
            color=str(info.get("color", base.color if base else GENERIC_TOOL_COLOR)),
            category=str(info.get("category", base.category if base else "tool")),
        )
    return registry


def resolve_tool_badge(tool_name: Optional[str], registry: Optional[Mapping[str, ToolBadge]] = None) -> Optional[ToolBadge]:
    """Get the badge for a tool name.

    Args:
        tool_name: The tool name from the task's tool use.
        registry: Lookup table; defaults to ``DEFAULT_TOOL_BADGES``.

    Returns:
        The registered badge, a generic badge for unknown names, or None
        when there is no tool name yet (still streaming).
    """
    if not tool_name:
        return None
    lookup = DEFAULT_TOOL_BADGES if registry is None else registry
    badge = lookup.get(tool_name)
    if badge is not None:
        return badge
    return ToolBadge(label=tool_name, icon=GENERIC_TOOL_ICON, color=GENERIC_TOOL_COLOR)
