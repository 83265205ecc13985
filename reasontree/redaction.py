# -*- coding: utf-8 -*-
"""
Redaction of bulky task fields for storage and live display.

While a response streams, the stored snapshot only needs the tree shape:
titles, thoughts, tool names and parameters. Tool results and conclusions can
be large, so they are reduced to a one-character presence marker.
"""

import json
from typing import Any, Dict, Optional

from .logger_config import logger
from .tasks import ModelResponse, Task, ToolUse

COMPLETION_MARKER = "✓"


def _presence(value: Any, marker: str) -> str:
    return marker if value else ""


def redact_task(task: Task, marker: str = COMPLETION_MARKER) -> Task:
    """Return a copy of ``task`` (and all subtasks) with results replaced by markers."""
    tool_use = None
    if task.tool_use is not None:
        tool_use = ToolUse(
            tool_name=task.tool_use.tool_name,
            parameters=task.tool_use.parameters,
            tool_result=_presence(task.tool_use.tool_result, marker),
        )
    return Task(
        thought=task.thought,
        title=task.title,
        tool_use=tool_use,
        subtasks=[redact_task(subtask, marker) for subtask in task.subtasks],
        conclusion=_presence(task.conclusion, marker),
    )


def redact_response(response: ModelResponse, marker: str = COMPLETION_MARKER) -> ModelResponse:
    """Redact every task in the forest; the answer is kept as is."""
    return ModelResponse(
        reasoning=[redact_task(task, marker) for task in response.reasoning],
        answer=response.answer,
    )


def safe_json_value(value: Any) -> Any:
    """Return ``value`` if it serializes to JSON, else an explicit error string.

    Keeps one malformed field from aborting the whole snapshot.
    """
    try:
        json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        logger.warning(f"[Redaction] Field is not JSON serializable: {e}")
        return f"Error: {e}"
    return value


def _sanitize_task_dict(task_dict: Dict[str, Any]) -> Dict[str, Any]:
    tool_use = task_dict.get("tooluse")
    if tool_use and "parameters" in tool_use:
        tool_use["parameters"] = safe_json_value(tool_use["parameters"])
    for subtask in task_dict.get("subtasks", []):
        _sanitize_task_dict(subtask)
    return task_dict


def redacted_payload(response: Optional[ModelResponse], marker: str = COMPLETION_MARKER) -> Optional[Dict[str, Any]]:
    """Build the JSON-ready redacted projection of ``response``.

    Returns:
        ``{"reasoning": [...], "answer": "..."}`` or None when there is no response.
    """
    if response is None:
        return None
    payload = redact_response(response, marker).to_dict()
    for task_dict in payload["reasoning"]:
        _sanitize_task_dict(task_dict)
    return payload


def serialize_payload(payload: Optional[Dict[str, Any]]) -> str:
    """Serialize a redacted payload for storage ("" when there is nothing yet)."""
    if payload is None:
        return ""
    return json.dumps(payload, ensure_ascii=False)
