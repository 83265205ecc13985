# -*- coding: utf-8 -*-
"""
Reasoning task model.

A model response is ``{"reasoning": [Task, ...], "answer": "..."}`` where every
task may carry a thought, a tool invocation, nested subtasks and a conclusion.
Trees are rebuilt from scratch on every decode tick, so ``from_dict`` has to
accept anything a partially streamed document can contain: missing fields,
half-written strings and subtask lists that are still growing.

Wire keys follow the model output (``tooluse``, ``tool_name``,
``tool_result``); camelCase spellings are accepted on input as well.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Accepted spellings per field, first entry is the one written by to_dict()
_TOOL_USE_KEYS = ("tooluse", "toolUse", "tool_use")
_TOOL_NAME_KEYS = ("tool_name", "toolName")
_TOOL_RESULT_KEYS = ("tool_result", "toolResult")


def _first_present(data: Dict[str, Any], keys: tuple) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


@dataclass
class ToolUse:
    """An external tool call made by a task."""

    tool_name: Optional[str] = None
    parameters: Any = None
    tool_result: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["ToolUse"]:
        if not isinstance(data, dict):
            return None
        return cls(
            tool_name=_optional_text(_first_present(data, _TOOL_NAME_KEYS)),
            parameters=data.get("parameters"),
            tool_result=_first_present(data, _TOOL_RESULT_KEYS),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.tool_name is not None:
            result["tool_name"] = self.tool_name
        if self.parameters is not None:
            result["parameters"] = self.parameters
        if self.tool_result is not None:
            result["tool_result"] = self.tool_result
        return result


@dataclass
class Task:
    """A node in the reasoning forest."""

    thought: Optional[str] = None
    title: Optional[str] = None
    tool_use: Optional[ToolUse] = None
    subtasks: List["Task"] = field(default_factory=list)
    conclusion: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        raw_subtasks = data.get("subtasks")
        subtasks = []
        if isinstance(raw_subtasks, list):
            subtasks = [cls.from_dict(item) for item in raw_subtasks if isinstance(item, dict)]
        return cls(
            thought=_optional_text(data.get("thought")),
            title=_optional_text(data.get("title")),
            tool_use=ToolUse.from_dict(_first_present(data, _TOOL_USE_KEYS)),
            subtasks=subtasks,
            conclusion=_optional_text(data.get("conclusion")),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.thought is not None:
            result["thought"] = self.thought
        if self.title is not None:
            result["title"] = self.title
        if self.tool_use is not None:
            result["tooluse"] = self.tool_use.to_dict()
        if self.subtasks:
            result["subtasks"] = [subtask.to_dict() for subtask in self.subtasks]
        if self.conclusion is not None:
            result["conclusion"] = self.conclusion
        return result

    @property
    def display_title(self) -> str:
        """Title shown in the tree, falling back to the thought."""
        return self.title or self.thought or ""

    @property
    def is_complete(self) -> bool:
        """A task is finished once it has a conclusion or a tool result."""
        if self.conclusion:
            return True
        return bool(self.tool_use is not None and self.tool_use.tool_result)


@dataclass
class ModelResponse:
    """Top-level ``{reasoning, answer}`` document."""

    reasoning: List[Task] = field(default_factory=list)
    answer: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Optional["ModelResponse"]:
        """Build a response from decoded JSON; None when it is not an object."""
        if not isinstance(data, dict):
            return None
        raw_reasoning = data.get("reasoning")
        reasoning = []
        if isinstance(raw_reasoning, list):
            reasoning = [Task.from_dict(item) for item in raw_reasoning if isinstance(item, dict)]
        return cls(reasoning=reasoning, answer=_optional_text(data.get("answer")) or "")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reasoning": [task.to_dict() for task in self.reasoning],
            "answer": self.answer,
        }
