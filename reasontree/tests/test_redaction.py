# -*- coding: utf-8 -*-
"""Tests for marker-based redaction of stored snapshots."""

import json

from reasontree.redaction import (
    COMPLETION_MARKER,
    redact_response,
    redact_task,
    redacted_payload,
    safe_json_value,
    serialize_payload,
)
from reasontree.tasks import ModelResponse, Task, ToolUse


def _subtask_counts(tasks):
    counts = []
    stack = list(tasks)
    while stack:
        task = stack.pop()
        counts.append(len(task.subtasks))
        stack.extend(task.subtasks)
    return counts


def test_tool_results_and_conclusions_become_markers(sample_response):
    redacted = redact_response(sample_response)
    searched, read, compared = redacted.reasoning[0].subtasks

    assert searched.tool_use.tool_result == COMPLETION_MARKER
    assert len(searched.tool_use.tool_result) == 1
    assert read.tool_use.tool_result == ""
    assert compared.conclusion == COMPLETION_MARKER
    assert redacted.reasoning[0].conclusion == ""


def test_shape_and_descriptive_fields_are_preserved(sample_response):
    redacted = redact_response(sample_response)

    assert _subtask_counts(redacted.reasoning) == _subtask_counts(sample_response.reasoning)
    original_child = sample_response.reasoning[0].subtasks[0]
    redacted_child = redacted.reasoning[0].subtasks[0]
    assert redacted_child.title == original_child.title
    assert redacted_child.thought == original_child.thought
    assert redacted_child.tool_use.tool_name == original_child.tool_use.tool_name
    assert redacted_child.tool_use.parameters == original_child.tool_use.parameters
    assert redacted.answer == sample_response.answer


def test_redaction_recurses_to_every_depth():
    leaf = Task(title="leaf", tool_use=ToolUse(tool_name="ReaderTool", tool_result="a very long page"), conclusion="ok")
    task = Task(title="root", subtasks=[Task(title="mid", subtasks=[Task(title="deeper", subtasks=[leaf])])])

    redacted = redact_task(task, marker="*")
    deepest = redacted.subtasks[0].subtasks[0].subtasks[0]
    assert deepest.tool_use.tool_result == "*"
    assert deepest.conclusion == "*"


def test_redaction_does_not_mutate_the_input(sample_response):
    original = sample_response.to_dict()
    redact_response(sample_response)
    assert sample_response.to_dict() == original


def test_unserializable_parameters_become_error_strings():
    response = ModelResponse(
        reasoning=[
            Task(title="ok", tool_use=ToolUse(tool_name="SearchTool", parameters={"q": "fine"})),
            Task(title="bad", tool_use=ToolUse(tool_name="SearchTool", parameters={"q": object()})),
        ],
    )
    payload = redacted_payload(response)

    assert payload["reasoning"][0]["tooluse"]["parameters"] == {"q": "fine"}
    assert payload["reasoning"][1]["tooluse"]["parameters"].startswith("Error: ")
    assert json.loads(serialize_payload(payload))["reasoning"][1]["title"] == "bad"


def test_safe_json_value_passes_serializable_values_through():
    assert safe_json_value({"a": [1, 2]}) == {"a": [1, 2]}
    assert safe_json_value({1, 2}).startswith("Error: ")


def test_missing_response_serializes_to_empty_payload():
    assert redacted_payload(None) is None
    assert serialize_payload(None) == ""
