# -*- coding: utf-8 -*-
from __future__ import annotations

import json
import os
from typing import Any, Dict, List

import pytest

from reasontree.tasks import ModelResponse, Task


def _env_flag(name: str) -> bool:
    v = os.getenv(name, "").strip().lower()
    return v in {"1", "true", "yes", "y", "on"}


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("reasontree-triage")
    group.addoption(
        "--run-expensive",
        action="store_true",
        default=_env_flag("RUN_EXPENSIVE"),
        help="Run tests marked as expensive (or set RUN_EXPENSIVE=1).",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "expensive: long-running sweeps, skipped unless --run-expensive is given")


def pytest_collection_modifyitems(config: pytest.Config, items: List[pytest.Item]) -> None:
    if config.getoption("--run-expensive"):
        return
    skip_expensive = pytest.mark.skip(reason="expensive test (enable with --run-expensive or RUN_EXPENSIVE=1)")
    for item in items:
        if item.get_closest_marker("expensive") is not None:
            item.add_marker(skip_expensive)


@pytest.fixture
def _isolate_test_logs(monkeypatch, tmp_path):
    """Keep tests from writing log sessions into repo-local .reasontree/."""
    import reasontree.logger_config as logger_config

    monkeypatch.setattr(logger_config, "_LOG_BASE_SESSION_DIR", None)
    monkeypatch.setattr(logger_config, "_LOG_SESSION_DIR", None)
    monkeypatch.delenv("REASONTREE_LOG_BASE_DIR", raising=False)
    logger_config.set_log_base_session_dir_absolute(tmp_path / "reasontree_logs")


def _sse_chunk(content: str, total_tokens: int = 0) -> bytes:
    payload: Dict[str, Any] = {"choices": [{"delta": {"content": content}}]}
    if total_tokens:
        payload["usage"] = {"total_tokens": total_tokens}
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n".encode("utf-8")


@pytest.fixture
def sample_response_dict() -> Dict[str, Any]:
    """One root with three children; the first child used a tool."""
    return {
        "reasoning": [
            {
                "thought": "Understand what the paper claims",
                "title": "Analyze paper",
                "subtasks": [
                    {
                        "thought": "Find related work",
                        "title": "Search surveys",
                        "tooluse": {
                            "tool_name": "SearchTool",
                            "parameters": {"query": "partial json streaming"},
                            "tool_result": [{"title": "Survey", "url": "https://example.org/survey"}],
                        },
                    },
                    {
                        "thought": "Read the abstract",
                        "title": "Read abstract",
                        "tooluse": {"tool_name": "ReaderTool", "parameters": {"url": "https://example.org/paper"}},
                    },
                    {"thought": "Compare the results", "title": "Compare", "conclusion": "Results hold up"},
                ],
            },
        ],
        "answer": "The paper's claims are supported.",
    }


@pytest.fixture
def sample_response(sample_response_dict) -> ModelResponse:
    response = ModelResponse.from_dict(sample_response_dict)
    assert response is not None
    return response


def _make_chain(depth: int, title_prefix: str = "level") -> Task:
    task = Task(title=f"{title_prefix} {depth}")
    for level in range(depth - 1, -1, -1):
        task = Task(title=f"{title_prefix} {level}", subtasks=[task])
    return task


@pytest.fixture
def sse_chunk():
    """Factory for one chat-completions stream event carrying some content."""
    return _sse_chunk


@pytest.fixture
def make_chain():
    """Factory for a single chain of tasks whose deepest task sits at the given depth."""
    return _make_chain
