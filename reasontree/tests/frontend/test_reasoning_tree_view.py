# -*- coding: utf-8 -*-
"""Widget-level tests for the reasoning tree view with Textual Pilot."""

from __future__ import annotations

import json

import pytest
from textual.app import App, ComposeResult
from textual.widgets import Static

from reasontree.analysis_store import AnalysisStatus
from reasontree.config import ReasonTreeConfig
from reasontree.frontend.textual_widgets.reasoning_tree_view import (
    ConnectorCellWidget,
    EmptyCellWidget,
    NodeCellWidget,
    ReasoningTreeView,
    TreeGridBody,
    grid_column_template,
    grid_row_template,
)
from reasontree.frontend.tree_app import ReasoningTreeApp, format_status
from reasontree.frontend.tree_text import describe_node
from reasontree.layout import layout_response


class _TreeHostApp(App):
    def compose(self) -> ComposeResult:
        yield ReasoningTreeView(id="tree_view")


def _widget_text(widget: object) -> str:
    return str(widget.render())


def _split(text: str, size: int):
    return [text[i : i + size] for i in range(0, len(text), size)]


def test_grid_templates_alternate_narrow_and_wide_columns():
    assert grid_column_template(6) == "1fr 5fr 1fr 5fr 1fr 5fr"
    assert grid_row_template(2) == "1 3 3"


@pytest.mark.asyncio
async def test_set_grid_mounts_one_widget_per_cell(sample_response):
    app = _TreeHostApp()
    grid = layout_response(sample_response)

    async with app.run_test(headless=True) as pilot:
        view = app.query_one(ReasoningTreeView)
        assert view.has_class("empty")

        await view.set_grid(grid)
        await pilot.pause()

        body = view.query_one(TreeGridBody)
        assert len(body.children) == grid.total_columns * (grid.row_count + 1)
        assert len(view.query(NodeCellWidget)) == 4
        assert len(view.query(ConnectorCellWidget)) == 1 + 4
        assert len(view.query(EmptyCellWidget)) == grid.total_columns - 1 + grid.total_columns * grid.row_count - 4 - 4
        assert not view.has_class("empty")
        assert view.grid is grid


@pytest.mark.asyncio
async def test_node_widgets_expose_details_and_completion(sample_response):
    app = _TreeHostApp()

    async with app.run_test(headless=True) as pilot:
        view = app.query_one(ReasoningTreeView)
        await view.set_grid(layout_response(sample_response))
        await pilot.pause()

        nodes = {node.cell.title: node for node in view.query(NodeCellWidget)}
        assert nodes["Search surveys"].tooltip.plain == describe_node(nodes["Search surveys"].cell)
        assert nodes["Search surveys"].has_class("complete")
        assert nodes["Compare"].has_class("complete")
        assert nodes["Read abstract"].is_pending

        pending = nodes["Read abstract"]
        frame = pending.spinner_frame
        pending.advance_spinner()
        assert pending.spinner_frame == frame + 1


@pytest.mark.asyncio
async def test_set_grid_none_clears_the_view(sample_response):
    app = _TreeHostApp()

    async with app.run_test(headless=True) as pilot:
        view = app.query_one(ReasoningTreeView)
        await view.set_grid(layout_response(sample_response))
        await pilot.pause()

        await view.set_grid(None)
        await pilot.pause()

        assert len(view.query(TreeGridBody)) == 0
        assert view.has_class("empty")
        assert view.grid is None


@pytest.mark.asyncio
async def test_app_replays_stream_to_completion(sse_chunk, sample_response_dict):
    chunks = [sse_chunk(piece) for piece in _split(json.dumps(sample_response_dict), 40)] + [b"data: [DONE]\n\n"]
    app = ReasoningTreeApp(chunks, config=ReasonTreeConfig(replay_delay=0), autostart=False)

    async with app.run_test(headless=True) as pilot:
        await app.replay()
        await pilot.pause()

        assert app.finished
        view = app.query_one(ReasoningTreeView)
        assert view.grid.row_count == 3
        assert "Completed" in _widget_text(app.query_one("#status_line", Static))
        assert "supported" in _widget_text(app.query_one("#answer", Static))

    record = app.store.get_analysis(app.analysis_id)
    assert record.status == AnalysisStatus.COMPLETED
    assert record.response["iterationCount"] == len(chunks)


@pytest.mark.asyncio
async def test_app_autostarts_replay_on_mount(sse_chunk):
    app = ReasoningTreeApp([sse_chunk('{"reasoning": [{"title": "only"}], "answer": "ok"}')], config=ReasonTreeConfig(replay_delay=0))

    async with app.run_test(headless=True) as pilot:
        await app.workers.wait_for_complete()
        await pilot.pause()
        assert app.finished
        assert app.query_one(ReasoningTreeView).grid.row_count == 1


@pytest.mark.asyncio
async def test_app_reports_empty_stream():
    app = ReasoningTreeApp([b"data: [DONE]\n\n"], config=ReasonTreeConfig(replay_delay=0), autostart=False)

    async with app.run_test(headless=True) as pilot:
        await app.replay()
        await pilot.pause()

        assert not app.finished
        assert "No content received from stream" in _widget_text(app.query_one("#status_line", Static))

    assert app.store.get_analysis(app.analysis_id).status == AnalysisStatus.FAILED


def test_format_status_lines():
    assert format_status(None) == "Waiting for stream..."
    assert format_status(None, error="boom") == "✗ boom"


@pytest.mark.asyncio
async def test_app_mounts_tree_view_with_configured_badges(sse_chunk):
    config = ReasonTreeConfig(replay_delay=0, tool_badges={"CodeTool": {"label": "Code Runner"}})
    chunk = sse_chunk('{"reasoning": [{"title": "run", "tooluse": {"tool_name": "CodeTool"}}]}')
    app = ReasoningTreeApp([chunk], config=config, autostart=False)

    async with app.run_test(headless=True) as pilot:
        assert len(app.query(ReasoningTreeView)) == 1

        await app.replay()
        await pilot.pause()

        node = app.query_one(NodeCellWidget)
        assert node.cell.tool_use.tool_name == "CodeTool"
        assert node._tool_registry["CodeTool"].label == "Code Runner"
        assert node._tool_registry is app.query_one(ReasoningTreeView)._tool_registry
