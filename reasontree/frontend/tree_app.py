# -*- coding: utf-8 -*-
"""
Textual app that replays a captured model stream into the tree view.

Each chunk goes through an ``AnalysisSession`` exactly as a live stream would,
and the view is redrawn after every tick.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, List, Mapping, Optional, Union

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.widgets import Footer, Static

from ..analysis_session import AnalysisSession, EmptyStreamError, TickSnapshot
from ..analysis_store import AnalysisStore
from ..config import ReasonTreeConfig
from ..logger_config import logger
from .textual_widgets.reasoning_tree_view import ReasoningTreeView
from .tool_registry import ToolBadge, build_tool_registry


def format_status(snapshot: Optional[TickSnapshot], finished: bool = False, error: Optional[str] = None) -> str:
    """One-line summary shown above the tree."""
    if error:
        return f"✗ {error}"
    if snapshot is None:
        return "Waiting for stream..."
    state = "Completed" if finished else "Streaming..."
    tasks = len(snapshot.response.reasoning) if snapshot.response else 0
    return f"{state} │ tick {snapshot.iteration} │ {snapshot.tokens_read} tokens │ {tasks} top-level tasks"


class ReasoningTreeApp(App):
    """Live view of one reasoning stream."""

    CSS = """
    #status_line {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }

    #tree_scroll {
        height: 1fr;
    }

    #answer {
        height: auto;
        padding: 1 1 0 1;
    }
    """

    BINDINGS = [Binding("q", "quit", "Quit")]

    def __init__(
        self,
        chunks: Iterable[Union[bytes, str]],
        *,
        config: Optional[ReasonTreeConfig] = None,
        registry: Optional[Mapping[str, ToolBadge]] = None,
        paper_url: str = "replay://local",
        autostart: bool = True,
    ) -> None:
        super().__init__()
        self.config = config or ReasonTreeConfig()
        self._chunks: List[Union[bytes, str]] = list(chunks)
        self._tool_registry = registry if registry is not None else build_tool_registry(self.config.tool_badges)
        self.store = AnalysisStore()
        self.analysis_id = self.store.create_analysis(paper_url)
        self._autostart = autostart
        self.last_snapshot: Optional[TickSnapshot] = None
        self.finished = False

    def compose(self) -> ComposeResult:
        yield Static(format_status(None), id="status_line")
        with VerticalScroll(id="tree_scroll"):
            yield ReasoningTreeView(registry=self._tool_registry, id="tree_view")
            yield Static("", id="answer")
        yield Footer()

    def on_mount(self) -> None:
        if self._autostart:
            self.run_worker(self.replay(), exclusive=True)

    async def replay(self, delay: Optional[float] = None) -> None:
        """Feed the captured chunks through a session, redrawing after every tick."""
        delay = self.config.replay_delay if delay is None else delay
        session = AnalysisSession(self.store, self.analysis_id, self.config)
        view = self.query_one(ReasoningTreeView)
        status = self.query_one("#status_line", Static)

        session.start()
        for chunk in self._chunks:
            snapshot = session.feed(chunk)
            self.last_snapshot = snapshot
            if snapshot.decoded:
                await view.set_grid(snapshot.grid)
            status.update(Text(format_status(snapshot)))
            if delay:
                await asyncio.sleep(delay)

        try:
            response = session.finish()
        except EmptyStreamError as e:
            logger.warning(f"[ReasoningTreeApp] {e}")
            status.update(Text(format_status(self.last_snapshot, error=str(e))))
            return

        self.finished = True
        await view.set_grid(session.last_grid)
        status.update(Text(format_status(self.last_snapshot, finished=True)))
        if response is not None and response.answer:
            self.query_one("#answer", Static).update(Text(response.answer))
