#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Replay a captured model stream through the reasoning tree pipeline.

Replays the capture chunk by chunk through the same session pipeline as a
live stream (accumulate, partial decode, redact, layout).

Two modes:
  Text mode (default) prints the final tree (or every tick) as text:
    uv run python scripts/replay_reasoning_stream.py /path/to/capture.txt

  TUI mode (`--tui`) animates the replay in the Textual tree view:
    uv run python scripts/replay_reasoning_stream.py --tui /path/to/capture.txt

The capture may be a raw server-sent-events dump (``data: {...}`` lines) or
the plain response text/JSON; plain text is wrapped into synthetic events.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from reasontree.analysis_session import AnalysisSession, EmptyStreamError
from reasontree.analysis_store import AnalysisStore
from reasontree.config import ReasonTreeConfig, load_config
from reasontree.frontend.tool_registry import build_tool_registry
from reasontree.frontend.tree_text import render_grid_text
from reasontree.logger_config import setup_logging

DEFAULT_CHUNK_SIZE = 64


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay a captured reasoning stream.")
    parser.add_argument("capture", type=Path, help="SSE capture or plain response file")
    parser.add_argument("--tui", action="store_true", help="Replay in the Textual tree view")
    parser.add_argument("--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE, help="Bytes (or characters) per replayed chunk")
    parser.add_argument("--every-tick", action="store_true", help="Print the tree after every chunk (text mode)")
    parser.add_argument("--config", type=Path, default=None, help="YAML config file")
    args = parser.parse_args(argv)
    if args.chunk_size < 1:
        parser.error("--chunk-size must be at least 1")
    return args


def is_sse_capture(raw: str) -> bool:
    """True if the capture already contains server-sent-event data lines."""
    return any(line.startswith("data: ") for line in raw.splitlines())


def wrap_as_events(text: str, chunk_size: int) -> List[bytes]:
    """Wrap plain response text into synthetic chat-completions events."""
    chunks = []
    for start in range(0, len(text), chunk_size):
        piece = text[start : start + chunk_size]
        payload = {"choices": [{"delta": {"content": piece}}]}
        chunks.append(f"data: {json.dumps(payload, ensure_ascii=False)}\n\n".encode("utf-8"))
    chunks.append(b"data: [DONE]\n\n")
    return chunks


def load_chunks(path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> List[bytes]:
    raw = path.read_bytes()
    text = raw.decode("utf-8", errors="replace")
    if is_sse_capture(text):
        return [raw[start : start + chunk_size] for start in range(0, len(raw), chunk_size)]
    return wrap_as_events(text, chunk_size)


def render_text_replay(
    chunks: Sequence[bytes],
    config: Optional[ReasonTreeConfig] = None,
    every_tick: bool = False,
    out: TextIO = sys.stdout,
) -> int:
    """Run the chunks through a session and print the tree; returns an exit code."""
    config = config or ReasonTreeConfig()
    registry = build_tool_registry(config.tool_badges)
    store = AnalysisStore()
    analysis_id = store.create_analysis("replay://local")
    session = AnalysisSession(store, analysis_id, config)

    def _render() -> str:
        return render_grid_text(session.last_grid, config.node_width, config.connector_width, registry)

    session.start()
    for chunk in chunks:
        snapshot = session.feed(chunk)
        if every_tick:
            print(f"--- tick {snapshot.iteration} ({snapshot.tokens_read} tokens) ---", file=out)
            print(_render() or "(nothing to render)", file=out)

    try:
        response = session.finish()
    except EmptyStreamError as exc:
        print(f"Error: {exc}", file=out)
        return 1

    if not every_tick:
        print(_render() or "(nothing to render)", file=out)
    if response is not None and response.answer:
        print("", file=out)
        print(f"Answer: {response.answer}", file=out)
    return 0


def run_tui(chunks: Sequence[bytes], config: ReasonTreeConfig) -> int:
    """Replay the chunks in the Textual tree view."""
    from reasontree.frontend.tree_app import ReasoningTreeApp
    from reasontree.logger_config import restore_console_logging, suppress_console_logging

    suppress_console_logging()
    try:
        app = ReasoningTreeApp(chunks, config=config)
        app.run()
    finally:
        restore_console_logging()
    return 0 if app.finished else 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    config = load_config(args.config)
    setup_logging(config.log_level)

    if not args.capture.exists():
        print(f"Capture not found: {args.capture}", file=sys.stderr)
        return 2

    chunks = load_chunks(args.capture, args.chunk_size)
    if args.tui:
        return run_tui(chunks, config)
    return render_text_replay(chunks, config, every_tick=args.every_tick)


if __name__ == "__main__":
    raise SystemExit(main())
