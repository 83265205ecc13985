# -*- coding: utf-8 -*-
"""Tests for scripts/replay_reasoning_stream.py chunk loading and mode selection."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from reasontree.stream_decoder import StreamAccumulator


def _load_script_module():
    import importlib.util

    script_path = Path(__file__).resolve().parents[3] / "scripts" / "replay_reasoning_stream.py"
    spec = importlib.util.spec_from_file_location("replay_reasoning_stream_script", script_path)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _write_response_file(path: Path, document: dict) -> None:
    path.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")


def test_parse_args_defaults_to_text_mode():
    module = _load_script_module()
    args = module.parse_args(["capture.txt"])
    assert args.tui is False
    assert args.every_tick is False
    assert args.chunk_size == module.DEFAULT_CHUNK_SIZE
    assert args.capture == Path("capture.txt")


def test_parse_args_rejects_non_positive_chunk_size():
    module = _load_script_module()
    with pytest.raises(SystemExit):
        module.parse_args(["--chunk-size", "0", "capture.txt"])


def test_plain_response_is_wrapped_into_events(tmp_path, sample_response_dict):
    module = _load_script_module()
    path = tmp_path / "response.json"
    _write_response_file(path, sample_response_dict)

    chunks = module.load_chunks(path, chunk_size=16)
    assert all(chunk.startswith(b"data: ") for chunk in chunks)
    assert chunks[-1] == b"data: [DONE]\n\n"

    accumulator = StreamAccumulator()
    for chunk in chunks:
        accumulator.feed(chunk)
    assert json.loads(accumulator.content) == sample_response_dict


def test_sse_capture_is_replayed_byte_for_byte(tmp_path, sse_chunk):
    module = _load_script_module()
    raw = sse_chunk('{"reasoning": []') + sse_chunk(', "answer": "é"}') + b"data: [DONE]\n\n"
    path = tmp_path / "capture.sse"
    path.write_bytes(raw)

    chunks = module.load_chunks(path, chunk_size=5)
    assert b"".join(chunks) == raw
    assert all(len(chunk) <= 5 for chunk in chunks)


def test_render_text_replay_prints_final_tree_and_answer(tmp_path, sample_response_dict):
    module = _load_script_module()
    path = tmp_path / "response.json"
    _write_response_file(path, sample_response_dict)

    out = io.StringIO()
    exit_code = module.render_text_replay(module.load_chunks(path, 32), out=out)

    output = out.getvalue()
    assert exit_code == 0
    assert "Analyze paper" in output
    assert "Search Tool" in output
    assert "Answer: The paper's claims are supported." in output
    assert "--- tick" not in output


def test_render_text_replay_every_tick(tmp_path, sample_response_dict):
    module = _load_script_module()
    path = tmp_path / "response.json"
    _write_response_file(path, sample_response_dict)
    chunks = module.load_chunks(path, 64)

    out = io.StringIO()
    module.render_text_replay(chunks, every_tick=True, out=out)

    assert out.getvalue().count("--- tick") == len(chunks)


def test_render_text_replay_reports_empty_stream():
    module = _load_script_module()
    out = io.StringIO()
    assert module.render_text_replay([b"data: [DONE]\n\n"], out=out) == 1
    assert "No content received from stream" in out.getvalue()


def test_main_dispatches_to_tui_mode(tmp_path, monkeypatch, sample_response_dict):
    module = _load_script_module()
    path = tmp_path / "response.json"
    _write_response_file(path, sample_response_dict)

    called = {}

    def _fake_run_tui(chunks, config):
        called["chunks"] = chunks
        called["config"] = config
        return 77

    monkeypatch.setattr(module, "run_tui", _fake_run_tui)
    monkeypatch.setattr(module, "render_text_replay", lambda *_args, **_kwargs: pytest.fail("unexpected text dispatch"))
    monkeypatch.setattr(module, "setup_logging", lambda *_args, **_kwargs: None)
    monkeypatch.delenv("REASONTREE_CONFIG", raising=False)

    assert module.main(["--tui", str(path)]) == 77
    assert called["chunks"] == module.load_chunks(path)
    assert called["config"].completion_marker == "✓"


def test_main_reports_missing_capture(tmp_path, monkeypatch):
    module = _load_script_module()
    monkeypatch.setattr(module, "setup_logging", lambda *_args, **_kwargs: None)
    monkeypatch.delenv("REASONTREE_CONFIG", raising=False)
    assert module.main([str(tmp_path / "missing.txt")]) == 2
