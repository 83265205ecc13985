# -*- coding: utf-8 -*-
"""Accumulates model output from a chat-completions event stream.

The provider streams server-sent events; each ``data:`` line carries a JSON
delta. This module turns raw network chunks into the growing response text
that the partial decoder consumes on every tick. The buffer captures:
- content deltas (``choices[0].delta.content``)
- the provider-reported token usage (``usage.total_tokens``)
- the number of network chunks seen so far (the tick counter)
"""

import codecs
import json
import math
from typing import Any, Dict, List, Optional

from .logger_config import logger

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


def approximate_tokens(text: str, chars_per_token: int = 2) -> int:
    """Rough token count used when the provider does not report usage."""
    if not text:
        return 0
    return math.ceil(len(text) / chars_per_token)


def extract_delta_content(payload: Dict[str, Any]) -> Optional[str]:
    """Return ``choices[0].delta.content`` from a stream payload, if any."""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    return content if isinstance(content, str) and content else None


def extract_total_tokens(payload: Dict[str, Any]) -> Optional[int]:
    usage = payload.get("usage")
    if not isinstance(usage, dict):
        return None
    total = usage.get("total_tokens")
    if isinstance(total, int) and not isinstance(total, bool) and total > 0:
        return total
    return None


class StreamAccumulator:
    """Decodes network chunks of an event stream into accumulated content.

    Lines split across chunks are carried over, and multi-byte UTF-8
    sequences split across chunks are decoded once complete.

    Usage:
        accumulator = StreamAccumulator()
        for chunk in chunks:
            accumulator.feed(chunk)
        accumulator.flush()
        text = accumulator.content
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending_line = ""
        self._parts: List[str] = []
        self.total_tokens: int = 0
        self.iteration_count: int = 0
        self.skipped_payloads: int = 0

    @property
    def content(self) -> str:
        """All content received so far."""
        if len(self._parts) > 1:
            self._parts = ["".join(self._parts)]
        return self._parts[0] if self._parts else ""

    def feed(self, chunk: bytes) -> str:
        """Process one network chunk.

        Args:
            chunk: Raw bytes (or already decoded text) from the stream

        Returns:
            The content appended by this chunk ("" if none)
        """
        self.iteration_count += 1
        text = chunk if isinstance(chunk, str) else self._decoder.decode(chunk)
        lines = (self._pending_line + text).split("\n")
        self._pending_line = lines.pop()
        return self._consume_lines(lines)

    def flush(self) -> str:
        """Process whatever is still buffered once the stream has ended."""
        tail = self._decoder.decode(b"", final=True)
        remaining = self._pending_line + tail
        self._pending_line = ""
        if not remaining:
            return ""
        return self._consume_lines(remaining.split("\n"))

    def _consume_lines(self, lines: List[str]) -> str:
        appended: List[str] = []
        for line in lines:
            line = line.rstrip("\r")
            if not line.startswith(DATA_PREFIX):
                continue
            data = line[len(DATA_PREFIX) :].strip()
            if not data or data == DONE_SENTINEL:
                continue
            try:
                payload = json.loads(data)
            except json.JSONDecodeError:
                # Partial or corrupt frames are common in provider streams
                self.skipped_payloads += 1
                logger.warning(f"[StreamDecoder] Skipping malformed JSON chunk: {data[:100]}")
                continue
            if not isinstance(payload, dict):
                continue

            content = extract_delta_content(payload)
            if content:
                appended.append(content)
            total = extract_total_tokens(payload)
            if total is not None:
                self.total_tokens = total

        if not appended:
            return ""
        added = "".join(appended)
        self._parts.append(added)
        return added
