# -*- coding: utf-8 -*-
"""
Per-tick pipeline for one streaming analysis.

Every network chunk triggers one full pass:

    accumulate -> decode_partial -> ModelResponse -> redact -> layout

and a snapshot write to the store. When the buffer cannot be decoded yet the
previous tick's response and grid are kept and the next chunk retries.
"""

from dataclasses import dataclass
from typing import Any, AsyncIterable, Dict, Optional, Union

from .analysis_store import AnalysisStatus, AnalysisStore
from .config import ReasonTreeConfig
from .layout import TreeGrid, layout_response
from .logger_config import logger
from .partial_json import decode_partial
from .redaction import redacted_payload, serialize_payload
from .stream_decoder import StreamAccumulator, approximate_tokens
from .tasks import ModelResponse

NO_CONTENT_MESSAGE = "No content received from stream"


class EmptyStreamError(RuntimeError):
    """Raised when a stream completes without any content."""


@dataclass
class TickSnapshot:
    """Result of processing one chunk.

    Attributes:
        iteration: Chunk counter, starting at 1
        response: Latest decoded response (possibly from an earlier tick)
        payload: Redacted projection of ``response``
        grid: Layout of ``response`` (None when there is nothing to render)
        tokens_read: Provider token count, or the approximate count
        decoded: Whether this tick's buffer decoded successfully
    """

    iteration: int
    response: Optional[ModelResponse]
    payload: Optional[Dict[str, Any]]
    grid: Optional[TreeGrid]
    tokens_read: int
    decoded: bool


class AnalysisSession:
    """Drives one analysis record from its first chunk to a final status."""

    def __init__(
        self,
        store: AnalysisStore,
        analysis_id: str,
        config: Optional[ReasonTreeConfig] = None,
    ):
        self.store = store
        self.analysis_id = analysis_id
        self.config = config or ReasonTreeConfig()
        self.accumulator = StreamAccumulator()
        self.last_response: Optional[ModelResponse] = None
        self.last_grid: Optional[TreeGrid] = None

    @property
    def tokens_read(self) -> int:
        if self.accumulator.total_tokens:
            return self.accumulator.total_tokens
        return approximate_tokens(self.accumulator.content, self.config.chars_per_token)

    def start(self) -> None:
        self.store.update_status(self.analysis_id, AnalysisStatus.PROCESSING)

    def _decode(self) -> bool:
        """Refresh the response and grid from the buffer; False if it did not decode."""
        response = ModelResponse.from_dict(decode_partial(self.accumulator.content))
        if response is None:
            return False
        self.last_response = response
        self.last_grid = layout_response(response)
        return True

    def _snapshot_response(self, payload: Optional[Dict[str, Any]], is_streaming: bool) -> Dict[str, Any]:
        return {
            "content": serialize_payload(payload),
            "iterationCount": self.accumulator.iteration_count,
            "isStreaming": is_streaming,
        }

    def feed(self, chunk: Union[bytes, str]) -> TickSnapshot:
        """Process one network chunk and write a streaming snapshot."""
        added = self.accumulator.feed(chunk)
        decoded = self._decode() if added else self.last_response is not None
        payload = redacted_payload(self.last_response, self.config.completion_marker)
        tokens = self.tokens_read

        self.store.update_with_response(
            self.analysis_id,
            response=self._snapshot_response(payload, is_streaming=True),
            status=AnalysisStatus.PROCESSING,
            tokens_read=tokens,
        )
        logger.debug(
            f"[AnalysisSession] {self.analysis_id} tick {self.accumulator.iteration_count}: "
            f"+{len(added)} chars, decoded={decoded}, rows={self.last_grid.row_count if self.last_grid else 0}",
        )
        return TickSnapshot(
            iteration=self.accumulator.iteration_count,
            response=self.last_response,
            payload=payload,
            grid=self.last_grid,
            tokens_read=tokens,
            decoded=decoded,
        )

    def finish(self) -> Optional[ModelResponse]:
        """Flush the stream and write the final status.

        Raises:
            EmptyStreamError: If the stream produced no content at all.
        """
        if self.accumulator.flush():
            self._decode()

        if not self.accumulator.content:
            self.fail(NO_CONTENT_MESSAGE)
            raise EmptyStreamError(NO_CONTENT_MESSAGE)

        answer = self.last_response.answer if self.last_response is not None else None
        self.store.update_with_response(
            self.analysis_id,
            response=self._snapshot_response(
                redacted_payload(self.last_response, self.config.completion_marker),
                is_streaming=False,
            ),
            status=AnalysisStatus.COMPLETED,
            tokens_read=self.tokens_read,
            answer=answer,
        )
        logger.info(
            f"[AnalysisSession] {self.analysis_id} completed after {self.accumulator.iteration_count} chunks ({self.tokens_read} tokens)",
        )
        return self.last_response

    def fail(self, error: Union[BaseException, str]) -> None:
        message = str(error) or type(error).__name__
        self.store.update_status(self.analysis_id, AnalysisStatus.FAILED, response={"content": message})
        logger.error(f"[AnalysisSession] {self.analysis_id} failed: {message}")

    async def consume(self, chunks: AsyncIterable[Union[bytes, str]]) -> Optional[ModelResponse]:
        """Run the whole stream: start, one tick per chunk, then finish.

        Any error marks the record failed and is re-raised.
        """
        self.start()
        try:
            async for chunk in chunks:
                self.feed(chunk)
        except Exception as e:
            self.fail(e)
            raise
        return self.finish()
