# -*- coding: utf-8 -*-
"""
In-memory store for analysis records.

Each analysis request becomes a record that moves through
pending -> processing -> completed | failed while its response streams in.
The streaming session patches the record on every tick so readers always see
the latest snapshot.
"""

import copy
import threading
import time
import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .logger_config import logger


class AnalysisStatus(Enum):
    """Lifecycle states of an analysis record."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class AnalysisNotFoundError(KeyError):
    """Raised when an analysis id is unknown."""


class InvalidAnalysisRequestError(ValueError):
    """Raised when an analysis request is missing required fields."""


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class AnalysisRecord:
    """Stored state of one analysis.

    Attributes:
        id: Record identifier
        paper_url: The document the analysis was requested for
        status: Current lifecycle state
        created_at: Creation time in epoch milliseconds
        updated_at: Time of the last patch in epoch milliseconds
        title: Optional display title
        answer: Final answer once the stream has completed
        response: Latest snapshot (streaming) or final payload
        tokens_read: Tokens consumed so far
    """

    id: str
    paper_url: str
    status: AnalysisStatus = AnalysisStatus.PENDING
    created_at: int = 0
    updated_at: Optional[int] = None
    title: Optional[str] = None
    answer: Optional[str] = None
    response: Any = None
    tokens_read: Optional[int] = None


class AnalysisStore:
    """Thread-safe dictionary of analysis records keyed by id."""

    def __init__(self) -> None:
        self._records: Dict[str, AnalysisRecord] = {}
        self._lock = threading.Lock()

    def create_analysis(self, paper_url: str) -> str:
        """Create a pending analysis and return its id."""
        if not isinstance(paper_url, str) or not paper_url.strip():
            raise InvalidAnalysisRequestError("paper_url is required")

        analysis_id = uuid.uuid4().hex
        record = AnalysisRecord(id=analysis_id, paper_url=paper_url.strip(), created_at=_now_ms())
        with self._lock:
            self._records[analysis_id] = record
        logger.info(f"[AnalysisStore] Created analysis {analysis_id} for {record.paper_url}")
        return analysis_id

    def get_analysis(self, analysis_id: str) -> AnalysisRecord:
        """Return a copy of the record."""
        with self._lock:
            record = self._records.get(analysis_id)
            if record is None:
                raise AnalysisNotFoundError(analysis_id)
            return copy.deepcopy(record)

    def list_analyses(self) -> List[AnalysisRecord]:
        """All records, newest first."""
        with self._lock:
            records = [copy.deepcopy(r) for r in self._records.values()]
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    def update_status(
        self,
        analysis_id: str,
        status: Union[AnalysisStatus, str],
        response: Any = None,
    ) -> None:
        """Set the status; ``response`` replaces the stored response."""
        self._patch(analysis_id, status=AnalysisStatus(status), response=response)

    def update_with_response(
        self,
        analysis_id: str,
        response: Any,
        status: Union[AnalysisStatus, str],
        tokens_read: Optional[int] = None,
        answer: Optional[str] = None,
    ) -> None:
        """Store a response snapshot together with status and token count."""
        self._patch(
            analysis_id,
            status=AnalysisStatus(status),
            response=response,
            tokens_read=tokens_read,
            answer=answer,
        )

    def _patch(self, analysis_id: str, **changes: Any) -> None:
        with self._lock:
            record = self._records.get(analysis_id)
            if record is None:
                raise AnalysisNotFoundError(analysis_id)
            previous = record.status
            self._records[analysis_id] = replace(record, updated_at=_now_ms(), **copy.deepcopy(changes))
        if previous != changes["status"]:
            logger.info(f"[AnalysisStore] {analysis_id}: {previous.value} -> {changes['status'].value}")
