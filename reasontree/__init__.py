# -*- coding: utf-8 -*-
"""reasontree: live tree layout for streamed reasoning responses.

This package provides:
- decode_partial: best-effort decoding of a truncated JSON buffer
- Task / ModelResponse: the reasoning task model
- redact_response: marker-based redaction for storage snapshots
- build_grid: grid layout of a task forest for tree rendering
- AnalysisSession: per-chunk pipeline writing snapshots to an AnalysisStore
"""

from reasontree.analysis_session import AnalysisSession, EmptyStreamError, TickSnapshot
from reasontree.analysis_store import (
    AnalysisNotFoundError,
    AnalysisRecord,
    AnalysisStatus,
    AnalysisStore,
    InvalidAnalysisRequestError,
)
from reasontree.config import ConfigError, ReasonTreeConfig, load_config
from reasontree.layout import (
    ConnectorCell,
    NodeCell,
    TreeGrid,
    build_grid,
    layout_response,
    max_depth,
    node_columns_for_depth,
)
from reasontree.partial_json import decode_partial
from reasontree.redaction import redact_response, redacted_payload
from reasontree.tasks import ModelResponse, Task, ToolUse

__version__ = "0.1.0"

__all__ = [
    "AnalysisNotFoundError",
    "AnalysisRecord",
    "AnalysisSession",
    "AnalysisStatus",
    "AnalysisStore",
    "ConfigError",
    "ConnectorCell",
    "EmptyStreamError",
    "InvalidAnalysisRequestError",
    "ModelResponse",
    "NodeCell",
    "ReasonTreeConfig",
    "Task",
    "TickSnapshot",
    "ToolUse",
    "TreeGrid",
    "build_grid",
    "decode_partial",
    "layout_response",
    "load_config",
    "max_depth",
    "node_columns_for_depth",
    "redact_response",
    "redacted_payload",
]
