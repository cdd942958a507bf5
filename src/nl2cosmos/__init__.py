# nl2cosmos package

from .engine import QueryEngine, build_engine
from .reporting import MOCK_MARKER, render_report
from .pipeline.state import QueryRequest, GenerationResult
from .pipeline.nodes.executor import ExecutionReport, QueryExecutor
from .pipeline.nodes.guard import InjectionGuard, is_malicious
from .pipeline.nodes.normalizer import normalize
from .schema import build_schema_descriptor

from .common.errors import (
    ErrorSeverity,
    ErrorCode,
    PipelineError,
    EngineError,
    QueryValidationError,
    GenerationError,
    QuerySyntaxError,
    ExecutionError,
    StoreError,
)

__all__ = [
    "QueryEngine",
    "build_engine",
    "MOCK_MARKER",
    "render_report",
    "QueryRequest",
    "GenerationResult",
    "ExecutionReport",
    "QueryExecutor",
    "InjectionGuard",
    "is_malicious",
    "normalize",
    "build_schema_descriptor",
    "ErrorSeverity",
    "ErrorCode",
    "PipelineError",
    "EngineError",
    "QueryValidationError",
    "GenerationError",
    "QuerySyntaxError",
    "ExecutionError",
    "StoreError",
]
