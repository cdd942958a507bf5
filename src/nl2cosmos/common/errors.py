from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict


class ErrorSeverity(str, Enum):
    """Severity levels for pipeline errors."""
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ErrorCode(str, Enum):
    """Standardized error codes for the query engine."""
    INVALID_REQUEST = "INVALID_REQUEST"
    QUERY_INJECTION = "QUERY_INJECTION"
    PROMPT_INJECTION = "PROMPT_INJECTION"
    MISSING_LLM = "MISSING_LLM"
    EMPTY_COMPLETION = "EMPTY_COMPLETION"
    LLM_TRANSPORT_ERROR = "LLM_TRANSPORT_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    INVALID_QUERY_SYNTAX = "INVALID_QUERY_SYNTAX"
    PARTITION_FILTER_MISSING = "PARTITION_FILTER_MISSING"
    PARTITION_FILTER_MISMATCH = "PARTITION_FILTER_MISMATCH"
    STORE_ERROR = "STORE_ERROR"
    EXECUTION_TIMEOUT = "EXECUTION_TIMEOUT"
    EXECUTION_UNAUTHORIZED = "EXECUTION_UNAUTHORIZED"
    EXECUTOR_CRASH = "EXECUTOR_CRASH"
    MOCK_MODE = "MOCK_MODE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class PipelineError(BaseModel):
    """Represents a structured error within the query pipeline.

    Attributes:
        node (str): The stage where the error occurred.
        message (str): A human-readable error message.
        severity (ErrorSeverity): The severity of the error.
        error_code (ErrorCode): The standardized error code.
        stack_trace (Optional[str]): Stack trace if applicable.
        details (Optional[Any]): Additional context or metadata.
    """
    model_config = ConfigDict(extra="ignore")

    node: str
    message: str
    severity: ErrorSeverity
    error_code: ErrorCode
    stack_trace: Optional[str] = None
    details: Optional[Any] = None

    @property
    def is_fatal(self) -> bool:
        """Whether this error stops the request."""
        return self.severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)


class EngineError(Exception):
    """Base class for typed failures raised inside pipeline stages."""

    error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR
    severity: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(self, message: str, error_code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code

    def to_pipeline_error(self, node: str) -> PipelineError:
        return PipelineError(
            node=node,
            message=self.message,
            severity=self.severity,
            error_code=self.error_code,
        )


class QueryValidationError(EngineError):
    """The question or the generated query failed a safety check."""
    error_code = ErrorCode.INVALID_REQUEST
    severity = ErrorSeverity.CRITICAL


class GenerationError(EngineError):
    """The completion service failed or returned unusable output."""
    error_code = ErrorCode.EMPTY_COMPLETION


class QuerySyntaxError(EngineError):
    """The cleaned completion text is not a SELECT statement."""
    error_code = ErrorCode.INVALID_QUERY_SYNTAX


class ExecutionError(EngineError):
    """The store rejected or failed the query."""
    error_code = ErrorCode.STORE_ERROR


class StoreError(ExecutionError):
    """Raised by store clients; carries the store status and the charge spent so far."""

    def __init__(self, message: str, status_code: Optional[int] = None, request_charge: float = 0.0):
        super().__init__(message, error_code=_code_for_status(status_code))
        self.status_code = status_code
        self.request_charge = request_charge


def _code_for_status(status_code: Optional[int]) -> ErrorCode:
    if status_code in (401, 403):
        return ErrorCode.EXECUTION_UNAUTHORIZED
    if status_code in (408, 504):
        return ErrorCode.EXECUTION_TIMEOUT
    return ErrorCode.STORE_ERROR
