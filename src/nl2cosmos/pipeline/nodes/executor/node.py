from __future__ import annotations

import re
import traceback
from typing import List, Optional

import pybreaker

from nl2cosmos.common.errors import (
    EngineError,
    ErrorCode,
    ErrorSeverity,
    ExecutionError,
    PipelineError,
    StoreError,
)
from nl2cosmos.common.json_utils import StoreRecord
from nl2cosmos.common.logger import get_logger
from nl2cosmos.store.mock import KeywordMockStrategy, MockRecordStrategy
from nl2cosmos.store.protocol import DocumentStore
from .schemas import ExecutionReport

logger = get_logger("query_executor")

NODE_NAME = "executor"
DEFAULT_PAGE_SIZE_CAP = 100

_SELECT_PREFIX = re.compile(r"^\s*SELECT\b", re.IGNORECASE)


class QueryExecutor:
    """Runs a normalized query against the partitioned store and reports the outcome.

    Without a store client the executor works in mock mode and returns canned
    records from the mock strategy, clearly labeled as test data. ``execute``
    never raises: every failure becomes an error-mode report.

    Attributes:
        store (Optional[DocumentStore]): Live store client, or None for mock mode.
        database_name (str): Database reported in the summary.
        partition_key_field (str): Partition field reported alongside the value.
        page_size_cap (int): Default maximum records read per query.
        mock_strategy (MockRecordStrategy): Canned record selection for mock mode.
        breaker (Optional[pybreaker.CircuitBreaker]): Fails fast on repeated store outages.
    """

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        database_name: str = "TwinHumanDB",
        partition_key_field: str = "TwinID",
        page_size_cap: int = DEFAULT_PAGE_SIZE_CAP,
        mock_strategy: Optional[MockRecordStrategy] = None,
        breaker: Optional[pybreaker.CircuitBreaker] = None,
    ):
        self.store = store
        self.database_name = store.database_name if store is not None else database_name
        self.partition_key_field = partition_key_field
        self.page_size_cap = page_size_cap
        self.mock_strategy = mock_strategy or KeywordMockStrategy()
        self.breaker = breaker

    @property
    def mock_mode(self) -> bool:
        return self.store is None

    def execute(
        self,
        query: str,
        container_name: str,
        partition_key_value: str,
        page_size_cap: Optional[int] = None,
    ) -> ExecutionReport:
        cap = page_size_cap if page_size_cap and page_size_cap > 0 else self.page_size_cap
        report = ExecutionReport(
            mode="mock" if self.mock_mode else "live",
            query=query,
            container_name=container_name or "",
            partition_key_field=self.partition_key_field,
            partition_key_value=partition_key_value or "",
            database_name=self.database_name,
            page_size_cap=cap,
        )

        try:
            self._check_inputs(query, container_name, partition_key_value)
            if self.mock_mode:
                return self._execute_mock(report, cap)
            return self._execute_live(report, cap)
        except EngineError as exc:
            return self._failed(report, exc.to_pipeline_error(NODE_NAME))
        except Exception as exc:
            logger.exception(f"Executor crash: {exc}")
            return self._failed(report, PipelineError(
                node=NODE_NAME,
                message=f"Unexpected error executing query: {exc}",
                severity=ErrorSeverity.CRITICAL,
                error_code=ErrorCode.EXECUTOR_CRASH,
                stack_trace=traceback.format_exc(),
            ))

    def _check_inputs(self, query: str, container_name: str, partition_key_value: str) -> None:
        if not query or not query.strip():
            raise ExecutionError("SQL query cannot be null or empty", ErrorCode.INVALID_REQUEST)
        if not container_name or not container_name.strip():
            raise ExecutionError("Container name cannot be null or empty", ErrorCode.INVALID_REQUEST)
        if not partition_key_value or not partition_key_value.strip():
            raise ExecutionError("Partition key value cannot be null or empty", ErrorCode.INVALID_REQUEST)
        if not _SELECT_PREFIX.match(query):
            raise ExecutionError("Only SELECT queries are allowed for execution", ErrorCode.INVALID_QUERY_SYNTAX)

    def _execute_mock(self, report: ExecutionReport, cap: int) -> ExecutionReport:
        logger.warning(f"Cosmos DB not configured; returning mock data for query: {report.query}")
        records = self.mock_strategy.records(report.query, self.partition_key_field, report.partition_key_value)
        return report.model_copy(update={
            "records": list(records)[:cap],
            "errors": [PipelineError(
                node=NODE_NAME,
                message="Store connection not configured; mock records substituted.",
                severity=ErrorSeverity.WARNING,
                error_code=ErrorCode.MOCK_MODE,
            )],
        })

    def _execute_live(self, report: ExecutionReport, cap: int) -> ExecutionReport:
        records: List[StoreRecord] = []
        charge = 0.0
        limit_reached = False

        def _read_pages() -> None:
            nonlocal charge, limit_reached
            pages = self.store.query(report.container_name, report.query, report.partition_key_value, cap)
            for page in pages:
                charge += page.request_charge
                remaining = cap - len(records)
                records.extend(page.records[:remaining])
                if len(records) >= cap:
                    # A full final page is not a truncation.
                    limit_reached = len(page.records) > remaining or page.has_more is not False
                    break

        try:
            if self.breaker is not None:
                self.breaker.call(_read_pages)
            else:
                _read_pages()
        except StoreError as exc:
            total = max(charge, exc.request_charge)
            logger.error(f"Cosmos DB error: {exc.message} (Status: {exc.status_code}, RU: {total:.2f})")
            failed = self._failed(report, PipelineError(
                node=NODE_NAME,
                message=f"{exc.message} (Status: {exc.status_code}, RU: {total:.2f})",
                severity=ErrorSeverity.ERROR,
                error_code=exc.error_code,
                details={"status_code": exc.status_code, "request_charge": total},
            ))
            return failed.model_copy(update={"request_charge": total})
        except pybreaker.CircuitBreakerError as exc:
            return self._failed(report, PipelineError(
                node=NODE_NAME,
                message=f"Cosmos DB unavailable, circuit breaker open: {exc}",
                severity=ErrorSeverity.ERROR,
                error_code=ErrorCode.SERVICE_UNAVAILABLE,
            )).model_copy(update={"request_charge": charge})

        logger.info(
            f"Executed query on {report.container_name}. Found {len(records)} results. RU consumed: {charge:.2f}"
        )
        return report.model_copy(update={
            "records": records,
            "request_charge": charge,
            "limit_reached": limit_reached,
        })

    def _failed(self, report: ExecutionReport, error: PipelineError) -> ExecutionReport:
        return report.model_copy(update={
            "mode": "error",
            "records": [],
            "limit_reached": False,
            "errors": report.errors + [error],
        })
