"""
Orchestrates natural-language query generation and execution.

The public methods take plain text and always return plain text: either a
normalized query (``generate``) or a rendered report. Stage failures travel
inside a GenerationResult and are rendered as an error report at this
boundary, so callers never need to handle exceptions.
"""
from __future__ import annotations

import traceback
import uuid
from typing import Optional

import pybreaker
from pydantic import ValidationError

from nl2cosmos.common.errors import (
    EngineError,
    ErrorCode,
    ErrorSeverity,
    GenerationError,
    PipelineError,
)
from nl2cosmos.common.logger import get_logger, request_context
from nl2cosmos.common.resilience import create_llm_breaker, create_store_breaker
from nl2cosmos.common.settings import Settings, settings
from nl2cosmos.pipeline.nodes.compiler import PromptCompiler
from nl2cosmos.pipeline.nodes.executor import ExecutionReport, QueryExecutor
from nl2cosmos.pipeline.nodes.guard import InjectionGuard
from nl2cosmos.pipeline.nodes.normalizer import normalize
from nl2cosmos.pipeline.nodes.partition import PartitionFilterEnforcer
from nl2cosmos.pipeline.state import CompiledPrompt, GenerationResult, QueryRequest
from nl2cosmos.reporting import render_report
from nl2cosmos.services.llm import ChatModelOracle, CompletionOracle, build_chat_model
from nl2cosmos.store.cosmos_store import CosmosDocumentStore
from nl2cosmos.store.mock import MockRecordStrategy
from nl2cosmos.store.protocol import DocumentStore

logger = get_logger("query_engine")


def _new_trace_id() -> str:
    return uuid.uuid4().hex


class QueryEngine:
    """Composes guard, prompt compiler, oracle, normalizer, partition check and executor.

    Collaborators are injected once and reused; no state is kept between calls.
    """

    def __init__(
        self,
        oracle: Optional[CompletionOracle],
        executor: QueryExecutor,
        guard: Optional[InjectionGuard] = None,
        compiler: Optional[PromptCompiler] = None,
        partition_enforcer: Optional[PartitionFilterEnforcer] = None,
        partition_key_field: str = "TwinID",
    ):
        self.oracle = oracle
        self.executor = executor
        self.guard = guard or InjectionGuard()
        self.compiler = compiler or PromptCompiler()
        self.partition_enforcer = partition_enforcer or PartitionFilterEnforcer()
        self.partition_key_field = partition_key_field

    # Public text surface

    def generate(self, schema_descriptor: str, container_name: str, partition_key_value: str, question: str) -> str:
        """Returns the normalized query, or an error report when any stage fails."""
        with request_context(_new_trace_id(), container_name, partition_key_value):
            try:
                result = self._generate(schema_descriptor, container_name, partition_key_value, question)
                if result.ok:
                    return result.query
                return render_report(self._generation_error_report(
                    result, container_name, partition_key_value, question
                ))
            except Exception as exc:
                return self._crash_report(exc, container_name, partition_key_value, question)

    def execute(
        self,
        query: str,
        container_name: str,
        partition_key_value: str,
        page_size_cap: Optional[int] = None,
    ) -> str:
        """Executes a query directly (cached or hand-written) and returns the report."""
        with request_context(_new_trace_id(), container_name, partition_key_value):
            try:
                report = self.executor.execute(query, container_name, partition_key_value, page_size_cap)
                return render_report(report)
            except Exception as exc:
                return self._crash_report(exc, container_name, partition_key_value, query=query)

    def generate_and_execute(
        self,
        schema_descriptor: str,
        container_name: str,
        partition_key_value: str,
        question: str,
        page_size_cap: Optional[int] = None,
    ) -> str:
        """Generates a query and executes it; generation failures short-circuit to an error report."""
        with request_context(_new_trace_id(), container_name, partition_key_value):
            try:
                result = self._generate(schema_descriptor, container_name, partition_key_value, question)
                if not result.ok:
                    return render_report(self._generation_error_report(
                        result, container_name, partition_key_value, question
                    ))
                report = self.executor.execute(result.query, container_name, partition_key_value, page_size_cap)
                return render_report(report)
            except Exception as exc:
                return self._crash_report(exc, container_name, partition_key_value, question)

    # Pipeline

    def build_query(self, request: QueryRequest) -> GenerationResult:
        """Runs guard, compiler, oracle, normalizer and partition check for a validated request.

        Never raises: the first failing stage is recorded in ``errors``.
        """
        reasoning = []
        raw = None
        node = "guard"
        try:
            self.guard.check(request.question)

            node = "compiler"
            prompt = self.compiler.compile(request)

            node = "oracle"
            raw = self._complete(prompt)

            node = "normalizer"
            query = normalize(raw)
            reasoning.append({"node": node, "content": query})

            node = "partition_filter"
            check = self.partition_enforcer.enforce(
                query, request.partition_key_field, request.partition_key_value
            )
            reasoning.append({"node": node, "content": f"Partition filter {check.status}."})
        except EngineError as exc:
            logger.error(f"Query generation failed at {node}: {exc.message}")
            return GenerationResult(
                raw_completion=raw,
                errors=[exc.to_pipeline_error(node)],
                reasoning=reasoning,
            )

        logger.info(f"Generated query for question '{request.question}': {check.query}")
        return GenerationResult(query=check.query, raw_completion=raw, reasoning=reasoning)

    def _generate(
        self, schema_descriptor: str, container_name: str, partition_key_value: str, question: str
    ) -> GenerationResult:
        try:
            request = QueryRequest(
                schema_descriptor=schema_descriptor,
                container_name=container_name,
                partition_key_value=partition_key_value,
                question=question,
                partition_key_field=self.partition_key_field,
            )
        except ValidationError as exc:
            fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err.get("loc"))
            return GenerationResult(errors=[PipelineError(
                node="request",
                message=f"Invalid query request; missing or empty: {fields}",
                severity=ErrorSeverity.ERROR,
                error_code=ErrorCode.INVALID_REQUEST,
            )])
        return self.build_query(request)

    def _complete(self, prompt: CompiledPrompt) -> str:
        if self.oracle is None:
            raise GenerationError("No completion service is configured.", ErrorCode.MISSING_LLM)
        try:
            raw = self.oracle.complete(prompt.system_instructions, prompt.user_prompt)
        except pybreaker.CircuitBreakerError as exc:
            raise GenerationError(f"Completion service unavailable: {exc}", ErrorCode.SERVICE_UNAVAILABLE) from exc
        except Exception as exc:
            raise GenerationError(f"Completion service call failed: {exc}", ErrorCode.LLM_TRANSPORT_ERROR) from exc

        if not raw or not raw.strip():
            raise GenerationError("Completion service returned an empty response.", ErrorCode.EMPTY_COMPLETION)
        return raw

    # Reports

    def _generation_error_report(
        self, result: GenerationResult, container_name: str, partition_key_value: str, question: str
    ) -> ExecutionReport:
        return ExecutionReport(
            mode="error",
            question=question,
            container_name=container_name or "",
            partition_key_field=self.partition_key_field,
            partition_key_value=partition_key_value or "",
            database_name=self.executor.database_name,
            errors=result.errors,
        )

    def _crash_report(
        self,
        exc: Exception,
        container_name: str,
        partition_key_value: str,
        question: Optional[str] = None,
        query: Optional[str] = None,
    ) -> str:
        logger.exception(f"Query engine crash: {exc}")
        report = ExecutionReport(
            mode="error",
            query=query,
            question=question,
            container_name=str(container_name or ""),
            partition_key_field=self.partition_key_field,
            partition_key_value=str(partition_key_value or ""),
            database_name=self.executor.database_name,
            errors=[PipelineError(
                node="engine",
                message=f"Unexpected error in query generation and execution: {exc}",
                severity=ErrorSeverity.CRITICAL,
                error_code=ErrorCode.UNKNOWN_ERROR,
                stack_trace=traceback.format_exc(),
            )],
        )
        return render_report(report)


def build_engine(
    cfg: Optional[Settings] = None,
    oracle: Optional[CompletionOracle] = None,
    store: Optional[DocumentStore] = None,
    mock_strategy: Optional[MockRecordStrategy] = None,
) -> QueryEngine:
    """Wires a QueryEngine from settings.

    Collaborators passed explicitly take precedence. Without a configured
    Cosmos DB endpoint and key the executor runs in mock mode.
    """
    cfg = cfg or settings

    if oracle is None:
        llm = build_chat_model(cfg)
        if llm is not None:
            oracle = ChatModelOracle(
                llm,
                breaker=create_llm_breaker(cfg.llm_breaker_fail_max, cfg.breaker_reset_timeout_sec),
            )

    if store is None:
        store = CosmosDocumentStore.from_settings(cfg)
    if store is None:
        logger.warning("Cosmos DB connection not configured; queries will run in mock mode.")

    executor = QueryExecutor(
        store=store,
        database_name=cfg.cosmos_database_name,
        partition_key_field=cfg.partition_key_field,
        page_size_cap=cfg.page_size_cap,
        mock_strategy=mock_strategy,
        breaker=create_store_breaker(cfg.store_breaker_fail_max, cfg.breaker_reset_timeout_sec),
    )
    return QueryEngine(
        oracle=oracle,
        executor=executor,
        compiler=PromptCompiler(alias=cfg.container_alias),
        partition_enforcer=PartitionFilterEnforcer(
            policy=cfg.partition_filter_policy, default_alias=cfg.container_alias
        ),
        partition_key_field=cfg.partition_key_field,
    )
