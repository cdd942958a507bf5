import logging
import json

from nl2cosmos.common.logger import configure_logging, current_trace_id, get_logger, request_context


def _format(record):
    handler = logging.getLogger().handlers[0]
    handler.filter(record)
    return handler.formatter.format(record)


class TestStructuredLogging:

    def teardown_method(self):
        configure_logging()

    def test_json_output_carries_request_fields(self):
        configure_logging(json_format=True)

        record = logging.LogRecord("query_engine", logging.INFO, "path", 1, "generated query", {}, None)
        record.ru = 2.5
        with request_context("trace-123", "Family", "twin-1"):
            output = _format(record)

        data = json.loads(output)
        assert data["message"] == "generated query"
        assert data["trace_id"] == "trace-123"
        assert data["container"] == "Family"
        assert data["partition_key"] == "twin-1"
        assert data["level"] == "INFO"
        assert data["ru"] == 2.5

    def test_json_omits_unset_fields(self):
        configure_logging(json_format=True)

        record = logging.LogRecord("query_engine", logging.INFO, "path", 1, "startup", {}, None)
        data = json.loads(_format(record))
        assert "trace_id" not in data
        assert "container" not in data

    def test_plain_format_includes_trace_id(self):
        configure_logging(json_format=False)

        record = logging.LogRecord("query_executor", logging.WARNING, "path", 1, "mock mode", {}, None)
        with request_context("trace-999"):
            output = _format(record)
        assert "[trace-999]" in output
        assert "mock mode" in output

    def test_request_context_resets(self):
        assert current_trace_id() is None
        with request_context("outer", "Family"):
            with request_context("inner"):
                assert current_trace_id() == "inner"
            assert current_trace_id() == "outer"
        assert current_trace_id() is None

    def test_level_and_noisy_libraries(self):
        configure_logging(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("azure").level == logging.WARNING
        assert len(logging.getLogger().handlers) == 1
        assert get_logger("query_executor").name == "query_executor"
