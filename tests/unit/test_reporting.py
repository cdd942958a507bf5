import unittest
from datetime import datetime, timezone

from nl2cosmos.common.errors import ErrorCode, ErrorSeverity, PipelineError
from nl2cosmos.pipeline.nodes.executor import ExecutionReport
from nl2cosmos.reporting import MOCK_MARKER, MOCK_NOTE, render_report

FIXED_TIME = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _report(**kwargs):
    values = dict(
        mode="live",
        query="SELECT * FROM Family c WHERE c.TwinID = 'twin-1'",
        container_name="Family",
        partition_key_field="TwinID",
        partition_key_value="twin-1",
        database_name="TwinHumanDB",
        timestamp=FIXED_TIME,
    )
    values.update(kwargs)
    return ExecutionReport(**values)


class TestRenderReport(unittest.TestCase):
    def test_live_report_layout(self):
        text = render_report(_report(
            records=[{"id": "1", "nombre": "Daniel"}, {"id": "2", "apellido": "Muñoz"}],
            request_charge=3.456,
        ))
        lines = text.splitlines()

        self.assertEqual(lines[0], "Cosmos DB Query Results:")
        self.assertEqual(lines[1], "Query: SELECT * FROM Family c WHERE c.TwinID = 'twin-1'")
        self.assertEqual(lines[2], "Container: Family")
        self.assertEqual(lines[3], "Partition Key (TwinID): twin-1")
        self.assertIn("Result 1:", lines)
        self.assertIn("Result 2:", lines)
        self.assertIn('  "nombre": "Daniel"', lines)
        self.assertIn("Muñoz", text)
        self.assertIn("  - Total Results: 2", lines)
        self.assertIn("  - Request Units (RU) Consumed: 3.46", lines)
        self.assertIn("  - Database: TwinHumanDB", lines)
        self.assertIn("  - Timestamp: 2026-01-02 03:04:05 UTC", lines)
        self.assertNotIn(MOCK_MARKER, text)
        self.assertTrue(text.endswith("\n"))

    def test_empty_results(self):
        text = render_report(_report())
        self.assertIn("No results found for the query.", text)
        self.assertIn("Total Results: 0", text)

    def test_limit_line(self):
        text = render_report(_report(records=[{"id": "1"}], limit_reached=True, page_size_cap=1))
        self.assertIn("  - Result limit reached: stopped after 1 records", text)

    def test_mock_report_labeled(self):
        text = render_report(_report(
            mode="mock",
            records=[{"id": "mock-family-001"}],
            errors=[PipelineError(
                node="executor",
                message="mock records substituted",
                severity=ErrorSeverity.WARNING,
                error_code=ErrorCode.MOCK_MODE,
            )],
        ))
        self.assertTrue(text.startswith(f"{MOCK_MARKER} - Mock Cosmos DB Query Results:"))
        self.assertIn("Mock Query Summary:", text)
        self.assertIn("(Test Mode)", text)
        self.assertIn("  - Database: TwinHumanDB (Mock)", text)
        self.assertTrue(text.rstrip("\n").endswith(MOCK_NOTE))
        self.assertNotIn("Error [", text)

    def test_error_report(self):
        text = render_report(_report(
            mode="error",
            query=None,
            question="who are my parents?",
            errors=[PipelineError(
                node="oracle",
                message="Completion service call failed: timeout",
                severity=ErrorSeverity.ERROR,
                error_code=ErrorCode.LLM_TRANSPORT_ERROR,
            )],
        ))
        self.assertTrue(text.startswith("Cosmos DB Query Error:"))
        self.assertIn("Query: (not generated)", text)
        self.assertIn("Question: who are my parents?", text)
        self.assertIn("Error [LLM_TRANSPORT_ERROR] in oracle: Completion service call failed: timeout", text)
        self.assertIn("Total Results: 0", text)
        self.assertFalse(text.startswith("SELECT"))


if __name__ == "__main__":
    unittest.main()
