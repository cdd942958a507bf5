"""Text rendering of execution reports.

Reports are meant to be embedded as context in follow-up prompts, so they are
plain text with stable labels rather than a structured payload.
"""
from __future__ import annotations

from typing import List

from nl2cosmos.common.json_utils import to_canonical_json
from nl2cosmos.pipeline.nodes.executor.schemas import ExecutionReport

MOCK_MARKER = "TEST MODE"
MOCK_NOTE = "NOTE: This is mock data for testing purposes. Real Cosmos DB connection not configured."
NOT_GENERATED = "(not generated)"

_HEADERS = {
    "live": "Cosmos DB Query Results:",
    "mock": f"{MOCK_MARKER} - Mock Cosmos DB Query Results:",
    "error": "Cosmos DB Query Error:",
}


def render_report(report: ExecutionReport) -> str:
    lines: List[str] = [
        _HEADERS[report.mode],
        f"Query: {report.query or NOT_GENERATED}",
        f"Container: {report.container_name}",
        f"Partition Key ({report.partition_key_field}): {report.partition_key_value}",
    ]
    if report.question:
        lines.append(f"Question: {report.question}")
    lines.append("")

    if report.mode == "error":
        for error in report.fatal_errors:
            lines.append(f"Error [{error.error_code.value}] in {error.node}: {error.message}")
        lines.append("")
    elif not report.records:
        lines.append("No results found for the query.")
        lines.append("")
    else:
        for index, record in enumerate(report.records, start=1):
            lines.append(f"Result {index}:")
            lines.append(to_canonical_json(record))
            lines.append("")

    mock = report.mode == "mock"
    lines.append("Mock Query Summary:" if mock else "Query Summary:")
    lines.append(f"  - Total Results: {report.record_count}")
    charge_suffix = " (Test Mode)" if mock else ""
    lines.append(f"  - Request Units (RU) Consumed: {report.request_charge:.2f}{charge_suffix}")
    lines.append(f"  - Database: {report.database_name}{' (Mock)' if mock else ''}")
    lines.append(f"  - Container: {report.container_name}")
    lines.append(f"  - Timestamp: {report.timestamp:%Y-%m-%d %H:%M:%S} UTC")
    if report.limit_reached:
        lines.append(f"  - Result limit reached: stopped after {report.page_size_cap} records")

    if mock:
        lines.append("")
        lines.append(MOCK_NOTE)

    return "\n".join(lines) + "\n"
