from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from nl2cosmos.common.errors import PipelineError
from nl2cosmos.common.json_utils import StoreRecord

ReportMode = Literal["live", "mock", "error"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExecutionReport(BaseModel):
    """Everything the text report needs; successful, mock and error runs share this shape."""

    mode: ReportMode
    query: Optional[str] = None
    question: Optional[str] = None
    container_name: str = ""
    partition_key_field: str = "TwinID"
    partition_key_value: str = ""
    database_name: str = ""
    records: List[StoreRecord] = Field(default_factory=list)
    request_charge: float = 0.0
    limit_reached: bool = False
    page_size_cap: Optional[int] = None
    errors: List[PipelineError] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(extra="ignore")

    @property
    def record_count(self) -> int:
        return len(self.records)

    @property
    def fatal_errors(self) -> List[PipelineError]:
        return [e for e in self.errors if e.is_fatal]
