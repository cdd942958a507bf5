from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from nl2cosmos.common.errors import PipelineError


class QueryRequest(BaseModel):
    """A single natural-language query request.

    All four caller-supplied fields are mandatory and must be non-blank.
    """

    schema_descriptor: str = Field(..., min_length=1, description="Field name to description mapping text.")
    container_name: str = Field(..., min_length=1)
    partition_key_value: str = Field(..., min_length=1, description="Tenant/owner identifier (the twin id).")
    question: str = Field(..., min_length=1)
    partition_key_field: str = Field(default="TwinID", min_length=1)

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True, extra="forbid")


class CompiledPrompt(BaseModel):
    system_instructions: str
    user_prompt: str

    model_config = ConfigDict(frozen=True)


class GenerationResult(BaseModel):
    """Outcome of the generate stages: a query or the errors that stopped it."""

    query: Optional[str] = None
    raw_completion: Optional[str] = None
    errors: List[PipelineError] = Field(default_factory=list)
    reasoning: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.query is not None and not any(e.is_fatal for e in self.errors)
