from __future__ import annotations

from typing import List, Sequence, Tuple

from pydantic import BaseModel, Field

from nl2cosmos.common.errors import ErrorCode, QueryValidationError
from nl2cosmos.common.logger import get_logger
from .patterns import PROMPT_INJECTION_PATTERNS, QUERY_INJECTION_PATTERNS

logger = get_logger("injection_guard")


class GuardVerdict(BaseModel):
    malicious_query: bool = False
    malicious_prompt: bool = False
    matched_patterns: List[str] = Field(default_factory=list)

    @property
    def is_malicious(self) -> bool:
        return self.malicious_query or self.malicious_prompt


class InjectionGuard:
    """Rejects questions carrying query-injection tokens or instruction-override phrases.

    Matching is a case-insensitive substring test against fixed pattern lists.
    The guard is pure and runs before the completion service is contacted.
    """

    def __init__(
        self,
        query_patterns: Sequence[str] = QUERY_INJECTION_PATTERNS,
        prompt_patterns: Sequence[str] = PROMPT_INJECTION_PATTERNS,
    ):
        self.query_patterns: Tuple[str, ...] = tuple(p.lower() for p in query_patterns)
        self.prompt_patterns: Tuple[str, ...] = tuple(p.lower() for p in prompt_patterns)

    def inspect(self, text: str) -> GuardVerdict:
        if not text:
            return GuardVerdict()

        lowered = text.lower()
        query_hits = [p for p in self.query_patterns if p in lowered]
        prompt_hits = [p for p in self.prompt_patterns if p in lowered]
        return GuardVerdict(
            malicious_query=bool(query_hits),
            malicious_prompt=bool(prompt_hits),
            matched_patterns=query_hits + prompt_hits,
        )

    def check(self, text: str) -> GuardVerdict:
        """Inspects the text and raises when any category trips.

        Raises:
            QueryValidationError: Coded QUERY_INJECTION or PROMPT_INJECTION.
        """
        verdict = self.inspect(text)
        if not verdict.is_malicious:
            return verdict

        categories = []
        if verdict.malicious_query:
            categories.append("query injection")
        if verdict.malicious_prompt:
            categories.append("prompt injection")
        logger.warning(
            f"Rejected question ({' and '.join(categories)}): matched {verdict.matched_patterns}"
        )

        code = ErrorCode.QUERY_INJECTION if verdict.malicious_query else ErrorCode.PROMPT_INJECTION
        raise QueryValidationError(
            f"Invalid or potentially harmful question detected ({', '.join(categories)}). "
            "Please rephrase your question.",
            error_code=code,
        )


def is_malicious(text: str) -> Tuple[bool, bool]:
    """Returns (malicious_query, malicious_prompt) using the default pattern lists."""
    verdict = InjectionGuard().inspect(text)
    return verdict.malicious_query, verdict.malicious_prompt
