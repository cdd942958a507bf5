"""
Canned records used when no live store is configured.

The selection heuristic has no contract beyond being deterministic; callers
and tests should rely on the mock marker in the report, not on the records.
"""
from __future__ import annotations

from typing import List, Protocol, Sequence, Tuple, runtime_checkable

from nl2cosmos.common.json_utils import StoreRecord


@runtime_checkable
class MockRecordStrategy(Protocol):
    def records(self, query_text: str, partition_key_field: str, partition_key_value: str) -> List[StoreRecord]:
        ...


PERSON_KEYWORDS = ("daniel",)
PARENT_KEYWORDS = ("padre", "madre", "parent")


class KeywordMockStrategy:
    """Picks canned family records by sniffing keywords in the query text."""

    def __init__(
        self,
        person_keywords: Sequence[str] = PERSON_KEYWORDS,
        parent_keywords: Sequence[str] = PARENT_KEYWORDS,
    ):
        self.person_keywords: Tuple[str, ...] = tuple(k.lower() for k in person_keywords)
        self.parent_keywords: Tuple[str, ...] = tuple(k.lower() for k in parent_keywords)

    def records(self, query_text: str, partition_key_field: str, partition_key_value: str) -> List[StoreRecord]:
        lowered = query_text.lower()

        if any(k in lowered for k in self.person_keywords):
            return [{
                "id": "mock-daniel-001",
                partition_key_field: partition_key_value,
                "nombre": "Daniel",
                "apellido": "Luna",
                "parentesco": "Hermano",
                "email": "daniel.luna@example.com",
                "ocupacion": "Engineer",
                "genero": "Masculino",
                "pais_nacimiento": "Mexico",
            }]

        if any(k in lowered for k in self.parent_keywords):
            return [
                {
                    "id": "mock-parent-001",
                    partition_key_field: partition_key_value,
                    "nombre": "Carlos",
                    "apellido": "Luna",
                    "parentesco": "Padre",
                    "ocupacion": "Doctor",
                },
                {
                    "id": "mock-parent-002",
                    partition_key_field: partition_key_value,
                    "nombre": "Maria",
                    "apellido": "Luna",
                    "parentesco": "Madre",
                    "ocupacion": "Teacher",
                },
            ]

        return [{
            "id": "mock-family-001",
            partition_key_field: partition_key_value,
            "nombre": "Sample",
            "apellido": "Family",
            "parentesco": "Hermano",
            "email": "sample@example.com",
        }]
