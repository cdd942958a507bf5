from typing import Iterator, List, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from nl2cosmos.common.json_utils import StoreRecord


class StorePage(BaseModel):
    """One page of query results together with the cost the store charged for it."""

    records: List[StoreRecord] = Field(default_factory=list)
    request_charge: float = Field(default=0.0, ge=0.0, description="Cost units (RU) charged for this page.")
    has_more: Optional[bool] = Field(
        default=None, description="Whether the store holds further pages; None when it cannot tell."
    )

    model_config = ConfigDict(extra="ignore")


@runtime_checkable
class DocumentStore(Protocol):
    """Contract for partitioned document store clients."""

    database_name: str

    def query(
        self,
        container_name: str,
        query_text: str,
        partition_key_value: str,
        max_item_count: int,
    ) -> Iterator[StorePage]:
        """Streams result pages for a query scoped to one partition.

        Raises:
            StoreError: With the store status code and the charge accumulated so far.
        """
        ...
