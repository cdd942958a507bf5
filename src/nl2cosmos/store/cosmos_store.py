from __future__ import annotations

from typing import Iterator, Mapping, Optional

from azure.core.exceptions import AzureError
from azure.cosmos import CosmosClient
from azure.cosmos.exceptions import CosmosHttpResponseError

from nl2cosmos.common.errors import StoreError
from nl2cosmos.common.logger import get_logger
from nl2cosmos.common.settings import Settings
from .protocol import StorePage

logger = get_logger("cosmos_store")

REQUEST_CHARGE_HEADER = "x-ms-request-charge"


def _request_charge(headers: Optional[Mapping[str, str]]) -> float:
    if not headers:
        return 0.0
    try:
        return float(headers.get(REQUEST_CHARGE_HEADER, 0) or 0)
    except (TypeError, ValueError):
        return 0.0


def _has_more(pager) -> Optional[bool]:
    # Azure page iterators expose the continuation token of the page just read.
    if not hasattr(pager, "continuation_token"):
        return None
    return bool(pager.continuation_token)


class CosmosDocumentStore:
    """Azure Cosmos DB (SQL API) implementation of the DocumentStore contract.

    The client is created once and reused; container clients are resolved per query.
    """

    def __init__(self, client: CosmosClient, database_name: str):
        self.client = client
        self.database_name = database_name
        self._database = client.get_database_client(database_name)

    @classmethod
    def from_settings(cls, cfg: Settings) -> Optional["CosmosDocumentStore"]:
        """Returns a store when both endpoint and key are configured, else None."""
        if not cfg.store_configured:
            return None
        client = CosmosClient(url=cfg.cosmos_endpoint, credential=cfg.cosmos_key)
        logger.info(f"Cosmos DB store configured for database '{cfg.cosmos_database_name}'.")
        return cls(client, cfg.cosmos_database_name)

    def query(
        self,
        container_name: str,
        query_text: str,
        partition_key_value: str,
        max_item_count: int,
    ) -> Iterator[StorePage]:
        container = self._database.get_container_client(container_name)
        charged = 0.0
        try:
            pager = container.query_items(
                query=query_text,
                partition_key=partition_key_value,
                max_item_count=max_item_count,
            ).by_page()
            for page in pager:
                records = list(page)
                page_charge = _request_charge(container.client_connection.last_response_headers)
                charged += page_charge
                yield StorePage(records=records, request_charge=page_charge, has_more=_has_more(pager))
        except CosmosHttpResponseError as exc:
            charged += _request_charge(getattr(exc, "headers", None))
            raise StoreError(
                f"Cosmos DB error: {exc.message}",
                status_code=exc.status_code,
                request_charge=charged,
            ) from exc
        except AzureError as exc:
            raise StoreError(f"Cosmos DB transport error: {exc}", request_charge=charged) from exc
