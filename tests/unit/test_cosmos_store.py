import unittest
from unittest.mock import MagicMock, patch

from azure.core.exceptions import ServiceRequestError
from azure.cosmos.exceptions import CosmosHttpResponseError

from nl2cosmos.common.errors import ErrorCode, StoreError
from nl2cosmos.common.settings import Settings
from nl2cosmos.store import CosmosDocumentStore, DocumentStore


def _settings(**values):
    base = {"COSMOS_ENDPOINT": None, "COSMOS_KEY": None}
    base.update(values)
    return Settings(_env_file=None, **base)


class _Pager:
    """Page iterator that updates its continuation token as pages are read."""

    def __init__(self, pages):
        self.pages = pages
        self.continuation_token = None

    def __iter__(self):
        for index, page in enumerate(self.pages):
            self.continuation_token = f"token-{index}" if index < len(self.pages) - 1 else None
            yield iter(page)


class TestCosmosDocumentStore(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.container = self.client.get_database_client.return_value.get_container_client.return_value
        self.container.client_connection.last_response_headers = {"x-ms-request-charge": "2.5"}
        self.store = CosmosDocumentStore(self.client, "TwinHumanDB")

    def test_satisfies_protocol(self):
        self.assertIsInstance(self.store, DocumentStore)
        self.client.get_database_client.assert_called_once_with("TwinHumanDB")

    def test_pages_with_request_charge(self):
        self.container.query_items.return_value.by_page.return_value = iter([
            iter([{"id": "1"}]),
            iter([{"id": "2"}, {"id": "3"}]),
        ])

        pages = list(self.store.query("Family", "SELECT * FROM c", "twin-1", 100))

        self.assertEqual(len(pages), 2)
        self.assertEqual([r["id"] for r in pages[1].records], ["2", "3"])
        self.assertEqual(pages[0].request_charge, 2.5)
        self.client.get_database_client.return_value.get_container_client.assert_called_with("Family")
        self.container.query_items.assert_called_once_with(
            query="SELECT * FROM c",
            partition_key="twin-1",
            max_item_count=100,
        )

    def test_continuation_token_marks_more_pages(self):
        self.container.query_items.return_value.by_page.return_value = _Pager([[{"id": "1"}], [{"id": "2"}]])

        pages = list(self.store.query("Family", "SELECT * FROM c", "twin-1", 1))

        self.assertEqual([page.has_more for page in pages], [True, False])

    def test_plain_iterator_leaves_more_pages_unknown(self):
        self.container.query_items.return_value.by_page.return_value = iter([iter([{"id": "1"}])])

        pages = list(self.store.query("Family", "SELECT * FROM c", "twin-1", 1))
        self.assertIsNone(pages[0].has_more)

    def test_missing_charge_header(self):
        self.container.client_connection.last_response_headers = {}
        self.container.query_items.return_value.by_page.return_value = iter([iter([])])

        pages = list(self.store.query("Family", "SELECT * FROM c", "twin-1", 10))
        self.assertEqual(pages[0].request_charge, 0.0)

    def test_http_error_becomes_store_error(self):
        self.container.query_items.return_value.by_page.side_effect = CosmosHttpResponseError(
            status_code=403, message="Forbidden"
        )

        with self.assertRaises(StoreError) as ctx:
            list(self.store.query("Family", "SELECT * FROM c", "twin-1", 10))

        self.assertEqual(ctx.exception.status_code, 403)
        self.assertEqual(ctx.exception.error_code, ErrorCode.EXECUTION_UNAUTHORIZED)
        self.assertIn("Cosmos DB error", ctx.exception.message)

    def test_charge_kept_when_failing_mid_stream(self):
        def pages():
            yield iter([{"id": "1"}])
            raise CosmosHttpResponseError(status_code=429, message="Request rate is large")

        self.container.query_items.return_value.by_page.return_value = pages()

        received = []
        with self.assertRaises(StoreError) as ctx:
            for page in self.store.query("Family", "SELECT * FROM c", "twin-1", 10):
                received.append(page)

        self.assertEqual(len(received), 1)
        self.assertEqual(ctx.exception.status_code, 429)
        self.assertEqual(ctx.exception.request_charge, 2.5)

    def test_transport_error_becomes_store_error(self):
        self.container.query_items.side_effect = ServiceRequestError("name resolution failed")

        with self.assertRaises(StoreError) as ctx:
            list(self.store.query("Family", "SELECT * FROM c", "twin-1", 10))
        self.assertIsNone(ctx.exception.status_code)
        self.assertEqual(ctx.exception.error_code, ErrorCode.STORE_ERROR)


class TestFromSettings(unittest.TestCase):
    def test_unconfigured_returns_none(self):
        self.assertIsNone(CosmosDocumentStore.from_settings(_settings()))
        self.assertIsNone(CosmosDocumentStore.from_settings(_settings(COSMOS_ENDPOINT="https://x.documents.azure.com")))

    @patch("nl2cosmos.store.cosmos_store.CosmosClient")
    def test_configured_builds_client(self, mock_client_cls):
        cfg = _settings(
            COSMOS_ENDPOINT="https://x.documents.azure.com",
            COSMOS_KEY="secret",
            COSMOS_DATABASE_NAME="FamilyDB",
        )
        store = CosmosDocumentStore.from_settings(cfg)

        mock_client_cls.assert_called_once_with(url="https://x.documents.azure.com", credential="secret")
        self.assertEqual(store.database_name, "FamilyDB")
        self.assertIs(store.client, mock_client_cls.return_value)


if __name__ == "__main__":
    unittest.main()
