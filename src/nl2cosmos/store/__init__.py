from .protocol import DocumentStore, StorePage
from .mock import KeywordMockStrategy, MockRecordStrategy
from .cosmos_store import CosmosDocumentStore

__all__ = [
    "DocumentStore",
    "StorePage",
    "KeywordMockStrategy",
    "MockRecordStrategy",
    "CosmosDocumentStore",
]
