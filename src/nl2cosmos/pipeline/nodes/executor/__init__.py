from .node import DEFAULT_PAGE_SIZE_CAP, QueryExecutor
from .schemas import ExecutionReport

__all__ = ["DEFAULT_PAGE_SIZE_CAP", "QueryExecutor", "ExecutionReport"]
