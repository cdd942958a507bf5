from .node import (
    PartitionCheck,
    PartitionFilterEnforcer,
    find_partition_values,
    inject_partition_filter,
    query_alias,
)

__all__ = [
    "PartitionCheck",
    "PartitionFilterEnforcer",
    "find_partition_values",
    "inject_partition_filter",
    "query_alias",
]
