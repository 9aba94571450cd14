"""Query plan nodes that perform sorting of data.

When computing ranks or looking for most significant
values, like the richest countries of a year, it's often
necessary to sort the data based on one or more columns.

This module implements the sorting capabilities.
"""

import pyarrow as pa

from .base import QueryPlanNode, empty_batch, ensure_fields


class SortNode(QueryPlanNode):
    """Sort data in-memory based on one or more columns.

    The node expects a list of columns and a list of
    sort directions. The data will be sorted based on
    the columns in the order they are provided.

    The sort directions are used to specify if the
    sorting should be ascending or descending.

    Sorting is stable: rows with equal keys keep the
    order they were received in, whatever the direction.

    >>> import pyarrow as pa
    >>> from tabground.compute import PyArrowTableDataSource
    >>> data = pa.record_batch({"values": [1, 2, 3, 4, 5]})
    >>> # Sort the data in descending order
    >>> sort = SortNode(["values"], [True], PyArrowTableDataSource(data))
    >>> next(sort.batches())["values"].to_pylist()
    [5, 4, 3, 2, 1]
    """

    def __init__(
        self, keys: list[str], descending: list[bool], child: QueryPlanNode
    ) -> None:
        """
        :param keys: The columns to sort by in the order they should be sorted.
        :param descending: If each columns should be sorted in a descending order.
        :param child: The node emitting the data to be sorted.
        """
        if len(keys) != len(descending):
            raise ValueError("Keys and descending must have the same length")

        self.keys = keys
        self.sorting = list(
            zip(keys, ("descending" if desc else "ascending" for desc in descending))
        )
        self.child = child

    def __str__(self) -> str:
        return f"SortNode(sorting={self.sorting}, {self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """The sorting to the child node.

        Batches provided by child node are accumulated
        until they are all loaded in memory, than they
        are merged and sorted as an unique table.
        """
        batches = list(self.child.batches())
        if not batches:
            return

        ensure_fields(batches[0].schema, self.keys)
        if len(batches) == 1:
            yield batches[0].sort_by(self.sorting)
            return

        # Tables can be built out of multiple batches at no cost
        # as they are based on ChunkedArrays.
        table = pa.Table.from_batches(batches)
        sorted_batches = table.sort_by(self.sorting).to_batches()
        if not sorted_batches:
            yield empty_batch(table.schema)
        yield from sorted_batches
