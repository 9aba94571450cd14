"""Query plan nodes that implement filtering of rows.

A common request in queries is to filter the data to
pick only the rows that respect a specific filter.
An example is picking only the observations of 2007
out of all the years of a dataset.

This module implements the basic filtering capabilities.
"""

from .base import QueryPlanNode
from .expressions import Expression, apply_at_row


class FilterNode(QueryPlanNode):
    """Filter data based on a predicate expression.

    The filter expects an expression that when applied
    to the batch of data being filtered returns ``true``
    or ``false`` for each row in the data to mark which
    rows have to be preserved and which rows have to be discarded.

    Rows are emitted in the same order they were received,
    when no row matches the predicate an empty batch
    is emitted, so that the schema is preserved.

    >>> import pyarrow as pa
    >>> import pyarrow.compute as pc
    >>> from tabground.compute import col, lit, FunctionCallExpression, PyArrowTableDataSource
    >>> data = pa.record_batch({"year": [1952, 1957, 2002, 2007]})
    >>> predicate = FunctionCallExpression(pc.greater, col("year"), lit(2000))
    >>> next(FilterNode(predicate, PyArrowTableDataSource(data)).batches())["year"].to_pylist()
    [2002, 2007]
    """

    def __init__(self, expression: Expression, child: QueryPlanNode) -> None:
        """
        :param expression: The predicate expression to filter with.
        :param child: The node emitting the data to be filtered.
        """
        self.expression = expression
        self.child = child

    def __str__(self) -> str:
        return f"FilterNode(filter={self.expression}, child={self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Apply the filtering to the child node.

        For each recordbatch yielded by the child node,
        apply the expression and get back a mask
        (an array of only true/false values).

        Based on the mask filter the rows of the batch
        and return only those matching the filter.
        """
        row_offset = 0
        for batch in self.child.batches():
            mask = apply_at_row(self.expression, batch, row_offset)
            row_offset += batch.num_rows
            yield batch.filter(mask)
