"""Query plan nodes that implement projection of columns.

A common request in queries is to select specific columns
and project new columns based on expressions.
An example is deriving the population in millions
out of the population column.

This module implements the basic projection capabilities.
"""

import logging

import pyarrow as pa

from .base import QueryPlanNode, ensure_fields
from .expressions import Expression, apply_at_row

log = logging.getLogger(__name__)


class ProjectNode(QueryPlanNode):
    """Project data by selecting specific columns and computing expressions.

    The projection expects a list of column names to select and a dictionary
    of column names and expressions to project new columns.

    Projecting a column with the name of an already existing column
    replaces its data in place, the column keeps its position.

    >>> import pyarrow as pa
    >>> import pyarrow.compute as pc
    >>> from tabground.compute import col, lit, FunctionCallExpression, PyArrowTableDataSource
    >>> data = pa.record_batch({"country": ["A", "B"], "population": [10, 20]})
    >>> node = ProjectNode(
    ...     ["country"],
    ...     {"pop_millions": FunctionCallExpression(pc.divide, col("population"), lit(1e6))},
    ...     PyArrowTableDataSource(data),
    ... )
    >>> next(node.batches()).to_pylist()
    [{'country': 'A', 'pop_millions': 1e-05}, {'country': 'B', 'pop_millions': 2e-05}]
    """

    def __init__(
        self,
        select: list[str] | None,
        project: dict[str, Expression] | None,
        child: QueryPlanNode,
    ) -> None:
        """
        :param select: The list of column names to select.
                       ``None`` means select all columns.
                       ``[]`` means select only the projected columns.
        :param project: The dict {name: Expression} to project new columns.
        :param child: The node emitting the data to be projected.
        """
        self.select = select
        self.project = project or {}
        self.child = child

        if self.select is None:
            # No selection was provided, we will select all columns
            self.restrict_columns = None
        else:
            # This is the list of columns we want to keep,
            # in case select=[] it will only provide the project columns.
            self.restrict_columns = self.select + [
                name for name in self.project.keys() if name not in self.select
            ]

    def __str__(self) -> str:
        return f"ProjectNode(select={self.select}, project={self.project}, child={self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Apply the projection to the child node.

        For each recordbatch yielded by the child node,
        sequentially apply the expressions to project new columns
        and then select the requested columns.

        Expressions are applied in order, so an expression
        can refer to the columns projected before it.
        """
        row_offset = 0
        for batch in self.child.batches():
            num_rows = batch.num_rows
            for name, expr in self.project.items():
                batch = self._set_column(batch, name, apply_at_row(expr, batch, row_offset))
            row_offset += num_rows

            if self.restrict_columns is not None:
                ensure_fields(batch.schema, self.restrict_columns)
                batch = batch.select(self.restrict_columns)

            yield batch

    @staticmethod
    def _set_column(batch: pa.RecordBatch, name: str, data: pa.Array) -> pa.RecordBatch:
        """Append the column or replace it if it already exists."""
        if isinstance(data, pa.Scalar):
            # Literals have to be expanded to a full column.
            data = pa.array([data.as_py()] * batch.num_rows, type=data.type)
        index = batch.schema.get_field_index(name)
        if index == -1:
            return batch.append_column(name, data)
        log.debug("Overwriting column %s", name)
        return batch.set_column(index, name, data)
