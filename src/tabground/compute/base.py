"""Base classes and interfaces for Compute Engine

This module defines the base components that are
necessary to represent a query plan and execute it.
"""

import abc
from typing import Any, Generator, Iterable

import pyarrow as pa

from ..errors import SchemaError


class QueryPlanNode(abc.ABC):
    """A node of a query execution plan.

    The Query plan is represented as a tree
    of nodes. Each node is a step in the execution
    and all previous steps are children of the
    last one.

    For example a simple plan might involve
    loading data and filtering it::

        LoadDataNode -> FilterDataNode(filter)

    That would be a plan where the last step
    is filtering, and the LoadDataNode is a child
    of the filter node.

    Each Node accepts :class:`pyarrow.RecordBatch`
    data as its input and emits a new
    :class:`pyarrow.RecordBatch` as its output.
    Nodes never modify the batches they receive,
    they always emit new ones, so the same data
    can safely feed multiple plans.

    For example a simple node that takes data
    and just forwards it as is after logging
    how many rows it saw can be implemented as::

        class DebugDataNode(QueryPlanNode):
            def __init__(self, child):
                self.child = child

            def batches(self):
                for b in self.child.batches():
                    log.debug("%d rows", b.num_rows)
                    yield b

            def __str__(self):
                return f"DebugDataNode({self.child})"
    """

    RecordBatchesGenerator = Generator[pa.RecordBatch, None, None]

    @abc.abstractmethod
    def batches(self) -> RecordBatchesGenerator:
        """Emits the batches for the next node.

        Each QueryPlan node is expected to be able to
        generate data that has to be provided to the next
        node in the plan.

        Usually this happens by consuming data from its
        child nodes, transforming it somehow, and yielding
        it back to the next consumer.
        """
        ...

    @abc.abstractmethod
    def __str__(self) -> str:
        """Human readable representation of the node."""
        ...


class Expression(abc.ABC):
    """Expression to apply to a RecordBatch.

    Expressions are some form of operation that
    has to be applied to the data of a :class:`pyarrow.RecordBatch`
    to create new data.

    Typical example of expressions are: ``population / 1e6``
    which is expected to divide the population column
    of the RecordBatch by a million and return the result.

    As our engine is Column Major, applying an expression
    always results in a new column, thus in a
    :class:`pyarrow.Array` that contains the data
    for that column.
    """

    @abc.abstractmethod
    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        """Apply the expression to a RecordBatch.

        Expression classes must implement this method
        to dictate what will happen when an expression
        is applied.
        """
        ...

    @abc.abstractmethod
    def __str__(self) -> str:
        """Human readable representation of the expression."""
        ...


class ColumnRef(Expression):
    """References a column in a record batch.

    When another expression or the engine need
    to operate on a specific column, we will
    need a way to reference that column and its data.

    This expression is aware of the column and when
    applied to a record batch returns the data for
    that column.
    """

    def __init__(self, name: str) -> None:
        """
        :param name: The name of the column being referenced.
        """
        self.name = name

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        """Get the data for the column.

        :raises SchemaError: if the batch has no such column.
        """
        ensure_fields(batch.schema, [self.name])
        return batch.column(self.name)

    def __str__(self) -> str:
        return f"ColumnRef({self.name})"


class Literal(Expression):
    """A constant value.

    Applying a literal returns the value itself as
    a :class:`pyarrow.Scalar`, compute functions
    will broadcast it over the other arguments.
    """

    def __init__(self, value: Any) -> None:
        self.value = value

    def apply(self, batch: pa.RecordBatch) -> pa.Scalar:
        return pa.scalar(self.value)

    def __str__(self) -> str:
        return f"Literal({self.value!r})"


col = ColumnRef
lit = Literal


def ensure_fields(schema: pa.Schema, names: Iterable[str]) -> None:
    """Check that all the named fields exist in the schema.

    :raises SchemaError: naming the first missing field.
    """
    for name in names:
        if schema.get_field_index(name) == -1:
            raise SchemaError.unknown_field(name, schema.names)


def empty_batch(schema: pa.Schema) -> pa.RecordBatch:
    """A RecordBatch with no rows but carrying the schema."""
    return pa.RecordBatch.from_pylist([], schema=schema)
