"""The Tabground Compute Engine

The compute engine defines the in-memory
format for query plans and the plan nodes
supported.

The compute engine is tightly bound to Apache Arrow,
thus the engine will expect to always deal with
:class:`pyarrow.RecordBatch` and emit a new RecordBatch
as the result of the node execution.

This allows to easily build compute pipelines like::

    (RecordBatch)-->Node1--(RecordBatch)-->Node2--(RecordBatch)-->...

The query plan nodes themselves are in charge of their execution,
this keeps the behavior near to the node and thus makes easy to
know how a Node is actually executed without having to look around too much.

Building a query plan requires to combine the nodes that we want
to be executed starting with one or more ``DataSource`` nodes as the
leafs node of a query:

>>> import pyarrow as pa
>>> data = pa.table({
...    "country": pa.array(["Afghanistan", "Australia", "Kuwait"]),
...    "life_expectancy": pa.array([43.828, 81.235, 77.588])
... })
>>>
>>> import pyarrow.compute as pc
>>> from tabground.compute import col, PyArrowTableDataSource
>>> from tabground.compute import FilterNode, FunctionCallExpression
>>> # countries where people live at least 70 years
>>> query = FilterNode(
...     FunctionCallExpression(pc.greater_equal, col("life_expectancy"), 70),
...     child=PyArrowTableDataSource(
...         data
...     )
... )
>>> for data in query.batches():
...     print(data["country"].to_pylist())
['Australia', 'Kuwait']
"""

from .aggregate import (
    AggregateNode,
    CountAggregation,
    CountDistinctAggregation,
    MaxAggregation,
    MeanAggregation,
    MedianAggregation,
    MinAggregation,
    SumAggregation,
    make_aggregation,
)
from .base import ColumnRef, Expression, Literal, QueryPlanNode, col, lit
from .datasources import CSVDataSource, PyArrowTableDataSource
from .expressions import FunctionCallExpression, RowFunctionExpression
from .filtering import FilterNode
from .pagination import PaginateNode
from .selection import ProjectNode
from .sorting import SortNode

__all__ = (
    "QueryPlanNode",
    "Expression",
    "CSVDataSource",
    "PyArrowTableDataSource",
    "FilterNode",
    "FunctionCallExpression",
    "RowFunctionExpression",
    "col",
    "lit",
    "ColumnRef",
    "Literal",
    "PaginateNode",
    "SortNode",
    "ProjectNode",
    "AggregateNode",
    "CountAggregation",
    "CountDistinctAggregation",
    "MaxAggregation",
    "MeanAggregation",
    "MedianAggregation",
    "MinAggregation",
    "SumAggregation",
    "make_aggregation",
)
