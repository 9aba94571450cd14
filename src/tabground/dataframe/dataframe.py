"""The Dataframe object itself."""
from typing import Any, Callable, Self

import pyarrow as pa

from ..charts import ChartDescription, ChartSpec, render
from ..compute import (
  AggregateNode,
  CSVDataSource,
  FilterNode,
  PaginateNode,
  ProjectNode,
  PyArrowTableDataSource,
  SortNode,
  make_aggregation,
)
from ..compute.aggregate import Aggregation
from ..compute.base import QueryPlanNode
from ..compute.expressions import Expression, as_expression
from ..datasets import load_dataset
from ..utils.tabulate import tabulate

ColumnExpression = Expression | Callable[[dict], Any]


class Dataframe:
  """Data structure that handles data in rows and columns.

  The Dataframe object allows to represent in-memory data
  and perform transformations over it.

  The tabground dataframe object is lazy, which means that
  any transformation or analysis will be applied only when the
  ``.collect()`` method will be invoked and no data is kept
  in memory until that moment (unless it already was).

  Dataframes are immutable, each transformation returns
  a new Dataframe and leaves the original one untouched,
  so analysis steps can be chained::

    Dataframe.from_dataset("gapminder") \\
      .filter(FunctionCallExpression(pc.equal, col("year"), 2007)) \\
      .mutate(pop_millions=lambda r: r["population"] / 1e6) \\
      .arrange("gdp_per_capita", descending=True) \\
      .head(10)
  """
  def __init__(self, node_or_table: QueryPlanNode | pa.Table) -> None:
    """
    :param node_or_table: A compute engine node expected to emit
                          the data for the dataframe or a `pyarrow.Table`.
    """
    if isinstance(node_or_table, (pa.Table, pa.RecordBatch)):
      node_or_table = PyArrowTableDataSource(node_or_table)

    if not isinstance(node_or_table, QueryPlanNode):
      raise ValueError("Invalid input, expected a QueryPlanNode or a PyArrow Table")

    self.node = node_or_table

  @classmethod
  def open_csv(cls, filename: str) -> Self:
    """Open a CSV file and create a Dataframe out of its data.

    :param filename: The path to a local CSV file.
    """
    return cls(CSVDataSource(filename))

  @classmethod
  def from_dataset(cls, name: str = "gapminder") -> Self:
    """Create a Dataframe out of one of the registered datasets.

    :param name: The name of the dataset, see :func:`tabground.datasets.load_dataset`.
    """
    return cls(load_dataset(name))

  def filter(self, predicate: ColumnExpression) -> Self:
    """Apply a filter to the data and return a new Dataframe.

    The returned dataframe will only contain the data that
    matches the filter predicate.

    :param predicate: The expression representing the predicate.
                      for example `year == 2007`, or a function
                      receiving each record and returning ``True``
                      for the records to keep.
    """
    return self.__class__(FilterNode(as_expression(predicate), self.node))

  def mutate(self, **columns: ColumnExpression) -> Self:
    """Add or replace columns computed from the existing ones.

    Each keyword argument is the name of the column and
    the expression (or function of the record) computing it.
    Columns are computed in order, so later ones
    can refer to the earlier ones.
    """
    project = {name: as_expression(expr) for name, expr in columns.items()}
    return self.__class__(ProjectNode(None, project, self.node))

  def select(self, *names: str) -> Self:
    """Keep only the named columns, in the given order."""
    return self.__class__(ProjectNode(list(names), None, self.node))

  def arrange(self, *keys: str, descending: bool | list[bool] = False) -> Self:
    """Sort the rows by one or more columns.

    Rows with equal keys preserve their relative order.

    :param keys: The columns to sort by.
    :param descending: Direction of the sorting, for all keys or one for each key.
    """
    if isinstance(descending, bool):
      descending = [descending] * len(keys)
    return self.__class__(SortNode(list(keys), list(descending), self.node))

  def group_by(self, *keys: str) -> "GroupedDataframe":
    """Group the rows sharing the same values for the keys.

    The groups have to be reduced through :meth:`GroupedDataframe.summarize`.
    """
    return GroupedDataframe(self, list(keys))

  def head(self, n: int = 5) -> Self:
    """Only the first ``n`` rows."""
    return self.__class__(PaginateNode(0, n, self.node))

  def collect(self) -> Self:
    """Collect all data of the dataframe in memory.

    Returns a new Dataframe that has all data from the
    previous dataframe eagerly loaded in memory.
    """
    return self.__class__(self.to_arrow())

  def to_arrow(self) -> pa.Table:
    """Collect all the data and return a pyarrow.Table"""
    return pa.Table.from_batches(self.node.batches())

  def to_pylist(self) -> list[dict]:
    """Collect all the data as a list of records."""
    return self.to_arrow().to_pylist()

  @property
  def schema(self) -> pa.Schema:
    return self.to_arrow().schema

  def plot(self, spec: ChartSpec) -> ChartDescription:
    """Describe a chart of the data of the dataframe.

    The description can then be drawn through :func:`tabground.charts.draw`.
    """
    return render(self.to_arrow(), spec)

  def __str__(self) -> str:
    return tabulate(self.to_arrow())


class GroupedDataframe:
  """A Dataframe whose rows were grouped by some keys.

  The only thing that can be done with a grouped dataframe
  is to summarize each group to a single row.
  """
  def __init__(self, dataframe: Dataframe, keys: list[str]) -> None:
    self.dataframe = dataframe
    self.keys = keys

  def summarize(self, **aggregations: Aggregation | tuple[str, str]) -> Dataframe:
    """Reduce each group to a single row.

    Each keyword argument is the name of the resulting column and
    the aggregation computing it, either an :class:`Aggregation`
    or a ``(reduction, column)`` tuple like ``("median", "life_expectancy")``.

    The rows are sorted by the grouping keys.
    """
    aggregations = {
      name: make_aggregation(aggr) for name, aggr in aggregations.items()
    }
    return self.dataframe.__class__(
      AggregateNode(self.keys, aggregations, self.dataframe.node)
    )
