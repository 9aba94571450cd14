"""Pure functions to explore a table.

Each function receives a :class:`pyarrow.Table` and returns a new
one, the input table is never modified. This makes analysis steps
composable, the result of one step is simply the input of the next::

    gapminder = load_dataset("gapminder")
    recent = select(gapminder, FunctionCallExpression(pc.equal, col("year"), 2007))
    recent = with_column(recent, "pop_millions", lambda r: r["population"] / 1e6)
    by_continent = group_aggregate(
        recent, ["continent"], {"median_life": ("median", "life_expectancy")}
    )

Under the hood each function builds a query plan for the compute engine
over the input table and collects its result.

Errors are never recovered: referencing a field that doesn't exist
raises :class:`tabground.errors.SchemaError` and a derived column
that can't be computed for some record raises
:class:`tabground.errors.ComputationError`.
"""

import logging
from typing import Any, Callable, Iterable

import pyarrow as pa

from .charts import ChartDescription, ChartSpec
from .charts import render as render_chart
from .compute import (
    AggregateNode,
    FilterNode,
    ProjectNode,
    PyArrowTableDataSource,
    SortNode,
    make_aggregation,
)
from .compute.aggregate import Aggregation
from .compute.base import QueryPlanNode
from .compute.expressions import Expression, as_expression

log = logging.getLogger(__name__)


def _execute(plan: QueryPlanNode) -> pa.Table:
    log.debug("Executing %s", plan)
    return pa.Table.from_batches(plan.batches())


def select(table: pa.Table, predicate: Expression | Callable[[dict], bool]) -> pa.Table:
    """The records of the table for which the predicate holds.

    Records keep their values and relative order,
    when no record matches an empty table is returned.
    """
    return _execute(FilterNode(as_expression(predicate), PyArrowTableDataSource(table)))


def with_column(
    table: pa.Table, name: str, fn: Expression | Callable[[dict], Any]
) -> pa.Table:
    """The table with the ``name`` column computed by ``fn``.

    ``fn`` can be an expression or a function receiving each record.
    If the column already exists it's replaced, all the other
    columns and the number of rows are preserved.
    """
    return _execute(
        ProjectNode(None, {name: as_expression(fn)}, PyArrowTableDataSource(table))
    )


def order_by(table: pa.Table, key: str, descending: bool = False) -> pa.Table:
    """The table sorted by the ``key`` column.

    Sorting is stable, records with the same key preserve
    their relative order in both directions.
    """
    return _execute(SortNode([key], [descending], PyArrowTableDataSource(table)))


def group_aggregate(
    table: pa.Table,
    group_keys: Iterable[str],
    aggregations: dict[str, Aggregation | tuple[str, str]],
) -> pa.Table:
    """One record for each distinct combination of the ``group_keys``.

    Each record contains the values of the keys and one field for each
    aggregation computed over the records of the group.
    Aggregations can be provided as :class:`Aggregation` objects or as
    ``(reduction, column)`` tuples, like ``("max", "population")``.

    Records are sorted by the group keys.
    """
    aggregations = {name: make_aggregation(aggr) for name, aggr in aggregations.items()}
    return _execute(
        AggregateNode(list(group_keys), aggregations, PyArrowTableDataSource(table))
    )


def render(table: pa.Table, chart_spec: ChartSpec) -> ChartDescription:
    """Describe a chart of the table, see :func:`tabground.charts.render`."""
    return render_chart(table, chart_spec)
