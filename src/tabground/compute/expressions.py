"""Expressions executed by compute engine nodes.

The Compute Engine will sometimes need to filter data
or emit new data. This will be performed by nodes that
need to know how the data must be filtered or emitted.

Filters will need a ``predicate``, so an expression that
returns ``true`` or ``false`` for each row that has to be
filtered.

Projections will need an expression that computes the rows
for the projection, for example ``population / 1e6``.

Most expressions are vectorized and delegate the work to
:mod:`pyarrow.compute` functions, but for exploratory
analyses it's often convenient to write a plain Python
function that works on a single record. Those are supported
by :class:`RowFunctionExpression`, which is slower but
allows any Python code.
"""

import logging
from typing import Any, Callable

import pyarrow as pa

from .. import utils
from ..errors import ComputationError, SchemaError, TabgroundError
from .base import Expression

log = logging.getLogger(__name__)


def apply_expression_if_needed(batch: pa.RecordBatch, o: Expression | Any) -> Any:
    """Invoke Apply on expressions when needed

    If the provided object is an Expression,
    it will be applied to the target batch.

    Otherwise it will treat it as if it's
    already the result of an expression
    or a literal value.

    This allows us to apply all arguments
    we receive without having to care if
    they are the data we need or if they
    are the expression resulting in that data.
    """
    if isinstance(o, Expression):
        o = o.apply(batch)
    return o


def as_expression(obj: Expression | Callable[[dict], Any]) -> Expression:
    """Accept either an expression or a function over records.

    Plain callables are wrapped in a :class:`RowFunctionExpression`.
    """
    if isinstance(obj, Expression):
        return obj
    if callable(obj):
        return RowFunctionExpression(obj)
    raise TypeError(f"Expected an Expression or a callable, got {type(obj).__name__}")


class FunctionCallExpression(Expression):
    """Call a compute function on its arguments.

    Given a compute function, and a set of arguments
    (other expressions, literals or data), execute
    the function on the provided arguments and return
    the resulting data.

    For example to compute the total GDP of each country::

        FunctionCallExpression(pyarrow.compute.multiply, col("population"), col("gdp_per_capita"))

    Failures of the compute function, like a checked division
    by zero or an overflow, are reported as :class:`ComputationError`.
    """

    def __init__(self, func: Callable, *args: Expression | Any) -> None:
        """
        :param func: The function accepting the arguments.
        :param *args: The arguments for the function.
        """
        self.func = func
        self.args = args

    def __str__(self) -> str:
        func_qualname = utils.inspect.get_qualname(self.func)
        return f"{func_qualname}({','.join(map(str, self.args))})"

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        """Invoke the function resolving all arguments on the recordbatch.

        When the function arguments are expressions themselves,
        this will apply the expressions on the provided recordbatch
        and the resulting data will be used as the arguments for the
        function.
        """
        args = tuple(apply_expression_if_needed(batch, arg) for arg in self.args)
        try:
            return self.func(*args)
        except pa.ArrowInvalid as e:
            raise ComputationError(f"{self} failed: {e}") from e


class RowFunctionExpression(Expression):
    """Call a Python function on each record of the batch.

    The function receives each row as a ``dict`` mapping
    field names to python values and returns the value
    for the row. For example::

        RowFunctionExpression(lambda r: r["population"] / 1e6)

    If the function fails for any of the records,
    a :class:`ComputationError` reporting the row and
    its values is raised and no result is produced.
    Looking up a field the record doesn't have raises
    :class:`SchemaError` instead.
    """

    def __init__(self, func: Callable[[dict], Any], type: pa.DataType | None = None) -> None:
        """
        :param func: The function invoked with each record.
        :param type: The type of the resulting column, inferred when not provided.
        """
        self.func = func
        self.type = type

    def __str__(self) -> str:
        return f"RowFunctionExpression({utils.inspect.get_qualname(self.func)})"

    def apply(self, batch: pa.RecordBatch, row_offset: int = 0) -> pa.Array:
        """Invoke the function on each row and build a column out of the results.

        :param row_offset: Index of the first row of the batch in the whole table,
                           used to report the failing row.
        """
        results = []
        for idx, record in enumerate(batch.to_pylist(), start=row_offset):
            try:
                results.append(self.func(record))
            except TabgroundError:
                raise
            except KeyError as e:
                field = e.args[0] if e.args else None
                if isinstance(field, str) and field not in batch.schema.names:
                    raise SchemaError.unknown_field(field, batch.schema.names) from e
                raise ComputationError(
                    f"{self} failed on row {idx} {record!r}: KeyError: {e}",
                    row=idx,
                    record=record,
                ) from e
            except Exception as e:
                raise ComputationError(
                    f"{self} failed on row {idx} {record!r}: {type(e).__name__}: {e}",
                    row=idx,
                    record=record,
                ) from e
        log.debug("%s computed %d values", self, len(results))
        try:
            return pa.array(results, type=self.type)
        except (pa.ArrowInvalid, pa.ArrowTypeError) as e:
            raise ComputationError(f"{self} produced values of mixed types: {e}") from e


def apply_at_row(expression: Expression, batch: pa.RecordBatch, row_offset: int) -> Any:
    """Apply an expression to a batch starting at ``row_offset`` of the table.

    Only expressions evaluated record by record report the failing row.
    """
    if isinstance(expression, RowFunctionExpression):
        return expression.apply(batch, row_offset=row_offset)
    return expression.apply(batch)
