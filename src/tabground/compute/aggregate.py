"""Query plan nodes that aggregations.

Frequently when analysing data is necessary
to compute statistics like the min, max, median, etc...
of the data stored in datasets.

The aggregate node is in charge of computing
those aggregations and projecting them as new
columns in a query pipeline.

Typically the aggregate node will group the data
by a set of columns and then compute the aggregations

For example, given the following data::

    country, continent, year, life_expectancy
    Kenya, Africa, 2007, 54.11
    Nigeria, Africa, 2007, 46.86
    Japan, Asia, 2007, 82.60
    India, Asia, 2007, 64.70
    China, Asia, 2007, 72.96

We could group by continent and compute the median life expectancy
to get::

    continent, median_life_expectancy
    Africa, 50.48
    Asia, 72.96
"""

import abc
import logging
from typing import Any

import pyarrow as pa
import pyarrow.compute as pc

from .base import QueryPlanNode, ensure_fields

__all__ = (
    "AggregateNode",
    "SumAggregation",
    "MinAggregation",
    "MaxAggregation",
    "MeanAggregation",
    "MedianAggregation",
    "CountAggregation",
    "CountDistinctAggregation",
    "REDUCTIONS",
    "make_aggregation",
)

log = logging.getLogger(__name__)


class AggregateNode(QueryPlanNode):
    """Group data and compute aggregations.

    The result contains one row for each distinct
    combination of the grouping keys, sorted in ascending
    order by the keys, so that the same input
    always leads to the same output.

    >>> import pyarrow as pa
    >>> from tabground.compute import MaxAggregation, PyArrowTableDataSource
    >>> data = pa.record_batch({
    ...    'continent': pa.array(['Europe', 'Europe', 'Africa', 'Africa', 'Europe']),
    ...    'country': pa.array(['Italy', 'France', 'Kenya', 'Nigeria', 'Norway']),
    ...    'population': pa.array([58, 61, 35, 135, 4])
    ... })
    >>> aggregate = AggregateNode(["continent"], {"max_population": MaxAggregation("population")}, PyArrowTableDataSource(data))
    >>> next(aggregate.batches()).to_pylist()
    [{'continent': 'Africa', 'max_population': 135}, {'continent': 'Europe', 'max_population': 61}]
    """

    def __init__(
        self,
        keys: list[str],
        aggregations: dict[str, "Aggregation"],
        child: QueryPlanNode,
    ) -> None:
        """
        :param keys: The columns to group by.
        :param aggregations: The aggregations to compute in the form of {"new_col_name": Aggregation}.
        :param child: The child node that will provide the data to aggregate.
        """
        if not keys:
            raise ValueError("At least one grouping key is required")

        self.keys = keys
        self.aggregations = aggregations
        self.child = child

    def __str__(self) -> str:
        return f"AggregateNode(keys={self.keys}, aggregations={self.aggregations}, {self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Group the data of the child node and aggregate each group.

        Each batch of the child node is split in the groups it contains
        and each aggregation computes a partial result for the group.
        Once all batches were consumed the partial results are
        reduced to the final value of each group.
        """
        if len(self.keys) == 1:
            yield from self.single_key_aggregation()
        else:
            yield from self.multi_key_aggregation()

    def _check_schema(self, schema: pa.Schema) -> None:
        ensure_fields(schema, self.keys)
        ensure_fields(schema, [aggr.column for aggr in self.aggregations.values()])

    def single_key_aggregation(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Compute the aggregation for a single key.

        This is an optimized path where we can rely on dictionary encoding
        to find the unique values of the key column and then filter the rows.
        """
        # Compute separate aggregation results for each batch.
        # This makes so that we need to keep in memory only one batch
        # at the time, and the aggregation results, which are far smaller
        #   chunks_data = {key_value: {aggr_name: [aggr_value1, aggr_value2, ...]}}
        chunks_data: dict[Any, dict[str, list[Any]]] = {}
        schema = None
        for batch in self.child.batches():
            schema = batch.schema
            self._check_schema(schema)

            # Dictionary Encode the key variable,
            # so we can get the unique values
            # and we can know at which rows each value is.
            key_column = pc.dictionary_encode(batch.column(self.keys[0]))
            key_values = key_column.dictionary
            key_indices = key_column.indices

            # For each unique value, we lookup the rows that have that value
            # Then for the resulting batch of rows filtered by the unique key value
            # we compute the aggregation and add it to the aggregation results for
            # that key value in the current batch.
            for idx, keyval in enumerate(key_values.to_pylist()):
                chunks_data.setdefault(keyval, {})
                mask = pc.equal(key_indices, idx)
                filtered_batch = batch.filter(mask)
                for name, aggregation in self.aggregations.items():
                    chunks_data[keyval].setdefault(name, []).append(
                        aggregation.compute_chunk(filtered_batch)
                    )

        # The chunks_data will contain the partial aggregation results for each key value
        # For example it could look like {"Asia": {"max_population": [127, 1318, 1110]}}
        # Now we need to reduce the partial aggregation results to get the final aggregation results
        # Which would lead to {"Asia": {"max_population": 1318}}
        if schema is not None:
            yield self.reduce_aggregations(schema, chunks_data)

    def multi_key_aggregation(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Compute the aggregation for multiple keys.

        In this case we will have to manually implement the grouping
        as we can't rely on dictionary encoding to find the unique values
        """
        # Dictionary encoding is currently not supported for StructArray,
        # so we can't encode all keys at once.
        #
        # Instead we will manually implement the aggregation in python,
        # it's much slower, but it shows how aggregation can be implemented.
        sorting_key = [(k, "ascending") for k in self.keys]
        chunks_data: dict[tuple, dict[str, list[Any]]] = {}
        schema = None
        for batch in self.child.batches():
            schema = batch.schema
            self._check_schema(schema)

            # First sort the data by the aggregation keys,
            # this makes sure that we can compute the aggregation in a single pass.
            # All the values for the same grouping key will be sequential
            # For example:
            #    Africa, 2002, 33
            #    Africa, 2007, 35
            #    Africa, 2007, 135
            # so until the key changes we can compute the aggregation.
            sorted_batch = batch.sort_by(sorting_key)
            key_columns = [sorted_batch.column(k).to_pylist() for k in self.keys]
            current_key = None
            chunk_start = 0
            for row_index in range(sorted_batch.num_rows):
                row_key = tuple(column[row_index] for column in key_columns)
                if current_key is None:
                    current_key = row_key
                if row_key != current_key:
                    # the key has changed, this means we finished a chunk of
                    # rows with the same key, we can compute the aggregation for this chunk.
                    chunk = sorted_batch.slice(chunk_start, row_index - chunk_start)
                    self._compute_chunk(chunks_data, current_key, chunk)
                    current_key = row_key
                    chunk_start = row_index

            # Compute the aggregation for the last chunk
            if current_key is not None:
                chunk = sorted_batch.slice(chunk_start, batch.num_rows - chunk_start)
                self._compute_chunk(chunks_data, current_key, chunk)

        if schema is not None:
            yield self.reduce_aggregations(schema, chunks_data)

    def _compute_chunk(
        self, chunks_data: dict, key: tuple, chunk: pa.RecordBatch
    ) -> None:
        chunks_data.setdefault(key, {})
        for name, aggregation in self.aggregations.items():
            chunks_data[key].setdefault(name, []).append(
                aggregation.compute_chunk(chunk)
            )

    def reduce_aggregations(
        self, schema: pa.Schema, chunks_data: dict[Any, dict[str, list[Any]]]
    ) -> pa.RecordBatch:
        """Reduce the partial aggregation results to the final aggregation results.

        Both single and multi key aggregation will end up computing the aggregations
        for each chunk separately, this method will reduce the partial aggregation
        results to the final aggregation results.

        For example if we had 3 chunks and the chunks_data is::

            {"Asia": {"max_population": [127, 1318, 1110]}}

        The result will be::

            {"Asia": {"max_population": 1318}}

        The groups are then sorted by their keys.
        """
        # Prepare one column for each key and aggregation
        result_batch_data: dict[str, list[Any]] = {
            **{k: [] for k in self.keys},
            **{k: [] for k in self.aggregations.keys()},
        }
        # For each key value, invoke the reduce method of the aggregation.
        # In case of a single key
        #   keyvalue is "Asia"
        # In case of multiple keys
        #   keyvalue is ("Asia", 2007)
        for keyvalue, aggregated_values in chunks_data.items():
            if isinstance(keyvalue, tuple):
                # multiple aggregation keys
                for i, key in enumerate(self.keys):
                    result_batch_data[key].append(keyvalue[i])
            else:
                # single aggregation key
                result_batch_data[self.keys[0]].append(keyvalue)
            for aggrname, aggregation in self.aggregations.items():
                result_batch_data[aggrname].append(
                    _as_py(aggregation.reduce(aggregated_values[aggrname]))
                )

        columns = {
            k: pa.array(result_batch_data[k], type=schema.field(k).type)
            for k in self.keys
        }
        for aggrname in self.aggregations:
            columns[aggrname] = pa.array(result_batch_data[aggrname])

        log.debug("Aggregated %d groups by %s", len(chunks_data), self.keys)
        return pa.record_batch(columns).sort_by(
            [(k, "ascending") for k in self.keys]
        )


def _as_py(value: Any) -> Any:
    if isinstance(value, pa.Scalar):
        return value.as_py()
    return value


class Aggregation(abc.ABC):
    """Base class for aggregations.

    Every aggregation is expected to implement
    a method to compute any needed intermediate results
    on a single chunk of data and then provide a reduce method
    to combine the intermediate results into a final result.
    """

    def __init__(self, column: str) -> None:
        self.column = column

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.column})"

    __repr__ = __str__

    @abc.abstractmethod
    def compute_chunk(self, batch: pa.RecordBatch) -> Any: ...

    @abc.abstractmethod
    def reduce(self, chunks: list[Any]) -> Any: ...


class SimpleAggregation(Aggregation):
    """Provide a base implementation for simple aggregations like min,max,sum.

    Simple aggregations are those where the function applied to compute
    intermediate results for a single chunk of data is the same as the function
    applied to combine the intermediate results into the final.

    For example ``sum([1, 2, 3])`` is the same as ``sum([sum([1, 2]), 3])``.
    """

    @abc.abstractmethod
    def _aggregate(self, data: Any) -> pa.Scalar: ...

    def compute_chunk(self, batch: pa.RecordBatch) -> pa.Scalar:
        return self._aggregate(batch.column(self.column))

    def reduce(self, chunks: list[pa.Scalar]) -> pa.Scalar:
        return self._aggregate(pa.array([_as_py(c) for c in chunks]))


class SumAggregation(SimpleAggregation):
    """Compute the sum of an aggregated column."""

    def _aggregate(self, data: Any) -> pa.Scalar:
        return pc.sum(data)


class MinAggregation(SimpleAggregation):
    """Compute the min of an aggregated column."""

    def _aggregate(self, data: Any) -> pa.Scalar:
        return pc.min(data)


class MaxAggregation(SimpleAggregation):
    """Compute the max of an aggregated column."""

    def _aggregate(self, data: Any) -> pa.Scalar:
        return pc.max(data)


class CountAggregation(Aggregation):
    """Compute the count of an aggregated column.

    This is based on computing the counts for each intermediate batch
    and then sum them to compute the final result.
    """

    def compute_chunk(self, batch: pa.RecordBatch) -> pa.Scalar:
        """Compute the count of the column in a single batch."""
        return pc.count(batch.column(self.column))

    def reduce(self, chunks: list[pa.Scalar]) -> pa.Scalar:
        """Sum the counts of all intermediate results to the final count."""
        return pc.sum(pa.array([_as_py(c) for c in chunks], type=pa.int64()))


class MeanAggregation(Aggregation):
    """Compute the mean of an aggregated column.

    This is based by computing count and sum of the column
    for each intermediate batch and then dividing
    the sum of all intermediate results by the count
    of all intermediate results.
    """

    def compute_chunk(self, batch: pa.RecordBatch) -> tuple[int, Any]:
        """Compute the count and sum of the column in a single batch."""
        col = batch.column(self.column)
        return (pc.count(col).as_py(), pc.sum(col).as_py())

    def reduce(self, chunks: list[tuple[int, Any]]) -> float:
        """Compute the mean of the column from the intermediate sums and counts."""
        count = sum(chunk[0] for chunk in chunks)
        if count == 0:
            return None
        total = sum(chunk[1] for chunk in chunks if chunk[1] is not None)
        return total / count


class MedianAggregation(Aggregation):
    """Compute the median of an aggregated column.

    The median can't be computed out of partial medians,
    so each intermediate result is the column data itself
    and the median is computed once all the data of the group
    is available.

    For an even number of values, the median is the mean
    of the two central values.
    """

    def compute_chunk(self, batch: pa.RecordBatch) -> pa.Array:
        return batch.column(self.column)

    def reduce(self, chunks: list[pa.Array]) -> pa.Scalar:
        return pc.quantile(pa.chunked_array(chunks), q=0.5)[0]


class CountDistinctAggregation(Aggregation):
    """Count the distinct values of an aggregated column.

    Each intermediate result holds the unique values
    found in the chunk, those are then counted again
    once merged as the same value might appear in multiple chunks.
    """

    def compute_chunk(self, batch: pa.RecordBatch) -> pa.Array:
        return pc.unique(batch.column(self.column))

    def reduce(self, chunks: list[pa.Array]) -> pa.Scalar:
        return pc.count_distinct(pa.chunked_array(chunks))


REDUCTIONS: dict[str, type[Aggregation]] = {
    "sum": SumAggregation,
    "min": MinAggregation,
    "max": MaxAggregation,
    "count": CountAggregation,
    "mean": MeanAggregation,
    "median": MedianAggregation,
    "n_distinct": CountDistinctAggregation,
}


def make_aggregation(aggregation: Aggregation | tuple[str, str]) -> Aggregation:
    """Build an aggregation out of its ``(reduction, column)`` name.

    >>> make_aggregation(("median", "life_expectancy"))
    MedianAggregation(life_expectancy)

    :raises ValueError: for unknown reductions.
    """
    if isinstance(aggregation, Aggregation):
        return aggregation
    reduction, column = aggregation
    try:
        return REDUCTIONS[reduction](column)
    except KeyError:
        raise ValueError(
            f"Unknown reduction {reduction!r}, expected one of {', '.join(REDUCTIONS)}"
        ) from None
