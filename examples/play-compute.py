import pyarrow.compute as pc

from tabground.compute import (
    AggregateNode,
    FilterNode,
    FunctionCallExpression,
    MedianAggregation,
    PyArrowTableDataSource,
    col,
)
from tabground.datasets import load_dataset

query = AggregateNode(
    ["continent"],
    {"median_life_expectancy": MedianAggregation("life_expectancy")},
    FilterNode(
        FunctionCallExpression(pc.equal, col("year"), 1952),
        PyArrowTableDataSource(load_dataset("gapminder")),
    ),
)
for batch in query.batches():
    print("---")
    print(batch)
