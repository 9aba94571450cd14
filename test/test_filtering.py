import pyarrow as pa
import pyarrow.compute as pc
import pytest

from tabground.compute import (
    FilterNode,
    FunctionCallExpression,
    PyArrowTableDataSource,
    RowFunctionExpression,
    col,
    lit,
)
from tabground.errors import ComputationError, SchemaError


@pytest.fixture
def mock_data():
    return pa.Table.from_batches(
        [
            pa.record_batch({"country": ["A", "B"], "year": [1952, 2007]}),
            pa.record_batch({"country": ["C", "D"], "year": [2007, 1957]}),
        ]
    )


def _rows(node):
    return [row for batch in node.batches() for row in batch.to_pylist()]


def test_filter_str(mock_data):
    node = FilterNode(
        FunctionCallExpression(pc.equal, col("year"), lit(2007)),
        PyArrowTableDataSource(mock_data),
    )
    assert str(node) == (
        "FilterNode(filter=pyarrow.compute.equal(ColumnRef(year),Literal(2007)), "
        "child=PyArrowTableDataSource(columns=['country', 'year'], rows=4))"
    )


def test_filter_expression(mock_data):
    node = FilterNode(
        FunctionCallExpression(pc.equal, col("year"), lit(2007)),
        PyArrowTableDataSource(mock_data),
    )
    assert _rows(node) == [
        {"country": "B", "year": 2007},
        {"country": "C", "year": 2007},
    ]


def test_filter_row_function(mock_data):
    node = FilterNode(
        RowFunctionExpression(lambda r: r["year"] < 2000),
        PyArrowTableDataSource(mock_data),
    )
    assert [r["country"] for r in _rows(node)] == ["A", "D"]


def test_filter_no_match_preserves_schema(mock_data):
    node = FilterNode(
        FunctionCallExpression(pc.greater, col("year"), lit(2050)),
        PyArrowTableDataSource(mock_data),
    )
    result = pa.Table.from_batches(node.batches())
    assert result.num_rows == 0
    assert result.schema == mock_data.schema


def test_filter_unknown_column(mock_data):
    node = FilterNode(
        FunctionCallExpression(pc.equal, col("continent"), lit("Asia")),
        PyArrowTableDataSource(mock_data),
    )
    with pytest.raises(SchemaError):
        _rows(node)


def test_filter_row_function_unknown_field(mock_data):
    node = FilterNode(
        RowFunctionExpression(lambda r: r["continent"] == "Asia"),
        PyArrowTableDataSource(mock_data),
    )
    with pytest.raises(SchemaError) as err:
        _rows(node)
    assert err.value.field == "continent"


def test_filter_row_function_failure_reports_table_row(mock_data):
    node = FilterNode(
        RowFunctionExpression(lambda r: 1 / (r["year"] - 1957) > 0),
        PyArrowTableDataSource(mock_data),
    )
    with pytest.raises(ComputationError) as err:
        _rows(node)
    assert err.value.row == 3
    assert err.value.record == {"country": "D", "year": 1957}
