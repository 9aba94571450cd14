import pyarrow as pa
import pytest

from tabground.compute import PyArrowTableDataSource
from tabground.compute.aggregate import (
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
from tabground.errors import SchemaError

TEST_DATA = pa.record_batch(
    {
        "city": pa.array(
            ["New York", "New York", "Los Angeles", "Los Angeles", "New York"]
        ),
        "shop": pa.array(["Shop A", "Shop B", "Shop A", "Shop A2", "Shop B"]),
        "n_employees": pa.array([10, 15, 8, 12, 20]),
    }
)

MULTI_KEY_CITIES = ["Los Angeles", "Los Angeles", "New York", "New York"]
MULTI_KEY_SHOPS = ["Shop A", "Shop A2", "Shop A", "Shop B"]


def _aggregate(keys, aggregation, data=TEST_DATA):
    aggregate = AggregateNode(
        keys, {"result": aggregation}, PyArrowTableDataSource(data)
    )
    return next(aggregate.batches())


@pytest.mark.parametrize(
    "aggregation, single_key, multi_key",
    [
        (SumAggregation("n_employees"), [20, 45], [8, 12, 10, 35]),
        (MinAggregation("n_employees"), [8, 10], [8, 12, 10, 15]),
        (MaxAggregation("n_employees"), [12, 20], [8, 12, 10, 20]),
        (CountAggregation("n_employees"), [2, 3], [1, 1, 1, 2]),
        (MeanAggregation("n_employees"), [10.0, 15.0], [8.0, 12.0, 10.0, 17.5]),
        (MedianAggregation("n_employees"), [10.0, 15.0], [8.0, 12.0, 10.0, 17.5]),
        (CountDistinctAggregation("shop"), [2, 2], [1, 1, 1, 1]),
    ],
)
def test_aggregations(aggregation, single_key, multi_key):
    result = _aggregate(["city"], aggregation)
    assert result.column_names == ["city", "result"]
    assert result.column(0).to_pylist() == ["Los Angeles", "New York"]
    assert result.column(1).to_pylist() == single_key

    result = _aggregate(["city", "shop"], aggregation)
    assert result.column_names == ["city", "shop", "result"]
    assert result.column(0).to_pylist() == MULTI_KEY_CITIES
    assert result.column(1).to_pylist() == MULTI_KEY_SHOPS
    assert result.column(2).to_pylist() == multi_key


@pytest.mark.parametrize("keys", [["city"], ["city", "shop"]])
def test_aggregate_node_str(keys):
    aggregate = AggregateNode(
        keys,
        {"total_employees": SumAggregation("n_employees")},
        PyArrowTableDataSource(TEST_DATA),
    )
    assert str(aggregate) == (
        "AggregateNode(keys=%r, aggregations={'total_employees': SumAggregation(n_employees)}, "
        "PyArrowTableDataSource(columns=['city', 'shop', 'n_employees'], rows=5))"
        % (keys,)
    )


@pytest.mark.parametrize("keys", [["city"], ["city", "shop"]])
def test_aggregation_across_batches(keys):
    """Partial results of each batch are merged in a single group."""
    table = pa.Table.from_batches([TEST_DATA.slice(0, 2), TEST_DATA.slice(2)])
    aggregate = AggregateNode(
        keys,
        {
            "total": SumAggregation("n_employees"),
            "median": MedianAggregation("n_employees"),
            "shops": CountDistinctAggregation("shop"),
        },
        PyArrowTableDataSource(table),
    )
    batches = list(aggregate.batches())
    assert len(batches) == 1
    result = batches[0].to_pylist()
    if keys == ["city"]:
        assert result == [
            {"city": "Los Angeles", "total": 20, "median": 10.0, "shops": 2},
            {"city": "New York", "total": 45, "median": 15.0, "shops": 2},
        ]
    else:
        assert [r["total"] for r in result] == [8, 12, 10, 35]
        assert [r["median"] for r in result] == [8.0, 12.0, 10.0, 17.5]


def test_aggregation_keeps_key_types():
    data = pa.record_batch(
        {"year": pa.array([2007, 1952, 2007], type=pa.int64()), "value": [1, 2, 3]}
    )
    result = _aggregate(["year"], SumAggregation("value"), data)
    assert result.schema.field("year").type == pa.int64()
    assert result.column(0).to_pylist() == [1952, 2007]
    assert result.column(1).to_pylist() == [2, 4]


@pytest.mark.parametrize("keys", [["city"], ["city", "shop"]])
def test_count_aggregation_50_rows(keys):
    aggregate = AggregateNode(
        keys,
        {"count_employees": CountAggregation("n_employees")},
        PyArrowTableDataSource(_generate_50rows_test_data()),
    )
    result = next(aggregate.batches())

    if keys == ["city"]:
        assert result.column_names == ["city", "count_employees"]
        assert result.column(0).to_pylist() == [
            "City0",
            "City1",
            "City2",
            "City3",
            "City4",
        ]
        assert result.column(1).to_pylist() == [20, 20, 20, 20, 20]
    else:
        assert result.column_names == ["city", "shop", "count_employees"]
        expected_cities = ["City" + str(i) for i in range(5) for _ in range(10)]
        expected_shops = ["Shop" + str(i) for _ in range(5) for i in range(10)]
        expected_counts = [2] * 50
        assert result.column(0).to_pylist() == expected_cities
        assert result.column(1).to_pylist() == expected_shops
        assert result.column(2).to_pylist() == expected_counts


@pytest.mark.parametrize("keys", [["country"], ["city", "country"]])
def test_aggregation_unknown_key(keys):
    with pytest.raises(SchemaError):
        _aggregate(keys, SumAggregation("n_employees"))


def test_aggregation_unknown_column():
    with pytest.raises(SchemaError) as err:
        _aggregate(["city"], SumAggregation("revenue"))
    assert err.value.field == "revenue"


def test_aggregation_requires_keys():
    with pytest.raises(ValueError):
        AggregateNode([], {}, PyArrowTableDataSource(TEST_DATA))


def test_make_aggregation():
    assert isinstance(make_aggregation(("mean", "n_employees")), MeanAggregation)
    assert isinstance(make_aggregation(("n_distinct", "shop")), CountDistinctAggregation)
    aggregation = SumAggregation("n_employees")
    assert make_aggregation(aggregation) is aggregation
    with pytest.raises(ValueError, match="Unknown reduction 'mode'"):
        make_aggregation(("mode", "n_employees"))


def _generate_50rows_test_data():
    cities = ["City" + str(i) for i in range(5)]
    shops = ["Shop" + str(i) for i in range(10)]
    data = {"city": [], "shop": [], "n_employees": []}
    for city in cities:
        for shop in shops:
            for _ in range(2):  # Ensure each combination appears at least twice
                data["city"].append(city)
                data["shop"].append(shop)
                data["n_employees"].append(10)  # Arbitrary number of employees
    return pa.record_batch(data)
