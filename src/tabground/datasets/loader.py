"""Loading of the static datasets explored with Tabground.

Datasets are CSV files registered by name together with
the schema their records must respect. Loading a dataset
reads it through the compute engine :class:`CSVDataSource`
with the declared column types and checks that the
records respect the invariants of the dataset, like
the uniqueness of the observations.
"""

import logging
import os
from dataclasses import dataclass, field

import pyarrow as pa
import pyarrow.compute as pc

from ..compute import (
    AggregateNode,
    CountAggregation,
    CountDistinctAggregation,
    CSVDataSource,
    FilterNode,
    FunctionCallExpression,
    PyArrowTableDataSource,
    col,
)
from ..config import load_settings
from ..errors import DatasetNotFoundError, SchemaError

log = logging.getLogger(__name__)

DATASETS_DIR = os.path.dirname(os.path.abspath(__file__))

GAPMINDER_SCHEMA = pa.schema(
    [
        pa.field("country", pa.string()),
        pa.field("continent", pa.string()),
        pa.field("year", pa.int64()),
        pa.field("population", pa.int64()),
        pa.field("gdp_per_capita", pa.float64()),
        pa.field("life_expectancy", pa.float64()),
    ]
)


@dataclass(frozen=True)
class DatasetInfo:
    """How to load a dataset and which invariants it respects.

    :param path: The CSV file containing the records.
    :param schema: The schema of the records, ``None`` to infer it.
    :param unique_keys: Fields whose combination identifies each record.
    :param dependencies: Fields functionally dependent on other fields,
                         ``{"country": "continent"}`` means each country
                         has exactly one continent.
    """

    path: str
    schema: pa.Schema | None = None
    unique_keys: tuple[str, ...] = ()
    dependencies: dict[str, str] = field(default_factory=dict)


_REGISTRY: dict[str, DatasetInfo] = {
    "gapminder": DatasetInfo(
        path=os.path.join(DATASETS_DIR, "gapminder.csv"),
        schema=GAPMINDER_SCHEMA,
        unique_keys=("country", "year"),
        dependencies={"country": "continent"},
    ),
}


def register_dataset(
    name: str,
    path: str,
    schema: pa.Schema | None = None,
    unique_keys: tuple[str, ...] = (),
    dependencies: dict[str, str] | None = None,
) -> DatasetInfo:
    """Make a CSV file loadable by name through :func:`load_dataset`.

    Registering an already existing name replaces it.
    """
    info = DatasetInfo(
        path=path,
        schema=schema,
        unique_keys=tuple(unique_keys),
        dependencies=dependencies or {},
    )
    _REGISTRY[name] = info
    log.debug("Registered dataset %s at %s", name, path)
    return info


def available_datasets() -> list[str]:
    """Names of the datasets that can be loaded."""
    return sorted(_REGISTRY)


def resolve_dataset(name: str, data_dir: str | None = None) -> DatasetInfo:
    """Find where the data of a dataset lives.

    A ``<name>.csv`` file in ``data_dir`` takes precedence over
    the registered one, so that the bundled excerpt can be replaced
    with a complete copy of the data. It still has to respect
    the registered schema.

    :raises DatasetNotFoundError: if the dataset is unknown or its file missing.
    """
    info = _REGISTRY.get(name)
    if data_dir:
        candidate = os.path.join(data_dir, f"{name}.csv")
        if os.path.exists(candidate):
            if info is None:
                return DatasetInfo(path=candidate)
            return DatasetInfo(
                path=candidate,
                schema=info.schema,
                unique_keys=info.unique_keys,
                dependencies=info.dependencies,
            )

    if info is None:
        raise DatasetNotFoundError(
            f"Unknown dataset {name!r}, available datasets are: "
            f"{', '.join(available_datasets())}"
        )
    if not os.path.exists(info.path):
        raise DatasetNotFoundError(f"Data for dataset {name!r} not found at {info.path}")
    return info


def load_dataset(
    name: str = "gapminder", validate: bool = True, data_dir: str | None = None
) -> pa.Table:
    """Load a dataset by name.

    :param name: The name of a registered dataset.
    :param validate: Check the invariants of the dataset after loading it.
    :param data_dir: Directory searched for ``<name>.csv`` before the registered
                     datasets, defaults to the ``TABGROUND_DATA_DIR`` setting.
    :raises DatasetNotFoundError: when the dataset is not available.
    :raises SchemaError: when the records do not respect the dataset schema.
    """
    if data_dir is None:
        data_dir = load_settings().data_dir
    info = resolve_dataset(name, data_dir)

    column_types = None
    if info.schema is not None:
        column_types = {f.name: f.type for f in info.schema}

    source = CSVDataSource(info.path, column_types=column_types)
    try:
        table = pa.Table.from_batches(source.batches())
    except pa.ArrowInvalid as e:
        raise SchemaError(f"Dataset {name!r} at {info.path} is malformed: {e}") from e
    log.info("Loaded dataset %s: %d records from %s", name, table.num_rows, info.path)

    if validate:
        validate_dataset(table, info)
    if info.schema is not None:
        table = table.select(info.schema.names)
    return table


def validate_dataset(table: pa.Table, info: DatasetInfo) -> None:
    """Check that the records of a table respect the dataset invariants.

    * All the fields of the schema must be available with the declared type.
    * There must be no two records sharing the same ``unique_keys``.
    * Each value of a field can map to only one value of the fields
      that depend on it.

    :raises SchemaError: describing the first violation found.
    """
    if info.schema is not None:
        for expected in info.schema:
            index = table.schema.get_field_index(expected.name)
            if index == -1:
                raise SchemaError(
                    f"Missing field {expected.name!r} in dataset", field=expected.name
                )
            actual = table.schema.field(index)
            if not actual.type.equals(expected.type):
                raise SchemaError(
                    f"Field {expected.name!r} has type {actual.type}, expected {expected.type}",
                    field=expected.name,
                )

    if info.unique_keys:
        duplicated = _violations(
            table,
            list(info.unique_keys),
            CountAggregation(info.unique_keys[0]),
        )
        if duplicated:
            keys = ", ".join(f"{k}={duplicated[0][k]!r}" for k in info.unique_keys)
            raise SchemaError(f"Duplicated records for {keys}")

    for key, dependent in info.dependencies.items():
        ambiguous = _violations(table, [key], CountDistinctAggregation(dependent))
        if ambiguous:
            raise SchemaError(
                f"{key} {ambiguous[0][key]!r} maps to more than one {dependent}",
                field=dependent,
            )


def _violations(table: pa.Table, keys: list[str], aggregation) -> list[dict]:
    """Groups of ``keys`` for which the aggregation counts more than one value."""
    query = FilterNode(
        FunctionCallExpression(pc.greater, col("n"), 1),
        AggregateNode(keys, {"n": aggregation}, PyArrowTableDataSource(table)),
    )
    return [row for batch in query.batches() for row in batch.to_pylist()]
