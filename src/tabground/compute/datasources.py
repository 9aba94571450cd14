"""Query Plan nodes that load data

The datasource nodes are expected to fetch the data from some source,
convert it into the format accepted by the compute engine and forward it
to the next node in the plan.

They are used to do things like loading
data from CSV files or equivalent operations
"""

from abc import abstractmethod

import pyarrow as pa
import pyarrow.csv

from .base import QueryPlanNode, empty_batch


class DataSourceNode(QueryPlanNode):
    """Base class for nodes that load data from a source."""

    @abstractmethod
    def poll_schema(self) -> pa.Schema:
        """Poll the schema of the data source without loading its content."""
        ...


class CSVDataSource(DataSourceNode):
    """Load data from a CSV file.

    Given a local CSV file path, load the content,
    convert it into Arrow format, and emit it
    for the next nodes of the query plan to consume.

    The types of the columns are inferred by pyarrow,
    unless they are explicitly provided.
    """

    def __init__(
        self,
        filename: str,
        column_types: dict[str, pa.DataType] | None = None,
        block_size: int | None = None,
    ) -> None:
        """
        :param filename: The path of the local CSV file.
        :param column_types: The types to use for the columns, by name.
        :param block_size: How big to make batches of data,
                           Influences how many batches will be produced
        """
        self.filename = filename
        self.column_types = column_types
        self.block_size = block_size

    def __str__(self) -> str:
        return f"CSVDataSource({self.filename}, block_size={self.block_size})"

    def _open(self, block_size: int | None = None) -> pa.csv.CSVStreamingReader:
        return pa.csv.open_csv(
            self.filename,
            read_options=pa.csv.ReadOptions(block_size=block_size),
            convert_options=pa.csv.ConvertOptions(column_types=self.column_types),
        )

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Open CSV file and emit the batches."""
        emitted = False
        with self._open(self.block_size) as reader:
            for batch in reader:
                emitted = True
                yield batch
            if not emitted:
                yield empty_batch(reader.schema)

    def poll_schema(self) -> pa.Schema:
        """Poll the schema of the CSV file."""
        with self._open() as reader:
            return reader.schema


class PyArrowTableDataSource(DataSourceNode):
    """Load data from an in-memory pyarrow.Table or pyarrow.RecordBatch.

    Given a :class:`pyarrow.Table` or `pyarrow.RecordBatch` object,
    allow to use its data in a query plan.
    """

    def __init__(self, table: pa.Table | pa.RecordBatch) -> None:
        """
        :param table: The table or recordbatch with the data to read.
        """
        self.table = table
        self.is_recordbatch = isinstance(table, pa.RecordBatch)

    def __str__(self) -> str:
        return f"PyArrowTableDataSource(columns={self.table.column_names}, rows={self.table.num_rows})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Emit the data contained in the Table for consumption by other node.

        An empty table still emits one empty batch,
        so that the nodes consuming it know the schema.
        """
        if self.is_recordbatch:
            yield self.table
            return

        batches = self.table.to_batches()
        if not batches:
            yield empty_batch(self.table.schema)
        yield from batches

    def poll_schema(self) -> pa.Schema:
        """Poll the schema of the Table."""
        return self.table.schema
