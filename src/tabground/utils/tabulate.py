"""Format tabular data into a text table for print.

the `tabulate` function takes a `pyarrow.Table` or `pyarrow.RecordBatch`
and formats it into a text table.
It will truncate long strings, format floats to a fixed number of decimal places,
and limit the number of rows to display.

Example:

    >>> import pyarrow as pa
    >>> data = {
    ...     "country": ["Australia", "New Zealand"],
    ...     "year": [2007, 2007],
    ...     "life_expectancy": [81.235, 80.204],
    ... }
    >>> print(tabulate(pa.table(data)))
    country     | year | life_expectancy
    ----------- | ---- | ---------------
    Australia   | 2007 | 81.23
    New Zealand | 2007 | 80.20
"""

from typing import Any

import pyarrow as pa


def tabulate(
    data: pa.Table | pa.RecordBatch, max_rows: int = 20, float_digits: int = 2
) -> str:
    """Format a Table or RecordBatch into a text table.

    Rows past ``max_rows`` are not printed, a footer
    reports how many were left out.
    """
    cols = data.column_names
    rows = [
        [format_value(row[c], float_digits) for c in cols]
        for row in data.slice(0, max_rows).to_pylist()
    ]

    colsizes = compute_max_colsize(cols, rows)
    header = [maketablerow(cols, colsizes=colsizes)]
    separator = [maketablerow(["-"] * len(cols), colsizes=colsizes, fillvalue="-")]
    textrows = [maketablerow(row, colsizes=colsizes) for row in rows]

    table = "\n".join(header + separator + textrows)
    if data.num_rows > max_rows:
        table += f"\n... and {data.num_rows - max_rows} more rows"
    return table


def compute_max_colsize(cols: list[str], rows: list[list[str]]) -> list[int]:
    """Compute the maximum size of each column in a table."""
    return [
        max([len(row[colidx]) for row in rows] + [len(cols[colidx])])
        for colidx, _ in enumerate(cols)
    ]


def maketablerow(cols: list[str], colsizes: list[int], fillvalue: str = " ") -> str:
    """Make a table row with the given column sizes."""
    return " | ".join(
        [col.ljust(colsizes[idx], fillvalue) for idx, col in enumerate(cols)]
    ).rstrip()


def format_value(v: Any, float_digits: int = 2) -> str:
    """Format a value to be printed in the table.

    Floats are rounded to ``float_digits`` decimal places,
    nulls are printed as ``null`` and long strings are truncated.
    """
    if v is None:
        return "null"
    elif isinstance(v, bool):
        return "true" if v else "false"
    elif isinstance(v, float):
        return f"{v:.{float_digits}f}"

    v = str(v)
    if len(v) > 30:
        v = v[:27] + "..."
    return v
