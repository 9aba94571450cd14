import pyarrow as pa

from tabground.utils.tabulate import format_value, tabulate


def test_tabulate():
    data = pa.table(
        {"country": ["Chad", "Norway"], "year": [2007, 2007], "gdp": [1704.0637, None]}
    )
    assert tabulate(data) == (
        "country | year | gdp\n"
        "------- | ---- | -------\n"
        "Chad    | 2007 | 1704.06\n"
        "Norway  | 2007 | null"
    )


def test_tabulate_record_batch():
    batch = pa.record_batch({"year": [1952]})
    assert tabulate(batch) == "year\n----\n1952"


def test_tabulate_truncates_rows():
    data = pa.table({"year": list(range(25))})
    text = tabulate(data, max_rows=3)
    assert text.splitlines() == ["year", "----", "0", "1", "2", "... and 22 more rows"]


def test_format_value():
    assert format_value(3.14159) == "3.14"
    assert format_value(3.14159, float_digits=4) == "3.1416"
    assert format_value(True) == "true"
    assert format_value(None) == "null"
    assert format_value("x" * 40) == "x" * 27 + "..."
