import pytest
import pyarrow as pa
import pyarrow.compute as pc
from tabground.compute.expressions import (
    FunctionCallExpression,
    RowFunctionExpression,
    as_expression,
)
from tabground.compute.base import ColumnRef, lit
from tabground.errors import ComputationError, SchemaError

@pytest.fixture
def sample_batch():
    return pa.RecordBatch.from_arrays(
        [pa.array([1, 2, 3, 4, 5]), pa.array(['a', 'b', 'c', 'd', 'e'])],
        names=['numbers', 'letters']
    )

def test_function_call_expression_init():
    expr = FunctionCallExpression(pc.add, ColumnRef('numbers'), 1)
    assert expr.func == pc.add
    assert len(expr.args) == 2
    assert isinstance(expr.args[0], ColumnRef)
    assert expr.args[1] == 1

def test_function_call_expression_str():
    expr = FunctionCallExpression(pc.add, ColumnRef('numbers'), 1)
    assert str(expr) == "pyarrow.compute.add(ColumnRef(numbers),1)"

def test_function_call_expression_str_literal():
    expr = FunctionCallExpression(pc.divide, ColumnRef('numbers'), lit(1e6))
    assert str(expr) == "pyarrow.compute.divide(ColumnRef(numbers),Literal(1000000.0))"

def test_function_call_expression_apply_simple(sample_batch):
    expr = FunctionCallExpression(pc.add, ColumnRef('numbers'), 1)
    result = expr.apply(sample_batch)
    expected = pa.array([2, 3, 4, 5, 6])
    assert result.equals(expected)

def test_function_call_expression_apply_literal(sample_batch):
    expr = FunctionCallExpression(pc.multiply, ColumnRef('numbers'), lit(10))
    assert expr.apply(sample_batch).to_pylist() == [10, 20, 30, 40, 50]

def test_function_call_expression_apply_nested(sample_batch):
    inner_expr = FunctionCallExpression(pc.multiply, ColumnRef('numbers'), 2)
    outer_expr = FunctionCallExpression(pc.add, inner_expr, 1)
    result = outer_expr.apply(sample_batch)
    expected = pa.array([3, 5, 7, 9, 11])
    assert result.equals(expected)

def test_function_call_expression_apply_string_ops(sample_batch):
    expr = FunctionCallExpression(pc.utf8_upper, ColumnRef('letters'))
    result = expr.apply(sample_batch)
    expected = pa.array(['A', 'B', 'C', 'D', 'E'])
    assert result.equals(expected)

def test_function_call_expression_apply_comparison(sample_batch):
    expr = FunctionCallExpression(pc.greater, ColumnRef('numbers'), 3)
    result = expr.apply(sample_batch)
    expected = pa.array([False, False, False, True, True])
    assert result.equals(expected)

def test_function_call_expression_apply_multiple_args(sample_batch):
    expr = FunctionCallExpression(pc.if_else,
                                  FunctionCallExpression(pc.greater, ColumnRef('numbers'), 3),
                                  ColumnRef('letters'),
                                  'x')
    result = expr.apply(sample_batch)
    expected = pa.array(['x', 'x', 'x', 'd', 'e'])
    assert result.equals(expected)

def test_function_call_expression_apply_null_handling(sample_batch):
    numbers_with_null = pa.array([1, None, 3, 4, 5])
    batch_with_null = pa.RecordBatch.from_arrays([numbers_with_null, sample_batch['letters']], names=['numbers', 'letters'])
    expr = FunctionCallExpression(pc.add, ColumnRef('numbers'), 1)
    result = expr.apply(batch_with_null)
    expected = pa.array([2, None, 4, 5, 6])
    assert result.equals(expected)

def test_function_call_expression_apply_invalid_column():
    batch = pa.RecordBatch.from_arrays([pa.array([1, 2, 3])], names=['numbers'])
    expr = FunctionCallExpression(pc.add, ColumnRef('non_existent'), 1)
    with pytest.raises(SchemaError) as err:
        expr.apply(batch)
    assert err.value.field == 'non_existent'
    assert "available fields are: numbers" in str(err.value)

def test_function_call_expression_apply_type_mismatch():
    batch = pa.RecordBatch.from_arrays([pa.array(['a', 'b', 'c'])], names=['letters'])
    expr = FunctionCallExpression(pc.add, ColumnRef('letters'), 1)
    with pytest.raises(pa.ArrowNotImplementedError):
        expr.apply(batch)

def test_function_call_expression_division_by_zero(sample_batch):
    expr = FunctionCallExpression(pc.divide, ColumnRef('numbers'), 0)
    with pytest.raises(ComputationError):
        expr.apply(sample_batch)

def test_row_function_expression_apply(sample_batch):
    expr = RowFunctionExpression(lambda r: f"{r['letters']}{r['numbers']}")
    assert expr.apply(sample_batch).to_pylist() == ['a1', 'b2', 'c3', 'd4', 'e5']

def test_row_function_expression_explicit_type(sample_batch):
    expr = RowFunctionExpression(lambda r: r['numbers'] * 2, type=pa.int32())
    result = expr.apply(sample_batch)
    assert result.type == pa.int32()
    assert result.to_pylist() == [2, 4, 6, 8, 10]

def test_row_function_expression_failure(sample_batch):
    expr = RowFunctionExpression(lambda r: 1 / (r['numbers'] - 3))
    with pytest.raises(ComputationError) as err:
        expr.apply(sample_batch)
    assert err.value.row == 2
    assert err.value.record == {'numbers': 3, 'letters': 'c'}
    assert "ZeroDivisionError" in str(err.value)

def test_row_function_expression_missing_field(sample_batch):
    expr = RowFunctionExpression(lambda r: r['missing'])
    with pytest.raises(SchemaError) as err:
        expr.apply(sample_batch)
    assert err.value.field == 'missing'
    assert "available fields are: numbers, letters" in str(err.value)

def test_row_function_expression_key_error_from_data(sample_batch):
    expr = RowFunctionExpression(lambda r: {1: 'one'}[r['numbers']])
    with pytest.raises(ComputationError) as err:
        expr.apply(sample_batch)
    assert err.value.row == 1

def test_row_function_expression_row_offset(sample_batch):
    expr = RowFunctionExpression(lambda r: 1 / (r['numbers'] - 3))
    with pytest.raises(ComputationError) as err:
        expr.apply(sample_batch, row_offset=10)
    assert err.value.row == 12
    assert "row 12" in str(err.value)

def test_row_function_expression_mixed_types(sample_batch):
    expr = RowFunctionExpression(lambda r: r['letters'] if r['numbers'] > 2 else r['numbers'])
    with pytest.raises(ComputationError):
        expr.apply(sample_batch)

def test_as_expression():
    expr = FunctionCallExpression(pc.add, ColumnRef('numbers'), 1)
    assert as_expression(expr) is expr
    assert isinstance(as_expression(lambda r: r), RowFunctionExpression)
    with pytest.raises(TypeError):
        as_expression(42)
