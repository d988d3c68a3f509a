import pytest

from spanbridge.scan import project_column_names, project_rows
from spanbridge.schema import ColumnInfo
from spanbridge.types import SpannerType, TypeCode

COLUMNS = [
    ColumnInfo("Id", SpannerType(TypeCode.INT64)),
    ColumnInfo("BoolCol", SpannerType(TypeCode.BOOL)),
    ColumnInfo("StringCol", SpannerType(TypeCode.STRING)),
    ColumnInfo("Float64Col", SpannerType(TypeCode.FLOAT64)),
]


def test_column_names_follow_projection_order():
    assert project_column_names(COLUMNS, [2, 0]) == ["StringCol", "Id"]


def test_column_names_all_columns():
    names = project_column_names(COLUMNS, range(len(COLUMNS)))
    assert names == [c.name for c in COLUMNS]


def test_column_names_empty_projection():
    assert project_column_names(COLUMNS, []) == []


@pytest.mark.parametrize("bad", [4, -1, 100])
def test_column_names_out_of_range(bad):
    with pytest.raises(ValueError):
        project_column_names(COLUMNS, [0, bad])


def test_project_rows_empty_batch():
    assert project_rows([], COLUMNS, [0, 1]) == []


def test_project_rows_builds_column_vectors():
    rows = [(1, "hello"), (2, "world"), (3, None)]
    result = project_rows(rows, COLUMNS, [0, 2])
    assert [info.name for info, _ in result] == ["Id", "StringCol"]
    assert result[0][1] == [1, 2, 3]
    assert result[1][1] == ["hello", "world", None]


def test_project_rows_carries_column_types():
    result = project_rows([(True, 3.125)], COLUMNS, [1, 3])
    assert [info.spanner_type.code for info, _ in result] == [
        TypeCode.BOOL,
        TypeCode.FLOAT64,
    ]
    assert result[0][1] == [True]
    assert result[1][1] == [3.125]


def test_project_rows_vector_lengths_match_row_count():
    rows = [(i, str(i)) for i in range(10)]
    result = project_rows(rows, COLUMNS, [0, 2])
    assert all(len(values) == len(rows) for _, values in result)


def test_project_rows_short_row_rejected():
    with pytest.raises(ValueError):
        project_rows([(1, "a"), (2,)], COLUMNS, [0, 2])


def test_project_rows_bad_index_rejected():
    with pytest.raises(ValueError):
        project_rows([(1,)], COLUMNS, [7])