import pytest

from ai_analyst.charts import CellKind, TableMarkdownTranspiler, extract_tables
from ai_analyst.charts.tables import classify_cell, split_row

TWO_BY_THREE = """Here are the numbers:

| Region | Sales |
|--------|------:|
| North | 100 |
| South | 80 |
| West | 75 |

That is all."""


def test_table_headers_and_rows_in_order():
    tables = extract_tables(TWO_BY_THREE)

    assert len(tables) == 1
    table = tables[0]
    assert table.headers == ["Region", "Sales"]
    assert table.rows == [["North", "100"], ["South", "80"], ["West", "75"]]


def test_cell_kinds_and_alignment():
    table = extract_tables(TWO_BY_THREE)[0]

    assert table.cell_kinds[0] == [CellKind.TEXT, CellKind.NUMERIC]
    assert table.alignment()[0] == ["left", "right"]
    assert table.to_dict()["cell_kinds"][2] == ["text", "numeric"]


def test_multiple_tables_are_found():
    text = (
        "| a | b |\n|---|---|\n| 1 | 2 |\n\n"
        "Between.\n\n"
        "| c |\n|---|\n| x |\n| y |\n"
    )

    tables = TableMarkdownTranspiler().extract_tables(text)

    assert [table.headers for table in tables] == [["a", "b"], ["c"]]
    assert tables[1].rows == [["x"], ["y"]]


def test_interior_empty_cells_are_kept():
    assert split_row("| North |  | 100 |") == ["North", "", "100"]


def test_text_without_tables():
    assert extract_tables("No tables | here") == []
    assert extract_tables("") == []
    assert extract_tables(None) == []


@pytest.mark.parametrize("cell,kind", [
    ("42", CellKind.NUMERIC),
    ("-3.5", CellKind.NUMERIC),
    ("1e3", CellKind.NUMERIC),
    ("$1,200", CellKind.CURRENCY),
    ("2024-01-31", CellKind.DATE),
    ("2024-01-31T10:00", CellKind.DATE),
    ("North", CellKind.TEXT),
    ("12%", CellKind.TEXT),
])
def test_classify_cell(cell, kind):
    assert classify_cell(cell) == kind


def test_cell_text_is_not_modified():
    table = extract_tables("| Price |\n|---|\n| $1,200.00 |\n")[0]

    assert table.rows == [["$1,200.00"]]


def test_crlf_line_endings():
    tables = extract_tables("| a | b |\r\n|---|---|\r\n| 1 | 2 |\r\n")

    assert len(tables) == 1
    assert tables[0].headers == ["a", "b"]
    assert tables[0].rows == [["1", "2"]]
