import math

import pytest

from panacus.fileio import TableFormatError
from panacus.histtable import (
    metadata_comments,
    parse_hists,
    write_ordered_table,
    write_table,
)
from panacus.util import CountType

SAMPLE = [
    "# panacus hist graph.gfa\n",
    "panacus\thist\thist\n",
    "count\tnode\tbp\n",
    "\t\t\n",
    "0\t0\t0\n",
    "1\t5\t50\n",
    "2\t3\t30\n",
]


def test_parse_hists_sample():
    hists, comments = parse_hists(SAMPLE)
    assert comments == [b"# panacus hist graph.gfa"]
    assert hists == [
        (CountType.NODE, [0, 5, 3]),
        (CountType.BP, [0, 50, 30]),
    ]


def test_parse_hists_accepts_bytes_lines():
    hists, _ = parse_hists([line.encode() for line in SAMPLE])
    assert [count for count, _ in hists] == [CountType.NODE, CountType.BP]


def test_parse_hists_sparse_index_fills_zeros():
    lines = ["panacus\thist\n", "count\tedge\n", "0\t7\n", "3\t9\n"]
    hists, comments = parse_hists(lines)
    assert comments == []
    assert hists == [(CountType.EDGE, [7, 0, 0, 9])]


def test_parse_hists_ignores_non_hist_columns():
    lines = [
        "panacus\tgrowth\thist\n",
        "count\tnode\tnode\n",
        "0\t1\t2\n",
        "1\t3\t4\n",
    ]
    hists, _ = parse_hists(lines)
    assert hists == [(CountType.NODE, [2, 4])]


def test_round_trip_write_then_parse():
    headers = [
        ["panacus", "count", "", ""],
        ["hist", "node", "", ""],
        ["hist", "bp", "", ""],
    ]
    columns = [[0.0, 4.0, 2.0, 1.0], [0.0, 40.0, 20.0, 10.0]]
    text = metadata_comments(["panacus", "hist"], "1.0") + write_table(headers, columns)
    hists, comments = parse_hists(text.splitlines(keepends=True))
    assert comments == [b"# panacus hist", b"# version 1.0"]
    assert hists == [
        (CountType.NODE, [0, 4, 2, 1]),
        (CountType.BP, [0, 40, 20, 10]),
    ]


def test_parse_hists_rejects_non_integer_value():
    lines = SAMPLE[:4] + ["0\tx\t0\n"]
    with pytest.raises(TableFormatError, match="error in line 4: value must be integer, but is 'x'"):
        parse_hists(lines)


def test_parse_hists_rejects_unknown_count_type():
    lines = ["# c\n", "panacus\thist\n", "count\tfoo\n", "0\t1\n"]
    with pytest.raises(TableFormatError, match="expected count type declaration, but got 'foo'"):
        parse_hists(lines)


def test_parse_hists_without_hist_columns():
    lines = ["panacus\tgrowth\n", "count\tnode\n", "0\t1\n"]
    with pytest.raises(TableFormatError, match="table does not contain hist columns"):
        parse_hists(lines)


def test_parse_hists_foreign_table():
    lines = ["other\thist\n", "count\tnode\n", "0\t1\n"]
    with pytest.raises(TableFormatError, match="table appears not to be generated by panacus"):
        parse_hists(lines)


def test_parse_hists_empty_input():
    with pytest.raises(TableFormatError):
        parse_hists([])


def test_write_table_floors_values_and_uses_start_index():
    headers = [["panacus", "count"], ["hist", "node"]]
    text = write_table(headers, [[1.7, 2.2]], 5)
    assert text == "panacus\thist\ncount\tnode\n5\t1\n6\t2\n"


def test_write_table_nan():
    text = write_table([], [[math.nan]])
    assert text == "0\tNaN\n"


def test_write_table_empty():
    assert write_table([], []) == ""


def test_write_ordered_table_skips_placeholder_row():
    headers = [["panacus", "count"], ["ordered-growth", "node"]]
    columns = [[math.nan, 3.9, 8.0]]
    text = write_ordered_table(headers, columns, ["g1", "g2"])
    assert text.splitlines() == [
        "panacus\tordered-growth",
        "count\tnode",
        "g1\t3",
        "g2\t8",
    ]


def test_write_ordered_table_index_too_short():
    with pytest.raises(ValueError):
        write_ordered_table([], [[math.nan, 1.0, 2.0]], ["g1"])


def test_metadata_comments():
    text = metadata_comments(["panacus", "hist", "g.gfa"], "1.2")
    assert text == "# panacus hist g.gfa\n# version 1.2\n"


def test_metadata_comments_lines_are_comments():
    lines = metadata_comments(["a"], "v").splitlines()
    assert len(lines) == 2
    assert all(line.startswith("# ") for line in lines)