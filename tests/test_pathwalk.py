import pytest

from panacus.pathwalk import PathWalkResult, parse_gfa_paths_walks
from panacus.segments import NodeIndex
from panacus.util import ActiveTable, CountType, IntervalContainer

LENGTHS = [3, 4, 5]

GFA = [
    b"H\tVN:Z:1.0\n",
    b"S\t1\tAAA\n",
    b"S\t2\tAAAA\n",
    b"S\t3\tAAAAA\n",
    b"P\tp1\t1+,2+,3-\t*\n",
    b"W\ts\t0\tc\t0\t12\t>1<3\n",
]


@pytest.fixture
def nodes():
    return NodeIndex(["1", "2", "3"], LENGTHS)


def test_all_paths_recorded(nodes):
    result = parse_gfa_paths_walks(GFA, nodes, CountType.NODE)
    assert isinstance(result, PathWalkResult)
    assert result.item_table.items == [1, 2, 3, 1, 3]
    assert result.item_table.id_prefsum == [0, 3, 5]
    assert result.paths_len["p1"] == (3, sum(LENGTHS))
    assert result.paths_len["s#0#c:0-12"] == (2, LENGTHS[0] + LENGTHS[2])


def test_string_lines_are_accepted(nodes):
    text = [line.decode() for line in GFA]
    result = parse_gfa_paths_walks(text, nodes, CountType.BP)
    assert result.item_table.items == [1, 2, 3, 1, 3]


def test_prefix_sum_matches_items(nodes):
    result = parse_gfa_paths_walks(GFA, nodes, CountType.NODE)
    assert result.item_table.id_prefsum[-1] == len(result.item_table.items)


def test_include_map_restricts_and_skips(nodes):
    covered = IntervalContainer()
    result = parse_gfa_paths_walks(
        GFA, nodes, CountType.BP, include_map={"p1": [(0, 3)]}, subset_covered_bps=covered
    )
    assert result.item_table.items == [1]
    assert result.item_table.id_prefsum == [0, 1, 1]
    assert result.paths_len["p1"] == (1, LENGTHS[0])
    assert "s#0#c:0-12" not in result.paths_len
    assert 1 not in result.subset_covered_bps


def test_exclude_map_flags_nodes(nodes):
    table = ActiveTable(4, False)
    result = parse_gfa_paths_walks(
        GFA, nodes, CountType.NODE, exclude_map={"p1": [(0, 100)]}, exclude_table=table
    )
    assert result.exclude_table.items == [False, True, True, True]
    assert result.item_table.items == [1, 2, 3, 1, 3]


def test_edge_count_rejected(nodes):
    with pytest.raises(ValueError):
        parse_gfa_paths_walks(GFA, nodes, CountType.EDGE)


def test_unknown_node_raises(nodes):
    with pytest.raises(ValueError, match="unknown node"):
        parse_gfa_paths_walks([b"P\tp\t1+,9+\t*\n"], nodes, CountType.NODE)


def test_no_paths_gives_empty_table(nodes):
    result = parse_gfa_paths_walks(GFA[:4], nodes, CountType.NODE)
    assert result.item_table.items == []
    assert result.item_table.id_prefsum == [0]
    assert result.paths_len == {}