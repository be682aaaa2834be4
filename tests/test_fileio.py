import gzip
import io

import pytest

from panacus.fileio import (
    BedRegion,
    OutputFormat,
    TableFormatError,
    open_gfa,
    parse_bed,
    parse_groups,
    parse_threshold_file,
    parse_tsv,
)
from panacus.util import Threshold


def _text(data: str) -> io.StringIO:
    return io.StringIO(data)


def test_output_format_values():
    assert OutputFormat("table") is OutputFormat.TABLE
    assert OutputFormat("html") is OutputFormat.HTML
    with pytest.raises(ValueError):
        OutputFormat("pdf")


def test_parse_bed_with_1_column():
    result = parse_bed(_text("chr1\nchr2"), True)
    assert result == [BedRegion("chr1"), BedRegion("chr2")]


def test_parse_bed_with_2_columns():
    with pytest.raises(
        TableFormatError,
        match="error in line 1: row must have either 1, 3, or 12 columns, but has 2",
    ):
        parse_bed(_text("chr1\t1000\n"), False)


def test_parse_bed_with_no_usize():
    with pytest.raises(TableFormatError, match=r"error line 1: `100.5` is not an usize"):
        parse_bed(_text("chr1\t100.5\tACGT\n"), False)


def test_parse_bed_with_3_columns():
    result = parse_bed(_text("chr1\t1000\t2000\nchr2\t1500\t2500"), False)
    assert result == [BedRegion("chr1", 1000, 2000), BedRegion("chr2", 1500, 2500)]
    assert result[0].coords == (1000, 2000)


def test_parse_bed_with_12_columns_no_block():
    data = "chr1\t1000\t2000\tname\t0\t+\t1000\t2000\t0\t2\t100,100\t0,900\n"
    assert parse_bed(_text(data), False) == [BedRegion("chr1", 1000, 2000)]


def test_parse_bed_with_12_columns_with_block():
    data = "chr1\t1000\t2000\tname\t0\t+\t1000\t2000\t0\t2\t100,100\t0,900\n"
    assert parse_bed(_text(data), True) == [
        BedRegion("chr1", 1000, 1100),
        BedRegion("chr1", 1900, 2000),
    ]


def test_parse_bed_block_count_mismatch():
    data = "chr1\t1000\t2000\tname\t0\t+\t1000\t2000\t0\t3\t100,100\t0,900\n"
    with pytest.raises(TableFormatError, match="counts do not match"):
        parse_bed(_text(data), True)


def test_parse_bed_with_header():
    data = (
        "browser position chr1:1-1000\n"
        "browser position chr7:127471196-127495720\n"
        "browser hide all\n"
        "track name='ItemRGBDemo' description='Item RGB demonstration' visibility=2 itemRgb='On'\n"
        "chr1\t1000\t2000\n"
        "chr2\t1500\t2500\n"
    )
    assert parse_bed(_text(data), False) == [
        BedRegion("chr1", 1000, 2000),
        BedRegion("chr2", 1500, 2500),
    ]


def test_parse_bed_accepts_bytes_lines():
    result = parse_bed(io.BytesIO(b"chr1\t1\t5\r\n#comment\n"), False)
    assert result == [BedRegion("chr1", 1, 5)]


def test_parse_groups_valid():
    data = io.BytesIO(b"a#0\tG1\nb#0\tG1\nc#0\tG2\nc#1\tG2\nd#0\tG2\n")
    result = parse_groups(data)
    assert [name.name for name, _ in result] == ["a#0", "b#0", "c#0", "c#1", "d#0"]
    assert [group for _, group in result] == ["G1", "G1", "G2", "G2", "G2"]


def test_parse_groups_wrong_column_count():
    with pytest.raises(TableFormatError, match="error in line 2: table must have exactly two columns"):
        parse_groups(io.BytesIO(b"a#0\tG1\nb#0\tG1\textra\n"))


def test_parse_groups_invalid_utf8():
    with pytest.raises(TableFormatError, match="error in line 1: some character is not UTF-8"):
        parse_groups(io.BytesIO(b"a\xff\tG1\n"))


def test_parse_tsv_splits_comments_and_rows():
    data = io.BytesIO(b"# header\tmore\npanacus\thist\n\t\n# mid\n0\t5\n")
    comments, table = parse_tsv(data)
    assert comments == [b"# header\tmore", b"# mid"]
    assert table == [[b"panacus", b"hist"], [b"0", b"5"]]


def test_parse_tsv_empty_input():
    assert parse_tsv(io.BytesIO(b"")) == ([], [])


def test_parse_threshold_file():
    data = _text("1\n0.5\n3\textra\n")
    result = parse_threshold_file(data)
    assert result == [Threshold.absolute(1), Threshold.relative(0.5), Threshold.absolute(3)]
    assert [t.is_relative for t in result] == [False, True, False]


def test_parse_threshold_file_rejects_words():
    with pytest.raises(TableFormatError, match=r'threshold "abc" \(line 2\)'):
        parse_threshold_file(_text("1\nabc\n"))


def test_open_gfa_plain_and_gzip(tmp_path):
    content = b"S\t1\tACGT\nP\tp1\t1+\t*\n"
    plain = tmp_path / "graph.gfa"
    plain.write_bytes(content)
    packed = tmp_path / "graph.gfa.gz"
    with gzip.open(packed, "wb") as handle:
        handle.write(content[:10])
    with open(packed, "ab") as raw:
        raw.write(gzip.compress(content[10:]))

    with open_gfa(str(plain)) as handle:
        assert handle.read() == content
    with open_gfa(str(packed)) as handle:
        assert handle.readlines() == content.splitlines(keepends=True)