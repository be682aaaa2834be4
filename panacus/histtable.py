"""Reading and writing the tab-separated histogram and growth tables."""

from __future__ import annotations

import logging
import math
import sys
from typing import Iterable, Optional, Sequence

from panacus.fileio import Line, TableFormatError, parse_tsv
from panacus.util import CountType

log = logging.getLogger(__name__)

_DEFAULT_VERSION = "0.4.0"
_HEADER_ROWS = 2


def _fail(message: str) -> TableFormatError:
    log.error("%s", message)
    return TableFormatError(message)


def _transpose(table: list[list[bytes]]) -> list[list[bytes]]:
    if not table:
        raise _fail("table does not contain any rows")
    width = len(table[0])
    for number, row in enumerate(table, start=1):
        if len(row) < width:
            raise _fail(
                f"error in table row {number}: expected {width} columns, but found {len(row)}"
            )
    return [[row[j] for row in table] for j in range(width)]


def _decode(cell: bytes) -> str:
    try:
        return cell.decode("utf-8")
    except UnicodeDecodeError:
        return cell.decode("utf-8", errors="replace")


def _parse_column(column: Sequence[bytes], offset: int) -> list[int]:
    if len(column) < _HEADER_ROWS:
        raise _fail("table column is shorter than its header")
    values: list[int] = []
    for i, cell in enumerate(column[_HEADER_ROWS:]):
        text = _decode(cell)
        if not (text.isascii() and text.lstrip("+").isdigit() and text.count("+") <= 1
                and (not text.startswith("+") or len(text) > 1) and "+" not in text[1:]):
            raise _fail(
                f"error in line {i + 3 + offset}: value must be integer, but is '{text}'"
            )
        values.append(int(text))
    return values


def parse_hists(stream: Iterable[Line]) -> tuple[list[tuple[CountType, list[int]]], list[bytes]]:
    """Read the coverage histograms of a table written by this tool.

    Returns one ``(count type, coverage histogram)`` pair per ``hist`` column and
    the comment lines found in the table.
    """
    log.info("loading coverage histogram")
    comments, raw_table = parse_tsv(stream)
    columns = _transpose(raw_table)
    offset = len(comments)
    if len(columns) < 4 and columns[0][0] != b"panacus":
        raise _fail(
            f"error in line {offset}: table appears not to be generated by panacus"
        )

    index = _parse_column(columns[0], offset)
    if not index:
        raise _fail("table does not contain any data rows")
    largest = max(index)

    hists: list[tuple[CountType, list[int]]] = []
    for column in columns[1:]:
        if column[0] != b"hist":
            continue
        declared = _decode(column[1])
        try:
            count = CountType(declared)
        except ValueError:
            raise _fail(
                f"error in line {2 + offset}: expected count type declaration, "
                f"but got '{declared}'"
            ) from None
        coverage = [0] * (largest + 1)
        for position, value in zip(index, _parse_column(column, offset)):
            coverage[position] = value
        hists.append((count, coverage))

    if not hists:
        raise _fail("table does not contain hist columns")
    return hists, comments


def _format_floor(value: float) -> str:
    floored = math.floor(value) if math.isfinite(value) else value
    if math.isnan(floored):
        return "NaN"
    if math.isinf(floored):
        return "inf" if floored > 0 else "-inf"
    if floored == 0 and math.copysign(1.0, value) < 0:
        return "-0"
    return str(int(floored))


def _header_block(headers: Sequence[Sequence[str]]) -> list[str]:
    depth = len(headers[0]) if headers else 0
    return ["\t".join(column[i] for column in headers) + "\n" for i in range(depth)]


def write_table(
    headers: Sequence[Sequence[str]],
    columns: Sequence[Sequence[float]],
    start_index: int = 0,
) -> str:
    """Render header columns and numeric columns as a tab-separated table.

    Each data row is prefixed with its position plus ``start_index``; values are floored.
    """
    lines = _header_block(headers)
    length = len(columns[0]) if columns else 0
    for i in range(length):
        cells = "".join(f"\t{_format_floor(column[i])}" for column in columns)
        lines.append(f"{i + start_index}{cells}\n")
    return "".join(lines)


def write_ordered_table(
    headers: Sequence[Sequence[str]],
    columns: Sequence[Sequence[float]],
    index: Sequence[str],
) -> str:
    """Render a table whose data rows are labelled by ``index``.

    The first value of every column is a placeholder and is not written.
    """
    lines = _header_block(headers)
    length = len(columns[0]) if columns else 0
    if length > 1 and len(index) < length - 1:
        raise ValueError(
            f"index has {len(index)} labels, but the table has {length - 1} data rows"
        )
    for i in range(1, length):
        cells = "".join(f"\t{_format_floor(column[i])}" for column in columns)
        lines.append(f"{index[i - 1]}{cells}\n")
    return "".join(lines)


def metadata_comments(argv: Optional[Sequence[str]] = None, version: str = _DEFAULT_VERSION) -> str:
    """Comment lines recording the command line and the program version."""
    args = sys.argv if argv is None else argv
    return f"# {' '.join(args)}\n# version {version}\n"