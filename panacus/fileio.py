"""Readers for the auxiliary text formats: BED regions, group tables, TSV tables, thresholds."""

from __future__ import annotations

import enum
import gzip
import io
import logging
import re
from dataclasses import dataclass
from typing import BinaryIO, Iterable, Iterator, Optional, Union

from panacus.util import Threshold

log = logging.getLogger(__name__)

_USIZE = re.compile(r"\+?[0-9]+")
_USIZE_MAX = 2**64 - 1

Line = Union[str, bytes]


class OutputFormat(enum.Enum):
    """How results are rendered."""

    TABLE = "table"
    HTML = "html"

    def __str__(self) -> str:
        return self.value


class TableFormatError(ValueError):
    """Raised when a tabular input file does not have the expected shape or content."""


@dataclass(frozen=True)
class BedRegion:
    """A named sequence, optionally restricted to the half-open range [start, end)."""

    name: str
    start: Optional[int] = None
    end: Optional[int] = None

    @property
    def coords(self) -> Optional[tuple[int, int]]:
        if self.start is None or self.end is None:
            return None
        return (self.start, self.end)


def _parse_usize(text: str) -> Optional[int]:
    """Parse an unsigned integer strictly: optional '+', ASCII digits, no blanks."""
    if not _USIZE.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _USIZE_MAX else None


def _parse_float(text: str) -> Optional[float]:
    """Parse a float without accepting surrounding blanks or digit separators."""
    if not text or text != text.strip() or "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def open_gfa(path: str) -> BinaryIO:
    """Open a graph file for binary reading, decompressing it if it ends with '.gz'."""
    log.info("loading graph from %s", path)
    if path.endswith(".gz"):
        log.info("assuming that %s is gzip compressed..", path)
        return io.BufferedReader(gzip.open(path, "rb"))
    return open(path, "rb")


def _text_lines(stream: Iterable[Line]) -> Iterator[tuple[int, str]]:
    """Yield (line number, text without line terminator), starting at 1."""
    for number, raw in enumerate(stream, start=1):
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ValueError(f"error reading line {number}: {exc}") from None
        if raw.endswith("\r\n"):
            raw = raw[:-2]
        elif raw.endswith("\n"):
            raw = raw[:-1]
        yield number, raw


def parse_bed(stream: Iterable[Line], use_block_info: bool) -> list[BedRegion]:
    """Read regions from a BED file with 1, 3 or 12 columns.

    With ``use_block_info`` a 12-column row yields one region per block.
    """
    regions: list[BedRegion] = []
    for number, line in _text_lines(stream):
        fields = line.split("\t")
        name = fields[0]
        if name.startswith(("browser ", "track ", "#")):
            continue

        if len(fields) == 1:
            regions.append(BedRegion(name))
            continue
        if len(fields) < 3:
            raise TableFormatError(
                f"error in line {number}: row must have either 1, 3, or 12 columns, but has 2"
            )

        start = _parse_usize(fields[1])
        if start is None:
            raise TableFormatError(f"error line {number}: `{fields[1]}` is not an usize")
        end = _parse_usize(fields[2])
        if end is None:
            raise TableFormatError(f"error line {number}: `{fields[2]}` is not an usize")

        if use_block_info and len(fields) == 12:
            block_count = _parse_usize(fields[9]) or 0
            sizes = [v for v in (_parse_usize(s.strip()) for s in fields[10].split(",")) if v is not None]
            offsets = [v for v in (_parse_usize(s.strip()) for s in fields[11].split(",")) if v is not None]
            if block_count != len(sizes) or block_count != len(offsets):
                raise TableFormatError(
                    f"error in block sizes/starts in line {number}: counts do not match"
                )
            for size, offset in zip(sizes, offsets):
                block_start = start + offset
                regions.append(BedRegion(name, block_start, block_start + size))
        else:
            regions.append(BedRegion(name, start, end))
    return regions


def parse_groups(stream: Iterable[Line]) -> list[tuple[BedRegion, str]]:
    """Read a two-column, tab-separated table assigning each path a group."""
    result: list[tuple[BedRegion, str]] = []
    for number, raw in enumerate(stream, start=1):
        if isinstance(raw, str):
            raw = raw.encode("utf-8")
        if raw.endswith((b"\n", b"\r")):
            raw = raw[:-1]
        try:
            line = raw.decode("utf-8")
        except UnicodeDecodeError:
            raise TableFormatError(
                f"error in line {number}: some character is not UTF-8"
            ) from None
        columns = line.split("\t")
        if len(columns) != 2:
            message = f"error in line {number}: table must have exactly two columns"
            log.error("%s", message)
            raise TableFormatError(message)
        result.append((BedRegion(columns[0]), columns[1]))
    return result


def parse_tsv(stream: Iterable[Line]) -> tuple[list[bytes], list[list[bytes]]]:
    """Split a tab-separated table into comment lines and data rows.

    Rows whose first column starts with '#' are comments (returned re-joined by tabs);
    rows made only of empty columns are skipped.
    """
    comments: list[bytes] = []
    table: list[list[bytes]] = []
    for raw in stream:
        if isinstance(raw, str):
            raw = raw.encode("utf-8")
        if raw.endswith(b"\r\n"):
            raw = raw[:-2]
        elif raw.endswith((b"\n", b"\r")):
            raw = raw[:-1]
        row = raw.split(b"\t")
        if all(not column for column in row):
            log.debug("Skipping empty line")
            continue
        if row[0].startswith(b"#"):
            comments.append(b"\t".join(row))
        else:
            table.append(row)
    return comments, table


def parse_threshold_file(stream: Iterable[Line]) -> list[Threshold]:
    """Read one threshold per row: integers are absolute, floats relative."""
    thresholds: list[Threshold] = []
    for number, line in _text_lines(stream):
        text = line.split("\t", 1)[0]
        absolute = _parse_usize(text)
        if absolute is not None:
            thresholds.append(Threshold.absolute(absolute))
            continue
        relative = _parse_float(text)
        if relative is not None:
            thresholds.append(Threshold.relative(relative))
            continue
        raise TableFormatError(
            f'threshold "{text}" (line {number}) is neither an integer nor a float'
        )
    return thresholds