"""Parsing of path (P) and walk (W) lines into node identifiers and orientations."""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence, Union

log = logging.getLogger(__name__)

CHUNK_SIZE = 8192

_WALK_MARK = re.compile(rb"[<>]")
_SEQUENCE_END = re.compile(rb"[\t\n\r]")

ByteLike = Union[int, bytes, str]


def _as_byte(value: ByteLike) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        value = value.encode("utf-8")
    if len(value) != 1:
        raise ValueError(f"expected a single character, got {value!r}")
    return value[0]


class Orientation(enum.Enum):
    """Direction in which a node is traversed."""

    FORWARD = "forward"
    BACKWARD = "backward"

    @classmethod
    def from_pm(cls, byte: ByteLike) -> "Orientation":
        """Orientation from a path step suffix: '+' or '-'."""
        code = _as_byte(byte)
        if code == ord("+"):
            return cls.FORWARD
        if code == ord("-"):
            return cls.BACKWARD
        raise ValueError(f"unknown orientation {chr(code)!r}, expected '+' or '-'")

    @classmethod
    def from_lg(cls, byte: ByteLike) -> "Orientation":
        """Orientation from a walk step prefix: '>' or '<'."""
        code = _as_byte(byte)
        if code == ord(">"):
            return cls.FORWARD
        if code == ord("<"):
            return cls.BACKWARD
        raise ValueError(f"unknown orientation {chr(code)!r}, expected '>' or '<'")


class NodeIndex:
    """Maps node names to numeric ids (starting at 1) and holds node lengths."""

    def __init__(self, names: Iterable[Union[str, bytes]], lengths: Sequence[int]) -> None:
        self._ids: dict[bytes, int] = {}
        for item_id, name in enumerate(names, start=1):
            key = name.encode("utf-8") if isinstance(name, str) else bytes(name)
            if key in self._ids:
                raise ValueError(
                    f"segment with ID {key.decode('utf-8', 'replace')} occurs multiple times"
                )
            self._ids[key] = item_id
        self._lengths = list(lengths)
        if len(self._lengths) != len(self._ids):
            raise ValueError(
                f"got {len(self._ids)} node names but {len(self._lengths)} node lengths"
            )

    def __len__(self) -> int:
        return len(self._ids)

    def get_node_id(self, name: Union[str, bytes]) -> Optional[int]:
        key = name.encode("utf-8") if isinstance(name, str) else bytes(name)
        return self._ids.get(key)

    def node_len(self, item_id: int) -> int:
        if not 1 <= item_id <= len(self._lengths):
            raise KeyError(f"unknown node id {item_id}")
        return self._lengths[item_id - 1]


@dataclass(frozen=True)
class WalkIdentifier:
    """Sample, haplotype, sequence id and optional coordinates of a walk line."""

    sample: str
    haplotype: str
    seqid: str
    start: Optional[int] = None
    end: Optional[int] = None

    @property
    def coords(self) -> Optional[tuple[int, int]]:
        if self.start is None or self.end is None:
            return None
        return (self.start, self.end)


def _coordinate(text: str) -> Optional[int]:
    if text == "*":
        return None
    if not (text.isascii() and text.isdigit()):
        raise ValueError(f"walk coordinate `{text}` is not an unsigned integer")
    return int(text)


def parse_walk_identifier(line: bytes) -> tuple[WalkIdentifier, bytes]:
    """Split a W line into its identifier and the remaining walk sequence."""
    parts = line.split(b"\t", 6)
    if len(parts) < 7:
        raise ValueError("walk line has fewer than seven tab-separated columns")
    columns = [part.decode("utf-8") for part in parts[:6]]
    identifier = WalkIdentifier(
        sample=columns[1],
        haplotype=columns[2],
        seqid=columns[3],
        start=_coordinate(columns[4]),
        end=_coordinate(columns[5]),
    )
    return identifier, parts[6]


def parse_path_identifier(line: bytes) -> tuple[str, bytes]:
    """Split a P line into the path name and the remaining path sequence."""
    parts = line.split(b"\t", 2)
    if len(parts) < 3:
        raise ValueError("path line has fewer than three tab-separated columns")
    return parts[1].decode("utf-8"), parts[2]


def sequence_end(data: bytes) -> int:
    """Position of the first tab or line break, or the length of the data."""
    match = _SEQUENCE_END.search(data)
    return match.start() if match else len(data)


def _path_spans(data: bytes, end: int, chunk_size: int) -> Iterator[tuple[int, int]]:
    """Yield (start, stop) of each comma-separated step, processed chunk by chunk."""
    for chunk_start in range(0, end, chunk_size):
        chunk_end = min(end, chunk_start + chunk_size)
        if chunk_start == 0:
            pos = 0
        else:
            comma = data.find(b",", chunk_start, chunk_end)
            # a chunk without a comma holds no step start of its own
            pos = comma + 1 if comma >= 0 else chunk_start + chunk_size + 3
        while pos - chunk_start < chunk_size + 1:
            comma = data.find(b",", pos)
            stop = end if comma < 0 else min(comma, end)
            if pos >= stop:
                break
            yield pos, stop
            pos = stop + 1


def _walk_spans(data: bytes, end: int, chunk_size: int) -> Iterator[tuple[int, int]]:
    """Yield (start, stop) of each '<'/'>'-prefixed step, processed chunk by chunk."""
    for chunk_start in range(0, end, chunk_size):
        chunk_end = min(end, chunk_start + chunk_size)
        if chunk_start == 0:
            pos = 0
        else:
            mark = _WALK_MARK.search(data, chunk_start, chunk_end)
            pos = mark.start() if mark else chunk_start + chunk_size + 3
        while pos - chunk_start < chunk_size:
            mark = _WALK_MARK.search(data, pos + 1)
            stop = end if mark is None else min(mark.start(), end)
            if pos >= stop:
                break
            yield pos, stop
            pos = stop


def _unknown(step: bytes) -> ValueError:
    return ValueError(f"unknown node {step.decode('utf-8', 'replace')}")


def _path_step_id(step: bytes, nodes: NodeIndex) -> int:
    item_id = nodes.get_node_id(step[:-1])
    if item_id is None:
        raise _unknown(step)
    if step[-1] not in b"+-":
        raise ValueError(
            f"unknown orientation of segment {step.decode('utf-8', 'replace')}"
        )
    return item_id


def _walk_step_id(step: bytes, nodes: NodeIndex) -> int:
    item_id = nodes.get_node_id(step[1:])
    if item_id is None:
        raise _unknown(step)
    if step[0] not in b"<>":
        raise ValueError(
            f"unknown orientation of segment {step.decode('utf-8', 'replace')}"
        )
    return item_id


def path_segment_ids(
    data: bytes, nodes: NodeIndex, end: int, chunk_size: int
) -> tuple[list[int], int]:
    """Node ids of a path sequence up to ``end`` and their total length in bp."""
    ids = [_path_step_id(data[a:b], nodes) for a, b in _path_spans(data, end, chunk_size)]
    return ids, sum(nodes.node_len(i) for i in ids)


def walk_segment_ids(
    data: bytes, nodes: NodeIndex, end: int, chunk_size: int
) -> tuple[list[int], int]:
    """Node ids of a walk sequence up to ``end`` and their total length in bp."""
    ids = [_walk_step_id(data[a:b], nodes) for a, b in _walk_spans(data, end, chunk_size)]
    return ids, sum(nodes.node_len(i) for i in ids)


def parse_path_seq_to_item_vec(data: bytes, nodes: NodeIndex) -> list[tuple[int, Orientation]]:
    """Node ids with orientation of a path sequence such as ``1+,2-``."""
    end = sequence_end(data)
    log.debug("parsing path sequences of size %s..", end)
    steps = [
        (_path_step_id(data[a:b], nodes), Orientation.from_pm(data[b - 1]))
        for a, b in _path_spans(data, end, CHUNK_SIZE)
    ]
    log.debug("..done")
    return steps


def parse_walk_seq_to_item_vec(data: bytes, nodes: NodeIndex) -> list[tuple[int, Orientation]]:
    """Node ids with orientation of a walk sequence such as ``>1<2``."""
    if not data:
        return []
    end = sequence_end(data)
    log.debug("parsing walk sequences of size %s..", end)
    steps = [
        (_walk_step_id(data[a:b], nodes), Orientation.from_lg(data[a]))
        for a, b in _walk_spans(data, end, CHUNK_SIZE)
    ]
    log.debug("..done")
    return steps