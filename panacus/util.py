"""Shared value types, interval bookkeeping and small numeric/sequence helpers."""

from __future__ import annotations

import bisect
import enum
import functools
import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Iterator, Optional, Sequence

log = logging.getLogger(__name__)

Interval = tuple[int, int]


def _format_float(value: float) -> str:
    """Render a float the way a shortest-roundtrip, non-exponent display does."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


@functools.total_ordering
class CountType(enum.Enum):
    """The kind of graph item that is counted."""

    NODE = "node"
    BP = "bp"
    EDGE = "edge"
    ALL = "all"

    @classmethod
    def default(cls) -> "CountType":
        return cls.NODE

    def __str__(self) -> str:
        return self.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CountType):
            return NotImplemented
        order = list(type(self))
        return order.index(self) < order.index(other)


@dataclass(frozen=True)
class Threshold:
    """A coverage or quorum threshold, either absolute or relative."""

    value: float
    is_relative: bool = False

    @classmethod
    def relative(cls, value: float) -> "Threshold":
        return cls(float(value), True)

    @classmethod
    def absolute(cls, value: int) -> "Threshold":
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"absolute threshold must be a non-negative integer, got {value!r}")
        return cls(value, False)

    def value_string(self) -> str:
        if self.is_relative:
            return _format_float(self.value)
        return str(self.value)

    def __str__(self) -> str:
        return f"{self.value_string()}{'R' if self.is_relative else 'A'}"

    def to_absolute(self, n: int) -> int:
        if not self.is_relative:
            return int(self.value)
        scaled = n * self.value
        if math.isnan(scaled) or scaled <= 0:
            return 0
        return math.ceil(scaled)

    def to_relative(self, n: int) -> float:
        if self.is_relative:
            return self.value
        if n == 0:
            return math.nan if self.value == 0 else math.inf
        return self.value / n


def default_plot_downloads() -> list[tuple[str, str]]:
    return [
        ("png", "Download as png"),
        ("svg", "Download as svg"),
        ("vega-editor", "Open in vega editor"),
    ]


class ItemTable:
    """Flat list of item ids plus a per-path prefix sum into it."""

    def __init__(self, num_walks_paths: int) -> None:
        self.items: list[int] = []
        self.id_prefsum: list[int] = [0] * (num_walks_paths + 1)

    def __repr__(self) -> str:
        return f"ItemTable(items={self.items!r}, id_prefsum={self.id_prefsum!r})"


class ActiveTableError(Exception):
    """Raised when an annotation is requested from a table that has none."""

    def __init__(self, message: str = "Active Table has no annotations") -> None:
        super().__init__(message)


@dataclass
class IntervalContainer:
    """Per-item sorted, disjoint list of half-open intervals."""

    _map: dict[int, list[Interval]] = field(default_factory=dict)

    def add(self, item_id: int, start: int, end: int) -> None:
        log.debug("add %s:%s-%s to interval container", item_id, start, end)
        x = self._map.get(item_id)
        if x is None:
            self._map[item_id] = [(start, end)]
            return
        i = bisect.bisect_left([s for s, _ in x], start)
        if i > 0 and x[i - 1][1] >= start:
            if x[i - 1][1] < end:
                stop = end
                while i < len(x) and x[i][0] <= end:
                    stop = max(stop, x[i][1])
                    del x[i]
                x[i - 1] = (x[i - 1][0], stop)
            # otherwise the new interval lies within the previous one
        elif i < len(x) and x[i][1] >= start and x[i][0] <= end:
            new_start = min(x[i][0], start)
            stop = max(x[i][1], end)
            while i + 1 < len(x) and x[i + 1][0] <= end:
                stop = max(stop, x[i + 1][1])
                del x[i + 1]
            x[i] = (new_start, stop)
        else:
            x.insert(i, (start, end))

    def get(self, item_id: int) -> Optional[list[Interval]]:
        intervals = self._map.get(item_id)
        return None if intervals is None else list(intervals)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._map

    def remove(self, item_id: int) -> Optional[list[Interval]]:
        return self._map.pop(item_id, None)

    def total_coverage(self, item_id: int, exclude: Optional[Sequence[Interval]]) -> int:
        intervals = self._map.get(item_id)
        if intervals is None:
            return 0
        if exclude is None:
            return sum(b - a for a, b in intervals)
        res = 0
        i = 0
        for start, end in intervals:
            # intervals have exclusive right bound
            while i < len(exclude) and exclude[i][1] <= start:
                i += 1
            if i < len(exclude) and exclude[i][0] < end:
                res += min(exclude[i][0] - 1, end) - start
                if exclude[i][1] < end:
                    res += end - exclude[i][1] + 1
            else:
                res += end - start
        return res

    def items(self) -> Iterator[tuple[int, list[Interval]]]:
        return iter(self._map.items())

    def keys(self) -> Iterator[int]:
        return iter(self._map.keys())


class ActiveTable:
    """Boolean activity flags per item, optionally with partial-coverage annotation."""

    def __init__(self, size: int, with_annotation: bool) -> None:
        self.items: list[bool] = [False] * size
        self._annotation: Optional[IntervalContainer] = (
            IntervalContainer() if with_annotation else None
        )

    def activate(self, item_id: int) -> None:
        self.items[item_id] = True

    def is_active(self, item_id: int) -> bool:
        return self.items[item_id]

    def activate_n_annotate(self, item_id: int, item_len: int, start: int, end: int) -> None:
        container = self._annotation
        if container is None:
            raise ActiveTableError()
        if end - start == item_len:
            self.items[item_id] = True
            container.remove(item_id)
            return
        if start > end:
            log.error("start (%s) is larger than end (%s) for node %s", start, end, item_id)
        else:
            container.add(item_id, start, end)
        intervals = container.get(item_id)
        if intervals and intervals[0] == (0, item_len):
            container.remove(item_id)
            self.items[item_id] = True

    def active_intervals(self, item_id: int, item_len: int) -> list[Interval]:
        if self.items[item_id]:
            return [(0, item_len)]
        if self._annotation is not None:
            return self._annotation.get(item_id) or []
        return []

    @property
    def annotated(self) -> bool:
        return self._annotation is not None


def _binary_search(seq: Sequence[Interval], cmp: Callable[[Interval], int]) -> bool:
    """Binary search with a three-way comparator; True if a match is found."""
    lo, hi = 0, len(seq)
    while lo < hi:
        mid = (lo + hi) // 2
        order = cmp(seq[mid])
        if order == 0:
            return True
        if order < 0:
            lo = mid + 1
        else:
            hi = mid
    return False


def intersects(intervals: Sequence[Interval], interval: Interval) -> bool:
    """Whether a sorted, disjoint interval list overlaps the given interval."""
    lo_el, hi_el = interval

    def cmp(iv: Interval) -> int:
        s, e = iv
        if s <= hi_el and e >= lo_el:
            return 0
        if e < lo_el:
            return -1
        return 1

    return _binary_search(intervals, cmp)


def is_contained(intervals: Sequence[Interval], interval: Interval) -> bool:
    """Whether one interval of a sorted, disjoint list encloses the given interval."""
    lo_el, hi_el = interval

    def cmp(iv: Interval) -> int:
        s, e = iv
        if s <= lo_el and e >= hi_el:
            return 0
        if e <= hi_el:
            return -1
        return 1

    return _binary_search(intervals, cmp)


def average(values: Sequence[int]) -> float:
    if not values:
        return math.nan
    return sum(values) / len(values)


def median_sorted(values: Sequence[int]) -> float:
    if not values:
        raise ValueError("median of an empty sequence")
    n = len(values)
    mid = n // 2
    if n % 2 == 1:
        return float(values[mid])
    return (values[mid - 1] + values[mid]) / 2.0


def n50_sorted(values: Sequence[int]) -> Optional[int]:
    total = sum(values)
    running = 0
    for length in values:
        running += length
        if running * 2 >= total:
            return length
    return None


_COMPLEMENT = {
    ord("A"): ord("T"), ord("T"): ord("A"), ord("C"): ord("G"), ord("G"): ord("C"),
    ord("a"): ord("t"), ord("t"): ord("a"), ord("c"): ord("g"), ord("g"): ord("c"),
}

_NUCLEOTIDE_BITS = {
    ord("A"): 0, ord("C"): 1, ord("G"): 2, ord("T"): 3,
    ord("a"): 0, ord("c"): 1, ord("g"): 2, ord("t"): 3,
}


def reverse_complement(dna: bytes) -> bytes:
    try:
        return bytes(_COMPLEMENT[b] for b in reversed(dna))
    except KeyError as exc:
        raise ValueError(f"Invalid nucleotide: {chr(exc.args[0])}") from None


def bits_to_kmer(kmer_bits: int, k: int) -> str:
    return "".join("ACGT"[(kmer_bits >> (2 * (k - i - 1))) & 3] for i in range(k))


def kmer_to_bits(kmer: bytes) -> int:
    result = 0
    for nucleotide in kmer:
        bits = _NUCLEOTIDE_BITS.get(nucleotide)
        if bits is None:
            raise ValueError(f"Invalid nucleotide: {chr(nucleotide)}")
        result = ((result << 2) | bits) & 0xFFFFFFFFFFFFFFFF
    return result


def revcmp(kmer: int, k: int) -> int:
    """Reverse complement of a 2-bit encoded k-mer (1 <= k <= 32)."""
    if not 1 <= k <= 32:
        raise ValueError(f"k must lie between 1 and 32, got {k}")
    result = 0
    for i in range(k):
        result = (result << 2) | (3 - ((kmer >> (2 * i)) & 3))
    return result


def canonical(kmer_bits: int, k: int) -> int:
    return min(kmer_bits, revcmp(kmer_bits, k))


_ID_TRANSLATION = str.maketrans({c: "-" for c in " |/\\'\""})


def to_id(text: str) -> str:
    return text.lower().translate(_ID_TRANSLATION)