"""Reading all path (P) and walk (W) lines of a graph into an item table."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Sequence, Union

from panacus.segments import (
    NodeIndex,
    WalkIdentifier,
    parse_path_identifier,
    parse_path_seq_to_item_vec,
    parse_walk_identifier,
    parse_walk_seq_to_item_vec,
)
from panacus.tables import (
    parse_path_seq_update_tables,
    parse_walk_seq_update_tables,
    update_tables,
)
from panacus.util import (
    ActiveTable,
    CountType,
    Interval,
    IntervalContainer,
    ItemTable,
    intersects,
    is_contained,
)

log = logging.getLogger(__name__)

_UNBOUNDED = 2**64 - 1
_COMPLETE: tuple[Interval, ...] = ((0, _UNBOUNDED),)

CoordinateMap = Mapping[str, Sequence[Interval]]


@dataclass
class PathWalkResult:
    """Item table of all paths and walks, the updated masks and per-path sizes.

    ``paths_len`` maps each path key to (number of recorded nodes, bp length).
    """

    item_table: ItemTable
    exclude_table: Optional[ActiveTable]
    subset_covered_bps: Optional[IntervalContainer]
    paths_len: dict[str, tuple[int, int]] = field(default_factory=dict)


def _walk_id(identifier: WalkIdentifier) -> str:
    return f"{identifier.sample}#{identifier.haplotype}#{identifier.seqid}"


def _walk_key(identifier: WalkIdentifier) -> str:
    coords = identifier.coords
    base = _walk_id(identifier)
    return base if coords is None else f"{base}:{coords[0]}-{coords[1]}"


def _lookup(
    coord_map: Optional[CoordinateMap], path_id: str, default: Sequence[Interval]
) -> Sequence[Interval]:
    if coord_map is None:
        return default
    coords = coord_map.get(path_id)
    if coords is None:
        return ()
    log.debug("found coords %s for path segment %s", list(coords), path_id)
    return coords


def parse_gfa_paths_walks(
    stream: Iterable[Union[bytes, str]],
    nodes: NodeIndex,
    count: CountType,
    include_map: Optional[CoordinateMap] = None,
    exclude_map: Optional[CoordinateMap] = None,
    exclude_table: Optional[ActiveTable] = None,
    subset_covered_bps: Optional[IntervalContainer] = None,
) -> PathWalkResult:
    """Record the nodes of every P and W line of ``stream``.

    ``include_map`` and ``exclude_map`` map a path id (the path name, or
    ``sample#haplotype#seqid`` for walks) to sorted, disjoint intervals; ``None``
    means no restriction of that kind. Only node and bp counting are supported.
    """
    if count not in (CountType.NODE, CountType.BP):
        raise ValueError(f"inadmissable count type: {count}")

    log.info("parsing path + walk sequences")
    item_table = ItemTable(0)
    paths_len: dict[str, tuple[int, int]] = {}
    num_path = 0
    timer = time.perf_counter()

    for raw in stream:
        line = raw.encode("utf-8") if isinstance(raw, str) else raw
        if not line or line[:1] not in (b"P", b"W"):
            continue
        is_path = line[:1] == b"P"
        if is_path:
            name, sequence = parse_path_identifier(line)
            path_id = key = name
            start, end = 0, _UNBOUNDED
        else:
            identifier, sequence = parse_walk_identifier(line)
            path_id = _walk_id(identifier)
            key = _walk_key(identifier)
            start, end = identifier.coords or (0, _UNBOUNDED)

        log.debug("processing path %s", key)
        item_table.id_prefsum.append(0)

        include_coords = _lookup(include_map, path_id, _COMPLETE)
        exclude_coords = _lookup(exclude_map, path_id, ())

        if (
            include_map is not None
            and not intersects(include_coords, (start, end))
            and not intersects(exclude_coords, (start, end))
        ):
            log.debug("path %s lies outside subset and exclude coordinates, skipped", key)
            item_table.id_prefsum[num_path + 1] += item_table.id_prefsum[num_path]
            num_path += 1
            continue

        fully_contained = (
            include_map is None or is_contained(include_coords, (start, end))
        ) and (exclude_map is None or is_contained(exclude_coords, (start, end)))

        if fully_contained:
            masks = [None if not exclude_coords else exclude_table]
            update = parse_path_seq_update_tables if is_path else parse_walk_seq_update_tables
            paths_len[key] = update(sequence, nodes, item_table, masks, num_path)
        else:
            to_items = parse_path_seq_to_item_vec if is_path else parse_walk_seq_to_item_vec
            steps = to_items(sequence, nodes)
            paths_len[key] = update_tables(
                item_table,
                subset_covered_bps,
                [exclude_table],
                num_path,
                nodes,
                steps,
                include_coords,
                exclude_coords,
                start,
            )
        num_path += 1

    log.info(
        "func done; count: %s; time elapsed: %.3fs", count, time.perf_counter() - timer
    )
    return PathWalkResult(item_table, exclude_table, subset_covered_bps, paths_len)