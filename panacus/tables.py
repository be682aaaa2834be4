"""Recording the nodes of a path or walk in item tables, honouring include/exclude coordinates."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from panacus.segments import (
    CHUNK_SIZE,
    NodeIndex,
    Orientation,
    path_segment_ids,
    sequence_end,
    walk_segment_ids,
)
from panacus.util import ActiveTable, Interval, IntervalContainer, ItemTable

log = logging.getLogger(__name__)


def _clip(
    coords: Sequence[Interval], k: int, p: int, length: int
) -> tuple[int, int, int, bool]:
    """Clip interval ``k`` to the node spanning ``[p, p + length)``.

    Returns the node-relative bounds, the next interval index and whether the
    interval reaches beyond the node (so scanning stops at this node).
    """
    lo, hi = coords[k]
    a = lo - p if lo > p else 0
    if hi < p + length:
        return a, hi - p, k + 1, False
    return a, length, k, True


def update_tables(
    item_table: ItemTable,
    subset_covered_bps: Optional[IntervalContainer],
    exclude_tables: Iterable[Optional[ActiveTable]],
    num_path: int,
    nodes: NodeIndex,
    path: Sequence[tuple[int, Orientation]],
    include_coords: Sequence[Interval],
    exclude_coords: Sequence[Interval],
    offset: int,
) -> tuple[int, int]:
    """Record the nodes of ``path`` that overlap the include coordinates.

    Nodes overlapping the exclude coordinates are flagged in every given exclude
    table. Returns the number of included node visits and their covered bp.
    """
    tables = [table for table in exclude_tables if table is not None]
    i = j = 0
    p = offset
    included = included_bp = excluded = 0

    log.debug("checking inclusion/exclusion criteria on %s nodes..", len(path))
    if not path:
        return included, included_bp

    for sid, orientation in path:
        length = nodes.node_len(sid)

        # a node is counted once per include interval that overlaps it
        stop_here = False
        while i < len(include_coords) and include_coords[i][0] < p + length and not stop_here:
            if include_coords[i][1] > p:
                a, b, i, stop_here = _clip(include_coords, i, p, length)
                if orientation is Orientation.BACKWARD:
                    a, b = length - b, length - a
                item_table.items.append(sid)
                item_table.id_prefsum[num_path + 1] += 1
                if subset_covered_bps is not None:
                    if b - a == length:
                        subset_covered_bps.remove(sid)
                    else:
                        subset_covered_bps.add(sid, a, b)
                included += 1
                included_bp += b - a
            else:
                i += 1

        stop_here = False
        while j < len(exclude_coords) and exclude_coords[j][0] < p + length and not stop_here:
            if exclude_coords[j][1] > p:
                a, b, j, stop_here = _clip(exclude_coords, j, p, length)
                if orientation is Orientation.BACKWARD:
                    a, b = length - b, length - a
                for table in tables:
                    if table.annotated:
                        table.activate_n_annotate(sid, length, a, b)
                    else:
                        table.activate(sid)
                    excluded += 1
            else:
                j += 1

        if i >= len(include_coords) and j >= len(exclude_coords):
            break
        p += length

    log.debug(
        "found %s included nodes (%s included bps) and %s excluded nodes, and discarded the rest",
        included,
        included_bp,
        excluded,
    )
    item_table.id_prefsum[num_path + 1] += item_table.id_prefsum[num_path]
    return included, included_bp


def _record(
    segment_ids: Sequence[int],
    item_table: ItemTable,
    exclude_tables: Iterable[Optional[ActiveTable]],
    num_path: int,
) -> int:
    """Append a whole path's nodes, close its prefix sum and flag excluded nodes."""
    item_table.items.extend(segment_ids)
    item_table.id_prefsum[num_path + 1] += len(segment_ids)
    num_nodes = item_table.id_prefsum[num_path + 1]
    item_table.id_prefsum[num_path + 1] += item_table.id_prefsum[num_path]

    first = item_table.id_prefsum[num_path]
    last = item_table.id_prefsum[num_path + 1]
    for table in exclude_tables:
        if table is None:
            continue
        log.debug("flagging nodes of path as excluded")
        for item in item_table.items[first:last]:
            table.items[item] = True
    return num_nodes


def parse_path_seq_update_tables(
    data: bytes,
    nodes: NodeIndex,
    item_table: ItemTable,
    exclude_tables: Iterable[Optional[ActiveTable]],
    num_path: int,
) -> tuple[int, int]:
    """Record every node of a path sequence such as ``1+,2-``.

    Returns the number of nodes recorded and their total length in bp.
    """
    end = sequence_end(data)
    log.debug("parsing path sequences of size %s bytes..", end)
    segment_ids, bp_len = path_segment_ids(data, nodes, end, CHUNK_SIZE)
    num_nodes = _record(segment_ids, item_table, exclude_tables, num_path)
    log.debug("..done")
    return num_nodes, bp_len


def parse_walk_seq_update_tables(
    data: bytes,
    nodes: NodeIndex,
    item_table: ItemTable,
    exclude_tables: Iterable[Optional[ActiveTable]],
    num_path: int,
) -> tuple[int, int]:
    """Record every node of a walk sequence such as ``>1<2``.

    Returns the number of nodes recorded and their total length in bp.
    """
    if not data:
        return 0, 0
    end = sequence_end(data)
    log.debug("parsing walk sequences of size %s..", end)
    segment_ids, bp_len = walk_segment_ids(data, nodes, end, CHUNK_SIZE)
    num_nodes = _record(segment_ids, item_table, exclude_tables, num_path)
    log.debug("..done")
    return num_nodes, bp_len