# panacus

Building blocks for counting coverage in pangenome graphs stored as GFA.

The package reads the P (path) and W (walk) lines of a GFA stream. It
resolves each step to a numeric node id and records which nodes every path
covers in an item table. Include and exclude coordinates can restrict the
count to chosen regions. The package also reads BED regions, group
assignments and threshold lists, and it reads and writes the tab-separated
tables that hold coverage histograms.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

The package has no runtime dependencies beyond the standard library.

## Modules

### `panacus.util`

- `CountType`: the kind of item being counted. Its members are `NODE`, `BP`,
  `EDGE` and `ALL`, and `str()` gives `"node"`, `"bp"` and so on.
- `Threshold`: a coverage or quorum threshold. Build one with
  `Threshold.absolute(n)` or `Threshold.relative(x)`. Convert it with
  `to_absolute(n)`, which rounds relative values up, or with
  `to_relative(n)`. `value_string()` gives the bare number, and `str()`
  appends `A` or `R`.
- `IntervalContainer`: for each item id, a sorted list of disjoint half-open
  intervals. `add` merges overlapping and touching intervals into the list.
  It also has `get`, `remove`, `keys`, `items`, `in`, and `total_coverage`,
  which accepts an optional exclude list.
- `ActiveTable`: one boolean flag per item, with optional partial-coverage
  annotation. Its methods are `activate`, `is_active`,
  `activate_n_annotate` and `active_intervals`, plus the `annotated`
  property. Calling `activate_n_annotate` on a table without annotation
  raises `ActiveTableError`.
- `ItemTable`: a flat list of item ids (`items`) plus a per-path prefix sum
  into it (`id_prefsum`).
- Interval lookups on sorted, disjoint lists: `intersects` and
  `is_contained`.
- Summary statistics: `average`, `median_sorted` and `n50_sorted`. The last
  two expect their input to be sorted already.
- 2-bit k-mer helpers: `kmer_to_bits`, `bits_to_kmer`, `revcmp` (for
  1 ≤ k ≤ 32), `canonical`, and `reverse_complement` for byte strings.
- Other helpers: `to_id`, which lower-cases a label and replaces spaces,
  `|`, `/`, `\` and quotes with `-`, and `default_plot_downloads`.

### `panacus.fileio`

- `open_gfa(path)`: opens a file for binary reading. Paths that end in
  `.gz` are decompressed with gzip.
- `parse_bed(stream, use_block_info)`: reads BED rows with 1, 3 or 12
  columns and returns `BedRegion` objects. Browser, track and `#` lines are
  skipped. When `use_block_info` is true, a 12-column row gives one region
  per block.
- `parse_groups(stream)`: reads a two-column table and returns a list of
  `(BedRegion, group)` pairs.
- `parse_tsv(stream)`: splits a tab-separated table into comment lines and
  data rows, both as bytes.
- `parse_threshold_file(stream)`: reads one threshold per row. Integers
  become absolute thresholds and floats become relative ones.
- `OutputFormat`: the enum `TABLE` / `HTML`.
- Malformed input raises `TableFormatError`, a subclass of `ValueError`.

Each stream can be any iterable of `str` or `bytes` lines, such as an open
file or an `io.StringIO`.

### `panacus.histtable`

- `parse_hists(stream)`: reads a histogram table written by this tool.
  It returns a list of `(CountType, coverage list)` pairs and the comment
  lines.
- `write_table(headers, columns, start_index=0)`: renders header rows and
  floored numeric columns, prefixing each data row with its index.
- `write_ordered_table(headers, columns, index)`: like `write_table`, but
  each data row is labelled from `index`, and the first value of every
  column is left out.
- `metadata_comments(argv=None, version="0.4.0")`: returns the `# <command
  line>` and `# version <version>` comment lines.

### `panacus.segments`

- `NodeIndex(names, lengths)`: maps segment names to ids, numbered from 1,
  and gives node lengths through `node_len(id)`. The caller supplies the
  names and the lengths.
- `Orientation`: `FORWARD` or `BACKWARD`, parsed with `from_pm` (`+`/`-`)
  or `from_lg` (`>`/`<`).
- `parse_path_identifier(line)` and `parse_walk_identifier(line)`: split a
  P or W line into its identifier and the remaining sequence. For W lines
  the identifier is a `WalkIdentifier`.
- `parse_path_seq_to_item_vec` and `parse_walk_seq_to_item_vec`: return the
  steps of a sequence as `(id, Orientation)` pairs.
- `path_segment_ids` and `walk_segment_ids`: return the ids and the total
  bp length of a sequence up to a given end, read in chunks of a given
  size.
- `sequence_end(data)`: returns the position of the first tab or line
  break, or the length of the data if there is none.

### `panacus.tables`

- `update_tables(...)`: records the nodes of one path that overlap the
  include coordinates, and flags in each given exclude table the nodes that
  overlap the exclude coordinates.
- `parse_path_seq_update_tables` and `parse_walk_seq_update_tables`: record
  every node of a path or walk sequence. Both return the number of nodes
  and their total length in bp.

### `panacus.pathwalk`

`parse_gfa_paths_walks(stream, nodes, count, include_map=None,
exclude_map=None, exclude_table=None, subset_covered_bps=None)` handles
every P and W line of a stream and returns a `PathWalkResult`. The result
holds the item table, the exclude table, the covered-bp container and
`paths_len`, which maps each path to `(node count, bp length)`.

The include and exclude maps are keyed by path name. For walks the key is
`sample#haplotype#seqid`. Only `CountType.NODE` and `CountType.BP` are
accepted. Any other count type raises `ValueError`.

## Example

```python
from panacus.util import IntervalContainer, Threshold

ic = IntervalContainer()
ic.add(0, 5, 6)
ic.add(0, 4, 5)
print(ic.get(0))                                # [(4, 6)]

print(Threshold.relative(0.5).to_absolute(9))   # 5
```

```python
from panacus.pathwalk import parse_gfa_paths_walks
from panacus.segments import NodeIndex
from panacus.util import CountType

nodes = NodeIndex(["1", "2", "3"], [4, 2, 5])
lines = [
    b"P\tp1\t1+,2-,3+\t*\n",
    b"W\ts\t0\tchr\t*\t*\t>1<3\n",
]
result = parse_gfa_paths_walks(lines, nodes, CountType.NODE)
print(result.paths_len)              # {'p1': (3, 11), 's#0#chr': (2, 9)}
print(result.item_table.items)       # [1, 2, 3, 1, 3]
print(result.item_table.id_prefsum)  # [0, 3, 5]
```

## What this package does not do

- There is no command-line program and no console script. Everything is
  used as a library.
- It does not build the node index from the S lines of a GFA file. Pass
  the segment names and lengths to `NodeIndex` yourself.
- It does not count edges. `parse_gfa_paths_walks` handles node and bp
  counting only.
- It does not compute coverage histograms or growth curves, and it does
  not produce HTML reports. It only reads and writes the table formats
  those results use.