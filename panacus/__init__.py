"""Coverage counting helpers for pangenome graphs: GFA path and walk parsing, BED and table I/O."""

__version__ = "0.4.0"
__all__ = ["util", "fileio", "histtable", "segments", "tables", "pathwalk"]