"""Export serialization."""

from credmap.export.writer import FORMATS, STDOUT, render, write_atomic, write_output

__all__ = ["FORMATS", "STDOUT", "render", "write_atomic", "write_output"]
