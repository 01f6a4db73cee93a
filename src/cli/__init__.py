"""Console helpers for the benchmark entry point."""

from .console import console, dim, fail, header, ok, print_metrics, timing_table

__all__ = [
    "console",
    "ok",
    "fail",
    "dim",
    "header",
    "print_metrics",
    "timing_table",
]
