"""Utility functions for txrepair.

- Interval operations (overlap, merge, disjoin, directional diff)
- Logging configuration

Example:
    >>> from txrepair.utils.intervals import GenomicInterval, diff_regions
    >>> from txrepair.utils.logging import setup_logging
"""

from txrepair.utils.intervals import (
    DiffInterval,
    GenomicInterval,
    diff_regions,
    merge_intervals,
    union_intervals,
)

__all__ = [
    "DiffInterval",
    "GenomicInterval",
    "diff_regions",
    "merge_intervals",
    "union_intervals",
]
