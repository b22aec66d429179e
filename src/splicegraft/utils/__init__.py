"""Utility functions for splicegraft.

- Genomic interval value type and interval index
- Logging configuration
"""

from splicegraft.utils.intervals import GenomicInterval, IntervalIndex

__all__ = [
    "GenomicInterval",
    "IntervalIndex",
]
