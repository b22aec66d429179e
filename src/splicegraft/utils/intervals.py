"""Genomic interval operations.

This module provides the interval value type shared by every stage of
splicegraft, plus a small numpy-backed index for the per-call lookups
(boundary equality and overlap) the pairing and splicing stages need.

Coordinates are 1-based and closed: both ``start`` and ``end`` are part of
the interval, as in GTF files and quantifier junction tables.

Example:
    >>> from splicegraft.utils.intervals import GenomicInterval, IntervalIndex
    >>> exon = GenomicInterval("chr1", 800, 950, "+")
    >>> exon.width
    151
    >>> exon.contains_position(950)
    True
"""

from __future__ import annotations

from collections import defaultdict
from typing import Callable, Generic, Iterable, TypeVar

import attrs
import numpy as np

# =============================================================================
# Constants
# =============================================================================

STRAND_PLUS = "+"
STRAND_MINUS = "-"
STRAND_UNKNOWN = "*"

VALID_STRANDS = frozenset({STRAND_PLUS, STRAND_MINUS, STRAND_UNKNOWN})

T = TypeVar("T")


def _normalize_strand(value: str | None) -> str:
    if value is None or value == "." or value == "":
        return STRAND_UNKNOWN
    return value


def _check_strand(instance, attribute, value) -> None:
    if value not in VALID_STRANDS:
        raise ValueError(f"Invalid strand {value!r}, expected one of +, -, *")


# =============================================================================
# Data Structures
# =============================================================================


@attrs.frozen(slots=True)
class GenomicInterval:
    """A stranded genomic interval.

    Attributes:
        seqid: Chromosome/contig identifier.
        start: Start position (1-based, inclusive).
        end: End position (1-based, inclusive).
        strand: Strand (+, - or * for unknown).
    """

    seqid: str
    start: int = attrs.field(converter=int)
    end: int = attrs.field(converter=int)
    strand: str = attrs.field(
        default=STRAND_UNKNOWN,
        converter=_normalize_strand,
        validator=_check_strand,
    )

    def __attrs_post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(
                f"Interval start ({self.start}) must be <= end ({self.end})"
            )

    def __str__(self) -> str:
        return f"{self.seqid}:{self.start}-{self.end}:{self.strand}"

    @property
    def width(self) -> int:
        """Number of bases covered (closed interval)."""
        return self.end - self.start + 1

    def is_strand_compatible(self, other: GenomicInterval) -> bool:
        """Check that two intervals can be compared on strand.

        An unknown strand is compatible with everything.
        """
        return (
            self.strand == STRAND_UNKNOWN
            or other.strand == STRAND_UNKNOWN
            or self.strand == other.strand
        )

    def overlaps(self, other: GenomicInterval) -> bool:
        """Check if this interval shares at least one base with another."""
        if self.seqid != other.seqid or not self.is_strand_compatible(other):
            return False
        return self.start <= other.end and other.start <= self.end

    def contains(self, other: GenomicInterval) -> bool:
        """Check if this interval fully contains another."""
        if self.seqid != other.seqid or not self.is_strand_compatible(other):
            return False
        return self.start <= other.start and other.end <= self.end

    def contains_position(self, position: int) -> bool:
        """Check if a coordinate on the same chromosome lies within."""
        return self.start <= position <= self.end

    def same_range(self, other: GenomicInterval) -> bool:
        """Check for identical coordinates on compatible strands."""
        return (
            self.seqid == other.seqid
            and self.start == other.start
            and self.end == other.end
            and self.is_strand_compatible(other)
        )

    def start_point(self) -> GenomicInterval:
        """Collapse to the single base at the start."""
        return attrs.evolve(self, end=self.start)

    def end_point(self) -> GenomicInterval:
        """Collapse to the single base at the end."""
        return attrs.evolve(self, start=self.end)

    def point(self, position: int) -> GenomicInterval:
        """Single-base interval at ``position`` on this chromosome and strand."""
        return attrs.evolve(self, start=position, end=position)

    def with_bounds(
        self,
        start: int | None = None,
        end: int | None = None,
    ) -> GenomicInterval:
        """Return a copy with new start and/or end coordinates."""
        return attrs.evolve(
            self,
            start=self.start if start is None else start,
            end=self.end if end is None else end,
        )

    def span(self, other: GenomicInterval) -> GenomicInterval:
        """Smallest interval covering both intervals.

        Raises:
            ValueError: If the intervals are on different chromosomes.
        """
        if self.seqid != other.seqid:
            raise ValueError(
                f"Cannot span intervals on {self.seqid} and {other.seqid}"
            )
        return attrs.evolve(
            self,
            start=min(self.start, other.start),
            end=max(self.end, other.end),
        )


# =============================================================================
# Interval Index
# =============================================================================


class IntervalIndex(Generic[T]):
    """Read-only lookup structure over items carrying a GenomicInterval.

    Items are grouped by chromosome and their boundaries are held in numpy
    arrays so each query is a vectorized comparison. Query results keep the
    order in which items were given.

    Attributes:
        items: The indexed items, in input order.

    Example:
        >>> index = IntervalIndex(junctions, key=lambda j: j.interval)
        >>> index.starting_at(GenomicInterval("chr1", 900, 900, "+"))
    """

    def __init__(
        self,
        items: Iterable[T],
        key: Callable[[T], GenomicInterval],
    ) -> None:
        """Build the index.

        Args:
            items: Items to index.
            key: Function returning the interval of an item.
        """
        self.items: tuple[T, ...] = tuple(items)
        self._key = key

        grouped: dict[str, list[int]] = defaultdict(list)
        for i, item in enumerate(self.items):
            grouped[key(item).seqid].append(i)

        self._positions: dict[str, np.ndarray] = {}
        self._starts: dict[str, np.ndarray] = {}
        self._ends: dict[str, np.ndarray] = {}
        for seqid, positions in grouped.items():
            intervals = [key(self.items[i]) for i in positions]
            self._positions[seqid] = np.asarray(positions, dtype=np.int64)
            self._starts[seqid] = np.fromiter(
                (iv.start for iv in intervals), dtype=np.int64, count=len(intervals)
            )
            self._ends[seqid] = np.fromiter(
                (iv.end for iv in intervals), dtype=np.int64, count=len(intervals)
            )

    def __len__(self) -> int:
        return len(self.items)

    def _select(self, query: GenomicInterval, mask: np.ndarray) -> list[T]:
        hits = []
        for i in self._positions[query.seqid][mask]:
            item = self.items[int(i)]
            if self._key(item).is_strand_compatible(query):
                hits.append(item)
        return hits

    def starting_at(self, query: GenomicInterval) -> list[T]:
        """Items whose start equals the query start."""
        if query.seqid not in self._starts:
            return []
        return self._select(query, self._starts[query.seqid] == query.start)

    def ending_at(self, query: GenomicInterval) -> list[T]:
        """Items whose end equals the query end."""
        if query.seqid not in self._ends:
            return []
        return self._select(query, self._ends[query.seqid] == query.end)

    def overlapping(self, query: GenomicInterval) -> list[T]:
        """Items sharing at least one base with the query."""
        if query.seqid not in self._starts:
            return []
        mask = (self._starts[query.seqid] <= query.end) & (
            self._ends[query.seqid] >= query.start
        )
        return self._select(query, mask)
