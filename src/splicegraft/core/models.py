"""Data model for alternative isoform reconstruction.

Value types for the inputs (events, junctions, annotated exons) and the
outputs (junction pairs and transcript models) of the reconstruction
stages. Every class is frozen; stages derive new records with
``attrs.evolve`` instead of editing the ones they were given.

Key components:
- EventClass: The four supported alternative splicing event classes
- SearchDirection: Which end of an event range carries the alternative site
- Side: Reference (X) or alternative (Y) side of an event
- Event, Junction, JunctionPair: Pairing inputs and outputs
- ExonRecord, TranscriptModel: Exon-level annotation and transcript chains
- ExonAnnotation: Shared read-only index over the reference exons

Example:
    >>> from splicegraft.core.models import Event, EventClass
    >>> from splicegraft.utils.intervals import GenomicInterval
    >>> event = Event("E1", EventClass.parse("AA"), GenomicInterval("chr1", 960, 999, "+"))
    >>> event.strand
    '+'
"""

from __future__ import annotations

from collections import defaultdict
from enum import Enum
from typing import Iterable

import attrs

from splicegraft.utils.intervals import (
    STRAND_MINUS,
    STRAND_PLUS,
    GenomicInterval,
    IntervalIndex,
)

# =============================================================================
# Enums
# =============================================================================


class EventClass(Enum):
    """Alternative splicing event classes handled by the splicer."""

    ALT_ACCEPTOR = "AltAcceptor"
    ALT_DONOR = "AltDonor"
    ALT_FIRST_EXON = "AltFirstExon"
    ALT_LAST_EXON = "AltLastExon"

    @property
    def code(self) -> str:
        """Two-letter quantifier code (AA, AD, AF, AL)."""
        return _EVENT_CODES[self]

    @property
    def is_boundary(self) -> bool:
        """True for classes that move an internal splice site."""
        return self in (EventClass.ALT_ACCEPTOR, EventClass.ALT_DONOR)

    @property
    def is_terminal(self) -> bool:
        """True for classes that swap a first or last exon."""
        return not self.is_boundary

    @classmethod
    def parse(cls, value: EventClass | str) -> EventClass:
        """Parse an event class from its name or its two-letter code.

        Raises:
            ValueError: If the value names no supported class.
        """
        if isinstance(value, cls):
            return value
        for member in cls:
            if value in (member.value, member.code, member.name):
                return member
        raise ValueError(f"Unsupported event class: {value!r}")


_EVENT_CODES = {
    EventClass.ALT_ACCEPTOR: "AA",
    EventClass.ALT_DONOR: "AD",
    EventClass.ALT_FIRST_EXON: "AF",
    EventClass.ALT_LAST_EXON: "AL",
}


class SearchDirection(Enum):
    """End of an event range holding the alternative boundary."""

    LEFT = "left"
    RIGHT = "right"


class Side(Enum):
    """Side of an event: X is the reference junction, Y the alternative."""

    X = "X"
    Y = "Y"


# Class/strand combinations whose alternative boundary lies at the left end
_LEFT_SEARCHING = {
    (EventClass.ALT_ACCEPTOR, STRAND_PLUS),
    (EventClass.ALT_DONOR, STRAND_MINUS),
    (EventClass.ALT_FIRST_EXON, STRAND_MINUS),
    (EventClass.ALT_LAST_EXON, STRAND_PLUS),
}


def search_direction(event_class: EventClass, strand: str) -> SearchDirection:
    """Search direction for an event class on a strand.

    Args:
        event_class: Event class.
        strand: Event strand (+, - or *).

    Returns:
        LEFT for AA+, AD-, AF-, AL+; RIGHT otherwise (including unknown strand).
    """
    if (event_class, strand) in _LEFT_SEARCHING:
        return SearchDirection.LEFT
    return SearchDirection.RIGHT


# =============================================================================
# Input Records
# =============================================================================


@attrs.frozen(slots=True)
class Event:
    """A detected alternative splicing locus.

    Attributes:
        event_id: Event identifier from the quantifier.
        event_class: Event class.
        interval: Reported event range (strand carried on the interval).
        gene_id: Owning gene, if known.
    """

    event_id: str
    event_class: EventClass = attrs.field(converter=EventClass.parse)
    interval: GenomicInterval
    gene_id: str | None = None

    @property
    def strand(self) -> str:
        return self.interval.strand

    @property
    def search_direction(self) -> SearchDirection:
        """Direction derived from class and strand."""
        return search_direction(self.event_class, self.strand)


@attrs.frozen(slots=True)
class Junction:
    """A splice junction from donor (start) to acceptor (end).

    ``start`` is the last base of the upstream exon and ``end`` the first
    base of the downstream exon.

    Attributes:
        junction_id: Junction identifier.
        interval: Junction span.
        gene_id: Owning gene identifier.
    """

    junction_id: str
    interval: GenomicInterval
    gene_id: str | None = None

    @property
    def width(self) -> int:
        return self.interval.width


@attrs.frozen(slots=True)
class JunctionPair:
    """A junction assigned to one side of an event.

    Attributes:
        event_id: Event the junction belongs to.
        event_class: Class of that event.
        junction: The junction.
        side: X (reference) or Y (alternative).
        search_direction: Inherited from the event.
    """

    event_id: str
    event_class: EventClass
    junction: Junction
    side: Side
    search_direction: SearchDirection

    @property
    def interval(self) -> GenomicInterval:
        return self.junction.interval


@attrs.frozen(slots=True)
class ExonRecord:
    """One exon of one transcript.

    Attributes:
        interval: Exon coordinates.
        gene_id: Gene identifier.
        transcript_id: Transcript identifier.
        exon_number: Position in transcription order (1-based).
        transcript_type: Transcript biotype.
        exon_id: Exon identifier.
    """

    interval: GenomicInterval
    gene_id: str
    transcript_id: str
    exon_number: int = attrs.field(converter=int)
    transcript_type: str | None = None
    exon_id: str | None = None

    @property
    def start(self) -> int:
        return self.interval.start

    @property
    def end(self) -> int:
        return self.interval.end


# =============================================================================
# Output Records
# =============================================================================


def composite_transcript_id(
    base_transcript_id: str,
    event_class: EventClass,
    side: Side,
    event_id: str,
) -> str:
    """Build the id of a transcript carrying one side of an event."""
    return f"{base_transcript_id}+{event_class.value}+{side.value}+{event_id}"


@attrs.frozen(slots=True)
class TranscriptModel:
    """A transcript exon chain derived from an annotated transcript.

    Attributes:
        transcript_id: Composite transcript identifier.
        base_transcript_id: Annotated transcript it was derived from.
        gene_id: Gene identifier.
        event_id: Event that produced it.
        event_class: Class of that event.
        side: X (reference) or Y (alternative).
        exons: Exons ordered by genomic start.
        transcript_type: Transcript biotype of the base transcript.
    """

    transcript_id: str
    base_transcript_id: str
    gene_id: str
    event_id: str
    event_class: EventClass
    side: Side
    exons: tuple[ExonRecord, ...] = attrs.field(converter=tuple)
    transcript_type: str | None = None

    @property
    def n_exons(self) -> int:
        return len(self.exons)

    @property
    def seqid(self) -> str:
        return self.exons[0].interval.seqid

    @property
    def strand(self) -> str:
        return self.exons[0].interval.strand

    @property
    def start(self) -> int:
        return min(exon.start for exon in self.exons)

    @property
    def end(self) -> int:
        return max(exon.end for exon in self.exons)

    @property
    def span(self) -> GenomicInterval:
        """Transcript extent from first to last exon."""
        return GenomicInterval(self.seqid, self.start, self.end, self.strand)

    @property
    def signature(self) -> tuple[tuple[int, int], ...]:
        """Ordered (start, end) pairs of the exons."""
        return tuple((exon.start, exon.end) for exon in self.exons)

    @property
    def introns(self) -> list[tuple[int, int]]:
        """Junctions between consecutive exons, in junction coordinates."""
        return [
            (left.end, right.start)
            for left, right in zip(self.exons, self.exons[1:])
            if right.start - left.end > 1
        ]


# =============================================================================
# Annotation Index
# =============================================================================


class ExonAnnotation:
    """Read-only reference exon annotation.

    Built once per batch and shared by every stage. Lookups return the
    stored records themselves; callers derive new records rather than
    editing them.

    Attributes:
        exons: All exon records, in input order.

    Example:
        >>> annotation = ExonAnnotation(exons)
        >>> annotation.exons_for("T1")
    """

    def __init__(self, exons: Iterable[ExonRecord]) -> None:
        self.exons: tuple[ExonRecord, ...] = tuple(exons)
        self._index: IntervalIndex[ExonRecord] = IntervalIndex(
            self.exons, key=lambda exon: exon.interval
        )
        by_transcript: dict[str, list[ExonRecord]] = defaultdict(list)
        for exon in self.exons:
            by_transcript[exon.transcript_id].append(exon)
        self._by_transcript = {
            tid: tuple(sorted(records, key=lambda e: (e.start, e.end)))
            for tid, records in by_transcript.items()
        }

    def __len__(self) -> int:
        return len(self.exons)

    @property
    def transcript_ids(self) -> list[str]:
        return list(self._by_transcript)

    def exons_for(self, transcript_id: str) -> tuple[ExonRecord, ...]:
        """Exons of a transcript ordered by start (empty if unknown)."""
        return self._by_transcript.get(transcript_id, ())

    def overlapping(self, interval: GenomicInterval) -> list[ExonRecord]:
        return self._index.overlapping(interval)

    def starting_at(self, interval: GenomicInterval) -> list[ExonRecord]:
        return self._index.starting_at(interval)

    def ending_at(self, interval: GenomicInterval) -> list[ExonRecord]:
        return self._index.ending_at(interval)
