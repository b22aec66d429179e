"""Transcript junction splicing.

Grafts the X and Y junctions of each event into annotated transcripts,
producing one composite transcript per (base transcript, junction) or
(base transcript, terminal exon) combination.

Two variants share the composite bookkeeping in JunctionSplicer:

- BoundarySplicer (alternative acceptor/donor): the exons on either side of
  the junction are truncated to the junction ends and replace whatever the
  base transcript had between them.
- TerminalExonSplicer (alternative first/last exon): the internal exon at
  the junction is truncated, every exon beyond it is discarded and the
  annotated terminal exon adjacent to the junction is attached instead.

Composites are planned up front per event: candidate base transcripts are
indexed by id, the exact set of (base, variant) combinations is computed,
and each combination is materialized once.

Example:
    >>> from splicegraft.core.splicer import replace_junctions
    >>> transcripts = replace_junctions(pairs, annotation, "AA")
    >>> [t.transcript_id for t in transcripts]
    ['T1+AltAcceptor+X+E1', 'T1+AltAcceptor+Y+E1']
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import Counter, defaultdict
from typing import Iterable, Sequence

import attrs

from splicegraft.core.classify import internal_point, junction_breakpoint
from splicegraft.core.models import (
    EventClass,
    ExonAnnotation,
    ExonRecord,
    JunctionPair,
    SearchDirection,
    TranscriptModel,
    composite_transcript_id,
)
from splicegraft.core.report import GraftReport, SkipReason
from splicegraft.utils.intervals import STRAND_MINUS, GenomicInterval

logger = logging.getLogger(__name__)


# =============================================================================
# Data Structures
# =============================================================================


@attrs.frozen(slots=True)
class Breakpoint:
    """A junction pair collapsed to a single coordinate.

    Attributes:
        pair: The junction pair.
        point: Single-base interval at the break point.
    """

    pair: JunctionPair
    point: GenomicInterval


@attrs.frozen(slots=True)
class Composite:
    """A base transcript copy queued to carry one variant of an event.

    Attributes:
        base_transcript_id: Annotated transcript being copied.
        pair: Junction pair the copy will carry.
        variant: Junction id (AA/AD) or synthesized terminal exon id (AF/AL).
        exons: Exon chain of the base transcript, ordered by start.
        terminal_exon: Annotated terminal exon to attach (AF/AL only).
    """

    base_transcript_id: str
    pair: JunctionPair
    variant: str
    exons: tuple[ExonRecord, ...]
    terminal_exon: ExonRecord | None = None


def renumber_exons(
    exons: Iterable[ExonRecord],
    strand: str,
) -> tuple[ExonRecord, ...]:
    """Order exons by start and number them in transcription order.

    Plus (and unknown) strand exons are numbered 1..k from the left, minus
    strand exons k..1.
    """
    ordered = sorted(exons, key=lambda e: (e.start, e.end))
    k = len(ordered)
    if strand == STRAND_MINUS:
        numbers = range(k, 0, -1)
    else:
        numbers = range(1, k + 1)
    return tuple(
        exon if exon.exon_number == n else attrs.evolve(exon, exon_number=n)
        for exon, n in zip(ordered, numbers)
    )


# =============================================================================
# Base Splicer
# =============================================================================


class JunctionSplicer(ABC):
    """Builds composite transcripts for the junction pairs of one class.

    Subclasses decide which base transcripts and variants each event needs
    (``plan_composites``) and how one composite's exon chain is rebuilt
    (``graft``).

    Attributes:
        event_class: Event class handled by this splicer.
    """

    supported: tuple[EventClass, ...] = ()

    def __init__(self, event_class: EventClass | str) -> None:
        event_class = EventClass.parse(event_class)
        if event_class not in self.supported:
            raise ValueError(
                f"{type(self).__name__} does not handle {event_class.value} events"
            )
        self.event_class = event_class

    def compute_breakpoints(self, pairs: Sequence[JunctionPair]) -> list[Breakpoint]:
        """Collapse each junction to its alternative boundary."""
        return [
            Breakpoint(pair, junction_breakpoint(pair.junction, pair.search_direction))
            for pair in pairs
        ]

    @abstractmethod
    def plan_composites(
        self,
        pairs: Sequence[JunctionPair],
        annotation: ExonAnnotation,
        report: GraftReport,
    ) -> list[Composite]:
        """Work out every composite one event needs."""

    @abstractmethod
    def graft(
        self,
        composite: Composite,
        pairs: Sequence[JunctionPair],
    ) -> list[ExonRecord] | None:
        """Rebuild the exon chain of one composite.

        Returns:
            New exon chain, or None if the composite cannot carry its variant.
        """

    def splice_transcripts(
        self,
        pairs: Iterable[JunctionPair],
        annotation: ExonAnnotation | Iterable[ExonRecord],
        report: GraftReport | None = None,
    ) -> list[TranscriptModel]:
        """Build the composite transcripts for every event in ``pairs``.

        Args:
            pairs: Junction pairs; pairs of other classes are ignored.
            annotation: Reference exons (never modified).
            report: Optional report collecting skipped items.

        Returns:
            Transcripts sorted by transcript id.
        """
        if not isinstance(annotation, ExonAnnotation):
            annotation = ExonAnnotation(annotation)
        report = report if report is not None else GraftReport()

        by_event: dict[str, list[JunctionPair]] = defaultdict(list)
        for pair in pairs:
            if pair.event_class is self.event_class:
                by_event[pair.event_id].append(pair)

        grafted: list[tuple[Composite, list[ExonRecord]]] = []
        for event_id, event_pairs in by_event.items():
            composites = self.plan_composites(event_pairs, annotation, report)
            if not composites:
                logger.debug(f"Event {event_id}: no compatible transcripts")
                continue
            for composite in composites:
                exons = self.graft(composite, event_pairs)
                if exons is None:
                    report.record(
                        SkipReason.INCOMPLETE_REPLACEMENT,
                        f"{composite.base_transcript_id}:{composite.variant}",
                    )
                    continue
                grafted.append((composite, exons))

        transcripts = self._finalize(grafted)
        logger.info(
            f"{self.event_class.code}: built {len(transcripts)} transcripts "
            f"for {len(by_event)} events"
        )
        return transcripts

    def _finalize(
        self,
        grafted: list[tuple[Composite, list[ExonRecord]]],
    ) -> list[TranscriptModel]:
        """Name, renumber and package grafted composites."""

        def final_id(composite: Composite) -> str:
            return composite_transcript_id(
                composite.base_transcript_id,
                self.event_class,
                composite.pair.side,
                composite.pair.event_id,
            )

        # Competing alternatives on one base transcript share a final id
        taken = Counter(final_id(composite) for composite, _ in grafted)

        transcripts = []
        for composite, exons in grafted:
            transcript_id = final_id(composite)
            if taken[transcript_id] > 1:
                transcript_id = f"{transcript_id}+{composite.variant}"
            base = composite.exons[0]
            renamed = (
                attrs.evolve(exon, transcript_id=transcript_id) for exon in exons
            )
            transcripts.append(
                TranscriptModel(
                    transcript_id=transcript_id,
                    base_transcript_id=composite.base_transcript_id,
                    gene_id=base.gene_id,
                    event_id=composite.pair.event_id,
                    event_class=self.event_class,
                    side=composite.pair.side,
                    exons=renumber_exons(renamed, base.interval.strand),
                    transcript_type=base.transcript_type,
                )
            )
        transcripts.sort(key=lambda t: t.transcript_id)
        return transcripts


# =============================================================================
# Alternative Acceptor / Donor
# =============================================================================


class BoundarySplicer(JunctionSplicer):
    """Swaps an internal splice site (alternative acceptor or donor).

    Every base transcript with an exon at any break point of the event is
    copied once per junction of the event, so a transcript using one
    junction is rebuilt with each of its competitors.
    """

    supported = (EventClass.ALT_ACCEPTOR, EventClass.ALT_DONOR)

    def plan_composites(
        self,
        pairs: Sequence[JunctionPair],
        annotation: ExonAnnotation,
        report: GraftReport,
    ) -> list[Composite]:
        bases: dict[str, None] = {}
        for bp in self.compute_breakpoints(pairs):
            hits = annotation.overlapping(bp.point)
            if not hits:
                report.record(
                    SkipReason.NO_COMPATIBLE_TRANSCRIPT,
                    f"{bp.pair.event_id}:{bp.pair.side.value}",
                )
            for exon in hits:
                bases.setdefault(exon.transcript_id)

        return [
            Composite(
                base_transcript_id=base,
                pair=pair,
                variant=pair.junction.junction_id,
                exons=annotation.exons_for(base),
            )
            for base in bases
            for pair in pairs
        ]

    def graft(
        self,
        composite: Composite,
        pairs: Sequence[JunctionPair],
    ) -> list[ExonRecord] | None:
        junction = composite.pair.junction.interval
        left_window = _window([p.junction.interval.start for p in pairs], junction)
        right_window = _window([p.junction.interval.end for p in pairs], junction)

        left = [
            e for e in composite.exons
            if e.interval.overlaps(left_window) and e.start < junction.start
        ]
        right = [
            e for e in composite.exons
            if e.interval.overlaps(right_window) and e.end > junction.end
        ]
        if not left or not right:
            return None

        # closest to the junction on each side
        left_exon = max(left, key=lambda e: e.start)
        right_exon = min(right, key=lambda e: e.start)
        new_left = attrs.evolve(
            left_exon, interval=left_exon.interval.with_bounds(end=junction.start)
        )
        new_right = attrs.evolve(
            right_exon, interval=right_exon.interval.with_bounds(start=junction.end)
        )

        glued = new_left.interval.span(new_right.interval)
        kept = [e for e in composite.exons if not e.interval.overlaps(glued)]
        return kept + [new_left, new_right]


def _window(positions: list[int], like: GenomicInterval) -> GenomicInterval:
    return GenomicInterval(like.seqid, min(positions), max(positions), like.strand)


# =============================================================================
# Alternative First / Last Exon
# =============================================================================


def terminal_exon_id(pair: JunctionPair, terminal: ExonRecord) -> str:
    """Id of a synthesized terminal exon.

    Built from the chromosome, the junction range and the terminal exon
    boundary facing away from the junction.
    """
    junction = pair.junction.interval
    if pair.search_direction is SearchDirection.RIGHT:
        flank = terminal.start
    else:
        flank = terminal.end
    return f"{junction.seqid}:{junction.start}-{junction.end}+{flank}"


class TerminalExonSplicer(JunctionSplicer):
    """Swaps a first or last exon.

    The terminal exons of the event are the annotated exons ending (right
    search) or starting (left search) exactly at a junction's break point.
    Only base transcripts that own one of them, and that have an exon at the
    junction's internal boundary, are rebuilt.
    """

    supported = (EventClass.ALT_FIRST_EXON, EventClass.ALT_LAST_EXON)

    def _terminal_exons(
        self,
        bp: Breakpoint,
        annotation: ExonAnnotation,
    ) -> list[ExonRecord]:
        if bp.pair.search_direction is SearchDirection.RIGHT:
            return annotation.ending_at(bp.point)
        return annotation.starting_at(bp.point)

    def plan_composites(
        self,
        pairs: Sequence[JunctionPair],
        annotation: ExonAnnotation,
        report: GraftReport,
    ) -> list[Composite]:
        entries: dict[str, tuple[JunctionPair, ExonRecord]] = {}
        owners: set[str] = set()
        for bp in self.compute_breakpoints(pairs):
            terminals = self._terminal_exons(bp, annotation)
            if not terminals:
                report.record(
                    SkipReason.NO_COMPATIBLE_TRANSCRIPT,
                    f"{bp.pair.event_id}:{bp.pair.side.value}",
                )
            for terminal in terminals:
                owners.add(terminal.transcript_id)
                entries.setdefault(terminal_exon_id(bp.pair, terminal), (bp.pair, terminal))

        composites = []
        for new_id, (pair, terminal) in entries.items():
            point = internal_point(pair.junction, pair.search_direction)
            bases: dict[str, None] = {}
            for exon in annotation.overlapping(point):
                if exon.transcript_id in owners:
                    bases.setdefault(exon.transcript_id)
            if not bases:
                report.record(SkipReason.NO_COMPATIBLE_TRANSCRIPT, new_id)
            composites.extend(
                Composite(
                    base_transcript_id=base,
                    pair=pair,
                    variant=new_id,
                    exons=annotation.exons_for(base),
                    terminal_exon=terminal,
                )
                for base in bases
            )
        return composites

    def graft(
        self,
        composite: Composite,
        pairs: Sequence[JunctionPair],
    ) -> list[ExonRecord] | None:
        pair = composite.pair
        point = internal_point(pair.junction, pair.search_direction)
        internal = [e for e in composite.exons if e.interval.overlaps(point)]
        if not internal:
            return None
        internal_exon = internal[0]

        if pair.search_direction is SearchDirection.RIGHT:
            spliced = attrs.evolve(
                internal_exon,
                interval=internal_exon.interval.with_bounds(start=point.start),
            )
        else:
            spliced = attrs.evolve(
                internal_exon,
                interval=internal_exon.interval.with_bounds(end=point.end),
            )

        annotated = composite.terminal_exon
        terminal = ExonRecord(
            interval=annotated.interval,
            gene_id=internal_exon.gene_id,
            transcript_id=internal_exon.transcript_id,
            exon_number=internal_exon.exon_number,
            transcript_type=internal_exon.transcript_type,
            exon_id=composite.variant,
        )
        if terminal.interval.overlaps(spliced.interval):
            return None

        # Walk exon numbers outward from the internal exon; a first/last
        # exon swap can drop more than one original terminal exon.
        step = -1 if self.event_class is EventClass.ALT_FIRST_EXON else 1
        remaining = list(composite.exons)
        number = internal_exon.exon_number
        while True:
            matched = [e for e in remaining if e.exon_number == number]
            if not matched:
                break
            remaining = [e for e in remaining if e.exon_number != number]
            number += step

        # Irregular numbering can leave exons inside the replaced stretch
        replaced = terminal.interval.span(spliced.interval)
        remaining = [e for e in remaining if not e.interval.overlaps(replaced)]
        return remaining + [spliced, terminal]


# =============================================================================
# Entry Points
# =============================================================================


def splicer_for(event_class: EventClass | str) -> JunctionSplicer:
    """Return the splicer variant for an event class."""
    event_class = EventClass.parse(event_class)
    if event_class.is_boundary:
        return BoundarySplicer(event_class)
    return TerminalExonSplicer(event_class)


def replace_junctions(
    pairs: Iterable[JunctionPair],
    annotation: ExonAnnotation | Iterable[ExonRecord],
    event_class: EventClass | str,
    report: GraftReport | None = None,
) -> list[TranscriptModel]:
    """Build transcripts carrying the X and Y junctions of each event.

    Args:
        pairs: Junction pairs from ``find_junction_pairs``.
        annotation: Reference exons (never modified).
        event_class: Class of the events in ``pairs``.
        report: Optional report collecting skipped items.

    Returns:
        Transcripts sorted by transcript id, each tagged with its event id
        and side.
    """
    return splicer_for(event_class).splice_transcripts(pairs, annotation, report)
