"""Isoform reconstruction pipeline.

Runs the full chain for every event class present in a batch:

    events -> junction pairs -> composite transcripts -> deduplication

Event classes are independent and may be processed in worker threads; the
results are always concatenated in the fixed class order AltAcceptor,
AltDonor, AltFirstExon, AltLastExon.

Example:
    >>> from splicegraft.pipeline import reconstruct_isoforms
    >>> result = reconstruct_isoforms(events, junctions, exons)
    >>> for event_id, (x, y) in result.paired_by_event().items():
    ...     print(event_id, len(x), len(y))
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

import attrs

from splicegraft.config import Config
from splicegraft.core.collapse import remove_duplicate_transcripts
from splicegraft.core.models import (
    Event,
    EventClass,
    ExonAnnotation,
    ExonRecord,
    Junction,
    JunctionPair,
    Side,
    TranscriptModel,
)
from splicegraft.core.pairs import find_junction_pairs
from splicegraft.core.report import GraftReport
from splicegraft.core.splicer import replace_junctions
from splicegraft.parallel.executor import ParallelExecutor

logger = logging.getLogger(__name__)


# =============================================================================
# Result
# =============================================================================


@attrs.frozen
class IsoformResult:
    """Transcripts reconstructed for a batch of events.

    Attributes:
        transcripts: Composite transcripts, grouped by event class in
            processing order, sorted by transcript id within a class.
        pairs: Junction pairs the transcripts were built from.
        report: Items skipped along the way.
    """

    transcripts: tuple[TranscriptModel, ...] = attrs.field(converter=tuple)
    pairs: tuple[JunctionPair, ...] = attrs.field(converter=tuple)
    report: GraftReport = attrs.Factory(GraftReport)

    def __len__(self) -> int:
        return len(self.transcripts)

    def for_event(self, event_id: str) -> list[TranscriptModel]:
        return [t for t in self.transcripts if t.event_id == event_id]

    def by_side(self, side: Side | str) -> list[TranscriptModel]:
        side = Side(side)
        return [t for t in self.transcripts if t.side is side]

    def paired_by_event(
        self,
    ) -> dict[str, tuple[list[TranscriptModel], list[TranscriptModel]]]:
        """Split transcripts into (X, Y) lists per event.

        Events lacking transcripts on either side are left out, since there
        is nothing to compare them against.
        """
        grouped: dict[str, dict[Side, list[TranscriptModel]]] = defaultdict(
            lambda: {Side.X: [], Side.Y: []}
        )
        for transcript in self.transcripts:
            grouped[transcript.event_id][transcript.side].append(transcript)
        return {
            event_id: (sides[Side.X], sides[Side.Y])
            for event_id, sides in grouped.items()
            if sides[Side.X] and sides[Side.Y]
        }

    def exon_records(self) -> list[ExonRecord]:
        """All exons of all transcripts, transcript by transcript."""
        return [exon for t in self.transcripts for exon in t.exons]


@attrs.frozen
class _ClassResult:
    transcripts: list[TranscriptModel]
    pairs: list[JunctionPair]
    report: GraftReport


# =============================================================================
# Pipeline
# =============================================================================


def process_event_class(
    event_class: EventClass,
    events: list[Event],
    junctions: list[Junction],
    annotation: ExonAnnotation,
    config: Config,
) -> _ClassResult:
    """Pair, splice and deduplicate the events of one class."""
    report = GraftReport()
    pairs = find_junction_pairs(
        events,
        junctions,
        event_class,
        min_junction_width=config.graft.min_junction_width,
        report=report,
    )
    transcripts = replace_junctions(pairs, annotation, event_class, report=report)
    if config.graft.collapse_duplicates:
        transcripts = remove_duplicate_transcripts(
            transcripts,
            within_event=config.graft.collapse_within_event,
            report=report,
        )
    return _ClassResult(transcripts=transcripts, pairs=pairs, report=report)


def reconstruct_isoforms(
    events: Iterable[Event],
    junctions: Iterable[Junction],
    exons: ExonAnnotation | Iterable[ExonRecord],
    config: Config | None = None,
) -> IsoformResult:
    """Reconstruct the X and Y transcripts of every event.

    Args:
        events: Events of any supported class.
        junctions: Candidate splice junctions.
        exons: Reference exon annotation (never modified).
        config: Configuration; defaults are used if None.

    Returns:
        IsoformResult; empty if nothing could be reconstructed.
    """
    config = config or Config()
    annotation = exons if isinstance(exons, ExonAnnotation) else ExonAnnotation(exons)
    junctions = list(junctions)

    events_by_class: dict[EventClass, list[Event]] = defaultdict(list)
    for event in events:
        events_by_class[event.event_class].append(event)

    if not events_by_class:
        logger.warning("No events to process")
        return IsoformResult(transcripts=(), pairs=())
    if len(annotation) == 0:
        logger.warning("Exon annotation is empty; no transcripts can be built")
        return IsoformResult(transcripts=(), pairs=())

    classes = [c for c in config.graft.event_classes if events_by_class.get(c)]
    skipped = set(events_by_class) - set(classes)
    if skipped:
        logger.info(
            "Ignoring events of classes not selected: "
            + ", ".join(sorted(c.code for c in skipped))
        )

    executor = ParallelExecutor(
        n_workers=min(config.parallel.max_workers, max(1, len(classes))),
        backend=config.parallel.backend,
    )
    results, stats = executor.map_items(
        lambda c: process_event_class(
            c, events_by_class[c], junctions, annotation, config
        ),
        classes,
        task_ids=[c.code for c in classes],
        continue_on_error=False,
    )

    transcripts: list[TranscriptModel] = []
    pairs: list[JunctionPair] = []
    report = GraftReport()
    for task_result in results:
        class_result: _ClassResult = task_result.result
        transcripts.extend(class_result.transcripts)
        pairs.extend(class_result.pairs)
        report = report.merge(class_result.report)

    logger.info(
        f"Reconstructed {len(transcripts)} transcripts for "
        f"{len({t.event_id for t in transcripts})} events "
        f"({stats.total_duration:.2f}s); skipped: {report.summary()}"
    )
    return IsoformResult(transcripts=transcripts, pairs=pairs, report=report)
