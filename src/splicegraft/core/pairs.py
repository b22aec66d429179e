"""Junction pair finding for alternative splicing events.

Matches the anchor coordinates of each event against junction boundaries
and labels the matched junctions as the reference (X) or alternative (Y)
side of the event.

Strategy:
1. Split events by search direction (left/right)
2. Collapse each event range to its set A anchor and match junction
   boundaries exactly
3. AA/AD: match the opposite end of the range to get set B
4. AF/AL: follow each set A junction to its far boundary; other junctions
   sharing that boundary form set C
5. Relabel A/B/C as X/Y and drop degenerate junctions

Example:
    >>> from splicegraft.core.pairs import find_junction_pairs
    >>> pairs = find_junction_pairs(events, junctions, "AA")
    >>> [(p.junction.junction_id, p.side.value) for p in pairs]
    [('J1', 'X'), ('J2', 'Y')]
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

from splicegraft.core.classify import Anchor, opposite_anchor, primary_anchor
from splicegraft.core.models import (
    Event,
    EventClass,
    Junction,
    JunctionPair,
    SearchDirection,
    Side,
)
from splicegraft.core.report import GraftReport, SkipReason
from splicegraft.utils.intervals import (
    STRAND_PLUS,
    STRAND_UNKNOWN,
    IntervalIndex,
)

logger = logging.getLogger(__name__)

# Junction set labels before they are resolved to sides
SET_A = "A"
SET_B = "B"
SET_C = "C"

# Junctions spanning this many bases or fewer are coordinate noise
DEFAULT_MIN_JUNCTION_WIDTH = 2


# =============================================================================
# Matching Helpers
# =============================================================================


def _match_anchor(anchor: Anchor, index: IntervalIndex[Junction]) -> list[Junction]:
    if anchor.boundary == "start":
        return index.starting_at(anchor.point)
    return index.ending_at(anchor.point)


def _far_boundary_matches(
    junction: Junction,
    direction: SearchDirection,
    index: IntervalIndex[Junction],
) -> list[Junction]:
    """Junctions sharing the boundary of ``junction`` away from the event."""
    if direction is SearchDirection.RIGHT:
        return index.ending_at(junction.interval.end_point())
    return index.starting_at(junction.interval.start_point())


def _label_side(label: str, strand: str, event_class: EventClass) -> Side | None:
    """Resolve a junction set label to a side.

    First/last exon events label set A as X and set C as Y on either
    strand; acceptor/donor events swap A and B on the minus strand.

    Returns:
        The side, or None when the strand needed for A/B is unknown.
    """
    if event_class.is_terminal:
        return Side.X if label == SET_A else Side.Y
    if strand == STRAND_UNKNOWN:
        return None
    if (label == SET_A) == (strand == STRAND_PLUS):
        return Side.X
    return Side.Y


def _dedupe(junctions: Iterable[Junction]) -> list[Junction]:
    """Drop repeated junctions and structural copies, keeping the first."""
    kept: list[Junction] = []
    for junction in junctions:
        if not any(junction.interval.same_range(k.interval) for k in kept):
            kept.append(junction)
    return kept


# =============================================================================
# Junction Pair Finder
# =============================================================================


def find_junction_pairs(
    events: Iterable[Event],
    junctions: Iterable[Junction],
    event_class: EventClass | str,
    min_junction_width: int = DEFAULT_MIN_JUNCTION_WIDTH,
    report: GraftReport | None = None,
) -> list[JunctionPair]:
    """Find the X and Y junctions of each event of one class.

    Args:
        events: Events; those of other classes are ignored.
        junctions: Candidate splice junctions.
        event_class: Class being processed (name or two-letter code).
        min_junction_width: Junctions this wide or narrower are dropped.
        report: Optional report collecting skipped items.

    Returns:
        Junction pairs ordered by event, side (X first), then junction
        input order. Events without a complete set of junctions on both
        sides contribute nothing.
    """
    event_class = EventClass.parse(event_class)
    report = report if report is not None else GraftReport()

    events = [e for e in events if e.event_class is event_class]
    junctions = list(junctions)
    if not events or not junctions:
        return []

    index: IntervalIndex[Junction] = IntervalIndex(
        junctions, key=lambda j: j.interval
    )
    input_order: dict[Junction, int] = {}
    for i, junction in enumerate(junctions):
        input_order.setdefault(junction, i)

    right = [e for e in events if e.search_direction is SearchDirection.RIGHT]
    left = [e for e in events if e.search_direction is SearchDirection.LEFT]
    logger.debug(
        f"{event_class.code}: {len(right)} right-searching, "
        f"{len(left)} left-searching events"
    )

    # Set A for every event first: set C exclusion looks at the whole batch
    set_a = {e.event_id: _match_anchor(primary_anchor(e), index) for e in events}
    a_intervals = defaultdict(list)
    for matched in set_a.values():
        for junction in matched:
            iv = junction.interval
            a_intervals[(iv.seqid, iv.start, iv.end)].append(iv)

    def in_set_a(junction: Junction) -> bool:
        iv = junction.interval
        return any(
            iv.same_range(other)
            for other in a_intervals.get((iv.seqid, iv.start, iv.end), [])
        )

    pairs: list[JunctionPair] = []
    for event in events:
        labelled: list[tuple[str, Junction]] = []
        matched_a = set_a[event.event_id]
        if not matched_a:
            logger.debug(f"Event {event.event_id}: no junction at primary anchor")
            report.record(SkipReason.UNMATCHED_ANCHOR, event.event_id)
            continue
        labelled.extend((SET_A, j) for j in matched_a)

        if event_class.is_boundary:
            matched_b = _match_anchor(opposite_anchor(event), index)
            if not matched_b:
                logger.debug(f"Event {event.event_id}: no junction at opposite anchor")
                report.record(SkipReason.UNMATCHED_ANCHOR, event.event_id)
                continue
            labelled.extend((SET_B, j) for j in matched_b)
        else:
            matched_c = [
                j
                for a in matched_a
                for j in _far_boundary_matches(a, event.search_direction, index)
                if not in_set_a(j)
            ]
            if not matched_c:
                logger.debug(f"Event {event.event_id}: no alternative terminal junction")
                report.record(SkipReason.UNMATCHED_ANCHOR, event.event_id)
                continue
            labelled.extend((SET_C, j) for j in matched_c)

        by_side: dict[Side, list[Junction]] = {Side.X: [], Side.Y: []}
        for label, junction in labelled:
            strand = junction.interval.strand
            if strand == STRAND_UNKNOWN:
                strand = event.strand
            side = _label_side(label, strand, event_class)
            if side is None:
                report.record(SkipReason.UNRESOLVED_STRAND, junction.junction_id)
                continue
            if junction.width <= min_junction_width:
                report.record(SkipReason.DEGENERATE_JUNCTION, junction.junction_id)
                continue
            by_side[side].append(junction)

        if not by_side[Side.X] or not by_side[Side.Y]:
            logger.debug(f"Event {event.event_id}: one side left without junctions")
            report.record(SkipReason.UNMATCHED_ANCHOR, event.event_id)
            continue

        for side in (Side.X, Side.Y):
            side_junctions = sorted(
                _dedupe(by_side[side]), key=lambda j: input_order[j]
            )
            if len(side_junctions) > 1:
                report.record(
                    SkipReason.COMPETING_ALTERNATIVES,
                    event.event_id,
                    n=len(side_junctions) - 1,
                )
            pairs.extend(
                JunctionPair(
                    event_id=event.event_id,
                    event_class=event_class,
                    junction=junction,
                    side=side,
                    search_direction=event.search_direction,
                )
                for junction in side_junctions
            )

    n_events = len({p.event_id for p in pairs})
    logger.info(
        f"{event_class.code}: paired {n_events}/{len(events)} events "
        f"({len(pairs)} junction pairs)"
    )
    return pairs
