"""Event coordinate classification.

Derives, per event, which end of the reported range holds the alternative
splice site, and the anchor coordinates the junction pair finder matches
against junction boundaries.

Anchor rules (1-based closed coordinates):

    class   direction  set A anchor             set B anchor
    AA/AD   right      start - 1 == junc.start  end     == junc.start
    AA/AD   left       start     == junc.end    end + 1 == junc.end
    AF/AL   right      end       == junc.start  (none)
    AF/AL   left       start     == junc.end    (none)

Example:
    >>> from splicegraft.core.classify import search_direction
    >>> from splicegraft.core.models import EventClass
    >>> search_direction(EventClass.ALT_ACCEPTOR, "+")
    <SearchDirection.LEFT: 'left'>
"""

from __future__ import annotations

from typing import Literal, NamedTuple

from splicegraft.core.models import (
    Event,
    Junction,
    SearchDirection,
    search_direction,
)
from splicegraft.utils.intervals import GenomicInterval

__all__ = [
    "Anchor",
    "search_direction",
    "primary_anchor",
    "opposite_anchor",
    "junction_breakpoint",
    "internal_point",
]


class Anchor(NamedTuple):
    """A single-base anchor and the junction boundary it must equal.

    Attributes:
        point: Single-base interval at the anchor coordinate.
        boundary: "start" or "end" of the junction to compare against.
    """

    point: GenomicInterval
    boundary: Literal["start", "end"]


def primary_anchor(event: Event) -> Anchor:
    """Anchor used to find set A junctions for an event."""
    interval = event.interval
    if event.search_direction is SearchDirection.RIGHT:
        if event.event_class.is_boundary:
            return Anchor(interval.point(interval.start - 1), "start")
        return Anchor(interval.point(interval.end), "start")
    return Anchor(interval.point(interval.start), "end")


def opposite_anchor(event: Event) -> Anchor:
    """Anchor used to find set B junctions (AA/AD events only).

    Raises:
        ValueError: If the event is a first/last exon event.
    """
    if not event.event_class.is_boundary:
        raise ValueError(
            f"Event {event.event_id} ({event.event_class.value}) has no opposite anchor"
        )
    interval = event.interval
    if event.search_direction is SearchDirection.RIGHT:
        return Anchor(interval.point(interval.end), "start")
    return Anchor(interval.point(interval.end + 1), "end")


def junction_breakpoint(junction: Junction, direction: SearchDirection) -> GenomicInterval:
    """Collapse a junction to the boundary carrying the alternative site."""
    if direction is SearchDirection.RIGHT:
        return junction.interval.start_point()
    return junction.interval.end_point()


def internal_point(junction: Junction, direction: SearchDirection) -> GenomicInterval:
    """Collapse a junction to the boundary opposite its break point."""
    if direction is SearchDirection.RIGHT:
        return junction.interval.end_point()
    return junction.interval.start_point()
