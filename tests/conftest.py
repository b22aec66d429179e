"""Pytest configuration and shared fixtures for splicegraft tests.

This module contains fixtures that are shared across multiple test modules.
Fixtures are organized by category:

- Builder fixtures: Return functions that create model objects
- Scenario fixtures: Small loci for each event class, with hand-checked
  expected outputs documented in the fixture docstrings

All coordinates are 1-based closed. A junction [d, a] runs from the last
base of the upstream exon (d) to the first base of the downstream exon (a).
"""

from typing import Callable

import pytest

from splicegraft.core.models import (
    Event,
    EventClass,
    ExonAnnotation,
    ExonRecord,
    Junction,
)
from splicegraft.utils.intervals import GenomicInterval


# =============================================================================
# Builder Fixtures
# =============================================================================


@pytest.fixture
def make_transcript() -> Callable[..., list[ExonRecord]]:
    """Return a builder for the exon records of one transcript.

    Exons are numbered in transcription order (ascending start on +,
    descending on -).
    """

    def _make(
        transcript_id: str,
        coords: list[tuple[int, int]],
        strand: str = "+",
        seqid: str = "chr1",
        gene_id: str = "G1",
        transcript_type: str = "protein_coding",
    ) -> list[ExonRecord]:
        ordered = sorted(coords)
        n = len(ordered)
        records = []
        for i, (start, end) in enumerate(ordered):
            number = n - i if strand == "-" else i + 1
            records.append(
                ExonRecord(
                    interval=GenomicInterval(seqid, start, end, strand),
                    gene_id=gene_id,
                    transcript_id=transcript_id,
                    exon_number=number,
                    transcript_type=transcript_type,
                    exon_id=f"{transcript_id}.{number}",
                )
            )
        return records

    return _make


@pytest.fixture
def make_junction() -> Callable[..., Junction]:
    """Return a builder for junctions."""

    def _make(
        junction_id: str,
        start: int,
        end: int,
        strand: str = "+",
        seqid: str = "chr1",
        gene_id: str = "G1",
    ) -> Junction:
        return Junction(junction_id, GenomicInterval(seqid, start, end, strand), gene_id)

    return _make


@pytest.fixture
def make_event() -> Callable[..., Event]:
    """Return a builder for events."""

    def _make(
        event_id: str,
        event_class: str,
        start: int,
        end: int,
        strand: str = "+",
        seqid: str = "chr1",
    ) -> Event:
        return Event(
            event_id,
            EventClass.parse(event_class),
            GenomicInterval(seqid, start, end, strand),
            gene_id="G1",
        )

    return _make


# =============================================================================
# Scenario Fixtures
# =============================================================================


@pytest.fixture
def alt_acceptor_plus(make_transcript, make_junction, make_event) -> dict:
    """Alternative acceptor on the + strand.

    Event E1 covers the extra exon piece [960, 999]. J1 [900, 960] keeps it
    (X), J2 [900, 1000] skips it (Y). T1 uses J1, T2 uses J2; J3 is an
    unrelated junction elsewhere.

    Expected composites:
        T1+X, T2+X: 800-900, 960-1100
        T1+Y, T2+Y: 800-900, 1000-1100
    """
    exons = make_transcript("T1", [(800, 900), (960, 1100)]) + make_transcript(
        "T2", [(800, 900), (1000, 1100)]
    )
    junctions = [
        make_junction("J1", 900, 960),
        make_junction("J2", 900, 1000),
        make_junction("J3", 500, 600),
    ]
    events = [make_event("E1", "AA", 960, 999)]
    return {
        "events": events,
        "junctions": junctions,
        "exons": exons,
        "annotation": ExonAnnotation(exons),
    }


@pytest.fixture
def alt_acceptor_minus(make_transcript, make_junction, make_event) -> dict:
    """Alternative acceptor on the - strand.

    Event E4 covers [201, 240] at the 3' end (genomic right) of the
    downstream exon. J5 [240, 300] keeps it (X), J6 [200, 300] skips it (Y).
    Only T3 is annotated; it uses J5.

    Expected composites:
        T3+X: 100-240, 300-400
        T3+Y: 100-200, 300-400
    """
    exons = make_transcript("T3", [(100, 240), (300, 400)], strand="-")
    junctions = [
        make_junction("J5", 240, 300, strand="-"),
        make_junction("J6", 200, 300, strand="-"),
    ]
    events = [make_event("E4", "AA", 201, 240, strand="-")]
    return {
        "events": events,
        "junctions": junctions,
        "exons": exons,
        "annotation": ExonAnnotation(exons),
    }


@pytest.fixture
def alt_first_exon_plus(make_transcript, make_junction, make_event) -> dict:
    """Alternative first exon on the + strand.

    Event E2 is the first exon [100, 200]. JX [200, 500] leaves it (X),
    JY [400, 500] leaves the competing first exon [300, 400] (Y); both
    enter the shared exon [500, 600]. T4 starts with [100, 200], T5 with
    [300, 400].

    Expected composites:
        T4+X, T5+X: 100-200, 500-600, 700-800
        T4+Y, T5+Y: 300-400, 500-600, 700-800
    """
    exons = make_transcript("T4", [(100, 200), (500, 600), (700, 800)]) + make_transcript(
        "T5", [(300, 400), (500, 600), (700, 800)]
    )
    junctions = [
        make_junction("JX", 200, 500),
        make_junction("JY", 400, 500),
        make_junction("JZ", 600, 700),
    ]
    events = [make_event("E2", "AF", 100, 200)]
    return {
        "events": events,
        "junctions": junctions,
        "exons": exons,
        "annotation": ExonAnnotation(exons),
    }


@pytest.fixture
def alt_last_exon_plus(make_transcript, make_junction, make_event) -> dict:
    """Alternative last exon on the + strand.

    Event E3 is the last exon [900, 1000]. JX [400, 900] enters it (X);
    JY [400, 500] enters the competing last exon [500, 550] (Y). T6 uses
    JY and continues with a further exon [600, 700]; T7 uses JX.

    Expected composites:
        T6+X, T7+X: 100-200, 300-400, 900-1000
        T6+Y, T7+Y: 100-200, 300-400, 500-550
    """
    exons = make_transcript(
        "T6", [(100, 200), (300, 400), (500, 550), (600, 700)]
    ) + make_transcript("T7", [(100, 200), (300, 400), (900, 1000)])
    junctions = [
        make_junction("JA", 200, 300),
        make_junction("JX", 400, 900),
        make_junction("JY", 400, 500),
        make_junction("JB", 550, 600),
    ]
    events = [make_event("E3", "AL", 900, 1000)]
    return {
        "events": events,
        "junctions": junctions,
        "exons": exons,
        "annotation": ExonAnnotation(exons),
    }


@pytest.fixture
def alt_donor_plus(make_transcript, make_junction, make_event) -> dict:
    """Alternative donor on the + strand.

    Event E6 covers the extra exon piece [201, 240] at the 3' end of the
    upstream exon. JS [200, 300] skips it (X), JL [240, 300] keeps it (Y).
    T1 uses JS, T2 uses JL.

    Expected composites:
        T1+X, T2+X: 100-200, 300-400
        T1+Y, T2+Y: 100-240, 300-400
    """
    exons = make_transcript("T1", [(100, 200), (300, 400)]) + make_transcript(
        "T2", [(100, 240), (300, 400)]
    )
    junctions = [
        make_junction("JS", 200, 300),
        make_junction("JL", 240, 300),
    ]
    events = [make_event("E6", "AD", 201, 240)]
    return {
        "events": events,
        "junctions": junctions,
        "exons": exons,
        "annotation": ExonAnnotation(exons),
    }


@pytest.fixture
def alt_donor_minus(make_transcript, make_junction, make_event) -> dict:
    """Alternative donor on the - strand.

    Event E7 covers [260, 299] at the 3' end (genomic left) of the
    upstream exon, which ends at 400. JL [200, 300] skips it (X), JS [200, 260]
    keeps it (Y). T3 uses JL, T4 uses JS.

    Expected composites:
        T3+X, T4+X: 100-200, 300-400
        T3+Y, T4+Y: 100-200, 260-400
    """
    exons = make_transcript("T3", [(100, 200), (300, 400)], strand="-") + make_transcript(
        "T4", [(100, 200), (260, 400)], strand="-"
    )
    junctions = [
        make_junction("JL", 200, 300, strand="-"),
        make_junction("JS", 200, 260, strand="-"),
    ]
    events = [make_event("E7", "AD", 260, 299, strand="-")]
    return {
        "events": events,
        "junctions": junctions,
        "exons": exons,
        "annotation": ExonAnnotation(exons),
    }


@pytest.fixture
def alt_last_exon_minus(make_transcript, make_junction, make_event) -> dict:
    """Alternative last exon on the - strand.

    Event E8 is the last exon [100, 200], the leftmost one. JX [200, 500]
    leaves it (X), JY [400, 500] leaves the competing last exon [300, 400]
    (Y). T8 ends with [100, 200]; T9 ends with [300, 400] followed by a
    further exon [50, 80].

    Expected composites:
        T8+X, T9+X: 100-200, 500-600, 700-800
        T8+Y, T9+Y: 300-400, 500-600, 700-800
    """
    exons = make_transcript(
        "T8", [(100, 200), (500, 600), (700, 800)], strand="-"
    ) + make_transcript(
        "T9", [(50, 80), (300, 400), (500, 600), (700, 800)], strand="-"
    )
    junctions = [
        make_junction("JX", 200, 500, strand="-"),
        make_junction("JY", 400, 500, strand="-"),
        make_junction("JZ", 600, 700, strand="-"),
    ]
    events = [make_event("E8", "AL", 100, 200, strand="-")]
    return {
        "events": events,
        "junctions": junctions,
        "exons": exons,
        "annotation": ExonAnnotation(exons),
    }
