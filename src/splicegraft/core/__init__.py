"""Core reconstruction logic for splicegraft.

This module provides the stages of isoform reconstruction, leaves first:

- Data model (events, junctions, exons, transcripts)
- Event coordinate classification (search direction and anchors)
- Junction pair finding (X/Y junctions per event)
- Transcript junction splicing (composite transcripts)
- Duplicate transcript collapsing

Example:
    >>> from splicegraft.core import find_junction_pairs, replace_junctions
    >>> pairs = find_junction_pairs(events, junctions, "AF")
    >>> transcripts = replace_junctions(pairs, annotation, "AF")
"""

from splicegraft.core.classify import search_direction
from splicegraft.core.collapse import (
    remove_duplicate_transcripts,
    transcript_signature,
)
from splicegraft.core.pairs import find_junction_pairs
from splicegraft.core.report import GraftReport, SkipReason
from splicegraft.core.splicer import (
    BoundarySplicer,
    JunctionSplicer,
    TerminalExonSplicer,
    replace_junctions,
    splicer_for,
)

__all__ = [
    "search_direction",
    "find_junction_pairs",
    "replace_junctions",
    "splicer_for",
    "JunctionSplicer",
    "BoundarySplicer",
    "TerminalExonSplicer",
    "remove_duplicate_transcripts",
    "transcript_signature",
    "GraftReport",
    "SkipReason",
]
