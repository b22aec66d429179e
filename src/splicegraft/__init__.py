"""splicegraft: reconstruct alternative transcript isoforms from splicing events.

splicegraft takes alternative acceptor, donor, first-exon and last-exon
events reported by a splicing quantifier, pairs each event with its
reference (X) and alternative (Y) junctions, and grafts those junctions
into annotated transcripts to produce explicit exon chains for both sides.

Example:
    >>> import splicegraft
    >>> splicegraft.__version__
    '0.1.0'

Modules:
    core: Data model, junction pairing, transcript splicing, deduplication
    pipeline: Batch driver over all event classes
    parallel: Parallel execution of event classes
    utils: Genomic intervals and logging configuration
"""

__version__ = "0.1.0"

from splicegraft.config import Config, GraftConfig, ParallelConfig
from splicegraft.core.models import (
    Event,
    EventClass,
    ExonAnnotation,
    ExonRecord,
    Junction,
    JunctionPair,
    SearchDirection,
    Side,
    TranscriptModel,
)
from splicegraft.pipeline import IsoformResult, reconstruct_isoforms
from splicegraft.utils.intervals import GenomicInterval

__all__ = [
    "__version__",
    "Config",
    "GraftConfig",
    "ParallelConfig",
    "Event",
    "EventClass",
    "ExonAnnotation",
    "ExonRecord",
    "GenomicInterval",
    "IsoformResult",
    "Junction",
    "JunctionPair",
    "SearchDirection",
    "Side",
    "TranscriptModel",
    "reconstruct_isoforms",
]
