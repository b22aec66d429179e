"""Removal of structurally duplicated transcripts.

Composite transcripts built from different base transcripts frequently end
up with the same exon chain. Such duplicates are collapsed to a single
representative: the one with the lexicographically smallest transcript id.

Example:
    >>> from splicegraft.core.collapse import remove_duplicate_transcripts
    >>> unique = remove_duplicate_transcripts(transcripts)
"""

from __future__ import annotations

import logging
from typing import Iterable

from splicegraft.core.models import TranscriptModel
from splicegraft.core.report import GraftReport, SkipReason

logger = logging.getLogger(__name__)


def transcript_signature(transcript: TranscriptModel) -> str:
    """Ordered concatenation of exon (start, end) pairs, e.g. "100-200+300-400"."""
    return "+".join(f"{start}-{end}" for start, end in transcript.signature)


def remove_duplicate_transcripts(
    transcripts: Iterable[TranscriptModel],
    within_event: bool = False,
    report: GraftReport | None = None,
) -> list[TranscriptModel]:
    """Keep one transcript per distinct exon structure.

    Args:
        transcripts: Transcripts to filter.
        within_event: If True, only transcripts of the same event are
            compared, so events never remove each other's transcripts.
        report: Optional report collecting removed transcript ids.

    Returns:
        Surviving transcripts in their input order. Running the function
        on its own output returns it unchanged.
    """
    transcripts = list(transcripts)

    keepers: dict[tuple[str | None, str], str] = {}
    for transcript in transcripts:
        group = transcript.event_id if within_event else None
        key = (group, transcript_signature(transcript))
        current = keepers.get(key)
        if current is None or transcript.transcript_id < current:
            keepers[key] = transcript.transcript_id

    kept_ids = set(keepers.values())
    result = []
    for transcript in transcripts:
        if transcript.transcript_id in kept_ids:
            result.append(transcript)
        elif report is not None:
            report.record(SkipReason.STRUCTURAL_DUPLICATE, transcript.transcript_id)

    removed = len(transcripts) - len(result)
    if removed:
        logger.debug(f"Removed {removed} structurally duplicated transcripts")
    return result
