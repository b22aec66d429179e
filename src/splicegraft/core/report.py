"""Diagnostics for items dropped during isoform reconstruction.

No stage raises for per-item failures; instead each one can tally what it
dropped and why in a GraftReport. Reports from independent batches (for
example event classes processed in parallel) are merged afterwards.

Example:
    >>> from splicegraft.core.report import GraftReport, SkipReason
    >>> report = GraftReport()
    >>> report.record(SkipReason.UNMATCHED_ANCHOR, "E1")
    >>> report.count(SkipReason.UNMATCHED_ANCHOR)
    1
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import attrs

# =============================================================================
# Enums
# =============================================================================


class SkipReason(Enum):
    """Why an item contributed nothing (or less) to the output."""

    UNMATCHED_ANCHOR = "unmatched_anchor"  # anchor matched no junction boundary
    NO_COMPATIBLE_TRANSCRIPT = "no_compatible_transcript"  # no exon at break point
    COMPETING_ALTERNATIVES = "competing_alternatives"  # several junctions on one side
    DEGENERATE_JUNCTION = "degenerate_junction"  # width <= minimum
    STRUCTURAL_DUPLICATE = "structural_duplicate"  # same exon chain, other id
    UNRESOLVED_STRAND = "unresolved_strand"  # X/Y label needs a known strand
    INCOMPLETE_REPLACEMENT = "incomplete_replacement"  # composite lacked an exon


# Reasons that describe intentional multiplicity rather than lost output
INFORMATIONAL_REASONS = frozenset({SkipReason.COMPETING_ALTERNATIVES})


# =============================================================================
# Report
# =============================================================================


@attrs.define(slots=True)
class GraftReport:
    """Tally of skipped items by reason.

    Attributes:
        counts: Number of occurrences per reason.
        examples: Up to ``max_examples`` item ids per reason.
        max_examples: Cap on stored example ids.
    """

    counts: dict[SkipReason, int] = attrs.Factory(dict)
    examples: dict[SkipReason, list[str]] = attrs.Factory(dict)
    max_examples: int = 10

    def record(self, reason: SkipReason, item_id: str, n: int = 1) -> None:
        """Record ``n`` occurrences of a reason for an item."""
        self.counts[reason] = self.counts.get(reason, 0) + n
        examples = self.examples.setdefault(reason, [])
        if len(examples) < self.max_examples and item_id not in examples:
            examples.append(item_id)

    def count(self, reason: SkipReason) -> int:
        return self.counts.get(reason, 0)

    @property
    def total_skipped(self) -> int:
        """Occurrences of every reason that lost output."""
        return sum(
            n for reason, n in self.counts.items()
            if reason not in INFORMATIONAL_REASONS
        )

    def merge(self, other: GraftReport) -> GraftReport:
        """Combine two reports into a new one."""
        merged = GraftReport(max_examples=self.max_examples)
        for report in (self, other):
            for reason, n in report.counts.items():
                merged.counts[reason] = merged.counts.get(reason, 0) + n
            for reason, ids in report.examples.items():
                for item_id in ids:
                    examples = merged.examples.setdefault(reason, [])
                    if len(examples) < merged.max_examples and item_id not in examples:
                        examples.append(item_id)
        return merged

    def summary(self) -> str:
        """One-line human readable summary."""
        if not self.counts:
            return "nothing skipped"
        parts = [
            f"{reason.value}={self.counts[reason]}"
            for reason in SkipReason
            if reason in self.counts
        ]
        return ", ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "counts": {reason.value: n for reason, n in self.counts.items()},
            "examples": {
                reason.value: list(ids) for reason, ids in self.examples.items()
            },
            "total_skipped": self.total_skipped,
        }
