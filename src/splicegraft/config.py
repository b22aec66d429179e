"""Configuration management for splicegraft.

This module handles loading, validating, and providing access to
splicegraft configuration settings. Configuration can come from:
- Default values
- TOML configuration files
- Plain dictionaries (e.g. assembled by a calling workflow)

Example:
    >>> from splicegraft.config import Config
    >>> config = Config.load("splicegraft.toml")
    >>> config.graft.min_junction_width
    2

A configuration file mirrors the attribute layout::

    [graft]
    min_junction_width = 2
    collapse_within_event = true
    event_classes = ["AA", "AD"]

    [parallel]
    max_workers = 4
    backend = "threads"
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

import attrs

from splicegraft.core.models import EventClass
from splicegraft.core.pairs import DEFAULT_MIN_JUNCTION_WIDTH

# =============================================================================
# Default Configuration Values
# =============================================================================

# Event classes in processing (and output concatenation) order
DEFAULT_EVENT_CLASSES = (
    EventClass.ALT_ACCEPTOR,
    EventClass.ALT_DONOR,
    EventClass.ALT_FIRST_EXON,
    EventClass.ALT_LAST_EXON,
)

# Parallel processing defaults
DEFAULT_MAX_WORKERS = 1
DEFAULT_BACKEND = "serial"
VALID_BACKENDS = ("serial", "threads")


def _to_event_classes(values: Any) -> tuple[EventClass, ...]:
    classes = tuple(EventClass.parse(v) for v in values)
    # keep the canonical order regardless of how they were listed
    return tuple(c for c in DEFAULT_EVENT_CLASSES if c in classes)


# =============================================================================
# Configuration Classes
# =============================================================================


@attrs.define
class ParallelConfig:
    """Configuration for processing event classes concurrently.

    Attributes:
        max_workers: Maximum number of worker threads.
        backend: "serial" or "threads".
    """

    max_workers: int = attrs.field(
        default=DEFAULT_MAX_WORKERS,
        validator=[attrs.validators.instance_of(int), attrs.validators.ge(1)],
    )
    backend: str = attrs.field(
        default=DEFAULT_BACKEND,
        validator=attrs.validators.in_(VALID_BACKENDS),
    )


@attrs.define
class GraftConfig:
    """Configuration for junction pairing and transcript grafting.

    Attributes:
        min_junction_width: Junctions must be wider than this to be used.
        collapse_duplicates: Remove structurally identical transcripts.
        collapse_within_event: Only collapse duplicates from the same event.
        event_classes: Event classes to process, in output order.
    """

    min_junction_width: int = attrs.field(
        default=DEFAULT_MIN_JUNCTION_WIDTH,
        validator=[attrs.validators.instance_of(int), attrs.validators.ge(0)],
    )
    collapse_duplicates: bool = True
    collapse_within_event: bool = False
    event_classes: tuple[EventClass, ...] = attrs.field(
        default=DEFAULT_EVENT_CLASSES,
        converter=_to_event_classes,
    )


@attrs.define
class Config:
    """Main configuration container for splicegraft.

    Attributes:
        graft: Pairing and grafting configuration.
        parallel: Parallel processing configuration.
    """

    graft: GraftConfig = attrs.Factory(GraftConfig)
    parallel: ParallelConfig = attrs.Factory(ParallelConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build a configuration from a nested dictionary.

        Args:
            data: Mapping with optional "graft" and "parallel" tables.

        Returns:
            Configuration object.

        Raises:
            ValueError: If a section or key is unknown or a value invalid.
        """
        unknown = set(data) - {"graft", "parallel"}
        if unknown:
            raise ValueError(f"Unknown configuration sections: {sorted(unknown)}")
        try:
            return cls(
                graft=GraftConfig(**data.get("graft", {})),
                parallel=ParallelConfig(**data.get("parallel", {})),
            )
        except TypeError as e:
            raise ValueError(f"Invalid configuration: {e}") from e

    @classmethod
    def load(cls, path: Path | str | None = None) -> Config:
        """Load configuration from a TOML file.

        Args:
            path: Path to configuration file.
                  If None, returns default configuration.

        Returns:
            Loaded configuration object.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            ValueError: If configuration file is invalid.
        """
        if path is None:
            return cls()

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid configuration file {path}: {e}") from e

        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration.
        """
        return {
            "graft": {
                "min_junction_width": self.graft.min_junction_width,
                "collapse_duplicates": self.graft.collapse_duplicates,
                "collapse_within_event": self.graft.collapse_within_event,
                "event_classes": [c.code for c in self.graft.event_classes],
            },
            "parallel": attrs.asdict(self.parallel),
        }
