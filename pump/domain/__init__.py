"""Domain layer: entities and repository interfaces."""

from .entities import (
    EPOCH,
    MIN_TIMESTAMP,
    ImportCheckpoint,
    ImportListensResult,
    ListenRecord,
    Track,
    cutoff_for,
)

__all__ = [
    "EPOCH",
    "MIN_TIMESTAMP",
    "ImportCheckpoint",
    "ImportListensResult",
    "ListenRecord",
    "Track",
    "cutoff_for",
]
