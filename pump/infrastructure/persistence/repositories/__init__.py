"""Repository implementations backed by SQLAlchemy."""

from pump.infrastructure.persistence.repositories.checkpoint import (
    CheckpointRepository,
)
from pump.infrastructure.persistence.repositories.track import TrackRepository

__all__ = [
    "CheckpointRepository",
    "TrackRepository",
]
