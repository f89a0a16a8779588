"""Domain repository interfaces."""

from .interfaces import (
    CheckpointRepositoryProtocol,
    ListenPagerProtocol,
    TrackRepositoryProtocol,
    UnitOfWorkProtocol,
)

__all__ = [
    "CheckpointRepositoryProtocol",
    "ListenPagerProtocol",
    "TrackRepositoryProtocol",
    "UnitOfWorkProtocol",
]
