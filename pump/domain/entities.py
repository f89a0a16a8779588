"""Domain entities for listen history imports.

All entities are immutable attrs value objects. Timestamps are timezone-aware
UTC datetimes.
"""

from datetime import UTC, datetime

from attrs import define, field

# Lower bound used as the cutoff when no checkpoint exists yet
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
MIN_TIMESTAMP = datetime.min.replace(tzinfo=UTC)


@define(frozen=True, slots=True)
class ListenRecord:
    """One scrobble as returned by the remote recent tracks endpoint."""

    title: str
    artist: str
    album: str
    listened_at: datetime


@define(frozen=True, slots=True)
class Track:
    """A persisted listen. Never modified once written."""

    title: str
    artist: str
    album: str
    listened_at: datetime
    id: int | None = None
    created_at: datetime | None = None

    @classmethod
    def from_listen(cls, record: ListenRecord) -> "Track":
        """Build an unsaved track from a remote listen record."""
        return cls(
            title=record.title,
            artist=record.artist,
            album=record.album,
            listened_at=record.listened_at,
        )


@define(frozen=True, slots=True)
class ImportCheckpoint:
    """Watermark left behind by a successful import run.

    Attributes:
        count: Number of tracks imported by the run that wrote this checkpoint
        timestamp: listened_at of the newest track imported in that run
    """

    count: int
    timestamp: datetime
    id: int | None = None
    created_at: datetime | None = None


def cutoff_for(checkpoint: ImportCheckpoint | None) -> datetime:
    """Return the timestamp at or below which remote records are already imported."""
    return checkpoint.timestamp if checkpoint else MIN_TIMESTAMP


@define(frozen=True, slots=True)
class ImportListensResult:
    """Outcome of one import run."""

    pages_fetched: int
    records_fetched: int
    imported_count: int
    previous_checkpoint: ImportCheckpoint | None = None
    checkpoint: ImportCheckpoint | None = None
    execution_time_ms: int = 0
    tracks: list[Track] = field(factory=list)

    @property
    def checkpoint_advanced(self) -> bool:
        """Whether this run wrote a new checkpoint."""
        return self.checkpoint is not None
