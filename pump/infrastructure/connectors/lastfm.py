"""Last.fm recent tracks integration for Pump.

This module pages through a user's scrobble history with the Last.fm
``user.getRecentTracks`` endpoint and converts the raw JSON envelope into
``ListenRecord`` domain values.

Key components:
- LastFMRecentTracksPager: Fetches one page of listens per call, newest first
- parse_recent_tracks: Converts a decoded response body into listen records
- parse_uts: Converts a Unix-seconds string into an aware UTC datetime

HTTP calls go through ``requests``; each blocking request runs in a worker
thread so the event loop stays free.
"""

import asyncio
from datetime import UTC, datetime
from typing import Any, ClassVar, Literal, Self

from attrs import define, field
import requests
from toolz import get_in

from pump.config import LastFMConfig, get_logger, resilient_operation
from pump.domain.entities import EPOCH, ListenRecord

# Get contextual logger with service binding
logger = get_logger(__name__).bind(service="lastfm")

TimestampPolicy = Literal["lenient", "strict"]


class RecentTracksError(Exception):
    """Base error for recent tracks retrieval."""


class MalformedResponseError(RecentTracksError):
    """Response body could not be interpreted as a recent tracks page."""


class LastFMAPIError(RecentTracksError):
    """Last.fm answered with an error body."""

    def __init__(self, code: int | str | None, message: str) -> None:
        super().__init__(f"Last.fm error {code}: {message}")
        self.code = code
        self.message = message


def parse_uts(raw: Any, policy: TimestampPolicy = "lenient") -> datetime:
    """Parse a base-10 Unix epoch seconds value.

    Under the lenient policy an unparsable value becomes the epoch start and a
    warning is logged. Under the strict policy it raises MalformedResponseError.
    """
    try:
        return datetime.fromtimestamp(int(str(raw), 10), tz=UTC)
    except (TypeError, ValueError, OverflowError, OSError) as e:
        if policy == "strict":
            raise MalformedResponseError(f"Invalid scrobble timestamp: {raw!r}") from e
        logger.warning(f"Invalid scrobble timestamp {raw!r}, using epoch start")
        return EPOCH


def _text(item: dict[str, Any], key: str) -> str:
    """Extract the ``#text`` value of an artist/album node, empty when absent."""
    return str(get_in([key, "#text"], item) or "")


def _is_now_playing(item: dict[str, Any]) -> bool:
    return str(get_in(["@attr", "nowplaying"], item, default="")).lower() == "true"


def parse_recent_tracks(
    payload: Any, policy: TimestampPolicy = "lenient"
) -> list[ListenRecord]:
    """Convert a decoded ``user.getRecentTracks`` body into listen records.

    Args:
        payload: Decoded JSON body
        policy: What to do with an unparsable ``uts`` value

    Returns:
        Listen records in response order (newest first), now playing excluded

    Raises:
        LastFMAPIError: Body is a Last.fm error object
        MalformedResponseError: Body lacks the ``recenttracks`` object
    """
    if not isinstance(payload, dict):
        raise MalformedResponseError("Response body is not a JSON object")

    if "error" in payload:
        raise LastFMAPIError(payload.get("error"), str(payload.get("message", "")))

    recent = payload.get("recenttracks")
    if not isinstance(recent, dict):
        raise MalformedResponseError("Response body has no recenttracks object")

    items = recent.get("track", [])
    # Last.fm collapses a one-track page into a bare object
    if isinstance(items, dict):
        items = [items]

    records = []
    for item in items:
        if not isinstance(item, dict) or _is_now_playing(item):
            continue

        uts = get_in(["date", "uts"], item)
        records.append(
            ListenRecord(
                title=str(item.get("name") or ""),
                artist=_text(item, "artist"),
                album=_text(item, "album"),
                listened_at=parse_uts(uts, policy),
            )
        )

    return records


@define(slots=True)
class LastFMRecentTracksPager:
    """Pager over a user's Last.fm scrobble history.

    Implements ListenPagerProtocol. Pages are 1-based and ordered newest first.

    Attributes:
        config: API endpoint, credentials, page size and timeout
        timestamp_policy: Handling of unparsable scrobble timestamps
        session: HTTP session; created and owned by the pager when not supplied
    """

    config: LastFMConfig
    timestamp_policy: TimestampPolicy = "lenient"
    session: requests.Session | None = field(default=None, repr=False)
    _owns_session: bool = field(default=False, init=False, repr=False)

    METHOD: ClassVar[str] = "user.getrecenttracks"
    USER_AGENT: ClassVar[str] = "Pump/0.1.0 (Listen History Import)"

    def __attrs_post_init__(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            self.session.headers["User-Agent"] = self.USER_AGENT
            self._owns_session = True

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP session if this pager created it."""
        if self._owns_session and self.session is not None:
            self.session.close()
            self.session = None

    def build_params(self, page: int) -> dict[str, str | int]:
        """Query parameters for one page request."""
        return {
            "method": self.METHOD,
            "user": self.config.username,
            "api_key": self.config.api_key.get_secret_value(),
            "format": "json",
            "limit": self.config.page_size,
            "page": page,
        }

    def _get(self, page: int) -> Any:
        """Blocking GET of one page, returning the decoded body."""
        if self.session is None:
            raise RuntimeError("Pager session is closed")

        response = self.session.get(
            self.config.api_url,
            params=self.build_params(page),
            timeout=self.config.timeout,
        )
        response.raise_for_status()

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response for page {page} is not JSON") from e

    @resilient_operation("fetch_recent_tracks_page")
    async def fetch_page(self, page: int) -> list[ListenRecord]:
        """Fetch one page of the user's recent tracks.

        Args:
            page: 1-based page number

        Returns:
            Listen records on that page, newest first; empty past the end

        Raises:
            ValueError: page is not a positive integer
            requests.RequestException: Transport failure or non-2xx status
            MalformedResponseError: Body is not a recent tracks page
            LastFMAPIError: Last.fm returned an error body
        """
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise ValueError(f"page must be a positive integer, got {page!r}")

        payload = await asyncio.to_thread(self._get, page)
        records = parse_recent_tracks(payload, self.timestamp_policy)

        logger.debug(
            f"Retrieved {len(records)} recent tracks for user {self.config.username}",
            page=page,
            limit=self.config.page_size,
        )
        return records
