"""Connectors to external listening history services."""

from pump.infrastructure.connectors.lastfm import (
    LastFMAPIError,
    LastFMRecentTracksPager,
    MalformedResponseError,
    RecentTracksError,
)

__all__ = [
    "LastFMAPIError",
    "LastFMRecentTracksPager",
    "MalformedResponseError",
    "RecentTracksError",
]
