"""Data models for the movie watchlist."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum

from ..common.models import TrackedEntity

NOT_AVAILABLE = "N/A"
TMDB_PREFIX = "tmdb_"


class WatchStatus(str, Enum):
    WATCHLIST = "watchlist"
    WATCHED = "watched"


STATUS_LABEL = {
    WatchStatus.WATCHLIST: "To Watch",
    WatchStatus.WATCHED: "Watched",
}


class WatchlistEntry(TrackedEntity):
    """A movie on the watchlist, keyed by IMDb id or a tmdb_<n> id."""

    title: str
    year: str = NOT_AVAILABLE
    poster: str = NOT_AVAILABLE
    status: WatchStatus = WatchStatus.WATCHLIST

    @property
    def watched(self) -> bool:
        return self.status == WatchStatus.WATCHED


@dataclass
class MovieSummary:
    """A movie as listed in search results or the trending grid."""

    id: str
    title: str
    year: str = NOT_AVAILABLE
    poster: str = NOT_AVAILABLE
    rating: str = NOT_AVAILABLE
    trending: bool = False

    @property
    def has_poster(self) -> bool:
        return bool(self.poster) and self.poster != NOT_AVAILABLE

    @property
    def is_tmdb(self) -> bool:
        return self.id.startswith(TMDB_PREFIX)


@dataclass
class MovieDetails:
    """Full detail record, the same shape whichever source provided it."""

    id: str
    title: str
    year: str = NOT_AVAILABLE
    rated: str = NOT_AVAILABLE
    runtime: str = NOT_AVAILABLE
    genre: str = NOT_AVAILABLE
    director: str = NOT_AVAILABLE
    actors: str = NOT_AVAILABLE
    plot: str = "No plot available."
    language: str = NOT_AVAILABLE
    country: str = NOT_AVAILABLE
    rating: str = NOT_AVAILABLE
    box_office: str = NOT_AVAILABLE
    poster: str = NOT_AVAILABLE
    backdrop: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    def to_summary(self) -> MovieSummary:
        return MovieSummary(
            id=self.id,
            title=self.title,
            year=self.year,
            poster=self.poster,
            rating=self.rating,
            trending=self.id.startswith(TMDB_PREFIX),
        )

    def facts(self) -> list[tuple[str, str]]:
        """Labelled detail rows, skipping the unknown ones."""
        rows = [
            ("Genre", self.genre),
            ("Director", self.director),
            ("Cast", self.actors),
            ("Language", self.language),
            ("Country", self.country),
            ("Box Office", self.box_office),
        ]
        return [(label, value) for label, value in rows if value and value != NOT_AVAILABLE]
