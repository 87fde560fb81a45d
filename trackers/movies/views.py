"""View models for the movie grid, the watchlist panel and the detail modal."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..common.formatting import format_date
from ..common.projection import ALL
from .models import NOT_AVAILABLE, STATUS_LABEL, MovieDetails, MovieSummary, WatchlistEntry, WatchStatus


def _badge_class(status: WatchStatus | None) -> str:
    return "badge-success" if status == WatchStatus.WATCHED else "badge-info"


@dataclass
class MovieCardView:
    id: str
    title: str
    year: str
    poster: str | None
    rating: str | None
    trending: bool
    status: str | None
    badge: str | None
    badge_class: str

    @property
    def in_watchlist(self) -> bool:
        return self.status == WatchStatus.WATCHLIST.value

    @property
    def watched(self) -> bool:
        return self.status == WatchStatus.WATCHED.value


@dataclass
class WatchlistItemView:
    id: str
    title: str
    year: str
    poster: str | None
    added: str
    status: str
    status_label: str
    badge_class: str
    toggle_label: str


@dataclass
class WatchlistView:
    total: int
    watched: int
    pending: int
    tab: str = ALL
    items: list[WatchlistItemView] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.items


@dataclass
class DetailView:
    details: MovieDetails
    status: str | None
    badge: str | None
    badge_class: str
    facts: list[tuple[str, str]]
    watchlist_button: str
    watched_button: str


def _known(value: str | None) -> str | None:
    return value if value and value != NOT_AVAILABLE else None


def build_movie_card(movie: MovieSummary, status: WatchStatus | None) -> MovieCardView:
    badge = None
    if status is not None:
        badge = "Watched" if status == WatchStatus.WATCHED else "In List"
    return MovieCardView(
        id=movie.id,
        title=movie.title,
        year=movie.year,
        poster=_known(movie.poster),
        rating=_known(movie.rating),
        trending=movie.trending,
        status=status.value if status else None,
        badge=badge,
        badge_class=_badge_class(status),
    )


def build_watchlist_item(entry: WatchlistEntry) -> WatchlistItemView:
    status = WatchStatus(entry.status)
    return WatchlistItemView(
        id=entry.id,
        title=entry.title,
        year=entry.year,
        poster=_known(entry.poster),
        added=format_date(entry.added_at, "short"),
        status=status.value,
        status_label=STATUS_LABEL[status],
        badge_class=_badge_class(status),
        toggle_label="↩ Unwatch" if status == WatchStatus.WATCHED else "✓ Watched",
    )


def build_watchlist(
    all_entries: list[WatchlistEntry],
    visible: list[WatchlistEntry],
    tab: str = ALL,
) -> WatchlistView:
    """Counts over the whole watchlist plus rows for the active tab."""
    watched = sum(1 for e in all_entries if e.status == WatchStatus.WATCHED)
    return WatchlistView(
        total=len(all_entries),
        watched=watched,
        pending=len(all_entries) - watched,
        tab=tab or ALL,
        items=[build_watchlist_item(e) for e in visible],
    )


def build_detail(details: MovieDetails, status: WatchStatus | None) -> DetailView:
    badge = None
    if status is not None:
        badge = "Watched" if status == WatchStatus.WATCHED else "In Watchlist"
    return DetailView(
        details=details,
        status=status.value if status else None,
        badge=badge,
        badge_class=_badge_class(status),
        facts=details.facts(),
        watchlist_button="✓ In Watchlist" if status == WatchStatus.WATCHLIST else "+ Add to Watchlist",
        watched_button="↩ Unmark Watched" if status == WatchStatus.WATCHED else "✓ Mark Watched",
    )
