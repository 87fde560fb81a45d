"""Movie watchlist service: search, trending, details and list status."""

from __future__ import annotations

import logging

from ..common.collection import PersistedCollection
from ..common.config import MovieSettings, settings
from ..common.errors import FetchError, PersistenceError, TrackerError
from ..common.notify import Notifier
from ..common.projection import ALL, project, where
from ..common.service import TrackerService
from ..common.storage import KeyValueStore
from .metadata import MovieMetadataService
from .models import MovieDetails, MovieSummary, WatchlistEntry, WatchStatus
from .views import (
    DetailView,
    MovieCardView,
    WatchlistView,
    build_detail,
    build_movie_card,
    build_watchlist,
)

logger = logging.getLogger(__name__)


class MovieTracker(TrackerService[WatchlistEntry]):
    """Watchlist keyed by movie id, with OMDb search and TMDB trending.

    Usage:
        tracker = MovieTracker(open_store())
        movies = await tracker.load_trending()
        tracker.toggle_status(movies[0], "watchlist")
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: MovieSettings | None = None,
        metadata: MovieMetadataService | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.config = config or settings.movies
        super().__init__(
            PersistedCollection(store, self.config.store_key, WatchlistEntry),
            notifier,
        )
        self.metadata = metadata or MovieMetadataService(self.config)
        self.current: list[MovieSummary] = []

    # --- Browsing ---

    async def search(self, query: str) -> list[MovieSummary] | None:
        """Search by title; results become the current grid.

        Returns None when the search failed (the error is shown as a toast).
        """
        query = (query or "").strip()
        if not query:
            return []
        try:
            results = await self.metadata.search(query)
        except TrackerError as exc:
            self.notifier.error(str(exc))
            return None
        self.current = results
        if not results:
            self.notifier.info("No movies found for that search.")
        return results

    async def load_trending(self) -> list[MovieSummary]:
        try:
            results = await self.metadata.trending(self.config.trending_limit)
        except FetchError as exc:
            logger.warning("Trending failed: %s", exc)
            self.notifier.error("Could not load trending movies")
            return []
        self.current = results
        return results

    async def details(self, movie_id: str) -> MovieDetails | None:
        try:
            return await self.metadata.details(movie_id)
        except TrackerError as exc:
            self.notifier.error(f"⚠ {exc}")
            return None

    # --- Watchlist ---

    def status_of(self, movie_id: str) -> WatchStatus | None:
        entry = self.collection.get(movie_id)
        return WatchStatus(entry.status) if entry else None

    def toggle_status(
        self,
        movie: MovieSummary | MovieDetails,
        action: WatchStatus | str,
    ) -> WatchlistEntry | None:
        """Set a movie's list status; choosing its current status removes it.

        Returns the new entry, or None when the movie was removed.
        """
        action = WatchStatus(action)
        existing = self.collection.get(movie.id)

        if existing is not None and existing.status == action:
            self._discard(movie.id)
            self.notifier.info(f'Removed "{movie.title}" from your list')
            return None

        entry = WatchlistEntry(
            id=movie.id,
            title=movie.title,
            year=movie.year,
            poster=movie.poster,
            status=action,
        )
        try:
            if existing is None:
                self.collection.add(entry)
            else:
                self.collection.update(movie.id, entry.model_dump())
        except PersistenceError as exc:
            self._warn_persistence(exc)

        label = "Marked as watched" if action == WatchStatus.WATCHED else "Added to watchlist"
        self.notifier.success(f'{label}: "{movie.title}"')
        return self.collection.get(movie.id)

    async def mark(self, movie_id: str, action: WatchStatus | str) -> WatchlistEntry | None:
        """toggle_status for a bare id, looking the movie up first if needed."""
        movie: MovieSummary | MovieDetails | None = next(
            (m for m in self.current if m.id == movie_id), None
        )
        if movie is None:
            entry = self.collection.get(movie_id)
            if entry is not None:
                movie = MovieSummary(entry.id, entry.title, entry.year, entry.poster)
        if movie is None:
            movie = await self.details(movie_id)
            if movie is None:
                return None
        return self.toggle_status(movie, action)

    def toggle_watched(self, movie_id: str) -> WatchlistEntry | None:
        """Flip an entry between watchlist and watched."""
        entry = self.collection.get(movie_id)
        if entry is None:
            return None
        new_status = WatchStatus.WATCHLIST if entry.watched else WatchStatus.WATCHED
        try:
            updated = self.collection.update(movie_id, {"status": new_status})
        except PersistenceError as exc:
            self._warn_persistence(exc)
            updated = self.collection.get(movie_id)
        self.notifier.success(f'Status updated for "{entry.title}"')
        return updated

    def remove(self, movie_id: str) -> WatchlistEntry | None:
        entry = self.collection.get(movie_id)
        if entry is None:
            return None
        self._discard(movie_id)
        self.notifier.info(f'Removed "{entry.title}" from watchlist')
        return entry

    def _discard(self, movie_id: str) -> None:
        try:
            self.collection.remove(movie_id)
        except PersistenceError as exc:
            self._warn_persistence(exc)
        self._forget(movie_id)

    async def refresh_entry(self, movie_id: str) -> WatchlistEntry | None:
        """Re-read title, year and poster of a listed movie from its source."""
        if movie_id not in self.collection:
            return None
        token = self._begin_request(movie_id)
        try:
            details = await self.metadata.details(movie_id)
        except TrackerError as exc:
            self.notifier.error(f"Refresh failed: {exc}")
            return None
        if not self._accepts(movie_id, token):
            return None
        try:
            return self.collection.update(
                movie_id,
                {"title": details.title, "year": details.year, "poster": details.poster},
            )
        except PersistenceError as exc:
            self._warn_persistence(exc)
            return self.collection.get(movie_id)

    # --- Views ---

    def watchlist(self, tab: str = ALL) -> list[WatchlistEntry]:
        return project(self.collection.values(), where("status", tab), sort=None)

    def watchlist_view(self, tab: str = ALL) -> WatchlistView:
        return build_watchlist(self.collection.values(), self.watchlist(tab), tab)

    def grid(self, movies: list[MovieSummary] | None = None) -> list[MovieCardView]:
        movies = self.current if movies is None else movies
        return [build_movie_card(m, self.status_of(m.id)) for m in movies]

    async def detail_view(self, movie_id: str) -> DetailView | None:
        details = await self.details(movie_id)
        if details is None:
            return None
        return build_detail(details, self.status_of(movie_id))

    async def aclose(self) -> None:
        await self.metadata.aclose()
