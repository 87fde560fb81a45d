"""Tests for MovieTracker: browsing, list status toggles, refresh."""

import asyncio

import pytest

from trackers.common.errors import FetchError, NotFound
from trackers.movies.models import MovieDetails, MovieSummary, WatchStatus
from trackers.movies.tracker import MovieTracker

INCEPTION = MovieSummary(id="tt1375666", title="Inception", year="2010", poster="https://img/inception.jpg")
ROBOT = MovieSummary(id="tmdb_1184918", title="The Wild Robot", year="2024", rating="4.2", trending=True)


class FakeMetadata:
    """Stands in for MovieMetadataService with canned results."""

    def __init__(self):
        self.search_results = [INCEPTION]
        self.trending_results = [ROBOT]
        self.search_error = None
        self.trending_error = None
        self.details_error = None
        self.detail_calls = []
        self.gates = None

    async def search(self, query):
        if self.search_error:
            raise self.search_error
        return self.search_results

    async def trending(self, limit=None):
        if self.trending_error:
            raise self.trending_error
        return self.trending_results[:limit]

    async def details(self, movie_id):
        self.detail_calls.append(movie_id)
        if self.details_error:
            raise self.details_error
        if self.gates is not None:
            gate = asyncio.get_running_loop().create_future()
            self.gates.append(gate)
            return await gate
        return MovieDetails(id=movie_id, title="Inception", year="2010", poster="https://img/new.jpg")

    async def aclose(self):
        pass


@pytest.fixture
def metadata():
    return FakeMetadata()


@pytest.fixture
def tracker(memory_store, movie_settings, metadata, notifier):
    return MovieTracker(memory_store, config=movie_settings, metadata=metadata, notifier=notifier)


class TestBrowsing:
    def test_search_sets_current_grid(self, tracker):
        results = asyncio.run(tracker.search(" inception "))
        assert results == [INCEPTION]
        assert tracker.current == [INCEPTION]

    def test_empty_query(self, tracker, metadata):
        assert asyncio.run(tracker.search("  ")) == []

    def test_search_error_is_toasted(self, tracker, metadata, notifier):
        metadata.search_error = NotFound("Movie not found!")
        assert asyncio.run(tracker.search("zzz")) is None
        assert notifier.last.severity.value == "error"
        assert notifier.last.message == "Movie not found!"

    def test_no_results_message(self, tracker, metadata, notifier):
        metadata.search_results = []
        assert asyncio.run(tracker.search("zzz")) == []
        assert notifier.last.message == "No movies found for that search."

    def test_trending(self, tracker):
        assert asyncio.run(tracker.load_trending()) == [ROBOT]
        assert tracker.grid()[0].trending

    def test_trending_failure(self, tracker, metadata, notifier):
        metadata.trending_error = FetchError("fetch_trending", "TMDB_API_TOKEN not set in environment")
        assert asyncio.run(tracker.load_trending()) == []
        assert notifier.last.message == "Could not load trending movies"

    def test_details_failure(self, tracker, metadata, notifier):
        metadata.details_error = NotFound("Incorrect IMDb ID.")
        assert asyncio.run(tracker.details("tt0")) is None
        assert notifier.last.message == "⚠ Incorrect IMDb ID."


class TestToggleStatus:
    def test_adds_to_watchlist(self, tracker, notifier, memory_store):
        entry = tracker.toggle_status(INCEPTION, "watchlist")
        assert entry.status == WatchStatus.WATCHLIST
        assert entry.title == "Inception"
        assert notifier.last.message == 'Added to watchlist: "Inception"'
        assert memory_store.get("movieTracker_watchlist")["tt1375666"]["status"] == "watchlist"

    def test_same_status_removes(self, tracker, notifier):
        tracker.toggle_status(INCEPTION, WatchStatus.WATCHED)
        assert tracker.toggle_status(INCEPTION, WatchStatus.WATCHED) is None
        assert tracker.status_of(INCEPTION.id) is None
        assert notifier.last.message == 'Removed "Inception" from your list'

    def test_other_status_switches(self, tracker, notifier):
        first = tracker.toggle_status(INCEPTION, "watchlist")
        second = tracker.toggle_status(INCEPTION, "watched")
        assert second.status == WatchStatus.WATCHED
        assert second.added_at >= first.added_at
        assert len(tracker.collection) == 1
        assert notifier.last.message == 'Marked as watched: "Inception"'

    def test_toggle_watched(self, tracker, notifier):
        tracker.toggle_status(INCEPTION, "watchlist")
        assert tracker.toggle_watched(INCEPTION.id).status == WatchStatus.WATCHED
        assert notifier.last.message == 'Status updated for "Inception"'
        assert tracker.toggle_watched(INCEPTION.id).status == WatchStatus.WATCHLIST
        assert tracker.toggle_watched("tt0") is None

    def test_remove(self, tracker, notifier):
        tracker.toggle_status(INCEPTION, "watchlist")
        assert tracker.remove(INCEPTION.id).title == "Inception"
        assert notifier.last.message == 'Removed "Inception" from watchlist'
        assert tracker.remove(INCEPTION.id) is None


class TestMark:
    def test_uses_current_grid(self, tracker, metadata):
        asyncio.run(tracker.load_trending())
        entry = asyncio.run(tracker.mark(ROBOT.id, "watched"))
        assert entry.title == "The Wild Robot"
        assert metadata.detail_calls == []

    def test_uses_existing_entry(self, tracker, metadata):
        tracker.toggle_status(INCEPTION, "watchlist")
        tracker.current = []
        assert asyncio.run(tracker.mark(INCEPTION.id, "watched")).watched
        assert metadata.detail_calls == []

    def test_fetches_unknown_movie(self, tracker, metadata):
        entry = asyncio.run(tracker.mark("tt1375666", "watchlist"))
        assert metadata.detail_calls == ["tt1375666"]
        assert entry.poster == "https://img/new.jpg"

    def test_lookup_failure(self, tracker, metadata):
        metadata.details_error = NotFound("Incorrect IMDb ID.")
        assert asyncio.run(tracker.mark("tt0", "watchlist")) is None
        assert len(tracker.collection) == 0


class TestRefreshEntry:
    def test_refresh_updates_fields(self, tracker):
        tracker.toggle_status(INCEPTION, "watched")
        entry = asyncio.run(tracker.refresh_entry(INCEPTION.id))
        assert entry.poster == "https://img/new.jpg"
        assert entry.status == WatchStatus.WATCHED

    def test_unknown_id(self, tracker, metadata):
        assert asyncio.run(tracker.refresh_entry("tt0")) is None
        assert metadata.detail_calls == []

    def test_response_after_removal_is_discarded(self, tracker, metadata):
        tracker.toggle_status(INCEPTION, "watchlist")
        metadata.gates = []

        async def scenario():
            refresh = asyncio.create_task(tracker.refresh_entry(INCEPTION.id))
            await asyncio.sleep(0)
            tracker.remove(INCEPTION.id)
            metadata.gates[0].set_result(MovieDetails(id=INCEPTION.id, title="Inception"))
            return await refresh

        assert asyncio.run(scenario()) is None
        assert INCEPTION.id not in tracker.collection

    def test_re_added_movie_ignores_older_refresh(self, tracker, metadata):
        tracker.toggle_status(INCEPTION, "watchlist")
        metadata.gates = []

        async def scenario():
            refresh = asyncio.create_task(tracker.refresh_entry(INCEPTION.id))
            await asyncio.sleep(0)
            tracker.remove(INCEPTION.id)
            tracker.toggle_status(INCEPTION, "watchlist")
            metadata.gates[0].set_result(MovieDetails(id=INCEPTION.id, title="Stale title"))
            return await refresh

        assert asyncio.run(scenario()) is None
        assert tracker.collection.get(INCEPTION.id).title == "Inception"

    def test_refresh_from_before_removal_loses_to_refresh_after_re_add(self, tracker, metadata):
        tracker.toggle_status(INCEPTION, "watchlist")
        metadata.gates = []

        async def scenario():
            before = asyncio.create_task(tracker.refresh_entry(INCEPTION.id))
            await asyncio.sleep(0)
            tracker.remove(INCEPTION.id)
            tracker.toggle_status(INCEPTION, "watchlist")
            after = asyncio.create_task(tracker.refresh_entry(INCEPTION.id))
            await asyncio.sleep(0)
            assert len(metadata.gates) == 2

            metadata.gates[0].set_result(MovieDetails(id=INCEPTION.id, title="Stale title"))
            stale = await before
            metadata.gates[1].set_result(MovieDetails(id=INCEPTION.id, title="Inception", year="2010"))
            fresh = await after
            return stale, fresh

        stale, fresh = asyncio.run(scenario())
        assert stale is None
        assert fresh.title == "Inception"
        assert tracker.collection.get(INCEPTION.id).year == "2010"


class TestViews:
    def test_watchlist_tabs(self, tracker):
        tracker.toggle_status(INCEPTION, "watched")
        tracker.toggle_status(ROBOT, "watchlist")

        assert [e.title for e in tracker.watchlist()] == ["Inception", "The Wild Robot"]
        assert [e.title for e in tracker.watchlist("watched")] == ["Inception"]

        view = tracker.watchlist_view("watchlist")
        assert (view.total, view.watched, view.pending) == (2, 1, 1)
        assert [i.title for i in view.items] == ["The Wild Robot"]

    def test_grid_badges(self, tracker):
        tracker.toggle_status(INCEPTION, "watched")
        cards = tracker.grid([INCEPTION, ROBOT])
        assert cards[0].badge == "Watched"
        assert cards[0].watched
        assert cards[1].badge is None

    def test_detail_view(self, tracker):
        tracker.toggle_status(INCEPTION, "watchlist")
        view = asyncio.run(tracker.detail_view(INCEPTION.id))
        assert view.badge == "In Watchlist"
        assert view.watchlist_button == "✓ In Watchlist"
