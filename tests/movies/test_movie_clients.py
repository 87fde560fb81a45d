"""Tests for the OMDb and TMDB clients and the metadata facade."""

import asyncio

import httpx
import pytest

from trackers.common.errors import FetchError, NotFound
from trackers.movies.metadata import MovieMetadataService
from trackers.movies.models import MovieDetails, MovieSummary
from trackers.movies.omdb_client import OmdbClient, omdb_to_summary
from trackers.movies.tmdb_client import TmdbClient, tmdb_to_details, tmdb_to_display

IMAGE_BASE = "https://image.tmdb.org/t/p/w500"


class TestOmdb:
    def test_search(self, movie_settings, make_http, load_fixture):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=load_fixture("omdb_search.json"))

        client = OmdbClient(movie_settings, http=make_http(handler), api_key="k123")
        results = asyncio.run(client.search("inception"))

        assert [r.id for r in results] == ["tt1375666", "tt5295894"]
        assert results[0].has_poster
        assert not results[1].has_poster
        params = seen[0].url.params
        assert params["s"] == "inception"
        assert params["type"] == "movie"
        assert params["apikey"] == "k123"

    def test_search_miss_uses_omdb_error_text(self, movie_settings, make_http):
        http = make_http(lambda request: httpx.Response(
            200, json={"Response": "False", "Error": "Movie not found!"}
        ))
        client = OmdbClient(movie_settings, http=http, api_key="k")
        with pytest.raises(NotFound, match="Movie not found!"):
            asyncio.run(client.search("qwertyuiop"))

    def test_search_miss_without_error_text(self, movie_settings, make_http):
        http = make_http(lambda request: httpx.Response(200, json={"Response": "False"}))
        client = OmdbClient(movie_settings, http=http, api_key="k")
        with pytest.raises(NotFound, match="No results found"):
            asyncio.run(client.search("qwertyuiop"))

    def test_details(self, movie_settings, make_http, load_fixture):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=load_fixture("omdb_details.json"))

        client = OmdbClient(movie_settings, http=make_http(handler), api_key="k")
        details = asyncio.run(client.details("tt1375666"))

        assert details.title == "Inception"
        assert details.director == "Christopher Nolan"
        assert details.rating == "8.8"
        assert details.box_office == "$292,587,330"
        assert details.backdrop is None
        assert seen[0].url.params["plot"] == "full"
        assert seen[0].url.params["i"] == "tt1375666"

    def test_missing_fields_become_not_available(self):
        summary = omdb_to_summary({"imdbID": "tt1", "Title": "Mystery", "Poster": ""})
        assert summary.poster == "N/A"
        assert summary.year == "N/A"
        assert summary.rating == "N/A"


class TestTmdbConversion:
    def test_display_shape(self, load_fixture):
        alien = load_fixture("tmdb_trending.json")["results"][2]
        movie = tmdb_to_display(alien, IMAGE_BASE)
        assert movie == MovieSummary(
            id="tmdb_945961",
            title="Alien: Romulus",
            year="2024",
            poster=f"{IMAGE_BASE}/b33nnKl1GSFbao4l3fZDDqsMx0F.jpg",
            rating="3.6",
            trending=True,
        )
        assert movie.is_tmdb

    def test_display_missing_fields(self, load_fixture):
        substance = load_fixture("tmdb_trending.json")["results"][1]
        movie = tmdb_to_display(substance, IMAGE_BASE)
        assert movie.year == "N/A"
        assert movie.poster == "N/A"
        assert movie.rating == "N/A"

    def test_details_normalization(self, movie_settings, load_fixture):
        details = tmdb_to_details(load_fixture("tmdb_movie.json"), "tmdb_1184918", movie_settings)
        assert details.id == "tmdb_1184918"
        assert details.rated == "PG-13"
        assert details.runtime == "102 min"
        assert details.genre == "Animation, Science Fiction"
        assert details.language == "EN"
        assert details.country == "United States of America"
        assert details.box_office == "$324,000,000"
        assert details.backdrop == "https://image.tmdb.org/t/p/w1280/417tYZ4XUyJrtyZXj7HpvWf1E8f.jpg"
        assert details.director == "N/A"
        assert [label for label, _ in details.facts()] == ["Genre", "Language", "Country", "Box Office"]

    def test_details_sparse_record(self, movie_settings):
        details = tmdb_to_details({"title": "X", "adult": True}, "tmdb_1", movie_settings)
        assert details.rated == "R"
        assert details.runtime == "N/A"
        assert details.box_office == "N/A"
        assert details.plot == "No plot available."
        assert details.backdrop is None


class TestTmdbClient:
    def test_trending_is_limited(self, movie_settings, make_http, load_fixture):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=load_fixture("tmdb_trending.json"))

        client = TmdbClient(movie_settings, http=make_http(handler), token="tok")
        movies = asyncio.run(client.trending(limit=2))

        assert [m.title for m in movies] == ["The Wild Robot", "The Substance"]
        assert seen[0].url.path == "/3/trending/movie/week"
        assert seen[0].headers["Authorization"] == "Bearer tok"

    def test_details_strips_prefix(self, movie_settings, make_http, load_fixture):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=load_fixture("tmdb_movie.json"))

        client = TmdbClient(movie_settings, http=make_http(handler), token="tok")
        details = asyncio.run(client.details("tmdb_1184918"))
        assert seen[0].url.path == "/3/movie/1184918"
        assert details.title == "The Wild Robot"

    def test_missing_token_is_fetch_error(self, movie_settings, monkeypatch):
        monkeypatch.delenv("TMDB_API_TOKEN", raising=False)
        client = TmdbClient(movie_settings)
        with pytest.raises(FetchError) as exc_info:
            asyncio.run(client.trending())
        assert exc_info.value.operation == "fetch_trending"

    def test_non_object_bodies(self, movie_settings, make_http):
        http = make_http(lambda request: httpx.Response(200, json=[{"title": "Heat"}]))
        client = TmdbClient(movie_settings, http=http, token="tok")

        async def scenario():
            return await client.trending(), await client.details("tmdb_949")

        trending, details = asyncio.run(scenario())
        assert trending == []
        assert details.id == "tmdb_949"
        assert details.title == "Untitled"


class TestMetadataRouting:
    class Source:
        def __init__(self, name):
            self.name = name
            self.detail_ids = []

        async def details(self, movie_id):
            self.detail_ids.append(movie_id)
            return MovieDetails(id=movie_id, title=self.name)

        async def aclose(self):
            pass

    def test_details_route_on_id_prefix(self, movie_settings):
        omdb, tmdb = self.Source("omdb"), self.Source("tmdb")
        service = MovieMetadataService(movie_settings, omdb=omdb, tmdb=tmdb)

        async def scenario():
            return await service.details("tmdb_42"), await service.details("tt0111161")

        from_tmdb, from_omdb = asyncio.run(scenario())
        assert from_tmdb.title == "tmdb"
        assert from_omdb.title == "omdb"
        assert tmdb.detail_ids == ["tmdb_42"]
        assert omdb.detail_ids == ["tt0111161"]
