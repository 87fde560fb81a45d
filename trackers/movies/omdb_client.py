"""OMDb API client: title search and full details by IMDb id."""

from __future__ import annotations

import logging
from typing import Any

from ..common.config import MovieSettings, get_omdb_api_key, settings
from ..common.errors import NotFound
from ..common.http_client import AsyncHTTPClient
from .models import NOT_AVAILABLE, MovieDetails, MovieSummary

logger = logging.getLogger(__name__)


def _field(data: dict, name: str) -> str:
    value = data.get(name)
    return str(value) if value not in (None, "") else NOT_AVAILABLE


def omdb_to_summary(data: dict) -> MovieSummary:
    return MovieSummary(
        id=data.get("imdbID", ""),
        title=data.get("Title") or "Untitled",
        year=_field(data, "Year"),
        poster=_field(data, "Poster"),
        rating=_field(data, "imdbRating"),
    )


def omdb_to_details(data: dict, movie_id: str) -> MovieDetails:
    return MovieDetails(
        id=data.get("imdbID") or movie_id,
        title=data.get("Title") or "Untitled",
        year=_field(data, "Year"),
        rated=_field(data, "Rated"),
        runtime=_field(data, "Runtime"),
        genre=_field(data, "Genre"),
        director=_field(data, "Director"),
        actors=_field(data, "Actors"),
        plot=data.get("Plot") or "No plot available.",
        language=_field(data, "Language"),
        country=_field(data, "Country"),
        rating=_field(data, "imdbRating"),
        box_office=_field(data, "BoxOffice"),
        poster=_field(data, "Poster"),
    )


class OmdbClient:
    """Searches OMDb and fetches detail records.

    OMDb answers 200 even for misses; `Response: "False"` carries the error.
    """

    def __init__(
        self,
        config: MovieSettings | None = None,
        http: AsyncHTTPClient | None = None,
        api_key: str | None = None,
    ) -> None:
        self.config = config or settings.movies
        self.api_key = api_key or get_omdb_api_key()
        self._http = http
        self._owns_http = http is None

    @property
    def http(self) -> AsyncHTTPClient:
        if self._http is None:
            self._http = AsyncHTTPClient()
        return self._http

    async def _get(self, operation: str, params: dict[str, Any], missing: str) -> dict:
        data = await self.http.get_json(
            self.config.omdb_base_url,
            operation=operation,
            params={"apikey": self.api_key, **params},
        )
        data = data if isinstance(data, dict) else {}
        if data.get("Response") == "False":
            raise NotFound(data.get("Error") or missing)
        return data

    async def search(self, query: str) -> list[MovieSummary]:
        """Search movies by title.

        Raises:
            NotFound: OMDb reported no match (message is OMDb's error text).
            FetchError: Network or HTTP failure.
        """
        data = await self._get(
            "search_movies", {"s": query, "type": "movie"}, missing="No results found"
        )
        results = [omdb_to_summary(item) for item in data.get("Search") or []]
        logger.info("OMDb returned %d results for '%s'", len(results), query)
        return results

    async def details(self, imdb_id: str) -> MovieDetails:
        data = await self._get(
            "movie_details", {"i": imdb_id, "plot": "full"}, missing="Movie not found"
        )
        return omdb_to_details(data, imdb_id)

    async def aclose(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.aclose()
