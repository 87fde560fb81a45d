"""TMDB API client: weekly trending movies and detail records.

TMDB movies have no IMDb id in list responses, so they are keyed with a
synthetic "tmdb_<id>" id that routes detail lookups back here.
"""

from __future__ import annotations

import logging

from ..common.config import MovieSettings, get_tmdb_api_token, settings
from ..common.errors import FetchError
from ..common.http_client import AsyncHTTPClient
from .models import NOT_AVAILABLE, TMDB_PREFIX, MovieDetails, MovieSummary

logger = logging.getLogger(__name__)


def _year(release_date: str | None) -> str:
    return release_date[:4] if release_date else NOT_AVAILABLE


def _rating(vote_average: float | None) -> str:
    """TMDB votes are out of 10; halve them for the 5-point display."""
    return f"{vote_average / 2:.1f}" if vote_average else NOT_AVAILABLE


def _image(base_url: str, path: str | None) -> str | None:
    return f"{base_url}{path}" if path else None


def tmdb_to_display(movie: dict, image_base_url: str) -> MovieSummary:
    """Convert a TMDB list entry to the shared summary shape."""
    return MovieSummary(
        id=f"{TMDB_PREFIX}{movie.get('id')}",
        title=movie.get("title") or "Untitled",
        year=_year(movie.get("release_date")),
        poster=_image(image_base_url, movie.get("poster_path")) or NOT_AVAILABLE,
        rating=_rating(movie.get("vote_average")),
        trending=True,
    )


def tmdb_to_details(data: dict, movie_id: str, config: MovieSettings) -> MovieDetails:
    runtime = data.get("runtime")
    language = data.get("original_language")
    revenue = data.get("revenue")
    countries = ", ".join(c.get("name", "") for c in data.get("production_countries") or [])
    return MovieDetails(
        id=movie_id,
        title=data.get("title") or "Untitled",
        year=_year(data.get("release_date")),
        rated="R" if data.get("adult") else "PG-13",
        runtime=f"{runtime} min" if runtime else NOT_AVAILABLE,
        genre=", ".join(g.get("name", "") for g in data.get("genres") or []),
        plot=data.get("overview") or "No plot available.",
        language=language.upper() if language else NOT_AVAILABLE,
        country=countries or NOT_AVAILABLE,
        rating=_rating(data.get("vote_average")),
        box_office=f"${revenue:,}" if revenue else NOT_AVAILABLE,
        poster=_image(config.tmdb_image_base_url, data.get("poster_path")) or NOT_AVAILABLE,
        backdrop=_image(config.tmdb_backdrop_base_url, data.get("backdrop_path")),
    )


class TmdbClient:
    """Reads trending lists and movie details with a TMDB read token."""

    def __init__(
        self,
        config: MovieSettings | None = None,
        http: AsyncHTTPClient | None = None,
        token: str | None = None,
    ) -> None:
        self.config = config or settings.movies
        self._token = token
        self._http = http
        self._owns_http = http is None

    @property
    def http(self) -> AsyncHTTPClient:
        if self._http is None:
            self._http = AsyncHTTPClient()
        return self._http

    def _headers(self, operation: str) -> dict[str, str]:
        if self._token is None:
            try:
                self._token = get_tmdb_api_token()
            except ValueError as exc:
                raise FetchError(operation, str(exc)) from exc
        return {"Authorization": f"Bearer {self._token}"}

    async def trending(self, limit: int | None = None) -> list[MovieSummary]:
        """This week's trending movies, at most `limit` of them."""
        limit = limit or self.config.trending_limit
        data = await self.http.get_json(
            f"{self.config.tmdb_base_url}/trending/movie/week",
            operation="fetch_trending",
            params={"language": "en-US"},
            headers=self._headers("fetch_trending"),
        )
        data = data if isinstance(data, dict) else {}
        results = [m for m in data.get("results") or [] if isinstance(m, dict)]
        return [tmdb_to_display(m, self.config.tmdb_image_base_url) for m in results[:limit]]

    async def details(self, movie_id: str) -> MovieDetails:
        """Detail record for a "tmdb_<id>" id (or a bare TMDB id)."""
        tmdb_id = movie_id.removeprefix(TMDB_PREFIX)
        data = await self.http.get_json(
            f"{self.config.tmdb_base_url}/movie/{tmdb_id}",
            operation="movie_details",
            params={"language": "en-US"},
            headers=self._headers("movie_details"),
        )
        data = data if isinstance(data, dict) else {}
        return tmdb_to_details(data, f"{TMDB_PREFIX}{tmdb_id}", self.config)

    async def aclose(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.aclose()
