"""Movie metadata facade over OMDb and TMDB.

Search goes to OMDb, trending to TMDB. Detail lookups route on the id:
"tmdb_" ids go to TMDB, everything else is treated as an IMDb id.
"""

from __future__ import annotations

from ..common.config import MovieSettings, settings
from ..common.http_client import AsyncHTTPClient
from .models import TMDB_PREFIX, MovieDetails, MovieSummary
from .omdb_client import OmdbClient
from .tmdb_client import TmdbClient


class MovieMetadataService:
    """Usage:
        async with MovieMetadataService() as movies:
            results = await movies.search("inception")
            details = await movies.details(results[0].id)
    """

    def __init__(
        self,
        config: MovieSettings | None = None,
        http: AsyncHTTPClient | None = None,
        omdb: OmdbClient | None = None,
        tmdb: TmdbClient | None = None,
    ) -> None:
        self.config = config or settings.movies
        self.omdb = omdb or OmdbClient(self.config, http=http)
        self.tmdb = tmdb or TmdbClient(self.config, http=http)

    async def search(self, query: str) -> list[MovieSummary]:
        return await self.omdb.search(query)

    async def trending(self, limit: int | None = None) -> list[MovieSummary]:
        return await self.tmdb.trending(limit or self.config.trending_limit)

    async def details(self, movie_id: str) -> MovieDetails:
        if movie_id.startswith(TMDB_PREFIX):
            return await self.tmdb.details(movie_id)
        return await self.omdb.details(movie_id)

    async def aclose(self) -> None:
        await self.omdb.aclose()
        await self.tmdb.aclose()

    async def __aenter__(self) -> MovieMetadataService:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
