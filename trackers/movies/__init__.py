"""Movie Tracker Module - watchlist backed by OMDb search and TMDB trending."""

from .metadata import MovieMetadataService
from .models import MovieDetails, MovieSummary, WatchlistEntry, WatchStatus
from .omdb_client import OmdbClient
from .tmdb_client import TmdbClient, tmdb_to_display
from .tracker import MovieTracker

__all__ = [
    "MovieDetails",
    "MovieMetadataService",
    "MovieSummary",
    "MovieTracker",
    "OmdbClient",
    "TmdbClient",
    "WatchStatus",
    "WatchlistEntry",
    "tmdb_to_display",
]
