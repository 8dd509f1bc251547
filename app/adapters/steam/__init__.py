"""Steam adapter layer - abstracts the "fetch JSON by URL" capability."""

from app.adapters.steam.base import AbstractJsonFetcher, FetchResult
from app.adapters.steam.factory import create_json_fetcher
from app.adapters.steam.httpx_client import HttpxJsonFetcher

__all__ = [
    "AbstractJsonFetcher",
    "FetchResult",
    "HttpxJsonFetcher",
    "create_json_fetcher",
]
