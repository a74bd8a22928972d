from __future__ import annotations

from score_checker.clients.base import ArrClient
from score_checker.models import Movie


class RadarrClient(ArrClient):
    """Thin asynchronous wrapper around the Radarr v3 API."""

    search_command = "MoviesSearch"
    search_ids_field = "movieIds"

    async def list_movies(self) -> list[Movie]:
        payload = await self._get_json("/movie")
        return [Movie.model_validate(item) for item in payload]


__all__ = ["RadarrClient"]
