from __future__ import annotations

from score_checker.clients.base import ArrClient
from score_checker.models import Episode, Series


class SonarrClient(ArrClient):
    """Thin asynchronous wrapper around the Sonarr v3 API."""

    search_command = "EpisodeSearch"
    search_ids_field = "episodeIds"

    async def list_series(self) -> list[Series]:
        payload = await self._get_json("/series")
        return [Series.model_validate(item) for item in payload]

    async def list_episodes(self, series_id: int) -> list[Episode]:
        """Fetch the episodes of one series together with their file records."""
        params = {"seriesId": series_id, "includeEpisodeFile": "true"}
        payload = await self._get_json("/episode", params=params)
        return [Episode.model_validate(item) for item in payload]


__all__ = ["SonarrClient"]
