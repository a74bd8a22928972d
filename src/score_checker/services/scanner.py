from __future__ import annotations

import logging

import httpx

from score_checker.clients import EpisodeCatalog, MovieCatalog
from score_checker.config import Settings
from score_checker.models import ScanResult
from score_checker.services.scoring import BatchCollector, CollectDecision, match_for

logger = logging.getLogger(__name__)


class ScanError(RuntimeError):
    """Raised when the top-level catalog of an instance cannot be listed."""


async def find_low_score_episodes(
    client: EpisodeCatalog,
    settings: Settings,
    instance_name: str,
) -> ScanResult:
    """Walk every series of a Sonarr instance and collect low-scoring episodes."""
    try:
        series_list = await client.list_series()
    except (httpx.HTTPError, ValueError) as exc:
        raise ScanError(f"getting series: {exc}") from exc

    collector = BatchCollector(settings.batch_size, collect_ids=settings.trigger_search)
    for series in series_list:
        logger.info(f"[{instance_name}] Checking series: {series.title} (ID: {series.id})")
        try:
            episodes = await client.list_episodes(series.id)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                f"[{instance_name}] Failed to get episodes for series {series.title}: {exc}"
            )
            continue

        for episode in episodes:
            match = match_for(episode, parent=series)
            if match is None:
                continue
            if collector.try_add(match) is CollectDecision.STOP:
                logger.info(
                    f"[{instance_name}] Reached batch limit of {settings.batch_size} episodes"
                )
                return collector.result()

    return collector.result()


async def find_low_score_movies(
    client: MovieCatalog,
    settings: Settings,
    instance_name: str,
) -> ScanResult:
    """Walk the movie list of a Radarr instance and collect low-scoring movies."""
    try:
        movies = await client.list_movies()
    except (httpx.HTTPError, ValueError) as exc:
        raise ScanError(f"getting movies: {exc}") from exc

    collector = BatchCollector(settings.batch_size, collect_ids=settings.trigger_search)
    for movie in movies:
        logger.debug(f"[{instance_name}] Checking movie: {movie.label}")
        match = match_for(movie)
        if match is None:
            continue
        if collector.try_add(match) is CollectDecision.STOP:
            logger.info(f"[{instance_name}] Reached batch limit of {settings.batch_size} movies")
            break

    return collector.result()


__all__ = ["ScanError", "find_low_score_episodes", "find_low_score_movies"]
