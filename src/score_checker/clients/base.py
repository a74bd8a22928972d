from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from score_checker import __version__
from score_checker.config import ServiceInstance
from score_checker.models import CommandResult, Episode, Movie, Series

DEFAULT_TIMEOUT = 30.0
USER_AGENT = f"score-checker/{__version__}"


class ArrClient:
    """Shared asynchronous plumbing for the Sonarr and Radarr v3 APIs."""

    search_command = ""
    search_ids_field = ""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        normalized_url = base_url.rstrip("/")
        if not normalized_url.endswith("/api/v3"):
            normalized_url = f"{normalized_url}/api/v3"

        headers = {
            "X-Api-Key": api_key,
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        }
        self._client = httpx.AsyncClient(
            base_url=normalized_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def for_instance(cls, instance: ServiceInstance, **kwargs: Any) -> ArrClient:
        return cls(base_url=instance.base_url, api_key=instance.api_key, **kwargs)

    async def close(self) -> None:
        await self._client.aclose()

    async def trigger_search(self, ids: Sequence[int]) -> CommandResult:
        """Ask the service to search for better releases of the given items."""
        if not ids:
            raise ValueError(f"no {self.search_ids_field} provided")

        payload = {"name": self.search_command, self.search_ids_field: list(ids)}
        response = await self._client.post("/command", json=payload)
        response.raise_for_status()
        return CommandResult.model_validate(response.json())

    async def _get_json(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        async for attempt in _retry_policy():
            with attempt:
                response = await self._client.get(path, params=params)
                response.raise_for_status()
                return response.json()
        raise RuntimeError(f"Unable to fetch {path} after retries")

    async def __aenter__(self) -> ArrClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()


class EpisodeCatalog(Protocol):
    """Catalog capabilities consumed when scanning a Sonarr instance."""

    async def list_series(self) -> list[Series]: ...

    async def list_episodes(self, series_id: int) -> list[Episode]: ...

    async def trigger_search(self, ids: Sequence[int]) -> CommandResult: ...


class MovieCatalog(Protocol):
    """Catalog capabilities consumed when scanning a Radarr instance."""

    async def list_movies(self) -> list[Movie]: ...

    async def trigger_search(self, ids: Sequence[int]) -> CommandResult: ...


def _retry_policy() -> AsyncRetrying:
    return AsyncRetrying(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, max=6),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )


__all__ = ["ArrClient", "DEFAULT_TIMEOUT", "EpisodeCatalog", "MovieCatalog", "USER_AGENT"]
