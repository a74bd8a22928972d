from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Any

from score_checker.clients import RadarrClient, SonarrClient
from score_checker.config import ServiceInstance, Settings
from score_checker.models import InstanceReport, LowScoreMatch, RunSummary, ScanResult
from score_checker.services.scanner import ScanError, find_low_score_episodes, find_low_score_movies
from score_checker.services.search import trigger_searches

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ServiceInstance], AbstractAsyncContextManager[Any]]
Scanner = Callable[[Any, Settings, str], Awaitable[ScanResult]]


@dataclass(frozen=True)
class _ServiceKind:
    key: str
    label: str
    noun: str
    top_level: str
    instances: Sequence[ServiceInstance]
    factory: ClientFactory
    scan: Scanner


class ScoreCheckRunner:
    """Runs one pass over every configured Sonarr and Radarr instance."""

    def __init__(
        self,
        settings: Settings,
        *,
        sonarr_factory: ClientFactory = SonarrClient.for_instance,
        radarr_factory: ClientFactory = RadarrClient.for_instance,
        reporter: logging.Logger | None = None,
    ) -> None:
        self._settings = settings
        self._sonarr_factory = sonarr_factory
        self._radarr_factory = radarr_factory
        self._reporter = reporter or logger

    @property
    def settings(self) -> Settings:
        return self._settings

    async def run_once(self) -> RunSummary:
        settings = self._settings
        summary = RunSummary(trigger_search=settings.trigger_search, batch_size=settings.batch_size)

        if settings.trigger_search:
            self._reporter.info(
                "Search triggering is ENABLED - will automatically search for better versions"
            )
        else:
            self._reporter.info("Search triggering is DISABLED - will only report findings")
        self._reporter.info(f"Batch size: {settings.batch_size} items per run")

        kinds = (
            _ServiceKind(
                key="sonarr",
                label="Sonarr",
                noun="episode",
                top_level="series",
                instances=settings.sonarr,
                factory=self._sonarr_factory,
                scan=find_low_score_episodes,
            ),
            _ServiceKind(
                key="radarr",
                label="Radarr",
                noun="movie",
                top_level="movies",
                instances=settings.radarr,
                factory=self._radarr_factory,
                scan=find_low_score_movies,
            ),
        )

        for kind in kinds:
            if not kind.instances:
                continue
            self._reporter.info(f"Found {len(kind.instances)} {kind.label} instance(s)")
            for instance in kind.instances:
                report = await self._check_instance(kind, instance)
                summary.reports.append(report)

        if not settings.has_instances:
            summary.no_instances = True
            self._reporter.warning(
                "No Sonarr or Radarr instances configured. Please check your configuration."
            )

        return summary

    async def _check_instance(self, kind: _ServiceKind, instance: ServiceInstance) -> InstanceReport:
        name = instance.name
        self._reporter.info(f"=== Checking {kind.label} Instance: {name} ===")
        self._reporter.info(
            f"[{name}] Fetching {kind.top_level} and checking custom format scores..."
        )

        async with kind.factory(instance) as client:
            try:
                scan = await kind.scan(client, self._settings, name)
            except ScanError as exc:
                self._reporter.warning(f"[{name}] Error finding low score {kind.noun}s: {exc}")
                return InstanceReport(service=kind.key, instance=name, error=str(exc))

            search = await trigger_searches(
                client,
                scan.search_ids,
                instance_name=name,
                enabled=self._settings.trigger_search,
            )

        self._report_matches(kind, name, scan.matches)
        return InstanceReport(
            service=kind.key,
            instance=name,
            matches=scan.matches,
            search=search,
        )

    def _report_matches(self, kind: _ServiceKind, name: str, matches: list[LowScoreMatch]) -> None:
        reporter = self._reporter
        if not matches:
            reporter.info(f"[{name}] No {kind.noun}s found with custom format scores below zero.")
            return

        reporter.info(
            f"[{name}] Found {len(matches)} {kind.noun}(s) with custom format scores below zero:"
        )
        if self._settings.trigger_search:
            reporter.info(f"[{name}] (Searches have been triggered for these {kind.noun}s)")
        else:
            reporter.info(
                f"[{name}] (Set SCORECHECK_TRIGGER_SEARCH=true to automatically trigger searches)"
            )

        for match in matches:
            if match.parent is not None:
                reporter.info(f"[{name}] Series: {match.parent.title}")
                reporter.info(f"[{name}]   Episode: {match.item.label}")
            else:
                reporter.info(f"[{name}] Movie: {match.item.label}")
            reporter.info(f"[{name}]   Custom Format Score: {match.score}")
            reporter.info(f"[{name}]   {kind.noun.capitalize()} ID: {match.item_id}")


__all__ = ["ClientFactory", "ScoreCheckRunner"]
