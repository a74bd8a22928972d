"""Tests for a full pass across every configured instance."""

import logging

import httpx
import pytest

from score_checker.config import ServiceInstance, Settings
from score_checker.services.runner import ScoreCheckRunner
from tests.fixtures.catalogs import http_error, radarr_catalog, sonarr_catalog


def _instance(name, port=8989):
    return ServiceInstance(name=name, base_url=f"http://{name}:{port}", api_key=f"{name}-key")


def _factory(clients):
    """Map instance names to prepared fake clients."""
    created = []

    def build(instance):
        created.append(instance.name)
        return clients[instance.name]

    build.created = created
    return build


class TestScoreCheckRunner:
    @pytest.mark.asyncio
    async def test_scenario_report_only(self, scenario_series, scenario_episodes, scenario_movies):
        sonarr = sonarr_catalog(scenario_series, scenario_episodes)
        radarr = radarr_catalog(scenario_movies)
        settings = Settings(
            batch_size=5,
            trigger_search=False,
            sonarr=[_instance("tv")],
            radarr=[_instance("movies", 7878)],
        )
        runner = ScoreCheckRunner(
            settings,
            sonarr_factory=_factory({"tv": sonarr}),
            radarr_factory=_factory({"movies": radarr}),
        )

        summary = await runner.run_once()

        tv_report, movie_report = summary.reports
        assert tv_report.service == "sonarr"
        assert [(m.parent.title, m.score) for m in tv_report.matches] == [
            ("Series A", -10),
            ("Series B", -5),
        ]
        assert movie_report.service == "radarr"
        assert [m.item_id for m in movie_report.matches] == [1]
        assert summary.total_matches == 3
        sonarr.trigger_search.assert_not_called()
        radarr.trigger_search.assert_not_called()

    @pytest.mark.asyncio
    async def test_movie_scenario_triggers_one_search(self, scenario_movies):
        radarr = radarr_catalog(scenario_movies)
        settings = Settings(batch_size=5, trigger_search=True, radarr=[_instance("movies", 7878)])
        runner = ScoreCheckRunner(settings, radarr_factory=_factory({"movies": radarr}))

        summary = await runner.run_once()

        radarr.trigger_search.assert_awaited_once_with([1])
        assert len(summary.reports[0].search.submitted) == 1

    @pytest.mark.asyncio
    async def test_batch_limit_still_triggers_collected_episodes(
        self, scenario_series, scenario_episodes
    ):
        sonarr = sonarr_catalog(scenario_series, scenario_episodes)
        settings = Settings(batch_size=1, trigger_search=True, sonarr=[_instance("tv")])
        runner = ScoreCheckRunner(settings, sonarr_factory=_factory({"tv": sonarr}))

        summary = await runner.run_once()

        assert [m.item_id for m in summary.reports[0].matches] == [11]
        sonarr.trigger_search.assert_awaited_once_with([11])

    @pytest.mark.asyncio
    async def test_failed_instance_does_not_stop_others(self, scenario_series, scenario_episodes):
        broken = sonarr_catalog([], {})
        broken.list_series.side_effect = http_error()
        healthy = sonarr_catalog(scenario_series, scenario_episodes)
        factory = _factory({"broken": broken, "healthy": healthy})
        settings = Settings(sonarr=[_instance("broken"), _instance("healthy")])
        runner = ScoreCheckRunner(settings, sonarr_factory=factory)

        summary = await runner.run_once()

        assert factory.created == ["broken", "healthy"]
        broken_report, healthy_report = summary.reports
        assert broken_report.skipped is True
        assert "getting series" in broken_report.error
        assert healthy_report.skipped is False
        assert len(healthy_report.matches) == 2

    @pytest.mark.asyncio
    async def test_instances_processed_in_configuration_order(self, scenario_movies):
        clients = {name: radarr_catalog(scenario_movies) for name in ("b", "a", "c")}
        factory = _factory(clients)
        settings = Settings(radarr=[_instance("b"), _instance("a"), _instance("c")])
        runner = ScoreCheckRunner(settings, radarr_factory=factory)

        summary = await runner.run_once()

        assert factory.created == ["b", "a", "c"]
        assert [report.instance for report in summary.reports] == ["b", "a", "c"]

    @pytest.mark.asyncio
    async def test_search_failure_is_reported_not_raised(self, scenario_movies):
        radarr = radarr_catalog(scenario_movies)
        radarr.trigger_search.side_effect = httpx.ReadTimeout("timed out")
        settings = Settings(trigger_search=True, radarr=[_instance("movies", 7878)])
        runner = ScoreCheckRunner(settings, radarr_factory=_factory({"movies": radarr}))

        summary = await runner.run_once()

        report = summary.reports[0]
        assert len(report.matches) == 1
        assert report.search.failed == [[1]]

    @pytest.mark.asyncio
    async def test_no_instances_configured(self, caplog):
        reporter = logging.getLogger("tests.runner")
        runner = ScoreCheckRunner(Settings(), reporter=reporter)

        with caplog.at_level(logging.INFO, logger="tests.runner"):
            summary = await runner.run_once()

        assert summary.no_instances is True
        assert summary.reports == []
        assert "No Sonarr or Radarr instances configured" in caplog.text

    @pytest.mark.asyncio
    async def test_reports_matches_per_instance(self, scenario_series, scenario_episodes, caplog):
        sonarr = sonarr_catalog(scenario_series, scenario_episodes)
        reporter = logging.getLogger("tests.runner")
        settings = Settings(sonarr=[_instance("tv")])
        runner = ScoreCheckRunner(
            settings, sonarr_factory=_factory({"tv": sonarr}), reporter=reporter
        )

        with caplog.at_level(logging.INFO, logger="tests.runner"):
            await runner.run_once()

        assert "[tv] Found 2 episode(s) with custom format scores below zero:" in caplog.text
        assert "[tv]   Episode: S01E01 - Episode 11" in caplog.text
        assert "[tv]   Custom Format Score: -10" in caplog.text
        assert "SCORECHECK_TRIGGER_SEARCH=true" in caplog.text

    @pytest.mark.asyncio
    async def test_reports_when_nothing_found(self, caplog):
        radarr = radarr_catalog([])
        reporter = logging.getLogger("tests.runner")
        settings = Settings(radarr=[_instance("movies", 7878)])
        runner = ScoreCheckRunner(
            settings, radarr_factory=_factory({"movies": radarr}), reporter=reporter
        )

        with caplog.at_level(logging.INFO, logger="tests.runner"):
            summary = await runner.run_once()

        assert summary.total_matches == 0
        assert "[movies] No movies found with custom format scores below zero." in caplog.text

    @pytest.mark.asyncio
    async def test_settings_are_not_mutated(self, scenario_movies):
        settings = Settings(batch_size=1, trigger_search=True, radarr=[_instance("movies", 7878)])
        before = settings.model_dump()
        factory = _factory({"movies": radarr_catalog(scenario_movies)})
        runner = ScoreCheckRunner(settings, radarr_factory=factory)

        await runner.run_once()

        assert settings.model_dump() == before
