"""Shared fixtures for the catalog scenarios used by the service tests."""

from __future__ import annotations

import pytest

from score_checker.models import Episode, Movie, Series
from tests.fixtures.catalogs import make_episode, make_movie


@pytest.fixture
def scenario_series() -> list[Series]:
    return [Series(id=1, title="Series A"), Series(id=2, title="Series B")]


@pytest.fixture
def scenario_episodes() -> dict[int, list[Episode]]:
    return {
        1: [make_episode(11, 1, -10, number=1), make_episode(12, 1, 5, number=2)],
        2: [make_episode(21, 2, -5, number=1)],
    }


@pytest.fixture
def scenario_movies() -> list[Movie]:
    return [
        make_movie(1, -15),
        make_movie(2, 10),
        make_movie(3, None, has_file=False),
    ]
