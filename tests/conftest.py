"""
Pytest configuration and shared fixtures for the NBA insights tests.
"""

import os

import pytest

from nbainsights.api.schema import InteractiveMatchPrediction, RosterEntry, TodayGame
from nbainsights.ops import InMemoryMetricsRecorder
from tests.fixtures.sample_api_responses import (
    get_sample_match_prediction,
    get_sample_roster,
    get_sample_upcoming_games,
)
from tests.mocks import MockPredictionClient


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Tests never see NBA_INSIGHTS_* settings from the developer's shell."""
    for key in list(os.environ):
        if key.startswith('NBA_INSIGHTS_'):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def mock_client():
    return MockPredictionClient()


@pytest.fixture
def metrics():
    return InMemoryMetricsRecorder()


@pytest.fixture
def baseline_snapshot():
    """LAL vs BOS prediction with nobody missing."""
    return InteractiveMatchPrediction.from_dict(get_sample_match_prediction())


@pytest.fixture
def high_risk_snapshot():
    return InteractiveMatchPrediction.from_dict(get_sample_match_prediction(risk_level='HIGH'))


@pytest.fixture
def lakers_roster():
    return [RosterEntry.from_dict(p, team='LAL') for p in get_sample_roster('LAL')]


@pytest.fixture
def upcoming_games():
    return [TodayGame.from_dict(g) for g in get_sample_upcoming_games()]
