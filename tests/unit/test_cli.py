"""Unit tests for the command line entry points."""

import json
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from nbainsights import cli
from nbainsights.api.schema import GameLog, RosterEntry, SeasonStats, TodayGame, TrendResult
from nbainsights.exceptions import RequestFailedError
from nbainsights.reporting import tables
from tests.fixtures.sample_api_responses import (
    get_sample_recent_games,
    get_sample_roster,
    get_sample_season_stats,
    get_sample_trend,
    get_sample_upcoming_games,
)
from tests.mocks import MockPredictionClient


class _ClientFactory:
    """Replaces NBAInsightsClient so commands run against a mock client."""

    def __init__(self, client):
        self.client = client
        self.base_urls = []

    def __call__(self, base_url=None):
        self.base_urls.append(base_url)
        return self

    async def __aenter__(self):
        return self.client

    async def __aexit__(self, exc_type, exc, tb):
        return None


@pytest.fixture
def use_client(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)

    def _install(client):
        factory = _ClientFactory(client)
        monkeypatch.setattr(cli, "NBAInsightsClient", factory)
        return factory

    return _install


class TestSimulate:

    def test_baseline_and_absences(self, use_client, capsys):
        use_client(MockPredictionClient())

        code = cli.main(["simulate", "lal", "bos", "--home-missing", "201939"])

        out = capsys.readouterr().out
        assert code == 0
        assert "Baseline" in out
        assert "Margin: 4.5" in out
        assert "With absences" in out
        assert "Margin: 1.0" in out
        assert "Usage boost: +8.0% (LAL)" in out

    def test_unknown_player_is_reported(self, use_client, capsys):
        client = MockPredictionClient()
        use_client(client)

        code = cli.main(["simulate", "LAL", "BOS", "--away-missing", "201939"])

        out = capsys.readouterr().out
        assert code == 0
        assert "Player 201939 not found on the away roster; ignored." in out
        assert len(client.prediction_calls) == 1

    def test_baseline_failure_exits_with_error(self, use_client, capsys):
        client = MockPredictionClient()
        client.fail(RequestFailedError("match_prediction", 500))
        use_client(client)

        code = cli.main(["simulate", "LAL", "BOS"])

        assert code == 1
        assert capsys.readouterr().out.strip() == tables.UNAVAILABLE_MESSAGE


def _player_client(num_games=10):
    client = MagicMock()
    client.get_player_season = AsyncMock(return_value=SeasonStats.from_dict(get_sample_season_stats()))
    client.get_player_recent = AsyncMock(
        return_value=[GameLog.from_dict(g) for g in get_sample_recent_games(num_games)]
    )
    client.analyze_trend = AsyncMock(return_value=TrendResult.from_dict(get_sample_trend()))
    return client


def _game_rows(out):
    return [line for line in out.splitlines() if "GSW" in line]


class TestPlayer:

    def test_renders_every_fetched_game(self, use_client, capsys):
        client = _player_client(10)
        use_client(client)

        assert cli.main(["player", "201939"]) == 0

        client.get_player_recent.assert_awaited_once_with(201939, limit=10)
        out = capsys.readouterr().out
        assert "Season: 48 GP, 27.4 PTS" in out
        assert len(_game_rows(out)) == 10

    def test_recent_limit_setting(self, use_client, capsys, monkeypatch):
        monkeypatch.setenv("NBA_INSIGHTS_RECENT_LIMIT", "3")
        client = _player_client(10)
        use_client(client)

        assert cli.main(["player", "201939"]) == 0

        client.get_player_recent.assert_awaited_once_with(201939, limit=3)
        assert len(_game_rows(capsys.readouterr().out)) == 3

    def test_trend_stat_is_case_insensitive(self, use_client, capsys):
        client = _player_client()
        use_client(client)

        assert cli.main(["player", "201939", "--stat", "reb", "--threshold", "5.5"]) == 0

        client.analyze_trend.assert_awaited_once_with(201939, "REB", 5.5)
        assert "Hit rate: 70.0%" in capsys.readouterr().out

    def test_unknown_trend_stat_is_a_usage_error(self, use_client):
        use_client(_player_client())
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["player", "201939", "--stat", "XYZ", "--threshold", "5.5"])
        assert exc_info.value.code == 2


class TestOtherCommands:

    def test_predict_with_star_missing(self, use_client, capsys):
        use_client(MockPredictionClient())

        code = cli.main(["predict", "LAL", "BOS", "--home-star-missing"])

        out = capsys.readouterr().out
        assert code == 0
        assert "Spread: -1.5" in out
        assert "Predicted winner: BOS" in out

    def test_games_empty(self, use_client, capsys):
        client = MagicMock()
        client.get_today_games = AsyncMock(return_value=[])
        use_client(client)

        assert cli.main(["games"]) == 0
        assert tables.NO_GAMES_MESSAGE in capsys.readouterr().out

    def test_upcoming_games(self, use_client, capsys):
        client = MagicMock()
        client.get_30h_games = AsyncMock(
            return_value=[TodayGame.from_dict(g) for g in get_sample_upcoming_games()]
        )
        use_client(client)

        assert cli.main(["games", "--upcoming"]) == 0
        out = capsys.readouterr().out
        assert "Los Angeles Lakers" in out
        assert "LIVE" in out

    def test_roster_search(self, use_client, capsys):
        client = MagicMock()
        client.get_team_roster = AsyncMock(
            return_value=[RosterEntry.from_dict(p, team="LAL") for p in get_sample_roster("LAL")]
        )
        use_client(client)

        assert cli.main(["roster", "lal", "--search", "curry"]) == 0
        out = capsys.readouterr().out
        client.get_team_roster.assert_awaited_once_with("LAL")
        assert "Stephen Curry" in out
        assert "LeBron James" not in out

    def test_roster_search_without_match(self, use_client, capsys):
        client = MagicMock()
        client.get_team_roster = AsyncMock(return_value=[])
        use_client(client)

        assert cli.main(["roster", "LAL"]) == 0
        assert tables.NO_PLAYERS_MESSAGE in capsys.readouterr().out

    def test_transport_error_exits_with_error(self, use_client, capsys):
        client = MagicMock()
        client.search_players = AsyncMock(side_effect=aiohttp.ClientConnectionError("refused"))
        use_client(client)

        assert cli.main(["search", "curry"]) == 1
        assert tables.UNAVAILABLE_MESSAGE in capsys.readouterr().out

    def test_non_json_response_exits_with_error(self, use_client, capsys):
        client = MagicMock()
        client.get_today_games = AsyncMock(
            side_effect=json.JSONDecodeError("Expecting value", "<html>Bad Gateway</html>", 0)
        )
        use_client(client)

        assert cli.main(["games"]) == 1
        assert capsys.readouterr().out.strip() == tables.UNAVAILABLE_MESSAGE

    def test_api_url_option(self, use_client, capsys):
        client = MagicMock()
        client.get_today_games = AsyncMock(return_value=[])
        factory = use_client(client)

        cli.main(["--api-url", "http://stats.local:9000/", "games"])
        assert factory.base_urls == ["http://stats.local:9000"]

    def test_invalid_api_url_is_a_usage_error(self, use_client):
        use_client(MagicMock())
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--api-url", "not-a-url", "games"])
        assert exc_info.value.code == 2
