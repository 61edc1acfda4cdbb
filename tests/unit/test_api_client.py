"""Unit tests for the async prediction API client."""

import aiohttp
import pytest
from aiohttp import web

from nbainsights.api import NBAInsightsClient
from nbainsights.api.schema import InteractiveMatchPrediction
from nbainsights.exceptions import NBAInsightsError, RequestFailedError
from tests.fixtures.sample_api_responses import (
    get_sample_legacy_match_prediction,
    get_sample_match_prediction,
    get_sample_missing_player_impact,
    get_sample_player_prediction,
    get_sample_player_search,
    get_sample_recent_games,
    get_sample_roster,
    get_sample_season_stats,
    get_sample_trend,
    get_sample_upcoming_games,
    get_sample_vs_team,
)
from tests.mocks import MockAPIServer


class TestBuildUrl:
    """Tests for URL construction."""

    def test_default_base_url_is_local(self):
        client = NBAInsightsClient()
        assert client.base_url == "http://127.0.0.1:8000"

    def test_base_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("NBA_INSIGHTS_API_URL", "https://api.example.com/")
        client = NBAInsightsClient()
        assert client.base_url == "https://api.example.com"

    def test_explicit_base_url_wins(self, monkeypatch):
        monkeypatch.setenv("NBA_INSIGHTS_API_URL", "https://api.example.com")
        client = NBAInsightsClient("http://localhost:9000/")
        assert client.base_url == "http://localhost:9000"

    def test_no_params_no_query_string(self):
        client = NBAInsightsClient("http://localhost:8000")
        assert client.build_url("/games/today") == "http://localhost:8000/games/today"
        assert client.build_url("/games/today", []) == "http://localhost:8000/games/today"

    def test_repeated_params_kept_in_order(self):
        client = NBAInsightsClient("http://localhost:8000")
        url = client.build_url("/predict/match/LAL/BOS", [
            ("home_missing_players", "201939"),
            ("home_missing_players", "2544"),
        ])
        assert url.endswith("?home_missing_players=201939&home_missing_players=2544")


class TestEndpoints:
    """Requests against a local aiohttp server."""

    @pytest.mark.asyncio
    async def test_baseline_prediction_has_no_missing_params(self):
        server = MockAPIServer({"/predict/match/LAL/BOS": get_sample_match_prediction()})
        async with server:
            async with NBAInsightsClient(server.base_url) as client:
                prediction = await client.get_full_match_prediction("LAL", "BOS")

        assert isinstance(prediction, InteractiveMatchPrediction)
        assert prediction.predicted_winner == "LAL"
        assert prediction.predicted_margin == 4.5
        assert len(server.requests) == 1
        path, query = server.requests[0]
        assert path == "/predict/match/LAL/BOS"
        assert len(query) == 0

    @pytest.mark.asyncio
    async def test_empty_missing_lists_are_not_sent(self):
        server = MockAPIServer({"/predict/match/LAL/BOS": get_sample_match_prediction()})
        async with server:
            async with NBAInsightsClient(server.base_url) as client:
                await client.get_full_match_prediction("LAL", "BOS", [], [])

        _, query = server.requests[0]
        assert "home_missing_players" not in query
        assert "away_missing_players" not in query

    @pytest.mark.asyncio
    async def test_missing_players_sent_as_repeated_params(self):
        payload = get_sample_match_prediction(home_missing=[201939, 2544], away_missing=[1628369])
        server = MockAPIServer({"/predict/match/LAL/BOS": payload})
        async with server:
            async with NBAInsightsClient(server.base_url) as client:
                prediction = await client.get_full_match_prediction(
                    "LAL", "BOS", home_missing=[201939, 2544], away_missing=[1628369]
                )

        _, query = server.requests[0]
        assert query.getall("home_missing_players") == ["201939", "2544"]
        assert query.getall("away_missing_players") == ["1628369"]
        assert prediction.details.home_penalty == 7.0
        assert prediction.match_context.home_usage_boost == 8.0

    @pytest.mark.asyncio
    async def test_legacy_star_flags_only_when_true(self):
        server = MockAPIServer({
            "/predict/match/LAL/BOS": get_sample_legacy_match_prediction(home_star_missing=True),
        })
        async with server:
            async with NBAInsightsClient(server.base_url) as client:
                prediction = await client.predict_match("LAL", "BOS", home_star_missing=True)

        _, query = server.requests[0]
        assert query.get("home_star_missing") == "true"
        assert "away_star_missing" not in query
        assert prediction.details.home_penalty == 6.0

    @pytest.mark.asyncio
    async def test_games_and_player_endpoints(self):
        server = MockAPIServer({
            "/games/30h": get_sample_upcoming_games(),
            "/players/search": get_sample_player_search(),
            "/team/LAL/roster": get_sample_roster("LAL"),
            "/player/201939/season": get_sample_season_stats(),
            "/player/201939/recent": get_sample_recent_games(),
            "/player/201939/vs/BOS": get_sample_vs_team(),
            "/player/201939/trend": get_sample_trend(),
        })
        async with server:
            async with NBAInsightsClient(server.base_url) as client:
                games = await client.get_30h_games()
                players = await client.search_players("curry")
                roster = await client.get_team_roster("LAL")
                season = await client.get_player_season(201939)
                recent = await client.get_player_recent(201939, limit=5)
                vs_team = await client.get_player_vs_team(201939, "BOS")
                trend = await client.analyze_trend(201939, "PTS", 25.5)

        assert [g.game_id for g in games] == ["0022500601", "0022500602", "0022500611"]
        assert games[0].home_team_id == "LAL"
        assert games[1].is_live is True
        assert players[0].full_name == "Stephen Curry"
        assert [e.player_id for e in roster] == [2544, 201939, 203076]
        assert roster[0].team == "LAL"
        assert season.pts == 27.4
        assert len(recent) == 5
        assert vs_team.games_played == 12
        assert trend.hit_rate_percent == 70.0

        queries = {path: query for path, query in server.requests}
        assert queries["/players/search"].get("query") == "curry"
        assert queries["/player/201939/recent"].get("limit") == "5"
        assert queries["/player/201939/trend"].get("stat") == "PTS"
        assert queries["/player/201939/trend"].get("threshold") == "25.5"

    @pytest.mark.asyncio
    async def test_recent_without_limit_sends_no_query(self):
        server = MockAPIServer({"/player/201939/recent": get_sample_recent_games()})
        async with server:
            async with NBAInsightsClient(server.base_url) as client:
                await client.get_player_recent(201939)

        _, query = server.requests[0]
        assert len(query) == 0

    @pytest.mark.asyncio
    async def test_player_projection_and_impact(self):
        server = MockAPIServer({
            "/predict/player/201939/vs/BOS": get_sample_player_prediction(
                201939, "Stephen Curry", pts=28.0, risk_level="HIGH"
            ),
            "/analytics/team/GSW/missing-player/201939": get_sample_missing_player_impact(),
        })
        async with server:
            async with NBAInsightsClient(server.base_url) as client:
                projection = await client.predict_player_vs_team(201939, "BOS")
                impact = await client.get_missing_player_impact("GSW", 201939)

        assert projection.stat("PTS") == 28.0
        assert projection.stat("PRA") == 39.0
        assert projection.blowout_analysis.is_high
        assert impact.games_without == 9
        assert impact.team_impact["PTS"] == -8.4


class TestFailures:
    """Non-2xx statuses and transport errors."""

    @pytest.mark.asyncio
    async def test_non_2xx_raises_request_failed_with_endpoint_name(self, metrics):
        server = MockAPIServer({"/predict/match/LAL/BOS": (500, {"detail": "boom"})})
        async with server:
            async with NBAInsightsClient(server.base_url, metrics=metrics) as client:
                with pytest.raises(RequestFailedError) as exc_info:
                    await client.get_full_match_prediction("LAL", "BOS")

        assert exc_info.value.endpoint == "match_prediction"
        assert exc_info.value.status_code == 500
        assert "match_prediction" in str(exc_info.value)
        assert metrics.counter("api.requests") == 1
        assert metrics.counter("api.failures") == 1

    @pytest.mark.asyncio
    async def test_not_found_is_a_request_failure(self):
        async with MockAPIServer() as server:
            async with NBAInsightsClient(server.base_url) as client:
                with pytest.raises(RequestFailedError) as exc_info:
                    await client.get_today_games()

        assert exc_info.value.status_code == 404
        assert exc_info.value.endpoint == "today_games"

    @pytest.mark.asyncio
    async def test_html_body_with_200_is_a_request_failure(self, metrics):
        def proxy_page(query):
            return web.Response(text="<html>Bad Gateway</html>", content_type="text/html")

        async with MockAPIServer({"/games/today": proxy_page}) as server:
            async with NBAInsightsClient(server.base_url, metrics=metrics) as client:
                with pytest.raises(RequestFailedError) as exc_info:
                    await client.get_today_games()

        assert exc_info.value.endpoint == "today_games"
        assert exc_info.value.status_code == 200
        assert metrics.counter("api.failures") == 1

    @pytest.mark.asyncio
    async def test_transport_error_propagates_unwrapped(self, metrics):
        async with MockAPIServer() as server:
            base_url = server.base_url
        # Server is closed; the port now refuses connections
        async with NBAInsightsClient(base_url, metrics=metrics) as client:
            with pytest.raises(aiohttp.ClientError) as exc_info:
                await client.get_today_games()

        assert not isinstance(exc_info.value, NBAInsightsError)
        assert metrics.counter("api.failures") == 1

    @pytest.mark.asyncio
    async def test_shared_session_is_not_closed(self):
        async with MockAPIServer({"/games/today": []}) as server:
            async with aiohttp.ClientSession() as session:
                async with NBAInsightsClient(server.base_url, session=session) as client:
                    assert await client.get_today_games() == []
                assert not session.closed
