"""Async client for the NBA prediction API.

One coroutine per endpoint, each returning a typed record from
``nbainsights.api.schema``.

Usage:
    import asyncio
    from nbainsights.api import NBAInsightsClient

    async def main():
        async with NBAInsightsClient() as client:
            games = await client.get_today_games()
            prediction = await client.get_full_match_prediction(
                "LAL", "BOS", home_missing=[201939]
            )

    asyncio.run(main())
"""

import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import quote, urlencode

import aiohttp

from nbainsights.api.schema import (
    GameLog,
    InteractiveMatchPrediction,
    MatchPrediction,
    MissingPlayerImpact,
    Player,
    PlayerFullPrediction,
    RosterEntry,
    SeasonStats,
    TodayGame,
    TrendResult,
    VsTeamStats,
)
from nbainsights.config import Config
from nbainsights.exceptions import RequestFailedError
from nbainsights.ops import MetricsRecorder, get_metrics_recorder

logger = logging.getLogger(__name__)

QueryParams = List[Tuple[str, str]]


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


def _format_number(value: float) -> str:
    return f"{value:g}"


def _repeated(name: str, values: Optional[Iterable[int]]) -> QueryParams:
    if not values:
        return []
    return [(name, str(int(v))) for v in values]


class NBAInsightsClient:
    """
    Typed async wrapper around the prediction API.

    Requests have no retry and no timeout: a non-2xx status or a body that
    is not JSON raises RequestFailedError naming the endpoint, and transport
    errors propagate
    as the underlying aiohttp/OS exception.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        metrics: Optional[MetricsRecorder] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: API root; defaults to NBA_INSIGHTS_API_URL or the local server
            session: Optional shared aiohttp session (not closed by this client)
            metrics: Optional metrics recorder for request counters and timings
        """
        self.base_url = (base_url or Config.from_env().api_base_url).rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._metrics = metrics or get_metrics_recorder()

    async def __aenter__(self) -> "NBAInsightsClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if not self._owns_session or self._session is None:
            return
        if not self._session.closed:
            await self._session.close()
        self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=None))
            self._owns_session = True
        return self._session

    def build_url(self, path: str, params: Optional[Sequence[Tuple[str, str]]] = None) -> str:
        """Join the base URL and path, appending only the params provided."""
        url = f"{self.base_url}{path}"
        if params:
            url += "?" + urlencode(list(params))
        return url

    async def _get_json(self, endpoint: str, path: str, params: Optional[QueryParams] = None) -> Any:
        url = self.build_url(path, params)
        session = self._get_session()
        self._metrics.increment("api.requests")
        logger.debug("GET %s", url)
        with self._metrics.timed(f"api.{endpoint}"):
            try:
                async with session.get(url) as response:
                    if response.status < 200 or response.status >= 300:
                        self._metrics.increment("api.failures")
                        logger.warning("%s request failed with status %s", endpoint, response.status)
                        raise RequestFailedError(endpoint, response.status, url)
                    try:
                        return await response.json(content_type=None)
                    except ValueError as exc:
                        # A 2xx body that is not JSON, e.g. a proxy error page
                        self._metrics.increment("api.failures")
                        logger.warning("%s returned a non-JSON body: %s", endpoint, exc)
                        raise RequestFailedError(endpoint, response.status, url) from exc
            except (aiohttp.ClientError, OSError):
                self._metrics.increment("api.failures")
                raise

    # =========================================================================
    # Games
    # =========================================================================

    async def get_today_games(self) -> List[TodayGame]:
        payload = await self._get_json("today_games", "/games/today")
        return [TodayGame.from_dict(g) for g in payload or []]

    async def get_30h_games(self) -> List[TodayGame]:
        """Upcoming and live games in the next 30 hours."""
        payload = await self._get_json("upcoming_games", "/games/30h")
        return [TodayGame.from_dict(g) for g in payload or []]

    # =========================================================================
    # Players & rosters
    # =========================================================================

    async def search_players(self, query: str) -> List[Player]:
        payload = await self._get_json("search_players", "/players/search", [("query", query)])
        return [Player.from_dict(p) for p in payload or []]

    async def get_team_roster(self, team_id: str) -> List[RosterEntry]:
        payload = await self._get_json("team_roster", f"/team/{_segment(team_id)}/roster")
        return [RosterEntry.from_dict(p, team=team_id) for p in payload or []]

    async def get_player_season(self, player_id: int) -> SeasonStats:
        payload = await self._get_json("player_season", f"/player/{_segment(player_id)}/season")
        return SeasonStats.from_dict(payload or {})

    async def get_player_recent(self, player_id: int, limit: Optional[int] = None) -> List[GameLog]:
        params = [("limit", str(limit))] if limit else None
        payload = await self._get_json("player_recent", f"/player/{_segment(player_id)}/recent", params)
        return [GameLog.from_dict(g) for g in payload or []]

    async def get_player_vs_team(self, player_id: int, team_code: str) -> VsTeamStats:
        path = f"/player/{_segment(player_id)}/vs/{_segment(team_code)}"
        payload = await self._get_json("player_vs_team", path)
        return VsTeamStats.from_dict(payload or {})

    async def analyze_trend(self, player_id: int, stat: str, threshold: float) -> TrendResult:
        params = [("stat", stat), ("threshold", _format_number(threshold))]
        payload = await self._get_json("player_trend", f"/player/{_segment(player_id)}/trend", params)
        return TrendResult.from_dict(payload or {})

    # =========================================================================
    # Predictions
    # =========================================================================

    async def get_full_match_prediction(
        self,
        home_team_id: str,
        away_team_id: str,
        home_missing: Optional[Sequence[int]] = None,
        away_missing: Optional[Sequence[int]] = None,
    ) -> InteractiveMatchPrediction:
        """Per-player match prediction with the given players marked absent."""
        params = _repeated("home_missing_players", home_missing) + _repeated(
            "away_missing_players", away_missing
        )
        path = f"/predict/match/{_segment(home_team_id)}/{_segment(away_team_id)}"
        payload = await self._get_json("match_prediction", path, params or None)
        return InteractiveMatchPrediction.from_dict(payload or {})

    async def predict_match(
        self,
        home_team_id: str,
        away_team_id: str,
        home_star_missing: bool = False,
        away_star_missing: bool = False,
    ) -> MatchPrediction:
        """Match-level prediction using the boolean star-missing flags."""
        params: QueryParams = []
        if home_star_missing:
            params.append(("home_star_missing", "true"))
        if away_star_missing:
            params.append(("away_star_missing", "true"))
        path = f"/predict/match/{_segment(home_team_id)}/{_segment(away_team_id)}"
        payload = await self._get_json("match_prediction", path, params or None)
        return MatchPrediction.from_dict(payload or {})

    async def predict_player_vs_team(self, player_id: int, team_id: str) -> PlayerFullPrediction:
        path = f"/predict/player/{_segment(player_id)}/vs/{_segment(team_id)}"
        payload = await self._get_json("player_projection", path)
        return PlayerFullPrediction.from_dict(payload or {})

    async def get_missing_player_impact(self, team_code: str, player_id: int) -> MissingPlayerImpact:
        path = f"/analytics/team/{_segment(team_code)}/missing-player/{_segment(player_id)}"
        payload = await self._get_json("missing_player_impact", path)
        return MissingPlayerImpact.from_dict(payload or {})
