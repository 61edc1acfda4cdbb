"""Match prediction panel using the boolean "star missing" flags.

Older convention of the prediction endpoint: instead of player ids, each
side carries a single flag saying its star is out. Each flag combination
is its own query key.
"""

from functools import partial
from typing import Optional
import logging

from nbainsights.api.schema import MatchPrediction
from nbainsights.constants import MATCH_PREDICTION_QUERY
from nbainsights.interactive.query_cache import QueryCache, make_query_key
from nbainsights.ops.diagnostics import DISABLED, Diagnostics

logger = logging.getLogger(__name__)


def confidence_tone(confidence_level: str) -> str:
    """Classify a confidence label as tight, solid, blowout or neutral."""
    lower = (confidence_level or "").lower()
    if "tight" in lower or "serré" in lower:
        return "tight"
    if "solid" in lower or "solide" in lower:
        return "solid"
    if "blowout" in lower:
        return "blowout"
    return "neutral"


def spread_label(prediction: MatchPrediction, home_team: str) -> str:
    """Signed spread, '+' when the predicted winner is the home team."""
    sign = "+" if prediction.predicted_winner == home_team else "-"
    return f"{sign}{abs(prediction.details.spread_raw):.1f}"


class MatchPredictionPanel:
    def __init__(
        self,
        client,
        home_team_id: str,
        away_team_id: str,
        cache: Optional[QueryCache] = None,
        diagnostics: Optional[Diagnostics] = None,
    ):
        self._client = client
        self._diagnostics = diagnostics or DISABLED
        self._cache = cache if cache is not None else QueryCache(self._diagnostics)
        self.home_team_id = home_team_id
        self.away_team_id = away_team_id
        self.home_star_missing = False
        self.away_star_missing = False
        self.is_open = False

    @property
    def key(self) -> str:
        return make_query_key(
            MATCH_PREDICTION_QUERY,
            self.home_team_id,
            self.away_team_id,
            self.home_star_missing,
            self.away_star_missing,
        )

    def _fetcher(self):
        return partial(
            self._client.predict_match,
            self.home_team_id,
            self.away_team_id,
            self.home_star_missing,
            self.away_star_missing,
        )

    def _query(self) -> None:
        if not self.is_open or not self.home_team_id or not self.away_team_id:
            return
        self._cache.fetch(self.key, self._fetcher())

    def open(self) -> None:
        self.is_open = True
        self._query()

    def close(self) -> None:
        self.is_open = False

    def set_home_star_missing(self, missing: bool) -> None:
        self.home_star_missing = bool(missing)
        self._diagnostics.selection_changed("home_star", [int(self.home_star_missing)])
        self._query()

    def set_away_star_missing(self, missing: bool) -> None:
        self.away_star_missing = bool(missing)
        self._diagnostics.selection_changed("away_star", [int(self.away_star_missing)])
        self._query()

    def toggle_home_star_missing(self) -> None:
        self.set_home_star_missing(not self.home_star_missing)

    def toggle_away_star_missing(self) -> None:
        self.set_away_star_missing(not self.away_star_missing)

    def refetch(self) -> None:
        if not self.is_open:
            return
        self._cache.refetch(self.key, self._fetcher())

    async def settle(self) -> None:
        await self._cache.settle()

    @property
    def prediction(self) -> Optional[MatchPrediction]:
        return self._cache.data(self.key)

    @property
    def is_loading(self) -> bool:
        entry = self._cache.get(self.key)
        return entry is not None and entry.is_loading and entry.data is None

    @property
    def error(self) -> Optional[BaseException]:
        entry = self._cache.get(self.key)
        return entry.error if entry is not None else None
