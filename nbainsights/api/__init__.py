"""Prediction API client and response records."""

from nbainsights.api.client import NBAInsightsClient
from nbainsights.api.schema import (
    Side,
    Player,
    RosterEntry,
    SeasonStats,
    GameLog,
    TrendResult,
    VsTeamStats,
    TodayGame,
    BlowoutAnalysis,
    PlayerFullPrediction,
    MatchContext,
    MatchDetails,
    MatchPrediction,
    InteractiveMatchPrediction,
    MissingPlayerImpact,
)

__all__ = [
    "NBAInsightsClient",
    "Side",
    "Player",
    "RosterEntry",
    "SeasonStats",
    "GameLog",
    "TrendResult",
    "VsTeamStats",
    "TodayGame",
    "BlowoutAnalysis",
    "PlayerFullPrediction",
    "MatchContext",
    "MatchDetails",
    "MatchPrediction",
    "InteractiveMatchPrediction",
    "MissingPlayerImpact",
]
