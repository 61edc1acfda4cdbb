"""Typed records for the prediction API responses.

Records are parsed leniently: a missing or null field becomes ``None``,
zero or an empty collection instead of raising. Nothing here validates
payloads against a schema.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from nbainsights.constants import RISK_HIGH, RISK_LOW


class Side(str, Enum):
    HOME = "home"
    AWAY = "away"


def _as_float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _first(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


def _float_map(value: Any) -> Dict[str, float]:
    if not isinstance(value, Mapping):
        return {}
    return {str(k): _as_float(v) for k, v in value.items()}


def _list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


# =============================================================================
# PLAYERS
# =============================================================================

@dataclass(frozen=True)
class Player:
    id: int
    full_name: str
    first_name: str = ""
    last_name: str = ""
    is_active: bool = True
    team: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Player":
        return cls(
            id=_as_int(payload.get("id")),
            full_name=_as_str(payload.get("full_name")),
            first_name=_as_str(payload.get("first_name")),
            last_name=_as_str(payload.get("last_name")),
            is_active=bool(payload.get("is_active", True)),
            team=payload.get("team"),
        )


@dataclass(frozen=True)
class RosterEntry:
    """A player on a team roster, identified by a stable integer id."""
    player_id: int
    name: str
    team: Optional[str] = None
    position: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], team: Optional[str] = None) -> "RosterEntry":
        return cls(
            player_id=_as_int(_first(payload, "player_id", "id", "PLAYER_ID")),
            name=_as_str(_first(payload, "full_name", "player", "name", "PLAYER")),
            team=_first(payload, "team", "TEAM_ABBREVIATION") or team,
            position=_first(payload, "position", "POSITION"),
        )


@dataclass(frozen=True)
class SeasonStats:
    player_id: int
    gp: int = 0
    min: float = 0.0
    pts: float = 0.0
    reb: float = 0.0
    ast: float = 0.0
    stl: float = 0.0
    blk: float = 0.0
    fg3m: float = 0.0
    pra: float = 0.0
    pa: float = 0.0
    pr: float = 0.0
    ar: float = 0.0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SeasonStats":
        return cls(
            player_id=_as_int(payload.get("PLAYER_ID")),
            gp=_as_int(payload.get("GP")),
            min=_as_float(payload.get("MIN")),
            pts=_as_float(payload.get("PTS")),
            reb=_as_float(payload.get("REB")),
            ast=_as_float(payload.get("AST")),
            stl=_as_float(payload.get("STL")),
            blk=_as_float(payload.get("BLK")),
            fg3m=_as_float(payload.get("FG3M")),
            pra=_as_float(payload.get("PRA")),
            pa=_as_float(payload.get("PA")),
            pr=_as_float(payload.get("PR")),
            ar=_as_float(payload.get("AR")),
        )


@dataclass(frozen=True)
class GameLog:
    game_date: str
    matchup: str
    wl: str
    pts: float = 0.0
    reb: float = 0.0
    ast: float = 0.0
    min: Optional[float] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GameLog":
        minutes = _first(payload, "MIN", "min")
        return cls(
            game_date=_as_str(_first(payload, "GAME_DATE", "date")),
            matchup=_as_str(payload.get("MATCHUP")),
            wl=_as_str(payload.get("WL")),
            pts=_as_float(_first(payload, "PTS", "pts")),
            reb=_as_float(_first(payload, "REB", "reb")),
            ast=_as_float(_first(payload, "AST", "ast")),
            min=None if minutes is None else _as_float(minutes),
        )


@dataclass(frozen=True)
class TrendResult:
    current_active_streak: int
    total_hits: int
    hit_rate_percent: float
    message: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TrendResult":
        return cls(
            current_active_streak=_as_int(payload.get("current_active_streak")),
            total_hits=_as_int(payload.get("total_hits")),
            hit_rate_percent=_as_float(payload.get("hit_rate_percent")),
            message=_as_str(payload.get("message")),
        )


@dataclass(frozen=True)
class VsTeamStats:
    games_played: int
    avg_pts: float = 0.0
    avg_reb: float = 0.0
    avg_ast: float = 0.0
    total_wins: int = 0
    total_losses: int = 0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "VsTeamStats":
        return cls(
            games_played=_as_int(payload.get("games_played")),
            avg_pts=_as_float(payload.get("avg_pts")),
            avg_reb=_as_float(payload.get("avg_reb")),
            avg_ast=_as_float(payload.get("avg_ast")),
            total_wins=_as_int(payload.get("total_wins")),
            total_losses=_as_int(payload.get("total_losses")),
        )


# =============================================================================
# GAMES
# =============================================================================

@dataclass(frozen=True)
class TodayGame:
    """A scheduled or live game.

    The games feed has shipped both snake_case (``home_team``) and
    camelCase (``homeTeam``, ``homeTeamId``) payloads; both are accepted.
    """
    game_id: str
    home_team: str
    away_team: str
    game_time: str = ""
    status: str = ""
    game_date: str = ""
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    home_team_id: Optional[str] = None
    away_team_id: Optional[str] = None
    is_live: bool = False

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TodayGame":
        return cls(
            game_id=_as_str(_first(payload, "game_id", "gameId")),
            home_team=_as_str(_first(payload, "home_team", "homeTeam")),
            away_team=_as_str(_first(payload, "away_team", "awayTeam")),
            game_time=_as_str(_first(payload, "game_time", "time")),
            status=_as_str(payload.get("status")),
            game_date=_as_str(_first(payload, "game_date", "gameDate")),
            home_score=_as_optional_int(_first(payload, "home_score", "homeScore")),
            away_score=_as_optional_int(_first(payload, "away_score", "awayScore")),
            home_team_id=_first(payload, "home_team_id", "homeTeamId"),
            away_team_id=_first(payload, "away_team_id", "awayTeamId"),
            is_live=bool(_first(payload, "is_live", "isLive") or False),
        )


# =============================================================================
# PREDICTIONS
# =============================================================================

@dataclass(frozen=True)
class BlowoutAnalysis:
    risk_level: str = RISK_LOW
    message: str = ""

    @property
    def is_high(self) -> bool:
        return self.risk_level.upper() == RISK_HIGH

    @classmethod
    def from_dict(cls, payload: Any) -> "BlowoutAnalysis":
        if not isinstance(payload, Mapping):
            return cls()
        return cls(
            risk_level=_as_str(payload.get("risk_level"), RISK_LOW).upper() or RISK_LOW,
            message=_as_str(payload.get("message")),
        )


@dataclass(frozen=True)
class PlayerFullPrediction:
    player_id: int
    player: str
    position: Optional[str] = None
    predicted_stats: Dict[str, float] = field(default_factory=dict)
    advanced_metrics_projected: Dict[str, float] = field(default_factory=dict)
    blowout_analysis: BlowoutAnalysis = field(default_factory=BlowoutAnalysis)
    boost_applied: str = ""

    def stat(self, name: str) -> float:
        """Projected value for PTS/REB/AST/MIN, or PRA from the advanced metrics."""
        key = name.upper()
        if key in self.advanced_metrics_projected and key not in self.predicted_stats:
            return self.advanced_metrics_projected[key]
        return self.predicted_stats.get(key, 0.0)

    def roster_entry(self, team: Optional[str] = None) -> RosterEntry:
        return RosterEntry(player_id=self.player_id, name=self.player, team=team, position=self.position)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PlayerFullPrediction":
        context = payload.get("context")
        boost = context.get("boost_applied") if isinstance(context, Mapping) else None
        return cls(
            player_id=_as_int(_first(payload, "player_id", "id")),
            player=_as_str(_first(payload, "player", "full_name")),
            position=payload.get("position") or None,
            predicted_stats=_float_map(payload.get("predicted_stats")),
            advanced_metrics_projected=_float_map(payload.get("advanced_metrics_projected")),
            blowout_analysis=BlowoutAnalysis.from_dict(payload.get("blowout_analysis")),
            boost_applied=_as_str(boost),
        )


@dataclass(frozen=True)
class MatchContext:
    home_usage_boost: float = 0.0
    away_usage_boost: float = 0.0

    def usage_boost(self, side: Side) -> float:
        return self.home_usage_boost if Side(side) is Side.HOME else self.away_usage_boost

    @classmethod
    def from_dict(cls, payload: Any) -> "MatchContext":
        if not isinstance(payload, Mapping):
            return cls()
        return cls(
            home_usage_boost=_as_float(payload.get("home_usage_boost")),
            away_usage_boost=_as_float(payload.get("away_usage_boost")),
        )


@dataclass(frozen=True)
class MatchDetails:
    spread_raw: float = 0.0
    home_net_rtg: float = 0.0
    away_net_rtg: float = 0.0
    home_penalty: float = 0.0
    away_penalty: float = 0.0

    @classmethod
    def from_dict(cls, payload: Any) -> "MatchDetails":
        if not isinstance(payload, Mapping):
            return cls()
        return cls(
            spread_raw=_as_float(payload.get("spread_raw")),
            home_net_rtg=_as_float(payload.get("home_net_rtg")),
            away_net_rtg=_as_float(payload.get("away_net_rtg")),
            home_penalty=_as_float(payload.get("home_penalty")),
            away_penalty=_as_float(payload.get("away_penalty")),
        )


def _match_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "predicted_winner": _as_str(payload.get("predicted_winner")),
        "predicted_margin": _as_float(payload.get("predicted_margin")),
        "win_probability_home": _as_float(payload.get("win_probability_home")),
        "predicted_total_points": _as_float(payload.get("predicted_total_points")),
        "confidence_level": _as_str(payload.get("confidence_level")),
        "details": MatchDetails.from_dict(payload.get("details")),
    }


@dataclass(frozen=True)
class MatchPrediction:
    """Match-level prediction from the boolean "star missing" endpoint."""
    predicted_winner: str = ""
    predicted_margin: float = 0.0
    win_probability_home: float = 0.0
    predicted_total_points: float = 0.0
    confidence_level: str = ""
    details: MatchDetails = field(default_factory=MatchDetails)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "MatchPrediction":
        return cls(**_match_fields(payload))


@dataclass(frozen=True)
class InteractiveMatchPrediction:
    """Prediction snapshot for one (home, away, home-missing, away-missing) tuple."""
    home_players: List[PlayerFullPrediction] = field(default_factory=list)
    away_players: List[PlayerFullPrediction] = field(default_factory=list)
    match_context: MatchContext = field(default_factory=MatchContext)
    predicted_winner: str = ""
    predicted_margin: float = 0.0
    win_probability_home: float = 0.0
    predicted_total_points: float = 0.0
    confidence_level: str = ""
    details: MatchDetails = field(default_factory=MatchDetails)
    blowout_analysis: BlowoutAnalysis = field(default_factory=BlowoutAnalysis)

    def players(self, side: Side) -> List[PlayerFullPrediction]:
        return self.home_players if Side(side) is Side.HOME else self.away_players

    def player_ids(self, side: Side) -> List[int]:
        return [p.player_id for p in self.players(side)]

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "InteractiveMatchPrediction":
        return cls(
            home_players=[PlayerFullPrediction.from_dict(p) for p in _list(payload.get("home_players"))],
            away_players=[PlayerFullPrediction.from_dict(p) for p in _list(payload.get("away_players"))],
            match_context=MatchContext.from_dict(payload.get("match_context")),
            blowout_analysis=BlowoutAnalysis.from_dict(payload.get("blowout_analysis")),
            **_match_fields(payload),
        )


@dataclass(frozen=True)
class MissingPlayerImpact:
    team: str
    player_id: int
    player: str = ""
    games_without: int = 0
    team_impact: Dict[str, float] = field(default_factory=dict)
    teammates: List[Dict[str, Any]] = field(default_factory=list)
    message: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "MissingPlayerImpact":
        return cls(
            team=_as_str(_first(payload, "team", "team_code")),
            player_id=_as_int(_first(payload, "player_id", "missing_player_id")),
            player=_as_str(_first(payload, "player", "missing_player")),
            games_without=_as_int(payload.get("games_without")),
            team_impact=_float_map(payload.get("team_impact")),
            teammates=[dict(t) for t in _list(payload.get("teammates")) if isinstance(t, Mapping)],
            message=_as_str(payload.get("message")),
        )
