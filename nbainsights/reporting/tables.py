"""Table rendering for the CLI and dashboard."""

from typing import Iterable, List, Optional, Sequence

import pandas as pd

from nbainsights.api.schema import (
    GameLog,
    InteractiveMatchPrediction,
    MatchPrediction,
    PlayerFullPrediction,
    RosterEntry,
    Side,
    TodayGame,
    TrendResult,
    VsTeamStats,
)
from nbainsights.games import group_games_by_date
from nbainsights.interactive.flags import has_high_blowout_risk, usage_boost_badges
from nbainsights.interactive.prediction import confidence_tone, spread_label
from nbainsights.interactive.simulator import MatchSimulator, SimulatorState

LOADING_MESSAGE = "Loading predictions..."
RECALCULATING_MESSAGE = "Recalculating with absent players..."
UNAVAILABLE_MESSAGE = "Data unavailable, please retry."
RECALCULATION_FAILED_MESSAGE = "Recalculation failed; showing the last available prediction."
NO_PLAYERS_MESSAGE = "No players found"
NO_GAMES_MESSAGE = "No games scheduled"
BLOWOUT_WARNING = "High blowout risk: starters may see reduced minutes."

PLAYER_COLUMNS = ["absent", "player", "position", "MIN", "PTS", "REB", "AST", "PRA"]


def players_frame(
    players: Sequence[PlayerFullPrediction],
    absent_ids: Iterable[int] = (),
) -> pd.DataFrame:
    absent = set(absent_ids)
    rows = [
        {
            "absent": p.player_id in absent,
            "player": p.player,
            "position": p.position or "",
            "MIN": p.stat("MIN"),
            "PTS": p.stat("PTS"),
            "REB": p.stat("REB"),
            "AST": p.stat("AST"),
            "PRA": p.stat("PRA"),
        }
        for p in players
    ]
    return pd.DataFrame(rows, columns=PLAYER_COLUMNS)


def roster_frame(entries: Sequence[RosterEntry]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"player_id": e.player_id, "player": e.name, "position": e.position or ""} for e in entries],
        columns=["player_id", "player", "position"],
    )


def render_roster_options(entries: Sequence[RosterEntry]) -> str:
    if not entries:
        return NO_PLAYERS_MESSAGE
    return roster_frame(entries).to_string(index=False)


def _format_frame(frame: pd.DataFrame) -> str:
    if frame.empty:
        return NO_PLAYERS_MESSAGE
    return frame.to_string(index=False, float_format=lambda v: f"{v:.1f}")


def match_summary(snapshot: InteractiveMatchPrediction) -> List[str]:
    details = snapshot.details
    return [
        f"Predicted winner: {snapshot.predicted_winner or '-'}",
        f"Margin: {abs(snapshot.predicted_margin):.1f}",
        f"Home win probability: {snapshot.win_probability_home:.1f}%",
        f"Total points: {snapshot.predicted_total_points:.0f}",
        f"Penalties: home {details.home_penalty:.1f} / away {details.away_penalty:.1f}",
    ]


def render_snapshot(
    snapshot: InteractiveMatchPrediction,
    home_name: str,
    away_name: str,
    home_absent: Iterable[int] = (),
    away_absent: Iterable[int] = (),
) -> str:
    lines = [f"{home_name} vs {away_name}"]
    lines.extend(match_summary(snapshot))
    names = {Side.HOME: home_name, Side.AWAY: away_name}
    for side, boost in usage_boost_badges(snapshot).items():
        lines.append(f"Usage boost: +{boost:.1f}% ({names[side]})")
    if has_high_blowout_risk(snapshot):
        lines.append(BLOWOUT_WARNING)
    lines.append("")
    lines.append(home_name)
    lines.append(_format_frame(players_frame(snapshot.home_players, home_absent)))
    lines.append("")
    lines.append(away_name)
    lines.append(_format_frame(players_frame(snapshot.away_players, away_absent)))
    return "\n".join(lines)


def render_simulator(sim: MatchSimulator, home_name: Optional[str] = None, away_name: Optional[str] = None) -> str:
    """Text view of the simulator: spinner, fallback message, or the display snapshot."""
    snapshot = sim.display_snapshot
    if snapshot is None:
        if sim.state is SimulatorState.UNAVAILABLE:
            return UNAVAILABLE_MESSAGE
        return LOADING_MESSAGE

    body = render_snapshot(
        snapshot,
        home_name or sim.home_team_id,
        away_name or sim.away_team_id,
        sim.selection.selected(Side.HOME),
        sim.selection.selected(Side.AWAY),
    )
    if sim.state is SimulatorState.RECALCULATING:
        return f"{RECALCULATING_MESSAGE}\n{body}"
    if sim.state is SimulatorState.RECALCULATION_FAILED:
        return f"{RECALCULATION_FAILED_MESSAGE}\n{body}"
    return body


def render_match_prediction(prediction: Optional[MatchPrediction], home_team: str, away_team: str) -> str:
    if prediction is None:
        return UNAVAILABLE_MESSAGE
    details = prediction.details
    return "\n".join([
        f"{away_team} @ {home_team}",
        f"Predicted winner: {prediction.predicted_winner} ({prediction.win_probability_home:.1f}% home)",
        f"Spread: {spread_label(prediction, home_team)}",
        f"Confidence: {prediction.confidence_level} [{confidence_tone(prediction.confidence_level)}]",
        f"Net rating: {home_team} {details.home_net_rtg:.1f} / {away_team} {details.away_net_rtg:.1f}",
        f"Predicted margin: {abs(prediction.predicted_margin):.1f}",
        f"Total points: {prediction.predicted_total_points:.0f}",
    ])


def scoreboard_frame(games: Sequence[TodayGame]) -> pd.DataFrame:
    rows = []
    for game_date, day_games in group_games_by_date(games).items():
        for game in day_games:
            rows.append({
                "date": game_date,
                "time": game.game_time,
                "away": game.away_team,
                "away_score": "" if game.away_score is None else game.away_score,
                "home": game.home_team,
                "home_score": "" if game.home_score is None else game.home_score,
                "status": "LIVE" if game.is_live else game.status,
                "game_id": game.game_id,
            })
    return pd.DataFrame(
        rows,
        columns=["date", "time", "away", "away_score", "home", "home_score", "status", "game_id"],
    )


def render_scoreboard(games: Sequence[TodayGame]) -> str:
    if not games:
        return NO_GAMES_MESSAGE
    return scoreboard_frame(games).to_string(index=False)


def recent_games_frame(logs: Sequence[GameLog], limit: Optional[int] = None) -> pd.DataFrame:
    """One row per game log, newest first as returned; ``limit`` keeps the first N."""
    logs = list(logs) if limit is None else list(logs)[:limit]
    return pd.DataFrame(
        [
            {
                "date": g.game_date,
                "matchup": g.matchup,
                "result": g.wl,
                "PTS": g.pts,
                "REB": g.reb,
                "AST": g.ast,
                "MIN": "" if g.min is None else g.min,
            }
            for g in logs
        ],
        columns=["date", "matchup", "result", "PTS", "REB", "AST", "MIN"],
    )


def render_vs_team(stats: VsTeamStats, team_code: str) -> str:
    return (
        f"vs {team_code}: {stats.games_played} games, "
        f"{stats.avg_pts:.1f} PTS / {stats.avg_reb:.1f} REB / {stats.avg_ast:.1f} AST, "
        f"{stats.total_wins}-{stats.total_losses}"
    )


def render_trend(result: TrendResult) -> str:
    return (
        f"Active streak: {result.current_active_streak} | "
        f"Hits: {result.total_hits} | "
        f"Hit rate: {result.hit_rate_percent:.1f}%\n{result.message}"
    ).rstrip()
