"""Text and table rendering."""

from nbainsights.reporting.tables import (
    render_simulator,
    render_snapshot,
    render_match_prediction,
    render_scoreboard,
    render_roster_options,
    players_frame,
    scoreboard_frame,
)

__all__ = [
    "render_simulator",
    "render_snapshot",
    "render_match_prediction",
    "render_scoreboard",
    "render_roster_options",
    "players_frame",
    "scoreboard_frame",
]
