"""Helpers over the scheduled games feed."""

from typing import Dict, Iterable, List, Optional, Tuple

from nbainsights.api.schema import TodayGame
from nbainsights.constants import get_team_code


def find_game(games: Iterable[TodayGame], game_id: str) -> Optional[TodayGame]:
    for game in games or []:
        if game.game_id == str(game_id):
            return game
    return None


def matchup_team_ids(game: TodayGame) -> Tuple[str, str]:
    """Home and away team codes, falling back to the team-name mapping."""
    home = game.home_team_id or get_team_code(game.home_team)
    away = game.away_team_id or get_team_code(game.away_team)
    return home, away


def group_games_by_date(games: Iterable[TodayGame]) -> Dict[str, List[TodayGame]]:
    grouped: Dict[str, List[TodayGame]] = {}
    for game in games or []:
        grouped.setdefault(game.game_date, []).append(game)
    return grouped
