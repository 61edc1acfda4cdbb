"""
Constants and team lookups for the dashboard client.

Single source of truth for team codes, risk labels and the query key
prefixes shared by the interactive controllers.
"""

from typing import Dict, List

from nbainsights.exceptions import UnknownTeamError


# =============================================================================
# TEAM CODES
# =============================================================================

TEAM_CODES: Dict[str, str] = {
    # Full official names
    'Atlanta Hawks': 'ATL',
    'Boston Celtics': 'BOS',
    'Brooklyn Nets': 'BKN',
    'Charlotte Hornets': 'CHA',
    'Chicago Bulls': 'CHI',
    'Cleveland Cavaliers': 'CLE',
    'Dallas Mavericks': 'DAL',
    'Denver Nuggets': 'DEN',
    'Detroit Pistons': 'DET',
    'Golden State Warriors': 'GSW',
    'Houston Rockets': 'HOU',
    'Indiana Pacers': 'IND',
    'LA Clippers': 'LAC',
    'Los Angeles Clippers': 'LAC',
    'Los Angeles Lakers': 'LAL',
    'LA Lakers': 'LAL',
    'Memphis Grizzlies': 'MEM',
    'Miami Heat': 'MIA',
    'Milwaukee Bucks': 'MIL',
    'Minnesota Timberwolves': 'MIN',
    'New Orleans Pelicans': 'NOP',
    'New York Knicks': 'NYK',
    'Oklahoma City Thunder': 'OKC',
    'Orlando Magic': 'ORL',
    'Philadelphia 76ers': 'PHI',
    'Phoenix Suns': 'PHX',
    'Portland Trail Blazers': 'POR',
    'Sacramento Kings': 'SAC',
    'San Antonio Spurs': 'SAS',
    'Toronto Raptors': 'TOR',
    'Utah Jazz': 'UTA',
    'Washington Wizards': 'WAS',

    # Nicknames as the scoreboard feed reports them
    'Hawks': 'ATL', 'Celtics': 'BOS', 'Nets': 'BKN', 'Hornets': 'CHA',
    'Bulls': 'CHI', 'Cavaliers': 'CLE', 'Cavs': 'CLE', 'Mavericks': 'DAL',
    'Mavs': 'DAL', 'Nuggets': 'DEN', 'Pistons': 'DET', 'Warriors': 'GSW',
    'Rockets': 'HOU', 'Pacers': 'IND', 'Clippers': 'LAC', 'Lakers': 'LAL',
    'Grizzlies': 'MEM', 'Heat': 'MIA', 'Bucks': 'MIL', 'Timberwolves': 'MIN',
    'Wolves': 'MIN', 'Pelicans': 'NOP', 'Knicks': 'NYK', 'Thunder': 'OKC',
    'Magic': 'ORL', '76ers': 'PHI', 'Sixers': 'PHI', 'Suns': 'PHX',
    'Trail Blazers': 'POR', 'Blazers': 'POR', 'Kings': 'SAC', 'Spurs': 'SAS',
    'Raptors': 'TOR', 'Jazz': 'UTA', 'Wizards': 'WAS',

    # Non-standard abbreviations
    'PHO': 'PHX',
    'BRK': 'BKN',
    'GS': 'GSW',
    'NO': 'NOP',
    'NY': 'NYK',
    'SA': 'SAS',
    'UTAH': 'UTA',
}

STANDARD_TEAM_CODES: List[str] = sorted(set(TEAM_CODES.values()))


def get_team_code(team_name: str, strict: bool = False) -> str:
    """
    Map a team name, nickname or code to its 3-letter team code.

    Args:
        team_name: "Los Angeles Lakers", "Lakers", "lal" ...
        strict: Raise UnknownTeamError instead of falling back

    Returns:
        Team code, or the upper-cased input when unknown and not strict
    """
    name = str(team_name or "").strip()
    if not name:
        if strict:
            raise UnknownTeamError(team_name)
        return ""

    if name.upper() in STANDARD_TEAM_CODES:
        return name.upper()
    if name in TEAM_CODES:
        return TEAM_CODES[name]

    lowered = name.lower()
    for key, code in TEAM_CODES.items():
        if key.lower() == lowered:
            return code

    if strict:
        raise UnknownTeamError(team_name)
    return name.upper()


# =============================================================================
# PREDICTION LABELS
# =============================================================================

RISK_HIGH = "HIGH"
RISK_LOW = "LOW"

# Stats accepted by the trend endpoint
TREND_STATS: List[str] = ["PTS", "REB", "AST", "PRA", "PA", "PR", "AR", "FG3M", "STL", "BLK"]


# =============================================================================
# QUERY KEYS
# =============================================================================

INTERACTIVE_PREDICTION_QUERY = "interactive-match-prediction"
MATCH_PREDICTION_QUERY = "match-prediction"
TEAM_ROSTER_QUERY = "team-roster"
