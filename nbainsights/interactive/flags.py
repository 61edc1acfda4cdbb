"""Flags derived from a displayed prediction snapshot."""

from typing import Dict, Optional

from nbainsights.api.schema import InteractiveMatchPrediction, Side


def has_high_blowout_risk(snapshot: Optional[InteractiveMatchPrediction]) -> bool:
    """True if any player on either side carries a HIGH blowout risk."""
    if snapshot is None:
        return False
    players = list(snapshot.home_players) + list(snapshot.away_players)
    return any(p.blowout_analysis.is_high for p in players)


def usage_boost_badges(snapshot: Optional[InteractiveMatchPrediction]) -> Dict[Side, float]:
    """Usage boost per side, only for sides whose boost is above zero."""
    if snapshot is None:
        return {}
    badges = {}
    for side in (Side.HOME, Side.AWAY):
        boost = snapshot.match_context.usage_boost(side)
        if boost > 0:
            badges[side] = boost
    return badges
