"""Interactive controllers: selections, keyed queries and the match simulator."""

from nbainsights.interactive.selection import SelectionState, filter_roster
from nbainsights.interactive.query_cache import (
    QueryCache,
    QueryEntry,
    QueryStatus,
    make_query_key,
)
from nbainsights.interactive.flags import has_high_blowout_risk, usage_boost_badges
from nbainsights.interactive.simulator import MatchSimulator, SimulatorState
from nbainsights.interactive.prediction import (
    MatchPredictionPanel,
    confidence_tone,
    spread_label,
)

__all__ = [
    "SelectionState",
    "filter_roster",
    "QueryCache",
    "QueryEntry",
    "QueryStatus",
    "make_query_key",
    "has_high_blowout_risk",
    "usage_boost_badges",
    "MatchSimulator",
    "SimulatorState",
    "MatchPredictionPanel",
    "confidence_tone",
    "spread_label",
]
