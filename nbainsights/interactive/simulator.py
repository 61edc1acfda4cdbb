"""Match simulator: "what-if" recalculation with absent players.

The simulator keeps two kinds of prediction queries in a shared
``QueryCache``:

- the baseline, requested unconditionally with nobody marked absent;
- the adjusted prediction for the current selection, requested only once
  the baseline has loaded and at least one selected id is confirmed by
  the roster.

While an adjusted request is in flight the snapshot shown stays the last
one displayed (the previous adjusted result, or the baseline), so the view
never goes blank. Every adjusted request is keyed by the full
(home, away, home ids, away ids) tuple; a late response for a superseded
selection lands on its own key and is never displayed over the current one.

Usage:
    async with NBAInsightsClient() as client:
        sim = MatchSimulator(client, "LAL", "BOS")
        await sim.load()
        sim.mark_absent(Side.HOME, 201939)
        await sim.settle()
        print(sim.display_snapshot.predicted_margin)
"""

from enum import Enum
from functools import partial
from typing import List, Optional, Sequence, Set
import logging

from nbainsights.api.schema import InteractiveMatchPrediction, RosterEntry, Side
from nbainsights.config import Config
from nbainsights.constants import INTERACTIVE_PREDICTION_QUERY, TEAM_ROSTER_QUERY
from nbainsights.interactive.flags import has_high_blowout_risk, usage_boost_badges
from nbainsights.interactive.query_cache import QueryCache, QueryEntry, make_query_key
from nbainsights.interactive.selection import SelectionState, filter_roster
from nbainsights.ops.diagnostics import DISABLED, Diagnostics

logger = logging.getLogger(__name__)


class SimulatorState(str, Enum):
    LOADING = "loading"
    UNAVAILABLE = "unavailable"
    BASELINE_ONLY = "baseline_only"
    RECALCULATING = "recalculating"
    ADJUSTED = "adjusted"
    RECALCULATION_FAILED = "recalculation_failed"


class MatchSimulator:
    """
    Interactive controller for one home/away pairing.

    Must be driven from inside a running event loop: every mutation may
    start a request task on the shared query cache.
    """

    def __init__(
        self,
        client,
        home_team_id: str,
        away_team_id: str,
        cache: Optional[QueryCache] = None,
        cancel_superseded: bool = True,
        load_rosters: bool = False,
        diagnostics: Optional[Diagnostics] = None,
    ):
        """
        Args:
            client: NBAInsightsClient (or anything with the same coroutines)
            home_team_id: Home team code, e.g. "LAL"
            away_team_id: Away team code, e.g. "BOS"
            cache: Optional shared QueryCache
            cancel_superseded: Cancel in-flight adjusted requests once superseded
            load_rosters: Use /team/{id}/roster as the roster instead of the
                players listed in the baseline snapshot
            diagnostics: Optional diagnostics hook
        """
        self._client = client
        self._diagnostics = diagnostics or DISABLED
        self._cache = cache if cache is not None else QueryCache(self._diagnostics)
        self.cancel_superseded = cancel_superseded
        self.load_rosters = load_rosters
        self.home_team_id = home_team_id
        self.away_team_id = away_team_id
        self.selection = SelectionState()

        # Key of the latest adjusted request issued, None with no selection
        self._adjusted_key: Optional[str] = None
        # Key whose data stays on screen while a newer request is in flight
        self._display_key: Optional[str] = None

        self._unsubscribe = self._cache.subscribe(self._on_query_update)

    @classmethod
    def from_config(cls, client, home_team_id: str, away_team_id: str, config: Config, **kwargs) -> "MatchSimulator":
        diagnostics = kwargs.pop("diagnostics", None) or Diagnostics(enabled=config.diagnostics_enabled)
        return cls(
            client,
            home_team_id,
            away_team_id,
            cancel_superseded=config.cancel_superseded,
            diagnostics=diagnostics,
            **kwargs,
        )

    # =========================================================================
    # Keys
    # =========================================================================

    def team_id(self, side: Side) -> str:
        return self.home_team_id if Side(side) is Side.HOME else self.away_team_id

    @property
    def baseline_key(self) -> str:
        return make_query_key(INTERACTIVE_PREDICTION_QUERY, self.home_team_id, self.away_team_id, (), ())

    @property
    def adjusted_key(self) -> Optional[str]:
        """Key for the current selection, or None when nothing confirmed is selected."""
        home_ids = self.home_missing_ids
        away_ids = self.away_missing_ids
        if not home_ids and not away_ids:
            return None
        return make_query_key(
            INTERACTIVE_PREDICTION_QUERY,
            self.home_team_id,
            self.away_team_id,
            home_ids,
            away_ids,
        )

    def _roster_key(self, side: Side) -> str:
        return make_query_key(TEAM_ROSTER_QUERY, self.team_id(side))

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        """Issue the baseline (and roster) requests; cached keys are reused."""
        self._cache.fetch(self.baseline_key, self._baseline_fetcher())
        if self.load_rosters:
            for side in (Side.HOME, Side.AWAY):
                team = self.team_id(side)
                self._cache.fetch(self._roster_key(side), partial(self._client.get_team_roster, team))
        self._sync()

    async def load(self) -> Optional[InteractiveMatchPrediction]:
        self.start()
        await self.settle()
        return self.display_snapshot

    async def settle(self) -> None:
        await self._cache.settle()

    def refetch(self) -> None:
        """Manual retry: request the baseline again, keeping the old one on screen."""
        self._cache.refetch(self.baseline_key, self._baseline_fetcher())

    def retry_recalculation(self) -> bool:
        key = self._adjusted_key
        entry = self._cache.get(key) if key else None
        if entry is None or not entry.is_error:
            return False
        self._cache.refetch(key, self._adjusted_fetcher(self.home_missing_ids, self.away_missing_ids))
        return True

    def close(self) -> None:
        if self._adjusted_key is not None:
            self._cache.cancel(self._adjusted_key)
        self._unsubscribe()

    def set_matchup(self, home_team_id: str, away_team_id: str) -> None:
        """Switch the pairing; selections from the previous pairing are discarded."""
        if (home_team_id, away_team_id) == (self.home_team_id, self.away_team_id):
            return
        if self._adjusted_key is not None:
            self._cache.cancel(self._adjusted_key)
        self.selection.clear()
        self.home_team_id = home_team_id
        self.away_team_id = away_team_id
        self._adjusted_key = None
        self._display_key = None
        self._diagnostics.matchup_changed(home_team_id, away_team_id)
        self.start()

    # =========================================================================
    # Rosters & selection
    # =========================================================================

    @property
    def baseline(self) -> Optional[InteractiveMatchPrediction]:
        return self._cache.data(self.baseline_key)

    def roster(self, side: Side) -> List[RosterEntry]:
        """Authoritative roster: the team roster query once loaded, else the baseline players."""
        side = Side(side)
        if self.load_rosters:
            entries = self._cache.data(self._roster_key(side))
            if entries is not None:
                return list(entries)
        baseline = self.baseline
        if baseline is None:
            return []
        team = self.team_id(side)
        return [p.roster_entry(team) for p in baseline.players(side)]

    def search_roster(self, side: Side, query: str = "") -> List[RosterEntry]:
        return filter_roster(self.roster(side), query)

    def known_ids(self, side: Side) -> Set[int]:
        return {e.player_id for e in self.roster(side)}

    @property
    def home_missing_ids(self) -> List[int]:
        return self.selection.derive_ids(Side.HOME, self.known_ids(Side.HOME))

    @property
    def away_missing_ids(self) -> List[int]:
        return self.selection.derive_ids(Side.AWAY, self.known_ids(Side.AWAY))

    @property
    def has_selection(self) -> bool:
        return self._adjusted_key is not None

    def is_absent(self, side: Side, player_id: int) -> bool:
        return self.selection.contains(side, player_id)

    def mark_absent(self, side: Side, player_id: int) -> bool:
        """Select a player as absent; ids missing from the roster are refused."""
        side = Side(side)
        if int(player_id) not in self.known_ids(side):
            logger.info("Player %s is not on the %s roster of %s", player_id, side.value, self.team_id(side))
            return False
        if not self.selection.add(side, player_id):
            return False
        self._selection_changed(side)
        return True

    def mark_present(self, side: Side, player_id: int) -> bool:
        side = Side(side)
        if not self.selection.remove(side, player_id):
            return False
        self._selection_changed(side)
        return True

    def toggle_absent(self, side: Side, player_id: int) -> bool:
        """Flip a player's absence; returns True when the player is now absent."""
        if self.selection.contains(side, player_id):
            self.mark_present(side, player_id)
            return False
        return self.mark_absent(side, player_id)

    def clear_selection(self) -> None:
        if self.selection.is_empty():
            return
        self.selection.clear()
        for side in (Side.HOME, Side.AWAY):
            self._diagnostics.selection_changed(side.value, ())
        self._sync()

    # =========================================================================
    # Display
    # =========================================================================

    @property
    def state(self) -> SimulatorState:
        baseline = self._cache.get(self.baseline_key)
        if baseline is None or baseline.data is None:
            if baseline is not None and baseline.is_error:
                return SimulatorState.UNAVAILABLE
            return SimulatorState.LOADING
        if self._adjusted_key is None:
            return SimulatorState.BASELINE_ONLY
        adjusted = self._cache.get(self._adjusted_key)
        if adjusted is None:
            return SimulatorState.BASELINE_ONLY
        if adjusted.is_error:
            return SimulatorState.RECALCULATION_FAILED
        if adjusted.data is not None:
            return SimulatorState.ADJUSTED
        return SimulatorState.RECALCULATING

    @property
    def display_snapshot(self) -> Optional[InteractiveMatchPrediction]:
        baseline = self.baseline
        if baseline is None:
            return None
        if self._adjusted_key is None:
            return baseline
        current = self._cache.data(self._adjusted_key)
        if current is not None:
            return current
        if self._display_key is not None:
            previous = self._cache.data(self._display_key)
            if previous is not None:
                return previous
        return baseline

    @property
    def is_recalculating(self) -> bool:
        return self.state is SimulatorState.RECALCULATING

    @property
    def is_loading(self) -> bool:
        return self.state in (SimulatorState.LOADING, SimulatorState.RECALCULATING)

    @property
    def error(self) -> Optional[BaseException]:
        entry = self._cache.get(self.baseline_key)
        return entry.error if entry is not None else None

    @property
    def recalculation_error(self) -> Optional[BaseException]:
        entry = self._cache.get(self._adjusted_key) if self._adjusted_key else None
        return entry.error if entry is not None else None

    @property
    def has_high_blowout_risk(self) -> bool:
        return has_high_blowout_risk(self.display_snapshot)

    @property
    def usage_boosts(self):
        return usage_boost_badges(self.display_snapshot)

    # =========================================================================
    # Coordination
    # =========================================================================

    def _baseline_fetcher(self):
        return partial(self._client.get_full_match_prediction, self.home_team_id, self.away_team_id)

    def _adjusted_fetcher(self, home_ids: Sequence[int], away_ids: Sequence[int]):
        return partial(
            self._client.get_full_match_prediction,
            self.home_team_id,
            self.away_team_id,
            list(home_ids) or None,
            list(away_ids) or None,
        )

    def _selection_changed(self, side: Side) -> None:
        self._diagnostics.selection_changed(side.value, self.selection.selected(side))
        self._sync()

    def _sync(self) -> None:
        # Adjusted requests wait for the baseline; its success re-runs this
        key = self.adjusted_key if self.baseline is not None else None
        if key == self._adjusted_key:
            return
        previous = self._adjusted_key
        self._adjusted_key = key
        if previous is not None:
            self._diagnostics.superseded(previous)
            if self.cancel_superseded:
                self._cache.cancel(previous)
        if key is None:
            self._display_key = self.baseline_key
            return
        entry = self._cache.fetch(key, self._adjusted_fetcher(self.home_missing_ids, self.away_missing_ids))
        if entry.data is not None:
            self._display_key = key

    def _on_query_update(self, entry: QueryEntry) -> None:
        if not entry.is_success:
            return
        if entry.key == self.baseline_key:
            if self._display_key is None:
                self._display_key = entry.key
            self._sync()
        elif entry.key == self._adjusted_key:
            self._display_key = entry.key
        elif self.load_rosters and entry.key in (self._roster_key(Side.HOME), self._roster_key(Side.AWAY)):
            self._sync()
