"""Toggleable diagnostics for the interactive controllers.

Controllers and the query cache report state transitions here instead of
logging inline. When disabled every hook returns immediately.
"""

from typing import Iterable, Optional
import logging

from nbainsights.ops.metrics import MetricsRecorder, get_metrics_recorder

logger = logging.getLogger("nbainsights.diagnostics")


class Diagnostics:
    def __init__(self, enabled: bool = False, metrics: Optional[MetricsRecorder] = None) -> None:
        self.enabled = enabled
        self._metrics = metrics or get_metrics_recorder()

    def query_transition(self, key: str, status: str) -> None:
        if not self.enabled:
            return
        self._metrics.increment(f"diagnostics.query.{status}")
        logger.debug("query %s -> %s", key, status)

    def selection_changed(self, side: str, player_ids: Iterable[int]) -> None:
        if not self.enabled:
            return
        ids = list(player_ids)
        self._metrics.increment("diagnostics.selection_changes")
        logger.debug("selection %s = %s", side, ids)

    def matchup_changed(self, home_team_id: str, away_team_id: str) -> None:
        if not self.enabled:
            return
        self._metrics.increment("diagnostics.matchup_changes")
        logger.debug("matchup %s vs %s", home_team_id, away_team_id)

    def superseded(self, key: str) -> None:
        if not self.enabled:
            return
        self._metrics.increment("diagnostics.superseded")
        logger.debug("superseded %s", key)


DISABLED = Diagnostics(enabled=False)
