"""Per-side "missing player" selections."""

from typing import Dict, Iterable, List, Sequence, Tuple

from nbainsights.api.schema import RosterEntry, Side


def filter_roster(entries: Sequence[RosterEntry], query: str = "") -> List[RosterEntry]:
    """Case-insensitive substring search over roster names."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(entries)
    return [e for e in entries if needle in e.name.lower()]


class SelectionState:
    """
    Two independent identifier sets, one per side.

    Identifiers are unique within a side and kept in the order the user
    added them. Selections are keyed by player id, never by a position in
    a roster list, so a reordered or reloaded roster cannot shift them.
    """

    def __init__(self) -> None:
        self._selected: Dict[Side, List[int]] = {Side.HOME: [], Side.AWAY: []}

    def add(self, side: Side, player_id: int) -> bool:
        """Append ``player_id``; returns False when it was already selected."""
        ids = self._selected[Side(side)]
        player_id = int(player_id)
        if player_id in ids:
            return False
        ids.append(player_id)
        return True

    def remove(self, side: Side, player_id: int) -> bool:
        ids = self._selected[Side(side)]
        player_id = int(player_id)
        if player_id not in ids:
            return False
        ids.remove(player_id)
        return True

    def toggle(self, side: Side, player_id: int) -> bool:
        """Flip membership; returns True when the player is now selected."""
        if self.remove(side, player_id):
            return False
        self.add(side, player_id)
        return True

    def clear(self) -> None:
        for ids in self._selected.values():
            ids.clear()

    def selected(self, side: Side) -> Tuple[int, ...]:
        return tuple(self._selected[Side(side)])

    def contains(self, side: Side, player_id: int) -> bool:
        return int(player_id) in self._selected[Side(side)]

    def is_empty(self) -> bool:
        return not any(self._selected.values())

    def derive_ids(self, side: Side, known_ids: Iterable[int]) -> List[int]:
        """Selected ids confirmed by ``known_ids``; unknown or stale ids are dropped."""
        known = set(known_ids)
        return [pid for pid in self._selected[Side(side)] if pid in known]

    def __repr__(self) -> str:
        return (
            f"SelectionState(home={list(self._selected[Side.HOME])}, "
            f"away={list(self._selected[Side.AWAY])})"
        )
