"""
Championship standings.

Folds completed match results into per-entrant cumulative totals. Standings can
be built incrementally (one result at a time) or recomputed from the full
history; both orderings agree exactly because ties are broken by seed.
"""

from dataclasses import dataclass, asdict, replace
from typing import Dict, Iterable, List, Optional, Any

from champsim.game.match import MatchResult


@dataclass
class StandingEntry:
    """Running tally for one entrant across all finalized matches."""
    entrant_id: str
    points: int = 0
    wins: int = 0
    losses: int = 0
    matches_played: int = 0
    seed: int = 0  # position in the entrant list, or first appearance

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StandingEntry':
        return cls(**data)


def sort_standings(entries: Iterable[StandingEntry]) -> List[StandingEntry]:
    """Sort by points descending, ties by seed ascending."""
    return sorted(entries, key=lambda e: (-e.points, e.seed))


def seed_standings(entrant_ids: List[str]) -> List[StandingEntry]:
    """Zeroed standings for a fresh championship."""
    return [StandingEntry(entrant_id=eid, seed=i) for i, eid in enumerate(entrant_ids)]


def apply_result(standings: List[StandingEntry], result: MatchResult) -> List[StandingEntry]:
    """
    Add one match result to a standings list.

    The input list is left untouched; a new sorted list is returned. Entrants
    not yet present are appended with the next seed, A side before B side.

    Args:
        standings: Current standings
        result: A finalized match result

    Returns:
        New standings, sorted
    """
    by_id = {e.entrant_id: replace(e) for e in standings}
    next_seed = max((e.seed for e in standings), default=-1) + 1

    for entrant_id in (result.entrant_a, result.entrant_b):
        entry = by_id.get(entrant_id)
        if entry is None:
            entry = StandingEntry(entrant_id=entrant_id, seed=next_seed)
            by_id[entrant_id] = entry
            next_seed += 1

        entry.points += result.points_for(entrant_id)
        entry.matches_played += 1
        if entrant_id == result.winner_id:
            entry.wins += 1
        else:
            entry.losses += 1

    return sort_standings(by_id.values())


def recompute(results: Iterable[MatchResult], entrant_ids: Optional[List[str]] = None) -> List[StandingEntry]:
    """
    Build standings from scratch over a full result history.

    Args:
        results: Finalized match results, in completion order
        entrant_ids: Optional ordered entrant list; seeds every entrant
            (including ones without results) in this order

    Returns:
        Sorted standings
    """
    entries: Dict[str, StandingEntry] = {
        e.entrant_id: e for e in seed_standings(entrant_ids or [])
    }

    for result in results:
        for entrant_id in (result.entrant_a, result.entrant_b):
            if entrant_id not in entries:
                entries[entrant_id] = StandingEntry(entrant_id=entrant_id, seed=len(entries))
            entry = entries[entrant_id]
            entry.points += result.points_for(entrant_id)
            entry.matches_played += 1
            if entrant_id == result.winner_id:
                entry.wins += 1
            else:
                entry.losses += 1

    return sort_standings(entries.values())


def points_by_entrant(standings: Iterable[StandingEntry]) -> Dict[str, int]:
    """Map entrant id -> cumulative points."""
    return {e.entrant_id: e.points for e in standings}
