"""
Championship state record.

One logical record per store. Every write carries the version that was read;
the store rejects a write whose version is stale.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional

from champsim.game.match import MatchResult, Pairing
from champsim.tournament.standings import StandingEntry
from champsim.utils.constants import IDLE, ACTIVE, FINISHED


@dataclass
class ChampionshipState:
    """Progress of the current championship."""
    status: str = IDLE
    championship_id: str = ""
    current_stage: int = 0
    total_stages: int = 0
    entrant_ids: List[str] = field(default_factory=list)
    current_pairings: List[Pairing] = field(default_factory=list)
    remaining_stages: Dict[int, List[Pairing]] = field(default_factory=dict)
    matches_played: List[MatchResult] = field(default_factory=list)
    standings: List[StandingEntry] = field(default_factory=list)
    version: int = 0

    @property
    def is_finished(self) -> bool:
        return self.status == FINISHED

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE

    @property
    def played_ids(self) -> List[str]:
        return [r.match_id for r in self.matches_played]

    def next_stage_index(self) -> Optional[int]:
        """Lowest stage index not yet activated, or None."""
        return min(self.remaining_stages) if self.remaining_stages else None

    def match_id_for(self, stage: int, index: int) -> str:
        """Deterministic match id, so opening a stage twice is harmless."""
        return f"{self.championship_id}-S{stage}-M{index + 1}"

    def to_dict(self, include_results: bool = True) -> Dict[str, Any]:
        """
        Convert to JSON-serializable dictionary.

        With include_results=False only match ids are kept for played matches;
        the store rehydrates the full results from its own table.
        """
        data = {
            'status': self.status,
            'championship_id': self.championship_id,
            'current_stage': self.current_stage,
            'total_stages': self.total_stages,
            'is_finished': self.is_finished,
            'entrant_ids': list(self.entrant_ids),
            'current_pairings': [p.to_dict() for p in self.current_pairings],
            'remaining_stages': {
                str(stage): [p.to_dict() for p in pairings]
                for stage, pairings in sorted(self.remaining_stages.items())
            },
            'standings': [e.to_dict() for e in self.standings],
            'version': self.version,
        }
        if include_results:
            data['matches_played'] = [r.to_dict() for r in self.matches_played]
        else:
            data['matches_played'] = self.played_ids
        return data

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        results_by_id: Optional[Dict[str, MatchResult]] = None
    ) -> 'ChampionshipState':
        """
        Create from dictionary.

        Args:
            data: Output of to_dict()
            results_by_id: Lookup used when matches_played holds only ids
        """
        played = []
        for item in data.get('matches_played', []):
            if isinstance(item, str):
                if results_by_id is None or item not in results_by_id:
                    raise ValueError(f"Missing archived result for match {item}")
                played.append(results_by_id[item])
            else:
                played.append(MatchResult.from_dict(item))

        return cls(
            status=data.get('status', IDLE),
            championship_id=data.get('championship_id', ""),
            current_stage=data.get('current_stage', 0),
            total_stages=data.get('total_stages', 0),
            entrant_ids=list(data.get('entrant_ids', [])),
            current_pairings=[Pairing.from_dict(p) for p in data.get('current_pairings', [])],
            remaining_stages={
                int(stage): [Pairing.from_dict(p) for p in pairings]
                for stage, pairings in data.get('remaining_stages', {}).items()
            },
            matches_played=played,
            standings=[StandingEntry.from_dict(e) for e in data.get('standings', [])],
            version=data.get('version', 0),
        )
