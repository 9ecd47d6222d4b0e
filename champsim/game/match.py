"""
Data structures for matches.

These structures capture everything needed for:
- Advancing a match one attempt at a time
- Archiving the complete attempt log once a match ends
- Replaying a match round by round
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Any, Optional, Tuple

from champsim.game.outcome import Outcome
from champsim.utils.constants import (
    ATTEMPTS_PER_ROUND, ATTEMPTS_PER_MATCH, SIDE_A, SIDE_B
)


class MatchState(Enum):
    """Lifecycle of a single match."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Pairing:
    """Two entrants scheduled to meet. Equality ignores order."""
    entrant_a: str
    entrant_b: str

    @property
    def key(self) -> frozenset:
        return frozenset((self.entrant_a, self.entrant_b))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pairing):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def as_tuple(self) -> Tuple[str, str]:
        return (self.entrant_a, self.entrant_b)

    def to_dict(self) -> Dict[str, str]:
        return {'entrant_a': self.entrant_a, 'entrant_b': self.entrant_b}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'Pairing':
        return cls(entrant_a=data['entrant_a'], entrant_b=data['entrant_b'])


def attacking_side(attempt_count: int) -> int:
    """Side that attacks the next attempt. Flips every ATTEMPTS_PER_ROUND attempts."""
    return SIDE_A if (attempt_count // ATTEMPTS_PER_ROUND) % 2 == 0 else SIDE_B


def round_for(attempt_count: int) -> int:
    """1-based round number containing the next attempt."""
    return attempt_count // ATTEMPTS_PER_ROUND + 1


@dataclass(frozen=True)
class Attempt:
    """A single resolved attempt. Never modified once written."""
    attempt_id: str
    attempt_number: int           # 1..72
    round_number: int             # 1..12
    attacking_entrant_id: str
    defending_entrant_id: str
    attacker_member_id: str
    defender_member_id: str
    outcome: Outcome

    @property
    def points(self) -> int:
        return self.outcome.points

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            'attempt_id': self.attempt_id,
            'attempt_number': self.attempt_number,
            'round_number': self.round_number,
            'attacking_entrant_id': self.attacking_entrant_id,
            'defending_entrant_id': self.defending_entrant_id,
            'attacker_member_id': self.attacker_member_id,
            'defender_member_id': self.defender_member_id,
            'outcome': self.outcome.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Attempt':
        """Create from dictionary."""
        data = dict(data)
        data['outcome'] = Outcome.from_dict(data['outcome'])
        return cls(**data)


@dataclass
class OngoingMatch:
    """
    A match in progress.

    attempt_count doubles as the optimistic-concurrency token: an attempt is
    only appended if the stored count still equals the count it was computed from.
    """
    match_id: str
    stage: int
    entrant_a: str
    entrant_b: str
    score_a: int = 0
    score_b: int = 0
    attempt_count: int = 0
    attempts: Dict[str, Attempt] = field(default_factory=dict)
    is_complete: bool = False

    @property
    def round_number(self) -> int:
        return round_for(self.attempt_count)

    @property
    def state(self) -> MatchState:
        if self.is_complete:
            return MatchState.COMPLETE
        if self.attempt_count == 0:
            return MatchState.NOT_STARTED
        return MatchState.IN_PROGRESS

    @property
    def attempts_remaining(self) -> int:
        return ATTEMPTS_PER_MATCH - self.attempt_count

    def entrant_for(self, side: int) -> str:
        return self.entrant_a if side == SIDE_A else self.entrant_b

    def score_for(self, side: int) -> int:
        return self.score_a if side == SIDE_A else self.score_b

    def attempt_log(self) -> List[Attempt]:
        """Attempts ordered by attempt number."""
        return sorted(self.attempts.values(), key=lambda a: a.attempt_number)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'match_id': self.match_id,
            'stage': self.stage,
            'entrant_a': self.entrant_a,
            'entrant_b': self.entrant_b,
            'score_a': self.score_a,
            'score_b': self.score_b,
            'attempt_count': self.attempt_count,
            'round_number': self.round_number,
            'state': self.state.value,
            'is_complete': self.is_complete,
            'attempts': [a.to_dict() for a in self.attempt_log()],
        }


@dataclass(frozen=True)
class MatchResult:
    """Final record of a match, written once when attempt 72 resolves."""
    match_id: str
    stage: int
    entrant_a: str
    entrant_b: str
    score_a: int
    score_b: int
    winner_id: str
    attempts: Tuple[Attempt, ...] = ()
    completed_at: str = ""

    @property
    def is_tie(self) -> bool:
        return self.score_a == self.score_b

    @property
    def loser_id(self) -> str:
        return self.entrant_b if self.winner_id == self.entrant_a else self.entrant_a

    def points_for(self, entrant_id: str) -> int:
        if entrant_id == self.entrant_a:
            return self.score_a
        if entrant_id == self.entrant_b:
            return self.score_b
        return 0

    def round_scores(self) -> List[Dict[str, int]]:
        """Points per side for each round, in round order."""
        rounds: Dict[int, Dict[str, int]] = {}
        for attempt in self.attempts:
            entry = rounds.setdefault(attempt.round_number, {'round': attempt.round_number, 'score_a': 0, 'score_b': 0})
            if attempt.attacking_entrant_id == self.entrant_a:
                entry['score_a'] += attempt.points
            else:
                entry['score_b'] += attempt.points
        return [rounds[r] for r in sorted(rounds)]

    def to_dict(self, include_attempts: bool = True) -> Dict[str, Any]:
        data = {
            'match_id': self.match_id,
            'stage': self.stage,
            'entrant_a': self.entrant_a,
            'entrant_b': self.entrant_b,
            'score_a': self.score_a,
            'score_b': self.score_b,
            'winner_id': self.winner_id,
            'completed_at': self.completed_at,
        }
        if include_attempts:
            data['attempts'] = [a.to_dict() for a in self.attempts]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MatchResult':
        return cls(
            match_id=data['match_id'],
            stage=data['stage'],
            entrant_a=data['entrant_a'],
            entrant_b=data['entrant_b'],
            score_a=data['score_a'],
            score_b=data['score_b'],
            winner_id=data['winner_id'],
            attempts=tuple(Attempt.from_dict(a) for a in data.get('attempts', [])),
            completed_at=data.get('completed_at', ""),
        )
