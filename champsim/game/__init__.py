from champsim.game.roster import RosterMember, Entrant, validate_roster, random_roster
from champsim.game.outcome import Outcome, OutcomeResolver, resolve, matchup_bonus
from champsim.game.match import (
    MatchState, Pairing, Attempt, OngoingMatch, MatchResult, attacking_side, round_for
)
from champsim.game.engine import MatchEngine, AttemptStep

__all__ = [
    'RosterMember',
    'Entrant',
    'validate_roster',
    'random_roster',
    'Outcome',
    'OutcomeResolver',
    'resolve',
    'matchup_bonus',
    'MatchState',
    'Pairing',
    'Attempt',
    'OngoingMatch',
    'MatchResult',
    'attacking_side',
    'round_for',
    'MatchEngine',
    'AttemptStep',
]
