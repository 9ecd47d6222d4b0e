"""
Utilities module for the championship engine.
"""
from champsim.utils.constants import (
    ATTEMPTS_PER_ROUND, ROUNDS_PER_MATCH, ATTEMPTS_PER_MATCH,
    ROSTER_SIZE, MAX_ROSTER_STARS, SIDE_A, SIDE_B, TIE_BREAK_SIDE,
    BASEBALL, BASKETBALL, SOCCER, SPORTS,
    MATCHUP_BONUS, OFFENSE_RANKINGS, DEFENSE_RANKINGS,
    IDLE, ACTIVE, FINISHED, TICK_ATTEMPT, TICK_ROUND, TICK_MODES
)

__all__ = [
    'ATTEMPTS_PER_ROUND', 'ROUNDS_PER_MATCH', 'ATTEMPTS_PER_MATCH',
    'ROSTER_SIZE', 'MAX_ROSTER_STARS', 'SIDE_A', 'SIDE_B', 'TIE_BREAK_SIDE',
    'BASEBALL', 'BASKETBALL', 'SOCCER', 'SPORTS',
    'MATCHUP_BONUS', 'OFFENSE_RANKINGS', 'DEFENSE_RANKINGS',
    'IDLE', 'ACTIVE', 'FINISHED', 'TICK_ATTEMPT', 'TICK_ROUND', 'TICK_MODES',
]
