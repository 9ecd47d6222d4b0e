"""
Tournament module for running round-robin championships.

Provides:
- generate_stages: Circle-method stage scheduling
- ChampionshipRunner: Orchestrates championship execution
- SQLiteChampionshipStore: Persists entrants, matches and results
"""

from champsim.tournament.scheduler import generate_stages, num_stages, total_matches
from champsim.tournament.standings import StandingEntry, apply_result, recompute
from champsim.tournament.state import ChampionshipState
from champsim.tournament.storage import ChampionshipStore, SQLiteChampionshipStore
from champsim.tournament.runner import ChampionshipConfig, ChampionshipRunner, TickReport
from champsim.tournament.display import format_standings, format_match_result

__all__ = [
    'generate_stages',
    'num_stages',
    'total_matches',
    'StandingEntry',
    'apply_result',
    'recompute',
    'ChampionshipState',
    'ChampionshipStore',
    'SQLiteChampionshipStore',
    'ChampionshipConfig',
    'ChampionshipRunner',
    'TickReport',
    'format_standings',
    'format_match_result',
]
