"""
Main script to simulate a single match between two demo rosters.
"""
import argparse
import logging
import random
import sys
import tempfile
import time

from champsim.game.engine import MatchEngine
from champsim.game.match import Pairing
from champsim.game.roster import random_roster
from champsim.tournament.display import format_attempt_log, format_match_result
from champsim.tournament.storage import SQLiteChampionshipStore


def print_roster(name: str, roster):
    """Print a roster as a small table."""
    print(f"{name}")
    print(f"  {'Member':<12}{'Sport':<12}{'Stars':<7}{'Off':<6}{'Def':<6}")
    for m in roster:
        print(f"  {m.name:<12}{m.sport:<12}{m.star_tier:<7}{m.offensive_strength:<6}{m.defensive_strength:<6}")
    print()


def run_match(store: SQLiteChampionshipStore, seed=None, verbose: bool = True):
    """
    Register two demo entrants and play one match between them.

    Returns:
        The archived MatchResult
    """
    rng = random.Random(seed)
    names = {"home": "Home", "away": "Away"}

    for entrant_id, display_name in names.items():
        roster = random_roster(rng, prefix=display_name)
        store.register_entrant(entrant_id, display_name, roster)
        if verbose:
            print_roster(display_name, roster)

    engine = MatchEngine(store, rng=rng)
    match_id = engine.open(Pairing("home", "away"), stage=1, match_id=f"exhibition-{int(time.time())}")
    result = engine.play_match(match_id)

    if verbose:
        print(format_attempt_log(result, names))
    else:
        print(format_match_result(result, names))
    return result


def main():
    """Main function to parse arguments and run the match."""
    parser = argparse.ArgumentParser(
        description='Simulate a single 72-attempt match between two demo rosters.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --seed 42
  python main.py --quiet --data-dir data
'''
    )
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for rosters and rolls')
    parser.add_argument('--quiet', action='store_true',
                        help='Only print the final score')
    parser.add_argument('--data-dir', type=str, default=None,
                        help='Keep the match in this directory (temporary if omitted)')

    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format='[%(levelname)s] %(name)s: %(message)s')

    if args.data_dir:
        run_match(SQLiteChampionshipStore(args.data_dir), args.seed, verbose=not args.quiet)
    else:
        with tempfile.TemporaryDirectory() as tmpdir:
            run_match(SQLiteChampionshipStore(tmpdir), args.seed, verbose=not args.quiet)
    return 0


if __name__ == "__main__":
    sys.exit(main())
