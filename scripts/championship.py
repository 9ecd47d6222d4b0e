#!/usr/bin/env python3
"""
Run a multi-sport round-robin championship from the command line.

Usage:
    python scripts/championship.py --entrants 8

Examples:
    # Quick championship with 4 demo entrants
    python scripts/championship.py --entrants 4 --seed 7

    # Round-by-round ticks on 4 worker threads
    python scripts/championship.py --entrants 8 --mode round --workers 4

    # Use the entrants already entered in the store
    python scripts/championship.py --use-entered --data-dir data

    # Wipe the current championship first
    python scripts/championship.py --entrants 6 --reset
"""

import argparse
import logging
import random
import sys
from pathlib import Path

from tqdm import tqdm

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from champsim.errors import ChampionshipError
from champsim.game.roster import random_roster
from champsim.tournament.runner import ChampionshipRunner, ChampionshipConfig
from champsim.tournament.scheduler import total_matches
from champsim.tournament.display import (
    format_standings, format_match_result, format_championship_header, format_tick_report
)
from champsim.utils.constants import ATTEMPTS_PER_MATCH, ATTEMPTS_PER_ROUND, TICK_MODES, TICK_ROUND


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Run a round-robin championship between demo entrants.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        '--entrants', '-n',
        type=int, default=4,
        help='Number of demo entrants to register (even, default: 4)'
    )
    parser.add_argument(
        '--use-entered',
        action='store_true',
        help='Use the entrants already entered in the store instead of demo ones'
    )
    parser.add_argument(
        '--mode', '-m',
        type=str, default='attempt', choices=TICK_MODES,
        help='Tick granularity (default: attempt)'
    )
    parser.add_argument(
        '--workers', '-w',
        type=int, default=1,
        help='Threads advancing matches within a tick (default: 1)'
    )
    parser.add_argument(
        '--seed', '-s',
        type=int, default=None,
        help='Random seed for rosters and rolls'
    )
    parser.add_argument(
        '--reset',
        action='store_true',
        help='Reset any existing championship before starting'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log every tick'
    )
    parser.add_argument(
        '--data-dir',
        type=str, default='data',
        help='Directory for the championship database (default: data)'
    )

    return parser.parse_args()


def register_demo_entrants(runner: ChampionshipRunner, count: int, rng: random.Random) -> dict:
    """Register and enter `count` demo entrants. Returns id -> display name."""
    names = {}
    for i in range(1, count + 1):
        entrant_id = f"demo-{i:02d}"
        display_name = f"Demo Team {i}"
        roster = random_roster(rng, prefix=f"T{i}")
        runner.store.register_entrant(entrant_id, display_name, roster, entered=True)
        names[entrant_id] = display_name
    return names


def main():
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    )

    config = ChampionshipConfig(
        data_dir=args.data_dir,
        tick_mode=args.mode,
        max_workers=args.workers,
        seed=args.seed
    )
    runner = ChampionshipRunner(config)

    if args.reset:
        runner.reset()

    if args.use_entered:
        names = {e.entrant_id: e.display_name
                 for e in runner.store.list_entrant_records(entered_only=True)}
        entrant_ids = None
    else:
        names = register_demo_entrants(runner, args.entrants, random.Random(args.seed))
        entrant_ids = list(names)

    try:
        state = runner.start(entrant_ids)
    except ChampionshipError as e:
        print(f"Error: {e}")
        return 1

    print(format_championship_header(
        state.championship_id,
        len(state.entrant_ids),
        state.total_stages,
        total_matches(len(state.entrant_ids))
    ))

    ticks_per_stage = ATTEMPTS_PER_MATCH
    if args.mode == TICK_ROUND:
        ticks_per_stage = ATTEMPTS_PER_MATCH // ATTEMPTS_PER_ROUND

    with tqdm(total=state.total_stages * ticks_per_stage, unit='tick') as progress:
        def on_tick(report):
            progress.update(1)
            for result in report.completed:
                tqdm.write(format_match_result(result, names))
            if report.errors:
                tqdm.write(format_tick_report(report))
                for match_id, error in report.errors.items():
                    tqdm.write(f"  {match_id}: {error}")

        try:
            runner.run_to_completion(on_tick=on_tick)
        except ChampionshipError as e:
            print(f"Error: {e}")
            return 1

    print()
    print(format_standings(runner.standings(), names, title="FINAL STANDINGS"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
