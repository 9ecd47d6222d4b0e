"""
Round-robin championship scheduling.

Splits a field into stages with the circle method: every entrant plays exactly
once per stage and every pair of entrants meets in exactly one stage.
"""

from typing import List

from champsim.errors import InvalidEntrantCount
from champsim.game.match import Pairing


def generate_stages(entrant_ids: List[str]) -> List[List[Pairing]]:
    """
    Generate every stage of a round-robin championship.

    The first entrant stays fixed. In each stage position i is paired with
    position n-1-i; afterwards the last entrant moves to position 1 and the
    rest shift right by one.

    Args:
        entrant_ids: Ordered entrant ids (even count, at least 2)

    Returns:
        n-1 stages, each a list of n/2 pairings

    Raises:
        InvalidEntrantCount: If the count is odd, below 2, or has duplicates
    """
    n = len(entrant_ids)
    if n < 2 or n % 2 != 0:
        raise InvalidEntrantCount(n)
    if len(set(entrant_ids)) != n:
        raise InvalidEntrantCount(n, "Entrant ids must be unique")

    ids = list(entrant_ids)
    stages = []
    for _ in range(n - 1):
        stages.append([
            Pairing(entrant_a=ids[i], entrant_b=ids[n - 1 - i])
            for i in range(n // 2)
        ])
        ids = [ids[0], ids[-1]] + ids[1:-1]

    return stages


def num_stages(entrant_count: int) -> int:
    """Number of stages for a field of the given size."""
    return entrant_count - 1


def total_matches(entrant_count: int) -> int:
    """Number of matches in a full round-robin."""
    return entrant_count * (entrant_count - 1) // 2
