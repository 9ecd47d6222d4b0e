"""
Shared builders for championship tests.
"""

from typing import List

from champsim.game.roster import RosterMember
from champsim.utils.constants import BASEBALL


class FixedRoll:
    """Random source whose randint() always returns the same roll."""

    def __init__(self, roll: int):
        self.roll = roll
        self.calls = 0

    def randint(self, a: int, b: int) -> int:
        self.calls += 1
        return self.roll


class SequenceRoll:
    """Random source cycling through a fixed list of rolls."""

    def __init__(self, rolls: List[int]):
        self.rolls = list(rolls)
        self.index = 0

    def randint(self, a: int, b: int) -> int:
        roll = self.rolls[self.index % len(self.rolls)]
        self.index += 1
        return roll


def make_member(
    member_id: str,
    sport: str = BASEBALL,
    offense: int = 50,
    defense: int = 20,
    star_tier: int = 2
) -> RosterMember:
    return RosterMember(
        member_id=member_id,
        name=member_id,
        sport=sport,
        star_tier=star_tier,
        offensive_strength=offense,
        defensive_strength=defense,
    )


def make_roster(prefix: str, sport: str = BASEBALL, offense: int = 50, defense: int = 20) -> List[RosterMember]:
    """Five identical-strength members; 10 stars total."""
    return [make_member(f"{prefix}-{i}", sport, offense, defense) for i in range(5)]


def register(store, entrant_ids, sport: str = BASEBALL, offense: int = 50, defense: int = 20, entered: bool = True):
    """Register uniform rosters for each id."""
    for entrant_id in entrant_ids:
        store.register_entrant(
            entrant_id,
            entrant_id.upper(),
            make_roster(entrant_id, sport, offense, defense),
            entered=entered,
        )
