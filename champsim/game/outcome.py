"""
Attempt outcome resolution.

end_value = attacker offense - defender defense + matchup bonus + roll

- end_value < 100: defensive success, 0 points, action from the defender's
  sport defense table
- end_value >= 100: offensive success, points and action from the attacker's
  sport offense table

The roll is the only randomness and comes from an injected source, so a
resolver given a fixed roll is fully deterministic.
"""
import random
from dataclasses import dataclass, asdict
from typing import Dict, List, Any, Optional, Tuple

from champsim.errors import UnresolvedOutcomeBucket
from champsim.game.roster import RosterMember
from champsim.utils.constants import (
    MATCHUP_BONUS, OFFENSE_RANKINGS, DEFENSE_RANKINGS,
    SCORING_THRESHOLD, ROLL_MIN, ROLL_MAX
)


@dataclass(frozen=True)
class Outcome:
    """Result of a single attempt."""
    points: int
    action: str
    description: str
    success: bool = False
    roll: int = 0
    end_value: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Outcome':
        """Create from dictionary."""
        return cls(**data)


def _in_bucket(value: int, low: Optional[int], high: Optional[int]) -> bool:
    return (low is None or value >= low) and (high is None or value <= high)


class OutcomeResolver:
    """
    Resolves attacker-vs-defender attempts against ranking tables.

    The default tables are exhaustive; custom tables can be passed in, and a
    gap in them surfaces as UnresolvedOutcomeBucket instead of a silent miss.
    """

    def __init__(
        self,
        matchup_bonus: Optional[Dict[Tuple[str, str], int]] = None,
        offense_rankings: Optional[Dict[str, List[tuple]]] = None,
        defense_rankings: Optional[Dict[str, List[tuple]]] = None
    ):
        self.matchup_bonus = matchup_bonus or MATCHUP_BONUS
        self.offense_rankings = offense_rankings or OFFENSE_RANKINGS
        self.defense_rankings = defense_rankings or DEFENSE_RANKINGS

    def bonus(self, attacker_sport: str, defender_sport: str) -> int:
        """Get the sport-vs-sport bonus for an attacker/defender pairing."""
        return self.matchup_bonus[(attacker_sport, defender_sport)]

    def end_value(self, attacker: RosterMember, defender: RosterMember, roll: int) -> int:
        """Compute the end value for a given roll."""
        return (
            attacker.offensive_strength
            - defender.defensive_strength
            + self.bonus(attacker.sport, defender.sport)
            + roll
        )

    def resolve(
        self,
        attacker: RosterMember,
        defender: RosterMember,
        rng: Optional[random.Random] = None
    ) -> Outcome:
        """
        Resolve an attempt with a fresh d100 roll.

        Args:
            attacker: Attacking roster member
            defender: Defending roster member
            rng: Random source providing randint() (module random if None)

        Returns:
            Outcome of the attempt

        Raises:
            UnresolvedOutcomeBucket: If the tables do not cover the end value
        """
        roll = (rng or random).randint(ROLL_MIN, ROLL_MAX)
        return self.resolve_roll(attacker, defender, roll)

    def resolve_roll(self, attacker: RosterMember, defender: RosterMember, roll: int) -> Outcome:
        """Resolve an attempt for a known roll."""
        value = self.end_value(attacker, defender, roll)

        if value < SCORING_THRESHOLD:
            for low, high, action in self.defense_rankings[defender.sport]:
                if _in_bucket(value, low, high):
                    return Outcome(
                        points=0,
                        action=action,
                        description=(
                            f"{defender.name} ({defender.sport}) stopped "
                            f"{attacker.name} ({attacker.sport}) with a {action}."
                        ),
                        success=False,
                        roll=roll,
                        end_value=value,
                    )
            raise UnresolvedOutcomeBucket(
                defender.sport, value, self._fail_closed(attacker, defender, roll, value)
            )

        for low, high, points, action in self.offense_rankings[attacker.sport]:
            if _in_bucket(value, low, high):
                return Outcome(
                    points=points,
                    action=action,
                    description=(
                        f"{attacker.name} ({attacker.sport}) scored {points} points "
                        f"with a {action} against {defender.name} ({defender.sport})."
                    ),
                    success=True,
                    roll=roll,
                    end_value=value,
                )
        raise UnresolvedOutcomeBucket(
            attacker.sport, value, self._fail_closed(attacker, defender, roll, value)
        )

    @staticmethod
    def _fail_closed(attacker: RosterMember, defender: RosterMember, roll: int, value: int) -> Outcome:
        return Outcome(
            points=0,
            action="unresolved",
            description=(
                f"No ranking bucket for end value {value} "
                f"({attacker.name} vs {defender.name})."
            ),
            success=False,
            roll=roll,
            end_value=value,
        )


_default_resolver = OutcomeResolver()


def resolve(attacker: RosterMember, defender: RosterMember, rng: Optional[random.Random] = None) -> Outcome:
    """Resolve an attempt with the standard tables."""
    return _default_resolver.resolve(attacker, defender, rng)


def matchup_bonus(attacker_sport: str, defender_sport: str) -> int:
    """Standard sport-vs-sport bonus."""
    return _default_resolver.bonus(attacker_sport, defender_sport)
