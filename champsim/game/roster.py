"""
Roster data structures.

Rosters are owned outside the engine; matches only read them. Members are
frozen so a roster cannot change underneath a running match.
"""
import random
import uuid
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Any, Optional

from champsim.errors import InvalidRoster
from champsim.utils.constants import (
    SPORTS, ROSTER_SIZE, MIN_STAR_TIER, MAX_STAR_TIER, MAX_ROSTER_STARS
)


@dataclass(frozen=True)
class RosterMember:
    """A single competitive unit on an entrant's roster."""
    member_id: str
    name: str
    sport: str
    star_tier: int
    offensive_strength: int
    defensive_strength: int

    def __post_init__(self):
        if self.sport not in SPORTS:
            raise InvalidRoster(f"Unknown sport '{self.sport}' for {self.name}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RosterMember':
        """Create from dictionary."""
        return cls(**data)


@dataclass
class Entrant:
    """A championship participant and its roster."""
    entrant_id: str
    display_name: str
    roster: List[RosterMember] = field(default_factory=list)
    entered: bool = False
    total_points: int = 0
    match_wins: int = 0
    legacy_points: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['roster'] = [m.to_dict() for m in self.roster]
        return data


def validate_roster(roster: List[RosterMember]):
    """
    Check roster rules: exactly ROSTER_SIZE members with unique ids,
    star tiers within bounds, and a bounded star total.

    Raises:
        InvalidRoster: On the first rule broken
    """
    if len(roster) != ROSTER_SIZE:
        raise InvalidRoster(f"Roster must have {ROSTER_SIZE} members, got {len(roster)}")

    ids = [m.member_id for m in roster]
    if len(set(ids)) != len(ids):
        raise InvalidRoster("Roster member ids must be unique")

    for member in roster:
        if not MIN_STAR_TIER <= member.star_tier <= MAX_STAR_TIER:
            raise InvalidRoster(
                f"{member.name} has star tier {member.star_tier}, "
                f"expected {MIN_STAR_TIER}-{MAX_STAR_TIER}"
            )

    total_stars = sum(m.star_tier for m in roster)
    if total_stars > MAX_ROSTER_STARS:
        raise InvalidRoster(
            f"Roster star total {total_stars} exceeds {MAX_ROSTER_STARS}"
        )


def random_roster(rng: Optional[random.Random] = None, prefix: str = "member") -> List[RosterMember]:
    """
    Build a legal demo roster.

    Star tiers are drawn first, then trimmed until the star budget fits.
    Strengths scale with the star tier.

    Args:
        rng: Random source (module random if None)
        prefix: Prefix for member names

    Returns:
        List of ROSTER_SIZE members that passes validate_roster()
    """
    rng = rng or random.Random()

    tiers = [rng.randint(MIN_STAR_TIER, MAX_STAR_TIER) for _ in range(ROSTER_SIZE)]
    while sum(tiers) > MAX_ROSTER_STARS:
        i = tiers.index(max(tiers))
        tiers[i] -= 1

    roster = []
    for i, tier in enumerate(tiers):
        roster.append(RosterMember(
            member_id=uuid.UUID(int=rng.getrandbits(128)).hex,
            name=f"{prefix}-{i + 1}",
            sport=rng.choice(SPORTS),
            star_tier=tier,
            offensive_strength=tier * 10 + rng.randint(0, 20),
            defensive_strength=tier * 10 + rng.randint(0, 20),
        ))
    return roster
