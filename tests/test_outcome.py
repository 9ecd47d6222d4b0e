"""
Tests for attempt outcome resolution.
"""

import pytest

from champsim.errors import UnresolvedOutcomeBucket, InvalidRoster
from champsim.game.outcome import Outcome, OutcomeResolver, resolve, matchup_bonus
from champsim.game.roster import RosterMember
from champsim.utils.constants import (
    BASEBALL, BASKETBALL, SOCCER, SPORTS, DEFENSE_RANKINGS, OFFENSE_RANKINGS
)

from helpers import FixedRoll, make_member


class TestMatchupBonus:
    """Tests for the sport-vs-sport bonus table."""

    def test_full_table(self):
        """Bonus table matches attacker row / defender column exactly."""
        expected = {
            (BASEBALL, BASEBALL): 10, (BASEBALL, BASKETBALL): 20, (BASEBALL, SOCCER): 40,
            (BASKETBALL, BASEBALL): 40, (BASKETBALL, BASKETBALL): 10, (BASKETBALL, SOCCER): 20,
            (SOCCER, BASEBALL): 20, (SOCCER, BASKETBALL): 40, (SOCCER, SOCCER): 10,
        }
        for (att, dfn), bonus in expected.items():
            assert matchup_bonus(att, dfn) == bonus

    def test_asymmetric(self):
        """Each sport has one 40 and one 20 against the other two."""
        for sport in SPORTS:
            others = sorted(matchup_bonus(sport, o) for o in SPORTS if o != sport)
            assert others == [20, 40]


class TestResolver:
    """Tests for OutcomeResolver."""

    def test_defensive_success_scenario(self):
        """50 - 20 + 10 + 45 = 85 is a defensive success."""
        attacker = make_member("att", BASEBALL, offense=50)
        defender = make_member("def", BASEBALL, defense=20)

        outcome = resolve(attacker, defender, FixedRoll(45))

        assert outcome.end_value == 85
        assert outcome.points == 0
        assert outcome.success is False
        assert outcome.action == "leap"
        assert "stopped" in outcome.description

    def test_offensive_success_scenario(self):
        """50 - 20 + 10 + 65 = 105 lands in the lowest offense bucket."""
        attacker = make_member("att", BASEBALL, offense=50)
        defender = make_member("def", BASEBALL, defense=20)

        outcome = resolve(attacker, defender, FixedRoll(65))

        assert outcome.end_value == 105
        assert outcome.points == 10
        assert outcome.action == "single"
        assert outcome.success is True

    def test_boundary_is_offense(self):
        """An end value of exactly 100 scores, 99 does not."""
        attacker = make_member("att", SOCCER, offense=50)
        defender = make_member("def", BASEBALL, defense=20)
        resolver = OutcomeResolver()
        # 50 - 20 + 20 = 50, so roll 50 gives exactly 100
        at_threshold = resolver.resolve_roll(attacker, defender, 50)
        below = resolver.resolve_roll(attacker, defender, 49)

        assert at_threshold.end_value == 100
        assert at_threshold.points == 10
        assert at_threshold.action == "pass"
        assert below.end_value == 99
        assert below.points == 0

    def test_top_buckets_unbounded(self):
        """Very high end values hit the top bucket of each sport."""
        resolver = OutcomeResolver()
        defender = make_member("def", BASEBALL, defense=0)
        expected = {BASEBALL: (50, "homerun"), BASKETBALL: (30, "three-pointer"), SOCCER: (65, "goal")}

        for sport, (points, action) in expected.items():
            attacker = make_member("att", sport, offense=500)
            outcome = resolver.resolve_roll(attacker, defender, 100)
            assert outcome.points == points
            assert outcome.action == action

    def test_defense_action_from_defender_sport(self):
        """Defense action comes from the defender's table."""
        resolver = OutcomeResolver()
        attacker = make_member("att", BASEBALL, offense=0)
        defender = make_member("def", BASKETBALL, defense=0)
        # 0 - 0 + 20 + 1 = 21
        outcome = resolver.resolve_roll(attacker, defender, 1)
        assert outcome.action == "block"
        assert "Basketball" in outcome.description

    def test_default_tables_cover_reachable_values(self):
        """No reachable end value falls outside the default tables."""
        resolver = OutcomeResolver()
        for att_sport in SPORTS:
            for def_sport in SPORTS:
                for offense in (0, 40, 120, 300):
                    for defense in (0, 60, 200):
                        attacker = make_member("a", att_sport, offense=offense)
                        defender = make_member("d", def_sport, defense=defense)
                        for roll in range(1, 101):
                            outcome = resolver.resolve_roll(attacker, defender, roll)
                            assert outcome.points >= 0

    def test_uses_injected_random_source(self):
        """Exactly one roll is drawn per resolution."""
        rng = FixedRoll(70)
        resolve(make_member("a"), make_member("d"), rng)
        assert rng.calls == 1

    def test_unresolved_bucket_fails_closed(self):
        """A gap in custom tables raises with a zero-point outcome attached."""
        gappy_defense = dict(DEFENSE_RANKINGS)
        gappy_defense[BASEBALL] = [(None, 49, "catch")]
        resolver = OutcomeResolver(defense_rankings=gappy_defense)

        attacker = make_member("att", BASEBALL, offense=50)
        defender = make_member("def", BASEBALL, defense=20)

        with pytest.raises(UnresolvedOutcomeBucket) as exc_info:
            resolver.resolve_roll(attacker, defender, 45)

        assert exc_info.value.end_value == 85
        assert exc_info.value.outcome.points == 0

    def test_unresolved_offense_bucket(self):
        """Gaps in offense tables are reported too."""
        gappy_offense = dict(OFFENSE_RANKINGS)
        gappy_offense[SOCCER] = [(100, 120, 10, "pass")]
        resolver = OutcomeResolver(offense_rankings=gappy_offense)

        with pytest.raises(UnresolvedOutcomeBucket):
            resolver.resolve_roll(make_member("a", SOCCER, offense=200), make_member("d", SOCCER, defense=0), 50)


class TestOutcomeRecords:
    """Tests for Outcome and RosterMember records."""

    def test_outcome_dict(self):
        outcome = Outcome(points=20, action="double", description="x", success=True, roll=77, end_value=140)
        assert Outcome.from_dict(outcome.to_dict()) == outcome

    def test_unknown_sport_rejected(self):
        with pytest.raises(InvalidRoster):
            RosterMember("m", "m", "Cricket", 1, 10, 10)

    def test_member_is_frozen(self):
        member = make_member("m")
        with pytest.raises(Exception):
            member.offensive_strength = 99
