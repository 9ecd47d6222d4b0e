"""
Tests for round-robin stage scheduling.
"""

import itertools

import pytest

from champsim.errors import InvalidEntrantCount
from champsim.game.match import Pairing
from champsim.tournament.scheduler import generate_stages, num_stages, total_matches


class TestGenerateStages:
    """Tests for the circle-method scheduler."""

    def test_four_entrants_exact_output(self):
        """[A,B,C,D] gives the exact circle-method stages, in order."""
        stages = generate_stages(['A', 'B', 'C', 'D'])

        assert [[p.as_tuple() for p in stage] for stage in stages] == [
            [('A', 'D'), ('B', 'C')],
            [('A', 'C'), ('D', 'B')],
            [('A', 'B'), ('C', 'D')],
        ]

    def test_two_entrants(self):
        stages = generate_stages(['x', 'y'])
        assert len(stages) == 1
        assert stages[0][0].as_tuple() == ('x', 'y')

    @pytest.mark.parametrize("n", [2, 4, 6, 8, 10, 16])
    def test_completeness(self, n):
        """n-1 stages of n/2 pairings, every pair exactly once, everyone once per stage."""
        ids = [f"e{i}" for i in range(n)]
        stages = generate_stages(ids)

        assert len(stages) == n - 1
        seen = []
        for stage in stages:
            assert len(stage) == n // 2
            in_stage = [eid for p in stage for eid in p.as_tuple()]
            assert sorted(in_stage) == sorted(ids)
            seen.extend(p.key for p in stage)

        expected = {frozenset(pair) for pair in itertools.combinations(ids, 2)}
        assert len(seen) == len(expected)
        assert set(seen) == expected

    @pytest.mark.parametrize("n", [1, 3, 5, 7])
    def test_odd_count_rejected(self, n):
        with pytest.raises(InvalidEntrantCount):
            generate_stages([f"e{i}" for i in range(n)])

    def test_empty_rejected(self):
        with pytest.raises(InvalidEntrantCount):
            generate_stages([])

    def test_duplicates_rejected(self):
        with pytest.raises(InvalidEntrantCount):
            generate_stages(['a', 'b', 'a', 'c'])

    def test_input_not_modified(self):
        ids = ['a', 'b', 'c', 'd']
        generate_stages(ids)
        assert ids == ['a', 'b', 'c', 'd']

    def test_invalid_count_is_value_error(self):
        """InvalidEntrantCount doubles as ValueError."""
        with pytest.raises(ValueError):
            generate_stages(['a', 'b', 'c'])


class TestCounts:
    """Tests for schedule size helpers."""

    def test_num_stages(self):
        assert num_stages(2) == 1
        assert num_stages(8) == 7

    def test_total_matches(self):
        assert total_matches(4) == 6
        assert total_matches(8) == 28


class TestPairing:
    """Tests for the Pairing value type."""

    def test_unordered_equality(self):
        assert Pairing('a', 'b') == Pairing('b', 'a')
        assert hash(Pairing('a', 'b')) == hash(Pairing('b', 'a'))
        assert Pairing('a', 'b') != Pairing('a', 'c')

    def test_dict_round_trip(self):
        pairing = Pairing('a', 'b')
        restored = Pairing.from_dict(pairing.to_dict())
        assert restored.as_tuple() == ('a', 'b')
