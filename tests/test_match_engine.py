"""
Tests for the match state machine.
"""

import logging
import sqlite3
import tempfile

import pytest

from champsim.errors import (
    AlreadyComplete, ConcurrentModification, MatchIncomplete, MatchNotFound,
    MissingRosterData, UnresolvedOutcomeBucket
)
from champsim.game.engine import MatchEngine
from champsim.game.match import MatchState, Pairing, attacking_side, round_for
from champsim.game.outcome import OutcomeResolver
from champsim.tournament.storage import SQLiteChampionshipStore
from champsim.utils.constants import (
    ATTEMPTS_PER_MATCH, BASEBALL, DEFENSE_RANKINGS, SIDE_A, SIDE_B
)

from helpers import FixedRoll, SequenceRoll, make_roster, register


def open_match(store, rng, a='a', b='b', resolver=None):
    engine = MatchEngine(store, resolver=resolver, rng=rng)
    match_id = engine.open(Pairing(a, b), stage=1, match_id='m1')
    return engine, match_id


class TestAttackingSide:
    """Tests for side and round helpers."""

    def test_blocks_of_six(self):
        sides = [attacking_side(c) for c in range(ATTEMPTS_PER_MATCH)]
        for block in range(12):
            expected = SIDE_A if block % 2 == 0 else SIDE_B
            assert sides[block * 6:(block + 1) * 6] == [expected] * 6

    def test_round_for(self):
        assert round_for(0) == 1
        assert round_for(5) == 1
        assert round_for(6) == 2
        assert round_for(71) == 12


class TestMatchEngine:
    """Tests for MatchEngine against a SQLite store."""

    def test_open_creates_empty_match(self, temp_store):
        register(temp_store, ['a', 'b'])
        _, match_id = open_match(temp_store, FixedRoll(50))

        match = temp_store.read_match(match_id)
        assert match.attempt_count == 0
        assert match.score_a == 0 and match.score_b == 0
        assert match.attempts == {}
        assert match.state == MatchState.NOT_STARTED

    def test_full_match_attempt_log(self, temp_store):
        """72 attempts numbered 1..72, attacking side alternating in blocks of 6."""
        register(temp_store, ['a', 'b'])
        engine, match_id = open_match(temp_store, SequenceRoll([10, 65, 90, 30, 100, 1]))

        result = engine.play_match(match_id)

        assert len(result.attempts) == ATTEMPTS_PER_MATCH
        assert [a.attempt_number for a in result.attempts] == list(range(1, 73))

        for block in range(12):
            attackers = {a.attacking_entrant_id for a in result.attempts[block * 6:(block + 1) * 6]}
            assert attackers == ({'a'} if block % 2 == 0 else {'b'})
            rounds = {a.round_number for a in result.attempts[block * 6:(block + 1) * 6]}
            assert rounds == {block + 1}

        assert temp_store.read_match(match_id) is None
        assert temp_store.get_match_result(match_id) == result

    def test_cyclic_member_selection(self, temp_store):
        """Attacker and defender are roster[count % 5]."""
        register(temp_store, ['a', 'b'])
        engine, match_id = open_match(temp_store, FixedRoll(50))

        for count in range(12):
            step = engine.advance_one_attempt(match_id)
            attempt = step.attempt
            att, dfn = ('a', 'b') if attacking_side(count) == SIDE_A else ('b', 'a')
            assert attempt.attacker_member_id == f"{att}-{count % 5}"
            assert attempt.defender_member_id == f"{dfn}-{count % 5}"

    def test_score_matches_attempts(self, temp_store):
        """Each side's score equals the points of the attempts it attacked."""
        register(temp_store, ['a', 'b'])
        engine, match_id = open_match(temp_store, SequenceRoll([65, 20, 100, 45]))

        for _ in range(20):
            engine.advance_one_attempt(match_id)

        match = temp_store.read_match(match_id)
        assert match.attempt_count == 20
        assert match.state == MatchState.IN_PROGRESS
        assert match.score_a == sum(a.points for a in match.attempts.values() if a.attacking_entrant_id == 'a')
        assert match.score_b == sum(a.points for a in match.attempts.values() if a.attacking_entrant_id == 'b')

    def test_higher_score_wins(self, temp_store):
        temp_store.register_entrant('a', 'A', make_roster('a', offense=50))
        temp_store.register_entrant('b', 'B', make_roster('b', offense=200))
        engine, match_id = open_match(temp_store, FixedRoll(1))

        result = engine.play_match(match_id)

        # a: 50-20+10+1 = 41 -> 0 points; b: 200-20+10+1 = 191 -> triple
        assert result.score_a == 0
        assert result.score_b == 36 * 30
        assert result.winner_id == 'b'
        assert result.loser_id == 'a'

    def test_tie_goes_to_side_a(self, temp_store):
        """Identical rosters and rolls give an exact tie, won by side A."""
        register(temp_store, ['a', 'b'])
        engine, match_id = open_match(temp_store, FixedRoll(65))

        result = engine.play_match(match_id)

        assert result.score_a == result.score_b == 360
        assert result.is_tie
        assert result.winner_id == 'a'

    def test_tie_follows_side_not_id(self, temp_store):
        register(temp_store, ['a', 'z'])
        engine = MatchEngine(temp_store, rng=FixedRoll(65))
        match_id = engine.open(Pairing('z', 'a'), stage=1, match_id='m-z')

        result = engine.play_match(match_id)
        assert result.winner_id == 'z'

    def test_already_complete(self, temp_store):
        register(temp_store, ['a', 'b'])
        engine, match_id = open_match(temp_store, FixedRoll(50))
        engine.play_match(match_id)

        with pytest.raises(AlreadyComplete):
            engine.advance_one_attempt(match_id)

    def test_finalize_before_last_attempt(self, temp_store):
        register(temp_store, ['a', 'b'])
        engine, match_id = open_match(temp_store, FixedRoll(60))
        for _ in range(10):
            engine.advance_one_attempt(match_id)

        with pytest.raises(MatchIncomplete) as exc_info:
            engine.finalize(match_id)

        assert exc_info.value.attempt_count == 10
        assert temp_store.read_match(match_id).attempt_count == 10
        assert temp_store.get_match_result(match_id) is None

    def test_unknown_match(self, temp_store):
        engine = MatchEngine(temp_store, rng=FixedRoll(50))
        with pytest.raises(MatchNotFound):
            engine.advance_one_attempt('nope')

    def test_missing_roster_leaves_match_unchanged(self, temp_store):
        register(temp_store, ['a'])
        engine, match_id = open_match(temp_store, FixedRoll(50), a='a', b='ghost')

        # Side A attacks first, so the defending roster is the missing one
        with pytest.raises(MissingRosterData) as exc_info:
            engine.advance_one_attempt(match_id)

        assert exc_info.value.entrant_id == 'ghost'
        match = temp_store.read_match(match_id)
        assert match.attempt_count == 0
        assert match.attempts == {}

    def test_missing_roster_is_retryable(self, temp_store):
        register(temp_store, ['a'])
        engine, match_id = open_match(temp_store, FixedRoll(50))

        with pytest.raises(MissingRosterData):
            engine.advance_one_attempt(match_id)

        register(temp_store, ['b'])
        step = engine.advance_one_attempt(match_id)
        assert step.attempt.attempt_number == 1

    def test_unresolved_bucket_aborts_attempt(self, temp_store, caplog):
        gappy = dict(DEFENSE_RANKINGS)
        gappy[BASEBALL] = [(None, 10, "catch")]
        register(temp_store, ['a', 'b'])
        engine, match_id = open_match(
            temp_store, FixedRoll(45), resolver=OutcomeResolver(defense_rankings=gappy)
        )

        with caplog.at_level(logging.ERROR, logger="champsim.game.engine"):
            with pytest.raises(UnresolvedOutcomeBucket):
                engine.advance_one_attempt(match_id)

        assert any(r.levelno == logging.ERROR for r in caplog.records)
        match = temp_store.read_match(match_id)
        assert match.attempt_count == 0
        assert match.score_a == 0

    def test_stale_read_conflicts(self, temp_store, monkeypatch):
        """An advance computed from an outdated count is rejected."""
        register(temp_store, ['a', 'b'])
        engine, match_id = open_match(temp_store, FixedRoll(65))

        stale = temp_store.read_match(match_id)
        engine.advance_one_attempt(match_id)

        monkeypatch.setattr(temp_store, 'read_match', lambda mid: stale)
        with pytest.raises(ConcurrentModification):
            engine.advance_one_attempt(match_id)

        monkeypatch.undo()
        match = temp_store.read_match(match_id)
        assert match.attempt_count == 1
        assert len(match.attempts) == 1
        assert match.score_a == 10

    def test_finalize_recovers_after_failed_archive(self):
        """A match left at 72 attempts without a result is finalized on the next advance."""

        class FlakyArchiveStore(SQLiteChampionshipStore):
            fail_next = True

            def archive_match(self, match_id, result):
                if self.fail_next:
                    self.fail_next = False
                    raise sqlite3.OperationalError("disk I/O error")
                super().archive_match(match_id, result)

        with tempfile.TemporaryDirectory() as tmpdir:
            store = FlakyArchiveStore(tmpdir)
            register(store, ['a', 'b'])
            engine, match_id = open_match(store, FixedRoll(65))

            with pytest.raises(sqlite3.OperationalError):
                engine.play_match(match_id)
            assert store.read_match(match_id).attempt_count == ATTEMPTS_PER_MATCH

            step = engine.advance_one_attempt(match_id)
            assert step.attempt is None
            assert step.finalized
            assert store.get_match_result(match_id).score_a == 360
