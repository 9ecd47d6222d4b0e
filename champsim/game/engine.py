"""
Match state machine.

Advances an ongoing match one attempt at a time. Each attempt reads the match,
picks attacker and defender cyclically from the two rosters, resolves the
outcome, and appends it conditioned on the attempt count it was computed from.
After the 72nd attempt the match is finalized and archived.
"""
import logging
import random
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from champsim.errors import (
    AlreadyComplete, MatchIncomplete, MatchNotFound, MissingRosterData,
    UnresolvedOutcomeBucket
)
from champsim.game.match import (
    Attempt, MatchResult, OngoingMatch, Pairing, attacking_side, round_for
)
from champsim.game.outcome import OutcomeResolver
from champsim.utils.constants import ATTEMPTS_PER_MATCH, SIDE_A, SIDE_B, TIE_BREAK_SIDE

logger = logging.getLogger(__name__)


@dataclass
class AttemptStep:
    """What a single advance produced."""
    match_id: str
    attempt: Optional[Attempt] = None
    result: Optional[MatchResult] = None

    @property
    def finalized(self) -> bool:
        return self.result is not None


class MatchEngine:
    """
    Drives matches stored in a ChampionshipStore.

    The engine holds no match state of its own; everything is read from and
    written to the store, so several engines (or threads) can share one store.
    """

    def __init__(self, store, resolver: Optional[OutcomeResolver] = None, rng: Optional[random.Random] = None):
        """
        Args:
            store: ChampionshipStore implementation
            resolver: Outcome resolver (standard tables if None)
            rng: Random source for rolls (fresh Random if None)
        """
        self.store = store
        self.resolver = resolver or OutcomeResolver()
        self.rng = rng or random.Random()

    def open(self, pairing: Pairing, stage: int, match_id: Optional[str] = None) -> str:
        """Create an ongoing match for a pairing. Returns the match id."""
        match_id = self.store.create_match(pairing, stage, match_id)
        logger.debug("Opened match %s (%s vs %s, stage %d)",
                     match_id, pairing.entrant_a, pairing.entrant_b, stage)
        return match_id

    def _load(self, match_id: str) -> OngoingMatch:
        match = self.store.read_match(match_id)
        if match is None:
            if self.store.get_match_result(match_id) is not None:
                raise AlreadyComplete(match_id)
            raise MatchNotFound(match_id)
        if match.is_complete:
            raise AlreadyComplete(match_id)
        return match

    def advance_one_attempt(self, match_id: str) -> AttemptStep:
        """
        Resolve and record the next attempt of a match.

        Returns:
            AttemptStep with the new attempt, plus the result if this was the
            final attempt

        Raises:
            AlreadyComplete: Match already archived
            MatchNotFound: Unknown match id
            MissingRosterData: Either roster is absent; nothing is written
            UnresolvedOutcomeBucket: No ranking bucket matched; nothing is written
            ConcurrentModification: Another writer appended first
        """
        match = self._load(match_id)
        count = match.attempt_count

        # Last attempt landed but finalize never ran
        if count >= ATTEMPTS_PER_MATCH:
            logger.warning("Match %s has all attempts but no result, finalizing", match_id)
            return AttemptStep(match_id=match_id, result=self.finalize(match_id))

        side = attacking_side(count)
        attacking_id = match.entrant_for(side)
        defending_id = match.entrant_for(SIDE_B if side == SIDE_A else SIDE_A)

        attacking_roster = self.store.get_roster(attacking_id)
        if not attacking_roster:
            raise MissingRosterData(attacking_id, match_id)
        defending_roster = self.store.get_roster(defending_id)
        if not defending_roster:
            raise MissingRosterData(defending_id, match_id)

        attacker = attacking_roster[count % len(attacking_roster)]
        defender = defending_roster[count % len(defending_roster)]

        try:
            outcome = self.resolver.resolve(attacker, defender, self.rng)
        except UnresolvedOutcomeBucket as e:
            logger.error("Match %s attempt %d aborted: %s", match_id, count + 1, e)
            raise

        attempt = Attempt(
            attempt_id=uuid.uuid4().hex,
            attempt_number=count + 1,
            round_number=round_for(count),
            attacking_entrant_id=attacking_id,
            defending_entrant_id=defending_id,
            attacker_member_id=attacker.member_id,
            defender_member_id=defender.member_id,
            outcome=outcome,
        )
        self.store.append_attempt(match_id, attempt, count)

        result = None
        if attempt.attempt_number == ATTEMPTS_PER_MATCH:
            result = self.finalize(match_id)

        return AttemptStep(match_id=match_id, attempt=attempt, result=result)

    def finalize(self, match_id: str) -> MatchResult:
        """
        Archive a match that has played all of its attempts.

        The higher score wins; an exact tie goes to side A.

        Raises:
            MatchIncomplete: Fewer than 72 attempts have been played
        """
        match = self._load(match_id)
        if match.attempt_count < ATTEMPTS_PER_MATCH:
            raise MatchIncomplete(match_id, match.attempt_count)

        if match.score_a == match.score_b:
            winner = match.entrant_for(TIE_BREAK_SIDE)
        elif match.score_a > match.score_b:
            winner = match.entrant_a
        else:
            winner = match.entrant_b

        result = MatchResult(
            match_id=match.match_id,
            stage=match.stage,
            entrant_a=match.entrant_a,
            entrant_b=match.entrant_b,
            score_a=match.score_a,
            score_b=match.score_b,
            winner_id=winner,
            attempts=tuple(match.attempt_log()),
            completed_at=datetime.utcnow().isoformat(),
        )
        self.store.archive_match(match_id, result)

        logger.info("Match %s complete: %s %d - %d %s (winner %s)",
                    match_id, match.entrant_a, match.score_a,
                    match.score_b, match.entrant_b, winner)
        return result

    def play_match(self, match_id: str) -> MatchResult:
        """Advance a match until it is finalized."""
        while True:
            step = self.advance_one_attempt(match_id)
            if step.finalized:
                return step.result
