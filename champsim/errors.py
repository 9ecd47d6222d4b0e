"""
Exception hierarchy for the championship engine.

Per-match conditions (missing roster, unresolved bucket, concurrent
modification, already complete) are caught by the championship runner and
reported in its tick report. Everything else propagates to the caller.
"""

from typing import Optional


class ChampionshipError(Exception):
    """Base exception for all championship engine errors."""
    pass


class InvalidEntrantCount(ChampionshipError, ValueError):
    """Raised when a schedule is requested for an odd or too-small field."""

    def __init__(self, count: int, reason: Optional[str] = None):
        self.count = count
        super().__init__(
            reason or f"Round-robin needs an even number of at least 2 entrants, got {count}"
        )


class InvalidRoster(ChampionshipError, ValueError):
    """Raised when a roster breaks the roster rules."""
    pass


class MissingRosterData(ChampionshipError, LookupError):
    """Raised when an entrant's roster cannot be loaded for an attempt."""

    def __init__(self, entrant_id: str, match_id: Optional[str] = None):
        self.entrant_id = entrant_id
        self.match_id = match_id
        where = f" (match {match_id})" if match_id else ""
        super().__init__(f"No roster data for entrant '{entrant_id}'{where}")


class MatchNotFound(ChampionshipError, KeyError):
    """Raised when a match id is neither ongoing nor archived."""

    def __init__(self, match_id: str):
        self.match_id = match_id
        super().__init__(match_id)

    def __str__(self) -> str:
        return f"Match not found: {self.match_id}"


class AlreadyComplete(ChampionshipError):
    """Raised when an attempt is requested on a finished match. Treated as a no-op."""

    def __init__(self, match_id: str):
        self.match_id = match_id
        super().__init__(f"Match {match_id} is already complete")


class ConcurrentModification(ChampionshipError):
    """Raised when an optimistic-concurrency check fails on a write."""

    def __init__(self, what: str, expected, actual=None):
        self.what = what
        self.expected = expected
        self.actual = actual
        detail = f"expected {expected}" if actual is None else f"expected {expected}, found {actual}"
        super().__init__(f"Concurrent modification of {what}: {detail}")


class UnresolvedOutcomeBucket(ChampionshipError):
    """
    Raised when an end value falls outside every ranking bucket.

    Carries the fail-closed 0-point outcome so callers can inspect it, but the
    attempt itself must not be recorded.
    """

    def __init__(self, sport: str, end_value: int, outcome=None):
        self.sport = sport
        self.end_value = end_value
        self.outcome = outcome
        super().__init__(f"No {sport} ranking bucket covers end value {end_value}")


class MatchIncomplete(ChampionshipError):
    """Raised when a match is finalized before all of its attempts are played."""

    def __init__(self, match_id: str, attempt_count: int):
        self.match_id = match_id
        self.attempt_count = attempt_count
        super().__init__(f"Match {match_id} has played {attempt_count} attempts; it cannot be finalized yet")
