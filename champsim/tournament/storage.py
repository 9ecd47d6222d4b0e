"""
Storage backend for championships.

ChampionshipStore is the narrow interface the engine talks to.
SQLiteChampionshipStore implements it with SQLite: entrant rosters, ongoing
matches and their attempts, archived match results, and the single
championship state record.
"""

import json
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from champsim.errors import ConcurrentModification, MatchNotFound
from champsim.game.match import Attempt, MatchResult, OngoingMatch, Pairing
from champsim.game.outcome import Outcome
from champsim.game.roster import Entrant, RosterMember, validate_roster
from champsim.tournament.state import ChampionshipState
from champsim.utils.constants import ATTEMPTS_PER_MATCH


class ChampionshipStore(ABC):
    """Persistence operations consumed by the match engine and runner."""

    @abstractmethod
    def get_roster(self, entrant_id: str) -> Optional[List[RosterMember]]:
        """Roster for an entrant, or None if unknown."""

    @abstractmethod
    def list_entrants(self, entered_only: bool = True) -> List[str]:
        """Entrant ids in registration order."""

    @abstractmethod
    def create_match(self, pairing: Pairing, stage: int, match_id: Optional[str] = None) -> str:
        """Open a match for a pairing. A known match_id is left untouched."""

    @abstractmethod
    def read_match(self, match_id: str) -> Optional[OngoingMatch]:
        """Ongoing match with its attempts, or None if not ongoing."""

    @abstractmethod
    def list_open_match_ids(self) -> List[str]:
        """Ids of all ongoing matches in creation order."""

    @abstractmethod
    def append_attempt(self, match_id: str, attempt: Attempt, expected_count: int):
        """Record an attempt and its score increment in one transaction."""

    @abstractmethod
    def archive_match(self, match_id: str, result: MatchResult):
        """Replace an ongoing match by its final result."""

    @abstractmethod
    def get_match_result(self, match_id: str) -> Optional[MatchResult]:
        """Archived result for a match, or None."""

    @abstractmethod
    def list_match_results(self, include_attempts: bool = True) -> List[MatchResult]:
        """All archived results in completion order, optionally without attempt logs."""

    @abstractmethod
    def read_championship_state(self) -> ChampionshipState:
        """Current championship state, version included."""

    @abstractmethod
    def write_championship_state(self, state: ChampionshipState, expected_version: int) -> int:
        """Write the state if the stored version still matches. Returns the new version."""

    @abstractmethod
    def reset_championship(self) -> ChampionshipState:
        """Drop all match data, zero championship stats, return to idle."""


class SQLiteChampionshipStore(ChampionshipStore):
    """
    SQLite implementation of ChampionshipStore.

    Every operation opens its own connection, so one store can be shared by
    worker threads advancing different matches.
    """

    def __init__(self, data_dir: str = "data", db_name: str = "championship.db"):
        """
        Initialize storage backend.

        Args:
            data_dir: Base directory for data storage
            db_name: SQLite file name inside data_dir
        """
        self.data_dir = Path(data_dir)
        self.db_path = self.data_dir / db_name

        # Ensure directory exists
        self.data_dir.mkdir(parents=True, exist_ok=True)

        # Initialize database tables
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=30)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self):
        """Initialize SQLite database schema."""
        with self._connect() as conn:
            # Readers do not block the writer advancing another match
            conn.execute("PRAGMA journal_mode=WAL")

            conn.execute("""
                CREATE TABLE IF NOT EXISTS entrants (
                    entrant_id TEXT PRIMARY KEY,
                    display_name TEXT NOT NULL,
                    roster TEXT NOT NULL,
                    entered INTEGER DEFAULT 0,
                    total_points INTEGER DEFAULT 0,
                    match_wins INTEGER DEFAULT 0,
                    legacy_points INTEGER DEFAULT 0,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS ongoing_matches (
                    match_id TEXT PRIMARY KEY,
                    stage INTEGER NOT NULL,
                    entrant_a TEXT NOT NULL,
                    entrant_b TEXT NOT NULL,
                    score_a INTEGER DEFAULT 0,
                    score_b INTEGER DEFAULT 0,
                    attempt_count INTEGER DEFAULT 0,
                    is_complete INTEGER DEFAULT 0,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS attempts (
                    match_id TEXT NOT NULL,
                    attempt_id TEXT NOT NULL UNIQUE,
                    attempt_number INTEGER NOT NULL,
                    round_number INTEGER NOT NULL,
                    attacking_entrant_id TEXT NOT NULL,
                    defending_entrant_id TEXT NOT NULL,
                    attacker_member_id TEXT NOT NULL,
                    defender_member_id TEXT NOT NULL,
                    points INTEGER NOT NULL,
                    action TEXT NOT NULL,
                    description TEXT NOT NULL,
                    success INTEGER NOT NULL,
                    roll INTEGER NOT NULL,
                    end_value INTEGER NOT NULL,
                    PRIMARY KEY (match_id, attempt_number),
                    FOREIGN KEY (match_id) REFERENCES ongoing_matches(match_id)
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS match_results (
                    match_id TEXT PRIMARY KEY,
                    stage INTEGER NOT NULL,
                    entrant_a TEXT NOT NULL,
                    entrant_b TEXT NOT NULL,
                    score_a INTEGER NOT NULL,
                    score_b INTEGER NOT NULL,
                    winner_id TEXT NOT NULL,
                    attempts TEXT NOT NULL,
                    completed_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS championship_state (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    version INTEGER NOT NULL,
                    payload TEXT NOT NULL
                )
            """)
            conn.execute(
                "INSERT OR IGNORE INTO championship_state (id, version, payload) VALUES (1, 0, ?)",
                (json.dumps(ChampionshipState().to_dict(include_results=False)),)
            )

            # Indexes
            conn.execute("CREATE INDEX IF NOT EXISTS idx_entrants_entered ON entrants(entered)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_attempts_match ON attempts(match_id)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_results_stage ON match_results(stage)")

            conn.commit()

    # ------------------------------------------------------------------ #
    # Entrants                                                           #
    # ------------------------------------------------------------------ #

    def register_entrant(
        self,
        entrant_id: str,
        display_name: str,
        roster: List[RosterMember],
        entered: bool = False
    ) -> str:
        """
        Create or update an entrant and its roster.

        Career stats are preserved when an existing entrant is updated.

        Raises:
            InvalidRoster: If the roster breaks the roster rules
        """
        validate_roster(roster)
        roster_json = json.dumps([m.to_dict() for m in roster])

        with self._connect() as conn:
            conn.execute("""
                INSERT INTO entrants (entrant_id, display_name, roster, entered, created_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(entrant_id) DO UPDATE SET
                    display_name = excluded.display_name,
                    roster = excluded.roster,
                    entered = excluded.entered
            """, (entrant_id, display_name, roster_json, int(entered), _now()))
            conn.commit()

        return entrant_id

    def set_entered(self, entrant_id: str, entered: bool = True) -> bool:
        """Enter or withdraw an entrant. Returns False if the entrant is unknown."""
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE entrants SET entered = ? WHERE entrant_id = ?",
                (int(entered), entrant_id)
            )
            conn.commit()
            return cursor.rowcount == 1

    def get_entrant(self, entrant_id: str) -> Optional[Entrant]:
        """Load an entrant with roster and career stats."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM entrants WHERE entrant_id = ?", (entrant_id,)
            ).fetchone()
        return _row_to_entrant(row) if row else None

    def list_entrant_records(self, entered_only: bool = False) -> List[Entrant]:
        """All entrants in registration order."""
        query = "SELECT * FROM entrants"
        if entered_only:
            query += " WHERE entered = 1"
        query += " ORDER BY rowid"

        with self._connect() as conn:
            return [_row_to_entrant(r) for r in conn.execute(query).fetchall()]

    def list_entrants(self, entered_only: bool = True) -> List[str]:
        return [e.entrant_id for e in self.list_entrant_records(entered_only=entered_only)]

    def get_roster(self, entrant_id: str) -> Optional[List[RosterMember]]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT roster FROM entrants WHERE entrant_id = ?", (entrant_id,)
            ).fetchone()
        if not row:
            return None
        return [RosterMember.from_dict(m) for m in json.loads(row['roster'])]

    # ------------------------------------------------------------------ #
    # Matches                                                            #
    # ------------------------------------------------------------------ #

    def create_match(self, pairing: Pairing, stage: int, match_id: Optional[str] = None) -> str:
        match_id = match_id or f"S{stage}-{pairing.entrant_a}-vs-{pairing.entrant_b}"

        with self._connect() as conn:
            archived = conn.execute(
                "SELECT 1 FROM match_results WHERE match_id = ?", (match_id,)
            ).fetchone()
            if not archived:
                conn.execute("""
                    INSERT OR IGNORE INTO ongoing_matches
                    (match_id, stage, entrant_a, entrant_b, created_at)
                    VALUES (?, ?, ?, ?, ?)
                """, (match_id, stage, pairing.entrant_a, pairing.entrant_b, _now()))
            conn.commit()

        return match_id

    def read_match(self, match_id: str) -> Optional[OngoingMatch]:
        with self._connect() as conn:
            # Single read transaction so scores and attempts are consistent
            conn.execute("BEGIN")
            row = conn.execute(
                "SELECT * FROM ongoing_matches WHERE match_id = ?", (match_id,)
            ).fetchone()
            if not row:
                conn.rollback()
                return None
            attempt_rows = conn.execute(
                "SELECT * FROM attempts WHERE match_id = ? ORDER BY attempt_number",
                (match_id,)
            ).fetchall()
            conn.rollback()

        attempts = {}
        for r in attempt_rows:
            attempt = _row_to_attempt(r)
            attempts[attempt.attempt_id] = attempt

        return OngoingMatch(
            match_id=row['match_id'],
            stage=row['stage'],
            entrant_a=row['entrant_a'],
            entrant_b=row['entrant_b'],
            score_a=row['score_a'],
            score_b=row['score_b'],
            attempt_count=row['attempt_count'],
            attempts=attempts,
            is_complete=bool(row['is_complete']),
        )

    def list_open_match_ids(self) -> List[str]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT match_id FROM ongoing_matches WHERE is_complete = 0 ORDER BY rowid"
            ).fetchall()
        return [r['match_id'] for r in rows]

    def list_open_matches(self) -> List[OngoingMatch]:
        """All ongoing matches with their attempts."""
        matches = []
        for match_id in self.list_open_match_ids():
            match = self.read_match(match_id)
            if match is not None:
                matches.append(match)
        return matches

    def append_attempt(self, match_id: str, attempt: Attempt, expected_count: int):
        """
        Record an attempt and add its points to the attacking side.

        The update only applies while the stored attempt count equals
        expected_count, so a duplicate or racing append is rejected.

        Raises:
            ValueError: If the attempt number does not follow expected_count
            MatchNotFound: If the match is not ongoing
            ConcurrentModification: If the stored count moved on
        """
        if attempt.attempt_number != expected_count + 1:
            raise ValueError(
                f"Attempt number {attempt.attempt_number} does not follow count {expected_count}"
            )

        outcome = attempt.outcome
        with self._connect() as conn:
            cursor = conn.execute("""
                UPDATE ongoing_matches
                SET attempt_count = attempt_count + 1,
                    score_a = score_a + CASE WHEN entrant_a = ? THEN ? ELSE 0 END,
                    score_b = score_b + CASE WHEN entrant_a = ? THEN 0 ELSE ? END
                WHERE match_id = ? AND attempt_count = ? AND is_complete = 0
                  AND attempt_count < ?
            """, (
                attempt.attacking_entrant_id, outcome.points,
                attempt.attacking_entrant_id, outcome.points,
                match_id, expected_count, ATTEMPTS_PER_MATCH
            ))

            if cursor.rowcount != 1:
                row = conn.execute(
                    "SELECT attempt_count FROM ongoing_matches WHERE match_id = ?", (match_id,)
                ).fetchone()
                conn.rollback()
                if row is None:
                    raise MatchNotFound(match_id)
                raise ConcurrentModification(f"match {match_id}", expected_count, row['attempt_count'])

            conn.execute("""
                INSERT INTO attempts
                (match_id, attempt_id, attempt_number, round_number,
                 attacking_entrant_id, defending_entrant_id,
                 attacker_member_id, defender_member_id,
                 points, action, description, success, roll, end_value)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                match_id,
                attempt.attempt_id,
                attempt.attempt_number,
                attempt.round_number,
                attempt.attacking_entrant_id,
                attempt.defending_entrant_id,
                attempt.attacker_member_id,
                attempt.defender_member_id,
                outcome.points,
                outcome.action,
                outcome.description,
                int(outcome.success),
                outcome.roll,
                outcome.end_value
            ))
            conn.commit()

    def archive_match(self, match_id: str, result: MatchResult):
        """
        Move a finished match into match_results and credit entrant stats.

        Runs as one transaction: the ongoing row, its attempts, the result row
        and the stat updates all land together or not at all.

        Raises:
            ConcurrentModification: If the match is gone or not at the final attempt
        """
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM ongoing_matches WHERE match_id = ? AND attempt_count = ?",
                (match_id, ATTEMPTS_PER_MATCH)
            )
            if cursor.rowcount != 1:
                conn.rollback()
                raise ConcurrentModification(f"match {match_id}", ATTEMPTS_PER_MATCH)

            conn.execute("DELETE FROM attempts WHERE match_id = ?", (match_id,))
            conn.execute("""
                INSERT INTO match_results
                (match_id, stage, entrant_a, entrant_b, score_a, score_b,
                 winner_id, attempts, completed_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                result.match_id,
                result.stage,
                result.entrant_a,
                result.entrant_b,
                result.score_a,
                result.score_b,
                result.winner_id,
                json.dumps([a.to_dict() for a in result.attempts], separators=(',', ':')),
                result.completed_at or _now()
            ))

            for entrant_id, score in ((result.entrant_a, result.score_a), (result.entrant_b, result.score_b)):
                conn.execute("""
                    UPDATE entrants
                    SET total_points = total_points + ?,
                        legacy_points = legacy_points + ?,
                        match_wins = match_wins + ?
                    WHERE entrant_id = ?
                """, (score, score, int(entrant_id == result.winner_id), entrant_id))

            conn.commit()

    def get_match_result(self, match_id: str) -> Optional[MatchResult]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM match_results WHERE match_id = ?", (match_id,)
            ).fetchone()
        return _row_to_result(row) if row else None

    def list_match_results(self, include_attempts: bool = True) -> List[MatchResult]:
        columns = "*" if include_attempts else (
            "match_id, stage, entrant_a, entrant_b, score_a, score_b, winner_id, completed_at"
        )
        with self._connect() as conn:
            rows = conn.execute(f"SELECT {columns} FROM match_results ORDER BY rowid").fetchall()
        return [_row_to_result(r) for r in rows]

    # ------------------------------------------------------------------ #
    # Championship state                                                 #
    # ------------------------------------------------------------------ #

    def read_championship_state(self) -> ChampionshipState:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT version, payload FROM championship_state WHERE id = 1"
            ).fetchone()

        data = json.loads(row['payload'])
        data['version'] = row['version']
        # Standings only need scores, so skip the attempt logs
        results_by_id = {r.match_id: r for r in self.list_match_results(include_attempts=False)}
        return ChampionshipState.from_dict(data, results_by_id)

    def write_championship_state(self, state: ChampionshipState, expected_version: int) -> int:
        payload = json.dumps(state.to_dict(include_results=False))

        with self._connect() as conn:
            cursor = conn.execute("""
                UPDATE championship_state
                SET payload = ?, version = version + 1
                WHERE id = 1 AND version = ?
            """, (payload, expected_version))

            if cursor.rowcount != 1:
                row = conn.execute("SELECT version FROM championship_state WHERE id = 1").fetchone()
                conn.rollback()
                raise ConcurrentModification("championship state", expected_version, row['version'])

            conn.commit()

        state.version = expected_version + 1
        return state.version

    def reset_championship(self) -> ChampionshipState:
        """
        Drop all match data and return to idle.

        total_points and match_wins are zeroed. legacy_points is kept on
        purpose: it is the career total across every championship, so a
        reset never clears it.
        """
        state = ChampionshipState()

        with self._connect() as conn:
            conn.execute("DELETE FROM attempts")
            conn.execute("DELETE FROM ongoing_matches")
            conn.execute("DELETE FROM match_results")
            conn.execute("UPDATE entrants SET total_points = 0, match_wins = 0")
            conn.execute("""
                UPDATE championship_state SET payload = ?, version = version + 1 WHERE id = 1
            """, (json.dumps(state.to_dict(include_results=False)),))
            row = conn.execute("SELECT version FROM championship_state WHERE id = 1").fetchone()
            conn.commit()

        state.version = row['version']
        return state


def _now() -> str:
    return datetime.utcnow().isoformat()


def _row_to_entrant(row: sqlite3.Row) -> Entrant:
    return Entrant(
        entrant_id=row['entrant_id'],
        display_name=row['display_name'],
        roster=[RosterMember.from_dict(m) for m in json.loads(row['roster'])],
        entered=bool(row['entered']),
        total_points=row['total_points'] or 0,
        match_wins=row['match_wins'] or 0,
        legacy_points=row['legacy_points'] or 0,
    )


def _row_to_attempt(row: sqlite3.Row) -> Attempt:
    return Attempt(
        attempt_id=row['attempt_id'],
        attempt_number=row['attempt_number'],
        round_number=row['round_number'],
        attacking_entrant_id=row['attacking_entrant_id'],
        defending_entrant_id=row['defending_entrant_id'],
        attacker_member_id=row['attacker_member_id'],
        defender_member_id=row['defender_member_id'],
        outcome=Outcome(
            points=row['points'],
            action=row['action'],
            description=row['description'],
            success=bool(row['success']),
            roll=row['roll'],
            end_value=row['end_value'],
        ),
    )


def _row_to_result(row: sqlite3.Row) -> MatchResult:
    return MatchResult(
        match_id=row['match_id'],
        stage=row['stage'],
        entrant_a=row['entrant_a'],
        entrant_b=row['entrant_b'],
        score_a=row['score_a'],
        score_b=row['score_b'],
        winner_id=row['winner_id'],
        attempts=tuple(Attempt.from_dict(a) for a in json.loads(row['attempts']))
        if 'attempts' in row.keys() else (),
        completed_at=row['completed_at'],
    )
