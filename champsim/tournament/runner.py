"""
Championship runner that orchestrates a round-robin championship.

Owns the championship lifecycle (idle -> active -> finished): builds the
schedule, opens each stage's matches, advances them tick by tick, folds
finished matches into standings, and moves on to the next stage once the
current one drains.
"""

import logging
import random
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Any

from champsim.errors import (
    AlreadyComplete,
    ChampionshipError,
    ConcurrentModification,
    MatchNotFound,
    MissingRosterData,
    UnresolvedOutcomeBucket,
)
from champsim.game.engine import MatchEngine
from champsim.game.match import MatchResult
from champsim.tournament.scheduler import generate_stages
from champsim.tournament.standings import (
    StandingEntry, apply_result, recompute, seed_standings
)
from champsim.tournament.state import ChampionshipState
from champsim.tournament.storage import ChampionshipStore, SQLiteChampionshipStore
from champsim.utils.constants import (
    ACTIVE, ATTEMPTS_PER_MATCH, ATTEMPTS_PER_ROUND, FINISHED, IDLE,
    TICK_ATTEMPT, TICK_MODES, TICK_ROUND
)

logger = logging.getLogger(__name__)

# Problems confined to one match; the tick carries on with the others
MATCH_ERRORS = (
    AlreadyComplete,
    ConcurrentModification,
    MatchNotFound,
    MissingRosterData,
    UnresolvedOutcomeBucket,
)


@dataclass
class ChampionshipConfig:
    """Configuration for a championship run."""
    data_dir: str = "data"
    tick_mode: str = TICK_ATTEMPT
    max_workers: int = 1
    seed: Optional[int] = None


@dataclass
class TickReport:
    """What a single tick did."""
    stage: int
    status: str
    attempts_applied: int = 0
    completed: List[MatchResult] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)
    stage_advanced: bool = False
    finished: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'stage': self.stage,
            'status': self.status,
            'attempts_applied': self.attempts_applied,
            'completed': [r.to_dict(include_attempts=False) for r in self.completed],
            'errors': dict(self.errors),
            'skipped': list(self.skipped),
            'stage_advanced': self.stage_advanced,
            'finished': self.finished,
        }


class ChampionshipRunner:
    """
    Orchestrates a championship stored in a ChampionshipStore.

    start(), tick() and reset() hold an in-process lock for their whole
    duration. Across processes, state writes are versioned and attempt
    appends are conditioned on the attempt count, so a losing writer gets
    ConcurrentModification instead of corrupting data.

    Usage:
        runner = ChampionshipRunner(config)
        runner.start(["a", "b", "c", "d"])
        while not runner.tick().finished:
            pass
    """

    def __init__(
        self,
        config: Optional[ChampionshipConfig] = None,
        store: Optional[ChampionshipStore] = None,
        engine: Optional[MatchEngine] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize the championship runner.

        Args:
            config: Championship configuration (defaults if None)
            store: Optional storage backend (creates SQLite store if None)
            engine: Optional match engine (creates one on the store if None)
            rng: Random source for rolls (seeded from config.seed if None)
        """
        self.config = config or ChampionshipConfig()
        if self.config.tick_mode not in TICK_MODES:
            raise ValueError(f"Unknown tick mode: {self.config.tick_mode}")

        self.store = store or SQLiteChampionshipStore(self.config.data_dir)
        self.engine = engine or MatchEngine(
            self.store, rng=rng or random.Random(self.config.seed)
        )
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Lifecycle                                                          #
    # ------------------------------------------------------------------ #

    def start(self, entrant_ids: Optional[List[str]] = None) -> ChampionshipState:
        """
        Start a new championship.

        Args:
            entrant_ids: Ordered entrant ids (entered entrants from the store if None)

        Returns:
            The active championship state

        Raises:
            ChampionshipError: If a championship is already active or finished
            InvalidEntrantCount: If the field is odd or too small; nothing is written
        """
        with self._lock:
            state = self.store.read_championship_state()
            if state.status != IDLE:
                raise ChampionshipError(
                    f"Championship is {state.status}; reset it before starting a new one"
                )

            if entrant_ids is None:
                entrant_ids = self.store.list_entrants(entered_only=True)
            ids = list(entrant_ids)
            stages = generate_stages(ids)

            new_state = ChampionshipState(
                status=ACTIVE,
                championship_id=uuid.uuid4().hex[:12],
                current_stage=1,
                total_stages=len(stages),
                entrant_ids=ids,
                current_pairings=stages[0],
                remaining_stages={i + 1: pairings for i, pairings in enumerate(stages) if i > 0},
                standings=seed_standings(ids),
            )
            self.store.write_championship_state(new_state, state.version)
            self._open_stage(new_state)

            logger.info("Championship %s started: %d entrants, %d stages",
                        new_state.championship_id, len(ids), len(stages))
            return new_state

    def tick(self, mode: Optional[str] = None) -> TickReport:
        """
        Advance every open match once.

        Args:
            mode: "attempt" (one attempt per match) or "round" (finish each
                match's current round); config.tick_mode if None

        Returns:
            TickReport describing what happened

        Raises:
            ValueError: Unknown mode
            ConcurrentModification: The championship state changed underneath
                this tick; retry the tick
        """
        mode = mode or self.config.tick_mode
        if mode not in TICK_MODES:
            raise ValueError(f"Unknown tick mode: {mode}")

        with self._lock:
            state = self.store.read_championship_state()
            report = TickReport(stage=state.current_stage, status=state.status)
            if state.status != ACTIVE:
                report.finished = state.is_finished
                return report

            expected_version = state.version
            report.completed.extend(self._reconcile(state))
            open_ids = self._ensure_stage_opened(state)

            for match_id, applied, result, error in self._advance_all(open_ids, mode):
                report.attempts_applied += applied
                if result is not None:
                    state.matches_played.append(result)
                    state.standings = apply_result(state.standings, result)
                    report.completed.append(result)
                if isinstance(error, AlreadyComplete):
                    report.skipped.append(match_id)
                elif error is not None:
                    report.errors[match_id] = f"{type(error).__name__}: {error}"

            opened_stage = False
            if not self._open_ids(state):
                next_stage = state.next_stage_index()
                if next_stage is None:
                    state.status = FINISHED
                    state.current_pairings = []
                    report.finished = True
                    logger.info("Championship %s finished after %d matches",
                                state.championship_id, len(state.matches_played))
                else:
                    state.current_stage = next_stage
                    state.current_pairings = state.remaining_stages.pop(next_stage)
                    report.stage_advanced = True
                    opened_stage = True
                    logger.info("Championship %s advancing to stage %d of %d",
                                state.championship_id, next_stage, state.total_stages)

            self.store.write_championship_state(state, expected_version)
            if opened_stage:
                self._open_stage(state)

            report.stage = state.current_stage
            report.status = state.status
            return report

    def reset(self) -> ChampionshipState:
        """Drop all matches and results and return to idle. Legacy points survive."""
        with self._lock:
            state = self.store.reset_championship()
            logger.info("Championship reset")
            return state

    def run_to_completion(
        self,
        max_ticks: Optional[int] = None,
        on_tick: Optional[Callable[[TickReport], None]] = None
    ) -> ChampionshipState:
        """
        Tick until the championship finishes.

        Args:
            max_ticks: Safety limit (enough for attempt mode if None)
            on_tick: Called with each TickReport

        Raises:
            ChampionshipError: If the championship is idle or does not finish in time
        """
        state = self.store.read_championship_state()
        if state.status == IDLE:
            raise ChampionshipError("No championship in progress")

        if max_ticks is None:
            max_ticks = max(1, state.total_stages) * (ATTEMPTS_PER_MATCH + 1) + 1

        for _ in range(max_ticks):
            report = self.tick()
            if on_tick:
                on_tick(report)
            if report.finished:
                return self.store.read_championship_state()

        raise ChampionshipError(f"Championship did not finish within {max_ticks} ticks")

    # ------------------------------------------------------------------ #
    # Reads                                                              #
    # ------------------------------------------------------------------ #

    def state(self) -> ChampionshipState:
        return self.store.read_championship_state()

    def standings(self) -> List[StandingEntry]:
        """Standings as maintained incrementally by tick()."""
        return self.store.read_championship_state().standings

    def recompute_standings(self) -> List[StandingEntry]:
        """Standings rebuilt from this championship's archived results."""
        state = self.store.read_championship_state()
        entrant_ids = state.entrant_ids or self.store.list_entrants(entered_only=True)
        return recompute(self._championship_results(state), entrant_ids)

    # ------------------------------------------------------------------ #
    # Internals                                                          #
    # ------------------------------------------------------------------ #

    def _owns(self, state: ChampionshipState, match_id: str) -> bool:
        """Whether a match id belongs to the state's championship."""
        return bool(state.championship_id) and match_id.startswith(f"{state.championship_id}-")

    def _open_ids(self, state: ChampionshipState) -> List[str]:
        # Exhibition matches may share the store
        return [mid for mid in self.store.list_open_match_ids() if self._owns(state, mid)]

    def _championship_results(self, state: ChampionshipState) -> List[MatchResult]:
        return [
            r for r in self.store.list_match_results(include_attempts=False)
            if self._owns(state, r.match_id)
        ]

    def _open_stage(self, state: ChampionshipState):
        for i, pairing in enumerate(state.current_pairings):
            self.engine.open(pairing, state.current_stage, state.match_id_for(state.current_stage, i))

    def _reconcile(self, state: ChampionshipState) -> List[MatchResult]:
        """Fold archived results the state has not seen yet (e.g. after a crash)."""
        played = set(state.played_ids)
        missing = [r for r in self._championship_results(state) if r.match_id not in played]
        for result in missing:
            logger.warning("Folding unrecorded result for match %s", result.match_id)
            state.matches_played.append(result)
            state.standings = apply_result(state.standings, result)
        return missing

    def _ensure_stage_opened(self, state: ChampionshipState) -> List[str]:
        """Open ids for the tick, re-opening the current stage if its matches never got created."""
        open_ids = self._open_ids(state)
        if open_ids:
            return open_ids

        played = set(state.played_ids)
        stage_ids = [state.match_id_for(state.current_stage, i) for i in range(len(state.current_pairings))]
        if any(mid not in played for mid in stage_ids):
            logger.warning("Stage %d has unopened matches, opening them", state.current_stage)
            self._open_stage(state)
            open_ids = self._open_ids(state)
        return open_ids

    def _advance_all(self, match_ids: List[str], mode: str) -> List[Tuple]:
        if self.config.max_workers > 1 and len(match_ids) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                return list(pool.map(lambda mid: self._advance_match(mid, mode), match_ids))
        return [self._advance_match(mid, mode) for mid in match_ids]

    def _advance_match(self, match_id: str, mode: str) -> Tuple[str, int, Optional[MatchResult], Optional[Exception]]:
        """
        Advance one match for this tick.

        Returns:
            (match_id, attempts applied, result if finalized, per-match error)
        """
        applied = 0
        try:
            steps = 1
            if mode == TICK_ROUND:
                match = self.store.read_match(match_id)
                if match is None:
                    raise MatchNotFound(match_id)
                steps = ATTEMPTS_PER_ROUND - match.attempt_count % ATTEMPTS_PER_ROUND

            for _ in range(steps):
                step = self.engine.advance_one_attempt(match_id)
                if step.attempt is not None:
                    applied += 1
                if step.finalized:
                    return match_id, applied, step.result, None
            return match_id, applied, None, None

        except MATCH_ERRORS as e:
            if isinstance(e, AlreadyComplete):
                logger.info("Match %s already complete, skipping", match_id)
            elif not isinstance(e, UnresolvedOutcomeBucket):
                logger.warning("Match %s: %s", match_id, e)
            return match_id, applied, None, e
