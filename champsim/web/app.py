"""
FastAPI application for the championship admin API.
"""
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from typing import Optional
import logging
import os
import uuid

from champsim.errors import (
    ChampionshipError, InvalidEntrantCount, InvalidRoster, MatchNotFound
)
from champsim.game.roster import RosterMember, random_roster
from champsim.tournament.runner import ChampionshipConfig, ChampionshipRunner
from champsim.web.models import (
    EntrantCreate, EnterRequest, StartRequest, StandingsResponse,
    TickResponse, ChampionshipStateResponse, ErrorResponse,
    state_response, tick_response, result_summary
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Championship Admin",
    description="Admin API for running multi-sport round-robin championships",
    version="1.0.0"
)

# Global instance (initialized in startup, or set directly by tests)
runner: Optional[ChampionshipRunner] = None


@app.on_event("startup")
async def startup():
    """Initialize the runner on startup."""
    get_runner()


def get_runner() -> ChampionshipRunner:
    global runner
    if runner is None:
        config = ChampionshipConfig(
            data_dir=os.environ.get("CHAMPSIM_DATA_DIR", "data"),
            tick_mode=os.environ.get("CHAMPSIM_TICK_MODE", "attempt"),
        )
        runner = ChampionshipRunner(config)
        logger.info("Championship store at %s", runner.store.db_path)
    return runner


def _status_for(exc: ChampionshipError) -> int:
    if isinstance(exc, (InvalidEntrantCount, InvalidRoster)):
        return 400
    if isinstance(exc, MatchNotFound):
        return 404
    return 409


@app.exception_handler(ChampionshipError)
async def championship_error_handler(request: Request, exc: ChampionshipError):
    return JSONResponse(status_code=_status_for(exc), content={"detail": str(exc)})


# =============================================================================
# Championship Endpoints
# =============================================================================

@app.get("/api/championship", response_model=ChampionshipStateResponse)
def get_championship():
    """Get the current championship state."""
    return state_response(get_runner().state())


@app.post("/api/championship/start", response_model=ChampionshipStateResponse,
          responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})
def start_championship(request: Optional[StartRequest] = None):
    """Start a championship with the given (or all entered) entrants."""
    entrant_ids = request.entrant_ids if request else None
    return state_response(get_runner().start(entrant_ids))


@app.post("/api/championship/tick", response_model=TickResponse,
          responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})
def tick_championship(mode: Optional[str] = Query(default=None, description="attempt or round")):
    """Advance every open match by one attempt or to the end of its round."""
    try:
        report = get_runner().tick(mode)
    except ValueError as e:
        if isinstance(e, ChampionshipError):
            raise
        raise HTTPException(status_code=400, detail=str(e))
    return tick_response(report)


@app.post("/api/championship/reset", response_model=ChampionshipStateResponse)
def reset_championship():
    """Clear all matches and results and return to idle."""
    return state_response(get_runner().reset())


@app.get("/api/championship/standings", response_model=StandingsResponse)
def get_standings(recompute_from_results: bool = Query(default=False, alias="recompute")):
    """Get standings; with recompute=true they are rebuilt from archived results."""
    r = get_runner()
    state = r.state()
    standings = r.recompute_standings() if recompute_from_results else state.standings
    return StandingsResponse(
        status=state.status,
        current_stage=state.current_stage,
        recomputed=recompute_from_results,
        standings=[e.to_dict() for e in standings],
    )


# =============================================================================
# Match Endpoints
# =============================================================================

@app.get("/api/matches")
def list_matches():
    """List ongoing matches (without attempt logs)."""
    matches = []
    for match in get_runner().store.list_open_matches():
        data = match.to_dict()
        data.pop('attempts')
        matches.append(data)
    return {"matches": matches}


@app.get("/api/matches/{match_id}")
def get_match(match_id: str):
    """Get an ongoing match with its attempts, or the archived result."""
    store = get_runner().store
    match = store.read_match(match_id)
    if match is not None:
        return {"status": match.state.value, "match": match.to_dict()}

    result = store.get_match_result(match_id)
    if result is not None:
        return {"status": "complete", "result": result.to_dict()}

    raise MatchNotFound(match_id)


@app.get("/api/results")
def list_results(stage: Optional[int] = None):
    """List archived match results (without attempt logs)."""
    results = get_runner().store.list_match_results(include_attempts=False)
    if stage is not None:
        results = [r for r in results if r.stage == stage]
    return {"results": [result_summary(r) for r in results]}


@app.get("/api/results/{match_id}")
def get_result(match_id: str):
    """Get an archived result with the full attempt log and per-round scores."""
    result = get_runner().store.get_match_result(match_id)
    if result is None:
        raise MatchNotFound(match_id)
    data = result.to_dict()
    data['rounds'] = result.round_scores()
    return data


# =============================================================================
# Entrant Endpoints
# =============================================================================

@app.get("/api/entrants")
def list_entrants(entered_only: bool = False):
    """List registered entrants with rosters and career stats."""
    entrants = get_runner().store.list_entrant_records(entered_only=entered_only)
    return {"entrants": [e.to_dict() for e in entrants]}


@app.post("/api/entrants", responses={400: {"model": ErrorResponse}})
def create_entrant(request: EntrantCreate):
    """Register or update an entrant and its roster."""
    store = get_runner().store
    entrant_id = request.entrant_id or uuid.uuid4().hex

    if request.random_roster:
        roster = random_roster(prefix=request.display_name)
    else:
        roster = [
            RosterMember(
                member_id=m.member_id or uuid.uuid4().hex,
                name=m.name,
                sport=m.sport,
                star_tier=m.star_tier,
                offensive_strength=m.offensive_strength,
                defensive_strength=m.defensive_strength,
            )
            for m in request.roster
        ]

    store.register_entrant(entrant_id, request.display_name, roster, entered=request.entered)
    return store.get_entrant(entrant_id).to_dict()


@app.post("/api/entrants/{entrant_id}/enter")
def enter_entrant(entrant_id: str, request: Optional[EnterRequest] = None):
    """Enter (or withdraw) an entrant for the next championship."""
    entered = request.entered if request else True
    if not get_runner().store.set_entered(entrant_id, entered):
        raise HTTPException(status_code=404, detail=f"Entrant not found: {entrant_id}")
    return {"entrant_id": entrant_id, "entered": entered}
