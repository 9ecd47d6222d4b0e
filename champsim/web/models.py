"""
Pydantic models for the championship admin API.

Defines request/response schemas for the REST endpoints.
"""
from pydantic import BaseModel, Field
from typing import List, Dict, Optional, Any


class RosterMemberIn(BaseModel):
    """A roster member as submitted by a client."""
    member_id: Optional[str] = Field(default=None, description="Generated if omitted")
    name: str
    sport: str = Field(description="Baseball, Basketball or Soccer")
    star_tier: int = Field(ge=1, le=5)
    offensive_strength: int = Field(ge=0)
    defensive_strength: int = Field(ge=0)


class EntrantCreate(BaseModel):
    """Request to register (or update) an entrant."""
    entrant_id: Optional[str] = Field(default=None, description="Generated if omitted")
    display_name: str
    roster: List[RosterMemberIn] = Field(default_factory=list)
    random_roster: bool = Field(default=False, description="Generate a valid roster instead")
    entered: bool = False


class EnterRequest(BaseModel):
    """Enter or withdraw an entrant."""
    entered: bool = True


class StartRequest(BaseModel):
    """Start a championship. Entered entrants are used if no ids are given."""
    entrant_ids: Optional[List[str]] = None


class StandingEntryModel(BaseModel):
    """One row of the standings."""
    entrant_id: str
    points: int
    wins: int
    losses: int
    matches_played: int
    seed: int


class StandingsResponse(BaseModel):
    """Standings, incremental or recomputed from results."""
    status: str
    current_stage: int
    recomputed: bool = False
    standings: List[StandingEntryModel]


class MatchResultSummary(BaseModel):
    """Archived match without its attempt log."""
    match_id: str
    stage: int
    entrant_a: str
    entrant_b: str
    score_a: int
    score_b: int
    winner_id: str
    completed_at: str


class TickResponse(BaseModel):
    """Summary of one tick."""
    stage: int
    status: str
    attempts_applied: int
    completed: List[MatchResultSummary]
    errors: Dict[str, str]
    skipped: List[str]
    stage_advanced: bool
    finished: bool


class ChampionshipStateResponse(BaseModel):
    """Championship state for API responses."""
    status: str
    championship_id: str
    current_stage: int
    total_stages: int
    is_finished: bool
    entrant_ids: List[str]
    current_pairings: List[Dict[str, str]]
    remaining_stages: Dict[str, List[Dict[str, str]]]
    matches_played: List[str]
    standings: List[StandingEntryModel]
    version: int


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str


def state_response(state) -> ChampionshipStateResponse:
    return ChampionshipStateResponse(**state.to_dict(include_results=False))


def tick_response(report) -> TickResponse:
    return TickResponse(**report.to_dict())


def result_summary(result) -> Dict[str, Any]:
    return result.to_dict(include_attempts=False)
