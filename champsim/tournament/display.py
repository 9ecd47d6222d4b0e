"""
Display formatting for championship results.

Provides ASCII-formatted standings, match results and attempt logs for
terminal output.
"""

from typing import Dict, List, Optional

from champsim.game.match import MatchResult
from champsim.tournament.standings import StandingEntry


def _short_name(name: str, max_len: int = 20) -> str:
    if len(name) <= max_len:
        return name
    return name[:max_len-2] + ".."


def format_standings(
    standings: List[StandingEntry],
    names: Optional[Dict[str, str]] = None,
    title: str = "STANDINGS"
) -> str:
    """
    Format standings as an ASCII table.

    Args:
        standings: Sorted standings
        names: Optional entrant id -> display name
        title: Table title

    Returns:
        Formatted string for terminal display
    """
    names = names or {}

    lines = []
    lines.append(f"=== {title} ===")
    lines.append("")

    # Header
    lines.append(f"{'Rank':<6}{'Entrant':<24}{'Points':<10}{'W-L':<10}{'Played':<8}")
    lines.append("-" * 58)

    # Rows
    for i, entry in enumerate(standings, 1):
        name = _short_name(names.get(entry.entrant_id, entry.entrant_id))
        wl = f"{entry.wins}-{entry.losses}"
        lines.append(f"{i:<6}{name:<24}{entry.points:<10}{wl:<10}{entry.matches_played:<8}")

    return "\n".join(lines)


def format_match_result(result: MatchResult, names: Optional[Dict[str, str]] = None) -> str:
    """Format a single match result line."""
    names = names or {}
    a = names.get(result.entrant_a, result.entrant_a)
    b = names.get(result.entrant_b, result.entrant_b)
    winner = names.get(result.winner_id, result.winner_id)
    tie = " (tie, side A)" if result.is_tie else ""
    return (f"[Stage {result.stage}] {a} {result.score_a} - "
            f"{result.score_b} {b}  winner: {winner}{tie}")


def format_attempt_log(result: MatchResult, names: Optional[Dict[str, str]] = None) -> str:
    """
    Format a match's attempts grouped by round.

    Each round shows its running score followed by one line per attempt.
    """
    names = names or {}
    a = names.get(result.entrant_a, result.entrant_a)
    b = names.get(result.entrant_b, result.entrant_b)

    lines = [f"{a} vs {b}", ""]
    score_a = score_b = 0
    current_round = None

    for attempt in result.attempts:
        if attempt.round_number != current_round:
            if current_round is not None:
                lines.append(f"  -> after round {current_round}: {score_a} - {score_b}")
                lines.append("")
            current_round = attempt.round_number
            attacker = names.get(attempt.attacking_entrant_id, attempt.attacking_entrant_id)
            lines.append(f"Round {current_round} ({attacker} attacking)")

        if attempt.attacking_entrant_id == result.entrant_a:
            score_a += attempt.points
        else:
            score_b += attempt.points

        outcome = attempt.outcome
        lines.append(f"  #{attempt.attempt_number:<3} roll {outcome.roll:>3}  "
                     f"end {outcome.end_value:>4}  +{outcome.points:<3} {outcome.description}")

    if current_round is not None:
        lines.append(f"  -> after round {current_round}: {score_a} - {score_b}")

    lines.append("")
    lines.append(format_match_result(result, names))
    return "\n".join(lines)


def format_tick_report(report) -> str:
    """Format a one-line summary of a TickReport."""
    parts = [f"Stage {report.stage}", f"{report.attempts_applied} attempts"]
    if report.completed:
        parts.append(f"{len(report.completed)} completed")
    if report.errors:
        parts.append(f"{len(report.errors)} errors")
    if report.skipped:
        parts.append(f"{len(report.skipped)} already complete")
    if report.stage_advanced:
        parts.append("next stage opened")
    if report.finished:
        parts.append("championship finished")
    return ", ".join(parts)


def format_championship_header(
    championship_id: str,
    num_entrants: int,
    total_stages: int,
    total_matches: int
) -> str:
    """Format championship header information."""
    lines = []
    lines.append(f"Championship: {championship_id}")
    lines.append(f"Entrants: {num_entrants}")
    lines.append(f"Stages: {total_stages}")
    lines.append(f"Total matches: {total_matches}")
    lines.append("")
    return "\n".join(lines)
