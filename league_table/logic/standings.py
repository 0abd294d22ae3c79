# league_table/logic/standings.py
from __future__ import annotations

from typing import Iterable, List, Mapping, Sequence, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict

__all__ = [
    "POINTS_FOR_WIN",
    "POINTS_FOR_DRAW",
    "TeamStatRecord",
    "MatchResult",
    "StandingsLine",
    "StandingsEntry",
    "apply_match_result",
    "reverse_match_result",
    "recompute_standings",
    "merge_with_roster",
    "rank",
    "is_consistent",
]

# ---------------------------------------------------------------------------
# Scoring rule: 3 for a win, 1 for a draw, 0 for a loss.
# No extra time / penalties; the full-time score decides.
# ---------------------------------------------------------------------------
POINTS_FOR_WIN = 3
POINTS_FOR_DRAW = 1


class TeamStatRecord(BaseModel):
    """
    Cumulative performance of one team within one league.

    goal_difference and points are derived; they are recomputed from the
    counters on every update and never accumulated on their own.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    team_id: int | None = None
    team_name: str | None = None
    league_id: int | None = None

    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    points: int = 0


class MatchResult(BaseModel):
    """A finished fixture keyed by team *name* (batch recomputation input)."""

    model_config = ConfigDict(frozen=True)

    home_team: str
    away_team: str
    home_score: int
    away_score: int


class StandingsLine(BaseModel):
    """Batch recomputation output for one team (no played / goals for / against)."""

    model_config = ConfigDict(frozen=True)

    points: int = 0
    goal_difference: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0


class StandingsEntry(StandingsLine):
    """A team name plus its stat snapshot; display/ranking only."""

    team_name: str


def _check_score(value: int | None, side: str) -> int:
    if value is None or isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{side} score must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{side} score must be >= 0, got {value}")
    return value


def _outcome(goals_for: int, goals_against: int) -> Tuple[int, int, int]:
    """(wins, draws, losses) contribution of a single result from one side's view."""
    if goals_for > goals_against:
        return 1, 0, 0
    if goals_for < goals_against:
        return 0, 0, 1
    return 0, 1, 0


def _shift(stats: TeamStatRecord, goals_for: int, goals_against: int, sign: int) -> TeamStatRecord:
    w, d, lo = _outcome(goals_for, goals_against)
    wins = stats.wins + sign * w
    draws = stats.draws + sign * d
    losses = stats.losses + sign * lo
    gf = stats.goals_for + sign * goals_for
    ga = stats.goals_against + sign * goals_against
    return stats.model_copy(
        update={
            "played": stats.played + sign,
            "wins": wins,
            "draws": draws,
            "losses": losses,
            "goals_for": gf,
            "goals_against": ga,
            "goal_difference": gf - ga,
            "points": POINTS_FOR_WIN * wins + POINTS_FOR_DRAW * draws,
        }
    )


def apply_match_result(
    home_stats: TeamStatRecord,
    away_stats: TeamStatRecord,
    home_score: int,
    away_score: int,
) -> Tuple[TeamStatRecord, TeamStatRecord]:
    """
    Add one finished result to both teams' records and return the new records.
    Inputs are left untouched.
    """
    hs = _check_score(home_score, "home")
    as_ = _check_score(away_score, "away")
    return _shift(home_stats, hs, as_, +1), _shift(away_stats, as_, hs, +1)


def reverse_match_result(
    home_stats: TeamStatRecord,
    away_stats: TeamStatRecord,
    home_score: int,
    away_score: int,
) -> Tuple[TeamStatRecord, TeamStatRecord]:
    """
    Exact inverse of apply_match_result for the same score pair.
    Used when a finished match is edited, reopened or deleted.
    """
    hs = _check_score(home_score, "home")
    as_ = _check_score(away_score, "away")
    return _shift(home_stats, hs, as_, -1), _shift(away_stats, as_, hs, -1)


def recompute_standings(match_results: Iterable[MatchResult]) -> dict[str, StandingsLine]:
    """
    Rebuild every team's line from zero over the full list of finished results.

    Teams are keyed by name. Only teams that appear in at least one result are
    returned; an empty input yields an empty mapping.
    """
    acc: dict[str, dict[str, int]] = {}

    def _row(name: str) -> dict[str, int]:
        if name not in acc:
            acc[name] = {"points": 0, "goal_difference": 0, "wins": 0, "losses": 0, "draws": 0}
        return acc[name]

    results = list(match_results)
    for m in results:
        _row(m.home_team)
        _row(m.away_team)

    for m in results:
        hs = _check_score(m.home_score, "home")
        as_ = _check_score(m.away_score, "away")
        home = acc[m.home_team]
        away = acc[m.away_team]

        home["goal_difference"] += hs - as_
        away["goal_difference"] += as_ - hs

        if hs > as_:
            home["points"] += POINTS_FOR_WIN
            home["wins"] += 1
            away["losses"] += 1
        elif hs < as_:
            away["points"] += POINTS_FOR_WIN
            away["wins"] += 1
            home["losses"] += 1
        else:
            home["points"] += POINTS_FOR_DRAW
            away["points"] += POINTS_FOR_DRAW
            home["draws"] += 1
            away["draws"] += 1

    return {name: StandingsLine(**row) for name, row in acc.items()}


def merge_with_roster(
    roster: Sequence[str],
    computed: Mapping[str, StandingsLine],
) -> List[StandingsEntry]:
    """
    One entry per roster team, in roster order.
    Teams missing from `computed` keep all-zero stats; names in `computed`
    that are not on the roster are dropped.
    """
    merged: dict[str, StandingsEntry] = {name: StandingsEntry(team_name=name) for name in roster}
    for name, line in computed.items():
        if name in merged:
            merged[name] = StandingsEntry(team_name=name, **line.model_dump())
    return list(merged.values())


T = TypeVar("T")


def rank(entries: Iterable[T]) -> List[T]:
    """
    Order by points desc, then goal difference desc.
    Full ties keep their input order (sorted() is stable).
    Works on anything exposing .points and .goal_difference.
    """
    return sorted(entries, key=lambda e: (-e.points, -e.goal_difference))


def is_consistent(stats: TeamStatRecord) -> bool:
    """True when the counters agree with each other and with the derived fields."""
    return (
        stats.played == stats.wins + stats.draws + stats.losses
        and stats.goal_difference == stats.goals_for - stats.goals_against
        and stats.points == POINTS_FOR_WIN * stats.wins + POINTS_FOR_DRAW * stats.draws
    )
