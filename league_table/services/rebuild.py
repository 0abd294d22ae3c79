# league_table/services/rebuild.py
from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Sequence, Tuple

from sqlalchemy.orm import Session

from .. import models, schemas
from ..logic.standings import (
    MatchResult,
    StandingsLine,
    TeamStatRecord,
    merge_with_roster,
    rank,
    recompute_standings,
)
from .stats_sync import STAT_FIELDS, commit_with_retry, record_from_team, write_record

logger = logging.getLogger(__name__)

UNKNOWN_TEAM = "Unknown Team"


def league_teams(db: Session, league_id: int) -> List[models.Team]:
    """Roster in name order."""
    return (
        db.query(models.Team)
        .filter(models.Team.league_id == league_id)
        .order_by(models.Team.name.asc(), models.Team.id.asc())
        .all()
    )


def finished_matches(db: Session, league_id: int) -> List[models.Match]:
    return (
        db.query(models.Match)
        .filter(
            models.Match.league_id == league_id,
            models.Match.status == models.MatchStatus.FINISHED,
            models.Match.home_score.isnot(None),
            models.Match.away_score.isnot(None),
        )
        .order_by(models.Match.date_time.asc(), models.Match.id.asc())
        .all()
    )


def match_results_by_name(matches: Sequence[models.Match], teams: Sequence[models.Team]) -> List[MatchResult]:
    """Translate id-keyed match rows to the name-keyed batch input."""
    name_by_id = {t.id: t.name for t in teams}
    return [
        MatchResult(
            home_team=name_by_id.get(m.home_team_id, UNKNOWN_TEAM),
            away_team=name_by_id.get(m.away_team_id, UNKNOWN_TEAM),
            home_score=int(m.home_score),
            away_score=int(m.away_score),
        )
        for m in matches
    ]


def tally_goals(team_id: int, matches: Sequence[models.Match]) -> Tuple[int, int, int]:
    """(played, goals_for, goals_against) for one team from raw finished matches."""
    played = gf = ga = 0
    for m in matches:
        if m.home_team_id == team_id:
            played += 1
            gf += int(m.home_score)
            ga += int(m.away_score)
        elif m.away_team_id == team_id:
            played += 1
            gf += int(m.away_score)
            ga += int(m.home_score)
    return played, gf, ga


def build_records(
    teams: Sequence[models.Team],
    matches: Sequence[models.Match],
    lines: Mapping[str, StandingsLine],
) -> List[TeamStatRecord]:
    """
    Full stat records for every roster team: points / goal difference /
    wins / draws / losses from `lines`, played / goals for / goals against
    from the raw matches. A team missing from `lines` gets an all-zero record.
    """
    entries = merge_with_roster([t.name for t in teams], lines)
    by_name = {e.team_name: e for e in entries}

    out: List[TeamStatRecord] = []
    for t in teams:
        if t.name not in lines:
            out.append(TeamStatRecord(team_id=t.id, team_name=t.name, league_id=t.league_id))
            continue
        e = by_name[t.name]
        played, gf, ga = tally_goals(t.id, matches)
        out.append(
            TeamStatRecord(
                team_id=t.id,
                team_name=t.name,
                league_id=t.league_id,
                played=played,
                wins=e.wins,
                draws=e.draws,
                losses=e.losses,
                goals_for=gf,
                goals_against=ga,
                goal_difference=e.goal_difference,
                points=e.points,
            )
        )
    return out


def expected_records(db: Session, league_id: int) -> List[TeamStatRecord]:
    """What every team's counters should be, rebuilt from the full match history."""
    teams = league_teams(db, league_id)
    matches = finished_matches(db, league_id)
    lines = recompute_standings(match_results_by_name(matches, teams))
    return build_records(teams, matches, lines)


def persist_records(db: Session, league_id: int, records: Sequence[TeamStatRecord]) -> None:
    by_id = {t.id: t for t in league_teams(db, league_id)}
    for r in records:
        team = by_id.get(r.team_id)
        if team is not None:
            write_record(team, r)


def rebuild_league(db: Session, league: models.League) -> List[models.Team]:
    """
    Discard the stored counters and rebuild them from every finished match.
    Returns the league's teams in ranked order.
    """
    league_id = league.id

    def _work() -> int:
        records = expected_records(db, league_id)
        persist_records(db, league_id, records)
        return len(records)

    n = commit_with_retry(db, _work)
    logger.info("standings rebuilt league_id=%s teams=%d", league_id, n)
    return rank(league_teams(db, league_id))


def verify_league(db: Session, league_id: int) -> List[schemas.DriftRow]:
    """Teams whose stored counters disagree with a from-scratch rebuild."""
    teams = {t.id: t for t in league_teams(db, league_id)}
    drift: List[schemas.DriftRow] = []
    for expected in expected_records(db, league_id):
        team = teams[expected.team_id]
        stored = record_from_team(team)
        diff: Dict[str, Dict[str, int]] = {}
        for f in STAT_FIELDS:
            if getattr(stored, f) != getattr(expected, f):
                diff[f] = {"stored": getattr(stored, f), "expected": getattr(expected, f)}
        if diff:
            drift.append(schemas.DriftRow(team_id=team.id, team_name=team.name, fields=diff))
    if drift:
        logger.warning("standings drift league_id=%s teams=%s", league_id, [d.team_name for d in drift])
    return drift


def table_rows(teams: Sequence[models.Team]) -> List[schemas.TableRow]:
    """Ranked table rows (1-based positions) from stored team counters."""
    return [
        schemas.TableRow(
            position=i,
            team_id=t.id,
            team_name=t.name,
            **{f: int(getattr(t, f) or 0) for f in STAT_FIELDS},
        )
        for i, t in enumerate(rank(teams), start=1)
    ]
