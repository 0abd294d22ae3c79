# league_table/services/automation.py
from __future__ import annotations

import logging
from typing import List, Protocol

from sqlalchemy.orm import Session

from .. import models, schemas
from ..logic.standings import StandingsLine, TeamStatRecord, is_consistent
from .rebuild import (
    build_records,
    finished_matches,
    league_teams,
    match_results_by_name,
    persist_records,
    table_rows,
)
from .stats_sync import STAT_FIELDS, commit_with_retry
from .textgen import TextGenError

logger = logging.getLogger(__name__)


class NoFinishedMatches(ValueError):
    pass


class StandingsCollaborator(Protocol):
    def update_standings(self, body: schemas.StandingsAutomationIn) -> schemas.StandingsAutomationOut: ...


def build_request(
    league: models.League,
    teams: List[models.Team],
    matches: List[models.Match],
) -> schemas.StandingsAutomationIn:
    current = [
        schemas.StandingIn(
            team_name=t.name,
            points=t.points or 0,
            goal_difference=t.goal_difference or 0,
            wins=t.wins or 0,
            losses=t.losses or 0,
            draws=t.draws or 0,
        )
        for t in teams
    ]
    results = [
        schemas.MatchResultIn(
            home_team=r.home_team,
            away_team=r.away_team,
            home_score=r.home_score,
            away_score=r.away_score,
        )
        for r in match_results_by_name(matches, teams)
    ]
    return schemas.StandingsAutomationIn(
        match_results=results, current_standings=current, league_name=league.name
    )


def _adds_up(record: TeamStatRecord) -> bool:
    return is_consistent(record) and all(getattr(record, f) >= 0 for f in STAT_FIELDS if f != "goal_difference")


def run_automation(
    db: Session,
    league: models.League,
    collaborator: StandingsCollaborator,
) -> schemas.AutomationResult:
    """
    Rebuild standings through the text-generation collaborator.

    Its response is authoritative for the teams it lists. Roster teams it
    leaves out are reset to zero. played / goals for / goals against are
    always reconstructed locally from the raw matches, and a listed entry
    that does not add up against them rejects the whole response.
    """
    teams = league_teams(db, league.id)
    matches = finished_matches(db, league.id)
    if not matches:
        raise NoFinishedMatches("No finished matches to process.")

    request = build_request(league, teams, matches)
    response = collaborator.update_standings(request)

    lines = {
        s.team_name: StandingsLine(
            points=s.points,
            goal_difference=s.goal_difference,
            wins=s.wins,
            losses=s.losses,
            draws=s.draws,
        )
        for s in response.updated_standings
    }
    omitted = [t.name for t in teams if t.name not in lines]
    if omitted:
        logger.warning("automation response omitted teams, resetting to zero: %s", omitted)

    league_id = league.id

    def _work() -> None:
        roster = league_teams(db, league_id)
        played = finished_matches(db, league_id)
        records = build_records(roster, played, lines)
        bad = [r.team_name for r in records if r.team_name in lines and not _adds_up(r)]
        if bad:
            raise TextGenError(f"inconsistent standings for: {', '.join(bad)}")
        persist_records(db, league_id, records)

    commit_with_retry(db, _work)
    logger.info("standings automation applied league_id=%s matches=%d", league_id, len(matches))

    return schemas.AutomationResult(
        ok=True,
        league_id=league_id,
        matches_processed=len(matches),
        table=table_rows(league_teams(db, league_id)),
    )
