from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db
from ..logic.match_rules import MatchState, plan_deltas
from ..services.stats_sync import ConcurrentUpdateError, apply_deltas, commit_with_retry

# NOTE: no prefix so we can define both /teams/* and /leagues/{league_id}/teams
router = APIRouter(tags=["teams"])

logger = logging.getLogger(__name__)


def _name_taken(db: Session, league_id: int, name: str, exclude_id: int | None = None) -> bool:
    q = db.query(models.Team).filter(models.Team.league_id == league_id, models.Team.name == name)
    if exclude_id is not None:
        q = q.filter(models.Team.id != exclude_id)
    return q.first() is not None


# ====== League-scoped endpoints ======
@router.get("/leagues/{league_id}/teams", response_model=List[schemas.TeamOut])
def list_teams_for_league(league_id: int, db: Session = Depends(get_db)):
    league = db.get(models.League, league_id)
    if not league:
        raise HTTPException(status_code=404, detail="League not found")
    return db.query(models.Team).filter(models.Team.league_id == league_id).order_by(models.Team.name.asc()).all()


@router.post(
    "/leagues/{league_id}/teams",
    response_model=schemas.TeamOut,
    status_code=status.HTTP_201_CREATED,
)
def create_team_for_league(league_id: int, body: schemas.TeamCreate, db: Session = Depends(get_db)):
    league = db.get(models.League, league_id)
    if not league:
        raise HTTPException(status_code=404, detail="League not found")

    name = body.name.strip()
    if _name_taken(db, league_id, name):
        raise HTTPException(status_code=409, detail="Team name already exists in this league")

    # counters start at zero via column defaults
    team = models.Team(league_id=league_id, name=name, logo_url=str(body.logo_url) if body.logo_url else None)
    db.add(team)
    db.commit()
    db.refresh(team)
    logger.info("team created id=%s league_id=%s", team.id, league_id)
    return team


# ====== Single team ======
@router.get("/teams/{team_id}", response_model=schemas.TeamOut)
def get_team(team_id: int, db: Session = Depends(get_db)):
    team = db.get(models.Team, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    return team


@router.patch("/teams/{team_id}", response_model=schemas.TeamOut)
def update_team(team_id: int, body: schemas.TeamUpdate, db: Session = Depends(get_db)):
    """Name / logo only. Stat counters are owned by the match and standings flows."""
    team = db.get(models.Team, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")

    if body.name is not None:
        name = body.name.strip()
        if _name_taken(db, team.league_id, name, exclude_id=team.id):
            raise HTTPException(status_code=409, detail="Team name already exists in this league")
        team.name = name
    if "logo_url" in body.model_fields_set:
        team.logo_url = str(body.logo_url) if body.logo_url else None

    db.commit()
    db.refresh(team)
    return team


@router.delete("/teams/{team_id}", status_code=200)
def delete_team(team_id: int, db: Session = Depends(get_db)):
    """
    Delete a team and every match it took part in.
    Finished matches are reversed first so opponents' counters stay consistent.
    """
    if db.get(models.Team, team_id) is None:
        raise HTTPException(status_code=404, detail="Team not found")

    def _work() -> int:
        team = db.get(models.Team, team_id)
        matches = (
            db.query(models.Match)
            .filter((models.Match.home_team_id == team_id) | (models.Match.away_team_id == team_id))
            .all()
        )
        for m in matches:
            before = MatchState(m.home_team_id, m.away_team_id, m.home_score, m.away_score)
            apply_deltas(db, plan_deltas(before, None))
            db.delete(m)
        db.delete(team)
        return len(matches)

    try:
        removed = commit_with_retry(db, _work)
    except ConcurrentUpdateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    logger.info("team deleted id=%s matches_removed=%d", team_id, removed)
    return {"ok": True, "deleted": team_id, "matches_removed": removed}
