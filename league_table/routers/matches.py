from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db
from ..logic.match_rules import MatchState, derive_status, plan_deltas
from ..services.stats_sync import ConcurrentUpdateError, apply_deltas, commit_with_retry

router = APIRouter(tags=["matches"])

logger = logging.getLogger(__name__)


def _state(m: models.Match) -> MatchState:
    return MatchState(m.home_team_id, m.away_team_id, m.home_score, m.away_score)


def _match_out(m: models.Match) -> schemas.MatchOut:
    out = schemas.MatchOut.model_validate(m)
    out.home_team_name = m.home_team.name if m.home_team else None
    out.away_team_name = m.away_team.name if m.away_team else None
    return out


def _check_teams(db: Session, league_id: int, home_team_id: int, away_team_id: int) -> None:
    if home_team_id == away_team_id:
        raise HTTPException(status_code=400, detail="Home and away teams cannot be the same.")
    for tid in (home_team_id, away_team_id):
        team = db.get(models.Team, tid)
        if team is None or team.league_id != league_id:
            raise HTTPException(status_code=400, detail=f"Team {tid} is not part of this league")


def _commit(db: Session, work):
    try:
        return commit_with_retry(db, work)
    except ConcurrentUpdateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


# ====== League-scoped endpoints ======
@router.get("/leagues/{league_id}/matches", response_model=List[schemas.MatchOut])
def list_matches(league_id: int, db: Session = Depends(get_db)):
    league = db.get(models.League, league_id)
    if not league:
        raise HTTPException(status_code=404, detail="League not found")
    matches = (
        db.query(models.Match)
        .filter(models.Match.league_id == league_id)
        .order_by(models.Match.date_time.desc(), models.Match.id.desc())
        .all()
    )
    return [_match_out(m) for m in matches]


@router.post(
    "/leagues/{league_id}/matches",
    response_model=schemas.MatchOut,
    status_code=status.HTTP_201_CREATED,
)
def create_match(league_id: int, body: schemas.MatchCreate, db: Session = Depends(get_db)):
    """
    Create a fixture. With both scores supplied it is created finished and
    both teams' counters are updated in the same transaction.
    """
    league = db.get(models.League, league_id)
    if not league:
        raise HTTPException(status_code=404, detail="League not found")
    _check_teams(db, league_id, body.home_team_id, body.away_team_id)

    def _work() -> int:
        m = models.Match(
            league_id=league_id,
            home_team_id=body.home_team_id,
            away_team_id=body.away_team_id,
            date_time=body.date_time,
            home_score=body.home_score,
            away_score=body.away_score,
            status=derive_status(body.home_score, body.away_score),
        )
        db.add(m)
        apply_deltas(db, plan_deltas(None, _state(m)))
        db.flush()
        return m.id

    match_id = _commit(db, _work)
    m = db.get(models.Match, match_id)
    logger.info("match created id=%s league_id=%s status=%s", m.id, league_id, m.status.value)
    return _match_out(m)


# ====== Single match ======
@router.get("/matches/{match_id}", response_model=schemas.MatchOut)
def get_match(match_id: int, db: Session = Depends(get_db)):
    m = db.get(models.Match, match_id)
    if not m:
        raise HTTPException(status_code=404, detail="Match not found")
    return _match_out(m)


@router.patch("/matches/{match_id}", response_model=schemas.MatchOut)
def update_match(match_id: int, body: schemas.MatchUpdate, db: Session = Depends(get_db)):
    """
    Edit teams, kick-off or scores. Status follows the scores:
    the old result is reversed when it was finished, the new one applied when it is.
    """
    m = db.get(models.Match, match_id)
    if not m:
        raise HTTPException(status_code=404, detail="Match not found")

    fields = body.model_fields_set
    home_team_id = body.home_team_id if body.home_team_id is not None else m.home_team_id
    away_team_id = body.away_team_id if body.away_team_id is not None else m.away_team_id
    _check_teams(db, m.league_id, home_team_id, away_team_id)

    def _work() -> None:
        match = db.get(models.Match, match_id)
        before = _state(match)

        match.home_team_id = home_team_id
        match.away_team_id = away_team_id
        if body.date_time is not None:
            match.date_time = body.date_time
        if "home_score" in fields:
            match.home_score = body.home_score
        if "away_score" in fields:
            match.away_score = body.away_score
        match.status = derive_status(match.home_score, match.away_score)

        apply_deltas(db, plan_deltas(before, _state(match)))

    _commit(db, _work)
    m = db.get(models.Match, match_id)
    db.refresh(m)
    logger.info("match updated id=%s status=%s", m.id, m.status.value)
    return _match_out(m)


@router.delete("/matches/{match_id}", status_code=200)
def delete_match(match_id: int, db: Session = Depends(get_db)):
    """Delete a fixture, reversing its result from both teams when it was finished."""
    if db.get(models.Match, match_id) is None:
        raise HTTPException(status_code=404, detail="Match not found")

    def _work() -> bool:
        match = db.get(models.Match, match_id)
        before = _state(match)
        apply_deltas(db, plan_deltas(before, None))
        db.delete(match)
        return before.finished

    was_finished = _commit(db, _work)
    logger.info("match deleted id=%s reversed=%s", match_id, was_finished)
    return {"ok": True, "deleted": match_id, "reversed": was_finished}
