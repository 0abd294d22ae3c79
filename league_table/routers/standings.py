# league_table/routers/standings.py
from typing import List, Union

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from .. import models, schemas
from ..db import get_db
from ..services.automation import NoFinishedMatches, run_automation
from ..services.rebuild import league_teams, rebuild_league, table_rows, verify_league
from ..services.stats_sync import ConcurrentUpdateError
from ..services.textgen import (
    LocalStandingsAutomation,
    TextGenClient,
    TextGenError,
    get_standings_automation,
)
from ..utils.idempotency import with_idempotency

route = APIRouter(prefix="/standings", tags=["standings"])


def _league_or_404(db: Session, league_id: int) -> models.League:
    league = db.get(models.League, league_id)
    if not league:
        raise HTTPException(status_code=404, detail="League not found")
    return league


@route.get("/{league_id}", response_model=List[schemas.TableRow], operation_id="standings_get")
def get_standings(league_id: int, db: Session = Depends(get_db)):
    """
    Ranked table from the stored per-team counters:
    points desc, then goal difference desc, full ties in name order.
    """
    league = _league_or_404(db, league_id)
    return table_rows(league_teams(db, league.id))


@route.post("/{league_id}/recompute", response_model=List[schemas.TableRow], operation_id="standings_recompute")
def recompute(league_id: int, db: Session = Depends(get_db)):
    """
    Throw away the stored counters and rebuild them from every finished match.
    Running it twice gives the same table.
    """
    league = _league_or_404(db, league_id)
    try:
        teams = rebuild_league(db, league)
    except ConcurrentUpdateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return table_rows(teams)


@route.get("/{league_id}/verify", response_model=schemas.VerifyOut, operation_id="standings_verify")
def verify(league_id: int, db: Session = Depends(get_db)):
    """Compare stored counters with a from-scratch rebuild; lists drifted teams."""
    league = _league_or_404(db, league_id)
    drift = verify_league(db, league.id)
    return schemas.VerifyOut(ok=not drift, league_id=league.id, drift=drift)


@route.post("/{league_id}/automate", response_model=schemas.AutomationResult, operation_id="standings_automate")
@with_idempotency("automate_standings_v1")
async def automate(
    league_id: int,
    request: Request,
    db: Session = Depends(get_db),
    collaborator: Union[TextGenClient, LocalStandingsAutomation] = Depends(get_standings_automation),
):
    """
    Rebuild the table through the standings automation collaborator.
    Requires an Idempotency-Key header so a retried click does not call it twice.
    The collaborator call blocks, so it runs in the threadpool.
    """
    league = _league_or_404(db, league_id)
    try:
        return await run_in_threadpool(run_automation, db, league, collaborator)
    except NoFinishedMatches as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except TextGenError as exc:
        raise HTTPException(status_code=502, detail=f"Failed to update standings: {exc}") from exc
    except ConcurrentUpdateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
