from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import schemas
from ..db import get_db
from ..services.textgen import TextGenClient, TextGenError, get_textgen
from .league import create_league_row

route = APIRouter(prefix="/ai", tags=["ai"])

logger = logging.getLogger(__name__)


def _require(client: Optional[TextGenClient]) -> TextGenClient:
    if client is None:
        raise HTTPException(status_code=503, detail="Text generation is not configured")
    return client


@route.post("/league-name", response_model=schemas.LeagueNameOut, response_model_by_alias=True)
def league_name(body: schemas.LeagueNameIn, client: Optional[TextGenClient] = Depends(get_textgen)):
    try:
        return _require(client).generate_league_name(body)
    except TextGenError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@route.post("/team-name", response_model=schemas.TeamNameOut, response_model_by_alias=True)
def team_name(body: schemas.TeamNameIn, client: Optional[TextGenClient] = Depends(get_textgen)):
    try:
        return _require(client).generate_team_name(body)
    except TextGenError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@route.post("/leagues", response_model=schemas.LeagueOut)
def create_league_with_ai(
    body: schemas.LeagueNameIn,
    db: Session = Depends(get_db),
    client: Optional[TextGenClient] = Depends(get_textgen),
):
    """Generate a league name for the sport/country pair and create the league with it."""
    try:
        generated = _require(client).generate_league_name(body)
    except TextGenError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    logger.info("generated league name %r", generated.league_name)
    league = create_league_row(db, generated.league_name, body.sport, body.country)
    return schemas.LeagueOut.model_validate(league)
