from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db
from ..utils.text import slugify

route = APIRouter(prefix="/leagues", tags=["leagues"])

logger = logging.getLogger(__name__)


def create_league_row(db: Session, name: str, sport: str, country: str) -> models.League:
    """Insert a league after checking name and slug uniqueness."""
    name = name.strip()
    slug = slugify(name)
    if not slug:
        raise HTTPException(status_code=400, detail="League name must contain letters or digits")

    existing = (
        db.query(models.League)
        .filter((models.League.name == name) | (models.League.slug == slug))
        .first()
    )
    if existing:
        raise HTTPException(status_code=400, detail="League name already exists")

    league = models.League(name=name, slug=slug, sport=sport, country=country)
    db.add(league)
    db.commit()
    db.refresh(league)
    logger.info("league created id=%s slug=%s", league.id, league.slug)
    return league


# ---------------- routes ----------------


@route.post("/", response_model=schemas.LeagueOut)
def create_league(body: schemas.LeagueCreate, db: Session = Depends(get_db)):
    league = create_league_row(db, body.name, body.sport, body.country)
    return schemas.LeagueOut.model_validate(league)


@route.get("/", response_model=list[schemas.LeagueOut])
def list_leagues(db: Session = Depends(get_db)):
    leagues = db.query(models.League).order_by(models.League.created_at.desc(), models.League.id.desc()).all()
    return [schemas.LeagueOut.model_validate(lg) for lg in leagues]


@route.get("/by-slug/{slug}", response_model=schemas.LeagueOut)
def get_league_by_slug(slug: str, db: Session = Depends(get_db)):
    league = db.query(models.League).filter(models.League.slug == slug).first()
    if not league:
        raise HTTPException(status_code=404, detail="League not found")
    return schemas.LeagueOut.model_validate(league)


@route.get("/{league_id}", response_model=schemas.LeagueOut)
def get_league(league_id: int, db: Session = Depends(get_db)):
    league = db.get(models.League, league_id)
    if not league:
        raise HTTPException(status_code=404, detail="League not found")
    return schemas.LeagueOut.model_validate(league)


@route.patch("/{league_id}", response_model=schemas.LeagueOut)
def update_league(league_id: int, body: schemas.LeagueUpdate, db: Session = Depends(get_db)):
    league = db.get(models.League, league_id)
    if not league:
        raise HTTPException(status_code=404, detail="League not found")

    if body.name is not None and body.name.strip() != league.name:
        name = body.name.strip()
        slug = slugify(name)
        clash = (
            db.query(models.League)
            .filter(
                models.League.id != league.id,
                (models.League.name == name) | (models.League.slug == slug),
            )
            .first()
        )
        if clash or not slug:
            raise HTTPException(status_code=400, detail="League name already exists")
        league.name = name
        league.slug = slug
    if body.sport is not None:
        league.sport = body.sport
    if body.country is not None:
        league.country = body.country

    db.commit()
    db.refresh(league)
    return schemas.LeagueOut.model_validate(league)


@route.delete("/{league_id}")
def delete_league(league_id: int, db: Session = Depends(get_db)):
    """Remove the league with all its matches and teams."""
    league = db.get(models.League, league_id)
    if not league:
        raise HTTPException(status_code=404, detail="League not found")
    db.delete(league)
    db.commit()
    logger.info("league deleted id=%s", league_id)
    return {"ok": True, "deleted": league_id}
