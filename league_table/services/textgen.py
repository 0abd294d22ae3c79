# league_table/services/textgen.py
from __future__ import annotations

import logging
from typing import Any, Dict, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from .. import config, schemas
from ..logic.standings import MatchResult, merge_with_roster, rank, recompute_standings

__all__ = [
    "TextGenError",
    "TextGenClient",
    "LocalStandingsAutomation",
    "get_textgen",
    "get_standings_automation",
]

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

LEAGUE_NAME_PROMPT = (
    "You are an expert league name generator. "
    "Generate a creative, brandable name for a {sport} league based in {country}. "
    "The name should be unique and appealing to fans."
)

TEAM_NAME_PROMPT = (
    "You are a creative team name generator for sports leagues. "
    "Generate a catchy, memorable name for a football team playing in the {league_name} league. "
    "Do not reuse a name from a major professional league."
)

STANDINGS_PROMPT = (
    "Recalculate the standings of the {league_name} league from every finished match result. "
    "A win is worth 3 points, a draw 1. Return one entry per team in currentStandings."
)


class TextGenError(RuntimeError):
    """The text-generation service failed or answered outside its schema."""


class TextGenClient:
    """
    JSON-over-HTTP client for the text-generation service.

    Every call POSTs {"prompt", "input", "schema"} to `<base_url>/generate` and
    expects the structured object described by `schema` back.
    """

    def __init__(self, base_url: str, timeout: float = 30.0, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _generate(self, prompt: str, payload: Dict[str, Any], out_model: Type[M]) -> M:
        body = {"prompt": prompt, "input": payload, "schema": out_model.model_json_schema(by_alias=True)}
        try:
            r = self.session.post(f"{self.base_url}/generate", json=body, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("text generation request failed: %s", exc)
            raise TextGenError(f"Text generation request failed: {exc}") from exc

        try:
            return out_model.model_validate(data)
        except ValidationError as exc:
            logger.error("text generation returned an invalid payload: %s", exc)
            raise TextGenError("Text generation returned an unexpected payload") from exc

    def generate_league_name(self, body: schemas.LeagueNameIn) -> schemas.LeagueNameOut:
        prompt = LEAGUE_NAME_PROMPT.format(sport=body.sport, country=body.country)
        return self._generate(prompt, body.model_dump(by_alias=True), schemas.LeagueNameOut)

    def generate_team_name(self, body: schemas.TeamNameIn) -> schemas.TeamNameOut:
        prompt = TEAM_NAME_PROMPT.format(league_name=body.league_name)
        return self._generate(prompt, body.model_dump(by_alias=True), schemas.TeamNameOut)

    def update_standings(self, body: schemas.StandingsAutomationIn) -> schemas.StandingsAutomationOut:
        prompt = STANDINGS_PROMPT.format(league_name=body.league_name)
        return self._generate(prompt, body.model_dump(by_alias=True), schemas.StandingsAutomationOut)


class LocalStandingsAutomation:
    """
    In-process implementation of the standings automation contract:
    recompute from all results, keep every team of currentStandings
    (zeroed when it has not played), rank.
    """

    def update_standings(self, body: schemas.StandingsAutomationIn) -> schemas.StandingsAutomationOut:
        lines = recompute_standings(
            MatchResult(
                home_team=m.home_team,
                away_team=m.away_team,
                home_score=m.home_score,
                away_score=m.away_score,
            )
            for m in body.match_results
        )
        entries = rank(merge_with_roster([s.team_name for s in body.current_standings], lines))
        return schemas.StandingsAutomationOut(
            updated_standings=[schemas.StandingIn(**e.model_dump()) for e in entries]
        )


# ---------- FastAPI dependencies ----------


def get_textgen() -> TextGenClient | None:
    if not config.TEXTGEN_URL:
        return None
    return TextGenClient(config.TEXTGEN_URL, timeout=config.TEXTGEN_TIMEOUT)


def get_standings_automation() -> TextGenClient | LocalStandingsAutomation:
    client = get_textgen()
    return client if client is not None else LocalStandingsAutomation()
