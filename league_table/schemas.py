from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, model_validator
from pydantic.alias_generators import to_camel


# -----------------------
# Shared / Enums
# -----------------------
class MatchStatus(str, Enum):
    UPCOMING = "upcoming"
    FINISHED = "finished"


# -----------------------
# League
# -----------------------
class LeagueCreate(BaseModel):
    name: str = Field(..., min_length=3)
    sport: str = "Football"
    country: str = "Global"


class LeagueUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=3)
    sport: str | None = None
    country: str | None = None


class LeagueOut(BaseModel):
    id: int
    name: str
    slug: str
    sport: str
    country: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# -----------------------
# Team
# -----------------------
class TeamCreate(BaseModel):
    name: str = Field(..., min_length=2)
    logo_url: HttpUrl | None = None


class TeamUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2)
    logo_url: HttpUrl | None = None


class TeamOut(BaseModel):
    id: int
    league_id: int
    name: str
    logo_url: str | None = None
    played: int
    wins: int
    draws: int
    losses: int
    goals_for: int
    goals_against: int
    goal_difference: int
    points: int

    model_config = ConfigDict(from_attributes=True)


# -----------------------
# Matches
# -----------------------
class MatchCreate(BaseModel):
    home_team_id: int
    away_team_id: int
    date_time: datetime
    home_score: int | None = Field(default=None, ge=0)
    away_score: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _distinct_teams(self) -> "MatchCreate":
        if self.home_team_id == self.away_team_id:
            raise ValueError("Home and away teams cannot be the same.")
        return self


class MatchUpdate(BaseModel):
    """
    Partial update. Sending a score as null explicitly reopens the match;
    omitting it keeps the stored value.
    """

    home_team_id: int | None = None
    away_team_id: int | None = None
    date_time: datetime | None = None
    home_score: int | None = Field(default=None, ge=0)
    away_score: int | None = Field(default=None, ge=0)


class MatchOut(BaseModel):
    id: int
    league_id: int
    home_team_id: int
    away_team_id: int
    home_team_name: str | None = None
    away_team_name: str | None = None
    date_time: datetime
    home_score: int | None = None
    away_score: int | None = None
    status: MatchStatus

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


# -----------------------
# Standings
# -----------------------
class TableRow(BaseModel):
    position: int
    team_id: int
    team_name: str
    played: int
    wins: int
    draws: int
    losses: int
    goals_for: int
    goals_against: int
    goal_difference: int
    points: int


class DriftRow(BaseModel):
    team_id: int
    team_name: str
    # field -> {"stored": x, "expected": y}
    fields: dict[str, dict[str, int]]


class VerifyOut(BaseModel):
    ok: bool
    league_id: int
    drift: list[DriftRow]


# -----------------------
# Text-generation collaborator wire models (camelCase on the wire)
# -----------------------
class _Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MatchResultIn(_Wire):
    home_team: str
    away_team: str
    home_score: int = Field(..., ge=0)
    away_score: int = Field(..., ge=0)


class StandingIn(_Wire):
    team_name: str
    points: int
    goal_difference: int
    wins: int
    losses: int
    draws: int


class StandingsAutomationIn(_Wire):
    match_results: list[MatchResultIn]
    current_standings: list[StandingIn]
    league_name: str


class StandingsAutomationOut(_Wire):
    updated_standings: list[StandingIn]


class LeagueNameIn(_Wire):
    sport: str = Field(..., min_length=2)
    country: str = Field(..., min_length=2)


class LeagueNameOut(_Wire):
    league_name: str


class TeamNameIn(_Wire):
    league_name: str = Field(..., min_length=1)


class TeamNameOut(_Wire):
    team_name: str


class AutomationResult(BaseModel):
    ok: bool
    league_id: int
    matches_processed: int
    table: list[TableRow]
