# league_table/services/stats_sync.py
from __future__ import annotations

import logging
from typing import Callable, Iterable, TypeVar

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .. import config, models
from ..logic.match_rules import StatDelta
from ..logic.standings import (
    TeamStatRecord,
    apply_match_result,
    reverse_match_result,
)

__all__ = [
    "ConcurrentUpdateError",
    "STAT_FIELDS",
    "record_from_team",
    "write_record",
    "apply_deltas",
    "commit_with_retry",
]

logger = logging.getLogger(__name__)

STAT_FIELDS = (
    "played",
    "wins",
    "draws",
    "losses",
    "goals_for",
    "goals_against",
    "goal_difference",
    "points",
)

T = TypeVar("T")


class ConcurrentUpdateError(RuntimeError):
    """The team counters kept changing underneath us; retries exhausted."""


def record_from_team(team: models.Team) -> TeamStatRecord:
    return TeamStatRecord(
        team_id=team.id,
        team_name=team.name,
        league_id=team.league_id,
        **{f: int(getattr(team, f) or 0) for f in STAT_FIELDS},
    )


def write_record(team: models.Team, record: TeamStatRecord) -> None:
    for f in STAT_FIELDS:
        setattr(team, f, getattr(record, f))


def apply_deltas(db: Session, deltas: Iterable[StatDelta]) -> None:
    """
    Read the two teams' current counters, compute the next ones with the
    pure aggregator, and write them back onto the ORM rows (no commit).
    """
    for d in deltas:
        home = db.get(models.Team, d.home_team_id)
        away = db.get(models.Team, d.away_team_id)
        if home is None or away is None:
            # orphaned reference; nothing left to keep consistent
            logger.warning(
                "stats delta skipped, team missing home=%s away=%s", d.home_team_id, d.away_team_id
            )
            continue

        fn = apply_match_result if d.sign > 0 else reverse_match_result
        new_home, new_away = fn(record_from_team(home), record_from_team(away), d.home_score, d.away_score)
        write_record(home, new_home)
        write_record(away, new_away)
        logger.debug(
            "stats %s %s %d-%d %s",
            "apply" if d.sign > 0 else "reverse",
            home.name,
            d.home_score,
            d.away_score,
            away.name,
        )


def commit_with_retry(db: Session, work: Callable[[], T], retries: int | None = None) -> T:
    """
    Run `work` (which reads rows, mutates them and returns a value) and commit.

    Team rows are versioned, so a concurrent writer makes the commit fail with
    StaleDataError. The session is rolled back (expiring every row) and the
    whole read-compute-write cycle runs again from fresh data.
    """
    attempts = retries if retries is not None else config.STATS_WRITE_RETRIES
    for attempt in range(1, max(1, attempts) + 1):
        try:
            result = work()
            db.commit()
            return result
        except StaleDataError:
            db.rollback()
            logger.warning("stale team counters, retrying (attempt %d/%d)", attempt, attempts)
        except Exception:
            db.rollback()
            raise
    raise ConcurrentUpdateError("Team stats were modified concurrently; please retry")
