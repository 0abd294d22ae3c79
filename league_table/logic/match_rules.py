# league_table/logic/match_rules.py
from __future__ import annotations

from typing import List, NamedTuple, Optional

from ..models import MatchStatus


def derive_status(home_score: int | None, away_score: int | None) -> MatchStatus:
    """A match is finished iff both scores are present and non-negative."""
    if home_score is not None and away_score is not None and home_score >= 0 and away_score >= 0:
        return MatchStatus.FINISHED
    return MatchStatus.UPCOMING


class MatchState(NamedTuple):
    """The parts of a match that feed the team counters."""

    home_team_id: int
    away_team_id: int
    home_score: Optional[int]
    away_score: Optional[int]

    @property
    def finished(self) -> bool:
        return derive_status(self.home_score, self.away_score) == MatchStatus.FINISHED


class StatDelta(NamedTuple):
    """One apply (+1) or reverse (-1) of a finished result against two teams."""

    sign: int
    home_team_id: int
    away_team_id: int
    home_score: int
    away_score: int


def plan_deltas(before: MatchState | None, after: MatchState | None) -> List[StatDelta]:
    """
    Stat operations needed to move a match from `before` to `after`.

      - None before  => the match is being created
      - None after   => the match is being deleted
      - a finished `before` is always reversed first, then a finished `after` applied

    Unchanged finished results produce no operations.
    """
    if before is not None and after is not None and before == after:
        return []

    out: List[StatDelta] = []
    if before is not None and before.finished:
        out.append(
            StatDelta(-1, before.home_team_id, before.away_team_id, int(before.home_score), int(before.away_score))
        )
    if after is not None and after.finished:
        out.append(StatDelta(+1, after.home_team_id, after.away_team_id, int(after.home_score), int(after.away_score)))
    return out
