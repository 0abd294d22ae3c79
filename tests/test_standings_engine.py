import random

import pytest

from league_table.logic.standings import (
    TeamStatRecord,
    apply_match_result,
    is_consistent,
    reverse_match_result,
)


def test_home_win_scores_three_points_and_goal_difference():
    a, b = apply_match_result(TeamStatRecord(team_name="A"), TeamStatRecord(team_name="B"), 3, 1)

    assert (a.played, a.wins, a.draws, a.losses) == (1, 1, 0, 0)
    assert a.points == 3
    assert a.goal_difference == 2
    assert (a.goals_for, a.goals_against) == (3, 1)

    assert (b.played, b.wins, b.draws, b.losses) == (1, 0, 0, 1)
    assert b.points == 0
    assert b.goal_difference == -2


def test_away_win_is_symmetric():
    home, away = apply_match_result(TeamStatRecord(), TeamStatRecord(), 0, 2)
    assert home.losses == 1 and home.points == 0 and home.goal_difference == -2
    assert away.wins == 1 and away.points == 3 and away.goal_difference == 2


def test_score_draw_gives_a_point_each():
    a, b = apply_match_result(TeamStatRecord(), TeamStatRecord(), 2, 2)
    for rec in (a, b):
        assert rec.draws == 1
        assert rec.points == 1
        assert rec.goal_difference == 0
        assert rec.played == 1


def test_inputs_are_not_mutated():
    home = TeamStatRecord(team_id=1, team_name="A")
    away = TeamStatRecord(team_id=2, team_name="B")
    new_home, _ = apply_match_result(home, away, 1, 0)
    assert home.played == 0 and home.points == 0
    assert new_home.team_id == 1 and new_home.team_name == "A"
    with pytest.raises(Exception):
        home.points = 10  # frozen record


def test_reverse_restores_exact_record():
    start_home = TeamStatRecord(played=4, wins=2, draws=1, losses=1, goals_for=7, goals_against=4, goal_difference=3, points=7)
    start_away = TeamStatRecord(played=4, wins=0, draws=2, losses=2, goals_for=3, goals_against=6, goal_difference=-3, points=2)

    for hs, as_ in [(0, 0), (1, 0), (0, 1), (5, 5), (4, 2), (0, 7)]:
        h, a = apply_match_result(start_home, start_away, hs, as_)
        h, a = reverse_match_result(h, a, hs, as_)
        assert h == start_home
        assert a == start_away


def test_invariants_hold_over_random_apply_reverse_sequence():
    rng = random.Random(20251019)
    records = {name: TeamStatRecord(team_name=name) for name in "ABCD"}
    applied: list[tuple[str, str, int, int]] = []

    for _ in range(300):
        if applied and rng.random() < 0.35:
            h, a, hs, as_ = applied.pop(rng.randrange(len(applied)))
            records[h], records[a] = reverse_match_result(records[h], records[a], hs, as_)
        else:
            h, a = rng.sample("ABCD", 2)
            hs, as_ = rng.randint(0, 5), rng.randint(0, 5)
            records[h], records[a] = apply_match_result(records[h], records[a], hs, as_)
            applied.append((h, a, hs, as_))

        for rec in records.values():
            assert is_consistent(rec)

    # undo everything that is still applied -> all zero again
    while applied:
        h, a, hs, as_ = applied.pop()
        records[h], records[a] = reverse_match_result(records[h], records[a], hs, as_)
    for name, rec in records.items():
        assert rec == TeamStatRecord(team_name=name)


@pytest.mark.parametrize("hs, as_", [(-1, 0), (0, -3), (None, 1), (1.5, 0)])
def test_malformed_scores_are_rejected(hs, as_):
    with pytest.raises(ValueError):
        apply_match_result(TeamStatRecord(), TeamStatRecord(), hs, as_)
    with pytest.raises(ValueError):
        reverse_match_result(TeamStatRecord(), TeamStatRecord(), hs, as_)


def test_is_consistent_flags_broken_counters():
    assert is_consistent(TeamStatRecord())
    assert not is_consistent(TeamStatRecord(played=1))
    assert not is_consistent(TeamStatRecord(played=1, wins=1, points=1))
    assert not is_consistent(TeamStatRecord(goals_for=2, goal_difference=0))
