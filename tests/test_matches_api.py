def _setup(make_league, make_team):
    lg = make_league()
    a = make_team(lg["id"], "Aces")
    b = make_team(lg["id"], "Bees")
    return lg, a, b


def test_create_upcoming_match_leaves_stats_alone(client, make_league, make_team, make_match, team_by_name):
    lg, a, b = _setup(make_league, make_team)
    m = make_match(lg["id"], a["id"], b["id"])
    assert m["status"] == "upcoming"
    assert m["home_score"] is None and m["away_score"] is None
    assert m["home_team_name"] == "Aces" and m["away_team_name"] == "Bees"

    teams = team_by_name(lg["id"])
    assert teams["Aces"]["played"] == 0 and teams["Bees"]["played"] == 0


def test_create_finished_match_updates_both_teams(client, make_league, make_team, make_match, team_by_name):
    lg, a, b = _setup(make_league, make_team)
    m = make_match(lg["id"], a["id"], b["id"], 3, 1)
    assert m["status"] == "finished"

    teams = team_by_name(lg["id"])
    assert teams["Aces"]["wins"] == 1 and teams["Aces"]["points"] == 3 and teams["Aces"]["goal_difference"] == 2
    assert teams["Bees"]["losses"] == 1 and teams["Bees"]["points"] == 0 and teams["Bees"]["goal_difference"] == -2


def test_entering_a_result_later(client, make_league, make_team, make_match, team_by_name):
    lg, a, b = _setup(make_league, make_team)
    m = make_match(lg["id"], a["id"], b["id"])

    r = client.patch(f"/matches/{m['id']}", json={"home_score": 2, "away_score": 2})
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "finished"

    teams = team_by_name(lg["id"])
    for name in ("Aces", "Bees"):
        assert teams[name]["draws"] == 1 and teams[name]["points"] == 1 and teams[name]["played"] == 1


def test_editing_a_score_replaces_the_old_result(client, make_league, make_team, make_match, team_by_name):
    lg, a, b = _setup(make_league, make_team)
    m = make_match(lg["id"], a["id"], b["id"], 1, 0)

    r = client.patch(f"/matches/{m['id']}", json={"home_score": 0, "away_score": 2})
    assert r.status_code == 200, r.text

    teams = team_by_name(lg["id"])
    aces, bees = teams["Aces"], teams["Bees"]
    assert (aces["played"], aces["wins"], aces["losses"], aces["points"]) == (1, 0, 1, 0)
    assert (aces["goals_for"], aces["goals_against"], aces["goal_difference"]) == (0, 2, -2)
    assert (bees["played"], bees["wins"], bees["points"], bees["goal_difference"]) == (1, 1, 3, 2)


def test_partial_edit_keeps_other_score(client, make_league, make_team, make_match, team_by_name):
    lg, a, b = _setup(make_league, make_team)
    m = make_match(lg["id"], a["id"], b["id"], 1, 1)

    r = client.patch(f"/matches/{m['id']}", json={"home_score": 4})
    assert r.status_code == 200
    assert (r.json()["home_score"], r.json()["away_score"]) == (4, 1)
    assert team_by_name(lg["id"])["Aces"]["points"] == 3


def test_clearing_a_score_reopens_and_reverses(client, make_league, make_team, make_match, team_by_name):
    lg, a, b = _setup(make_league, make_team)
    m = make_match(lg["id"], a["id"], b["id"], 2, 1)

    r = client.patch(f"/matches/{m['id']}", json={"home_score": None})
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "upcoming"

    teams = team_by_name(lg["id"])
    for name in ("Aces", "Bees"):
        for k in ("played", "wins", "draws", "losses", "goals_for", "goals_against", "goal_difference", "points"):
            assert teams[name][k] == 0


def test_rescheduling_only_does_not_double_count(client, make_league, make_team, make_match, team_by_name):
    lg, a, b = _setup(make_league, make_team)
    m = make_match(lg["id"], a["id"], b["id"], 2, 0)

    r = client.patch(f"/matches/{m['id']}", json={"date_time": "2025-06-01T18:30:00"})
    assert r.status_code == 200
    assert team_by_name(lg["id"])["Aces"]["played"] == 1


def test_deleting_finished_match_reverses_it(client, make_league, make_team, make_match, team_by_name):
    lg, a, b = _setup(make_league, make_team)
    keep = make_match(lg["id"], a["id"], b["id"], 1, 0)
    gone = make_match(lg["id"], b["id"], a["id"], 3, 3)

    r = client.delete(f"/matches/{gone['id']}")
    assert r.status_code == 200
    assert r.json()["reversed"] is True
    assert client.get(f"/matches/{gone['id']}").status_code == 404
    assert client.get(f"/matches/{keep['id']}").status_code == 200

    teams = team_by_name(lg["id"])
    assert (teams["Aces"]["played"], teams["Aces"]["points"], teams["Aces"]["draws"]) == (1, 3, 0)
    assert (teams["Bees"]["played"], teams["Bees"]["points"], teams["Bees"]["draws"]) == (1, 0, 0)


def test_deleting_upcoming_match(client, make_league, make_team, make_match):
    lg, a, b = _setup(make_league, make_team)
    m = make_match(lg["id"], a["id"], b["id"])
    r = client.delete(f"/matches/{m['id']}")
    assert r.status_code == 200
    assert r.json()["reversed"] is False


def test_invalid_matches_are_rejected(client, make_league, make_team):
    lg, a, b = _setup(make_league, make_team)
    base = {"date_time": "2025-03-01T15:00:00"}

    r = client.post(f"/leagues/{lg['id']}/matches", json={**base, "home_team_id": a["id"], "away_team_id": a["id"]})
    assert r.status_code == 422

    r = client.post(
        f"/leagues/{lg['id']}/matches",
        json={**base, "home_team_id": a["id"], "away_team_id": b["id"], "home_score": -1, "away_score": 0},
    )
    assert r.status_code == 422

    r = client.post(f"/leagues/{lg['id']}/matches", json={"home_team_id": a["id"], "away_team_id": b["id"]})
    assert r.status_code == 422  # date required

    other = client.post("/leagues/", json={"name": "Elsewhere League"}).json()
    stranger = client.post(f"/leagues/{other['id']}/teams", json={"name": "Strangers"}).json()
    r = client.post(
        f"/leagues/{lg['id']}/matches", json={**base, "home_team_id": a["id"], "away_team_id": stranger["id"]}
    )
    assert r.status_code == 400


def test_patch_cannot_make_teams_equal(client, make_league, make_team, make_match):
    lg, a, b = _setup(make_league, make_team)
    m = make_match(lg["id"], a["id"], b["id"], 1, 0)
    r = client.patch(f"/matches/{m['id']}", json={"away_team_id": a["id"]})
    assert r.status_code == 400


def test_matches_listed_newest_first(client, make_league, make_team, make_match):
    lg, a, b = _setup(make_league, make_team)
    make_match(lg["id"], a["id"], b["id"], when="2025-01-01T12:00:00")
    make_match(lg["id"], b["id"], a["id"], when="2025-02-01T12:00:00")
    rows = client.get(f"/leagues/{lg['id']}/matches").json()
    assert [r["date_time"][:10] for r in rows] == ["2025-02-01", "2025-01-01"]
