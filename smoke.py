# smoke.py — end-to-end run against a live League Table API
import json
import uuid

import requests

BASE = "http://127.0.0.1:8000"


def post(path, data=None, headers=None):
    r = requests.post(BASE + path, json=data, headers=headers)
    r.raise_for_status()
    return r.json()


def patch(path, data):
    r = requests.patch(BASE + path, json=data)
    r.raise_for_status()
    return r.json()


def get(path):
    r = requests.get(BASE + path)
    r.raise_for_status()
    return r.json()


def show(title, payload):
    print(f"=== {title} ===")
    print(json.dumps(payload, indent=2, default=str))


suffix = uuid.uuid4().hex[:6]

league = post("/leagues/", {"name": f"Smoke League {suffix}"})
show("league", league)
lid = league["id"]

teams = [post(f"/leagues/{lid}/teams", {"name": n}) for n in ("Rovers", "United", "Athletic", "Wanderers")]
ids = {t["name"]: t["id"] for t in teams}

post(f"/leagues/{lid}/matches", {
    "home_team_id": ids["Rovers"], "away_team_id": ids["United"],
    "date_time": "2025-08-09T15:00:00", "home_score": 3, "away_score": 1,
})
post(f"/leagues/{lid}/matches", {
    "home_team_id": ids["United"], "away_team_id": ids["Rovers"],
    "date_time": "2025-08-16T15:00:00", "home_score": 0, "away_score": 2,
})
m = post(f"/leagues/{lid}/matches", {
    "home_team_id": ids["Athletic"], "away_team_id": ids["Wanderers"],
    "date_time": "2025-08-23T15:00:00",
})
patch(f"/matches/{m['id']}", {"home_score": 2, "away_score": 2})

show("standings (incremental)", get(f"/standings/{lid}"))
show("verify", get(f"/standings/{lid}/verify"))
show("recompute", post(f"/standings/{lid}/recompute"))
show("automate", post(f"/standings/{lid}/automate", headers={"Idempotency-Key": f"smoke-{suffix}"}))
