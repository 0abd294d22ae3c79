import pytest
import requests

from league_table import schemas
from league_table.main import app
from league_table.services.textgen import TextGenClient, TextGenError, get_textgen


class _Resp:
    def __init__(self, payload, status=200):
        self._payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class _Session:
    def __init__(self, resp=None, exc=None):
        self.resp = resp
        self.exc = exc
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if self.exc:
            raise self.exc
        return self.resp


def test_league_name_round_trip():
    s = _Session(_Resp({"leagueName": "Coastal Cup"}))
    client = TextGenClient("http://textgen.local/", timeout=5, session=s)

    out = client.generate_league_name(schemas.LeagueNameIn(sport="Football", country="Portugal"))
    assert out.league_name == "Coastal Cup"

    call = s.calls[0]
    assert call["url"] == "http://textgen.local/generate"
    assert call["timeout"] == 5
    assert call["json"]["input"] == {"sport": "Football", "country": "Portugal"}
    assert "Portugal" in call["json"]["prompt"]
    assert "leagueName" in call["json"]["schema"]["properties"]


def test_standings_response_is_validated():
    s = _Session(_Resp({"updatedStandings": [{"teamName": "A", "points": "lots"}]}))
    client = TextGenClient("http://textgen.local", session=s)
    body = schemas.StandingsAutomationIn(match_results=[], current_standings=[], league_name="L")
    with pytest.raises(TextGenError):
        client.update_standings(body)


def test_http_failures_become_textgen_errors():
    client = TextGenClient("http://textgen.local", session=_Session(_Resp({}, status=500)))
    with pytest.raises(TextGenError):
        client.generate_team_name(schemas.TeamNameIn(league_name="L"))

    client = TextGenClient("http://textgen.local", session=_Session(exc=requests.ConnectionError("down")))
    with pytest.raises(TextGenError):
        client.generate_team_name(schemas.TeamNameIn(league_name="L"))


def test_ai_routes_need_configuration(client):
    r = client.post("/ai/team-name", json={"leagueName": "Any League"})
    assert r.status_code == 503


def test_ai_routes_with_fake_client(client):
    s = _Session(_Resp({"teamName": "Harbour Hawks"}))
    app.dependency_overrides[get_textgen] = lambda: TextGenClient("http://textgen.local", session=s)

    r = client.post("/ai/team-name", json={"leagueName": "Any League"})
    assert r.status_code == 200, r.text
    assert r.json() == {"teamName": "Harbour Hawks"}


def test_create_league_with_generated_name(client):
    s = _Session(_Resp({"leagueName": "Northern Lights League"}))
    app.dependency_overrides[get_textgen] = lambda: TextGenClient("http://textgen.local", session=s)

    r = client.post("/ai/leagues", json={"sport": "Football", "country": "Norway"})
    assert r.status_code == 200, r.text
    js = r.json()
    assert js["name"] == "Northern Lights League"
    assert js["slug"] == "northern-lights-league"
    assert js["country"] == "Norway"


def test_upstream_error_is_502(client):
    s = _Session(_Resp({"nope": 1}))
    app.dependency_overrides[get_textgen] = lambda: TextGenClient("http://textgen.local", session=s)
    r = client.post("/ai/league-name", json={"sport": "Rugby", "country": "Fiji"})
    assert r.status_code == 502
