"""Tests for the Flask JSON API."""

import pytest

from coachboard.services import InMemoryRosterProvider
from coachboard.ui.web_app import WebAppState, create_app
from tests.helpers import ROSTER, FailingRepository

MATCH = {
    "match_id": 1,
    "team_id": 10,
    "match_date": "2024-09-14",
    "opponent": "Rovers",
}


@pytest.fixture
def repository():
    return FailingRepository()


@pytest.fixture
def client(repository):
    app = create_app(WebAppState(repository, InMemoryRosterProvider(ROSTER)))
    app.config["TESTING"] = True
    client = app.test_client()
    assert client.post("/api/matches", json=MATCH).status_code == 201
    assert client.put("/api/matches/1/call-ups", json={"player_ids": list(range(1, 10))}).status_code == 200
    return client


def _fill_first_quarter(client):
    for player_id in range(1, 8):
        response = client.put(f"/api/matches/1/quarters/1/players/{player_id}", json={"fraction": "FULL"})
        assert response.status_code == 200


def test_create_and_get_match(client):
    response = client.get("/api/matches/1")
    data = response.get_json()

    assert response.status_code == 200
    assert data["match"]["match"]["opponent"] == "Rovers"
    assert data["match"]["call_ups"] == list(range(1, 10))
    assert [q["quarter"] for q in data["match"]["quarters"]] == [1, 2, 3, 4]

    listing = client.get("/api/matches").get_json()
    assert [match["match_id"] for match in listing["matches"]] == [1]


def test_duplicate_or_malformed_match(client):
    assert client.post("/api/matches", json=MATCH).status_code == 400

    response = client.post("/api/matches", json={"match_id": 2, "team_id": 10})
    assert response.status_code == 400
    assert response.get_json()["kind"] == "validation"

    response = client.post("/api/matches", data="nope", content_type="application/json")
    assert response.status_code == 400


def test_unknown_match_is_404(client):
    response = client.get("/api/matches/99")

    assert response.status_code == 404
    assert response.get_json() == {
        "success": False, "error": "Match 99 not found", "kind": "not_found"
    }


def test_capacity_violation_maps_to_409(client):
    _fill_first_quarter(client)

    response = client.put("/api/matches/1/quarters/1/players/8", json={"fraction": "FULL"})

    assert response.status_code == 409
    assert response.get_json()["kind"] == "capacity"
    quarter = client.get("/api/matches/1/quarters/1").get_json()
    assert quarter["occupancy"]["slots_used"] == 7
    assert quarter["fractions"]["8"] == "NONE"


def test_incomplete_call_up_maps_to_409(client):
    client.put("/api/matches/1/call-ups", json={"player_ids": [1, 2, 3, 4, 5, 6]})

    response = client.put("/api/matches/1/quarters/1/players/1", json={"fraction": "FULL"})

    assert response.status_code == 409
    assert response.get_json()["kind"] == "incomplete_call_up"
    assert client.get("/api/matches/1/call-ups").get_json()["complete"] is False


def test_substitution_round_trip(client):
    _fill_first_quarter(client)

    response = client.post("/api/matches/1/quarters/1/substitutions", json={"player_out": 7, "player_in": 8})
    assert response.status_code == 201
    periods = client.get("/api/matches/1/players/8/periods").get_json()
    assert periods["periods_played"] == 0.5

    again = client.post("/api/matches/1/quarters/1/substitutions", json={"player_out": 7, "player_in": 8})
    assert again.status_code == 409
    assert again.get_json()["kind"] == "invalid_substitution_pair"

    assert client.delete("/api/matches/1/quarters/1/substitutions/7/8").status_code == 200
    assert client.delete("/api/matches/1/quarters/1/substitutions/7/8").status_code == 404
    listing = client.get("/api/matches/1/substitutions?quarter=1").get_json()
    assert listing["substitutions"] == []


def test_substitution_requires_integer_ids(client):
    response = client.post("/api/matches/1/quarters/1/substitutions", json={"player_out": "x", "player_in": 8})

    assert response.status_code == 400


def test_goals_and_results(client):
    goal = client.post("/api/matches/1/goals", json={"quarter": 2, "scorer_id": 3, "assister_id": 4}).get_json()["goal"]
    client.post("/api/matches/1/goals", json={"quarter": 2, "scorer_id": 4})
    response = client.put("/api/matches/1/quarters/2/opponent-goals", json={"count": 1})
    assert response.get_json()["result"] == {
        "match_id": 1, "quarter": 2, "team_goals": 2, "opponent_goals": 1
    }

    results = client.get("/api/matches/1/results").get_json()
    assert results["totals"] == {"team_goals": 2, "opponent_goals": 1, "result": "win"}

    assert client.delete(f"/api/goals/{goal['id']}").status_code == 200
    assert client.delete(f"/api/goals/{goal['id']}").status_code == 404
    assert len(client.get("/api/matches/1/goals?quarter=2").get_json()["goals"]) == 1


def test_negative_opponent_goals_rejected(client):
    response = client.put("/api/matches/1/quarters/1/opponent-goals", json={"count": -2})

    assert response.status_code == 400


def test_persistence_failure_maps_to_503(client, repository):
    repository.fail_writes = True

    response = client.put("/api/matches/1/quarters/1/players/1", json={"fraction": "FULL"})

    assert response.status_code == 503
    assert response.get_json()["kind"] == "persistence"
    repository.fail_writes = False
    assert client.get("/api/matches/1/quarters/1").get_json()["fractions"]["1"] == "NONE"


def test_undo_redo_and_history(client):
    client.put("/api/matches/1/quarters/1/players/1", json={"fraction": "FULL"})

    history = client.get("/api/command-history").get_json()
    assert history["can_undo"] is True

    assert client.post("/api/undo").status_code == 200
    assert client.get("/api/matches/1/quarters/1").get_json()["fractions"]["1"] == "NONE"
    assert client.post("/api/redo").status_code == 200
    assert client.get("/api/matches/1/quarters/1").get_json()["fractions"]["1"] == "FULL"
    assert client.post("/api/redo").status_code == 400


def test_report_endpoints(client):
    _fill_first_quarter(client)

    report = client.get("/api/matches/1/report").get_json()["report"]
    assert report["called_up_count"] == 9
    assert report["formations"][0]["formation_key"] == "1-2-3-4-5-6-7"

    response = client.get("/api/matches/1/report.csv")
    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    assert response.get_data(as_text=True).startswith("Coachboard Match Report")

    export = client.get("/api/matches/1/export").get_json()["data"]
    assert len(export["periods"]) == 7


def test_team_roster(client):
    players = client.get("/api/teams/10/players").get_json()["players"]

    assert [player["player_id"] for player in players] == list(range(1, 13))


def test_assignment_requires_fraction_field(client):
    client.put("/api/matches/1/quarters/1/players/1", json={"fraction": "FULL"})

    response = client.put("/api/matches/1/quarters/1/players/1", json={"fractoin": "FULL"})

    assert response.status_code == 400
    assert response.get_json()["kind"] == "validation"
    assert client.get("/api/matches/1/quarters/1").get_json()["fractions"]["1"] == "FULL"
