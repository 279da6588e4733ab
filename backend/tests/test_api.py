from billiards.core.config import settings


def _register(client, *names):
    ids = {}
    for name in names:
        r = client.post("/api/players", json={"name": name})
        assert r.status_code == 201, r.text
        ids[name] = r.json()["data"]["id"]
    return ids


def test_root_and_health(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["data"]["name"] == "Billiards Score API"

    r = client.get("/health")
    body = r.json()
    assert r.status_code == 200
    assert body["success"] is True
    assert body["data"]["status"] == "healthy"
    assert body["data"]["services"] == {"database": "up", "tables": {"players": "exists"}}
    assert r.headers.get("X-Request-ID")


def test_player_crud(client):
    ids = _register(client, "Minh", "Toàn")

    r = client.get("/api/players")
    assert [p["name"] for p in r.json()["data"]] == ["Minh", "Toàn"]

    r = client.patch(f"/api/players/{ids['Minh']}", json={"name": " Hải "})
    assert r.status_code == 200
    assert r.json()["data"]["name"] == "Hải"

    r = client.get(f"/api/players/{ids['Minh']}")
    assert r.json()["data"]["name"] == "Hải"

    r = client.delete(f"/api/players/{ids['Toàn']}")
    assert r.status_code == 200
    assert "removed" in r.json()["message"]

    r = client.delete(f"/api/players/{ids['Toàn']}")
    assert r.status_code == 404
    assert r.json()["code"] == "RESOURCE_NOT_FOUND"


def test_duplicate_player_is_409(client):
    _register(client, "Minh")
    r = client.post("/api/players", json={"name": "Minh "})
    assert r.status_code == 409
    body = r.json()
    assert body == {
        "success": False,
        "error": body["error"],
        "code": "DUPLICATE_RESOURCE",
        "details": {"resource": "Player", "field": "name", "value": "Minh"},
    }


def test_blank_name_is_400(client):
    r = client.post("/api/players", json={"name": "   "})
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"

    r = client.post("/api/players", json={})
    assert r.status_code == 400


def test_production_hides_details(client, monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    _register(client, "Minh")
    r = client.post("/api/players", json={"name": "Minh"})
    assert r.status_code == 409
    assert "details" not in r.json()


def test_match_scenario(client):
    ids = _register(client, "A", "B", "C")

    r = client.get("/api/matches/payer/next")
    assert r.json()["data"] == {"id": ids["A"], "name": "A"}

    r = client.post("/api/matches", json={"winners": ["B"], "loser": "A", "cost": 50})
    assert r.status_code == 201, r.text
    match = r.json()["data"]
    assert match["payer"] == "A"
    assert match["winners"] == ["B"]
    assert match["match_result"] == "win"

    r = client.get("/api/matches/payer/next")
    assert r.json()["data"] == {"id": ids["B"], "name": "B"}

    r = client.get(f"/api/matches/{match['id']}")
    assert r.json()["data"]["loser"] == "A"


def test_draw_and_legacy_winner(client):
    _register(client, "A", "B", "C")

    r = client.post("/api/matches", json={"winners": ["A", "B"], "loser": "C", "cost": 20})
    assert r.json()["data"]["match_result"] == "draw"

    r = client.post("/api/matches", json={"winner": "C", "loser": "A", "cost": 5})
    assert r.status_code == 201
    assert r.json()["data"]["winners"] == ["C"]


def test_match_errors(client):
    _register(client, "A", "B")

    r = client.post("/api/matches", json={"winners": ["X"], "loser": "A", "cost": 10})
    assert r.status_code == 404
    assert r.json()["code"] == "RESOURCE_NOT_FOUND"

    r = client.post("/api/matches", json={"winners": ["A"], "loser": "A", "cost": 10})
    assert r.status_code == 422
    assert r.json()["code"] == "BUSINESS_RULE_VIOLATION"

    r = client.post("/api/matches", json={"winners": ["A"], "loser": "B", "cost": -1})
    assert r.status_code == 400

    r = client.post("/api/matches", json={"winners": [], "loser": "B", "cost": 1})
    assert r.status_code == 400

    assert client.get("/api/matches").json()["data"] == []
    assert client.get("/api/matches/payer/next").json()["data"]["name"] == "A"


def test_payer_next_without_players(client):
    r = client.get("/api/matches/payer/next")
    assert r.status_code == 409
    assert r.json()["code"] == "NO_PLAYERS_AVAILABLE"


def test_recent_and_delete(client):
    _register(client, "A", "B")
    created = [
        client.post("/api/matches", json={"winners": ["A"], "loser": "B", "cost": i}).json()["data"]["id"]
        for i in range(3)
    ]

    r = client.get("/api/matches/recent", params={"limit": 2})
    assert len(r.json()["data"]) == 2

    r = client.delete(f"/api/matches/{created[0]}")
    assert r.status_code == 200
    assert len(client.get("/api/matches").json()["data"]) == 2

    assert client.delete(f"/api/matches/{created[0]}").status_code == 404
    assert client.get("/api/matches/recent", params={"limit": 0}).status_code == 400


def test_stats_endpoints_use_camel_case(client):
    ids = _register(client, "A", "B")
    client.post("/api/matches", json={"winners": ["A"], "loser": "B", "cost": 40, "participants": ["A", "B"]})

    rows = client.get("/api/stats").json()["data"]
    assert rows[0] == {
        "id": ids["A"],
        "name": "A",
        "wins": 1,
        "losses": 0,
        "totalSpent": 40.0,
        "matchesPlayed": 1,
        "winRate": 100.0,
    }

    today = client.get("/api/stats", params={"timeframe": "today"}).json()["data"]
    assert today[0]["name"] == "A"

    daily = client.get("/api/stats", params={"timeframe": "daily"}).json()["data"]
    assert daily[0]["name"] == "A"
    assert daily[0]["playerId"] == ids["A"]

    one = client.get(f"/api/stats/player/{ids['B']}").json()["data"]
    assert (one["losses"], one["winRate"]) == (1, 0.0)

    expenses = client.get("/api/stats/expenses", params={"timeframe": "all"}).json()["data"]
    assert expenses == {"total": 40.0, "byPlayer": {"A": 40.0, "B": 0.0}}

    board = client.get("/api/stats/leaderboard", params={"limit": 1}).json()["data"]
    assert [r["name"] for r in board] == ["A"]


def test_stats_validation(client):
    assert client.get("/api/stats", params={"timeframe": "weekly"}).status_code == 400
    assert client.get("/api/stats/leaderboard", params={"limit": 101}).status_code == 400
    assert client.get("/api/stats/player/77").status_code == 404


def test_badge_routes(client):
    ids = _register(client, "A", "B")

    r = client.get("/api/badges")
    assert len(r.json()["data"]) == 3

    r = client.get("/api/badges/turtle-miracle")
    assert r.json()["data"]["icon"] == "🐢"
    assert client.get("/api/badges/unknown").status_code == 404

    r = client.post("/api/badges/award-turtle-miracle", json={"player_id": ids["B"]})
    assert r.status_code == 201
    assert r.json()["data"]["badge_id"] == "turtle-miracle"

    r = client.post("/api/badges/award", json={"player_id": ids["B"], "badge_id": "missing"})
    assert r.status_code == 404

    r = client.get(f"/api/badges/player/{ids['B']}")
    assert [b["badge_id"] for b in r.json()["data"]] == ["turtle-miracle"]

    r = client.get("/api/badges/players/all")
    assert r.json()["data"][0]["player_name"] == "B"

    r = client.post(f"/api/badges/check/{ids['A']}")
    assert r.json()["data"] == {"player_id": ids["A"], "awarded": []}

    r = client.delete(f"/api/badges/player/{ids['B']}/badge/turtle-miracle")
    assert r.status_code == 200
    r = client.delete(f"/api/badges/player/{ids['B']}/badge/turtle-miracle")
    assert r.status_code == 404


def test_unknown_route_uses_envelope(client):
    r = client.get("/api/nothing-here")
    assert r.status_code == 404
    assert r.json()["success"] is False


def test_blank_winner_name_is_rejected(client):
    _register(client, "A", "B")

    r = client.post("/api/matches", json={"winners": ["  ", "A"], "loser": "B", "cost": 10})
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"
    assert client.get("/api/matches").json()["data"] == []
