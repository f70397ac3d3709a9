from fastapi.testclient import TestClient

from dynasty_history import api
from dynasty_history.models import CareerRecord, SeasonLogEntry


def _client(tmp_path, monkeypatch) -> TestClient:
    monkeypatch.setattr(api, "service", api.HistoryService(data_root=tmp_path, seed=3))
    return TestClient(api.app)


def _season_payload(year: int) -> dict:
    return {
        "year": year,
        "champion_id": 1,
        "team_records": [
            {
                "team_id": 1,
                "abbr": "ADM",
                "name": "New Harbor Admirals",
                "wins": 101,
                "losses": 61,
                "runs_scored": 820,
                "runs_allowed": 640,
                "playoff_wins": 11,
                "offense_rank": 2,
            },
            {"team_id": 16, "abbr": "MET", "name": "New Harbor Metros", "wins": 75, "losses": 87},
        ],
        "stats": [
            {"player_id": 100, "team_id": 1, "pa": 650, "ab": 580, "h": 185, "hr": 41, "rbi": 120},
        ],
        "players": [{"player_id": 100, "name": "Franchise Bat", "age": 27, "position": "LF"}],
        "awards": {"mvp_al": {"player_id": 100, "name": "Franchise Bat", "team_id": 1, "position": "LF"}},
    }


def test_health(tmp_path, monkeypatch) -> None:
    client = _client(tmp_path, monkeypatch)
    assert client.get("/api/health").json() == {"status": "ok"}


def test_record_season_then_query(tmp_path, monkeypatch) -> None:
    client = _client(tmp_path, monkeypatch)
    response = client.post("/api/seasons", json=_season_payload(2030))
    assert response.status_code == 200
    assert response.json()["career_lines"] == 1

    awards = client.get("/api/awards").json()
    assert awards[0]["award"] == "MVP (AL)"
    assert awards[0]["stat_line"] == "41 HR, .319 AVG, 120 RBI"

    champions = client.get("/api/champions").json()
    assert champions[0]["record"] == "101-61"

    profile = client.get("/api/dynasty/1", params={"rivalry": 2}).json()
    assert profile["dynasty_index"] > 0
    assert profile["hall_of_seasons"][0]["abbr"] == "ADM"
    assert profile["peak_power"] == {"score": 0, "start_year": 0, "end_year": 0}

    leaders = client.get("/api/leaders", params={"stat": "hr"}).json()
    assert leaders[0]["display"] == "41"

    records = client.get("/api/franchise-records", params={"team": 1}).json()
    assert any(row["stat"] == "HR" and row["type"] == "single_season" for row in records)

    meta = client.get("/api/meta").json()
    assert meta["latest_season"] == 2030


def test_replayed_season_is_rejected(tmp_path, monkeypatch) -> None:
    client = _client(tmp_path, monkeypatch)
    assert client.post("/api/seasons", json=_season_payload(2030)).status_code == 200
    response = client.post("/api/seasons", json=_season_payload(2030))
    assert response.status_code == 400


def test_bad_requests_map_to_http_errors(tmp_path, monkeypatch) -> None:
    client = _client(tmp_path, monkeypatch)
    assert client.get("/api/leaders", params={"stat": "ops"}).status_code == 400
    assert client.get("/api/dynasty/999").status_code == 404
    assert client.get("/api/franchise-records", params={"team": 999}).status_code == 404


def test_transactions_round_trip(tmp_path, monkeypatch) -> None:
    client = _client(tmp_path, monkeypatch)
    for day in ("2030-07-01", "2030-07-02"):
        client.post(
            "/api/transactions",
            json={"season": 2030, "date": day, "type": "trade", "description": "deal", "team_ids": [1, 16]},
        )
    rows = client.get("/api/transactions", params={"team": 16, "limit": 1}).json()
    assert [row["date"] for row in rows] == ["2030-07-02"]


def test_hall_of_fame_evaluation(tmp_path, monkeypatch) -> None:
    client = _client(tmp_path, monkeypatch)
    log = (SeasonLogEntry(season=2040, team_id=1, team_name="New Harbor Admirals"),)
    api.service.history.restore_career_records(
        {
            1: CareerRecord(
                player_id=1, name="Icon", seasons=15, h=3000, ab=9000, hr=500, rbi=1700, sb=500, r=2000, season_log=log
            )
        }
    )
    response = client.post(
        "/api/hall-of-fame/evaluate",
        json={"retired_player_ids": [1], "players": [{"player_id": 1, "name": "Icon", "position": "1B"}]},
    )
    candidates = response.json()
    assert candidates[0]["inducted"] is True
    assert candidates[0]["updated_record"] is None

    members = client.get("/api/hall-of-fame").json()
    assert members == [{"player_id": 1, "name": "Icon", "seasons": 15, "hof_year": 2045, "hof_vote_pct": 100.0}]


def test_record_chases_endpoint(tmp_path, monkeypatch) -> None:
    client = _client(tmp_path, monkeypatch)
    client.post("/api/seasons", json=_season_payload(2030))
    response = client.post(
        "/api/record-chases",
        params={"team": 1},
        json=[{"name": "Young Bat", "stat": "HR", "value": 25, "games": 81}],
    )
    chases = response.json()
    assert chases[0]["holder_name"] == "Franchise Bat"
    assert chases[0]["pct_of_record"] == 61
