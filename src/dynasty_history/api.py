from __future__ import annotations

import logging
import os
from dataclasses import asdict
from pathlib import Path
from threading import Lock
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .app import build_default_teams
from .config import LEADER_DEFAULT_LIMIT, SEASON_GAMES
from .league import FranchiseHistory, build_season_entry
from .models import (
    AwardWinner,
    PlayerInfo,
    PlayerSeasonStats,
    SeasonAwards,
    SeasonTeamRecord,
    StatPace,
    TeamInfo,
)

logger = logging.getLogger(__name__)

DATA_DIR_ENV = "DYNASTY_HISTORY_DATA_DIR"


class TeamRecordPayload(BaseModel):
    team_id: int
    abbr: str
    name: str
    wins: int = 0
    losses: int = 0
    runs_scored: int = 0
    runs_allowed: int = 0
    playoff_wins: int = 0
    offense_rank: int = 15
    pitching_rank: int = 15
    farm_rank: int = 15


class TeamPayload(BaseModel):
    team_id: int
    name: str
    abbr: str = ""
    league: str = ""


class PlayerPayload(BaseModel):
    player_id: int
    name: str
    age: int = 0
    position: str = ""
    is_pitcher: bool = False


class StatLinePayload(BaseModel):
    player_id: int
    team_id: int
    g: int = 0
    pa: int = 0
    ab: int = 0
    r: int = 0
    h: int = 0
    doubles: int = 0
    triples: int = 0
    hr: int = 0
    rbi: int = 0
    bb: int = 0
    k: int = 0
    sb: int = 0
    cs: int = 0
    hbp: int = 0
    w: int = 0
    l: int = 0
    sv: int = 0
    outs: int = 0
    ha: int = 0
    er: int = 0
    bba: int = 0
    ka: int = 0
    hra: int = 0
    gs: int = 0
    qs: int = 0
    cg: int = 0
    sho: int = 0
    pitch_count: int = 0


class AwardWinnerPayload(BaseModel):
    player_id: int
    name: str
    team_id: int
    position: str = ""


class SeasonAwardsPayload(BaseModel):
    mvp_al: AwardWinnerPayload | None = None
    mvp_nl: AwardWinnerPayload | None = None
    cy_young_al: AwardWinnerPayload | None = None
    cy_young_nl: AwardWinnerPayload | None = None
    roy_al: AwardWinnerPayload | None = None
    roy_nl: AwardWinnerPayload | None = None


class SeasonPayload(BaseModel):
    year: int
    champion_id: int | None = None
    team_records: list[TeamRecordPayload] = []
    stats: list[StatLinePayload] = []
    players: list[PlayerPayload] = []
    teams: list[TeamPayload] | None = None
    awards: SeasonAwardsPayload | None = None
    ws_mvp: AwardWinnerPayload | None = None


class TransactionPayload(BaseModel):
    season: int
    date: str
    type: str
    description: str
    team_ids: list[int] = []


class HallOfFameBallotPayload(BaseModel):
    retired_player_ids: list[int]
    players: list[PlayerPayload] = []


class RecordChasePayload(BaseModel):
    name: str
    stat: str
    value: float
    games: int


def _winner(payload: AwardWinnerPayload | None) -> AwardWinner | None:
    if payload is None:
        return None
    return AwardWinner(**payload.model_dump())


def _season_awards(payload: SeasonAwardsPayload | None) -> SeasonAwards | None:
    if payload is None:
        return None
    return SeasonAwards(
        mvp_al=_winner(payload.mvp_al),
        mvp_nl=_winner(payload.mvp_nl),
        cy_young_al=_winner(payload.cy_young_al),
        cy_young_nl=_winner(payload.cy_young_nl),
        roy_al=_winner(payload.roy_al),
        roy_nl=_winner(payload.roy_nl),
    )


def _default_data_root() -> Path:
    configured = os.environ.get(DATA_DIR_ENV)
    if configured:
        return Path(configured)
    return Path(__file__).resolve().parents[2]


class HistoryService:
    def __init__(self, data_root: Path | None = None, seed: int | None = None) -> None:
        self.data_root = data_root or _default_data_root()
        self.teams = build_default_teams()
        self.history = FranchiseHistory(
            seed=seed,
            history_path=str(self.data_root / "season_history.json"),
            career_history_path=str(self.data_root / "career_history.json"),
            awards_path=str(self.data_root / "awards_history.json"),
        )
        if self.history.last_load_error:
            logger.warning("History loaded with errors: %s", self.history.last_load_error)
        self._lock = Lock()

    def _known_team_ids(self) -> set[int]:
        ids = {team.team_id for team in self.teams}
        ids.update(self.history.team_directory())
        return ids

    def _require_team(self, team_id: int) -> None:
        if team_id not in self._known_team_ids():
            raise HTTPException(status_code=404, detail="Team not found")

    def meta(self) -> dict[str, Any]:
        return {
            "seasons": len(self.history.seasons),
            "latest_season": self.history.seasons.latest_year,
            "careers": len(self.history.careers),
            "load_error": self.history.last_load_error,
        }

    def record_season(self, payload: SeasonPayload) -> dict[str, Any]:
        teams = [TeamInfo(**row.model_dump()) for row in payload.teams] if payload.teams else self.teams
        awards = _season_awards(payload.awards)
        try:
            entry = build_season_entry(
                payload.year,
                [SeasonTeamRecord(**row.model_dump()) for row in payload.team_records],
                teams,
                champion_id=payload.champion_id,
                awards=awards,
            )
            summary = self.history.advance_season(
                entry,
                [PlayerSeasonStats(**row.model_dump()) for row in payload.stats],
                [PlayerInfo(**row.model_dump()) for row in payload.players],
                teams,
                awards=awards,
                ws_mvp=_winner(payload.ws_mvp),
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"ok": True, **summary}

    def record_transaction(self, payload: TransactionPayload) -> dict[str, Any]:
        entry = self.history.record_transaction(
            payload.season, payload.date, payload.type, payload.description, payload.team_ids
        )
        return {"ok": True, "transaction": asdict(entry)}

    def evaluate_hall_of_fame(self, payload: HallOfFameBallotPayload) -> list[dict[str, Any]]:
        candidates = self.history.evaluate_hall_of_fame(
            payload.retired_player_ids,
            [PlayerInfo(**row.model_dump()) for row in payload.players],
        )
        return [asdict(candidate) | {"updated_record": None} for candidate in candidates]

    def leaders(self, stat: str, limit: int) -> list[dict[str, Any]]:
        try:
            rows = self.history.all_time_leaders(stat.lower(), limit)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return [asdict(row) for row in rows]

    def franchise_records(self, team_id: int) -> list[dict[str, Any]]:
        self._require_team(team_id)
        return [asdict(row) for row in self.history.franchise_records(team_id)]

    def record_chases(self, team_id: int, rows: list[RecordChasePayload], total_games: int) -> list[dict[str, Any]]:
        self._require_team(team_id)
        current = [StatPace(**row.model_dump()) for row in rows]
        return [asdict(row) for row in self.history.record_chases(team_id, current, total_games)]

    def dynasty(self, team_id: int, rivalry: float) -> dict[str, Any]:
        self._require_team(team_id)
        return asdict(self.history.dynasty_profile(team_id, rivalry))

    def hall_of_fame(self) -> list[dict[str, Any]]:
        rows = []
        for record in self.history.hall_of_fame():
            rows.append(
                {
                    "player_id": record.player_id,
                    "name": record.name,
                    "seasons": record.seasons,
                    "hof_year": record.hof_year,
                    "hof_vote_pct": record.hof_vote_pct,
                }
            )
        return rows


service = HistoryService()
app = FastAPI(title="Dynasty History API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/meta")
def meta() -> dict[str, Any]:
    with service._lock:
        return service.meta()


@app.post("/api/seasons")
def record_season(payload: SeasonPayload) -> dict[str, Any]:
    with service._lock:
        return service.record_season(payload)


@app.post("/api/transactions")
def record_transaction(payload: TransactionPayload) -> dict[str, Any]:
    with service._lock:
        return service.record_transaction(payload)


@app.get("/api/transactions")
def transactions(team: int | None = None, limit: int = 100) -> list[dict[str, Any]]:
    with service._lock:
        return [asdict(row) for row in service.history.transaction_log(team_id=team, limit=limit)]


@app.get("/api/awards")
def awards() -> list[dict[str, Any]]:
    with service._lock:
        return [asdict(row) for row in service.history.award_history()]


@app.get("/api/champions")
def champions() -> list[dict[str, Any]]:
    with service._lock:
        return [asdict(row) for row in service.history.champion_history()]


@app.get("/api/milestones")
def milestones() -> list[dict[str, Any]]:
    with service._lock:
        return [asdict(row) for row in service.history.milestones()]


@app.get("/api/leaders")
def leaders(stat: str = "hr", limit: int = LEADER_DEFAULT_LIMIT) -> list[dict[str, Any]]:
    with service._lock:
        return service.leaders(stat, limit)


@app.get("/api/franchise-records")
def franchise_records(team: int) -> list[dict[str, Any]]:
    with service._lock:
        return service.franchise_records(team)


@app.post("/api/record-chases")
def record_chases(team: int, payload: list[RecordChasePayload], games: int = SEASON_GAMES) -> list[dict[str, Any]]:
    with service._lock:
        return service.record_chases(team, payload, games)


@app.get("/api/hall-of-fame")
def hall_of_fame() -> list[dict[str, Any]]:
    with service._lock:
        return service.hall_of_fame()


@app.post("/api/hall-of-fame/evaluate")
def evaluate_hall_of_fame(payload: HallOfFameBallotPayload) -> list[dict[str, Any]]:
    with service._lock:
        return service.evaluate_hall_of_fame(payload)


@app.get("/api/hall-of-seasons")
def hall_of_seasons() -> list[dict[str, Any]]:
    with service._lock:
        return [asdict(row) for row in service.history.hall_of_seasons()]


@app.get("/api/eras")
def eras() -> list[dict[str, Any]]:
    with service._lock:
        return [asdict(row) for row in service.history.era_cards()]


@app.get("/api/dynasty/{team_id}")
def dynasty(team_id: int, rivalry: float = 0.0) -> dict[str, Any]:
    with service._lock:
        return service.dynasty(team_id, rivalry)
