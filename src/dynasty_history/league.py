from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
import copy
import json
import logging
import random
import shutil
from typing import Any, Iterable, Mapping

from .analytics import build_dynasty_profile, era_cards, hall_of_seasons
from .awards import AwardsHistory, season_award_pairs
from .careers import (
    CareerRecordStore,
    all_time_leaders,
    evaluate_hof_candidates,
    franchise_records,
    record_chases,
)
from .config import LEADER_DEFAULT_LIMIT, SEASON_GAMES
from .models import (
    AllTimeLeader,
    AwardHistoryEntry,
    AwardRef,
    AwardWinner,
    CareerRecord,
    ChampionHistoryEntry,
    DynastyProfile,
    EraCard,
    FranchiseRecord,
    HallOfSeasonEntry,
    HOFCandidate,
    PlayerInfo,
    PlayerSeasonStats,
    RecordChase,
    SeasonAwards,
    SeasonHistoryEntry,
    SeasonMilestone,
    SeasonTeamRecord,
    StatPace,
    TeamInfo,
    TransactionLogEntry,
)

logger = logging.getLogger(__name__)


class SeasonHistoryStore:
    """Append-only, chronologically ordered season entries."""

    def __init__(self, entries: Iterable[SeasonHistoryEntry] = ()) -> None:
        self._entries: tuple[SeasonHistoryEntry, ...] = ()
        for entry in entries:
            self.commit(entry)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def latest_year(self) -> int | None:
        if not self._entries:
            return None
        return self._entries[-1].year

    def entries(self) -> tuple[SeasonHistoryEntry, ...]:
        return self._entries

    def get(self, year: int) -> SeasonHistoryEntry | None:
        for entry in self._entries:
            if entry.year == year:
                return entry
        return None

    def commit(self, entry: SeasonHistoryEntry) -> None:
        latest = self.latest_year
        if latest is not None and entry.year <= latest:
            raise ValueError(f"Season {entry.year} cannot be recorded after season {latest}.")
        self._entries = (*self._entries, entry)

    def save(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]

    def restore(self, rows: Iterable[dict[str, Any]]) -> None:
        restored = SeasonHistoryStore(SeasonHistoryEntry.from_dict(row) for row in rows)
        self._entries = restored.entries()


def build_season_entry(
    year: int,
    team_records: Iterable[SeasonTeamRecord],
    teams: Iterable[TeamInfo],
    champion_id: int | None = None,
    awards: SeasonAwards | None = None,
) -> SeasonHistoryEntry:
    """Assemble a season entry, resolving award winners to team abbreviations."""
    abbrs = {team.team_id: team.abbr for team in teams}

    def _ref(winner: AwardWinner | None) -> AwardRef | None:
        if winner is None:
            return None
        return AwardRef(name=winner.name, team_abbr=abbrs.get(winner.team_id, ""), position=winner.position)

    return SeasonHistoryEntry(
        year=year,
        champion_id=champion_id,
        team_records=tuple(team_records),
        mvp_al=_ref(awards.mvp_al) if awards else None,
        mvp_nl=_ref(awards.mvp_nl) if awards else None,
        cy_al=_ref(awards.cy_young_al) if awards else None,
        cy_nl=_ref(awards.cy_young_nl) if awards else None,
    )


class FranchiseHistory:
    """One game session's history: owns every store, commits season rollovers and persists them."""

    SAVE_VERSION = 1

    def __init__(
        self,
        seed: int | None = None,
        history_path: str | None = None,
        career_history_path: str | None = None,
        awards_path: str | None = None,
    ) -> None:
        self._rng = random.Random(seed)
        self.last_load_error: str = ""
        self.history_path = Path(history_path or "season_history.json")
        self.career_history_path = Path(career_history_path or "career_history.json")
        self.awards_path = Path(awards_path or "awards_history.json")
        self.seasons = SeasonHistoryStore()
        self.careers = CareerRecordStore()
        self.awards = AwardsHistory()
        self._load_history()
        self._load_career_history()
        self._load_awards()

    # -- persistence -------------------------------------------------------

    def _read_versioned(self, path: Path, label: str) -> Any:
        if not path.exists():
            return None
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            self._load_failed(f"Failed to load {label} ({exc}); starting empty.")
            return None
        if isinstance(raw, dict) and "save_version" in raw:
            version = int(raw.get("save_version", 1) or 1)
            if version > self.SAVE_VERSION:
                self._load_failed(
                    f"Unsupported {label} version {version}; app supports up to {self.SAVE_VERSION}."
                )
                return None
        return raw

    def _load_failed(self, message: str) -> None:
        self.last_load_error = message
        logger.warning(message)

    def _load_history(self) -> None:
        raw = self._read_versioned(self.history_path, "season history")
        if raw is None:
            return
        payload = raw.get("season_history") if isinstance(raw, dict) else raw
        if not isinstance(payload, list):
            self._load_failed("Season history payload is invalid; starting with empty history.")
            return
        try:
            self.seasons.restore(row for row in payload if isinstance(row, dict))
        except (KeyError, TypeError, ValueError) as exc:
            self.seasons = SeasonHistoryStore()
            self._load_failed(f"Season history is corrupt ({exc}); starting with empty history.")

    def _load_career_history(self) -> None:
        raw = self._read_versioned(self.career_history_path, "career history")
        if raw is None:
            return
        payload = raw.get("career_history") if isinstance(raw, dict) else raw
        if not isinstance(payload, list):
            self._load_failed("Career history payload is invalid; starting empty.")
            return
        try:
            self.careers.restore_career_records(
                row for row in payload if isinstance(row, list) and len(row) == 2 and isinstance(row[1], dict)
            )
        except (KeyError, TypeError, ValueError) as exc:
            self.careers = CareerRecordStore()
            self._load_failed(f"Career history is corrupt ({exc}); starting empty.")

    def _load_awards(self) -> None:
        raw = self._read_versioned(self.awards_path, "awards history")
        if raw is None:
            return
        if not isinstance(raw, dict):
            self._load_failed("Awards history file has invalid format; starting empty.")
            return
        payload = raw.get("awards_history", raw)
        try:
            self.awards.restore(payload if isinstance(payload, dict) else {})
        except (KeyError, TypeError, ValueError) as exc:
            self.awards = AwardsHistory()
            self._load_failed(f"Awards history is corrupt ({exc}); starting empty.")

    def _write_json_with_backup(self, path: Path, payload: Any, *, with_backup: bool = True) -> None:
        if with_backup and path.exists():
            backup = path.with_suffix(path.suffix + ".bak")
            try:
                shutil.copy2(path, backup)
            except OSError as exc:
                logger.warning("Could not back up %s: %s", path, exc)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def save(self) -> None:
        self._write_json_with_backup(
            self.history_path,
            {"save_version": self.SAVE_VERSION, "season_history": self.seasons.save()},
        )
        self._write_json_with_backup(
            self.career_history_path,
            {"save_version": self.SAVE_VERSION, "career_history": self.careers.save_career_records()},
        )
        self._write_json_with_backup(
            self.awards_path,
            {"save_version": self.SAVE_VERSION, "awards_history": self.awards.save()},
        )

    def reset_persistent_history(self) -> None:
        self.seasons = SeasonHistoryStore()
        self.careers = CareerRecordStore()
        self.awards = AwardsHistory()
        for path in (self.history_path, self.career_history_path, self.awards_path):
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Could not remove %s: %s", path, exc)

    # -- season rollover ---------------------------------------------------

    def advance_season(
        self,
        entry: SeasonHistoryEntry,
        stats: Iterable[PlayerSeasonStats],
        players: Iterable[PlayerInfo],
        teams: Iterable[TeamInfo],
        awards: SeasonAwards | None = None,
        ws_mvp: AwardWinner | None = None,
    ) -> dict[str, Any]:
        latest = self.seasons.latest_year
        if latest is not None and entry.year <= latest:
            raise ValueError(f"Season {entry.year} has already been recorded (latest is {latest}).")

        season = entry.year
        stat_lines = list(stats)
        player_rows = list(players)
        team_rows = list(teams)
        award_pairs = [(winner.player_id, label) for winner, label in season_award_pairs(awards)] if awards else []

        # Stores swap in new backing collections on write, so shallow copies stage the season.
        careers = copy.copy(self.careers)
        awards_history = copy.copy(self.awards)
        seasons = copy.copy(self.seasons)

        ingested = careers.record_season_stats(stat_lines, player_rows, team_rows, season, award_pairs)
        if awards is not None:
            awards_history.record_season_awards(
                season, awards, team_rows, {line.player_id: line for line in stat_lines}
            )
        if entry.champion_id is not None:
            champion = entry.record_for(entry.champion_id)
            team_name = champion.name if champion else next(
                (team.name for team in team_rows if team.team_id == entry.champion_id), "???"
            )
            awards_history.record_champion(
                season,
                entry.champion_id,
                team_name,
                champion.record if champion else "",
                ws_mvp.player_id if ws_mvp else None,
                ws_mvp.name if ws_mvp else None,
            )
        milestones = awards_history.check_milestones(season, careers.get_career_records())
        seasons.commit(entry)

        self.careers, self.awards, self.seasons = careers, awards_history, seasons
        self.save()
        logger.info("Recorded season %s: %d teams, %d career lines", season, len(entry.team_records), ingested)
        return {
            "season": season,
            "career_lines": ingested,
            "milestones": [asdict(m) for m in milestones],
        }

    def record_transaction(
        self,
        season: int,
        date: str,
        type: str,
        description: str,
        team_ids: Iterable[int],
    ) -> TransactionLogEntry:
        entry = self.awards.record_transaction(season, date, type, description, team_ids)
        self.save()
        return entry

    # -- Hall of Fame ------------------------------------------------------

    def evaluate_hall_of_fame(
        self,
        retired_player_ids: Iterable[int],
        player_info: Iterable[PlayerInfo],
    ) -> list[HOFCandidate]:
        candidates = evaluate_hof_candidates(self.careers, retired_player_ids, player_info, self._rng)
        inducted = self.careers.commit_inductions(candidates)
        if candidates:
            self.save()
        for candidate in candidates:
            if candidate.inducted:
                logger.info("Hall of Fame induction: %s (%.1f%%)", candidate.name, candidate.vote_pct)
        logger.debug("Evaluated %d Hall of Fame candidates, %d inducted", len(candidates), inducted)
        return candidates

    def hall_of_fame(self) -> list[CareerRecord]:
        inducted = [record for record in self.careers.values() if record.hof_inducted]
        inducted.sort(key=lambda record: (record.hof_year or 0, record.name))
        return inducted

    # -- queries -----------------------------------------------------------

    def history(self) -> tuple[SeasonHistoryEntry, ...]:
        return self.seasons.entries()

    def team_directory(self) -> dict[int, SeasonTeamRecord]:
        latest: dict[int, SeasonTeamRecord] = {}
        for entry in self.seasons.entries():
            for record in entry.team_records:
                latest[record.team_id] = record
        return latest

    def dynasty_profile(self, team_id: int, rivalry_dominance: float = 0.0) -> DynastyProfile:
        return build_dynasty_profile(self.seasons.entries(), team_id, rivalry_dominance)

    def hall_of_seasons(self) -> list[HallOfSeasonEntry]:
        return hall_of_seasons(self.seasons.entries())

    def era_cards(self) -> list[EraCard]:
        return era_cards(self.seasons.entries())

    def award_history(self) -> list[AwardHistoryEntry]:
        return self.awards.award_history()

    def champion_history(self) -> list[ChampionHistoryEntry]:
        return self.awards.champion_history()

    def transaction_log(self, team_id: int | None = None, limit: int = 100) -> list[TransactionLogEntry]:
        return self.awards.transaction_log(team_id=team_id, limit=limit)

    def milestones(self) -> list[SeasonMilestone]:
        return self.awards.milestones()

    def all_time_leaders(self, stat: str, limit: int = LEADER_DEFAULT_LIMIT) -> list[AllTimeLeader]:
        return all_time_leaders(self.careers.values(), stat, limit)

    def franchise_records(self, team_id: int) -> list[FranchiseRecord]:
        return franchise_records(self.careers.values(), team_id)

    def record_chases(
        self,
        team_id: int,
        current: Iterable[StatPace],
        total_games: int = SEASON_GAMES,
    ) -> list[RecordChase]:
        return record_chases(self.franchise_records(team_id), current, total_games)

    def get_career_records(self) -> dict[int, CareerRecord]:
        return self.careers.get_career_records()

    def restore_career_records(self, records: Mapping[int, CareerRecord] | Iterable[Any]) -> None:
        self.careers.restore_career_records(records)
