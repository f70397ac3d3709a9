from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Iterable, Mapping

from .careers import format_avg
from .config import MILESTONE_LADDERS
from .models import (
    AwardHistoryEntry,
    AwardWinner,
    CareerRecord,
    ChampionHistoryEntry,
    PlayerSeasonStats,
    SeasonAwards,
    SeasonMilestone,
    TeamInfo,
    TransactionLogEntry,
)

logger = logging.getLogger(__name__)

# Recording order within a season.
AWARD_SLOTS: tuple[tuple[str, str], ...] = (
    ("MVP (AL)", "mvp_al"),
    ("MVP (NL)", "mvp_nl"),
    ("Cy Young (AL)", "cy_young_al"),
    ("Cy Young (NL)", "cy_young_nl"),
    ("ROY (AL)", "roy_al"),
    ("ROY (NL)", "roy_nl"),
)


def award_stat_line(award: str, stats: PlayerSeasonStats | None) -> str:
    if stats is None:
        return ""
    if "Cy Young" in award:
        return f"{stats.w}W, {stats.era:.2f} ERA, {stats.ka} K, {stats.ip:.1f} IP"
    return f"{stats.hr} HR, {format_avg(stats.avg)} AVG, {stats.rbi} RBI"


def season_award_pairs(awards: SeasonAwards) -> list[tuple[AwardWinner, str]]:
    pairs: list[tuple[AwardWinner, str]] = []
    for label, attr in AWARD_SLOTS:
        winner = getattr(awards, attr)
        if winner is not None:
            pairs.append((winner, label))
    return pairs


class AwardsHistory:
    """Award winners, champions, transactions and milestones across every season."""

    def __init__(self) -> None:
        self._award_history: tuple[AwardHistoryEntry, ...] = ()
        self._champion_history: tuple[ChampionHistoryEntry, ...] = ()
        self._transaction_log: tuple[TransactionLogEntry, ...] = ()
        self._milestones: tuple[SeasonMilestone, ...] = ()

    def record_season_awards(
        self,
        season: int,
        awards: SeasonAwards,
        teams: Iterable[TeamInfo],
        player_stats: Mapping[int, PlayerSeasonStats],
    ) -> list[AwardHistoryEntry]:
        team_names = {team.team_id: team.name for team in teams}
        added = [
            AwardHistoryEntry(
                season=season,
                award=label,
                player_id=winner.player_id,
                name=winner.name,
                team_id=winner.team_id,
                team_name=team_names.get(winner.team_id, "???"),
                position=winner.position,
                stat_line=award_stat_line(label, player_stats.get(winner.player_id)),
            )
            for winner, label in season_award_pairs(awards)
        ]
        self._award_history = (*self._award_history, *added)
        return added

    def record_champion(
        self,
        season: int,
        team_id: int,
        team_name: str,
        record: str,
        ws_mvp_id: int | None = None,
        ws_mvp_name: str | None = None,
    ) -> ChampionHistoryEntry:
        entry = ChampionHistoryEntry(
            season=season,
            team_id=team_id,
            team_name=team_name,
            record=record,
            mvp_player_id=ws_mvp_id,
            mvp_name=ws_mvp_name,
        )
        self._champion_history = (*self._champion_history, entry)
        return entry

    def record_transaction(
        self,
        season: int,
        date: str,
        type: str,
        description: str,
        team_ids: Iterable[int],
    ) -> TransactionLogEntry:
        entry = TransactionLogEntry(
            season=season,
            date=date,
            type=type,
            description=description,
            team_ids=tuple(team_ids),
        )
        self._transaction_log = (*self._transaction_log, entry)
        return entry

    def check_milestones(self, season: int, career_records: Mapping[int, CareerRecord]) -> list[SeasonMilestone]:
        reached = {(m.player_id, m.milestone) for m in self._milestones}
        new_milestones: list[SeasonMilestone] = []
        for player_id, career in career_records.items():
            for label, attr, levels in MILESTONE_LADDERS:
                value = getattr(career, attr)
                for level in levels:
                    if value < level:
                        break
                    milestone = f"{level}th {label}"
                    if (player_id, milestone) in reached:
                        continue
                    reached.add((player_id, milestone))
                    new_milestones.append(
                        SeasonMilestone(season=season, player_id=player_id, name=career.name, milestone=milestone)
                    )
        if new_milestones:
            self._milestones = (*self._milestones, *new_milestones)
            logger.info("Season %s: %d new career milestones", season, len(new_milestones))
        return new_milestones

    def award_history(self) -> list[AwardHistoryEntry]:
        return sorted(self._award_history, key=lambda row: row.season, reverse=True)

    def champion_history(self) -> list[ChampionHistoryEntry]:
        return sorted(self._champion_history, key=lambda row: row.season, reverse=True)

    def transaction_log(self, team_id: int | None = None, limit: int = 100) -> list[TransactionLogEntry]:
        log = list(self._transaction_log)
        if team_id is not None:
            log = [row for row in log if team_id in row.team_ids]
        if limit <= 0:
            return []
        return list(reversed(log[-limit:]))

    def milestones(self) -> list[SeasonMilestone]:
        return sorted(self._milestones, key=lambda row: row.season, reverse=True)

    def save(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "award_history": [asdict(row) for row in self._award_history],
            "champion_history": [asdict(row) for row in self._champion_history],
            "transaction_log": [asdict(row) for row in self._transaction_log],
            "milestones": [asdict(row) for row in self._milestones],
        }

    def restore(self, data: Mapping[str, Any]) -> None:
        def _rows(key: str) -> list[dict[str, Any]]:
            raw = data.get(key, [])
            return [row for row in raw if isinstance(row, dict)] if isinstance(raw, list) else []

        self._award_history = tuple(AwardHistoryEntry(**row) for row in _rows("award_history"))
        self._champion_history = tuple(ChampionHistoryEntry(**row) for row in _rows("champion_history"))
        self._transaction_log = tuple(
            TransactionLogEntry(**{**row, "team_ids": tuple(row.get("team_ids", ()))})
            for row in _rows("transaction_log")
        )
        self._milestones = tuple(SeasonMilestone(**row) for row in _rows("milestones"))
