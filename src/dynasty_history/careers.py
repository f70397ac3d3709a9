from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Any, Iterable, Mapping

from .analytics import round_half_up
from .config import (
    HOF_AVG_BANDS,
    HOF_ERA_BANDS,
    HOF_HITTER_WEIGHTS,
    HOF_INDUCTION_PCT,
    HOF_LONGEVITY_CAP,
    HOF_LONGEVITY_WEIGHT,
    HOF_MIN_SCORE,
    HOF_MIN_SEASONS,
    HOF_PITCHER_WEIGHTS,
    HOF_VOTE_CEILING,
    HOF_VOTE_FLOOR,
    HOF_VOTE_MULTIPLIER,
    HOF_VOTE_NOISE,
    HOF_WAIT_YEARS,
    LEADER_DEFAULT_LIMIT,
    LEADER_MIN_AB,
    LEADER_MIN_OUTS,
    LEADER_STATS,
    MIN_SEASON_OUTS,
    MIN_SEASON_PA,
    RECORD_CHASE_MARGIN,
    SEASON_GAMES,
)
from .models import (
    CAREER_COUNTING_STATS,
    AllTimeLeader,
    CareerRecord,
    FranchiseRecord,
    HOFCandidate,
    PlayerInfo,
    PlayerSeasonStats,
    RecordChase,
    SeasonLogEntry,
    StatPace,
    TeamInfo,
)

logger = logging.getLogger(__name__)

# (label, season log attribute)
SINGLE_SEASON_RECORD_STATS: tuple[tuple[str, str], ...] = (
    ("HR", "hr"),
    ("RBI", "rbi"),
    ("Hits", "h"),
    ("SB", "sb"),
    ("AVG", "avg"),
    ("Wins", "w"),
    ("ERA", "era"),
    ("K", "ka"),
    ("SV", "sv"),
)
CAREER_RECORD_STATS: tuple[tuple[str, str], ...] = (
    ("HR", "hr"),
    ("RBI", "rbi"),
    ("Hits", "h"),
    ("SB", "sb"),
    ("Wins", "w"),
    ("K", "ka"),
    ("SV", "sv"),
)
RATE_STATS = {"AVG", "ERA"}


def format_avg(value: float) -> str:
    text = f"{value:.3f}"
    return text[1:] if text.startswith("0") else text


class CareerRecordStore:
    """Cumulative per-player careers. Writes swap in a new mapping; records are never edited in place."""

    def __init__(self, records: Mapping[int, CareerRecord] | None = None) -> None:
        self._records: dict[int, CareerRecord] = dict(records or {})

    def __len__(self) -> int:
        return len(self._records)

    def get(self, player_id: int) -> CareerRecord | None:
        return self._records.get(player_id)

    def get_career_records(self) -> dict[int, CareerRecord]:
        return dict(self._records)

    def values(self) -> list[CareerRecord]:
        return list(self._records.values())

    def record_season_stats(
        self,
        stats: Iterable[PlayerSeasonStats],
        players: Iterable[PlayerInfo],
        teams: Iterable[TeamInfo],
        season: int,
        awards: Iterable[tuple[int, str]] = (),
    ) -> int:
        team_names = {team.team_id: team.name for team in teams}
        player_map = {player.player_id: player for player in players}
        award_map: dict[int, list[str]] = {}
        for player_id, award in awards:
            award_map.setdefault(player_id, []).append(award)

        updated = dict(self._records)
        ingested = 0
        for line in stats:
            # Minimal playing time: both gates must fail, even for pure pitchers.
            if line.pa < MIN_SEASON_PA and line.outs < MIN_SEASON_OUTS:
                continue
            player = player_map.get(line.player_id)
            if player is None:
                logger.debug("Skipping season %s line for unknown player %s", season, line.player_id)
                continue

            career = updated.get(line.player_id) or CareerRecord(player_id=line.player_id, name=player.name)
            totals = {stat: getattr(career, stat) + getattr(line, stat) for stat in CAREER_COUNTING_STATS}
            log_entry = SeasonLogEntry(
                season=season,
                team_id=line.team_id,
                team_name=team_names.get(line.team_id, "???"),
                age=player.age,
                g=line.g,
                pa=line.pa,
                ab=line.ab,
                h=line.h,
                hr=line.hr,
                rbi=line.rbi,
                bb=line.bb,
                k=line.k,
                sb=line.sb,
                avg=round(line.avg, 3),
                w=line.w,
                l=line.l,
                sv=line.sv,
                era=round(line.era, 2),
                ip=round(line.ip, 1),
                ka=line.ka,
                gs=line.gs,
                qs=line.qs,
                cg=line.cg,
                sho=line.sho,
                awards=tuple(award_map.get(line.player_id, ())),
            )
            updated[line.player_id] = replace(
                career,
                seasons=career.seasons + 1,
                season_log=(*career.season_log, log_entry),
                **totals,
            )
            ingested += 1

        self._records = updated
        return ingested

    def commit_inductions(self, candidates: Iterable[HOFCandidate]) -> int:
        updated = dict(self._records)
        inducted = 0
        for candidate in candidates:
            record = candidate.updated_record
            if record is None:
                continue
            current = updated.get(candidate.player_id)
            # Induction is permanent; a stale evaluation never overwrites it.
            if current is not None and current.hof_inducted:
                continue
            updated[candidate.player_id] = record
            if record.hof_inducted:
                inducted += 1
        self._records = updated
        return inducted

    def save_career_records(self) -> list[list[Any]]:
        return [[player_id, record.to_dict()] for player_id, record in self._records.items()]

    def restore_career_records(
        self,
        records: Mapping[int, CareerRecord | dict[str, Any]] | Iterable[Any],
    ) -> None:
        rows = records.items() if isinstance(records, Mapping) else records
        restored: dict[int, CareerRecord] = {}
        for player_id, record in rows:
            restored[int(player_id)] = record if isinstance(record, CareerRecord) else CareerRecord.from_dict(record)
        self._records = restored


def hof_score(career: CareerRecord, is_pitcher: bool) -> float:
    weights = HOF_PITCHER_WEIGHTS if is_pitcher else HOF_HITTER_WEIGHTS
    score = sum(min(cap, getattr(career, stat) * weight) for stat, weight, cap in weights)
    if is_pitcher:
        era = career.era if career.outs > 0 else 9.0
        score += next((bonus for bound, bonus in HOF_ERA_BANDS if era < bound), 0.0)
    else:
        score += next((bonus for floor, bonus in HOF_AVG_BANDS if career.avg >= floor), 0.0)
    score += min(HOF_LONGEVITY_CAP, career.seasons * HOF_LONGEVITY_WEIGHT)
    return min(100.0, score)


def _key_stats(career: CareerRecord, is_pitcher: bool) -> str:
    if is_pitcher:
        return f"{career.w}W, {career.era:.2f} ERA, {career.ka} K"
    return f"{career.h} H, {career.hr} HR, {format_avg(career.avg)} AVG"


def evaluate_hof_candidates(
    store: CareerRecordStore,
    retired_player_ids: Iterable[int],
    player_info: Iterable[PlayerInfo],
    rng: random.Random,
) -> list[HOFCandidate]:
    """Score and vote on retirees without touching the store.

    Each candidate carries the record it would become; pass the result to
    ``CareerRecordStore.commit_inductions`` to make inductions permanent.
    """
    info_map = {info.player_id: info for info in player_info}
    candidates: list[HOFCandidate] = []
    seen: set[int] = set()
    for player_id in retired_player_ids:
        # One ballot per player; a repeated id must not draw extra vote noise.
        if player_id in seen:
            continue
        seen.add(player_id)
        career = store.get(player_id)
        if career is None or career.seasons < HOF_MIN_SEASONS or career.hof_inducted:
            continue
        info = info_map.get(player_id)
        if info is None:
            continue

        score = hof_score(career, info.is_pitcher)
        if score < HOF_MIN_SCORE:
            continue

        noise = (rng.random() - 0.5) * HOF_VOTE_NOISE
        vote_pct = min(HOF_VOTE_CEILING, max(HOF_VOTE_FLOOR, score * HOF_VOTE_MULTIPLIER + noise))
        inducted = vote_pct >= HOF_INDUCTION_PCT

        updated = replace(career, hof_eligible=True)
        if inducted:
            last_season = career.last_season
            updated = replace(
                updated,
                hof_inducted=True,
                hof_year=last_season + HOF_WAIT_YEARS if last_season is not None else None,
                hof_vote_pct=vote_pct,
            )

        candidates.append(
            HOFCandidate(
                player_id=player_id,
                name=career.name,
                position=info.position,
                is_pitcher=info.is_pitcher,
                seasons=career.seasons,
                key_stats=_key_stats(career, info.is_pitcher),
                hof_score=score,
                vote_pct=round(vote_pct, 1),
                inducted=inducted,
                updated_record=updated,
            )
        )

    candidates.sort(key=lambda c: c.hof_score, reverse=True)
    return candidates


def all_time_leaders(
    records: Iterable[CareerRecord],
    stat: str,
    limit: int = LEADER_DEFAULT_LIMIT,
) -> list[AllTimeLeader]:
    if stat not in LEADER_STATS:
        raise ValueError(f"Unknown leaderboard stat '{stat}'; expected one of {', '.join(LEADER_STATS)}.")

    scored: list[tuple[CareerRecord, float]] = []
    for record in records:
        if stat == "avg":
            if record.ab <= LEADER_MIN_AB:
                continue
            value = record.avg
        elif stat == "era":
            if record.outs <= LEADER_MIN_OUTS:
                continue
            # Negated so every board sorts higher-is-better.
            value = -record.era
        else:
            value = getattr(record, stat)
        scored.append((record, value))

    scored.sort(key=lambda row: row[1], reverse=True)

    leaders: list[AllTimeLeader] = []
    for rank, (record, value) in enumerate(scored[: max(0, limit)], start=1):
        if stat == "avg":
            display = format_avg(value)
        elif stat == "era":
            display = f"{-value:.2f}"
        else:
            display = str(int(value))
        leaders.append(
            AllTimeLeader(
                rank=rank,
                player_id=record.player_id,
                name=record.name,
                value=value,
                display=display,
                seasons=record.seasons,
                hof_inducted=record.hof_inducted,
            )
        )
    return leaders


def _season_value(entry: SeasonLogEntry, stat: str, attr: str) -> tuple[float, str] | None:
    raw = getattr(entry, attr)
    if stat == "ERA":
        if raw <= 0:
            return None
        # Stored negated: the larger value is the lower ERA.
        return -raw, f"{raw:.2f}"
    if stat == "AVG":
        return raw, format_avg(raw)
    return raw, str(raw)


def franchise_records(records: Iterable[CareerRecord], team_id: int) -> list[FranchiseRecord]:
    single: dict[str, FranchiseRecord] = {}
    career_best: dict[str, FranchiseRecord] = {}

    for career in records:
        team_seasons = [entry for entry in career.season_log if entry.team_id == team_id]
        if not team_seasons:
            continue

        for entry in team_seasons:
            for stat, attr in SINGLE_SEASON_RECORD_STATS:
                candidate = _season_value(entry, stat, attr)
                if candidate is None:
                    continue
                value, display = candidate
                existing = single.get(stat)
                if existing is None or value > existing.value:
                    single[stat] = FranchiseRecord(
                        type="single_season",
                        stat=stat,
                        player_id=career.player_id,
                        name=career.name,
                        value=value,
                        display=display,
                        season=entry.season,
                    )

        for stat, attr in CAREER_RECORD_STATS:
            total = sum(getattr(entry, attr) for entry in team_seasons)
            existing = career_best.get(stat)
            if existing is None or total > existing.value:
                career_best[stat] = FranchiseRecord(
                    type="career",
                    stat=stat,
                    player_id=career.player_id,
                    name=career.name,
                    value=total,
                    display=str(total),
                )

    return [*single.values(), *career_best.values()]


def record_chases(
    records: Iterable[FranchiseRecord],
    current: Iterable[StatPace],
    total_games: int = SEASON_GAMES,
) -> list[RecordChase]:
    single = {record.stat: record for record in records if record.type == "single_season"}
    chases: list[RecordChase] = []
    for row in current:
        record = single.get(row.stat)
        if record is None:
            continue
        lower_is_better = row.stat == "ERA"
        record_value = -record.value if lower_is_better else record.value
        if record_value <= 0:
            continue

        games_remaining = max(0, total_games - row.games)
        if row.stat in RATE_STATS:
            pace = row.value
        else:
            pace = round(row.value / row.games * total_games, 2) if row.games > 0 else 0.0

        if lower_is_better:
            chasing = 0 < pace < record_value * (1 + RECORD_CHASE_MARGIN)
            pct = round_half_up(record_value / max(0.01, row.value) * 100)
        else:
            chasing = pace > record_value * (1 - RECORD_CHASE_MARGIN)
            pct = round_half_up(row.value / record_value * 100)
        if not chasing:
            continue

        chases.append(
            RecordChase(
                stat=row.stat,
                record_value=record_value,
                holder_name=record.name,
                chaser_name=row.name,
                chaser_value=row.value,
                pace=pace,
                pct_of_record=min(100, pct),
                games_remaining=games_remaining,
            )
        )

    chases.sort(key=lambda chase: chase.pct_of_record, reverse=True)
    return chases
