from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Sequence

from .config import (
    CHAMPION_BONUS,
    ELITE_UNIT_RANK,
    ERA_CARD_LIMIT,
    ERA_MAX_DOWN_YEARS,
    ERA_MIN_HISTORY,
    ERA_THRESHOLD,
    HALL_OF_SEASONS_LIMIT,
    IDENTITY_TAG_LIMIT,
    IDENTITY_TAGS,
    LOSING_SEASON_PENALTY,
    PEAK_TITLE_BONUS,
    PEAK_WINDOW_SEASONS,
    PLAQUE_PARTS_LIMIT,
    PLAYOFF_WIN_POINTS,
    RUN_DIFF_DIVISOR,
)
from .models import (
    DynastyProfile,
    EraCard,
    FranchiseTotals,
    HallOfSeasonEntry,
    IdentityTag,
    LongevityProfile,
    PeakPowerWindow,
    SeasonHistoryEntry,
    SeasonTeamRecord,
    TopPlayer,
)

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _unit_bonus(rank: int) -> int:
    if rank <= ELITE_UNIT_RANK:
        return 12 - (rank - 1) * 3
    return 0


def dominance_score(record: SeasonTeamRecord, entry: SeasonHistoryEntry) -> int:
    score = record.wins * 2
    if entry.is_champion(record):
        score += CHAMPION_BONUS
    score += record.playoff_wins * PLAYOFF_WIN_POINTS
    # Negative run differential is not penalized here; the losing-season penalty covers it.
    if record.run_diff > 0:
        score += round_half_up(record.run_diff / RUN_DIFF_DIVISOR)
    score += _unit_bonus(record.offense_rank)
    score += _unit_bonus(record.pitching_rank)
    if record.losses > record.wins:
        score -= LOSING_SEASON_PENALTY
    return max(0, score)


def dynasty_index(totals: FranchiseTotals) -> int:
    if totals.seasons < 1:
        return 0
    win_pct = totals.wins / max(1, totals.wins + totals.losses)
    return round_half_up(
        totals.titles * 120
        + totals.playoff_wins * 15
        + win_pct * 50 * totals.seasons
        + totals.mvps * 25
        + totals.cy_youngs * 20
        + totals.rivalry_dominance * 10
    )


def peak_power(history: Sequence[SeasonHistoryEntry], team_id: int) -> PeakPowerWindow:
    """Best run of consecutive seasons by summed dominance; earliest window wins ties."""
    if len(history) < PEAK_WINDOW_SEASONS:
        return PeakPowerWindow()

    best_score = 0
    best_start = 0
    for start in range(len(history) - PEAK_WINDOW_SEASONS + 1):
        window_score = 0
        for entry in history[start : start + PEAK_WINDOW_SEASONS]:
            record = entry.record_for(team_id)
            if record is None:
                continue
            window_score += dominance_score(record, entry)
            if entry.is_champion(record):
                window_score += PEAK_TITLE_BONUS
        if window_score > best_score:
            best_score = window_score
            best_start = start

    return PeakPowerWindow(
        score=round_half_up(best_score),
        start_year=history[best_start].year,
        end_year=history[best_start + PEAK_WINDOW_SEASONS - 1].year,
    )


def longevity(history: Sequence[SeasonHistoryEntry], team_id: int) -> LongevityProfile:
    if not history:
        return LongevityProfile()

    winning_seasons = 0
    playoff_appearances = 0
    total_dominance = 0
    for entry in history:
        record = entry.record_for(team_id)
        if record is None:
            continue
        if record.wins > record.losses:
            winning_seasons += 1
        if record.playoff_wins > 0:
            playoff_appearances += 1
        total_dominance += dominance_score(record, entry)

    # Seasons the franchise sat out still count against its consistency.
    total_seasons = max(1, len(history))
    return LongevityProfile(
        score=round_half_up(
            total_dominance / total_seasons * 10 + winning_seasons * 8 + playoff_appearances * 12
        ),
        winning_seasons=winning_seasons,
        playoff_appearances=playoff_appearances,
        consistency=round_half_up(winning_seasons / total_seasons * 100),
    )


def identity_tags(record: SeasonTeamRecord, entry: SeasonHistoryEntry) -> list[IdentityTag]:
    mvp_teams = {award.team_abbr for award in (entry.mvp_al, entry.mvp_nl) if award is not None}
    matches = {
        "pitching_factory": record.pitching_rank <= 3,
        "offensive_juggernaut": record.offense_rank <= 3,
        "dominant": record.run_diff >= 120,
        "fortress": 0 < record.runs_allowed < record.runs_scored * 0.75,
        "juggernaut": record.wins >= 100 and record.losses <= 62,
        "powerhouse": record.wins >= 95,
        "mvp_factory": record.abbr in mvp_teams,
        "champion": entry.is_champion(record),
        "prospect_pipeline": record.farm_rank <= 3,
    }
    tags = [IdentityTag(id=tag_id, label=label, color=color) for tag_id, label, color in IDENTITY_TAGS if matches[tag_id]]
    return tags[:IDENTITY_TAG_LIMIT]


@dataclass(slots=True)
class _Streak:
    name: str
    start: int
    end: int
    wins: int = 0
    losses: int = 0
    titles: int = 0
    playoff_wins: int = 0
    dom_scores: list[int] = field(default_factory=list)
    down_years: int = 0
    best_offense: int = 0
    best_pitching: int = 0

    @classmethod
    def seeded(cls, record: SeasonTeamRecord, entry: SeasonHistoryEntry) -> _Streak:
        # Restart from the season that broke the streak, which counts as the first down year.
        return cls(
            name=record.name,
            start=entry.year,
            end=entry.year,
            titles=1 if entry.is_champion(record) else 0,
            playoff_wins=record.playoff_wins,
            down_years=1,
        )

    def extend(self, record: SeasonTeamRecord, entry: SeasonHistoryEntry, score: int) -> None:
        self.end = entry.year
        self.wins += record.wins
        self.losses += record.losses
        if entry.is_champion(record):
            self.titles += 1
        self.playoff_wins += record.playoff_wins
        self.dom_scores.append(score)
        self.down_years = 0
        if record.offense_rank == 1:
            self.best_offense += 1
        if record.pitching_rank == 1:
            self.best_pitching += 1

    def to_card(self, abbr: str) -> EraCard | None:
        if len(self.dom_scores) < 2:
            return None
        total = sum(self.dom_scores)
        return EraCard(
            abbr=abbr,
            team_name=self.name,
            start_year=self.start,
            end_year=self.end,
            wins=self.wins,
            losses=self.losses,
            titles=self.titles,
            seasons=len(self.dom_scores),
            avg_dominance=round_half_up(total / len(self.dom_scores)),
            total_dominance=total,
            playoff_wins=self.playoff_wins,
            best_offense=self.best_offense,
            best_pitching=self.best_pitching,
        )


def era_cards(history: Sequence[SeasonHistoryEntry]) -> list[EraCard]:
    """Detect sustained-excellence streaks; one down year is tolerated, two end the era."""
    if len(history) < ERA_MIN_HISTORY:
        return []

    streaks: dict[str, _Streak] = {}
    eras: list[EraCard] = []

    def _flush(abbr: str) -> None:
        card = streaks[abbr].to_card(abbr)
        if card is not None:
            eras.append(card)

    for entry in history:
        for record in entry.team_records:
            score = dominance_score(record, entry)
            streak = streaks.setdefault(record.abbr, _Streak(name=record.name, start=entry.year, end=entry.year))
            if score >= ERA_THRESHOLD:
                streak.extend(record, entry, score)
                continue
            streak.down_years += 1
            if streak.down_years >= ERA_MAX_DOWN_YEARS:
                _flush(record.abbr)
                streaks[record.abbr] = _Streak.seeded(record, entry)

    for abbr in streaks:
        _flush(abbr)

    eras.sort(key=lambda card: card.total_dominance, reverse=True)
    return eras[:ERA_CARD_LIMIT]


def _top_player(record: SeasonTeamRecord, entry: SeasonHistoryEntry) -> TopPlayer | None:
    checks = (
        (entry.mvp_al, "AL MVP", None),
        (entry.mvp_nl, "NL MVP", None),
        (entry.cy_al, "AL Cy Young", "SP"),
        (entry.cy_nl, "NL Cy Young", "SP"),
    )
    for award, label, position in checks:
        if award is not None and award.team_abbr == record.abbr:
            return TopPlayer(name=award.name, position=position or award.position, label=label)
    return None


def _plaque(
    record: SeasonTeamRecord,
    entry: SeasonHistoryEntry,
    dominance: int,
    top_player: TopPlayer | None,
) -> str:
    parts: list[str] = []
    if entry.is_champion(record):
        parts.append("World Champions")
    if record.offense_rank == 1:
        parts.append("#1 Offense")
    if record.pitching_rank == 1:
        parts.append("#1 Pitching")

    if record.wins >= 105:
        parts.append(f"Dominant {record.record}")
    elif record.wins >= 95:
        parts.append(f"Elite {record.record}")
    else:
        parts.append(record.record)

    parts.append(f"{dominance} DOM")
    if top_player is not None:
        parts.append(f"{top_player.name} ({top_player.label})")
    if record.run_diff >= 100:
        parts.append(f"+{record.run_diff} run diff")
    return " · ".join(parts[:PLAQUE_PARTS_LIMIT])


def hall_of_seasons(history: Sequence[SeasonHistoryEntry]) -> list[HallOfSeasonEntry]:
    seasons: list[HallOfSeasonEntry] = []
    for entry in history:
        for record in entry.team_records:
            dominance = dominance_score(record, entry)
            top_player = _top_player(record, entry)
            seasons.append(
                HallOfSeasonEntry(
                    year=entry.year,
                    abbr=record.abbr,
                    team_name=record.name,
                    wins=record.wins,
                    losses=record.losses,
                    dominance=dominance,
                    is_champion=entry.is_champion(record),
                    top_player=top_player,
                    identity_tags=tuple(identity_tags(record, entry)),
                    plaque=_plaque(record, entry, dominance, top_player),
                )
            )
    seasons.sort(key=lambda row: row.dominance, reverse=True)
    return seasons[:HALL_OF_SEASONS_LIMIT]


def franchise_totals(
    history: Sequence[SeasonHistoryEntry],
    team_id: int,
    rivalry_dominance: float = 0.0,
) -> FranchiseTotals:
    seasons = wins = losses = titles = playoff_wins = mvps = cy_youngs = 0
    for entry in history:
        record = entry.record_for(team_id)
        if record is None:
            continue
        seasons += 1
        wins += record.wins
        losses += record.losses
        playoff_wins += record.playoff_wins
        if entry.is_champion(record):
            titles += 1
        mvps += sum(1 for award in (entry.mvp_al, entry.mvp_nl) if award is not None and award.team_abbr == record.abbr)
        cy_youngs += sum(1 for award in (entry.cy_al, entry.cy_nl) if award is not None and award.team_abbr == record.abbr)
    return FranchiseTotals(
        seasons=seasons,
        wins=wins,
        losses=losses,
        titles=titles,
        playoff_wins=playoff_wins,
        mvps=mvps,
        cy_youngs=cy_youngs,
        rivalry_dominance=rivalry_dominance,
    )


def build_dynasty_profile(
    history: Sequence[SeasonHistoryEntry],
    team_id: int,
    rivalry_dominance: float = 0.0,
) -> DynastyProfile:
    latest_tags: list[IdentityTag] = []
    for entry in reversed(history):
        record = entry.record_for(team_id)
        if record is not None:
            latest_tags = identity_tags(record, entry)
            break

    totals = franchise_totals(history, team_id, rivalry_dominance)
    profile = DynastyProfile(
        dynasty_index=dynasty_index(totals),
        peak_power=peak_power(history, team_id),
        longevity=longevity(history, team_id),
        identity_tags=tuple(latest_tags),
        era_cards=tuple(era_cards(history)),
        hall_of_seasons=tuple(hall_of_seasons(history)),
    )
    logger.debug("Dynasty profile for team %s over %d seasons: index %d", team_id, len(history), profile.dynasty_index)
    return profile
