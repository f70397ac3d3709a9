from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any


@dataclass(frozen=True, slots=True)
class TeamInfo:
    team_id: int
    name: str
    abbr: str = ""
    league: str = ""


@dataclass(frozen=True, slots=True)
class PlayerInfo:
    player_id: int
    name: str
    age: int = 0
    position: str = ""
    is_pitcher: bool = False


@dataclass(frozen=True, slots=True)
class AwardRef:
    """Award winner as referenced from a season entry (by team abbreviation)."""

    name: str
    team_abbr: str
    position: str = ""


@dataclass(frozen=True, slots=True)
class SeasonTeamRecord:
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

    @property
    def run_diff(self) -> int:
        return self.runs_scored - self.runs_allowed

    @property
    def record(self) -> str:
        return f"{self.wins}-{self.losses}"


@dataclass(frozen=True, slots=True)
class SeasonHistoryEntry:
    year: int
    champion_id: int | None = None
    team_records: tuple[SeasonTeamRecord, ...] = ()
    mvp_al: AwardRef | None = None
    mvp_nl: AwardRef | None = None
    cy_al: AwardRef | None = None
    cy_nl: AwardRef | None = None

    def __post_init__(self) -> None:
        ids = [r.team_id for r in self.team_records]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Season {self.year} has duplicate team ids.")
        abbrs = [r.abbr for r in self.team_records]
        if len(abbrs) != len(set(abbrs)):
            raise ValueError(f"Season {self.year} has colliding team abbreviations.")

    def record_for(self, team_id: int) -> SeasonTeamRecord | None:
        for record in self.team_records:
            if record.team_id == team_id:
                return record
        return None

    def is_champion(self, record: SeasonTeamRecord) -> bool:
        return self.champion_id is not None and self.champion_id == record.team_id

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> SeasonHistoryEntry:
        def _award(value: Any) -> AwardRef | None:
            if not isinstance(value, dict):
                return None
            return AwardRef(
                name=str(value.get("name", "")),
                team_abbr=str(value.get("team_abbr", "")),
                position=str(value.get("position", "")),
            )

        champion = raw.get("champion_id")
        return cls(
            year=int(raw["year"]),
            champion_id=int(champion) if champion is not None else None,
            team_records=tuple(
                SeasonTeamRecord(**_known_fields(SeasonTeamRecord, row))
                for row in raw.get("team_records", [])
                if isinstance(row, dict)
            ),
            mvp_al=_award(raw.get("mvp_al")),
            mvp_nl=_award(raw.get("mvp_nl")),
            cy_al=_award(raw.get("cy_al")),
            cy_nl=_award(raw.get("cy_nl")),
        )


@dataclass(frozen=True, slots=True)
class IdentityTag:
    id: str
    label: str
    color: str


@dataclass(frozen=True, slots=True)
class TopPlayer:
    name: str
    position: str
    label: str


@dataclass(frozen=True, slots=True)
class PeakPowerWindow:
    score: int = 0
    start_year: int = 0
    end_year: int = 0


@dataclass(frozen=True, slots=True)
class LongevityProfile:
    score: int = 0
    winning_seasons: int = 0
    playoff_appearances: int = 0
    consistency: int = 0


@dataclass(frozen=True, slots=True)
class EraCard:
    abbr: str
    team_name: str
    start_year: int
    end_year: int
    wins: int
    losses: int
    titles: int
    seasons: int
    avg_dominance: int
    total_dominance: int
    playoff_wins: int
    best_offense: int
    best_pitching: int


@dataclass(frozen=True, slots=True)
class HallOfSeasonEntry:
    year: int
    abbr: str
    team_name: str
    wins: int
    losses: int
    dominance: int
    is_champion: bool
    top_player: TopPlayer | None
    identity_tags: tuple[IdentityTag, ...]
    plaque: str


@dataclass(frozen=True, slots=True)
class FranchiseTotals:
    seasons: int = 0
    wins: int = 0
    losses: int = 0
    titles: int = 0
    playoff_wins: int = 0
    mvps: int = 0
    cy_youngs: int = 0
    rivalry_dominance: float = 0.0


@dataclass(frozen=True, slots=True)
class DynastyProfile:
    dynasty_index: int
    peak_power: PeakPowerWindow
    longevity: LongevityProfile
    identity_tags: tuple[IdentityTag, ...]
    era_cards: tuple[EraCard, ...]
    hall_of_seasons: tuple[HallOfSeasonEntry, ...]


@dataclass(frozen=True, slots=True)
class PlayerSeasonStats:
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

    @property
    def avg(self) -> float:
        if self.ab <= 0:
            return 0.0
        return self.h / self.ab

    @property
    def era(self) -> float:
        if self.outs <= 0:
            return 0.0
        return self.er / self.outs * 27

    @property
    def ip(self) -> float:
        return self.outs / 3


@dataclass(frozen=True, slots=True)
class SeasonLogEntry:
    season: int
    team_id: int
    team_name: str
    age: int = 0
    g: int = 0
    pa: int = 0
    ab: int = 0
    h: int = 0
    hr: int = 0
    rbi: int = 0
    bb: int = 0
    k: int = 0
    sb: int = 0
    avg: float = 0.0
    w: int = 0
    l: int = 0
    sv: int = 0
    era: float = 0.0
    ip: float = 0.0
    ka: int = 0
    gs: int = 0
    qs: int = 0
    cg: int = 0
    sho: int = 0
    awards: tuple[str, ...] = ()


# Counting stats summed into a CareerRecord from each qualifying season line.
CAREER_COUNTING_STATS: tuple[str, ...] = (
    "g", "pa", "ab", "r", "h", "doubles", "triples", "hr", "rbi", "bb", "k", "sb", "cs", "hbp",
    "w", "l", "sv", "outs", "ha", "er", "bba", "ka", "hra", "gs", "qs", "cg", "sho", "pitch_count",
)


@dataclass(frozen=True, slots=True)
class CareerRecord:
    player_id: int
    name: str
    seasons: int = 0
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
    season_log: tuple[SeasonLogEntry, ...] = ()
    hof_eligible: bool = False
    hof_inducted: bool = False
    hof_year: int | None = None
    hof_vote_pct: float | None = None

    @property
    def avg(self) -> float:
        if self.ab <= 0:
            return 0.0
        return self.h / self.ab

    @property
    def obp(self) -> float:
        denom = self.ab + self.bb + self.hbp
        if denom <= 0:
            return 0.0
        return (self.h + self.bb + self.hbp) / denom

    @property
    def slg(self) -> float:
        if self.ab <= 0:
            return 0.0
        singles = self.h - self.doubles - self.triples - self.hr
        total_bases = singles + self.doubles * 2 + self.triples * 3 + self.hr * 4
        return total_bases / self.ab

    @property
    def ip(self) -> float:
        return self.outs / 3

    @property
    def era(self) -> float:
        if self.outs <= 0:
            return 0.0
        return self.er / self.outs * 27

    @property
    def whip(self) -> float:
        if self.outs <= 0:
            return 0.0
        return (self.ha + self.bba) / self.ip

    @property
    def last_season(self) -> int | None:
        if not self.season_log:
            return None
        return self.season_log[-1].season

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> CareerRecord:
        values = _known_fields(cls, raw)
        log_rows = values.pop("season_log", [])
        log: list[SeasonLogEntry] = []
        for row in log_rows if isinstance(log_rows, list | tuple) else []:
            if not isinstance(row, dict):
                continue
            entry = _known_fields(SeasonLogEntry, row)
            entry["awards"] = tuple(str(a) for a in entry.get("awards", ()))
            log.append(SeasonLogEntry(**entry))
        return cls(season_log=tuple(log), **values)


@dataclass(frozen=True, slots=True)
class HOFCandidate:
    player_id: int
    name: str
    position: str
    is_pitcher: bool
    seasons: int
    key_stats: str
    hof_score: float
    vote_pct: float
    inducted: bool
    updated_record: CareerRecord | None = field(default=None, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class AllTimeLeader:
    rank: int
    player_id: int
    name: str
    value: float
    display: str
    seasons: int
    hof_inducted: bool


@dataclass(frozen=True, slots=True)
class FranchiseRecord:
    type: str
    stat: str
    player_id: int
    name: str
    value: float
    display: str
    season: int | None = None


@dataclass(frozen=True, slots=True)
class StatPace:
    name: str
    stat: str
    value: float
    games: int


@dataclass(frozen=True, slots=True)
class RecordChase:
    stat: str
    record_value: float
    holder_name: str
    chaser_name: str
    chaser_value: float
    pace: float
    pct_of_record: int
    games_remaining: int


@dataclass(frozen=True, slots=True)
class AwardWinner:
    player_id: int
    name: str
    team_id: int
    position: str = ""


@dataclass(frozen=True, slots=True)
class SeasonAwards:
    mvp_al: AwardWinner | None = None
    mvp_nl: AwardWinner | None = None
    cy_young_al: AwardWinner | None = None
    cy_young_nl: AwardWinner | None = None
    roy_al: AwardWinner | None = None
    roy_nl: AwardWinner | None = None


@dataclass(frozen=True, slots=True)
class AwardHistoryEntry:
    season: int
    award: str
    player_id: int
    name: str
    team_id: int
    team_name: str
    position: str
    stat_line: str


@dataclass(frozen=True, slots=True)
class ChampionHistoryEntry:
    season: int
    team_id: int
    team_name: str
    record: str
    mvp_player_id: int | None = None
    mvp_name: str | None = None


@dataclass(frozen=True, slots=True)
class TransactionLogEntry:
    season: int
    date: str
    type: str
    description: str
    team_ids: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class SeasonMilestone:
    season: int
    player_id: int
    name: str
    milestone: str


def _known_fields(cls: type, raw: dict[str, Any]) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in raw.items() if k in names}
