from __future__ import annotations

from typing import Iterable

from .careers import format_avg
from .models import AllTimeLeader, CareerRecord, EraCard, HallOfSeasonEntry, TeamInfo


def build_default_teams() -> list[TeamInfo]:
    divisions: dict[str, list[tuple[str, str]]] = {
        "AL East": [
            ("ADM", "New Harbor Admirals"),
            ("COL", "Capitol City Colonials"),
            ("LOB", "Boston Bay Lobsters"),
            ("STM", "Steel City Steamers"),
            ("HAM", "Lake City Hammers"),
        ],
        "AL Central": [
            ("WLV", "River City Wolves"),
            ("CRU", "South City Crushers"),
            ("FOX", "Prairie City Foxes"),
            ("MIN", "Twin Peaks Miners"),
            ("MON", "Crown City Monarchs"),
        ],
        "AL West": [
            ("GUL", "Bay City Gulls"),
            ("RAT", "Desert City Rattlers"),
            ("COU", "Sun Valley Cougars"),
            ("LUM", "Northwest City Lumberjacks"),
            ("ANG", "Anaheim Hills Angels"),
        ],
        "NL East": [
            ("MET", "New Harbor Metros"),
            ("BRA", "Peach City Brawlers"),
            ("TID", "Palmetto City Tides"),
            ("PAT", "Brick City Patriots"),
            ("HUR", "Swamp City Hurricanes"),
        ],
        "NL Central": [
            ("CUB", "Lake City Cubs"),
            ("RED", "Gateway City Redbirds"),
            ("CIN", "Blue Grass City Reds"),
            ("AST", "Bayou City Astros"),
            ("BRW", "Lake Front Brewers"),
        ],
        "NL West": [
            ("DOD", "Harbor Bay Dodgers"),
            ("GNT", "Bay City Giants"),
            ("PAD", "Harbor Lights Padres"),
            ("ROC", "Mile High City Rockies"),
            ("DIA", "Sandstone Park Diamondbacks"),
        ],
    }

    teams: list[TeamInfo] = []
    for division, entries in divisions.items():
        league = division.split()[0]
        for abbr, name in entries:
            teams.append(TeamInfo(team_id=len(teams) + 1, name=name, abbr=abbr, league=league))
    return teams


def format_hall_of_seasons(entries: Iterable[HallOfSeasonEntry]) -> str:
    lines = ["  # Year Team  W-L      DOM  Plaque"]
    for idx, row in enumerate(entries, start=1):
        crown = "*" if row.is_champion else " "
        lines.append(
            f"{idx:>3} {row.year:>4} {row.abbr:<4}{crown}{row.wins:>3}-{row.losses:<3} {row.dominance:>4}  {row.plaque}"
        )
    return "\n".join(lines)


def format_leaders(leaders: Iterable[AllTimeLeader], title: str) -> str:
    lines = [title, "Rk Player                 Value   Yrs HOF"]
    for row in leaders:
        lines.append(
            f"{row.rank:>2} {row.name:<22} {row.display:>6} {row.seasons:>4} {'Y' if row.hof_inducted else ''}"
        )
    return "\n".join(lines)


def format_era_cards(cards: Iterable[EraCard]) -> str:
    lines = ["Team  Years      Yrs  W-L        Titles  Avg DOM"]
    for card in cards:
        span = f"{card.start_year}-{card.end_year}"
        lines.append(
            f"{card.abbr:<5} {span:<10} {card.seasons:>3}  {card.wins:>4}-{card.losses:<5} {card.titles:>6} {card.avg_dominance:>8}"
        )
    return "\n".join(lines)


def format_career_line(record: CareerRecord) -> str:
    if record.outs > 0 and record.outs * 3 > record.pa:
        return f"{record.name}: {record.seasons} yrs, {record.w}-{record.l}, {record.era:.2f} ERA, {record.ka} K, {record.sv} SV"
    return f"{record.name}: {record.seasons} yrs, {record.h} H, {record.hr} HR, {record.rbi} RBI, {format_avg(record.avg)} AVG"
