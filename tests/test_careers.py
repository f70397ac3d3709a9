import json
import random

import pytest

from dynasty_history.careers import (
    CareerRecordStore,
    all_time_leaders,
    evaluate_hof_candidates,
    franchise_records,
    hof_score,
    record_chases,
)
from dynasty_history.models import (
    CareerRecord,
    PlayerInfo,
    PlayerSeasonStats,
    SeasonLogEntry,
    StatPace,
    TeamInfo,
)

TEAMS = [TeamInfo(team_id=1, name="New Harbor Admirals", abbr="ADM", league="AL")]


def _career(player_id: int, name: str, last_season: int = 2040, **stats) -> CareerRecord:
    log = (SeasonLogEntry(season=last_season, team_id=1, team_name="New Harbor Admirals"),)
    return CareerRecord(player_id=player_id, name=name, season_log=log, **stats)


def _logged(player_id: int, name: str, *entries: SeasonLogEntry, **stats) -> CareerRecord:
    return CareerRecord(player_id=player_id, name=name, seasons=len(entries), season_log=entries, **stats)


def test_ingestion_skips_minimal_playing_time() -> None:
    store = CareerRecordStore()
    players = [
        PlayerInfo(player_id=1, name="Cup of Coffee", age=22),
        PlayerInfo(player_id=2, name="Mop Up", age=30, position="RP", is_pitcher=True),
    ]
    stats = [
        PlayerSeasonStats(player_id=1, team_id=1, g=3, pa=9, ab=8, h=2, outs=0),
        PlayerSeasonStats(player_id=2, team_id=1, g=12, pa=0, outs=30, er=4, ka=12),
    ]
    ingested = store.record_season_stats(stats, players, TEAMS, 2030)
    assert ingested == 1
    assert store.get(1) is None
    assert store.get(2) is not None
    assert store.get(2).season_log[0].era == 3.6


def test_ingestion_accumulates_totals_and_season_log() -> None:
    store = CareerRecordStore()
    players = [PlayerInfo(player_id=7, name="Dee Contact", age=27, position="SS")]
    store.record_season_stats(
        [PlayerSeasonStats(player_id=7, team_id=1, g=150, pa=620, ab=560, h=170, hr=12, rbi=70, bb=50)],
        players,
        TEAMS,
        2030,
        awards=[(7, "MVP (AL)")],
    )
    first = store.get(7)
    store.record_season_stats(
        [PlayerSeasonStats(player_id=7, team_id=99, g=140, pa=600, ab=540, h=150, hr=18, rbi=80, bb=45)],
        players,
        TEAMS,
        2031,
    )

    career = store.get(7)
    assert career.seasons == 2
    assert career.h == 320
    assert career.hr == 30
    assert career.ab == 1100
    assert [entry.season for entry in career.season_log] == [2030, 2031]
    assert career.season_log[0].avg == 0.304
    assert career.season_log[0].awards == ("MVP (AL)",)
    assert career.season_log[1].team_name == "???"
    # Records handed out earlier are untouched by later seasons.
    assert first.seasons == 1
    assert first.h == 170


def test_career_rates_are_derived() -> None:
    career = CareerRecord(player_id=1, name="X", ab=500, h=150, doubles=30, triples=5, hr=20, bb=50, hbp=5)
    assert career.avg == pytest.approx(0.3)
    assert career.obp == pytest.approx(205 / 555)
    assert career.slg == pytest.approx((95 + 60 + 15 + 80) / 500)
    pitcher = CareerRecord(player_id=2, name="Y", outs=600, er=60, ha=180, bba=40)
    assert pitcher.era == pytest.approx(2.7)
    assert pitcher.ip == pytest.approx(200)
    assert pitcher.whip == pytest.approx(1.1)


def _hof_store() -> CareerRecordStore:
    store = CareerRecordStore()
    store.restore_career_records(
        {
            1: _career(1, "Icon", seasons=15, h=3000, ab=9000, hr=500, rbi=1700, sb=500, r=2000),
            2: _career(2, "Journeyman", seasons=6, h=100, ab=500, hr=5),
            3: _career(3, "Flash", seasons=3, h=900, ab=2500, hr=200),
            4: _career(4, "Already In", seasons=18, h=3100, ab=9500, hr=600, hof_inducted=True, hof_year=2030),
        }
    )
    return store


def _hof_info() -> list[PlayerInfo]:
    return [PlayerInfo(player_id=pid, name=f"P{pid}", position="1B") for pid in (1, 2, 3, 4)]


def test_hof_score_caps_categories() -> None:
    store = _hof_store()
    assert hof_score(store.get(1), is_pitcher=False) == pytest.approx(99.0)


def test_hof_evaluation_filters_and_does_not_touch_store() -> None:
    store = _hof_store()
    candidates = evaluate_hof_candidates(store, [1, 2, 3, 4, 404], _hof_info(), random.Random(11))

    assert [c.player_id for c in candidates] == [1]
    icon = candidates[0]
    assert icon.inducted
    assert icon.key_stats == "3000 H, 500 HR, .333 AVG"
    assert 91.4 <= icon.vote_pct <= 100
    assert store.get(1).hof_inducted is False

    assert store.commit_inductions(candidates) == 1
    inducted = store.get(1)
    assert inducted.hof_inducted
    assert inducted.hof_eligible
    assert inducted.hof_year == 2045


def test_hof_vote_is_reproducible_with_seed() -> None:
    first = evaluate_hof_candidates(_hof_store(), [1], _hof_info(), random.Random(5))
    second = evaluate_hof_candidates(_hof_store(), [1], _hof_info(), random.Random(5))
    assert first[0].vote_pct == second[0].vote_pct


def test_repeated_retiree_gets_one_ballot() -> None:
    store = _hof_store()
    info = _hof_info() + [PlayerInfo(player_id=5, name="Borderline", position="LF")]
    store.restore_career_records(
        {**store.get_career_records(), 5: _career(5, "Borderline", seasons=10, h=1800, ab=6000, hr=250, rbi=900)}
    )

    candidates = evaluate_hof_candidates(store, [1, 1, 5], info, random.Random(1))
    assert [c.player_id for c in candidates] == [1, 5]

    # The duplicate id draws no extra noise, so later votes match a clean ballot.
    clean = evaluate_hof_candidates(store, [1, 5], info, random.Random(1))
    assert [c.vote_pct for c in candidates] == [c.vote_pct for c in clean]


def test_commit_never_overwrites_existing_induction() -> None:
    store = _hof_store()
    candidates = evaluate_hof_candidates(store, [1], _hof_info(), random.Random(1))
    store.commit_inductions(candidates)
    year = store.get(1).hof_year
    assert store.commit_inductions(candidates) == 0
    assert store.get(1).hof_year == year
    assert evaluate_hof_candidates(store, [1], _hof_info(), random.Random(2)) == []


def test_avg_leaders_exclude_small_samples() -> None:
    records = [
        CareerRecord(player_id=1, name="Qualified", ab=301, h=100, seasons=2),
        CareerRecord(player_id=2, name="Too Few", ab=300, h=150, seasons=2),
        CareerRecord(player_id=3, name="Steady", ab=500, h=150, seasons=3),
    ]
    leaders = all_time_leaders(records, "avg")
    assert [row.name for row in leaders] == ["Qualified", "Steady"]
    assert [row.rank for row in leaders] == [1, 2]
    assert [row.display for row in leaders] == [".332", ".300"]


def test_era_leaders_sort_lowest_first() -> None:
    records = [
        CareerRecord(player_id=1, name="Workhorse", outs=300, er=50),
        CareerRecord(player_id=2, name="Ace", outs=300, er=30),
        CareerRecord(player_id=3, name="Cameo", outs=90, er=1),
    ]
    leaders = all_time_leaders(records, "era")
    assert [row.name for row in leaders] == ["Ace", "Workhorse"]
    assert leaders[0].value == pytest.approx(-2.7)
    assert leaders[0].display == "2.70"


def test_counting_leaders_respect_limit() -> None:
    records = [CareerRecord(player_id=i, name=f"P{i}", hr=i * 10) for i in range(1, 6)]
    leaders = all_time_leaders(records, "hr", limit=2)
    assert [row.display for row in leaders] == ["50", "40"]


def test_unknown_leader_stat_raises() -> None:
    with pytest.raises(ValueError):
        all_time_leaders([], "ops")


def test_franchise_era_record_goes_to_lowest_era() -> None:
    records = [
        _logged(1, "Ace", SeasonLogEntry(season=2030, team_id=1, team_name="ADM", era=2.5, w=18, ka=220)),
        _logged(2, "Innings Eater", SeasonLogEntry(season=2031, team_id=1, team_name="ADM", era=3.8, w=21)),
        _logged(3, "Never Pitched", SeasonLogEntry(season=2031, team_id=1, team_name="ADM", era=0.0, hr=41)),
        _logged(4, "Visitor", SeasonLogEntry(season=2031, team_id=2, team_name="COL", era=1.2, hr=60)),
    ]
    by_key = {(row.type, row.stat): row for row in franchise_records(records, 1)}

    era = by_key[("single_season", "ERA")]
    assert era.name == "Ace"
    assert era.value == pytest.approx(-2.5)
    assert era.display == "2.50"
    assert by_key[("single_season", "Wins")].name == "Innings Eater"
    assert by_key[("single_season", "HR")].name == "Never Pitched"
    assert by_key[("single_season", "HR")].season == 2031


def test_franchise_career_records_sum_team_seasons_only() -> None:
    slugger = _logged(
        1,
        "Slugger",
        SeasonLogEntry(season=2030, team_id=1, team_name="ADM", hr=30),
        SeasonLogEntry(season=2031, team_id=2, team_name="COL", hr=45),
        SeasonLogEntry(season=2032, team_id=1, team_name="ADM", hr=25),
    )
    lifer = _logged(2, "Lifer", SeasonLogEntry(season=2030, team_id=1, team_name="ADM", hr=50))
    by_key = {(row.type, row.stat): row for row in franchise_records([slugger, lifer], 1)}
    assert by_key[("career", "HR")].name == "Slugger"
    assert by_key[("career", "HR")].value == 55
    assert by_key[("career", "HR")].season is None
    assert by_key[("single_season", "HR")].name == "Lifer"


def test_record_chases_flag_players_near_records() -> None:
    records = franchise_records(
        [
            _logged(1, "Old Slugger", SeasonLogEntry(season=2030, team_id=1, team_name="ADM", hr=50)),
            _logged(2, "Old Ace", SeasonLogEntry(season=2030, team_id=1, team_name="ADM", era=2.5)),
        ],
        1,
    )
    current = [
        StatPace(name="Young Bat", stat="HR", value=30, games=81),
        StatPace(name="Young Arm", stat="ERA", value=2.6, games=100),
        StatPace(name="Slow Start", stat="HR", value=10, games=81),
    ]
    chases = record_chases(records, current)
    assert [(c.chaser_name, c.pct_of_record) for c in chases] == [("Young Arm", 96), ("Young Bat", 60)]
    assert chases[1].pace == 60
    assert chases[1].games_remaining == 81
    assert chases[0].record_value == pytest.approx(2.5)


def test_restore_round_trips_career_records() -> None:
    store = CareerRecordStore()
    players = [PlayerInfo(player_id=5, name="Round Tripper", age=25)]
    for season in (2030, 2031):
        store.record_season_stats(
            [PlayerSeasonStats(player_id=5, team_id=1, pa=400, ab=360, h=99, hr=21, outs=0)],
            players,
            TEAMS,
            season,
            awards=[(5, "ROY (AL)")] if season == 2030 else (),
        )
    original = store.get_career_records()

    copy = CareerRecordStore()
    copy.restore_career_records(original)
    assert copy.get_career_records() == original

    reloaded = CareerRecordStore()
    reloaded.restore_career_records(json.loads(json.dumps(store.save_career_records())))
    assert reloaded.get_career_records() == original


def test_restore_is_destructive() -> None:
    store = _hof_store()
    store.restore_career_records([[9, _career(9, "Only One").to_dict()]])
    assert len(store) == 1
    assert store.get(1) is None
