from datetime import datetime

import pytest

from billiards.core.errors import AppError, ErrorKind
from billiards.core.timeframes import StatsTimeframe
from billiards.services import stats as stats_service
from billiards.services.matches import create_match

NOW = datetime(2024, 5, 10, 12, 0)


def _by_name(rows):
    return {r.name: r for r in rows}


@pytest.mark.parametrize(
    "wins, played, expected",
    [(0, 0, 0.0), (1, 3, 33.33), (2, 3, 66.67), (5, 5, 100.0), (0, 4, 0.0)],
)
def test_win_rate(wins, played, expected):
    assert stats_service.win_rate(wins, played) == expected


def test_all_stats_counts_and_spend(db, players):
    create_match(db, ["B"], "A", 50)       # payer A
    create_match(db, ["A", "B"], "C", 20)  # payer B
    create_match(db, ["C"], "A", 10)       # payer C

    rows = _by_name(stats_service.all_stats(db))
    a, b, c = rows["A"], rows["B"], rows["C"]

    assert (b.wins, b.losses, b.matches_played, b.win_rate) == (2, 0, 2, 100.0)
    assert (a.wins, a.losses, a.win_rate) == (1, 2, 33.33)
    assert (c.wins, c.losses, c.win_rate) == (1, 1, 50.0)
    assert (a.total_spent, b.total_spent, c.total_spent) == (50.0, 20.0, 10.0)


def test_ordering_wins_then_rate(db, players):
    create_match(db, ["B"], "A", 1)
    create_match(db, ["B"], "C", 1)
    create_match(db, ["C"], "A", 1)

    assert [r.name for r in stats_service.all_stats(db)] == ["B", "C", "A"]


def test_player_without_matches_has_zero_stats(db, players):
    st = stats_service.player_stats(db, players[2].id)
    assert (st.wins, st.losses, st.matches_played, st.win_rate, st.total_spent) == (0, 0, 0, 0.0, 0.0)


def test_player_stats_unknown(db):
    with pytest.raises(AppError) as ei:
        stats_service.player_stats(db, 404)
    assert ei.value.kind == ErrorKind.NOT_FOUND


def test_today_filter(db, players):
    create_match(db, ["A"], "B", 10, date=datetime(2024, 5, 10, 8, 0))
    create_match(db, ["A"], "B", 10, date=datetime(2024, 5, 9, 23, 59))

    today = _by_name(stats_service.all_stats(db, StatsTimeframe.today, now=NOW))
    assert (today["A"].wins, today["B"].losses) == (1, 1)
    # payer of the first match only
    assert today["A"].total_spent == 10.0
    assert today["B"].total_spent == 0.0

    overall = _by_name(stats_service.all_stats(db))
    assert overall["A"].wins == 2


def test_leaderboard_is_head_of_all_stats(db, players):
    create_match(db, ["C"], "A", 1)
    create_match(db, ["C"], "B", 1)

    top = stats_service.leaderboard(db, limit=2)
    assert [r.name for r in top] == [r.name for r in stats_service.all_stats(db)][:2]
    assert top[0].name == "C"


def test_win_rate_bounds(db, players):
    for winners, loser in [(["A"], "B"), (["B"], "A"), (["A", "C"], "B")]:
        create_match(db, winners, loser, 1)

    for r in stats_service.all_stats(db):
        assert 0 <= r.win_rate <= 100
        assert (r.win_rate == 0) == (r.matches_played == 0 or r.wins == 0)


def test_daily_champion_reads_participants_only(db, players):
    # winners/loser disagree with participants order on purpose
    create_match(db, ["A"], "B", 1, participants=["C", "A", "B"], date=datetime(2024, 5, 10, 9, 0))
    create_match(db, ["B"], "A", 1, participants=["A", "B"], date=datetime(2024, 5, 10, 10, 0))
    create_match(db, ["A"], "C", 1, date=datetime(2024, 5, 10, 11, 0))
    create_match(db, ["C"], "B", 1, participants=["B", "C"], date=datetime(2024, 5, 9, 11, 0))

    rows = _by_name(stats_service.daily_champion(db, now=NOW))
    assert set(rows) == {"A", "B", "C"}
    assert (rows["C"].wins, rows["C"].losses) == (1, 0)
    assert (rows["A"].wins, rows["A"].losses) == (1, 1)
    assert (rows["B"].wins, rows["B"].losses) == (0, 2)
    assert rows["A"].player_id == players[0].id

    assert [r.name for r in stats_service.daily_champion(db, now=NOW)] == ["C", "A", "B"]


def test_daily_champion_keeps_unregistered_names(db, players):
    create_match(db, ["A"], "B", 1, participants=["Guest", "A"], date=datetime(2024, 5, 10, 9, 0))

    rows = _by_name(stats_service.daily_champion(db, now=NOW))
    assert rows["Guest"].wins == 1
    assert rows["Guest"].player_id is None
