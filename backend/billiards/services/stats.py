from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from billiards.core.timeframes import StatsTimeframe, today_window, window_filters
from billiards.models.match_stats import MatchStat
from billiards.models.matches import Match
from billiards.models.players import Player
from billiards.schemas.stats import DailyChampionRow, PlayerStatsOut
from billiards.services.players import require_player


def win_rate(wins: int, played: int) -> float:
    if played <= 0:
        return 0.0
    return round(wins / played * 100, 2)


def _ranking_key(row):
    return (-row.wins, -row.win_rate, row.name)


def _stats_rows(db: Session, timeframe: StatsTimeframe, now: Optional[datetime], player_id: Optional[int] = None):
    window = today_window(now) if timeframe == StatsTimeframe.today else (None, None)
    date_filters = window_filters(Match.date, window)

    wl = (
        db.query(
            MatchStat.player_id.label("player_id"),
            func.sum(MatchStat.wins).label("wins"),
            func.sum(MatchStat.losses).label("losses"),
        )
        .join(Match, Match.id == MatchStat.match_id)
        .filter(*date_filters)
        .group_by(MatchStat.player_id)
        .subquery()
    )

    spent = (
        db.query(
            Match.payer_id.label("payer_id"),
            func.sum(Match.cost).label("total"),
        )
        .filter(*date_filters)
        .group_by(Match.payer_id)
        .subquery()
    )

    q = (
        db.query(
            Player.id,
            Player.name,
            func.coalesce(wl.c.wins, 0).label("wins"),
            func.coalesce(wl.c.losses, 0).label("losses"),
            func.coalesce(spent.c.total, 0).label("total_spent"),
        )
        .outerjoin(wl, wl.c.player_id == Player.id)
        .outerjoin(spent, spent.c.payer_id == Player.id)
    )
    if player_id is not None:
        q = q.filter(Player.id == player_id)
    return q.all()


def _to_stats(r) -> PlayerStatsOut:
    wins = int(r.wins or 0)
    losses = int(r.losses or 0)
    played = wins + losses
    return PlayerStatsOut(
        id=r.id,
        name=r.name,
        wins=wins,
        losses=losses,
        total_spent=round(float(r.total_spent or 0), 2),
        matches_played=played,
        win_rate=win_rate(wins, played),
    )


def all_stats(
    db: Session,
    timeframe: StatsTimeframe = StatsTimeframe.all,
    now: Optional[datetime] = None,
) -> list[PlayerStatsOut]:
    """Per-player wins/losses from match_stats plus spend from matches.payer_id."""
    out = [_to_stats(r) for r in _stats_rows(db, timeframe, now)]
    out.sort(key=_ranking_key)
    return out


def player_stats(db: Session, player_id: int) -> PlayerStatsOut:
    p = require_player(db, player_id)
    rows = _stats_rows(db, StatsTimeframe.all, None, player_id=p.id)
    if not rows:
        return PlayerStatsOut(id=p.id, name=p.name)
    return _to_stats(rows[0])


def leaderboard(db: Session, limit: int = 10) -> list[PlayerStatsOut]:
    return all_stats(db)[:limit]


def daily_champion(db: Session, now: Optional[datetime] = None) -> list[DailyChampionRow]:
    """Today's standings read only from each match's participants list.

    The first listed name is that match's winner and every other listed name
    takes a loss, whatever the match's winners/loser columns say. This is a
    separate definition of a win from all_stats and the two can disagree.
    Matches without participants are ignored.
    """
    start, end = today_window(now)
    matches = (
        db.query(Match)
        .filter(*window_filters(Match.date, (start, end)))
        .order_by(Match.date.asc())
        .all()
    )

    tally: dict[str, list[int]] = {}
    for m in matches:
        names = []
        for n in m.participants or []:
            n = (n or "").strip()
            if n and n not in names:
                names.append(n)
        if not names:
            continue

        tally.setdefault(names[0], [0, 0])[0] += 1
        for loser in names[1:]:
            tally.setdefault(loser, [0, 0])[1] += 1

    ids = {}
    if tally:
        ids = dict(db.query(Player.name, Player.id).filter(Player.name.in_(list(tally))).all())

    out = []
    for name, (wins, losses) in tally.items():
        played = wins + losses
        out.append(
            DailyChampionRow(
                name=name,
                player_id=ids.get(name),
                wins=wins,
                losses=losses,
                matches_played=played,
                win_rate=win_rate(wins, played),
            )
        )
    out.sort(key=_ranking_key)
    return out
