from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from sqlalchemy import and_, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from billiards.core.config import settings
from billiards.core.errors import AppError, business_rule, not_found, validation_error
from billiards.core.timeframes import ExpenseTimeframe, expense_window, utcnow
from billiards.crud.crud_match_stat import upsert_match_stats
from billiards.models.match_stats import MatchStat
from billiards.models.matches import Match, match_result_for
from billiards.models.players import Player
from billiards.schemas.matches import MatchOut
from billiards.schemas.stats import ExpensesOut
from billiards.services import badges, payer_rotation
from billiards.services.players import get_player_by_name

log = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass
class StatLine:
    player_id: int
    wins: int
    losses: int


def infer_stat_lines(
    winner_ids: Sequence[int],
    loser_id: int,
    participant_ids: Sequence[int] = (),
    details: Optional[Sequence[StatLine]] = None,
) -> list[StatLine]:
    """
    Explicit details take precedence. Otherwise winners get 1/0, the loser
    0/1 and any other participant 0/0. One line per distinct player.
    """
    if details:
        by_player: dict[int, StatLine] = {}
        for d in details:
            by_player[d.player_id] = d
        return list(by_player.values())

    lines: dict[int, StatLine] = {}
    for wid in winner_ids:
        lines[wid] = StatLine(wid, 1, 0)
    lines[loser_id] = StatLine(loser_id, 0, 1)
    for pid in participant_ids:
        if pid not in lines:
            lines[pid] = StatLine(pid, 0, 0)
    return list(lines.values())


def _resolve(db: Session, name: str, role: str) -> Player:
    p = get_player_by_name(db, name)
    if p is None:
        raise not_found(role, name)
    return p


def _to_cost(cost) -> Decimal:
    try:
        value = Decimal(str(cost))
    except (ArithmeticError, ValueError):
        raise validation_error("cost must be a number", field="cost", value=cost)
    if not value.is_finite() or value < 0:
        raise validation_error("cost must be >= 0", field="cost", value=cost)
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _write_stats(db: Session, match: Match, lines: list[StatLine]) -> None:
    # Savepoint: a failure here drops the stat rows only, the match stands
    try:
        with db.begin_nested():
            res = upsert_match_stats(
                db,
                match.id,
                [{"player_id": s.player_id, "wins": s.wins, "losses": s.losses} for s in lines],
            )
        log.debug("Match %s stats written: %s", match.id, res)
    except SQLAlchemyError:
        log.exception("Could not write stats for match %s; ledger entry kept", match.id)


def create_match(
    db: Session,
    winners: Sequence[str],
    loser: str,
    cost,
    participants: Optional[Sequence[str]] = None,
    details: Optional[Sequence[dict]] = None,
    date: Optional[datetime] = None,
) -> Match:
    """Record a match, charge the current payer and advance the rotation.

    Name resolution and rule checks happen before any write. The insert and
    the rotation advance commit together; stat rows are best-effort.
    """
    if not winners:
        raise validation_error("at least one winner is required", field="winners", value=list(winners))
    amount = _to_cost(cost)

    # 1) resolve every name up front, any miss aborts the whole thing
    winner_players = [_resolve(db, w, "Winner") for w in winners]
    loser_player = _resolve(db, loser, "Loser")
    detail_lines = [
        StatLine(_resolve(db, d["name"], "Player").id, int(d.get("wins") or 0), int(d.get("losses") or 0))
        for d in (details or [])
    ]

    participant_names = [p.strip() for p in (participants or []) if p and p.strip()]
    participant_ids = []
    for nm in participant_names:
        p = db.query(Player).filter(Player.name == nm).first()
        if p is None:
            log.warning("Participant %r is not a registered player, no stat row for it", nm)
            continue
        participant_ids.append(p.id)

    # 2) rules
    winner_ids = [p.id for p in winner_players]
    if len(set(winner_ids)) != len(winner_ids):
        raise business_rule("Winners must not contain duplicates", rule="winners_unique")
    if loser_player.id in winner_ids:
        raise business_rule("Winners cannot include the loser", rule="loser_not_winner")

    try:
        # 3) current payer, bootstrapping the rotation if needed
        rotation = payer_rotation.get_rotation(db, for_update=True)
        if rotation is None:
            rotation = payer_rotation.initialize_with_first_player(db)
        payer_id = rotation.current_payer_id

        # 4) ledger row
        match = Match(
            winner_ids=winner_ids,
            loser_id=loser_player.id,
            payer_id=payer_id,
            cost=amount,
            match_result=match_result_for(len(winner_ids)),
            participants=participant_names,
            date=date or utcnow(),
        )
        db.add(match)
        db.flush()

        # 5) rotation
        payer_rotation.rotate_to_next(db)

        # 6) stats
        _write_stats(db, match, infer_stat_lines(winner_ids, loser_player.id, participant_ids, detail_lines))

        db.commit()
    except (AppError, SQLAlchemyError):
        db.rollback()
        raise

    db.refresh(match)
    log.info(
        "Match created id=%s winners=%s loser=%s payer=%s cost=%s result=%s",
        match.id, winner_ids, loser_player.id, payer_id, amount, match.match_result,
    )

    if settings.BADGES_ENABLED:
        badges.evaluate_after_match(db, match)

    return match


def get_match(db: Session, match_id: str) -> Optional[Match]:
    return db.query(Match).filter(Match.id == match_id).first()


def list_matches(db: Session, limit: Optional[int] = None) -> list[Match]:
    q = db.query(Match).order_by(Match.date.desc(), Match.created_at.desc())
    if limit is not None:
        q = q.limit(limit)
    return q.all()


def delete_match(db: Session, match_id: str) -> bool:
    # Audit removal, not an undo: rotation is left where it is
    m = get_match(db, match_id)
    if m is None:
        return False
    try:
        db.delete(m)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    log.warning("Match deleted id=%s", match_id)
    return True


def match_views(db: Session, matches: Sequence[Match]) -> list[MatchOut]:
    ids = {wid for m in matches for wid in (m.winner_ids or [])}
    names = {}
    if ids:
        names = dict(db.query(Player.id, Player.name).filter(Player.id.in_(ids)).all())

    return [
        MatchOut(
            id=m.id,
            winners=[names[w] for w in (m.winner_ids or []) if w in names],
            loser=m.loser.name,
            payer=m.payer.name,
            cost=float(m.cost),
            date=m.date,
            participants=list(m.participants or []),
            match_result=m.match_result,
        )
        for m in matches
    ]


def match_view(db: Session, match: Match) -> MatchOut:
    return match_views(db, [match])[0]


def expenses_by_timeframe(
    db: Session,
    timeframe: ExpenseTimeframe = ExpenseTimeframe.month,
    now: Optional[datetime] = None,
) -> ExpensesOut:
    start, end = expense_window(timeframe, now=now)

    # Filter inside the join so players with nothing paid still show up with 0
    cond = [Match.payer_id == Player.id]
    if start is not None:
        cond.append(Match.date >= start)
    if end is not None:
        cond.append(Match.date < end)

    rows = (
        db.query(Player.name, func.coalesce(func.sum(Match.cost), 0).label("total"))
        .outerjoin(Match, and_(*cond))
        .group_by(Player.id, Player.name)
        .order_by(Player.id.asc())
        .all()
    )

    by_player: dict[str, float] = {}
    total = Decimal("0")
    for name, amount in rows:
        amount = Decimal(str(amount or 0)).quantize(CENT)
        by_player[name] = float(amount)
        total += amount

    return ExpensesOut(total=float(total), by_player=by_player)


def backfill_match_stats(db: Session) -> int:
    """Write inferred stat rows for matches that have none. Returns how many matches were filled."""
    have_stats = {mid for (mid,) in db.query(MatchStat.match_id).distinct().all()}
    filled = 0
    for m in db.query(Match).all():
        if m.id in have_stats:
            continue
        names = [p for p in (m.participants or []) if p]
        participant_ids = []
        if names:
            participant_ids = [pid for (pid,) in db.query(Player.id).filter(Player.name.in_(names)).all()]
        lines = infer_stat_lines(m.winner_ids or [], m.loser_id, participant_ids)
        upsert_match_stats(db, m.id, [{"player_id": s.player_id, "wins": s.wins, "losses": s.losses} for s in lines])
        filled += 1

    db.commit()
    if filled:
        log.info("Backfilled stats for %d match(es)", filled)
    return filled
