from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from billiards.core.errors import not_found
from billiards.models.badges import Badge, PlayerBadge
from billiards.models.match_stats import MatchStat
from billiards.models.matches import Match
from billiards.schemas.badges import PlayerBadgeOut, PlayerBadgeSummary
from billiards.services import stats as stats_service
from billiards.services.players import require_player

log = logging.getLogger(__name__)

TURTLE_MIRACLE = "turtle-miracle"
ANNIHILATOR = "annihilator"
BULLET_WARDEN = "bullet-warden"

ANNIHILATOR_STREAK = 5
ANNIHILATOR_LOOKBACK = 10
BULLET_WARDEN_MIN_MATCHES = 10
BULLET_WARDEN_MIN_WIN_RATE = 60.0

BADGE_CATALOGUE = [
    {
        "id": TURTLE_MIRACLE,
        "name": "Thần Rùa",
        "criterion": "A shot played without a clear plan that still ends up in the pocket",
        "short_description": "Recognises a lucky shot that decided the game. Awarded by hand.",
        "icon": "🐢",
    },
    {
        "id": ANNIHILATOR,
        "name": "Kẻ Hủy Diệt",
        "criterion": f"Win streak of at least {ANNIHILATOR_STREAK} matches",
        "short_description": "For a player on a strong winning run.",
        "icon": "🔥",
    },
    {
        "id": BULLET_WARDEN,
        "name": "Chúa Tể Chạy Đạn",
        "criterion": (
            f"At least {BULLET_WARDEN_MIN_MATCHES} matches played with a win rate "
            f"of {BULLET_WARDEN_MIN_WIN_RATE:.0f}% or more"
        ),
        "short_description": "Rewards a safe, controlled style of play.",
        "icon": "🛡️",
    },
]


def seed_badges(db: Session) -> int:
    """Insert or refresh the catalogue. Returns how many rows were new."""
    created = 0
    for item in BADGE_CATALOGUE:
        row = db.query(Badge).filter(Badge.id == item["id"]).one_or_none()
        if row is None:
            row = Badge(id=item["id"])
            db.add(row)
            created += 1
        row.name = item["name"]
        row.criterion = item["criterion"]
        row.short_description = item["short_description"]
        row.icon = item["icon"]
    db.commit()
    return created


def list_badges(db: Session) -> list[Badge]:
    return db.query(Badge).order_by(Badge.id.asc()).all()


def get_badge(db: Session, badge_id: str) -> Optional[Badge]:
    return db.query(Badge).filter(Badge.id == badge_id).first()


def _award_out(pb: PlayerBadge) -> PlayerBadgeOut:
    return PlayerBadgeOut(
        id=pb.id,
        player_id=pb.player_id,
        badge_id=pb.badge_id,
        match_id=pb.match_id,
        awarded_at=pb.awarded_at,
        name=pb.badge.name,
        criterion=pb.badge.criterion,
        short_description=pb.badge.short_description,
        icon=pb.badge.icon,
    )


def player_badges(db: Session, player_id: int) -> list[PlayerBadgeOut]:
    rows = (
        db.query(PlayerBadge)
        .filter(PlayerBadge.player_id == player_id)
        .order_by(PlayerBadge.awarded_at.desc(), PlayerBadge.id.desc())
        .all()
    )
    return [_award_out(pb) for pb in rows]


def all_player_badges(db: Session) -> list[PlayerBadgeSummary]:
    rows = db.query(PlayerBadge).order_by(PlayerBadge.awarded_at.desc(), PlayerBadge.id.desc()).all()
    return [
        PlayerBadgeSummary(
            id=pb.id,
            player_id=pb.player_id,
            badge_id=pb.badge_id,
            match_id=pb.match_id,
            awarded_at=pb.awarded_at,
            player_name=pb.player.name,
            badge_name=pb.badge.name,
            icon=pb.badge.icon,
            short_description=pb.badge.short_description,
        )
        for pb in rows
    ]


def _find_award(db: Session, player_id: int, badge_id: str, match_id: Optional[str]) -> Optional[PlayerBadge]:
    q = db.query(PlayerBadge).filter(PlayerBadge.player_id == player_id, PlayerBadge.badge_id == badge_id)
    if match_id is None:
        q = q.filter(PlayerBadge.match_id.is_(None))
    else:
        q = q.filter(PlayerBadge.match_id == match_id)
    return q.first()


def award_badge(db: Session, player_id: int, badge_id: str, match_id: Optional[str] = None) -> PlayerBadgeOut:
    """Give a badge to a player. Awarding the same (player, badge, match) twice returns the first award."""
    require_player(db, player_id)
    if get_badge(db, badge_id) is None:
        raise not_found("Badge", badge_id)
    if match_id is not None and db.query(Match.id).filter(Match.id == match_id).first() is None:
        raise not_found("Match", match_id)

    existing = _find_award(db, player_id, badge_id, match_id)
    if existing is not None:
        return _award_out(existing)

    pb = PlayerBadge(player_id=player_id, badge_id=badge_id, match_id=match_id)
    db.add(pb)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = _find_award(db, player_id, badge_id, match_id)
        if existing is None:
            raise
        return _award_out(existing)

    db.refresh(pb)
    log.info("Badge awarded player_id=%s badge_id=%s match_id=%s", player_id, badge_id, match_id)
    return _award_out(pb)


def award_turtle_miracle(db: Session, player_id: int, match_id: Optional[str] = None) -> PlayerBadgeOut:
    return award_badge(db, player_id, TURTLE_MIRACLE, match_id)


def remove_badge(db: Session, player_id: int, badge_id: str) -> int:
    removed = (
        db.query(PlayerBadge)
        .filter(PlayerBadge.player_id == player_id, PlayerBadge.badge_id == badge_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    if removed:
        log.info("Badge removed player_id=%s badge_id=%s", player_id, badge_id)
    return removed


def has_badge(db: Session, player_id: int, badge_id: str) -> bool:
    return (
        db.query(PlayerBadge.id)
        .filter(PlayerBadge.player_id == player_id, PlayerBadge.badge_id == badge_id)
        .first()
        is not None
    )


def current_win_streak(db: Session, player_id: int, lookback: int = ANNIHILATOR_LOOKBACK) -> int:
    recent = (
        db.query(MatchStat.wins, MatchStat.losses)
        .join(Match, Match.id == MatchStat.match_id)
        .filter(MatchStat.player_id == player_id)
        .order_by(Match.date.desc(), Match.created_at.desc())
        .limit(lookback)
        .all()
    )
    streak = 0
    for wins, losses in recent:
        if wins > 0 and losses == 0:
            streak += 1
        else:
            break
    return streak


def check_annihilator(db: Session, player_id: int) -> bool:
    if has_badge(db, player_id, ANNIHILATOR):
        return False
    if current_win_streak(db, player_id) < ANNIHILATOR_STREAK:
        return False
    award_badge(db, player_id, ANNIHILATOR)
    return True


def check_bullet_warden(db: Session, player_id: int) -> bool:
    if has_badge(db, player_id, BULLET_WARDEN):
        return False
    st = stats_service.player_stats(db, player_id)
    if st.matches_played < BULLET_WARDEN_MIN_MATCHES or st.win_rate < BULLET_WARDEN_MIN_WIN_RATE:
        return False
    award_badge(db, player_id, BULLET_WARDEN)
    return True


def check_all_badges(db: Session, player_id: int) -> list[str]:
    """Run every automatic badge rule for one player. Returns the ids newly awarded."""
    require_player(db, player_id)
    awarded = []
    if check_annihilator(db, player_id):
        awarded.append(ANNIHILATOR)
    if check_bullet_warden(db, player_id):
        awarded.append(BULLET_WARDEN)
    return awarded


def evaluate_after_match(db: Session, match: Match) -> None:
    # Best-effort: a badge failure must never fail the match that triggered it
    player_ids = [pid for (pid,) in db.query(MatchStat.player_id).filter(MatchStat.match_id == match.id).all()]
    for pid in player_ids:
        try:
            check_all_badges(db, pid)
        except Exception:
            db.rollback()
            log.exception("Badge evaluation failed for player %s after match %s", pid, match.id)
