from __future__ import annotations

import logging
from typing import Iterable, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from billiards.core.errors import duplicate, not_found, validation_error
from billiards.models.matches import Match
from billiards.models.payer_rotation import PayerRotation
from billiards.models.players import PLAYER_NAME_MAX, Player
from billiards.services import payer_rotation

log = logging.getLogger(__name__)


def clean_name(name: Optional[str]) -> str:
    nm = (name or "").strip()
    if not nm:
        raise validation_error("name is required", field="name", value=name)
    if len(nm) > PLAYER_NAME_MAX:
        raise validation_error(f"name must be at most {PLAYER_NAME_MAX} characters", field="name", value=name)
    return nm


def list_players(db: Session) -> list[Player]:
    return db.query(Player).order_by(Player.id.asc()).all()


def get_player(db: Session, player_id: int) -> Optional[Player]:
    return db.query(Player).filter(Player.id == player_id).first()


def get_player_by_name(db: Session, name: str) -> Optional[Player]:
    # Blank is a caller error; a well-formed unknown name is just a miss
    nm = clean_name(name)
    return db.query(Player).filter(Player.name == nm).first()


def require_player(db: Session, player_id: int) -> Player:
    p = get_player(db, player_id)
    if p is None:
        raise not_found("Player", player_id)
    return p


def create_player(db: Session, name: str) -> Player:
    nm = clean_name(name)
    if db.query(Player).filter(Player.name == nm).first():
        raise duplicate("Player", "name", nm)

    p = Player(name=nm)
    db.add(p)
    try:
        db.flush()
        # First player ever -> rotation starts with them; no-op otherwise
        payer_rotation.initialize_with_first_player(db)
        db.commit()
    except IntegrityError:
        # lost a race against a concurrent insert of the same name
        db.rollback()
        raise duplicate("Player", "name", nm)
    except Exception:
        db.rollback()
        raise

    db.refresh(p)
    log.info("Player created id=%s name=%r", p.id, p.name)
    return p


def rename_player(db: Session, player_id: int, name: str) -> Player:
    p = require_player(db, player_id)
    nm = clean_name(name)
    if nm == p.name:
        return p

    conflict = db.query(Player).filter(Player.name == nm, Player.id != p.id).first()
    if conflict:
        raise duplicate("Player", "name", nm)

    old = p.name
    p.name = nm
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise duplicate("Player", "name", nm)

    db.refresh(p)
    log.info("Player renamed id=%s %r -> %r", p.id, old, p.name)
    return p


def matches_involving(db: Session, player_id: int) -> list[Match]:
    """Every match where the player is a winner, the loser or the payer."""
    by_fk = (
        db.query(Match)
        .filter(or_(Match.loser_id == player_id, Match.payer_id == player_id))
        .all()
    )
    seen = {m.id for m in by_fk}

    # winner ids live in a JSON list; containment operators differ between
    # SQLite and PostgreSQL JSON, so filter those in Python
    as_winner = [
        m for m in db.query(Match).all()
        if m.id not in seen and player_id in (m.winner_ids or [])
    ]
    return by_fk + as_winner


def delete_player(db: Session, player_id: int) -> bool:
    """Remove a player and every match that references it. Not reversible."""
    p = get_player(db, player_id)
    if p is None:
        return False

    name = p.name
    doomed = matches_involving(db, player_id)
    try:
        for m in doomed:
            db.delete(m)
        # pointer re-initializes on next read
        db.query(PayerRotation).filter(PayerRotation.current_payer_id == player_id).delete()
        db.delete(p)
        db.commit()
    except Exception:
        db.rollback()
        raise

    log.warning("Player deleted id=%s name=%r, removed %d match(es)", player_id, name, len(doomed))
    return True


def seed_default_players(db: Session, names: Iterable[str]) -> list[Player]:
    created = []
    for name in names:
        nm = (name or "").strip()
        if not nm or db.query(Player).filter(Player.name == nm).first():
            continue
        created.append(create_player(db, nm))
    return created
