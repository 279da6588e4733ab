from __future__ import annotations

import logging
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from billiards.core.config import settings
from billiards.core.errors import no_players_available
from billiards.models.payer_rotation import ROTATION_ROW_ID, PayerRotation
from billiards.models.players import Player

log = logging.getLogger(__name__)


def order_players(players: Sequence[tuple[int, str]], priority: Sequence[str] = ()) -> list[int]:
    """
    Input: (id, name) pairs and an optional priority list of names.
    Output: player ids in rotation order.

    Without a priority list the order is registration order (id). With one,
    the listed names come first in list order, then everyone else
    alphabetically.
    """
    if not priority:
        return sorted(pid for pid, _ in players)

    rank = {name: i for i, name in enumerate(priority)}
    listed = sorted((p for p in players if p[1] in rank), key=lambda p: rank[p[1]])
    rest = sorted((p for p in players if p[1] not in rank), key=lambda p: (p[1], p[0]))
    return [pid for pid, _ in listed + rest]


def next_payer_id(ordered_ids: Sequence[int], current_id: Optional[int]) -> int:
    if not ordered_ids:
        raise no_players_available()

    # Current payer gone (deleted) or never set -> back to the start
    if current_id not in ordered_ids:
        return ordered_ids[0]

    idx = list(ordered_ids).index(current_id)
    return ordered_ids[(idx + 1) % len(ordered_ids)]


def ordered_player_ids(db: Session, priority: Optional[Sequence[str]] = None) -> list[int]:
    if priority is None:
        priority = settings.payer_priority
    players = [(pid, name) for pid, name in db.query(Player.id, Player.name).all()]
    return order_players(players, priority)


def get_rotation(db: Session, for_update: bool = False) -> Optional[PayerRotation]:
    q = db.query(PayerRotation).filter(PayerRotation.id == ROTATION_ROW_ID)
    if for_update:
        # Row lock on engines that have one; SQLite serializes writers anyway
        q = q.with_for_update()
    return q.one_or_none()


def get_current_payer(db: Session) -> Optional[Player]:
    return (
        db.query(Player)
        .join(PayerRotation, PayerRotation.current_payer_id == Player.id)
        .filter(PayerRotation.id == ROTATION_ROW_ID)
        .one_or_none()
    )


def initialize_with_first_player(db: Session, priority: Optional[Sequence[str]] = None) -> PayerRotation:
    """Point the rotation at the first player of the ordering. Flushes, does not commit."""
    rotation = get_rotation(db, for_update=True)
    if rotation is not None:
        return rotation

    ordered = ordered_player_ids(db, priority)
    if not ordered:
        raise no_players_available()

    rotation = PayerRotation(id=ROTATION_ROW_ID, current_payer_id=ordered[0], version=1)
    db.add(rotation)
    db.flush()
    log.info("Payer rotation initialized with player %s", ordered[0])
    return rotation


def rotate_to_next(db: Session, priority: Optional[Sequence[str]] = None) -> PayerRotation:
    """Advance the pointer one step. Flushes, does not commit."""
    ordered = ordered_player_ids(db, priority)
    if not ordered:
        raise no_players_available()

    rotation = get_rotation(db, for_update=True)
    if rotation is None:
        return initialize_with_first_player(db, priority)

    previous = rotation.current_payer_id
    rotation.current_payer_id = next_payer_id(ordered, previous)
    rotation.version = (rotation.version or 0) + 1
    db.flush()

    log.info("Payer rotated %s -> %s (version %s)", previous, rotation.current_payer_id, rotation.version)
    return rotation


def get_next_payer(db: Session) -> Player:
    """Current payer, bootstrapping the rotation on first use."""
    payer = get_current_payer(db)
    if payer is not None:
        return payer

    try:
        initialize_with_first_player(db)
        db.commit()
    except Exception:
        db.rollback()
        raise

    payer = get_current_payer(db)
    if payer is None:
        raise no_players_available()
    return payer
