import logging

from sqlalchemy.orm import Session

from billiards.db.base import Base
from billiards.db.session import engine

# registers the models on Base.metadata before create_all
import billiards.models  # noqa: F401

log = logging.getLogger(__name__)


def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)


def drop_db(bind=None):
    Base.metadata.drop_all(bind=bind or engine)


def migrate(db: Session) -> dict:
    """Bring a database up to the current schema and backfill derived rows.

    Safe to run on every startup: tables are created if missing, the badge
    catalogue is upserted, matches without stat rows get inferred ones and the
    payer rotation is initialized when there are players but no pointer yet.
    """
    from billiards.services import badges, matches, payer_rotation
    from billiards.models.players import Player

    init_db(bind=db.get_bind())

    new_badges = badges.seed_badges(db)
    filled = matches.backfill_match_stats(db)

    rotation_initialized = False
    if payer_rotation.get_rotation(db) is None and db.query(Player.id).first() is not None:
        payer_rotation.initialize_with_first_player(db)
        db.commit()
        rotation_initialized = True

    summary = {
        "badges_created": new_badges,
        "matches_backfilled": filled,
        "rotation_initialized": rotation_initialized,
    }
    log.info("Migration done: %s", summary)
    return summary
