from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from billiards.core.config import settings
from billiards.core.errors import not_found
from billiards.db.session import get_db
from billiards.schemas.envelope import ok
from billiards.schemas.matches import MatchCreate
from billiards.schemas.players import PayerOut
from billiards.services import matches as matches_service
from billiards.services import payer_rotation

router = APIRouter(prefix="/matches", tags=["matches"])


@router.get("")
def list_matches(db: Session = Depends(get_db)):
    rows = matches_service.list_matches(db)
    return ok(matches_service.match_views(db, rows))


# fixed paths first so they are not captured by /{match_id}
@router.get("/payer/next")
def next_payer(db: Session = Depends(get_db)):
    payer = payer_rotation.get_next_payer(db)
    return ok(PayerOut.model_validate(payer))


@router.get("/recent")
def recent_matches(
    limit: int = Query(default=settings.RECENT_MATCHES_DEFAULT, ge=1, le=100),
    db: Session = Depends(get_db),
):
    rows = matches_service.list_matches(db, limit=limit)
    return ok(matches_service.match_views(db, rows))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_match(payload: MatchCreate, db: Session = Depends(get_db)):
    details = None
    if payload.details:
        details = [d.model_dump() for d in payload.details]

    match = matches_service.create_match(
        db,
        winners=payload.winners,
        loser=payload.loser,
        cost=payload.cost,
        participants=payload.participants,
        details=details,
    )
    return ok(matches_service.match_view(db, match), message="Match created successfully")


@router.get("/{match_id}")
def get_match(match_id: str, db: Session = Depends(get_db)):
    m = matches_service.get_match(db, match_id)
    if m is None:
        raise not_found("Match", match_id)
    return ok(matches_service.match_view(db, m))


@router.delete("/{match_id}")
def delete_match(match_id: str, db: Session = Depends(get_db)):
    if not matches_service.delete_match(db, match_id):
        raise not_found("Match", match_id)
    return ok(message="Match deleted successfully")
