from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from billiards.core.errors import not_found
from billiards.db.session import get_db
from billiards.schemas.badges import AwardBadgeRequest, BadgeOut, TurtleMiracleRequest
from billiards.schemas.envelope import ok
from billiards.services import badges as badges_service
from billiards.services.players import require_player

router = APIRouter(prefix="/badges", tags=["badges"])


@router.get("")
def list_badges(db: Session = Depends(get_db)):
    return ok([BadgeOut.model_validate(b) for b in badges_service.list_badges(db)])


@router.get("/players/all")
def list_all_player_badges(db: Session = Depends(get_db)):
    return ok(badges_service.all_player_badges(db))


@router.get("/player/{player_id}")
def list_player_badges(player_id: int, db: Session = Depends(get_db)):
    require_player(db, player_id)
    return ok(badges_service.player_badges(db, player_id))


@router.post("/award", status_code=status.HTTP_201_CREATED)
def award_badge(payload: AwardBadgeRequest, db: Session = Depends(get_db)):
    award = badges_service.award_badge(db, payload.player_id, payload.badge_id, payload.match_id)
    return ok(award, message="Badge awarded successfully")


@router.post("/award-turtle-miracle", status_code=status.HTTP_201_CREATED)
def award_turtle_miracle(payload: TurtleMiracleRequest, db: Session = Depends(get_db)):
    award = badges_service.award_turtle_miracle(db, payload.player_id, payload.match_id)
    return ok(award, message="Turtle miracle badge awarded successfully")


@router.delete("/player/{player_id}/badge/{badge_id}")
def remove_player_badge(player_id: int, badge_id: str, db: Session = Depends(get_db)):
    if not badges_service.remove_badge(db, player_id, badge_id):
        raise not_found("PlayerBadge", f"{player_id}/{badge_id}")
    return ok(message="Badge removed successfully")


@router.post("/check/{player_id}")
def check_player_badges(player_id: int, db: Session = Depends(get_db)):
    awarded = badges_service.check_all_badges(db, player_id)
    return ok({"player_id": player_id, "awarded": awarded})


@router.get("/{badge_id}")
def get_badge(badge_id: str, db: Session = Depends(get_db)):
    b = badges_service.get_badge(db, badge_id)
    if b is None:
        raise not_found("Badge", badge_id)
    return ok(BadgeOut.model_validate(b))
