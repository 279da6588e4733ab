from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from billiards.core.errors import not_found
from billiards.db.session import get_db
from billiards.schemas.envelope import ok
from billiards.schemas.players import PlayerCreate, PlayerOut, PlayerUpdate
from billiards.services import players as players_service

router = APIRouter(prefix="/players", tags=["players"])


@router.get("")
def list_players(db: Session = Depends(get_db)):
    rows = players_service.list_players(db)
    return ok([PlayerOut.model_validate(p) for p in rows])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_player(payload: PlayerCreate, db: Session = Depends(get_db)):
    p = players_service.create_player(db, payload.name)
    return ok(PlayerOut.model_validate(p), message="Player created successfully")


@router.get("/{player_id}")
def get_player(player_id: int, db: Session = Depends(get_db)):
    p = players_service.require_player(db, player_id)
    return ok(PlayerOut.model_validate(p))


@router.patch("/{player_id}")
def rename_player(player_id: int, payload: PlayerUpdate, db: Session = Depends(get_db)):
    p = players_service.rename_player(db, player_id, payload.name)
    return ok(PlayerOut.model_validate(p), message="Player updated successfully")


@router.delete("/{player_id}")
def delete_player(player_id: int, db: Session = Depends(get_db)):
    if not players_service.delete_player(db, player_id):
        raise not_found("Player", player_id)
    return ok(message="Player deleted successfully. All matches involving this player were removed as well.")
