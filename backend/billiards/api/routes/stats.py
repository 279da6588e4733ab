from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from billiards.core.config import settings
from billiards.core.timeframes import ExpenseTimeframe, StatsTimeframe
from billiards.db.session import get_db
from billiards.schemas.envelope import ok
from billiards.services import matches as matches_service
from billiards.services import stats as stats_service

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("")
def get_stats(
    timeframe: StatsTimeframe = Query(default=StatsTimeframe.all),
    db: Session = Depends(get_db),
):
    if timeframe == StatsTimeframe.daily:
        return ok(stats_service.daily_champion(db))
    return ok(stats_service.all_stats(db, timeframe))


@router.get("/player/{player_id}")
def get_player_stats(player_id: int, db: Session = Depends(get_db)):
    return ok(stats_service.player_stats(db, player_id))


@router.get("/expenses")
def get_expenses(
    timeframe: ExpenseTimeframe = Query(default=ExpenseTimeframe.month),
    db: Session = Depends(get_db),
):
    return ok(matches_service.expenses_by_timeframe(db, timeframe))


@router.get("/leaderboard")
def get_leaderboard(
    limit: int = Query(default=settings.LEADERBOARD_DEFAULT, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return ok(stats_service.leaderboard(db, limit=limit))
