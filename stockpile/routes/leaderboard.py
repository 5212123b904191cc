from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import LeaderboardResponse, LeaderboardRow
from ..services.leaderboard import top_actors

router = APIRouter(prefix="/v1/leaderboard", tags=["leaderboard"])

@router.get("", response_model=LeaderboardResponse)
def leaderboard(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)):
    return LeaderboardResponse(entries=[LeaderboardRow.model_validate(r) for r in top_actors(db, limit)])
