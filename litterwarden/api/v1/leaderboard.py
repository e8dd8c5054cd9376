from fastapi import APIRouter, Depends
from sqlmodel import Session

from litterwarden.api.v1.errors import http_error
from litterwarden.db.session import get_session
from litterwarden.schemas.report import LeaderboardEntry
from litterwarden.services.errors import ReportError
from litterwarden.services.leaderboard_service import build_leaderboard

router = APIRouter(tags=['leaderboard'])


@router.get('/leaderboard', response_model=list[LeaderboardEntry])
def leaderboard_endpoint(session: Session = Depends(get_session)) -> list[LeaderboardEntry]:
    try:
        return build_leaderboard(session)
    except ReportError as exc:
        raise http_error(exc) from exc
