from loguru import logger
from sqlalchemy import case, desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from litterwarden.core.config import settings
from litterwarden.models.enums import Priority
from litterwarden.models.report import Report
from litterwarden.schemas.report import LeaderboardEntry
from litterwarden.services.errors import StorageError


def _count_priority(priority: Priority):
    return func.sum(case((Report.priority == priority, 1), else_=0))


def build_leaderboard(session: Session, limit: int | None = None) -> list[LeaderboardEntry]:
    """Per-reporter counts over reports that are still pending, busiest reporters first."""
    total = func.count(Report.id).label('total_reports')
    statement = (
        select(
            Report.email,
            total,
            _count_priority(Priority.HIGH).label('high_priority'),
            _count_priority(Priority.MEDIUM).label('medium_priority'),
            _count_priority(Priority.LOW).label('low_priority'),
        )
        .where(Report.is_clean.is_(False))
        .group_by(Report.email)
        .order_by(desc('total_reports'), Report.email)
        .limit(limit or settings.LEADERBOARD_LIMIT)
    )
    try:
        rows = session.exec(statement).all()
    except SQLAlchemyError as exc:
        logger.opt(exception=exc).error('leaderboard.query_failed')
        raise StorageError('Server error generating leaderboard.') from exc
    return [
        LeaderboardEntry(
            email=email,
            total_reports=int(total_reports or 0),
            high_priority=int(high or 0),
            medium_priority=int(medium or 0),
            low_priority=int(low or 0),
        )
        for email, total_reports, high, medium, low in rows
    ]
