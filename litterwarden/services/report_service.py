from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from litterwarden.core.config import settings
from litterwarden.models.report import ANALYSIS_PENDING, CLEANED, Report
from litterwarden.schemas.report import ReportCreate, ReportOut, normalize_email
from litterwarden.services.errors import (
    InvalidArgument,
    NoEvidenceError,
    NotFoundError,
    PayloadTooLargeError,
    StorageError,
)
from litterwarden.services.evidence_store import get_evidence_store
from litterwarden.services.geocoding import LOCATION_FIELDS, is_location_sentinel, reverse_geocode
from litterwarden.services.image_analysis import analyze_image


def to_report_out(record: Report) -> ReportOut:
    return ReportOut(
        id=record.id,
        latitude=record.latitude,
        longitude=record.longitude,
        town=record.town,
        county=record.county,
        country=record.country,
        priority=record.priority,
        email=record.email,
        reported_at=record.reported_at,
        updated_at=record.updated_at,
        image_url=record.image_url,
        recognized_category=record.recognized_category,
        is_clean=record.is_clean,
    )


def _save(session: Session, record: Report, event: str) -> Report:
    try:
        session.add(record)
        session.commit()
        session.refresh(record)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.opt(exception=exc).error('report.storage_error', event=event)
        raise StorageError() from exc
    return record


def _needs_lookup(value: Optional[str]) -> bool:
    return not value or is_location_sentinel(value)


def resolve_location(payload: ReportCreate) -> dict[str, str]:
    """Client-supplied place names, with missing or failed ones filled by a server-side lookup."""
    fields = {name: getattr(payload, name) for name in LOCATION_FIELDS}
    if not any(_needs_lookup(value) for value in fields.values()):
        return fields
    logger.info('report.geocoding', latitude=payload.latitude, longitude=payload.longitude)
    resolved = reverse_geocode(payload.latitude, payload.longitude).as_fields()
    return {name: resolved[name] if _needs_lookup(value) else value for name, value in fields.items()}


def create_report(session: Session, payload: ReportCreate) -> Report:
    location = resolve_location(payload)
    record = Report(
        latitude=payload.latitude,
        longitude=payload.longitude,
        priority=payload.priority,
        email=payload.email,
        **location,
    )
    record = _save(session, record, 'create')
    logger.info('report.created', report_id=record.id, priority=record.priority.value)
    return record


def get_report(session: Session, report_id: str) -> Optional[Report]:
    return session.exec(select(Report).where(Report.id == report_id)).first()


def require_report(session: Session, report_id: str) -> Report:
    record = get_report(session, report_id)
    if not record:
        raise NotFoundError()
    return record


def _validate_paging(page, limit) -> tuple[int, int]:
    for name, value in (('page', page), ('limit', limit)):
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise InvalidArgument(f'{name} must be a positive integer')
    return page, min(limit, settings.QUERY_MAX_LIMIT)


def _filtered_statement(email: Optional[str], include_clean: bool):
    statement = select(Report)
    if email:
        statement = statement.where(Report.email == normalize_email(email))
    if not include_clean:
        statement = statement.where(Report.is_clean.is_(False))
    return statement.order_by(Report.reported_at.desc(), Report.id)


def list_reports(
    session: Session,
    email: Optional[str] = None,
    include_clean: bool = False,
    page: int = 1,
    limit: int = 50,
) -> list[Report]:
    page, limit = _validate_paging(page, limit)
    statement = _filtered_statement(email, include_clean).offset((page - 1) * limit).limit(limit)
    return list(session.exec(statement).all())


def list_all_reports(
    session: Session,
    email: Optional[str] = None,
    limit: Optional[int] = None,
) -> list[Report]:
    statement = _filtered_statement(email, include_clean=True)
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())


def attach_evidence(session: Session, report_id: str, data: bytes, filename: Optional[str]) -> Report:
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise PayloadTooLargeError()
    store = get_evidence_store()
    try:
        stored = store.save(data, filename)
    except OSError as exc:
        logger.opt(exception=exc).error('evidence.store_failed', report_id=report_id)
        raise StorageError('Server error while storing image.') from exc

    # Any failure from here on leaves the stored file unreferenced.
    try:
        record = require_report(session, report_id)
        previous = record.image_url
        analysis = analyze_image(stored.url)
        record.image_url = stored.url
        record.recognized_category = analysis.label
        record = _save(session, record, 'attach_evidence')
    except Exception:
        store.delete_url(stored.url)
        raise
    if previous and previous != stored.url:
        store.delete_url(previous)
    logger.info('report.evidence_attached', report_id=record.id, category=record.recognized_category)
    return record


def replace_evidence_url(session: Session, report_id: str, image_url: str) -> Report:
    record = require_report(session, report_id)
    previous = record.image_url
    record.image_url = image_url
    record.recognized_category = analyze_image(image_url).label
    record = _save(session, record, 'replace_evidence')
    if previous and previous != image_url:
        get_evidence_store().delete_url(previous)
    logger.info('report.evidence_replaced', report_id=record.id, category=record.recognized_category)
    return record


def remove_evidence(session: Session, report_id: str) -> Report:
    record = require_report(session, report_id)
    previous = record.image_url
    if not previous:
        raise NoEvidenceError()
    record.image_url = None
    record.recognized_category = ANALYSIS_PENDING
    record = _save(session, record, 'remove_evidence')
    get_evidence_store().delete_url(previous)
    logger.info('report.evidence_removed', report_id=record.id)
    return record


def mark_clean(session: Session, report_id: str) -> Report:
    record = require_report(session, report_id)
    previous = record.image_url
    record.is_clean = True
    record.image_url = None
    record.recognized_category = CLEANED
    record = _save(session, record, 'mark_clean')
    if previous:
        get_evidence_store().delete_url(previous)
    logger.info('report.cleaned', report_id=record.id)
    return record


def delete_report(session: Session, report_id: str) -> ReportOut:
    record = require_report(session, report_id)
    snapshot = to_report_out(record)
    try:
        session.delete(record)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.opt(exception=exc).error('report.storage_error', event='delete')
        raise StorageError('Server error while deleting report.') from exc
    if snapshot.image_url:
        get_evidence_store().delete_url(snapshot.image_url)
    logger.info('report.deleted', report_id=report_id)
    return snapshot
