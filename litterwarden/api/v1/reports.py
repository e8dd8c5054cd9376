from typing import Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlmodel import Session
from litterwarden.api.v1.errors import http_error
from litterwarden.core.config import settings
from litterwarden.db.session import get_session
from litterwarden.schemas.report import (
    EvidenceUrlUpdate,
    ReportClean,
    ReportCreate,
    ReportEnvelope,
    ReportOut,
    ReportPage,
)
from litterwarden.services import report_service, report_view
from litterwarden.services.errors import ReportError
from litterwarden.services.report_service import to_report_out

router = APIRouter(tags=['reports'])


def _envelope(message: str, report: ReportOut) -> ReportEnvelope:
    return ReportEnvelope(message=message, report=report)


@router.post('/report', response_model=ReportEnvelope, status_code=status.HTTP_201_CREATED)
def create_report_endpoint(
    payload: ReportCreate,
    session: Session = Depends(get_session),
) -> ReportEnvelope:
    try:
        record = report_service.create_report(session, payload)
    except ReportError as exc:
        raise http_error(exc) from exc
    return _envelope('Report saved successfully', to_report_out(record))


@router.get('/report/{report_id}', response_model=ReportEnvelope)
def get_report_endpoint(report_id: str, session: Session = Depends(get_session)) -> ReportEnvelope:
    try:
        record = report_service.require_report(session, report_id)
    except ReportError as exc:
        raise http_error(exc) from exc
    return _envelope('Report found', to_report_out(record))


@router.post('/report/upload', response_model=ReportEnvelope)
def upload_evidence_endpoint(
    report_id: str = Form(..., alias='reportId'),
    image: UploadFile = File(...),
    session: Session = Depends(get_session),
) -> ReportEnvelope:
    if not report_id.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='reportId is required.')
    # One byte past the ceiling is enough to know the upload is too large.
    data = image.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='image is empty.')
    try:
        record = report_service.attach_evidence(session, report_id.strip(), data, image.filename)
    except ReportError as exc:
        raise http_error(exc) from exc
    return _envelope('Image uploaded', to_report_out(record))


@router.patch('/report/image/{report_id}', response_model=ReportEnvelope)
def replace_evidence_endpoint(
    report_id: str,
    payload: EvidenceUrlUpdate,
    session: Session = Depends(get_session),
) -> ReportEnvelope:
    try:
        record = report_service.replace_evidence_url(session, report_id, payload.image_url)
    except ReportError as exc:
        raise http_error(exc) from exc
    return _envelope('Image updated', to_report_out(record))


@router.delete('/report/image/{report_id}', response_model=ReportEnvelope)
def remove_evidence_endpoint(report_id: str, session: Session = Depends(get_session)) -> ReportEnvelope:
    try:
        record = report_service.remove_evidence(session, report_id)
    except ReportError as exc:
        raise http_error(exc) from exc
    return _envelope('Image deleted.', to_report_out(record))


@router.patch('/report/clean', response_model=ReportEnvelope)
def mark_clean_endpoint(payload: ReportClean, session: Session = Depends(get_session)) -> ReportEnvelope:
    try:
        record = report_service.mark_clean(session, payload.report_id)
    except ReportError as exc:
        raise http_error(exc) from exc
    return _envelope('Report marked clean.', to_report_out(record))


@router.delete('/report/{report_id}', response_model=ReportEnvelope)
def delete_report_endpoint(report_id: str, session: Session = Depends(get_session)) -> ReportEnvelope:
    try:
        snapshot = report_service.delete_report(session, report_id)
    except ReportError as exc:
        raise http_error(exc) from exc
    return _envelope('Report deleted.', snapshot)


@router.get('/reports', response_model=list[ReportOut])
def list_reports_endpoint(
    email: Optional[str] = None,
    page: int = 1,
    limit: int = settings.QUERY_DEFAULT_LIMIT,
    include_clean: bool = Query(False, alias='includeClean'),
    session: Session = Depends(get_session),
) -> list[ReportOut]:
    try:
        records = report_service.list_reports(
            session, email=email, include_clean=include_clean, page=page, limit=limit
        )
    except ReportError as exc:
        raise http_error(exc) from exc
    return [to_report_out(record) for record in records]


@router.get('/reports/view', response_model=ReportPage)
def report_view_endpoint(
    view: report_view.ReportView = report_view.ReportView.DASHBOARD,
    selector: Optional[str] = Query(None, alias='filter'),
    page: int = 0,
    email: Optional[str] = None,
    session: Session = Depends(get_session),
) -> ReportPage:
    try:
        parsed = report_view.parse_filter(view, selector)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Unknown filter for {view.value} view: {selector}',
        ) from exc
    if page < 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='page must not be negative')

    records = report_service.list_all_reports(session, email=email, limit=settings.QUERY_MAX_LIMIT)
    reports = [to_report_out(record) for record in records]
    projected = report_view.project(reports, parsed, page)
    return ReportPage(
        items=projected.items,
        page=projected.page,
        page_size=projected.page_size,
        total_items=projected.total_items,
        total_pages=projected.total_pages,
        counts=report_view.filter_counts(reports, view),
    )
