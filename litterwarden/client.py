"""HTTP client for the report API, used by the reporter dashboard and cleaner worklist.

Identity is explicit: a ``ClientSession`` carrying the verified email is passed to
every call that acts on behalf of a reporter. ``ReportFeed`` holds the fetched
collection for one screen and pages it through the shared projection in
``litterwarden.services.report_view``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
from loguru import logger

from litterwarden.core.config import settings
from litterwarden.schemas.report import EMAIL_PATTERN, LeaderboardEntry, ReportOut, normalize_email
from litterwarden.services import report_view
from litterwarden.services.report_view import Page, ReportView

FETCH_LIMIT = 1000


@dataclass(frozen=True)
class ClientSession:
    email: str

    def __post_init__(self) -> None:
        email = normalize_email(self.email)
        if not EMAIL_PATTERN.match(email):
            raise ValueError(f'not a valid email: {self.email!r}')
        object.__setattr__(self, 'email', email)


class ApiError(Exception):
    def __init__(self, action: str, status_code: int | None, detail: str) -> None:
        super().__init__(f'{action} failed ({status_code}): {detail}')
        self.action = action
        self.status_code = status_code
        self.detail = detail


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:150]
    if isinstance(body, dict) and body.get('detail'):
        return str(body['detail'])
    return response.text[:150]


class LitterWardenClient:
    def __init__(self, http: httpx.Client, prefix: str = settings.API_V1_PREFIX) -> None:
        self._http = http
        self._prefix = prefix.rstrip('/')

    def _request(self, action: str, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._http.request(method, f'{self._prefix}{path}', **kwargs)
        except httpx.HTTPError as exc:
            raise ApiError(action, None, str(exc)) from exc
        if response.is_error:
            raise ApiError(action, response.status_code, _detail(response))
        return response.json()

    def _report(self, action: str, method: str, path: str, **kwargs: Any) -> ReportOut:
        return ReportOut.model_validate(self._request(action, method, path, **kwargs)['report'])

    def submit_report(
        self,
        session: ClientSession,
        latitude: float,
        longitude: float,
        priority: str,
        town: str | None = None,
        county: str | None = None,
        country: str | None = None,
    ) -> ReportOut:
        payload = {
            'latitude': latitude,
            'longitude': longitude,
            'priority': priority,
            'email': session.email,
            'town': town,
            'county': county,
            'country': country,
        }
        return self._report('submit_report', 'POST', '/report', json=payload)

    def get_report(self, report_id: str) -> ReportOut:
        return self._report('get_report', 'GET', f'/report/{report_id}')

    def upload_evidence(self, report_id: str, content: bytes, filename: str = 'evidence.jpg') -> ReportOut:
        return self._report(
            'upload_evidence',
            'POST',
            '/report/upload',
            data={'reportId': report_id},
            files={'image': (filename, content, 'application/octet-stream')},
        )

    def remove_evidence(self, report_id: str) -> ReportOut:
        return self._report('remove_evidence', 'DELETE', f'/report/image/{report_id}')

    def mark_clean(self, report_id: str) -> ReportOut:
        return self._report('mark_clean', 'PATCH', '/report/clean', json={'reportId': report_id})

    def delete_report(self, report_id: str) -> ReportOut:
        return self._report('delete_report', 'DELETE', f'/report/{report_id}')

    def list_reports(
        self,
        session: ClientSession | None = None,
        include_clean: bool = True,
        page: int = 1,
        limit: int = FETCH_LIMIT,
    ) -> list[ReportOut]:
        params: dict[str, Any] = {
            'includeClean': str(include_clean).lower(),
            'page': page,
            'limit': limit,
        }
        if session is not None:
            params['email'] = session.email
        data = self._request('list_reports', 'GET', '/reports', params=params)
        return [ReportOut.model_validate(item) for item in data]

    def leaderboard(self) -> list[LeaderboardEntry]:
        data = self._request('leaderboard', 'GET', '/leaderboard')
        return [LeaderboardEntry.model_validate(item) for item in data]


class ReportFeed:
    """Reports behind one screen: the reporter's own (dashboard) or everyone's (worklist)."""

    def __init__(
        self,
        client: LitterWardenClient,
        view: ReportView | str,
        session: ClientSession | None = None,
    ) -> None:
        self.view = ReportView(view)
        if self.view is ReportView.DASHBOARD and session is None:
            raise ValueError('the dashboard needs a session')
        self._client = client
        self._session = session
        self.reports: list[ReportOut] = []
        self.selector = report_view.parse_filter(self.view, None)
        self.page = 0
        self.last_error: ApiError | None = None

    def refresh(self) -> bool:
        """Reload from the API. On failure the previously loaded reports stay in place."""
        session = self._session if self.view is ReportView.DASHBOARD else None
        try:
            reports = self._client.list_reports(session, include_clean=True)
        except ApiError as exc:
            self.last_error = exc
            logger.warning('feed.refresh_failed', view=self.view.value, error=str(exc))
            return False
        self.reports = reports
        self.page = 0
        self.last_error = None
        return True

    def select(self, selector: str) -> None:
        self.selector = report_view.parse_filter(self.view, selector)
        self.page = 0

    def filtered(self) -> list[ReportOut]:
        return report_view.sort_reports(report_view.filter_reports(self.reports, self.selector))

    def total_pages(self) -> int:
        return report_view.total_pages(len(self.filtered()))

    def go_to(self, page: int) -> int:
        self.page = report_view.clamp_page(page, self.total_pages())
        return self.page

    def current_page(self) -> Page[ReportOut]:
        self.page = report_view.clamp_page(self.page, self.total_pages())
        return report_view.project(self.reports, self.selector, self.page)

    def counts(self) -> dict[str, int]:
        return report_view.filter_counts(self.reports, self.view)

    def mark_clean(self, report_id: str) -> ReportOut:
        updated = self._client.mark_clean(report_id)
        self.reports = [updated if report.id == report_id else report for report in self.reports]
        self.go_to(self.page)
        return updated

    def delete(self, report_id: str) -> ReportOut:
        removed = self._client.delete_report(report_id)
        self.reports = [report for report in self.reports if report.id != report_id]
        self.go_to(self.page)
        return removed
