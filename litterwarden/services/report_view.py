"""Filtering, ordering and paging shared by the reporter dashboard and the cleaner worklist.

Everything here is pure: functions take any objects exposing ``is_clean``,
``priority`` and ``reported_at`` (ORM rows, ``ReportOut`` instances, client
records) and never touch the database or the network.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Generic, TypeVar

from litterwarden.models.enums import PRIORITY_RANK, Priority
from litterwarden.models.report import UNKNOWN_LOCATION
from litterwarden.services.geocoding import is_location_sentinel

PAGE_SIZE = 9

T = TypeVar('T')


class ReportView(str, Enum):
    DASHBOARD = 'dashboard'
    WORKLIST = 'worklist'


class DashboardFilter(str, Enum):
    ALL = 'all'
    CLEAN = 'clean'
    HIGH = 'high'
    MEDIUM = 'medium'
    LOW = 'low'


class WorklistFilter(str, Enum):
    ALL_PENDING = 'all_pending'
    CLEAN = 'clean'
    HIGH = 'high'
    MEDIUM = 'medium'
    LOW = 'low'


VIEW_FILTERS: dict[ReportView, type[Enum]] = {
    ReportView.DASHBOARD: DashboardFilter,
    ReportView.WORKLIST: WorklistFilter,
}

DEFAULT_FILTERS = {
    ReportView.DASHBOARD: DashboardFilter.ALL,
    ReportView.WORKLIST: WorklistFilter.ALL_PENDING,
}

PRIORITY_COLOURS = {
    Priority.LOW: '#FFEB3B',
    Priority.MEDIUM: '#FF9800',
    Priority.HIGH: '#F44336',
}
CLEAN_COLOUR = '#4CAF50'
UNRANKED_COLOUR = '#9E9E9E'
CLEAN_LABEL = 'CLEAN'


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    page: int
    page_size: int
    total_items: int
    total_pages: int


def parse_filter(view: ReportView | str, selector: str | Enum | None) -> DashboardFilter | WorklistFilter:
    """Resolve a raw selector for ``view``; raises ``ValueError`` for selectors the view does not offer."""
    view = ReportView(view)
    if selector is None:
        return DEFAULT_FILTERS[view]
    raw = selector.value if isinstance(selector, Enum) else str(selector).strip().lower()
    return VIEW_FILTERS[view](raw)


def priority_of(report: Any) -> Priority | None:
    try:
        return Priority(report.priority)
    except ValueError:
        return None


def matches(report: Any, selector: DashboardFilter | WorklistFilter) -> bool:
    value = selector.value
    if value == 'all':
        return True
    if value == 'all_pending':
        return not report.is_clean
    if value == 'clean':
        return bool(report.is_clean)
    return not report.is_clean and priority_of(report) is Priority(value)


def filter_reports(reports: Iterable[T], selector: DashboardFilter | WorklistFilter) -> list[T]:
    return [report for report in reports if matches(report, selector)]


def _timestamp(value: datetime | None) -> float:
    if value is None:
        return float('-inf')
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def sort_key(report: Any) -> tuple[int, int, float]:
    if report.is_clean:
        return (1, 0, -_timestamp(report.reported_at))
    rank = PRIORITY_RANK.get(priority_of(report), 0)
    return (0, -rank, -_timestamp(report.reported_at))


def sort_reports(reports: Iterable[T]) -> list[T]:
    """Pending before clean, then higher priority, then newest first."""
    return sorted(reports, key=sort_key)


def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(count / page_size) if count else 0


def paginate(items: Sequence[T], page: int, page_size: int = PAGE_SIZE) -> Page[T]:
    if page_size <= 0:
        raise ValueError('page_size must be positive')
    pages = total_pages(len(items), page_size)
    if page < 0:
        window: list[T] = []
    else:
        window = list(items[page * page_size : (page + 1) * page_size])
    return Page(items=window, page=page, page_size=page_size, total_items=len(items), total_pages=pages)


def clamp_page(page: int, pages: int) -> int:
    """Nearest valid page index; callers use this after removals shrink the list."""
    if pages <= 0:
        return 0
    return max(0, min(page, pages - 1))


def filter_counts(reports: Sequence[Any], view: ReportView | str) -> dict[str, int]:
    return {
        selector.value: sum(1 for report in reports if matches(report, selector))
        for selector in VIEW_FILTERS[ReportView(view)]
    }


def project(
    reports: Iterable[T],
    selector: DashboardFilter | WorklistFilter,
    page: int = 0,
    page_size: int = PAGE_SIZE,
) -> Page[T]:
    return paginate(sort_reports(filter_reports(reports, selector)), page, page_size)


def display_colour(report: Any) -> str:
    if report.is_clean:
        return CLEAN_COLOUR
    return PRIORITY_COLOURS.get(priority_of(report), UNRANKED_COLOUR)


def display_label(report: Any) -> str:
    if report.is_clean:
        return CLEAN_LABEL
    priority = priority_of(report)
    return priority.value.upper() if priority else 'N/A'


def display_location(value: str | None) -> str:
    if not value or not value.strip() or is_location_sentinel(value):
        return UNKNOWN_LOCATION
    return value
