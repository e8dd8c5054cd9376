import re
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from litterwarden.models.enums import Priority

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def normalize_email(value: str) -> str:
    return value.strip().lower()


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReportCreate(CamelModel):
    latitude: float = Field(..., ge=-90, le=90, strict=True, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, strict=True, allow_inf_nan=False)
    priority: Priority
    email: str
    town: Optional[str] = None
    county: Optional[str] = None
    country: Optional[str] = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        value = normalize_email(value)
        if not EMAIL_PATTERN.match(value):
            raise ValueError('email is not a valid address')
        return value

    @field_validator('town', 'county', 'country')
    @classmethod
    def strip_location(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class ReportClean(CamelModel):
    report_id: str = Field(..., min_length=1)


class EvidenceUrlUpdate(CamelModel):
    image_url: str

    @field_validator('image_url')
    @classmethod
    def require_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError('imageUrl must not be blank')
        return value


class ReportOut(CamelModel):
    id: str
    latitude: float
    longitude: float
    town: str
    county: str
    country: str
    priority: Priority
    email: str
    reported_at: datetime
    updated_at: datetime
    image_url: Optional[str] = None
    recognized_category: str
    is_clean: bool

    @field_validator('reported_at', 'updated_at')
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class ReportEnvelope(BaseModel):
    message: str
    report: ReportOut


class LeaderboardEntry(CamelModel):
    email: str
    total_reports: int
    high_priority: int
    medium_priority: int
    low_priority: int


class ReportPage(CamelModel):
    items: list[ReportOut]
    page: int
    page_size: int
    total_items: int
    total_pages: int
    counts: dict[str, int]
