from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel
from litterwarden.models.base import IDModel, timestamp_type, utc_now
from litterwarden.models.enums import Priority, enum_column

UNKNOWN_LOCATION = 'Unknown'
ANALYSIS_PENDING = 'Analysis Pending'
CLEANED = 'Cleaned'


class Report(IDModel, SQLModel, table=True):
    __tablename__ = 'reports'

    latitude: float = Field(index=True)
    longitude: float = Field(index=True)
    town: str = UNKNOWN_LOCATION
    county: str = UNKNOWN_LOCATION
    country: str = UNKNOWN_LOCATION
    priority: Priority = Field(sa_column=enum_column(Priority, 'report_priority', index=True))
    email: str = Field(index=True)
    reported_at: datetime = Field(
        default_factory=utc_now,
        index=True,
        sa_type=timestamp_type(),
        sa_column_kwargs={"nullable": False},
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_type=timestamp_type(),
        sa_column_kwargs={"nullable": False, "onupdate": utc_now},
    )
    image_url: Optional[str] = None
    recognized_category: str = ANALYSIS_PENDING
    is_clean: bool = Field(default=False, index=True)
