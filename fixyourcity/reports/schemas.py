"""
Defines the data models and enums for report management.
Field aliases keep the persisted and HTTP JSON keys in camelCase
(imageData, submittedAt) while attributes stay snake_case.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

logger = logging.getLogger(__name__)


class ReportStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"


class StyleToken(str, Enum):
    ALERT = "alert"
    WARN = "warn"
    OK = "ok"


class Report(BaseModel):
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    id: str = Field(frozen=True)
    category: str
    location: str
    description: Optional[str] = ""
    image_data: str = Field(alias="imageData")
    status: ReportStatus = ReportStatus.PENDING
    submitted_at: datetime = Field(alias="submittedAt", frozen=True)

    @field_validator("status", mode="before")
    @classmethod
    def coerce_unknown_status(cls, v):
        if isinstance(v, ReportStatus):
            return v
        try:
            return ReportStatus(v)
        except ValueError:
            logger.warning("Unrecognised report status %r, treating as Pending", v)
            return ReportStatus.PENDING

    @field_validator("submitted_at")
    @classmethod
    def normalise_timestamp(cls, v: datetime) -> datetime:
        # Stored timestamps are UTC with millisecond precision.
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        v = v.astimezone(timezone.utc)
        return v.replace(microsecond=v.microsecond // 1000 * 1000)

    @field_serializer("submitted_at")
    def serialise_timestamp(self, v: datetime) -> str:
        return v.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ReportCard(Report):
    """A report plus the display hints a view needs to render it."""
    status_style: StyleToken
    actions: List[ReportStatus] = []
    can_reopen: bool = False


class StatusUpdate(BaseModel):
    status: ReportStatus


class SubmissionResponse(BaseModel):
    message: str
    report: Report
    dismiss_after: float
    refresh_list: bool = True


class ReportSummary(BaseModel):
    total_reports: int
    pending: int
    in_progress: int
    resolved: int
