"""
Submission pipeline for new reports.

A single attempt moves through
    IDLE -> VALIDATING -> READING_IMAGE -> PERSISTING -> SUCCEEDED | FAILED
Reading the photo is the only await point. While an attempt is in flight the
pipeline is busy and refuses another submit; SUCCEEDED and FAILED both accept
a fresh attempt. On failure the draft is kept so the form can be resent as is.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional

from fixyourcity.config import settings
from fixyourcity.reports.exceptions import (
    ImageReadError,
    ReportError,
    ReportValidationError,
    StorageWriteError,
    SubmissionInProgressError,
)
from fixyourcity.reports.schemas import Report, ReportStatus
from fixyourcity.reports.store import ReportStore
from fixyourcity.reports.utils import generate_report_id, read_image_as_data_uri

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Report submitted successfully!"


class SubmissionState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    READING_IMAGE = "reading_image"
    PERSISTING = "persisting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_BUSY_STATES = {
    SubmissionState.VALIDATING,
    SubmissionState.READING_IMAGE,
    SubmissionState.PERSISTING,
}


@dataclass
class ReportDraft:
    """Form fields captured at submit time. `photo` needs an async read()."""
    category: str = ""
    location: str = ""
    description: str = ""
    photo: Optional[Any] = None

    def has_photo(self) -> bool:
        if self.photo is None:
            return False
        # Browsers send an empty, nameless part when no file was picked.
        return bool(getattr(self.photo, "filename", True))


@dataclass
class SubmissionOutcome:
    state: SubmissionState
    message: str
    report: Optional[Report] = None
    error: Optional[ReportError] = None
    dismiss_after: Optional[float] = None
    refresh_list: bool = False

    @property
    def succeeded(self) -> bool:
        return self.state == SubmissionState.SUCCEEDED


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SubmissionPipeline:
    store: ReportStore
    id_factory: Callable[[], str] = generate_report_id
    clock: Callable[[], datetime] = _utcnow
    dismiss_after: float = field(default_factory=lambda: settings.success_dismiss_delay)
    state: SubmissionState = SubmissionState.IDLE
    message: Optional[str] = None
    draft: ReportDraft = field(default_factory=ReportDraft)

    @property
    def busy(self) -> bool:
        return self.state in _BUSY_STATES

    async def submit(self, draft: ReportDraft) -> SubmissionOutcome:
        if self.busy:
            raise SubmissionInProgressError()

        self.draft = draft
        self.message = None
        try:
            self.state = SubmissionState.VALIDATING
            self._validate(draft)

            self.state = SubmissionState.READING_IMAGE
            image_data = await read_image_as_data_uri(draft.photo)

            self.state = SubmissionState.PERSISTING
            report = Report(
                id=self.id_factory(),
                category=draft.category.strip(),
                location=draft.location.strip(),
                description=draft.description or "",
                image_data=image_data,
                status=ReportStatus.PENDING,
                submitted_at=self.clock(),
            )
            self.store.append(report)
        except (ReportValidationError, ImageReadError, StorageWriteError) as e:
            return self._fail(e)
        except Exception:
            # Leave the busy states so the same pipeline accepts another attempt.
            logger.exception("Report submission crashed while %s", self.state.value)
            self.state = SubmissionState.FAILED
            self.message = ReportError.default_message
            raise

        self.state = SubmissionState.SUCCEEDED
        self.message = SUCCESS_MESSAGE
        self.draft = ReportDraft()
        logger.info("Report %s submitted (%s at %s)", report.id, report.category, report.location)
        return SubmissionOutcome(
            state=self.state,
            message=self.message,
            report=report,
            dismiss_after=self.dismiss_after,
            refresh_list=True,
        )

    @staticmethod
    def _validate(draft: ReportDraft) -> None:
        if not (draft.category or "").strip() or not (draft.location or "").strip() or not draft.has_photo():
            raise ReportValidationError()

    def _fail(self, error: ReportError) -> SubmissionOutcome:
        logger.info("Report submission failed while %s: %s", self.state.value, error.message)
        self.state = SubmissionState.FAILED
        self.message = error.message
        return SubmissionOutcome(state=self.state, message=self.message, error=error)
