"""
Error types raised by the report store and the submission pipeline.
Each carries a message that is safe to show to the person using the app.
"""

from typing import Optional


class ReportError(Exception):
    default_message = "Something went wrong."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class StorageParseError(ReportError):
    """Persisted data is missing structure or cannot be decoded."""
    default_message = "Stored reports could not be read."


class StorageWriteError(ReportError):
    """The collection could not be persisted."""
    default_message = "Could not save your report. Please try again."


class ReportValidationError(ReportError):
    default_message = "Please fill out all required fields and add a photo."


class ImageReadError(ReportError):
    default_message = "Could not read the attached photo. Please try again."


class SubmissionInProgressError(ReportError):
    default_message = "A report is already being submitted."
