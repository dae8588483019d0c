"""
Report storage: the whole collection lives in one JSON slot.
Every mutation is a read-modify-write of the full array, last writer wins.
"""

import json
import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError

from fixyourcity.config import settings
from fixyourcity.reports.exceptions import StorageParseError, StorageWriteError
from fixyourcity.reports.schemas import Report, ReportStatus

logger = logging.getLogger(__name__)


def read_records(content: Optional[str]) -> List[Any]:
    """Decode a persisted slot into raw records; raises StorageParseError on bad JSON."""
    if content is None or not content.strip():
        return []
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise StorageParseError(f"Invalid JSON in report slot: {e}") from e
    if not isinstance(data, list):
        raise StorageParseError(f"Expected a JSON array, got {type(data).__name__}")
    return data


def parse_reports(records: Sequence[Any]) -> List[Report]:
    """Validate records one at a time, skipping the ones that do not fit."""
    reports = []
    for index, record in enumerate(records):
        try:
            reports.append(Report.model_validate(record))
        except ValidationError as e:
            logger.warning("Skipping unreadable report record at position %d: %s", index, e)
    return reports


def _record_id(record: Any) -> Optional[str]:
    return record.get("id") if isinstance(record, dict) else None


class ReportStore(ABC):
    """
    Owns the report collection. Other components only see snapshots.

    Records that fail validation are hidden from load_all but stay in the
    slot: append and update_status rewrite the raw records around them.
    """

    @abstractmethod
    def _read(self) -> Optional[str]:
        """Return the raw slot content, or None when nothing is stored."""

    @abstractmethod
    def _write(self, content: str) -> None:
        """Persist the raw slot content in one step."""

    def _load_records(self) -> List[Any]:
        try:
            return read_records(self._read())
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read report slot, using empty collection: %s", e)
        except StorageParseError as e:
            logger.warning("Discarding unreadable report data: %s", e.message)
        return []

    def _save_records(self, records: Sequence[Any]) -> None:
        try:
            self._write(json.dumps(list(records), indent=2))
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to persist %d reports", len(records), exc_info=True)
            raise StorageWriteError() from e

    def load_all(self) -> List[Report]:
        """Return every readable report in insertion order. Never raises."""
        return parse_reports(self._load_records())

    def replace_all(self, reports: Sequence[Report]) -> None:
        try:
            records = [r.model_dump(mode="json", by_alias=True) for r in reports]
        except (TypeError, ValueError) as e:
            logger.error("Failed to serialise %d reports", len(reports), exc_info=True)
            raise StorageWriteError() from e
        self._save_records(records)

    def append(self, report: Report) -> None:
        records = self._load_records()
        records.append(report.model_dump(mode="json", by_alias=True))
        self._save_records(records)

    def update_status(self, report_id: str, new_status: ReportStatus) -> None:
        """Set the status of one report. Unknown ids are ignored."""
        new_status = ReportStatus(new_status)
        records = self._load_records()
        for record in records:
            if _record_id(record) == report_id:
                record["status"] = new_status.value
                self._save_records(records)
                logger.info("Report %s moved to %s", report_id, new_status.value)
                return
        logger.debug("No report %s to update, skipping", report_id)

    def get(self, report_id: str) -> Optional[Report]:
        for report in self.load_all():
            if report.id == report_id:
                return report
        return None


class JsonFileReportStore(ReportStore):
    def __init__(self, path: str):
        self.path = path

    def _read(self) -> Optional[str]:
        if not os.path.exists(self.path):
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            return f.read()

    def _write(self, content: str) -> None:
        """Write to a temp file beside the slot, then move it over (atomic write)."""
        directory = os.path.dirname(self.path) or "."
        os.makedirs(directory, exist_ok=True)
        tmp_fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        os.close(tmp_fd)

        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(content)
            shutil.move(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)


class InMemoryReportStore(ReportStore):
    """Keeps the slot as a string in memory; used in tests."""

    def __init__(self, content: Optional[str] = None):
        self.content = content

    def _read(self) -> Optional[str]:
        return self.content

    def _write(self, content: str) -> None:
        self.content = content


_store: Optional[ReportStore] = None


def get_store() -> ReportStore:
    """FastAPI dependency returning the process-wide file store."""
    global _store
    if _store is None:
        _store = JsonFileReportStore(settings.reports_file)
    return _store
