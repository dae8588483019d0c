"""
test_store.py – Tests for the JSON report store.

Covers:
- Round-trip through the file slot
- Fail-soft loading of absent or corrupted data
- Append and status updates (idempotence, unknown ids)
- Write failures surfacing as StorageWriteError
"""

import json
import logging
import pytest
from datetime import datetime, timezone
from pydantic import ValidationError
from fixyourcity.reports.exceptions import StorageWriteError
from fixyourcity.reports.schemas import Report, ReportStatus
from fixyourcity.reports.store import InMemoryReportStore, JsonFileReportStore


# ────────────────────────────────
# Fixtures
# ────────────────────────────────
@pytest.fixture
def make_report():
    def _make(report_id="report_1", status=ReportStatus.PENDING, category="Pothole",
              submitted_at=datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)):
        return Report(
            id=report_id,
            category=category,
            location="Main St",
            description="Deep hole near the bus stop",
            image_data="data:image/png;base64,iVBORw0KGgo=",
            status=status,
            submitted_at=submitted_at,
        )
    return _make


@pytest.fixture
def file_store(tmp_path):
    return JsonFileReportStore(str(tmp_path / "fixYourCityReports.json"))


def _dumped(reports):
    return [r.model_dump() for r in reports]


# ────────────────────────────────
# Loading and saving
# ────────────────────────────────
def test_round_trip_preserves_content_and_order(file_store, make_report):
    reports = [
        make_report("report_b", ReportStatus.RESOLVED),
        make_report("report_a", ReportStatus.PENDING),
        make_report("report_c", ReportStatus.IN_PROGRESS),
    ]
    file_store.replace_all(reports)
    assert _dumped(file_store.load_all()) == _dumped(reports)


def test_persisted_layout_uses_camelcase_field_names(file_store, make_report):
    file_store.replace_all([make_report(status=ReportStatus.IN_PROGRESS)])
    with open(file_store.path, encoding="utf-8") as f:
        data = json.load(f)

    assert set(data[0]) == {"id", "category", "location", "description", "imageData", "status", "submittedAt"}
    assert data[0]["status"] == "In Progress"
    assert data[0]["submittedAt"] == "2025-03-01T09:30:00.000Z"


def test_loads_browser_style_records():
    raw = json.dumps([{
        "id": "report_1700000000000_abc1234",
        "category": "Streetlight",
        "location": "Park Ave",
        "description": "",
        "imageData": "data:image/jpeg;base64,/9j/4AAQ",
        "status": "Resolved",
        "submittedAt": "2023-11-14T22:13:20.123Z",
    }])
    reports = InMemoryReportStore(raw).load_all()

    assert len(reports) == 1
    assert reports[0].status == ReportStatus.RESOLVED
    assert reports[0].submitted_at == datetime(2023, 11, 14, 22, 13, 20, 123000, tzinfo=timezone.utc)


def test_missing_file_loads_empty(file_store):
    assert file_store.load_all() == []


@pytest.mark.parametrize("content", ["", "   ", "{not json", '{"id": "x"}'])
def test_malformed_data_loads_empty_and_logs(content, caplog):
    store = InMemoryReportStore(content)
    with caplog.at_level(logging.WARNING):
        assert store.load_all() == []
    if content.strip():
        assert "unreadable report data" in caplog.text


def _mixed_slot(make_report):
    """A good report, a record with a null category, one missing imageData, another good report."""
    good_1 = make_report("report_1").model_dump(mode="json", by_alias=True)
    no_category = {**make_report("report_2").model_dump(mode="json", by_alias=True), "category": None}
    no_image = make_report("report_3").model_dump(mode="json", by_alias=True)
    del no_image["imageData"]
    good_4 = make_report("report_4").model_dump(mode="json", by_alias=True)
    return [good_1, no_category, no_image, good_4]


def test_bad_record_is_skipped_not_the_whole_slot(make_report, caplog):
    store = InMemoryReportStore(json.dumps(_mixed_slot(make_report)))
    with caplog.at_level(logging.WARNING):
        reports = store.load_all()

    assert [r.id for r in reports] == ["report_1", "report_4"]
    assert "Skipping unreadable report record" in caplog.text


def test_append_keeps_existing_records_in_mixed_slot(make_report):
    records = _mixed_slot(make_report)
    store = InMemoryReportStore(json.dumps(records))

    store.append(make_report("report_5"))

    stored = json.loads(store.content)
    assert stored[:4] == records
    assert stored[4]["id"] == "report_5"
    assert [r.id for r in store.load_all()] == ["report_1", "report_4", "report_5"]


def test_update_status_keeps_existing_records_in_mixed_slot(file_store, make_report):
    records = _mixed_slot(make_report)
    with open(file_store.path, "w", encoding="utf-8") as f:
        json.dump(records, f)

    file_store.update_status("report_4", ReportStatus.RESOLVED)

    with open(file_store.path, encoding="utf-8") as f:
        stored = json.load(f)
    assert stored[:3] == records[:3]
    assert stored[3]["status"] == "Resolved"
    assert file_store.get("report_4").status == ReportStatus.RESOLVED


def test_unknown_status_is_read_as_pending(make_report):
    record = make_report().model_dump(mode="json", by_alias=True)
    record["status"] = "Escalated"
    reports = InMemoryReportStore(json.dumps([record])).load_all()
    assert reports[0].status == ReportStatus.PENDING


def test_append_keeps_insertion_order(make_report):
    store = InMemoryReportStore()
    store.append(make_report("report_1"))
    store.append(make_report("report_2"))
    assert [r.id for r in store.load_all()] == ["report_1", "report_2"]


def test_write_failure_raises_storage_write_error(make_report, monkeypatch):
    store = InMemoryReportStore()

    def broken_write(content):
        raise OSError("disk full")

    monkeypatch.setattr(store, "_write", broken_write)
    with pytest.raises(StorageWriteError):
        store.append(make_report())


def test_file_write_failure_leaves_previous_content(file_store, make_report, monkeypatch):
    file_store.replace_all([make_report("report_1")])

    def broken_move(src, dst):
        raise OSError("read-only file system")

    monkeypatch.setattr("fixyourcity.reports.store.shutil.move", broken_move)
    with pytest.raises(StorageWriteError):
        file_store.replace_all([make_report("report_2")])

    assert [r.id for r in file_store.load_all()] == ["report_1"]


# ────────────────────────────────
# Status updates
# ────────────────────────────────
def test_update_status_is_idempotent(make_report):
    store = InMemoryReportStore()
    store.replace_all([make_report("report_1"), make_report("report_2")])

    store.update_status("report_1", ReportStatus.RESOLVED)
    once = store.content
    store.update_status("report_1", ReportStatus.RESOLVED)

    assert store.content == once
    assert store.get("report_1").status == ReportStatus.RESOLVED
    assert store.get("report_2").status == ReportStatus.PENDING


def test_update_status_unknown_id_is_noop(make_report):
    store = InMemoryReportStore()
    store.replace_all([make_report("report_1")])
    before = store.content

    store.update_status("nonexistent", ReportStatus.RESOLVED)

    assert store.content == before


def test_update_status_accepts_literal_status(file_store, make_report):
    file_store.replace_all([make_report("report_1")])
    file_store.update_status("report_1", "In Progress")
    assert file_store.get("report_1").status == ReportStatus.IN_PROGRESS


def test_identity_fields_are_immutable(make_report):
    report = make_report()
    with pytest.raises(ValidationError):
        report.submitted_at = datetime.now(timezone.utc)
    with pytest.raises(ValidationError):
        report.id = "report_other"


def test_filter_then_reopen_round_trip(make_report):
    from fixyourcity.reports.queries import filter_by_status

    store = InMemoryReportStore()
    store.replace_all([
        make_report("report_p", ReportStatus.PENDING),
        make_report("report_r", ReportStatus.RESOLVED),
        make_report("report_i", ReportStatus.IN_PROGRESS),
    ])

    resolved = filter_by_status(store.load_all(), ReportStatus.RESOLVED)
    assert [r.id for r in resolved] == ["report_r"]

    store.update_status("report_r", ReportStatus.PENDING)
    pending = filter_by_status(store.load_all(), ReportStatus.PENDING)
    assert [r.id for r in pending] == ["report_p", "report_r"]
