"""
Municipal authority dashboard: statistics, a filterable complaint list
and status changes on individual reports.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List
from fixyourcity.dashboard import schemas
from fixyourcity.reports import queries
from fixyourcity.reports import schemas as report_schemas
from fixyourcity.reports.store import ReportStore, get_store

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/", response_model=schemas.Dashboard)
def get_dashboard(
    filter: str = Query(queries.ALL_REPORTS, description="All Reports, a status, or a category"),
    store: ReportStore = Depends(get_store),
):
    """Statistics plus the complaint list for the selected filter, newest first."""
    reports = store.load_all()
    title = queries.view_title(filter)
    return {
        "filter": filter,
        "title": title,
        "list_title": f"{title} Reports",
        "stats": queries.count_by_status(reports),
        "reports": [queries.to_card(r) for r in queries.apply_view_filter(reports, filter)],
    }


@router.get("/categories", response_model=List[str])
def get_categories(store: ReportStore = Depends(get_store)):
    return queries.list_categories(store.load_all())


@router.patch("/reports/{report_id}", response_model=report_schemas.ReportCard)
def update_report_status(
    report_id: str,
    update: report_schemas.StatusUpdate,
    store: ReportStore = Depends(get_store),
):
    """Mark a report In Progress or Resolved."""
    report = store.get(report_id)
    if not report:
        raise HTTPException(status_code=404, detail="Report not found.")
    if not queries.is_allowed_transition(report.status, update.status):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot move a report from {report.status.value} to {update.status.value}.",
        )

    store.update_status(report_id, update.status)

    # update_status is silent on unknown ids, so confirm by reading back.
    updated = store.get(report_id)
    if not updated:
        raise HTTPException(status_code=404, detail="Report not found.")
    return queries.to_card(updated)
