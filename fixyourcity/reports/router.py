"""
Citizen-facing report routes: submit a report, list your reports,
reopen a resolved one and view its photo.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status

from fixyourcity.reports import queries, schemas, utils
from fixyourcity.reports.exceptions import ImageReadError, ReportValidationError
from fixyourcity.reports.store import ReportStore, get_store
from fixyourcity.reports.submission import ReportDraft, SubmissionPipeline

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("/", response_model=schemas.SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_report(
    category: str = Form(""),
    location: str = Form(""),
    description: str = Form(""),
    photo: Optional[UploadFile] = File(None),
    store: ReportStore = Depends(get_store),
):
    """Submit a new report with a photo."""
    pipeline = SubmissionPipeline(store=store)
    draft = ReportDraft(category=category, location=location, description=description, photo=photo)
    # A fresh pipeline per request, so it is never busy here.
    outcome = await pipeline.submit(draft)

    if not outcome.succeeded:
        if isinstance(outcome.error, (ReportValidationError, ImageReadError)):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=outcome.message)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=outcome.message)

    return schemas.SubmissionResponse(
        message=outcome.message,
        report=outcome.report,
        dismiss_after=outcome.dismiss_after,
        refresh_list=outcome.refresh_list,
    )


@router.get("/mine", response_model=List[schemas.ReportCard])
def my_reports(store: ReportStore = Depends(get_store)):
    """All reports in submission order, with reopen hints."""
    return [queries.to_card(r) for r in store.load_all()]


@router.post("/{report_id}/reopen", response_model=schemas.ReportCard)
def reopen_report(report_id: str, store: ReportStore = Depends(get_store)):
    """Move a resolved report back to Pending."""
    report = store.get(report_id)
    if not report:
        raise HTTPException(status_code=404, detail="Report not found.")
    if not queries.can_reopen(report.status):
        raise HTTPException(status_code=409, detail="Only resolved reports can be reopened.")

    store.update_status(report_id, schemas.ReportStatus.PENDING)
    updated = store.get(report_id)
    if not updated:
        raise HTTPException(status_code=404, detail="Report not found.")
    return queries.to_card(updated)


@router.get("/{report_id}/image")
def get_report_image(report_id: str, store: ReportStore = Depends(get_store)):
    """Return the evidence photo attached to a report."""
    report = store.get(report_id)
    if not report:
        raise HTTPException(status_code=404, detail="Report not found.")
    try:
        media_type, content = utils.decode_data_uri(report.image_data)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Stored image is unreadable: {e}")
    return Response(content=content, media_type=media_type)
