# /markhub-backend/app/routers/marker_router.py

"""
Endpoints for markers: browsing the queue of claimable submissions, claiming
one, and saving draft or final reviews. Every endpoint requires the `marker`
role.
"""

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from typing import List, Optional

from ..core.config import settings
from ..core.deps import require_marker, unwrap
from ..models.submission_model import (
    ClaimResponse,
    DownloadLinkResponse,
    MarkerStats,
    SubmissionListResponse,
    SubmissionResponse,
)
from ..models.user_model import CallerContext
from ..services import dashboard_service
from ..services.database_service import DatabaseService, get_db_service
from ..services.submission_helpers.file_rules import read_uploads
from ..services.submission_service import ReadScope, SubmissionService, get_submission_service

router = APIRouter()


def _to_response(record) -> SubmissionResponse:
    return SubmissionResponse.model_validate(record.model_dump())


def _parse_score(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise HTTPException(
            status_code=422,
            detail={"error": "validation_failed", "message": "Score must be between 0 and 100."},
        )


@router.get("/queue", response_model=SubmissionListResponse, summary="Submissions Waiting for a Marker")
def get_review_queue(
    db: DatabaseService = Depends(get_db_service),
    caller: CallerContext = Depends(require_marker)
):
    submissions = dashboard_service.get_review_queue(caller.user_id, db)
    return SubmissionListResponse(submissions=[_to_response(s) for s in submissions])


@router.post("/queue/{submission_id}/claim", response_model=ClaimResponse, summary="Claim a Submission for Review")
def claim_submission(
    submission_id: str,
    submission_svc: SubmissionService = Depends(get_submission_service),
    caller: CallerContext = Depends(require_marker)
):
    """
    Assigns a pending submission to the caller. If another marker got there
    first the response is 409 with `no_longer_available`.
    """
    claimed = unwrap(submission_svc.claim_submission(caller, submission_id))
    return ClaimResponse(submission=_to_response(claimed))


@router.get("/reviews", response_model=SubmissionListResponse, summary="My Assigned Reviews")
def get_assigned_reviews(
    db: DatabaseService = Depends(get_db_service),
    caller: CallerContext = Depends(require_marker)
):
    submissions = dashboard_service.get_assigned_reviews(caller.user_id, db)
    return SubmissionListResponse(submissions=[_to_response(s) for s in submissions])


@router.get("/reviews/recent", response_model=SubmissionListResponse, summary="My Five Latest Assigned Reviews")
def get_recent_assigned_reviews(
    db: DatabaseService = Depends(get_db_service),
    caller: CallerContext = Depends(require_marker)
):
    submissions = dashboard_service.get_assigned_reviews(caller.user_id, db, limit=dashboard_service.RECENT_LIMIT)
    return SubmissionListResponse(submissions=[_to_response(s) for s in submissions])


@router.get("/stats", response_model=MarkerStats, summary="Marker Dashboard Statistics")
def get_marker_stats(
    db: DatabaseService = Depends(get_db_service),
    caller: CallerContext = Depends(require_marker)
):
    return dashboard_service.get_marker_stats(caller.user_id, db)


@router.get("/reviews/{submission_id}", response_model=SubmissionResponse, summary="Get an Assigned Submission")
def get_submission_for_review(
    submission_id: str,
    submission_svc: SubmissionService = Depends(get_submission_service),
    caller: CallerContext = Depends(require_marker)
):
    return _to_response(unwrap(submission_svc.get_submission_for_review(caller, submission_id)))


@router.post("/reviews/{submission_id}", response_model=SubmissionResponse, summary="Save or Submit a Review")
def submit_review(
    submission_id: str,
    marker_notes: Optional[str] = Form(None),
    score: Optional[str] = Form(None),
    is_draft: bool = Form(False),
    files: Optional[List[UploadFile]] = File(None, description="Marked .docx, .xlsx or .pdf files."),
    submission_svc: SubmissionService = Depends(get_submission_service),
    caller: CallerContext = Depends(require_marker)
):
    """
    With `is_draft=true` the notes, score and any new files are saved and the
    submission stays under review. Otherwise the review is finalized, which
    requires at least one marked file on record.
    """
    result = submission_svc.submit_review(
        caller,
        submission_id,
        marker_notes=marker_notes,
        files=read_uploads(files),
        score=_parse_score(score),
        is_draft=is_draft,
    )
    return _to_response(unwrap(result))


@router.get(
    "/reviews/{submission_id}/download",
    response_model=DownloadLinkResponse,
    summary="Get a Signed Download Link"
)
def get_download_link(
    submission_id: str,
    path: str = Query(..., description="A file path listed on the submission."),
    submission_svc: SubmissionService = Depends(get_submission_service),
    caller: CallerContext = Depends(require_marker)
):
    url = unwrap(submission_svc.get_download_url(caller, submission_id, path, ReadScope.MARKER))
    return DownloadLinkResponse(url=url, expiresIn=settings.signed_url_ttl_seconds)
