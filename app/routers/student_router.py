# /markhub-backend/app/routers/student_router.py

"""
Endpoints for students: uploading practice answers, listing their own
submissions and retrieving feedback. Every endpoint requires the `student`
role and is scoped to the caller's own submissions.
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from typing import List, Optional

from ..core.deps import require_student, unwrap
from ..models.submission_model import (
    DownloadLinkResponse,
    SubmissionListResponse,
    SubmissionResponse,
    SubmissionStats,
)
from ..models.user_model import CallerContext
from ..core.config import settings
from ..services import dashboard_service
from ..services.database_service import DatabaseService, get_db_service
from ..services.submission_helpers.file_rules import read_uploads
from ..services.submission_service import ReadScope, SubmissionService, get_submission_service

router = APIRouter()


def _to_response(record) -> SubmissionResponse:
    return SubmissionResponse.model_validate(record.model_dump())


@router.post(
    "/submissions",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a New Submission"
)
def create_submission(
    title: str = Form(...),
    paper: str = Form(...),
    question: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
    files: List[UploadFile] = File(..., description="One or more .docx or .xlsx answer files."),
    submission_svc: SubmissionService = Depends(get_submission_service),
    caller: CallerContext = Depends(require_student)
):
    """Validates the whole batch, stores the files and creates a pending submission."""
    result = submission_svc.create_submission(
        caller,
        title=title,
        paper=paper,
        files=read_uploads(files),
        question=question,
        notes=notes,
    )
    return _to_response(unwrap(result))


@router.get("/submissions", response_model=SubmissionListResponse, summary="List My Submissions")
def list_my_submissions(
    db: DatabaseService = Depends(get_db_service),
    caller: CallerContext = Depends(require_student)
):
    submissions = dashboard_service.get_my_submissions(caller.user_id, db)
    return SubmissionListResponse(submissions=[_to_response(s) for s in submissions])


@router.get("/submissions/recent", response_model=SubmissionListResponse, summary="My Five Latest Submissions")
def list_recent_submissions(
    db: DatabaseService = Depends(get_db_service),
    caller: CallerContext = Depends(require_student)
):
    submissions = dashboard_service.get_recent_submissions(caller.user_id, db)
    return SubmissionListResponse(submissions=[_to_response(s) for s in submissions])


@router.get("/stats", response_model=SubmissionStats, summary="Dashboard Statistics")
def get_my_stats(
    db: DatabaseService = Depends(get_db_service),
    caller: CallerContext = Depends(require_student)
):
    return dashboard_service.get_submission_stats(caller.user_id, db)


@router.get("/submissions/{submission_id}", response_model=SubmissionResponse, summary="Get One of My Submissions")
def get_my_submission(
    submission_id: str,
    submission_svc: SubmissionService = Depends(get_submission_service),
    caller: CallerContext = Depends(require_student)
):
    """Returns 404 for submissions that do not exist or belong to someone else."""
    return _to_response(unwrap(submission_svc.get_own_submission(caller, submission_id)))


@router.get(
    "/submissions/{submission_id}/download",
    response_model=DownloadLinkResponse,
    summary="Get a Signed Download Link"
)
def get_download_link(
    submission_id: str,
    path: str = Query(..., description="A file path listed on the submission."),
    submission_svc: SubmissionService = Depends(get_submission_service),
    caller: CallerContext = Depends(require_student)
):
    url = unwrap(submission_svc.get_download_url(caller, submission_id, path, ReadScope.OWNER))
    return DownloadLinkResponse(url=url, expiresIn=settings.signed_url_ttl_seconds)
