# /markhub-backend/app/routers/community_router.py

"""
Read-only, anonymised access to finished reviews for any signed-in user,
whatever their role. Only `reviewed` submissions are visible here and the
owner is always reported as `anonymous`.
"""

from fastapi import APIRouter, Depends, Query
from typing import List

from ..core.config import settings
from ..core.deps import get_current_caller, unwrap
from ..models.submission_model import CommunitySubmission, DownloadLinkResponse, SubmissionResponse
from ..models.user_model import CallerContext
from ..services import dashboard_service
from ..services.database_service import DatabaseService, get_db_service
from ..services.submission_service import ReadScope, SubmissionService, get_submission_service

router = APIRouter()


@router.get("", response_model=List[CommunitySubmission], summary="Latest Reviewed Submissions")
def list_community_submissions(
    db: DatabaseService = Depends(get_db_service),
    caller: CallerContext = Depends(get_current_caller)
):
    return dashboard_service.get_community_submissions(db)


@router.get("/{submission_id}", response_model=SubmissionResponse, summary="View a Reviewed Submission")
def get_community_submission(
    submission_id: str,
    submission_svc: SubmissionService = Depends(get_submission_service),
    caller: CallerContext = Depends(get_current_caller)
):
    record = unwrap(submission_svc.get_community_submission(caller, submission_id))
    return SubmissionResponse.model_validate(record.model_dump())


@router.get("/{submission_id}/download", response_model=DownloadLinkResponse, summary="Get a Signed Download Link")
def get_community_download_link(
    submission_id: str,
    path: str = Query(...),
    submission_svc: SubmissionService = Depends(get_submission_service),
    caller: CallerContext = Depends(get_current_caller)
):
    url = unwrap(submission_svc.get_download_url(caller, submission_id, path, ReadScope.COMMUNITY))
    return DownloadLinkResponse(url=url, expiresIn=settings.signed_url_ttl_seconds)
