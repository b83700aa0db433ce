# /markhub-backend/app/services/profile_service.py

"""
Profiles for authenticated callers.

The credential provider only vouches for an identity. The role lives in our
own `profiles` table: it starts out unset and can be chosen exactly once.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..core.errors import Forbidden, PersistenceFailure, ValidationFailed, operation
from ..models.submission_model import ACCA_PAPERS, SubmissionResponse, SubmissionStatus
from ..models.user_model import (
    CompleteProfileRequest,
    MarkerProfileResponse,
    Profile,
    Role,
    StudentProfileResponse,
)
from .dashboard_service import RECENT_LIMIT, _as_frame, rounded_average
from .database_service import DatabaseService

logger = logging.getLogger(__name__)

DEFAULT_PAPERS_PASSED = ["PM", "FM", "AA"]
HELPFUL_FEEDBACK_MIN_CHARS = 50


def get_or_create_profile(user_id: str, email: Optional[str], db: DatabaseService) -> Profile:
    """Returns the caller's profile, creating a role-less one on first sight."""
    existing = db.get_profile(user_id)
    if existing is None:
        try:
            existing = db.add_profile({"id": user_id, "email": email})
        except SQLAlchemyError:
            # A concurrent first request may have inserted it already.
            existing = db.get_profile(user_id)
            if existing is None:
                raise
    return Profile.model_validate(existing)


@operation
def complete_profile(user_id: str, request: CompleteProfileRequest, db: DatabaseService) -> Profile:
    """Sets the caller's role. A role that is already set is never changed."""
    data: Dict = {"role": request.role.value}
    if request.full_name:
        data["full_name"] = request.full_name.strip()
    if request.papers_passed is not None:
        unknown = [p for p in request.papers_passed if p not in ACCA_PAPERS]
        if unknown:
            raise ValidationFailed(f"Unknown paper codes: {', '.join(unknown)}")
        data["papers_passed"] = list(request.papers_passed)

    try:
        changed = db.set_role_once(user_id, data)
    except SQLAlchemyError as e:
        raise PersistenceFailure("Failed to save profile. Please try again.") from e
    if changed == 0:
        raise Forbidden("Your role has already been set and cannot be changed.")

    logger.info("User %s completed profile as %s", user_id, request.role.value)
    return Profile.model_validate(db.get_profile(user_id))


def _responses(submissions) -> List[SubmissionResponse]:
    return [SubmissionResponse.model_validate(s.model_dump()) for s in submissions]


def _helpful_count(reviews) -> int:
    return sum(1 for r in reviews if r.marker_notes and len(r.marker_notes) > HELPFUL_FEEDBACK_MIN_CHARS)


def get_student_profile(profile: Profile, db: DatabaseService) -> StudentProfileResponse:
    submissions = db.get_submissions_by_owner(profile.id)
    df = _as_frame(submissions)
    reviewed = df[df["status"] == SubmissionStatus.REVIEWED.value] if not df.empty else df

    return StudentProfileResponse(
        id=profile.id,
        email=profile.email or "",
        fullName=profile.full_name or "Student",
        createdAt=profile.created_at,
        totalSubmissions=len(submissions),
        reviewedSubmissions=len(reviewed),
        pendingSubmissions=len(submissions) - len(reviewed),
        averageScore=rounded_average(reviewed["score"]) if not reviewed.empty else None,
        recentSubmissions=_responses(submissions[:RECENT_LIMIT]),
    )


def get_marker_profile(profile: Profile, db: DatabaseService) -> MarkerProfileResponse:
    reviews = db.get_submissions_by_marker(profile.id, [SubmissionStatus.REVIEWED], order_by_reviewed=True)
    df = _as_frame(reviews)
    return MarkerProfileResponse(
        id=profile.id,
        email=profile.email or "",
        fullName=profile.full_name or "Marker",
        createdAt=profile.created_at,
        totalReviews=len(reviews),
        averageScoreGiven=rounded_average(df["score"]) if not df.empty else None,
        helpfulFeedbackCount=_helpful_count(reviews),
        recentReviews=_responses(reviews[:RECENT_LIMIT]),
        papersPassed=profile.papers_passed or DEFAULT_PAPERS_PASSED,
    )


def get_marker_public_profile(marker_id: str, db: DatabaseService) -> Optional[MarkerProfileResponse]:
    """
    What students may see of a marker. Email is withheld, and markers with no
    completed reviews have no public profile.
    """
    reviews = db.get_submissions_by_marker(marker_id, [SubmissionStatus.REVIEWED], order_by_reviewed=True)
    if not reviews:
        return None
    stored = db.get_profile(marker_id)
    if stored is not None and stored.role != Role.MARKER.value:
        return None
    df = _as_frame(reviews)
    return MarkerProfileResponse(
        id=marker_id,
        email="",
        fullName=(stored.full_name if stored is not None else None) or "Senior Marker",
        createdAt=stored.created_at if stored is not None else None,
        totalReviews=len(reviews),
        averageScoreGiven=rounded_average(df["score"]),
        helpfulFeedbackCount=_helpful_count(reviews),
        recentReviews=_responses(
            [r.for_community() for r in reviews[:RECENT_LIMIT]]
        ),
        papersPassed=(stored.papers_passed if stored is not None else None) or DEFAULT_PAPERS_PASSED,
    )
