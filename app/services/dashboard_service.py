# /markhub-backend/app/services/dashboard_service.py

"""
Listing and statistics for the student and marker dashboards. Every query is
scoped to the caller: students see their own submissions, markers see the
claimable queue and the reviews assigned to them.
"""

import logging
from typing import List, Optional

import pandas as pd

from ..models.submission_model import (
    CommunitySubmission,
    MarkerStats,
    SubmissionRecord,
    SubmissionStats,
    SubmissionStatus,
)
from .database_service import DatabaseService

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5
COMMUNITY_LIMIT = 50
ASSIGNED_STATUSES = (SubmissionStatus.UNDER_REVIEW, SubmissionStatus.REVIEWED)


def _as_frame(submissions: List[SubmissionRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"status": s.status.value, "score": s.score} for s in submissions],
        columns=["status", "score"],
    )


def rounded_average(scores: pd.Series) -> Optional[int]:
    """Mean of the non-null scores, rounded half up; None when there are none."""
    present = scores.dropna()
    if present.empty:
        return None
    return int(present.astype(float).mean() + 0.5)


# --- Student views ---

def get_my_submissions(owner_id: str, db: DatabaseService, limit: Optional[int] = None) -> List[SubmissionRecord]:
    return db.get_submissions_by_owner(owner_id, limit=limit)


def get_recent_submissions(owner_id: str, db: DatabaseService) -> List[SubmissionRecord]:
    return db.get_submissions_by_owner(owner_id, limit=RECENT_LIMIT)


def get_submission_stats(owner_id: str, db: DatabaseService) -> SubmissionStats:
    df = _as_frame(db.get_submissions_by_owner(owner_id))
    if df.empty:
        return SubmissionStats()

    counts = df.groupby("status").size().to_dict()
    reviewed = df[df["status"] == SubmissionStatus.REVIEWED.value]
    return SubmissionStats(
        total=len(df),
        pending=counts.get(SubmissionStatus.PENDING.value, 0),
        underReview=counts.get(SubmissionStatus.UNDER_REVIEW.value, 0),
        reviewed=counts.get(SubmissionStatus.REVIEWED.value, 0),
        averageScore=rounded_average(reviewed["score"]),
    )


# --- Marker views ---

def get_review_queue(marker_id: str, db: DatabaseService) -> List[SubmissionRecord]:
    """Pending submissions nobody has claimed, excluding the marker's own."""
    return db.get_claimable_submissions(marker_id)


def get_assigned_reviews(marker_id: str, db: DatabaseService, limit: Optional[int] = None) -> List[SubmissionRecord]:
    return db.get_submissions_by_marker(marker_id, ASSIGNED_STATUSES, limit=limit)


def get_marker_stats(marker_id: str, db: DatabaseService) -> MarkerStats:
    df = _as_frame(db.get_submissions_by_marker(marker_id, ASSIGNED_STATUSES))
    if df.empty:
        return MarkerStats()
    counts = df.groupby("status").size().to_dict()
    return MarkerStats(
        assignedReviews=counts.get(SubmissionStatus.UNDER_REVIEW.value, 0),
        completedReviews=counts.get(SubmissionStatus.REVIEWED.value, 0),
    )


# --- Community ---

def get_community_submissions(db: DatabaseService) -> List[CommunitySubmission]:
    return [
        CommunitySubmission(
            id=s.id,
            paper=s.paper,
            title=s.title,
            question=s.question,
            status=s.status,
            reviewedAt=s.reviewed_at,
            score=s.score,
        )
        for s in db.get_reviewed_submissions(limit=COMMUNITY_LIMIT)
    ]
