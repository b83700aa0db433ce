# /tests/test_dashboard_and_profiles.py

import pandas as pd
import pytest

from app.core.errors import ErrorKind
from app.models.user_model import CallerContext, CompleteProfileRequest, Role
from app.services import dashboard_service, profile_service

from conftest import docx, pdf

LONG_NOTES = "Clear workings throughout, but the variance analysis needs more commentary on causes."


@pytest.fixture
def reviewed_pair(service, student, marker_a):
    """Two reviewed submissions for `student` (scores 72 and 45) plus one left pending."""
    ids = []
    for title, score, notes in [("First", 72, LONG_NOTES), ("Second", 45, "Short note")]:
        created = service.create_submission(student, title=title, paper="FM", files=[docx(size=100)]).data
        service.claim_submission(marker_a, created.id)
        service.submit_review(marker_a, created.id, notes, files=[pdf()], score=score)
        ids.append(created.id)
    service.create_submission(student, title="Third", paper="PM", files=[docx(size=100)])
    return ids


# --- Dashboard ---

def test_rounded_average_rounds_half_up():
    assert dashboard_service.rounded_average(pd.Series([72, 45])) == 59
    assert dashboard_service.rounded_average(pd.Series([70, 71])) == 71
    assert dashboard_service.rounded_average(pd.Series([None, None])) is None


def test_student_stats(reviewed_pair, student, db_service):
    stats = dashboard_service.get_submission_stats(student.user_id, db_service)

    assert stats.total == 3
    assert stats.pending == 1
    assert stats.underReview == 0
    assert stats.reviewed == 2
    assert stats.averageScore == 59
    print("\n✅ SUCCESS: test_student_stats passed.")


def test_stats_for_student_without_submissions(db_service):
    stats = dashboard_service.get_submission_stats("nobody", db_service)
    assert stats.total == 0
    assert stats.averageScore is None


def test_listings_are_scoped_to_caller(reviewed_pair, student, other_student, db_service):
    assert len(dashboard_service.get_my_submissions(student.user_id, db_service)) == 3
    assert dashboard_service.get_my_submissions(other_student.user_id, db_service) == []


def test_recent_submissions_are_capped_at_five(service, student, db_service):
    for i in range(7):
        service.create_submission(student, title=f"Attempt {i}", paper="PM", files=[docx(size=10)])

    recent = dashboard_service.get_recent_submissions(student.user_id, db_service)

    assert len(recent) == 5


def test_queue_excludes_claimed_and_own(service, pending_submission, marker_a, db_service):
    own = CallerContext(user_id=marker_a.user_id, role=Role.STUDENT)
    service.create_submission(own, title="Mine", paper="PM", files=[docx(size=10)])

    queue = dashboard_service.get_review_queue(marker_a.user_id, db_service)
    assert [s.id for s in queue] == [pending_submission.id]

    service.claim_submission(marker_a, pending_submission.id)
    assert dashboard_service.get_review_queue("marker-z", db_service)[0].title == "Mine"
    assert dashboard_service.get_review_queue(marker_a.user_id, db_service) == []


def test_marker_stats_and_assigned(service, reviewed_pair, marker_a, db_service, student):
    extra = service.create_submission(student, title="Fourth", paper="AA", files=[docx(size=10)]).data
    service.claim_submission(marker_a, extra.id)

    stats = dashboard_service.get_marker_stats(marker_a.user_id, db_service)
    assigned = dashboard_service.get_assigned_reviews(marker_a.user_id, db_service)

    assert stats.assignedReviews == 1
    assert stats.completedReviews == 2
    assert len(assigned) == 3


def test_community_list_only_shows_reviewed(reviewed_pair, db_service):
    rows = dashboard_service.get_community_submissions(db_service)

    assert sorted(r.id for r in rows) == sorted(reviewed_pair)
    assert all(r.reviewedAt is not None for r in rows)
    assert not hasattr(rows[0], "owner_id")


# --- Profiles ---

def test_first_sight_creates_roleless_profile(db_service):
    profile = profile_service.get_or_create_profile("new-user", "new@example.com", db_service)

    assert profile.role is None
    assert profile.email == "new@example.com"
    assert profile_service.get_or_create_profile("new-user", None, db_service).id == "new-user"


def test_role_can_only_be_set_once(db_service):
    profile_service.get_or_create_profile("u1", None, db_service)

    first = profile_service.complete_profile("u1", CompleteProfileRequest(role=Role.MARKER, full_name="Ana"), db_service)
    second = profile_service.complete_profile("u1", CompleteProfileRequest(role=Role.STUDENT), db_service)

    assert first.ok
    assert first.data.role == Role.MARKER
    assert second.error_kind == ErrorKind.FORBIDDEN
    assert profile_service.get_or_create_profile("u1", None, db_service).role == Role.MARKER


def test_complete_profile_rejects_unknown_papers(db_service):
    profile_service.get_or_create_profile("u2", None, db_service)

    result = profile_service.complete_profile(
        "u2", CompleteProfileRequest(role=Role.MARKER, papers_passed=["PM", "ZZ"]), db_service
    )

    assert result.error_kind == ErrorKind.VALIDATION_FAILED
    assert "ZZ" in result.message


def test_student_profile(reviewed_pair, student, db_service):
    profile = profile_service.get_or_create_profile(student.user_id, student.email, db_service)

    response = profile_service.get_student_profile(profile, db_service)

    assert response.totalSubmissions == 3
    assert response.reviewedSubmissions == 2
    assert response.pendingSubmissions == 1
    assert response.averageScore == 59
    assert response.fullName == "Student"
    assert len(response.recentSubmissions) == 3


def test_marker_profile_counts_helpful_feedback(reviewed_pair, marker_a, db_service):
    profile = profile_service.get_or_create_profile(marker_a.user_id, None, db_service)

    response = profile_service.get_marker_profile(profile, db_service)

    assert response.totalReviews == 2
    assert response.averageScoreGiven == 59
    assert response.helpfulFeedbackCount == 1
    assert response.papersPassed == ["PM", "FM", "AA"]
    assert {r.passed for r in response.recentReviews} == {True, False}


def test_public_marker_profile_hides_email_and_owner(reviewed_pair, marker_a, db_service):
    profile_service.get_or_create_profile(marker_a.user_id, "marker@example.com", db_service)
    profile_service.complete_profile(
        marker_a.user_id, CompleteProfileRequest(role=Role.MARKER, papers_passed=["SBR"]), db_service
    )

    public = profile_service.get_marker_public_profile(marker_a.user_id, db_service)

    assert public.email == ""
    assert public.papersPassed == ["SBR"]
    assert all(r.owner_id == "anonymous" for r in public.recentReviews)


def test_public_marker_profile_lists_no_original_files(reviewed_pair, marker_a, student, db_service):
    public = profile_service.get_marker_public_profile(marker_a.user_id, db_service)

    assert all(r.files == [] for r in public.recentReviews)
    assert all(len(r.marked_files) == 1 for r in public.recentReviews)
    assert student.user_id not in public.model_dump_json()


def test_public_profile_absent_without_reviews(db_service):
    assert profile_service.get_marker_public_profile("marker-idle", db_service) is None
