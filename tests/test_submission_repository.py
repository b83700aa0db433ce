# /tests/test_submission_repository.py

import datetime

import pytest

from app.db.models.submission_models import Submission
from app.models.submission_model import FileRef, SubmissionStatus
from app.services.database_helpers.submission_repository_sql import (
    SubmissionRepositorySQL,
    record_values_to_columns,
)

NOW = datetime.datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture
def repo(db_session):
    return SubmissionRepositorySQL(db_session)


def _ref(path, name="answer.docx", size=10):
    return FileRef(path=path, displayName=name, size=size, originalName=name)


def _new_record(submission_id="sub_1", owner_id="stu_1", files=None):
    return {
        "id": submission_id,
        "owner_id": owner_id,
        "title": "Mock",
        "paper": "PM",
        "files": files if files is not None else [_ref(f"{owner_id}/{submission_id}/1-answer.docx")],
        "status": SubmissionStatus.PENDING,
        "marker_id": None,
        "created_at": NOW,
        "updated_at": NOW,
    }


def test_legacy_single_file_row_reads_as_one_element_list(repo, db_session):
    """
    GIVEN: a row written before multi-file support, with only the legacy columns
    WHEN:  it is read through the repository
    THEN:  files and marked_files come back as one-element lists
    """
    db_session.add(Submission(
        id="sub_legacy", user_id="stu_1", title="Old", paper="FM",
        file_path="stu_1/old.docx", file_name="old.docx", file_size=1234,
        marked_file_path="marked/mk_1/sub_legacy/Old_marked.pdf", marked_file_name="Old_marked.pdf",
        status="reviewed", score=64, marker_id="mk_1",
        created_at=NOW, updated_at=NOW, reviewed_at=NOW,
    ))
    db_session.commit()

    record = repo.get_submission("sub_legacy")

    assert record.files == [FileRef(path="stu_1/old.docx", displayName="old.docx", size=1234, originalName="old.docx")]
    assert len(record.marked_files) == 1
    assert record.marked_files[0].displayName == "Old_marked.pdf"
    assert record.owner_id == "stu_1"
    assert record.status == SubmissionStatus.REVIEWED
    print("\n✅ SUCCESS: test_legacy_single_file_row_reads_as_one_element_list passed.")


def test_row_without_any_files_reads_as_empty_lists(repo, db_session):
    db_session.add(Submission(id="sub_bare", user_id="stu_1", title="T", paper="PM", created_at=NOW, updated_at=NOW))
    db_session.commit()

    record = repo.get_submission("sub_bare")

    assert record.files == []
    assert record.marked_files == []
    assert record.status == SubmissionStatus.PENDING


def test_new_rows_mirror_first_file_into_legacy_columns(repo, db_session):
    files = [_ref("stu_1/sub_1/1-a.docx", "a.docx", 11), _ref("stu_1/sub_1/2-b.xlsx", "b.xlsx", 22)]

    repo.add_submission(_new_record(files=files))

    row = db_session.get(Submission, "sub_1")
    assert len(row.files) == 2
    assert row.file_path == "stu_1/sub_1/1-a.docx"
    assert row.file_name == "a.docx"
    assert row.file_size == 11
    assert row.marked_file_path is None


def test_record_values_to_columns_maps_canonical_names():
    columns = record_values_to_columns({
        "owner_id": "stu_1",
        "status": SubmissionStatus.UNDER_REVIEW,
        "marked_files": [{"path": "m/1.pdf", "displayName": "T_marked.pdf", "size": 5, "originalName": "x.pdf"}],
    })

    assert columns["user_id"] == "stu_1"
    assert "owner_id" not in columns
    assert columns["status"] == "under_review"
    assert columns["marked_file_path"] == "m/1.pdf"
    assert columns["marked_file_name"] == "T_marked.pdf"


def test_claim_is_conditional_on_pending_state(repo):
    repo.add_submission(_new_record())

    assert repo.claim_submission("sub_1", "mk_1", NOW) == 1
    assert repo.claim_submission("sub_1", "mk_2", NOW) == 0

    record = repo.get_submission("sub_1")
    assert record.marker_id == "mk_1"
    assert record.status == SubmissionStatus.UNDER_REVIEW


def test_claim_refuses_the_owner(repo):
    repo.add_submission(_new_record(owner_id="same"))

    assert repo.claim_submission("sub_1", "same", NOW) == 0
    assert repo.get_submission("sub_1").status == SubmissionStatus.PENDING


def test_update_review_only_applies_to_assigned_marker_while_under_review(repo):
    repo.add_submission(_new_record())
    repo.claim_submission("sub_1", "mk_1", NOW)

    assert repo.update_review("sub_1", "mk_2", {"marker_notes": "x"}) == 0
    assert repo.update_review("sub_1", "mk_1", {"status": SubmissionStatus.REVIEWED, "reviewed_at": NOW, "score": 70}) == 1
    assert repo.update_review("sub_1", "mk_1", {"marker_notes": "late edit"}) == 0

    record = repo.get_submission("sub_1")
    assert record.score == 70
    assert record.marker_notes is None


def test_scoped_reads(repo):
    repo.add_submission(_new_record("sub_1", "stu_1"))
    repo.add_submission(_new_record("sub_2", "stu_2"))
    repo.claim_submission("sub_1", "mk_1", NOW)

    assert repo.get_submission_for_owner("sub_1", "stu_1") is not None
    assert repo.get_submission_for_owner("sub_1", "stu_2") is None
    assert repo.get_submission_for_marker("sub_1", "mk_1") is not None
    assert repo.get_submission_for_marker("sub_2", "mk_1") is None
    assert repo.get_reviewed_submission("sub_1") is None
    assert [s.id for s in repo.get_claimable_submissions("mk_1")] == ["sub_2"]
    assert repo.get_claimable_submissions("stu_2") == []
