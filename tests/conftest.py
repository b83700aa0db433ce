# /tests/conftest.py

import os

# Keep the module-level engine in memory; tests build their own sessions.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from typing import Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.models.submission_model import UploadedFile
from app.models.user_model import CallerContext, Role
from app.services.database_service import DatabaseService
from app.services.storage_service import BlobStore, BlobStoreError
from app.services.submission_helpers.file_rules import DOCX_MIME, PDF_MIME, XLSX_MIME
from app.services.submission_service import SubmissionService

MIB = 1024 * 1024


class RecordingBlobStore(BlobStore):
    """In-memory blob store that records every call and can be told to fail."""

    def __init__(self):
        self.blobs: Dict[str, bytes] = {}
        self.store_calls: List[str] = []
        self.delete_calls: List[str] = []
        self.fail_store_on_call: Optional[int] = None
        self.fail_deletes = False
        self.fail_sign = False

    def store(self, path, content, content_type=None):
        self.store_calls.append(path)
        if self.fail_store_on_call is not None and len(self.store_calls) == self.fail_store_on_call:
            raise BlobStoreError("simulated upload failure")
        if path in self.blobs:
            raise BlobStoreError("already exists")
        self.blobs[path] = content

    def delete(self, path):
        self.delete_calls.append(path)
        if self.fail_deletes:
            raise BlobStoreError("simulated delete failure")
        self.blobs.pop(path, None)

    def sign(self, path, ttl_seconds):
        if self.fail_sign or path not in self.blobs:
            raise BlobStoreError("cannot sign")
        return f"https://blobs.test/{path}?ttl={ttl_seconds}"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def db_service(db_session):
    return DatabaseService(db_session=db_session)


@pytest.fixture
def blobs():
    return RecordingBlobStore()


@pytest.fixture
def service(db_service, blobs):
    return SubmissionService(db=db_service, blobs=blobs)


@pytest.fixture
def student():
    return CallerContext(user_id="student-1", role=Role.STUDENT, email="student1@example.com")


@pytest.fixture
def other_student():
    return CallerContext(user_id="student-2", role=Role.STUDENT)


@pytest.fixture
def marker_a():
    return CallerContext(user_id="marker-a", role=Role.MARKER)


@pytest.fixture
def marker_b():
    return CallerContext(user_id="marker-b", role=Role.MARKER)


def make_upload(name="answer.docx", content_type=DOCX_MIME, size=2 * MIB) -> UploadedFile:
    return UploadedFile(filename=name, content_type=content_type, content=b"x" * size)


def docx(name="answer.docx", size=2 * MIB) -> UploadedFile:
    return make_upload(name, DOCX_MIME, size)


def xlsx(name="workings.xlsx", size=1024) -> UploadedFile:
    return make_upload(name, XLSX_MIME, size)


def pdf(name="marked.pdf", size=1024) -> UploadedFile:
    return make_upload(name, PDF_MIME, size)


def assert_lifecycle_invariants(record):
    assert (record.status.value == "pending") == (record.marker_id is None)
    assert (record.status.value == "reviewed") == (record.reviewed_at is not None)
    assert record.owner_id != record.marker_id


@pytest.fixture
def pending_submission(service, student):
    result = service.create_submission(student, title="Mock exam Q1", paper="PM", files=[docx()])
    assert result.ok, result.message
    return result.data


@pytest.fixture
def claimed_submission(service, pending_submission, marker_a):
    result = service.claim_submission(marker_a, pending_submission.id)
    assert result.ok, result.message
    return result.data
