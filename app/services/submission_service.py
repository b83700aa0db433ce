# /markhub-backend/app/services/submission_service.py

"""
This module defines the SubmissionService, which owns the submission
lifecycle: creation by a student, claiming by a marker, draft and final
review writes, and every gated read of a submission or its files.

    pending --claim--> under_review --finalize--> reviewed (terminal)
                       under_review --draft----> under_review

Each public method takes the caller's context explicitly and returns an
`OperationResult`. Lifecycle errors are raised internally and converted at
the method boundary, so routers never see a raw exception from here.

There is no transaction spanning blob storage and the database. Every write
path therefore uploads first and compensates by deleting the blobs it wrote
if a later step fails.
"""

import datetime
import logging
import uuid
from typing import List, Optional, Sequence, Tuple

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError

from ..core.config import settings
from ..core.errors import (
    AlreadyFinalized,
    Forbidden,
    InvalidPath,
    NoLongerAvailable,
    NotFound,
    PersistenceFailure,
    StorageFailure,
    Unauthenticated,
    ValidationFailed,
    operation,
)
from ..models.submission_model import (
    ACCA_PAPERS,
    FileRef,
    SubmissionRecord,
    SubmissionStatus,
    UploadedFile,
)
from ..models.user_model import CallerContext, Role
from .database_service import DatabaseService, get_db_service
from .storage_service import BlobStore, BlobStoreError, get_blob_store
from .submission_helpers import file_rules

logger = logging.getLogger(__name__)


class ReadScope:
    OWNER = "owner"
    MARKER = "marker"
    COMMUNITY = "community"


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _require_role(caller: Optional[CallerContext], role: Role) -> CallerContext:
    if caller is None or not caller.user_id:
        raise Unauthenticated("Not authenticated")
    if caller.role != role:
        raise Forbidden(f"This action is only available to {role.value}s.")
    return caller


def _require_caller(caller: Optional[CallerContext]) -> CallerContext:
    if caller is None or not caller.user_id:
        raise Unauthenticated("Not authenticated")
    return caller


class SubmissionService:
    def __init__(self, db: DatabaseService, blobs: BlobStore):
        self.db = db
        self.blobs = blobs

    # --- Blob helpers ---

    def _upload_batch(self, uploads: Sequence[Tuple[str, UploadedFile]]) -> List[str]:
        """
        Stores every (path, file) pair in order. If one fails, the blobs
        already written by this batch are removed before StorageFailure is raised.
        """
        stored: List[str] = []
        for path, upload in uploads:
            try:
                self.blobs.store(path, upload.content, upload.content_type)
            except BlobStoreError as e:
                logger.error("Upload of %s failed after %d of %d files: %s", path, len(stored), len(uploads), e)
                self._discard(stored)
                raise StorageFailure(f'Failed to upload "{upload.filename}". Please try again.') from e
            stored.append(path)
        return stored

    def _discard(self, paths: Sequence[str]) -> None:
        for path in paths:
            self.blobs.delete_quietly(path)

    # --- Create ---

    @operation
    def create_submission(
        self,
        caller: Optional[CallerContext],
        title: str,
        paper: str,
        files: Sequence[UploadedFile],
        question: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> SubmissionRecord:
        student = _require_role(caller, Role.STUDENT)

        title = (title or "").strip()
        paper = (paper or "").strip()
        if not title or not paper:
            raise ValidationFailed("Missing required fields: title and paper are required.")
        if paper not in ACCA_PAPERS:
            raise ValidationFailed(f'"{paper}" is not a recognised paper code.')
        file_rules.validate_submission_files(files)
        owner_dir = file_rules.blob_path_segment(student.user_id)

        submission_id = f"sub_{uuid.uuid4().hex[:16]}"
        planned = []
        refs = []
        for ordinal, upload in enumerate(files, start=1):
            safe_name = file_rules.safe_file_name(upload.filename)
            path = f"{owner_dir}/{submission_id}/{ordinal}-{safe_name}"
            planned.append((path, upload))
            refs.append(FileRef(path=path, displayName=safe_name, size=upload.size, originalName=upload.filename))

        stored = self._upload_batch(planned)

        now = _now()
        record = {
            "id": submission_id,
            "owner_id": student.user_id,
            "title": title,
            "paper": paper,
            "question": (question or "").strip() or None,
            "notes": (notes or "").strip() or None,
            "files": refs,
            "status": SubmissionStatus.PENDING,
            "marker_id": None,
            "created_at": now,
            "updated_at": now,
        }
        try:
            created = self.db.add_submission(record)
        except SQLAlchemyError as e:
            logger.error("Insert of submission %s failed, removing %d uploaded files: %s", submission_id, len(stored), e)
            self._discard(stored)
            raise PersistenceFailure("Failed to create submission. Please try again.") from e

        logger.info("Student %s created submission %s with %d file(s)", student.user_id, submission_id, len(refs))
        return created

    # --- Claim ---

    @operation
    def claim_submission(self, caller: Optional[CallerContext], submission_id: str) -> SubmissionRecord:
        marker = _require_role(caller, Role.MARKER)

        submission = self.db.get_submission(submission_id)
        if submission is None:
            raise NotFound("Submission not found.")
        if submission.owner_id == marker.user_id:
            raise Forbidden("You cannot review your own submission.")
        if submission.status != SubmissionStatus.PENDING or submission.marker_id is not None:
            raise NoLongerAvailable("Submission is no longer available for review.")

        # The write re-checks the pending state, so exactly one racing claim lands.
        changed = self.db.claim_submission(submission_id, marker.user_id, _now())
        if changed == 0:
            raise NoLongerAvailable("Submission is no longer available for review.")

        logger.info("Marker %s claimed submission %s", marker.user_id, submission_id)
        return self.db.get_submission(submission_id)

    # --- Review ---

    @operation
    def submit_review(
        self,
        caller: Optional[CallerContext],
        submission_id: str,
        marker_notes: Optional[str],
        files: Sequence[UploadedFile] = (),
        score: Optional[int] = None,
        is_draft: bool = False,
    ) -> SubmissionRecord:
        """
        Saves a draft or finalizes a review. New marked files replace the
        stored set wholesale; the previous files are deleted only after the
        new ones and the record update have both succeeded.
        """
        marker = _require_role(caller, Role.MARKER)

        submission = self.db.get_submission(submission_id)
        if submission is None or submission.marker_id != marker.user_id:
            raise Forbidden("You do not have permission to review this submission.")
        if submission.status == SubmissionStatus.REVIEWED:
            raise AlreadyFinalized("This submission has already been reviewed.")

        if score is not None and not (0 <= score <= 100):
            raise ValidationFailed("Score must be between 0 and 100.")

        new_files = [f for f in files if f.size > 0 or f.filename]
        file_rules.validate_marked_files(new_files)
        marker_dir = file_rules.blob_path_segment(marker.user_id)
        if not is_draft and not new_files and not submission.marked_files:
            raise ValidationFailed("Please upload a marked file before submitting the review.")

        stored: List[str] = []
        new_refs: List[FileRef] = []
        if new_files:
            batch = uuid.uuid4().hex[:12]
            names = file_rules.marked_display_names(submission.title, new_files)
            planned = []
            for name, upload in zip(names, new_files):
                path = f"marked/{marker_dir}/{submission_id}/{batch}/{name}"
                planned.append((path, upload))
                new_refs.append(FileRef(path=path, displayName=name, size=upload.size, originalName=upload.filename))
            stored = self._upload_batch(planned)

        now = _now()
        values = {
            "marker_notes": (marker_notes or "").strip() or None,
            "updated_at": now,
        }
        if new_refs:
            values["marked_files"] = new_refs
        if score is not None:
            values["score"] = score
        if not is_draft:
            values["status"] = SubmissionStatus.REVIEWED
            values["reviewed_at"] = now

        try:
            changed = self.db.update_review(submission_id, marker.user_id, values)
        except SQLAlchemyError as e:
            logger.error("Review update for %s failed, removing %d uploaded files: %s", submission_id, len(stored), e)
            self._discard(stored)
            raise PersistenceFailure("Failed to submit review. Please try again.") from e

        if changed == 0:
            # Another request finalized (or reassigned) the row after our read.
            self._discard(stored)
            current = self.db.get_submission(submission_id)
            if current is not None and current.status == SubmissionStatus.REVIEWED:
                raise AlreadyFinalized("This submission has already been reviewed.")
            raise Forbidden("You do not have permission to review this submission.")

        if new_refs:
            self._discard([f.path for f in submission.marked_files])

        logger.info(
            "Marker %s %s review for %s",
            marker.user_id, "saved a draft" if is_draft else "finalized", submission_id,
        )
        return self.db.get_submission(submission_id)

    # --- Gated reads ---

    def _read(self, caller: CallerContext, submission_id: str, scope: str) -> SubmissionRecord:
        if scope == ReadScope.OWNER:
            submission = self.db.get_submission_for_owner(submission_id, caller.user_id)
        elif scope == ReadScope.MARKER:
            submission = self.db.get_submission_for_marker(submission_id, caller.user_id)
        elif scope == ReadScope.COMMUNITY:
            submission = self.db.get_reviewed_submission(submission_id)
            if submission is not None:
                submission = submission.for_community()
        else:
            raise ValueError(f"Unknown read scope: {scope}")
        if submission is None:
            raise NotFound("Submission not found.")
        return submission

    @operation
    def get_own_submission(self, caller: Optional[CallerContext], submission_id: str) -> SubmissionRecord:
        return self._read(_require_role(caller, Role.STUDENT), submission_id, ReadScope.OWNER)

    @operation
    def get_submission_for_review(self, caller: Optional[CallerContext], submission_id: str) -> SubmissionRecord:
        return self._read(_require_role(caller, Role.MARKER), submission_id, ReadScope.MARKER)

    @operation
    def get_community_submission(self, caller: Optional[CallerContext], submission_id: str) -> SubmissionRecord:
        return self._read(_require_caller(caller), submission_id, ReadScope.COMMUNITY)

    @operation
    def get_download_url(
        self,
        caller: Optional[CallerContext],
        submission_id: str,
        file_path: str,
        scope: str,
    ) -> str:
        """
        Signs a short-lived URL for one of the files visible in `scope`. A path
        that is not listed on that view of the record is rejected, whoever owns
        the blob. The community view lists only marked files.
        """
        caller = _require_caller(caller)
        if scope == ReadScope.OWNER:
            _require_role(caller, Role.STUDENT)
        elif scope == ReadScope.MARKER:
            _require_role(caller, Role.MARKER)
        submission = self._read(caller, submission_id, scope)

        if file_path not in submission.file_paths():
            raise InvalidPath("Invalid file path for this submission.")

        try:
            return self.blobs.sign(file_path, settings.signed_url_ttl_seconds)
        except BlobStoreError as e:
            logger.error("Could not sign %s for %s: %s", file_path, caller.user_id, e)
            raise StorageFailure("Failed to generate download link.") from e


def get_submission_service(
    db: DatabaseService = Depends(get_db_service),
    blobs: BlobStore = Depends(get_blob_store),
) -> SubmissionService:
    return SubmissionService(db=db, blobs=blobs)
