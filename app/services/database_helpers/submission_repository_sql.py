# /markhub-backend/app/services/database_helpers/submission_repository_sql.py

"""
This module contains all the raw SQLAlchemy queries for the Submission table.
It is the direct interface to the database for submission data and the only
place that knows about the storage schema.

Rows may carry files either in the `files` / `marked_files` JSON columns or in
the legacy single-file columns. This adapter translates both shapes into the
canonical `SubmissionRecord` with ordered `FileRef` lists, and on every write
fills the JSON columns while mirroring the first file into the legacy columns.
"""

import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.models.submission_models import Submission
from app.models.submission_model import FileRef, SubmissionRecord, SubmissionStatus


# --- Schema translation ---

def _files_from_row(files_json, legacy_path: Optional[str], legacy_name: Optional[str], legacy_size: Optional[int]) -> List[FileRef]:
    if files_json:
        return [FileRef.model_validate(f) for f in files_json]
    if legacy_path:
        name = legacy_name or legacy_path.rsplit("/", 1)[-1]
        return [FileRef(path=legacy_path, displayName=name, size=legacy_size or 0, originalName=name)]
    return []


def row_to_record(row: Submission) -> SubmissionRecord:
    return SubmissionRecord(
        id=row.id,
        owner_id=row.user_id,
        title=row.title,
        paper=row.paper,
        question=row.question,
        notes=row.notes,
        files=_files_from_row(row.files, row.file_path, row.file_name, row.file_size),
        marker_notes=row.marker_notes,
        score=row.score,
        marked_files=_files_from_row(row.marked_files, row.marked_file_path, row.marked_file_name, None),
        marker_id=row.marker_id,
        status=SubmissionStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
        reviewed_at=row.reviewed_at,
    )


def _original_file_columns(files: List[FileRef]) -> Dict:
    first = files[0] if files else None
    return {
        "files": [f.model_dump() for f in files],
        "file_path": first.path if first else None,
        "file_name": first.originalName if first else None,
        "file_size": first.size if first else None,
    }


def _marked_file_columns(files: List[FileRef]) -> Dict:
    first = files[0] if files else None
    return {
        "marked_files": [f.model_dump() for f in files],
        "marked_file_path": first.path if first else None,
        "marked_file_name": first.displayName if first else None,
    }


def record_values_to_columns(values: Dict) -> Dict:
    """Maps canonical field names onto table columns."""
    columns = dict(values)
    if "owner_id" in columns:
        columns["user_id"] = columns.pop("owner_id")
    if "files" in columns:
        columns.update(_original_file_columns(_as_file_refs(columns.pop("files"))))
    if "marked_files" in columns:
        columns.update(_marked_file_columns(_as_file_refs(columns.pop("marked_files"))))
    if isinstance(columns.get("status"), SubmissionStatus):
        columns["status"] = columns["status"].value
    return columns


def _as_file_refs(files: Iterable) -> List[FileRef]:
    return [f if isinstance(f, FileRef) else FileRef.model_validate(f) for f in files]


class SubmissionRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def _execute_write(self, stmt) -> int:
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return result.rowcount

    # --- Writes ---

    def add_submission(self, record: Dict) -> SubmissionRecord:
        """Inserts a new row. `record` uses canonical field names."""
        new_row = Submission(**record_values_to_columns(record))
        self.db.add(new_row)
        self._commit()
        self.db.refresh(new_row)
        return row_to_record(new_row)

    def claim_submission(self, submission_id: str, marker_id: str, now: datetime.datetime) -> int:
        """
        Assigns a pending submission to `marker_id` in one conditional write.
        Returns the number of rows changed: 1 for the winner of a race, 0 otherwise.
        """
        stmt = (
            update(Submission)
            .where(
                Submission.id == submission_id,
                Submission.status == SubmissionStatus.PENDING.value,
                Submission.marker_id.is_(None),
                Submission.user_id != marker_id,
            )
            .values(marker_id=marker_id, status=SubmissionStatus.UNDER_REVIEW.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return self._execute_write(stmt)

    def update_review(self, submission_id: str, marker_id: str, values: Dict) -> int:
        """
        Writes review fields only while the row is still under review by
        `marker_id`. Returns the number of rows changed.
        """
        stmt = (
            update(Submission)
            .where(
                Submission.id == submission_id,
                Submission.marker_id == marker_id,
                Submission.status == SubmissionStatus.UNDER_REVIEW.value,
            )
            .values(**record_values_to_columns(values))
            .execution_options(synchronize_session=False)
        )
        return self._execute_write(stmt)

    # --- Reads ---

    # Conditional updates bypass the identity map, so reads always expire it first.
    def _first(self, stmt) -> Optional[SubmissionRecord]:
        self.db.expire_all()
        row = self.db.execute(stmt).scalars().first()
        return row_to_record(row) if row else None

    def _all(self, stmt) -> List[SubmissionRecord]:
        self.db.expire_all()
        return [row_to_record(row) for row in self.db.execute(stmt).scalars().all()]

    def get_submission(self, submission_id: str) -> Optional[SubmissionRecord]:
        return self._first(select(Submission).where(Submission.id == submission_id))

    def get_submission_for_owner(self, submission_id: str, owner_id: str) -> Optional[SubmissionRecord]:
        return self._first(
            select(Submission).where(Submission.id == submission_id, Submission.user_id == owner_id)
        )

    def get_submission_for_marker(self, submission_id: str, marker_id: str) -> Optional[SubmissionRecord]:
        return self._first(
            select(Submission).where(Submission.id == submission_id, Submission.marker_id == marker_id)
        )

    def get_reviewed_submission(self, submission_id: str) -> Optional[SubmissionRecord]:
        return self._first(
            select(Submission).where(
                Submission.id == submission_id,
                Submission.status == SubmissionStatus.REVIEWED.value,
            )
        )

    def get_submissions_by_owner(self, owner_id: str, limit: Optional[int] = None) -> List[SubmissionRecord]:
        stmt = (
            select(Submission)
            .where(Submission.user_id == owner_id)
            .order_by(Submission.created_at.desc())
        )
        if limit:
            stmt = stmt.limit(limit)
        return self._all(stmt)

    def get_submissions_by_marker(
        self,
        marker_id: str,
        statuses: Iterable[SubmissionStatus],
        limit: Optional[int] = None,
        order_by_reviewed: bool = False,
    ) -> List[SubmissionRecord]:
        order_column = Submission.reviewed_at if order_by_reviewed else Submission.created_at
        stmt = (
            select(Submission)
            .where(
                Submission.marker_id == marker_id,
                Submission.status.in_([s.value for s in statuses]),
            )
            .order_by(order_column.desc())
        )
        if limit:
            stmt = stmt.limit(limit)
        return self._all(stmt)

    def get_claimable_submissions(self, marker_id: str) -> List[SubmissionRecord]:
        """Pending, unassigned submissions that the marker does not own."""
        return self._all(
            select(Submission)
            .where(
                Submission.status == SubmissionStatus.PENDING.value,
                Submission.marker_id.is_(None),
                Submission.user_id != marker_id,
            )
            .order_by(Submission.created_at.desc())
        )

    def get_reviewed_submissions(self, limit: int = 50) -> List[SubmissionRecord]:
        return self._all(
            select(Submission)
            .where(Submission.status == SubmissionStatus.REVIEWED.value)
            .order_by(Submission.reviewed_at.desc())
            .limit(limit)
        )
