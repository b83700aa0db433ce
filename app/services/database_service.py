# /markhub-backend/app/services/database_service.py

from typing import List, Dict, Optional, Generator, Iterable
import datetime
from sqlalchemy.orm import Session
from fastapi import Depends

from app.db.database import get_db
from app.models.submission_model import SubmissionRecord, SubmissionStatus
from app.db.models.profile_models import Profile

from .database_helpers.submission_repository_sql import SubmissionRepositorySQL
from .database_helpers.profile_repository_sql import ProfileRepositorySQL


class DatabaseService:
    def __init__(self, db_session: Session):
        """Facade over the SQL repositories, bound to one session."""
        self.session = db_session
        self.submission_repo = SubmissionRepositorySQL(db_session)
        self.profile_repo = ProfileRepositorySQL(db_session)

    # --- SUBMISSION METHODS (DELEGATED) ---
    def add_submission(self, record: Dict) -> SubmissionRecord: return self.submission_repo.add_submission(record)
    def get_submission(self, submission_id: str) -> Optional[SubmissionRecord]: return self.submission_repo.get_submission(submission_id)
    def get_submission_for_owner(self, submission_id: str, owner_id: str) -> Optional[SubmissionRecord]: return self.submission_repo.get_submission_for_owner(submission_id, owner_id)
    def get_submission_for_marker(self, submission_id: str, marker_id: str) -> Optional[SubmissionRecord]: return self.submission_repo.get_submission_for_marker(submission_id, marker_id)
    def get_reviewed_submission(self, submission_id: str) -> Optional[SubmissionRecord]: return self.submission_repo.get_reviewed_submission(submission_id)
    def get_submissions_by_owner(self, owner_id: str, limit: Optional[int] = None) -> List[SubmissionRecord]: return self.submission_repo.get_submissions_by_owner(owner_id, limit)
    def get_claimable_submissions(self, marker_id: str) -> List[SubmissionRecord]: return self.submission_repo.get_claimable_submissions(marker_id)
    def get_reviewed_submissions(self, limit: int = 50) -> List[SubmissionRecord]: return self.submission_repo.get_reviewed_submissions(limit)
    def claim_submission(self, submission_id: str, marker_id: str, now: datetime.datetime) -> int: return self.submission_repo.claim_submission(submission_id, marker_id, now)
    def update_review(self, submission_id: str, marker_id: str, values: Dict) -> int: return self.submission_repo.update_review(submission_id, marker_id, values)

    def get_submissions_by_marker(
        self,
        marker_id: str,
        statuses: Iterable[SubmissionStatus],
        limit: Optional[int] = None,
        order_by_reviewed: bool = False,
    ) -> List[SubmissionRecord]:
        return self.submission_repo.get_submissions_by_marker(marker_id, statuses, limit, order_by_reviewed)

    # --- PROFILE METHODS (DELEGATED) ---
    def get_profile(self, user_id: str) -> Optional[Profile]: return self.profile_repo.get_profile(user_id)
    def add_profile(self, record: Dict) -> Profile: return self.profile_repo.add_profile(record)
    def set_role_once(self, user_id: str, data: Dict) -> int: return self.profile_repo.set_role_once(user_id, data)


def get_db_service(db: Session = Depends(get_db)) -> Generator[DatabaseService, None, None]:
    """FastAPI dependency that provides a DatabaseService instance."""
    yield DatabaseService(db_session=db)
