# /markhub-backend/app/services/database_helpers/profile_repository_sql.py

from typing import Dict, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.models.profile_models import Profile


class ProfileRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    def get_profile(self, user_id: str) -> Optional[Profile]:
        return self.db.query(Profile).filter(Profile.id == user_id).first()

    def add_profile(self, record: Dict) -> Profile:
        new_profile = Profile(**record)
        self.db.add(new_profile)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(new_profile)
        return new_profile

    def set_role_once(self, user_id: str, data: Dict) -> int:
        """
        Writes the role (and profile details) only if no role is set yet.
        Returns the number of rows changed.
        """
        stmt = (
            update(Profile)
            .where(Profile.id == user_id, Profile.role.is_(None))
            .values(**data)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.expire_all()
        return result.rowcount
