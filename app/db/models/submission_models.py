# /markhub-backend/app/db/models/submission_models.py

"""
SQLAlchemy model for the `Submission` entity: a student's uploaded practice
answer together with its review state.
"""

from sqlalchemy import Column, String, Integer, JSON, DateTime, Text, CheckConstraint
from sqlalchemy.sql import func

from ..base_class import Base


class Submission(Base):
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'under_review', 'reviewed')", name="ck_submissions_status"),
        CheckConstraint("score IS NULL OR (score >= 0 AND score <= 100)", name="ck_submissions_score"),
    )

    id = Column(String, primary_key=True, index=True)
    # The owning student. The column keeps its historical name.
    user_id = Column(String, nullable=False, index=True)

    title = Column(String, nullable=False)
    paper = Column(String, nullable=False, index=True)
    question = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    # Multi-file columns: lists of {path, displayName, size, originalName}.
    files = Column(JSON, nullable=True)
    marked_files = Column(JSON, nullable=True)

    # Legacy single-file columns, still read for old rows and mirrored on write.
    file_path = Column(String, nullable=True)
    file_name = Column(String, nullable=True)
    file_size = Column(Integer, nullable=True)
    marked_file_path = Column(String, nullable=True)
    marked_file_name = Column(String, nullable=True)

    status = Column(String, nullable=False, default="pending", index=True)
    score = Column(Integer, nullable=True)
    marker_notes = Column(Text, nullable=True)
    marker_id = Column(String, nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
