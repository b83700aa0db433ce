# /markhub-backend/app/db/models/profile_models.py

"""
SQLAlchemy model for the `Profile` entity: the local record of a caller
authenticated by the external credential provider.
"""

from sqlalchemy import Column, String, JSON, DateTime
from sqlalchemy.sql import func

from ..base_class import Base


class Profile(Base):
    """
    One row per authenticated identity. `role` stays NULL until the user
    completes their profile and is never rewritten afterwards.
    """
    id = Column(String, primary_key=True, index=True)
    email = Column(String, nullable=True, index=True)
    full_name = Column(String, nullable=True)
    role = Column(String, nullable=True)
    papers_passed = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
