# /markhub-backend/app/models/user_model.py

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime
from enum import Enum

from .submission_model import SubmissionResponse


class Role(str, Enum):
    STUDENT = "student"
    MARKER = "marker"


class CallerContext(BaseModel):
    """
    Identity of the caller for one request. Every lifecycle operation takes
    one of these explicitly.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str
    role: Optional[Role] = None
    email: Optional[str] = None


class Profile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[Role] = None
    papers_passed: Optional[List[str]] = None
    created_at: Optional[datetime] = None


class CompleteProfileRequest(BaseModel):
    role: Role
    full_name: Optional[str] = Field(default=None, max_length=200)
    papers_passed: Optional[List[str]] = None


class StudentProfileResponse(BaseModel):
    id: str
    email: str
    fullName: str
    createdAt: Optional[datetime] = None
    totalSubmissions: int
    reviewedSubmissions: int
    pendingSubmissions: int
    averageScore: Optional[int] = None
    recentSubmissions: List[SubmissionResponse]


class MarkerProfileResponse(BaseModel):
    id: str
    email: str
    fullName: str
    createdAt: Optional[datetime] = None
    totalReviews: int
    averageScoreGiven: Optional[int] = None
    helpfulFeedbackCount: int
    recentReviews: List[SubmissionResponse]
    papersPassed: List[str]
