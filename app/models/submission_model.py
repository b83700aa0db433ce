# /markhub-backend/app/models/submission_model.py

from pydantic import BaseModel, Field, ConfigDict, computed_field
from typing import Optional, List
from datetime import datetime
from enum import Enum

PASS_MARK = 50
ANONYMOUS_OWNER = "anonymous"


# --- Core Enumerations ---
class SubmissionStatus(str, Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    REVIEWED = "reviewed"


# ACCA paper catalogue: code -> label.
ACCA_PAPERS = {
    "PM": "Performance Management (PM/F5)",
    "FM": "Financial Management (FM/F9)",
    "FR": "Financial Reporting (FR/F7)",
    "AA": "Audit and Assurance (AA/F8)",
    "TX": "Taxation (TX/F6)",
    "SBL": "Strategic Business Leader (SBL)",
    "SBR": "Strategic Business Reporting (SBR)",
    "AFM": "Advanced Financial Management (AFM)",
    "APM": "Advanced Performance Management (APM)",
    "ATX": "Advanced Taxation (ATX)",
    "AAA": "Advanced Audit and Assurance (AAA)",
}


def get_paper_label(code: str) -> str:
    return ACCA_PAPERS.get(code, code)


# --- File Models ---

class FileRef(BaseModel):
    """A stored blob as referenced from a submission record."""
    model_config = ConfigDict(populate_by_name=True)

    path: str
    displayName: str
    size: int = Field(..., ge=0)
    originalName: str


class UploadedFile(BaseModel):
    """An inbound file, already read from the request, awaiting validation."""
    filename: str
    content_type: Optional[str] = None
    content: bytes = b""

    @property
    def size(self) -> int:
        return len(self.content)


# --- Canonical Record ---

class SubmissionRecord(BaseModel):
    """
    The lifecycle's view of a submission row. Files are always an ordered
    list here, whatever shape the row was stored in.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    title: str
    paper: str
    question: Optional[str] = None
    notes: Optional[str] = None
    files: List[FileRef] = Field(default_factory=list)
    marker_notes: Optional[str] = None
    score: Optional[int] = Field(default=None, ge=0, le=100)
    marked_files: List[FileRef] = Field(default_factory=list)
    marker_id: Optional[str] = None
    status: SubmissionStatus = SubmissionStatus.PENDING
    created_at: datetime
    updated_at: datetime
    reviewed_at: Optional[datetime] = None

    def file_paths(self) -> List[str]:
        return [f.path for f in self.files] + [f.path for f in self.marked_files]

    def for_community(self) -> "SubmissionRecord":
        """
        The copy other users may see. Original answer files are stored under
        the owner's id and stay private, so only the marked files remain.
        """
        return self.model_copy(update={"owner_id": ANONYMOUS_OWNER, "files": []})


# --- API Contract Models ---

class SubmissionResponse(SubmissionRecord):
    @computed_field
    @property
    def paperLabel(self) -> str:
        return get_paper_label(self.paper)

    @computed_field
    @property
    def passed(self) -> Optional[bool]:
        if self.score is None:
            return None
        return self.score >= PASS_MARK


class SubmissionListResponse(BaseModel):
    submissions: List[SubmissionResponse]


class CommunitySubmission(BaseModel):
    """Anonymised summary row for the community listing."""
    id: str
    paper: str
    title: str
    question: Optional[str] = None
    status: SubmissionStatus
    reviewedAt: Optional[datetime] = None
    score: Optional[int] = None


class SubmissionStats(BaseModel):
    total: int = 0
    pending: int = 0
    underReview: int = 0
    reviewed: int = 0
    averageScore: Optional[int] = None


class MarkerStats(BaseModel):
    assignedReviews: int = 0
    completedReviews: int = 0


class DownloadLinkResponse(BaseModel):
    url: str
    expiresIn: int


class ClaimResponse(BaseModel):
    status: str = "success"
    submission: SubmissionResponse
