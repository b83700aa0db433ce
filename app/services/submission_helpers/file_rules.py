# /markhub-backend/app/services/submission_helpers/file_rules.py

"""
Upload rules and blob naming for submissions.

Students may upload Word and Excel files; markers may additionally return
PDFs. Every file is capped at 10 MiB. A batch is validated as a whole before
anything is written, so a single bad file means nothing is uploaded.
"""

import re
from typing import Dict, List, Sequence

from ...core.config import settings
from ...core.errors import ValidationFailed
from ...core.security import is_safe_subject
from ...models.submission_model import UploadedFile

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MIME = "application/pdf"

EXTENSION_BY_MIME: Dict[str, str] = {DOCX_MIME: "docx", XLSX_MIME: "xlsx", PDF_MIME: "pdf"}

SUBMISSION_MIME_TYPES = frozenset({DOCX_MIME, XLSX_MIME})
MARKED_MIME_TYPES = frozenset({DOCX_MIME, XLSX_MIME, PDF_MIME})

SUBMISSION_TYPES_LABEL = "Word (.docx) or Excel (.xlsx)"
MARKED_TYPES_LABEL = "Word (.docx), Excel (.xlsx) or PDF (.pdf)"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_TITLE_CHARS = re.compile(r"[^A-Za-z0-9]+")
MAX_NAME_LENGTH = 80


def _max_size_label() -> str:
    return f"{settings.max_upload_bytes // (1024 * 1024)}MB"


def validate_batch(files: Sequence[UploadedFile], allowed_types: frozenset, types_label: str) -> None:
    """Raises ValidationFailed naming the first offending file and rule."""
    for upload in files:
        if upload.content_type not in allowed_types:
            raise ValidationFailed(
                f'"{upload.filename}" is not a valid file type. Only {types_label} files are allowed.'
            )
        if upload.size == 0:
            raise ValidationFailed(f'"{upload.filename}" is empty.')
        if upload.size > settings.max_upload_bytes:
            raise ValidationFailed(
                f'"{upload.filename}" is too large. Maximum file size is {_max_size_label()}.'
            )


def validate_submission_files(files: Sequence[UploadedFile]) -> None:
    if not files:
        raise ValidationFailed("At least one file is required.")
    validate_batch(files, SUBMISSION_MIME_TYPES, SUBMISSION_TYPES_LABEL)


def validate_marked_files(files: Sequence[UploadedFile]) -> None:
    validate_batch(files, MARKED_MIME_TYPES, MARKED_TYPES_LABEL)


def safe_file_name(filename: str) -> str:
    """Strips directories and unsafe characters from a client-supplied name."""
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned[-MAX_NAME_LENGTH:] or "file"


def blob_path_segment(identity: str) -> str:
    """Returns `identity` for use as a blob directory, refusing ids that would change the path shape."""
    if not is_safe_subject(identity):
        raise ValidationFailed("This account id cannot be used for file storage.")
    return identity


def sanitize_title(title: str) -> str:
    cleaned = _TITLE_CHARS.sub("_", title).strip("_")
    return cleaned[:MAX_NAME_LENGTH].rstrip("_") or "submission"


def marked_display_names(title: str, files: Sequence[UploadedFile]) -> List[str]:
    """
    `<Title>_marked.<ext>` for a single file, `<Title>_marked-1.<ext>`,
    `<Title>_marked-2.<ext>`... when several are returned together.
    """
    base = f"{sanitize_title(title)}_marked"
    names = []
    for ordinal, upload in enumerate(files, start=1):
        suffix = f"-{ordinal}" if len(files) > 1 else ""
        names.append(f"{base}{suffix}.{EXTENSION_BY_MIME[upload.content_type]}")
    return names


def read_uploads(uploads) -> List[UploadedFile]:
    """
    Reads FastAPI `UploadFile` parts into `UploadedFile` values. At most one
    byte past the size limit is read, which is enough for validation to reject
    an oversized file without buffering all of it. Empty placeholder parts
    (no name, no content) are dropped.
    """
    read_limit = settings.max_upload_bytes + 1
    files = []
    for upload in uploads or []:
        content = upload.file.read(read_limit)
        if not upload.filename and not content:
            continue
        files.append(UploadedFile(filename=upload.filename or "untitled", content_type=upload.content_type, content=content))
    return files
