# /markhub-backend/app/core/errors.py

"""
Error taxonomy for the submission lifecycle.

Service code raises the `SubmissionError` subclasses below. They never cross
the service boundary: public service methods catch them and hand back an
`OperationResult`, which routers translate into HTTP responses.
"""

import functools
import logging
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    NO_LONGER_AVAILABLE = "no_longer_available"
    VALIDATION_FAILED = "validation_failed"
    ALREADY_FINALIZED = "already_finalized"
    INVALID_PATH = "invalid_path"
    STORAGE_FAILURE = "storage_failure"
    PERSISTENCE_FAILURE = "persistence_failure"


class SubmissionError(Exception):
    kind: ErrorKind = ErrorKind.PERSISTENCE_FAILURE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(SubmissionError):
    kind = ErrorKind.UNAUTHENTICATED


class Forbidden(SubmissionError):
    kind = ErrorKind.FORBIDDEN


class NotFound(SubmissionError):
    kind = ErrorKind.NOT_FOUND


class NoLongerAvailable(SubmissionError):
    kind = ErrorKind.NO_LONGER_AVAILABLE


class ValidationFailed(SubmissionError):
    kind = ErrorKind.VALIDATION_FAILED


class AlreadyFinalized(SubmissionError):
    kind = ErrorKind.ALREADY_FINALIZED


class InvalidPath(SubmissionError):
    kind = ErrorKind.INVALID_PATH


class StorageFailure(SubmissionError):
    kind = ErrorKind.STORAGE_FAILURE


class PersistenceFailure(SubmissionError):
    kind = ErrorKind.PERSISTENCE_FAILURE


class OperationResult(BaseModel, Generic[T]):
    """Typed outcome of a lifecycle operation."""
    ok: bool
    data: Optional[T] = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, data: Any = None) -> "OperationResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: SubmissionError) -> "OperationResult":
        return cls(ok=False, error_kind=error.kind, message=error.message)


def operation(func):
    """Converts lifecycle errors raised by `func` into a failed OperationResult."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> OperationResult:
        try:
            return OperationResult.success(func(*args, **kwargs))
        except SubmissionError as e:
            logger.info("%s rejected (%s): %s", func.__name__, e.kind.value, e.message)
            return OperationResult.failure(e)
        except SQLAlchemyError:
            logger.exception("Database error during %s", func.__name__)
            return OperationResult.failure(PersistenceFailure("A database error occurred. Please try again."))
    return wrapper
