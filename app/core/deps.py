# /markhub-backend/app/core/deps.py

"""
FastAPI dependencies that turn an inbound request into an explicit
`CallerContext`, plus the translation from lifecycle results to HTTP errors.

Routers declare `Depends(require_student)` or `Depends(require_marker)` for
role-gated endpoints and `Depends(get_current_caller)` where any
authenticated caller is allowed.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..models.user_model import CallerContext, Role
from ..services import profile_service
from ..services.database_service import DatabaseService, get_db_service
from . import security
from .errors import ErrorKind, OperationResult

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

HTTP_STATUS_BY_KIND = {
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.NO_LONGER_AVAILABLE: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION_FAILED: 422,
    ErrorKind.ALREADY_FINALIZED: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_PATH: status.HTTP_400_BAD_REQUEST,
    ErrorKind.STORAGE_FAILURE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.PERSISTENCE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _unauthenticated(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: DatabaseService = Depends(get_db_service),
) -> CallerContext:
    """Verifies the bearer token and loads the caller's role from their profile."""
    if credentials is None or not credentials.credentials:
        raise _unauthenticated()
    try:
        claims = security.decode_access_token(credentials.credentials)
    except security.TokenError as e:
        logger.info("Rejected access token: %s", e)
        raise _unauthenticated("Could not validate credentials")

    profile = profile_service.get_or_create_profile(claims["sub"], claims.get("email"), db)
    return CallerContext(user_id=profile.id, role=profile.role, email=profile.email)


def _require(role: Role):
    def dependency(caller: CallerContext = Depends(get_current_caller)) -> CallerContext:
        if caller.role is None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Please complete your profile by choosing a role first.",
            )
        if caller.role != role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"This area is only available to {role.value}s.",
            )
        return caller
    return dependency


require_student = _require(Role.STUDENT)
require_marker = _require(Role.MARKER)


def unwrap(result: OperationResult):
    """Returns the result's data or raises the matching HTTPException."""
    if result.ok:
        return result.data
    code = HTTP_STATUS_BY_KIND.get(result.error_kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    headers = {"WWW-Authenticate": "Bearer"} if code == status.HTTP_401_UNAUTHORIZED else None
    raise HTTPException(
        status_code=code,
        detail={"error": result.error_kind.value, "message": result.message},
        headers=headers,
    )
