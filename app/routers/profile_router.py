# /markhub-backend/app/routers/profile_router.py

"""
Profile endpoints: the caller's own profile, the one-time role choice, the
role-specific profile pages and a marker's public profile.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from ..core.deps import get_current_caller, require_marker, require_student, unwrap
from ..models.user_model import (
    CallerContext,
    CompleteProfileRequest,
    MarkerProfileResponse,
    Profile,
    StudentProfileResponse,
)
from ..services import profile_service
from ..services.database_service import DatabaseService, get_db_service

router = APIRouter()


@router.get("/me", response_model=Profile, summary="Get My Profile")
def read_my_profile(
    db: DatabaseService = Depends(get_db_service),
    caller: CallerContext = Depends(get_current_caller)
):
    """`role` is null until the caller completes their profile."""
    return profile_service.get_or_create_profile(caller.user_id, caller.email, db)


@router.post("/complete", response_model=Profile, summary="Choose My Role")
def complete_my_profile(
    request: CompleteProfileRequest,
    db: DatabaseService = Depends(get_db_service),
    caller: CallerContext = Depends(get_current_caller)
):
    """Sets the role once. Later attempts are rejected with 403."""
    return unwrap(profile_service.complete_profile(caller.user_id, request, db))


@router.get("/student", response_model=StudentProfileResponse, summary="My Student Profile")
def read_student_profile(
    db: DatabaseService = Depends(get_db_service),
    caller: CallerContext = Depends(require_student)
):
    profile = profile_service.get_or_create_profile(caller.user_id, caller.email, db)
    return profile_service.get_student_profile(profile, db)


@router.get("/marker", response_model=MarkerProfileResponse, summary="My Marker Profile")
def read_marker_profile(
    db: DatabaseService = Depends(get_db_service),
    caller: CallerContext = Depends(require_marker)
):
    profile = profile_service.get_or_create_profile(caller.user_id, caller.email, db)
    return profile_service.get_marker_profile(profile, db)


@router.get("/markers/{marker_id}", response_model=MarkerProfileResponse, summary="A Marker's Public Profile")
def read_marker_public_profile(
    marker_id: str,
    db: DatabaseService = Depends(get_db_service),
    caller: CallerContext = Depends(get_current_caller)
):
    public_profile = profile_service.get_marker_public_profile(marker_id, db)
    if public_profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Marker not found.")
    return public_profile
