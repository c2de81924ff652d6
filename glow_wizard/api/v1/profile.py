from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from pymongo.database import Database

from glow_wizard.api.deps import get_current_user, get_db
from glow_wizard.core.exceptions import ResourceNotFoundError, ValidationError
from glow_wizard.schemas.profile import ProfileResponse, ProfileSaveResponse
from glow_wizard.schemas.recommendation import AuthenticatedUser
from glow_wizard.services.profile_service import get_profile, save_profile, validate_profile_data
from glow_wizard.utils.sanitize import prevent_injection_attacks, sanitize_profile

router = APIRouter()

@router.get("/apiprofile", response_model=ProfileResponse)
async def read_profile(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Optional[Database] = Depends(get_db)
):
    """Get the caller's stored profile"""
    profile = get_profile(db, current_user.uid)
    if profile is None:
        raise ResourceNotFoundError("Profile not found")
    return ProfileResponse(profile=profile)

@router.put("/apiprofile", response_model=ProfileSaveResponse)
async def update_profile(
    profile_data: Dict[str, Any] = Body(...),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: Optional[Database] = Depends(get_db)
):
    """Validate and merge the caller's profile into the document store"""
    check = validate_profile_data(profile_data)
    if not check.valid:
        raise ValidationError("Profile validation failed", errors=check.errors)
    if not prevent_injection_attacks(profile_data):
        raise ValidationError("Request contains disallowed content", errors=["Disallowed content detected"])

    save_profile(db, current_user.uid, sanitize_profile(profile_data, email=current_user.email))
    return ProfileSaveResponse(success=True)
