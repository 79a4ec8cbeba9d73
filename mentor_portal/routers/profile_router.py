# mentor_portal/routers/profile_router.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query

from ..services import ProfileService, CapacityLedger
from ..dependencies.auth_dependencies import get_current_mentor, get_current_mentee
from ..dependencies.service_dependencies import get_profile_service, get_capacity_ledger
from ..schemas import (
    MentorProfileUpdate, MentorProfileResponse, MenteeProfileUpdate, MenteeProfileResponse,
    AvailabilityUpdate, CapacityUpdate, MentorCard,
)
from ..models import User, MentorType, UserRole
from ..security import get_current_user
from ..exceptions import BusinessLogicError, to_http_exception

router = APIRouter(prefix="/api", tags=["profiles"])

@router.get("/mentor/profile", response_model=MentorProfileResponse)
async def get_mentor_profile(
    current_user: User = Depends(get_current_mentor),
    profile_service: ProfileService = Depends(get_profile_service)
):
    """Get (creating on first visit) the current mentor's profile"""
    try:
        return profile_service.get_mentor_profile(current_user.id)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.put("/mentor/profile", response_model=MentorProfileResponse)
async def update_mentor_profile(
    profile_data: MentorProfileUpdate,
    current_user: User = Depends(get_current_mentor),
    profile_service: ProfileService = Depends(get_profile_service)
):
    try:
        return profile_service.update_mentor_profile(current_user, profile_data.model_dump(exclude_unset=True))
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.put("/mentor/availability", response_model=MentorProfileResponse)
async def set_availability(
    availability: AvailabilityUpdate,
    current_user: User = Depends(get_current_mentor),
    ledger: CapacityLedger = Depends(get_capacity_ledger)
):
    """Switch accepting new requests on or off"""
    try:
        return ledger.set_availability(current_user.id, availability.is_available)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.put("/mentor/capacity", response_model=MentorProfileResponse)
async def set_capacity(
    capacity: CapacityUpdate,
    current_user: User = Depends(get_current_mentor),
    ledger: CapacityLedger = Depends(get_capacity_ledger)
):
    try:
        return ledger.set_max_capacity(current_user.id, capacity.max_mentees)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.get("/mentee/profile", response_model=MenteeProfileResponse)
async def get_mentee_profile(
    current_user: User = Depends(get_current_mentee),
    profile_service: ProfileService = Depends(get_profile_service)
):
    """Get (creating on first visit) the current mentee's profile"""
    try:
        return profile_service.get_mentee_profile(current_user.id)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.put("/mentee/profile", response_model=MenteeProfileResponse)
async def update_mentee_profile(
    profile_data: MenteeProfileUpdate,
    current_user: User = Depends(get_current_mentee),
    profile_service: ProfileService = Depends(get_profile_service)
):
    try:
        return profile_service.update_mentee_profile(current_user, profile_data.model_dump(exclude_unset=True))
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.get("/mentors", response_model=List[MentorCard])
async def browse_mentors(
    search: Optional[str] = Query(None, description="Matches name, bio, expertise and guidance areas"),
    mentor_type: Optional[MentorType] = Query(None),
    available_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service)
):
    """Find-a-mentor listing; request flags are filled in for mentee viewers"""
    viewer_id = current_user.id if current_user.role == UserRole.MENTEE.value else None
    return profile_service.browse_mentors(viewer_id, search, mentor_type, available_only)

@router.get("/mentors/{mentor_id}", response_model=MentorCard)
async def get_mentor(
    mentor_id: int = Path(..., description="The user ID of the mentor"),
    current_user: User = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service)
):
    viewer_id = current_user.id if current_user.role == UserRole.MENTEE.value else None
    try:
        return profile_service.get_mentor_card(mentor_id, viewer_id)
    except BusinessLogicError as e:
        raise to_http_exception(e)
