# mentor_portal/routers/mentorship_router.py
from fastapi import APIRouter, Depends, Path, Query, Body
from typing import Optional, List

from ..services import MentorshipService
from ..dependencies.auth_dependencies import get_current_mentor, get_current_mentee, get_current_participant
from ..dependencies.service_dependencies import get_mentorship_service
from ..utils.response_enricher import ResponseEnricher
from ..schemas import MentorshipRequestCreate, MentorshipRequestResponse, RequestRejection, ActiveMentorshipResponse
from ..models import User, RequestStatus
from ..exceptions import BusinessLogicError, to_http_exception

router = APIRouter(prefix="/api", tags=["mentorship"])

@router.post("/requests", response_model=MentorshipRequestResponse, status_code=201)
async def create_request(
    request_data: MentorshipRequestCreate,
    current_user: User = Depends(get_current_mentee),
    mentorship_service: MentorshipService = Depends(get_mentorship_service)
):
    """Send a mentorship request to a mentor"""
    try:
        request = mentorship_service.create_request(
            current_user.id, request_data.mentor_id, request_data.introduction, request_data.goals
        )
        return ResponseEnricher.enrich_single_request(request)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.get("/mentee/requests", response_model=List[MentorshipRequestResponse])
async def get_mentee_requests(
    status: Optional[RequestStatus] = Query(None),
    current_user: User = Depends(get_current_mentee),
    mentorship_service: MentorshipService = Depends(get_mentorship_service)
):
    """Get all requests sent by the current mentee"""
    requests = mentorship_service.get_requests_for_mentee(current_user.id, status)
    return ResponseEnricher.enrich_requests(requests)

@router.get("/mentor/requests", response_model=List[MentorshipRequestResponse])
async def get_mentor_requests(
    status: Optional[RequestStatus] = Query(None),
    current_user: User = Depends(get_current_mentor),
    mentorship_service: MentorshipService = Depends(get_mentorship_service)
):
    """Get all requests addressed to the current mentor, with each mentee's academic profile"""
    requests = mentorship_service.get_requests_for_mentor(current_user.id, status)
    return ResponseEnricher.enrich_requests(requests, include_mentee_profile=True)

@router.put("/mentor/requests/{request_id}/accept", response_model=MentorshipRequestResponse)
async def accept_request(
    request_id: int = Path(..., description="The ID of the mentorship request"),
    current_user: User = Depends(get_current_mentor),
    mentorship_service: MentorshipService = Depends(get_mentorship_service)
):
    """Accept a mentorship request"""
    try:
        updated_request = mentorship_service.accept_request(request_id, current_user.id)
        return ResponseEnricher.enrich_single_request(updated_request)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.put("/mentor/requests/{request_id}/reject", response_model=MentorshipRequestResponse)
async def reject_request(
    request_id: int = Path(..., description="The ID of the mentorship request"),
    rejection: Optional[RequestRejection] = Body(None),
    current_user: User = Depends(get_current_mentor),
    mentorship_service: MentorshipService = Depends(get_mentorship_service)
):
    """Reject a mentorship request"""
    try:
        message = rejection.rejection_message if rejection else None
        updated_request = mentorship_service.reject_request(request_id, current_user.id, message)
        return ResponseEnricher.enrich_single_request(updated_request)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.get("/mentee/mentors", response_model=List[ActiveMentorshipResponse])
async def get_my_mentors(
    current_user: User = Depends(get_current_mentee),
    mentorship_service: MentorshipService = Depends(get_mentorship_service)
):
    mentorships = mentorship_service.get_mentors_for_mentee(current_user.id)
    return ResponseEnricher.enrich_mentorships(mentorships, current_user.id)

@router.get("/mentor/mentees", response_model=List[ActiveMentorshipResponse])
async def get_my_mentees(
    current_user: User = Depends(get_current_mentor),
    mentorship_service: MentorshipService = Depends(get_mentorship_service)
):
    mentorships = mentorship_service.get_mentees_for_mentor(current_user.id)
    return ResponseEnricher.enrich_mentorships(mentorships, current_user.id)

@router.put("/mentorships/{mentorship_id}/end", response_model=ActiveMentorshipResponse)
async def end_mentorship(
    mentorship_id: int = Path(..., description="The ID of the active mentorship"),
    current_user: User = Depends(get_current_participant),
    mentorship_service: MentorshipService = Depends(get_mentorship_service)
):
    """Either party ends the mentorship, freeing the mentor's slot"""
    try:
        mentorship = mentorship_service.end_mentorship(mentorship_id, current_user.id)
        return ResponseEnricher.enrich_mentorships([mentorship], current_user.id)[0]
    except BusinessLogicError as e:
        raise to_http_exception(e)
