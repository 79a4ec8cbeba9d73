# mentor_portal/routers/query_router.py
from typing import List
from fastapi import APIRouter, Depends, Path

from ..services import QueryService
from ..dependencies.auth_dependencies import get_current_mentor, get_current_mentee
from ..dependencies.service_dependencies import get_query_service
from ..utils.response_enricher import ResponseEnricher
from ..schemas import MenteeQueryCreate, MenteeQueryResponse, QueryReply, SharedQueryResponse
from ..models import User
from ..exceptions import BusinessLogicError, to_http_exception

router = APIRouter(prefix="/api", tags=["queries"])

@router.post("/queries", response_model=MenteeQueryResponse, status_code=201)
async def submit_query(
    query_data: MenteeQueryCreate,
    current_user: User = Depends(get_current_mentee),
    query_service: QueryService = Depends(get_query_service)
):
    """Send a structured query to a mentor; the response carries the share link"""
    try:
        form = query_data.model_dump(exclude={"mentor_id"})
        query = query_service.submit_query(current_user.id, query_data.mentor_id, form)
        return ResponseEnricher.enrich_single_query(query)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.get("/mentee/queries", response_model=List[MenteeQueryResponse])
async def get_my_queries(
    current_user: User = Depends(get_current_mentee),
    query_service: QueryService = Depends(get_query_service)
):
    return ResponseEnricher.enrich_queries(query_service.get_queries_for_mentee(current_user.id))

@router.get("/mentor/queries", response_model=List[MenteeQueryResponse])
async def get_mentor_queries(
    current_user: User = Depends(get_current_mentor),
    query_service: QueryService = Depends(get_query_service)
):
    return ResponseEnricher.enrich_queries(query_service.get_queries_for_mentor(current_user.id))

@router.put("/mentor/queries/{query_id}/reply", response_model=MenteeQueryResponse)
async def reply_to_query(
    reply: QueryReply,
    query_id: int = Path(..., description="The ID of the query"),
    current_user: User = Depends(get_current_mentor),
    query_service: QueryService = Depends(get_query_service)
):
    """Reply to a query; a second reply replaces the first"""
    try:
        query = query_service.reply_to_query(query_id, current_user.id, reply.reply_text)
        return ResponseEnricher.enrich_single_query(query)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.post("/mentee/queries/{query_id}/share-link", response_model=MenteeQueryResponse)
async def rotate_share_link(
    query_id: int = Path(..., description="The ID of the query"),
    current_user: User = Depends(get_current_mentee),
    query_service: QueryService = Depends(get_query_service)
):
    """Issue a new share link; the old one stops working"""
    try:
        query = query_service.rotate_share_token(query_id, current_user.id)
        return ResponseEnricher.enrich_single_query(query)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.get("/queries/shared/{token}", response_model=SharedQueryResponse)
async def view_shared_query(
    token: str = Path(...),
    query_service: QueryService = Depends(get_query_service)
):
    """Anonymous read-only view behind a share link"""
    try:
        return ResponseEnricher.shared_query_view(query_service.view_by_token(token))
    except BusinessLogicError as e:
        raise to_http_exception(e)
