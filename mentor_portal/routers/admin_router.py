# mentor_portal/routers/admin_router.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query, Response

from ..services import AdminService
from ..dependencies.auth_dependencies import get_current_admin, get_current_hod, get_current_dean
from ..dependencies.service_dependencies import get_admin_service
from ..schemas import AdminUserCreate, AdminUserUpdate, RoleChange, UserSummary, OversightResponse
from ..models import User, UserRole
from ..exceptions import BusinessLogicError, to_http_exception

router = APIRouter(prefix="/api", tags=["administration"])

@router.get("/admin/users", response_model=List[UserSummary])
async def list_users(
    role: Optional[UserRole] = Query(None),
    search: Optional[str] = Query(None, description="Matches name or email"),
    current_user: User = Depends(get_current_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    return admin_service.list_users(role, search)

@router.post("/admin/users", response_model=UserSummary, status_code=201)
async def create_user(
    user_data: AdminUserCreate,
    current_user: User = Depends(get_current_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    """Create a principal of any role"""
    try:
        user = admin_service.create_user(user_data.email, user_data.password, user_data.full_name, user_data.role)
        return admin_service.summarise(user.id)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.put("/admin/users/{user_id}", response_model=UserSummary)
async def update_user(
    user_data: AdminUserUpdate,
    user_id: int = Path(..., description="The ID of the user to edit"),
    current_user: User = Depends(get_current_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        admin_service.update_user(user_id, user_data.full_name, user_data.email)
        return admin_service.summarise(user_id)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.put("/admin/users/{user_id}/role", response_model=UserSummary)
async def change_role(
    role_change: RoleChange,
    user_id: int = Path(..., description="The ID of the user whose role changes"),
    current_user: User = Depends(get_current_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        admin_service.change_role(user_id, role_change.role, actor_id=current_user.id)
        return admin_service.summarise(user_id)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.delete("/admin/users/{user_id}", status_code=204)
async def delete_user(
    user_id: int = Path(..., description="The ID of the user to delete"),
    current_user: User = Depends(get_current_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    """Delete a user together with their requests, mentorships and queries"""
    try:
        admin_service.delete_user(user_id, actor_id=current_user.id)
        return Response(status_code=204)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.get("/oversight/hod", response_model=OversightResponse)
async def hod_overview(
    current_user: User = Depends(get_current_hod),
    admin_service: AdminService = Depends(get_admin_service)
):
    return admin_service.hod_overview()

@router.get("/oversight/dean", response_model=OversightResponse)
async def dean_overview(
    current_user: User = Depends(get_current_dean),
    admin_service: AdminService = Depends(get_admin_service)
):
    return admin_service.dean_overview()
