# mentor_portal/routers/dashboard_router.py
from typing import List
from fastapi import APIRouter, Depends, Query

from ..services import DashboardService
from ..dependencies.auth_dependencies import get_current_mentor, get_current_mentee
from ..dependencies.service_dependencies import get_dashboard_service
from ..schemas import MenteeDashboardStats, MentorDashboardStats, MentorActivityPoint, MenteeActivityPoint
from ..models import User, ActivityPeriod

router = APIRouter(prefix="/api", tags=["dashboards"])

@router.get("/mentee/stats", response_model=MenteeDashboardStats)
async def get_mentee_stats(
    current_user: User = Depends(get_current_mentee),
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    return dashboard_service.get_mentee_stats(current_user.id)

@router.get("/mentee/activity", response_model=List[MenteeActivityPoint])
async def get_mentee_activity(
    period: ActivityPeriod = Query(ActivityPeriod.MONTH),
    current_user: User = Depends(get_current_mentee),
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    """Running total of mentorships started"""
    return dashboard_service.get_mentee_activity(current_user.id, period)

@router.get("/mentor/stats", response_model=MentorDashboardStats)
async def get_mentor_stats(
    current_user: User = Depends(get_current_mentor),
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    return dashboard_service.get_mentor_stats(current_user.id)

@router.get("/mentor/activity", response_model=List[MentorActivityPoint])
async def get_mentor_activity(
    period: ActivityPeriod = Query(ActivityPeriod.MONTH),
    current_user: User = Depends(get_current_mentor),
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    """Requests received per bucket, split by outcome"""
    return dashboard_service.get_mentor_activity(current_user.id, period)
