# mentor_portal/dependencies/service_dependencies.py
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from ..database import get_db
from ..core.change_feed import ChangeFeed
from ..core.storage import AvatarStorage
from ..services.identity_service import IdentityService
from ..services.capacity_service import CapacityLedger
from ..services.profile_service import ProfileService
from ..services.mentorship_service import MentorshipService
from ..services.query_service import QueryService
from ..services.notification_service import NotificationService
from ..services.dashboard_service import DashboardService
from ..services.admin_service import AdminService
from ..services.feedback_service import FeedbackService

def get_change_feed(request: Request) -> ChangeFeed:
    return request.app.state.change_feed

def get_avatar_storage() -> AvatarStorage:
    return AvatarStorage()

def get_identity_service(db: Session = Depends(get_db), storage: AvatarStorage = Depends(get_avatar_storage)) -> IdentityService:
    return IdentityService(db, storage)

def get_capacity_ledger(db: Session = Depends(get_db)) -> CapacityLedger:
    return CapacityLedger(db)

def get_profile_service(db: Session = Depends(get_db)) -> ProfileService:
    return ProfileService(db)

def get_mentorship_service(db: Session = Depends(get_db), change_feed: ChangeFeed = Depends(get_change_feed)) -> MentorshipService:
    return MentorshipService(db, change_feed)

def get_query_service(db: Session = Depends(get_db), change_feed: ChangeFeed = Depends(get_change_feed)) -> QueryService:
    return QueryService(db, change_feed)

def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)

def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    return DashboardService(db)

def get_admin_service(db: Session = Depends(get_db), storage: AvatarStorage = Depends(get_avatar_storage)) -> AdminService:
    return AdminService(db, storage)

def get_feedback_service(db: Session = Depends(get_db)) -> FeedbackService:
    return FeedbackService(db)
