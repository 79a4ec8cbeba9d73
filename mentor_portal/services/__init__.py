# mentor_portal/services/__init__.py
from .identity_service import IdentityService
from .capacity_service import CapacityLedger
from .profile_service import ProfileService
from .mentorship_service import MentorshipService
from .query_service import QueryService
from .notification_service import NotificationService
from .dashboard_service import DashboardService
from .admin_service import AdminService
from .feedback_service import FeedbackService

__all__ = [
    "IdentityService", "CapacityLedger", "ProfileService", "MentorshipService", "QueryService",
    "NotificationService", "DashboardService", "AdminService", "FeedbackService",
]
