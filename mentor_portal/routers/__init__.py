# mentor_portal/routers/__init__.py
from . import auth_router
from . import profile_router
from . import mentorship_router
from . import query_router
from . import notification_router
from . import dashboard_router
from . import admin_router
from . import feedback_router
from . import frontend_router

__all__ = [
    "auth_router",
    "profile_router",
    "mentorship_router",
    "query_router",
    "notification_router",
    "dashboard_router",
    "admin_router",
    "feedback_router",
    "frontend_router",
]
