# mentor_portal/dependencies/auth_dependencies.py
from typing import Callable
from fastapi import Depends, HTTPException, status
from ..models import User, UserRole
from ..security import get_current_user
from ..constants import ErrorMessages

def require_roles(*roles: UserRole, detail: str = ErrorMessages.INSUFFICIENT_ROLE) -> Callable:
    """
    Factory to create role gate dependencies.

    Example:
        current_user: User = Depends(require_roles(UserRole.ADMIN))
    """
    allowed = {role.value for role in roles}

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return current_user

    return dependency

# Create specific dependencies
get_current_mentor = require_roles(UserRole.MENTOR, detail=ErrorMessages.NOT_A_MENTOR)
get_current_mentee = require_roles(UserRole.MENTEE, detail=ErrorMessages.NOT_A_MENTEE)
get_current_participant = require_roles(UserRole.MENTOR, UserRole.MENTEE)
get_current_admin = require_roles(UserRole.ADMIN)
get_current_hod = require_roles(UserRole.HOD)
get_current_dean = require_roles(UserRole.DEAN)
