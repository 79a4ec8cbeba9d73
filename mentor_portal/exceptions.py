# mentor_portal/exceptions.py
from fastapi import HTTPException, status


class BusinessLogicError(Exception):
    """Base exception for business logic errors"""
    pass

class NotFoundError(BusinessLogicError):
    """Raised when a resource is not found"""
    pass

class UnauthorizedError(BusinessLogicError):
    """Raised when user lacks authorization"""
    pass

class CapacityExceededError(BusinessLogicError):
    """Raised when a mentor has no free mentee slots"""
    pass

class MentorUnavailableError(BusinessLogicError):
    """Raised when a mentor has switched availability off"""
    pass

class InvalidStatusTransitionError(BusinessLogicError):
    """Raised when invalid status transition is attempted"""
    pass

class DuplicateRequestError(BusinessLogicError):
    """Raised when duplicate request is attempted"""
    pass

class FeedbackDeliveryError(BusinessLogicError):
    """Raised when the feedback webhook cannot be reached or answers with an error"""
    pass


_STATUS_CODES = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    UnauthorizedError: status.HTTP_403_FORBIDDEN,
    DuplicateRequestError: status.HTTP_409_CONFLICT,
}

def to_http_exception(error: BusinessLogicError) -> HTTPException:
    """Maps a domain error onto an HTTPException carrying the raw message."""
    for error_class, status_code in _STATUS_CODES.items():
        if isinstance(error, error_class):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
