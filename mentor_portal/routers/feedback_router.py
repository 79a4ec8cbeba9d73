# mentor_portal/routers/feedback_router.py
from fastapi import APIRouter, Depends

from ..services import FeedbackService
from ..dependencies.service_dependencies import get_feedback_service
from ..schemas import FeedbackCreate, FeedbackResponse
from ..models import User
from ..security import get_current_user
from ..exceptions import BusinessLogicError, to_http_exception

router = APIRouter(prefix="/api", tags=["feedback"])

@router.post("/feedback", response_model=FeedbackResponse, status_code=201)
async def submit_feedback(
    feedback_data: FeedbackCreate,
    current_user: User = Depends(get_current_user),
    feedback_service: FeedbackService = Depends(get_feedback_service)
):
    """Rate the portal; the reply carries the feedback service's confirmation"""
    try:
        feedback = feedback_service.submit_feedback(feedback_data.rating, feedback_data.feedback, current_user.id)
        return {"success": True, "message": feedback.confirmation, "feedback_id": feedback.id}
    except BusinessLogicError as e:
        raise to_http_exception(e)
