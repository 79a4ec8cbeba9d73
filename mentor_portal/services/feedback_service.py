# mentor_portal/services/feedback_service.py
import logging
from typing import Optional
import httpx
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from ..models import Feedback
from ..config import get_settings
from ..exceptions import BusinessLogicError, FeedbackDeliveryError

logger = logging.getLogger(__name__)

DEFAULT_CONFIRMATION = "Thank you for your valuable feedback!"

class FeedbackService:
    def __init__(self, db: Session, transport: Optional[httpx.BaseTransport] = None):
        self.db = db
        self.settings = get_settings()
        # Tests swap in an httpx.MockTransport here
        self.transport = transport

    def submit_feedback(self, rating: int, comment: str, current_user_id: Optional[int] = None) -> Feedback:
        """Stores the feedback, then forwards it to the webhook for a confirmation message"""
        comment = (comment or "").strip()
        feedback = Feedback(user_id=current_user_id, rating=rating, comment=comment or None)
        try:
            self.db.add(feedback)
            self.db.commit()
            self.db.refresh(feedback)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error storing feedback from user {current_user_id}: {e}")
            raise BusinessLogicError("Database error occurred while saving feedback")
        logger.info(f"Feedback {feedback.id} stored (rating {rating})")

        confirmation = self._forward(rating, comment)
        try:
            feedback.confirmation = confirmation
            self.db.commit()
            self.db.refresh(feedback)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error saving confirmation for feedback {feedback.id}: {e}")
            raise BusinessLogicError("Database error occurred while saving feedback")
        return feedback

    def _forward(self, rating: int, comment: str) -> str:
        url = self.settings.FEEDBACK_WEBHOOK_URL
        if not url:
            return DEFAULT_CONFIRMATION
        try:
            with httpx.Client(transport=self.transport, timeout=self.settings.FEEDBACK_WEBHOOK_TIMEOUT) as client:
                response = client.post(url, json={"rating": rating, "feedback": comment})
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Feedback webhook answered {e.response.status_code}")
            raise FeedbackDeliveryError(f"Feedback service returned {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.error(f"Feedback webhook unreachable: {e}")
            raise FeedbackDeliveryError("Failed to send feedback. Please try again.")
        except ValueError:
            # Non-JSON body; the feedback still went through
            return DEFAULT_CONFIRMATION
        if isinstance(body, dict) and body.get("message"):
            return body["message"]
        return DEFAULT_CONFIRMATION
