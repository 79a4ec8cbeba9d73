# mentor_portal/services/notification_service.py
import logging
from typing import Callable, Dict, Any, List, Optional
from sqlalchemy.orm import Session, joinedload

from ..models import User, Profile, MentorshipRequest, RequestStatus, UserRole
from ..constants import ErrorMessages
from ..core.change_feed import ChangeFeed, ChangeEvent, ChangeType, Subscription
from ..exceptions import UnauthorizedError
from ..utils.response_enricher import display_name, avatar_url

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, db: Session):
        self.db = db

    def get_feed(self, user: User) -> Dict[str, Any]:
        """Re-reads the viewer's requests and buckets them by status"""
        if user.role == UserRole.MENTEE.value:
            own_column, counterpart_attr = MentorshipRequest.mentee_id, "mentor"
        elif user.role == UserRole.MENTOR.value:
            own_column, counterpart_attr = MentorshipRequest.mentor_id, "mentee"
        else:
            raise UnauthorizedError(ErrorMessages.INSUFFICIENT_ROLE)

        requests = self.db.query(MentorshipRequest).options(
            joinedload(getattr(MentorshipRequest, counterpart_attr)).joinedload(User.profile)
        ).filter(own_column == user.id).order_by(
            MentorshipRequest.created_at.desc(), MentorshipRequest.id.desc()
        ).all()

        notifications = []
        counts = {status.value: 0 for status in RequestStatus}
        for req in requests:
            counterpart = getattr(req, counterpart_attr)
            name = display_name(counterpart)
            counts[req.status] += 1
            notifications.append({
                "id": req.id,
                "type": req.status,
                "message": f"Request to {name}" if counterpart_attr == "mentor" else f"Request from {name}",
                "mentor_name": name if counterpart_attr == "mentor" else None,
                "mentee_name": name if counterpart_attr == "mentee" else None,
                "avatar_url": avatar_url(counterpart),
                "created_at": req.created_at,
            })
        return {"notifications": notifications, "counts": counts}

    def describe_change(self, event: ChangeEvent) -> Optional[Dict[str, Any]]:
        """Turns a raw change event into the message pushed to the client, re-querying names"""
        if event.table == "mentorship_requests" and event.change_type == ChangeType.INSERT:
            name = self._full_name(event.record.get("mentee_id")) or "A student"
            return {
                "type": "new_request",
                "request_id": event.record.get("id"),
                "title": "New Mentorship Request!",
                "description": f"{name} has sent you a mentorship request.",
            }
        if event.table == "mentee_queries" and event.change_type == ChangeType.UPDATE and event.record.get("replied"):
            name = self._full_name(event.record.get("mentor_id")) or "Your mentor"
            return {
                "type": "query_reply",
                "query_id": event.record.get("id"),
                "title": "New reply to your query",
                "description": f"{name} replied to your query.",
            }
        return None

    @staticmethod
    def subscribe(change_feed: ChangeFeed, user: User, callback: Callable[[ChangeEvent], None]) -> List[Subscription]:
        """
        Mentors are told about new requests addressed to them; mentees about
        replies to their queries. Mentees get no push for request status changes.
        """
        if user.role == UserRole.MENTOR.value:
            return [change_feed.subscribe(
                "mentorship_requests", callback, change_types=(ChangeType.INSERT,), mentor_id=user.id
            )]
        if user.role == UserRole.MENTEE.value:
            return [change_feed.subscribe(
                "mentee_queries", callback, change_types=(ChangeType.UPDATE,), mentee_id=user.id
            )]
        return []

    def _full_name(self, user_id: Optional[int]) -> Optional[str]:
        if user_id is None:
            return None
        row = self.db.query(Profile.full_name).filter(Profile.user_id == user_id).first()
        return row[0] if row else None
