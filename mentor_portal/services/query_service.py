# mentor_portal/services/query_service.py
import logging
from datetime import timedelta, timezone
from typing import Dict, Any, Optional
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from pydantic import ValidationError

from ..models import User, MenteeQuery, new_share_token, utcnow
from ..config import get_settings
from ..constants import ErrorMessages, BusinessRules
from ..core.change_feed import ChangeFeed, ChangeType
from ..exceptions import BusinessLogicError, NotFoundError
from ..schemas import MenteeQueryCreate
from ..utils.validation_utils import ValidationUtils

logger = logging.getLogger(__name__)

QUERY_FIELDS = (
    "full_name", "course_program_year", "university_name", "email",
    "mentorship_type", "domain_guidance", "query_description",
    "expected_outcome", "mentorship_duration", "why_this_mentor",
)

_with_parties = (
    joinedload(MenteeQuery.mentee).joinedload(User.profile),
    joinedload(MenteeQuery.mentor).joinedload(User.profile),
)


class QueryService:
    def __init__(self, db: Session, change_feed: Optional[ChangeFeed] = None):
        self.db = db
        self.settings = get_settings()
        self.validator = ValidationUtils(db)
        self.change_feed = change_feed

    def submit_query(self, mentee_id: int, mentor_id: int, form: Dict[str, Any]) -> MenteeQuery:
        """Stores a structured query; the share token comes from the column default"""
        self.validator.get_mentor_or_404(mentor_id)

        try:
            data = MenteeQueryCreate.model_validate({**form, "mentor_id": mentor_id})
        except ValidationError as e:
            error = e.errors()[0]
            raise BusinessLogicError(f"Invalid {error['loc'][-1]}: {error['msg']}")
        values = data.model_dump(mode="json", include=set(QUERY_FIELDS))

        query = MenteeQuery(mentee_id=mentee_id, mentor_id=mentor_id, **values)
        try:
            self.db.add(query)
            self.db.commit()
            self.db.refresh(query)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error submitting query mentee={mentee_id} mentor={mentor_id}: {e}")
            raise BusinessLogicError("Failed to submit query. Please try again.")

        logger.info(f"Query {query.id} submitted: mentee {mentee_id} -> mentor {mentor_id}")
        self._publish(ChangeType.INSERT, query)
        return query

    def reply_to_query(self, query_id: int, mentor_id: int, reply_text: str) -> MenteeQuery:
        """Sets the mentor's reply, replacing any earlier one"""
        reply_text = (reply_text or "").strip()
        if not reply_text:
            raise BusinessLogicError("Your reply cannot be empty.")
        if len(reply_text) > BusinessRules.MAX_REPLY_LENGTH:
            raise BusinessLogicError(f"Reply must be at most {BusinessRules.MAX_REPLY_LENGTH} characters")

        query = self.validator.get_query_for_mentor_or_404(query_id, mentor_id)
        try:
            query.mentor_reply = reply_text
            query.replied_at = utcnow()
            self.db.commit()
            self.db.refresh(query)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error replying to query {query_id}: {e}")
            raise BusinessLogicError("Failed to send reply")

        logger.info(f"Mentor {mentor_id} replied to query {query_id}")
        self._publish(ChangeType.UPDATE, query)
        return query

    def view_by_token(self, token: str) -> MenteeQuery:
        """
        Anonymous read behind a share link. Unknown, rotated and expired tokens
        all produce the same NotFoundError.
        """
        query = None
        if token:
            query = self.db.query(MenteeQuery).options(*_with_parties).filter(
                MenteeQuery.share_token == token
            ).first()
        if query is None or self._is_expired(query):
            raise NotFoundError(ErrorMessages.QUERY_NOT_FOUND)
        return query

    def rotate_share_token(self, query_id: int, mentee_id: int) -> MenteeQuery:
        """Revokes the current share link by issuing a fresh token"""
        query = self.validator.get_query_for_mentee_or_404(query_id, mentee_id)
        try:
            query.share_token = new_share_token()
            query.share_token_issued_at = utcnow()
            self.db.commit()
            self.db.refresh(query)
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Share token collision rotating query {query_id}: {e}")
            raise BusinessLogicError("Could not issue a new link, please retry")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error rotating token for query {query_id}: {e}")
            raise BusinessLogicError("Database error occurred while issuing a new link")
        logger.info(f"Share token rotated for query {query_id}")
        return query

    def get_queries_for_mentee(self, mentee_id: int) -> list[MenteeQuery]:
        return self.db.query(MenteeQuery).options(*_with_parties).filter(
            MenteeQuery.mentee_id == mentee_id
        ).order_by(MenteeQuery.created_at.desc(), MenteeQuery.id.desc()).all()

    def get_queries_for_mentor(self, mentor_id: int) -> list[MenteeQuery]:
        return self.db.query(MenteeQuery).options(*_with_parties).filter(
            MenteeQuery.mentor_id == mentor_id
        ).order_by(MenteeQuery.created_at.desc(), MenteeQuery.id.desc()).all()

    def _is_expired(self, query: MenteeQuery) -> bool:
        ttl_days = self.settings.QUERY_SHARE_TTL_DAYS
        if not ttl_days:
            return False
        issued_at = query.share_token_issued_at
        if issued_at.tzinfo is None:
            # SQLite hands back naive datetimes
            issued_at = issued_at.replace(tzinfo=timezone.utc)
        return issued_at + timedelta(days=ttl_days) < utcnow()

    def _publish(self, change_type: ChangeType, query: MenteeQuery):
        if self.change_feed is None:
            return
        self.change_feed.publish("mentee_queries", change_type, {
            "id": query.id,
            "mentee_id": query.mentee_id,
            "mentor_id": query.mentor_id,
            "replied": query.mentor_reply is not None,
        })
