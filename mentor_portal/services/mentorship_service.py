# mentor_portal/services/mentorship_service.py
import logging
from typing import Optional
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..models import User, MentorshipRequest, ActiveMentorship, RequestStatus, utcnow
from ..config import get_settings
from ..constants import ErrorMessages, BusinessRules
from ..core.change_feed import ChangeFeed, ChangeType
from ..exceptions import (
    BusinessLogicError, CapacityExceededError, MentorUnavailableError,
    InvalidStatusTransitionError, DuplicateRequestError,
)
from ..utils.validation_utils import ValidationUtils
from .capacity_service import CapacityLedger

logger = logging.getLogger(__name__)

_with_parties = (
    joinedload(MentorshipRequest.mentee).joinedload(User.profile),
    joinedload(MentorshipRequest.mentor).joinedload(User.profile),
)

def _clean_request_text(value: str, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise BusinessLogicError(f"{field} is required")
    if len(value) > BusinessRules.MAX_REQUEST_TEXT_LENGTH:
        raise BusinessLogicError(f"{field} must be at most {BusinessRules.MAX_REQUEST_TEXT_LENGTH} characters")
    return value


class MentorshipService:
    def __init__(self, db: Session, change_feed: Optional[ChangeFeed] = None):
        self.db = db
        self.settings = get_settings()
        self.validator = ValidationUtils(db)
        self.ledger = CapacityLedger(db)
        self.change_feed = change_feed

    def create_request(self, mentee_id: int, mentor_id: int, introduction: str, goals: str) -> MentorshipRequest:
        """Creates a pending mentorship request from a mentee to a mentor"""
        introduction = _clean_request_text(introduction, "Introduction")
        goals = _clean_request_text(goals, "Goals")

        self.validator.get_mentor_or_404(mentor_id)
        mentor_profile = self.ledger.get_or_create(mentor_id)
        if not mentor_profile.is_available:
            raise MentorUnavailableError(ErrorMessages.MENTOR_UNAVAILABLE)
        if not self.ledger.has_capacity(mentor_profile):
            raise CapacityExceededError(ErrorMessages.CAPACITY_EXCEEDED)
        self.validator.check_no_existing_request(mentee_id, mentor_id)

        request = MentorshipRequest(
            mentee_id=mentee_id,
            mentor_id=mentor_id,
            introduction=introduction,
            goals=goals,
            status=RequestStatus.PENDING.value,
        )
        try:
            self.db.add(request)
            self.db.commit()
            self.db.refresh(request)
        except IntegrityError as e:
            # A concurrent submission for the same pair won the race
            self.db.rollback()
            logger.info(f"Duplicate pending request mentee={mentee_id} mentor={mentor_id}: {e}")
            raise DuplicateRequestError(ErrorMessages.DUPLICATE_REQUEST)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error creating request mentee={mentee_id} mentor={mentor_id}: {e}")
            raise BusinessLogicError("Database error occurred while sending the request")

        logger.info(f"Request {request.id} created: mentee {mentee_id} -> mentor {mentor_id}")
        self._publish(ChangeType.INSERT, request)
        return request

    def accept_request(self, request_id: int, mentor_id: int) -> MentorshipRequest:
        """
        Accepts a pending request. The status change, the occupancy increment and
        the ActiveMentorship insert commit together or not at all.
        """
        request = self.validator.get_request_for_mentor_or_404(request_id, mentor_id)
        self.validator.validate_request_status(request, RequestStatus.PENDING)

        try:
            updated = self.db.query(MentorshipRequest).filter(
                MentorshipRequest.id == request_id,
                MentorshipRequest.status == RequestStatus.PENDING.value
            ).update(
                {MentorshipRequest.status: RequestStatus.ACCEPTED.value, MentorshipRequest.updated_at: utcnow()},
                synchronize_session=False
            )
            if updated != 1:
                raise InvalidStatusTransitionError("Request has already been processed")
            if not self.ledger.claim_slot(mentor_id):
                raise CapacityExceededError(ErrorMessages.CAPACITY_EXCEEDED)

            self.db.add(ActiveMentorship(
                mentor_id=mentor_id,
                mentee_id=request.mentee_id,
                request_id=request.id,
            ))
            self.db.commit()
        except (InvalidStatusTransitionError, CapacityExceededError):
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Integrity error accepting request {request_id}: {e}")
            raise DuplicateRequestError("An active mentorship already exists for this pair")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error accepting request {request_id}: {e}")
            raise BusinessLogicError("Database error occurred while accepting the request")

        self.db.refresh(request)
        logger.info(f"Request {request_id} accepted by mentor {mentor_id}")
        self._publish(ChangeType.UPDATE, request)
        return request

    def reject_request(self, request_id: int, mentor_id: int, rejection_message: Optional[str] = None) -> MentorshipRequest:
        """Rejects a pending request, optionally with a reason for the mentee"""
        request = self.validator.get_request_for_mentor_or_404(request_id, mentor_id)
        self.validator.validate_request_status(request, RequestStatus.PENDING)
        message = rejection_message.strip() if rejection_message and rejection_message.strip() else None

        try:
            updated = self.db.query(MentorshipRequest).filter(
                MentorshipRequest.id == request_id,
                MentorshipRequest.status == RequestStatus.PENDING.value
            ).update(
                {
                    MentorshipRequest.status: RequestStatus.REJECTED.value,
                    MentorshipRequest.rejection_message: message,
                    MentorshipRequest.updated_at: utcnow(),
                },
                synchronize_session=False
            )
            if updated != 1:
                raise InvalidStatusTransitionError("Request has already been processed")
            self.db.commit()
        except InvalidStatusTransitionError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error rejecting request {request_id}: {e}")
            raise BusinessLogicError("Database error occurred while rejecting the request")

        self.db.refresh(request)
        logger.info(f"Request {request_id} rejected by mentor {mentor_id}")
        self._publish(ChangeType.UPDATE, request)
        return request

    def end_mentorship(self, mentorship_id: int, actor_id: int) -> ActiveMentorship:
        """Ends a live mentorship and frees the mentor's slot"""
        mentorship = self.validator.get_mentorship_for_party_or_404(mentorship_id, actor_id)
        if mentorship.ended_at is not None:
            raise InvalidStatusTransitionError("Mentorship has already ended")

        try:
            updated = self.db.query(ActiveMentorship).filter(
                ActiveMentorship.id == mentorship_id,
                ActiveMentorship.ended_at.is_(None)
            ).update({ActiveMentorship.ended_at: utcnow()}, synchronize_session=False)
            if updated != 1:
                raise InvalidStatusTransitionError("Mentorship has already ended")
            self.ledger.release_slot(mentorship.mentor_id)
            self.db.commit()
        except InvalidStatusTransitionError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error ending mentorship {mentorship_id}: {e}")
            raise BusinessLogicError("Database error occurred while ending the mentorship")

        self.db.refresh(mentorship)
        logger.info(f"Mentorship {mentorship_id} ended by user {actor_id}")
        if self.change_feed is not None:
            self.change_feed.publish("active_mentorships", ChangeType.UPDATE, {
                "id": mentorship.id,
                "mentor_id": mentorship.mentor_id,
                "mentee_id": mentorship.mentee_id,
                "ended_at": mentorship.ended_at.isoformat(),
            })
        return mentorship

    def get_requests_for_mentor(self, mentor_id: int, status: Optional[RequestStatus] = None) -> list[MentorshipRequest]:
        """Get all requests for a mentor, newest first"""
        query = self.db.query(MentorshipRequest).options(
            *_with_parties,
            joinedload(MentorshipRequest.mentee).joinedload(User.mentee_profile),
        ).filter(MentorshipRequest.mentor_id == mentor_id)
        if status is not None:
            query = query.filter(MentorshipRequest.status == status.value)
        return query.order_by(MentorshipRequest.created_at.desc(), MentorshipRequest.id.desc()).all()

    def get_requests_for_mentee(self, mentee_id: int, status: Optional[RequestStatus] = None) -> list[MentorshipRequest]:
        """Get all requests for a mentee, newest first"""
        query = self.db.query(MentorshipRequest).options(*_with_parties).filter(
            MentorshipRequest.mentee_id == mentee_id
        )
        if status is not None:
            query = query.filter(MentorshipRequest.status == status.value)
        return query.order_by(MentorshipRequest.created_at.desc(), MentorshipRequest.id.desc()).all()

    def get_mentors_for_mentee(self, mentee_id: int) -> list[ActiveMentorship]:
        """The mentee's live mentorships ("my mentor")"""
        return self.db.query(ActiveMentorship).options(
            joinedload(ActiveMentorship.mentor).joinedload(User.profile),
            joinedload(ActiveMentorship.mentor).joinedload(User.mentor_profile),
        ).filter(
            ActiveMentorship.mentee_id == mentee_id,
            ActiveMentorship.ended_at.is_(None)
        ).order_by(ActiveMentorship.started_at.desc()).all()

    def get_mentees_for_mentor(self, mentor_id: int) -> list[ActiveMentorship]:
        """The mentor's live mentorships ("my mentees")"""
        return self.db.query(ActiveMentorship).options(
            joinedload(ActiveMentorship.mentee).joinedload(User.profile),
            joinedload(ActiveMentorship.mentee).joinedload(User.mentee_profile),
        ).filter(
            ActiveMentorship.mentor_id == mentor_id,
            ActiveMentorship.ended_at.is_(None)
        ).order_by(ActiveMentorship.started_at.desc()).all()

    def _publish(self, change_type: ChangeType, request: MentorshipRequest):
        if self.change_feed is None:
            return
        self.change_feed.publish("mentorship_requests", change_type, {
            "id": request.id,
            "mentee_id": request.mentee_id,
            "mentor_id": request.mentor_id,
            "status": request.status,
        })
