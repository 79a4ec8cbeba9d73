# mentor_portal/utils/validation_utils.py
from sqlalchemy.orm import Session
from ..models import User, Profile, MentorshipRequest, ActiveMentorship, MenteeQuery, RequestStatus, UserRole
from ..config import get_settings
from ..constants import ErrorMessages
from ..exceptions import InvalidStatusTransitionError, DuplicateRequestError, NotFoundError

class ValidationUtils:
    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()

    def get_user_or_404(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError(ErrorMessages.USER_NOT_FOUND)
        return user

    def get_mentor_or_404(self, mentor_id: int) -> User:
        profile = self.db.query(Profile).filter(
            Profile.user_id == mentor_id,
            Profile.role == UserRole.MENTOR.value
        ).first()
        if not profile:
            raise NotFoundError(ErrorMessages.MENTOR_NOT_FOUND)
        return profile.user

    def get_request_for_mentor_or_404(self, request_id: int, mentor_id: int) -> MentorshipRequest:
        request = self.db.query(MentorshipRequest).filter(
            MentorshipRequest.id == request_id,
            MentorshipRequest.mentor_id == mentor_id
        ).first()
        if not request:
            raise NotFoundError(ErrorMessages.REQUEST_NOT_FOUND)
        return request

    def get_mentorship_for_party_or_404(self, mentorship_id: int, user_id: int) -> ActiveMentorship:
        mentorship = self.db.query(ActiveMentorship).filter(ActiveMentorship.id == mentorship_id).first()
        if not mentorship or user_id not in (mentorship.mentor_id, mentorship.mentee_id):
            raise NotFoundError(ErrorMessages.MENTORSHIP_NOT_FOUND)
        return mentorship

    def get_query_for_mentor_or_404(self, query_id: int, mentor_id: int) -> MenteeQuery:
        query = self.db.query(MenteeQuery).filter(
            MenteeQuery.id == query_id,
            MenteeQuery.mentor_id == mentor_id
        ).first()
        if not query:
            raise NotFoundError("Query not found")
        return query

    def get_query_for_mentee_or_404(self, query_id: int, mentee_id: int) -> MenteeQuery:
        query = self.db.query(MenteeQuery).filter(
            MenteeQuery.id == query_id,
            MenteeQuery.mentee_id == mentee_id
        ).first()
        if not query:
            raise NotFoundError("Query not found")
        return query

    def check_no_existing_request(self, mentee_id: int, mentor_id: int):
        # Rejected requests also count: there is no re-request path
        existing = self.db.query(MentorshipRequest.id).filter(
            MentorshipRequest.mentee_id == mentee_id,
            MentorshipRequest.mentor_id == mentor_id
        ).first()

        if existing:
            raise DuplicateRequestError(ErrorMessages.DUPLICATE_REQUEST)

    def validate_request_status(self, request: MentorshipRequest, expected_status: RequestStatus):
        if request.status != expected_status.value:
            raise InvalidStatusTransitionError(f"Request is not {expected_status.value} (current: {request.status})")
