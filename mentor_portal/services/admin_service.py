# mentor_portal/services/admin_service.py
import logging
from typing import Dict, Any, List, Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from ..models import (
    User, Profile, UserRoleAssignment, MentorProfile, MenteeProfile,
    MentorshipRequest, ActiveMentorship, MenteeQuery, Feedback, UserRole, utcnow,
)
from ..config import get_settings
from ..constants import ErrorMessages
from ..core.storage import AvatarStorage
from ..exceptions import BusinessLogicError, DuplicateRequestError
from ..utils.validation_utils import ValidationUtils
from .capacity_service import CapacityLedger
from .identity_service import IdentityService

logger = logging.getLogger(__name__)


class AdminService:
    """User management for admins and the read-only HOD / Dean overviews."""

    def __init__(self, db: Session, storage: Optional[AvatarStorage] = None):
        self.db = db
        self.settings = get_settings()
        self.storage = storage or AvatarStorage()
        self.identity = IdentityService(db, self.storage)
        self.validator = ValidationUtils(db)
        self.ledger = CapacityLedger(db)

    def list_users(self, role: Optional[UserRole] = None, search: Optional[str] = None) -> List[Dict[str, Any]]:
        query = self.db.query(Profile)
        if role is not None:
            query = query.filter(Profile.role == role.value)
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(or_(
                func.lower(Profile.full_name).like(pattern),
                func.lower(Profile.email).like(pattern),
            ))
        return [self._summary(profile) for profile in query.order_by(Profile.created_at.desc(), Profile.id.desc()).all()]

    def summarise(self, user_id: int) -> Dict[str, Any]:
        user = self.validator.get_user_or_404(user_id)
        return self._summary(self.identity.get_profile(user))

    def create_user(self, email: str, password: str, full_name: str, role: UserRole) -> User:
        """Admins may create principals of any role, including admin, hod and dean"""
        user = self.identity.register(email, password, full_name, role, allow_any_role=True)
        self._ensure_role_profile(user.id, role)
        self.db.commit()
        return user

    def update_user(self, user_id: int, full_name: Optional[str] = None, email: Optional[str] = None) -> Profile:
        user = self.validator.get_user_or_404(user_id)
        profile = self.identity.get_profile(user)
        if email:
            email = email.lower()
            taken = self.db.query(User.id).filter(User.email == email, User.id != user_id).first()
            if taken:
                raise DuplicateRequestError(ErrorMessages.EMAIL_TAKEN)
        try:
            if full_name:
                profile.full_name = full_name
            if email:
                profile.email = email
                user.email = email
            self.db.commit()
            self.db.refresh(profile)
            logger.info(f"User {user_id} updated by admin")
            return profile
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error updating user {user_id}: {e}")
            raise BusinessLogicError("Failed to update user")

    def change_role(self, user_id: int, new_role: UserRole, actor_id: Optional[int] = None) -> Profile:
        """
        Moves a principal to a new role. profiles.role and user_roles.role are
        written together; the role-specific profile row follows the role.
        """
        if actor_id is not None and actor_id == user_id:
            raise BusinessLogicError("You cannot change your own role")
        user = self.validator.get_user_or_404(user_id)
        profile = self.identity.get_profile(user)
        old_role = profile.role
        try:
            if new_role != UserRole.MENTOR:
                self._end_live_mentorships(ActiveMentorship.mentor_id == user_id)
            if new_role != UserRole.MENTEE:
                self._end_live_mentorships(ActiveMentorship.mentee_id == user_id)
            profile.role = new_role.value
            if user.role_assignment is None:
                self.db.add(UserRoleAssignment(user_id=user_id, role=new_role.value))
            else:
                user.role_assignment.role = new_role.value
            self._ensure_role_profile(user_id, new_role)
            self.db.commit()
            self.db.refresh(profile)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error changing role of user {user_id}: {e}")
            raise BusinessLogicError("Failed to update role")
        logger.info(f"User {user_id} role changed from {old_role} to {new_role.value}")
        return profile

    def delete_user(self, user_id: int, actor_id: Optional[int] = None) -> None:
        """Removes the principal and every row that references it in one transaction"""
        if actor_id is not None and actor_id == user_id:
            raise BusinessLogicError("You cannot delete your own account")
        self.validator.get_user_or_404(user_id)
        try:
            party = or_(ActiveMentorship.mentor_id == user_id, ActiveMentorship.mentee_id == user_id)
            self._end_live_mentorships(party)
            self.db.query(ActiveMentorship).filter(party).delete(synchronize_session=False)
            self.db.query(MentorshipRequest).filter(
                or_(MentorshipRequest.mentor_id == user_id, MentorshipRequest.mentee_id == user_id)
            ).delete(synchronize_session=False)
            self.db.query(MenteeQuery).filter(
                or_(MenteeQuery.mentor_id == user_id, MenteeQuery.mentee_id == user_id)
            ).delete(synchronize_session=False)
            self.db.query(Feedback).filter(Feedback.user_id == user_id).update(
                {Feedback.user_id: None}, synchronize_session=False
            )
            for model in (MentorProfile, MenteeProfile, UserRoleAssignment, Profile):
                self.db.query(model).filter(model.user_id == user_id).delete(synchronize_session=False)
            self.db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error deleting user {user_id}: {e}")
            raise BusinessLogicError("Failed to delete user")
        self.db.expire_all()
        self.storage.delete(user_id)
        logger.info(f"User {user_id} deleted")

    def hod_overview(self) -> Dict[str, Any]:
        mentors = self.list_users(UserRole.MENTOR)
        mentees = self.list_users(UserRole.MENTEE)
        return {
            "mentors": mentors,
            "mentees": mentees,
            "stats": {
                "total_mentors": len(mentors),
                "total_mentees": len(mentees),
                "total_requests": self.db.query(func.count(MentorshipRequest.id)).scalar() or 0,
                "total_queries": self.db.query(func.count(MenteeQuery.id)).scalar() or 0,
            },
        }

    def dean_overview(self) -> Dict[str, Any]:
        hods = self.list_users(UserRole.HOD)
        mentors = self.list_users(UserRole.MENTOR)
        mentees = self.list_users(UserRole.MENTEE)
        return {
            "hods": hods,
            "mentors": mentors,
            "mentees": mentees,
            "stats": {
                "total_hods": len(hods),
                "total_mentors": len(mentors),
                "total_mentees": len(mentees),
                "total_requests": self.db.query(func.count(MentorshipRequest.id)).scalar() or 0,
            },
        }

    def _end_live_mentorships(self, condition) -> None:
        """Ends the matching live mentorships and frees their slots; the caller commits"""
        live = self.db.query(ActiveMentorship).filter(condition, ActiveMentorship.ended_at.is_(None)).all()
        for mentorship in live:
            mentorship.ended_at = utcnow()
            self.ledger.release_slot(mentorship.mentor_id)
        if live:
            self.db.flush()
            logger.info(f"Ended {len(live)} live mentorship(s): {[m.id for m in live]}")

    def _ensure_role_profile(self, user_id: int, role: UserRole):
        """Keeps exactly the role-specific profile row that matches the role"""
        if role != UserRole.MENTOR:
            self.db.query(MentorProfile).filter(MentorProfile.user_id == user_id).delete(synchronize_session=False)
        if role != UserRole.MENTEE:
            self.db.query(MenteeProfile).filter(MenteeProfile.user_id == user_id).delete(synchronize_session=False)

        if role == UserRole.MENTOR and not self.db.query(MentorProfile.id).filter(MentorProfile.user_id == user_id).first():
            self.db.add(MentorProfile(user_id=user_id, max_mentees=self.settings.DEFAULT_MAX_MENTEES))
        elif role == UserRole.MENTEE and not self.db.query(MenteeProfile.id).filter(MenteeProfile.user_id == user_id).first():
            self.db.add(MenteeProfile(user_id=user_id))

    @staticmethod
    def _summary(profile: Profile) -> Dict[str, Any]:
        return {
            "user_id": profile.user_id,
            "full_name": profile.full_name,
            "email": profile.email,
            "avatar_url": profile.avatar_url,
            "role": profile.role,
            "created_at": profile.created_at,
        }
