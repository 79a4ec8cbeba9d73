# mentor_portal/services/identity_service.py
import logging
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..models import User, Profile, UserRoleAssignment, UserRole
from ..security import get_password_hash
from ..constants import ErrorMessages, ROLE_DASHBOARDS
from ..core.storage import AvatarStorage
from ..exceptions import BusinessLogicError, DuplicateRequestError, UnauthorizedError

logger = logging.getLogger(__name__)

SELF_SIGNUP_ROLES = {UserRole.MENTEE, UserRole.MENTOR}

class IdentityService:
    def __init__(self, db: Session, storage: Optional[AvatarStorage] = None):
        self.db = db
        self.storage = storage or AvatarStorage()

    def register(self, email: str, password: str, full_name: str, role: UserRole = UserRole.MENTEE,
                 allow_any_role: bool = False) -> User:
        """Creates the credentials, display profile and role row for a new principal"""
        if not allow_any_role and role not in SELF_SIGNUP_ROLES:
            raise UnauthorizedError(ErrorMessages.SELF_SIGNUP_ROLE)

        email = email.lower()
        if self.db.query(User.id).filter(User.email == email).first():
            raise DuplicateRequestError(ErrorMessages.EMAIL_TAKEN)

        try:
            user = User(email=email, hashed_password=get_password_hash(password))
            self.db.add(user)
            self.db.flush()
            self.db.add(Profile(user_id=user.id, full_name=full_name, email=email, role=role.value))
            self.db.add(UserRoleAssignment(user_id=user.id, role=role.value))
            self.db.commit()
            self.db.refresh(user)
            logger.info(f"User {user.id} registered as {role.value}")
            return user
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Database integrity error registering {email}: {e}")
            raise DuplicateRequestError(ErrorMessages.EMAIL_TAKEN)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error registering {email}: {e}")
            raise BusinessLogicError("Database error occurred while creating the account")

    def get_profile(self, user: User) -> Profile:
        profile = user.profile
        if profile is None:
            # Accounts created before profiles existed get one on first read
            profile = Profile(user_id=user.id, email=user.email, role=user.role or UserRole.MENTEE.value)
            self.db.add(profile)
            self.db.commit()
            self.db.refresh(profile)
        return profile

    def describe(self, user: User) -> dict:
        """The /users/me payload, including where this role's dashboard lives"""
        profile = self.get_profile(user)
        role = user.role or profile.role
        return {
            "id": user.id,
            "email": user.email,
            "full_name": profile.full_name,
            "role": role,
            "avatar_url": profile.avatar_url,
            "dashboard_path": ROLE_DASHBOARDS[role],
        }

    def update_profile(self, user: User, full_name: str) -> Profile:
        profile = self.get_profile(user)
        try:
            profile.full_name = full_name
            self.db.commit()
            self.db.refresh(profile)
            return profile
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error updating profile for user {user.id}: {e}")
            raise BusinessLogicError("Database error occurred while updating profile")

    def upload_avatar(self, user: User, content: bytes, content_type: str) -> str:
        """Stores the image under the principal's id and records its public URL"""
        url = self.storage.save(user.id, content, content_type)
        profile = self.get_profile(user)
        try:
            profile.avatar_url = url
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error saving avatar URL for user {user.id}: {e}")
            raise BusinessLogicError("Database error occurred while saving avatar")
        return url
