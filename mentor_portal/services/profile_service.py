# mentor_portal/services/profile_service.py
import logging
from typing import Dict, Any, List, Optional
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import SQLAlchemyError

from ..models import User, Profile, MentorProfile, MenteeProfile, MentorshipRequest, ActiveMentorship, MentorType, RequestStatus, UserRole
from ..config import get_settings
from ..constants import ErrorMessages
from ..exceptions import BusinessLogicError, NotFoundError
from .capacity_service import CapacityLedger

logger = logging.getLogger(__name__)

MENTOR_FIELDS = ("mentor_type", "bio", "experience", "expertise", "areas_of_guidance", "is_available", "max_mentees")
MENTEE_FIELDS = ("course", "specialisation", "year", "semester", "section", "interests", "career_goals")


class ProfileService:
    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()
        self.ledger = CapacityLedger(db)

    def get_mentor_profile(self, user_id: int) -> MentorProfile:
        return self.ledger.get_or_create(user_id)

    def get_mentee_profile(self, user_id: int) -> MenteeProfile:
        """Mentee profiles are created lazily, on first dashboard visit"""
        profile = self.db.query(MenteeProfile).filter(MenteeProfile.user_id == user_id).first()
        if profile is None:
            try:
                profile = MenteeProfile(user_id=user_id)
                self.db.add(profile)
                self.db.commit()
                self.db.refresh(profile)
                logger.info(f"Created mentee profile for user {user_id}")
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Database error creating mentee profile for user {user_id}: {e}")
                raise BusinessLogicError("Database error occurred while creating mentee profile")
        return profile

    def update_mentor_profile(self, user: User, data: Dict[str, Any]) -> MentorProfile:
        """Upserts the mentor profile; only fields present in data are touched"""
        if data.get("max_mentees") is not None:
            self.ledger.validate_max_capacity(data["max_mentees"])
        profile = self.get_mentor_profile(user.id)
        try:
            self._apply_full_name(user, data)
            for key in MENTOR_FIELDS:
                if key in data and data[key] is not None:
                    setattr(profile, key, self._process_field_value(key, data[key]))
            self.db.commit()
            self.db.refresh(profile)
            logger.info(f"Mentor profile of user {user.id} updated")
            return profile
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error updating mentor profile of user {user.id}: {e}")
            raise BusinessLogicError("Failed to save profile")

    def update_mentee_profile(self, user: User, data: Dict[str, Any]) -> MenteeProfile:
        profile = self.get_mentee_profile(user.id)
        try:
            self._apply_full_name(user, data)
            for key in MENTEE_FIELDS:
                if key in data and data[key] is not None:
                    setattr(profile, key, self._process_field_value(key, data[key]))
            self.db.commit()
            self.db.refresh(profile)
            logger.info(f"Mentee profile of user {user.id} updated")
            return profile
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error updating mentee profile of user {user.id}: {e}")
            raise BusinessLogicError("Failed to save profile")

    def browse_mentors(
        self,
        viewer_id: Optional[int] = None,
        search: Optional[str] = None,
        mentor_type: Optional[MentorType] = None,
        available_only: bool = False,
    ) -> List[Dict[str, Any]]:
        """Mentor cards for the find-a-mentor page, with per-viewer request flags"""
        mentors = self.db.query(Profile).options(
            joinedload(Profile.user).joinedload(User.mentor_profile)
        ).filter(Profile.role == UserRole.MENTOR.value).order_by(Profile.full_name, Profile.user_id).all()

        connected_ids, requested_ids, pending_ids = set(), set(), set()
        if viewer_id is not None:
            connected_ids = {row[0] for row in self.db.query(ActiveMentorship.mentor_id).filter(
                ActiveMentorship.mentee_id == viewer_id,
                ActiveMentorship.ended_at.is_(None)
            )}
            for mentor_id, status in self.db.query(MentorshipRequest.mentor_id, MentorshipRequest.status).filter(
                MentorshipRequest.mentee_id == viewer_id
            ):
                requested_ids.add(mentor_id)
                if status == RequestStatus.PENDING.value:
                    pending_ids.add(mentor_id)

        cards = []
        for profile in mentors:
            card = self._mentor_card(profile, profile.user.mentor_profile if profile.user else None)
            if mentor_type is not None and card["mentor_type"] != mentor_type.value:
                continue
            if available_only and not card["is_available"]:
                continue
            if search and not self._matches(card, search):
                continue
            mentor_id = profile.user_id
            card["is_connected"] = mentor_id in connected_ids
            card["has_pending_request"] = mentor_id in pending_ids
            card["can_request"] = (
                viewer_id is not None
                and card["is_available"]
                and card["current_mentees"] < card["max_mentees"]
                and mentor_id not in connected_ids
                and mentor_id not in requested_ids
            )
            cards.append(card)
        return cards

    def get_mentor_card(self, mentor_id: int, viewer_id: Optional[int] = None) -> Dict[str, Any]:
        for card in self.browse_mentors(viewer_id=viewer_id):
            if card["user_id"] == mentor_id:
                return card
        raise NotFoundError(ErrorMessages.MENTOR_NOT_FOUND)

    def _apply_full_name(self, user: User, data: Dict[str, Any]):
        if data.get("full_name") and user.profile is not None:
            user.profile.full_name = data["full_name"]

    def _mentor_card(self, profile: Profile, mentor: Optional[MentorProfile]) -> Dict[str, Any]:
        """Mentors who never opened their profile page are shown with the defaults"""
        card = {
            "user_id": profile.user_id,
            "full_name": profile.full_name,
            "email": profile.email,
            "avatar_url": profile.avatar_url,
            "mentor_type": MentorType.SENIOR.value,
            "bio": None,
            "experience": None,
            "expertise": [],
            "areas_of_guidance": [],
            "is_available": True,
            "max_mentees": self.settings.DEFAULT_MAX_MENTEES,
            "current_mentees": 0,
        }
        if mentor is not None:
            card.update({
                "mentor_type": mentor.mentor_type,
                "bio": mentor.bio,
                "experience": mentor.experience,
                "expertise": mentor.expertise or [],
                "areas_of_guidance": mentor.areas_of_guidance or [],
                "is_available": mentor.is_available,
                "max_mentees": mentor.max_mentees,
                "current_mentees": mentor.current_mentees or 0,
            })
        return card

    @staticmethod
    def _matches(card: Dict[str, Any], search: str) -> bool:
        needle = search.strip().lower()
        haystack = [card["full_name"] or "", card["bio"] or ""] + card["expertise"] + card["areas_of_guidance"]
        return any(needle in item.lower() for item in haystack)

    def _process_field_value(self, key: str, value: Any) -> Any:
        """Processes field values based on their type"""
        if hasattr(value, "value"):  # enums are stored as their string value
            return value.value
        return value
