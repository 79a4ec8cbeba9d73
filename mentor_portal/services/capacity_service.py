# mentor_portal/services/capacity_service.py
import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from ..models import MentorProfile
from ..config import get_settings
from ..exceptions import BusinessLogicError

logger = logging.getLogger(__name__)

class CapacityLedger:
    """Availability flag, max capacity and occupancy counter of each mentor."""

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()

    def get_or_create(self, mentor_id: int, commit: bool = True) -> MentorProfile:
        """Mentor profiles are created lazily, on first read"""
        profile = self.db.query(MentorProfile).filter(MentorProfile.user_id == mentor_id).first()
        if profile is None:
            profile = MentorProfile(
                user_id=mentor_id,
                max_mentees=self.settings.DEFAULT_MAX_MENTEES,
                current_mentees=0,
                is_available=True,
            )
            self.db.add(profile)
            if commit:
                self.db.commit()
                self.db.refresh(profile)
            else:
                self.db.flush()
            logger.info(f"Created mentor profile for user {mentor_id}")
        return profile

    @staticmethod
    def has_capacity(profile: MentorProfile) -> bool:
        return (profile.current_mentees or 0) < profile.max_mentees

    def validate_max_capacity(self, max_mentees: int):
        if not self.settings.MIN_MAX_MENTEES <= max_mentees <= self.settings.MAX_MAX_MENTEES:
            raise BusinessLogicError(
                f"Maximum mentees must be between {self.settings.MIN_MAX_MENTEES} and {self.settings.MAX_MAX_MENTEES}"
            )

    def set_availability(self, mentor_id: int, is_available: bool) -> MentorProfile:
        profile = self.get_or_create(mentor_id)
        try:
            profile.is_available = is_available
            self.db.commit()
            self.db.refresh(profile)
            logger.info(f"Mentor {mentor_id} availability set to {is_available}")
            return profile
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error setting availability for mentor {mentor_id}: {e}")
            raise BusinessLogicError("Database error occurred while updating availability")

    def set_max_capacity(self, mentor_id: int, max_mentees: int) -> MentorProfile:
        self.validate_max_capacity(max_mentees)
        profile = self.get_or_create(mentor_id)
        try:
            profile.max_mentees = max_mentees
            self.db.commit()
            self.db.refresh(profile)
            logger.info(f"Mentor {mentor_id} capacity set to {max_mentees}")
            return profile
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error setting capacity for mentor {mentor_id}: {e}")
            raise BusinessLogicError("Database error occurred while updating capacity")

    # The two methods below only stage changes; the caller owns the transaction.

    def claim_slot(self, mentor_id: int) -> bool:
        """Increments occupancy if a slot is free. Returns False when the mentor is full."""
        self.get_or_create(mentor_id, commit=False)
        updated = self.db.query(MentorProfile).filter(
            MentorProfile.user_id == mentor_id,
            MentorProfile.current_mentees < MentorProfile.max_mentees
        ).update(
            {MentorProfile.current_mentees: MentorProfile.current_mentees + 1},
            synchronize_session=False
        )
        return updated == 1

    def release_slot(self, mentor_id: int) -> None:
        """Decrements occupancy, never below zero."""
        self.db.query(MentorProfile).filter(
            MentorProfile.user_id == mentor_id,
            MentorProfile.current_mentees > 0
        ).update(
            {MentorProfile.current_mentees: MentorProfile.current_mentees - 1},
            synchronize_session=False
        )
