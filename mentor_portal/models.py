# mentor_portal/models.py
import uuid
from datetime import datetime, timezone
from enum import Enum
from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, Boolean, ForeignKey, Sequence, Index, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from .database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_share_token() -> str:
    return str(uuid.uuid4())


# Tag lists are JSONB on Postgres, plain JSON elsewhere
TagList = JSON().with_variant(JSONB(), "postgresql")


class UserRole(str, Enum):
    MENTEE = "mentee"
    MENTOR = "mentor"
    ADMIN = "admin"
    HOD = "hod"
    DEAN = "dean"

class MentorType(str, Enum):
    SENIOR = "senior"
    ALUMNI = "alumni"
    FACULTY = "faculty"

# Enum for Mentorship Request Status
class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

class MentorshipType(str, Enum):
    ACADEMIC = "academic"
    CAREER = "career"
    INTERNSHIP = "internship"
    RESEARCH = "research"
    SKILL_DEVELOPMENT = "skill_development"

class MentorshipDuration(str, Enum):
    ONE_TIME = "one_time"
    SHORT_TERM = "short_term"
    LONG_TERM = "long_term"

# Bucket size of the dashboard activity charts
class ActivityPeriod(str, Enum):
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


class User(Base):
    """Login credentials. Everything else about a person lives on Profile."""
    __tablename__ = "users"

    id = Column(Integer, Sequence('user_id_seq'), primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow, nullable=True)

    profile = relationship("Profile", back_populates="user", uselist=False)
    role_assignment = relationship("UserRoleAssignment", back_populates="user", uselist=False)
    mentor_profile = relationship("MentorProfile", back_populates="user", uselist=False)
    mentee_profile = relationship("MenteeProfile", back_populates="user", uselist=False)

    @property
    def role(self):
        return self.role_assignment.role if self.role_assignment else None

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, Sequence('profile_id_seq'), primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    full_name = Column(String(100), nullable=True, index=True)
    email = Column(String(255), nullable=True)
    # Mirrors user_roles.role; both are written together
    role = Column(String, nullable=False, default=UserRole.MENTEE.value)
    avatar_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="profile")

    def __repr__(self):
        return f"<Profile(user_id={self.user_id}, full_name='{self.full_name}', role='{self.role}')>"


class UserRoleAssignment(Base):
    __tablename__ = "user_roles"

    id = Column(Integer, Sequence('user_role_id_seq'), primary_key=True, index=True)
    # unique: exactly one role per principal
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    role = Column(String, nullable=False)

    user = relationship("User", back_populates="role_assignment")


class MentorProfile(Base):
    __tablename__ = "mentor_profiles"

    id = Column(Integer, Sequence('mentor_profile_id_seq'), primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    mentor_type = Column(String, nullable=False, default=MentorType.SENIOR.value)
    bio = Column(Text, nullable=True)
    experience = Column(Text, nullable=True)
    expertise = Column(TagList, nullable=True)
    areas_of_guidance = Column(TagList, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    max_mentees = Column(Integer, nullable=False, default=5)
    current_mentees = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="mentor_profile")

    def __repr__(self):
        return f"<MentorProfile(user_id={self.user_id}, occupancy={self.current_mentees}/{self.max_mentees})>"


class MenteeProfile(Base):
    __tablename__ = "mentee_profiles"

    id = Column(Integer, Sequence('mentee_profile_id_seq'), primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    course = Column(String, nullable=True)
    specialisation = Column(String, nullable=True)
    year = Column(String, nullable=True)
    semester = Column(String, nullable=True)
    section = Column(String, nullable=True)
    interests = Column(TagList, nullable=True)
    career_goals = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="mentee_profile")

    def __repr__(self):
        return f"<MenteeProfile(user_id={self.user_id}, course='{self.course}')>"


class MentorshipRequest(Base):
    __tablename__ = "mentorship_requests"
    __table_args__ = (
        # At most one pending request per (mentee, mentor) pair
        Index(
            "uq_mentorship_requests_pending_pair",
            "mentee_id",
            "mentor_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id = Column(Integer, Sequence('mentorship_request_id_seq'), primary_key=True, index=True)

    mentee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    mentor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    introduction = Column(Text, nullable=False)
    goals = Column(Text, nullable=False)
    status = Column(String, default=RequestStatus.PENDING.value, nullable=False)
    rejection_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    mentee = relationship("User", foreign_keys=[mentee_id], viewonly=True)
    mentor = relationship("User", foreign_keys=[mentor_id], viewonly=True)

    def __repr__(self):
        return f"<MentorshipRequest(id={self.id}, mentee_id={self.mentee_id}, mentor_id={self.mentor_id}, status='{self.status}')>"


class ActiveMentorship(Base):
    __tablename__ = "active_mentorships"
    __table_args__ = (
        # One live mentorship per pair; ended ones are kept as history
        Index(
            "uq_active_mentorships_live_pair",
            "mentor_id",
            "mentee_id",
            unique=True,
            postgresql_where=text("ended_at IS NULL"),
            sqlite_where=text("ended_at IS NULL"),
        ),
    )

    id = Column(Integer, Sequence('active_mentorship_id_seq'), primary_key=True, index=True)
    mentor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    mentee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    request_id = Column(Integer, ForeignKey("mentorship_requests.id", ondelete="SET NULL"), nullable=True)
    started_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=True)

    mentee = relationship("User", foreign_keys=[mentee_id], viewonly=True)
    mentor = relationship("User", foreign_keys=[mentor_id], viewonly=True)

    def __repr__(self):
        return f"<ActiveMentorship(id={self.id}, mentor_id={self.mentor_id}, mentee_id={self.mentee_id})>"


class MenteeQuery(Base):
    __tablename__ = "mentee_queries"

    id = Column(Integer, Sequence('mentee_query_id_seq'), primary_key=True, index=True)
    mentee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    mentor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Submitter's self-reported details
    full_name = Column(String(100), nullable=False)
    course_program_year = Column(String(100), nullable=False)
    university_name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False)

    mentorship_type = Column(String, nullable=False)
    domain_guidance = Column(String(200), nullable=False)
    query_description = Column(Text, nullable=False)
    expected_outcome = Column(Text, nullable=False)
    mentorship_duration = Column(String, nullable=False)
    why_this_mentor = Column(Text, nullable=False)

    share_token = Column(String(36), unique=True, index=True, nullable=False, default=new_share_token)
    share_token_issued_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    mentor_reply = Column(Text, nullable=True)
    replied_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    mentee = relationship("User", foreign_keys=[mentee_id], viewonly=True)
    mentor = relationship("User", foreign_keys=[mentor_id], viewonly=True)

    def __repr__(self):
        return f"<MenteeQuery(id={self.id}, mentee_id={self.mentee_id}, mentor_id={self.mentor_id})>"


class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(Integer, Sequence('feedback_id_seq'), primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    confirmation = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    def __repr__(self):
        return f"<Feedback(id={self.id}, user_id={self.user_id}, rating={self.rating})>"
