from datetime import datetime
from typing import List, Dict, Optional, Union
from pydantic import BaseModel, EmailStr, Field, field_validator
from .models import UserRole, MentorType, RequestStatus, MentorshipType, MentorshipDuration
from .constants import BusinessRules
from .config import get_settings

_settings = get_settings()


def _require_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("This field cannot be empty")
    return value

def _normalise_tags(value: Optional[Union[str, List[str]]]) -> Optional[List[str]]:
    """Accepts 'a, b, c' or ['a', ' b '] and returns trimmed, non-empty tags."""
    if value is None:
        return None
    items = value.split(",") if isinstance(value, str) else value
    return [item.strip() for item in items if item and item.strip()]


# --- Authentication Schemas ---
class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=BusinessRules.MIN_PASSWORD_LENGTH)
    full_name: str = Field(..., min_length=BusinessRules.MIN_NAME_LENGTH, max_length=BusinessRules.MAX_NAME_LENGTH)
    role: UserRole = UserRole.MENTEE

class Token(BaseModel):
    access_token: str
    token_type: str

class TokenData(BaseModel):
    email: Optional[str] = None

class CurrentUserResponse(BaseModel):
    id: int
    email: str
    full_name: Optional[str]
    role: UserRole
    avatar_url: Optional[str]
    dashboard_path: str

class ProfileUpdate(BaseModel):
    full_name: str = Field(..., min_length=BusinessRules.MIN_NAME_LENGTH, max_length=BusinessRules.MAX_NAME_LENGTH)

class AvatarResponse(BaseModel):
    avatar_url: str


# --- Role profiles ---
class MentorProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=BusinessRules.MIN_NAME_LENGTH, max_length=BusinessRules.MAX_NAME_LENGTH)
    mentor_type: Optional[MentorType] = None
    bio: Optional[str] = Field(None, max_length=2000)
    experience: Optional[str] = Field(None, max_length=2000)
    expertise: Optional[Union[str, List[str]]] = Field(None, description="Tags, as a list or comma-separated string.")
    areas_of_guidance: Optional[Union[str, List[str]]] = Field(None, description="Tags, as a list or comma-separated string.")
    is_available: Optional[bool] = None
    max_mentees: Optional[int] = Field(None, ge=_settings.MIN_MAX_MENTEES, le=_settings.MAX_MAX_MENTEES)

    @field_validator("expertise", "areas_of_guidance")
    @classmethod
    def split_tags(cls, value):
        return _normalise_tags(value)

class MentorProfileResponse(BaseModel):
    id: int
    user_id: int
    mentor_type: MentorType
    bio: Optional[str]
    experience: Optional[str]
    expertise: Optional[List[str]]
    areas_of_guidance: Optional[List[str]]
    is_available: bool
    max_mentees: int
    current_mentees: int
    created_at: datetime
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}

class MenteeProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=BusinessRules.MIN_NAME_LENGTH, max_length=BusinessRules.MAX_NAME_LENGTH)
    course: Optional[str] = Field(None, max_length=100)
    specialisation: Optional[str] = Field(None, max_length=100)
    year: Optional[str] = Field(None, max_length=20)
    semester: Optional[str] = Field(None, max_length=20)
    section: Optional[str] = Field(None, max_length=20)
    interests: Optional[Union[str, List[str]]] = None
    career_goals: Optional[str] = Field(None, max_length=2000)

    @field_validator("interests")
    @classmethod
    def split_tags(cls, value):
        return _normalise_tags(value)

class MenteeProfileResponse(BaseModel):
    id: int
    user_id: int
    course: Optional[str]
    specialisation: Optional[str]
    year: Optional[str]
    semester: Optional[str]
    section: Optional[str]
    interests: Optional[List[str]]
    career_goals: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}

class AvailabilityUpdate(BaseModel):
    is_available: bool

class CapacityUpdate(BaseModel):
    max_mentees: int = Field(..., ge=_settings.MIN_MAX_MENTEES, le=_settings.MAX_MAX_MENTEES)

class MentorCard(BaseModel):
    user_id: int
    full_name: Optional[str]
    email: Optional[str]
    avatar_url: Optional[str]
    mentor_type: MentorType
    bio: Optional[str]
    experience: Optional[str]
    expertise: List[str] = []
    areas_of_guidance: List[str] = []
    is_available: bool
    max_mentees: int
    current_mentees: int
    is_connected: bool = False
    has_pending_request: bool = False
    can_request: bool = False


# --- Mentorship requests ---
class MentorshipRequestCreate(BaseModel):
    model_config = {"str_strip_whitespace": True}

    mentor_id: int
    introduction: str = Field(..., max_length=BusinessRules.MAX_REQUEST_TEXT_LENGTH)
    goals: str = Field(..., max_length=BusinessRules.MAX_REQUEST_TEXT_LENGTH)

    @field_validator("introduction", "goals")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _require_text(value)

class RequestRejection(BaseModel):
    rejection_message: Optional[str] = Field(None, description="Optional reason shown to the mentee.")

class MentorshipRequestResponse(BaseModel):
    id: int
    mentee_id: int
    mentee_name: Optional[str] = None
    mentee_avatar_url: Optional[str] = None
    mentor_id: int
    mentor_name: Optional[str] = None
    mentor_avatar_url: Optional[str] = None
    introduction: str
    goals: str
    status: RequestStatus
    rejection_message: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]
    mentee_profile: Optional[MenteeProfileResponse] = None

    model_config = {"from_attributes": True}

class ActiveMentorshipResponse(BaseModel):
    id: int
    mentor_id: int
    mentee_id: int
    request_id: Optional[int]
    started_at: datetime
    ended_at: Optional[datetime]
    counterpart_name: Optional[str] = None
    counterpart_email: Optional[str] = None
    counterpart_avatar_url: Optional[str] = None
    mentor_profile: Optional[MentorProfileResponse] = None
    mentee_profile: Optional[MenteeProfileResponse] = None

    model_config = {"from_attributes": True}


# --- Mentee queries ---
class MenteeQueryCreate(BaseModel):
    """Text fields are trimmed before their length limits apply"""
    model_config = {"str_strip_whitespace": True}

    mentor_id: int
    full_name: str = Field(..., min_length=2, max_length=100)
    course_program_year: str = Field(..., min_length=2, max_length=100)
    university_name: str = Field(BusinessRules.DEFAULT_UNIVERSITY, min_length=2, max_length=200)
    email: EmailStr
    mentorship_type: MentorshipType
    domain_guidance: str = Field(..., min_length=2, max_length=200)
    query_description: str = Field(..., min_length=10, max_length=1000)
    expected_outcome: str = Field(..., min_length=10, max_length=500)
    mentorship_duration: MentorshipDuration
    why_this_mentor: str = Field(..., min_length=10, max_length=500)

class QueryReply(BaseModel):
    model_config = {"str_strip_whitespace": True}

    reply_text: str = Field(..., max_length=BusinessRules.MAX_REPLY_LENGTH)

    @field_validator("reply_text")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _require_text(value)

class MenteeQueryResponse(BaseModel):
    id: int
    mentee_id: int
    mentee_name: Optional[str] = None
    mentor_id: int
    mentor_name: Optional[str] = None
    full_name: str
    course_program_year: str
    university_name: str
    email: str
    mentorship_type: MentorshipType
    domain_guidance: str
    query_description: str
    expected_outcome: str
    mentorship_duration: MentorshipDuration
    why_this_mentor: str
    share_token: str
    share_url: Optional[str] = None
    mentor_reply: Optional[str]
    replied_at: Optional[datetime]
    reply_status: str = "Awaiting reply"
    created_at: datetime

    model_config = {"from_attributes": True}

class SharedQueryResponse(BaseModel):
    full_name: str
    course_program_year: str
    university_name: str
    email: str
    mentorship_type: MentorshipType
    mentorship_type_label: str
    domain_guidance: str
    query_description: str
    expected_outcome: str
    mentorship_duration: MentorshipDuration
    duration_label: str
    why_this_mentor: str
    mentor_name: Optional[str]
    mentor_reply: Optional[str]
    replied_at: Optional[datetime]
    created_at: datetime


# --- Notifications ---
class NotificationItem(BaseModel):
    id: int
    type: RequestStatus
    message: str
    mentor_name: Optional[str] = None
    mentee_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: datetime

class NotificationFeedResponse(BaseModel):
    notifications: List[NotificationItem]
    counts: Dict[str, int]


# --- Dashboards ---
class MenteeDashboardStats(BaseModel):
    accepted_requests: int
    pending_requests: int
    active_mentors: int
    queries_sent: int

class MentorDashboardStats(BaseModel):
    pending_requests: int
    active_mentees: int
    current_mentees: int
    max_mentees: int
    is_available: bool
    queries_received: int
    unanswered_queries: int

class MentorActivityPoint(BaseModel):
    label: str
    received: int
    accepted: int
    rejected: int

class MenteeActivityPoint(BaseModel):
    label: str
    mentorships: int


# --- Admin / oversight ---
class AdminUserCreate(UserCreate):
    pass

class AdminUserUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=BusinessRules.MIN_NAME_LENGTH, max_length=BusinessRules.MAX_NAME_LENGTH)
    email: Optional[EmailStr] = None

class RoleChange(BaseModel):
    role: UserRole

class UserSummary(BaseModel):
    user_id: int
    full_name: Optional[str]
    email: Optional[str]
    avatar_url: Optional[str]
    role: UserRole
    created_at: Optional[datetime] = None

class OversightStats(BaseModel):
    total_hods: Optional[int] = None
    total_mentors: int
    total_mentees: int
    total_requests: int
    total_queries: Optional[int] = None

class OversightResponse(BaseModel):
    hods: Optional[List[UserSummary]] = None
    mentors: List[UserSummary]
    mentees: List[UserSummary]
    stats: OversightStats


# --- Feedback ---
class FeedbackCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5, description="Rating of the portal (1-5).")
    feedback: str = Field("", max_length=BusinessRules.MAX_FEEDBACK_LENGTH)

class FeedbackResponse(BaseModel):
    success: bool
    message: str
    feedback_id: int
