# mentor_portal/constants.py
class ErrorMessages:
    USER_NOT_FOUND = "User not found"
    MENTOR_NOT_FOUND = "Mentor not found"
    REQUEST_NOT_FOUND = "Mentorship request not found"
    MENTORSHIP_NOT_FOUND = "Mentorship not found"
    QUERY_NOT_FOUND = "Query not found or link has expired."
    NOT_A_MENTOR = "Only mentors can perform this action"
    NOT_A_MENTEE = "Only mentees can perform this action"
    INSUFFICIENT_ROLE = "You do not have access to this page"
    CAPACITY_EXCEEDED = "Mentor has reached maximum capacity"
    MENTOR_UNAVAILABLE = "Mentor is not accepting requests right now"
    DUPLICATE_REQUEST = "You have already sent a request to this mentor."
    EMAIL_TAKEN = "Email already registered"
    SELF_SIGNUP_ROLE = "Only mentee or mentor accounts can be created at signup"

class BusinessRules:
    MIN_NAME_LENGTH = 2
    MAX_NAME_LENGTH = 100
    MIN_PASSWORD_LENGTH = 6
    MAX_REQUEST_TEXT_LENGTH = 500
    MAX_REPLY_LENGTH = 500
    MAX_FEEDBACK_LENGTH = 2000
    DEFAULT_UNIVERSITY = "IILM University"

# Where each role lands after sign-in
ROLE_DASHBOARDS = {
    "mentee": "/dashboard/mentee",
    "mentor": "/dashboard/mentor",
    "admin": "/admin",
    "hod": "/hod",
    "dean": "/dean",
}

MENTORSHIP_TYPE_LABELS = {
    "academic": "Academic",
    "career": "Career",
    "internship": "Internship",
    "research": "Research",
    "skill_development": "Skill Development",
}

DURATION_LABELS = {
    "one_time": "One-time session",
    "short_term": "Short-term (1-3 months)",
    "long_term": "Long-term (3+ months)",
}
