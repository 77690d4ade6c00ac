"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List, Any
from datetime import datetime
from enum import Enum

from campuslink.utils.skills import split_skills


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    user = "user"
    admin = "admin"


class Department(str, Enum):
    computer_science = "Computer Science"
    electrical = "Electrical Engineering"
    mechanical = "Mechanical Engineering"
    civil = "Civil Engineering"
    electronics = "Electronics"
    business = "Business Administration"
    arts = "Arts & Humanities"
    sciences = "Sciences"
    other = "Other"


class StudyYear(str, Enum):
    first = "1st Year"
    second = "2nd Year"
    third = "3rd Year"
    fourth = "4th Year"
    graduate = "Graduate"


class IssueCategory(str, Enum):
    safety = "Safety"
    hygiene = "Hygiene"
    infrastructure = "Infrastructure"
    canteen = "Canteen"


class IssueStatus(str, Enum):
    open = "open"
    in_progress = "in_progress"
    resolved = "resolved"
    dismissed = "dismissed"


class RequestStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"


class RequestDecision(str, Enum):
    accept = "accept"
    decline = "decline"


BIO_MAX_LENGTH = 120
DESCRIPTION_MAX_LENGTH = 300
REQUEST_MESSAGE_MAX_LENGTH = 500
CHAT_MESSAGE_MAX_LENGTH = 1000


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: UserRole

class UserResponse(BaseModel):
    user_id: int
    email: str
    role: UserRole
    is_active: bool
    email_verified: bool
    profile_complete: bool
    created_at: datetime


# ============================================================
# PROFILE SCHEMAS
# ============================================================

def _required_skills(value: Any) -> List[str]:
    skills = split_skills(value)
    if not skills:
        raise ValueError("Please add at least one skill")
    return skills


class ProfileCreate(BaseModel):
    department: Department
    year: StudyYear
    skills_have: List[str] = Field(..., description="List or comma-separated string")
    skills_to_learn: List[str] = Field(..., description="List or comma-separated string")
    bio: str = Field("", max_length=BIO_MAX_LENGTH)

    @field_validator("skills_have", "skills_to_learn", mode="before")
    @classmethod
    def parse_skills(cls, value):
        return _required_skills(value)

    @field_validator("bio")
    @classmethod
    def strip_bio(cls, value: str) -> str:
        return value.strip()

class ProfileUpdate(BaseModel):
    department: Optional[Department] = None
    year: Optional[StudyYear] = None
    skills_have: Optional[List[str]] = None
    skills_to_learn: Optional[List[str]] = None
    bio: Optional[str] = Field(None, max_length=BIO_MAX_LENGTH)

    @field_validator("skills_have", "skills_to_learn", mode="before")
    @classmethod
    def parse_skills(cls, value):
        if value is None:
            return None
        return _required_skills(value)

    @field_validator("bio")
    @classmethod
    def strip_bio(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else None

class ProfileResponse(BaseModel):
    id: str
    user_id: int
    department: Optional[str] = None
    year: Optional[str] = None
    skills_have: List[str] = []
    skills_to_learn: List[str] = []
    bio: str = ""
    profile_complete: bool
    created_at: datetime
    updated_at: datetime


# ============================================================
# ISSUE SCHEMAS
# ============================================================

class IssueTriage(BaseModel):
    category: str
    priority: str
    tags: List[str] = []
    summary: str
    source: str

class IssueResponse(BaseModel):
    id: str
    category: str
    description: str
    is_anonymous: bool
    image_url: Optional[str] = None
    status: IssueStatus
    triage: Optional[IssueTriage] = None
    reporter_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

class IssueListResponse(BaseModel):
    issues: List[IssueResponse]
    total: int

class IssueStatusUpdate(BaseModel):
    status: IssueStatus
    note: Optional[str] = Field(None, max_length=500)


# ============================================================
# MENTORSHIP SCHEMAS
# ============================================================

class MentorMatch(BaseModel):
    user_id: int
    department: Optional[str] = None
    year: Optional[str] = None
    bio: str = ""
    skills_have: List[str] = []
    score: int = Field(..., ge=0, le=100)
    reason: str
    matched_skills: List[str] = []
    source: str

class MentorSearchResponse(BaseModel):
    needs: List[str]
    query_source: str
    mentors: List[MentorMatch]
    total: int

class MentorRequestCreate(BaseModel):
    receiver_id: int
    message: str = Field("", max_length=REQUEST_MESSAGE_MAX_LENGTH)

class MentorRequestDecisionBody(BaseModel):
    decision: RequestDecision

class MentorRequestResponse(BaseModel):
    id: str
    sender_id: int
    receiver_id: int
    message: str = ""
    status: RequestStatus
    chat_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

class MentorRequestListResponse(BaseModel):
    sent: List[MentorRequestResponse]
    received: List[MentorRequestResponse]


# ============================================================
# CHAT SCHEMAS
# ============================================================

class ChatResponse(BaseModel):
    id: str
    participants: List[int]
    request_id: Optional[str] = None
    last_message: Optional[str] = None
    last_message_at: Optional[datetime] = None
    created_at: datetime

class ChatMessageCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=CHAT_MESSAGE_MAX_LENGTH)

class ChatMessageResponse(BaseModel):
    id: str
    chat_id: str
    sender_id: int
    text: str
    created_at: datetime


# ============================================================
# ACTIVITY SCHEMAS
# ============================================================

class ActivityResponse(BaseModel):
    profile_complete: bool
    issues: List[IssueResponse]
    sent_requests: List[MentorRequestResponse]
    received_requests: List[MentorRequestResponse]
    chats: List[ChatResponse]


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
