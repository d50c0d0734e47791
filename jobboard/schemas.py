"""
JobBoard - Pydantic schemas for request/response validation.

Defines the application status vocabulary and the data models for API
request bodies and responses.
"""
from pydantic import BaseModel, Field, StrictBool, field_validator
from datetime import datetime
from typing import Optional, List
from enum import Enum
import re


# --- Enums for validated fields ---

class ApplicationStatus(str, Enum):
    APPLIED = "applied"
    VIEWED = "viewed"
    CONTACTED = "contacted"
    INTERVIEWING = "interviewing"
    OFFERED = "offered"
    HIRED = "hired"
    ACCEPTED = "accepted"  # legacy, behaves like offered
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class JobAlertFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    NEVER = "never"


# Values written by older releases of the application record
LEGACY_STATUS_MAP = {
    "new": ApplicationStatus.APPLIED,
    "interviewed": ApplicationStatus.INTERVIEWING,
}


def normalize_status(value) -> Optional[ApplicationStatus]:
    """Map a stored status string to an ApplicationStatus, or None if unknown."""
    if value is None:
        return None
    if isinstance(value, ApplicationStatus):
        return value
    if value in LEGACY_STATUS_MAP:
        return LEGACY_STATUS_MAP[value]
    try:
        return ApplicationStatus(value)
    except ValueError:
        return None


# --- Helper validators ---

def validate_email(email: Optional[str]) -> Optional[str]:
    """Validate email format if provided."""
    if email is None or email == "":
        return None
    email_pattern = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
    if not email_pattern.match(email):
        raise ValueError('Invalid email format')
    return email


# --- Application Schemas ---

class ApplicationBase(BaseModel):
    job_title: Optional[str] = Field(None, max_length=200)
    job_company: Optional[str] = Field(None, max_length=200)
    candidate_name: Optional[str] = Field(None, max_length=200)
    candidate_email: Optional[str] = Field(None, max_length=254)
    recruiter_name: Optional[str] = Field(None, max_length=200)
    recruiter_email: Optional[str] = Field(None, max_length=254)
    cover_note: Optional[str] = Field(None, max_length=5000)

    @field_validator('candidate_email', 'recruiter_email')
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)


class ApplicationCreate(ApplicationBase):
    pass


class ApplicationUpdate(BaseModel):
    status: Optional[ApplicationStatus] = None
    recruiter_notes: Optional[str] = Field(None, max_length=10000)
    published: Optional[StrictBool] = None


class ApplicationResponse(ApplicationBase):
    id: int
    status: str
    recruiter_notes: Optional[str] = None
    published: bool = True
    applied_at: Optional[datetime] = None
    viewed_at: Optional[datetime] = None
    last_activity_at: Optional[datetime] = None
    withdrawn_at: Optional[datetime] = None
    last_status_notified: Optional[str] = None
    last_status_email_sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator('status', mode='before')
    @classmethod
    def normalize_legacy_status(cls, v):
        status = normalize_status(v)
        return status.value if status else v

    class Config:
        from_attributes = True


class NotificationResult(BaseModel):
    outcome: str  # sent, suppressed, skipped, failed
    reason: Optional[str] = None


class ApplicationUpdateResponse(BaseModel):
    message: str
    application: ApplicationResponse
    notification: Optional[NotificationResult] = None


class TransitionInfo(BaseModel):
    status: str
    terminal: bool
    allowed: List[str]
    description: str


# --- Email Preference Schemas ---

class EmailPreferencesResponse(BaseModel):
    email: str
    job_alerts: JobAlertFrequency = JobAlertFrequency.WEEKLY
    application_updates: bool = True
    marketing: bool = False

    class Config:
        from_attributes = True


class UnsubscribeResponse(BaseModel):
    message: str
    category: str
    updated: bool
    preferences: EmailPreferencesResponse
