"""
JobBoard - SQLAlchemy ORM models

The application record carries the fields the status workflow reads and
writes, including the bookkeeping for status-change notification emails.
"""
from sqlalchemy import Boolean, Column, Integer, String, DateTime, Text
from datetime import datetime, timezone
from .database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Application(Base):
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, index=True)
    job_title = Column(String)
    job_company = Column(String)
    candidate_name = Column(String)
    candidate_email = Column(String, index=True)
    recruiter_name = Column(String)
    recruiter_email = Column(String)
    status = Column(String, nullable=False, default="applied", index=True)
    cover_note = Column(Text)
    recruiter_notes = Column(Text)
    # Visibility toggle; never an activity and never emailed
    published = Column(Boolean, nullable=False, default=True)
    applied_at = Column(DateTime(timezone=True), default=utcnow)
    viewed_at = Column(DateTime(timezone=True))
    last_activity_at = Column(DateTime(timezone=True), default=utcnow)
    withdrawn_at = Column(DateTime(timezone=True))

    # Status-change email bookkeeping, written only after a successful send
    last_status_notified = Column(String)
    last_status_email_sent_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class EmailPreferences(Base):
    """Per-recipient email opt-outs. A missing row means every email is allowed."""
    __tablename__ = "email_preferences"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    job_alerts = Column(String, nullable=False, default="weekly")  # daily, weekly, never
    application_updates = Column(Boolean, nullable=False, default=True)
    marketing = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
