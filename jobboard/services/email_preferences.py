"""
JobBoard - Recipient email preferences.

Critical transactional and system emails always go out. Everything else
honours the recipient's stored opt-outs; a recipient without a preferences
row gets the defaults, which allow every email.
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from ..models import EmailPreferences
from ..schemas import JobAlertFrequency
from .email_rate_limit import EmailCategory, JOB_ALERT_EVENT


@dataclass(frozen=True)
class PreferenceCheck:
    can_send: bool
    reason: Optional[str] = None


ALLOWED = PreferenceCheck(can_send=True)


def get_email_preferences(db: Session, email: str) -> Optional[EmailPreferences]:
    return db.query(EmailPreferences).filter(EmailPreferences.email == email).first()


def get_or_create_email_preferences(db: Session, email: str) -> EmailPreferences:
    """Fetch the recipient's preferences, adding a default row if there is none."""
    preferences = get_email_preferences(db, email)
    if preferences is None:
        preferences = EmailPreferences(
            email=email,
            job_alerts=JobAlertFrequency.WEEKLY.value,
            application_updates=True,
            marketing=False,
        )
        db.add(preferences)
        db.flush()
    return preferences


def can_send_email(preferences, category: EmailCategory, event_type: str) -> PreferenceCheck:
    """
    Decide whether an email may be sent to a recipient.

    Args:
        preferences: The recipient's EmailPreferences, or None if they have none
        category: Email category
        event_type: Stable event identifier, e.g. "status_changed"

    Returns:
        PreferenceCheck with the opt-out reason when the email must not go out
    """
    if category in (EmailCategory.CRITICAL_TRANSACTIONAL, EmailCategory.SYSTEM):
        return ALLOWED

    if preferences is None:
        return ALLOWED

    if category == EmailCategory.IMPORTANT_TRANSACTIONAL:
        if not preferences.application_updates:
            return PreferenceCheck(False, "User has disabled application update emails")
        return ALLOWED

    if category == EmailCategory.USER_NOTIFICATION:
        if event_type == JOB_ALERT_EVENT:
            if preferences.job_alerts == JobAlertFrequency.NEVER.value:
                return PreferenceCheck(False, "User has disabled job alerts")
            return ALLOWED
        if event_type == "marketing" or event_type.startswith("marketing_"):
            if not preferences.marketing:
                return PreferenceCheck(False, "User has disabled marketing emails")
            return ALLOWED

    return ALLOWED
