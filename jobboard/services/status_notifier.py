"""
JobBoard - Status change notifications

Sends the candidate an email when their application moves to a status worth
hearing about, subject to the suppression window and the soft per-user rate
limits.

Flow for a status change:
    1. Skip statuses that never notify (applied, viewed, hired, ...)
    2. Skip applications without a candidate email
    3. Ask the suppression policy whether an email went out too recently
    4. Honour the candidate's email preferences (opted out means suppressed)
    5. Consult the rate limiter (logged only)
    6. Render the email with its unsubscribe footer and send it
    7. On success, record the notified status and send time on the application

The caller owns the database session and commits the bookkeeping.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Optional

from ..config import settings
from .email_rate_limit import EmailCategory, EmailRateLimiter, STATUS_CHANGED_EVENT, email_rate_limiter
from .email_preferences import can_send_email
from .email_service import EmailMessage, EmailSender
from .email_templates import get_status_changed_email
from .status_priority import should_notify_status, should_suppress_status_email
from .unsubscribe import get_unsubscribe_footer

logger = logging.getLogger("jobboard.notifications")


class NotificationOutcome(str, Enum):
    SENT = "sent"
    SUPPRESSED = "suppressed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class NotificationResult:
    outcome: NotificationOutcome
    reason: Optional[str] = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StatusNotifier:
    """Decides on, sends and records status-change emails for applications."""

    def __init__(
        self,
        sender: EmailSender,
        rate_limiter: Optional[EmailRateLimiter] = None,
        clock: Callable[[], datetime] = _utcnow,
        window: Optional[timedelta] = None,
        base_url: Optional[str] = None,
        preferences_lookup: Optional[Callable[[str], Any]] = None,
    ):
        self.sender = sender
        self.rate_limiter = rate_limiter or email_rate_limiter
        self.clock = clock
        self.window = window or timedelta(minutes=settings.notifications.status_email_suppression_minutes)
        self.base_url = base_url
        self.preferences_lookup = preferences_lookup

    def _preferences_for(self, email: str):
        if self.preferences_lookup is None:
            return None
        try:
            return self.preferences_lookup(email)
        except Exception as e:
            # Fail open when preferences cannot be read
            logger.error("Failed to load email preferences for %s: %s", email, e)
            return None

    async def notify_status_change(self, application) -> NotificationResult:
        status = getattr(application.status, "value", application.status)

        if not should_notify_status(status):
            return NotificationResult(NotificationOutcome.SKIPPED, f"Status {status} does not notify")

        if not application.candidate_email:
            logger.info("Application %s has no candidate email, skipping notification", application.id)
            return NotificationResult(NotificationOutcome.SKIPPED, "No candidate email")

        now = self.clock()
        decision = should_suppress_status_email(
            application.last_status_email_sent_at,
            status,
            application.last_status_notified,
            now=now,
            window=self.window,
        )
        if decision.should_suppress:
            logger.info("Application %s: %s", application.id, decision.reason)
            return NotificationResult(NotificationOutcome.SUPPRESSED, decision.reason)

        if decision.higher_priority_status:
            logger.info(
                "Application %s: %s outranks previously notified %s, sending",
                application.id, status, application.last_status_notified
            )

        user_id = application.candidate_email
        category = EmailCategory.IMPORTANT_TRANSACTIONAL
        preference = can_send_email(self._preferences_for(user_id), category, STATUS_CHANGED_EVENT)
        if not preference.can_send:
            logger.info("Application %s: email to %s suppressed, %s", application.id, user_id, preference.reason)
            return NotificationResult(NotificationOutcome.SUPPRESSED, preference.reason)

        limit = self.rate_limiter.check(user_id, category, STATUS_CHANGED_EVENT)
        if limit.reason:
            logger.warning("Email rate limit for %s: %s %s", user_id, limit.reason, limit.counts)

        content = get_status_changed_email(
            candidate_name=application.candidate_name,
            status=status,
            job_title=application.job_title,
            job_company=application.job_company,
            recruiter_name=application.recruiter_name,
            base_url=self.base_url,
        )
        html, text = content.html, content.text
        footer = get_unsubscribe_footer(user_id, category, base_url=self.base_url)
        if footer:
            html += footer.html
            text += footer.text

        message = EmailMessage(
            to=application.candidate_email,
            subject=content.subject,
            html=html,
            text=text,
            reply_to=application.recruiter_email,
            tags={"type": "application", "event": STATUS_CHANGED_EVENT, "status": status},
        )

        try:
            sent = await self.sender.send(message)
        except Exception as e:
            logger.error("Failed to send status change email for application %s: %s", application.id, e)
            return NotificationResult(NotificationOutcome.FAILED, str(e))

        if not sent:
            return NotificationResult(NotificationOutcome.FAILED, "Email was not sent")

        self.rate_limiter.record_sent(user_id, category, STATUS_CHANGED_EVENT)
        application.last_status_notified = status
        application.last_status_email_sent_at = now
        logger.info("Status email sent for application %s (%s)", application.id, status)
        return NotificationResult(NotificationOutcome.SENT)
