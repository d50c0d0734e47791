"""
JobBoard - Per-user email rate limiting.

Soft limits: a check that trips a limit still allows the email and returns
a reason for the caller to log. Counters live in process memory, so each
worker keeps its own.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Dict, Optional

from ..config import settings


class EmailCategory(str, Enum):
    CRITICAL_TRANSACTIONAL = "critical_transactional"
    IMPORTANT_TRANSACTIONAL = "important_transactional"
    USER_NOTIFICATION = "user_notification"
    SYSTEM = "system"


STATUS_CHANGED_EVENT = "status_changed"
JOB_ALERT_EVENT = "job_alert"


@dataclass
class RateLimitCheck:
    should_allow: bool
    reason: Optional[str] = None
    counts: Dict[str, int] = field(default_factory=dict)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EmailRateLimiter:
    """In-memory email counters per user, reset on hourly and daily boundaries."""

    def __init__(self, limits=None, clock: Callable[[], datetime] = _utcnow):
        self.limits = limits or settings.email_limits
        self._clock = clock
        self.reset()

    def reset(self):
        self._hourly = defaultdict(int)
        self._daily = defaultdict(int)
        self._status_hourly = defaultdict(int)
        self._job_alerts_hourly = defaultdict(int)
        self._job_alerts_daily = defaultdict(int)
        self._last_reset = self._clock()
        self._last_daily_reset = self._last_reset

    def _reset_if_needed(self):
        now = self._clock()
        if now - self._last_reset >= timedelta(hours=1):
            self._hourly.clear()
            self._status_hourly.clear()
            self._job_alerts_hourly.clear()
            self._last_reset = now

        # Daily counters run on their own 24 hour boundary
        if now - self._last_daily_reset >= timedelta(hours=24):
            self._daily.clear()
            self._job_alerts_daily.clear()
            self._last_daily_reset = now

    @staticmethod
    def _is_status_email(category: EmailCategory, event_type: str) -> bool:
        return category == EmailCategory.IMPORTANT_TRANSACTIONAL and event_type == STATUS_CHANGED_EVENT

    @staticmethod
    def _is_job_alert(category: EmailCategory, event_type: str) -> bool:
        return category == EmailCategory.USER_NOTIFICATION and event_type == JOB_ALERT_EVENT

    def check(self, user_id: Optional[str], category: EmailCategory, event_type: str) -> RateLimitCheck:
        """Check the user's counters. Always allows; a tripped limit comes back as a reason."""
        self._reset_if_needed()

        if not user_id:
            return RateLimitCheck(should_allow=True)

        limits = self.limits
        hourly = self._hourly.get(user_id, 0)
        daily = self._daily.get(user_id, 0)
        counts = {"hourly": hourly, "daily": daily}

        if hourly >= limits.max_emails_per_hour:
            return RateLimitCheck(
                should_allow=True,
                reason=f"Hourly limit exceeded: {hourly}/{limits.max_emails_per_hour} emails",
                counts=counts,
            )

        if daily >= limits.max_emails_per_day:
            return RateLimitCheck(
                should_allow=True,
                reason=f"Daily limit exceeded: {daily}/{limits.max_emails_per_day} emails",
                counts=counts,
            )

        if self._is_status_email(category, event_type):
            status_hourly = self._status_hourly.get(user_id, 0)
            if status_hourly >= limits.max_status_emails_per_hour:
                return RateLimitCheck(
                    should_allow=True,
                    reason=(
                        f"Status email hourly limit exceeded: "
                        f"{status_hourly}/{limits.max_status_emails_per_hour}"
                    ),
                    counts={**counts, "status_hourly": status_hourly},
                )

        if self._is_job_alert(category, event_type):
            alerts_hourly = self._job_alerts_hourly.get(user_id, 0)
            alerts_daily = self._job_alerts_daily.get(user_id, 0)
            alert_counts = {
                **counts,
                "job_alerts_hourly": alerts_hourly,
                "job_alerts_daily": alerts_daily,
            }
            if alerts_hourly >= limits.max_job_alerts_per_hour:
                return RateLimitCheck(
                    should_allow=True,
                    reason=(
                        f"Job alert hourly limit exceeded: "
                        f"{alerts_hourly}/{limits.max_job_alerts_per_hour}"
                    ),
                    counts=alert_counts,
                )
            if alerts_daily >= limits.max_job_alerts_per_day:
                return RateLimitCheck(
                    should_allow=True,
                    reason=(
                        f"Job alert daily limit exceeded: "
                        f"{alerts_daily}/{limits.max_job_alerts_per_day}"
                    ),
                    counts=alert_counts,
                )

        return RateLimitCheck(should_allow=True)

    def record_sent(self, user_id: Optional[str], category: EmailCategory, event_type: str):
        """Count an email that went out. Anonymous sends are not tracked."""
        if not user_id:
            return

        self._reset_if_needed()

        self._hourly[user_id] += 1
        self._daily[user_id] += 1

        if self._is_status_email(category, event_type):
            self._status_hourly[user_id] += 1

        if self._is_job_alert(category, event_type):
            self._job_alerts_hourly[user_id] += 1
            self._job_alerts_daily[user_id] += 1

    def get_user_counts(self, user_id: str) -> Dict[str, int]:
        self._reset_if_needed()
        return {
            "hourly": self._hourly.get(user_id, 0),
            "daily": self._daily.get(user_id, 0),
            "status_hourly": self._status_hourly.get(user_id, 0),
            "job_alerts_hourly": self._job_alerts_hourly.get(user_id, 0),
            "job_alerts_daily": self._job_alerts_daily.get(user_id, 0),
        }


# Global instance
email_rate_limiter = EmailRateLimiter()
