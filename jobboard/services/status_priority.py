"""
JobBoard - Status priority and status-email suppression.

Priority order for candidate notifications:
    offered > interviewing > contacted > rejected

Every other status has priority 0 and never triggers an email. After a
status email goes out, further status emails for the same application are
held back for a short window unless the new status outranks the one
already sent, so a burst of recruiter clicks produces one email, and an
offer is never swallowed by an earlier "contacted".
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Optional

from ..schemas import ApplicationStatus

STATUS_PRIORITY = MappingProxyType({
    ApplicationStatus.OFFERED: 4,
    ApplicationStatus.INTERVIEWING: 3,
    ApplicationStatus.CONTACTED: 2,
    ApplicationStatus.REJECTED: 1,
    ApplicationStatus.APPLIED: 0,
    ApplicationStatus.VIEWED: 0,
    ApplicationStatus.HIRED: 0,
    ApplicationStatus.ACCEPTED: 0,
    ApplicationStatus.WITHDRAWN: 0,
})

STATUS_EMAIL_SUPPRESSION_WINDOW = timedelta(minutes=30)


@dataclass(frozen=True)
class SuppressionDecision:
    should_suppress: bool
    reason: Optional[str] = None
    # Set only when the new status outranks the last notified one
    higher_priority_status: Optional[ApplicationStatus] = None


def _coerce(status) -> Optional[ApplicationStatus]:
    if isinstance(status, ApplicationStatus):
        return status
    try:
        return ApplicationStatus(status)
    except ValueError:
        return None


def get_status_priority(status) -> int:
    """Priority for a status; anything outside ApplicationStatus ranks 0."""
    coerced = _coerce(status)
    if coerced is None:
        return 0
    return STATUS_PRIORITY[coerced]


def get_higher_priority_status(status_a, status_b):
    """Return whichever status has the higher priority, status_a on a tie."""
    if get_status_priority(status_b) > get_status_priority(status_a):
        return status_b
    return status_a


def should_notify_status(status) -> bool:
    """True if a change to this status is worth emailing the candidate about."""
    return get_status_priority(status) > 0


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes come back from SQLite and are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _whole_minutes(elapsed: timedelta) -> int:
    return math.floor(elapsed.total_seconds() / 60 + 0.5)


def should_suppress_status_email(
    last_sent_at: Optional[datetime],
    current_status,
    last_notified_status,
    now: Optional[datetime] = None,
    window: timedelta = STATUS_EMAIL_SUPPRESSION_WINDOW,
) -> SuppressionDecision:
    """
    Decide whether a status email should be withheld.

    Args:
        last_sent_at: When the previous status email went out, if ever
        current_status: Status the application just moved to
        last_notified_status: Status named in the previous email, if known
        now: Evaluation time; defaults to the current UTC time
        window: Suppression window length

    Returns:
        SuppressionDecision. Nothing is persisted here; after sending, the
        caller records current_status and the send time on the application.
    """
    if last_sent_at is None:
        return SuppressionDecision(should_suppress=False)

    now = _as_utc(now or datetime.now(timezone.utc))
    elapsed = now - _as_utc(last_sent_at)

    if elapsed >= window:
        return SuppressionDecision(should_suppress=False)

    minutes = _whole_minutes(elapsed)

    if last_notified_status:
        current_priority = get_status_priority(current_status)
        last_priority = get_status_priority(last_notified_status)

        if current_priority > last_priority:
            return SuppressionDecision(
                should_suppress=False,
                higher_priority_status=_coerce(current_status),
            )

        return SuppressionDecision(
            should_suppress=True,
            reason=(
                f"Suppressed: {_label(current_status)} has lower or equal priority than "
                f"{_label(last_notified_status)} (within {minutes} minute suppression window)"
            ),
        )

    # Nothing to compare against, so hold it back
    return SuppressionDecision(
        should_suppress=True,
        reason=f"Suppressed: Within {minutes} minute suppression window",
    )


def _label(status) -> str:
    if isinstance(status, ApplicationStatus):
        return status.value
    return str(status)
