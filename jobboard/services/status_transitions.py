"""
JobBoard - Application status transition rules.

The recruiter workflow runs applied -> viewed -> contacted -> interviewing
-> offered -> hired, with rejection possible along the way and withdrawal
open to the candidate until contact is made. Rejected, withdrawn and hired
are terminal.
"""
from typing import Optional, Tuple

from ..schemas import ApplicationStatus

S = ApplicationStatus

TERMINAL_STATES: Tuple[ApplicationStatus, ...] = (S.REJECTED, S.WITHDRAWN, S.HIRED)

ALLOWED_TRANSITIONS = {
    S.APPLIED: (S.VIEWED, S.WITHDRAWN, S.REJECTED),
    S.VIEWED: (S.CONTACTED, S.REJECTED, S.WITHDRAWN),
    S.CONTACTED: (S.INTERVIEWING, S.REJECTED),
    S.INTERVIEWING: (S.OFFERED, S.REJECTED),
    S.OFFERED: (S.HIRED, S.REJECTED),
    S.HIRED: (),
    S.REJECTED: (),
    S.WITHDRAWN: (),
    # Legacy status, same exits as offered
    S.ACCEPTED: (S.HIRED, S.REJECTED),
}


def _quoted(statuses) -> str:
    return ", ".join(f'"{s.value}"' for s in statuses)


def is_terminal(status: ApplicationStatus) -> bool:
    return status in TERMINAL_STATES


def get_allowed_transitions(from_status: ApplicationStatus) -> Tuple[ApplicationStatus, ...]:
    return ALLOWED_TRANSITIONS.get(from_status, ())


def is_transition_allowed(from_status: ApplicationStatus, to_status: ApplicationStatus) -> bool:
    """Staying on the same status is always allowed; nothing leaves a terminal state."""
    if from_status == to_status:
        return True
    if is_terminal(from_status):
        return False
    return to_status in get_allowed_transitions(from_status)


def validate_transition(from_status: ApplicationStatus, to_status: ApplicationStatus) -> Optional[str]:
    """Return an error message for an invalid transition, or None if it is allowed."""
    if from_status == to_status:
        return None

    if is_terminal(from_status):
        return (
            f'Cannot change status from "{from_status.value}". Applications in terminal '
            f"states ({', '.join(s.value for s in TERMINAL_STATES)}) cannot be modified."
        )

    if not is_transition_allowed(from_status, to_status):
        allowed = get_allowed_transitions(from_status)
        allowed_list = _quoted(allowed) if allowed else "none (this is a terminal state)"
        return (
            f'Invalid status transition from "{from_status.value}" to "{to_status.value}". '
            f'Allowed transitions from "{from_status.value}" are: {allowed_list}.'
        )

    return None


def get_transition_description(from_status: ApplicationStatus) -> str:
    if is_terminal(from_status):
        return f'Status "{from_status.value}" is a terminal state and cannot be changed.'

    allowed = get_allowed_transitions(from_status)
    if not allowed:
        return f'No transitions allowed from "{from_status.value}".'

    return f'From "{from_status.value}", you can transition to: {_quoted(allowed)}.'
