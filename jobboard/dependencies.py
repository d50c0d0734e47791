"""
JobBoard - Shared FastAPI dependencies.

Usage in routers:
    from ..dependencies import get_status_notifier

    @router.patch("/{application_id}")
    async def update(notifier: StatusNotifier = Depends(get_status_notifier)):
        ...

Tests swap the email sender or the whole notifier through
app.dependency_overrides.
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .database import get_db
from .services.email_preferences import get_email_preferences
from .services.email_service import EmailSender, NullEmailSender
from .services.status_notifier import StatusNotifier


def get_email_sender(request: Request) -> EmailSender:
    """The sender wired onto the app at startup, or a NullEmailSender."""
    return getattr(request.app.state, "email_sender", None) or NullEmailSender()


def get_status_notifier(
    sender: EmailSender = Depends(get_email_sender),
    db: Session = Depends(get_db)
) -> StatusNotifier:
    """Notifier that reads recipient preferences through the request's session."""
    return StatusNotifier(sender, preferences_lookup=lambda email: get_email_preferences(db, email))
