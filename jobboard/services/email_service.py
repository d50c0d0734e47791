"""
JobBoard - Email delivery seam.

Notifications hand a composed EmailMessage to an EmailSender. Deployments
wire a sender backed by their mail provider onto app.state.email_sender;
until then the NullEmailSender logs a warning and reports the email as not
sent, so nothing is recorded as delivered.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from ..config import settings

logger = logging.getLogger("jobboard.email")


@dataclass
class EmailMessage:
    to: str
    subject: str
    html: str
    text: Optional[str] = None
    reply_to: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict)
    sender: str = field(
        default_factory=lambda: f"{settings.notifications.from_name} <{settings.notifications.from_email}>"
    )


class EmailSender:
    """Base class for email backends."""

    async def send(self, message: EmailMessage) -> bool:
        """Deliver the message. Returns True only if the backend accepted it."""
        raise NotImplementedError


class NullEmailSender(EmailSender):
    """Sender used when no email backend is configured."""

    async def send(self, message: EmailMessage) -> bool:
        logger.warning("Email not configured, skipping send to %s: %s", message.to, message.subject)
        return False
