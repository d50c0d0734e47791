"""
JobBoard - Signed unsubscribe links.

Each non-critical email carries a footer with a one-click unsubscribe link.
The link holds a JWT naming the recipient and the email category, signed
with JOBBOARD_UNSUBSCRIBE_SECRET_KEY and valid for 90 days by default.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import quote

from jose import ExpiredSignatureError, JWTError, jwt

from ..config import settings
from .email_rate_limit import EmailCategory


class UnsubscribeTokenError(Exception):
    """Raised when an unsubscribe token cannot be trusted."""
    pass


class UnsubscribeTokenExpired(UnsubscribeTokenError):
    pass


@dataclass(frozen=True)
class UnsubscribeTokenData:
    user_id: str
    category: EmailCategory


@dataclass(frozen=True)
class EmailFooter:
    html: str
    text: str


def create_unsubscribe_token(
    user_id: str,
    category: EmailCategory,
    expires_delta: Optional[timedelta] = None
) -> str:
    config = settings.notifications
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=config.unsubscribe_token_expire_days)
    )
    payload = {
        "sub": user_id,
        "category": EmailCategory(category).value,
        "exp": expire,
        "type": "unsubscribe",
    }
    return jwt.encode(payload, config.unsubscribe_secret_key, algorithm=config.unsubscribe_algorithm)


def verify_unsubscribe_token(token: str) -> UnsubscribeTokenData:
    """
    Verify and decode an unsubscribe token.

    Raises:
        UnsubscribeTokenExpired: If the token is past its expiry
        UnsubscribeTokenError: If the token is malformed, forged or incomplete
    """
    config = settings.notifications
    try:
        payload = jwt.decode(token, config.unsubscribe_secret_key, algorithms=[config.unsubscribe_algorithm])
    except ExpiredSignatureError:
        raise UnsubscribeTokenExpired("Token has expired")
    except JWTError:
        raise UnsubscribeTokenError("Invalid token")

    if payload.get("type") != "unsubscribe" or not payload.get("sub") or not payload.get("category"):
        raise UnsubscribeTokenError("Invalid token: missing required fields")

    try:
        category = EmailCategory(payload["category"])
    except ValueError:
        raise UnsubscribeTokenError("Invalid token: invalid category")

    return UnsubscribeTokenData(user_id=payload["sub"], category=category)


def get_unsubscribe_url(user_id: str, category: EmailCategory, base_url: Optional[str] = None) -> str:
    base = (base_url or settings.notifications.base_url).rstrip("/")
    return f"{base}/api/email/unsubscribe?token={quote(create_unsubscribe_token(user_id, category))}"


def get_unsubscribe_footer(
    user_id: Optional[str],
    category: EmailCategory,
    base_url: Optional[str] = None
) -> Optional[EmailFooter]:
    """Footer for non-critical emails; None for critical or system email and anonymous recipients."""
    if category in (EmailCategory.CRITICAL_TRANSACTIONAL, EmailCategory.SYSTEM):
        return None
    if not user_id:
        return None

    base = (base_url or settings.notifications.base_url).rstrip("/")
    unsubscribe_url = get_unsubscribe_url(user_id, category, base_url=base)
    preferences_url = f"{base}/job-seeker/account/edit"

    html = f"""
        <div style="margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb;">
            <p style="margin: 0; color: #6b7280; font-size: 12px; line-height: 1.5;">
                You're receiving this email because of your account activity on JobBoard.<br />
                <a href="{unsubscribe_url}" style="color: #6b7280; text-decoration: underline;">Unsubscribe from these emails</a> |
                <a href="{preferences_url}" style="color: #6b7280; text-decoration: underline;">Manage email preferences</a>
            </p>
        </div>
        """
    text = (
        "\n\n---\n"
        "You're receiving this email because of your account activity on JobBoard.\n"
        f"Unsubscribe: {unsubscribe_url}\n"
        f"Manage preferences: {preferences_url}"
    )
    return EmailFooter(html=html, text=text)
